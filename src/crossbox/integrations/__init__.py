"""Adapters for remote storage services."""
