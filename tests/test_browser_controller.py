# Tests for controllers/browser.py
# Created: 2026-10-08

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from crossbox.controllers.browser import ROOT_PATH, BrowserController, SelectionState
from crossbox.controllers.file_detail import FileDetailController
from crossbox.errors import AuthenticationError, FetchError, UploadError
from crossbox.models import RemoteFile, RemoteFolder, SelectedFile

ROOT_CONTENTS = [RemoteFolder("folder", "folder"), RemoteFile("file.txt", "file.txt")]
FOLDER_CONTENTS = [
    RemoteFile("folder/file1.txt", "file1.txt"),
    RemoteFile("folder/file2.txt", "file2.txt"),
    RemoteFile("folder/file3.txt", "file3.txt"),
]

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeStorage:
    """Storage client serving fixed listings, optionally failing a step."""

    def __init__(self, listings=None, auth_error=None, fetch_error=None, upload_error=None):
        self.listings = listings or {}
        self.auth_error = auth_error
        self.fetch_error = fetch_error
        self.upload_error = upload_error
        self.auth_calls = 0
        self.fetch_calls: list[str] = []
        self.uploads: list[tuple[SelectedFile, str]] = []

    async def ensure_authenticated(self):
        self.auth_calls += 1
        if self.auth_error:
            raise self.auth_error

    async def get_folder_content(self, path):
        self.fetch_calls.append(path)
        if self.fetch_error:
            raise self.fetch_error
        return list(self.listings[path])

    async def upload_file(self, file, folder_path="/"):
        if self.upload_error:
            raise self.upload_error
        self.uploads.append((file, folder_path))


class RecordingReporter:
    def __init__(self):
        self.reported: list[BaseException] = []

    def report(self, error):
        self.reported.append(error)


def make_controller(storage=None, selector=None, reporter=None, navigator=None):
    return BrowserController(
        storage=storage or FakeStorage({ROOT_PATH: ROOT_CONTENTS, "folder": FOLDER_CONTENTS}),
        selector=selector or AsyncMock(),
        reporter=reporter or RecordingReporter(),
        navigator=navigator or MagicMock(),
    )


# ---------------------------------------------------------------------------
# select_folder
# ---------------------------------------------------------------------------


class TestSelectFolder:
    def test_defaults_to_root_with_empty_contents(self):
        controller = make_controller()
        assert controller.current_folder_path == "/"
        assert controller.folder_contents == ()
        assert controller.initial_load is None

    async def test_root_listing_has_expected_items(self):
        controller = make_controller()

        state = await controller.select_folder("/")

        assert state is SelectionState.UPDATED
        assert len(controller.folder_contents) == 2
        folders = [c for c in controller.folder_contents if c.is_directory]
        assert len(folders) == 1
        assert folders[0].name == "folder"
        assert folders[0].full_path == "folder"
        files = [c for c in controller.folder_contents if not c.is_directory]
        assert [f.name for f in files] == ["file.txt"]

    async def test_sub_folder_replaces_listing(self):
        controller = make_controller()

        await controller.select_folder("/")
        await controller.select_folder("folder")

        assert controller.current_folder_path == "folder"
        assert len(controller.folder_contents) == 3
        assert {c.full_path for c in controller.folder_contents} == {
            "folder/file1.txt",
            "folder/file2.txt",
            "folder/file3.txt",
        }

    async def test_contents_match_fetched_sequence_in_order(self):
        storage = FakeStorage({"/docs": FOLDER_CONTENTS})
        controller = make_controller(storage=storage)

        await controller.select_folder("/docs")

        assert list(controller.folder_contents) == FOLDER_CONTENTS
        assert controller.current_folder_path == "/docs"
        assert storage.auth_calls == 1
        assert storage.fetch_calls == ["/docs"]

    async def test_empty_folder(self):
        controller = make_controller(storage=FakeStorage({"/empty": []}))

        state = await controller.select_folder("/empty")

        assert state is SelectionState.UPDATED
        assert controller.folder_contents == ()
        assert controller.current_folder_path == "/empty"

    async def test_on_complete_fires_after_success(self):
        controller = make_controller()
        seen = []

        await controller.select_folder("/", lambda: seen.append(len(controller.folder_contents)))

        assert seen == [2]

    async def test_async_on_complete_is_awaited(self):
        controller = make_controller()
        on_complete = AsyncMock()

        await controller.select_folder("/", on_complete)

        on_complete.assert_awaited_once_with()

    async def test_refresh_reloads_current_folder(self):
        storage = FakeStorage({ROOT_PATH: ROOT_CONTENTS, "folder": FOLDER_CONTENTS})
        controller = make_controller(storage=storage)
        await controller.select_folder("folder")

        state = await controller.refresh()

        assert state is SelectionState.UPDATED
        assert storage.fetch_calls == ["folder", "folder"]


class TestSelectFolderFailures:
    async def test_authentication_error_is_reported_verbatim(self):
        error = AuthenticationError("token expired")
        storage = FakeStorage({ROOT_PATH: ROOT_CONTENTS}, auth_error=error)
        reporter = RecordingReporter()
        controller = make_controller(storage=storage, reporter=reporter)

        state = await controller.select_folder("/")

        assert state is SelectionState.FAILED
        assert reporter.reported == [error]
        assert reporter.reported[0] is error
        assert storage.fetch_calls == []

    async def test_authentication_error_leaves_state_unchanged(self):
        storage = FakeStorage({ROOT_PATH: ROOT_CONTENTS, "folder": FOLDER_CONTENTS})
        reporter = RecordingReporter()
        controller = make_controller(storage=storage, reporter=reporter)
        await controller.select_folder("/")

        storage.auth_error = AuthenticationError("revoked")
        await controller.select_folder("folder")

        assert controller.current_folder_path == "/"
        assert list(controller.folder_contents) == ROOT_CONTENTS
        assert len(reporter.reported) == 1

    async def test_fetch_error_is_reported_once_and_state_unchanged(self):
        storage = FakeStorage({ROOT_PATH: ROOT_CONTENTS})
        reporter = RecordingReporter()
        controller = make_controller(storage=storage, reporter=reporter)
        await controller.select_folder("/")

        error = FetchError("Error", path="missing")
        storage.fetch_error = error
        state = await controller.select_folder("missing")

        assert state is SelectionState.FAILED
        assert reporter.reported == [error]
        assert controller.current_folder_path == "/"
        assert list(controller.folder_contents) == ROOT_CONTENTS

    async def test_on_complete_fires_on_failure(self):
        reporter = RecordingReporter()
        storage = FakeStorage(fetch_error=FetchError("Error"))
        controller = make_controller(storage=storage, reporter=reporter)
        seen = []

        await controller.select_folder("", lambda: seen.append(list(reporter.reported)))

        assert len(seen) == 1
        assert len(seen[0]) == 1

    async def test_unexpected_storage_exception_is_reported(self):
        error = ConnectionResetError("peer went away")
        reporter = RecordingReporter()
        controller = make_controller(
            storage=FakeStorage(fetch_error=error), reporter=reporter
        )

        state = await controller.select_folder("/")

        assert state is SelectionState.FAILED
        assert reporter.reported == [error]

    async def test_failing_reporter_does_not_break_selection(self):
        reporter = MagicMock()
        reporter.report.side_effect = RuntimeError("reporter down")
        controller = make_controller(
            storage=FakeStorage(auth_error=AuthenticationError("nope")), reporter=reporter
        )
        on_complete = MagicMock()

        state = await controller.select_folder("/", on_complete)

        assert state is SelectionState.FAILED
        reporter.report.assert_called_once()
        on_complete.assert_called_once_with()

    async def test_async_reporter_is_not_awaited(self):
        started = asyncio.Event()
        release = asyncio.Event()

        class SlowReporter:
            async def report(self, error):
                started.set()
                await release.wait()
                raise RuntimeError("reporter failed late")

        controller = make_controller(
            storage=FakeStorage(fetch_error=FetchError("Error")), reporter=SlowReporter()
        )

        state = await controller.select_folder("/")

        assert state is SelectionState.FAILED
        await started.wait()
        release.set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Change notification
# ---------------------------------------------------------------------------


class TestNotifications:
    async def test_both_properties_notified_after_update(self):
        controller = make_controller()
        seen = []

        def on_changed(sender, name):
            assert sender is controller
            seen.append((name, sender.current_folder_path, len(sender.folder_contents)))

        controller.subscribe(on_changed)
        await controller.select_folder("/")

        assert seen == [("current_folder_path", "/", 2), ("folder_contents", "/", 2)]

    async def test_notified_on_every_successful_selection(self):
        controller = make_controller()
        names = []
        controller.subscribe(lambda sender, name: names.append(name))

        await controller.select_folder("/")
        await controller.select_folder("folder")

        assert names.count("folder_contents") == 2
        assert names.count("current_folder_path") == 2

    async def test_no_notification_on_failure(self):
        storage = FakeStorage(fetch_error=FetchError("Error"))
        controller = make_controller(storage=storage)
        names = []
        controller.subscribe(lambda sender, name: names.append(name))

        await controller.select_folder("/")

        assert names == []

    async def test_unsubscribe_stops_notifications(self):
        controller = make_controller()
        names = []

        def callback(sender, name):
            names.append(name)

        controller.subscribe(callback)
        assert controller.unsubscribe(callback) is True
        await controller.select_folder("/")

        assert names == []
        assert controller.unsubscribe(callback) is False


# ---------------------------------------------------------------------------
# Initial path and overlapping selections
# ---------------------------------------------------------------------------


class TestInitialPathAndConcurrency:
    async def test_initial_path_loads_on_creation(self):
        storage = FakeStorage({"folder": FOLDER_CONTENTS})
        controller = BrowserController(
            storage, AsyncMock(), RecordingReporter(), MagicMock(), initial_path="folder"
        )

        assert controller.current_folder_path == "folder"
        assert controller.initial_load is not None
        state = await controller.initial_load

        assert state is SelectionState.UPDATED
        assert len(controller.folder_contents) == 3

    def test_initial_path_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            BrowserController(
                FakeStorage(), AsyncMock(), RecordingReporter(), MagicMock(), initial_path="/"
            )

    async def test_last_completion_wins(self):
        gates = {"/a": asyncio.Event(), "/b": asyncio.Event()}

        class GatedStorage(FakeStorage):
            async def get_folder_content(self, path):
                await gates[path].wait()
                return [RemoteFile(f"{path}/x", "x")]

        controller = make_controller(storage=GatedStorage())
        first = asyncio.create_task(controller.select_folder("/a"))
        second = asyncio.create_task(controller.select_folder("/b"))
        await asyncio.sleep(0)

        gates["/b"].set()
        assert await second is SelectionState.UPDATED
        assert controller.current_folder_path == "/b"

        gates["/a"].set()
        assert await first is SelectionState.UPDATED
        assert controller.current_folder_path == "/a"
        assert [c.full_path for c in controller.folder_contents] == ["/a/x"]


# ---------------------------------------------------------------------------
# select_item
# ---------------------------------------------------------------------------


class TestSelectItem:
    def test_folder_dispatches_browser_with_relative_name(self):
        navigator = MagicMock()
        controller = make_controller(navigator=navigator)

        controller.select_item(RemoteFolder("/photos/2024", "2024"))

        navigator.dispatch.assert_called_once_with(BrowserController, {"folder": "2024"})

    def test_file_dispatches_detail_with_full_path(self):
        navigator = MagicMock()
        controller = make_controller(navigator=navigator)

        controller.select_item(RemoteFile("/photos/cat.jpg", "cat.jpg"))

        navigator.dispatch.assert_called_once_with(
            FileDetailController, {"path": "/photos/cat.jpg"}
        )

    async def test_select_item_does_not_touch_state(self):
        controller = make_controller()
        await controller.select_folder("/")
        names = []
        controller.subscribe(lambda sender, name: names.append(name))

        controller.select_item(ROOT_CONTENTS[0])

        assert controller.current_folder_path == "/"
        assert list(controller.folder_contents) == ROOT_CONTENTS
        assert names == []

    def test_failing_navigator_is_isolated(self):
        navigator = MagicMock()
        navigator.dispatch.side_effect = LookupError("no screen")
        controller = make_controller(navigator=navigator)

        controller.select_item(RemoteFile("/a.txt", "a.txt"))

        navigator.dispatch.assert_called_once()


# ---------------------------------------------------------------------------
# upload_file
# ---------------------------------------------------------------------------


class TestUploadFile:
    async def test_cancelled_selection_is_silent_no_op(self):
        storage = FakeStorage()
        reporter = RecordingReporter()
        selector = AsyncMock()
        selector.pick_file.return_value = None
        controller = make_controller(storage=storage, selector=selector, reporter=reporter)

        uploaded = await controller.upload_file()

        assert uploaded is False
        assert storage.uploads == []
        assert reporter.reported == []

    async def test_selected_file_is_uploaded(self):
        storage = FakeStorage()
        selector = AsyncMock()
        selector.pick_file.return_value = SelectedFile("file name", b"hello world!")
        controller = make_controller(storage=storage, selector=selector)

        uploaded = await controller.upload_file()

        assert uploaded is True
        assert len(storage.uploads) == 1
        file, folder = storage.uploads[0]
        assert file.file_name == "file name"
        assert file.content == b"hello world!"
        assert folder == "/"

    async def test_upload_targets_current_folder(self):
        storage = AsyncMock()
        storage.get_folder_content.return_value = FOLDER_CONTENTS
        selector = AsyncMock()
        selected = SelectedFile("notes.txt", b"x")
        selector.pick_file.return_value = selected
        controller = make_controller(storage=storage, selector=selector)
        await controller.select_folder("folder")

        await controller.upload_file()

        storage.upload_file.assert_awaited_once_with(selected, "folder")

    async def test_upload_error_is_reported(self):
        error = UploadError("quota exceeded", "file name")
        storage = FakeStorage(upload_error=error)
        reporter = RecordingReporter()
        selector = AsyncMock()
        selector.pick_file.return_value = SelectedFile("file name", b"hello world!")
        controller = make_controller(storage=storage, selector=selector, reporter=reporter)

        uploaded = await controller.upload_file()

        assert uploaded is False
        assert reporter.reported == [error]

    async def test_upload_does_not_mutate_state(self):
        controller = make_controller(
            selector=AsyncMock(pick_file=AsyncMock(return_value=SelectedFile("a", b"a")))
        )
        await controller.select_folder("/")
        names = []
        controller.subscribe(lambda sender, name: names.append(name))

        await controller.upload_file()

        assert names == []
        assert list(controller.folder_contents) == ROOT_CONTENTS

    async def test_selector_failure_is_reported(self):
        error = FileNotFoundError("gone")
        reporter = RecordingReporter()
        selector = AsyncMock()
        selector.pick_file.side_effect = error
        controller = make_controller(selector=selector, reporter=reporter)

        assert await controller.upload_file() is False
        assert reporter.reported == [error]
