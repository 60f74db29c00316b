from crossbox.controllers.browser import BrowserController, SelectionState
from crossbox.controllers.file_detail import FileDetailController

__all__ = ["BrowserController", "FileDetailController", "SelectionState"]
