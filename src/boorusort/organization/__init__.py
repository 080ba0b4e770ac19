"""Planning and execution of file moves."""

from .errors import FilesystemError, OrganizationError
from .executor import OperationExecutor
from .models import MoveOperation
from .planner import DEFAULT_EXISTS_FOLDER, OrganizerPlanner

__all__ = [
    "OrganizerPlanner",
    "OperationExecutor",
    "MoveOperation",
    "OrganizationError",
    "FilesystemError",
    "DEFAULT_EXISTS_FOLDER",
]
