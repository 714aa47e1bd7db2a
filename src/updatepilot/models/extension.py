"""Extension related enums."""

from enum import Enum


class ExtensionKind(str, Enum):
    """What kind of local artifact an extension tracks."""

    PLUGIN = "plugin"
    THEME = "theme"


class UpdateMode(str, Enum):
    """Which upstream reference counts as the remote version."""

    TAGS = "tags"
    COMMITS = "commits"
    DISABLED = ""


class ExtensionState(str, Enum):
    """Outcome of the most recent update check, derived from stored fields."""

    DISABLED = "disabled"
    CHECKED_OK = "checked-ok"
    CHECKED_WARNING = "checked-warning"
    CHECKED_ERROR = "checked-error"
