"""Exception types raised by taskview.

Derivation functions never raise these for bad data; they are reserved
for the storage, configuration and session layers.
"""


class TaskviewError(Exception):
    """Base class for all taskview errors."""


class SnapshotError(TaskviewError):
    """A snapshot file could not be read or contains a malformed record."""


class ConfigError(TaskviewError):
    """An environment setting has an invalid value."""


class SessionError(TaskviewError):
    """A session lifecycle method was called in the wrong state."""
