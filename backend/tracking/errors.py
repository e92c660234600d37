"""
Failure kinds of the activity tracking core.

None of these reach UI callers: the recorder, dwell tracker and log catch
them at their public seams, log a warning and degrade (return None, False
or an empty log). They exist so the storage layer and parsers can say
precisely what went wrong.
"""


class TrackingError(Exception):
    """Base class for every tracking failure."""


class StorageError(TrackingError):
    """The key-value store could not serve a request."""


class StorageReadError(StorageError):
    """Reading a key failed, or its stored value could not be decoded."""


class StorageWriteError(StorageError):
    """Persisting a key failed (I/O, quota, serialization)."""


class StorageTimeout(StorageError):
    """A store call did not complete within the configured timeout."""


class MalformedEventError(TrackingError):
    """A stored log entry does not have the ActivityEvent shape."""


class IdentityLookupError(TrackingError):
    """The signed-in user record is missing or unreadable."""


class DurationParseGap(TrackingError):
    """A ScreenTime event carries neither rawTimeSeconds nor a parseable duration."""
