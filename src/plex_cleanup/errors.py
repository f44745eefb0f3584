class ConfigurationError(ValueError):
    """Invalid retention settings for a library or the config file."""


class LibraryNotFoundError(LookupError):
    """Configured library does not exist on the media server."""


class DeletionError(OSError):
    """A file could not be removed from disk."""


class FetchError(RuntimeError):
    """The media server returned an error status or an unusable payload."""
