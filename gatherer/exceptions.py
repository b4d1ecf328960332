class GathererError(Exception):
    """Base error for the source gatherer."""
    pass

class PathInvalid(GathererError):
    """Raised when a root path is missing, not a directory, or unreadable."""
    pass

class PathNotFound(PathInvalid):
    """Raised when the root path does not exist or is not a directory."""
    pass

class AccessDenied(PathInvalid):
    """Raised when the root path exists but cannot be listed."""
    pass

class FileReadFailure(GathererError):
    """Raised when a single matched file cannot be read or decoded."""
    pass

class SinkWriteFailure(GathererError):
    """Raised when the export destination (file, clipboard) cannot be written."""
    pass

class ExportCancelled(GathererError):
    """Raised when an export observes its cancel event between files."""
    pass
