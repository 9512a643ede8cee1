class BackendError(Exception):
    """Base class for failures talking to the document/story backend."""


class BackendUnavailableError(BackendError):
    """Network failure, timeout or 5xx from the backend."""


class DocumentNotFoundError(BackendError):
    """The requested resource does not exist (404)."""


class ResponseShapeError(BackendError):
    """The backend answered with JSON we do not recognise."""
