"""Exception taxonomy shared by the store, the server and the client."""


class SPFEException(Exception):
    """
    Base exception class for all SPFE errors.
    """
    pass


class InvalidInputError(SPFEException):
    """
    Raised when a request is missing its fileId or chunk payload, or carries
    malformed values. Never retried.
    """
    pass


class StoreUnavailableError(SPFEException):
    """
    Raised when neither the primary nor the fallback backend could serve a
    store operation.
    """
    pass


class BackendError(SPFEException):
    """
    Raised by a single storage backend when an operation fails.
    """
    pass


class PartialParseError(SPFEException):
    """
    Raised when a stored partial record cannot be decoded.
    """
    pass


class TransportError(SPFEException):
    """
    Raised by the client when chunk bytes could not be sent or a response
    could not be understood.
    """
    pass


class InvalidChunkStateError(SPFEException):
    """
    Raised when a chunk transition is requested from a state that does not
    allow it (e.g. retrying a chunk that is not in error).
    """
    pass
