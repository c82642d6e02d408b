class W3StorageError(Exception):
    pass


class ValidationError(W3StorageError):
    """Raised when something does not pass a validation check."""


class ParseError(W3StorageError):
    pass
