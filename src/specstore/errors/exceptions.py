"""Custom exception classes for specstore."""


class SpecStoreError(Exception):
    """Base exception for specstore."""

    def __init__(self, code: str, message: str, details=None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)


class EncodingError(SpecStoreError):
    """An in-memory value cannot be represented in the storage encoding."""

    def __init__(self, message: str, details=None):
        super().__init__("ENCODING_ERROR", message, details)


class DecodingError(SpecStoreError):
    """A stored value cannot be parsed back into its in-memory shape."""

    def __init__(self, message: str, details=None):
        super().__init__("DECODING_ERROR", message, details)


class NotFoundError(SpecStoreError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
        )
