"""Custom exception classes for mongofs."""


class MongoFSException(Exception):
    """
    Base exception class for all mongofs errors.
    """
    pass


class InvalidArgumentError(MongoFSException):
    """
    Raised when a required argument is missing or empty.
    """
    pass


class InvalidLocatorError(MongoFSException):
    """
    Raised when a locator string is malformed or uses a foreign scheme.
    """
    pass


class ConfigurationError(MongoFSException):
    """
    Raised for invalid chunk sizes or unknown chunk size presets.
    """
    pass


class WriterStateError(MongoFSException):
    """
    Raised when a writer operation is not allowed in its current state.
    """
    pass


class StoreFailure(MongoFSException):
    """
    Raised when the store does not hold what a finalized file record promises.
    """
    pass


class StoredFileNotFoundError(StoreFailure):
    """
    Raised when no file record matches the requested id, locator or query.
    """
    pass


class CorruptFileError(StoreFailure):
    """
    Raised when a chunk is missing or has the wrong size.
    """
    pass


class ChecksumMismatchError(StoreFailure):
    """
    Raised when the stored bytes do not match the recorded checksum.
    """
    pass
