"""Errors raised while loading a spec or generating a project."""


class BakeMCPError(Exception):
    """Base exception for all errors raised by bakemcp."""
    def __init__(self, message="An unspecified error occurred during generation."):
        self.message = message
        super().__init__(self.message)


class SpecNotFoundError(BakeMCPError):
    """Raised when the OpenAPI input path does not exist."""
    def __init__(self, message="OpenAPI input not found."):
        super().__init__(message)


class InvalidSpecError(BakeMCPError):
    """Raised when the OpenAPI input cannot be read, fetched or decoded."""
    def __init__(self, message="Invalid OpenAPI document."):
        super().__init__(message)


class UnsupportedSpecVersionError(BakeMCPError):
    """Raised for Swagger 2.0 (or unversioned) documents."""
    def __init__(self, message="OpenAPI 2.0 is not supported; use OpenAPI 3.x"):
        super().__init__(message)


class NoOperationsError(BakeMCPError):
    """Raised when the document yields no mappable operations."""
    def __init__(self, message="no mappable operations found in OpenAPI spec"):
        super().__init__(message)


class OutputDirectoryNotEmptyError(BakeMCPError):
    """Raised when writing into a non-empty directory without force."""
    def __init__(self, message="output directory is not empty; use --force to overwrite"):
        super().__init__(message)
