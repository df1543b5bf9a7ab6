"""Domain errors and failure typing."""


class PermitHubError(Exception):
    """Base class for permit-hub failures."""

    error_code = "PERMIT_HUB_ERROR"


class ConfigError(PermitHubError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ValidationError(PermitHubError):
    """Raised when user-supplied input is incomplete or malformed."""

    error_code = "VALIDATION_ERROR"


class StorageError(PermitHubError):
    """Raised when the local store cannot be read or written."""

    error_code = "STORAGE_ERROR"


class FetchError(PermitHubError):
    """Raised for a single service call that cannot produce real records."""

    error_code = "FETCH_ERROR"


class MissingCredentialError(FetchError):
    error_code = "CREDENTIAL_MISSING"


class TransportError(FetchError):
    error_code = "TRANSPORT_ERROR"


class ProtocolError(FetchError):
    error_code = "PROTOCOL_ERROR"


class AuthError(ProtocolError):
    error_code = "AUTH_ERROR"


class ResponseParseError(FetchError):
    error_code = "PARSE_ERROR"
