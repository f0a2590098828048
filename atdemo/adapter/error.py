"""Infrastructure layer errors."""


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class ProviderError(AdapterError):
    """External provider answered and rejected the request."""

    pass


class ProviderUnavailableError(AdapterError):
    """External provider could not be reached (DNS, connect, timeout)."""

    pass


class IdentityResolutionError(ProviderError):
    """Failed to resolve identity (handle to DID or DID to document)."""

    pass


class CredentialFormatError(ProviderError):
    """Stored flow or session context does not match the expected shape."""

    pass
