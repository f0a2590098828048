"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """A required input is missing or malformed (user-correctable)."""

    pass


class AuthorizationInitiationError(DomainError):
    """Handle resolution or endpoint discovery failed; the user may retry."""

    pass


class CallbackValidationError(DomainError):
    """OAuth callback rejected: forged, expired or consumed flow, or failed exchange.

    Terminal for the flow attempt; the user must start again from login.
    """

    pass


class UnknownOrConsumedFlow(CallbackValidationError):
    """The flow identifier matches no stored flow (never issued or already used)."""

    def __init__(self, state: str):
        self.state = state
        super().__init__("Unknown or already consumed authorization flow")


class CredentialRestoreError(DomainError):
    """A stored credential is corrupt or was rejected by the provider."""

    def __init__(self, subject: str, reason: str):
        self.subject = subject
        self.reason = reason
        super().__init__(f"Could not restore session for {subject}: {reason}")


class InfrastructureError(DomainError):
    """Storage or network unreachable. Never treated as "not logged in"."""

    pass
