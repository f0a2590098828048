"""OAuth authorization flow coordination."""

import secrets
from collections.abc import Mapping

import logfire
import pydantic

from atdemo.adapter.error import AdapterError, ProviderError, ProviderUnavailableError
from atdemo.domain.error import (
    AuthorizationInitiationError,
    CallbackValidationError,
    CredentialRestoreError,
    InfrastructureError,
    UnknownOrConsumedFlow,
    ValidationError,
)
from atdemo.domain.model import CallbackResult, FlowState, SessionCredential
from atdemo.domain.repository import AuthSessionStore, AuthStateStore
from atdemo.domain.service.identity import IdentityClient

from .base import Service


class AuthFlowCoordinator(Service):
    """Drive authorization attempts and restore sessions.

    Owns every read and write of the state and session stores. Protocol
    mechanics (resolution, PAR, token exchange, refresh) are delegated to
    the identity client.

    Flow lifecycle::

        NOT_STARTED -> PENDING (authorize) -> COMPLETED (complete_callback)
                                           \\-> FAILED (terminal, state consumed)
    """

    def __init__(
        self,
        identity_client: IdentityClient,
        state_store: AuthStateStore,
        session_store: AuthSessionStore,
        default_scope: str,
    ) -> None:
        """Initialize coordinator.

        Args:
            identity_client: Provider protocol client
            state_store: Store for in-flight flows
            session_store: Store for completed sessions
            default_scope: Scope requested when the caller gives none
        """
        self.identity_client = identity_client
        self.state_store = state_store
        self.session_store = session_store
        self.default_scope = default_scope

    async def authorize(self, handle: str | None, scope: str | None = None) -> str:
        """Start an authorization attempt.

        Args:
            handle: Handle or DID entered by the user
            scope: Requested scope (default scope if None)

        Returns:
            Provider URL to redirect the browser to

        Raises:
            ValidationError: If handle is empty
            AuthorizationInitiationError: If resolution or discovery fails
        """
        handle = (handle or "").strip()
        if not handle:
            raise ValidationError("Handle is required")

        state = secrets.token_urlsafe(32)

        with logfire.span("oauth.authorize", handle=handle):
            try:
                request = await self.identity_client.begin_authorization(
                    handle, state, scope or self.default_scope
                )
            except AdapterError as e:
                logfire.warn("OAuth authorize failed", handle=handle, error=str(e))
                raise AuthorizationInitiationError(str(e)) from e

            # Written only once the provider accepted the request
            await self.state_store.set(state, request.flow.model_dump_json())

        return request.url

    async def complete_callback(self, params: Mapping[str, str]) -> CallbackResult:
        """Consume the flow named by the callback and persist the new session.

        The flow record is deleted before the code exchange, so every outcome
        (success or failure) leaves no flow state behind and a replayed
        callback fails.

        Args:
            params: Callback query parameters, verbatim

        Returns:
            Subject DID and its credential

        Raises:
            UnknownOrConsumedFlow: If the state matches no stored flow
            CallbackValidationError: If the flow is expired or the provider
                rejects the callback or the code exchange
        """
        state = params.get("state")
        if not state:
            raise CallbackValidationError("Missing state parameter")

        with logfire.span("oauth.callback"):
            raw = await self.state_store.get(state)
            if raw is None:
                raise UnknownOrConsumedFlow(state)

            # First caller to delete owns the flow
            if not await self.state_store.delete(state):
                raise UnknownOrConsumedFlow(state)

            try:
                flow = FlowState.model_validate_json(raw)
            except pydantic.ValidationError as e:
                raise CallbackValidationError("Stored flow state is corrupt") from e

            if flow.is_expired():
                raise CallbackValidationError("Authorization flow has expired")

            try:
                credential = await self.identity_client.complete_authorization(
                    params, flow
                )
            except AdapterError as e:
                logfire.warn("OAuth callback rejected", error=str(e))
                raise CallbackValidationError(f"Token exchange failed: {e}") from e

            await self.session_store.set(credential.sub, credential.model_dump_json())

            logfire.info("OAuth session stored", did=credential.sub)

        return CallbackResult(subject=credential.sub, credential=credential)

    async def restore(self, subject: str) -> SessionCredential | None:
        """Load (and refresh if needed) the credential for a subject.

        Args:
            subject: Subject DID from the browser session

        Returns:
            Credential, or None if no session is stored for the subject

        Raises:
            CredentialRestoreError: If the stored credential is corrupt or
                the provider rejects it (the record is deleted)
            InfrastructureError: If storage or the provider is unreachable
        """
        raw = await self.session_store.get(subject)
        if raw is None:
            return None

        try:
            credential = SessionCredential.model_validate_json(raw)
        except pydantic.ValidationError as e:
            await self.session_store.delete(subject)
            raise CredentialRestoreError(subject, "stored credential is corrupt") from e

        if credential.sub != subject:
            await self.session_store.delete(subject)
            raise CredentialRestoreError(subject, "stored credential subject mismatch")

        try:
            refreshed = await self.identity_client.refresh(credential)
        except ProviderUnavailableError as e:
            raise InfrastructureError(f"Identity provider unreachable: {e}") from e
        except ProviderError as e:
            current = await self.session_store.get(subject)
            if current is not None and current != raw:
                # A concurrent request already rotated the tokens; its result wins
                return SessionCredential.model_validate_json(current)

            await self.session_store.delete(subject)
            logfire.warn("OAuth session invalidated", did=subject, error=str(e))
            raise CredentialRestoreError(subject, str(e)) from e

        if refreshed is not credential:
            await self.session_store.set(subject, refreshed.model_dump_json())
            logfire.info("OAuth session refreshed", did=subject)

        return refreshed

    async def revoke(self, subject: str) -> None:
        """Forget the stored credential for a subject."""
        if await self.session_store.delete(subject):
            logfire.info("OAuth session deleted", did=subject)
