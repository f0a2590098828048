"""Per-request authorization from the browser session cookie."""

import logging

import logfire
from fastapi import Request, Response

from atdemo.domain.error import CredentialRestoreError
from atdemo.domain.model import AuthorizedSession
from atdemo.domain.service import AuthFlowCoordinator
from atdemo.interface.api.session import BrowserSessionBinder

logger = logging.getLogger(__name__)


class RequestAuthorizer:
    """Turn the session cookie into an authorized session, or None.

    Self-healing: whenever the cookie names a subject that cannot be
    restored (no stored credential, or the credential is corrupt or
    revoked), the cookie is cleared on ``response`` so the browser stops
    presenting it. Infrastructure failures are not absorbed.
    """

    def __init__(
        self, binder: BrowserSessionBinder, coordinator: AuthFlowCoordinator
    ) -> None:
        self.binder = binder
        self.coordinator = coordinator

    async def authorize(
        self, request: Request, response: Response
    ) -> AuthorizedSession | None:
        """Resolve the request's session.

        Args:
            request: Incoming request carrying the cookie
            response: Response that receives the cookie deletion, if any

        Returns:
            Authorized session, or None for anonymous requests

        Raises:
            InfrastructureError: If storage or the provider is unreachable
        """
        subject = self.binder.read_subject(request)
        if subject is None:
            return None

        try:
            credential = await self.coordinator.restore(subject)
        except CredentialRestoreError as e:
            logfire.info("Session binding cleared", did=subject, reason=e.reason)
            self.binder.unbind(response)
            return None

        if credential is None:
            logger.info(f"No stored session for {subject}; clearing cookie")
            self.binder.unbind(response)
            return None

        return AuthorizedSession(did=subject, credential=credential)
