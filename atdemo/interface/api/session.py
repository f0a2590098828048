"""Browser session cookie binding."""

import logging
from datetime import timedelta

from fastapi import Request, Response

from atdemo.config import Settings
from atdemo.util.error import SealError
from atdemo.util.seal import CookieSealer

logger = logging.getLogger(__name__)


class BrowserSessionBinder:
    """Map the sealed ``sid`` cookie to a subject DID.

    The cookie is the only browser-side state: an encrypted payload
    ``{"did": ...}`` the browser can neither read nor forge.
    """

    def __init__(self, sealer: CookieSealer, settings: Settings) -> None:
        """Initialize binder.

        Args:
            sealer: Cookie sealing primitive
            settings: Application settings (cookie name, lifetime, security)
        """
        self.sealer = sealer
        self.cookie_name = settings.session.cookie_name
        self.max_age = int(timedelta(days=settings.session.ttl_days).total_seconds())
        self.secure = settings.is_production

    def read_subject(self, request: Request) -> str | None:
        """Return the bound subject, or None for an anonymous browser.

        Missing, malformed, forged and expired cookies all read as anonymous.
        """
        sealed = request.cookies.get(self.cookie_name)
        if not sealed:
            return None

        try:
            payload = self.sealer.unseal(sealed)
        except SealError as e:
            logger.debug(f"Ignoring unreadable session cookie: {e}")
            return None

        did = payload.get("did")
        if not isinstance(did, str) or not did:
            logger.debug("Ignoring session cookie without subject")
            return None

        return did

    def bind(self, response: Response, subject: str) -> None:
        """Set the sealed cookie for subject on response."""
        response.set_cookie(
            key=self.cookie_name,
            value=self.sealer.seal({"did": subject}),
            max_age=self.max_age,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

    def unbind(self, response: Response) -> None:
        """Clear the cookie; harmless when none was set."""
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
