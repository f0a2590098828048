"""Domain value objects.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules.
"""

import re

from pydantic import field_validator

from atdemo.domain.value.common import RootValueObject

# Handle syntax per AT Protocol: dot-separated DNS labels, TLD not numeric
HANDLE_PATTERN = re.compile(
    r"^([a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+"
    r"[a-zA-Z]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$"
)


class Handle(RootValueObject[str]):
    """AT Protocol handle (e.g. alice.bsky.social).

    A leading "@" is stripped and the handle is lowercased.
    """

    @field_validator("root")
    @classmethod
    def validate_handle_format(cls, v: str) -> str:
        """Validate handle syntax."""
        v = v.strip().lstrip("@").lower()
        if len(v) < 1 or len(v) > 253:
            raise ValueError("Handle must be 1-253 characters")
        if not HANDLE_PATTERN.match(v):
            raise ValueError(f"Invalid handle syntax: {v}")
        return v


class BlueskyDID(RootValueObject[str]):
    """AT Protocol Decentralized Identifier (DID).

    A globally unique, persistent identifier for users on the AT Protocol network.
    Format: did:plc:<identifier> or did:web:<domain>
    """

    @field_validator("root")
    @classmethod
    def validate_did_format(cls, v: str) -> str:
        """Validate DID starts with 'did:'."""
        if not v.startswith("did:"):
            raise ValueError("DID must start with 'did:'")
        if len(v) > 2048:
            raise ValueError("DID must be at most 2048 characters")
        return v

    @property
    def method(self) -> str:
        """DID method ("plc" or "web")."""
        return self.root.split(":", 2)[1]
