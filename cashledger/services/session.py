"""
Session Provider

Holds the active identity for a UI session. The ledger service never reads
this itself: callers fetch `current_identity()` and pass it in explicitly.
"""

from typing import Optional

from cashledger.errors import PreconditionError
from cashledger.models.transaction import Identity


class SessionProvider:
    """Single-slot session: at most one signed-in identity."""

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity

    def sign_in(self, key: str, display_name: str) -> Identity:
        """
        Start a session.

        The key is normalized to lower case so that the same person always
        lands on the same record partition.
        """
        self._identity = Identity(key=key.strip().lower(), display_name=display_name)
        return self._identity

    def sign_out(self) -> None:
        self._identity = None

    def rename(self, display_name: str) -> Identity:
        """Change the display name used for future attribution."""
        if self._identity is None:
            raise PreconditionError("No active identity to rename")
        self._identity = Identity(key=self._identity.key, display_name=display_name)
        return self._identity

    def current_identity(self) -> Optional[Identity]:
        return self._identity
