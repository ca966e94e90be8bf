"""Credentials attached to upstream fetches.

Values are passed through exactly as the caller supplied them and are never
written to logs.
"""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass
class AuthSession:
    """Raw cookie header and bearer token for a single fetch."""

    bearer_token: str | None = dataclasses.field(default=None, repr=False)
    cookie_header: str | None = dataclasses.field(default=None, repr=False)

    @classmethod
    def from_request(
        cls,
        cookies: str | None = None,
        auth_token: str | None = None,
    ) -> AuthSession | None:
        """Build a session from a request's raw cookie header and bearer token.

        The cookie header is forwarded verbatim.  Returns ``None`` when neither
        credential is set.
        """
        if not cookies and not auth_token:
            return None
        return cls(bearer_token=auth_token or None, cookie_header=cookies or None)

    def apply_headers(self, headers: dict[str, str]) -> None:
        if self.bearer_token:
            headers.setdefault("Authorization", f"Bearer {self.bearer_token}")
        if self.cookie_header:
            headers.setdefault("Cookie", self.cookie_header)
