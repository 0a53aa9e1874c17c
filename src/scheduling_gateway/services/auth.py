from __future__ import annotations

import hmac
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from ..domain import RateLimited, Unauthorized
from .context import ServiceContext
from .ratelimit import RateDecision

_BEARER = re.compile(r"^Bearer\s+", re.IGNORECASE)


def extract_credential(headers: Mapping[str, str]) -> str:
    """Read the shared secret from ``x-api-key`` or a bearer ``Authorization`` header."""

    api_key = headers.get("x-api-key")
    if api_key:
        return api_key.strip()
    authorization = headers.get("authorization") or ""
    return _BEARER.sub("", authorization).strip()


def secrets_match(expected: str, presented: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


@dataclass(slots=True)
class AuthService:
    context: ServiceContext

    def authorize(self, credential: str) -> None:
        """Raise ``Unauthorized`` unless the credential matches the configured secret.

        With no secret configured every caller is accepted.
        """

        expected = self.context.settings.gateway.api_key
        if not expected:
            return
        if not secrets_match(expected, credential or ""):
            raise Unauthorized()

    def throttle(self, credential: str, address: Optional[str]) -> RateDecision:
        decision = self.context.rate_limiter.check(f"{credential or 'anon'}:{address or 'local'}")
        if not decision.allowed:
            raise RateLimited(details={"reset_in": round(decision.reset_in or 0.0, 3)})
        return decision
