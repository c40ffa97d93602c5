"""Identity layer: resolve an opaque bearer token to a stable account id.

Tokens are JWTs issued by the identity provider; the account id is the "sub"
claim. Any verification failure (bad signature, expired, malformed, missing
sub) yields None; callers cannot tell transient from permanent failures.
"""

import logging

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"


class JwtIdentityVerifier:
    def __init__(self, secret: str, algorithm: str = DEFAULT_ALGORITHM) -> None:
        if not secret:
            raise ValueError("JWT secret must be non-empty")
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, token: str) -> str | None:
        token = (token or "").strip()
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            logger.warning("Token verification failed: %s", e)
            return None
        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub.strip():
            logger.warning("Token verification failed: no subject")
            return None
        return sub.strip()
