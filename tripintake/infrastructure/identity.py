"""JWT Identity Verifier — turns bearer tokens into stable caller identities.

Invariants:
    - A verified identity always has a non-empty uid (claim `uid`, else `sub`)
    - Expired tokens fail with TOKEN_EXPIRED, every other defect with INVALID_TOKEN
    - Admin status comes only from the configured boolean claim being exactly True

Design Decisions:
    - PyJWT with a shared secret: identity verification is a thin collaborator,
      the token issuer is out of scope (ADR: verify, never mint, in production code)
"""

import logging

import jwt

from tripintake.core.domain_types import Identity
from tripintake.core.errors import AuthenticationError
from tripintake.core.repository_protocols import VerifiedIdentity

logger = logging.getLogger(__name__)


class JwtIdentityVerifier:
    """IdentityVerifier backed by HMAC/RSA-signed JWTs."""

    def __init__(self, secret: str, algorithm: str = "HS256", admin_claim: str = "admin"):
        self.secret = secret
        self.algorithm = algorithm
        self.admin_claim = admin_claim

    def verify(self, token: str) -> VerifiedIdentity:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired", "TOKEN_EXPIRED")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise AuthenticationError("Invalid token", "INVALID_TOKEN")

        uid = claims.get("uid") or claims.get("sub")
        if not isinstance(uid, str) or not uid:
            raise AuthenticationError("Token carries no identity", "INVALID_TOKEN")
        return VerifiedIdentity(
            uid=Identity(uid),
            is_admin=claims.get(self.admin_claim) is True,
        )

    def issue(self, uid: str, **claims) -> str:
        """Mint a token for local development and tests."""
        return jwt.encode({"uid": uid, **claims}, self.secret, algorithm=self.algorithm)
