"""Session/Token Issuer: signed JWT access and refresh tokens."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from orgportal.core.errors import ExpiredToken, MalformedToken, RevokedToken
from orgportal.core.principal import Principal, PrincipalKind, principal_key
from orgportal.core.revocation import RevocationStore
from orgportal.core.roles import Designation
from orgportal.utils.redact import mask_token

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


@dataclass(frozen=True)
class TokenClaims:
    principal_id: str
    kind: PrincipalKind
    designation: Optional[Designation]
    org_id: Optional[str]
    token_type: str
    generation: int
    expires_at: datetime

    @property
    def key(self) -> str:
        return principal_key(self.kind, self.principal_id)


class TokenIssuer:
    def __init__(
        self,
        secret_key: str,
        revocations: RevocationStore,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=30),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        if not secret_key:
            raise ValueError("A token signing secret is required")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._revocations = revocations
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings, revocations: RevocationStore) -> "TokenIssuer":
        return cls(
            settings.SECRET_KEY,
            revocations,
            algorithm=settings.ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def issue(self, principal: Principal) -> TokenPair:
        generation = self._revocations.current_generation(principal.key)
        data = {
            "sub": principal.id,
            "kind": principal.kind.value,
            "designation": principal.designation.value if principal.designation else None,
            "org_id": principal.org_id,
            "gen": generation,
        }
        return TokenPair(
            access_token=self._encode(data, ACCESS, self.access_ttl),
            refresh_token=self._encode(data, REFRESH, self.refresh_ttl),
        )

    def validate(self, token: str, expected_type: str = ACCESS) -> TokenClaims:
        """Decode and check a token. Raises an ``AuthError`` subclass on any problem."""
        if not token:
            raise MalformedToken(reason="empty token")
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise ExpiredToken(reason=f"expired token {mask_token(token)}") from exc
        except JWTError as exc:
            raise MalformedToken(reason=f"undecodable token {mask_token(token)}: {exc}") from exc

        claims = _claims_from_payload(payload)
        if claims.token_type != expected_type:
            raise MalformedToken(reason=f"expected {expected_type} token, got {claims.token_type}")
        if not self._revocations.is_current(claims.key, claims.generation):
            raise RevokedToken(reason=f"stale generation for {claims.key}")
        return claims

    def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token."""
        claims = self.validate(refresh_token, expected_type=REFRESH)
        data = {
            "sub": claims.principal_id,
            "kind": claims.kind.value,
            "designation": claims.designation.value if claims.designation else None,
            "org_id": claims.org_id,
            "gen": claims.generation,
        }
        return self._encode(data, ACCESS, self.access_ttl)

    def revoke(self, key: str) -> None:
        """Invalidate every outstanding token of the principal identified by ``key``."""
        generation = self._revocations.revoke(key)
        logger.info("Revoked tokens for %s (generation %s)", key, generation)

    def _encode(self, data: dict, token_type: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = dict(data)
        to_encode.update({
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid.uuid4().hex,
        })
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)


def _claims_from_payload(payload: dict) -> TokenClaims:
    try:
        principal_id = payload["sub"]
        kind = PrincipalKind(payload["kind"])
        generation = int(payload["gen"])
        token_type = payload["type"]
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedToken(reason=f"missing or invalid claim: {exc}") from exc
    if not principal_id:
        raise MalformedToken(reason="empty subject")

    designation = None
    if payload.get("designation") is not None:
        designation = Designation.parse(payload["designation"])
        if designation is None:
            raise MalformedToken(reason="unknown designation claim")

    return TokenClaims(
        principal_id=principal_id,
        kind=kind,
        designation=designation,
        org_id=payload.get("org_id"),
        token_type=token_type,
        generation=generation,
        expires_at=expires_at,
    )
