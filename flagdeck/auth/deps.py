import hmac
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from ..config import ADMIN_KEYS
from ..db import get_db
from ..errors import ApiError, AuthCredentialError, AuthFormatError, MISSING_AUTH_HEADER, internal_error
from ..models.apikey import ApiKey, KEY_CLASS_PUBLIC, KEY_CLASS_SECRET
from ..models.tenant import Tenant
from ..services.prometheus_metrics import prometheus_metrics
from .keys import PUBLIC_PREFIX, ParsedKey, PasswordHasher, get_hasher, parse, strip_bearer

log = logging.getLogger("flagdeck")


class KeyPolicy(str, Enum):
    """Which key classes an endpoint accepts"""
    SECRET_ONLY = "secret_only"
    ANY = "any"
    PUBLIC_ONLY = "public_only"

    @property
    def allowed_classes(self) -> frozenset:
        if self is KeyPolicy.SECRET_ONLY:
            return frozenset({KEY_CLASS_SECRET})
        if self is KeyPolicy.PUBLIC_ONLY:
            return frozenset({KEY_CLASS_PUBLIC})
        return frozenset({KEY_CLASS_SECRET, KEY_CLASS_PUBLIC})

    @property
    def accepts_public(self) -> bool:
        return KEY_CLASS_PUBLIC in self.allowed_classes


@dataclass(frozen=True)
class AuthContext:
    tenant_id: int
    project_id: int
    api_key_id: int
    key_class: str
    request_id: Optional[str] = None


def verify(db: Session, parsed: ParsedKey, hasher: Optional[PasswordHasher] = None) -> ApiKey:
    """Look up a parsed key by its public part and check the secret.

    Every failure raises the same AuthCredentialError.
    """
    hasher = hasher or get_hasher()
    record = db.query(ApiKey).filter(ApiKey.public_part == parsed.public_part).one_or_none()

    if parsed.prefix == PUBLIC_PREFIX:
        # Secret-less form is only valid for keys stored as public
        if record is None or record.key_class != KEY_CLASS_PUBLIC:
            log.warning("AUTH: public key form rejected, public=%s", parsed.public_part)
            prometheus_metrics.record_auth_failure("invalid_key")
            raise AuthCredentialError()
        return _check_tenant(db, record)

    if record is None:
        hasher.verify(parsed.private_secret, getattr(hasher, "decoy_hash", ""))
        log.warning("AUTH: key not found, public=%s", parsed.public_part)
        prometheus_metrics.record_auth_failure("invalid_key")
        raise AuthCredentialError()

    if not hasher.verify(parsed.private_secret, record.private_hash):
        log.warning("AUTH: secret mismatch, key_id=%s", record.id)
        prometheus_metrics.record_auth_failure("invalid_key")
        raise AuthCredentialError()

    return _check_tenant(db, record)


def _check_tenant(db: Session, record: ApiKey) -> ApiKey:
    """Keys of a deactivated tenant stop working"""
    tenant = db.get(Tenant, record.tenant_id)
    if tenant is None or not tenant.is_active:
        log.warning("AUTH: tenant inactive, key_id=%s tenant=%s", record.id, record.tenant_id)
        prometheus_metrics.record_auth_failure("inactive_tenant")
        raise AuthCredentialError()
    return record


def authorize(api_key: ApiKey, policy: KeyPolicy, request_id: Optional[str] = None) -> AuthContext:
    """Check the key class against the endpoint policy and build the request context"""
    if api_key.key_class not in policy.allowed_classes:
        log.warning("AUTH: key class denied, key_id=%s class=%s policy=%s",
                    api_key.id, api_key.key_class, policy.value)
        prometheus_metrics.record_auth_failure("wrong_class")
        raise AuthCredentialError()

    return AuthContext(
        tenant_id=api_key.tenant_id,
        project_id=api_key.project_id,
        api_key_id=api_key.id,
        key_class=api_key.key_class,
        request_id=request_id,
    )


def authenticate(db: Session, header_value: Optional[str], policy: KeyPolicy,
                 request_id: Optional[str] = None, hasher: Optional[PasswordHasher] = None) -> AuthContext:
    """Full pipeline: header -> parsed key -> verified record -> context"""
    if header_value is None or not header_value.strip():
        prometheus_metrics.record_auth_failure("missing_header")
        raise AuthFormatError(MISSING_AUTH_HEADER)

    try:
        parsed = parse(header_value, allow_public_form=policy.accepts_public)
    except AuthFormatError:
        prometheus_metrics.record_auth_failure("invalid_format")
        raise

    api_key = verify(db, parsed, hasher)
    return authorize(api_key, policy, request_id)


def require_api_key(policy: KeyPolicy):
    """FastAPI dependency enforcing an API key of the given policy"""

    def dep(
        request: Request,
        authorization: Optional[str] = Header(None),
        db: Session = Depends(get_db),
    ) -> AuthContext:
        try:
            ctx = authenticate(db, authorization, policy, getattr(request.state, "request_id", None))
        except ApiError:
            raise
        except Exception as exc:
            raise internal_error(exc, "api_key_auth_error", request) from exc
        request.state.auth_context = ctx
        log.info("AUTH: key accepted, key_id=%s tenant=%s project=%s",
                 ctx.api_key_id, ctx.tenant_id, ctx.project_id)
        return ctx

    return dep


require_secret_key = require_api_key(KeyPolicy.SECRET_ONLY)
require_any_key = require_api_key(KeyPolicy.ANY)
require_public_key = require_api_key(KeyPolicy.PUBLIC_ONLY)


def is_admin_token(token: str) -> bool:
    """Constant-time membership check against the configured admin tokens"""
    presented = token.encode("utf-8")
    return any(hmac.compare_digest(presented, key.encode("utf-8")) for key in ADMIN_KEYS)


def require_admin(authorization: Optional[str] = Header(None)) -> str:
    """Management routes: bearer token must be one of ADMIN_KEYS"""
    if authorization is None or not authorization.strip():
        raise AuthFormatError(MISSING_AUTH_HEADER)
    token = strip_bearer(authorization)
    if not token or not is_admin_token(token):
        log.warning("AUTH: admin token rejected")
        raise AuthCredentialError()
    return token
