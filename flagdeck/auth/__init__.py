# flagdeck/auth/__init__.py
from .deps import (
    AuthContext,
    KeyPolicy,
    authenticate,
    authorize,
    require_admin,
    require_any_key,
    require_api_key,
    require_public_key,
    require_secret_key,
    verify,
)
from .keys import BcryptHasher, GeneratedKey, ParsedKey, PasswordHasher, generate, parse
from .tenant import require_tenant

__all__ = [
    "AuthContext",
    "KeyPolicy",
    "authenticate",
    "authorize",
    "require_admin",
    "require_any_key",
    "require_api_key",
    "require_public_key",
    "require_secret_key",
    "require_tenant",
    "verify",
    "BcryptHasher",
    "GeneratedKey",
    "ParsedKey",
    "PasswordHasher",
    "generate",
    "parse",
]
