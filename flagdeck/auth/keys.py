# flagdeck/auth/keys.py
"""
API key credential format.

A presented key looks like ``sk_{public}_{private}``: the public part is the
lookup handle stored in clear, the private part is only ever stored as a
bcrypt hash. Public-class keys may also be presented as ``pk_{public}``,
which carries no secret and is meant for client-side embedding.
"""
import re
import secrets
from typing import NamedTuple, Optional, Protocol

import bcrypt

from ..config import BCRYPT_ROUNDS
from ..errors import AuthFormatError

SECRET_PREFIX = "sk"
PUBLIC_PREFIX = "pk"
DELIMITER = "_"

PUBLIC_PART_LENGTH = 16
PRIVATE_PART_LENGTH = 32

# URL-safe alphabet minus the delimiter
_SEGMENT = re.compile(r"[A-Za-z0-9-]{16,62}")
_BEARER = "bearer "


class GeneratedKey(NamedTuple):
    public_part: str
    private_secret: str
    full_key: str
    private_hash: str


class ParsedKey(NamedTuple):
    prefix: str
    public_part: str
    private_secret: Optional[str]

    @property
    def has_secret(self) -> bool:
        return self.private_secret is not None


class PasswordHasher(Protocol):
    def hash(self, secret: str) -> str: ...

    def verify(self, secret: str, hashed: str) -> bool: ...


class BcryptHasher:
    """Salted bcrypt hashing with a tunable work factor"""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds
        # Checked against when no stored key matches the public part
        self.decoy_hash = self.hash(secrets.token_urlsafe(PRIVATE_PART_LENGTH))

    def hash(self, secret: str) -> str:
        return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, secret: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False


_default_hasher: Optional[BcryptHasher] = None


def get_hasher() -> BcryptHasher:
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = BcryptHasher()
    return _default_hasher


def secure_random_string(length: int) -> str:
    """Random URL-safe string of exactly ``length`` chars without the delimiter"""
    return secrets.token_urlsafe(length)[:length].replace(DELIMITER, "-")


def generate(hasher: Optional[PasswordHasher] = None) -> GeneratedKey:
    """Generate a fresh key; persisting it is up to the caller"""
    hasher = hasher or get_hasher()
    public_part = secure_random_string(PUBLIC_PART_LENGTH)
    private_secret = secure_random_string(PRIVATE_PART_LENGTH)
    full_key = DELIMITER.join((SECRET_PREFIX, public_part, private_secret))
    return GeneratedKey(public_part, private_secret, full_key, hasher.hash(private_secret))


def public_form(public_part: str) -> str:
    """Secret-less representation of a public-class key"""
    return f"{PUBLIC_PREFIX}{DELIMITER}{public_part}"


def strip_bearer(header_value: str) -> str:
    value = header_value.strip()
    if value[:len(_BEARER)].lower() == _BEARER:
        value = value[len(_BEARER):].strip()
    return value


def parse(header_value: str, allow_public_form: bool = False) -> ParsedKey:
    """Parse an Authorization header value into its key segments.

    Raises AuthFormatError for anything that is not a well-formed key.
    """
    parts = strip_bearer(header_value).split(DELIMITER)

    if len(parts) == 3 and parts[0] == SECRET_PREFIX:
        _, public_part, private_secret = parts
        if _SEGMENT.fullmatch(public_part) and _SEGMENT.fullmatch(private_secret):
            return ParsedKey(SECRET_PREFIX, public_part, private_secret)

    elif allow_public_form and len(parts) == 2 and parts[0] == PUBLIC_PREFIX:
        if _SEGMENT.fullmatch(parts[1]):
            return ParsedKey(PUBLIC_PREFIX, parts[1], None)

    raise AuthFormatError()
