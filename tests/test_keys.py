"""
Tests for API key generation, parsing and verification
"""

import re

import pytest

from flagdeck.auth import keys
from flagdeck.auth.deps import KeyPolicy, authorize, verify
from flagdeck.errors import AuthCredentialError, AuthFormatError
from flagdeck.models import ApiKey
from flagdeck.services.api_keys import ApiKeyService

FULL_KEY = re.compile(r"^sk_[A-Za-z0-9_-]{16}_[A-Za-z0-9_-]{32}$")


@pytest.fixture(scope="module")
def hasher():
    return keys.BcryptHasher(rounds=4)


class TestGenerate:

    def test_full_key_shape(self, hasher):
        generated = keys.generate(hasher)
        assert FULL_KEY.match(generated.full_key)
        assert generated.full_key == f"sk_{generated.public_part}_{generated.private_secret}"

    def test_hash_verifies_only_the_secret(self, hasher):
        generated = keys.generate(hasher)
        assert generated.private_hash != generated.private_secret
        assert hasher.verify(generated.private_secret, generated.private_hash)
        assert not hasher.verify(generated.private_secret + "x", generated.private_hash)
        assert not hasher.verify(keys.generate(hasher).private_secret, generated.private_hash)

    def test_keys_are_distinct(self, hasher):
        assert keys.generate(hasher).full_key != keys.generate(hasher).full_key

    def test_random_string_never_contains_delimiter(self):
        for _ in range(50):
            value = keys.secure_random_string(32)
            assert len(value) == 32
            assert "_" not in value

    def test_malformed_hash_does_not_verify(self, hasher):
        assert hasher.verify("secret", "not-a-bcrypt-hash") is False


class TestParse:

    def test_round_trip(self, hasher):
        generated = keys.generate(hasher)
        parsed = keys.parse(generated.full_key)
        assert parsed.prefix == "sk"
        assert parsed.public_part == generated.public_part
        assert parsed.private_secret == generated.private_secret
        assert parsed.has_secret

    @pytest.mark.parametrize("prefix", ["Bearer ", "bearer ", "BEARER "])
    def test_bearer_prefix(self, hasher, prefix):
        generated = keys.generate(hasher)
        assert keys.parse(prefix + generated.full_key).public_part == generated.public_part

    @pytest.mark.parametrize("value", [
        "",
        "sk__",
        "sk__" + "a" * 32,
        "abc_def_ghi",
        "pk_" + "a" * 16 + "_" + "b" * 32,
        "sk_" + "a" * 16,
        "sk_" + "a" * 16 + "_" + "b" * 32 + "_extra",
        "sk_short_" + "b" * 32,
        "sk_" + "a" * 16 + "_b*c" + "b" * 29,
        "Token sk_" + "a" * 16 + "_" + "b" * 32,
        "sk_" + "a" * 16 + "\n_" + "b" * 32,
    ])
    def test_malformed(self, value):
        with pytest.raises(AuthFormatError):
            keys.parse(value)

    def test_public_form_only_when_allowed(self):
        value = keys.public_form("a" * 16)
        with pytest.raises(AuthFormatError):
            keys.parse(value)
        parsed = keys.parse(value, allow_public_form=True)
        assert parsed.prefix == "pk"
        assert parsed.public_part == "a" * 16
        assert not parsed.has_secret


class TestVerify:

    def test_fresh_key_verifies_repeatedly(self, db, workspace):
        parsed = keys.parse(workspace.secret_key)
        first = verify(db, parsed)
        second = verify(db, parsed)
        assert first.id == second.id
        assert first.tenant_id == workspace.tenant_id
        assert first.project_id == workspace.project_id

    def test_stored_public_part_matches_full_key(self, db, workspace):
        record, full_key = ApiKeyService.create_key(db, workspace.project_id, workspace.tenant_id)
        assert full_key.split("_")[1] == record.public_part
        assert record.private_hash not in full_key

    def test_unknown_public_part(self, db, hasher):
        parsed = keys.parse(keys.generate(hasher).full_key)
        with pytest.raises(AuthCredentialError):
            verify(db, parsed, hasher)

    def test_wrong_secret(self, db, workspace):
        prefix, public_part, _ = workspace.secret_key.split("_")
        parsed = keys.ParsedKey(prefix, public_part, "z" * 32)
        with pytest.raises(AuthCredentialError):
            verify(db, parsed)

    def test_public_form_requires_public_class(self, db, workspace):
        secret_public_part = workspace.secret_key.split("_")[1]
        with pytest.raises(AuthCredentialError):
            verify(db, keys.ParsedKey("pk", secret_public_part, None))

        public_part = workspace.public_key.split("_")[1]
        record = verify(db, keys.ParsedKey("pk", public_part, None))
        assert record.key_class == "public"


class TestAuthorize:

    @pytest.mark.parametrize("key_class,policy,allowed", [
        ("secret", KeyPolicy.SECRET_ONLY, True),
        ("public", KeyPolicy.SECRET_ONLY, False),
        ("secret", KeyPolicy.PUBLIC_ONLY, False),
        ("public", KeyPolicy.PUBLIC_ONLY, True),
        ("secret", KeyPolicy.ANY, True),
        ("public", KeyPolicy.ANY, True),
    ])
    def test_policy_matrix(self, key_class, policy, allowed):
        api_key = ApiKey(id=1, tenant_id=2, project_id=3, key_class=key_class)
        if allowed:
            ctx = authorize(api_key, policy, request_id="req-1")
            assert (ctx.tenant_id, ctx.project_id, ctx.api_key_id) == (2, 3, 1)
            assert ctx.request_id == "req-1"
        else:
            with pytest.raises(AuthCredentialError):
                authorize(api_key, policy)
