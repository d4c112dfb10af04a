from __future__ import annotations

import random
import uuid
from datetime import UTC, datetime, timedelta

import pytest

from identity_core.auth.credentials import set_password
from identity_core.identity.models import Domain, Identity
from identity_core.identity.policy import AccessPolicy
from identity_core.identity.record import admin, full_name, is_admin, is_superuser, public_view
from tests.conftest import FAST_HASH

PUBLIC_KEYS = {
    "first_name",
    "last_name",
    "full_name",
    "email",
    "last_login_at",
    "last_request_at",
    "superuser",
    "admin",
}


def _policy(*superusers: str) -> AccessPolicy:
    return AccessPolicy(session_timeout=timedelta(minutes=30), superuser_emails=frozenset(superusers))


def test_email_is_normalized_and_validated() -> None:
    assert Identity(email="  Henry.King@Example.COM ").email == "henry.king@example.com"
    with pytest.raises(ValueError):
        Identity(email="not-an-email")


@pytest.mark.parametrize("role", [0, -1, True])
def test_role_must_be_positive_integer(role) -> None:
    with pytest.raises(ValueError):
        Identity(email="a@b.io", role=role)


def test_salt_never_without_hash() -> None:
    with pytest.raises(ValueError):
        Identity(email="a@b.io", salt="abc")
    with pytest.raises(ValueError):
        Identity(email="a@b.io", hashed_password="abc")


@pytest.mark.parametrize(
    ("first", "last", "expected"),
    [
        ("Henry", "King", "Henry King"),
        ("Henry", None, "Henry"),
        (None, "King", "King"),
        (None, None, "henry@example.com"),
        ("", "", "henry@example.com"),
    ],
)
def test_full_name(first, last, expected) -> None:
    identity = Identity(email="henry@example.com", first_name=first, last_name=last)
    assert full_name(identity) == expected


def test_is_superuser_uses_allow_list() -> None:
    identity = Identity(email="Root@Example.com")
    assert is_superuser(identity, _policy("root@example.com")) is True
    assert is_superuser(identity, _policy("other@example.com")) is False
    assert is_superuser(identity, _policy()) is False


def test_is_superuser_match_is_case_sensitive_on_allow_list() -> None:
    identity = Identity(email="root@example.com")
    assert is_superuser(identity, _policy("ROOT@example.com")) is False


def test_is_admin_by_role() -> None:
    assert is_admin(Identity(email="a@b.io", role=3), _policy()) is True
    assert is_admin(Identity(email="a@b.io", role=5), _policy()) is True
    assert is_admin(Identity(email="a@b.io", role=6), _policy()) is False
    assert is_admin(Identity(email="a@b.io"), _policy()) is False


def test_is_admin_for_superuser_regardless_of_role_or_domain() -> None:
    identity = Identity(email="root@example.com", role=50)
    foreign = Domain(id=uuid.uuid4(), owner_id=uuid.uuid4())
    assert is_admin(identity, _policy("root@example.com")) is True
    assert is_admin(identity, _policy("root@example.com"), foreign) is True


def test_is_admin_with_domain_context_checks_ownership() -> None:
    identity = Identity(email="owner@example.com", role=50)
    owned = Domain(id=uuid.uuid4(), owner_id=identity.id)
    foreign = Domain(id=uuid.uuid4(), owner_id=uuid.uuid4())
    assert is_admin(identity, _policy(), owned) is True
    assert is_admin(identity, _policy(), foreign) is False


def test_domain_context_overrides_role_but_admin_property_does_not() -> None:
    # A role-admin is not admin of a domain owned by someone else...
    role_admin = Identity(email="staff@example.com", role=2)
    foreign = Domain(id=uuid.uuid4(), owner_id=uuid.uuid4())
    assert is_admin(role_admin, _policy(), foreign) is False
    assert admin(role_admin, _policy()) is True

    # ...and a domain owner is not admin without the context.
    owner = Identity(email="owner@example.com", role=50)
    owned = Domain(id=uuid.uuid4(), owner_id=owner.id)
    assert is_admin(owner, _policy(), owned) is True
    assert admin(owner, _policy()) is False


def test_public_view_shape() -> None:
    identity = Identity(email="henry@example.com", first_name="Henry", last_name="King", role=4)
    set_password(identity, "Secret12", FAST_HASH)

    view = public_view(identity, _policy()).model_dump()
    assert set(view) == PUBLIC_KEYS
    assert view["full_name"] == "Henry King"
    assert view["admin"] is True
    assert view["superuser"] is False


def _random_identity(rng: random.Random) -> Identity:
    def maybe(value):
        return value if rng.random() < 0.5 else None

    def text(n: int = 12) -> str:
        return "".join(rng.choice("abcdefXYZ0123$@._- ") for _ in range(rng.randint(1, n)))

    stamp = datetime(2020, 1, 1, tzinfo=UTC) + timedelta(seconds=rng.randint(0, 10**8))
    identity = Identity(
        email=f"{text(8).replace('@', '').strip() or 'u'}@example.com",
        first_name=maybe(text()),
        last_name=maybe(text()),
        role=rng.randint(1, 200),
        lang=rng.choice(["en", "de", "pt"]),
        last_login_at=maybe(stamp),
        last_login_ip=maybe("10.0.0.1"),
        last_request_at=maybe(stamp),
        locked_at=maybe(stamp),
        locked_by=maybe(uuid.uuid4()),
        confirmation_key=maybe(f"ck-{rng.getrandbits(64):x}"),
        confirmation_expires=maybe(stamp),
        confirmation_tries=rng.randint(0, 5),
    )
    if rng.random() < 0.8:
        identity.salt = f"salt-{rng.getrandbits(64):x}"
        identity.hashed_password = f"argon2id$m=1,t=1,p=1${rng.getrandbits(128):032x}"
    if rng.random() < 0.5:
        identity.password = f"Plain{rng.getrandbits(32)}"
    return identity


@pytest.mark.parametrize("seed", range(150))
def test_public_view_never_leaks_credentials(seed: int) -> None:
    rng = random.Random(seed)
    identity = _random_identity(rng)
    superusers = (identity.email,) if rng.random() < 0.3 else ()

    view = public_view(identity, _policy(*superusers)).model_dump()
    assert set(view) == PUBLIC_KEYS

    dumped = repr(view)
    for secret in (identity.salt, identity.hashed_password, identity.password, identity.confirmation_key):
        if secret:
            assert secret not in dumped
