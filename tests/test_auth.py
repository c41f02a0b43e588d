from datetime import datetime, timedelta, timezone

import jwt
import pytest

from logistics.domain.models import UserRole
from logistics.domain.exceptions import ConflictError, UnauthorizedError, ValidationError
from logistics.application.auth import (
    SignupUseCase, SignupDTO, LoginUseCase, LoginDTO, GetCurrentUserUseCase, derive_name_from_email
)
from logistics.infrastructure.security import principal_from_claims

from conftest import TEST_SECRET


def test_hasher_round_trip(hasher):
    hashed = hasher.hash("correct horse")
    assert hashed != "correct horse"
    assert hasher.verify("correct horse", hashed)
    assert not hasher.verify("wrong horse", hashed)


def test_hasher_rejects_garbage_hash(hasher):
    assert not hasher.verify("anything", "not-a-bcrypt-hash")


def test_hasher_rejects_passwords_over_72_bytes(hasher):
    # 40 characters, 80 bytes
    with pytest.raises(ValidationError, match="72 bytes"):
        hasher.hash("é" * 40)
    assert hasher.verify("x" * 72, hasher.hash("x" * 72))


def test_token_round_trip(tokens):
    user_id = "0b7c0a52-6f9c-4a53-9a53-2b1f5c7a9e10"
    token = jwt.encode({"sub": user_id, "role": "admin"}, TEST_SECRET, algorithm="HS256")
    principal = tokens.verify(token)
    assert principal.id == user_id
    assert principal.role == UserRole.ADMIN
    assert principal.is_admin


def test_token_with_wrong_secret_is_rejected(tokens):
    token = jwt.encode({"sub": "someone"}, "another-secret-0123456789abcdef0123", algorithm="HS256")
    with pytest.raises(UnauthorizedError):
        tokens.verify(token)


def test_expired_token_is_rejected(tokens):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode({"sub": "someone", "exp": past}, TEST_SECRET, algorithm="HS256")
    with pytest.raises(UnauthorizedError, match="expired"):
        tokens.verify(token)


@pytest.mark.parametrize(
    "claims,expected",
    [
        ({"sub": "a", "_id": "b", "userId": "c"}, "a"),
        ({"_id": "b", "userId": "c"}, "b"),
        ({"userId": "c"}, "c"),
        ({"id": "d"}, "d"),
    ],
)
def test_subject_fallback_claims(claims, expected):
    assert principal_from_claims(claims).id == expected


def test_claims_without_subject_are_rejected():
    with pytest.raises(UnauthorizedError):
        principal_from_claims({"email": "x@example.com"})


def test_unknown_role_falls_back_to_user():
    assert principal_from_claims({"sub": "a", "role": "root"}).role == UserRole.USER


@pytest.mark.parametrize(
    "email,name",
    [("john.doe@example.com", "John Doe"), ("ana_maria-lopez@example.com", "Ana Maria Lopez"), ("@example.com", "User")],
)
def test_derive_name_from_email(email, name):
    assert derive_name_from_email(email) == name


async def test_signup_then_login(uow, hasher, tokens):
    signup = SignupUseCase(uow, hasher, tokens)
    issued = await signup(SignupDTO(email="  Jane.Roe@Example.com ", password="secret-password"))

    principal = tokens.verify(issued.access_token)
    user = await GetCurrentUserUseCase(uow)(principal)
    assert user.email == "jane.roe@example.com"
    assert user.name == "Jane Roe"
    assert user.role == UserRole.USER

    login = LoginUseCase(uow, hasher, tokens)
    again = await login(LoginDTO(email="jane.roe@example.com", password="secret-password"))
    assert tokens.verify(again.access_token).id == user.id


async def test_signup_duplicate_email(uow, hasher, tokens, seed):
    await seed.user(email="taken@example.com")
    with pytest.raises(ConflictError):
        await SignupUseCase(uow, hasher, tokens)(SignupDTO(email="Taken@example.com", password="secret-password"))


async def test_login_with_wrong_password(uow, hasher, tokens, seed):
    await seed.user(email="me@example.com", password="right-password")
    login = LoginUseCase(uow, hasher, tokens)
    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        await login(LoginDTO(email="me@example.com", password="wrong-password"))
    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        await login(LoginDTO(email="nobody@example.com", password="right-password"))


async def test_signup_with_overlong_password(uow, hasher, tokens):
    with pytest.raises(ValidationError):
        await SignupUseCase(uow, hasher, tokens)(SignupDTO(email="long@example.com", password="é" * 40))
