"""Tests for password hashing, tokens, the authorized_only guard, and AuthService"""

from datetime import timedelta

import jwt
import pytest
from unittest.mock import MagicMock
from psycopg2 import errors as pg_errors

from config import JWT_ALGORITHM, JWT_SECRET
from models.user import User
from repositories.user_repo import UserRepository
from security.auth import authorized_only, decode_token, hash_password, issue_token, verify_password
from services.auth_service import INVALID_CREDENTIALS, AuthService
from services.envelope import ok


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("test_password123")
        assert hashed != "test_password123"
        assert verify_password("test_password123", hashed)
        assert not verify_password("wrong_password", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_malformed_hash_never_matches(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False
        assert verify_password("", hash_password("x")) is False


class TestTokens:

    def test_round_trip(self, admin_user):
        claims = decode_token(issue_token(admin_user))
        assert claims["sub"] == "1"
        assert claims["user_id"] == 1
        assert claims["role"] == "admin"
        assert claims["exp"] > claims["iat"]

    def test_bearer_prefix_accepted(self, regular_user):
        token = issue_token(regular_user)
        assert decode_token(f"Bearer {token}")["username"] == "visitor"

    def test_expired_token(self, regular_user):
        token = issue_token(regular_user, expires_in=timedelta(seconds=-1))
        assert decode_token(token) is None

    def test_wrong_signature(self, regular_user):
        forged = jwt.encode({"sub": "2", "user_id": 2, "role": "admin"}, "other-secret", algorithm=JWT_ALGORITHM)
        assert decode_token(forged) is None

    def test_garbage(self):
        assert decode_token(None) is None
        assert decode_token("") is None
        assert decode_token("not.a.token") is None

    def test_signed_with_configured_secret(self, regular_user):
        claims = jwt.decode(issue_token(regular_user), JWT_SECRET, algorithms=[JWT_ALGORITHM])
        assert claims["email"] == "visitor@example.com"


class Guarded:
    @authorized_only()
    def whoami(self, claims):
        return ok(claims["username"])

    @authorized_only(admin=True)
    def admin_area(self, claims, value):
        return ok(value)


class TestAuthorizedOnly:

    def test_valid_token(self, regular_user):
        assert Guarded().whoami(issue_token(regular_user)) == {"success": True, "data": "visitor"}

    def test_missing_token(self):
        result = Guarded().whoami(None)
        assert result == {"success": False, "error": "Invalid or expired token", "code": "unauthorized"}

    def test_admin_required(self, regular_user, admin_user):
        assert Guarded().admin_area(issue_token(regular_user), 1)["code"] == "forbidden"
        assert Guarded().admin_area(issue_token(admin_user), 1) == {"success": True, "data": 1}


@pytest.fixture
def service(mock_pool):
    svc = AuthService(mock_pool)
    svc.repo = MagicMock(spec=UserRepository)
    return svc


def add_user(username, email, password_hash, role="user"):
    return User(id=7, username=username, email=email, password_hash=password_hash, role=role)


class TestRegister:

    def test_register(self, service):
        service.repo.add.side_effect = add_user
        result = service.register({"username": "jane", "email": "Jane@Example.com", "password": "<secret>"})
        assert result["success"] is True
        assert result["data"]["user"]["email"] == "jane@example.com"
        assert "password_hash" not in result["data"]["user"]
        assert decode_token(result["data"]["token"])["user_id"] == 7

    def test_password_stored_hashed_and_unsanitized(self, service):
        service.repo.add.side_effect = add_user
        service.register({"username": "jane", "email": "jane@example.com", "password": "<secret>"})
        username, email, password_hash = service.repo.add.call_args[0]
        assert password_hash != "<secret>"
        assert verify_password("<secret>", password_hash)

    def test_duplicate(self, service):
        service.repo.add.side_effect = pg_errors.UniqueViolation("users_username_key")
        result = service.register({"username": "jane", "email": "jane@example.com", "password": "secret1"})
        assert result == {"success": False, "error": "Username or email already exists", "code": "conflict"}

    def test_invalid(self, service):
        result = service.register({"username": "j", "email": "jane@example.com", "password": "secret1"})
        assert result["code"] == "validation"
        service.repo.add.assert_not_called()


class TestLogin:

    @pytest.fixture
    def stored_user(self, service):
        user = User(id=3, username="jane", email="jane@example.com", password_hash=hash_password("secret1"))
        service.repo.get_by_login.return_value = user
        return user

    def test_login(self, service, stored_user):
        result = service.login({"username": "jane", "password": "secret1"})
        assert result["success"] is True
        assert result["data"]["user"]["id"] == 3
        assert decode_token(result["data"]["token"])["username"] == "jane"

    def test_wrong_password_and_unknown_user_look_the_same(self, service, stored_user):
        wrong_password = service.login({"username": "jane", "password": "nope123"})
        service.repo.get_by_login.return_value = None
        unknown_user = service.login({"username": "ghost", "password": "secret1"})
        expected = {"success": False, "error": INVALID_CREDENTIALS, "code": "unauthorized"}
        assert wrong_password == expected
        assert unknown_user == expected

    def test_me(self, service, stored_user):
        service.repo.get_by_id.return_value = stored_user
        result = service.me(issue_token(stored_user))
        service.repo.get_by_id.assert_called_once_with(3)
        assert result["data"]["username"] == "jane"

    def test_me_requires_token(self, service):
        assert service.me("Bearer junk")["code"] == "unauthorized"


class TestChangePassword:

    def test_wrong_current_password(self, service):
        user = User(id=3, username="jane", email="jane@example.com", password_hash=hash_password("secret1"))
        service.repo.get_by_id.return_value = user
        result = service.change_password(issue_token(user), {"current_password": "guess", "new_password": "secret2"})
        assert result == {"success": False, "error": "Current password is incorrect", "code": "validation"}
        service.repo.update_password.assert_not_called()

    def test_change_password(self, service):
        user = User(id=3, username="jane", email="jane@example.com", password_hash=hash_password("secret1"))
        service.repo.get_by_id.return_value = user
        result = service.change_password(issue_token(user), {"current_password": "secret1", "new_password": "secret2"})
        assert result["success"] is True
        user_id, new_hash = service.repo.update_password.call_args[0]
        assert user_id == 3
        assert verify_password("secret2", new_hash)


class TestEnsureAdmin:

    def test_skipped_when_users_exist(self, service):
        service.repo.count.return_value = 4
        assert service.ensure_admin("admin", "admin@example.com", "changeme") == {"success": True, "created": False}
        service.repo.add.assert_not_called()

    def test_seeds_first_admin(self, service):
        service.repo.count.return_value = 0
        service.repo.add.side_effect = add_user
        result = service.ensure_admin("admin", "admin@example.com", "changeme")
        assert result["created"] is True
        assert result["data"]["role"] == "admin"
        assert service.repo.add.call_args.kwargs["role"] == "admin"
