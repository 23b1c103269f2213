import pytest
from sqlalchemy.orm import Session

from clinic import security_utils
from clinic.domain.users.schemas import LoginRequest, RegisterRequest
from clinic.domain.users.service import UserService, role_for_email
from clinic.exceptions import Forbidden, InvalidCredentials, MissingField, UserAlreadyExists, UserNotFound
from clinic.models import User
from clinic.security_utils import create_refresh_token, verify_access_token, verify_refresh_token


@pytest.fixture
def service(db: Session) -> UserService:
    return UserService(db)


def register(service: UserService, email: str = "Jane@Example.com") -> User:
    return service.register(RegisterRequest(name="Jane Doe", email=email, password="pw-123456"))


class TestRegister:
    def test_lowercases_email_and_hashes_password(self, service: UserService) -> None:
        user = register(service)

        assert user.email == "jane@example.com"
        assert user.password_hash != "pw-123456"
        assert user.role == "user"

    def test_staff_domain_gets_admin_role(self, service: UserService) -> None:
        user = register(service, email="nurse@tothenew.com")

        assert user.role == "admin"
        assert user.is_admin is True

    def test_duplicate_email(self, service: UserService) -> None:
        register(service)

        with pytest.raises(UserAlreadyExists):
            register(service, email="JANE@example.com")

    def test_missing_fields(self, service: UserService) -> None:
        with pytest.raises(MissingField) as exc_info:
            service.register(RegisterRequest(name="Jane"))

        assert exc_info.value.fields == ["email", "password"]

    def test_role_for_email(self) -> None:
        assert role_for_email("a@tothenew.com") == "admin"
        assert role_for_email("a@tothenew.com.evil.org") == "user"


class TestLoginAndTokens:
    def test_login_issues_and_stores_tokens(self, service: UserService) -> None:
        register(service)

        user, tokens = service.login(LoginRequest(email="jane@example.com", password="pw-123456"))

        access = verify_access_token(tokens.access_token)
        assert access["id"] == user.id
        assert access["email"] == "jane@example.com"
        assert access["role"] == "user"
        assert verify_refresh_token(tokens.refresh_token)["type"] == "refresh"
        assert user.refresh_token == tokens.refresh_token

    def test_unknown_user(self, service: UserService) -> None:
        with pytest.raises(UserNotFound):
            service.login(LoginRequest(email="ghost@example.com", password="x"))

    def test_wrong_password(self, service: UserService) -> None:
        register(service)

        with pytest.raises(InvalidCredentials):
            service.login(LoginRequest(email="jane@example.com", password="nope"))

    def test_refresh_requires_stored_token(self, service: UserService) -> None:
        register(service)
        user, tokens = service.login(LoginRequest(email="jane@example.com", password="pw-123456"))

        refreshed = service.refresh(tokens.refresh_token)
        assert verify_access_token(refreshed.access_token)["id"] == user.id

        service.logout(user)
        with pytest.raises(Forbidden):
            service.refresh(tokens.refresh_token)

    def test_refresh_rejects_access_token(self, service: UserService) -> None:
        register(service)
        _, tokens = service.login(LoginRequest(email="jane@example.com", password="pw-123456"))

        with pytest.raises(Forbidden):
            service.refresh(tokens.access_token)

    def test_refresh_rejects_token_not_issued_at_login(self, service: UserService) -> None:
        user = register(service)

        with pytest.raises(Forbidden):
            service.refresh(create_refresh_token(user.id, user.role))

    def test_refresh_token_is_not_an_access_token(self, service: UserService, monkeypatch) -> None:
        monkeypatch.setattr(security_utils, "REFRESH_TOKEN_SECRET", security_utils.SECRET_KEY)
        user = register(service)
        token = create_refresh_token(user.id, user.role)

        assert verify_refresh_token(token)["id"] == user.id
        assert verify_access_token(token) is None
