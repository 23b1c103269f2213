"""User service - registration and token sessions"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import ADMIN_EMAIL_DOMAIN
from ...exceptions import (
    Forbidden,
    InvalidCredentials,
    MissingField,
    PersistenceFailure,
    Unauthenticated,
    UserAlreadyExists,
    UserNotFound,
)
from ...models import User, UserRole
from ...security_utils import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_refresh_token,
)
from .repository import UserRepository
from .schemas import LoginRequest, RegisterRequest, TokenPair

logger = logging.getLogger(__name__)


def role_for_email(email: str) -> str:
    if ADMIN_EMAIL_DOMAIN and email.endswith(ADMIN_EMAIL_DOMAIN.lower()):
        return UserRole.ADMIN.value
    return UserRole.USER.value


def issue_access_token(user: User) -> str:
    return create_access_token(user.id, user.name, user.email, user.role)


class UserService:
    """Service layer for accounts and sessions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def register(self, data: RegisterRequest) -> User:
        fields = {"name": data.name, "email": data.email, "password": data.password}
        missing = [name for name, value in fields.items() if not value]
        if missing:
            raise MissingField("Name, email and password are required", fields=missing)

        if self.repo.get_by_email(self.db, data.email):
            raise UserAlreadyExists()

        try:
            user = self.repo.create_user(
                self.db,
                name=data.name,
                email=data.email,
                password_hash=hash_password(data.password),
                role=role_for_email(data.email),
            )
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExists() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to register {data.email}: {e}")
            raise PersistenceFailure("Could not create user") from e

        logger.info(f"✅ Registered user {user.id} ({user.role})")
        return user

    def login(self, data: LoginRequest) -> tuple[User, TokenPair]:
        if not data.email or not data.password:
            raise MissingField("Email and password are required")

        user = self.repo.get_by_email(self.db, data.email)
        if not user:
            raise UserNotFound()

        if not verify_password(data.password, user.password_hash):
            logger.warning(f"⚠️ Failed login for user {user.id}")
            raise InvalidCredentials()

        tokens = TokenPair(
            access_token=issue_access_token(user),
            refresh_token=create_refresh_token(user.id, user.role),
        )
        self.repo.set_refresh_token(self.db, user, tokens.refresh_token)

        logger.info(f"🔑 User {user.id} logged in")
        return user, tokens

    def refresh(self, token: str | None) -> TokenPair:
        """
        Exchange a refresh token for a new access token.

        The token must verify and also be the one currently stored for the user,
        so a logged-out session cannot be revived.
        """
        if not token:
            raise Unauthenticated("Unauthorized - No Refresh Token Provided")

        payload = verify_refresh_token(token)
        if not payload or payload.get("id") is None:
            raise Forbidden("Invalid or Expired Refresh Token")

        user = self.repo.get_by_id(self.db, payload["id"])
        if not user or user.refresh_token != token:
            raise Forbidden("Refresh token is no longer valid")

        return TokenPair(access_token=issue_access_token(user), refresh_token=token)

    def logout(self, user: User) -> None:
        self.repo.set_refresh_token(self.db, user, None)
        logger.info(f"👋 User {user.id} logged out")
