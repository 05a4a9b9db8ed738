"""Authentication service layer.

Business logic for:
- User registration and login
- Access token issuing
- Author lookups used to populate posts, comments and likes
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.auth.models import User, now_millis
from src.auth.schemas import AuthorSummary, RegisterRequest, UserResponse
from src.auth.security import create_access_token, hash_password, verify_password
from src.config.settings import get_settings


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class AuthError(Exception):
    """Base authentication error."""

    def __init__(self, message: str, code: str = "auth_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Invalid email or password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, "invalid_credentials")


class UserExistsError(AuthError):
    """Email already registered."""

    def __init__(self, message: str = "A user with this email already exists"):
        super().__init__(message, "user_exists")


class UserNotFoundError(AuthError):
    """User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message, "user_not_found")


# ==============================================================================
# Auth Service
# ==============================================================================


class AuthService:
    """User accounts and token issuing."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session.

        Args:
            session: Cassandra driver session
            keyspace: Keyspace name for queries
        """
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for better performance."""
        self._get_user_by_email = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE email = ?"
        )
        self._get_user_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE id = ?"
        )
        self._get_users_by_ids = self.session.prepare(
            f"SELECT id, name, email FROM {self.keyspace}.users WHERE id IN ?"
        )
        self._insert_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.users
            (id, email, name, password_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """)
        self._update_password = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET password_hash = ?, updated_at = ?
            WHERE id = ?
        """)

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_user_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        rows = self.session.execute(self._get_user_by_email, [email.lower().strip()])
        row = rows.one()
        return User.from_row(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        rows = self.session.execute(self._get_user_by_id, [user_id])
        row = rows.one()
        return User.from_row(row) if row else None

    def get_authors(self, user_ids: Iterable[UUID]) -> dict[UUID, AuthorSummary]:
        """Resolve user ids to author summaries in a single query.

        Ids with no matching user are absent from the result.
        """
        unique_ids = list(dict.fromkeys(user_ids))
        if not unique_ids:
            return {}

        rows = self.session.execute(self._get_users_by_ids, [unique_ids])
        return {
            row.id: AuthorSummary(id=row.id, name=row.name, email=row.email)
            for row in rows
        }

    # ==========================================================================
    # Registration & Login
    # ==========================================================================

    def register_user(self, data: RegisterRequest) -> User:
        """Register a new user.

        Raises:
            UserExistsError: If the email is already registered
        """
        if self.get_user_by_email(data.email):
            raise UserExistsError

        user = User(
            email=data.email,
            name=data.name,
            password_hash=hash_password(data.password),
        )
        self.session.execute(
            self._insert_user,
            [
                user.id,
                user.email,
                user.name,
                user.password_hash,
                user.created_at,
                user.updated_at,
            ],
        )

        logger.info("user_registered", user_id=str(user.id))
        return user

    def authenticate_user(self, email: str, password: str) -> User:
        """Check credentials and return the user.

        Transparently upgrades the stored hash when Argon2 parameters change.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
        """
        user = self.get_user_by_email(email)
        if not user:
            raise InvalidCredentialsError

        is_valid, new_hash = verify_password(password, user.password_hash)
        if not is_valid:
            logger.info("login_failed", user_id=str(user.id))
            raise InvalidCredentialsError

        if new_hash:
            user.password_hash = new_hash
            user.updated_at = now_millis()
            self.session.execute(
                self._update_password, [new_hash, user.updated_at, user.id]
            )

        logger.info("user_authenticated", user_id=str(user.id))
        return user

    def create_access_token(self, user: User) -> tuple[str, int]:
        """Issue an access token for a user.

        Returns:
            Tuple of (token, lifetime in seconds)
        """
        settings = get_settings()
        token = create_access_token(
            {"sub": str(user.id), "email": user.email, "name": user.name}
        )
        return token, settings.auth_access_token_expire_minutes * 60

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def to_response(self, user: User) -> UserResponse:
        """Convert User model to response schema."""
        return UserResponse(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
        )
