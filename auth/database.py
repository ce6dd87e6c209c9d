"""Database operations for authentication.

Only the users table. Password hashes are read by a dedicated query and
never placed on the User model.
"""

from uuid import UUID

from clients.postgres_client import PostgresClient
from auth.types import Role, User
from utils.timezone import now_utc

USER_COLUMNS = "id, email, role, is_active, created_at, last_login_at"


def _to_user(row: dict) -> User:
    return User(
        id=UUID(row["id"]) if isinstance(row["id"], str) else row["id"],
        email=row["email"],
        role=row["role"],
        is_active=row["is_active"],
        created_at=row["created_at"],
        last_login_at=row["last_login_at"],
    )


class AuthDatabase:
    """Database operations for authentication."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_user_by_email(self, email: str) -> User | None:
        """Find user by email (case-insensitive)."""
        row = self._db.execute_single(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = lower(%s)",
            (email,),
        )
        return _to_user(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""
        row = self._db.execute_single(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = %s",
            (str(user_id),),
        )
        return _to_user(row) if row else None

    def get_credentials(self, email: str) -> tuple[User, str] | None:
        """
        User and stored password hash for login.

        Returns:
            (user, password_hash), or None if no user has this email
        """
        row = self._db.execute_single(
            f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = lower(%s)",
            (email,),
        )
        if row is None:
            return None
        return _to_user(row), row["password_hash"]

    def create_user(self, email: str, password_hash: str, role: Role = Role.USER) -> User:
        """Create new user with email (lowercased)."""
        rows = self._db.execute_returning(
            f"""INSERT INTO users (email, password_hash, role)
               VALUES (lower(%s), %s, %s)
               RETURNING {USER_COLUMNS}""",
            (email, password_hash, role.value),
        )
        return _to_user(rows[0])

    def update_last_login(self, user_id: UUID) -> None:
        """Update last_login_at to current time."""
        self._db.execute_returning(
            "UPDATE users SET last_login_at = %s WHERE id = %s RETURNING id",
            (now_utc(), str(user_id)),
        )
