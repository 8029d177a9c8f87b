"""
Authentication Repository

Data access layer for users, on the shared asyncpg pool wrapper.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from asyncpg.exceptions import UniqueViolationError

from core.postgres_client import PostgresClient, rows_affected

from .models import User
from .protocols import UserAlreadyExistsError

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    user_id         TEXT PRIMARY KEY,
    username        TEXT NOT NULL UNIQUE,
    password_hash   TEXT NOT NULL,
    is_admin        BOOLEAN NOT NULL DEFAULT FALSE,
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    created_at      TIMESTAMPTZ NOT NULL,
    last_login_at   TIMESTAMPTZ
);
"""


class AuthRepository:
    """Authentication repository - async data access layer"""

    def __init__(self, db: PostgresClient, table: str = "users"):
        self.db = db
        self.users_table = table

    async def initialize(self) -> None:
        """Create the users table if missing"""
        await self.db.execute(SCHEMA_SQL.format(table=self.users_table))
        logger.info(f"Auth schema ready (table: {self.users_table})")

    async def close(self) -> None:
        await self.db.close()

    async def check_connection(self) -> bool:
        return await self.db.health_check()

    @staticmethod
    def _row_to_user(row: Optional[Dict[str, Any]]) -> Optional[User]:
        return User.model_validate(row) if row else None

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user information by user ID"""
        row = await self.db.query_row(
            f"SELECT * FROM {self.users_table} WHERE user_id = $1", [user_id]
        )
        return self._row_to_user(row)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user (including password hash) by username"""
        row = await self.db.query_row(
            f"SELECT * FROM {self.users_table} WHERE username = $1", [username]
        )
        return self._row_to_user(row)

    async def create_user(self, user: User) -> User:
        """Insert a user"""
        try:
            row = await self.db.query_row(
                f"""
                INSERT INTO {self.users_table}
                    (user_id, username, password_hash, is_admin, is_active, created_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING *
                """,
                [
                    user.user_id,
                    user.username,
                    user.password_hash,
                    user.is_admin,
                    user.is_active,
                    user.created_at or datetime.now(timezone.utc),
                ],
            )
        except UniqueViolationError as e:
            raise UserAlreadyExistsError(f"Username already exists: {user.username}") from e
        return self._row_to_user(row)

    async def update_last_login(self, user_id: str) -> bool:
        """Update user's last login timestamp"""
        status = await self.db.execute(
            f"UPDATE {self.users_table} SET last_login_at = $1 WHERE user_id = $2",
            [datetime.now(timezone.utc), user_id],
        )
        return rows_affected(status) > 0
