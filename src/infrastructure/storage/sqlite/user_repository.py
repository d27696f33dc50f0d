"""SQLite implementation of user storage."""

import aiosqlite

from src.core.entities.user import User, UserRole
from src.core.exceptions import DatabaseError, DuplicateEmailError
from src.core.interfaces.storage import IUserRepository
from src.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    from_db_datetime,
    to_db_datetime,
)


class SQLiteUserRepository(SQLiteRepository, IUserRepository):
    async def add(self, user: User) -> User:
        try:
            user_id, _ = await self._execute(
                """
                INSERT INTO users (email, first_name, last_name, role, is_active, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user.email,
                    user.first_name,
                    user.last_name,
                    user.role.value,
                    int(user.is_active),
                    to_db_datetime(user.created_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if "users.email" in str(e):
                raise DuplicateEmailError(user.email) from e
            raise DatabaseError("insert user", str(e)) from e

        return user.model_copy(update={"id": user_id})

    async def get(self, user_id: int) -> User | None:
        row = await self._fetchone("SELECT * FROM users WHERE id = ?", (user_id,))
        return self._row_to_user(row) if row else None

    async def get_by_email(self, email: str) -> User | None:
        row = await self._fetchone(
            "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email,)
        )
        return self._row_to_user(row) if row else None

    async def list_users(
        self,
        role: UserRole | None = None,
        active_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[User]:
        clauses: list[str] = []
        params: list = []
        if role:
            clauses.append("role = ?")
            params.append(role.value)
        if active_only:
            clauses.append("is_active = 1")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        rows = await self._fetchall(
            f"SELECT * FROM users {where} ORDER BY last_name, first_name, id LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [self._row_to_user(row) for row in rows]

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            role=UserRole(row["role"]),
            is_active=bool(row["is_active"]),
            created_at=from_db_datetime(row["created_at"]),
        )
