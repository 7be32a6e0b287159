import json
import logging
import secrets
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)

# Fields a filter or projection may name.
USER_FIELDS = ("id", "email", "is_classroom_account", "completed_challenges", "created_at")
JSON_FIELDS = {"completed_challenges"}
BOOL_FIELDS = {"is_classroom_account"}

OBJECT_ID_BYTES = 12

SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL,
        is_classroom_account INTEGER NOT NULL DEFAULT 0,
        completed_challenges TEXT NOT NULL DEFAULT '[]',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE UNIQUE INDEX IF NOT EXISTS idx_users_classroom_email
        ON users(email) WHERE is_classroom_account = 1;
"""


class StoreError(Exception):
    """Any failure reading from or writing to the user store."""


def generate_object_id() -> str:
    """Generate a 24-character hex id for a new user record."""
    return secrets.token_hex(OBJECT_ID_BYTES)


def _json_default(value: Any) -> Any:
    # Dates are kept in the extended-JSON wrapper document stores export.
    if isinstance(value, (datetime, date)):
        return {"$date": value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _check_field(field: str):
    if field not in USER_FIELDS:
        raise StoreError(f"Unknown user field: {field!r}")


def _to_column(field: str, value: Any) -> Any:
    if field in BOOL_FIELDS:
        return int(bool(value))
    if field in JSON_FIELDS:
        try:
            return json.dumps(value, default=_json_default)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Cannot encode {field}: {e}") from e
    return value


def _from_row(row: sqlite3.Row) -> dict:
    record = dict(row)
    for field in JSON_FIELDS & record.keys():
        try:
            record[field] = json.loads(record[field] or "[]")
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt {field} for user {record.get('id')}: {e}") from e
    for field in BOOL_FIELDS & record.keys():
        record[field] = bool(record[field])
    return record


def _where(filter: dict[str, Any]) -> tuple[str, list[Any]]:
    """Translate a filter document into a SQL condition.

    Supported conditions are equality (``{"email": "a@b.c"}``) and
    membership (``{"id": {"in": [...]}}``). All conditions are ANDed.
    """
    clauses: list[str] = []
    params: list[Any] = []
    for field, condition in filter.items():
        _check_field(field)
        if isinstance(condition, dict):
            if set(condition) != {"in"}:
                raise StoreError(f"Unsupported condition on {field!r}: {sorted(condition)}")
            values = [_to_column(field, v) for v in condition["in"]]
            if not values:
                # Membership in an empty set never matches
                clauses.append("0")
                continue
            clauses.append(f"{field} IN ({', '.join('?' * len(values))})")
            params.extend(values)
        else:
            clauses.append(f"{field} = ?")
            params.append(_to_column(field, condition))
    return " AND ".join(clauses) or "1", params


def _columns(projection: Iterable[str] | None) -> str:
    if projection is None:
        return ", ".join(USER_FIELDS)
    fields = list(projection)
    if not fields:
        raise StoreError("Projection must name at least one field")
    for field in fields:
        _check_field(field)
    return ", ".join(fields)


class UserStore:
    """Read/write access to user records kept in a sqlite file.

    Reads follow a small document-store contract: ``find_one`` and
    ``find_many`` take a filter document and a projection (list of field
    names) and return plain dicts. Every sqlite failure surfaces as
    ``StoreError``.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def init_db(self):
        """Create tables if they don't exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.get_connection() as conn:
            conn.executescript(SCHEMA)
        logger.info(f"User store ready at {self.path}")

    @contextmanager
    def get_connection(self):
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def find_one(self, filter: dict[str, Any], projection: Iterable[str] | None = None) -> dict | None:
        where, params = _where(filter)
        with self.get_connection() as conn:
            row = conn.execute(
                f"SELECT {_columns(projection)} FROM users WHERE {where} ORDER BY id LIMIT 1",
                params,
            ).fetchone()
        return _from_row(row) if row else None

    def find_many(self, filter: dict[str, Any], projection: Iterable[str] | None = None) -> list[dict]:
        where, params = _where(filter)
        with self.get_connection() as conn:
            rows = conn.execute(
                f"SELECT {_columns(projection)} FROM users WHERE {where} ORDER BY id",
                params,
            ).fetchall()
        return [_from_row(row) for row in rows]

    def insert_user(self, user: dict[str, Any]) -> str:
        """Insert a user record and return its id."""
        if not user.get("email"):
            raise StoreError("User record requires an email")
        record = {
            "id": user.get("id") or generate_object_id(),
            "email": user["email"],
            "is_classroom_account": user.get("is_classroom_account", False),
            "completed_challenges": user.get("completed_challenges", []),
        }
        fields = list(record)
        with self.get_connection() as conn:
            conn.execute(
                f"INSERT INTO users ({', '.join(fields)}) VALUES ({', '.join('?' * len(fields))})",
                [_to_column(field, record[field]) for field in fields],
            )
        return record["id"]

    def update_user(self, user_id: str, **fields: Any) -> bool:
        """Update fields of one user. Returns False when no such user exists."""
        if not fields:
            return False
        for field in fields:
            _check_field(field)
            if field == "id":
                raise StoreError("User id cannot be changed")
        assignments = ", ".join(f"{field} = ?" for field in fields)
        params = [_to_column(field, value) for field, value in fields.items()]
        with self.get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*params, user_id),
            )
            return cursor.rowcount > 0
