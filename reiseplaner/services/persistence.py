"""
Plan persistence.
Stores each request together with the plan returned for it, either in
Supabase (via its REST API) or in a local SQLite file.
"""
from datetime import datetime, timezone
from typing import Optional, Protocol
import asyncio
import json
import logging
import sqlite3
import uuid

import httpx

from .errors import PersistenceError
from ..config import Settings

logger = logging.getLogger(__name__)


class PlanStore(Protocol):
    """Stores (request, plan) pairs. Shared by all in-flight requests."""
    name: str

    async def save(self, request: dict, plan: dict) -> None:
        ...

    async def aclose(self) -> None:
        ...


class SupabasePlanStore:
    """Inserts plans into a Supabase table through PostgREST."""
    name = "supabase"

    def __init__(
        self,
        url: str,
        service_key: str,
        table: str = "plans",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.table = table
        self.client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
                "Prefer": "return=minimal",
            },
            timeout=timeout,
            transport=transport,
        )

    async def save(self, request: dict, plan: dict) -> None:
        try:
            response = await self.client.post(f"/{self.table}", json={"input": request, "plan": plan})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"Supabase insert failed with status {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"Supabase insert failed: {e}") from e

    async def aclose(self) -> None:
        await self.client.aclose()


class SQLitePlanStore:
    """Keeps plans in a local SQLite database file."""
    name = "sqlite"

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._schema_ready = False

    def _get_connection(self) -> sqlite3.Connection:
        """Create a database connection."""
        conn = sqlite3.connect(self.db_path, timeout=5.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        if self._schema_ready:
            return
        conn.execute(
            "CREATE TABLE IF NOT EXISTS plans ("
            "id TEXT PRIMARY KEY, created_at TEXT NOT NULL, input TEXT NOT NULL, plan TEXT NOT NULL)"
        )
        self._schema_ready = True

    def _insert(self, request: dict, plan: dict) -> str:
        row_id = str(uuid.uuid4())
        conn = self._get_connection()
        try:
            with conn:
                self._ensure_schema(conn)
                conn.execute(
                    "INSERT INTO plans (id, created_at, input, plan) VALUES (?, ?, ?, ?)",
                    (
                        row_id,
                        datetime.now(timezone.utc).isoformat(),
                        json.dumps(request, ensure_ascii=False, default=str),
                        json.dumps(plan, ensure_ascii=False),
                    ),
                )
        finally:
            conn.close()
        return row_id

    async def save(self, request: dict, plan: dict) -> None:
        try:
            await asyncio.to_thread(self._insert, request, plan)
        except sqlite3.Error as e:
            raise PersistenceError(f"SQLite insert into {self.db_path} failed: {e}") from e

    def fetch_all(self) -> list[dict]:
        """Return all stored rows, oldest first."""
        conn = self._get_connection()
        try:
            self._ensure_schema(conn)
            rows = conn.execute("SELECT * FROM plans ORDER BY created_at").fetchall()
        finally:
            conn.close()
        return [
            {
                "id": row["id"],
                "created_at": row["created_at"],
                "input": json.loads(row["input"]),
                "plan": json.loads(row["plan"]),
            }
            for row in rows
        ]

    async def aclose(self) -> None:
        return None


def build_plan_store(config: Settings) -> Optional[PlanStore]:
    """Pick the store matching the configured credentials, or None."""
    if config.supabase_url and config.supabase_service_key:
        return SupabasePlanStore(
            config.supabase_url,
            config.supabase_service_key,
            table=config.supabase_table,
            timeout=config.persistence_timeout_seconds,
        )
    if config.plan_db_path:
        return SQLitePlanStore(config.plan_db_path)
    logger.warning("No persistence configured. Plans will not be stored.")
    return None
