"""
Shipment Repository - Data access layer for shipment service

Stores shipments in PostgreSQL through the shared asyncpg pool wrapper.
The tracking history lives in a JSONB array on the shipment row, so a status
change and its history entry are written by one UPDATE under a row lock.
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from asyncpg.exceptions import UniqueViolationError

from core.postgres_client import PostgresClient, rows_affected

from .models import MUTABLE_FIELDS, Shipment, ShipmentStatus
from .protocols import (
    DuplicateTrackingNumberError,
    HistoryEntryBuilder,
)

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id                      TEXT PRIMARY KEY,
    tracking_number         CHAR(9) NOT NULL UNIQUE,
    recipient_name          TEXT NOT NULL,
    recipient_email         TEXT,
    recipient_phone         TEXT NOT NULL,
    delivery_address        TEXT NOT NULL,
    origin                  TEXT NOT NULL,
    destination             TEXT NOT NULL,
    carrier                 TEXT,
    carrier_ref             TEXT,
    shipment_type           TEXT,
    product                 TEXT,
    quantity                INTEGER,
    piece_type              TEXT,
    dimensions              TEXT,
    weight                  DOUBLE PRECISION,
    payment_mode            TEXT,
    expected_delivery_date  TIMESTAMPTZ,
    departure_time          TEXT,
    pickup_date             TIMESTAMPTZ,
    status                  TEXT NOT NULL,
    tracking_history        JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_by              TEXT,
    created_at              TIMESTAMPTZ NOT NULL,
    updated_at              TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_{table}_created_at ON {table} (created_at DESC);
CREATE INDEX IF NOT EXISTS idx_{table}_status ON {table} (status);
"""

# Column order used for inserts
COLUMNS = (
    "id",
    "tracking_number",
    *MUTABLE_FIELDS,
    "status",
    "tracking_history",
    "created_by",
    "created_at",
    "updated_at",
)


def _db_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class ShipmentRepository:
    """Shipment repository - data access layer for shipment operations"""

    def __init__(self, db: PostgresClient, table: str = "shipments"):
        """
        Initialize shipment repository.

        Args:
            db: Pool wrapper, opened and closed by the service lifespan
            table: Table name
        """
        self.db = db
        self.table = table

    async def initialize(self) -> None:
        """Create the shipments table and indexes if missing"""
        await self.db.execute(SCHEMA_SQL.format(table=self.table))
        logger.info(f"Shipment schema ready (table: {self.table})")

    async def close(self) -> None:
        await self.db.close()

    async def check_connection(self) -> bool:
        return await self.db.health_check()

    # ==================== Row Mapping ====================

    def _row_to_shipment(self, row: Dict[str, Any]) -> Shipment:
        data = dict(row)
        history = data.pop("tracking_history", None) or []
        if isinstance(history, str):
            history = json.loads(history)
        data["shipment_id"] = data.pop("id")
        data["tracking_number"] = (data.get("tracking_number") or "").strip()
        data["tracking_history"] = history
        return Shipment.model_validate(data)

    def _shipment_to_params(self, shipment: Shipment) -> List[Any]:
        history = [
            event.model_dump(by_alias=True, mode="json")
            for event in shipment.tracking_history
        ]
        values = {
            "id": shipment.shipment_id,
            "tracking_number": shipment.tracking_number,
            "status": shipment.status.value,
            "tracking_history": json.dumps(history),
            "created_by": shipment.created_by,
            "created_at": shipment.created_at,
            "updated_at": shipment.updated_at,
        }
        for field_name in MUTABLE_FIELDS:
            values[field_name] = _db_value(getattr(shipment, field_name))
        return [values[column] for column in COLUMNS]

    # ==================== Shipment Operations ====================

    async def create_shipment(self, shipment: Shipment) -> Shipment:
        """Insert a new shipment; never overwrites an existing tracking number"""
        placeholders = []
        for index, column in enumerate(COLUMNS, start=1):
            cast = "::jsonb" if column == "tracking_history" else ""
            placeholders.append(f"${index}{cast}")

        sql = f"""
            INSERT INTO {self.table} ({", ".join(COLUMNS)})
            VALUES ({", ".join(placeholders)})
            RETURNING *
        """
        try:
            row = await self.db.query_row(sql, self._shipment_to_params(shipment))
        except UniqueViolationError as e:
            if "tracking_number" in str(e.constraint_name or e):
                raise DuplicateTrackingNumberError(
                    f"Tracking number {shipment.tracking_number} already exists"
                ) from e
            raise
        return self._row_to_shipment(row)

    async def get_shipment(self, shipment_id: str) -> Optional[Shipment]:
        """Get shipment by internal id"""
        row = await self.db.query_row(
            f"SELECT * FROM {self.table} WHERE id = $1", [shipment_id]
        )
        return self._row_to_shipment(row) if row else None

    async def get_shipment_by_tracking(self, tracking_number: str) -> Optional[Shipment]:
        """Get shipment by tracking number"""
        row = await self.db.query_row(
            f"SELECT * FROM {self.table} WHERE tracking_number = $1", [tracking_number]
        )
        return self._row_to_shipment(row) if row else None

    async def tracking_number_exists(self, tracking_number: str) -> bool:
        return bool(await self.db.query_value(
            f"SELECT EXISTS (SELECT 1 FROM {self.table} WHERE tracking_number = $1)",
            [tracking_number],
        ))

    def _field_assignments(self, fields: Dict[str, Any]) -> Tuple[List[str], List[Any]]:
        """SET clauses and params for a mutable-field merge"""
        unknown = set(fields) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields not updatable: {', '.join(sorted(unknown))}")

        assignments = []
        params: List[Any] = []
        for field_name, value in fields.items():
            params.append(_db_value(value))
            assignments.append(f"{field_name} = ${len(params)}")
        return assignments, params

    async def update_shipment(
        self, shipment_id: str, fields: Dict[str, Any]
    ) -> Optional[Shipment]:
        """Merge mutable fields into the record and bump updated_at"""
        assignments, params = self._field_assignments(fields)

        params.append(datetime.now(timezone.utc))
        assignments.append(f"updated_at = ${len(params)}")
        params.append(shipment_id)

        row = await self.db.query_row(
            f"""
            UPDATE {self.table} SET {", ".join(assignments)}
            WHERE id = ${len(params)}
            RETURNING *
            """,
            params,
        )
        return self._row_to_shipment(row) if row else None

    async def append_history(
        self,
        shipment_id: str,
        build_entry: HistoryEntryBuilder,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[Shipment]:
        """
        Append one tracking event, set the status and merge fields in a single
        transaction.

        The row is locked while build_entry runs, so concurrent updates on the
        same shipment serialize and each sees the previous entry. An exception
        from build_entry rolls the transaction back before anything is written;
        a None entry stores only the fields.
        """
        assignments, params = self._field_assignments(fields or {})

        async with self.db.transaction() as conn:
            row = await conn.fetchrow(
                f"SELECT * FROM {self.table} WHERE id = $1 FOR UPDATE", shipment_id
            )
            if row is None:
                return None

            entry = build_entry(self._row_to_shipment(dict(row)))
            if entry is not None:
                params.append(json.dumps([entry.model_dump(by_alias=True, mode="json")]))
                assignments.append(f"tracking_history = tracking_history || ${len(params)}::jsonb")
                params.append(entry.status.value)
                assignments.append(f"status = ${len(params)}")

            params.append(datetime.now(timezone.utc))
            assignments.append(f"updated_at = ${len(params)}")
            params.append(shipment_id)

            updated = await conn.fetchrow(
                f"""
                UPDATE {self.table} SET {", ".join(assignments)}
                WHERE id = ${len(params)}
                RETURNING *
                """,
                *params,
            )
        return self._row_to_shipment(dict(updated))

    async def delete_shipment(self, shipment_id: str) -> bool:
        """Hard delete"""
        status = await self.db.execute(
            f"DELETE FROM {self.table} WHERE id = $1", [shipment_id]
        )
        return rows_affected(status) > 0

    # ==================== Queries ====================

    async def list_shipments(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[ShipmentStatus] = None,
    ) -> List[Shipment]:
        """List shipments, newest first"""
        if status is not None:
            rows = await self.db.query(
                f"""
                SELECT * FROM {self.table} WHERE status = $1
                ORDER BY created_at DESC, id DESC LIMIT $2 OFFSET $3
                """,
                [_db_value(status), limit, offset],
            )
        else:
            rows = await self.db.query(
                f"""
                SELECT * FROM {self.table}
                ORDER BY created_at DESC, id DESC LIMIT $1 OFFSET $2
                """,
                [limit, offset],
            )
        return [self._row_to_shipment(row) for row in rows]

    async def count_shipments(
        self, statuses: Optional[Iterable[ShipmentStatus]] = None
    ) -> int:
        """Count shipments, optionally restricted to a status set"""
        if statuses is None:
            count = await self.db.query_value(f"SELECT COUNT(*) FROM {self.table}")
        else:
            count = await self.db.query_value(
                f"SELECT COUNT(*) FROM {self.table} WHERE status = ANY($1::text[])",
                [[_db_value(s) for s in statuses]],
            )
        return int(count or 0)
