from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Client
from .repository import ClientRepository

_COLUMNS = """
    id, agent_id, first_name, last_name, national_id, phone, insurance_product,
    payment_method, fee_paid, location, created_at, updated_at
"""

# Columns a patch may set.
_UPDATABLE = {
    "first_name": "first_name",
    "last_name": "last_name",
    "national_id": "national_id",
    "phone": "phone",
    "insurance_product": "insurance_product",
    "payment_method": "payment_method",
    "fee_paid": "fee_paid",
    "location": "location",
}


def _to_client(row: dict) -> Client:
    fee = row.get("fee_paid")
    return Client(
        client_id=int(row["id"]),
        agent_id=int(row["agent_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        national_id=row.get("national_id"),
        phone=row.get("phone"),
        insurance_product=row.get("insurance_product"),
        payment_method=row.get("payment_method"),
        fee_paid=Decimal(str(fee)) if fee is not None else None,
        location=row.get("location"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, client_id: int) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM clients WHERE id=%s", (int(client_id),))
            row = fetchone(cur)
            return _to_client(row) if row else None

    def list_by_agents(self, agent_ids: Optional[Iterable[int]]) -> Sequence[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            if agent_ids is None:
                cur.execute(f"SELECT {_COLUMNS} FROM clients ORDER BY id")
            else:
                ids = [int(a) for a in agent_ids]
                if not ids:
                    return []
                cur.execute(
                    f"SELECT {_COLUMNS} FROM clients WHERE agent_id IN ({in_clause(ids)}) ORDER BY id",
                    tuple(ids),
                )
            return [_to_client(r) for r in fetchall(cur)]

    def create_client(
        self,
        *,
        agent_id: int,
        first_name: str,
        last_name: str,
        national_id: Optional[str],
        phone: Optional[str],
        insurance_product: Optional[str],
        payment_method: Optional[str],
        fee_paid: Optional[Decimal],
        location: Optional[str],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clients(
                    agent_id, first_name, last_name, national_id, phone, insurance_product,
                    payment_method, fee_paid, location, created_at, updated_at
                ) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(agent_id),
                    first_name,
                    last_name,
                    national_id,
                    phone,
                    insurance_product,
                    payment_method,
                    fee_paid,
                    location,
                    created_at,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def update_client(self, client_id: int, changes: Mapping[str, object], *, updated_at: datetime) -> bool:
        sets = []
        params: list[object] = []
        for field, value in changes.items():
            column = _UPDATABLE.get(field)
            if column is None:
                raise ValueError(f"Field is not updatable: {field}")
            sets.append(f"{column}=%s")
            params.append(value)
        sets.append("updated_at=%s")
        params.append(updated_at)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE clients SET {', '.join(sets)} WHERE id=%s", (*params, int(client_id)))
            cur.execute("SELECT 1 FROM clients WHERE id=%s", (int(client_id),))
            return fetchone(cur) is not None

    def delete_client(self, client_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM clients WHERE id=%s", (int(client_id),))
            return cur.rowcount > 0
