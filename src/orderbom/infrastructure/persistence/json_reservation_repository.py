"""JSON-file-backed implementation of ReservationRepository.

Append-only except for status flips; rows are never removed.
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

from orderbom.domain.exceptions import EntityNotFoundError
from orderbom.domain.model.reservation import (
    InventoryReservation,
    ReservationSourceType,
    ReservationStatus,
)
from orderbom.domain.repository.reservation_repository import ReservationRepository


class JsonReservationRepository(ReservationRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- ReservationRepository interface --------------------------------------

    def list_for_order(self, order_id: str) -> list[InventoryReservation]:
        return [
            self._to_domain(raw) for raw in self._load_raw() if raw["orderId"] == order_id
        ]

    def add_all(self, rows: list[InventoryReservation]) -> list[InventoryReservation]:
        records = self._load_raw()
        next_number = len(records) + 1
        added = []
        for row in rows:
            stored = replace(row, id=f"res_{next_number}")
            next_number += 1
            records.append(self._to_raw(stored))
            added.append(stored)
        self._persist_raw(records)
        return added

    def update_all(self, rows: list[InventoryReservation]) -> None:
        records = self._load_raw()
        index = {raw["id"]: i for i, raw in enumerate(records)}
        for row in rows:
            if row.id not in index:
                raise EntityNotFoundError(f"Reservation {row.id} not found")
            records[index[row.id]] = self._to_raw(row)
        self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(row: InventoryReservation) -> dict:
        return {
            "id": row.id,
            "organizationId": row.organization_id,
            "orderId": row.order_id,
            "orderLineItemId": row.order_line_item_id,
            "sourceType": row.source_type.value,
            "sourceKey": row.source_key,
            "uom": row.uom,
            "qty": row.qty,
            "status": row.status.value,
            "createdByUserId": row.created_by_user_id,
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryReservation:
        return InventoryReservation(
            id=raw["id"],
            organization_id=raw["organizationId"],
            order_id=raw["orderId"],
            order_line_item_id=raw.get("orderLineItemId"),
            source_type=ReservationSourceType(raw["sourceType"]),
            source_key=raw["sourceKey"],
            uom=raw["uom"],
            qty=raw["qty"],
            status=ReservationStatus(raw.get("status") or ReservationStatus.RESERVED.value),
            created_by_user_id=raw.get("createdByUserId"),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(records, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
