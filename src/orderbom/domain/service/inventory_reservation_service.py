"""Domain service: Inventory Reservation.

Maps an order rollup onto reservation ledger rows and reconciles them with
rows that are already persisted.  Nothing here touches storage: the caller
inserts whatever ``diff_for_insert`` returns and saves whatever
``apply_release`` returns.

Idempotence of reservation depends on ``existing_reserved`` being current.
Concurrent reservers of the same order must serialize around persistence
(a unique constraint on the active key is the usual way).
"""

from __future__ import annotations

import logging
from typing import Iterable

from orderbom.domain.model.reservation import (
    COMPONENT_UOM,
    InventoryReservation,
    MaterialReservationGroup,
    ReservationRollupItem,
    ReservationRollupView,
    ReservationSourceType,
    ReservationStatus,
)
from orderbom.domain.model.rollup import OrderRollup
from orderbom.domain.model.value_objects import RESERVATION_SCALE, ScaledQuantity

logger = logging.getLogger(__name__)


def _reservation_qty(value: object) -> ScaledQuantity:
    return ScaledQuantity.of(value, RESERVATION_SCALE)


def _zero() -> ScaledQuantity:
    return ScaledQuantity.zero(RESERVATION_SCALE)


def build_reservations_from_rollup(
    organization_id: str,
    order_id: str,
    rollup: OrderRollup,
    created_by_user_id: str | None = None,
) -> list[InventoryReservation]:
    """Turn rollup materials and components into RESERVED rows.

    Rows are summed per (source type, source key, uom); non-positive
    quantities are dropped.  Output is sorted by source key, uom, then
    source type.
    """
    totals: dict[tuple[ReservationSourceType, str, str], ScaledQuantity] = {}

    def add(source_type: ReservationSourceType, source_key: str, uom: str, qty: object) -> None:
        if not source_key or not uom:
            return
        amount = _reservation_qty(qty)
        if not amount.is_positive:
            return
        key = (source_type, source_key, uom)
        totals[key] = totals.get(key, _zero()) + amount

    for material in rollup.materials:
        add(ReservationSourceType.PBV2_MATERIAL, material.sku_ref, material.uom, material.qty)

    for component in rollup.components:
        add(
            ReservationSourceType.PBV2_COMPONENT,
            component.identity_key,
            COMPONENT_UOM,
            component.qty,
        )

    rows = [
        InventoryReservation(
            organization_id=organization_id,
            order_id=order_id,
            order_line_item_id=None,
            source_type=source_type,
            source_key=source_key,
            uom=uom,
            qty=qty.to_fixed(),
            status=ReservationStatus.RESERVED,
            created_by_user_id=created_by_user_id,
        )
        for (source_type, source_key, uom), qty in totals.items()
    ]
    rows.sort(key=lambda r: (r.source_key, r.uom, r.source_type.value))
    return rows


def diff_for_insert(
    desired: Iterable[InventoryReservation],
    existing_reserved: Iterable[InventoryReservation],
) -> list[InventoryReservation]:
    """Return the desired rows whose key is not already actively reserved.

    RELEASED rows never block a key, so a released reservation can be made
    again.  Quantity differences on an active key are not reconciled here.
    """
    active_keys = {row.key for row in existing_reserved if row.is_reserved}
    to_insert = [row for row in desired if row.key not in active_keys]
    logger.debug(
        "Reservation diff: %d to insert, %d active keys", len(to_insert), len(active_keys)
    )
    return to_insert


def apply_release(rows: Iterable[InventoryReservation]) -> list[InventoryReservation]:
    """Flip every row to RELEASED, leaving all other fields untouched."""
    return [row.released() for row in rows]


def build_rollup_view(
    reservations: Iterable[InventoryReservation],
    status: ReservationStatus | str = ReservationStatus.RESERVED,
) -> ReservationRollupView:
    """Summarize persisted rows with the given status by (source key, uom)."""
    wanted = ReservationStatus(status)
    grouped: dict[tuple[str, str], dict[ReservationSourceType, ScaledQuantity]] = {}

    for row in reservations:
        if row.status != wanted:
            continue
        if not row.source_key or not row.uom:
            continue
        qty = _reservation_qty(row.qty)
        if not qty.is_positive:
            continue
        by_type = grouped.setdefault((row.source_key, row.uom), {})
        by_type[row.source_type] = by_type.get(row.source_type, _zero()) + qty

    items = []
    for (source_key, uom), by_type in sorted(grouped.items()):
        total = _zero()
        for qty in by_type.values():
            total = total + qty
        items.append(
            ReservationRollupItem(
                source_key=source_key,
                uom=uom,
                qty=total.to_fixed(),
                by_source_type={
                    source_type.value: by_type.get(source_type, _zero()).to_fixed()
                    for source_type in ReservationSourceType
                },
            )
        )
    return ReservationRollupView(status=wanted, items=items)


def group_reservations_by_material(
    reservations: Iterable[InventoryReservation],
) -> list[MaterialReservationGroup]:
    """Reserved totals per (source key, uom), MANUAL split from engine rows."""
    grouped: dict[tuple[str, str], tuple[ScaledQuantity, ScaledQuantity]] = {}

    for row in reservations:
        if not row.is_reserved or not row.source_key or not row.uom:
            continue
        qty = _reservation_qty(row.qty)
        if not qty.is_positive:
            continue
        manual, non_manual = grouped.get((row.source_key, row.uom), (_zero(), _zero()))
        if row.source_type == ReservationSourceType.MANUAL:
            manual = manual + qty
        else:
            non_manual = non_manual + qty
        grouped[(row.source_key, row.uom)] = (manual, non_manual)

    return [
        MaterialReservationGroup(
            source_key=source_key,
            uom=uom,
            total_qty=(manual + non_manual).to_fixed(),
            manual_qty=manual.to_fixed(),
            non_manual_qty=non_manual.to_fixed(),
        )
        for (source_key, uom), (manual, non_manual) in sorted(grouped.items())
    ]


def sum_manual_reserved(
    reservations: Iterable[InventoryReservation],
    source_key: str,
    uom: str,
) -> str:
    """Total RESERVED MANUAL quantity for one (source key, uom)."""
    total = _zero()
    for row in reservations:
        if not row.is_reserved or row.source_type != ReservationSourceType.MANUAL:
            continue
        if row.source_key != source_key or row.uom != uom:
            continue
        qty = _reservation_qty(row.qty)
        if qty.is_positive:
            total = total + qty
    return total.to_fixed()
