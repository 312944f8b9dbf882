"""InventoryReservation — one row of the append-and-flip reservation ledger.

Rows are never deleted.  A row is created RESERVED and may later be flipped
to RELEASED; re-reserving a released key appends a fresh row.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

# Components are reserved as unit counts.
COMPONENT_UOM = "EA"


class ReservationStatus(Enum):
    RESERVED = "RESERVED"
    RELEASED = "RELEASED"


class ReservationSourceType(Enum):
    PBV2_MATERIAL = "PBV2_MATERIAL"
    PBV2_COMPONENT = "PBV2_COMPONENT"
    MANUAL = "MANUAL"


@dataclass(frozen=True)
class InventoryReservation:
    """Aggregate for a single reservation row.

    Invariant: ``qty`` is a positive, fixed 2-decimal string.
    """

    organization_id: str
    order_id: str
    order_line_item_id: str | None
    source_type: ReservationSourceType
    source_key: str
    uom: str
    qty: str
    status: ReservationStatus = ReservationStatus.RESERVED
    created_by_user_id: str | None = None
    id: str | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity used for idempotent insertion: (source type, key, uom)."""
        return (self.source_type.value, self.source_key, self.uom)

    @property
    def is_reserved(self) -> bool:
        return self.status == ReservationStatus.RESERVED

    def released(self) -> InventoryReservation:
        """Transition RESERVED -> RELEASED (no-op for released rows)."""
        return replace(self, status=ReservationStatus.RELEASED)


@dataclass(frozen=True)
class ReservationRollupItem:
    source_key: str
    uom: str
    qty: str
    by_source_type: dict[str, str]


@dataclass(frozen=True)
class ReservationRollupView:
    """Summary of persisted reservations grouped by (source key, uom)."""

    status: ReservationStatus
    items: list[ReservationRollupItem] = field(default_factory=list)


@dataclass(frozen=True)
class MaterialReservationGroup:
    """Reserved totals for a material with MANUAL separated from engine rows."""

    source_key: str
    uom: str
    total_qty: str
    manual_qty: str
    non_manual_qty: str
