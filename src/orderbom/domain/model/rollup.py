"""Order rollup result types.

An ``OrderRollup`` is the order-level bill of materials: aggregated raw
material usage, the components users accepted onto line items, and the
non-fatal warnings raised while building it.  All quantities are already
rendered as decimal strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

INLINE_SKU_KIND = "inlineSku"
DEFAULT_INVOICE_VISIBILITY = "rollup"


class RollupWarningCode(Enum):
    SIGNATURE_MISSING = "PBV2_SNAPSHOT_SIGNATURE_MISSING"
    INPUTS_MISSING = "PBV2_SNAPSHOT_INPUTS_MISSING"
    SIGNATURE_MISMATCH = "PBV2_SNAPSHOT_SIGNATURE_MISMATCH"


@dataclass(frozen=True)
class RollupWarning:
    code: RollupWarningCode
    message: str
    line_item_id: str | None = None


@dataclass(frozen=True)
class MaterialSource:
    """A single line item's contribution to a material aggregate."""

    line_item_id: str
    source_node_id: str
    qty: str
    effect_index: int | None = None


@dataclass(frozen=True)
class MaterialAggregate:
    sku_ref: str
    uom: str
    qty: str
    sources: tuple[MaterialSource, ...] = ()


@dataclass(frozen=True)
class AcceptedComponent:
    """A child item a user explicitly accepted onto a line item.

    ``kind == "inlineSku"`` components are identified by ``sku_ref``; every
    other kind references another product through ``child_product_id``.
    """

    order_line_item_id: str
    kind: str
    title: str
    qty: Any
    sku_ref: str | None = None
    child_product_id: str | None = None
    unit_price_cents: int | None = None
    amount_cents: int | None = None
    invoice_visibility: str | None = None
    source_node_id: str | None = None
    effect_index: int | None = None

    @property
    def is_inline_sku(self) -> bool:
        return self.kind == INLINE_SKU_KIND


@dataclass(frozen=True)
class RollupComponent:
    kind: str
    title: str
    qty: str  # fixed 2 decimals
    line_item_id: str
    invoice_visibility: str = DEFAULT_INVOICE_VISIBILITY
    sku_ref: str | None = None
    child_product_id: str | None = None
    unit_price_cents: int | None = None
    amount_cents: int | None = None

    @property
    def is_inline_sku(self) -> bool:
        return self.kind == INLINE_SKU_KIND

    @property
    def identity_key(self) -> str:
        """The SKU for inline items, the child product id otherwise."""
        if self.is_inline_sku:
            return self.sku_ref or ""
        return self.child_product_id or ""


@dataclass(frozen=True)
class OrderRollup:
    order_id: str
    materials: list[MaterialAggregate] = field(default_factory=list)
    components: list[RollupComponent] = field(default_factory=list)
    warnings: list[RollupWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
