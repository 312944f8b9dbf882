"""Domain service: Order Rollup.

Builds the order-level bill of materials from line item pricing snapshots
and accepted components.  Every snapshot's input signature is re-verified
first; a stale, unsigned or incomplete snapshot downgrades to a warning and
contributes no materials, but never aborts the rollup.

The function is pure: identical input yields identical output, including
the order of every list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from orderbom.domain.exceptions import SignatureInputError
from orderbom.domain.model.order import OrderLineItem
from orderbom.domain.model.rollup import (
    DEFAULT_INVOICE_VISIBILITY,
    AcceptedComponent,
    MaterialAggregate,
    MaterialSource,
    OrderRollup,
    RollupComponent,
    RollupWarning,
    RollupWarningCode,
)
from orderbom.domain.model.snapshot import PricingSnapshot
from orderbom.domain.model.value_objects import (
    QTY_SCALE,
    ScaledQuantity,
    normalize_decimal_string,
)
from orderbom.domain.service.input_signature import compute_input_signature

logger = logging.getLogger(__name__)

_WARNING_MESSAGES = {
    RollupWarningCode.SIGNATURE_MISSING: "PBV2 snapshot signature missing; skipping materials for line item.",
    RollupWarningCode.INPUTS_MISSING: "PBV2 snapshot inputs missing; skipping materials for line item.",
    RollupWarningCode.SIGNATURE_MISMATCH: "PBV2 snapshot signature mismatch; skipping materials for line item.",
}


@dataclass
class _MaterialTotal:
    sku_ref: str
    uom: str
    total: ScaledQuantity
    sources: list[MaterialSource]


def verify_snapshot(snapshot: PricingSnapshot) -> RollupWarningCode | None:
    """Return the warning code that disqualifies *snapshot*, or None if fresh."""
    if not snapshot.has_signature:
        return RollupWarningCode.SIGNATURE_MISSING
    if not snapshot.has_inputs:
        return RollupWarningCode.INPUTS_MISSING
    try:
        computed = compute_input_signature(
            snapshot.tree_version_id, snapshot.explicit_selections, snapshot.env
        )
    except SignatureInputError:
        # Inputs that cannot be hashed cannot match any stored signature.
        return RollupWarningCode.SIGNATURE_MISMATCH
    if computed != snapshot.input_signature:
        return RollupWarningCode.SIGNATURE_MISMATCH
    return None


def build_order_rollup(
    order_id: str,
    line_items: Iterable[OrderLineItem],
    accepted_components: Iterable[AcceptedComponent],
) -> OrderRollup:
    warnings: list[RollupWarning] = []
    totals: dict[tuple[str, str], _MaterialTotal] = {}

    for line_item in line_items:
        snapshot = PricingSnapshot.from_json(line_item.snapshot_json)
        if snapshot is None:
            continue

        problem = verify_snapshot(snapshot)
        if problem is not None:
            logger.debug(
                "Skipping materials of line item %s on order %s: %s",
                line_item.id,
                order_id,
                problem.value,
            )
            warnings.append(
                RollupWarning(
                    code=problem,
                    message=_WARNING_MESSAGES[problem],
                    line_item_id=line_item.id,
                )
            )
            continue

        for material in snapshot.materials:
            if not material.sku_ref or not material.uom:
                continue
            qty = ScaledQuantity.of(material.qty, QTY_SCALE)
            if qty.is_zero:
                continue

            key = (material.sku_ref, material.uom)
            entry = totals.get(key)
            if entry is None:
                entry = _MaterialTotal(
                    material.sku_ref, material.uom, ScaledQuantity.zero(QTY_SCALE), []
                )
                totals[key] = entry
            entry.total = entry.total + qty
            entry.sources.append(
                MaterialSource(
                    line_item_id=line_item.id,
                    source_node_id=material.source_node_id,
                    qty=qty.to_display(),
                )
            )

    materials = [
        MaterialAggregate(
            sku_ref=entry.sku_ref,
            uom=entry.uom,
            qty=entry.total.to_display(),
            sources=tuple(
                sorted(entry.sources, key=lambda s: (s.line_item_id, s.source_node_id))
            ),
        )
        for _, entry in sorted(totals.items())
    ]

    components = sorted(
        (_to_rollup_component(c) for c in accepted_components),
        key=lambda c: (c.line_item_id, c.title, c.identity_key),
    )

    # sorted() is stable: warnings of one line item keep their emission order.
    warnings.sort(key=lambda w: w.line_item_id or "")

    logger.info(
        "Built rollup for order %s: %d materials, %d components, %d warnings",
        order_id,
        len(materials),
        len(components),
        len(warnings),
    )
    return OrderRollup(
        order_id=order_id,
        materials=materials,
        components=components,
        warnings=warnings,
    )


def _to_rollup_component(component: AcceptedComponent) -> RollupComponent:
    return RollupComponent(
        kind=component.kind or "",
        title=component.title or "",
        qty=normalize_decimal_string(component.qty, 2),
        line_item_id=component.order_line_item_id or "",
        invoice_visibility=component.invoice_visibility or DEFAULT_INVOICE_VISIBILITY,
        sku_ref=component.sku_ref,
        child_product_id=component.child_product_id,
        unit_price_cents=component.unit_price_cents,
        amount_cents=component.amount_cents,
    )
