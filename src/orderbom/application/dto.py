"""Data Transfer Objects — plain containers that cross layer boundaries.

The ``*_to_payload`` helpers produce the JSON shapes exposed to clients.
The rollup payload is a stability contract: field names, nesting and list
order must not change without a version bump.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from orderbom.domain.model.reservation import (
    InventoryReservation,
    ReservationRollupView,
)
from orderbom.domain.model.rollup import OrderRollup, RollupWarning
from orderbom.domain.service.component_diff import ComparableComponent, ComponentDiff


@dataclass(frozen=True)
class ReservationResult:
    """Output of a reserve run: what was inserted and what already existed."""

    inserted: list[InventoryReservation]
    already_reserved: list[InventoryReservation]
    warnings: list[RollupWarning] = field(default_factory=list)


def rollup_to_payload(rollup: OrderRollup) -> dict:
    return {
        "orderId": rollup.order_id,
        "materials": [
            {
                "skuRef": m.sku_ref,
                "uom": m.uom,
                "qty": m.qty,
                "sources": [
                    {
                        "lineItemId": s.line_item_id,
                        "sourceNodeId": s.source_node_id,
                        "effectIndex": s.effect_index,
                        "qty": s.qty,
                    }
                    for s in m.sources
                ],
            }
            for m in rollup.materials
        ],
        "components": [
            {
                "kind": c.kind,
                "skuRef": c.sku_ref,
                "childProductId": c.child_product_id,
                "title": c.title,
                "invoiceVisibility": c.invoice_visibility,
                "qty": c.qty,
                "unitPriceCents": c.unit_price_cents,
                "amountCents": c.amount_cents,
                "lineItemId": c.line_item_id,
            }
            for c in rollup.components
        ],
        "warnings": [warning_to_payload(w) for w in rollup.warnings],
    }


def warning_to_payload(warning: RollupWarning) -> dict:
    payload = {"code": warning.code.value, "message": warning.message}
    if warning.line_item_id is not None:
        payload["lineItemId"] = warning.line_item_id
    return payload


def reservation_to_payload(row: InventoryReservation) -> dict:
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


def rollup_view_to_payload(view: ReservationRollupView) -> dict:
    return {
        "items": [
            {
                "sourceKey": item.source_key,
                "uom": item.uom,
                "qty": item.qty,
                "bySourceType": dict(item.by_source_type),
            }
            for item in view.items
        ]
    }


_FIELD_NAMES = {
    "qty": "qty",
    "unit_price_cents": "unitPriceCents",
    "amount_cents": "amountCents",
    "title": "title",
    "sku_ref": "skuRef",
    "child_product_id": "childProductId",
    "invoice_visibility": "invoiceVisibility",
    "kind": "kind",
}


def _component_to_payload(c: ComparableComponent) -> dict:
    return {
        "key": {"pbv2SourceNodeId": c.key.source_node_id, "pbv2EffectIndex": c.key.effect_index},
        "kind": c.kind,
        "title": c.title,
        "skuRef": c.sku_ref,
        "childProductId": c.child_product_id,
        "qty": c.qty,
        "unitPriceCents": c.unit_price_cents,
        "amountCents": c.amount_cents,
        "invoiceVisibility": c.invoice_visibility,
    }


def component_diff_to_payload(diff: ComponentDiff) -> dict:
    return {
        "unchanged": [_component_to_payload(c) for c in diff.unchanged],
        "added": [_component_to_payload(c) for c in diff.added],
        "removed": [_component_to_payload(c) for c in diff.removed],
        "modified": [
            {
                "key": {
                    "pbv2SourceNodeId": m.key.source_node_id,
                    "pbv2EffectIndex": m.key.effect_index,
                },
                "before": _component_to_payload(m.before),
                "after": _component_to_payload(m.after),
                "changedFields": [_FIELD_NAMES[name] for name in m.changed_fields],
            }
            for m in diff.modified
        ],
    }
