"""JSON-file-backed implementation of OrderRepository.

Line items keep their snapshot JSON verbatim under ``pbv2SnapshotJson`` so
signatures written by other services still verify after a round trip.
"""

from __future__ import annotations

import json
from pathlib import Path

from orderbom.domain.model.order import Order, OrderLineItem
from orderbom.domain.model.rollup import AcceptedComponent
from orderbom.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        orders = self._load_raw()

        # Upsert: replace if exists, otherwise append
        replaced = False
        for i, raw in enumerate(orders):
            if raw["id"] == order.id:
                orders[i] = self._to_raw(order)
                replaced = True
                break
        if not replaced:
            orders.append(self._to_raw(order))

        self._persist_raw(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "organizationId": order.organization_id,
            "lineItems": [
                {"id": item.id, "pbv2SnapshotJson": item.snapshot_json}
                for item in order.line_items
            ],
            "acceptedComponents": [
                {
                    "orderLineItemId": c.order_line_item_id,
                    "kind": c.kind,
                    "title": c.title,
                    "qty": c.qty,
                    "skuRef": c.sku_ref,
                    "childProductId": c.child_product_id,
                    "unitPriceCents": c.unit_price_cents,
                    "amountCents": c.amount_cents,
                    "invoiceVisibility": c.invoice_visibility,
                    "pbv2SourceNodeId": c.source_node_id,
                    "pbv2EffectIndex": c.effect_index,
                }
                for c in order.accepted_components
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        return Order(
            id=raw["id"],
            organization_id=raw["organizationId"],
            line_items=[
                OrderLineItem(id=item["id"], snapshot_json=item.get("pbv2SnapshotJson"))
                for item in raw.get("lineItems", [])
            ],
            accepted_components=[
                AcceptedComponent(
                    order_line_item_id=c["orderLineItemId"],
                    kind=c.get("kind", ""),
                    title=c.get("title", ""),
                    qty=c.get("qty"),
                    sku_ref=c.get("skuRef"),
                    child_product_id=c.get("childProductId"),
                    unit_price_cents=c.get("unitPriceCents"),
                    amount_cents=c.get("amountCents"),
                    invoice_visibility=c.get("invoiceVisibility"),
                    source_node_id=c.get("pbv2SourceNodeId"),
                    effect_index=c.get("pbv2EffectIndex"),
                )
                for c in raw.get("acceptedComponents", [])
            ],
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
