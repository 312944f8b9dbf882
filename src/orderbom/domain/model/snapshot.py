"""PricingSnapshot — the frozen pricing record stored on a line item.

Snapshots arrive as loosely-typed JSON written by the upstream pricing
evaluator.  ``PricingSnapshot.from_json`` validates and normalizes them once,
at the boundary, so the rollup never has to poke at raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Key used by the persistence layer; ``inputSignature`` is accepted on read.
SIGNATURE_KEY = "pbv2InputSignature"
LEGACY_SIGNATURE_KEY = "inputSignature"


def _str_or_empty(value: Any) -> str:
    if not value:
        return ""
    return str(value)


def _is_present(value: Any) -> bool:
    """Presence as the evaluator sees it: falsy scalars are missing, containers never."""
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


@dataclass(frozen=True)
class SnapshotMaterial:
    """One raw material usage entry contributed by a line item."""

    sku_ref: str
    uom: str
    qty: Any  # raw value; parsed by ScaledQuantity at aggregation time
    source_node_id: str = ""

    @staticmethod
    def from_json(raw: dict) -> SnapshotMaterial:
        return SnapshotMaterial(
            sku_ref=_str_or_empty(raw.get("skuRef")),
            uom=_str_or_empty(raw.get("uom")),
            qty=raw.get("qty"),
            source_node_id=_str_or_empty(raw.get("sourceNodeId")),
        )

    def to_json(self) -> dict:
        return {
            "skuRef": self.sku_ref,
            "uom": self.uom,
            "qty": self.qty,
            "sourceNodeId": self.source_node_id,
        }


@dataclass(frozen=True)
class ChildItemProposal:
    """A child component the evaluator proposes for a line item."""

    kind: str
    title: str
    qty: Any
    sku_ref: str | None = None
    child_product_id: str | None = None
    unit_price_cents: Any = None
    amount_cents: Any = None
    invoice_visibility: str | None = None
    source_node_id: str | None = None
    effect_index: Any = None
    # JSON keys seen on read; optional keys outside this set are not written back
    present_keys: frozenset[str] = field(default=frozenset(), compare=False)

    @staticmethod
    def from_json(raw: dict) -> ChildItemProposal:
        return ChildItemProposal(
            kind=_str_or_empty(raw.get("kind")),
            title=_str_or_empty(raw.get("title")),
            qty=raw.get("qty"),
            sku_ref=_str_or_none(raw.get("skuRef")),
            child_product_id=_str_or_none(raw.get("childProductId")),
            unit_price_cents=raw.get("unitPriceCents"),
            amount_cents=raw.get("amountCents"),
            invoice_visibility=_str_or_none(raw.get("invoiceVisibility")),
            source_node_id=_str_or_none(raw.get("sourceNodeId")),
            effect_index=raw.get("effectIndex"),
            present_keys=frozenset(raw),
        )

    def to_json(self) -> dict:
        raw = {"kind": self.kind, "title": self.title, "qty": self.qty}
        optional = {
            "skuRef": self.sku_ref,
            "childProductId": self.child_product_id,
            "unitPriceCents": self.unit_price_cents,
            "amountCents": self.amount_cents,
            "invoiceVisibility": self.invoice_visibility,
            "sourceNodeId": self.source_node_id,
            "effectIndex": self.effect_index,
        }
        for key, value in optional.items():
            if value is not None or key in self.present_keys:
                raw[key] = value
        return raw


@dataclass(frozen=True)
class PricingSnapshot:
    """Parsed view of a line item's ``pbv2SnapshotJson``.

    ``explicit_selections`` and ``env`` stay opaque JSON values: they are
    only ever hashed, never interpreted.  ``None`` means the key was absent;
    ``None``, ``False``, ``0`` and ``""`` all count as missing inputs.
    """

    tree_version_id: str
    explicit_selections: Any
    env: Any
    input_signature: str = ""
    materials: tuple[SnapshotMaterial, ...] = ()
    child_items: tuple[ChildItemProposal, ...] | None = None
    extra: dict = field(default_factory=dict, compare=False)

    @property
    def has_signature(self) -> bool:
        return bool(self.input_signature)

    @property
    def has_inputs(self) -> bool:
        return (
            bool(self.tree_version_id)
            and _is_present(self.explicit_selections)
            and _is_present(self.env)
        )

    # --- Boundary conversion --------------------------------------------------

    @staticmethod
    def from_json(raw: Any) -> PricingSnapshot | None:
        """Parse stored snapshot JSON; non-object input yields None."""
        if not isinstance(raw, dict):
            return None

        signature = raw.get(SIGNATURE_KEY)
        if not isinstance(signature, str):
            signature = raw.get(LEGACY_SIGNATURE_KEY)
        if not isinstance(signature, str):
            signature = ""

        raw_materials = raw.get("materials")
        materials = tuple(
            SnapshotMaterial.from_json(m)
            for m in (raw_materials if isinstance(raw_materials, list) else [])
            if isinstance(m, dict)
        )

        raw_children = raw.get("childItems")
        child_items = None
        if isinstance(raw_children, list):
            child_items = tuple(
                ChildItemProposal.from_json(c) for c in raw_children if isinstance(c, dict)
            )

        known = {
            "treeVersionId",
            "explicitSelections",
            "env",
            "materials",
            "childItems",
            SIGNATURE_KEY,
            LEGACY_SIGNATURE_KEY,
        }
        return PricingSnapshot(
            tree_version_id=_str_or_empty(raw.get("treeVersionId")),
            explicit_selections=raw.get("explicitSelections"),
            env=raw.get("env"),
            input_signature=signature,
            materials=materials,
            child_items=child_items,
            extra={k: v for k, v in raw.items() if k not in known},
        )

    def to_json(self) -> dict:
        """Serialize back to the stored shape, preserving unknown keys."""
        raw = dict(self.extra)
        raw["treeVersionId"] = self.tree_version_id
        raw["explicitSelections"] = self.explicit_selections
        raw["env"] = self.env
        raw["materials"] = [m.to_json() for m in self.materials]
        if self.child_items is not None:
            raw["childItems"] = [c.to_json() for c in self.child_items]
        raw[SIGNATURE_KEY] = self.input_signature
        return raw
