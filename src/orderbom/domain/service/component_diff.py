"""Domain service: diff accepted components against fresh proposals.

Components are matched by ``(source_node_id, effect_index)``, the pricing
node and effect that produced them, so a re-priced line item can show the
user exactly which child items were added, removed or changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from orderbom.domain.model.value_objects import normalize_decimal_string, parse_decimal

# Order in which changed fields are reported.
DIFF_FIELDS = (
    "qty",
    "unit_price_cents",
    "amount_cents",
    "title",
    "sku_ref",
    "child_product_id",
    "invoice_visibility",
    "kind",
)


@dataclass(frozen=True, order=True)
class ComponentKey:
    source_node_id: str
    effect_index: int


@dataclass(frozen=True)
class ComparableComponent:
    key: ComponentKey
    kind: str
    title: str
    sku_ref: str | None
    child_product_id: str | None
    qty: str  # fixed 2 decimals
    unit_price_cents: int | None
    amount_cents: int | None
    invoice_visibility: str


@dataclass(frozen=True)
class ModifiedComponent:
    key: ComponentKey
    before: ComparableComponent
    after: ComparableComponent
    changed_fields: tuple[str, ...]


@dataclass(frozen=True)
class ComponentDiff:
    unchanged: list[ComparableComponent] = field(default_factory=list)
    added: list[ComparableComponent] = field(default_factory=list)
    removed: list[ComparableComponent] = field(default_factory=list)
    modified: list[ModifiedComponent] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _int_or_none(value: Any) -> int | None:
    parsed = parse_decimal(value)
    if parsed is None:
        return None
    return int(parsed)  # truncates toward zero


def normalize_component_for_diff(
    *,
    source_node_id: Any,
    effect_index: Any,
    kind: Any,
    title: Any,
    qty: Any,
    invoice_visibility: Any,
    sku_ref: Any = None,
    child_product_id: Any = None,
    unit_price_cents: Any = None,
    amount_cents: Any = None,
) -> ComparableComponent | None:
    """Normalize raw component fields; None when the component has no key."""
    node_id = _str_or_none(source_node_id)
    index = _int_or_none(effect_index)
    if not node_id or index is None:
        return None

    return ComparableComponent(
        key=ComponentKey(node_id, index),
        kind="" if kind is None else str(kind),
        title="" if title is None else str(title),
        sku_ref=_str_or_none(sku_ref),
        child_product_id=_str_or_none(child_product_id),
        qty=normalize_decimal_string(qty, 2),
        unit_price_cents=_int_or_none(unit_price_cents),
        amount_cents=_int_or_none(amount_cents),
        invoice_visibility="" if invoice_visibility is None else str(invoice_visibility),
    )


def _changed_fields(before: ComparableComponent, after: ComparableComponent) -> tuple[str, ...]:
    return tuple(
        name for name in DIFF_FIELDS if getattr(before, name) != getattr(after, name)
    )


def diff_components(
    accepted: list[ComparableComponent],
    proposed: list[ComparableComponent],
) -> ComponentDiff:
    accepted_by_key = {c.key: c for c in accepted}
    proposed_by_key = {c.key: c for c in proposed}

    diff = ComponentDiff()
    for key in sorted(accepted_by_key.keys() | proposed_by_key.keys()):
        before = accepted_by_key.get(key)
        after = proposed_by_key.get(key)
        if before is None:
            diff.added.append(after)
        elif after is None:
            diff.removed.append(before)
        else:
            changed = _changed_fields(before, after)
            if changed:
                diff.modified.append(ModifiedComponent(key, before, after, changed))
            else:
                diff.unchanged.append(before)
    return diff
