"""Integration tests for the AcceptComponents use case."""

import pytest

from orderbom.application.accept_components import SNAPSHOT_STALE_CODE, AcceptComponentsHandler
from orderbom.application.show_order_rollup import ShowOrderRollupHandler
from orderbom.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from orderbom.domain.model.order import Order, OrderLineItem
from orderbom.domain.model.rollup import AcceptedComponent
from orderbom.domain.model.tree_version import TREE_VERSION_DRAFT_CODE, TreeVersionStatus
from tests.fakes import FakeOrderRepository, FakeTreeVersionRepository, signed_snapshot

PROPOSALS = [
    {
        "kind": "inlineSku",
        "title": "Laminate",
        "skuRef": "LAM-001",
        "qty": 3,
        "unitPriceCents": 100,
        "amountCents": 300,
        "invoiceVisibility": "rollup",
        "sourceNodeId": "node_a",
        "effectIndex": 0,
    },
    {
        "kind": "childProduct",
        "title": "Stand",
        "childProductId": "prod_9",
        "qty": 1,
        "invoiceVisibility": "separate",
        "sourceNodeId": "node_b",
        "effectIndex": 1,
    },
    # no key: cannot be accepted
    {"kind": "inlineSku", "title": "Orphan", "skuRef": "X", "qty": 1},
]


def _order(snapshot_json: dict | None) -> Order:
    return Order(
        id="ord_1",
        organization_id="org_1",
        line_items=[OrderLineItem(id="li_1", snapshot_json=snapshot_json)],
        accepted_components=[
            AcceptedComponent(
                order_line_item_id="li_1",
                kind="inlineSku",
                title="Laminate",
                qty=2,
                sku_ref="LAM-001",
                unit_price_cents=100,
                amount_cents=200,
                invoice_visibility="rollup",
                source_node_id="node_a",
                effect_index=0,
            ),
            AcceptedComponent(
                order_line_item_id="li_1",
                kind="inlineSku",
                title="Grommet",
                qty=4,
                sku_ref="GR-1",
                invoice_visibility="rollup",
                source_node_id="node_z",
                effect_index=0,
            ),
        ],
    )


def _repos(snapshot_json: dict | None, status=TreeVersionStatus.ACTIVE):
    order_repo = FakeOrderRepository([_order(snapshot_json)])
    tree_version_repo = FakeTreeVersionRepository({"tv_1": status})
    return order_repo, tree_version_repo


class TestAcceptComponents:

    def test_accept_replaces_components_and_reports_diff(self):
        order_repo, tree_version_repo = _repos(signed_snapshot([], childItems=PROPOSALS))

        diff = AcceptComponentsHandler(order_repo, tree_version_repo).handle("ord_1", "li_1")

        assert [m.key.source_node_id for m in diff.modified] == ["node_a"]
        assert diff.modified[0].changed_fields == ("qty", "amount_cents")
        assert [c.key.source_node_id for c in diff.added] == ["node_b"]
        assert [c.key.source_node_id for c in diff.removed] == ["node_z"]

        order = order_repo.get_by_id("ord_1")
        assert [(c.title, c.qty, c.source_node_id, c.effect_index) for c in order.accepted_components] == [
            ("Laminate", "3.00", "node_a", 0),
            ("Stand", "1.00", "node_b", 1),
        ]

    def test_accepting_same_proposals_twice_is_unchanged(self):
        order_repo, tree_version_repo = _repos(signed_snapshot([], childItems=PROPOSALS))
        handler = AcceptComponentsHandler(order_repo, tree_version_repo)

        handler.handle("ord_1", "li_1")
        diff = handler.handle("ord_1", "li_1")

        assert not diff.has_changes
        assert len(diff.unchanged) == 2

    def test_accepted_components_flow_into_rollup(self):
        order_repo, tree_version_repo = _repos(signed_snapshot([], childItems=PROPOSALS))
        AcceptComponentsHandler(order_repo, tree_version_repo).handle("ord_1", "li_1")

        rollup = ShowOrderRollupHandler(order_repo).handle("ord_1")

        assert [(c.title, c.identity_key, c.invoice_visibility) for c in rollup.components] == [
            ("Laminate", "LAM-001", "rollup"),
            ("Stand", "prod_9", "separate"),
        ]

    def test_draft_tree_version_refused(self):
        order_repo, tree_version_repo = _repos(
            signed_snapshot([], childItems=PROPOSALS), status=TreeVersionStatus.DRAFT
        )

        with pytest.raises(ConflictError, match="cannot be accepted") as excinfo:
            AcceptComponentsHandler(order_repo, tree_version_repo).handle("ord_1", "li_1")

        assert excinfo.value.code == TREE_VERSION_DRAFT_CODE
        assert len(order_repo.get_by_id("ord_1").accepted_components) == 2

    def test_stale_snapshot_refused(self):
        snapshot = signed_snapshot([], childItems=PROPOSALS)
        snapshot["explicitSelections"] = {"a": 2}
        order_repo, tree_version_repo = _repos(snapshot)

        with pytest.raises(ConflictError, match="out of date") as excinfo:
            AcceptComponentsHandler(order_repo, tree_version_repo).handle("ord_1", "li_1")

        assert excinfo.value.code == SNAPSHOT_STALE_CODE

    def test_missing_proposals_rejected(self):
        order_repo, tree_version_repo = _repos(signed_snapshot([]))
        with pytest.raises(ValidationError, match="proposals"):
            AcceptComponentsHandler(order_repo, tree_version_repo).handle("ord_1", "li_1")

    def test_missing_snapshot_rejected(self):
        order_repo, tree_version_repo = _repos(None)
        with pytest.raises(ValidationError, match="no pricing snapshot"):
            AcceptComponentsHandler(order_repo, tree_version_repo).handle("ord_1", "li_1")

    def test_unknown_line_item_rejected(self):
        order_repo, tree_version_repo = _repos(signed_snapshot([]))
        with pytest.raises(EntityNotFoundError, match="li_9"):
            AcceptComponentsHandler(order_repo, tree_version_repo).handle("ord_1", "li_9")
