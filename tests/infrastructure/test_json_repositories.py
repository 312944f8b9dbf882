"""Tests for the JSON-file repositories."""

import json

import pytest

from orderbom.domain.exceptions import EntityNotFoundError
from orderbom.domain.model.order import Order, OrderLineItem
from orderbom.domain.model.reservation import (
    InventoryReservation,
    ReservationSourceType,
    ReservationStatus,
)
from orderbom.domain.model.rollup import AcceptedComponent
from orderbom.domain.model.tree_version import TreeVersionStatus
from orderbom.domain.service.order_rollup_service import build_order_rollup
from orderbom.infrastructure.persistence.json_order_repository import JsonOrderRepository
from orderbom.infrastructure.persistence.json_reservation_repository import (
    JsonReservationRepository,
)
from orderbom.infrastructure.persistence.json_tree_version_repository import (
    JsonTreeVersionRepository,
)
from tests.fakes import signed_snapshot


def _reservation(source_key: str) -> InventoryReservation:
    return InventoryReservation(
        organization_id="org_1",
        order_id="ord_1",
        order_line_item_id=None,
        source_type=ReservationSourceType.PBV2_MATERIAL,
        source_key=source_key,
        uom="EA",
        qty="1.00",
    )


class TestJsonOrderRepository:

    def test_creates_missing_file(self, tmp_path):
        path = tmp_path / "nested" / "orders.json"
        repo = JsonOrderRepository(path)
        assert json.loads(path.read_text()) == []
        assert repo.get_by_id("ord_1") is None

    def test_round_trip_keeps_signature_valid(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        snapshot = signed_snapshot(
            [{"skuRef": "MAT-A", "uom": "EA", "qty": 0.1, "sourceNodeId": "n1"}],
            env={"widthIn": 12.5, "heightIn": 1e21, "quantity": 3},
        )
        order = Order(
            id="ord_1",
            organization_id="org_1",
            line_items=[OrderLineItem(id="li_1", snapshot_json=snapshot)],
            accepted_components=[
                AcceptedComponent(
                    order_line_item_id="li_1",
                    kind="inlineSku",
                    title="Laminate",
                    qty="2.00",
                    sku_ref="LAM-001",
                    source_node_id="node_a",
                    effect_index=0,
                )
            ],
        )
        repo.save(order)

        loaded = repo.get_by_id("ord_1")

        assert loaded == order
        assert build_order_rollup(loaded.id, loaded.line_items, loaded.accepted_components).warnings == []

    def test_save_upserts(self, tmp_path):
        path = tmp_path / "orders.json"
        repo = JsonOrderRepository(path)
        order = Order(id="ord_1", organization_id="org_1")
        repo.save(order)
        order.line_items.append(OrderLineItem(id="li_1"))
        repo.save(order)

        raw = json.loads(path.read_text())
        assert len(raw) == 1
        assert raw[0]["lineItems"] == [{"id": "li_1", "pbv2SnapshotJson": None}]


class TestJsonReservationRepository:

    def test_add_assigns_sequential_ids(self, tmp_path):
        repo = JsonReservationRepository(tmp_path / "reservations.json")

        first = repo.add_all([_reservation("MAT-A")])
        second = repo.add_all([_reservation("MAT-B"), _reservation("MAT-C")])

        assert [r.id for r in first + second] == ["res_1", "res_2", "res_3"]
        assert [r.source_key for r in repo.list_for_order("ord_1")] == ["MAT-A", "MAT-B", "MAT-C"]
        assert repo.list_for_order("ord_2") == []

    def test_update_flips_status(self, tmp_path):
        repo = JsonReservationRepository(tmp_path / "reservations.json")
        [row] = repo.add_all([_reservation("MAT-A")])

        repo.update_all([row.released()])

        assert repo.list_for_order("ord_1")[0].status == ReservationStatus.RELEASED

    def test_update_unknown_row_rejected(self, tmp_path):
        repo = JsonReservationRepository(tmp_path / "reservations.json")
        with pytest.raises(EntityNotFoundError):
            repo.update_all([_reservation("MAT-A")])


class TestJsonTreeVersionRepository:

    def test_reads_status_case_insensitively(self, tmp_path):
        path = tmp_path / "tree_versions.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "tv_1", "status": "draft"},
                    {"id": "tv_2", "status": "PUBLISHED"},
                    {"id": "tv_3", "status": "RETIRED"},
                ]
            )
        )
        repo = JsonTreeVersionRepository(path)

        assert repo.get_status("tv_1") == TreeVersionStatus.DRAFT
        assert repo.get_status("tv_2") == TreeVersionStatus.PUBLISHED
        assert repo.get_status("tv_3") is None
        assert repo.get_status("tv_404") is None
