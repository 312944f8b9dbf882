"""Unit tests for the inventory reservation domain service."""

import pytest

from orderbom.domain.model.reservation import (
    InventoryReservation,
    ReservationSourceType,
    ReservationStatus,
)
from orderbom.domain.model.rollup import MaterialAggregate, OrderRollup, RollupComponent
from orderbom.domain.service.inventory_reservation_service import (
    apply_release,
    build_reservations_from_rollup,
    build_rollup_view,
    diff_for_insert,
    group_reservations_by_material,
    sum_manual_reserved,
)

MATERIAL = ReservationSourceType.PBV2_MATERIAL
COMPONENT = ReservationSourceType.PBV2_COMPONENT
MANUAL = ReservationSourceType.MANUAL


def _row(
    source_type: ReservationSourceType,
    source_key: str,
    uom: str = "EA",
    qty: str = "1.00",
    status: ReservationStatus = ReservationStatus.RESERVED,
) -> InventoryReservation:
    return InventoryReservation(
        organization_id="org_1",
        order_id="ord_1",
        order_line_item_id=None,
        source_type=source_type,
        source_key=source_key,
        uom=uom,
        qty=qty,
        status=status,
    )


def _rollup() -> OrderRollup:
    # intentionally out of order
    return OrderRollup(
        order_id="ord_1",
        materials=[
            MaterialAggregate(sku_ref="MAT-B", uom="FT", qty="3"),
            MaterialAggregate(sku_ref="MAT-A", uom="EA", qty="2.2"),
            MaterialAggregate(sku_ref="MAT-A", uom="EA", qty="1.1"),
        ],
        components=[
            RollupComponent(kind="inlineSku", title="Laminate", qty="2.00", line_item_id="li_1", sku_ref="LAM-001"),
            RollupComponent(kind="childProduct", title="Stand", qty="1.00", line_item_id="li_1", child_product_id="prod_123"),
        ],
    )


class TestBuildReservationsFromRollup:

    def test_aggregates_and_sorts_deterministically(self):
        rows = build_reservations_from_rollup("org_1", "ord_1", _rollup(), created_by_user_id="user_1")

        keys = [(r.source_key, r.uom, r.source_type.value) for r in rows]
        assert keys == sorted(keys)
        assert keys == [
            ("LAM-001", "EA", "PBV2_COMPONENT"),
            ("MAT-A", "EA", "PBV2_MATERIAL"),
            ("MAT-B", "FT", "PBV2_MATERIAL"),
            ("prod_123", "EA", "PBV2_COMPONENT"),
        ]

    def test_material_row_fields(self):
        rows = build_reservations_from_rollup("org_1", "ord_1", _rollup(), created_by_user_id="user_1")

        mat_a = next(r for r in rows if r.source_type == MATERIAL and r.source_key == "MAT-A")
        assert mat_a == InventoryReservation(
            organization_id="org_1",
            order_id="ord_1",
            order_line_item_id=None,
            source_type=MATERIAL,
            source_key="MAT-A",
            uom="EA",
            qty="3.30",
            status=ReservationStatus.RESERVED,
            created_by_user_id="user_1",
        )

    def test_components_reserved_as_each(self):
        rows = build_reservations_from_rollup("org_1", "ord_1", _rollup())

        lam = next(r for r in rows if r.source_key == "LAM-001")
        assert (lam.source_type, lam.uom, lam.qty) == (COMPONENT, "EA", "2.00")
        assert lam.created_by_user_id is None

    def test_same_component_on_two_line_items_is_summed(self):
        rollup = OrderRollup(
            order_id="ord_1",
            components=[
                RollupComponent(kind="inlineSku", title="Grommet", qty="4.00", line_item_id="li_1", sku_ref="GR-1"),
                RollupComponent(kind="inlineSku", title="Grommet", qty="0.25", line_item_id="li_2", sku_ref="GR-1"),
            ],
        )
        rows = build_reservations_from_rollup("org_1", "ord_1", rollup)
        assert [(r.source_key, r.qty) for r in rows] == [("GR-1", "4.25")]

    def test_material_and_component_with_same_key_stay_separate(self):
        rollup = OrderRollup(
            order_id="ord_1",
            materials=[MaterialAggregate(sku_ref="X-1", uom="EA", qty="1")],
            components=[RollupComponent(kind="inlineSku", title="X", qty="2.00", line_item_id="li_1", sku_ref="X-1")],
        )
        rows = build_reservations_from_rollup("org_1", "ord_1", rollup)
        assert [(r.source_type, r.qty) for r in rows] == [(COMPONENT, "2.00"), (MATERIAL, "1.00")]

    def test_zero_and_keyless_rows_dropped(self):
        rollup = OrderRollup(
            order_id="ord_1",
            materials=[MaterialAggregate(sku_ref="MAT-A", uom="EA", qty="0.001")],
            components=[
                RollupComponent(kind="inlineSku", title="No SKU", qty="1.00", line_item_id="li_1"),
                RollupComponent(kind="inlineSku", title="Zero", qty="0.00", line_item_id="li_1", sku_ref="Z"),
            ],
        )
        assert build_reservations_from_rollup("org_1", "ord_1", rollup) == []


class TestDiffForInsert:

    def test_fully_reserved_yields_nothing(self):
        desired = build_reservations_from_rollup("org_1", "ord_1", _rollup())
        assert diff_for_insert(desired, desired) == []

    def test_second_run_is_idempotent(self):
        desired = build_reservations_from_rollup("org_1", "ord_1", _rollup())
        inserted = diff_for_insert(desired, [])
        assert inserted == desired
        assert diff_for_insert(desired, inserted) == []

    def test_released_rows_do_not_block(self):
        desired = [_row(MATERIAL, "MAT-A", qty="3.30"), _row(COMPONENT, "LAM-001", qty="2.00")]
        existing = [
            _row(COMPONENT, "LAM-001", status=ReservationStatus.RESERVED),
            _row(MATERIAL, "MAT-A", status=ReservationStatus.RELEASED),
        ]

        to_insert = diff_for_insert(desired, existing)

        assert [(r.source_type, r.source_key, r.uom) for r in to_insert] == [(MATERIAL, "MAT-A", "EA")]

    def test_released_only_returns_full_desired(self):
        desired = [_row(MATERIAL, "MAT-A", qty="3.30")]
        released = apply_release(desired)
        assert diff_for_insert(desired, released) == desired

    def test_key_includes_source_type_and_uom(self):
        desired = [_row(MATERIAL, "MAT-A", uom="FT"), _row(COMPONENT, "MAT-A")]
        existing = [_row(MATERIAL, "MAT-A", uom="EA")]
        assert diff_for_insert(desired, existing) == desired


class TestApplyRelease:

    def test_flips_status_and_keeps_fields(self):
        rows = [_row(MATERIAL, "MAT-A", qty="3.30"), _row(COMPONENT, "LAM-001", qty="2.00")]

        released = apply_release(rows)

        assert [r.status for r in released] == [ReservationStatus.RELEASED] * 2
        assert [(r.source_key, r.qty) for r in released] == [("MAT-A", "3.30"), ("LAM-001", "2.00")]
        # inputs are untouched
        assert all(r.status == ReservationStatus.RESERVED for r in rows)

    def test_release_is_idempotent(self):
        once = apply_release([_row(MATERIAL, "MAT-A")])
        assert apply_release(once) == once


class TestBuildRollupView:

    def test_groups_and_breaks_down_by_source_type(self):
        view = build_rollup_view(
            [
                _row(MATERIAL, "MAT-A", qty="3.30"),
                _row(COMPONENT, "MAT-A", qty="2.00"),
                _row(MANUAL, "MAT-A", qty="1.00"),
                _row(MATERIAL, "MAT-B", uom="FT", qty="3.00"),
                _row(MATERIAL, "MAT-A", qty="999.00", status=ReservationStatus.RELEASED),
            ]
        )

        assert [(i.source_key, i.uom, i.qty, i.by_source_type) for i in view.items] == [
            ("MAT-A", "EA", "6.30", {"PBV2_MATERIAL": "3.30", "PBV2_COMPONENT": "2.00", "MANUAL": "1.00"}),
            ("MAT-B", "FT", "3.00", {"PBV2_MATERIAL": "3.00", "PBV2_COMPONENT": "0.00", "MANUAL": "0.00"}),
        ]

    def test_released_view(self):
        view = build_rollup_view(
            [
                _row(MATERIAL, "MAT-A", qty="3.30"),
                _row(MATERIAL, "MAT-A", qty="999.00", status=ReservationStatus.RELEASED),
            ],
            status="RELEASED",
        )
        assert view.status == ReservationStatus.RELEASED
        assert [(i.source_key, i.qty) for i in view.items] == [("MAT-A", "999.00")]

    def test_many_small_rows_do_not_drift(self):
        rows = [_row(MANUAL, "MAT-A", qty="0.10") for _ in range(30)]
        view = build_rollup_view(rows)
        assert view.items[0].qty == "3.00"

    def test_ignores_non_positive(self):
        view = build_rollup_view([_row(MANUAL, "MAT-A", qty="0"), _row(MANUAL, "MAT-A", qty="-1")])
        assert view.items == []

    def test_invalid_status_rejected(self):
        with pytest.raises(ValueError):
            build_rollup_view([], status="PENDING")


class TestManualReservationGroups:

    def test_manual_separated_from_engine_rows(self):
        groups = group_reservations_by_material(
            [
                _row(MATERIAL, "MAT-001", qty="2.00"),
                _row(MANUAL, "MAT-001", qty="1"),
                _row(MANUAL, "MAT-001", qty="1.25"),
                _row(MANUAL, "MAT-002", qty="0"),
                _row(MANUAL, "MAT-001", qty="5.00", status=ReservationStatus.RELEASED),
            ]
        )
        assert [(g.source_key, g.total_qty, g.manual_qty, g.non_manual_qty) for g in groups] == [
            ("MAT-001", "4.25", "2.25", "2.00"),
        ]

    def test_sum_manual_reserved(self):
        rows = [
            _row(MATERIAL, "MAT-001", qty="100"),
            _row(MANUAL, "MAT-001", qty="1.5"),
            _row(MANUAL, "MAT-001", qty="0"),
            _row(MANUAL, "MAT-002", qty="9"),
            _row(MANUAL, "MAT-001", qty="1", status=ReservationStatus.RELEASED),
        ]
        assert sum_manual_reserved(rows, "MAT-001", "EA") == "1.50"
