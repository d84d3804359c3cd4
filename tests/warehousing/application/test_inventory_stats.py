"""Application tests for inventory statistics and the warehouse inventory view."""

import json

import pytest
from protean import current_domain
from warehousing.adjustment.proposal import ProposeAdjustment
from warehousing.reporting.stats import compute_inventory_stats, warehouse_inventory
from warehousing.transfer.lifecycle import DispatchTransfer
from warehousing.transfer.requesting import RequestTransfer


@pytest.fixture()
def fleet(make_warehouse, make_product, set_stock):
    make_product("prod-A", title="Blue Widget", sku="WID-BLU", price=2.5)
    make_product("prod-B", title="Red Gadget", sku="GAD-RED", price=10.0)
    w1 = make_warehouse(code="W1")
    w2 = make_warehouse(code="W2")
    set_stock(w1, "prod-A", 40, reserved=5)
    set_stock(w1, "prod-B", 3)
    set_stock(w2, "prod-A", 0)
    return w1, w2


class TestComputeInventoryStats:
    def test_overview(self, fleet):
        overview = compute_inventory_stats().overview

        assert overview.total_warehouses == 2
        assert overview.total_products == 2
        assert overview.total_quantity == 43
        assert overview.total_reserved == 5
        assert overview.total_available == 38
        assert overview.total_value == 130.0
        assert overview.low_stock_count == 1
        assert overview.out_of_stock_count == 1

    def test_top_products_by_quantity(self, fleet):
        top = compute_inventory_stats().top_products
        assert [p.product_id for p in top] == ["prod-A", "prod-B"]
        assert top[0].value == 100.0

    def test_transfer_and_adjustment_counts(self, fleet):
        w1, w2 = fleet
        for _ in range(2):
            current_domain.process(
                RequestTransfer(
                    from_warehouse_id=w1,
                    to_warehouse_id=w2,
                    lines=json.dumps([{"product_id": "prod-A", "quantity": 2}]),
                ),
                asynchronous=False,
            )
        trf_id = current_domain.process(
            RequestTransfer(
                from_warehouse_id=w1,
                to_warehouse_id=w2,
                lines=json.dumps([{"product_id": "prod-A", "quantity": 1}]),
            ),
            asynchronous=False,
        )
        current_domain.process(DispatchTransfer(transfer_id=trf_id), asynchronous=False)
        current_domain.process(
            ProposeAdjustment(
                warehouse_id=w1,
                lines=json.dumps([{"product_id": "prod-B", "previous_quantity": 3, "new_quantity": 2}]),
                reason="damaged",
            ),
            asynchronous=False,
        )

        stats = compute_inventory_stats()
        assert stats.transfers.pending == 2
        assert stats.transfers.in_transit == 1
        assert stats.transfers.total == 3
        assert stats.pending_adjustments == 1

    def test_warehouse_summaries(self, fleet):
        w1, _ = fleet
        summary = next(s for s in compute_inventory_stats().warehouses if s.warehouse_id == w1)
        assert summary.item_count == 2
        assert summary.total_quantity == 43
        assert summary.total_available == 38
        assert summary.low_stock_count == 1

    def test_empty_fleet(self):
        stats = compute_inventory_stats()
        assert stats.overview.total_warehouses == 0
        assert stats.top_products == []


class TestWarehouseInventory:
    def test_lines_joined_with_products(self, fleet):
        w1, _ = fleet
        view = warehouse_inventory(w1)

        assert view.summary.code == "W1"
        lines = {line.product_id: line for line in view.lines}
        assert lines["prod-A"].name == "Blue Widget"
        assert lines["prod-A"].available == 35
        assert lines["prod-B"].is_low_stock is True

    def test_search_by_name_or_sku(self, fleet):
        w1, _ = fleet
        assert [line.product_id for line in warehouse_inventory(w1, search="widget").lines] == ["prod-A"]
        assert [line.product_id for line in warehouse_inventory(w1, search="gad-").lines] == ["prod-B"]

    def test_low_stock_filter_keeps_full_summary(self, fleet):
        w1, _ = fleet
        view = warehouse_inventory(w1, low_stock_only=True)
        assert [line.product_id for line in view.lines] == ["prod-B"]
        assert view.summary.item_count == 2


class TestLargeVolumes:
    def test_counts_are_not_truncated(self, make_warehouse, make_product, set_stock):
        make_product("prod-A", price=1.0)
        w1 = make_warehouse(code="SRC")
        w2 = make_warehouse(code="DST")
        set_stock(w1, "prod-A", 500)
        for _ in range(110):
            current_domain.process(
                RequestTransfer(
                    from_warehouse_id=w1,
                    to_warehouse_id=w2,
                    lines=json.dumps([{"product_id": "prod-A", "quantity": 1}]),
                ),
                asynchronous=False,
            )
        for _ in range(104):
            current_domain.process(
                ProposeAdjustment(
                    warehouse_id=w1,
                    lines=json.dumps([{"product_id": "prod-A", "previous_quantity": 500, "new_quantity": 499}]),
                    reason="correction",
                ),
                asynchronous=False,
            )

        stats = compute_inventory_stats()
        assert stats.transfers.pending == 110
        assert stats.pending_adjustments == 104

    def test_overview_covers_every_warehouse_and_product(self, make_warehouse, make_product, set_stock):
        wh_id = make_warehouse(code="BIG")
        for n in range(120):
            set_stock(wh_id, make_product(f"prod-{n:03d}", price=1.0), 2)
        for n in range(101):
            make_warehouse(code=f"W{n:03d}")

        overview = compute_inventory_stats().overview
        assert overview.total_warehouses == 102
        assert overview.total_products == 120
        assert overview.total_quantity == 240
