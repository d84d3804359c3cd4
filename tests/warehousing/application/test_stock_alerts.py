"""Application tests for the low-stock report."""

import pytest
from protean import current_domain
from warehousing.reporting.alerts import collect_stock_alerts
from warehousing.warehouse.management import DeactivateWarehouse


@pytest.fixture()
def shelves(make_warehouse, make_product, set_stock):
    for product_id in ("prod-A", "prod-B", "prod-C", "prod-D"):
        make_product(product_id, low_stock_threshold=10)
    wh_id = make_warehouse(code="W1")
    set_stock(wh_id, "prod-A", 5)
    set_stock(wh_id, "prod-B", 6)
    set_stock(wh_id, "prod-C", 4, reserved=4)
    set_stock(wh_id, "prod-D", 50)
    return wh_id


class TestCollectStockAlerts:
    def test_alerts_sorted_by_availability(self, shelves):
        report = collect_stock_alerts()

        assert [a.product_id for a in report.alerts] == ["prod-C", "prod-A", "prod-B"]
        assert report.stats.total_alerts == 3
        assert report.stats.out_of_stock == 1
        assert report.stats.critical == 1
        assert report.stats.low_stock == 2

    def test_alert_fields(self, shelves):
        alert = next(a for a in collect_stock_alerts().alerts if a.product_id == "prod-A")
        assert alert.warehouse_code == "W1"
        assert alert.threshold == 10
        assert alert.critical_threshold == 5
        assert alert.is_critical is True
        assert alert.percentage_remaining == 50.0

    def test_critical_filter_keeps_full_stats(self, shelves):
        report = collect_stock_alerts(critical_only=True)
        assert [a.product_id for a in report.alerts] == ["prod-A"]
        assert report.stats.total_alerts == 3

    def test_out_of_stock_filter(self, shelves):
        report = collect_stock_alerts(out_of_stock_only=True)
        assert [a.product_id for a in report.alerts] == ["prod-C"]
        assert report.alerts[0].percentage_remaining == 0.0

    def test_warehouse_filter(self, shelves, make_warehouse):
        other = make_warehouse(code="W2")
        assert collect_stock_alerts(warehouse_id=other).alerts == []
        assert len(collect_stock_alerts(warehouse_id=shelves).alerts) == 3

    def test_inactive_warehouses_are_ignored(self, shelves):
        current_domain.process(DeactivateWarehouse(warehouse_id=shelves), asynchronous=False)
        assert collect_stock_alerts().stats.total_alerts == 0

    def test_product_without_threshold_uses_default(self, make_warehouse, make_product, set_stock):
        make_product("prod-E", low_stock_threshold=None)
        wh_id = make_warehouse(code="W3")
        set_stock(wh_id, "prod-E", 10)

        alert = collect_stock_alerts().alerts[0]
        assert alert.threshold == 10
        assert alert.is_critical is False


class TestLargeCatalogue:
    def test_every_product_is_considered(self, make_warehouse, make_product, set_stock):
        wh_id = make_warehouse(code="BIG")
        for n in range(120):
            product_id = make_product(f"prod-{n:03d}")
            set_stock(wh_id, product_id, 1)

        report = collect_stock_alerts()
        assert report.stats.total_alerts == 120
        assert len(report.alerts) == 120

    def test_every_active_warehouse_is_scanned(self, make_warehouse, make_product, set_stock):
        make_product("prod-A")
        for n in range(105):
            set_stock(make_warehouse(code=f"W{n:03d}"), "prod-A", 0)

        assert collect_stock_alerts().stats.out_of_stock == 105
