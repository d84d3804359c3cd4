"""Tests for stock classification against low-stock thresholds."""

import pytest
from warehousing.catalog.product import DEFAULT_LOW_STOCK_THRESHOLD, ProductSnapshot, threshold_for
from warehousing.reporting.alerts import classify


class TestClassify:
    def test_low_and_critical(self):
        status = classify(available=4, threshold=10)
        assert status.critical_threshold == 5
        assert status.is_low_stock is True
        assert status.is_critical is True
        assert status.is_out_of_stock is False

    def test_low_but_not_critical(self):
        status = classify(available=6, threshold=10)
        assert status.is_low_stock is True
        assert status.is_critical is False

    def test_at_threshold_is_low(self):
        assert classify(available=10, threshold=10).is_low_stock is True

    def test_above_threshold_is_healthy(self):
        status = classify(available=11, threshold=10)
        assert not (status.is_low_stock or status.is_critical or status.is_out_of_stock)

    def test_zero_is_out_of_stock_not_critical(self):
        status = classify(available=0, threshold=10)
        assert status.is_out_of_stock is True
        assert status.is_critical is False
        assert status.is_low_stock is False

    @pytest.mark.parametrize(("threshold", "critical"), [(10, 5), (7, 3), (1, 0)])
    def test_critical_threshold_rounds_down(self, threshold, critical):
        assert classify(available=50, threshold=threshold).critical_threshold == critical


class TestThresholdFallback:
    def test_product_threshold_is_used(self):
        product = ProductSnapshot(product_id="p1", name="Mug", sku="MUG", low_stock_threshold=25)
        assert threshold_for(product) == 25

    @pytest.mark.parametrize("value", [None, 0])
    def test_unset_threshold_falls_back(self, value):
        product = ProductSnapshot(product_id="p1", name="Mug", sku="MUG", low_stock_threshold=value)
        assert threshold_for(product) == DEFAULT_LOW_STOCK_THRESHOLD

    def test_missing_product_falls_back(self):
        assert threshold_for(None) == DEFAULT_LOW_STOCK_THRESHOLD
