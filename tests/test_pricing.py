"""
Unit tests for the quote, spend, ROI and cost-preview calculators.
"""

from __future__ import annotations

import pytest

from copallet_api.app.schemas.calculator import CostModelParams
from copallet_api.app.services.pricing import (
    calculate_roi,
    estimate_spend,
    preview_costs,
    quote_price,
    roi_for_model_row,
)


@pytest.fixture
def model() -> CostModelParams:
    return CostModelParams(
        cost_per_km=1.0,
        driver_cost_per_hour=30,
        load_time_minutes=30,
        unload_time_minutes=30,
        average_speed_kmh=60,
        platform_fee_percentage=10,
        fuel_cost_per_km=0.1,
        maintenance_cost_per_km=0.05,
        insurance_cost_per_km=0.05,
    )


class TestQuote:
    def test_itemised_quote(self) -> None:
        quote = quote_price(distance=100, pallets=2, weight=3000, adr_required=True)
        assert quote.distance_cost == 120
        assert quote.pallet_cost == 50
        # 1500 kg per pallet, 500 kg over the threshold on each of 2 pallets
        assert quote.weight_surcharge == 100
        assert quote.extras == 200
        assert quote.price == 620

    def test_delivery_multiplier(self) -> None:
        quote = quote_price(distance=100, pallets=2, weight=3000, delivery_type="express", adr_required=True)
        assert quote.multiplier == 1.5
        assert quote.price == 930

    def test_light_pallets_have_no_surcharge(self) -> None:
        quote = quote_price(distance=50, pallets=1, weight=800, tail_lift_required=True)
        assert quote.weight_surcharge == 0
        assert quote.price == 150 + 60 + 25 + 50

    @pytest.mark.parametrize("distance,pallets", [(0, 3), (120, 0)])
    def test_missing_inputs_give_no_price(self, distance: float, pallets: int) -> None:
        assert quote_price(distance=distance, pallets=pallets).price is None


class TestSpend:
    def test_standard_spend(self) -> None:
        spend = estimate_spend(distance=100, pallets=2, weight_per_pallet=500)
        assert spend.base_rate == 50
        assert spend.distance_cost == 30
        assert spend.weight_cost == 20
        assert spend.subtotal == 100
        assert spend.platform_fee == 3
        assert spend.total == 103
        assert spend.savings == pytest.approx(20.6)

    def test_multipliers_and_insurance(self) -> None:
        spend = estimate_spend(
            distance=100, pallets=2, weight_per_pallet=500,
            urgency="urgent", service_type="white_glove", insurance_value=10000,
        )
        assert spend.urgency_multiplier == 1.6
        assert spend.service_multiplier == 1.4
        assert spend.insurance == 50
        assert spend.subtotal == pytest.approx(100 * 1.6 * 1.4 + 50)


class TestROI:
    def test_profitable_bid(self, model: CostModelParams) -> None:
        result = calculate_roi(model, distance=120, bid_price=400)
        assert result.time_estimate == 3
        assert result.variable_cost == 210
        assert result.platform_fee == 40
        assert result.profit == 150
        assert result.roi_percentage == 71.4

    def test_deadhead_adds_to_cost(self, model: CostModelParams) -> None:
        result = calculate_roi(model, distance=120, bid_price=400, deadhead_km=60)
        assert result.deadhead_km == 60
        assert result.variable_cost == 180 + 4 * 30

    def test_loss_making_bid_has_zero_roi(self, model: CostModelParams) -> None:
        result = calculate_roi(model, distance=120, bid_price=200)
        assert result.profit == -30
        assert result.roi_percentage == 0

    def test_stored_model_row(self, model: CostModelParams) -> None:
        row = dict(model.model_dump(), id=7, name="Rate card", carrier_id=3)
        assert roi_for_model_row(row, distance=120, bid_price=400) == calculate_roi(model, 120, 400)


class TestCostPreview:
    def test_breakdown(self, model: CostModelParams) -> None:
        preview = preview_costs(model, distance=100, duration_hours=2)
        assert preview.fuel_cost == 10
        assert preview.maintenance_cost == 5
        assert preview.insurance_cost == 5
        assert preview.vehicle_cost == 100
        assert preview.driver_cost == 60
        assert preview.load_unload_cost == 30
        assert preview.total_cost == 210
        assert preview.platform_fee == 21
        assert preview.net_profit == 189
