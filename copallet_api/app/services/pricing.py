"""
Price, spend, ROI and cost-model calculators.

Straight-line arithmetic used by shippers to estimate what a shipment
will cost and by carriers to judge whether a bid pays off.  All
functions are pure; monetary results are rounded to cents.
"""

from ..schemas.calculator import (
    CostModelParams,
    CostPreviewResult,
    QuoteResult,
    ROIResult,
    SpendResult,
)
from .route_calculation import round_half_up


# Instant quote
QUOTE_BASE_PRICE = 150
QUOTE_PRICE_PER_KM = 1.2
QUOTE_PRICE_PER_PALLET = 25
QUOTE_HEAVY_PALLET_KG = 1000
QUOTE_HEAVY_SURCHARGE_PER_KG = 0.1
QUOTE_EXTRAS = {"adr": 200, "tail_lift": 50, "temperature_controlled": 100}
DELIVERY_MULTIPLIERS = {"standard": 1.0, "express": 1.5, "same-day": 2.0}

# Shipper spend estimate
SPEND_BASE_PER_PALLET = 25
SPEND_PER_KM_PER_PALLET = 0.15
SPEND_PER_KG = 0.02
SPEND_INSURANCE_RATE = 0.005
SPEND_PLATFORM_FEE_RATE = 0.03
SPEND_SAVINGS_RATE = 0.2
URGENCY_MULTIPLIERS = {"standard": 1.0, "express": 1.3, "urgent": 1.6}
SERVICE_MULTIPLIERS = {"standard": 1.0, "white_glove": 1.4, "temperature_controlled": 1.8}


def _money(value: float) -> float:
    return round(value, 2)


def quote_price(
    distance: float,
    pallets: int,
    weight: float = 0,
    delivery_type: str = "standard",
    adr_required: bool = False,
    tail_lift_required: bool = False,
    temperature_controlled: bool = False,
) -> QuoteResult:
    """Instant price quote for a pallet shipment.

    ``(base + distance·1.2 + pallets·25 + weight surcharge + extras) ·
    delivery multiplier``, rounded to whole euros.  Pallets heavier than
    1000 kg on average pay 0.10 EUR per extra kg per pallet.  A quote
    needs both a distance and a pallet count; otherwise ``price`` is
    ``None``.
    """
    if distance == 0 or pallets == 0:
        return QuoteResult(price=None)
    distance_cost = distance * QUOTE_PRICE_PER_KM
    pallet_cost = pallets * QUOTE_PRICE_PER_PALLET
    weight_per_pallet = weight / pallets
    weight_surcharge = 0.0
    if weight_per_pallet > QUOTE_HEAVY_PALLET_KG:
        weight_surcharge = (weight_per_pallet - QUOTE_HEAVY_PALLET_KG) * QUOTE_HEAVY_SURCHARGE_PER_KG * pallets
    extras = 0
    if adr_required:
        extras += QUOTE_EXTRAS["adr"]
    if tail_lift_required:
        extras += QUOTE_EXTRAS["tail_lift"]
    if temperature_controlled:
        extras += QUOTE_EXTRAS["temperature_controlled"]
    multiplier = DELIVERY_MULTIPLIERS[delivery_type]
    total = (QUOTE_BASE_PRICE + distance_cost + pallet_cost + weight_surcharge + extras) * multiplier
    return QuoteResult(
        price=round_half_up(total),
        base_price=QUOTE_BASE_PRICE,
        distance_cost=_money(distance_cost),
        pallet_cost=pallet_cost,
        weight_surcharge=_money(weight_surcharge),
        extras=extras,
        multiplier=multiplier,
    )


def estimate_spend(
    distance: float,
    pallets: int,
    weight_per_pallet: float = 0,
    urgency: str = "standard",
    service_type: str = "standard",
    insurance_value: float = 0,
) -> SpendResult:
    """Itemised shipper spend estimate including the 3% platform fee."""
    base_rate = SPEND_BASE_PER_PALLET * pallets
    distance_cost = distance * SPEND_PER_KM_PER_PALLET * pallets
    weight_cost = pallets * weight_per_pallet * SPEND_PER_KG
    urgency_multiplier = URGENCY_MULTIPLIERS[urgency]
    service_multiplier = SERVICE_MULTIPLIERS[service_type]
    insurance = insurance_value * SPEND_INSURANCE_RATE
    subtotal = (base_rate + distance_cost + weight_cost) * urgency_multiplier * service_multiplier + insurance
    platform_fee = subtotal * SPEND_PLATFORM_FEE_RATE
    total = subtotal + platform_fee
    return SpendResult(
        base_rate=_money(base_rate),
        distance_cost=_money(distance_cost),
        weight_cost=_money(weight_cost),
        urgency_multiplier=urgency_multiplier,
        service_multiplier=service_multiplier,
        insurance=_money(insurance),
        subtotal=_money(subtotal),
        platform_fee=_money(platform_fee),
        total=_money(total),
        savings=_money(total * SPEND_SAVINGS_RATE),
    )


def calculate_roi(
    model: CostModelParams,
    distance: float,
    bid_price: float,
    deadhead_km: float = 0,
) -> ROIResult:
    """Carrier profit and ROI for a bid.

    Parameters
    ----------
    model : CostModelParams
        The carrier's costs (per km, per driver hour, loading times,
        average speed, platform fee percentage).
    distance : float
        Loaded route distance in km.
    bid_price : float
        Price offered to the shipper.
    deadhead_km : float
        Empty kilometres driven to reach the pickup.

    Returns
    -------
    ROIResult
        ROI is ``profit / variable cost · 100`` when the bid is
        profitable, otherwise 0.
    """
    total_km = distance + deadhead_km
    time_estimate = total_km / model.average_speed_kmh + (
        model.load_time_minutes + model.unload_time_minutes
    ) / 60
    variable_cost = total_km * model.cost_per_km + time_estimate * model.driver_cost_per_hour
    platform_fee = bid_price * model.platform_fee_percentage / 100
    profit = bid_price - variable_cost - platform_fee
    roi_percentage = 0.0
    if profit > 0 and variable_cost > 0:
        roi_percentage = profit / variable_cost * 100
    return ROIResult(
        route_km=distance,
        deadhead_km=deadhead_km,
        time_estimate=round(time_estimate, 2),
        variable_cost=_money(variable_cost),
        platform_fee=_money(platform_fee),
        profit=_money(profit),
        roi_percentage=round(roi_percentage, 1),
    )


def preview_costs(model: CostModelParams, distance: float, duration_hours: float) -> CostPreviewResult:
    """Break a trip down into the cost components of a cost model."""
    fuel_cost = distance * model.fuel_cost_per_km
    maintenance_cost = distance * model.maintenance_cost_per_km
    insurance_cost = distance * model.insurance_cost_per_km
    vehicle_cost = distance * model.cost_per_km
    driver_cost = duration_hours * model.driver_cost_per_hour
    load_unload_cost = (model.load_time_minutes + model.unload_time_minutes) / 60 * model.driver_cost_per_hour
    total_cost = fuel_cost + maintenance_cost + insurance_cost + vehicle_cost + driver_cost + load_unload_cost
    platform_fee = total_cost * model.platform_fee_percentage / 100
    return CostPreviewResult(
        fuel_cost=_money(fuel_cost),
        maintenance_cost=_money(maintenance_cost),
        insurance_cost=_money(insurance_cost),
        vehicle_cost=_money(vehicle_cost),
        driver_cost=_money(driver_cost),
        load_unload_cost=_money(load_unload_cost),
        total_cost=_money(total_cost),
        platform_fee=_money(platform_fee),
        net_profit=_money(total_cost - platform_fee),
    )


def roi_for_model_row(row: dict, distance: float, bid_price: float, deadhead_km: float = 0) -> ROIResult:
    """ROI using a stored ``cost_models`` row (or any mapping with the same keys)."""
    params = CostModelParams(**{key: row[key] for key in CostModelParams.model_fields})
    return calculate_roi(params, distance=distance, bid_price=bid_price, deadhead_km=deadhead_km)
