"""
Carrier settings endpoints for API v1: auto-bid rules and cost models.

Both resources belong to the calling carrier; records of other
carriers are reported as not found.  Auto-bid rules are stored
preferences only.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import require_roles
from copallet_api.app.schemas.autobid import AutoBidRuleCreate, AutoBidRuleRead, AutoBidRuleUpdate
from copallet_api.app.schemas.cost_model import CostModelCreate, CostModelRead, CostModelUpdate
from copallet_api.app.services.autobid_service import AutoBidService
from copallet_api.app.services.cost_model_service import CostModelService


auto_bid_router = APIRouter()
cost_model_router = APIRouter()

carrier_only = require_roles("carrier", "dispatcher")


@auto_bid_router.get("", response_model=List[AutoBidRuleRead])
async def list_rules(current_user: dict = Depends(carrier_only)) -> List[AutoBidRuleRead]:
    return await AutoBidService.list_rules(current_user)


@auto_bid_router.post("", response_model=AutoBidRuleRead, status_code=status.HTTP_201_CREATED)
async def create_rule(data: AutoBidRuleCreate, current_user: dict = Depends(carrier_only)) -> AutoBidRuleRead:
    return await AutoBidService.create_rule(data, current_user)


@auto_bid_router.put("/{rule_id}", response_model=AutoBidRuleRead)
async def update_rule(
    rule_id: int,
    data: AutoBidRuleUpdate,
    current_user: dict = Depends(carrier_only),
) -> AutoBidRuleRead:
    try:
        return await AutoBidService.update_rule(rule_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e


@auto_bid_router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(rule_id: int, current_user: dict = Depends(carrier_only)) -> None:
    try:
        await AutoBidService.delete_rule(rule_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return None


@cost_model_router.get("", response_model=List[CostModelRead])
async def list_cost_models(current_user: dict = Depends(carrier_only)) -> List[CostModelRead]:
    return await CostModelService.list_models(current_user)


@cost_model_router.post("", response_model=CostModelRead, status_code=status.HTTP_201_CREATED)
async def create_cost_model(data: CostModelCreate, current_user: dict = Depends(carrier_only)) -> CostModelRead:
    return await CostModelService.create_model(data, current_user)


@cost_model_router.get("/{model_id}", response_model=CostModelRead)
async def get_cost_model(model_id: int, current_user: dict = Depends(carrier_only)) -> CostModelRead:
    try:
        return await CostModelService.get_model(model_id, current_user)
    except ValueError as e:
        raise http_error(e) from e


@cost_model_router.put("/{model_id}", response_model=CostModelRead)
async def update_cost_model(
    model_id: int,
    data: CostModelUpdate,
    current_user: dict = Depends(carrier_only),
) -> CostModelRead:
    try:
        return await CostModelService.update_model(model_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e


@cost_model_router.delete("/{model_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cost_model(model_id: int, current_user: dict = Depends(carrier_only)) -> None:
    try:
        await CostModelService.delete_model(model_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return None
