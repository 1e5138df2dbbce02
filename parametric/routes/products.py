"""Product endpoints: admin price updates, AI price suggestions, 3D model generation."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..errors import DecodeError, NotFoundError, UpstreamError
from ..models.schemas import (
    ModelGenerationResult,
    PriceUpdateRequest,
    PriceUpdateResult,
    PricingSuggestion,
    PricingSuggestionRequest,
)
from ..workflow.model_generation import generate_product_model
from ..workflow.product_pricing import suggest_pricing, update_base_price
from .auth import admin_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["products"])


@router.post("/admin/products/{product_id}/price", response_model=PriceUpdateResult)
async def update_price(product_id: str, req: PriceUpdateRequest, _admin: str = Depends(admin_user_id)):
    try:
        return update_base_price(product_id, req.base_price)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/products/pricing-suggestion", response_model=PricingSuggestion)
async def pricing_suggestion(req: PricingSuggestionRequest):
    try:
        return await suggest_pricing(req)
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        logger.exception("Pricing suggestion failed")
        raise HTTPException(status_code=502, detail="Pricing service unavailable") from e


@router.post("/products/{product_id}/model", response_model=ModelGenerationResult)
async def generate_model(product_id: str):
    try:
        return await generate_product_model(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (DecodeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
