"""
Coupon endpoints.

Basket validation for customers, management for admins.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from larder.application.dtos import (
    CouponDTO,
    CouponEvaluationDTO,
    CouponListDTO,
    CouponUsageStatsDTO,
    CreateCouponRequest,
    UpdateCouponRequest,
    ValidateCouponRequest,
)
from larder.application.services import CouponService
from larder.domain.enums import CouponStatus, DiscountType
from larder_api.dependencies import get_coupon_service, get_current_user_id, require_admin


router = APIRouter()


@router.post(
    "/validate",
    response_model=CouponEvaluationDTO,
    summary="Check a coupon against a basket",
)
async def validate_coupon(
    request: ValidateCouponRequest,
    user_id: str = Depends(get_current_user_id),
    service: CouponService = Depends(get_coupon_service),
):
    evaluation = await service.evaluate(
        request.code,
        user_id,
        request.order_amount,
        request.category_ids,
        request.product_ids,
    )
    return CouponEvaluationDTO(
        is_valid=evaluation.is_valid,
        discount_amount=evaluation.discount_amount,
        final_amount=evaluation.final_amount,
        coupon_id=evaluation.coupon_id,
        is_free_shipping=evaluation.is_free_shipping,
        message=evaluation.message,
    )


@router.post(
    "",
    response_model=CouponDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Create coupon (admin)",
)
async def create_coupon(
    request: CreateCouponRequest,
    _: str = Depends(require_admin),
    service: CouponService = Depends(get_coupon_service),
):
    return await service.create_coupon(request)


@router.get(
    "",
    response_model=CouponListDTO,
    summary="List coupons (admin)",
)
async def list_coupons(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    coupon_status: Optional[CouponStatus] = Query(default=None, alias="status"),
    discount_type: Optional[DiscountType] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=100),
    _: str = Depends(require_admin),
    service: CouponService = Depends(get_coupon_service),
):
    return await service.list_coupons(
        page=page,
        page_size=page_size,
        status=coupon_status,
        discount_type=discount_type,
        search=search,
    )


@router.get("/{coupon_id}", response_model=CouponDTO, summary="Get coupon (admin)")
async def get_coupon(
    coupon_id: str,
    _: str = Depends(require_admin),
    service: CouponService = Depends(get_coupon_service),
):
    return await service.get_coupon(coupon_id)


@router.put("/{coupon_id}", response_model=CouponDTO, summary="Update coupon (admin)")
async def update_coupon(
    coupon_id: str,
    request: UpdateCouponRequest,
    _: str = Depends(require_admin),
    service: CouponService = Depends(get_coupon_service),
):
    return await service.update_coupon(coupon_id, request)


@router.delete("/{coupon_id}", response_model=CouponDTO, summary="Deactivate coupon (admin)")
async def deactivate_coupon(
    coupon_id: str,
    _: str = Depends(require_admin),
    service: CouponService = Depends(get_coupon_service),
):
    return await service.deactivate_coupon(coupon_id)


@router.get(
    "/{coupon_id}/stats",
    response_model=CouponUsageStatsDTO,
    summary="Coupon usage statistics (admin)",
)
async def coupon_stats(
    coupon_id: str,
    _: str = Depends(require_admin),
    service: CouponService = Depends(get_coupon_service),
):
    return await service.get_usage_stats(coupon_id)
