from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rfp_hub.database import get_db
from rfp_hub.middleware.auth import get_current_user
from rfp_hub.middleware.authorization import owner_scope
from rfp_hub.schemas.common import ApiResponse
from rfp_hub.schemas.dashboard import CustomerDashboard, SupplierDashboard
from rfp_hub.services import dashboard_service

router = APIRouter()


@router.get("", response_model=ApiResponse[Union[SupplierDashboard, CustomerDashboard]])
async def get_dashboard(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Role-aware rollup: suppliers see their proposals, customers their projects."""
    if current_user["role"] == "SUPPLIER":
        data = await dashboard_service.supplier_dashboard(db, current_user["user_id"])
    else:
        data = await dashboard_service.customer_dashboard(db, owner_scope(current_user))
    return ApiResponse(message="Dashboard data retrieved successfully", data=data)
