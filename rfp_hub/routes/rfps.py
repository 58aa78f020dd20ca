from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from rfp_hub.database import get_db
from rfp_hub.models.rfp import Rfp
from rfp_hub.routes.products import owned_project_id
from rfp_hub.schemas.common import ApiResponse, PageParams, build_pagination, page_params
from rfp_hub.schemas.rfp import (
    PublicRfpResponse,
    RfpComparisonResponse,
    RfpCreate,
    RfpDetailResponse,
    RfpResponse,
    RfpToggle,
    RfpUpdate,
)
from rfp_hub.services import rfp_service

# Customer routes, mounted under /api/projects/{project_id}/rfps
router = APIRouter()

# Public supplier-facing routes, mounted under /api/rfps; no credential needed
public_router = APIRouter()


def _public_view(rfp: Rfp) -> PublicRfpResponse:
    view = PublicRfpResponse.model_validate(rfp)
    view.proposal_count = len(rfp.proposals)
    return view


@router.post(
    "",
    response_model=ApiResponse[RfpResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_rfp(
    body: RfpCreate,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    rfp = await rfp_service.create_rfp(db, project_id, body)
    return ApiResponse(message="RFP created successfully", data=RfpResponse.model_validate(rfp))


@router.get("", response_model=ApiResponse[list[RfpResponse]])
async def list_rfps(
    params: PageParams = Depends(page_params),
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    rfps, total = await rfp_service.list_rfps(db, project_id, params)
    return ApiResponse(
        message="RFPs retrieved successfully",
        data=[RfpResponse.model_validate(r) for r in rfps],
        pagination=build_pagination(params.page, params.limit, total),
    )


@router.get("/comparison", response_model=ApiResponse[list[RfpComparisonResponse]])
async def get_rfp_comparison(
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    rfps = await rfp_service.get_rfp_comparison(db, project_id)
    return ApiResponse(
        message="RFP comparison data retrieved successfully",
        data=[RfpComparisonResponse.model_validate(r) for r in rfps],
    )


@router.get("/{rfp_id}", response_model=ApiResponse[RfpDetailResponse])
async def get_rfp(
    rfp_id: int,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    rfp = await rfp_service.get_rfp(db, rfp_id, project_id)
    return ApiResponse(
        message="RFP retrieved successfully", data=RfpDetailResponse.model_validate(rfp)
    )


@router.put("/{rfp_id}", response_model=ApiResponse[RfpResponse])
async def update_rfp(
    rfp_id: int,
    body: RfpUpdate,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    rfp = await rfp_service.update_rfp(db, rfp_id, project_id, body)
    return ApiResponse(message="RFP updated successfully", data=RfpResponse.model_validate(rfp))


@router.delete("/{rfp_id}", response_model=ApiResponse[None])
async def delete_rfp(
    rfp_id: int,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    await rfp_service.delete_rfp(db, rfp_id, project_id)
    return ApiResponse(message="RFP deleted successfully")


@router.put("/{rfp_id}/toggle", response_model=ApiResponse[RfpResponse])
async def toggle_rfp(
    rfp_id: int,
    body: RfpToggle,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    rfp = await rfp_service.toggle_rfp(db, rfp_id, project_id, body.is_active)
    state = "activated" if rfp.is_active else "deactivated"
    return ApiResponse(message=f"RFP {state} successfully", data=RfpResponse.model_validate(rfp))


# ---------- supplier side ----------

@public_router.get("/active", response_model=ApiResponse[list[PublicRfpResponse]])
async def list_active_rfps(
    db: AsyncSession = Depends(get_db),
):
    rfps = await rfp_service.list_active_rfps(db)
    return ApiResponse(
        message="Active RFPs retrieved successfully",
        data=[_public_view(r) for r in rfps],
    )


@public_router.get("/{rfp_id}", response_model=ApiResponse[PublicRfpResponse])
async def get_rfp_for_supplier(
    rfp_id: int,
    db: AsyncSession = Depends(get_db),
):
    rfp = await rfp_service.get_rfp_for_supplier(db, rfp_id)
    return ApiResponse(message="RFP retrieved successfully", data=_public_view(rfp))
