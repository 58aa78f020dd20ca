from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from rfp_hub.database import get_db
from rfp_hub.middleware.auth import get_current_user
from rfp_hub.middleware.authorization import (
    CUSTOMER_ROLES,
    SUPPLIER_ROLES,
    owner_scope,
    require_roles,
)
from rfp_hub.schemas.common import ApiResponse, PageParams, build_pagination, page_params
from rfp_hub.schemas.proposal import (
    ProposalCreate,
    ProposalDecision,
    ProposalResponse,
    ProposalStatusUpdate,
    ProposalUpdate,
)
from rfp_hub.services import proposal_service

router = APIRouter()


# ---------- supplier ----------

@router.post(
    "",
    response_model=ApiResponse[ProposalResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_proposal(
    body: ProposalCreate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles("SUPPLIER")),
    db: AsyncSession = Depends(get_db),
):
    proposal = await proposal_service.create_proposal(db, current_user["user_id"], body)
    return ApiResponse(
        message="Proposal created successfully", data=ProposalResponse.model_validate(proposal)
    )


@router.get("", response_model=ApiResponse[list[ProposalResponse]])
async def list_proposals(
    params: PageParams = Depends(page_params),
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*SUPPLIER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    proposals, total = await proposal_service.list_supplier_proposals(
        db, owner_scope(current_user), params
    )
    return ApiResponse(
        message="Proposals retrieved successfully",
        data=[ProposalResponse.model_validate(p) for p in proposals],
        pagination=build_pagination(params.page, params.limit, total),
    )


# ---------- customer ----------

@router.get("/rfp/{rfp_id}", response_model=ApiResponse[list[ProposalResponse]])
async def list_proposals_for_rfp(
    rfp_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    proposals = await proposal_service.list_proposals_for_rfp(
        db, rfp_id, owner_scope(current_user)
    )
    return ApiResponse(
        message="Proposals retrieved successfully",
        data=[ProposalResponse.model_validate(p) for p in proposals],
    )


@router.get("/customer/{proposal_id}", response_model=ApiResponse[ProposalResponse])
async def get_proposal_for_customer(
    proposal_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    proposal = await proposal_service.get_customer_proposal(
        db, proposal_id, owner_scope(current_user)
    )
    return ApiResponse(
        message="Proposal retrieved successfully", data=ProposalResponse.model_validate(proposal)
    )


@router.put("/customer/{proposal_id}/status", response_model=ApiResponse[ProposalResponse])
async def decide_proposal(
    proposal_id: int,
    body: ProposalDecision,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    proposal = await proposal_service.decide_proposal(
        db, proposal_id, owner_scope(current_user), body.status
    )
    return ApiResponse(
        message="Proposal status updated successfully",
        data=ProposalResponse.model_validate(proposal),
    )


# ---------- supplier, by id ----------

@router.get("/{proposal_id}", response_model=ApiResponse[ProposalResponse])
async def get_proposal(
    proposal_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*SUPPLIER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    proposal = await proposal_service.get_supplier_proposal(
        db, proposal_id, owner_scope(current_user)
    )
    return ApiResponse(
        message="Proposal retrieved successfully", data=ProposalResponse.model_validate(proposal)
    )


@router.put("/{proposal_id}", response_model=ApiResponse[ProposalResponse])
async def update_proposal(
    proposal_id: int,
    body: ProposalUpdate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles("SUPPLIER")),
    db: AsyncSession = Depends(get_db),
):
    proposal = await proposal_service.update_proposal(
        db, proposal_id, current_user["user_id"], body
    )
    return ApiResponse(
        message="Proposal updated successfully", data=ProposalResponse.model_validate(proposal)
    )


@router.put("/{proposal_id}/withdraw", response_model=ApiResponse[None])
async def withdraw_proposal(
    proposal_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles("SUPPLIER")),
    db: AsyncSession = Depends(get_db),
):
    await proposal_service.withdraw_proposal(db, proposal_id, current_user["user_id"])
    return ApiResponse(message="Proposal withdrawn successfully")


# ---------- administration ----------

@router.put("/{proposal_id}/status", response_model=ApiResponse[ProposalResponse])
async def set_proposal_status(
    proposal_id: int,
    body: ProposalStatusUpdate,
    _auth: None = Depends(require_roles("ADMIN")),
    db: AsyncSession = Depends(get_db),
):
    """Administrative override: any status, no state precondition."""
    proposal = await proposal_service.set_proposal_status(db, proposal_id, body.status)
    return ApiResponse(
        message="Proposal status updated successfully",
        data=ProposalResponse.model_validate(proposal),
    )
