from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from rfp_hub.database import get_db
from rfp_hub.middleware.auth import get_current_user
from rfp_hub.middleware.authorization import CUSTOMER_ROLES, owner_scope, require_roles
from rfp_hub.schemas.common import ApiResponse, PageParams, build_pagination, page_params
from rfp_hub.schemas.dashboard import CustomerDashboard
from rfp_hub.schemas.project import ProjectCreate, ProjectListItem, ProjectUpdate
from rfp_hub.schemas.rfp import ProjectDetailResponse
from rfp_hub.services import dashboard_service, project_service

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[ProjectListItem],
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    body: ProjectCreate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    project = await project_service.create_project(db, current_user["user_id"], body)
    return ApiResponse(
        message="Project created successfully", data=ProjectListItem.model_validate(project)
    )


@router.get("", response_model=ApiResponse[list[ProjectListItem]])
async def list_projects(
    params: PageParams = Depends(page_params),
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    projects, total = await project_service.list_projects(db, owner_scope(current_user), params)
    return ApiResponse(
        message="Projects retrieved successfully",
        data=[ProjectListItem.model_validate(p) for p in projects],
        pagination=build_pagination(params.page, params.limit, total),
    )


@router.get("/dashboard", response_model=ApiResponse[CustomerDashboard])
async def get_dashboard(
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    data = await dashboard_service.customer_dashboard(db, owner_scope(current_user))
    return ApiResponse(message="Dashboard data retrieved successfully", data=data)


@router.get("/{project_id}", response_model=ApiResponse[ProjectDetailResponse])
async def get_project(
    project_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    project = await project_service.get_project(db, project_id, owner_scope(current_user))
    return ApiResponse(
        message="Project retrieved successfully",
        data=ProjectDetailResponse.model_validate(project),
    )


@router.put("/{project_id}", response_model=ApiResponse[ProjectListItem])
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    project = await project_service.update_project(
        db, project_id, owner_scope(current_user), body
    )
    return ApiResponse(
        message="Project updated successfully", data=ProjectListItem.model_validate(project)
    )


@router.delete("/{project_id}", response_model=ApiResponse[None])
async def delete_project(
    project_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    await project_service.delete_project(db, project_id, owner_scope(current_user))
    return ApiResponse(message="Project deleted successfully")
