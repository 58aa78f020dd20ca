from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rfp_hub.database import get_db
from rfp_hub.middleware.auth import get_current_user
from rfp_hub.middleware.authorization import CUSTOMER_ROLES, owner_scope, require_roles
from rfp_hub.schemas.common import ApiResponse, PageParams, build_pagination, page_params
from rfp_hub.schemas.project import (
    ProductCategory,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from rfp_hub.services import product_service
from rfp_hub.services.project_service import get_owned_project

router = APIRouter()


async def owned_project_id(
    project_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*CUSTOMER_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Path dependency: the project must belong to the caller (admins see all)."""
    project = await get_owned_project(db, project_id, owner_scope(current_user))
    return project.id


@router.post(
    "",
    response_model=ApiResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    body: ProductCreate,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.create_product(db, project_id, body)
    return ApiResponse(
        message="Product created successfully", data=ProductResponse.model_validate(product)
    )


@router.get("", response_model=ApiResponse[list[ProductResponse]])
async def list_products(
    params: PageParams = Depends(page_params),
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    products, total = await product_service.list_products(db, project_id, params)
    return ApiResponse(
        message="Products retrieved successfully",
        data=[ProductResponse.model_validate(p) for p in products],
        pagination=build_pagination(params.page, params.limit, total),
    )


@router.get("/category", response_model=ApiResponse[list[ProductResponse]])
async def list_products_by_category(
    category: ProductCategory = Query(...),
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    products = await product_service.list_products_by_category(db, project_id, category)
    return ApiResponse(
        message="Products retrieved successfully",
        data=[ProductResponse.model_validate(p) for p in products],
    )


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product(
    product_id: int,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.get_product(db, product_id, project_id)
    return ApiResponse(
        message="Product retrieved successfully", data=ProductResponse.model_validate(product)
    )


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: int,
    body: ProductUpdate,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.update_product(db, product_id, project_id, body)
    return ApiResponse(
        message="Product updated successfully", data=ProductResponse.model_validate(product)
    )


@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(
    product_id: int,
    project_id: int = Depends(owned_project_id),
    db: AsyncSession = Depends(get_db),
):
    await product_service.delete_product(db, product_id, project_id)
    return ApiResponse(message="Product deleted successfully")
