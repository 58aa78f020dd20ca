from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from rfp_hub.schemas.auth import UserPublic
from rfp_hub.schemas.common import CamelModel, to_naive_utc

ProjectStatus = Literal["ACTIVE", "INACTIVE", "COMPLETED", "CANCELLED"]
ProductCategory = Literal[
    "ELECTRONICS",
    "SOFTWARE",
    "HARDWARE",
    "SERVICES",
    "CONSULTING",
    "MAINTENANCE",
    "OTHER",
]


class _ProjectFields(CamelModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def _check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class ProjectCreate(_ProjectFields):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    budget: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)


class ProjectUpdate(_ProjectFields):
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    budget: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    status: Optional[ProjectStatus] = None


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category: ProductCategory
    unit: Optional[str] = Field(None, max_length=20)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[ProductCategory] = None
    unit: Optional[str] = Field(None, max_length=20)


class ProductResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    unit: Optional[str] = None
    project_id: int
    created_at: datetime
    updated_at: datetime


class ProjectSummary(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    customer_id: int
    created_at: datetime
    updated_at: datetime


class ProjectWithCustomer(ProjectSummary):
    customer: UserPublic


class ProjectListItem(ProjectWithCustomer):
    products: List[ProductResponse] = []
