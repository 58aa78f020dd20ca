from datetime import datetime
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    DateTime,
    Text,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rfp_hub.database import Base, utcnow
from rfp_hub.models.user import User

if TYPE_CHECKING:
    from rfp_hub.models.rfp import Rfp

PROJECT_STATUSES = ("ACTIVE", "INACTIVE", "COMPLETED", "CANCELLED")
PRODUCT_CATEGORIES = (
    "ELECTRONICS",
    "SOFTWARE",
    "HARDWARE",
    "SERVICES",
    "CONSULTING",
    "MAINTENANCE",
    "OTHER",
)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="ACTIVE", nullable=False)
    budget: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2))
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    customer: Mapped[User] = relationship()
    products: Mapped[list["Product"]] = relationship(
        back_populates="project", order_by="Product.id"
    )
    rfps: Mapped[list["Rfp"]] = relationship(
        back_populates="project", order_by="Rfp.id"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('ACTIVE','INACTIVE','COMPLETED','CANCELLED')",
            name="chk_project_status",
        ),
        Index("idx_projects_customer", "customer_id"),
    )


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(String(20))
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    project: Mapped[Project] = relationship(back_populates="products")

    __table_args__ = (
        CheckConstraint(
            "category IN ('ELECTRONICS','SOFTWARE','HARDWARE','SERVICES',"
            "'CONSULTING','MAINTENANCE','OTHER')",
            name="chk_product_category",
        ),
        Index("idx_products_project", "project_id"),
    )
