from datetime import datetime
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, Integer, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from rfp_hub.database import Base, utcnow

USER_ROLES = ("CUSTOMER", "SUPPLIER", "ADMIN")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    company: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('CUSTOMER','SUPPLIER','ADMIN')", name="chk_user_role"
        ),
        Index("idx_users_role", "role"),
    )
