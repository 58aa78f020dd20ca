import os
from datetime import timedelta

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.pool import NullPool

from rfp_hub.main import app
from rfp_hub.database import Base, get_db, utcnow
from rfp_hub.models.user import User
from rfp_hub.models.project import Project, Product
from rfp_hub.models.rfp import Rfp, RfpItem
from rfp_hub.services.auth_service import create_access_token, hash_password

DEFAULT_PASSWORD = "Passw0rdOk"


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """Session for arranging test data directly; commit to make it visible to the app."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def auth_headers(user: User) -> dict:
    token = create_access_token(user_id=user.id, role=user.role, email=user.email)
    return {"Authorization": f"Bearer {token}"}


async def make_user(db: AsyncSession, role: str, email: str, **fields) -> User:
    user = User(
        email=email,
        password_hash=hash_password(fields.pop("password", DEFAULT_PASSWORD)),
        first_name=fields.pop("first_name", role.title()),
        last_name=fields.pop("last_name", "Tester"),
        role=role,
        is_active=fields.pop("is_active", True),
        **fields,
    )
    db.add(user)
    await db.commit()
    return user


async def make_project(db: AsyncSession, customer: User, title: str = "Office refresh") -> Project:
    project = Project(title=title, status="ACTIVE", customer_id=customer.id)
    db.add(project)
    await db.commit()
    return project


async def make_product(
    db: AsyncSession, project: Project, name: str = "Laptop", category: str = "HARDWARE"
) -> Product:
    product = Product(name=name, category=category, unit="unit", project_id=project.id)
    db.add(product)
    await db.commit()
    return product


async def make_rfp(
    db: AsyncSession,
    project: Project,
    quantities: dict,
    status: str = "ACTIVE",
    is_active: bool = True,
    ends_in: timedelta = timedelta(days=14),
    title: str = "Workstations",
) -> Rfp:
    """RFP with one item per (product -> quantity) entry."""
    now = utcnow()
    end = now + ends_in
    rfp = Rfp(
        title=title,
        status=status,
        is_active=is_active,
        start_date=min(now, end) - timedelta(days=1),
        end_date=end,
        project_id=project.id,
    )
    db.add(rfp)
    await db.flush()
    for product, quantity in quantities.items():
        db.add(RfpItem(rfp_id=rfp.id, product_id=product.id, quantity=quantity))
    await db.commit()
    return rfp


async def rfp_item_ids(db: AsyncSession, rfp: Rfp) -> list[int]:
    from sqlalchemy import select

    result = await db.execute(
        select(RfpItem.id).where(RfpItem.rfp_id == rfp.id).order_by(RfpItem.id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Common actors
# ---------------------------------------------------------------------------

@pytest.fixture
async def customer(db):
    return await make_user(db, "CUSTOMER", "customer@acme.com")


@pytest.fixture
async def other_customer(db):
    return await make_user(db, "CUSTOMER", "buyer@initech.com")


@pytest.fixture
async def supplier(db):
    return await make_user(db, "SUPPLIER", "supplier@globex.com")


@pytest.fixture
async def other_supplier(db):
    return await make_user(db, "SUPPLIER", "sales@umbrella.com")


@pytest.fixture
async def admin(db):
    return await make_user(db, "ADMIN", "admin@acme.com")
