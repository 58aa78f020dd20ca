"""
Seed script: creates demo users, a project with products, and one open RFP.
Run from the repository root: python -m scripts.seed
"""
import asyncio
import sys
import os
from datetime import timedelta

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from rfp_hub.database import AsyncSessionLocal, engine, utcnow
from rfp_hub.models.user import User
from rfp_hub.models.project import Project, Product
from rfp_hub.models.rfp import Rfp, RfpItem
from rfp_hub.services.auth_service import hash_password

DEFAULT_PASSWORD = "RfpHubDemo123"

USERS = [
    ("admin@acme.com", "Ada", "Admin", "ADMIN", "Acme Procurement"),
    ("customer@acme.com", "Carla", "Customer", "CUSTOMER", "Acme Corporation"),
    ("supplier@globex.com", "Sam", "Supplier", "SUPPLIER", "Globex Supplies"),
    ("supplier@initech.com", "Ivy", "Vendor", "SUPPLIER", "Initech Hardware"),
]

PRODUCTS = [
    ("Developer laptop", "HARDWARE", "unit", 25),
    ("27in monitor", "ELECTRONICS", "unit", 40),
    ("IDE licence", "SOFTWARE", "seat", 25),
]


async def seed():
    async with AsyncSessionLocal() as db:
        # Check if already seeded
        result = await db.execute(select(User).where(User.email == USERS[0][0]))
        if result.scalar_one_or_none():
            print("Seed data already exists. Skipping.")
            return

        hashed_pw = hash_password(DEFAULT_PASSWORD)

        # --- Users ---
        users = {}
        for email, first, last, role, company in USERS:
            user = User(
                email=email,
                password_hash=hashed_pw,
                first_name=first,
                last_name=last,
                role=role,
                company=company,
                is_active=True,
            )
            db.add(user)
            users[email] = user
        await db.flush()
        print(f"  Created {len(users)} users")

        # --- Project + products ---
        now = utcnow()
        project = Project(
            title="Office refresh 2026",
            description="Replace engineering workstations and tooling",
            status="ACTIVE",
            budget=150000,
            start_date=now,
            end_date=now + timedelta(days=120),
            customer_id=users["customer@acme.com"].id,
        )
        db.add(project)
        await db.flush()

        products = []
        for name, category, unit, _ in PRODUCTS:
            product = Product(name=name, category=category, unit=unit, project_id=project.id)
            db.add(product)
            products.append(product)
        await db.flush()
        print(f"  Created project '{project.title}' with {len(products)} products")

        # --- RFP open for proposals ---
        rfp = Rfp(
            title="Workstation bundle",
            description="Laptops, monitors and licences for the engineering team",
            status="ACTIVE",
            is_active=True,
            start_date=now,
            end_date=now + timedelta(days=30),
            project_id=project.id,
        )
        db.add(rfp)
        await db.flush()
        for product, (_, _, _, quantity) in zip(products, PRODUCTS):
            db.add(RfpItem(rfp_id=rfp.id, product_id=product.id, quantity=quantity))

        await db.commit()
        print(f"  Created RFP '{rfp.title}' (id={rfp.id})")
        print(f"Seed complete. Password for all users: {DEFAULT_PASSWORD}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
