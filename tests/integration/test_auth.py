import pytest

from rfp_hub.services.auth_service import create_access_token

from conftest import DEFAULT_PASSWORD, auth_headers, make_user

REGISTRATION = {
    "email": "New.Buyer@Acme.com",
    "password": "Str0ngPass",
    "firstName": "Nina",
    "lastName": "Buyer",
    "company": "Acme Corporation",
    "role": "CUSTOMER",
}


@pytest.mark.asyncio
async def test_register_returns_user_and_working_token(client):
    resp = await client.post("/api/auth/register", json=REGISTRATION)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["user"]["email"] == "new.buyer@acme.com"
    assert data["user"]["role"] == "CUSTOMER"
    assert "passwordHash" not in data["user"]

    profile = await client.get(
        "/api/auth/profile", headers={"Authorization": f"Bearer {data['token']}"}
    )
    assert profile.status_code == 200
    assert profile.json()["data"]["firstName"] == "Nina"


@pytest.mark.asyncio
async def test_register_duplicate_email_rejected(client):
    await client.post("/api/auth/register", json=REGISTRATION)
    resp = await client.post("/api/auth/register", json=REGISTRATION)

    assert resp.status_code == 400
    assert resp.json()["message"] == "User with this email already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override",
    [
        {"password": "weakpass"},
        {"password": "password123"},
        {"role": "ADMIN"},
        {"email": "not-an-email"},
        {"firstName": "N"},
    ],
    ids=["weak-password", "no-uppercase", "admin-role", "bad-email", "short-name"],
)
async def test_register_validation(client, override):
    resp = await client.post("/api/auth/register", json={**REGISTRATION, **override})

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert body["error"]


@pytest.mark.asyncio
async def test_login_success_and_failure(client, db):
    await make_user(db, "SUPPLIER", "supplier@globex.com")

    ok = await client.post(
        "/api/auth/login", json={"email": "supplier@globex.com", "password": DEFAULT_PASSWORD}
    )
    bad = await client.post(
        "/api/auth/login", json={"email": "supplier@globex.com", "password": "Wrong1234"}
    )
    unknown = await client.post(
        "/api/auth/login", json={"email": "ghost@globex.com", "password": DEFAULT_PASSWORD}
    )

    assert ok.status_code == 200
    assert ok.json()["data"]["user"]["role"] == "SUPPLIER"
    assert ok.json()["data"]["token"]
    assert bad.status_code == 401
    assert unknown.status_code == 401
    assert bad.json()["message"] == unknown.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_deactivated_account_rejected(client, db):
    await make_user(db, "CUSTOMER", "former@acme.com", is_active=False)

    resp = await client.post(
        "/api/auth/login", json={"email": "former@acme.com", "password": DEFAULT_PASSWORD}
    )

    assert resp.status_code == 401
    assert resp.json()["message"] == "Account is deactivated"


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    resp = await client.get("/api/auth/profile", headers={"Authorization": "Bearer not.a.jwt"})

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_profile_update(client, customer):
    resp = await client.put(
        "/api/auth/profile",
        json={"company": "Acme Holdings", "phone": "+1 555 0100"},
        headers=auth_headers(customer),
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["company"] == "Acme Holdings"
    assert data["phone"] == "+1 555 0100"
    assert data["email"] == customer.email


@pytest.mark.asyncio
async def test_change_password(client, customer):
    wrong = await client.put(
        "/api/auth/change-password",
        json={"currentPassword": "Nope12345", "newPassword": "N3wPassword"},
        headers=auth_headers(customer),
    )
    ok = await client.put(
        "/api/auth/change-password",
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "N3wPassword"},
        headers=auth_headers(customer),
    )
    login = await client.post(
        "/api/auth/login", json={"email": customer.email, "password": "N3wPassword"}
    )

    assert wrong.status_code == 400
    assert ok.status_code == 200
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_token_for_missing_user_is_not_found_on_profile(client):
    token = create_access_token(user_id=4242, role="CUSTOMER", email="ghost@acme.com")

    resp = await client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 404
