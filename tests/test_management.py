"""Tests for admin-only organization and token management."""

import pytest


@pytest.mark.asyncio
async def test_admin_key_required(client):
    r = await client.post("/api/organizations", json={"name": "initech", "displayName": "Initech"})
    assert r.status_code == 401
    assert r.json()["code"] == "Unauthorized"

    r = await client.post(
        "/api/organizations",
        json={"name": "initech", "displayName": "Initech"},
        headers={"X-VISOR-API-KEY": "wrong"},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_register_organization_and_issue_token(client, admin_headers):
    r = await client.post(
        "/api/organizations",
        json={"name": "initech", "displayName": "Initech", "description": "TPS reports"},
        headers=admin_headers,
    )
    assert r.status_code == 201
    assert r.json()["data"] == {"name": "initech"}

    r = await client.post("/api/organizations/initech/tokens", json={"handle": "milton"}, headers=admin_headers)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["organization"] == "initech"
    assert data["handle"] == "milton"
    assert data["token"].startswith("vt_")

    r = await client.get("/visor", headers={"X-VISOR-TOKEN": data["token"]})
    assert r.status_code == 200
    assert r.json()["data"]["count"] == 0


@pytest.mark.asyncio
async def test_duplicate_organization_conflicts(client, admin_headers):
    body = {"name": "initech", "displayName": "Initech"}
    assert (await client.post("/api/organizations", json=body, headers=admin_headers)).status_code == 201
    r = await client.post("/api/organizations", json=body, headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["code"] == "Conflict"


@pytest.mark.asyncio
async def test_invalid_organization_name(client, admin_headers):
    r = await client.post(
        "/api/organizations", json={"name": "bad name!", "displayName": "Bad"}, headers=admin_headers
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_token_for_unknown_organization(client, admin_headers):
    r = await client.post("/api/organizations/nobody/tokens", json={"handle": "x"}, headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_member_token_is_not_admin(client, org_headers):
    r = await client.post(
        "/api/organizations",
        json={"name": "initech", "displayName": "Initech"},
        headers={"X-VISOR-API-KEY": org_headers["X-VISOR-TOKEN"]},
    )
    assert r.status_code == 401
