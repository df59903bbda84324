"""
Tests for user registration.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    response = await client.post("/api/users", json={
        "email": "new@example.com",
        "name": "New Host",
        "role": "host",
        "walletAddress": "0xnew",
    })
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["email"] == "new@example.com"
    assert data["role"] == "host"
    assert data["walletAddress"] == "0xnew"
    assert data["isActive"] is True


@pytest.mark.asyncio
async def test_register_defaults_to_attendee(client: AsyncClient):
    response = await client.post("/api/users", json={"email": "fan@example.com", "name": "Fan"})
    assert response.status_code == 201
    assert response.json()["data"]["role"] == "attendee"


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, attendee):
    response = await client.post("/api/users", json={"email": "attendee@example.com", "name": "Dup"})
    assert response.status_code == 409
    assert response.json()["error"] == "Conflict"


@pytest.mark.asyncio
async def test_register_duplicate_wallet(client: AsyncClient, attendee):
    response = await client.post("/api/users", json={
        "email": "fresh@example.com",
        "name": "Fresh",
        "walletAddress": "0xattendee",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/api/users", json={"email": "not-an-email", "name": "Bad"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_user(client: AsyncClient, host):
    response = await client.get(f"/api/users/{host.id}")
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Event Host"


@pytest.mark.asyncio
async def test_get_user_not_found(client: AsyncClient):
    response = await client.get("/api/users/99999")
    assert response.status_code == 404
