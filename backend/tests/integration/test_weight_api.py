import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_empty_weight_document(client: AsyncClient):
    r = await client.get("/api/weight")
    assert r.status_code == 200
    assert r.json() == {"weight": {"goal": 0, "daily": []}}


@pytest.mark.asyncio
async def test_record_replaces_same_day(client: AsyncClient):
    r = await client.post("/api/weight", json={"date": "2025-08-15", "weight": 181.04})
    assert r.status_code == 201
    assert r.json() == {"date": "2025-08-15", "weight": 181.0}

    await client.post("/api/weight", json={"date": "2025-08-16", "weight": 180.2})
    await client.post("/api/weight", json={"date": "2025-08-15", "weight": 180.9})

    daily = (await client.get("/api/weight")).json()["weight"]["daily"]
    assert daily == [
        {"date": "2025-08-16", "weight": 180.2},
        {"date": "2025-08-15", "weight": 180.9},
    ]


@pytest.mark.asyncio
async def test_record_defaults_to_today(client: AsyncClient):
    r = await client.post("/api/weight", json={"weight": 175})
    assert r.status_code == 201
    date = r.json()["date"]
    assert len(date) == 10 and date[4] == "-" and date[7] == "-"


@pytest.mark.asyncio
@pytest.mark.parametrize("weight", [0, -5, 1001, "heavy"])
async def test_out_of_range_weight_is_rejected(client: AsyncClient, weight):
    r = await client.post("/api/weight", json={"date": "2025-08-15", "weight": weight})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_goal_replacement(client: AsyncClient):
    r = await client.put("/api/weight/goal", json={"goal": 170})
    assert r.status_code == 200
    assert r.json() == {"goal": 170}

    await client.put("/api/weight/goal", json={"goal": 165.5})
    assert (await client.get("/api/weight")).json()["weight"]["goal"] == 165.5


@pytest.mark.asyncio
async def test_delete_measurement(client: AsyncClient):
    await client.post("/api/weight", json={"date": "2025-08-15", "weight": 181})
    r = await client.delete("/api/weight/2025-08-15")
    assert r.status_code == 204
    assert (await client.get("/api/weight")).json()["weight"]["daily"] == []

    # deleting a missing day is not an error
    r = await client.delete("/api/weight/2025-08-15")
    assert r.status_code == 204

    r = await client.delete("/api/weight/yesterday")
    assert r.status_code == 400
