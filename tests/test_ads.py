from __future__ import annotations

import pytest


async def _create_ad(client, headers, **body):
    r = await client.post("/v1/ads", json={"title": "Maths help", "body": "Evenings", **body}, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


@pytest.mark.asyncio
async def test_staff_ad_lifecycle(client, staff_headers) -> None:
    ad = await _create_ad(client, staff_headers)
    assert ad["source"] == "website"
    assert ad["status"] == "active"
    assert ad["createdBy"] == "admin-1"

    r = await client.patch(f"/v1/ads/{ad['id']}", json={"body": "Weekends"}, headers=staff_headers)
    assert r.status_code == 200
    assert r.json()["title"] == "Maths help"
    assert r.json()["body"] == "Weekends"

    r = await client.post(f"/v1/ads/{ad['id']}/archive", headers=staff_headers)
    assert r.json()["status"] == "archived"

    r = await client.get("/v1/ads")
    assert r.json() == []

    r = await client.get("/v1/ads", params={"include_archived": "true"}, headers=staff_headers)
    assert [a["id"] for a in r.json()] == [ad["id"]]

    r = await client.patch(f"/v1/ads/{ad['id']}", json={"status": "active"}, headers=staff_headers)
    assert r.json()["status"] == "active"


@pytest.mark.asyncio
async def test_non_staff_cannot_manage_ads(client, sign_in, staff_headers) -> None:
    ad = await _create_ad(client, staff_headers)
    student = await sign_in("student-1")

    r = await client.post("/v1/ads", json={"title": "Spam"}, headers=student)
    assert r.status_code == 403
    r = await client.patch(f"/v1/ads/{ad['id']}", json={"title": "Spam"}, headers=student)
    assert r.status_code == 403
    r = await client.post(f"/v1/ads/{ad['id']}/archive")
    assert r.status_code == 403
    r = await client.get("/v1/ads", params={"include_archived": "true"}, headers=student)
    assert r.status_code == 403

    r = await client.get("/v1/ads")
    assert [a["title"] for a in r.json()] == ["Maths help"]


@pytest.mark.asyncio
async def test_ad_validation(client, staff_headers) -> None:
    r = await client.post("/v1/ads", json={"title": "  "}, headers=staff_headers)
    assert r.status_code == 400

    ad = await _create_ad(client, staff_headers, title="t" * 500)
    assert len(ad["title"]) == 120

    r = await client.patch(f"/v1/ads/{ad['id']}", json={"status": "deleted"}, headers=staff_headers)
    assert r.status_code == 400
    r = await client.patch(f"/v1/ads/{ad['id']}", json={"title": ""}, headers=staff_headers)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_unknown_ad(client, staff_headers) -> None:
    r = await client.patch("/v1/ads/not-a-uuid", json={"title": "x"}, headers=staff_headers)
    assert r.status_code == 404
    r = await client.post(
        "/v1/ads/00000000-0000-0000-0000-000000000000/archive", headers=staff_headers
    )
    assert r.status_code == 404
