"""Tests for upload, download, artist performance and admin log endpoints."""

import uuid

import pytest
from httpx import AsyncClient

PASSWORD = "Passw0rd"
AUDIO = b"ID3\x03\x00fake-audio-payload"


async def _login(client: AsyncClient, username: str):
    response = await client.post("/api/auth/login", json={"username": username, "password": PASSWORD})
    assert response.status_code == 200
    return response.json()["user"]


async def _upload(client: AsyncClient, title="Night Drive", price_type="Single", filename="night.mp3", data=AUDIO):
    return await client.post(
        "/api/music/upload",
        data={"title": title, "priceType": price_type, "genre": "Synthwave"},
        files={"file": (filename, data, "audio/mpeg")},
    )


def _error(response) -> dict:
    return response.json()["errors"][0]


@pytest.mark.asyncio
async def test_artist_uploads_track(client: AsyncClient, artist):
    await _login(client, artist.username)

    response = await _upload(client)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["track"]["title"] == "Night Drive"
    assert body["track"]["release_type"] == "Single"
    assert body["track"]["artist_id"] == str(artist.id)


@pytest.mark.asyncio
async def test_upload_requires_login(client: AsyncClient):
    response = await _upload(client)

    assert response.status_code == 401
    assert _error(response)["code"] == "AUTHENTICATION_REQUIRED"


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["fan", "admin"])
async def test_only_artists_upload(client: AsyncClient, fan, admin, role):
    account = {"fan": fan, "admin": admin}[role]
    await _login(client, account.username)

    response = await _upload(client)

    assert response.status_code == 403
    assert _error(response)["detail"] == "Artist only"


@pytest.mark.asyncio
async def test_upload_rejects_bad_files(client: AsyncClient, artist):
    await _login(client, artist.username)

    response = await _upload(client, filename="payload.exe")
    assert response.status_code == 400
    assert _error(response)["detail"] == "Invalid file type"

    response = await _upload(client, data=b"")
    assert response.status_code == 400
    assert _error(response)["code"] == "INVALID_UPLOAD"

    response = await _upload(client, price_type="Remix")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_download_records_one_sale(client: AsyncClient, second_client: AsyncClient, artist, fan, store):
    await _login(client, artist.username)
    track_id = (await _upload(client, price_type="Mixtape")).json()["track"]["id"]

    await _login(second_client, fan.username)
    first = await second_client.get(f"/api/music/download/{track_id}")
    second = await second_client.get(f"/api/music/download/{track_id}")

    assert first.status_code == second.status_code == 200
    assert first.content == AUDIO
    assert first.headers["X-Sale-Amount"] == second.headers["X-Sale-Amount"] == "40"
    assert first.headers["X-Sale-Recorded"] == "true"
    assert second.headers["X-Sale-Recorded"] == "false"
    assert "Night Drive.mp3" in first.headers["content-disposition"]
    assert await store.count_sales(uuid.UUID(track_id)) == 1

    response = await client.get("/api/artist/performance")
    assert response.status_code == 200
    sales = response.json()
    assert len(sales) == 1
    assert sales[0]["fan_name"] == fan.username
    assert sales[0]["amount"] == 40
    assert sales[0]["title"] == "Night Drive"


@pytest.mark.asyncio
async def test_download_requires_login(client: AsyncClient, make_track):
    track = await make_track()

    response = await client.get(f"/api/music/download/{track.id}")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_download_unknown_track(client: AsyncClient, fan):
    await _login(client, fan.username)

    response = await client.get(f"/api/music/download/{uuid.uuid4()}")

    assert response.status_code == 404
    assert _error(response)["code"] == "RESOURCE_NOT_FOUND"


@pytest.mark.asyncio
async def test_missing_file_still_records_sale(client: AsyncClient, app, make_track, fan, store):
    track = await make_track(release_type="Album")
    app.state.track_service.storage.path_for(track.content_ref).unlink()
    await _login(client, fan.username)

    response = await client.get(f"/api/music/download/{track.id}")

    assert response.status_code == 404
    assert _error(response)["code"] == "CONTENT_MISSING"
    assert await store.count_sales(track.id, fan.id) == 1


@pytest.mark.asyncio
async def test_performance_is_artist_only(client: AsyncClient, fan):
    assert (await client.get("/api/artist/performance")).status_code == 401

    await _login(client, fan.username)
    assert (await client.get("/api/artist/performance")).status_code == 403


@pytest.mark.asyncio
async def test_admin_reads_audit_log(client: AsyncClient, second_client: AsyncClient, artist, admin):
    await _login(second_client, artist.username)
    await _upload(second_client, title="Logged Track")

    await _login(client, admin.username)
    response = await client.get("/api/admin/logs", params={"limit": 5})

    assert response.status_code == 200
    entries = response.json()
    assert len(entries) <= 5
    assert entries[0]["action"] == "User Login"
    assert entries[0]["username"] == admin.username
    actions = [entry["action"] for entry in entries]
    assert "Uploaded Music: Logged Track" in actions


@pytest.mark.asyncio
async def test_audit_log_is_admin_only(client: AsyncClient, artist):
    response = await client.get("/api/admin/logs")
    assert response.status_code == 401

    await _login(client, artist.username)
    response = await client.get("/api/admin/logs")
    assert response.status_code == 403
    assert _error(response)["detail"] == "Admin only"
