"""Tests for tag, file object and health endpoints."""
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from models.file_object import FileObject
from models.user import User


async def test__list_tags__counts_current_bookmarks(client: AsyncClient) -> None:
    for url, tags in [
        ("https://a.test", ["python", "web"]),
        ("https://b.test", ["python"]),
        ("https://a.test/", []),  # new version of a.test inherits its tags
    ]:
        response = await client.post(
            "/users/me/bookmarks", json={"url": url, "title": "t", "tags": tags},
        )
        assert response.status_code == 201

    response = await client.get("/users/me/tags")
    assert response.status_code == 200
    assert response.json() == {
        "tags": [
            {"name": "python", "count": 2, "isPublic": False},
            {"name": "web", "count": 1, "isPublic": False},
        ],
    }


async def test__create_file_object(client: AsyncClient) -> None:
    response = await client.post(
        "/users/me/files",
        json={
            "contentUrl": "https://files.test/archive.html",
            "mimeType": "text/html",
            "size": 2048,
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["contentUrl"] == "https://files.test/archive.html"
    assert data["mimeType"] == "text/html"
    assert data["size"] == 2048
    assert "createdAt" in data

    response = await client.get(f"/users/me/files/{data['id']}")
    assert response.status_code == 200
    assert response.json() == data


async def test__create_file_object__validation(client: AsyncClient) -> None:
    response = await client.post(
        "/users/me/files",
        json={"contentUrl": "not-a-url", "mimeType": "text/html", "size": 1},
    )
    assert response.status_code == 422

    response = await client.post(
        "/users/me/files",
        json={"contentUrl": "https://files.test/x", "mimeType": "text/html", "size": -1},
    )
    assert response.status_code == 422


async def test__get_file_object__other_users_file_returns_404(
    client: AsyncClient, db_session: AsyncSession, other_user: User,
) -> None:
    file_object = FileObject(
        user_id=other_user.id,
        content_url="https://files.test/private.png",
        mime_type="image/png",
        size=1,
    )
    db_session.add(file_object)
    await db_session.flush()

    response = await client.get(f"/users/me/files/{file_object.id}")
    assert response.status_code == 404


async def test__health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "database": "ok",
        "indexActionRetentionDays": 30,
    }
    assert response.headers["X-Content-Type-Options"] == "nosniff"
