"""Tests for /users/me/tags management endpoints."""
from httpx import AsyncClient


async def create_bookmark(client: AsyncClient, url: str, **extra: object) -> dict:
    response = await client.post("/users/me/bookmarks", json={"url": url, "title": "T", **extra})
    assert response.status_code == 201, response.text
    return response.json()


async def diff_types(client: AsyncClient) -> list[tuple[str, str]]:
    response = await client.get("/users/me/bookmarks/search/diff")
    assert response.status_code == 200
    return [(a["type"], a["bookmarkId"]) for a in response.json()["collection"]]


async def test__create_tag__201_then_200_for_existing(client: AsyncClient) -> None:
    response = await client.post(
        "/users/me/tags", json={"name": "Machine-Learning", "isPublic": True, "meta": {"x": 1}},
    )
    assert response.status_code == 201
    assert response.json() == {"name": "machine-learning", "isPublic": True, "meta": {"x": 1}}

    response = await client.post("/users/me/tags", json={"name": "machine-learning"})
    assert response.status_code == 200
    assert response.json()["isPublic"] is True

    listed = (await client.get("/users/me/tags")).json()["tags"]
    assert listed == [{"name": "machine-learning", "count": 0, "isPublic": True}]


async def test__create_tag__invalid_name_returns_422(client: AsyncClient) -> None:
    response = await client.post("/users/me/tags", json={"name": "not valid!"})
    assert response.status_code == 422


async def test__create_tag__limit_returns_422(client: AsyncClient, settings_override) -> None:
    settings_override(MAX_TAGS_PER_USER=1)
    assert (await client.post("/users/me/tags", json={"name": "one"})).status_code == 201

    response = await client.post("/users/me/tags", json={"name": "two"})
    assert response.status_code == 422
    assert "1 tags limit" in response.json()["detail"]


async def test__get_tag(client: AsyncClient) -> None:
    await create_bookmark(client, "https://a.test", tags=["python"])

    response = await client.get("/users/me/tags/python")
    assert response.status_code == 200
    assert response.json() == {"name": "python", "isPublic": False, "meta": {}}
    assert (await client.get("/users/me/tags/missing")).status_code == 404


async def test__patch_tag__rename_shows_on_bookmarks_and_in_diff(client: AsyncClient) -> None:
    bookmark = await create_bookmark(client, "https://a.test", tags=["python", "web"])

    response = await client.patch("/users/me/tags/python", json={"name": "py"})
    assert response.status_code == 200
    assert response.json()["name"] == "py"

    fetched = (await client.get(f"/users/me/bookmarks/{bookmark['id']}")).json()
    assert fetched["tags"] == ["py", "web"]
    assert await diff_types(client) == [
        ("created", bookmark["id"]),
        ("updated", bookmark["id"]),
    ]
    assert (await client.get("/users/me/tags/python")).status_code == 404


async def test__patch_tag__conflict_returns_409(client: AsyncClient) -> None:
    await create_bookmark(client, "https://a.test", tags=["python", "web"])

    response = await client.patch("/users/me/tags/python", json={"name": "web"})
    assert response.status_code == 409


async def test__patch_tag__merges_meta(client: AsyncClient) -> None:
    await client.post("/users/me/tags", json={"name": "python", "meta": {"color": "blue"}})

    response = await client.patch(
        "/users/me/tags/python", json={"isPublic": True, "meta": {"icon": "snake"}},
    )
    assert response.status_code == 200
    assert response.json() == {
        "name": "python",
        "isPublic": True,
        "meta": {"color": "blue", "icon": "snake"},
    }


async def test__patch_tag__not_found(client: AsyncClient) -> None:
    response = await client.patch("/users/me/tags/missing", json={"isPublic": True})
    assert response.status_code == 404


async def test__delete_tag__removes_it_from_bookmarks(client: AsyncClient) -> None:
    bookmark = await create_bookmark(client, "https://a.test", tags=["python", "web"])

    response = await client.delete("/users/me/tags/python")
    assert response.status_code == 204

    fetched = (await client.get(f"/users/me/bookmarks/{bookmark['id']}")).json()
    assert fetched["tags"] == ["web"]
    assert await diff_types(client) == [
        ("created", bookmark["id"]),
        ("updated", bookmark["id"]),
    ]
    assert (await client.delete("/users/me/tags/python")).status_code == 404


async def test__tag_changes__replaying_log_matches_snapshot(client: AsyncClient) -> None:
    """A client that replays the diff after tag changes ends up with the snapshot."""
    await create_bookmark(client, "https://a.test", tags=["python", "web"])
    await create_bookmark(client, "https://b.test", tags=["web"])
    await create_bookmark(client, "https://a.test/", tags=["new"])

    index: dict[str, dict] = {}

    async def replay(after: str | None) -> str | None:
        params = {"before": after} if after else {}
        actions = (await client.get("/users/me/bookmarks/search/diff", params=params)).json()
        for action in actions["collection"]:
            response = await client.get(f"/users/me/bookmarks/{action['bookmarkId']}")
            entry = response.json() if response.status_code == 200 else None
            if action["type"] in ("created", "updated") and entry and not entry["outdated"]:
                index[entry["id"]] = entry
            else:
                index.pop(action["bookmarkId"], None)
            after = action["id"]
        return after

    cursor = await replay(None)
    await client.patch("/users/me/tags/web", json={"name": "www"})
    await client.delete("/users/me/tags/python")
    await replay(cursor)

    snapshot = (await client.get("/users/me/bookmarks/search/index")).json()["collection"]
    assert index == {entry["id"]: entry for entry in snapshot}
    assert sorted(tuple(e["tags"]) for e in snapshot) == [("new", "www"), ("www",)]
