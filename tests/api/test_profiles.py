"""Tests for public profile endpoints."""
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.bookmark import BookmarkCreate
from schemas.tag import TagCreate
from services.bookmark_service import create_bookmark
from services.tag_service import create_tag


async def add(db: AsyncSession, user: User, url: str, **kwargs: object) -> str:
    bookmark = await create_bookmark(db, user.id, BookmarkCreate(url=url, title="T", **kwargs))
    return str(bookmark.id)


async def test__public_bookmarks__only_public_current_bookmarks(
    client: AsyncClient, db_session: AsyncSession, other_user: User,
) -> None:
    public = await add(db_session, other_user, "https://public.test", is_public=True)
    await add(db_session, other_user, "https://private.test")
    await add(db_session, other_user, "https://versioned.test", is_public=True)
    # New version stays public even though not requested
    latest = await add(db_session, other_user, "https://versioned.test")

    response = await client.get("/profile/other-user/bookmarks")
    assert response.status_code == 200
    page = response.json()
    assert [b["id"] for b in page["collection"]] == [latest, public]
    assert page["nextPage"] is None


async def test__public_bookmarks__public_projection_hides_private_fields(
    client: AsyncClient, db_session: AsyncSession, other_user: User,
) -> None:
    await add(db_session, other_user, "https://public.test", is_public=True, tags=["python"])

    entry = (await client.get("/profile/other-user/bookmarks")).json()["collection"][0]
    assert "isPublic" not in entry
    assert "outdated" not in entry
    assert entry["owner"] == str(other_user.id)
    assert entry["tags"] == ["python"]


async def test__public_bookmarks__tag_filter_and_pagination(
    client: AsyncClient, db_session: AsyncSession, other_user: User, settings_override,
) -> None:
    settings_override(BOOKMARK_PAGE_SIZE=1)
    first = await add(db_session, other_user, "https://1.test", is_public=True, tags=["a"])
    await add(db_session, other_user, "https://2.test", is_public=True, tags=["b"])
    third = await add(db_session, other_user, "https://3.test", is_public=True, tags=["a"])

    page = (await client.get("/profile/other-user/bookmarks", params={"tags": "a"})).json()
    assert [b["id"] for b in page["collection"]] == [third]

    page = (await client.get(page["nextPage"])).json()
    assert [b["id"] for b in page["collection"]] == [first]


async def test__public_bookmarks__unknown_user_returns_404(client: AsyncClient) -> None:
    response = await client.get("/profile/nobody/bookmarks")
    assert response.status_code == 404


async def test__public_bookmarks__no_auth_required(
    client: AsyncClient, db_session: AsyncSession, other_user: User, settings_override,
) -> None:
    settings_override(DEV_MODE="false")
    await add(db_session, other_user, "https://public.test", is_public=True)

    response = await client.get("/profile/other-user/bookmarks")
    assert response.status_code == 200
    assert len(response.json()["collection"]) == 1


async def test__public_bookmark__single_public_bookmark(
    client: AsyncClient, db_session: AsyncSession, other_user: User,
) -> None:
    public = await add(db_session, other_user, "https://public.test", is_public=True)
    private = await add(db_session, other_user, "https://private.test")

    response = await client.get(f"/profile/other-user/bookmarks/{public}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == public
    assert "isPublic" not in data

    response = await client.get(f"/profile/other-user/bookmarks/{private}")
    assert response.status_code == 404
    response = await client.get(f"/profile/nobody/bookmarks/{public}")
    assert response.status_code == 404


async def test__public_bookmark__scoped_to_profile_owner(
    client: AsyncClient, db_session: AsyncSession, other_user: User, test_user: User,
) -> None:
    theirs = await add(db_session, other_user, "https://public.test", is_public=True)

    response = await client.get(f"/profile/test-user/bookmarks/{theirs}")
    assert response.status_code == 404


async def test__public_tags__only_public_tags_and_bookmarks_counted(
    client: AsyncClient, db_session: AsyncSession, other_user: User,
) -> None:
    await create_tag(db_session, other_user.id, TagCreate(name="python", is_public=True), 10)
    await add(db_session, other_user, "https://a.test", is_public=True, tags=["python", "hidden"])
    await add(db_session, other_user, "https://b.test", tags=["python"])

    response = await client.get("/profile/other-user/tags")
    assert response.status_code == 200
    assert response.json() == {"tags": [{"name": "python", "count": 1}]}

    response = await client.get("/profile/other-user/tags/python")
    assert response.status_code == 200
    assert response.json() == {"name": "python", "count": 1}
    assert (await client.get("/profile/other-user/tags/hidden")).status_code == 404
    assert (await client.get("/profile/nobody/tags")).status_code == 404
