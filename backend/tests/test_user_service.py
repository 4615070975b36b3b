"""
SkillSwap Backend: User Directory Service Unit Tests
====================================================

What:  Browsing, profile lookup, owner-only edits and photo replacement.
How:   UserDirectory over the per-test SQLite session; photos go to a
       temporary FileService root.

What we test:
    ✅ find(): public only, search over name/skills, availability, limit, order
    ✅ get(): NotFoundError for unknown ids
    ✅ update_profile(): allow-list, ownership checked before existence
    ✅ set_profile_photo(): stores file, updates URL, removes previous photo
"""

import uuid
from pathlib import Path

import pytest

from skillswap.exceptions import ForbiddenError, NotFoundError, ValidationError
from skillswap.schemas.user import ProfileUpdate
from skillswap.services.file_service import FileService
from skillswap.services.user_service import UserDirectory


class TestFind:
    """Tests for UserDirectory.find()."""

    @pytest.mark.asyncio
    async def test_only_public_profiles(self, db_session, make_user):
        visible = await make_user("Visible")
        await make_user("Hidden", is_public=False)

        users = await UserDirectory(db_session).find()

        assert [u.id for u in users] == [visible.id]

    @pytest.mark.asyncio
    async def test_newest_first(self, db_session, make_user):
        first = await make_user("First")
        second = await make_user("Second")
        third = await make_user("Third")

        users = await UserDirectory(db_session).find()

        assert [u.id for u in users] == [third.id, second.id, first.id]

    @pytest.mark.asyncio
    async def test_search_matches_name_case_insensitive(self, db_session, make_user):
        ana = await make_user("Ana Lima")
        await make_user("Ben")

        users = await UserDirectory(db_session).find(search="aNA")

        assert [u.id for u in users] == [ana.id]

    @pytest.mark.asyncio
    async def test_search_matches_offered_and_wanted_skills(self, db_session, make_user):
        tutor = await make_user("Tutor", skills_offered=["Guitar", "Piano"])
        learner = await make_user("Learner", skills_wanted=["guitar lessons"])
        await make_user("Cook", skills_offered=["Cooking"])

        users = await UserDirectory(db_session).find(search="GUITAR")

        assert {u.id for u in users} == {tutor.id, learner.id}

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, db_session, make_user):
        await make_user("Ana")

        assert await UserDirectory(db_session).find(search="%") == []

    @pytest.mark.asyncio
    async def test_blank_search_is_ignored(self, db_session, make_user):
        await make_user("Ana")
        await make_user("Ben")

        assert len(await UserDirectory(db_session).find(search="   ")) == 2

    @pytest.mark.asyncio
    async def test_availability_filter(self, db_session, make_user):
        weekend = await make_user("Weekend", availability="weekends")
        await make_user("Evening", availability="evenings")

        users = await UserDirectory(db_session).find(availability="weekends")

        assert [u.id for u in users] == [weekend.id]

    @pytest.mark.asyncio
    async def test_search_and_availability_combined(self, db_session, make_user):
        match = await make_user("A", skills_offered=["chess"], availability="weekends")
        await make_user("B", skills_offered=["chess"], availability="evenings")
        await make_user("C", skills_offered=["go"], availability="weekends")

        users = await UserDirectory(db_session).find(search="chess", availability="weekends")

        assert [u.id for u in users] == [match.id]

    @pytest.mark.asyncio
    async def test_limit(self, db_session, make_user):
        for i in range(5):
            await make_user(f"User {i}")

        users = await UserDirectory(db_session).find(limit=3)

        assert [u.name for u in users] == ["User 4", "User 3", "User 2"]


class TestGet:
    """Tests for UserDirectory.get() / find_by_id()."""

    @pytest.mark.asyncio
    async def test_get_existing(self, db_session, make_user):
        ana = await make_user("Ana")

        user = await UserDirectory(db_session).get(ana.id)

        assert user.name == "Ana"

    @pytest.mark.asyncio
    async def test_get_private_profile_by_id(self, db_session, make_user):
        hidden = await make_user("Hidden", is_public=False)

        assert (await UserDirectory(db_session).get(hidden.id)).id == hidden.id

    @pytest.mark.asyncio
    async def test_get_unknown_raises(self, db_session):
        with pytest.raises(NotFoundError, match="User not found"):
            await UserDirectory(db_session).get(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_find_by_id_unknown_is_none(self, db_session):
        assert await UserDirectory(db_session).find_by_id(uuid.uuid4()) is None


class TestUpdateProfile:
    """Tests for UserDirectory.update_profile()."""

    @pytest.mark.asyncio
    async def test_updates_allowed_fields(self, db_session, make_user):
        ana = await make_user("Ana", skills_offered=["guitar"])
        update = ProfileUpdate(
            name="  Ana Lima ",
            location="Lisbon",
            skills_offered=["Guitar", " ukulele ", "guitar", ""],
            availability="weekends",
            is_public=False,
        )

        user = await UserDirectory(db_session).update_profile(ana.id, ana.id, update)

        assert user.name == "Ana Lima"
        assert user.location == "Lisbon"
        assert user.skills_offered == ["Guitar", "ukulele"]
        assert user.availability == "weekends"
        assert user.is_public is False

    @pytest.mark.asyncio
    async def test_unlisted_fields_are_ignored(self, db_session, make_user):
        ana = await make_user("Ana")
        update = ProfileUpdate.model_validate(
            {"location": "Porto", "email": "evil@example.com", "password_hash": "x", "id": str(uuid.uuid4())}
        )

        user = await UserDirectory(db_session).update_profile(ana.id, ana.id, update)

        assert user.location == "Porto"
        assert user.email == ana.email
        assert user.password_hash == ana.password_hash
        assert user.id == ana.id

    @pytest.mark.asyncio
    async def test_omitted_fields_are_untouched(self, db_session, make_user):
        ana = await make_user("Ana", skills_wanted=["cooking"], location="Lisbon")

        user = await UserDirectory(db_session).update_profile(ana.id, ana.id, ProfileUpdate(name="Ana B"))

        assert user.skills_wanted == ["cooking"]
        assert user.location == "Lisbon"

    @pytest.mark.asyncio
    async def test_other_users_profile_is_forbidden(self, db_session, make_user):
        ana = await make_user("Ana")
        ben = await make_user("Ben")

        with pytest.raises(ForbiddenError, match="your own profile"):
            await UserDirectory(db_session).update_profile(ana.id, ben.id, ProfileUpdate(name="Hacked"))

        assert (await UserDirectory(db_session).get(ana.id)).name == "Ana"

    @pytest.mark.asyncio
    async def test_ownership_checked_before_existence(self, db_session, make_user):
        """Editing a non-existent id that isn't yours is 403, not 404."""
        ben = await make_user("Ben")

        with pytest.raises(ForbiddenError):
            await UserDirectory(db_session).update_profile(uuid.uuid4(), ben.id, ProfileUpdate(name="x"))

    @pytest.mark.asyncio
    async def test_own_deleted_profile_is_not_found(self, db_session):
        ghost = uuid.uuid4()

        with pytest.raises(NotFoundError):
            await UserDirectory(db_session).update_profile(ghost, ghost, ProfileUpdate(name="x"))


class TestProfilePhoto:
    """Tests for UserDirectory.set_profile_photo()."""

    @pytest.mark.asyncio
    async def test_stores_photo_and_updates_url(self, db_session, make_user, temp_storage, sample_photo_bytes):
        ana = await make_user("Ana")
        files = FileService(storage_root=temp_storage)
        directory = UserDirectory(db_session, files=files)

        url = await directory.set_profile_photo(ana.id, ana.id, "me.png", sample_photo_bytes)

        assert url.startswith("/api/files/photos/")
        assert files.path_from_url(url).read_bytes() == sample_photo_bytes
        assert (await directory.get(ana.id)).profile_photo_url == url

    @pytest.mark.asyncio
    async def test_replacing_photo_removes_previous(self, db_session, make_user, temp_storage, sample_photo_bytes):
        ana = await make_user("Ana")
        files = FileService(storage_root=temp_storage)
        directory = UserDirectory(db_session, files=files)

        first_url = await directory.set_profile_photo(ana.id, ana.id, "one.png", sample_photo_bytes)
        first_path = files.path_from_url(first_url)
        second_url = await directory.set_profile_photo(ana.id, ana.id, "two.jpg", sample_photo_bytes)

        assert second_url != first_url
        assert not first_path.exists()
        assert files.path_from_url(second_url).exists()

    @pytest.mark.asyncio
    async def test_external_photo_url_is_left_alone(self, db_session, make_user, temp_storage, sample_photo_bytes):
        ana = await make_user("Ana", profile_photo_url="https://cdn.example.com/ana.png")
        directory = UserDirectory(db_session, files=FileService(storage_root=temp_storage))

        url = await directory.set_profile_photo(ana.id, ana.id, "me.png", sample_photo_bytes)

        assert url.startswith("/api/files/")

    @pytest.mark.asyncio
    async def test_invalid_photo_leaves_profile_unchanged(self, db_session, make_user, temp_storage):
        ana = await make_user("Ana")
        directory = UserDirectory(db_session, files=FileService(storage_root=temp_storage))

        with pytest.raises(ValidationError):
            await directory.set_profile_photo(ana.id, ana.id, "me.gif", b"GIF89a")

        assert (await directory.get(ana.id)).profile_photo_url is None
        assert not (Path(temp_storage) / "photos").exists()

    @pytest.mark.asyncio
    async def test_other_users_photo_is_forbidden(self, db_session, make_user, temp_storage, sample_photo_bytes):
        ana = await make_user("Ana")
        ben = await make_user("Ben")
        directory = UserDirectory(db_session, files=FileService(storage_root=temp_storage))

        with pytest.raises(ForbiddenError):
            await directory.set_profile_photo(ana.id, ben.id, "me.png", sample_photo_bytes)
