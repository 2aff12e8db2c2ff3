"""
Integration tests for MediaEntryService.

Exercises the full operation surface against SQLite: create with tags,
filtered and sorted listing, partial updates, version checks, soft
delete and tenant isolation.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.config.database import DatabaseManager
from mediatracker.db.models import User
from mediatracker.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from mediatracker.models.enums import EntryStatus, MediaSubType, MediaType
from mediatracker.models.media_entry import MediaEntryRead
from mediatracker.services.media_entry_service import MediaEntryService
from tests.conftest import FrozenClock
from tests.factories.media_entry_factory import (
    EntryListQueryFactory,
    MediaEntryDraftFactory,
    MediaEntryPatchFactory,
)
from tests.factories.user_factory import UserFactory

pytestmark = pytest.mark.asyncio


@pytest.fixture
def service() -> MediaEntryService:
    return MediaEntryService()


async def _create(
    service: MediaEntryService, session: AsyncSession, user: User, **fields: object
) -> MediaEntryRead:
    return await service.create_entry(
        session, user.id, MediaEntryDraftFactory.build(**fields)
    )


async def _titles(
    service: MediaEntryService, session: AsyncSession, user: User, **query: object
) -> list[str]:
    items, _ = await service.list_entries(
        session, user.id, EntryListQueryFactory.build(**query)
    )
    return [item.title for item in items]


class TestEndToEnd:
    """The full lifecycle of one entry."""

    async def test_expanse_lifecycle(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        created = await _create(
            service,
            db_session,
            user,
            title="The Expanse",
            type="Series",
            sub_type="LiveAction",
            status="Watching",
            rating=Decimal("9.0"),
            tags=["SciFi", "Drama"],
        )

        items, total = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build()
        )
        assert total == 1
        assert set(items[0].tags) == {"scifi", "drama"}

        updated = await service.update_entry(
            db_session,
            user.id,
            created.id,
            MediaEntryPatchFactory.build(tags=["SciFi", "Space"]),
        )
        assert set(updated.tags) == {"scifi", "space"}

        await service.delete_entry(db_session, user.id, created.id)

        with pytest.raises(NotFoundError):
            await service.get_entry(db_session, user.id, created.id)
        items, total = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build()
        )
        assert items == []
        assert total == 0


class TestCreateAndGet:
    """Tests for create_entry/get_entry."""

    async def test_create_returns_projection(
        self,
        db_session: AsyncSession,
        user: User,
        service: MediaEntryService,
        clock: FrozenClock,
    ) -> None:
        created = await _create(
            service,
            db_session,
            user,
            title="Spirited Away",
            type="Movie",
            sub_type="anime",
            status=None,
            rating=Decimal("10"),
            notes="  ",
            tags=["Ghibli", "ghibli"],
        )

        assert created.type is MediaType.MOVIE
        assert created.sub_type is MediaSubType.ANIME
        assert created.status is EntryStatus.PLANNING
        assert created.notes is None
        assert created.tags == ["ghibli"]
        assert created.created_at == created.updated_at == clock.now
        assert created.version == 1

        fetched = await service.get_entry(db_session, user.id, created.id)
        assert fetched == created

    async def test_invalid_draft_writes_nothing(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        with pytest.raises(ValidationError):
            await _create(service, db_session, user, rating=Decimal("7.3"), tags=["x"])

        _, total = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build()
        )
        assert total == 0
        assert await service.list_tags(db_session, user.id) == []

    async def test_unknown_id_is_not_found(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        missing = uuid.uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            await service.get_entry(db_session, user.id, missing)

        assert exc_info.value.status_code == 404
        assert str(missing) in exc_info.value.message

    async def test_other_users_entry_is_not_found(
        self,
        db_session: AsyncSession,
        user: User,
        other_user: User,
        service: MediaEntryService,
    ) -> None:
        theirs = await _create(service, db_session, other_user, title="Private")

        with pytest.raises(NotFoundError):
            await service.get_entry(db_session, user.id, theirs.id)
        with pytest.raises(NotFoundError):
            await service.update_entry(
                db_session, user.id, theirs.id, MediaEntryPatchFactory.build(title="x")
            )
        with pytest.raises(NotFoundError):
            await service.delete_entry(db_session, user.id, theirs.id)
        assert await _titles(service, db_session, user) == []


class TestListing:
    """Tests for filters, sorting and paging."""

    @pytest.fixture
    async def library(
        self,
        db_session: AsyncSession,
        user: User,
        service: MediaEntryService,
        clock: FrozenClock,
    ) -> None:
        rows = [
            dict(title="Arrival", type="Movie", status="Completed", rating=Decimal("8.5"),
                 notes="linguistics", tags=["scifi"]),
            dict(title="Cowboy Bebop", type="Series", sub_type="Anime", status="Completed",
                 rating=Decimal("9.5"), notes=None, tags=["scifi", "classic"]),
            dict(title="Barry", type="Series", sub_type="LiveAction", status="Watching",
                 rating=None, notes="dark comedy", tags=["comedy"]),
            dict(title="akira", type="Movie", sub_type="Anime", status="Planning",
                 rating=Decimal("7"), notes=None, tags=["Classic"]),
        ]
        for fields in rows:
            await _create(service, db_session, user, **fields)
            clock.advance(minutes=1)

    @pytest.mark.usefixtures("library")
    async def test_default_order_is_most_recently_updated(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        assert await _titles(service, db_session, user) == [
            "akira",
            "Barry",
            "Cowboy Bebop",
            "Arrival",
        ]

    @pytest.mark.usefixtures("library")
    async def test_title_sort_is_case_insensitive(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        assert await _titles(service, db_session, user, sort="title", dir="asc") == [
            "akira",
            "Arrival",
            "Barry",
            "Cowboy Bebop",
        ]

    @pytest.mark.usefixtures("library")
    @pytest.mark.parametrize(
        ("direction", "expected"),
        [
            ("desc", ["Cowboy Bebop", "Arrival", "akira", "Barry"]),
            ("asc", ["akira", "Arrival", "Cowboy Bebop", "Barry"]),
        ],
    )
    async def test_unrated_entries_sort_last(
        self,
        db_session: AsyncSession,
        user: User,
        service: MediaEntryService,
        direction: str,
        expected: list[str],
    ) -> None:
        assert await _titles(service, db_session, user, sort="rating", dir=direction) == expected

    @pytest.mark.usefixtures("library")
    async def test_unknown_sort_falls_back_to_updated_desc(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        assert await _titles(service, db_session, user, sort="stars", dir="up") == [
            "akira",
            "Barry",
            "Cowboy Bebop",
            "Arrival",
        ]

    @pytest.mark.usefixtures("library")
    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ({"type": "series"}, {"Cowboy Bebop", "Barry"}),
            ({"sub_type": "Anime"}, {"Cowboy Bebop", "akira"}),
            ({"status": "completed"}, {"Arrival", "Cowboy Bebop"}),
            ({"tag": "CLASSIC"}, {"Cowboy Bebop", "akira"}),
            ({"q": "BEBOP"}, {"Cowboy Bebop"}),
            ({"q": "comedy"}, {"Barry"}),
            ({"q": "%"}, set()),
            ({"type": "Movie", "tag": "scifi"}, {"Arrival"}),
        ],
    )
    async def test_filters(
        self,
        db_session: AsyncSession,
        user: User,
        service: MediaEntryService,
        query: dict[str, str],
        expected: set[str],
    ) -> None:
        assert set(await _titles(service, db_session, user, **query)) == expected

    @pytest.mark.usefixtures("library")
    async def test_paging(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        query = dict(sort="title", dir="asc", page_size=3)

        first, total = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build(page=1, **query)
        )
        second, _ = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build(page=2, **query)
        )

        assert total == 4
        assert [item.title for item in first] == ["akira", "Arrival", "Barry"]
        assert [item.title for item in second] == ["Cowboy Bebop"]

    @pytest.mark.usefixtures("library")
    async def test_out_of_range_paging_is_normalized(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        items, total = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build(page=0, page_size=1000)
        )

        assert total == 4
        assert len(items) == 4

    @pytest.mark.usefixtures("library")
    async def test_page_past_the_end_is_empty(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        items, total = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build(page=10**18)
        )

        assert items == []
        assert total == 4

    @pytest.mark.usefixtures("library")
    async def test_listed_tags_are_sorted(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        items, _ = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build(q="bebop")
        )
        assert items[0].tags == ["classic", "scifi"]

    async def test_invalid_filter_is_rejected(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.list_entries(
                db_session, user.id, EntryListQueryFactory.build(type="NOT_A_VALID_ENUM")
            )

        assert exc_info.value.field_name == "type"
        assert exc_info.value.allowed_values == ["Movie", "Series"]

    @pytest.mark.usefixtures("library")
    async def test_tag_summary(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        summary = await service.list_tags(db_session, user.id)

        assert [(tag.name, tag.entry_count) for tag in summary] == [
            ("classic", 2),
            ("comedy", 1),
            ("scifi", 2),
        ]


class TestUpdate:
    """Tests for update_entry."""

    async def test_title_only_patch(
        self,
        db_session: AsyncSession,
        user: User,
        service: MediaEntryService,
        clock: FrozenClock,
    ) -> None:
        created = await _create(
            service, db_session, user, title="Heat", rating=Decimal("8"), tags=["crime"]
        )
        later = clock.advance(minutes=10)

        updated = await service.update_entry(
            db_session, user.id, created.id, MediaEntryPatchFactory.build(title="Heat (1995)")
        )

        assert updated.title == "Heat (1995)"
        assert updated.rating == created.rating
        assert updated.notes == created.notes
        assert updated.status == created.status
        assert updated.tags == ["crime"]
        assert updated.created_at == created.created_at
        assert updated.updated_at == later
        assert updated.version == created.version + 1

    async def test_empty_patch_changes_nothing(
        self,
        db_session: AsyncSession,
        user: User,
        service: MediaEntryService,
        clock: FrozenClock,
    ) -> None:
        created = await _create(service, db_session, user, tags=["crime"])
        clock.advance(minutes=10)

        updated = await service.update_entry(
            db_session,
            user.id,
            created.id,
            MediaEntryPatchFactory.build(title=None, rating=None, tags=None),
        )

        assert updated == created

    async def test_clear_and_empty_tags(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        created = await _create(
            service,
            db_session,
            user,
            sub_type="Documentary",
            rating=Decimal("6.5"),
            notes="watch again",
            tags=["nature"],
        )

        updated = await service.update_entry(
            db_session,
            user.id,
            created.id,
            MediaEntryPatchFactory.build(clear={"sub_type", "rating", "notes"}, tags=[]),
        )

        assert updated.sub_type is None
        assert updated.rating is None
        assert updated.notes is None
        assert updated.tags == []

    async def test_invalid_patch_changes_nothing(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        created = await _create(service, db_session, user, title="Heat", tags=["crime"])

        with pytest.raises(ValidationError):
            await service.update_entry(
                db_session,
                user.id,
                created.id,
                MediaEntryPatchFactory.build(
                    title="Changed", rating=Decimal("11"), tags=["other"]
                ),
            )

        assert await service.get_entry(db_session, user.id, created.id) == created

    async def test_stale_version_is_a_conflict(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        created = await _create(service, db_session, user, title="Heat")
        await service.update_entry(
            db_session,
            user.id,
            created.id,
            MediaEntryPatchFactory.build(title="Heat!", version=created.version),
        )

        with pytest.raises(ConflictError) as exc_info:
            await service.update_entry(
                db_session,
                user.id,
                created.id,
                MediaEntryPatchFactory.build(title="Heat?", version=created.version),
            )

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["current_version"] == created.version + 1

    async def test_body_id_must_match_route(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        created = await _create(service, db_session, user)

        with pytest.raises(BadRequestError):
            await service.update_entry(
                db_session,
                user.id,
                created.id,
                MediaEntryPatchFactory.build(id=uuid.uuid4(), title="x"),
            )

        same = await service.update_entry(
            db_session,
            user.id,
            created.id,
            MediaEntryPatchFactory.build(id=created.id, title="Renamed"),
        )
        assert same.title == "Renamed"

    async def test_deleted_entry_cannot_be_updated_or_deleted_again(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        created = await _create(service, db_session, user)
        await service.delete_entry(db_session, user.id, created.id)

        with pytest.raises(NotFoundError):
            await service.update_entry(
                db_session, user.id, created.id, MediaEntryPatchFactory.build(title="x")
            )
        with pytest.raises(NotFoundError):
            await service.delete_entry(db_session, user.id, created.id)

    async def test_deleted_entries_visible_with_include_deleted(
        self, db_session: AsyncSession, user: User, service: MediaEntryService
    ) -> None:
        created = await _create(service, db_session, user, title="Gone", tags=["old"])
        await service.delete_entry(db_session, user.id, created.id)

        items, total = await service.list_entries(
            db_session, user.id, EntryListQueryFactory.build(include_deleted=True)
        )

        assert total == 1
        assert items[0].id == created.id
        assert items[0].tags == ["old"]


class TestConcurrentUpdates:
    """Two sessions writing the same entry against a shared database file."""

    @pytest.fixture
    async def manager(self, tmp_path: Path) -> DatabaseManager:
        db = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'concurrent.db'}")
        await db.create_tables()
        yield db
        await db.drop_tables()
        await db.close()

    async def test_losing_writer_gets_a_conflict(
        self, manager: DatabaseManager, service: MediaEntryService
    ) -> None:
        factory = manager.get_session_factory()
        owner = UserFactory.build()
        async with factory() as session:
            session.add(owner)
            await session.flush()
            created = await _create(service, session, owner, title="Heat")
            await session.commit()

        async with factory() as first, factory() as second:
            await service.get_entry(first, owner.id, created.id)
            await service.get_entry(second, owner.id, created.id)

            await service.update_entry(
                first, owner.id, created.id, MediaEntryPatchFactory.build(title="Heat (1995)")
            )
            await first.commit()

            with pytest.raises(ConflictError) as exc_info:
                await service.update_entry(
                    second, owner.id, created.id, MediaEntryPatchFactory.build(title="Ronin")
                )
            await second.rollback()

        assert exc_info.value.status_code == 409
        async with factory() as session:
            current = await service.get_entry(session, owner.id, created.id)
        assert current.title == "Heat (1995)"
        assert current.version == created.version + 1
