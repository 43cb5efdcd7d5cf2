"""Unit tests for RetentionService: upload registration and sweeps."""

from datetime import UTC, datetime, timedelta

import pytest

from redflag.domain.auth.model.value import UserId
from redflag.domain.conversation.model.conversation import Conversation, ConversationId
from redflag.domain.retention.model.resource import UploadedResource, UploadedResourceId
from redflag.domain.retention.model.value import BlobDeletion
from redflag.domain.retention.port.blob_store import BlobStore
from redflag.domain.retention.port.repository import UploadedResourceRepository
from redflag.domain.retention.service.retention import RetentionService
from redflag.domain.shared.error import BlobDeletionFailedError, NotFoundError, ValidationError

T0 = datetime(2026, 3, 1, 9, 0, 0, tzinfo=UTC)
EXPIRY = T0 + timedelta(days=7)


class InMemoryResourceRepository(UploadedResourceRepository):
    def __init__(self) -> None:
        self.rows: dict[UploadedResourceId, UploadedResource] = {}

    async def get(
        self, resource_id: UploadedResourceId, include_deleted: bool = False
    ) -> UploadedResource | None:
        row = self.rows.get(resource_id)
        if row is None or (row.deleted_at is not None and not include_deleted):
            return None
        return row

    async def save(self, resource: UploadedResource) -> None:
        self.rows[resource.id] = resource

    async def list_for_conversation(
        self, conversation_id: ConversationId, include_deleted: bool = False
    ) -> list[UploadedResource]:
        return [
            r
            for r in self.rows.values()
            if r.conversation_id == conversation_id and (include_deleted or r.deleted_at is None)
        ]

    async def list_expired(
        self,
        now: datetime,
        limit: int,
        after: tuple[datetime, UploadedResourceId] | None = None,
    ) -> list[UploadedResource]:
        expired = sorted(
            (r for r in self.rows.values() if r.is_sweepable(now)),
            key=lambda r: (r.auto_delete_at, str(r.id)),
        )
        if after is not None:
            cursor = (after[0], str(after[1]))
            expired = [r for r in expired if (r.auto_delete_at, str(r.id)) > cursor]
        return [r.model_copy() for r in expired[:limit]]

    async def mark_deleted(self, resource_id: UploadedResourceId, at: datetime) -> bool:
        row = self.rows.get(resource_id)
        if row is None or row.deleted_at is not None:
            return False
        row.deleted_at = at
        return True


class FakeBlobStore(BlobStore):
    def __init__(self, failing: set[str] | None = None, missing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.missing = missing or set()
        self.deleted: list[str] = []

    async def delete(self, storage_id: str) -> BlobDeletion:
        if storage_id in self.failing:
            raise BlobDeletionFailedError(storage_id, "status 500")
        if storage_id in self.missing:
            return BlobDeletion.NOT_FOUND
        self.deleted.append(storage_id)
        return BlobDeletion.DELETED


class FakeUnitOfWork:
    def __init__(self) -> None:
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


class FakeConversationRepository:
    def __init__(self, conversations: list[Conversation]) -> None:
        self._by_id = {c.id: c for c in conversations}

    async def get(self, conversation_id: ConversationId, include_deleted: bool = False):
        conversation = self._by_id.get(conversation_id)
        if conversation is None or (conversation.is_deleted and not include_deleted):
            return None
        return conversation


def _make_resource(storage_id: str, created_at: datetime = T0, days: int = 7) -> UploadedResource:
    return UploadedResource.create(
        conversation_id=ConversationId.generate(),
        storage_url=f"https://blobs.example/{storage_id}",
        storage_id=storage_id,
        file_type="image/png",
        retention_days=days,
        now=created_at,
    )


def _make_service(
    repo: InMemoryResourceRepository,
    blob_store: FakeBlobStore,
    conversations: list[Conversation] | None = None,
    batch_size: int = 100,
    uow: FakeUnitOfWork | None = None,
) -> RetentionService:
    return RetentionService(
        _repo=repo,
        _conversations=FakeConversationRepository(conversations or []),
        _blob_store=blob_store,
        _uow=uow or FakeUnitOfWork(),
        _retention_days=7,
        _batch_size=batch_size,
    )


class TestSweepBoundary:
    @pytest.mark.asyncio
    async def test_sweep_at_expiry_deletes(self) -> None:
        repo, store = InMemoryResourceRepository(), FakeBlobStore()
        resource = _make_resource("abc")
        await repo.save(resource)

        report = await _make_service(repo, store).sweep(EXPIRY)

        assert report.deleted == [resource.id]
        assert store.deleted == ["abc"]
        assert repo.rows[resource.id].deleted_at == EXPIRY

    @pytest.mark.asyncio
    async def test_sweep_one_second_before_expiry_keeps(self) -> None:
        repo, store = InMemoryResourceRepository(), FakeBlobStore()
        resource = _make_resource("abc")
        await repo.save(resource)

        report = await _make_service(repo, store).sweep(EXPIRY - timedelta(seconds=1))

        assert report.swept == 0
        assert store.deleted == []
        assert repo.rows[resource.id].deleted_at is None


class TestSweepOutcomes:
    @pytest.mark.asyncio
    async def test_second_sweep_is_a_no_op(self) -> None:
        repo, store = InMemoryResourceRepository(), FakeBlobStore()
        await repo.save(_make_resource("abc"))
        service = _make_service(repo, store)

        first = await service.sweep(EXPIRY)
        second = await service.sweep(EXPIRY + timedelta(hours=1))

        assert first.swept == 1
        assert second.swept == 0
        assert second.failed == []
        assert store.deleted == ["abc"]

    @pytest.mark.asyncio
    async def test_missing_blob_counts_as_success(self) -> None:
        repo, store = InMemoryResourceRepository(), FakeBlobStore(missing={"gone"})
        resource = _make_resource("gone")
        await repo.save(resource)

        report = await _make_service(repo, store).sweep(EXPIRY)

        assert report.missing == [resource.id]
        assert report.deleted == []
        assert repo.rows[resource.id].deleted_at == EXPIRY

    @pytest.mark.asyncio
    async def test_failed_blob_is_left_for_retry_and_batch_continues(self) -> None:
        repo = InMemoryResourceRepository()
        store = FakeBlobStore(failing={"bad"})
        bad = _make_resource("bad", created_at=T0 - timedelta(hours=1))
        good = _make_resource("good")
        await repo.save(bad)
        await repo.save(good)

        report = await _make_service(repo, store).sweep(EXPIRY)

        assert report.deleted == [good.id]
        assert [f.resource_id for f in report.failed] == [bad.id]
        assert report.failed[0].storage_id == "bad"
        assert repo.rows[bad.id].deleted_at is None

    @pytest.mark.asyncio
    async def test_failed_row_is_retried_on_next_sweep(self) -> None:
        repo = InMemoryResourceRepository()
        store = FakeBlobStore(failing={"flaky"})
        resource = _make_resource("flaky")
        await repo.save(resource)
        service = _make_service(repo, store)

        first = await service.sweep(EXPIRY)
        store.failing.clear()
        second = await service.sweep(EXPIRY + timedelta(minutes=15))

        assert len(first.failed) == 1
        assert second.deleted == [resource.id]

    @pytest.mark.asyncio
    async def test_failures_filling_a_batch_do_not_loop(self) -> None:
        repo = InMemoryResourceRepository()
        store = FakeBlobStore(failing={"f1", "f2"})
        for i, storage_id in enumerate(["f1", "f2", "ok"]):
            await repo.save(_make_resource(storage_id, created_at=T0 + timedelta(minutes=i)))

        report = await _make_service(repo, store, batch_size=2).sweep(EXPIRY + timedelta(hours=1))

        assert len(report.failed) == 2
        assert store.deleted == ["ok"]

    @pytest.mark.asyncio
    async def test_sweeps_across_several_batches(self) -> None:
        repo, store = InMemoryResourceRepository(), FakeBlobStore()
        for i in range(5):
            await repo.save(_make_resource(f"blob-{i}", created_at=T0 + timedelta(minutes=i)))

        report = await _make_service(repo, store, batch_size=2).sweep(EXPIRY + timedelta(hours=1))

        assert report.swept == 5
        assert sorted(store.deleted) == [f"blob-{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_commits_after_each_marked_row(self) -> None:
        repo, store, uow = InMemoryResourceRepository(), FakeBlobStore(), FakeUnitOfWork()
        for i in range(3):
            await repo.save(_make_resource(f"blob-{i}"))

        await _make_service(repo, store, uow=uow).sweep(EXPIRY)

        # One commit closing the batch read plus one per row
        assert uow.commits == 1 + 3


class TestRegisterUpload:
    @pytest.mark.asyncio
    async def test_registers_with_expiry_from_window(self) -> None:
        user_id = UserId.generate()
        conversation = Conversation.create(user_id=user_id, title="Chat")
        repo = InMemoryResourceRepository()
        service = _make_service(repo, FakeBlobStore(), conversations=[conversation])

        resource = await service.register_upload(
            user_id, conversation.id, "https://blobs.example/abc", "abc", "image/png", size=10
        )

        assert repo.rows[resource.id] == resource
        assert resource.auto_delete_at == resource.created_at + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_foreign_conversation_is_not_found(self) -> None:
        conversation = Conversation.create(user_id=UserId.generate(), title="Chat")
        service = _make_service(
            InMemoryResourceRepository(), FakeBlobStore(), conversations=[conversation]
        )

        with pytest.raises(NotFoundError):
            await service.register_upload(
                UserId.generate(), conversation.id, "https://blobs.example/abc", "abc", "image/png"
            )

    @pytest.mark.asyncio
    async def test_empty_storage_id_is_rejected(self) -> None:
        user_id = UserId.generate()
        conversation = Conversation.create(user_id=user_id, title="Chat")
        service = _make_service(
            InMemoryResourceRepository(), FakeBlobStore(), conversations=[conversation]
        )

        with pytest.raises(ValidationError):
            await service.register_upload(user_id, conversation.id, "https://x", " ", "image/png")
