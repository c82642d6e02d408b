"""Unit tests for the in-memory database client."""

import pytest

from w3storage.cluster.pin import PinStatus
from w3storage.db.errors import DBError
from w3storage.db.memory import MemoryDBClient
from w3storage.db.models import ImportCarInput

from tests.factories import PinFactory, PinLocationFactory

CID = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"


@pytest.fixture
def memory_db():
    return MemoryDBClient()


@pytest.fixture
def user(memory_db):
    return memory_db.create_user(issuer="did:key:z6Mk", name="alice")


class TestAuth:
    @pytest.mark.trio
    async def test_get_auth_context(self, memory_db, user):
        token = memory_db.create_auth_token(user.id, "s3cret", name="laptop")

        auth = await memory_db.get_auth_context("s3cret")

        assert auth is not None
        assert auth.user == user
        assert auth.auth_token == token

    @pytest.mark.trio
    async def test_unknown_secret(self, memory_db, user):
        memory_db.create_auth_token(user.id, "s3cret")

        assert await memory_db.get_auth_context("wrong") is None

    def test_token_for_unknown_user(self, memory_db):
        with pytest.raises(DBError, match="user not found"):
            memory_db.create_auth_token("404", "s3cret")


class TestImportCar:
    @pytest.mark.trio
    async def test_creates_content_and_upload(self, memory_db, user):
        pins = PinFactory.create_batch(2)

        upload = await memory_db.import_car(
            ImportCarInput(user=user.id, cid=CID, name="photos", pins=pins)
        )

        assert upload.user_id == user.id
        assert upload.name == "photos"
        assert upload.created is not None
        assert upload.content.cid == CID
        assert upload.content.dag_size is None
        assert upload.content.pins == pins
        assert memory_db.get_content(CID) is upload.content

    @pytest.mark.trio
    async def test_records_dag_size(self, memory_db, user):
        upload = await memory_db.import_car(
            ImportCarInput(
                user=user.id, cid=CID, name="x", pins=[PinFactory()], dag_size=42
            )
        )

        assert upload.content.dag_size == 42

    @pytest.mark.trio
    async def test_reimport_is_idempotent(self, memory_db, user):
        location = PinLocationFactory()
        first = await memory_db.import_car(
            ImportCarInput(
                user=user.id,
                cid=CID,
                name="first",
                pins=[PinFactory(status=PinStatus.PINNING, location=location)],
            )
        )
        second = await memory_db.import_car(
            ImportCarInput(
                user=user.id,
                cid=CID,
                name="second",
                pins=[PinFactory(status=PinStatus.PINNED, location=location)],
            )
        )

        assert second.id == first.id
        assert len(memory_db.uploads()) == 1
        # pins are upserted by peer
        assert [pin.status for pin in second.content.pins] == [PinStatus.PINNED]

    @pytest.mark.trio
    async def test_content_shared_between_users(self, memory_db, user):
        other = memory_db.create_user(name="bob")
        pins = [PinFactory()]

        mine = await memory_db.import_car(
            ImportCarInput(user=user.id, cid=CID, name="a", pins=pins)
        )
        theirs = await memory_db.import_car(
            ImportCarInput(user=other.id, cid=CID, name="b", pins=pins)
        )

        assert mine.id != theirs.id
        assert mine.content is theirs.content

    @pytest.mark.trio
    async def test_unknown_user(self, memory_db):
        with pytest.raises(DBError, match="user not found"):
            await memory_db.import_car(
                ImportCarInput(user="404", cid=CID, name="x", pins=[PinFactory()])
            )


class TestUpdateContentDagSize:
    @pytest.mark.trio
    async def test_update(self, memory_db, user):
        upload = await memory_db.import_car(
            ImportCarInput(user=user.id, cid=CID, name="x", pins=[PinFactory()])
        )

        await memory_db.update_content_dag_size(upload.content.id, 1234)

        assert memory_db.get_content(CID).dag_size == 1234

    @pytest.mark.trio
    async def test_unknown_content(self, memory_db):
        with pytest.raises(DBError, match="content not found"):
            await memory_db.update_content_dag_size("404", 1)
