"""
Tests for the ledger session

The session is the only place that combines the reducer with storage,
so these tests check the failure paths: storage outages, bad imports,
and rejected input must never crash or corrupt anything.
"""

import asyncio

import pytest

from ledger.activity import ActivityLogger
from ledger.models import ActivityEventType, RejectionReason
from ledger.mutations import AddMember, CreateExpenditure, RecordPayment
from ledger.services.backup import export_state
from ledger.services.storage import InMemoryStateStorage, JsonFileStateStorage
from ledger.session import LedgerSession, create_ledger_session


KEY = "current_state"


@pytest.fixture
def storage() -> InMemoryStateStorage:
    return InMemoryStateStorage()


@pytest.fixture
def activity() -> ActivityLogger:
    return ActivityLogger()


@pytest.fixture
async def session(storage, activity) -> LedgerSession:
    session = LedgerSession(storage, activity_logger=activity)
    await session.start()
    return session


class TestStartup:
    """Tests for loading the ledger at startup."""

    @pytest.mark.asyncio
    async def test_first_run_uses_default(self, storage, activity):
        session = LedgerSession(storage, activity_logger=activity)
        state = await session.start()
        assert state.main_title == "SPSIB ASSOCIATION"
        assert state.members == []
        assert session.last_warning is None
        assert activity.last_event.event_type == ActivityEventType.STATE_INITIALIZED

    @pytest.mark.asyncio
    async def test_loads_saved_state(self, storage, sample_state):
        await storage.save(KEY, sample_state)
        session = LedgerSession(storage)
        assert await session.start() == sample_state

    @pytest.mark.asyncio
    async def test_load_failure_falls_back(self, storage, activity):
        storage.fail_loads = True
        session = LedgerSession(storage, activity_logger=activity)
        state = await session.start()
        assert state.members == []
        assert session.last_warning
        assert activity.last_event.event_type == ActivityEventType.LOAD_FAILED

    def test_state_before_start_raises(self, storage):
        with pytest.raises(RuntimeError):
            LedgerSession(storage).state

    @pytest.mark.asyncio
    async def test_branding_from_settings(self, storage, monkeypatch):
        monkeypatch.setenv("LEDGER_BRANDING_MAIN_TITLE", "RIVERSIDE FC")
        session = LedgerSession(storage)
        state = await session.start()
        assert state.main_title == "RIVERSIDE FC"

    @pytest.mark.asyncio
    async def test_corrupt_file_is_kept_aside(self, tmp_path):
        """The next save must not overwrite a ledger that failed to parse."""
        storage = JsonFileStateStorage(tmp_path)
        storage.path_for(KEY).write_text('{"members": [', encoding="utf-8")

        session = LedgerSession(storage)
        state = await session.start()
        assert state.members == []

        kept = list(tmp_path.glob(f"{KEY}.corrupt-*.json"))
        assert len(kept) == 1
        assert kept[0].read_text(encoding="utf-8") == '{"members": ['
        assert str(kept[0]) in session.last_warning

        await session.dispatch(AddMember(name="J. DOE"))
        assert kept[0].read_text(encoding="utf-8") == '{"members": ['
        assert (await storage.load(KEY)).members[0].name == "J. DOE"


class TestDispatch:
    """Tests for applying actions and saving."""

    @pytest.mark.asyncio
    async def test_applied_action_is_saved(self, session, storage):
        outcome = await session.dispatch(AddMember(name="J. DOE"))
        assert outcome.applied
        assert outcome.saved
        assert outcome.warning is None
        saved = await storage.load(KEY)
        assert [m.name for m in saved.members] == ["J. DOE"]

    @pytest.mark.asyncio
    async def test_save_stamps_last_backup(self, session, storage):
        before = session.state.last_backup
        await session.dispatch(AddMember(name="J. DOE"))
        saved = await storage.load(KEY)
        assert saved.last_backup == session.state.last_backup
        assert saved.last_backup >= before

    @pytest.mark.asyncio
    async def test_rejected_action_not_saved(self, session, storage, activity):
        before = session.state
        outcome = await session.dispatch(RecordPayment(member_index=0, month="Jan", amount=600))
        assert not outcome.applied
        assert outcome.result.reason == RejectionReason.INVALID_INDEX
        assert session.state is before
        assert storage.save_count == 0
        assert activity.last_event.event_type == ActivityEventType.MUTATION_REJECTED

    @pytest.mark.asyncio
    async def test_save_failure_keeps_memory_state(self, session, storage, activity):
        """An outage loses durability, not the change itself."""
        await session.dispatch(AddMember(name="J. DOE"))
        storage.fail_saves = True

        outcome = await session.dispatch(AddMember(name="A. SMITH"))
        assert outcome.applied
        assert not outcome.saved
        assert outcome.warning
        assert [m.name for m in session.state.members] == ["A. SMITH", "J. DOE"]
        assert activity.last_event.event_type == ActivityEventType.SAVE_FAILED

        saved = await storage.load(KEY)
        assert [m.name for m in saved.members] == ["J. DOE"]

    @pytest.mark.asyncio
    async def test_next_mutation_retries_save(self, session, storage):
        storage.fail_saves = True
        await session.dispatch(AddMember(name="J. DOE"))
        storage.fail_saves = False

        outcome = await session.dispatch(RecordPayment(member_index=0, month="Jan", amount=600))
        assert outcome.saved
        saved = await storage.load(KEY)
        assert saved.members[0].contributions["Jan"].amount == 600
        assert session.last_warning is None

    @pytest.mark.asyncio
    async def test_retry_save(self, session, storage):
        storage.fail_saves = True
        await session.dispatch(AddMember(name="J. DOE"))
        storage.fail_saves = False
        outcome = await session.retry_save()
        assert outcome.saved
        assert (await storage.load(KEY)).members[0].name == "J. DOE"

    @pytest.mark.asyncio
    async def test_overlapping_dispatches_keep_every_change(self, tmp_path):
        """Concurrent dispatches queue up instead of overwriting each other."""
        storage = JsonFileStateStorage(tmp_path)
        session = LedgerSession(storage)
        await session.start()

        outcomes = await asyncio.gather(
            session.dispatch(AddMember(name="AMY")),
            session.dispatch(AddMember(name="ZED")),
            session.dispatch(CreateExpenditure(date="2024-01-15", description="TURF", amount=200)),
        )

        assert all(outcome.applied and outcome.saved for outcome in outcomes)
        assert [m.name for m in session.state.members] == ["AMY", "ZED"]
        saved = await storage.load(KEY)
        assert [m.name for m in saved.members] == ["AMY", "ZED"]
        assert len(saved.expenditures) == 1
        assert saved == session.state


class TestImportExport:
    """Tests for whole-ledger backup through the session."""

    @pytest.mark.asyncio
    async def test_import_replaces_state(self, session, storage, sample_state):
        outcome = await session.import_document(export_state(sample_state))
        assert outcome.applied
        assert outcome.saved
        assert [m.name for m in session.state.members] == ["A. KUMAR", "B. RAO"]
        assert len((await storage.load(KEY)).expenditures) == 3

    @pytest.mark.asyncio
    async def test_malformed_import_keeps_state(self, session, storage, activity):
        """A file without members leaves memory and storage untouched."""
        await session.dispatch(AddMember(name="J. DOE"))
        before_memory = session.state
        before_stored = storage.raw(KEY)

        outcome = await session.import_document('{"mainTitle": "X", "expenditures": []}')
        assert not outcome.applied
        assert outcome.result.reason == RejectionReason.MALFORMED_IMPORT
        assert "members" in outcome.result.message
        assert session.state is before_memory
        assert storage.raw(KEY) == before_stored
        assert activity.last_event.event_type == ActivityEventType.IMPORT_REJECTED

    @pytest.mark.asyncio
    async def test_export_matches_state(self, session):
        await session.dispatch(CreateExpenditure(
            date="2024-01-15", description="TURF", amount=200, images=["data:x"],
        ))
        exported = session.export_document()
        assert '"TURF"' in exported
        assert '"data:x"' in exported


class TestFactory:
    """Tests for create_ledger_session."""

    @pytest.mark.asyncio
    async def test_file_backed_session_persists(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(tmp_path / "store"))
        session = create_ledger_session(use_storage=True)
        assert isinstance(session.storage, JsonFileStateStorage)
        await session.start()
        await session.dispatch(AddMember(name="J. DOE"))

        reopened = create_ledger_session(use_storage=True)
        state = await reopened.start()
        assert [m.name for m in state.members] == ["J. DOE"]
        assert (tmp_path / "store" / f"{KEY}.json").exists()

    @pytest.mark.asyncio
    async def test_unusable_data_dir_falls_back_to_memory(self, tmp_path, monkeypatch):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(blocker / "store"))
        session = create_ledger_session(use_storage=True)
        assert isinstance(session.storage, InMemoryStateStorage)

    def test_in_memory_session(self):
        session = create_ledger_session(use_storage=False)
        assert isinstance(session.storage, InMemoryStateStorage)
