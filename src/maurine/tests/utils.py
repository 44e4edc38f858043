"""Test utilities and shared mocks."""
import os
import tempfile
from datetime import datetime, timedelta, timezone

from maurine.assistant.persona import Persona
from maurine.database.manager import ExpiryPolicy, RecordStore, create_db_pool


class MockLogger:
    """Mock logger that implements the Litestar Logger protocol."""
    
    def debug(self, *args, **kwargs): pass
    def info(self, *args, **kwargs): pass
    def warning(self, *args, **kwargs): pass
    def warn(self, *args, **kwargs): pass
    def error(self, *args, **kwargs): pass
    def exception(self, *args, **kwargs): pass
    def critical(self, *args, **kwargs): pass
    def fatal(self, *args, **kwargs): pass
    def setLevel(self, *args, **kwargs): pass


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


async def setup_record_store(clock=None, expiry=ExpiryPolicy()):
    """Create a RecordStore over a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp_db:
        db_path = tmp_db.name

    db_pool = await create_db_pool(db_path, MockLogger())
    store = RecordStore(db_pool, expiry, clock or FakeClock())
    return db_path, db_pool, store


async def cleanup_record_store(db_path, db_pool):
    await db_pool.close()
    os.unlink(db_path)


PERSONA = Persona(
    bot_name="Maurine-4o",
    owner_name="Maurine",
    owner_phone="254700000000@c.us",
    full_name="Maurine Mwendwa",
    traits=("Friendly", "Curious"),
    timezone="Africa/Nairobi",
)
