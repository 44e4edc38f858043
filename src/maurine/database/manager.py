import asyncio
import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

import aiosqlite
from aiosqlitepool import SQLiteConnectionPool
from litestar.types.protocols import Logger

from maurine.schemas.records import Conversation, User


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ExpiryPolicy:
    """Maximum age of each record kind, measured from creation."""

    user_ttl: timedelta = timedelta(days=3)
    conversation_ttl: timedelta = timedelta(days=4)

    @classmethod
    def from_seconds(cls, user_ttl: float, conversation_ttl: float) -> "ExpiryPolicy":
        return cls(
            user_ttl=timedelta(seconds=user_ttl),
            conversation_ttl=timedelta(seconds=conversation_ttl),
        )


async def init_database(db_pool: SQLiteConnectionPool) -> None:
    async with db_pool.connection() as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS users (
                phone_number TEXT PRIMARY KEY,
                name TEXT,
                created_at REAL NOT NULL
            )
        """)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                user_phone_number TEXT PRIMARY KEY,
                messages TEXT NOT NULL,
                created_at REAL NOT NULL
            )
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_users_created_at
            ON users(created_at)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_conversations_created_at
            ON conversations(created_at)
        """)
        await db.commit()  # type: ignore


async def create_db_pool(db_path: str, logger: Logger) -> SQLiteConnectionPool:
    def sqlite_connection() -> aiosqlite.Connection:
        if db_path == ":memory:":
            logger.info("Creating in-memory database connection")
            return aiosqlite.connect("file::memory:?cache=shared", uri=True)

        logger.info("Creating connection to database at %s", db_path)
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return aiosqlite.connect(db_path)

    db_pool = SQLiteConnectionPool(connection_factory=sqlite_connection)  # type: ignore
    try:
        await init_database(db_pool)
    except Exception:
        await db_pool.close()
        raise
    logger.info("Database initialized")
    return db_pool


class RecordStore:
    """
    Users and conversations keyed by phone number.

    Every record expires a fixed time after it was created. Expired records are
    invisible to lookups straight away and are deleted later by purge_expired().
    Saving a record never moves its creation time, so activity does not extend
    its lifetime.
    """

    def __init__(
        self,
        db_pool: SQLiteConnectionPool,
        expiry: ExpiryPolicy = ExpiryPolicy(),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db_pool = db_pool
        self.expiry = expiry
        self.clock = clock

    def _cutoff(self, ttl: timedelta) -> float:
        return (self.clock() - ttl).timestamp()

    async def find_user(self, phone_number: str) -> Optional[User]:
        async with self.db_pool.connection() as db:
            cursor = await db.execute(
                "SELECT phone_number, name, created_at FROM users WHERE phone_number = ? AND created_at > ?",
                (phone_number, self._cutoff(self.expiry.user_ttl)),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return User(
            phone_number=row[0],
            name=row[1],
            created_at=datetime.fromtimestamp(row[2], timezone.utc),
        )

    async def create_user(self, phone_number: str) -> User:
        user = User(phone_number=phone_number, created_at=self.clock())
        # REPLACE clears out an expired row the sweep has not reached yet
        async with self.db_pool.connection() as db:
            await db.execute(
                "INSERT OR REPLACE INTO users (phone_number, name, created_at) VALUES (?, ?, ?)",
                (user.phone_number, user.name, user.created_at.timestamp()),
            )
            await db.commit()  # type: ignore
        return user

    async def save_user(self, user: User) -> None:
        async with self.db_pool.connection() as db:
            await db.execute(
                """
                INSERT INTO users (phone_number, name, created_at) VALUES (?, ?, ?)
                ON CONFLICT(phone_number) DO UPDATE SET name = excluded.name
                """,
                (user.phone_number, user.name, user.created_at.timestamp()),
            )
            await db.commit()  # type: ignore

    async def find_or_create_user(self, phone_number: str) -> User:
        user = await self.find_user(phone_number)
        if user is None:
            user = await self.create_user(phone_number)
        return user

    async def find_conversation(self, user: str) -> Optional[Conversation]:
        async with self.db_pool.connection() as db:
            cursor = await db.execute(
                "SELECT user_phone_number, messages, created_at FROM conversations WHERE user_phone_number = ? AND created_at > ?",
                (user, self._cutoff(self.expiry.conversation_ttl)),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return Conversation(
            user=row[0],
            messages=json.loads(row[1]),
            created_at=datetime.fromtimestamp(row[2], timezone.utc),
        )

    async def create_conversation(self, user: str) -> Conversation:
        conversation = Conversation(user=user, created_at=self.clock())
        async with self.db_pool.connection() as db:
            await db.execute(
                "INSERT OR REPLACE INTO conversations (user_phone_number, messages, created_at) VALUES (?, ?, ?)",
                (conversation.user, "[]", conversation.created_at.timestamp()),
            )
            await db.commit()  # type: ignore
        return conversation

    async def save_conversation(self, conversation: Conversation) -> None:
        async with self.db_pool.connection() as db:
            await db.execute(
                """
                INSERT INTO conversations (user_phone_number, messages, created_at) VALUES (?, ?, ?)
                ON CONFLICT(user_phone_number) DO UPDATE SET messages = excluded.messages
                """,
                (
                    conversation.user,
                    json.dumps(conversation.messages),
                    conversation.created_at.timestamp(),
                ),
            )
            await db.commit()  # type: ignore

    async def find_or_create_conversation(self, user: str) -> Conversation:
        conversation = await self.find_conversation(user)
        if conversation is None:
            conversation = await self.create_conversation(user)
        return conversation

    async def purge_expired(self) -> Tuple[int, int]:
        """Delete expired records. Returns (users removed, conversations removed)."""
        async with self.db_pool.connection() as db:
            users = await db.execute(
                "DELETE FROM users WHERE created_at <= ?",
                (self._cutoff(self.expiry.user_ttl),),
            )
            conversations = await db.execute(
                "DELETE FROM conversations WHERE created_at <= ?",
                (self._cutoff(self.expiry.conversation_ttl),),
            )
            await db.commit()  # type: ignore
            return users.rowcount, conversations.rowcount


async def sweep_expired(store: RecordStore, interval: float, logger: Logger) -> None:
    """Periodically delete expired users and conversations until cancelled."""
    try:
        while True:
            try:
                users, conversations = await store.purge_expired()
                if users or conversations:
                    logger.info(
                        f"Purged {users} expired users and {conversations} expired conversations"
                    )
            except Exception as e:
                logger.error(f"Failed to purge expired records: {e}")

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("Stopping expired record sweep")
        raise
