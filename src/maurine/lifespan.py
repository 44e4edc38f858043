from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator
import asyncio
from litestar import Litestar

from maurine.config import settings
from maurine.session import PairingSession
from maurine.assistant.agent import create_assistant
from maurine.assistant.persona import Persona
from maurine.clients.whatsapp_bridge import create_whatsapp_bridge_client, register_and_maintain
from maurine.database.manager import ExpiryPolicy, RecordStore, create_db_pool, sweep_expired


async def _cancel(task: asyncio.Task[None]) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncGenerator[None, None]:
    logger = app.logger
    if logger is None:
        raise RuntimeError("App logger is None")

    # Cleanups run in reverse order, also when a later setup step raises
    async with AsyncExitStack() as stack:
        whatsapp_bridge_client = create_whatsapp_bridge_client(settings.whatsapp_bridge.url)
        stack.push_async_callback(whatsapp_bridge_client.aclose)

        # A store failure is logged but not fatal; the QR endpoint keeps working
        record_store = None
        try:
            db_pool = await create_db_pool(settings.database_path, logger)
        except Exception:
            logger.exception("Database connection error")
        else:
            stack.push_async_callback(db_pool.close)
            record_store = RecordStore(
                db_pool,
                ExpiryPolicy.from_seconds(
                    settings.record_store.user_ttl_seconds,
                    settings.record_store.conversation_ttl_seconds,
                ),
            )
            logger.info("Connected to database")
            sweep_task = asyncio.create_task(
                sweep_expired(
                    record_store, settings.record_store.sweep_interval_seconds, logger
                )
            )
            stack.push_async_callback(_cancel, sweep_task)

        if settings.ring != "local":
            registration_task = asyncio.create_task(
                register_and_maintain(
                    whatsapp_bridge_client,
                    client_id=f"maurine-{settings.ring}",
                    webhook_url=f"{settings.webhook.base_url}/webhook/whatsapp",
                    ring=settings.ring,
                    logger=logger,
                    interval=settings.whatsapp_bridge.registration_interval_seconds,
                )
            )
            stack.push_async_callback(_cancel, registration_task)

        app.state.pairing_session = PairingSession()
        app.state.persona = Persona.from_settings(settings.persona)
        app.state.assistant = create_assistant()
        app.state.whatsapp_bridge_client = whatsapp_bridge_client
        app.state.record_store = record_store

        yield
