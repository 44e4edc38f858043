import asyncio
import httpx
from litestar.types.protocols import Logger

from maurine.schemas.whatsapp import QuotedMessage

WEBHOOK_EVENTS = ["qr", "ready", "message"]


def create_whatsapp_bridge_client(url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=url,
        timeout=10.0,
    )


async def send_reply(
    client: httpx.AsyncClient, message_id: str, text: str, logger: Logger
) -> None:
    """Reply to a message, quoting it in the chat."""
    response = await client.post(f"/messages/{message_id}/reply", json={"body": text})
    response.raise_for_status()
    logger.info(f"Reply submitted to whatsapp bridge (in reply to: {message_id})")


async def fetch_quoted_message(
    client: httpx.AsyncClient, message_id: str
) -> QuotedMessage:
    """Resolve the message that `message_id` quotes."""
    response = await client.get(f"/messages/{message_id}/quoted")
    response.raise_for_status()
    return QuotedMessage.model_validate(response.json())


async def register_and_maintain(
    client: httpx.AsyncClient,
    client_id: str,
    webhook_url: str,
    ring: str,
    logger: Logger,
    interval: float = 30.0,
) -> None:
    """Register our webhooks with the bridge and keep the registration alive."""
    registration = {
        "id": client_id,
        "webhook_url": webhook_url,
        "ring": ring,
        "events": WEBHOOK_EVENTS,
    }

    try:
        while True:
            try:
                response = await client.post("/register", json=registration)
                response.raise_for_status()
                logger.debug(f"Registered with whatsapp bridge as {client_id}")
            except Exception as e:
                logger.error(f"Failed to register with whatsapp bridge: {e}")

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info(f"Stopping whatsapp bridge registration for {client_id}")
        raise
