from litestar import post, Request
from litestar.datastructures import State
from maurine.schemas.whatsapp import MessageReceived, QrIssued, SessionReady
from maurine.clients.whatsapp_bridge import fetch_quoted_message, send_reply
from maurine.assistant.dependencies import create_conversation_dependencies
from maurine.conversation import handle_user_message


@post("/webhook/whatsapp/qr")
async def handle_whatsapp_qr(request: Request, state: State, data: QrIssued) -> str:
    """Handle a new pairing QR code from the whatsapp bridge."""
    request.logger.info("QR code generated. Scan it with your WhatsApp app.")
    state.pairing_session.issue(data.qr)
    return ""


@post("/webhook/whatsapp/ready")
async def handle_whatsapp_ready(
    request: Request, state: State, data: SessionReady
) -> str:
    """Handle the whatsapp session becoming ready."""
    request.logger.info(f"{state.persona.bot_name} is ready! (wid: {data.wid})")
    state.pairing_session.mark_ready()
    return ""


@post("/webhook/whatsapp/message")
async def handle_whatsapp_message(
    request: Request, state: State, data: MessageReceived
) -> str:
    """Handle inbound whatsapp messages and reply to them."""
    request.logger.info(f"Message received: {data.body}")

    if data.is_group:
        request.logger.info("Ignoring group message.")
        return ""

    if data.has_quoted_msg:
        try:
            quoted = await fetch_quoted_message(state.whatsapp_bridge_client, data.id)
            request.logger.info(f"Quoted message: {quoted.body}")
        except Exception as e:
            request.logger.error(f"Error fetching quoted message: {e}")

    if state.record_store is None:
        request.logger.error(
            f"Record store unavailable, dropping message {data.id} from {data.sender}"
        )
        return ""

    deps = create_conversation_dependencies(state, request.logger)
    reply = await handle_user_message(deps, data.sender, data.body)

    await send_reply(state.whatsapp_bridge_client, data.id, reply, request.logger)

    return ""
