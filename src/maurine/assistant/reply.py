from typing import Optional, Sequence
from pydantic_ai import Agent
from litestar.types.protocols import Logger

from maurine.assistant.persona import Persona
from maurine.assistant.prompt import prompt

NO_RESPONSE_REPLY = "Sorry, I couldn’t find a response for that."
ERROR_REPLY = "Sorry, I encountered an error while processing your request."


async def generate_reply(
    assistant: Agent[None, str],
    persona: Persona,
    message: Optional[str],
    user: str,
    user_name: Optional[str],
    previous_messages: Sequence[str],
    logger: Logger,
) -> str:
    """
    Produce the bot's reply to one message.

    The owner and empty messages get canned replies without calling the model.
    Model failures are logged and turned into ERROR_REPLY, never raised.
    """
    if user == persona.owner_phone:
        return persona.owner_greeting()

    if not message:
        return persona.introduction()

    try:
        result = await assistant.run(prompt(persona, user_name, previous_messages))
    except Exception:
        logger.exception("Error fetching response from the generation service")
        return ERROR_REPLY

    return result.output or NO_RESPONSE_REPLY
