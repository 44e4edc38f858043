from dataclasses import dataclass
from litestar.types.protocols import Logger
from litestar.datastructures import State
from pydantic_ai import Agent

from maurine.assistant.persona import Persona
from maurine.database.manager import RecordStore


@dataclass
class ConversationDependencies:
    """Everything needed to answer one message."""

    record_store: RecordStore
    assistant: Agent[None, str]
    persona: Persona
    logger: Logger


def create_conversation_dependencies(
    state: State, logger: Logger
) -> ConversationDependencies:
    """Create conversation dependencies from Litestar state."""
    return ConversationDependencies(
        record_store=state.record_store,
        assistant=state.assistant,
        persona=state.persona,
        logger=logger,
    )
