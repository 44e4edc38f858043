import pytest
from unittest.mock import Mock
from pydantic_ai import Agent
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from maurine.assistant.dependencies import ConversationDependencies
from maurine.assistant.prompt import prompt
from maurine.assistant.reply import ERROR_REPLY
from maurine.conversation import handle_user_message
from maurine.tests.utils import PERSONA, MockLogger, setup_record_store, cleanup_record_store

PHONE = "254711000001@c.us"


class RecordingModel:
    """Replies with numbered answers and remembers each prompt."""

    def __init__(self, fail: bool = False):
        self.prompts = []
        self.fail = fail

    def __call__(self, messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        self.prompts.append(messages[-1].parts[-1].content)
        if self.fail:
            raise RuntimeError("generation service unavailable")
        return ModelResponse(parts=[TextPart(f"Reply {len(self.prompts)}")])


async def _setup(fail: bool = False):
    db_path, db_pool, store = await setup_record_store()
    model = RecordingModel(fail)
    deps = ConversationDependencies(
        record_store=store,
        assistant=Agent(FunctionModel(model)),
        persona=PERSONA,
        logger=MockLogger(),
    )
    return db_path, db_pool, store, model, deps


@pytest.mark.asyncio
async def test_first_message_is_captured_as_name():
    db_path, db_pool, store, model, deps = await _setup()
    try:
        reply = await handle_user_message(deps, PHONE, "Alice")

        assert reply == "Got it! Nice to meet you, Alice! What would you like to talk about?"
        assert model.prompts == []
        assert (await store.find_user(PHONE)).name == "Alice"
        assert await store.find_conversation(PHONE) is None
    finally:
        await cleanup_record_store(db_path, db_pool)


@pytest.mark.asyncio
async def test_first_message_is_taken_as_name_even_when_it_is_a_question():
    db_path, db_pool, store, model, deps = await _setup()
    try:
        reply = await handle_user_message(deps, PHONE, "What can you do?")

        assert reply == "Got it! Nice to meet you, What can you do?! What would you like to talk about?"
        assert (await store.find_user(PHONE)).name == "What can you do?"
        assert model.prompts == []
    finally:
        await cleanup_record_store(db_path, db_pool)


@pytest.mark.asyncio
async def test_second_message_is_answered_with_context():
    db_path, db_pool, store, model, deps = await _setup()
    try:
        await handle_user_message(deps, PHONE, "Alice")
        reply = await handle_user_message(deps, PHONE, "I like chess")

        assert reply == "Reply 1"
        assert model.prompts == [prompt(PERSONA, "Alice", ["User: I like chess"])]

        conversation = await store.find_conversation(PHONE)
        assert conversation.messages == ["User: I like chess", "Reply 1"]
    finally:
        await cleanup_record_store(db_path, db_pool)


@pytest.mark.asyncio
async def test_each_message_appends_user_line_then_reply():
    db_path, db_pool, store, model, deps = await _setup()
    try:
        await handle_user_message(deps, PHONE, "Alice")
        await handle_user_message(deps, PHONE, "I like chess")
        await handle_user_message(deps, PHONE, "Do you play?")

        conversation = await store.find_conversation(PHONE)
        assert conversation.messages == [
            "User: I like chess",
            "Reply 1",
            "User: Do you play?",
            "Reply 2",
        ]
        # The second prompt carries the whole history so far
        assert model.prompts[1].endswith("User: I like chess\nReply 1\nUser: Do you play?")
    finally:
        await cleanup_record_store(db_path, db_pool)


@pytest.mark.asyncio
async def test_owner_is_greeted_without_model_call():
    db_path, db_pool, store, model, deps = await _setup()
    try:
        await handle_user_message(deps, PERSONA.owner_phone, "Maurine")
        reply = await handle_user_message(deps, PERSONA.owner_phone, "Tell me a joke")

        assert reply == "Hello, Maurine! How can I assist you today?"
        assert model.prompts == []
        conversation = await store.find_conversation(PERSONA.owner_phone)
        assert conversation.messages == [
            "User: Tell me a joke",
            "Hello, Maurine! How can I assist you today?",
        ]
    finally:
        await cleanup_record_store(db_path, db_pool)


@pytest.mark.asyncio
async def test_empty_message_after_name_gets_introduction():
    db_path, db_pool, store, model, deps = await _setup()
    try:
        await handle_user_message(deps, PHONE, "Alice")
        reply = await handle_user_message(deps, PHONE, "")

        assert reply == PERSONA.introduction()
        assert model.prompts == []
        assert (await store.find_conversation(PHONE)).messages == ["User: ", PERSONA.introduction()]
    finally:
        await cleanup_record_store(db_path, db_pool)


@pytest.mark.asyncio
async def test_empty_first_message_leaves_name_unset():
    db_path, db_pool, store, model, deps = await _setup()
    try:
        first = await handle_user_message(deps, PHONE, "")
        assert first == "Got it! Nice to meet you, ! What would you like to talk about?"
        assert (await store.find_user(PHONE)).name is None

        reply = await handle_user_message(deps, PHONE, "Alice")
        assert reply == "Got it! Nice to meet you, Alice! What would you like to talk about?"
    finally:
        await cleanup_record_store(db_path, db_pool)


@pytest.mark.asyncio
async def test_generation_failure_still_saves_history():
    db_path, db_pool, store, model, deps = await _setup(fail=True)
    deps.logger = Mock()
    try:
        await handle_user_message(deps, PHONE, "Alice")
        reply = await handle_user_message(deps, PHONE, "I like chess")

        assert reply == ERROR_REPLY
        assert len(model.prompts) == 1
        deps.logger.exception.assert_called_once()
        conversation = await store.find_conversation(PHONE)
        assert conversation.messages == ["User: I like chess", ERROR_REPLY]
    finally:
        await cleanup_record_store(db_path, db_pool)
