from maurine.assistant.dependencies import ConversationDependencies
from maurine.assistant.reply import generate_reply


def name_acknowledgement(name: str) -> str:
    return f"Got it! Nice to meet you, {name}! What would you like to talk about?"


async def handle_user_message(
    deps: ConversationDependencies, user: str, message: str
) -> str:
    """
    Answer one message from `user` and record it in their conversation.

    A user's first message is taken as their name, whatever it says, and is
    acknowledged without calling the model. After that each message adds two
    lines to the conversation: "User: <message>" and then the reply. The
    conversation is saved even when the reply is a fallback.
    """
    store = deps.record_store

    user_entry = await store.find_or_create_user(user)

    if not user_entry.name:
        # An empty message leaves the name unset for the next message to fill
        user_entry.name = message or None
        await store.save_user(user_entry)
        return name_acknowledgement(message)

    conversation = await store.find_or_create_conversation(user)
    conversation.messages.append(f"User: {message}")

    reply = await generate_reply(
        deps.assistant,
        deps.persona,
        message,
        user,
        user_entry.name,
        conversation.messages,
        deps.logger,
    )
    conversation.messages.append(reply)
    await store.save_conversation(conversation)

    return reply
