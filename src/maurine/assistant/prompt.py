import os
from datetime import datetime
from typing import Optional, Sequence
import pytz

from maurine.assistant.persona import Persona


def prompt(persona: Persona, user_name: Optional[str], previous_messages: Sequence[str]) -> str:
    """Render prompt.md for one reply. previous_messages already ends with the newest user line."""
    prompt_path = os.path.join(os.path.dirname(__file__), "prompt.md")
    with open(prompt_path, "r", encoding="utf-8") as f:
        content = f.read().strip()

    now = datetime.now(pytz.timezone(persona.timezone))
    current_date = now.strftime("%A, %B %d, %Y")

    content = content.replace("{{botName}}", persona.bot_name)
    content = content.replace("{{fullName}}", persona.full_name or persona.owner_name)
    content = content.replace("{{traits}}", ", ".join(persona.traits).lower() or "friendly")
    content = content.replace("{{currentDate}}", current_date)
    content = content.replace("{{userName}}", user_name or "unknown")
    content = content.replace("{{context}}", "\n".join(previous_messages))

    return content
