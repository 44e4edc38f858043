from dataclasses import dataclass, field
from typing import Any, Tuple


@dataclass(frozen=True)
class Persona:
    """Who the bot is, and who it belongs to."""

    bot_name: str
    owner_name: str
    owner_phone: str
    full_name: str = ""
    traits: Tuple[str, ...] = field(default_factory=tuple)
    timezone: str = "UTC"

    @classmethod
    def from_settings(cls, persona: Any) -> "Persona":
        return cls(
            bot_name=persona.bot_name,
            owner_name=persona.owner_name,
            owner_phone=persona.owner_phone,
            full_name=persona.get("full_name", ""),
            traits=tuple(persona.get("traits", [])),
            timezone=persona.get("timezone", "UTC"),
        )

    def introduction(self) -> str:
        return (
            f"Hi! I'm {self.bot_name}, an AI created to chat and be a good friend. 😊 "
            "What do you enjoy doing in your free time?"
        )

    def owner_greeting(self) -> str:
        return f"Hello, {self.owner_name}! How can I assist you today?"
