from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class User:
    """A WhatsApp contact the bot has heard from."""

    phone_number: str
    created_at: datetime
    name: Optional[str] = None  # Captured from the first message


@dataclass
class Conversation:
    """Chat history for one user, as sent to the model for context."""

    user: str  # phone_number of the owning User
    created_at: datetime
    messages: List[str] = field(default_factory=list)
