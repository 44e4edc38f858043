from typing import Optional
from pydantic_ai import Agent
from pydantic_ai.models import Model
from maurine.config import settings


def create_assistant(model: Optional[Model | str] = None) -> Agent[None, str]:
    """Create the reply agent. The prompt carries everything, so it has no tools or system prompt."""
    # Deferred so a missing GOOGLE_API_KEY fails the first reply rather than startup
    return Agent(
        model if model is not None else settings.llm.model,
        output_type=str,
        defer_model_check=True,
    )
