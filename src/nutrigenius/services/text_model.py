"""Generative text model interface shared by the plan and coach services."""

from dataclasses import dataclass
from typing import Protocol


class TextModelClient(Protocol):
    """Interface for a chat-style text generation backend."""

    async def complete(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        messages: list[dict[str, str]],
    ) -> str:
        """Return the model's reply text for role-tagged messages.

        Implementations raise GenerationError on transport, quota or empty
        responses.
        """


@dataclass(frozen=True)
class ModelOptions:
    """Per-request model settings."""

    model: str
    reasoning_effort: str | None = None
    store: bool = False


def user_message(text: str) -> dict[str, str]:
    return {"role": "user", "content": text}
