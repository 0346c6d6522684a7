"""Coach conversation models."""

from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    """One committed message in the coach conversation."""

    role: Role
    text: str

    def as_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "text": self.text}


ConversationHistory = tuple[ConversationTurn, ...]
