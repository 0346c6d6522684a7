"""Coach conversation: grounding context, history and failure recovery."""

import asyncio
import logging
from dataclasses import dataclass, field

from nutrigenius.domain.conversation import ConversationHistory, ConversationTurn, Role
from nutrigenius.domain.metrics import NutritionTargets
from nutrigenius.domain.profile import UserProfile
from nutrigenius.errors import GenerationError, ValidationError
from nutrigenius.ingredient_policy import IngredientPolicy
from nutrigenius.services.plan_prompt import GOAL_DESCRIPTIONS
from nutrigenius.services.text_model import ModelOptions, TextModelClient

FALLBACK_REPLY = "Connection error. Please check your connection and try again."

_logger = logging.getLogger(__name__)


def grounding_text(
    profile: UserProfile, targets: NutritionTargets, policy: IngredientPolicy
) -> str:
    """Describe the user to the model so replies stay consistent with the profile."""
    return "\n".join(
        [
            f"You are an expert nutritionist focused on {policy.region}.",
            f"User: {profile.name}, {profile.age} years old, "
            f"goal: {GOAL_DESCRIPTIONS[profile.goal]}.",
            f"Daily calories: {targets.target_kcal} kcal.",
            "Recommend affordable foods that are easy to find in "
            f"{policy.shopping_places}.",
            "Answer briefly, in a motivating and useful way.",
        ]
    )


def build_context(
    profile: UserProfile,
    targets: NutritionTargets,
    history: ConversationHistory,
    user_turn: ConversationTurn,
    policy: IngredientPolicy,
) -> list[ConversationTurn]:
    """Return grounding turn, then prior history, then the new user turn."""
    grounding = ConversationTurn(
        role=Role.USER, text=grounding_text(profile, targets, policy)
    )
    return [grounding, *history, user_turn]


def append_turn(history: ConversationHistory, turn: ConversationTurn) -> ConversationHistory:
    return (*history, turn)


def recover_from_failure(history: ConversationHistory) -> ConversationHistory:
    """Commit the fallback assistant reply after a failed model call."""
    return append_turn(history, ConversationTurn(role=Role.ASSISTANT, text=FALLBACK_REPLY))


def to_messages(turns: list[ConversationTurn]) -> list[dict[str, str]]:
    return [{"role": turn.role.value, "content": turn.text} for turn in turns]


@dataclass
class CoachService:
    """Owns the conversation history and serialises model calls."""

    client: TextModelClient
    options: ModelOptions
    policy: IngredientPolicy
    _history: ConversationHistory = field(init=False, default=())
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @property
    def history(self) -> ConversationHistory:
        return self._history

    async def send_message(
        self, profile: UserProfile, targets: NutritionTargets, text: str
    ) -> ConversationTurn:
        """Commit a user turn and the assistant reply (or the fallback)."""
        cleaned = text.strip()
        if not cleaned:
            raise ValidationError("Message must not be empty")

        async with self._lock:
            user_turn = ConversationTurn(role=Role.USER, text=cleaned)
            prior = self._history
            self._history = append_turn(prior, user_turn)
            context = build_context(profile, targets, prior, user_turn, self.policy)
            try:
                reply = await self.client.complete(
                    model=self.options.model,
                    reasoning_effort=self.options.reasoning_effort,
                    store=self.options.store,
                    messages=to_messages(context),
                )
                if not reply.strip():
                    raise GenerationError("Model returned an empty reply")
            except GenerationError as exc:
                _logger.warning("Coach reply failed: %s", exc)
                self._history = recover_from_failure(self._history)
                return self._history[-1]
            except Exception:
                _logger.exception("Unexpected error from the coach model call")
                self._history = recover_from_failure(self._history)
                return self._history[-1]

            assistant_turn = ConversationTurn(role=Role.ASSISTANT, text=reply.strip())
            self._history = append_turn(self._history, assistant_turn)
            return assistant_turn

    def reset(self) -> None:
        """Start a fresh conversation; profile and plan are untouched."""
        self._history = ()
