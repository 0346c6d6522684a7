"""Plan generation orchestrator with an explicit request state machine."""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum

from nutrigenius.domain.metrics import NutritionTargets
from nutrigenius.domain.plan import DailyPlan
from nutrigenius.domain.profile import UserProfile
from nutrigenius.errors import GenerationError, MalformedPlanError, NutriGeniusError
from nutrigenius.ingredient_policy import IngredientPolicy
from nutrigenius.services.metrics import compute_targets
from nutrigenius.services.plan_parser import dump_plan, parse_plan
from nutrigenius.services.plan_prompt import build_plan_instruction
from nutrigenius.services.storage import PLAN_KEY, KeyValueStore
from nutrigenius.services.text_model import ModelOptions, TextModelClient, user_message

_logger = logging.getLogger(__name__)


class PlanStatus(StrEnum):
    """Lifecycle of the current plan request."""

    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PlanState:
    """Snapshot of the plan slot: status, current plan and last error."""

    status: PlanStatus = PlanStatus.IDLE
    plan: DailyPlan | None = None
    error: str | None = None
    error_kind: str | None = None

    def begin(self) -> "PlanState":
        if self.status is PlanStatus.REQUESTING:
            raise RuntimeError("A plan request is already in flight")
        return replace(self, status=PlanStatus.REQUESTING, error=None, error_kind=None)

    def succeed(self, plan: DailyPlan) -> "PlanState":
        return PlanState(status=PlanStatus.SUCCEEDED, plan=plan)

    def fail(self, error: NutriGeniusError) -> "PlanState":
        # The previous plan stays authoritative.
        return replace(
            self,
            status=PlanStatus.FAILED,
            error=str(error),
            error_kind=type(error).__name__,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "status": self.status.value,
            "plan": self.plan.model_dump() if self.plan else None,
            "error": self.error,
            "error_kind": self.error_kind,
        }


@dataclass
class PlanService:
    """Builds the plan prompt, calls the model and commits parsed plans."""

    client: TextModelClient
    options: ModelOptions
    store: KeyValueStore
    policy: IngredientPolicy
    _state: PlanState = field(init=False, default_factory=PlanState)
    _inflight: "asyncio.Task[DailyPlan] | None" = field(init=False, default=None)
    _inflight_instruction: str | None = field(init=False, default=None)
    _loaded: bool = field(init=False, default=False)

    def _ensure_loaded(self) -> None:
        """Restore the last committed plan from the store once."""
        if self._loaded:
            return
        self._loaded = True
        stored = self.store.get(PLAN_KEY)
        if stored is None:
            return
        try:
            plan = parse_plan(stored)
        except MalformedPlanError:
            _logger.warning("Ignoring unreadable stored plan snapshot", exc_info=True)
            return
        self._state = PlanState(status=PlanStatus.SUCCEEDED, plan=plan)

    @property
    def state(self) -> PlanState:
        self._ensure_loaded()
        return self._state

    @property
    def current_plan(self) -> DailyPlan | None:
        return self.state.plan

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def generate_plan(
        self, profile: UserProfile, targets: NutritionTargets | None = None
    ) -> DailyPlan:
        """Generate and commit a new plan for the profile.

        A call made while an identical generation is running joins it and
        returns its result. A call for a different profile waits for the running
        generation to settle and then issues its own request, so commits stay
        in call order.
        """
        self._ensure_loaded()
        resolved_targets = targets or compute_targets(profile)
        instruction = build_plan_instruction(profile, resolved_targets, self.policy)
        while self._inflight is not None and not self._inflight.done():
            if instruction == self._inflight_instruction:
                _logger.info("Plan generation already in flight; joining it")
                return await asyncio.shield(self._inflight)
            _logger.info("Waiting for a plan request for a previous profile")
            await asyncio.wait({self._inflight})

        self._state = self._state.begin()
        self._inflight_instruction = instruction
        self._inflight = asyncio.create_task(self._request(instruction))
        return await asyncio.shield(self._inflight)

    def reset(self) -> None:
        """Forget the current plan and its stored snapshot."""
        self.store.delete(PLAN_KEY)
        self._state = PlanState()
        self._loaded = True

    async def _request(self, instruction: str) -> DailyPlan:
        try:
            raw = await self.client.complete(
                model=self.options.model,
                reasoning_effort=self.options.reasoning_effort,
                store=self.options.store,
                messages=[user_message(instruction)],
            )
            plan = parse_plan(raw)
            self.store.set(PLAN_KEY, dump_plan(plan))
        except NutriGeniusError as exc:
            _logger.warning("Plan generation failed: %s", exc)
            self._state = self._state.fail(exc)
            raise
        except Exception as exc:
            _logger.exception("Unexpected error while generating a plan")
            error = GenerationError("Plan generation failed unexpectedly")
            self._state = self._state.fail(error)
            raise error from exc

        self._state = self._state.succeed(plan)
        _logger.info("Committed new plan with %s kcal", plan.total_calories)
        return plan
