"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from pydantic import BaseModel

from nutrigenius.app_logging import configure_logging
from nutrigenius.containers import AppContainer
from nutrigenius.domain.metrics import NutritionTargets
from nutrigenius.domain.profile import UserProfile
from nutrigenius.errors import GenerationError, MalformedPlanError, ValidationError

_UNPROCESSABLE = 422


class ChatRequest(BaseModel):
    """Body of a coach message."""

    message: str


def create_app(container: AppContainer) -> FastAPI:  # noqa: C901
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the stored profile and its targets."""
        state_container: AppContainer = request.app.state.container
        profile, targets = _require_profile(state_container)
        return {
            "profile": profile.model_dump(mode="json", by_alias=True),
            "targets": targets.as_dict(),
        }

    @app.put("/profile")
    async def put_profile(profile: UserProfile, request: Request) -> dict[str, object]:
        """Replace the profile, recompute targets and generate a first plan."""
        state_container: AppContainer = request.app.state.container
        try:
            targets = state_container.profile_service.save_profile(profile)
        except ValidationError as exc:
            raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc
        plan_error: str | None = None
        try:
            await state_container.plan_service.generate_plan(profile, targets)
        except (GenerationError, MalformedPlanError) as exc:
            logger.warning("Initial plan generation failed: %s", exc)
            plan_error = str(exc)
        return {
            "profile": profile.model_dump(mode="json", by_alias=True),
            "targets": targets.as_dict(),
            "plan": state_container.plan_service.state.as_dict(),
            "plan_error": plan_error,
        }

    @app.delete("/profile")
    async def delete_profile(request: Request) -> dict[str, str]:
        """Forget profile, plan and conversation."""
        state_container: AppContainer = request.app.state.container
        state_container.profile_service.reset()
        state_container.plan_service.reset()
        state_container.coach_service.reset()
        return {"status": "ok"}

    @app.get("/targets")
    async def get_targets(request: Request) -> dict[str, object]:
        """Return nutrition targets for the stored profile."""
        state_container: AppContainer = request.app.state.container
        _, targets = _require_profile(state_container)
        return targets.as_dict()

    @app.get("/plan")
    async def get_plan(request: Request) -> dict[str, object]:
        """Return the current plan state."""
        state_container: AppContainer = request.app.state.container
        return state_container.plan_service.state.as_dict()

    @app.post("/plan/regenerate")
    async def regenerate_plan(request: Request) -> dict[str, object]:
        """Ask the model for a new plan; the old plan survives failures."""
        state_container: AppContainer = request.app.state.container
        profile, targets = _require_profile(
            state_container, missing=status.HTTP_409_CONFLICT
        )
        try:
            await state_container.plan_service.generate_plan(profile, targets)
        except MalformedPlanError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
            ) from exc
        except GenerationError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
            ) from exc
        return state_container.plan_service.state.as_dict()

    @app.get("/chat")
    async def get_chat(request: Request) -> dict[str, object]:
        """Return the conversation history."""
        state_container: AppContainer = request.app.state.container
        history = state_container.coach_service.history
        return {"history": [turn.as_dict() for turn in history]}

    @app.post("/chat")
    async def post_chat(body: ChatRequest, request: Request) -> dict[str, object]:
        """Send a message to the coach."""
        state_container: AppContainer = request.app.state.container
        profile, targets = _require_profile(
            state_container, missing=status.HTTP_409_CONFLICT
        )
        try:
            reply = await state_container.coach_service.send_message(
                profile, targets, body.message
            )
        except ValidationError as exc:
            raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc
        history = state_container.coach_service.history
        return {
            "reply": reply.as_dict(),
            "history": [turn.as_dict() for turn in history],
        }

    @app.delete("/chat")
    async def delete_chat(request: Request) -> dict[str, str]:
        """Clear the conversation history."""
        state_container: AppContainer = request.app.state.container
        state_container.coach_service.reset()
        return {"status": "ok"}

    return app


def _require_profile(
    container: AppContainer, missing: int = status.HTTP_404_NOT_FOUND
) -> tuple[UserProfile, NutritionTargets]:
    """Return the profile and targets or raise an HTTP error."""
    profile = container.profile_service.get_profile()
    targets = container.profile_service.get_targets()
    if profile is None or targets is None:
        raise HTTPException(status_code=missing, detail="No profile saved")
    return profile, targets
