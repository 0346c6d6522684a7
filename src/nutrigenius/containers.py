"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrigenius.adapters.openai_text_client import OpenAITextClient
from nutrigenius.adapters.supabase_kv_store import SupabaseKeyValueStore
from nutrigenius.config import Settings, parse_reasoning_effort
from nutrigenius.ingredient_policy import policy_for_region
from nutrigenius.services.coach import CoachService
from nutrigenius.services.plans import PlanService
from nutrigenius.services.profiles import ProfileService
from nutrigenius.services.text_model import ModelOptions


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    plan_service: PlanService
    coach_service: CoachService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    store = SupabaseKeyValueStore(
        supabase_client, table_name=resolved_settings.supabase_kv_table
    )
    text_client = OpenAITextClient.create(resolved_settings.openai_api_key)
    options = ModelOptions(
        model=resolved_settings.openai_model,
        reasoning_effort=parse_reasoning_effort(
            resolved_settings.openai_reasoning_effort
        ),
        store=resolved_settings.openai_store,
    )
    policy = policy_for_region(resolved_settings.ingredient_region)

    async def close_resources() -> None:
        await text_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=ProfileService(store),
        plan_service=PlanService(
            client=text_client, options=options, store=store, policy=policy
        ),
        coach_service=CoachService(client=text_client, options=options, policy=policy),
        close_resources=close_resources,
    )
