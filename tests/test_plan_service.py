"""Tests for the plan generation orchestrator."""

import asyncio
import json

import pytest

from nutrigenius.domain.profile import DietType, Goal, UserProfile
from nutrigenius.errors import GenerationError, MalformedPlanError, ValidationError
from nutrigenius.ingredient_policy import CHILE_POLICY
from nutrigenius.services.plan_parser import parse_plan
from nutrigenius.services.plans import PlanService, PlanState, PlanStatus
from nutrigenius.services.storage import PLAN_KEY, InMemoryKeyValueStore, KeyValueStore
from nutrigenius.services.text_model import ModelOptions
from tests.conftest import FakeTextClient, make_plan_payload, make_plan_text


class FlakyStore(InMemoryKeyValueStore):
    """Store whose first writes fail like an unreachable database."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures

    def set(self, key: str, value: str) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("database unreachable")
        super().set(key, value)


def _service(client: FakeTextClient, store: KeyValueStore) -> PlanService:
    return PlanService(
        client=client,
        options=ModelOptions(model="gpt-test"),
        store=store,
        policy=CHILE_POLICY,
    )


def test_generate_plan_commits_and_persists(profile: UserProfile) -> None:
    client = FakeTextClient(replies=[f"```json\n{make_plan_text()}\n```"])
    store = InMemoryKeyValueStore()
    service = _service(client, store)

    plan = asyncio.run(service.generate_plan(profile))

    assert service.state.status is PlanStatus.SUCCEEDED
    assert service.current_plan == plan
    assert parse_plan(store.get(PLAN_KEY) or "") == plan
    assert client.calls[0][0]["role"] == "user"
    assert "2633 kcal" in client.calls[0][0]["content"]


def test_malformed_reply_keeps_previous_plan(profile: UserProfile) -> None:
    payload = make_plan_payload()
    del payload["snack"]
    broken = json.dumps(payload)
    client = FakeTextClient(replies=[make_plan_text(), broken])
    store = InMemoryKeyValueStore()
    service = _service(client, store)

    first = asyncio.run(service.generate_plan(profile))
    snapshot = store.get(PLAN_KEY)
    with pytest.raises(MalformedPlanError):
        asyncio.run(service.generate_plan(profile))

    assert service.state.status is PlanStatus.FAILED
    assert service.state.error_kind == "MalformedPlanError"
    assert service.current_plan == first
    assert store.get(PLAN_KEY) == snapshot


def test_generation_error_keeps_previous_plan(profile: UserProfile) -> None:
    client = FakeTextClient(
        replies=[make_plan_text(), GenerationError("quota exceeded")]
    )
    service = _service(client, InMemoryKeyValueStore())

    first = asyncio.run(service.generate_plan(profile))
    with pytest.raises(GenerationError):
        asyncio.run(service.generate_plan(profile))

    assert service.state.status is PlanStatus.FAILED
    assert service.state.error == "quota exceeded"
    assert service.current_plan == first


def test_unexpected_client_error_becomes_generation_error(profile: UserProfile) -> None:
    client = FakeTextClient(replies=[ConnectionResetError("socket closed")])
    service = _service(client, InMemoryKeyValueStore())

    with pytest.raises(GenerationError):
        asyncio.run(service.generate_plan(profile))

    assert service.state.status is PlanStatus.FAILED
    assert service.current_plan is None


def test_regeneration_after_failure_replaces_plan(profile: UserProfile) -> None:
    client = FakeTextClient(replies=["not json at all", make_plan_text(snack=300)])
    service = _service(client, InMemoryKeyValueStore())

    with pytest.raises(MalformedPlanError):
        asyncio.run(service.generate_plan(profile))
    plan = asyncio.run(service.generate_plan(profile))

    assert service.state == PlanState(status=PlanStatus.SUCCEEDED, plan=plan)
    assert plan.snack.calories == 300


def test_invalid_profile_fails_before_model_call() -> None:
    client = FakeTextClient(replies=[make_plan_text()])
    service = _service(client, InMemoryKeyValueStore())
    bad_profile = UserProfile.model_construct(
        name="Ghost",
        age=-1,
        weight=70,
        height=170,
        sex="male",
        activity_level="light",
        goal="maintain",
        diet_type="omnivore",
    )

    with pytest.raises(ValidationError):
        asyncio.run(service.generate_plan(bad_profile))

    assert client.calls == []
    assert service.state.status is PlanStatus.IDLE


def test_concurrent_requests_share_one_generation(profile: UserProfile) -> None:
    client = FakeTextClient(replies=[make_plan_text(), make_plan_text(snack=999)])
    store = InMemoryKeyValueStore()
    service = _service(client, store)

    async def scenario():  # type: ignore[no-untyped-def]
        client.gate = asyncio.Event()
        first = asyncio.create_task(service.generate_plan(profile))
        await asyncio.sleep(0)
        assert service.in_flight
        assert service.state.status is PlanStatus.REQUESTING
        second = asyncio.create_task(service.generate_plan(profile))
        await asyncio.sleep(0)
        client.gate.set()
        return await asyncio.gather(first, second)

    first_plan, second_plan = asyncio.run(scenario())

    assert len(client.calls) == 1
    assert first_plan == second_plan
    assert first_plan.snack.calories == 200
    assert parse_plan(store.get(PLAN_KEY) or "") == first_plan
    assert not service.in_flight


def test_requests_for_a_new_profile_wait_and_issue_their_own_call(
    profile: UserProfile,
) -> None:
    client = FakeTextClient(replies=[make_plan_text(), make_plan_text(snack=350)])
    store = InMemoryKeyValueStore()
    service = _service(client, store)
    vegan = profile.model_copy(
        update={"diet_type": DietType.VEGAN, "goal": Goal.GAIN_MUSCLE}
    )

    async def scenario():  # type: ignore[no-untyped-def]
        client.gate = asyncio.Event()
        first = asyncio.create_task(service.generate_plan(profile))
        await asyncio.sleep(0)
        second = asyncio.create_task(service.generate_plan(vegan))
        await asyncio.sleep(0)
        client.gate.set()
        return await asyncio.gather(first, second)

    first_plan, second_plan = asyncio.run(scenario())

    assert len(client.calls) == 2
    assert "vegan" not in client.calls[0][0]["content"].lower()
    assert "vegan" in client.calls[1][0]["content"].lower()
    assert first_plan.snack.calories == 200
    assert second_plan.snack.calories == 350
    assert service.current_plan == second_plan
    assert parse_plan(store.get(PLAN_KEY) or "") == second_plan


def test_store_failure_marks_request_failed(profile: UserProfile) -> None:
    store = FlakyStore(failures=1)
    client = FakeTextClient(replies=[make_plan_text(), make_plan_text(snack=300)])
    service = _service(client, store)

    with pytest.raises(GenerationError):
        asyncio.run(service.generate_plan(profile))

    assert service.state.status is PlanStatus.FAILED
    assert service.current_plan is None
    assert not service.in_flight

    plan = asyncio.run(service.generate_plan(profile))

    assert service.state.status is PlanStatus.SUCCEEDED
    assert plan.snack.calories == 300
    assert parse_plan(store.get(PLAN_KEY) or "") == plan


def test_restores_stored_plan(profile: UserProfile) -> None:
    store = InMemoryKeyValueStore()
    store.set(PLAN_KEY, make_plan_text(lunch=650))

    service = _service(FakeTextClient(), store)

    assert service.state.status is PlanStatus.SUCCEEDED
    assert service.current_plan is not None
    assert service.current_plan.lunch.calories == 650


def test_unreadable_stored_plan_is_ignored() -> None:
    store = InMemoryKeyValueStore()
    store.set(PLAN_KEY, "{}")

    service = _service(FakeTextClient(), store)

    assert service.state.status is PlanStatus.IDLE


def test_reset_clears_plan(profile: UserProfile) -> None:
    store = InMemoryKeyValueStore()
    service = _service(FakeTextClient(replies=[make_plan_text()]), store)
    asyncio.run(service.generate_plan(profile))

    service.reset()

    assert service.current_plan is None
    assert store.get(PLAN_KEY) is None


def test_begin_rejects_second_request_on_state() -> None:
    requesting = PlanState().begin()

    with pytest.raises(RuntimeError):
        requesting.begin()
