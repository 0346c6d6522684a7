"""Profile persistence and cached target computation."""

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from nutrigenius.domain.metrics import NutritionTargets
from nutrigenius.domain.profile import UserProfile
from nutrigenius.errors import ValidationError
from nutrigenius.services.metrics import compute_targets
from nutrigenius.services.storage import PROFILE_KEY, KeyValueStore

_logger = logging.getLogger(__name__)


def parse_profile(data: str | dict[str, object]) -> UserProfile:
    """Validate raw profile input, raising ValidationError on bad data."""
    try:
        if isinstance(data, str):
            return UserProfile.model_validate_json(data)
        return UserProfile.model_validate(data)
    except PydanticValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "profile"
            for error in exc.errors()
        )
        raise ValidationError(f"Invalid profile fields: {fields}") from exc


def dump_profile(profile: UserProfile) -> str:
    return profile.model_dump_json(by_alias=True)


@dataclass
class ProfileService:
    """Stores the single user profile and the targets derived from it."""

    store: KeyValueStore
    _profile: UserProfile | None = field(init=False, default=None)
    _targets: NutritionTargets | None = field(init=False, default=None)
    _loaded: bool = field(init=False, default=False)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        stored = self.store.get(PROFILE_KEY)
        if stored is None:
            return
        try:
            self._profile = parse_profile(stored)
        except ValidationError:
            _logger.warning("Ignoring unreadable stored profile", exc_info=True)

    def get_profile(self) -> UserProfile | None:
        self._ensure_loaded()
        return self._profile

    def save_profile(self, profile: UserProfile) -> NutritionTargets:
        """Replace the profile and return freshly computed targets."""
        targets = compute_targets(profile)
        self.store.set(PROFILE_KEY, dump_profile(profile))
        self._profile = profile
        self._targets = targets
        self._loaded = True
        _logger.info(
            "Saved profile: target=%s kcal bmi=%s", targets.target_kcal, targets.bmi
        )
        return targets

    def get_targets(self) -> NutritionTargets | None:
        """Return targets for the current profile, computing them on demand."""
        self._ensure_loaded()
        if self._profile is None:
            return None
        if self._targets is None:
            self._targets = compute_targets(self._profile)
        return self._targets

    def reset(self) -> None:
        """Drop the stored profile and cached targets."""
        self.store.delete(PROFILE_KEY)
        self._profile = None
        self._targets = None
        self._loaded = True

    def export_profile(self) -> dict[str, object] | None:
        self._ensure_loaded()
        if self._profile is None:
            return None
        return self._profile.model_dump(mode="json", by_alias=True)
