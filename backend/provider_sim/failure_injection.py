"""Failure injection configuration for the test provider."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from shared.provider import InvalidArgumentError

ERROR_CHANCE_ENV = "TESTPAY_ERROR_CHANCE"
DECLINE_CHANCE_ENV = "TESTPAY_DECLINE_CHANCE"


class FailureConfig(BaseModel):
    """Percentage chances, applied independently on every call."""

    error_chance: int = Field(default=0, ge=0, le=100)
    decline_chance: int = Field(default=0, ge=0, le=100)

    @classmethod
    def build(cls, error_chance: int, decline_chance: int) -> "FailureConfig":
        try:
            return cls(error_chance=error_chance, decline_chance=decline_chance)
        except ValidationError as e:
            raise InvalidArgumentError(
                f"Invalid chances (error={error_chance!r}, decline={decline_chance!r}): {e}"
            ) from e

    @classmethod
    def parse(cls, error_chance: str, decline_chance: str) -> "FailureConfig":
        return cls.build(
            _parse_chance("errorChance", error_chance),
            _parse_chance("declineChance", decline_chance),
        )


def _parse_chance(name: str, raw: str) -> int:
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise InvalidArgumentError(f"Cannot parse {name}: {raw!r}") from e


# Named profiles usable as provider ids
PROVIDER_PROFILES = {
    "test": FailureConfig(error_chance=0, decline_chance=0),
    "flaky": FailureConfig(error_chance=20, decline_chance=10),
    "declining": FailureConfig(error_chance=0, decline_chance=100),
    "offline": FailureConfig(error_chance=100, decline_chance=0),
}


def get_provider_config(
    provider_id: str, environ: Optional[Mapping[str, str]] = None
) -> FailureConfig:
    if environ is None:
        environ = os.environ
    config = PROVIDER_PROFILES.get(provider_id, FailureConfig())
    error_chance = environ.get(ERROR_CHANCE_ENV)
    decline_chance = environ.get(DECLINE_CHANCE_ENV)
    if error_chance is None and decline_chance is None:
        return config
    return FailureConfig.parse(
        error_chance if error_chance is not None else str(config.error_chance),
        decline_chance if decline_chance is not None else str(config.decline_chance),
    )
