"""Configuration and duration parsing."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass

from optisync.temporary_id import DEFAULT_PREFIX
from optisync.types import Duration

_DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h|d)$")
_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def parse_duration(duration: Duration) -> int:
    """Parse duration string to milliseconds. Passthrough if already int."""
    if isinstance(duration, int):
        if duration < 0:
            raise ValueError(f"Invalid duration: {duration!r}")
        return duration

    match = _DURATION_PATTERN.match(duration)
    if not match:
        raise ValueError(f"Invalid duration: {duration!r}")

    value, unit = match.groups()
    return int(value) * _UNITS[unit]


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Settings shared by the store and the default HTTP transport."""

    base_url: str = "http://localhost:3000"
    request_timeout: Duration = "30s"
    temporary_prefix: str = DEFAULT_PREFIX
    log_intents: bool = True

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if not self.temporary_prefix:
            raise ValueError("temporary_prefix must not be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("request_timeout must be positive")

    @property
    def timeout_seconds(self) -> float:
        return parse_duration(self.request_timeout) / 1000

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        prefix: str = "OPTISYNC_",
    ) -> SyncConfig:
        """Build a config from ``OPTISYNC_*`` environment variables.

        Recognised: BASE_URL, TIMEOUT, TEMPORARY_PREFIX, LOG_INTENTS.
        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}
        if f"{prefix}BASE_URL" in env:
            kwargs["base_url"] = env[f"{prefix}BASE_URL"]
        if f"{prefix}TIMEOUT" in env:
            raw = env[f"{prefix}TIMEOUT"]
            kwargs["request_timeout"] = int(raw) if raw.isdigit() else raw
        if f"{prefix}TEMPORARY_PREFIX" in env:
            kwargs["temporary_prefix"] = env[f"{prefix}TEMPORARY_PREFIX"]
        if f"{prefix}LOG_INTENTS" in env:
            kwargs["log_intents"] = _parse_bool(
                f"{prefix}LOG_INTENTS", env[f"{prefix}LOG_INTENTS"]
            )
        return cls(**kwargs)  # type: ignore[arg-type]
