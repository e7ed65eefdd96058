"""Runtime settings read from the environment (and ``.env``)."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from corridor_sim.schedule.loader import DEFAULT_SCENARIO_PATH


@dataclass(frozen=True)
class Settings:
    """Simulation and server settings.

    Environment variables:

    ``CORRIDOR_SIM_SCENARIO``   scenario JSON path (bundled scenario by default)
    ``CORRIDOR_SIM_TICK_MS``    simulation tick period (default 200)
    ``CORRIDOR_SIM_SPEED``      virtual minutes per real second (default 5)
    ``CORRIDOR_SIM_BLINK_MS``   held blink cadence (default 500)
    ``CORRIDOR_SIM_LOG_LEVEL``  logging level name (default INFO)
    """

    scenario_path: Path = DEFAULT_SCENARIO_PATH
    tick_ms: int = 200
    speed: float = 5.0
    blink_ms: int = 500
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.tick_ms <= 0:
            raise ValueError("tick_ms must be > 0")
        if self.blink_ms <= 0:
            raise ValueError("blink_ms must be > 0")
        if not (math.isfinite(self.speed) and self.speed > 0):
            raise ValueError(
                f"CORRIDOR_SIM_SPEED must be a positive finite number, got {self.speed!r}"
            )

    @property
    def tick_s(self) -> float:
        return self.tick_ms / 1000.0

    @property
    def blink_s(self) -> float:
        return self.blink_ms / 1000.0

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> Settings:
        """Build settings from *env* (default: ``os.environ`` after ``load_dotenv``)."""
        if env is None:
            load_dotenv()
            env = dict(os.environ)
        scenario = env.get("CORRIDOR_SIM_SCENARIO")
        return cls(
            scenario_path=Path(scenario) if scenario else DEFAULT_SCENARIO_PATH,
            tick_ms=_number(env, "CORRIDOR_SIM_TICK_MS", int, 200),
            speed=_number(env, "CORRIDOR_SIM_SPEED", float, 5.0),
            blink_ms=_number(env, "CORRIDOR_SIM_BLINK_MS", int, 500),
            log_level=env.get("CORRIDOR_SIM_LOG_LEVEL", "INFO").upper(),
        )


def _number(env: dict[str, str], key: str, kind: type, default):
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a {kind.__name__}, got {raw!r}") from exc
