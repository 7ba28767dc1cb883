"""Runtime settings, read from ``PRINTSTOCK_*`` environment variables.

The CLI exposes the same knobs as options (with ``envvar=``), so a value
given on the command line wins over the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0

# Order reservations hold stock for a working day unless told otherwise.
DEFAULT_HOLD_HOURS = 24.0


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    default_hold_hours: float = DEFAULT_HOLD_HOURS
    log_level: str = "INFO"

    @property
    def store_path(self) -> Path:
        return self.data_dir / "printstock.json"

    @staticmethod
    def from_env(environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return Settings(
            data_dir=Path(env.get("PRINTSTOCK_DATA_DIR", str(DEFAULT_DATA_DIR))),
            sweep_interval_seconds=_positive_float(
                env, "PRINTSTOCK_SWEEP_INTERVAL", DEFAULT_SWEEP_INTERVAL_SECONDS
            ),
            default_hold_hours=_positive_float(
                env, "PRINTSTOCK_DEFAULT_HOLD_HOURS", DEFAULT_HOLD_HOURS
            ),
            log_level=env.get("PRINTSTOCK_LOG_LEVEL", "INFO").upper(),
        )


def _positive_float(env, name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value
