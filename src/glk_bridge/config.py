"""Environment-driven configuration for the adapter."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

ENV_PREFIX = "GLK_BRIDGE_"


class PendingPolicy(str, Enum):
    """What to do when a line request arrives while another is pending."""

    REPLACE = "replace"
    REJECT = "reject"


def _env_int(env: Mapping[str, str], key: str, fallback: int) -> int:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        return int(value, 0)
    except ValueError:
        return fallback


def _env_policy(env: Mapping[str, str], fallback: PendingPolicy) -> PendingPolicy:
    raw = env.get(f"{ENV_PREFIX}PENDING_POLICY")
    if raw is None:
        return fallback
    try:
        return PendingPolicy(raw.strip().lower())
    except ValueError:
        return fallback


@dataclass(frozen=True)
class AdapterConfig:
    screen_width: int = 80
    screen_height: int = 24
    main_window_rock: int = 201
    save_name: str = "glk-save"
    pending_policy: PendingPolicy = PendingPolicy.REPLACE
    store_path: str = ""
    exit_banner: str = "\n*** Game session ended ***"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AdapterConfig":
        """Build a config from ``GLK_BRIDGE_*`` variables, keeping defaults for
        anything unset or unparsable."""

        source = os.environ if env is None else env
        defaults = cls()
        return cls(
            screen_width=_env_int(source, "SCREEN_WIDTH", defaults.screen_width),
            screen_height=_env_int(source, "SCREEN_HEIGHT", defaults.screen_height),
            main_window_rock=_env_int(
                source, "MAIN_WINDOW_ROCK", defaults.main_window_rock
            ),
            save_name=source.get(f"{ENV_PREFIX}SAVE_NAME", defaults.save_name),
            pending_policy=_env_policy(source, defaults.pending_policy),
            store_path=source.get(f"{ENV_PREFIX}STORE_PATH", defaults.store_path),
            exit_banner=source.get(f"{ENV_PREFIX}EXIT_BANNER", defaults.exit_banner),
        )


__all__ = ["AdapterConfig", "PendingPolicy", "ENV_PREFIX"]
