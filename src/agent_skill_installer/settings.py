from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_config_path

SETTINGS_ENV_VAR = "AGENT_SKILL_INSTALLER_SETTINGS"
DEFAULT_HOOK_TIMEOUT_S = 30.0

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    hook_timeout_s: float = DEFAULT_HOOK_TIMEOUT_S
    extra_targets: dict[str, dict[str, str]] = field(default_factory=dict)  # name -> {"global": ..., "project": ...}


def settings_path(path_override: str | Path | None = None) -> Path:
    if path_override is not None:
        return Path(path_override).expanduser()
    if env := os.getenv(SETTINGS_ENV_VAR):
        return Path(env).expanduser()
    return user_config_path("agent-skill-installer") / "settings.json"


def load_settings(path_override: str | Path | None = None, *, logger: logging.Logger | None = None) -> Settings:
    """Unreadable or malformed settings fall back to defaults with a warning."""
    log = logger or _log
    path = settings_path(path_override)
    if not path.exists():
        return Settings()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("Ignoring settings file %s: %s", path, e)
        return Settings()
    if not isinstance(raw, dict):
        log.warning("Ignoring settings file %s: expected a JSON object", path)
        return Settings()

    timeout_s = raw.get("hook_timeout_s", DEFAULT_HOOK_TIMEOUT_S)
    try:
        timeout_f = float(timeout_s)
    except (TypeError, ValueError):
        timeout_f = DEFAULT_HOOK_TIMEOUT_S
    if timeout_f <= 0:
        timeout_f = DEFAULT_HOOK_TIMEOUT_S

    return Settings(hook_timeout_s=timeout_f, extra_targets=_parse_extra_targets(raw.get("extra_targets")))


def _parse_extra_targets(value: Any) -> dict[str, dict[str, str]]:
    if not isinstance(value, dict):
        return {}
    out: dict[str, dict[str, str]] = {}
    for name, paths in value.items():
        if not isinstance(paths, dict):
            continue
        global_path = paths.get("global")
        project_path = paths.get("project")
        if isinstance(global_path, str) and global_path and isinstance(project_path, str) and project_path:
            out[str(name)] = {"global": global_path, "project": project_path}
    return out
