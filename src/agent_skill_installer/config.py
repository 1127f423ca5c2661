from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

CONFIG_FILENAME = "package.json"
DEFAULT_VERSION = "1.0.0"


@dataclass(frozen=True)
class TargetSpec:
    enabled: bool
    global_path: str | None = None
    project_path: str | None = None


@dataclass(frozen=True)
class SkillConfig:
    name: str
    package: str
    version: str = DEFAULT_VERSION
    targets: dict[str, TargetSpec] | None = None  # None means "use the built-in default target"
    files: dict[str, str] = field(default_factory=dict)
    hooks: dict[str, str] = field(default_factory=dict)

    @property
    def skill_name(self) -> str:
        return extract_skill_name(self.name)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "SkillConfig":
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError('Configuration must have a "name" field')
        name = name.strip()

        package = raw.get("package")
        if not isinstance(package, str) or not package.strip():
            package = name

        version = raw.get("version")
        if not isinstance(version, str) or not version.strip():
            version = DEFAULT_VERSION

        targets: dict[str, TargetSpec] | None = None
        targets_raw = raw.get("targets")
        if isinstance(targets_raw, dict):
            targets = {}
            for target_name, spec in targets_raw.items():
                if not isinstance(spec, dict):
                    continue
                paths = spec.get("paths") if isinstance(spec.get("paths"), dict) else {}
                targets[str(target_name)] = TargetSpec(
                    enabled=bool(spec.get("enabled")),
                    global_path=_str_or_none(paths.get("global")),
                    project_path=_str_or_none(paths.get("project")),
                )

        return cls(
            name=name,
            package=package.strip(),
            version=version.strip(),
            targets=targets,
            files=_str_mapping(raw.get("files")),
            hooks=_str_mapping(raw.get("hooks")),
        )


def _str_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _str_mapping(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str)}


def extract_skill_name(package_name: str) -> str:
    """Strip an ``@scope/`` prefix: ``"@acme/fmt"`` -> ``"fmt"``."""
    if package_name.startswith("@"):
        parts = package_name.split("/")
        if len(parts) > 1 and parts[1]:
            return parts[1]
    return package_name


def config_path(path_override: str | Path | None, *, project_root: Path) -> Path:
    if path_override is not None:
        return Path(path_override).expanduser().resolve()
    return project_root / CONFIG_FILENAME


def read_config(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"{CONFIG_FILENAME} not found at {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to parse {CONFIG_FILENAME}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Failed to parse {CONFIG_FILENAME}: expected a JSON object")
    return raw


def validate_config(raw: dict[str, Any]) -> None:
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f'{CONFIG_FILENAME} must have a "name" field')

    if "targets" not in raw or raw["targets"] is None:
        return

    targets = raw["targets"]
    if not isinstance(targets, dict):
        raise ConfigurationError('"targets" must be an object mapping target names to settings')

    enabled = [(k, v) for k, v in targets.items() if isinstance(v, dict) and v.get("enabled") is True]
    if not enabled:
        raise ConfigurationError("At least one target must be enabled")

    for target_name, spec in enabled:
        paths = spec.get("paths")
        if (
            not isinstance(paths, dict)
            or _str_or_none(paths.get("global")) is None
            or _str_or_none(paths.get("project")) is None
        ):
            raise ConfigurationError(f'Target "{target_name}" must have both global and project paths')


def load_config(path: str | Path, *, validate: bool = True) -> SkillConfig:
    raw = read_config(path)
    if validate:
        validate_config(raw)
    return SkillConfig.from_dict(raw)
