from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import SkillConfig

MANIFEST_FILENAME = ".skills-manifest.json"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestRecord:
    version: str
    installed_at: str
    package: str
    path: str
    target: str
    skill_name: str

    def to_json(self) -> dict[str, str]:
        return {
            "version": self.version,
            "installedAt": self.installed_at,
            "package": self.package,
            "path": self.path,
            "target": self.target,
            "skillName": self.skill_name,
        }

    @classmethod
    def from_json(cls, key: str, raw: dict[str, Any]) -> "ManifestRecord":
        def _s(name: str, default: str = "") -> str:
            value = raw.get(name)
            return value if isinstance(value, str) else default

        return cls(
            version=_s("version"),
            installed_at=_s("installedAt"),
            package=key,
            path=_s("path"),
            target=_s("target"),
            skill_name=_s("skillName"),
        )


@dataclass
class Manifest:
    skills: dict[str, ManifestRecord] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {"skills": {key: rec.to_json() for key, rec in self.skills.items()}}


def manifest_path(base_dir: Path) -> Path:
    return Path(base_dir) / MANIFEST_FILENAME


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _write_json_atomic(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)


def _read_document(base_dir: Path, log: logging.Logger) -> dict[str, Any]:
    """Raw manifest JSON, or an empty document when missing or unusable."""
    path = manifest_path(base_dir)
    if not path.exists():
        return {"skills": {}}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        log.warning("Could not parse existing manifest %s, starting a new one", path)
        return {"skills": {}}
    if not isinstance(raw, dict) or not isinstance(raw.get("skills"), dict):
        log.warning("Manifest %s has an unexpected shape, starting a new one", path)
        return {"skills": {}}
    return raw


def read_manifest(base_dir: Path, *, logger: logging.Logger | None = None) -> Manifest:
    raw = _read_document(base_dir, logger or _log)
    skills: dict[str, ManifestRecord] = {}
    for key, item in raw["skills"].items():
        if not isinstance(key, str) or not isinstance(item, dict):
            continue
        skills[key] = ManifestRecord.from_json(key, item)
    return Manifest(skills=skills)


def write_manifest(base_dir: Path, manifest: Manifest) -> Path:
    path = manifest_path(base_dir)
    _write_json_atomic(path, manifest.to_json())
    return path


def update_manifest(
    base_dir: Path,
    config: SkillConfig,
    install_path: Path,
    target_name: str,
    *,
    now: str | None = None,
    logger: logging.Logger | None = None,
) -> ManifestRecord:
    # Whole-file read-modify-write; concurrent writers race and the last one wins.
    # Only this package's entry is replaced, everything else is written back as read.
    doc = _read_document(base_dir, logger or _log)
    record = ManifestRecord(
        version=config.version,
        installed_at=now or _utc_now(),
        package=config.package,
        path=str(install_path),
        target=target_name,
        skill_name=config.skill_name,
    )
    doc["skills"][config.package] = record.to_json()
    _write_json_atomic(manifest_path(base_dir), doc)
    return record


def remove_from_manifest(base_dir: Path, package_key: str, *, logger: logging.Logger | None = None) -> bool:
    if not manifest_path(base_dir).exists():
        return False
    doc = _read_document(base_dir, logger or _log)
    if package_key not in doc["skills"]:
        return False
    del doc["skills"][package_key]
    _write_json_atomic(manifest_path(base_dir), doc)
    return True


def get_installed_skills(base_dir: Path, *, logger: logging.Logger | None = None) -> list[ManifestRecord]:
    return list(read_manifest(base_dir, logger=logger).skills.values())
