from __future__ import annotations

from dataclasses import dataclass

from .config import SkillConfig
from .settings import Settings


@dataclass(frozen=True)
class Target:
    name: str
    global_path: str
    project_path: str


DEFAULT_TARGET = Target(name="claude-code", global_path=".claude/skills", project_path=".claude/skills")

# Every tool `list` knows how to scan, independent of any skill's configuration.
KNOWN_TARGETS: tuple[Target, ...] = (
    DEFAULT_TARGET,
    Target(name="cursor", global_path=".cursor/skills", project_path=".cursor/skills"),
    Target(name="windsurf", global_path=".windsurf/skills", project_path=".windsurf/skills"),
    Target(name="aider", global_path=".aider/skills", project_path=".aider/skills"),
)


def get_enabled_targets(config: SkillConfig) -> list[Target]:
    if config.targets is None:
        return [DEFAULT_TARGET]

    out: list[Target] = []
    for name, spec in config.targets.items():
        if not spec.enabled:
            continue
        if not spec.global_path or not spec.project_path:
            continue
        out.append(Target(name=name, global_path=spec.global_path, project_path=spec.project_path))
    return out


def filter_targets(targets: list[Target], target_filter: str | None) -> list[Target]:
    if not target_filter:
        return list(targets)
    requested = {t.strip() for t in target_filter.split(",")}
    return [t for t in targets if t.name in requested]


def known_targets(settings: Settings | None = None) -> list[Target]:
    out = list(KNOWN_TARGETS)
    if settings is None:
        return out
    seen = {t.name for t in out}
    for name, paths in settings.extra_targets.items():
        if name in seen:
            continue
        seen.add(name)
        out.append(Target(name=name, global_path=paths["global"], project_path=paths["project"]))
    return out
