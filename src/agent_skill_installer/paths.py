from __future__ import annotations

import os
from pathlib import Path

from .config import SkillConfig
from .context import Context
from .errors import ConfigurationError
from .targets import Target


def get_skills_base_dir(target: Target, context: Context) -> Path:
    if context.is_global:
        return context.home_dir / target.global_path
    return context.package_root / target.project_path


def resolve_path(target: Target, skill_name: str, context: Context) -> Path:
    return get_skills_base_dir(target, context) / skill_name


def _below(path: Path, base: Path) -> bool:
    # Lexical check: an installed skill directory may itself be a symlink.
    path = Path(os.path.normpath(path.absolute()))
    base = Path(os.path.normpath(base.absolute()))
    return base in path.parents


def install_paths(target: Target, config: SkillConfig, context: Context) -> tuple[Path, Path]:
    """
    Return ``(canonical, alias)``: the bare skill name path and the full package name path.

    Both must sit strictly inside the target's skills directory, otherwise a
    ``ConfigurationError`` is raised before anything is touched.
    """
    base = get_skills_base_dir(target, context)
    canonical = resolve_path(target, config.skill_name, context)
    alias = resolve_path(target, config.package, context)
    for label, value, path in (("name", config.skill_name, canonical), ("package", config.package, alias)):
        if not _below(path, base):
            raise ConfigurationError(f"Invalid skill {label} {value!r}: must resolve inside {base}")
    return canonical, alias
