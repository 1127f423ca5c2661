from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import SkillConfig
from .context import Context
from .file_transfer import OPTIONAL_DIRECTORIES, REQUIRED_DOCUMENT, copy_skill_files, remove_directory
from .hooks import run_post_install_hooks
from .manifest import ManifestRecord, get_installed_skills, manifest_path, remove_from_manifest, update_manifest
from .paths import get_skills_base_dir, install_paths
from .settings import DEFAULT_HOOK_TIMEOUT_S
from .targets import Target

# Install outcomes
INSTALLED = "installed"
SKIPPED = "skipped"
PREVIEWED = "previewed"
FAILED = "failed"

# Uninstall outcomes
REMOVED = "removed"
ABSENT = "absent"


@dataclass(frozen=True)
class TargetResult:
    target: str
    status: str
    path: Path
    copied: tuple[str, ...] = ()
    manifest_updated: bool = False
    error: str | None = None


@dataclass(frozen=True)
class InstallReport:
    skill_name: str
    package: str
    dry_run: bool
    results: tuple[TargetResult, ...]

    @property
    def installed(self) -> tuple[TargetResult, ...]:
        return tuple(r for r in self.results if r.status == INSTALLED)

    @property
    def failed(self) -> tuple[TargetResult, ...]:
        return tuple(r for r in self.results if r.status == FAILED)


@dataclass(frozen=True)
class UninstallReport:
    skill_name: str
    package: str
    dry_run: bool
    results: tuple[TargetResult, ...]

    @property
    def removed(self) -> tuple[TargetResult, ...]:
        return tuple(r for r in self.results if r.status == REMOVED)

    @property
    def failed(self) -> tuple[TargetResult, ...]:
        return tuple(r for r in self.results if r.status == FAILED)


@dataclass(frozen=True)
class InstalledSkill:
    record: ManifestRecord
    target: str
    location: str

    def to_json(self) -> dict[str, str]:
        payload = self.record.to_json()
        payload["target"] = self.target
        payload["location"] = self.location
        return payload


def _install_one(
    target: Target,
    config: SkillConfig,
    context: Context,
    *,
    source_root: Path,
    logger: logging.Logger,
    force: bool,
    dry_run: bool,
    skip_hooks: bool,
    hook_timeout_s: float,
) -> TargetResult:
    install_path, alias_path = install_paths(target, config, context)
    logger.info("  Type: %s", "personal" if context.is_global else "project")
    logger.info("  Directory: %s", install_path)

    if install_path.exists() and not force:
        logger.warning("  Skill already installed in %s. Use --force to reinstall.", target.name)
        return TargetResult(target=target.name, status=SKIPPED, path=install_path)

    if dry_run:
        logger.info("  [DRY RUN] Would perform the following:")
        logger.info("  - Create directory: %s", install_path)
        logger.info("  - Copy %s", REQUIRED_DOCUMENT)
        logger.info("  - Auto-detect and copy: %s", ", ".join(f"{d}/" for d in OPTIONAL_DIRECTORIES))
        logger.info("  - Update manifest: %s", manifest_path(get_skills_base_dir(target, context)))
        return TargetResult(target=target.name, status=PREVIEWED, path=install_path)

    if alias_path != install_path and alias_path.exists():
        logger.debug("Cleaning up alternative path format: %s", alias_path)
        remove_directory(alias_path)

    copied = copy_skill_files(source_root, install_path, config, logger)
    logger.info("Copied %d file(s)", len(copied))

    update_manifest(get_skills_base_dir(target, context), config, install_path, target.name, logger=logger)
    logger.info("Updated manifest")

    run_post_install_hooks(config, install_path, logger=logger, skip=skip_hooks, timeout_s=hook_timeout_s)

    logger.info("Installed to %s", target.name)
    return TargetResult(
        target=target.name,
        status=INSTALLED,
        path=install_path,
        copied=tuple(copied),
        manifest_updated=True,
    )


def install_skill(
    config: SkillConfig,
    targets: list[Target],
    context: Context,
    *,
    source_root: Path,
    logger: logging.Logger,
    force: bool = False,
    dry_run: bool = False,
    skip_hooks: bool = False,
    hook_timeout_s: float = DEFAULT_HOOK_TIMEOUT_S,
) -> InstallReport:
    """
    Install the skill at ``source_root`` into every target, one target at a time.

    A failure in one target is recorded as a ``failed`` result and the remaining
    targets still run.
    """
    logger.info('Installing skill "%s" to %d target(s):', config.skill_name, len(targets))
    for target in targets:
        logger.info("  - %s", target.name)

    results: list[TargetResult] = []
    for target in targets:
        logger.info("")
        logger.info("Installing to %s...", target.name)
        try:
            result = _install_one(
                target,
                config,
                context,
                source_root=source_root,
                logger=logger,
                force=force,
                dry_run=dry_run,
                skip_hooks=skip_hooks,
                hook_timeout_s=hook_timeout_s,
            )
        except Exception as e:
            logger.error("Failed to install to %s: %s", target.name, e)
            logger.debug("Install failure details", exc_info=True)
            result = TargetResult(
                target=target.name,
                status=FAILED,
                path=get_skills_base_dir(target, context) / config.skill_name,
                error=str(e),
            )
        results.append(result)

    return InstallReport(
        skill_name=config.skill_name,
        package=config.package,
        dry_run=dry_run,
        results=tuple(results),
    )


def _uninstall_one(
    target: Target,
    config: SkillConfig,
    context: Context,
    *,
    logger: logging.Logger,
    dry_run: bool,
) -> TargetResult:
    install_path, alias_path = install_paths(target, config, context)
    base_dir = get_skills_base_dir(target, context)
    has_alias = alias_path != install_path

    if dry_run:
        logger.info("  [DRY RUN] Would perform the following:")
        would_remove = False
        if install_path.exists():
            logger.info("  - Remove directory: %s", install_path)
            would_remove = True
        if has_alias and alias_path.exists():
            logger.info("  - Remove directory: %s", alias_path)
            would_remove = True
        if would_remove or config.package in _manifest_keys(base_dir, logger=logger):
            logger.info("  - Update manifest: %s", manifest_path(base_dir))
        return TargetResult(target=target.name, status=PREVIEWED, path=install_path)

    removed = False
    if remove_directory(install_path):
        logger.info("Removed skill directory: %s", config.skill_name)
        removed = True
    if has_alias and remove_directory(alias_path):
        logger.info("Removed skill directory: %s", config.package)
        removed = True

    # The manifest entry may be stale relative to the filesystem, so always try.
    manifest_updated = remove_from_manifest(base_dir, config.package, logger=logger)
    if manifest_updated:
        logger.info("Updated manifest")

    if removed:
        logger.info("Uninstalled from %s", target.name)
        status = REMOVED
    else:
        logger.info("  Skill was not installed in %s", target.name)
        status = ABSENT
    return TargetResult(target=target.name, status=status, path=install_path, manifest_updated=manifest_updated)


def _manifest_keys(base_dir: Path, *, logger: logging.Logger | None = None) -> set[str]:
    return {rec.package for rec in get_installed_skills(base_dir, logger=logger)}


def uninstall_skill(
    config: SkillConfig,
    targets: list[Target],
    context: Context,
    *,
    logger: logging.Logger,
    dry_run: bool = False,
) -> UninstallReport:
    logger.info('Uninstalling skill "%s" from %d target(s):', config.skill_name, len(targets))
    for target in targets:
        logger.info("  - %s", target.name)

    results: list[TargetResult] = []
    for target in targets:
        logger.info("")
        logger.info("Uninstalling from %s...", target.name)
        try:
            result = _uninstall_one(target, config, context, logger=logger, dry_run=dry_run)
        except Exception as e:
            logger.error("Failed to uninstall from %s: %s", target.name, e)
            logger.debug("Uninstall failure details", exc_info=True)
            result = TargetResult(
                target=target.name,
                status=FAILED,
                path=get_skills_base_dir(target, context) / config.skill_name,
                error=str(e),
            )
        results.append(result)

    return UninstallReport(
        skill_name=config.skill_name,
        package=config.package,
        dry_run=dry_run,
        results=tuple(results),
    )


def list_installed(targets: list[Target], context: Context, *, logger: logging.Logger) -> list[InstalledSkill]:
    out: list[InstalledSkill] = []
    for target in targets:
        try:
            records = get_installed_skills(get_skills_base_dir(target, context), logger=logger)
        except OSError as e:
            logger.debug("Could not read skills from %s: %s", target.name, e)
            continue
        for record in records:
            out.append(InstalledSkill(record=record, target=target.name, location=context.location))
    return out
