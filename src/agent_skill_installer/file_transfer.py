from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .config import SkillConfig
from .errors import TransferError

REQUIRED_DOCUMENT = "SKILL.md"

# Copied automatically when present at the bundle root, in this order.
OPTIONAL_DIRECTORIES = ("scripts", "references", "assets")


def copy_file(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(source, dest)


def copy_directory(source: Path, dest: Path) -> None:
    # Symlinks are recreated as symlinks, never followed.
    shutil.copytree(source, dest, symlinks=True, dirs_exist_ok=True)


def _inside(path: Path, root: Path) -> bool:
    path = path.resolve()
    root = root.resolve()
    return path == root or root in path.parents


def copy_skill_files(
    source_root: Path,
    target_dir: Path,
    config: SkillConfig,
    logger: logging.Logger,
) -> list[str]:
    source_root = Path(source_root)
    target_dir = Path(target_dir)

    skill_md = source_root / REQUIRED_DOCUMENT
    if not skill_md.is_file():
        raise TransferError(f"{REQUIRED_DOCUMENT} is required but not found in {source_root}")

    target_dir.mkdir(parents=True, exist_ok=True)
    copied: list[str] = []

    copy_file(skill_md, target_dir / REQUIRED_DOCUMENT)
    copied.append(REQUIRED_DOCUMENT)
    logger.debug("Copied %s", REQUIRED_DOCUMENT)

    for name in OPTIONAL_DIRECTORIES:
        src = source_root / name
        if not src.is_dir():
            continue
        copy_directory(src, target_dir / name)
        copied.append(f"{name}/ (directory)")
        logger.debug("Copied directory: %s", name)

    for rel_source, rel_dest in config.files.items():
        src = source_root / rel_source
        dest = target_dir / rel_dest
        if not _inside(src, source_root) or not _inside(dest, target_dir):
            raise TransferError(f"File mapping escapes the skill directory: {rel_source!r} -> {rel_dest!r}")
        if not src.exists():
            logger.warning("%s not found, skipping", rel_source)
            continue
        if src.is_dir():
            copy_directory(src, dest)
            copied.append(f"{rel_source}/ (directory)")
            logger.debug("Copied directory: %s", rel_source)
        else:
            copy_file(src, dest)
            copied.append(rel_source)
            logger.debug("Copied file: %s", rel_source)

    return copied


def remove_directory(path: Path) -> bool:
    """Delete ``path`` recursively. Returns False when there was nothing to delete."""
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if not path.exists():
        return False
    shutil.rmtree(path)
    return True
