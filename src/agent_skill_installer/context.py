from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

PROJECT_MARKERS = ("package.json", ".git")
VENDOR_DIR_NAME = "node_modules"

GLOBAL_ENV_VAR = "npm_config_global"
INIT_CWD_ENV_VAR = "INIT_CWD"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    is_global: bool
    package_root: Path
    home_dir: Path
    cwd: Path

    @property
    def location(self) -> str:
        return "global" if self.is_global else "project"


def _is_vendored(path: Path) -> bool:
    return VENDOR_DIR_NAME in path.parts


def _has_marker(path: Path) -> bool:
    return any((path / marker).exists() for marker in PROJECT_MARKERS)


def find_package_root(start: Path, *, logger: logging.Logger | None = None) -> Path:
    """
    Walk upward from ``start`` to the nearest directory that looks like a project root.

    A directory qualifies when it holds ``package.json`` or ``.git`` and does not sit
    inside ``node_modules``. When nothing qualifies, ``start`` is returned and a warning
    is logged; this never raises.
    """
    log = logger or _log
    start = Path(start)
    for candidate in (start, *start.parents):
        if _is_vendored(candidate):
            continue
        if _has_marker(candidate):
            return candidate
    log.warning("Could not find project root directory, using current directory: %s", start)
    return start


def detect_context(
    *,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
    logger: logging.Logger | None = None,
) -> Context:
    env = os.environ if environ is None else environ
    proc_cwd = Path(cwd) if cwd is not None else Path.cwd()

    init_cwd = env.get(INIT_CWD_ENV_VAR)
    start = (Path(init_cwd) if init_cwd else proc_cwd).absolute()

    return Context(
        is_global=env.get(GLOBAL_ENV_VAR) == "true",
        package_root=find_package_root(start, logger=logger),
        home_dir=Path(home) if home is not None else Path.home(),
        cwd=proc_cwd,
    )
