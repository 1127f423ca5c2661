from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .config import SkillConfig
from .settings import DEFAULT_HOOK_TIMEOUT_S

POSTINSTALL_HOOK = "postinstall"


def run_hook(
    command: str,
    cwd: Path,
    *,
    logger: logging.Logger,
    timeout_s: float = DEFAULT_HOOK_TIMEOUT_S,
) -> bool:
    """Run a shell command inside ``cwd``. Failures are logged and reported as False."""
    logger.debug("Executing hook: %s", command)
    try:
        proc = subprocess.run(
            command,
            shell=True,
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout_s,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Hook execution failed: timed out after %ss", timeout_s)
        return False
    except OSError as e:
        logger.warning("Hook execution failed: %s", e)
        return False

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        detail = f": {stderr}" if stderr else ""
        logger.warning("Hook execution failed: exit code %s%s", proc.returncode, detail)
        return False

    logger.debug("Hook completed successfully")
    return True


def run_post_install_hooks(
    config: SkillConfig,
    target_dir: Path,
    *,
    logger: logging.Logger,
    skip: bool = False,
    timeout_s: float = DEFAULT_HOOK_TIMEOUT_S,
) -> bool | None:
    """Returns None when no hook ran, otherwise whether the hook succeeded."""
    command = config.hooks.get(POSTINSTALL_HOOK)
    if not command:
        return None
    if skip:
        logger.debug("Skipping post-install hooks")
        return None

    logger.debug("Running post-install hook...")
    ok = run_hook(command, target_dir, logger=logger, timeout_s=timeout_s)
    if ok:
        logger.info("Post-install hook completed")
    else:
        logger.warning("Post-install hook failed (continuing anyway)")
    return ok
