from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap

from ._version import __version__
from .config import CONFIG_FILENAME, config_path, load_config
from .context import Context, detect_context
from .errors import ConfigurationError, SkillInstallerError, TargetSelectionError
from .installer import InstallReport, UninstallReport, install_skill, list_installed, uninstall_skill
from .settings import SETTINGS_ENV_VAR, load_settings
from .targets import filter_targets, get_enabled_targets, known_targets

DIVIDER = "=" * 60


class _PrefixFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"error: {msg}"
        if record.levelno >= logging.WARNING:
            return f"warning: {msg}"
        if record.levelno <= logging.DEBUG:
            return f"[debug] {msg}"
        return msg


def configure_logging(*, verbose: bool = False, silent: bool = False) -> logging.Logger:
    """Build the logger handed to the core for one invocation (unregistered, fresh per call)."""
    logger = logging.Logger("agent-skill-installer")
    if silent:
        logger.setLevel(logging.ERROR)
    elif verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    fmt = _PrefixFormatter("%(message)s")

    out = logging.StreamHandler(sys.stdout)
    out.addFilter(lambda record: record.levelno < logging.ERROR)
    out.setFormatter(fmt)
    logger.addHandler(out)

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.ERROR)
    err.setFormatter(fmt)
    logger.addHandler(err)
    return logger


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="agent-skill-installer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Install and manage AI agent skills for Claude Code, Cursor, Windsurf and other tools.",
        epilog=textwrap.dedent(
            f"""\
            Environment variables:
              npm_config_global   "true" installs into the home directory instead of the project
              INIT_CWD            directory the project root search starts from
              {SETTINGS_ENV_VAR}  path to the per-user settings file
            """
        ),
    )

    def _add_global_options(parser: argparse.ArgumentParser, *, default, silent: bool = True) -> None:
        # Accepted both before and after the subcommand, e.g.:
        #   agent-skill-installer --verbose install
        #   agent-skill-installer install --verbose
        parser.add_argument("--config", default=default, help=f"Path to the skill's {CONFIG_FILENAME}")
        parser.add_argument("-v", "--verbose", action="store_true", default=default, help="Enable verbose logging")
        if silent:
            parser.add_argument(
                "-s", "--silent", action="store_true", default=default, help="Suppress non-error output (list always prints)"
            )

    _add_global_options(p, default=None)
    p.add_argument("--version", action="version", version=f"agent-skill-installer {__version__}")

    sub = p.add_subparsers(dest="cmd", required=True)

    install = sub.add_parser("install", help="Install the skill to its configured targets")
    _add_global_options(install, default=argparse.SUPPRESS)
    install.add_argument("--target", help="Comma-separated list of targets (e.g. claude-code,cursor)")
    install.add_argument("-f", "--force", action="store_true", help="Reinstall even if already installed")
    install.add_argument("--dry-run", action="store_true", help="Preview without making any changes")
    install.add_argument("--no-hooks", dest="skip_hooks", action="store_true", help="Skip post-install hooks")

    uninstall = sub.add_parser("uninstall", help="Uninstall the skill from its configured targets")
    _add_global_options(uninstall, default=argparse.SUPPRESS)
    uninstall.add_argument("--target", help="Comma-separated list of targets to uninstall from")
    uninstall.add_argument("--dry-run", action="store_true", help="Preview without making any changes")

    lst = sub.add_parser("list", help="List installed skills across AI coding tools")
    _add_global_options(lst, default=argparse.SUPPRESS, silent=False)
    lst.add_argument("--target", help="Only show skills for these targets (comma-separated)")
    lst.add_argument("--json", action="store_true", help="Output JSON")

    return p


def _print_install_summary(report: InstallReport, logger: logging.Logger) -> None:
    logger.info("")
    logger.info(DIVIDER)
    if report.dry_run:
        logger.info("DRY RUN COMPLETE")
        logger.info("No changes were made. Run without --dry-run to install.")
        return
    if report.installed:
        logger.info("Installation Complete!")
        logger.info(DIVIDER)
        logger.info("")
        logger.info("Installed to:")
        for result in report.installed:
            logger.info("  - %s: %s", result.target, result.path)
        logger.info("")
        logger.info("Next steps:")
        logger.info("  1. Restart your AI coding tool(s)")
        logger.info('  2. Ask: "What skills are available?"')
        logger.info("  3. Start using your skill!")
        return
    logger.warning("No skills were installed")
    logger.info("Check the logs above for details")


def _print_uninstall_summary(report: UninstallReport, logger: logging.Logger) -> None:
    logger.info("")
    logger.info(DIVIDER)
    if report.dry_run:
        logger.info("DRY RUN COMPLETE")
        logger.info("No changes were made. Run without --dry-run to uninstall.")
        return
    if report.removed:
        logger.info("Uninstallation Complete!")
        logger.info(DIVIDER)
        logger.info("")
        logger.info("Uninstalled from:")
        for result in report.removed:
            logger.info("  - %s", result.target)
        return
    logger.info("Skill was not installed")
    logger.info(DIVIDER)


def _print_troubleshooting(logger: logging.Logger) -> None:
    logger.info("")
    logger.info("Troubleshooting:")
    logger.info(f"  - Ensure {CONFIG_FILENAME} exists and is valid JSON")
    logger.info("  - Ensure SKILL.md exists in the package root")
    logger.info("  - Check file permissions for target directories")
    logger.info("  - Try running with --verbose for more details")


def _context_and_config_path(args: argparse.Namespace, logger: logging.Logger):
    context: Context = detect_context(logger=logger)
    logger.debug("Installation context: %s", "global" if context.is_global else "project-level")
    logger.debug("Package root: %s", context.package_root)
    return context, config_path(args.config, project_root=context.package_root)


def cmd_install(args: argparse.Namespace, logger: logging.Logger) -> int:
    logger.info("Installing AI Coding Skill...")
    logger.info("")
    try:
        settings = load_settings(logger=logger)
        context, path = _context_and_config_path(args, logger)
        config = load_config(path)

        targets = get_enabled_targets(config)
        if args.target:
            targets = filter_targets(targets, args.target)
            if not targets:
                raise TargetSelectionError(f"No matching targets found for: {args.target}")

        report = install_skill(
            config,
            targets,
            context,
            source_root=path.parent,
            logger=logger,
            force=args.force,
            dry_run=args.dry_run,
            skip_hooks=args.skip_hooks,
            hook_timeout_s=settings.hook_timeout_s,
        )
    except (ConfigurationError, TargetSelectionError) as e:
        logger.info("")
        logger.error("Installation failed: %s", e)
        _print_troubleshooting(logger)
        return 1

    _print_install_summary(report, logger)
    return 0


def cmd_uninstall(args: argparse.Namespace, logger: logging.Logger) -> int:
    logger.info("Uninstalling AI Coding Skill...")
    logger.info("")
    try:
        context, path = _context_and_config_path(args, logger)
        config = load_config(path, validate=False)

        targets = get_enabled_targets(config)
        if args.target:
            targets = filter_targets(targets, args.target)

        report = uninstall_skill(config, targets, context, logger=logger, dry_run=args.dry_run)
    except (SkillInstallerError, OSError) as e:
        # Uninstall is best-effort and never fails the process.
        logger.info("")
        logger.warning("Warning during uninstall: %s", e)
        logger.info("Uninstallation completed with warnings")
        return 0

    _print_uninstall_summary(report, logger)
    return 0


def cmd_list(args: argparse.Namespace, logger: logging.Logger) -> int:
    settings = load_settings(logger=logger)
    context = detect_context(logger=logger)
    targets = filter_targets(known_targets(settings), args.target)
    skills = list_installed(targets, context, logger=logger)

    if args.json:
        print(json.dumps({"skills": [s.to_json() for s in skills]}, indent=2))
        return 0

    if not skills:
        logger.info("No skills installed")
        logger.info("")
        logger.info("To install a skill:")
        logger.info("  npm install -g @your-org/your-skill")
        return 0

    logger.info("Installed Skills:")
    logger.info("")
    by_target: dict[str, list] = {}
    for skill in skills:
        by_target.setdefault(skill.target, []).append(skill)
    for target_name, items in by_target.items():
        logger.info("%s:", target_name)
        for skill in items:
            rec = skill.record
            logger.info("  - %s v%s", rec.package, rec.version)
            logger.info("    Path: %s", rec.path)
            logger.info("    Installed: %s", rec.installed_at or "unknown")
            logger.info("")
    logger.info("Total: %d skill(s) installed", len(skills))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    # `list` output is always shown; with --json stdout carries only the JSON document.
    if args.cmd == "list":
        silent = bool(args.json)
    else:
        silent = bool(args.silent)
    logger = configure_logging(verbose=bool(args.verbose), silent=silent)
    try:
        if args.cmd == "install":
            return cmd_install(args, logger)
        if args.cmd == "uninstall":
            return cmd_uninstall(args, logger)
        if args.cmd == "list":
            return cmd_list(args, logger)
        raise AssertionError("unreachable")
    except (SkillInstallerError, OSError) as e:
        logger.error("%s", e)
        logger.debug("Failure details", exc_info=True)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
