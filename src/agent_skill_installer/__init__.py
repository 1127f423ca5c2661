from ._version import __version__
from .config import SkillConfig, extract_skill_name, load_config, read_config, validate_config
from .context import Context, detect_context
from .errors import ConfigurationError, SkillInstallerError, TargetSelectionError, TransferError
from .installer import install_skill, list_installed, uninstall_skill
from .paths import get_skills_base_dir, resolve_path
from .targets import DEFAULT_TARGET, Target, filter_targets, get_enabled_targets

__all__ = [
    "__version__",
    "ConfigurationError",
    "Context",
    "DEFAULT_TARGET",
    "SkillConfig",
    "SkillInstallerError",
    "Target",
    "TargetSelectionError",
    "TransferError",
    "detect_context",
    "extract_skill_name",
    "filter_targets",
    "get_enabled_targets",
    "get_skills_base_dir",
    "install_skill",
    "list_installed",
    "load_config",
    "read_config",
    "resolve_path",
    "uninstall_skill",
    "validate_config",
]
