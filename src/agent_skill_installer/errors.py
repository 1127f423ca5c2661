from __future__ import annotations


class SkillInstallerError(RuntimeError):
    pass


class ConfigurationError(SkillInstallerError):
    pass


class TargetSelectionError(SkillInstallerError):
    pass


class TransferError(SkillInstallerError):
    pass
