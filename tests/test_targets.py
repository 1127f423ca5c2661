import unittest

from agent_skill_installer.config import SkillConfig
from agent_skill_installer.settings import Settings
from agent_skill_installer.targets import (
    DEFAULT_TARGET,
    KNOWN_TARGETS,
    Target,
    filter_targets,
    get_enabled_targets,
    known_targets,
)


def _cfg(targets=None) -> SkillConfig:
    raw = {"name": "test-skill"}
    if targets is not None:
        raw["targets"] = targets
    return SkillConfig.from_dict(raw)


class TestGetEnabledTargets(unittest.TestCase):
    def test_default_target_without_targets(self) -> None:
        targets = get_enabled_targets(_cfg())
        self.assertEqual(targets, [DEFAULT_TARGET])
        self.assertEqual(targets[0].name, "claude-code")
        self.assertEqual(targets[0].global_path, ".claude/skills")
        self.assertEqual(targets[0].project_path, ".claude/skills")

    def test_only_enabled_in_order(self) -> None:
        cfg = _cfg(
            {
                "claude-code": {"enabled": True, "paths": {"global": ".claude/skills", "project": ".claude/skills"}},
                "cursor": {"enabled": False, "paths": {"global": ".cursor/skills", "project": ".cursor/skills"}},
                "windsurf": {"enabled": True, "paths": {"global": ".windsurf/skills", "project": ".ws/skills"}},
            }
        )
        targets = get_enabled_targets(cfg)
        self.assertEqual([t.name for t in targets], ["claude-code", "windsurf"])
        self.assertEqual(targets[1].project_path, ".ws/skills")


class TestFilterTargets(unittest.TestCase):
    def setUp(self) -> None:
        self.targets = [
            Target("claude-code", ".claude/skills", ".claude/skills"),
            Target("cursor", ".cursor/skills", ".cursor/skills"),
            Target("windsurf", ".windsurf/skills", ".windsurf/skills"),
        ]

    def test_none_is_identity(self) -> None:
        self.assertEqual(filter_targets(self.targets, None), self.targets)

    def test_trims_and_preserves_original_order(self) -> None:
        out = filter_targets(self.targets, " windsurf , claude-code")
        self.assertEqual([t.name for t in out], ["claude-code", "windsurf"])

    def test_unknown_names_yield_empty(self) -> None:
        self.assertEqual(filter_targets(self.targets, "aider,vim"), [])


class TestKnownTargets(unittest.TestCase):
    def test_settings_extend_catalog(self) -> None:
        settings = Settings(
            extra_targets={
                "zed": {"global": ".zed/skills", "project": ".zed/skills"},
                "cursor": {"global": "ignored", "project": "ignored"},
            }
        )
        names = [t.name for t in known_targets(settings)]
        self.assertEqual(names, [t.name for t in KNOWN_TARGETS] + ["zed"])


if __name__ == "__main__":
    unittest.main()
