import logging
import os
import tempfile
import unittest
from pathlib import Path

from agent_skill_installer.config import SkillConfig
from agent_skill_installer.errors import TransferError
from agent_skill_installer.file_transfer import copy_directory, copy_file, copy_skill_files, remove_directory

_LOG = logging.getLogger("agent_skill_installer.tests.file_transfer")


class _Dirs(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.addCleanup(self._td.cleanup)
        self.base = Path(self._td.name)
        self.source = self.base / "source"
        self.target = self.base / "target"
        self.source.mkdir()


class TestCopyHelpers(_Dirs):
    def test_copy_file_creates_parents(self) -> None:
        src = self.source / "test.txt"
        src.write_text("test content", encoding="utf-8")
        dest = self.target / "nested" / "deep" / "test.txt"

        copy_file(src, dest)

        self.assertEqual(dest.read_text(encoding="utf-8"), "test content")

    def test_copy_directory_recursive(self) -> None:
        scripts = self.source / "scripts"
        (scripts / "nested").mkdir(parents=True)
        (scripts / "setup.sh").write_text('echo "setup"', encoding="utf-8")
        (scripts / "nested" / "config.json").write_text("{}", encoding="utf-8")

        copy_directory(scripts, self.target / "scripts")

        self.assertTrue((self.target / "scripts" / "setup.sh").is_file())
        self.assertTrue((self.target / "scripts" / "nested" / "config.json").is_file())

    @unittest.skipUnless(hasattr(os, "symlink") and os.name != "nt", "symlinks required")
    def test_copy_directory_preserves_symlinks(self) -> None:
        assets = self.source / "assets"
        assets.mkdir()
        (assets / "logo.svg").write_text("<svg/>", encoding="utf-8")
        os.symlink("logo.svg", assets / "current.svg")
        os.symlink("missing.txt", assets / "dangling")

        copy_directory(assets, self.target / "assets")

        link = self.target / "assets" / "current.svg"
        self.assertTrue(link.is_symlink())
        self.assertEqual(os.readlink(link), "logo.svg")
        self.assertTrue((self.target / "assets" / "dangling").is_symlink())


class TestCopySkillFiles(_Dirs):
    def test_copies_skill_md_and_detected_directories(self) -> None:
        (self.source / "SKILL.md").write_text("# Test Skill", encoding="utf-8")
        (self.source / "scripts").mkdir()
        (self.source / "scripts" / "setup.sh").write_text("echo", encoding="utf-8")
        (self.source / "unrelated").mkdir()

        copied = copy_skill_files(self.source, self.target, SkillConfig.from_dict({"name": "t"}), _LOG)

        self.assertEqual(copied, ["SKILL.md", "scripts/ (directory)"])
        self.assertTrue((self.target / "SKILL.md").is_file())
        self.assertTrue((self.target / "scripts" / "setup.sh").is_file())
        self.assertFalse((self.target / "unrelated").exists())

    def test_all_optional_directories_in_fixed_order(self) -> None:
        (self.source / "SKILL.md").write_text("# Test Skill", encoding="utf-8")
        for name in ("assets", "references", "scripts"):
            (self.source / name).mkdir()
            (self.source / name / "test.txt").write_text("test", encoding="utf-8")

        copied = copy_skill_files(self.source, self.target, SkillConfig.from_dict({"name": "t"}), _LOG)

        self.assertEqual(
            copied,
            ["SKILL.md", "scripts/ (directory)", "references/ (directory)", "assets/ (directory)"],
        )

    def test_only_skill_md(self) -> None:
        (self.source / "SKILL.md").write_text("# Test Skill", encoding="utf-8")
        copied = copy_skill_files(self.source, self.target, SkillConfig.from_dict({"name": "t"}), _LOG)
        self.assertEqual(copied, ["SKILL.md"])

    def test_missing_skill_md(self) -> None:
        with self.assertRaisesRegex(TransferError, "SKILL.md is required"):
            copy_skill_files(self.source, self.target, SkillConfig.from_dict({"name": "t"}), _LOG)
        self.assertFalse(self.target.exists())

    def test_extra_files_mapping(self) -> None:
        (self.source / "SKILL.md").write_text("# Test Skill", encoding="utf-8")
        (self.source / "LICENSE").write_text("MIT", encoding="utf-8")
        cfg = SkillConfig.from_dict({"name": "t", "files": {"LICENSE": "docs/LICENSE.txt", "missing.md": "m.md"}})

        with self.assertLogs(_LOG, level="WARNING") as logs:
            copied = copy_skill_files(self.source, self.target, cfg, _LOG)

        self.assertEqual(copied, ["SKILL.md", "LICENSE"])
        self.assertEqual((self.target / "docs" / "LICENSE.txt").read_text(encoding="utf-8"), "MIT")
        self.assertIn("missing.md not found", logs.output[0])

    def test_extra_files_cannot_escape(self) -> None:
        (self.source / "SKILL.md").write_text("# Test Skill", encoding="utf-8")
        (self.source / "x").write_text("x", encoding="utf-8")
        cfg = SkillConfig.from_dict({"name": "t", "files": {"x": "../outside"}})

        with self.assertRaises(TransferError):
            copy_skill_files(self.source, self.target, cfg, _LOG)
        self.assertFalse((self.base / "outside").exists())


class TestRemoveDirectory(_Dirs):
    def test_removes_tree(self) -> None:
        victim = self.base / "to-remove"
        (victim / "sub").mkdir(parents=True)
        (victim / "sub" / "file.txt").write_text("content", encoding="utf-8")

        self.assertTrue(remove_directory(victim))
        self.assertFalse(victim.exists())

    def test_missing_path_is_noop(self) -> None:
        self.assertFalse(remove_directory(self.base / "nonexistent"))


if __name__ == "__main__":
    unittest.main()
