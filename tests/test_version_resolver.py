"""
Tests for version resolution and version arithmetic.
"""

import re
from unittest.mock import MagicMock

import pytest

from deploy_git.models import ConfigError, NoVersionError, RunOptions, SourceControlError
from deploy_git.version_resolver import (
    VersionResolver, base_version, next_patch_version, pre_release_version,
)

from conftest import write_json


PRE_RELEASE_RE = re.compile(r"^\d+\.\d+\.\d+-build\.(\d+|beta)\+sha\.[0-9a-f]{7,}$")


class TestVersionArithmetic:

    def test_next_patch(self):
        assert next_patch_version("1.2.3") == "1.2.4"
        assert next_patch_version("0.0.9") == "0.0.10"

    def test_next_patch_drops_decoration(self):
        assert next_patch_version("1.2.3-build.7+sha.abc1234") == "1.2.4"

    def test_base_version(self):
        assert base_version("v2.0.1") == "2.0.1"
        assert base_version("1.2.3-build.beta+sha.abc1234") == "1.2.3"

    def test_invalid_version(self):
        with pytest.raises(ConfigError):
            next_patch_version("not-a-version")
        with pytest.raises(ConfigError):
            next_patch_version("1.0")

    def test_next_patch_finalizes_plain_pre_release(self):
        assert next_patch_version("2.0.0-rc.1") == "2.0.0"
        assert next_patch_version("1.4.0-beta") == "1.4.0"

    def test_next_patch_ignores_build_metadata(self):
        assert next_patch_version("1.2.3+exp.sha.5114f85") == "1.2.4"

    def test_pre_release_version(self):
        assert pre_release_version("1.2.3", "abc1234", "42") == "1.2.3-build.42+sha.abc1234"
        assert pre_release_version("1.2.3", "abc1234", None) == "1.2.3-build.beta+sha.abc1234"
        assert pre_release_version("1.2.3", "abc1234", "") == "1.2.3-build.beta+sha.abc1234"


class TestVersionResolver:

    def test_release_uses_base_version_without_git(self, source_dir):
        gm = MagicMock()
        resolver = VersionResolver(source_dir, RunOptions(release=True), gm, environ={})
        assert resolver.resolve() == "1.2.3"
        gm.short_head.assert_not_called()

    def test_pre_release_decorates_with_build_and_sha(self, source_dir):
        gm = MagicMock()
        gm.short_head.return_value = "abc1234"
        resolver = VersionResolver(source_dir, RunOptions(release=False), gm, environ={"BUILD_NUMBER": "17"})
        version = resolver.resolve()
        assert version == "1.2.3-build.17+sha.abc1234"
        assert PRE_RELEASE_RE.match(version)

    def test_pre_release_without_build_number_is_beta(self, source_dir):
        gm = MagicMock()
        gm.short_head.return_value = "deadbeef"
        resolver = VersionResolver(source_dir, RunOptions(), gm, environ={})
        assert resolver.resolve() == "1.2.3-build.beta+sha.deadbeef"

    def test_bower_json_preferred(self, source_dir):
        write_json(source_dir / "bower.json", {"name": "app", "version": "3.0.0"})
        resolver = VersionResolver(source_dir, RunOptions(release=True), MagicMock(), environ={})
        assert resolver.resolve() == "3.0.0"

    def test_no_metadata_raises(self, tmp_path):
        gm = MagicMock()
        resolver = VersionResolver(tmp_path, RunOptions(), gm, environ={})
        with pytest.raises(NoVersionError):
            resolver.resolve()
        gm.short_head.assert_not_called()

    def test_rev_parse_failure_propagates(self, source_dir):
        gm = MagicMock()
        gm.short_head.side_effect = SourceControlError("git rev-parse", 128, "not a git repository")
        resolver = VersionResolver(source_dir, RunOptions(), gm, environ={})
        with pytest.raises(SourceControlError):
            resolver.resolve()

    def test_unbumpable_version_fails_before_git(self, source_dir):
        write_json(source_dir / "package.json", {"name": "app", "version": "1.0"})
        gm = MagicMock()
        resolver = VersionResolver(source_dir, RunOptions(release=True), gm, environ={})
        with pytest.raises(ConfigError):
            resolver.resolve()
        gm.short_head.assert_not_called()

    def test_unbumpable_version_allowed_without_bump(self, source_dir):
        write_json(source_dir / "package.json", {"name": "app", "version": "1.0"})
        resolver = VersionResolver(source_dir, RunOptions(release=True, bump_version=False), MagicMock(), environ={})
        assert resolver.resolve() == "1.0"
