"""
Tests for the CLI interface.
"""

from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from deploy_git.cli import cli, iter_sources, read_path_list
from deploy_git.models import (
    CloneError, NoVersionError, ReleaseOutcome, ReleasePlan, ReleaseState,
)


@pytest.fixture(autouse=True)
def isolated_log(tmp_path, monkeypatch):
    monkeypatch.setenv("DEPLOY_GIT_LOG", str(tmp_path / "logs" / "deploy-git.log"))


class TestCLI:
    """Test CLI commands."""

    def setup_method(self):
        self.runner = CliRunner()

    def test_cli_help(self):
        result = self.runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'Deploy Git' in result.output

    def test_version_command(self):
        result = self.runner.invoke(cli, ['version'])
        assert result.exit_code == 0
        assert 'deploy-git' in result.output

    @patch('deploy_git.cli.ReleaseOrchestrator')
    def test_release_success(self, mock_orchestrator_class, source_dir):
        mock_orchestrator = Mock()
        mock_orchestrator.run.return_value = ReleaseOutcome(state=ReleaseState.DONE, version="1.2.3")
        mock_orchestrator_class.return_value = mock_orchestrator

        result = self.runner.invoke(cli, [
            '--source-dir', str(source_dir), 'release', 'dist',
            '--repository', 'git@example.com:org/dist.git', '--prefix', 'dist', '--release',
        ])

        assert result.exit_code == 0, result.output
        assert 'Released 1.2.3' in result.output
        options = mock_orchestrator_class.call_args.args[0]
        assert options.repository == 'git@example.com:org/dist.git'
        assert options.release is True
        assert options.effective_bump_version is True
        sources = list(mock_orchestrator.run.call_args.args[0])
        assert source_dir / "dist" / "app" / "app.js" in [s.path for s in sources]

    @patch('deploy_git.cli.ReleaseOrchestrator')
    def test_release_hard_failure_exits_nonzero(self, mock_orchestrator_class, source_dir):
        mock_orchestrator = Mock()
        mock_orchestrator.run.return_value = ReleaseOutcome(
            state=ReleaseState.FAILED,
            error=CloneError("git clone", 128, "repository not found"),
            failed_state=ReleaseState.CLONING,
        )
        mock_orchestrator_class.return_value = mock_orchestrator

        result = self.runner.invoke(cli, [
            '--source-dir', str(source_dir), 'release', 'dist', '--repository', 'r',
        ])

        assert result.exit_code == 1
        assert 'Release failed while cloning' in result.output
        assert 'repository not found' in result.output

    @patch('deploy_git.cli.ReleaseOrchestrator')
    def test_release_soft_failure_exits_zero(self, mock_orchestrator_class, source_dir):
        mock_orchestrator = Mock()
        mock_orchestrator.run.return_value = ReleaseOutcome(
            state=ReleaseState.FAILED, error=NoVersionError(), failed_state=ReleaseState.RESOLVING_VERSION,
        )
        mock_orchestrator_class.return_value = mock_orchestrator

        result = self.runner.invoke(cli, [
            '--source-dir', str(source_dir), 'release', 'dist', '--repository', 'r',
        ])

        assert result.exit_code == 0
        assert 'Could not find bower.json or package.json' in result.output

    @patch('deploy_git.cli.ReleaseOrchestrator')
    def test_release_dry_run(self, mock_orchestrator_class, source_dir):
        mock_orchestrator = Mock()
        mock_orchestrator.plan.return_value = ReleasePlan(
            version="1.2.3", clone_path=source_dir / "deploy-1-1", files=(),
            stages=[ReleaseState.RESOLVING_VERSION, ReleaseState.CLONING],
        )
        mock_orchestrator_class.return_value = mock_orchestrator

        result = self.runner.invoke(cli, [
            '--source-dir', str(source_dir), 'release', 'dist', '--repository', 'r', '--dry-run',
        ])

        assert result.exit_code == 0, result.output
        assert 'Dry Run Complete' in result.output
        mock_orchestrator.run.assert_not_called()

    def test_release_bad_config_exits_nonzero(self, source_dir):
        (source_dir / "deploy-git.json").write_text("{broken")
        result = self.runner.invoke(cli, ['--source-dir', str(source_dir), 'release', 'dist'])
        assert result.exit_code == 1
        assert 'Failed to read config file' in result.output

    @patch('deploy_git.cli.ReleaseOrchestrator')
    def test_files_from_stdin(self, mock_orchestrator_class, source_dir):
        mock_orchestrator = Mock()
        mock_orchestrator.run.return_value = ReleaseOutcome(state=ReleaseState.DONE, version="1.2.3")
        mock_orchestrator_class.return_value = mock_orchestrator

        result = self.runner.invoke(
            cli,
            ['--source-dir', str(source_dir), 'release', '--repository', 'r', '--files-from', '-'],
            input="dist/index.html\n\ndist/app/app.js\n",
        )

        assert result.exit_code == 0, result.output
        sources = list(mock_orchestrator.run.call_args.args[0])
        assert [s.path for s in sources] == [
            source_dir / "dist" / "index.html",
            source_dir / "dist" / "app" / "app.js",
        ]

    def test_resolve_version_release(self, source_dir):
        result = self.runner.invoke(cli, ['--source-dir', str(source_dir), 'resolve-version', '--release'])
        assert result.exit_code == 0
        assert result.output.strip().endswith('1.2.3')

    def test_resolve_version_without_metadata(self, tmp_path):
        result = self.runner.invoke(cli, ['--source-dir', str(tmp_path), 'resolve-version', '--release'])
        assert result.exit_code == 1


class TestInputCollection:

    def test_iter_sources_expands_directories(self, source_dir):
        sources = list(iter_sources(["dist"], source_dir))
        paths = [s.path for s in sources]
        assert paths[0] == source_dir / "dist"
        assert source_dir / "dist" / "app" in paths
        assert source_dir / "dist" / "app" / "app.js" in paths
        assert all(s.cwd == source_dir for s in sources)

    def test_read_path_list_skips_blank_lines(self):
        assert list(read_path_list(["a\n", "  \n", " b \n"])) == ["a", "b"]
