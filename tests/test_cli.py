"""
Tests for the demoversions command line.

Services are patched where commands look them up, so no git repository is
needed; gc runs against a real temporary pages directory.
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from demoversions.cli import cli
from demoversions.config import get_default_config
from demoversions.domain.cycle import resolve_current_cycle
from demoversions.domain.version import BuildableVersions, VersionTag
from demoversions.exit_codes import (
    CONFIG_ERROR,
    DATA_ERROR,
    PARTIAL_SUCCESS,
    REPOSITORY_ERROR,
    USAGE_ERROR,
    RepositoryError,
)

DATE = datetime(2024, 6, 1, tzinfo=timezone.utc)
TAGS = ["1.0.0-rc.1", "1.0.0", "1.1.0-beta.1", "1.1.0", "1.2.0-alpha.1"]


def make_versions(*tags):
    return [VersionTag.from_tag(t, f"{i:040x}", DATE) for i, t in enumerate(tags)]


def json_lines(text):
    return [json.loads(line) for line in text.splitlines() if line.strip()]


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for var in ("DEMOVERSIONS_CONFIG", "GITHUB_OUTPUT", "GITHUB_STEP_SUMMARY"):
        monkeypatch.delenv(var, raising=False)
    return CliRunner()


@pytest.fixture
def service():
    """A VersionService mock installed for the version query commands."""
    versions = make_versions(*TAGS)
    mock = MagicMock()
    mock.deployment_history.return_value = versions
    mock.versions_since.return_value = versions[:2]
    mock.current_cycle.return_value = resolve_current_cycle(versions)
    mock.buildable_versions.return_value = BuildableVersions(
        versions=resolve_current_cycle(versions).all,
        stable=versions[3],
    )
    with patch('demoversions.commands.versions.VersionService', return_value=mock):
        yield mock


class TestPathCommand:

    def test_stable(self, runner):
        result = runner.invoke(cli, ['path', '1.2.3'])
        assert result.exit_code == 0
        assert result.stdout.strip() == "/latest/"

    def test_prerelease_with_base_path(self, runner):
        result = runner.invoke(cli, ['path', '2.0.0-beta.1', '--base-path', '/polen'])
        assert result.stdout.strip() == "/polen/2.0.0-beta.1/"

    def test_explicit_stability(self, runner):
        result = runner.invoke(cli, ['path', 'nightly', '--prerelease'])
        assert result.stdout.strip() == "/nightly/"

    def test_base_path_from_config(self, runner, tmp_path):
        config = tmp_path / "demo.json"
        config.write_text(json.dumps({"deployment": {"base_path": "/docs/"}}))
        result = runner.invoke(cli, ['--config', str(config), 'path', '1.0.0'])
        assert result.stdout.strip() == "/docs/latest/"

    def test_invalid_version(self, runner):
        result = runner.invoke(cli, ['path', 'latest'])
        assert result.exit_code == DATA_ERROR
        assert "Invalid version: latest" in result.stderr


class TestVersionCommands:

    def test_versions_jsonl(self, runner, service):
        result = runner.invoke(cli, ['versions'])
        assert result.exit_code == 0
        rows = json_lines(result.stdout)
        assert [r['tag'] for r in rows] == TAGS
        service.deployment_history.assert_called_once_with(None)

    def test_versions_kind_filter(self, runner, service):
        result = runner.invoke(cli, ['versions', '--kind', 'stable'])
        assert [r['tag'] for r in json_lines(result.stdout)] == ["1.0.0", "1.1.0"]

    def test_versions_since(self, runner, service):
        result = runner.invoke(cli, ['versions', '--since', '1.0.0', '--skip', '1.0.1'])
        assert result.exit_code == 0
        service.versions_since.assert_called_once_with('1.0.0', ('1.0.1',))

    def test_versions_pretty(self, runner, service):
        result = runner.invoke(cli, ['versions', '--pretty'])
        assert result.exit_code == 0
        assert "1.1.0-beta.1" in result.stdout

    def test_repository_error(self, runner, service):
        service.deployment_history.side_effect = RepositoryError("Not a git repository", "/nope")
        result = runner.invoke(cli, ['versions', '--repo', '/nope'])

        assert result.exit_code == REPOSITORY_ERROR
        error = json.loads(result.stderr.strip().splitlines()[-1])
        assert error['type'] == 'RepositoryError'
        assert "/nope" in error['error']

    def test_cycle(self, runner, service):
        result = runner.invoke(cli, ['cycle'])
        cycle = json.loads(result.stdout)
        assert cycle['stable']['tag'] == "1.1.0"
        assert [v['tag'] for v in cycle['prereleases']] == ["1.2.0-alpha.1"]

    def test_cycle_tags_only_with_outputs(self, runner, service, tmp_path, monkeypatch):
        out = tmp_path / "out"
        monkeypatch.setenv("GITHUB_OUTPUT", str(out))
        result = runner.invoke(cli, ['cycle', '--tags-only', '--github-output'])

        assert json.loads(result.stdout) == ["1.1.0", "1.2.0-alpha.1"]
        assert 'stable=1.1.0\n' in out.read_text()

    def test_buildable_matrix(self, runner, service):
        result = runner.invoke(cli, ['buildable', '--matrix'])
        assert json.loads(result.stdout) == ["1.1.0", "1.2.0-alpha.1"]

    def test_buildable_github_output(self, runner, service, tmp_path, monkeypatch):
        out = tmp_path / "out"
        monkeypatch.setenv("GITHUB_OUTPUT", str(out))
        result = runner.invoke(cli, ['buildable', '--github-output'])

        assert result.exit_code == 0
        assert json.loads(result.stdout)['has_versions'] is True
        assert out.read_text() == 'versions=["1.1.0", "1.2.0-alpha.1"]\nhas_versions=true\n'


class TestNpmDistTags:

    def test_requires_package(self, runner):
        result = runner.invoke(cli, ['npm-dist-tags'])
        assert result.exit_code == USAGE_ERROR

    def test_prints_tags(self, runner):
        client = MagicMock()
        client.dist_tags.return_value = {"latest": "1.1.0"}
        with patch('demoversions.commands.versions.NpmRegistryClient', return_value=client):
            result = runner.invoke(cli, ['npm-dist-tags', 'polen'])

        assert json.loads(result.stdout) == {"latest": "1.1.0"}
        client.dist_tags.assert_called_once_with('polen')


class TestTagCommands:

    def test_create_rejects_non_version(self, runner, service):
        result = runner.invoke(cli, ['tag', 'create', 'latest'])
        assert result.exit_code == DATA_ERROR
        service.create_tag.assert_not_called()

    def test_create(self, runner, service):
        result = runner.invoke(cli, ['tag', 'create', '1.3.0', '--push'])
        assert result.exit_code == 0
        service.create_tag.assert_called_once_with('1.3.0', '1.3.0', commit='HEAD', push=True)

    def test_delete(self, runner, service):
        result = runner.invoke(cli, ['tag', 'delete', '1.0.0-rc.1'])
        assert json.loads(result.stdout)['action'] == 'deleted'
        service.delete_tag.assert_called_once_with('1.0.0-rc.1', push=False)


class TestGcCommand:

    @pytest.fixture
    def pages(self, tmp_path):
        root = tmp_path / "gh-pages"
        for name in ["latest", "1.0.0-rc.1", "1.1.0-beta.1", "1.2.0-alpha.1"]:
            (root / name).mkdir(parents=True)
        return root

    @pytest.fixture
    def gc_versions(self):
        mock = MagicMock()
        mock.config = get_default_config()
        mock.list_version_tags.return_value = make_versions(*TAGS)
        mock.protected_tags.return_value = []
        with patch('demoversions.commands.gc.VersionService', return_value=mock):
            yield mock

    def test_dry_run(self, runner, pages, gc_versions):
        result = runner.invoke(cli, ['gc', str(pages), '--dry-run'])

        assert result.exit_code == 0
        rows = json_lines(result.stdout)
        assert rows[-1]['type'] == 'summary'
        assert rows[-1]['plan']['remove'] == ["1.0.0-rc.1", "1.1.0-beta.1"]
        assert (pages / "1.0.0-rc.1").exists()

    def test_plan_only(self, runner, pages, gc_versions):
        result = runner.invoke(cli, ['gc', str(pages), '--plan-only'])
        plan = json.loads(result.stdout)
        assert plan['remove'] == ["1.0.0-rc.1", "1.1.0-beta.1"]
        assert (pages / "1.1.0-beta.1").exists()

    def test_removes_and_writes_outputs(self, runner, pages, gc_versions, tmp_path, monkeypatch):
        out = tmp_path / "out"
        summary = tmp_path / "summary.md"
        monkeypatch.setenv("GITHUB_OUTPUT", str(out))
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary))

        result = runner.invoke(cli, ['gc', str(pages), '--github-output'])

        assert result.exit_code == 0
        assert not (pages / "1.0.0-rc.1").exists()
        assert (pages / "1.2.0-alpha.1").exists()
        assert 'removed=true\n' in out.read_text()
        assert "Removed Deployments" in summary.read_text()

    def test_partial_failure(self, runner, pages, gc_versions):
        def rmtree(path):
            raise PermissionError("denied")

        with patch('demoversions.services.gc_service.shutil.rmtree', side_effect=rmtree):
            result = runner.invoke(cli, ['gc', str(pages)])

        assert result.exit_code == PARTIAL_SUCCESS
        assert '"PartialSuccessError"' in result.stderr

    def test_missing_pages_dir(self, runner, tmp_path, gc_versions):
        result = runner.invoke(cli, ['gc', str(tmp_path / "missing")])
        assert result.exit_code != 0
        assert "Pages directory not found" in result.stderr


class TestConfigCommands:

    def test_show(self, runner):
        result = runner.invoke(cli, ['config', 'show'])
        assert json.loads(result.stdout) == get_default_config()

    def test_init_and_path(self, runner, tmp_path):
        result = runner.invoke(cli, ['config', 'init', '--format', 'yaml'])
        assert result.exit_code == 0
        assert (tmp_path / ".github" / "demo-config.yaml").exists()

        result = runner.invoke(cli, ['config', 'path'])
        info = json.loads(result.stdout)
        assert info['config_path'].endswith("demo-config.yaml")
        assert info['exists'] is True

    def test_init_refuses_overwrite(self, runner):
        runner.invoke(cli, ['config', 'init'])
        result = runner.invoke(cli, ['config', 'init'])
        assert result.exit_code != 0
        assert "already exists" in result.stderr

    def test_missing_config_file(self, runner, tmp_path):
        result = runner.invoke(cli, ['--config', str(tmp_path / "nope.json"), 'config', 'show'])
        assert result.exit_code == CONFIG_ERROR

    def test_env_override(self, runner, monkeypatch):
        monkeypatch.setenv("DEMOVERSIONS_GIT_PARALLEL", "3")
        result = runner.invoke(cli, ['config', 'show'])
        assert json.loads(result.stdout)['git']['parallel'] == 3
