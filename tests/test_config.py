"""
Tests for configuration loading, overrides and validation.
"""

import json
from pathlib import Path

import pytest
import toml
import yaml

from demoversions.config import (
    apply_env_overrides,
    get_config_path,
    get_default_config,
    load_config,
    meets_minimum_version,
    merge_configs,
    ordered_examples,
    save_config,
    validate_config,
)
from demoversions.exit_codes import CONFIG_ERROR, ConfigError


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run with an empty cwd and no DEMOVERSIONS_* variables."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEMOVERSIONS_CONFIG", raising=False)
    return tmp_path


class TestDefaults:

    def test_defaults_are_valid(self):
        validate_config(get_default_config())

    def test_default_values(self):
        config = get_default_config()
        assert config["examples"]["minimum_version"] == "0.1.0"
        assert config["deployment"]["dist_tags"][:2] == ["latest", "next"]
        assert config["gc"]["retain_dist_tag_versions"] is True
        assert config["git"]["parallel"] == 1

    def test_defaults_are_fresh(self):
        first = get_default_config()
        first["deployment"]["dist_tags"].append("extra")
        assert "extra" not in get_default_config()["deployment"]["dist_tags"]


class TestLoadConfig:

    def test_no_file(self, workdir):
        assert load_config(environ={}) == get_default_config()

    def test_json_file(self, workdir):
        path = workdir / ".github" / "demo-config.json"
        path.parent.mkdir()
        path.write_text(json.dumps({"examples": {"minimum_version": "1.0.0"}}))

        config = load_config(environ={})
        assert config["examples"]["minimum_version"] == "1.0.0"
        assert config["examples"]["exclude"] == []

    def test_toml_file(self, workdir):
        path = workdir / "demo.toml"
        path.write_text(toml.dumps({"deployment": {"base_path": "/polen"}}))
        assert load_config(path, environ={})["deployment"]["base_path"] == "/polen"

    def test_yaml_file(self, workdir):
        path = workdir / "demo.yaml"
        path.write_text(yaml.safe_dump({"git": {"parallel": 4}}))
        assert load_config(path, environ={})["git"]["parallel"] == 4

    def test_empty_yaml_file(self, workdir):
        path = workdir / "demo.yml"
        path.write_text("")
        assert load_config(path, environ={}) == get_default_config()

    def test_env_var_path(self, workdir, monkeypatch):
        path = workdir / "custom.json"
        path.write_text(json.dumps({"npm": {"package": "polen"}}))
        monkeypatch.setenv("DEMOVERSIONS_CONFIG", str(path))

        assert get_config_path() == path
        assert load_config(environ={})["npm"]["package"] == "polen"

    def test_explicit_missing_file(self, workdir):
        with pytest.raises(ConfigError) as exc_info:
            load_config(workdir / "nope.json", environ={})
        assert exc_info.value.exit_code == CONFIG_ERROR

    def test_malformed_file(self, workdir):
        path = workdir / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(path, environ={})

    def test_non_mapping_file(self, workdir):
        path = workdir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path, environ={})

    def test_env_overrides_file(self, workdir):
        path = workdir / "demo.json"
        path.write_text(json.dumps({"git": {"timeout_seconds": 10}}))
        config = load_config(path, environ={"DEMOVERSIONS_GIT_TIMEOUT_SECONDS": "60"})
        assert config["git"]["timeout_seconds"] == 60

    def test_invalid_type_rejected(self, workdir):
        path = workdir / "demo.json"
        path.write_text(json.dumps({"git": {"parallel": "four"}}))
        with pytest.raises(ConfigError, match="git.parallel"):
            load_config(path, environ={})


class TestSaveConfig:

    @pytest.mark.parametrize("suffix", [".json", ".toml", ".yaml"])
    def test_round_trip(self, workdir, suffix):
        config = get_default_config()
        config["examples"]["order"] = ["basic", "advanced"]
        path = save_config(config, workdir / ".github" / f"demo-config{suffix}")

        assert path.exists()
        assert load_config(path, environ={}) == config


class TestEnvOverrides:

    def test_multi_word_keys(self):
        config = apply_env_overrides(get_default_config(), {
            "DEMOVERSIONS_GC_RETAIN_DIST_TAG_VERSIONS": "false",
            "DEMOVERSIONS_DEPLOYMENT_BASE_PATH": "/docs",
            "DEMOVERSIONS_NPM_TIMEOUT_SECONDS": "5",
        })
        assert config["gc"]["retain_dist_tag_versions"] is False
        assert config["deployment"]["base_path"] == "/docs"
        assert config["npm"]["timeout_seconds"] == 5

    def test_json_list(self):
        config = apply_env_overrides(get_default_config(), {
            "DEMOVERSIONS_EXAMPLES_EXCLUDE": '["legacy", "wip"]',
        })
        assert config["examples"]["exclude"] == ["legacy", "wip"]

    def test_unknown_and_foreign_keys_ignored(self):
        config = apply_env_overrides(get_default_config(), {
            "DEMOVERSIONS_NOPE_THING": "1",
            "DEMOVERSIONS_CONFIG": "/tmp/x.json",
            "HOME": "/root",
        })
        assert config == get_default_config()


class TestValidateConfig:

    def test_bool_is_not_int(self):
        config = get_default_config()
        config["git"]["timeout_seconds"] = True
        with pytest.raises(ConfigError):
            validate_config(config)

    def test_list_of_strings(self):
        config = get_default_config()
        config["deployment"]["dist_tags"] = ["latest", 3]
        with pytest.raises(ConfigError):
            validate_config(config)

    def test_parallel_at_least_one(self):
        config = get_default_config()
        config["git"]["parallel"] = 0
        with pytest.raises(ConfigError):
            validate_config(config)

    def test_section_must_be_mapping(self):
        config = get_default_config()
        config["gc"] = "yes"
        with pytest.raises(ConfigError):
            validate_config(config)

    def test_unknown_keys_allowed(self):
        config = get_default_config()
        config["examples"]["theme"] = "dark"
        validate_config(config)


class TestMergeConfigs:

    def test_nested_merge(self):
        merged = merge_configs({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": 4}


class TestExamples:

    def test_ordered_examples(self):
        config = get_default_config()
        config["examples"]["order"] = ["hello-world", "missing"]
        config["examples"]["exclude"] = ["legacy"]

        result = ordered_examples(config, ["zeta", "legacy", "alpha", "hello-world"])
        assert result == ["hello-world", "alpha", "zeta"]

    def test_meets_minimum_version(self):
        config = get_default_config()
        config["examples"]["minimum_version"] = "1.0.0"

        assert meets_minimum_version(config, "1.0.0")
        assert meets_minimum_version(config, "v1.2.0")
        assert not meets_minimum_version(config, "0.9.0")
        assert not meets_minimum_version(config, "1.0.0-rc.1")
        assert not meets_minimum_version(config, "not-a-version")
