"""Tests for config discovery and loading."""

import pytest

from ffiwire.generator.config import (
    CONFIG_FILENAME,
    ConfigError,
    FfiwireConfig,
    find_config,
    load_config,
)


def describe_find_config():
    def walks_up_from_nested_directories(expect, tmp_path):
        config = tmp_path / CONFIG_FILENAME
        config.write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        expect(find_config(nested)) == config.resolve()

    def prefers_environment_variable(expect, tmp_path, monkeypatch):
        (tmp_path / CONFIG_FILENAME).write_text("")
        override = tmp_path / "other.toml"
        override.write_text("")
        monkeypatch.setenv("FFIWIRE_CONFIG", str(override))

        expect(find_config(tmp_path)) == override

    def ignores_missing_environment_file(expect, tmp_path, monkeypatch):
        monkeypatch.setenv("FFIWIRE_CONFIG", str(tmp_path / "missing.toml"))

        expect(find_config(tmp_path)) == None


def describe_load_config():
    def returns_defaults_without_a_file(expect, tmp_path, monkeypatch):
        monkeypatch.setenv("FFIWIRE_CONFIG", str(tmp_path / "missing.toml"))

        config = load_config(cwd=tmp_path)
        expect(config) == FfiwireConfig()
        expect(config.bindings.python.runtime_import) == "ffiwire_runtime"
        expect(config.bindings.swift.module_name) == None

    def reads_bindings(expect, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text(
            "[bindings.python]\n"
            'runtime_import = "app.runtime"\n'
            "\n"
            "[bindings.swift]\n"
            'module_name = "App"\n'
        )

        config = load_config(path)
        expect(config.bindings.python.runtime_import) == "app.runtime"
        expect(config.bindings.swift.module_name) == "App"

    def keeps_defaults_for_missing_sections(expect, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text('[bindings.swift]\nmodule_name = "App"\n')

        config = load_config(path)
        expect(config.bindings.python.runtime_import) == "ffiwire_runtime"

    def rejects_invalid_toml(tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("[bindings\n")

        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(path)

    def rejects_wrong_types(tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("[bindings.python]\nruntime_import = 3\n")

        with pytest.raises(ConfigError, match="valid string"):
            load_config(path)

    def rejects_lists_in_nested_tables(tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text('[bindings.python]\nruntime_import = ["x"]\n')

        with pytest.raises(ConfigError, match="runtime_import"):
            load_config(path)

    def rejects_unknown_keys(tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text('[bindings.swift]\nmodule = "App"\n')

        with pytest.raises(ConfigError, match="Extra inputs are not permitted"):
            load_config(path)

    def rejects_non_table_sections(tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text('bindings = "python"\n')

        with pytest.raises(ConfigError, match="bindings"):
            load_config(path)
