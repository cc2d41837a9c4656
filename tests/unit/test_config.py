"""Unit tests for generation config loading."""

from pathlib import Path

import pytest

from gentags.config import GenerationConfig, load_config
from gentags.core.exceptions import ConfigError


class TestGenerationConfigDefaults:
    def test_defaults(self) -> None:
        config = GenerationConfig()

        assert config.bin == "ctags"
        assert dict(config.bin_map) == {}
        assert config.args == ()
        assert config.root_dir == Path(".")
        assert config.async_mode is False
        assert config.max_duplicates == 0
        assert config.has_langdef is False


class TestFromMapping:
    def test_all_keys(self, tmp_path: Path) -> None:
        config = GenerationConfig.from_mapping(
            {
                "bin": "uctags",
                "bin_map": {"python": "/opt/ctags"},
                "args": ["--fields=+n"],
                "root_dir": str(tmp_path),
                "async": True,
                "max_duplicates": 5,
                "has_langdef": True,
            }
        )

        assert config.bin == "uctags"
        assert config.bin_map == {"python": "/opt/ctags"}
        assert config.args == ("--fields=+n",)
        assert config.root_dir == tmp_path
        assert config.async_mode is True
        assert config.max_duplicates == 5
        assert config.has_langdef is True

    def test_root_dir_expands_home(self) -> None:
        config = GenerationConfig.from_mapping({"root_dir": "~/src"})

        assert config.root_dir == Path.home() / "src"

    def test_null_values_keep_defaults(self) -> None:
        config = GenerationConfig.from_mapping({"bin_map": None, "max_duplicates": None})

        assert config == GenerationConfig()

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="Unknown config keys"):
            GenerationConfig.from_mapping({"binary": "ctags"})

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("bin", ""),
            ("bin_map", ["python"]),
            ("args", "--fields=+n"),
            ("async", "yes"),
            ("has_langdef", 1),
            ("max_duplicates", -1),
            ("max_duplicates", True),
            ("max_duplicates", "10"),
        ],
    )
    def test_invalid_values(self, key: str, value: object) -> None:
        with pytest.raises(ConfigError):
            GenerationConfig.from_mapping({key: value})


class TestLoadConfig:
    def test_load_yaml(self, tmp_path: Path) -> None:
        """YAMLファイルから設定を読み込めること."""
        config_file = tmp_path / "gentags.yml"
        config_file.write_text(
            "bin: ctags\n"
            "bin_map:\n"
            "  lua: /usr/local/bin/ctags\n"
            "args: ['--langdef=foo']\n"
            "async: false\n"
            "max_duplicates: 10\n",
            encoding="utf-8",
        )

        config = load_config(config_file)

        assert config.bin_map == {"lua": "/usr/local/bin/ctags"}
        assert config.args == ("--langdef=foo",)
        assert config.max_duplicates == 10

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "gentags.yml"
        config_file.write_text("", encoding="utf-8")

        assert load_config(config_file) == GenerationConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "gentags.yml"
        config_file.write_text("bin: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_file)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        config_file = tmp_path / "gentags.yml"
        config_file.write_text("- ctags\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(config_file)


class TestImmutability:
    def test_bin_map_is_read_only(self) -> None:
        source = {"python": "/opt/ctags"}
        config = GenerationConfig(bin_map=source)

        with pytest.raises(TypeError):
            config.bin_map["lua"] = "luactags"  # type: ignore[index]
        source["lua"] = "luactags"
        assert "lua" not in config.bin_map

    def test_hashable(self) -> None:
        """bin_map を持っていても hash できること."""
        a = GenerationConfig(bin_map={"python": "/opt/ctags"}, args=["--fields=+n"])  # type: ignore[arg-type]
        b = GenerationConfig(bin_map={"python": "/opt/ctags"}, args=("--fields=+n",))

        assert a == b
        assert hash(a) == hash(b)
        assert a.args == ("--fields=+n",)
