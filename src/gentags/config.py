"""タグ生成の設定（GenerationConfig）と YAML からの読み込み.

設定ファイル例（gentags.yml）:

    bin: ctags
    bin_map:
      python: /opt/universal-ctags/bin/ctags
    args: ["--fields=+n", "--extras=+q"]
    root_dir: ~/src/project
    async: false
    max_duplicates: 10
    has_langdef: false
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import yaml
from loguru import logger

from gentags.core.exceptions import ConfigError

# YAMLキー -> 属性名（`async` は予約語なので async_mode に寄せる）
_KEY_TO_ATTR = {
    "bin": "bin",
    "bin_map": "bin_map",
    "args": "args",
    "root_dir": "root_dir",
    "async": "async_mode",
    "max_duplicates": "max_duplicates",
    "has_langdef": "has_langdef",
}


@dataclass(frozen=True)
class GenerationConfig:
    bin: str = "ctags"
    bin_map: Mapping[str, str] = field(default_factory=dict, hash=False)  # 言語ごとのバイナリ上書き
    args: tuple[str, ...] = ()  # 先頭に置く追加引数（--langdef 等）
    root_dir: Path = Path(".")
    async_mode: bool = False
    max_duplicates: int = 0  # 0 なら重複削除しない
    has_langdef: bool = False  # True なら --languages を付けない

    def __post_init__(self) -> None:
        # frozen でも中身を書き換えられないよう読み取り専用ビューで持つ
        object.__setattr__(self, "bin_map", MappingProxyType(dict(self.bin_map)))
        object.__setattr__(self, "args", tuple(self.args))

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> GenerationConfig:
        """辞書（YAMLの中身など）から設定を組み立てる.

        Raises:
            ConfigError: 未知のキー、または型が不正な場合
        """
        unknown = sorted(set(data) - set(_KEY_TO_ATTR))
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}. Valid keys: {sorted(_KEY_TO_ATTR)}")

        kwargs: dict[str, object] = {}
        for key, value in data.items():
            if value is None:
                continue
            kwargs[_KEY_TO_ATTR[key]] = _coerce(key, value)
        return cls(**kwargs)


def _coerce(key: str, value: object) -> object:
    if key == "bin":
        if not isinstance(value, str) or not value:
            raise ConfigError(f"'bin' must be a non-empty string, got {value!r}")
        return value
    if key == "bin_map":
        if not isinstance(value, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in value.items()
        ):
            raise ConfigError(f"'bin_map' must map language names to binaries, got {value!r}")
        return dict(value)
    if key == "args":
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise ConfigError(f"'args' must be a list of strings, got {value!r}")
        return tuple(str(v) for v in value)
    if key == "root_dir":
        return Path(str(value)).expanduser()
    if key in ("async", "has_langdef"):
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be a boolean, got {value!r}")
        return value
    # max_duplicates（bool は int のサブクラスなので除外）
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"'max_duplicates' must be a non-negative integer, got {value!r}")
    return value


def load_config(config_path: Path | str) -> GenerationConfig:
    """YAMLファイルから設定を読み込む.

    Args:
        config_path: 設定ファイルのパス

    Returns:
        GenerationConfig

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ConfigError: YAMLとして不正、または設定値が不正な場合
    """
    config_path = Path(config_path).expanduser()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {config_path}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping, got {type(data).__name__}")

    config = GenerationConfig.from_mapping(data)
    logger.info(f"Loaded config from {config_path}")
    return config
