"""gentags: ctags 互換タグファイルの生成と後処理."""

from gentags.config import GenerationConfig, load_config
from gentags.core import (
    ConfigError,
    GenerationError,
    TagLineKind,
    classify_line,
    deduplicate_tag_file,
    validate_tag_file,
)
from gentags.generator import GenerationMode, GenerationResult, TagGenerator, build_args, resolve_bin

__version__ = "0.1.0"

__all__ = [
    # config
    "GenerationConfig",
    "load_config",
    # core
    "TagLineKind",
    "classify_line",
    "validate_tag_file",
    "deduplicate_tag_file",
    "ConfigError",
    "GenerationError",
    # generator
    "GenerationMode",
    "GenerationResult",
    "TagGenerator",
    "build_args",
    "resolve_bin",
]
