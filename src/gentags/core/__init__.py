"""タグファイル後処理のコア処理群.

- 行分類（ヘッダ / レコード / 不正行）
- 検証（不正行の除去、全壊ファイルの削除）
- 重複削除（タグ名ごとの件数上限）
"""

from .classify import TagLineKind, classify_line, extract_name
from .dedup import DEFAULT_MAX_DUPLICATES, deduplicate_tag_file
from .exceptions import ConfigError, GenerationError
from .validate import validate_tag_file

__all__ = [
    "TagLineKind",
    "classify_line",
    "extract_name",
    "validate_tag_file",
    "deduplicate_tag_file",
    "DEFAULT_MAX_DUPLICATES",
    "ConfigError",
    "GenerationError",
]
