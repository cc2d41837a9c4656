"""生成結果の通知先（Reporter）.

オーケストレーターが呼び出し側へ伝えるのは次の2つだけ:
- ジェネレータの失敗（終了コードと標準エラー出力）
- 重複削除で落としたレコード数
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from loguru import logger


class Reporter(Protocol):
    def process_failed(self, command: Sequence[str], returncode: int, stderr: str) -> None: ...

    def duplicates_removed(self, tag_file: Path, removed: int) -> None: ...


class LogReporter:
    """loguru へ流すデフォルトの Reporter."""

    def process_failed(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        logger.error(f"Tag generator failed (exit {returncode}): {' '.join(command)}")
        if stderr.strip():
            logger.error(stderr.rstrip())

    def duplicates_removed(self, tag_file: Path, removed: int) -> None:
        logger.warning(f"Removed {removed} duplicate tags from {tag_file}")
