"""タグファイルの構文検証と修復.

ジェネレータが途中で落ちた、追記が競合した等で壊れたタグファイルを、
構文的に正しい行だけに絞り込んで書き戻す。

方針:
    - 壊れた行が無ければファイルには触らない（ファイル監視のタイムスタンプを動かさない）
    - 残す行がある場合はヘッダ → レコードの順で書き直す
    - 残す行が1つも無い場合はファイルごと削除し、次回生成をまっさらな状態から始める
    - ファイルが存在しないのは初回生成前の正常状態なので、エラーにしない
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .classify import TagLineKind, classify_line
from .tagfile import read_tag_lines, write_tag_lines


def validate_tag_file(path: Path | str) -> bool:
    """タグファイルを検証し、壊れた行があれば修復する.

    Args:
        path: タグファイルのパス

    Returns:
        修復（書き直し or 削除）を行った場合 True
    """
    path = Path(path).expanduser()
    if not path.is_file():
        return False

    headers: list[str] = []
    records: list[str] = []
    invalid = 0

    for line in read_tag_lines(path):
        kind = classify_line(line)
        if kind is TagLineKind.HEADER:
            headers.append(line)
        elif kind is TagLineKind.RECORD:
            records.append(line)
        else:
            invalid += 1

    if invalid == 0:
        return False

    if not headers and not records:
        logger.warning(f"Tag file is entirely corrupt ({invalid} lines), removing: {path}")
        path.unlink()
        return True

    write_tag_lines(path, headers, records)
    logger.warning(f"Dropped {invalid} invalid lines from {path}")
    return True
