"""タグファイル1行の分類（Header / Record / Invalid）.

ctags 互換のタグファイルは1行1レコードで、
- `!` で始まる行はヘッダ（ジェネレータのメタ情報）
- それ以外は `name<TAB>file<TAB>pattern[<TAB>extras...]` 形式のレコード
として扱う。ここでは構文だけを見て、タグの意味（kind/言語）は解釈しない。
"""

from __future__ import annotations

import re
from enum import Enum

FIELD_DELIMITER = "\t"
HEADER_PREFIX = "!"

_TAG_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class TagLineKind(str, Enum):
    """タグファイル1行の分類結果."""

    HEADER = "header"  # `!` で始まるメタ情報行
    RECORD = "record"  # 構文的に正しいタグレコード
    INVALID = "invalid"  # 空行・コメント・壊れた行


def is_header(line: str) -> bool:
    return line.startswith(HEADER_PREFIX)


def extract_name(line: str) -> str | None:
    """最初の区切り文字より前の部分をタグ名として取り出す.

    識別子としての妥当性は見ない（ゆるい抽出）。区切り文字が無ければ None。
    """
    idx = line.find(FIELD_DELIMITER)
    if idx < 0:
        return None
    return line[:idx]


def classify_line(line: str | None) -> TagLineKind:
    """1行を HEADER / RECORD / INVALID のいずれかに分類する.

    Args:
        line: 改行を除いた1行

    Returns:
        分類結果

    Examples:
        >>> classify_line("!_TAG_FILE_FORMAT\\t2\\t//")
        <TagLineKind.HEADER: 'header'>
        >>> classify_line('bar\\tfile.c\\t/^bar$/;"\\tf')
        <TagLineKind.RECORD: 'record'>
        >>> classify_line("this is not a tag")
        <TagLineKind.INVALID: 'invalid'>
    """
    if not line:
        return TagLineKind.INVALID

    # ヘッダは中身に関係なく常に受け入れる
    if is_header(line):
        return TagLineKind.HEADER

    # name / file / pattern の最低3フィールドが必要
    if line.count(FIELD_DELIMITER) < 2:
        return TagLineKind.INVALID

    name = extract_name(line)
    if name is None or not _TAG_NAME.fullmatch(name):
        return TagLineKind.INVALID

    return TagLineKind.RECORD
