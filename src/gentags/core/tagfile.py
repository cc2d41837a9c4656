"""タグファイルの読み書きヘルパ.

検証/重複削除はいずれも「全行読み込み → 必要なときだけ書き戻し」で動く。
ctags の出力には UTF-8 として不正なバイト列が混ざることがあるため、
surrogateescape で読み込み、書き戻し時に元のバイト列へ戻す。
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def read_tag_lines(path: Path) -> list[str]:
    """タグファイルを行単位で読み込む（改行は除去）.

    行区切りは LF のみ。パターン中に単独の CR があってもそこでは分割しない。
    """
    with open(path, encoding=_ENCODING, errors=_ERRORS, newline="\n") as f:
        return [line.rstrip("\r\n") for line in f]


def write_tag_lines(path: Path, headers: Iterable[str], records: Iterable[str]) -> int:
    """ヘッダ → レコードの順でタグファイルを書き直す.

    Args:
        path: 出力先
        headers: ヘッダ行（元の順序）
        records: レコード行（元の順序）

    Returns:
        書き込んだ行数
    """
    count = 0
    with open(path, "w", encoding=_ENCODING, errors=_ERRORS, newline="\n") as f:
        for line in headers:
            f.write(line + "\n")
            count += 1
        for line in records:
            f.write(line + "\n")
            count += 1
    return count
