"""同名タグの重複削除.

巨大なリポジトリでは同じ名前のタグ（`main`, `init`, `__init__` など）が大量に並び、
エディタのタグジャンプが実用にならなくなる。タグ名ごとの件数に上限を設け、
元の順序で先頭から上限件数だけを残す。
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from .classify import extract_name, is_header
from .tagfile import read_tag_lines, write_tag_lines

DEFAULT_MAX_DUPLICATES = 10


def deduplicate_tag_file(path: Path | str, max_duplicates: int = DEFAULT_MAX_DUPLICATES) -> int:
    """タグ名ごとの件数を max_duplicates 件までに切り詰める.

    検証済み（validate_tag_file 適用後）のファイルを前提とする。
    名前を取り出せない行（区切り文字なし）はそのまま残し、件数にも数えない。

    Args:
        path: タグファイルのパス
        max_duplicates: 1つのタグ名に残す最大件数（0以下なら何もしない）

    Returns:
        削除したレコード数
    """
    path = Path(path).expanduser()
    if max_duplicates <= 0 or not path.is_file():
        return 0

    headers: list[str] = []
    records: list[str] = []
    totals: Counter[str] = Counter()

    # 1st pass: ヘッダ分離と件数集計
    for line in read_tag_lines(path):
        if is_header(line):
            headers.append(line)
            continue
        records.append(line)
        name = extract_name(line)
        if name is not None:
            totals[name] += 1

    if not any(n > max_duplicates for n in totals.values()):
        return 0

    # 2nd pass: 上限超えの名前だけ先頭から max_duplicates 件を残す
    kept: list[str] = []
    seen: Counter[str] = Counter()
    removed = 0
    for line in records:
        name = extract_name(line)
        if name is None or totals[name] <= max_duplicates:
            kept.append(line)
            continue
        seen[name] += 1
        if seen[name] <= max_duplicates:
            kept.append(line)
        else:
            removed += 1

    write_tag_lines(path, headers, kept)
    return removed
