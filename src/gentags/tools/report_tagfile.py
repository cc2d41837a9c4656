"""タグファイルの健全性チェックを行い、TSVレポートを出力する。"""

from __future__ import annotations

import argparse
import csv
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from gentags.core.classify import TagLineKind, classify_line, extract_name
from gentags.core.dedup import DEFAULT_MAX_DUPLICATES
from gentags.core.tagfile import read_tag_lines


@dataclass(frozen=True)
class TagFileStats:
    headers: int
    records: int
    invalid: int
    distinct_names: int
    max_duplicates: int
    over_ceiling: dict[str, int]  # 上限超えのタグ名 -> 件数

    @property
    def excess_records(self) -> int:
        """重複削除で落ちる見込みのレコード数."""
        return sum(n - self.max_duplicates for n in self.over_ceiling.values())


def _write_tsv(path: Path, header: Sequence[str], rows: Iterable[Sequence[object]]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        writer = csv.writer(f, delimiter="\t")
        writer.writerow(list(header))
        count = 0
        for r in rows:
            writer.writerow(["" if v is None else v for v in r])
            count += 1
    return count


def collect_stats(tag_file: Path, max_duplicates: int = DEFAULT_MAX_DUPLICATES) -> TagFileStats:
    """タグファイルを読むだけで集計する（書き換えはしない）."""
    counts: Counter[str] = Counter()
    headers = records = invalid = 0
    for line in read_tag_lines(tag_file):
        kind = classify_line(line)
        if kind is TagLineKind.HEADER:
            headers += 1
        elif kind is TagLineKind.RECORD:
            records += 1
            counts[extract_name(line)] += 1
        else:
            invalid += 1

    over = {name: n for name, n in counts.most_common() if max_duplicates > 0 and n > max_duplicates}
    return TagFileStats(
        headers=headers,
        records=records,
        invalid=invalid,
        distinct_names=len(counts),
        max_duplicates=max_duplicates,
        over_ceiling=over,
    )


def run_tagfile_report(
    tag_file: Path,
    out_dir: Path,
    max_duplicates: int = DEFAULT_MAX_DUPLICATES,
) -> Path:
    """タグファイルの集計結果をTSVで出力する.

    Args:
        tag_file: 対象のタグファイル
        out_dir: レポート出力ディレクトリ
        max_duplicates: 重複の上限（これを超えるタグ名を duplicate_tags.tsv に出す）

    Returns:
        サマリTSVのパス

    Raises:
        FileNotFoundError: タグファイルが存在しない場合
    """
    tag_file = Path(tag_file).expanduser()
    out_dir = Path(out_dir)
    if not tag_file.is_file():
        raise FileNotFoundError(f"Tag file not found: {tag_file}")

    stats = collect_stats(tag_file, max_duplicates)

    invalid_rows = []
    for line_no, line in enumerate(read_tag_lines(tag_file), start=1):
        if classify_line(line) is TagLineKind.INVALID:
            invalid_rows.append((line_no, line))
    _write_tsv(out_dir / "invalid_lines.tsv", ["line_no", "line"], invalid_rows)

    _write_tsv(
        out_dir / "duplicate_tags.tsv",
        ["name", "count"],
        list(stats.over_ceiling.items()),
    )

    summary_out = out_dir / "tagfile_summary.tsv"
    _write_tsv(
        summary_out,
        ["metric", "value"],
        [
            ("tag_file", str(tag_file)),
            ("header_lines", stats.headers),
            ("records", stats.records),
            ("invalid_lines", stats.invalid),
            ("distinct_names", stats.distinct_names),
            ("max_duplicates", max_duplicates),
            ("names_over_ceiling", len(stats.over_ceiling)),
            ("excess_records", stats.excess_records),
        ],
    )
    return summary_out


def main() -> None:
    p = argparse.ArgumentParser(description="Check tag file health and write TSV reports.")
    p.add_argument("--tag-file", type=Path, required=True, help="Path to tags file")
    p.add_argument("--out-dir", type=Path, required=True, help="Output directory for TSV reports")
    p.add_argument(
        "--max-duplicates",
        type=int,
        default=DEFAULT_MAX_DUPLICATES,
        help=f"Duplicate ceiling per tag name (default: {DEFAULT_MAX_DUPLICATES})",
    )
    args = p.parse_args()

    summary = run_tagfile_report(args.tag_file, args.out_dir, args.max_duplicates)
    print(f"Wrote tag file reports: {summary.parent}")


if __name__ == "__main__":
    main()
