"""Unit tests for tag file validation."""

from pathlib import Path

from gentags.core.classify import TagLineKind, classify_line
from gentags.core.validate import validate_tag_file

HEADER = "!_TAG_FILE_FORMAT\t2\t//"
RECORD_BAR = 'bar\tfile.c\t/^bar$/;"\tf'
RECORD_FOO = 'foo\tfile.c\t/^foo$/;"\tf'


def _write(path: Path, lines: list[str]) -> None:
    path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")


class TestValidateTagFile:
    def test_drops_garbage_line(self, tmp_path: Path) -> None:
        """不正行を除去して正しいレコードだけが残ること."""
        tags = tmp_path / "tags"
        _write(tags, ["this is not a tag", RECORD_BAR])

        assert validate_tag_file(tags) is True
        assert tags.read_text(encoding="utf-8") == RECORD_BAR + "\n"

    def test_headers_moved_before_records(self, tmp_path: Path) -> None:
        tags = tmp_path / "tags"
        header2 = "!_TAG_FILE_SORTED\t1\t//"
        _write(tags, [RECORD_FOO, HEADER, "garbage", RECORD_BAR, header2])

        assert validate_tag_file(tags) is True
        assert tags.read_text(encoding="utf-8").splitlines() == [HEADER, header2, RECORD_FOO, RECORD_BAR]

    def test_entirely_corrupt_file_is_deleted(self, tmp_path: Path) -> None:
        tags = tmp_path / "tags"
        _write(tags, ["garbage", "more garbage", ""])

        assert validate_tag_file(tags) is True
        assert not tags.exists()

    def test_clean_file_untouched(self, tmp_path: Path) -> None:
        """不正行が無ければ書き直さない（バイト列もmtimeも変わらない）こと."""
        tags = tmp_path / "tags"
        # 改行コードも含めてそのまま残ることを確認するため CRLF を混ぜる
        raw = (HEADER + "\r\n" + RECORD_FOO + "\n" + RECORD_BAR).encode("utf-8")
        tags.write_bytes(raw)
        mtime = tags.stat().st_mtime_ns

        assert validate_tag_file(tags) is False
        assert tags.read_bytes() == raw
        assert tags.stat().st_mtime_ns == mtime

    def test_missing_file_is_noop(self, tmp_path: Path) -> None:
        tags = tmp_path / "missing" / "tags"

        assert validate_tag_file(tags) is False
        assert not tags.exists()

    def test_idempotent(self, tmp_path: Path) -> None:
        tags = tmp_path / "tags"
        _write(tags, [RECORD_FOO, "x", HEADER, "foo-bar\ta\tb", RECORD_BAR])

        validate_tag_file(tags)
        once = tags.read_bytes()

        assert validate_tag_file(tags) is False
        assert tags.read_bytes() == once

    def test_every_surviving_line_is_valid(self, tmp_path: Path) -> None:
        tags = tmp_path / "tags"
        _write(
            tags,
            [
                HEADER,
                "",
                "1abc\tf\t1",
                RECORD_FOO,
                "only\tone",
                "!_TAG_PROGRAM_NAME\tctags\t//",
                "ok_name\tf.c\t3\tv",
            ],
        )

        validate_tag_file(tags)

        for line in tags.read_text(encoding="utf-8").splitlines():
            assert classify_line(line) in (TagLineKind.HEADER, TagLineKind.RECORD)

    def test_undecodable_bytes_round_trip(self, tmp_path: Path) -> None:
        """UTF-8として不正なバイト列を含むレコードも壊さずに書き戻すこと."""
        tags = tmp_path / "tags"
        record = b"latin\tcaf\xe9.c\t1"
        tags.write_bytes(b"garbage\n" + record + b"\n")

        assert validate_tag_file(tags) is True
        assert tags.read_bytes() == record + b"\n"

    def test_lone_carriage_return_is_not_a_line_break(self, tmp_path: Path) -> None:
        """パターン中の単独の CR でレコードが分割されないこと."""
        tags = tmp_path / "tags"
        raw = b'foo\tf.c\t/^foo\rbar$/;"\tf\n'
        tags.write_bytes(raw)

        assert validate_tag_file(tags) is False
        assert tags.read_bytes() == raw

    def test_lone_carriage_return_survives_rewrite(self, tmp_path: Path) -> None:
        tags = tmp_path / "tags"
        record = b'foo\tf.c\t/^foo\rbar$/;"\tf'
        tags.write_bytes(b"garbage\n" + record + b"\n")

        assert validate_tag_file(tags) is True
        assert tags.read_bytes() == record + b"\n"
