"""gentags CLI エントリポイント."""

from __future__ import annotations

import argparse
import sys
from concurrent.futures import Future
from dataclasses import replace
from pathlib import Path

from loguru import logger

from gentags.config import GenerationConfig, load_config
from gentags.core.dedup import DEFAULT_MAX_DUPLICATES, deduplicate_tag_file
from gentags.core.exceptions import ConfigError, GenerationError
from gentags.core.validate import validate_tag_file
from gentags.generator import TagGenerator
from gentags.tools.report_tagfile import run_tagfile_report


def _load_generation_config(args: argparse.Namespace) -> GenerationConfig:
    config = load_config(args.config) if args.config else GenerationConfig()

    # コマンドライン指定は設定ファイルより優先
    overrides: dict[str, object] = {}
    if args.bin:
        overrides["bin"] = args.bin
    if args.root_dir:
        overrides["root_dir"] = args.root_dir.expanduser()
    if args.extra_args:
        overrides["args"] = (*config.args, *args.extra_args)
    if args.max_duplicates is not None:
        if args.max_duplicates < 0:
            raise ConfigError(f"--max-duplicates must be >= 0, got {args.max_duplicates}")
        overrides["max_duplicates"] = args.max_duplicates
    if args.async_mode:
        overrides["async_mode"] = True
    if args.has_langdef:
        overrides["has_langdef"] = True
    return replace(config, **overrides) if overrides else config


def _cmd_generate(args: argparse.Namespace) -> int:
    config = _load_generation_config(args)

    with TagGenerator(config) as gen:
        result = gen.generate(args.language, args.tag_file, options_path=args.options, target=args.target)
        if isinstance(result, Future):
            result = result.result()

    result.check_returncode()
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    fixed = validate_tag_file(args.tag_file)
    logger.info(f"validate: tag_file={args.tag_file} fixed={fixed}")
    return 0


def _cmd_dedup(args: argparse.Namespace) -> int:
    removed = deduplicate_tag_file(args.tag_file, args.max_duplicates)
    logger.info(f"dedup: tag_file={args.tag_file} removed={removed} max_duplicates={args.max_duplicates}")
    return 0


def _cmd_report(args: argparse.Namespace) -> int:
    summary = run_tagfile_report(args.tag_file, args.out_dir, args.max_duplicates)
    logger.info(f"Wrote tag file reports: {summary.parent}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gentags", description="Generate and maintain ctags-style tag files")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Run the tag generator and post-process its output")
    g.add_argument("language", help="Language passed as --languages=<language>")
    g.add_argument("--tag-file", type=Path, required=True, help="Tag file to write")
    g.add_argument("--config", type=Path, default=None, help="YAML config file")
    g.add_argument("--options", type=Path, default=None, help="Generator options file (replaces --languages)")
    g.add_argument(
        "--target",
        type=Path,
        default=None,
        help="File to append (incremental) or directory to rebuild (default: full rebuild of root_dir)",
    )
    g.add_argument("--bin", default=None, help="Generator binary (overrides config)")
    g.add_argument("--root-dir", type=Path, default=None, help="Root directory for full rebuild")
    g.add_argument(
        "--arg",
        dest="extra_args",
        action="append",
        default=None,
        help="Extra generator argument, placed first (repeatable; use --arg=--fields=+n)",
    )
    g.add_argument("--max-duplicates", type=int, default=None, help="Duplicate ceiling (0 disables)")
    g.add_argument("--async", dest="async_mode", action="store_true", help="Run the generator off-thread")
    g.add_argument("--has-langdef", action="store_true", help="Do not pass --languages")
    g.set_defaults(func=_cmd_generate)

    v = sub.add_parser("validate", help="Drop invalid lines from a tag file")
    v.add_argument("tag_file", type=Path)
    v.set_defaults(func=_cmd_validate)

    d = sub.add_parser("dedup", help="Cap the number of records per tag name")
    d.add_argument("tag_file", type=Path)
    d.add_argument("--max-duplicates", type=int, default=DEFAULT_MAX_DUPLICATES)
    d.set_defaults(func=_cmd_dedup)

    r = sub.add_parser("report", help="Write TSV health reports for a tag file")
    r.add_argument("tag_file", type=Path)
    r.add_argument("--out-dir", type=Path, required=True)
    r.add_argument("--max-duplicates", type=int, default=DEFAULT_MAX_DUPLICATES)
    r.set_defaults(func=_cmd_report)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    try:
        return args.func(args)
    except (ConfigError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1
    except GenerationError as e:
        logger.error(f"Generation failed with exit status {e.returncode}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
