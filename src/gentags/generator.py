"""タグ生成オーケストレーター.

外部ジェネレータ（ctags 互換）を起動し、成功したら出力ファイルに
検証 → 重複削除 を順に適用する。

生成モード:
    - FULL: 設定の root_dir を再帰的にスキャンして作り直す（-R）
    - APPEND: 1ファイルだけ既存のタグファイルへ追記する（-a）
    - SUBDIR: 指定ディレクトリだけを再帰スキャンする（-R）

非同期モードでは、ジェネレータはワーカースレッドで動かし、タグファイルへの
書き込み（追記前の検証・終了後の後処理）はすべて単一の owner スレッドで行う。
同じ TagGenerator から出た複数の呼び出しの後処理が交錯しないのはこのため。
別インスタンスや外部プロセスとの排他は行わないので、同じタグファイルを
対象にする呼び出しは呼び出し側で直列化すること。
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from loguru import logger

from gentags.config import GenerationConfig
from gentags.core.dedup import deduplicate_tag_file
from gentags.core.exceptions import GenerationError
from gentags.core.validate import validate_tag_file
from gentags.reporter import LogReporter, Reporter

# 起動できなかった場合の終了コード（シェルの command not found に合わせる）
_EXIT_NOT_FOUND = 127


class GenerationMode(str, Enum):
    FULL = "full"
    APPEND = "append"
    SUBDIR = "subdir"


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


CommandRunner = Callable[[Sequence[str]], CommandResult]


def run_command(command: Sequence[str]) -> CommandResult:
    """コマンドを実行し、終了まで待って結果を返す."""
    try:
        proc = subprocess.run(list(command), capture_output=True, text=True, errors="replace")
    except OSError as e:
        return CommandResult(returncode=_EXIT_NOT_FOUND, stdout="", stderr=str(e))
    return CommandResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


@dataclass(frozen=True)
class GenerationResult:
    command: list[str]
    returncode: int
    stderr: str = ""
    fixed: bool = False  # 検証でタグファイルを修復したか
    removed: int = 0  # 重複削除で落としたレコード数

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check_returncode(self) -> None:
        """ジェネレータが失敗していれば GenerationError を送出する."""
        if not self.ok:
            raise GenerationError(self.command, self.returncode, self.stderr)


def resolve_mode(target: Path | str | None) -> GenerationMode:
    """target から生成モードを決める（None: FULL / ディレクトリ: SUBDIR / それ以外: APPEND）."""
    if target is None:
        return GenerationMode.FULL
    if Path(target).expanduser().is_dir():
        return GenerationMode.SUBDIR
    return GenerationMode.APPEND


def resolve_bin(config: GenerationConfig, language: str) -> str:
    """言語ごとの上書きがあればそれを、無ければデフォルトのバイナリを返す."""
    return config.bin_map.get(language, config.bin)


def build_args(
    config: GenerationConfig,
    language: str,
    tag_file: Path | str,
    options_path: Path | str | None = None,
    mode: GenerationMode = GenerationMode.FULL,
    target: Path | str | None = None,
) -> list[str]:
    """ジェネレータに渡す引数リストを組み立てる.

    順序はジェネレータ側の引数解釈に効くので固定:
        追加引数 → --options / --languages → -f <tag_file> → -a/-R <対象>

    追加引数には --langdef のような言語定義が入りうるため、後続の
    --languages から参照できるよう必ず先頭に置く。

    Args:
        config: 生成設定
        language: 対象言語（--languages に渡す）
        tag_file: 出力するタグファイル
        options_path: ジェネレータのオプションファイル（指定時は --languages を付けない）
        mode: 生成モード
        target: APPEND なら対象ファイル、SUBDIR なら対象ディレクトリ

    Returns:
        引数リスト（バイナリは含まない）

    Raises:
        ValueError: APPEND/SUBDIR で target が無い場合
    """
    args = list(config.args)

    if options_path is not None:
        args.append(f"--options={Path(options_path).expanduser()}")
    elif not config.has_langdef:
        args.append(f"--languages={language}")

    args.extend(["-f", str(Path(tag_file).expanduser())])

    if mode is GenerationMode.FULL:
        args.extend(["-R", str(Path(config.root_dir).expanduser())])
    else:
        if target is None:
            raise ValueError(f"target is required for {mode.value} mode")
        flag = "-a" if mode is GenerationMode.APPEND else "-R"
        args.extend([flag, str(Path(target).expanduser())])

    return args


def _forward_exception(src: Future, dst: Future) -> None:
    exc = src.exception()
    if exc is not None and not dst.done():
        dst.set_exception(exc)


class TagGenerator:
    """設定を受け取ってタグファイルを生成・後処理するオーケストレーター.

    使用例:
        >>> config = load_config(Path("gentags.yml"))
        >>> with TagGenerator(config) as gen:
        ...     gen.generate("Python", Path("~/src/project/tags"))
    """

    def __init__(
        self,
        config: GenerationConfig,
        reporter: Reporter | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self.config = config
        self._reporter = reporter or LogReporter()
        self._runner = runner or run_command
        self._owner: ThreadPoolExecutor | None = None
        self._workers: ThreadPoolExecutor | None = None
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    def __enter__(self) -> TagGenerator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def generate(
        self,
        language: str,
        tag_file: Path | str,
        options_path: Path | str | None = None,
        target: Path | str | None = None,
    ) -> GenerationResult | Future[GenerationResult]:
        """タグファイルを生成する.

        target が None なら root_dir の全体生成、ディレクトリならその配下の生成、
        ファイルならそのファイルだけを追記する。

        Returns:
            同期モード: GenerationResult
            非同期モード: GenerationResult を返す Future
        """
        return self._dispatch(language, tag_file, options_path, resolve_mode(target), target)

    def generate_dir(
        self,
        language: str,
        tag_file: Path | str,
        directory: Path | str,
        options_path: Path | str | None = None,
    ) -> GenerationResult | Future[GenerationResult]:
        """指定ディレクトリ配下だけを再帰スキャンしてタグファイルを作り直す."""
        return self._dispatch(language, tag_file, options_path, GenerationMode.SUBDIR, directory)

    def close(self) -> None:
        """実行中の非同期生成を待ってからスレッドを止める."""
        with self._pending_lock:
            pending = list(self._pending)
        if pending:
            wait(pending)
        if self._workers is not None:
            self._workers.shutdown(wait=True)
            self._workers = None
        if self._owner is not None:
            self._owner.shutdown(wait=True)
            self._owner = None

    def _forget(self, done: Future) -> None:
        with self._pending_lock:
            self._pending.discard(done)

    def _dispatch(
        self,
        language: str,
        tag_file: Path | str,
        options_path: Path | str | None,
        mode: GenerationMode,
        target: Path | str | None,
    ) -> GenerationResult | Future[GenerationResult]:
        tag_file = Path(tag_file).expanduser()
        if self.config.async_mode:
            return self._submit(language, tag_file, options_path, mode, target)

        command = self._prepare(language, tag_file, options_path, mode, target)
        return self._finish(command, tag_file, self._runner(command))

    def _prepare(
        self,
        language: str,
        tag_file: Path,
        options_path: Path | str | None,
        mode: GenerationMode,
        target: Path | str | None,
    ) -> list[str]:
        # 壊れたファイルへ追記すると破損が広がるので、先に修復しておく
        if mode is GenerationMode.APPEND:
            validate_tag_file(tag_file)

        args = build_args(self.config, language, tag_file, options_path, mode, target)
        command = [resolve_bin(self.config, language), *args]
        logger.info(f"Running tag generator ({mode.value}): {' '.join(command)}")
        return command

    def _finish(self, command: list[str], tag_file: Path, result: CommandResult) -> GenerationResult:
        if result.returncode != 0:
            self._reporter.process_failed(command, result.returncode, result.stderr)
            return GenerationResult(command=command, returncode=result.returncode, stderr=result.stderr)

        fixed = validate_tag_file(tag_file)
        removed = 0
        if self.config.max_duplicates > 0:
            removed = deduplicate_tag_file(tag_file, self.config.max_duplicates)
            if removed:
                self._reporter.duplicates_removed(tag_file, removed)

        logger.info(f"Tag file updated: {tag_file} (fixed={fixed}, removed={removed})")
        return GenerationResult(
            command=command,
            returncode=0,
            stderr=result.stderr,
            fixed=fixed,
            removed=removed,
        )

    def _executors(self) -> tuple[ThreadPoolExecutor, ThreadPoolExecutor]:
        if self._owner is None:
            self._owner = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gentags-owner")
        if self._workers is None:
            self._workers = ThreadPoolExecutor(thread_name_prefix="gentags-job")
        return self._owner, self._workers

    def _submit(
        self,
        language: str,
        tag_file: Path,
        options_path: Path | str | None,
        mode: GenerationMode,
        target: Path | str | None,
    ) -> Future[GenerationResult]:
        owner, workers = self._executors()

        done: Future[GenerationResult] = Future()
        # 実行中の生成は取り消せない
        done.set_running_or_notify_cancel()
        with self._pending_lock:
            self._pending.add(done)
        done.add_done_callback(self._forget)

        def start() -> None:
            # owner スレッド: 追記前の検証と引数組み立て
            command = self._prepare(language, tag_file, options_path, mode, target)
            job = workers.submit(self._runner, command)
            job.add_done_callback(lambda f: self._schedule_finish(f, command, tag_file, done))

        started = owner.submit(start)
        started.add_done_callback(lambda f: _forward_exception(f, done))
        return done

    def _schedule_finish(
        self,
        job: Future[CommandResult],
        command: list[str],
        tag_file: Path,
        done: Future[GenerationResult],
    ) -> None:
        # ワーカースレッドから呼ばれるので、後処理は owner スレッドへ戻す
        owner, _ = self._executors()
        finished = owner.submit(self._complete, job, command, tag_file)
        finished.add_done_callback(lambda f: self._resolve(f, done))

    def _complete(self, job: Future[CommandResult], command: list[str], tag_file: Path) -> GenerationResult:
        return self._finish(command, tag_file, job.result())

    @staticmethod
    def _resolve(finished: Future[GenerationResult], done: Future[GenerationResult]) -> None:
        exc = finished.exception()
        if exc is not None:
            done.set_exception(exc)
        else:
            done.set_result(finished.result())
