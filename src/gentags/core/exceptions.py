"""gentags の例外クラス.

タグファイルの破損は検証/重複削除の中で自己修復するため例外にしない。
ここで定義するのは、呼び出し側が扱う必要のある失敗だけです。
"""

from __future__ import annotations

from collections.abc import Sequence


class ConfigError(ValueError):
    """設定ファイル/設定値が不正な場合の例外."""


class GenerationError(Exception):
    """外部ジェネレータが非0で終了した場合の例外.

    Attributes:
        command: 実行したコマンド（バイナリ + 引数）
        returncode: 終了コード
        stderr: 捕捉した標準エラー出力
    """

    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        """例外初期化.

        Args:
            command: 実行したコマンド
            returncode: 終了コード
            stderr: 標準エラー出力
        """
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Tag generator exited with status {returncode}: {' '.join(self.command)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)
