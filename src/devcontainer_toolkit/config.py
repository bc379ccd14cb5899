"""
設定管理モジュール

コマンド実行ごとの設定と、参照する環境変数名を定義します。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# コマンド名（ヘルプやエラーメッセージで案内に使う）
PROG_NAME = "devkit"

# devcontainer内で設定されるフラグ
INSIDE_DEVCONTAINER_ENV = "INSIDE_DEVCONTAINER"

# --workspace の代わりに使える環境変数
WORKSPACE_ENV = "DEVKIT_WORKSPACE"

# devcontainerイメージの既定ユーザーとワークスペース
DEVCONTAINER_USER = "vscode"
DEVCONTAINER_WORKSPACE = "/workspace"

DEVCONTAINERS_CLI_PACKAGE = "@devcontainers/cli"


@dataclass(frozen=True)
class ToolkitSettings:
    """
    1回のコマンド実行で共有する設定。

    Attributes:
        workspace: devcontainerを操作する対象のワークスペース（絶対パス）
        verbose: 外部コマンドと終了コードを表示するかどうか
    """

    workspace: Path
    verbose: bool = False

    @classmethod
    def create(cls, workspace: Path | None = None, verbose: bool = False) -> ToolkitSettings:
        """ワークスペース未指定の場合はカレントディレクトリを使う。"""
        resolved = (workspace if workspace is not None else Path.cwd()).resolve()
        return cls(workspace=resolved, verbose=verbose)
