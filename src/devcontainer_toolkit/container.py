"""
コンテナ操作モジュール

Dev Containers CLI と Docker へのコマンド呼び出しを提供します。
ライフサイクル操作の出力はキャプチャせず、そのまま端末に流します。
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from .utils import find_devcontainer_json, run_command

DEVCONTAINER = "devcontainer"
DEFAULT_SHELL = "/bin/bash"


def _devcontainer(
    subcommand: str, workspace: Path, *args: str, verbose: bool = False
) -> subprocess.CompletedProcess[str]:
    cmd = [DEVCONTAINER, subcommand, "--workspace-folder", str(workspace), *args]
    return run_command(cmd, check=False, capture_output=False, verbose=verbose)


def start_container(workspace: Path, verbose: bool = False) -> subprocess.CompletedProcess[str]:
    """devcontainer up でコンテナを起動する。"""
    return _devcontainer("up", workspace, verbose=verbose)


def stop_container(workspace: Path, verbose: bool = False) -> subprocess.CompletedProcess[str]:
    """devcontainer close でコンテナを停止する。"""
    return _devcontainer("close", workspace, verbose=verbose)


def rebuild_container(workspace: Path, verbose: bool = False) -> subprocess.CompletedProcess[str]:
    """
    コンテナを最初から再ビルドする。

    既存のコンテナを削除し、キャッシュを使用せずにビルドします。
    """
    return _devcontainer(
        "up",
        workspace,
        "--remove-existing-container",
        "--build-no-cache",
        verbose=verbose,
    )


def open_shell(
    container_id: str, shell: str = DEFAULT_SHELL, verbose: bool = False
) -> subprocess.CompletedProcess[str]:
    """docker exec -it で検出したコンテナ内に対話シェルを開く。"""
    return run_command(
        ["docker", "exec", "-it", container_id, shell],
        check=False,
        capture_output=False,
        verbose=verbose,
    )


def follow_logs(container_id: str, verbose: bool = False) -> subprocess.CompletedProcess[str]:
    """docker logs -f でコンテナのログを追跡する。"""
    return run_command(
        ["docker", "logs", "-f", container_id], check=False, capture_output=False, verbose=verbose
    )


def prune_system(verbose: bool = False) -> subprocess.CompletedProcess[str]:
    """停止済みコンテナや未使用イメージを削除する。"""
    return run_command(
        ["docker", "system", "prune", "-f"], check=False, capture_output=False, verbose=verbose
    )


def container_filters(workspace: Path) -> list[str]:
    """
    ワークスペースのコンテナを探すためのdocker psフィルターを優先度順に返す。

    1. devcontainer.local_folder ラベル
    2. devcontainer.config_file ラベル
    3. VS Code が付けるコンテナ名の接頭辞
    4. devcontainer ラベルを持つ任意のコンテナ

    Args:
        workspace: ワークスペースのパス

    Returns:
        フィルター文字列のリスト
    """
    config_file = find_devcontainer_json(workspace) or (
        workspace / ".devcontainer" / "devcontainer.json"
    )
    return [
        f"label=devcontainer.local_folder={workspace}",
        f"label=devcontainer.config_file={config_file}",
        "name=vsc-",
        "label=devcontainer",
    ]


def find_container_id(
    workspace: Path, include_stopped: bool = False, verbose: bool = False
) -> str | None:
    """
    ワークスペースに対応するコンテナIDを取得する。

    フィルターを優先度順に1回ずつ試し、最初に見つかったコンテナを返す。

    Args:
        workspace: ワークスペースのパス
        include_stopped: 停止済みのコンテナも対象にするかどうか
        verbose: 詳細なデバッグ情報を表示するかどうか

    Returns:
        コンテナID（見つからない場合はNone）
    """
    for container_filter in container_filters(workspace):
        cmd = ["docker", "ps"]
        if include_stopped:
            cmd.append("-a")
        cmd.extend(["--filter", container_filter, "--format", "{{.ID}}"])

        result = run_command(cmd, check=False, verbose=verbose)
        if result.returncode == 0 and result.stdout and result.stdout.strip():
            return result.stdout.strip().splitlines()[0].strip()

    return None
