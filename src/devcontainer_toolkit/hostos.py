"""
ホスト環境検出モジュール

ホストOSの分類と、devcontainerの内側で実行されていないかの判定を提供します。
"""

from __future__ import annotations

import getpass
import os
import platform
from collections.abc import Mapping
from enum import Enum
from pathlib import Path

from .config import DEVCONTAINER_USER, DEVCONTAINER_WORKSPACE, INSIDE_DEVCONTAINER_ENV

DOCKERENV_PATH = Path("/.dockerenv")

# Git Bash / MSYS2 / Cygwin は uname -s がこれらで始まる
_WINDOWS_SHELL_PREFIXES = ("MINGW", "MSYS", "CYGWIN")

INSIDE_CONTAINER_MESSAGE = (
    "You are inside the dev container. "
    "This command must be executed from OUTSIDE the dev container."
)


class OSCategory(str, Enum):
    """インストール手順を切り替えるためのOS分類"""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNSUPPORTED = "unsupported"


def detect_os(system_name: str | None = None) -> OSCategory:
    """
    プラットフォーム名をOS分類に変換する。

    Args:
        system_name: uname -s 相当の名前（省略時は platform.system()）

    Returns:
        対応するOSCategory（該当しない場合はUNSUPPORTED）
    """
    name = platform.system() if system_name is None else system_name

    if name == "Linux":
        return OSCategory.LINUX
    if name == "Darwin":
        return OSCategory.MACOS
    if name == "Windows" or name.upper().startswith(_WINDOWS_SHELL_PREFIXES):
        return OSCategory.WINDOWS
    return OSCategory.UNSUPPORTED


def current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def is_inside_devcontainer(
    environ: Mapping[str, str] | None = None,
    dockerenv: Path = DOCKERENV_PATH,
    user: str | None = None,
    cwd: Path | None = None,
) -> bool:
    """
    devcontainerの内側で実行されているかを判定する。

    以下のいずれかに該当すれば内側とみなす:
    1. 環境変数 INSIDE_DEVCONTAINER が "1"
    2. /.dockerenv が存在する
    3. ユーザーが vscode かつカレントディレクトリが /workspace

    Args:
        environ: 参照する環境変数（省略時は os.environ）
        dockerenv: Dockerが作成するマーカーファイルのパス
        user: 現在のユーザー名（省略時は自動取得）
        cwd: カレントディレクトリ（省略時は Path.cwd()）

    Returns:
        内側の場合True
    """
    environ = os.environ if environ is None else environ
    if environ.get(INSIDE_DEVCONTAINER_ENV) == "1":
        return True

    if dockerenv.exists():
        return True

    user = current_user() if user is None else user
    if user != DEVCONTAINER_USER:
        return False
    cwd = Path.cwd() if cwd is None else cwd
    return cwd == Path(DEVCONTAINER_WORKSPACE)


def ensure_host(
    environ: Mapping[str, str] | None = None,
    dockerenv: Path = DOCKERENV_PATH,
    user: str | None = None,
    cwd: Path | None = None,
) -> str | None:
    """
    ホスト上で実行されていることを確認する。

    プロセスは終了させず、呼び出し側が終了コードを決める。

    Returns:
        devcontainerの内側であればエラーメッセージ、ホストであればNone
    """
    if is_inside_devcontainer(environ, dockerenv, user, cwd):
        return INSIDE_CONTAINER_MESSAGE
    return None
