"""
依存関係チェックモジュール

必要な外部ツールがPATH上に存在するかを確認し、バージョンを取得します。
結果はキャッシュせず、呼び出しのたびに確認します。
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass

from .utils import run_command


@dataclass(frozen=True)
class Dependency:
    """
    確認対象の外部ツール。

    Attributes:
        name: 表示名
        command: PATH上で探すコマンド名
        version_args: バージョン取得時に渡す引数
        version_label: バージョン行の接頭辞（例: "npm"）
        missing_name: 未インストール時の表示名（省略時はname）
    """

    name: str
    command: str
    version_args: tuple[str, ...] = ("--version",)
    version_label: str | None = None
    missing_name: str | None = None

    @property
    def version_command(self) -> list[str]:
        return [self.command, *self.version_args]


@dataclass(frozen=True)
class DependencyStatus:
    """依存関係の確認結果"""

    dependency: Dependency
    installed: bool
    version: str | None = None

    def display_version(self) -> str | None:
        if not self.version:
            return None
        if self.dependency.version_label:
            return f"{self.dependency.version_label}: {self.version}"
        return self.version


DOCKER = Dependency("Docker", "docker")
DOCKER_COMPOSE = Dependency("Docker Compose", "docker-compose")
DOCKER_COMPOSE_PLUGIN = Dependency(
    "Docker Compose (Docker CLI plugin)", "docker", version_args=("compose", "version")
)
NPM = Dependency("npm", "npm", version_label="npm", missing_name="npm (Node.js)")
NODE = Dependency("Node.js", "node", version_label="node")
DEVCONTAINER_CLI = Dependency("Dev Containers CLI", "devcontainer")


def is_installed(command: str) -> bool:
    """コマンドがPATH上に存在するかを返す。"""
    return shutil.which(command) is not None


def get_version(cmd: list[str], verbose: bool = False) -> str | None:
    """
    バージョンコマンドを実行し、出力を返す。

    コマンドが失敗した場合や起動できない場合はNoneを返す。
    """
    try:
        result = run_command(cmd, check=False, verbose=verbose)
    except OSError:
        return None

    if result.returncode != 0:
        return None
    output = (result.stdout or result.stderr or "").strip()
    return output or None


def check_dependency(dependency: Dependency, verbose: bool = False) -> DependencyStatus:
    if not is_installed(dependency.command):
        return DependencyStatus(dependency, installed=False)
    version = get_version(dependency.version_command, verbose=verbose)
    return DependencyStatus(dependency, installed=True, version=version)


def check_compose(verbose: bool = False) -> DependencyStatus:
    """
    Docker Composeを確認する。

    単体のdocker-composeを優先し、無ければ docker compose プラグインを確認する。
    """
    standalone = check_dependency(DOCKER_COMPOSE, verbose=verbose)
    if standalone.installed:
        return standalone

    if is_installed(DOCKER.command):
        version = get_version(DOCKER_COMPOSE_PLUGIN.version_command, verbose=verbose)
        if version is not None:
            return DependencyStatus(DOCKER_COMPOSE_PLUGIN, installed=True, version=version)

    return standalone


def check_dependencies(verbose: bool = False) -> list[DependencyStatus]:
    """
    すべての依存関係を表示順に確認する。

    Returns:
        Docker, Docker Compose, npm, Node.js, Dev Containers CLI の確認結果
    """
    return [
        check_dependency(DOCKER, verbose=verbose),
        check_compose(verbose=verbose),
        check_dependency(NPM, verbose=verbose),
        check_dependency(NODE, verbose=verbose),
        check_dependency(DEVCONTAINER_CLI, verbose=verbose),
    ]


def docker_daemon_running(verbose: bool = False) -> bool:
    """dockerがPATH上にあり、docker info が成功する場合にTrueを返す。"""
    if not is_installed(DOCKER.command):
        return False
    try:
        result = run_command(["docker", "info"], check=False, verbose=verbose)
    except OSError:
        return False
    return result.returncode == 0
