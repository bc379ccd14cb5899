"""
依存関係インストールモジュール

検出したOSごとにパッケージマネージャーを使って不足しているツールを
インストールします。OSごとに1つのハンドラー関数を持ち、INSTALLERSから選択します。
"""

from __future__ import annotations

import platform
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .config import DEVCONTAINERS_CLI_PACKAGE, PROG_NAME
from .deps import (
    DEVCONTAINER_CLI,
    DOCKER,
    NODE,
    NPM,
    check_compose,
    check_dependency,
    docker_daemon_running,
    is_installed,
)
from .hostos import OSCategory, current_user
from .output import (
    console,
    print_error,
    print_info,
    print_section,
    print_step,
    print_success,
    print_warning,
)
from .utils import run_command

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
DOCKER_INSTALL_SCRIPT_URL = "https://get.docker.com"
DOCKER_COMPOSE_RELEASE_URL = "https://github.com/docker/compose/releases/latest/download"
DOCKER_COMPOSE_BINARY = "/usr/local/bin/docker-compose"
LINUX_PREREQUISITES = ["curl", "gnupg", "lsb-release", "ubuntu-keyring"]

DOCKER_DESKTOP_WINDOWS_URL = "https://docs.docker.com/desktop/install/windows/"
NODEJS_URL = "https://nodejs.org/"


class InstallError(RuntimeError):
    """
    重要な依存関係のインストールに失敗した場合に発生する例外。

    Node.js/npm と Dev Containers CLI が対象で、
    これらが無いと devcontainer を操作できない。
    """


@dataclass
class InstallReport:
    """
    インストール処理の結果。

    Attributes:
        os_category: 検出されたOS
        installed: 今回新たにインストールしたツール
        warnings: 致命的ではない失敗のメッセージ
        verbose: 外部コマンドを表示するかどうか
    """

    os_category: OSCategory
    installed: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    verbose: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.warnings


def _run_steps(commands: list[list[str]], verbose: bool) -> bool:
    """コマンドを順に実行し、最初に失敗した時点でFalseを返す。"""
    for cmd in commands:
        try:
            result = run_command(cmd, check=False, capture_output=False, verbose=verbose)
        except OSError as e:
            print_error(f"Could not run {cmd[0]}: {e}")
            return False
        if result.returncode != 0:
            return False
    return True


def _install(
    report: InstallReport,
    label: str,
    commands: list[list[str]],
    critical: bool = False,
    failure_message: str | None = None,
) -> bool:
    """
    インストール手順を実行し、結果を表示・記録する。

    Args:
        report: 結果を記録するレポート
        label: 表示名
        commands: 順に実行するコマンド
        critical: 失敗時にInstallErrorを送出するかどうか
        failure_message: 失敗時のメッセージ

    Returns:
        成功した場合True

    Raises:
        InstallError: criticalな手順が失敗した場合
    """
    if _run_steps(commands, report.verbose):
        print_success(f"{label} installed")
        report.installed.append(label)
        return True

    message = failure_message or f"Failed to install {label}"
    if critical:
        print_error(message)
        raise InstallError(message)
    print_warning(message)
    report.warnings.append(message)
    return False


def install_macos(report: InstallReport) -> None:
    print_section("Checking Homebrew")
    if is_installed("brew"):
        print_success("Homebrew is already installed")
    else:
        print_warning("Homebrew not found. Installing...")
        _install(
            report,
            "Homebrew",
            [["/bin/bash", "-c", f'/bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_URL})"']],
        )
    console.print()

    print_section("Installing Docker Desktop")
    if is_installed(DOCKER.command):
        print_success("Docker is already installed")
    else:
        print_step("Installing Docker Desktop via Homebrew...")
        if _install(report, "Docker Desktop", [["brew", "install", "--cask", "docker"]]):
            print_warning("Please launch Docker Desktop from Applications")
    console.print()

    print_section("Ensuring Node.js and npm")
    if is_installed(NPM.command):
        print_success("npm is already installed")
    else:
        print_step("Installing Node.js via Homebrew...")
        _install(
            report,
            "Node.js",
            [["brew", "install", "node"]],
            critical=True,
            failure_message="Failed to install Node.js via Homebrew",
        )
    console.print()

    print_section("Installing Dev Containers CLI")
    if is_installed(DEVCONTAINER_CLI.command):
        print_success("Dev Containers CLI is already installed")
    else:
        print_step("Installing Dev Containers CLI via npm...")
        _install(
            report,
            "Dev Containers CLI",
            [["npm", "install", "-g", DEVCONTAINERS_CLI_PACKAGE]],
            critical=True,
        )
    console.print()

    if report.succeeded:
        print_success("All dependencies installed for macOS")
    else:
        print_warning("Dependency installation for macOS finished with warnings")
    print_warning(f"Please ensure Docker Desktop is running before using '{PROG_NAME} devstart'")
    console.print()


def _linux_needs_install(verbose: bool) -> bool:
    return not (
        is_installed(DOCKER.command)
        and check_compose(verbose=verbose).installed
        and is_installed(NPM.command)
        and is_installed(NODE.command)
        and is_installed(DEVCONTAINER_CLI.command)
    )


def _install_docker_linux(report: InstallReport) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        script = str(Path(tmp) / "get-docker.sh")
        installed = _install(
            report,
            "Docker",
            [
                ["curl", "-fsSL", DOCKER_INSTALL_SCRIPT_URL, "-o", script],
                ["sudo", "sh", script],
            ],
        )
    if not installed:
        return

    user = current_user()
    if not _run_steps([["sudo", "usermod", "-aG", "docker", user]], report.verbose):
        message = f"Could not add {user} to the docker group"
        print_warning(message)
        report.warnings.append(message)
    print_warning("Please log out and log back in for group changes to take effect")


def install_linux(report: InstallReport) -> None:
    if _linux_needs_install(report.verbose):
        print_section("Updating package lists")
        # 前提パッケージの失敗は致命的ではない
        if not _run_steps(
            [
                ["sudo", "apt-get", "update"],
                ["sudo", "apt-get", "install", "-y", *LINUX_PREREQUISITES],
            ],
            report.verbose,
        ):
            print_warning("Could not install prerequisite packages; continuing")
        console.print()

    print_section("Installing Docker")
    if is_installed(DOCKER.command):
        print_success("Docker is already installed")
    else:
        print_step("Installing Docker...")
        _install_docker_linux(report)
    console.print()

    print_section("Installing Docker Compose")
    if check_compose(verbose=report.verbose).installed:
        print_success("Docker Compose is already installed")
    else:
        print_step("Installing Docker Compose...")
        url = f"{DOCKER_COMPOSE_RELEASE_URL}/docker-compose-{platform.system()}-{platform.machine()}"
        _install(
            report,
            "Docker Compose",
            [
                ["sudo", "curl", "-L", url, "-o", DOCKER_COMPOSE_BINARY],
                ["sudo", "chmod", "+x", DOCKER_COMPOSE_BINARY],
            ],
        )
    console.print()

    print_section("Ensuring Node.js and npm")
    if is_installed(NPM.command) and is_installed(NODE.command):
        print_success("Node.js and npm are already installed")
    else:
        print_step("Installing Node.js and npm...")
        _install(
            report,
            "Node.js and npm",
            [
                ["sudo", "apt-get", "update"],
                ["sudo", "apt-get", "install", "-y", "nodejs", "npm"],
            ],
            critical=True,
            failure_message="Failed to install Node.js/npm",
        )
    console.print()

    print_section("Installing Dev Containers CLI")
    if is_installed(DEVCONTAINER_CLI.command):
        print_success("Dev Containers CLI is already installed")
    else:
        print_step("Installing Dev Containers CLI...")
        _install(
            report,
            "Dev Containers CLI",
            [["sudo", "npm", "install", "-g", DEVCONTAINERS_CLI_PACKAGE]],
            critical=True,
        )
    console.print()

    print_section("Starting Docker daemon")
    if docker_daemon_running(verbose=report.verbose):
        print_success("Docker daemon is already running")
    elif _run_steps([["sudo", "systemctl", "start", "docker"]], report.verbose):
        print_success("Docker daemon started")
    else:
        message = "Could not start the Docker daemon"
        print_warning(message)
        report.warnings.append(message)
    console.print()

    if report.succeeded:
        print_success("All dependencies installed for Linux")
    else:
        print_warning("Dependency installation for Linux finished with warnings")
    console.print()


def install_windows(report: InstallReport) -> None:
    """Windowsでは検出と案内のみを行う。"""
    print_section("Checking Docker")
    docker = check_dependency(DOCKER, verbose=report.verbose)
    if docker.installed:
        print_success("Docker is available on PATH")
        if docker.version:
            console.print(f"  {docker.version}", markup=False)
    else:
        print_warning(f"Please install Docker Desktop for Windows: {DOCKER_DESKTOP_WINDOWS_URL}")
    console.print()

    print_section("Checking Dev Containers CLI")
    cli = check_dependency(DEVCONTAINER_CLI, verbose=report.verbose)
    if cli.installed:
        print_success("Dev Containers CLI is available")
        if cli.version:
            console.print(f"  {cli.version}", markup=False)
    else:
        print_warning("Dev Containers CLI not found")
        console.print(f"  Install via npm: npm install -g {DEVCONTAINERS_CLI_PACKAGE}", markup=False)
        console.print(f"  Note: Node.js is required: {NODEJS_URL}", markup=False)
    console.print()

    print_info(
        f"On Windows, {PROG_NAME} provides detection and guidance only. "
        "Follow the instructions above."
    )
    console.print()


def install_unsupported(report: InstallReport) -> None:
    print_error("Unsupported OS detected")
    print_step("Please install the following manually:")
    for line in (
        "• Docker: https://docs.docker.com/get-docker/",
        "• Docker Compose: https://docs.docker.com/compose/install/",
        f"• Node.js & npm: {NODEJS_URL}",
        f"• Dev Containers CLI: npm install -g {DEVCONTAINERS_CLI_PACKAGE}",
    ):
        console.print(f"  {line}", markup=False)
    console.print()


INSTALLERS: dict[OSCategory, Callable[[InstallReport], None]] = {
    OSCategory.MACOS: install_macos,
    OSCategory.LINUX: install_linux,
    OSCategory.WINDOWS: install_windows,
    OSCategory.UNSUPPORTED: install_unsupported,
}


def install_dependencies(os_category: OSCategory, verbose: bool = False) -> InstallReport:
    """
    OSに対応するインストーラーを実行する。

    Args:
        os_category: 検出されたOS
        verbose: 外部コマンドを表示するかどうか

    Returns:
        インストール結果

    Raises:
        InstallError: 重要な依存関係のインストールに失敗した場合
    """
    report = InstallReport(os_category=os_category, verbose=verbose)
    INSTALLERS[os_category](report)
    return report
