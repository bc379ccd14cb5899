"""
CLI メインモジュール

Dev Container ツールキットのコマンドラインインターフェースを提供します。
各コマンドは事前チェック（ホスト確認、依存関係、Dockerデーモン）の後、
Dev Containers CLI または Docker を1回呼び出します。
"""

import sys
from pathlib import Path

import click

from . import __version__
from .config import PROG_NAME, WORKSPACE_ENV, ToolkitSettings
from .container import (
    find_container_id,
    follow_logs,
    open_shell,
    prune_system,
    rebuild_container,
    start_container,
    stop_container,
)
from .deps import (
    DEVCONTAINER_CLI,
    DependencyStatus,
    check_dependencies,
    docker_daemon_running,
    get_version,
    is_installed,
)
from .hostos import detect_os, ensure_host
from .installer import InstallError, install_dependencies
from .output import (
    console,
    print_detail,
    print_error,
    print_header,
    print_info,
    print_progress,
    print_section,
    print_success,
    print_warning,
)
from .utils import find_devcontainer_json, get_devcontainer_name

# コマンドが見つからない場合のシェル慣例の終了コード
EXIT_COMMAND_NOT_FOUND = 127

HELP_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    (
        "Installation & Setup",
        [
            ("check-deps", "Check if all dependencies are installed"),
            ("install-deps", "Install missing dependencies"),
            ("check-docker", "Check if Docker daemon is running"),
        ],
    ),
    (
        "Container Operations",
        [
            ("devstart", "Start the dev container"),
            ("devstop", "Stop the dev container"),
            ("devrebuild", "Rebuild the dev container"),
            ("devlogs", "View dev container logs"),
            ("devshell", "Open shell in running container"),
            ("devclean", "Remove dev container and images"),
        ],
    ),
]


def show_help() -> None:
    print_header("Dev Container Toolkit - Available Commands")
    for title, commands in HELP_SECTIONS:
        console.print(f"[bold blue]{title}:[/bold blue]")
        for name, description in commands:
            command = f"{PROG_NAME} {name}"
            console.print(f"  [green]{command:<20}[/green] - {description}")
        console.print()


def _require_host() -> None:
    """devcontainerの内側で実行されている場合は終了する。"""
    error = ensure_host()
    if error:
        print_error(error)
        print_info(
            "Please type 'exit' (or press Ctrl-D) to leave this shell "
            "and run this command again from your host."
        )
        sys.exit(1)


def _require_devcontainer_cli() -> None:
    if not is_installed(DEVCONTAINER_CLI.command):
        print_error("Dev Containers CLI (devcontainer) not found.")
        console.print(
            f"[yellow]Please run '{PROG_NAME} install-deps' on the HOST to install prerequisites.[/yellow]"
        )
        sys.exit(EXIT_COMMAND_NOT_FOUND)


def _require_devcontainer_json(workspace: Path) -> Path:
    config_path = find_devcontainer_json(workspace)
    if not config_path:
        print_error("devcontainer.json not found")
        console.print(
            "[yellow]The workspace needs one of:[/yellow]\n"
            "  • .devcontainer/devcontainer.json\n"
            "  • devcontainer.json"
        )
        sys.exit(1)
    return config_path


def _print_dependency(status: DependencyStatus) -> None:
    dependency = status.dependency
    if status.installed:
        print_success(f"{dependency.name} is installed")
        version = status.display_version()
        if version:
            print_detail(version)
    else:
        print_error(f"{dependency.missing_name or dependency.name} is NOT installed")
        console.print(f"  Run: {PROG_NAME} install-deps (from the host)", markup=False)
    console.print()


def report_dependencies(verbose: bool = False) -> None:
    """依存関係とDockerデーモンの状態を表示する。終了コードには影響しない。"""
    print_header("Dependency Check")
    print_section("Verifying installed tools")
    console.print()

    for status in check_dependencies(verbose=verbose):
        _print_dependency(status)

    print_section("Docker daemon status")
    if docker_daemon_running(verbose=verbose):
        print_success("Docker daemon is running")
    else:
        print_warning("Docker daemon is NOT running")
        console.print(f"  Start Docker and re-run: {PROG_NAME} devstart", markup=False)
    console.print()


def check_docker_daemon(verbose: bool = False) -> bool:
    """
    Dockerデーモンの状態を表示する。

    Returns:
        デーモンに到達できる場合True
    """
    print_header("Docker Daemon Status Check")
    print_section("Verifying Docker daemon")
    console.print()

    if docker_daemon_running(verbose=verbose):
        print_success("Docker daemon is running")
        console.print()
        version = get_version(["docker", "--version"], verbose=verbose)
        if version:
            print_detail(version)
        console.print()
        return True

    print_error("Docker daemon is NOT running")
    console.print()
    print_warning("Please start Docker Desktop or Docker daemon and try again")
    console.print()
    console.print("[yellow]macOS:[/yellow] Open Docker Desktop from Applications")
    console.print("[yellow]Linux:[/yellow] Run: [bold]sudo systemctl start docker[/bold]")
    console.print()
    return False


def _require_docker(verbose: bool = False) -> None:
    if not check_docker_daemon(verbose):
        sys.exit(1)


def _exit_on_failure(returncode: int, message: str) -> None:
    """外部ツールが失敗した場合、その終了コードで終了する。"""
    if returncode != 0:
        console.print()
        print_error(message)
        sys.exit(returncode)


def _print_no_container_tips(manual_hint: str) -> None:
    print_error("No dev container found for this workspace")
    console.print("[yellow]Tips:[/yellow]")
    console.print(f"  • Ensure the container is running: {PROG_NAME} devstart", markup=False)
    console.print(f"  • {manual_hint}", markup=False)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option(
    "--workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    envvar=WORKSPACE_ENV,
    default=None,
    help="ワークスペースフォルダ（デフォルト: カレントディレクトリ）",
)
@click.option("--verbose", is_flag=True, help="実行する外部コマンドと終了コードを表示")
@click.pass_context
def cli(ctx: click.Context, workspace: Path | None, verbose: bool) -> None:
    """
    Dev Container ツールキット

    依存関係の確認・インストールと、devcontainerの
    起動・停止・再ビルド・ログ・シェル・削除を提供します。
    """
    ctx.obj = ToolkitSettings.create(workspace, verbose)
    if ctx.invoked_subcommand is None:
        show_help()


@cli.command("help")
def help_command() -> None:
    """利用可能なコマンドを表示する。"""
    show_help()


@cli.command("check-deps")
@click.pass_obj
def check_deps(settings: ToolkitSettings) -> None:
    """
    依存関係がインストールされているかを確認する。

    確認結果を表示するのみで、常に終了コード0で終了します。
    """
    report_dependencies(settings.verbose)


@cli.command("check-docker")
@click.pass_obj
def check_docker(settings: ToolkitSettings) -> None:
    """Dockerデーモンが起動しているかを確認する。"""
    _require_docker(settings.verbose)


@cli.command("install-deps")
@click.pass_obj
def install_deps(settings: ToolkitSettings) -> None:
    """
    不足している依存関係をインストールする。

    OSを検出し、プラットフォームのパッケージマネージャーを使用します。
    Node.js/npm と Dev Containers CLI の失敗は致命的です。
    """
    _require_host()

    print_header("Dependency Installation")
    print_section("Detecting operating system")
    console.print()
    os_category = detect_os()
    console.print(f"[magenta]→ Detected OS: {os_category.value}[/magenta]")
    console.print()

    try:
        install_dependencies(os_category, verbose=settings.verbose)
    except InstallError:
        sys.exit(1)


@cli.command()
@click.pass_obj
def devstart(settings: ToolkitSettings) -> None:
    """開発コンテナを起動する。"""
    _require_host()
    report_dependencies(settings.verbose)
    _require_docker(settings.verbose)
    _require_devcontainer_cli()
    config_path = _require_devcontainer_json(settings.workspace)

    print_header("Starting Dev Container")
    print_section("Initializing container environment")
    name = get_devcontainer_name(config_path)
    if name:
        print_info(f"Configuration: {name}")
    console.print()

    result = start_container(settings.workspace, verbose=settings.verbose)
    _exit_on_failure(result.returncode, "Failed to start dev container")

    console.print()
    print_progress("Dev container started successfully")
    console.print()
    print_success("Your development environment is ready")
    print_info(f"Run '{PROG_NAME} help' for more commands")
    console.print()


@cli.command()
@click.pass_obj
def devstop(settings: ToolkitSettings) -> None:
    """開発コンテナを停止する。"""
    _require_host()
    _require_docker(settings.verbose)
    _require_devcontainer_cli()

    print_header("Stopping Dev Container")
    print_section("Shutting down container")
    console.print()

    result = stop_container(settings.workspace, verbose=settings.verbose)
    _exit_on_failure(result.returncode, "Failed to stop dev container")

    console.print()
    print_progress("Dev container stopped")
    console.print()


@cli.command()
@click.pass_obj
def devrebuild(settings: ToolkitSettings) -> None:
    """
    開発コンテナを再ビルドする。

    既存のコンテナを削除し、キャッシュを使用せずにビルドします。
    """
    _require_host()
    report_dependencies(settings.verbose)
    _require_docker(settings.verbose)
    _require_devcontainer_cli()
    config_path = _require_devcontainer_json(settings.workspace)

    print_header("Rebuilding Dev Container")
    print_section("Reconstructing container image")
    name = get_devcontainer_name(config_path)
    if name:
        print_info(f"Configuration: {name}")
    console.print()

    result = rebuild_container(settings.workspace, verbose=settings.verbose)
    _exit_on_failure(result.returncode, "Failed to rebuild dev container")

    console.print()
    print_progress("Dev container rebuilt successfully")
    console.print()
    print_success("Container is ready to use")
    console.print()


@cli.command()
@click.pass_obj
def devlogs(settings: ToolkitSettings) -> None:
    """開発コンテナのログを表示する。"""
    _require_host()
    _require_docker(settings.verbose)

    print_header("Dev Container Logs")
    print_section("Streaming container logs")
    console.print()

    container_id = find_container_id(
        settings.workspace, include_stopped=True, verbose=settings.verbose
    )
    if not container_id:
        _print_no_container_tips(
            "If multiple containers exist, open logs manually: "
            "docker ps && docker logs -f <container>"
        )
        sys.exit(1)

    result = follow_logs(container_id, verbose=settings.verbose)
    sys.exit(result.returncode)


@cli.command()
@click.pass_obj
def devshell(settings: ToolkitSettings) -> None:
    """実行中のコンテナでシェルを開く。"""
    _require_host()
    _require_docker(settings.verbose)

    print_header("Container Shell Access")
    print_section("Connecting to container")
    console.print()

    container_id = find_container_id(settings.workspace, verbose=settings.verbose)
    if not container_id:
        _print_no_container_tips(
            "If multiple containers exist, connect manually: "
            "docker ps && docker exec -it <container> /bin/bash"
        )
        sys.exit(1)

    print_info(f"Container: {container_id[:12]}")
    result = open_shell(container_id, verbose=settings.verbose)
    sys.exit(result.returncode)


@cli.command()
@click.pass_obj
def devclean(settings: ToolkitSettings) -> None:
    """開発コンテナと未使用のイメージを削除する。"""
    _require_host()
    _require_docker(settings.verbose)
    _require_devcontainer_cli()

    print_header("Cleaning Up Dev Container")
    print_section("Removing container and images")
    console.print()

    # コンテナが既に停止している場合もあるため、失敗は無視する
    stop_container(settings.workspace, verbose=settings.verbose)
    result = prune_system(verbose=settings.verbose)
    _exit_on_failure(result.returncode, "Failed to remove unused Docker resources")

    console.print()
    print_progress("Dev container cleaned successfully")
    console.print()
    print_success("All containers and unused images removed")
    console.print()


if __name__ == "__main__":
    cli()
