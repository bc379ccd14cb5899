"""
依存関係インストールのテスト
"""

from unittest.mock import MagicMock, patch

import pytest

from devcontainer_toolkit.hostos import OSCategory
from devcontainer_toolkit.installer import (
    INSTALLERS,
    InstallError,
    install_dependencies,
)


class FakeHost:
    """
    インストール済みコマンドを記録するテスト用のホスト。

    run_commandの呼び出しを記録し、インストールコマンドが成功すると
    対応するコマンドをインストール済みにする。
    """

    # インストールコマンドの特徴 → インストールされるコマンド
    PROVIDES = {
        "--cask": ["docker"],
        "node": ["node", "npm"],
        "nodejs": ["node", "npm"],
        "@devcontainers/cli": ["devcontainer"],
        "/usr/local/bin/docker-compose": ["docker-compose"],
    }

    def __init__(self, installed, fail=()):
        self.installed = set(installed)
        self.fail = set(fail)
        self.commands = []

    def is_installed(self, command):
        return command in self.installed

    def run_command(self, cmd, **kwargs):
        self.commands.append(cmd)
        if any(marker in cmd for marker in self.fail):
            return MagicMock(returncode=1)
        for marker, provided in self.PROVIDES.items():
            if marker in cmd:
                self.installed.update(provided)
        return MagicMock(returncode=0)

    def compose_status(self, verbose=False):
        return MagicMock(installed="docker-compose" in self.installed)

    def patches(self):
        return [
            patch("devcontainer_toolkit.installer.is_installed", side_effect=self.is_installed),
            patch("devcontainer_toolkit.installer.run_command", side_effect=self.run_command),
            patch("devcontainer_toolkit.installer.check_compose", side_effect=self.compose_status),
            patch("devcontainer_toolkit.installer.docker_daemon_running", return_value=True),
        ]


def run_install(host, os_category):
    patches = host.patches()
    for p in patches:
        p.start()
    try:
        return install_dependencies(os_category)
    finally:
        for p in patches:
            p.stop()


ALL_TOOLS = {"brew", "docker", "docker-compose", "npm", "node", "devcontainer"}


class TestInstallerDispatch:
    """OSごとのハンドラー選択のテスト"""

    def test_every_category_has_handler(self):
        """すべてのOS分類にハンドラーが1つずつある"""
        assert set(INSTALLERS) == set(OSCategory)


class TestInstallMacos:
    """macOSでのインストールのテスト"""

    def test_installs_missing_docker_via_homebrew(self, capsys):
        """Dockerが無い場合はHomebrewでインストールし、成功サマリーを表示する"""
        host = FakeHost(ALL_TOOLS - {"docker"})

        report = run_install(host, OSCategory.MACOS)

        assert host.commands == [["brew", "install", "--cask", "docker"]]
        assert report.installed == ["Docker Desktop"]
        assert report.succeeded

        out = capsys.readouterr().out
        assert "Homebrew is already installed" in out
        assert "All dependencies installed for macOS" in out

    def test_failed_docker_install_is_warning(self, capsys):
        """Docker Desktopの失敗は警告で、成功サマリーは表示しない"""
        host = FakeHost(ALL_TOOLS - {"docker"}, fail={"--cask"})

        report = run_install(host, OSCategory.MACOS)

        assert not report.succeeded
        out = capsys.readouterr().out
        assert "Failed to install Docker Desktop" in out
        assert "All dependencies installed for macOS" not in out

    def test_failed_node_install_aborts(self):
        """Node.jsの失敗は致命的"""
        host = FakeHost(ALL_TOOLS - {"npm", "node", "devcontainer"}, fail={"node"})

        with pytest.raises(InstallError, match="Node.js"):
            run_install(host, OSCategory.MACOS)

        # Dev Containers CLIのインストールまで進まない
        assert not any("@devcontainers/cli" in cmd for cmd in host.commands)

    def test_installs_homebrew_when_missing(self):
        """Homebrewが無い場合はインストールスクリプトを実行する"""
        host = FakeHost(ALL_TOOLS - {"brew"})

        report = run_install(host, OSCategory.MACOS)

        assert report.installed == ["Homebrew"]
        assert host.commands[0][0] == "/bin/bash"

    def test_second_run_is_idempotent(self, capsys):
        """2回目の実行ではすべてインストール済みと表示し、何も実行しない"""
        host = FakeHost(ALL_TOOLS - {"docker"})

        first = run_install(host, OSCategory.MACOS)
        assert first.installed == ["Docker Desktop"]
        capsys.readouterr()

        host.commands.clear()
        second = run_install(host, OSCategory.MACOS)

        assert host.commands == []
        assert second.installed == []
        assert second.succeeded
        out = capsys.readouterr().out
        assert "Homebrew is already installed" in out
        assert "Docker is already installed" in out
        assert "npm is already installed" in out
        assert "Dev Containers CLI is already installed" in out


class TestInstallLinux:
    """Linuxでのインストールのテスト"""

    def test_second_run_is_idempotent(self, capsys):
        """2回目の実行ではすべてインストール済みと表示し、何も実行しない"""
        host = FakeHost({"docker", "docker-compose"})

        first = run_install(host, OSCategory.LINUX)
        assert "Node.js and npm" in first.installed
        assert "Dev Containers CLI" in first.installed
        capsys.readouterr()

        host.commands.clear()
        second = run_install(host, OSCategory.LINUX)

        assert host.commands == []
        assert second.installed == []
        assert second.succeeded
        out = capsys.readouterr().out
        assert "Docker is already installed" in out
        assert "Dev Containers CLI is already installed" in out

    def test_devcontainer_cli_failure_aborts(self):
        """Dev Containers CLIの失敗は致命的"""
        host = FakeHost(ALL_TOOLS - {"devcontainer"}, fail={"@devcontainers/cli"})

        with pytest.raises(InstallError, match="Dev Containers CLI"):
            run_install(host, OSCategory.LINUX)

    def test_prerequisite_failure_is_ignored(self):
        """前提パッケージの失敗は無視して続行する"""
        host = FakeHost(ALL_TOOLS - {"devcontainer"}, fail={"ubuntu-keyring"})

        report = run_install(host, OSCategory.LINUX)

        assert report.installed == ["Dev Containers CLI"]
        assert report.succeeded

    def test_starts_docker_daemon_when_stopped(self):
        """Dockerデーモンが停止していれば起動する"""
        host = FakeHost(ALL_TOOLS)
        patches = host.patches()[:3]
        patches.append(
            patch("devcontainer_toolkit.installer.docker_daemon_running", return_value=False)
        )
        for p in patches:
            p.start()
        try:
            report = install_dependencies(OSCategory.LINUX)
        finally:
            for p in patches:
                p.stop()

        assert host.commands == [["sudo", "systemctl", "start", "docker"]]
        assert report.succeeded


class TestInstallOtherPlatforms:
    """Windowsと未対応OSのテスト"""

    @patch("devcontainer_toolkit.installer.run_command")
    @patch("devcontainer_toolkit.installer.check_dependency")
    def test_windows_only_gives_guidance(self, mock_check, mock_run, capsys):
        """Windowsでは何もインストールしない"""
        mock_check.return_value = MagicMock(installed=False, version=None)

        report = install_dependencies(OSCategory.WINDOWS)

        mock_run.assert_not_called()
        assert report.installed == []
        assert "Dev Containers CLI not found" in capsys.readouterr().out

    @patch("devcontainer_toolkit.installer.run_command")
    def test_unsupported_prints_manual_steps(self, mock_run, capsys):
        """未対応OSでは手動インストールの案内のみ"""
        install_dependencies(OSCategory.UNSUPPORTED)

        mock_run.assert_not_called()
        out = capsys.readouterr().out
        assert "Unsupported OS detected" in out
        assert "npm install -g @devcontainers/cli" in out
