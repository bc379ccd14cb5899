"""
ユーティリティ関数

共通で使用される汎用的な関数を提供します。
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, cast

import json5
from rich.markup import escape

from .output import console


def _truncate_output(output: str, max_length: int = 200) -> str:
    """
    長い出力を切り詰めて表示用に整形する。

    Args:
        output: 元の出力文字列
        max_length: 最大文字数

    Returns:
        切り詰められた文字列
    """
    if len(output) > max_length:
        return f"{output[:max_length]}..."
    return output


def run_command(
    cmd: list[str],
    check: bool = False,
    capture_output: bool = True,
    text: bool = True,
    verbose: bool = False,
) -> subprocess.CompletedProcess[str]:
    """
    コマンドを実行し、結果を返す。

    capture_output=Falseの場合、外部ツールの出力はそのまま端末に流れる。

    Args:
        cmd: 実行するコマンドのリスト
        check: エラー時に例外を発生させるかどうか
        capture_output: 出力をキャプチャするかどうか
        text: テキストモードで実行するかどうか
        verbose: 詳細なデバッグ情報を表示するかどうか

    Returns:
        コマンドの実行結果
    """
    if verbose:
        console.print(f"[cyan]Running:[/cyan] {escape(' '.join(cmd))}")
    result = subprocess.run(cmd, check=check, capture_output=capture_output, text=text)

    if verbose:
        console.print(f"[dim]debug: returncode={result.returncode}[/dim]")
        if result.stdout:
            console.print(f"[dim]stdout: {escape(_truncate_output(result.stdout))}[/dim]")
        if result.stderr:
            console.print(f"[dim]stderr: {escape(_truncate_output(result.stderr))}[/dim]")

    return result


def load_json_file(file_path: Path) -> dict[str, Any]:
    """
    JSONまたはJSONCファイルを安全に読み込む。

    devcontainer.jsonのようなコメント付きJSONもサポートします。
    エラーが発生した場合は警告を表示し、空の辞書を返す。

    Args:
        file_path: 読み込むJSONファイルのパス

    Returns:
        パースされたJSON（辞書）、エラーの場合は空の辞書
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            content = f.read()
        if not content.strip():
            return {}
        data = json5.loads(content)
    except FileNotFoundError:
        console.print(f"[yellow]Warning: File not found: {escape(str(file_path))}[/yellow]")
        return {}
    except ValueError as e:
        console.print(
            f"[yellow]Warning: Invalid JSON in {escape(str(file_path))}: {escape(str(e))}[/yellow]"
        )
        return {}
    except OSError as e:
        console.print(
            f"[yellow]Warning: Could not load {escape(str(file_path))}: {escape(str(e))}[/yellow]"
        )
        return {}

    # トップレベルがオブジェクトでない場合は設定として扱わない
    if not isinstance(data, dict):
        return {}
    return cast(dict[str, Any], data)


def find_devcontainer_json(workspace: Path) -> Path | None:
    """
    ワークスペース内のdevcontainer.jsonファイルを検索する。

    以下の順序で検索:
    1. .devcontainer/devcontainer.json
    2. devcontainer.json (ルート)

    Args:
        workspace: 検索するワークスペースのパス

    Returns:
        見つかったdevcontainer.jsonのパス、見つからない場合はNone
    """
    candidates = [
        workspace / ".devcontainer" / "devcontainer.json",
        workspace / "devcontainer.json",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


def get_devcontainer_name(config_path: Path) -> str | None:
    """devcontainer.jsonの"name"を返す。未定義の場合はNone。"""
    name = load_json_file(config_path).get("name")
    if isinstance(name, str) and name.strip():
        return name.strip()
    return None
