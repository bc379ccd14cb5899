"""
出力フォーマットモジュール

色付きのヘッダー、セクション、重要度付きメッセージ、プログレスバーを
Richのマークアップ文字列として組み立て、コンソールに出力します。
format_*関数は副作用のない純粋関数です。
"""

from __future__ import annotations

from enum import Enum

from rich.console import Console
from rich.markup import escape

# Richコンソールのインスタンスを作成（カラフルな出力用）
console = Console(highlight=False)

HEADER_WIDTH = 60
PROGRESS_WIDTH = 30
PROGRESS_FULL = "█"


class Severity(str, Enum):
    """メッセージの重要度"""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SECTION = "section"


# 重要度ごとの (スタイル, 記号)
_SEVERITY_STYLES: dict[Severity, tuple[str, str]] = {
    Severity.SUCCESS: ("green", "✓"),
    Severity.ERROR: ("red", "✗"),
    Severity.WARNING: ("yellow", "⚠"),
    Severity.INFO: ("blue", "ℹ"),
    Severity.SECTION: ("bold cyan", "▶"),
}


def format_message(message: str, severity: Severity) -> str:
    """
    メッセージに重要度の記号と色を付ける。

    Args:
        message: 表示するメッセージ（マークアップはエスケープされる）
        severity: メッセージの重要度

    Returns:
        Richのマークアップ文字列
    """
    style, symbol = _SEVERITY_STYLES[severity]
    return f"[{style}]{symbol} {escape(message)}[/]"


def format_header(title: str) -> list[str]:
    """
    タイトルを罫線の箱で囲んだヘッダー行を返す。

    タイトルが箱の幅を超える場合は箱が広がる。
    """
    inner = max(HEADER_WIDTH, len(title) + 2)
    padded = escape(title.ljust(inner - 2))
    return [
        f"[cyan]╔{'═' * inner}╗[/]",
        f"[cyan]║[/] [bold white]{padded}[/] [cyan]║[/]",
        f"[cyan]╚{'═' * inner}╝[/]",
    ]


def format_progress(message: str, width: int = PROGRESS_WIDTH) -> str:
    """完了済みのプログレスバーとメッセージを返す。"""
    bar = PROGRESS_FULL * width
    return f"[magenta]\\[[/]{bar}[magenta]][/] [green]100%[/] {escape(message)}"


def print_header(title: str) -> None:
    console.print()
    for line in format_header(title):
        console.print(line)
    console.print()


def print_section(message: str) -> None:
    console.print(format_message(message, Severity.SECTION))


def print_success(message: str) -> None:
    console.print(format_message(message, Severity.SUCCESS))


def print_error(message: str) -> None:
    console.print(format_message(message, Severity.ERROR))


def print_warning(message: str) -> None:
    console.print(format_message(message, Severity.WARNING))


def print_info(message: str) -> None:
    console.print(format_message(message, Severity.INFO))


def print_progress(message: str) -> None:
    console.print(format_progress(message))


def print_step(message: str) -> None:
    """記号なしの黄色い進行メッセージを出力する。"""
    console.print(f"[yellow]{escape(message)}[/]")


def print_detail(text: str, indent: str = "  ") -> None:
    """外部ツールの出力などを各行インデントして出力する。"""
    for line in text.splitlines():
        console.print(f"{indent}{escape(line)}")
