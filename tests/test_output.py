"""
出力フォーマットのテスト
"""

from devcontainer_toolkit.output import (
    HEADER_WIDTH,
    Severity,
    format_header,
    format_message,
    format_progress,
)


class TestFormatMessage:
    """format_message関数のテスト"""

    def test_each_severity_has_symbol_and_color(self):
        """重要度ごとに記号と色が付く"""
        assert format_message("Docker is installed", Severity.SUCCESS) == (
            "[green]✓ Docker is installed[/]"
        )
        assert format_message("Docker is NOT installed", Severity.ERROR) == (
            "[red]✗ Docker is NOT installed[/]"
        )
        assert format_message("Docker daemon is NOT running", Severity.WARNING) == (
            "[yellow]⚠ Docker daemon is NOT running[/]"
        )
        assert format_message("Run help", Severity.INFO) == "[blue]ℹ Run help[/]"
        assert format_message("Verifying", Severity.SECTION) == "[bold cyan]▶ Verifying[/]"

    def test_markup_in_message_is_escaped(self):
        """メッセージ内のマークアップはエスケープされる"""
        result = format_message("value [bold]x[/bold]", Severity.INFO)

        assert "\\[bold]" in result
        assert result.startswith("[blue]ℹ ")


class TestFormatHeader:
    """format_header関数のテスト"""

    def test_header_is_three_lines_of_same_width(self):
        """ヘッダーは同じ幅の3行"""
        lines = format_header("Dependency Check")

        assert len(lines) == 3
        assert lines[0] == f"[cyan]╔{'═' * HEADER_WIDTH}╗[/]"
        assert lines[2] == f"[cyan]╚{'═' * HEADER_WIDTH}╝[/]"
        assert "Dependency Check" in lines[1]

    def test_long_title_widens_box(self):
        """長いタイトルでは箱が広がる"""
        title = "x" * (HEADER_WIDTH + 10)
        lines = format_header(title)

        assert lines[0].count("═") == HEADER_WIDTH + 12
        assert title in lines[1]


class TestFormatProgress:
    """format_progress関数のテスト"""

    def test_progress_bar_is_full(self):
        """プログレスバーは常に100%"""
        result = format_progress("Dev container stopped", width=5)

        assert "█████" in result
        assert "100%" in result
        assert result.endswith("Dev container stopped")
