"""Tests for easy_release.output.console module."""

import pytest

from easy_release.output.console import MockConsole, RichConsole, Style


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()
        console.print("plain")
        console.success("done")
        console.error("broken")
        console.header("Section")
        console.newline()

        assert console.messages == [
            "plain",
            "✓ done",
            "error: broken",
            "Section",
            "",
        ]
        assert console.outputs[1].style == Style.SUCCESS
        assert console.outputs[2].style == Style.ERROR
        assert console.outputs[3].style == Style.HEADER

    def test_helpers(self) -> None:
        console = MockConsole()
        console.print("first")
        console.error("second")
        console.print("third", Style.ERROR)

        assert console.index_of("second") == 1
        assert console.index_of("missing") == -1
        assert len(console.find("ir")) == 2
        assert console.text == "first\nerror: second\nthird"


class TestRichConsole:
    def test_markup_in_messages_is_not_interpreted(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        console = RichConsole()
        console.print("[bold]literal[/bold]")
        console.error("bad [value]")

        out = capsys.readouterr().out
        assert "[bold]literal[/bold]" in out
        assert "error: bad [value]" in out

    def test_success_symbol(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().success("Tests pass")
        assert "✓ Tests pass" in capsys.readouterr().out
