"""
Unit tests for the interactive identifier checker.
"""

from respira_access import cli
from respira_access.models import MaskKind


def test_describe_valid_and_invalid():
    assert cli.describe("52998224725", MaskKind.CPF) == "[ok] 529.982.247-25 (normalized: 52998224725)"
    assert "reason: checksum" in cli.describe("12345678900", MaskKind.CPF)
    assert "(empty)" in cli.describe("", MaskKind.CEP)


def test_main_loop(monkeypatch, capsys):
    answers = iter(["rg", "phone", "11998887766", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    cli.main()
    out = capsys.readouterr().out
    assert "Unsupported mask kind" in out
    assert "(11) 99888-7766" in out
    assert "Goodbye." in out
