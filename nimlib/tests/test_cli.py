"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import load_rules, main
from ..spec_schema.rules import NimRule, Split, TakeSize
from ..spec_schema.validation import RuleSetValidationError


class TestSplitsCommand:
    """The splits subcommand."""

    def test_table(self, capsys):
        """Splits print as aligned "left + right" lines."""
        main(["splits", "12"])
        lines = capsys.readouterr().out.splitlines()

        assert lines[0] == "Splits for height 12:"
        assert lines[1] == "1 + 11"
        assert lines[-1] == "6 +  6"
        assert len(lines) == 7

    def test_csv(self, capsys):
        """--csv prints a header and one pair per line."""
        main(["splits", "5", "--csv"])
        assert capsys.readouterr().out == "left,right\n1,4\n2,3\n"

    def test_no_splits(self, capsys):
        """Unsplittable heights say so."""
        main(["splits", "1"])
        assert capsys.readouterr().out == "No splits for height 1\n"

    def test_negative_height_rejected(self):
        """Negative heights are an argument error."""
        with pytest.raises(SystemExit):
            main(["splits", "-3"])


class TestNimberCommand:
    """The nimber subcommand."""

    def test_default_rules(self, capsys):
        """Without --rules the take-1-2-or-3 game is used."""
        main(["nimber", "10"])
        assert capsys.readouterr().out == "10: 2\n"

    def test_several_heights(self, capsys):
        """Several heights also print the game nimber."""
        rules = '[{"take": {"List": [2, 3]}, "split": "Never"}]'
        main(["nimber", "4", "7", "--rules", rules])

        assert capsys.readouterr().out == "4: 2\n7: 1\nGame nimber: 3\n"

    def test_rules_from_file(self, capsys, tmp_path):
        """--rules accepts a path to a JSON file."""
        path = tmp_path / "rules.json"
        path.write_text('[{"take": "Any", "split": "Never"}]')

        main(["nimber", "6", "-r", str(path)])
        assert capsys.readouterr().out == "6: 6\n"

    def test_bad_rules_exit(self, capsys):
        """Invalid rules print an error and exit with 1."""
        with pytest.raises(SystemExit) as exc_info:
            main(["nimber", "4", "--rules", '[{"take": "Place", "split": "Always"}]'])

        assert exc_info.value.code == 1
        assert capsys.readouterr().out.startswith("Error:")


class TestMovesCommand:
    """The moves subcommand."""

    def test_lists_moves(self, capsys):
        """Moves print one per line in generation order."""
        main(["moves", "2", "1"])
        assert capsys.readouterr().out.splitlines() == [
            "take 1 from stack 0",
            "take 2 from stack 0",
            "take 1 from stack 1",
        ]

    def test_place_moves(self, capsys):
        """Pool options enable place moves."""
        rules = '[{"take": "Place"}]'
        main(["moves", "0", "--rules", rules, "--pool-b", "1"])
        assert capsys.readouterr().out == "place 1 on stack 0 from pool B\n"

    def test_terminal_position(self, capsys):
        """Positions without moves say so."""
        main(["moves", "0", "0"])
        assert capsys.readouterr().out == "No legal moves\n"


class TestMakeRuleSetCommand:
    """The make-rule-set subcommand."""

    def test_make_rule_set(self, capsys):
        """Flags become rules in the fixed order."""
        main(["make-rule-set", "-n", "1", "2", "-a", "3", "-s", "optional", "-p"])
        out = capsys.readouterr().out

        header, body = out.split("\n", 1)
        assert header == "Made rule set:"
        assert json.loads(body) == [
            {"take": {"List": [1, 2]}, "split": "Never"},
            {"take": {"List": [3]}, "split": "Always"},
            {"take": "Any", "split": "Optional"},
            {"take": "Place", "split": "Never"},
        ]

    def test_output_loads_back(self, capsys):
        """Printed JSON loads back as the same rules."""
        main(["make-rule-set", "-o", "1", "2", "-P"])
        body = capsys.readouterr().out.split("\n", 1)[1]

        assert list(load_rules(body)) == [NimRule(TakeSize.list([1, 2]), Split.OPTIONAL)]

    def test_rejects_zero_amount(self):
        """Take amounts must be positive."""
        with pytest.raises(SystemExit):
            main(["make-rule-set", "-n", "0"])


class TestLoadRules:
    """Rule loading from JSON text or files."""

    def test_default(self, simple_rules):
        """None gives the take-1-2-or-3 rules."""
        assert load_rules(None) == simple_rules

    def test_invalid_json(self):
        """Malformed JSON raises RuleSetValidationError."""
        with pytest.raises(RuleSetValidationError):
            load_rules("{nope")


def test_no_command(capsys):
    """Running without a subcommand exits with 1."""
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
