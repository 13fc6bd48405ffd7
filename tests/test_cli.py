"""Integration tests for the CLI main() function."""

from __future__ import annotations

import argparse
import io
import json
import sys

import pytest

from quizrank.cli import main, parse_emphasis, read_answers
from quizrank.engine.scoring import WeightCategory


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _run_main(args: list[str], capsys) -> tuple[int, str, str]:
    """Run main() and return (exit_code, stdout, stderr)."""
    code = main(args)
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def _result_slugs(out: str) -> list[str]:
    return [r["slug"] for r in json.loads(out)["results"]]


# ---------------------------------------------------------------------------
# Answer and emphasis parsing
# ---------------------------------------------------------------------------

class TestReadAnswers:

    def test_arguments(self) -> None:
        assert read_answers(["Beginner", "grow"]) == ["beginner", "grow"]

    def test_commas_and_stdin(self) -> None:
        assert read_answers(["crypto,fees"], "tools\nwhale ") == ["crypto", "fees", "tools", "whale"]

    def test_empty(self) -> None:
        assert read_answers([], "  \n") == []


class TestParseEmphasis:

    def test_valid(self) -> None:
        emphasis = parse_emphasis("crypto=2, low_fee=0.5")
        assert emphasis == {WeightCategory.CRYPTO: 2.0, WeightCategory.LOW_FEE: 0.5}

    def test_unknown_category(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError, match="Invalid emphasis"):
            parse_emphasis("stocks=1")

    def test_bad_number(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError, match="Invalid number"):
            parse_emphasis("crypto=lots")


# ---------------------------------------------------------------------------
# Basic invocations with the bundled data
# ---------------------------------------------------------------------------

class TestMainBundledData:

    def test_terminal_output(self, capsys) -> None:
        code, out, err = _run_main(["crypto", "--no-color"], capsys)
        assert code == 0
        assert "Swyftx" in out

    def test_json_crypto_ranking(self, capsys) -> None:
        """Crypto-heavy weights put the exchanges first."""
        code, out, err = _run_main(["crypto", "-f", "json"], capsys)

        assert code == 0
        assert _result_slugs(out) == ["swyftx", "coinspot", "superhero"]

    def test_campaign_slug_moves_up(self, capsys) -> None:
        code, out, err = _run_main(["crypto", "-f", "json", "--campaign", "coinspot"], capsys)

        assert code == 0
        assert _result_slugs(out) == ["coinspot", "swyftx", "superhero"]
        assert json.loads(out)["promotions"][0]["kind"] == "campaign"

    def test_campaign_winners_file(self, tmp_path, capsys) -> None:
        path = tmp_path / "winners.json"
        path.write_text(json.dumps([{"broker_slug": "superhero"}]), encoding="utf-8")

        code, out, err = _run_main(
            ["crypto", "-f", "json", "--campaign-winners", str(path)], capsys
        )

        assert code == 0
        assert _result_slugs(out) == ["swyftx", "superhero", "coinspot"]

    def test_limit(self, capsys) -> None:
        code, out, err = _run_main(["beginner", "-f", "json", "-n", "5"], capsys)

        assert code == 0
        assert len(json.loads(out)["results"]) == 5

    def test_breakdown_in_json(self, capsys) -> None:
        code, out, err = _run_main(["crypto", "-f", "json", "--breakdown"], capsys)

        assert code == 0
        assert all("breakdown" in r for r in json.loads(out)["results"])

    def test_markdown_stdout(self, capsys) -> None:
        code, out, err = _run_main(["fees", "-f", "markdown"], capsys)

        assert code == 0
        assert "# Broker Quiz Results" in out

    def test_markdown_output_file(self, tmp_path, capsys) -> None:
        report = tmp_path / "results.md"

        code, out, err = _run_main(["fees", "-f", "markdown", "-o", str(report)], capsys)

        assert code == 0
        assert report.read_text(encoding="utf-8").startswith("# Broker Quiz Results")
        assert "Report saved to" in err

    def test_verbose_reports_inputs(self, capsys) -> None:
        code, out, err = _run_main(["grow", "-f", "json", "-v"], capsys)

        assert code == 0
        assert "Answers: grow" in err
        assert "Loaded 12 weight records, 12 brokers" in err


# ---------------------------------------------------------------------------
# Custom data files
# ---------------------------------------------------------------------------

class TestMainCustomData:

    def _write_data(self, tmp_path, category: str) -> list[str]:
        weights = tmp_path / "weights.json"
        weights.write_text(json.dumps({
            "alpha": {category: 3},
            "beta": {category: 9},
        }), encoding="utf-8")
        brokers = tmp_path / "brokers.json"
        brokers.write_text(json.dumps([
            {"slug": "alpha", "name": "Alpha", "rating": 4.0},
            {"slug": "beta", "name": "Beta", "rating": 4.0},
        ]), encoding="utf-8")
        return ["-f", "json", "-w", str(weights), "-b", str(brokers)]

    def test_weights_and_brokers_files(self, tmp_path, capsys) -> None:
        """'large' maps to us_shares, so the higher us_shares weight wins."""
        code, out, err = _run_main(["large"] + self._write_data(tmp_path, "us_shares"), capsys)

        assert code == 0
        assert _result_slugs(out) == ["beta", "alpha"]

    def test_category_name_is_not_an_answer(self, tmp_path, capsys) -> None:
        """No answer token maps to smsf; 'smsf' falls back to beginner.

        Both brokers then score 0 with equal ratings and order by name.
        """
        code, out, err = _run_main(["smsf"] + self._write_data(tmp_path, "smsf"), capsys)

        assert code == 0
        assert _result_slugs(out) == ["alpha", "beta"]
        assert all(r["total"] == 0 for r in json.loads(out)["results"])

    def test_invalid_json_reports_error(self, tmp_path, capsys) -> None:
        weights = tmp_path / "weights.json"
        weights.write_text("{broken", encoding="utf-8")

        code, out, err = _run_main(["grow", "-w", str(weights)], capsys)

        assert code == 1
        assert "QuizDataError" in err
        assert "--verbose" in err


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

class TestMainSimulate:

    def test_simulation_in_json(self, capsys) -> None:
        code, out, err = _run_main(["--simulate", "crypto=1", "-f", "json"], capsys)

        assert code == 0
        simulation = json.loads(out)["simulation"]
        assert [s["slug"] for s in simulation[:2]] == ["swyftx", "coinspot"]
        assert len(simulation) == 3

    def test_simulation_follows_limit(self, capsys) -> None:
        code, out, err = _run_main(["--simulate", "crypto=1", "-f", "json", "-n", "6"], capsys)

        assert code == 0
        assert len(json.loads(out)["simulation"]) == 6

    def test_simulation_terminal(self, capsys) -> None:
        code, out, err = _run_main(["--simulate", "crypto=1", "--no-color"], capsys)

        assert code == 0
        assert "Weight Simulation" in out

    def test_invalid_emphasis(self, capsys) -> None:
        code, out, err = _run_main(["--simulate", "nonsense"], capsys)

        assert code == 1
        assert "Invalid emphasis" in err


# ---------------------------------------------------------------------------
# Stdin input
# ---------------------------------------------------------------------------

class TestMainStdin:

    def test_piped_answers(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(sys, "stdin", io.StringIO("crypto\n"))

        code, out, err = _run_main(["-f", "json"], capsys)

        assert code == 0
        assert json.loads(out)["answers"] == ["crypto"]
        assert _result_slugs(out)[0] == "swyftx"

    def test_no_answers_ranks_by_rating(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(sys, "stdin", io.StringIO(""))

        code, out, err = _run_main(["-f", "json"], capsys)

        assert code == 0
        results = json.loads(out)["results"]
        assert all(r["total"] == 0 for r in results)


# ---------------------------------------------------------------------------
# Error paths and informational flags
# ---------------------------------------------------------------------------

class TestMainErrors:

    def test_missing_weights_file(self, tmp_path, capsys) -> None:
        code, out, err = _run_main(["grow", "-w", str(tmp_path / "absent.json")], capsys)

        assert code == 1
        assert "Weights file not found" in err

    def test_directory_as_brokers_file(self, tmp_path, capsys) -> None:
        code, out, err = _run_main(["grow", "-b", str(tmp_path)], capsys)

        assert code == 1
        assert "not a file" in err

    def test_limit_below_one(self, capsys) -> None:
        code, out, err = _run_main(["grow", "--limit", "0"], capsys)

        assert code == 1
        assert "--limit" in err

    def test_output_file_rejected_for_terminal(self, tmp_path, capsys) -> None:
        report = tmp_path / "results.txt"

        code, out, err = _run_main(["grow", "-o", str(report)], capsys)

        assert code == 1
        assert "--output requires" in err
        assert not report.exists()

    def test_campaign_options_are_exclusive(self, tmp_path, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["grow", "--campaign", "stake", "--campaign-winners", str(tmp_path)])
        assert exc_info.value.code == 2

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "quizrank" in capsys.readouterr().out

    def test_list_answers(self, capsys) -> None:
        code, out, err = _run_main(["--list-answers", "--no-color"], capsys)

        assert code == 0
        assert "beginner" in out
        assert "whale" in out
