from __future__ import annotations

import json

from tools.cli import solve as cli

PUZZLE = "530070000600195000098000060800060003400803001700020006060000280000419005000080079"
UNSATISFIABLE = "12345678" + "0" * 36 + "9" + "0" * 36


def test_solve_prints_grid_and_exits_zero(capsys) -> None:
    assert cli.main(["solve", PUZZLE]) == cli.EXIT_SOLVED
    out = capsys.readouterr().out
    assert "| 5 3 4 | 6 7 8 | 9 1 2 |" in out
    assert out.strip().splitlines()[-1].startswith("solved")


def test_solve_json_with_trace(capsys) -> None:
    assert cli.main(["solve", PUZZLE, "--format", "json", "--trace"]) == cli.EXIT_SOLVED
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "solved"
    assert payload["trace"]


def test_solve_reads_file_and_reports_unsatisfiable(tmp_path, capsys) -> None:
    path = tmp_path / "puzzle.txt"
    path.write_text(UNSATISFIABLE, encoding="utf-8")
    assert cli.main(["solve", "--file", str(path)]) == cli.EXIT_UNSATISFIABLE
    assert "unsatisfiable" in capsys.readouterr().out


def test_invalid_puzzle_exit_code(capsys) -> None:
    assert cli.main(["solve", "99" + "0" * 79]) == cli.EXIT_INVALID
    assert capsys.readouterr().out.startswith("invalid:")


def test_batch_skips_comments(tmp_path, capsys) -> None:
    path = tmp_path / "puzzles.txt"
    path.write_text(f"# corpus\n{PUZZLE}\n\n{UNSATISFIABLE}\n", encoding="utf-8")
    assert cli.main(["batch", str(path)]) == cli.EXIT_UNSATISFIABLE
    payloads = json.loads(capsys.readouterr().out)
    assert [payload["status"] for payload in payloads] == ["solved", "unsatisfiable"]


def test_check_reports_conflicts(capsys) -> None:
    assert cli.main(["check", PUZZLE]) == cli.EXIT_SOLVED
    assert capsys.readouterr().out.strip() == "valid"
    assert cli.main(["check", "55" + "0" * 79]) == cli.EXIT_INVALID
    assert cli.main(["check", "5" * 3]) == cli.EXIT_INVALID
