"""
Tests for the command line front end.

Run with:
    pytest test_main.py -v
"""

from colorama import Style

import main
from CubeSolver import verify_solution
from Facelet_to_Cube import SOLVED_FACELETS

R_FACELETS = "UUFUUFUUFRRRRRRRRRFFDFFDFFDDDBDDBDDBLLLLLLLLLUBBUBBUBB"


def printed_moves(output):
    for line in output.splitlines():
        if line.startswith("Moves:"):
            return line.split(":", 1)[1].split()
    return None


def test_solve_scramble_tokens(capsys):
    assert main.main(["R", "U", "R'", "U'"]) == main.EXIT_SOLVED
    out = capsys.readouterr().out
    assert "RUBIK'S CUBE SOLVER" in out
    assert "Scramble: R U R' U'" in out
    moves = printed_moves(out)
    assert moves
    assert verify_solution("R U R' U'", moves)


def test_solve_quoted_scramble(capsys):
    assert main.main(["R"]) == main.EXIT_SOLVED
    assert printed_moves(capsys.readouterr().out) == ["R", "R2"]


def test_already_solved(capsys):
    assert main.main([""]) == main.EXIT_SOLVED
    out = capsys.readouterr().out
    assert "already solved" in out
    assert "Length: 0 moves" in out


def test_invalid_scramble(capsys):
    assert main.main(["R", "X"]) == main.EXIT_INVALID_INPUT
    assert "Unknown move 'X'" in capsys.readouterr().out


def test_missing_input(capsys):
    assert main.main([]) == main.EXIT_INVALID_INPUT
    assert main.main(["R", "--facelets", SOLVED_FACELETS]) == main.EXIT_INVALID_INPUT
    assert main.main(["--facelets", SOLVED_FACELETS, "--fallback"]) == main.EXIT_INVALID_INPUT


def test_facelets(capsys):
    assert main.main(["--facelets", R_FACELETS]) == main.EXIT_SOLVED
    assert printed_moves(capsys.readouterr().out) == ["R", "R2"]

    assert main.main(["--facelets", "UUUU"]) == main.EXIT_INVALID_INPUT
    assert "54 stickers" in capsys.readouterr().out


def test_fallback(capsys):
    assert main.main(["R", "--fallback", "--seed", "3"]) == main.EXIT_SOLVED
    out = capsys.readouterr().out
    assert "FALLBACK SOLUTION" in out
    assert printed_moves(out) in (["R", "R2"], ["R2", "R"])


def test_generate(capsys):
    assert main.main(["--generate", "12", "--seed", "1"]) == main.EXIT_SOLVED
    first = capsys.readouterr().out.strip()
    assert len(first.split()) == 12

    main.main(["--generate", "12", "--seed", "1"])
    assert capsys.readouterr().out.strip() == first

    assert main.main(["--generate"]) == main.EXIT_SOLVED
    assert len(capsys.readouterr().out.split()) == 25

    assert main.main(["--generate", "-3"]) == main.EXIT_INVALID_INPUT


def test_show(capsys):
    assert main.main(["R", "--show"]) == main.EXIT_SOLVED
    out = capsys.readouterr().out
    assert Style.RESET_ALL in out
    assert main.FACE_COLORS["F"] in out


def test_no_solution(monkeypatch, capsys):
    monkeypatch.setattr(main.CubeSolver, "solve_with_fallback", lambda self, scramble: None)
    assert main.main(["R", "U"]) == main.EXIT_NO_SOLUTION
    assert "No solution found" in capsys.readouterr().out
