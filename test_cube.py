"""
Tests for the cube state model and move engine.

Run with:
    pytest test_cube.py -v
"""

import random

import pytest

from Cube import (CubeState, FACE_AXIS, InvalidCubeStateError, InvalidMoveError, Move,
                  MOVE_INVERSE, SOLVED_STATE, apply_move, apply_moves, format_moves,
                  generate_scramble, invert_moves, parse_moves, permutation_parity)

QUARTER_TURNS = [m for m in Move if m.is_quarter_turn]
SAMPLE_SCRAMBLES = ["", "R U F' L2 D B", "F2 B' L D2 R' U", generate_scramble(25, random.Random(11))]


def test_move_set():
    assert len(Move) == 18
    assert [str(m) for m in Move][:6] == ["U", "U'", "U2", "D", "D'", "D2"]
    assert Move.R_PRIME == "R'"
    assert Move.parse("F2") is Move.F2
    assert Move.R.inverse is Move.R_PRIME
    assert Move.B2.inverse is Move.B2
    assert MOVE_INVERSE[Move.D_PRIME] is Move.D


@pytest.mark.parametrize("move", QUARTER_TURNS, ids=str)
def test_quarter_turn_has_order_four(move):
    for scramble in SAMPLE_SCRAMBLES:
        start = apply_moves(SOLVED_STATE, scramble)
        state = start
        for _ in range(4):
            state = apply_move(state, move)
        assert state == start, f"{move} applied four times changed {scramble!r}"


@pytest.mark.parametrize("move", list(Move), ids=str)
def test_move_then_inverse_round_trip(move):
    for scramble in SAMPLE_SCRAMBLES:
        start = apply_moves(SOLVED_STATE, scramble)
        assert apply_move(apply_move(start, move), move.inverse) == start


@pytest.mark.parametrize("face", "UDLRFB")
def test_half_and_prime_turns_compose_from_quarter_turns(face):
    quarter = Move(face)
    twice = apply_move(apply_move(SOLVED_STATE, quarter), quarter)
    assert twice == apply_move(SOLVED_STATE, Move(face + "2"))
    assert apply_move(twice, quarter) == apply_move(SOLVED_STATE, Move(face + "'"))


def test_r_turn_cubies():
    state = apply_move(SOLVED_STATE, Move.R)
    assert state.corner_perm == (4, 1, 2, 0, 7, 5, 6, 3)
    assert state.corner_ori == (2, 0, 0, 1, 1, 0, 0, 2)
    assert state.edge_perm == (4, 1, 2, 3, 8, 5, 6, 0, 7, 9, 10, 11)
    assert state.edge_ori == (0,) * 12


def test_orientation_changes_only_where_expected():
    for face in "UD":
        state = apply_move(SOLVED_STATE, face)
        assert not any(state.corner_ori) and not any(state.edge_ori)
    for face in "LR":
        state = apply_move(SOLVED_STATE, face)
        assert sum(1 for o in state.corner_ori if o) == 4
        assert not any(state.edge_ori)
    for face in "FB":
        state = apply_move(SOLVED_STATE, face)
        assert sum(1 for o in state.corner_ori if o) == 4
        assert sum(state.edge_ori) == 4
    for move in Move:
        if not move.is_quarter_turn:
            state = apply_move(SOLVED_STATE, move)
            assert not any(state.corner_ori) and not any(state.edge_ori), f"{move} changed orientation"


def test_apply_returns_new_state():
    state = CubeState.solved()
    turned = state.apply(Move.F)
    assert state == SOLVED_STATE
    assert turned != state
    assert turned == apply_moves(SOLVED_STATE, [Move.F])
    assert hash(state.apply_all("F F'")) == hash(SOLVED_STATE)


def test_scramble_then_inverse_is_solved():
    rng = random.Random(5)
    for _ in range(5):
        scramble = generate_scramble(30, rng)
        state = apply_moves(SOLVED_STATE, scramble)
        assert state.is_solvable()
        assert apply_moves(state, invert_moves(parse_moves(scramble))).is_solved()


def test_invert_moves():
    assert invert_moves(["R", "U2", "F'"]) == [Move.F, Move.U2, Move.R_PRIME]
    assert format_moves(invert_moves(parse_moves("R U R' U'"))) == "U R U' R'"
    assert invert_moves([]) == []


def test_parse_moves():
    assert parse_moves("  R   U2\tF' ") == [Move.R, Move.U2, Move.F_PRIME]
    assert parse_moves("") == []


def test_unknown_move_is_rejected():
    with pytest.raises(InvalidMoveError) as excinfo:
        parse_moves("R U X F")
    assert excinfo.value.token == "X"
    assert excinfo.value.position == 2
    assert isinstance(excinfo.value, ValueError)

    with pytest.raises(InvalidMoveError):
        apply_move(SOLVED_STATE, "r")
    with pytest.raises(InvalidMoveError):
        apply_moves(SOLVED_STATE, "R U3")


def test_generate_scramble():
    scramble = generate_scramble(25, random.Random(3))
    moves = parse_moves(scramble)
    assert len(moves) == 25
    for previous, current in zip(moves, moves[1:]):
        assert FACE_AXIS[previous.face] != FACE_AXIS[current.face], scramble

    assert generate_scramble(10, random.Random(9)) == generate_scramble(10, random.Random(9))
    assert generate_scramble(0) == ""
    with pytest.raises(ValueError):
        generate_scramble(-1)


def test_permutation_parity():
    assert permutation_parity(range(8)) == 0
    assert permutation_parity([1, 0, 2, 3]) == 1
    assert permutation_parity([1, 2, 0]) == 0


def test_from_arrays_validation():
    state = apply_moves(SOLVED_STATE, "R U F'")
    rebuilt = CubeState.from_arrays(list(state.corner_perm), list(state.edge_perm),
                                    list(state.corner_ori), list(state.edge_ori))
    assert rebuilt == state

    # two corners swapped on their own: odd corner parity, even edge parity
    swapped = [1, 0, 2, 3, 4, 5, 6, 7]
    with pytest.raises(InvalidCubeStateError):
        CubeState.from_arrays(swapped, range(12), [0] * 8, [0] * 12)
    assert not CubeState.from_arrays(swapped, range(12), [0] * 8, [0] * 12,
                                     check_solvable=False).is_solvable()

    with pytest.raises(InvalidCubeStateError):
        CubeState.from_arrays(range(8), range(12), [1, 0, 0, 0, 0, 0, 0, 0], [0] * 12)
    with pytest.raises(InvalidCubeStateError):
        CubeState.from_arrays([0, 0, 2, 3, 4, 5, 6, 7], range(12), [0] * 8, [0] * 12)
    with pytest.raises(InvalidCubeStateError):
        CubeState.from_arrays(range(8), range(11), [0] * 8, [0] * 11)
    with pytest.raises(InvalidCubeStateError):
        CubeState.from_arrays(range(8), range(12), [3, 0, 0, 0, 0, 0, 0, 0], [0] * 12)
