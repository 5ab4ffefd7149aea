"""
Rubik's Cube Solver - Command Line Application

Solves a scramble (or a cube given sticker by sticker) with the two-phase
IDA* solver, falling back to the randomized search when the two-phase solver
fails or only finds the scramble undone move by move.

Usage:
    python main.py R U "R'" "U'"
    python main.py "R U R' U'" --show
    python main.py --facelets UUFUUFUUFRRRRRRRRRFFDFFDFFDDDBDDBDDBLLLLLLLLLUBBUBBUBB
    python main.py --generate 20 --seed 7
    python main.py "R U" --fallback --seed 3

Options:
    --facelets   Solve a 54-sticker facelet string instead of a scramble
    --generate   Print a random scramble (default 25 moves) and exit
    --fallback   Only run the randomized fallback search
    --seed       Seed for the fallback search and the scramble generator
    --show       Print the scrambled cube as a coloured net
    -v           More logging (-v INFO, -vv DEBUG)
"""

import argparse
import logging
import random
import time

import colorama
from colorama import Back, Style

from Cube import InvalidCubeStateError, InvalidMoveError, format_moves, generate_scramble
from CubeSolver import CubeSolver, apply_scramble
from Facelet_to_Cube import facelet_grid, facelets_to_cube

# Exit codes
EXIT_SOLVED = 0
EXIT_NO_SOLUTION = 1
EXIT_INVALID_INPUT = 2

# Sticker colours for the net (no orange in colorama, magenta stands in)
FACE_COLORS = {
    'U': Back.WHITE,
    'L': Back.MAGENTA,
    'F': Back.GREEN,
    'R': Back.RED,
    'B': Back.BLUE,
    'D': Back.YELLOW,
}
BLOCK = "  "


def print_cube(state):
    """
    Print the unfolded cube as coloured blocks.

    Args:
        state: CubeState to draw
    """
    grid = facelet_grid(state)
    print()
    for row in grid:
        line = ""
        for sticker in row:
            if sticker == " ":
                line += BLOCK
            else:
                line += f"{FACE_COLORS[sticker]}{BLOCK}{Style.RESET_ALL}"
        print(line.rstrip())
    print()


def print_solution(moves, elapsed, label="SOLUTION"):
    print(f"\n{'=' * 50}")
    print(label)
    print("=" * 50)
    if moves:
        print(f"\nMoves:  {format_moves(moves)}")
    else:
        print("\nCube is already solved.")
    print(f"Length: {len(moves)} moves")
    print(f"Time:   {elapsed:.2f} s")
    print("=" * 50)


def configure_logging(verbosity):
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="cube-solver",
        description="Rubik's Cube Two-Phase IDA* Solver",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        'scramble',
        nargs='*',
        help="Scramble moves, e.g. R U \"R'\" U' or one quoted string"
    )
    parser.add_argument(
        '--facelets',
        metavar='STRING',
        help='Solve a 54-sticker facelet string (faces in URFDLB order)'
    )
    parser.add_argument(
        '--generate',
        nargs='?',
        const=25,
        type=int,
        metavar='N',
        help='Print a random scramble of N moves (default 25) and exit'
    )
    parser.add_argument(
        '--fallback',
        action='store_true',
        help='Only run the randomized fallback search'
    )
    parser.add_argument(
        '--seed',
        type=int,
        help='Seed for the fallback search and the scramble generator'
    )
    parser.add_argument(
        '--show',
        action='store_true',
        help='Print the scrambled cube as a coloured net'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='More logging (-v INFO, -vv DEBUG)'
    )
    return parser


def main(argv=None):
    """Main entry point for the application. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    colorama.just_fix_windows_console()

    rng = random.Random(args.seed)

    if args.generate is not None:
        if args.generate < 0:
            print(f"Error: scramble length must be >= 0, got {args.generate}")
            return EXIT_INVALID_INPUT
        print(generate_scramble(args.generate, rng=rng))
        return EXIT_SOLVED

    if args.facelets is None and not args.scramble:
        parser.print_usage()
        print("Error: give a scramble or --facelets")
        return EXIT_INVALID_INPUT
    if args.facelets is not None and args.scramble:
        print("Error: give either a scramble or --facelets, not both")
        return EXIT_INVALID_INPUT
    if args.facelets is not None and args.fallback:
        print("Error: the fallback search needs a scramble to avoid, not --facelets")
        return EXIT_INVALID_INPUT

    print("=" * 50)
    print("  RUBIK'S CUBE SOLVER")
    print("  Two-Phase IDA* + Randomized Fallback Search")
    print("=" * 50)

    scramble = " ".join(args.scramble)
    try:
        if args.facelets is not None:
            state = facelets_to_cube(args.facelets)
            print(f"\nFacelets: {args.facelets.strip().upper()}")
        else:
            state = apply_scramble(scramble)
            print(f"\nScramble: {scramble}")
    except (InvalidMoveError, InvalidCubeStateError) as e:
        print(f"Error: {e}")
        return EXIT_INVALID_INPUT

    if args.show:
        print_cube(state)

    solver = CubeSolver(rng=rng)
    start_time = time.time()
    if args.facelets is not None:
        label = "TWO-PHASE SOLUTION"
        moves = solver.solve_state(state)
    elif args.fallback:
        label = "FALLBACK SOLUTION"
        moves = solver.fallback_solve(scramble)
    else:
        label = "SOLUTION"
        moves = solver.solve_with_fallback(scramble)
    elapsed = time.time() - start_time

    if moves is None:
        print(f"\nNo solution found within the search limits ({elapsed:.2f} s).")
        return EXIT_NO_SOLUTION

    print_solution(moves, elapsed, label)
    return EXIT_SOLVED


if __name__ == "__main__":
    raise SystemExit(main())
