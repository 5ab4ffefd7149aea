"""
Conversion between sticker (facelet) descriptions and cubie-level states.

A facelet string has 54 letters, one per sticker, faces in the order
U R F D L B. Each face is read row by row as it appears on the unfolded net:

                 U1 U2 U3
                 U4 U5 U6
                 U7 U8 U9
        L1 L2 L3 F1 F2 F3 R1 R2 R3 B1 B2 B3
        L4 L5 L6 F4 F5 F6 R4 R5 R6 B4 B5 B6
        L7 L8 L9 F7 F8 F9 R7 R8 R9 B7 B8 B9
                 D1 D2 D3
                 D4 D5 D6
                 D7 D8 D9

Each letter names the face whose centre has that colour, so the solved cube is
"UUUUUUUUURRRRRRRRRFFFFFFFFFDDDDDDDDDLLLLLLLLLBBBBBBBBB".
"""

import logging
from typing import Dict

import numpy as np

from Cube import CubeState, InvalidCubeStateError, NUM_CORNERS, NUM_EDGES

logger = logging.getLogger(__name__)

FACES = "URFDLB"
FACE_NAMES = ("up", "right", "front", "down", "left", "back")
SOLVED_FACELETS = "".join(face * 9 for face in FACES)


def _sticker(face, n):
    """Index of sticker n (1..9) of a face in the facelet string."""
    return FACES.index(face) * 9 + n - 1


# Stickers of each corner slot, starting with its U/D sticker and going clockwise
corner_facelets = (
    (_sticker("U", 9), _sticker("R", 1), _sticker("F", 3)),  # URF
    (_sticker("U", 7), _sticker("F", 1), _sticker("L", 3)),  # UFL
    (_sticker("U", 1), _sticker("L", 1), _sticker("B", 3)),  # ULB
    (_sticker("U", 3), _sticker("B", 1), _sticker("R", 3)),  # UBR
    (_sticker("D", 3), _sticker("F", 9), _sticker("R", 7)),  # DFR
    (_sticker("D", 1), _sticker("L", 9), _sticker("F", 7)),  # DLF
    (_sticker("D", 7), _sticker("B", 9), _sticker("L", 7)),  # DBL
    (_sticker("D", 9), _sticker("R", 9), _sticker("B", 7)),  # DRB
)
corner_colors = ("URF", "UFL", "ULB", "UBR", "DFR", "DLF", "DBL", "DRB")

# Stickers of each edge slot; the first one is the sticker an unflipped edge keeps
edge_facelets = (
    (_sticker("U", 6), _sticker("R", 2)),  # UR
    (_sticker("U", 8), _sticker("F", 2)),  # UF
    (_sticker("U", 4), _sticker("L", 2)),  # UL
    (_sticker("U", 2), _sticker("B", 2)),  # UB
    (_sticker("F", 6), _sticker("R", 4)),  # FR
    (_sticker("F", 4), _sticker("L", 6)),  # FL
    (_sticker("B", 6), _sticker("L", 4)),  # BL
    (_sticker("B", 4), _sticker("R", 6)),  # BR
    (_sticker("D", 6), _sticker("R", 8)),  # DR
    (_sticker("D", 2), _sticker("F", 8)),  # DF
    (_sticker("D", 4), _sticker("L", 8)),  # DL
    (_sticker("D", 8), _sticker("B", 8)),  # DB
)
edge_colors = ("UR", "UF", "UL", "UB", "FR", "FL", "BL", "BR", "DR", "DF", "DL", "DB")


def cube_to_facelets(state: CubeState) -> str:
    facelets = list(SOLVED_FACELETS)

    for i in range(NUM_CORNERS):
        piece, ori = state.corner_perm[i], state.corner_ori[i]
        for k in range(3):
            facelets[corner_facelets[i][(k + ori) % 3]] = corner_colors[piece][k]

    for i in range(NUM_EDGES):
        piece, ori = state.edge_perm[i], state.edge_ori[i]
        for k in range(2):
            facelets[edge_facelets[i][(k + ori) % 2]] = edge_colors[piece][k]

    return "".join(facelets)


def facelets_to_cube(facelets: str) -> CubeState:
    """
    Build a CubeState from a 54-letter facelet string.

    Args:
        facelets: Sticker letters in URFDLB face order (see module docstring)

    Returns:
        CubeState

    Raises:
        InvalidCubeStateError: wrong length or letters, moved centres, a
            sticker combination that is no real piece, or an unreachable state
    """
    facelets = facelets.strip().upper()
    if len(facelets) != 54:
        raise InvalidCubeStateError(f"Facelet string must have 54 stickers, got {len(facelets)}")
    for letter in set(facelets):
        if letter not in FACES:
            raise InvalidCubeStateError(f"Unknown sticker {letter!r}; use the letters {FACES}")
    for face in FACES:
        count = facelets.count(face)
        if count != 9:
            raise InvalidCubeStateError(f"Expected 9 {face} stickers, found {count}")
        if facelets[_sticker(face, 5)] != face:
            raise InvalidCubeStateError(f"Centre of the {face} face must be {face}")

    corner_perm, corner_ori = [], []
    for i, slot in enumerate(corner_facelets):
        stickers = [facelets[f] for f in slot]
        # twist = where the U/D sticker ended up
        ori = next((k for k in range(3) if stickers[k] in "UD"), None)
        if ori is None:
            raise InvalidCubeStateError(f"Corner {corner_colors[i]} has no U or D sticker")
        colors = stickers[ori] + stickers[(ori + 1) % 3] + stickers[(ori + 2) % 3]
        if colors not in corner_colors:
            raise InvalidCubeStateError(f"No corner has the stickers {colors}")
        corner_perm.append(corner_colors.index(colors))
        corner_ori.append(ori)

    edge_perm, edge_ori = [], []
    for i, slot in enumerate(edge_facelets):
        colors = facelets[slot[0]] + facelets[slot[1]]
        if colors in edge_colors:
            edge_perm.append(edge_colors.index(colors))
            edge_ori.append(0)
        elif colors[::-1] in edge_colors:
            edge_perm.append(edge_colors.index(colors[::-1]))
            edge_ori.append(1)
        else:
            raise InvalidCubeStateError(f"No edge has the stickers {colors}")

    logger.debug("Facelets %s -> corners %s edges %s", facelets, corner_perm, edge_perm)
    return CubeState.from_arrays(corner_perm, edge_perm, corner_ori, edge_ori)


def faces_to_facelets(faces: Dict) -> str:
    """
    Convert per-face colour readings into a facelet string.

    Args:
        faces: Dict mapping "up", "right", "front", "down", "left", "back" to
               nine colour letters (a string, a flat list or a 3x3 list/array),
               e.g. {"up": "YYYYYYYYY", "front": [["B", "B", "B"], ...], ...}

    Returns:
        Facelet string; each colour is named by the face whose centre shows it

    Raises:
        InvalidCubeStateError: missing faces, wrong sticker counts or repeated centres
    """
    stickers = {}
    for name in FACE_NAMES:
        if name not in faces:
            raise InvalidCubeStateError(f"Missing face {name!r}")
        face = np.asarray(list(faces[name]) if isinstance(faces[name], str) else faces[name])
        if face.size != 9:
            raise InvalidCubeStateError(f"Face {name!r} must have 9 stickers, got {face.size}")
        stickers[name] = [str(c).upper() for c in face.ravel()]

    centre_to_face = {}
    for name, face in zip(FACE_NAMES, FACES):
        centre = stickers[name][4]
        if centre in centre_to_face:
            raise InvalidCubeStateError(f"Faces {centre_to_face[centre]} and {face} share centre colour {centre}")
        centre_to_face[centre] = face

    result = []
    for name in FACE_NAMES:
        for color in stickers[name]:
            if color not in centre_to_face:
                raise InvalidCubeStateError(f"Colour {color!r} on face {name!r} matches no centre")
            result.append(centre_to_face[color])
    return "".join(result)


def facelet_to_cube(cube_obj: Dict) -> CubeState:
    """Per-face colour readings -> CubeState (see faces_to_facelets)."""
    return facelets_to_cube(faces_to_facelets(cube_obj))


# (row, col) of the top-left sticker of each face on the 9x12 net
NET_ORIGIN = {"U": (0, 3), "L": (3, 0), "F": (3, 3), "R": (3, 6), "B": (3, 9), "D": (6, 3)}


def facelet_grid(state: CubeState) -> np.ndarray:
    """9x12 array of sticker letters laid out as the unfolded net; unused cells are spaces."""
    facelets = cube_to_facelets(state)
    grid = np.full((9, 12), " ", dtype="<U1")
    for face, (row, col) in NET_ORIGIN.items():
        start = FACES.index(face) * 9
        grid[row:row + 3, col:col + 3] = np.array(list(facelets[start:start + 9])).reshape(3, 3)
    return grid
