from __future__ import annotations
from enum import Enum
from math import isqrt
from typing import List, Sequence, Tuple


class MatrixMode(str, Enum):
    STANDARD = "standard"
    SPIN_RIGHT = "spin-right"
    SPIN_LEFT = "spin-left"

    def __str__(self):
        return self.value


class DimensionMismatchError(ValueError):
    pass


def bytes_to_bits(data: Sequence[int]) -> str:
    """Each byte as 8 bits, most significant bit first, concatenated in order."""
    return "".join(f"{b:08b}" for b in data)


def bits_to_bytes(bits: str) -> List[int]:
    """Read the bit string back 8 bits at a time. A trailing partial group is dropped."""
    whole = len(bits) - len(bits) % 8
    return [int(bits[i:i + 8], 2) for i in range(0, whole, 8)]


def rotate_bits(bits: str, n: int) -> str:
    """Cyclic left rotation; bits shifted off the left reappear on the right."""
    if not bits:
        return bits
    n = n % len(bits)
    if n == 0:
        return bits
    return bits[n:] + bits[:n]


def read_matrix(bits: str, mode: MatrixMode | str, rows: int, cols: int) -> str:
    """
    Fill a rows x cols grid row-major from the bit string and read it back out.
    - standard:   row by row, left to right (identity)
    - spin-right: columns left to right, each read bottom to top
    - spin-left:  columns right to left, each read top to bottom
    """
    bit_count = len(bits)
    if rows < 0 or cols < 0:
        raise DimensionMismatchError(f"Matrix dimensions {rows}x{cols} must not be negative")
    if rows * cols != bit_count:
        raise DimensionMismatchError(
            f"Matrix dimensions {rows}x{cols} = {rows * cols} do not match bit count {bit_count}"
        )

    mode = MatrixMode(mode)
    matrix = [bits[row * cols:(row + 1) * cols] for row in range(rows)]

    if mode == MatrixMode.STANDARD:
        return "".join(matrix)
    if mode == MatrixMode.SPIN_RIGHT:
        return "".join(matrix[row][col] for col in range(cols) for row in reversed(range(rows)))
    return "".join(matrix[row][col] for col in reversed(range(cols)) for row in range(rows))


def factor_pairs(n: int) -> List[Tuple[int, int]]:
    """All (rows, cols) with rows * cols == n, ascending by rows. Squares appear once."""
    pairs = []
    for i in range(1, isqrt(n) + 1):
        if n % i == 0:
            pairs.append((i, n // i))
            if i != n // i:
                pairs.append((n // i, i))
    return sorted(pairs, key=lambda pair: pair[0])
