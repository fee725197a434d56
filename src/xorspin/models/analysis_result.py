from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from xorspin.algorithm.bits import MatrixMode
from xorspin.models.candidate_cache import CandidateCache


class Scenario(str, Enum):
    ROTATED_THEN_XORED = "rotated-then-xored"
    XORED_THEN_ROTATED = "xored-then-rotated"

    def __str__(self):
        return self.value

    @property
    def display_name(self) -> str:
        if self == Scenario.ROTATED_THEN_XORED:
            return "Rotated then XORed"
        return "XORed then Rotated"


@dataclass(frozen=True, slots=True)
class MatrixConfig:
    """Matrix dimensions for the optional un-permutation step. None/None means no matrix."""

    rows: Optional[int] = None
    cols: Optional[int] = None

    @classmethod
    def parse(cls, value: str) -> MatrixConfig:
        """Parse "none" or "RxC"."""
        value = value.strip().lower()
        if value in ("", "none"):
            return cls()
        try:
            rows, cols = (int(part) for part in value.split("x"))
        except ValueError:
            raise ValueError(f"Invalid matrix dimensions: {value!r} (expected RxC or none)") from None
        return cls(rows, cols)

    @property
    def is_none(self) -> bool:
        return self.rows is None or self.cols is None

    @property
    def bit_count(self) -> int:
        return 0 if self.is_none else self.rows * self.cols

    @property
    def label(self) -> str:
        return "none" if self.is_none else f"{self.rows}x{self.cols}"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True)
class ByteMatch:
    index: int
    byte: int
    candidates: Tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Score:
    match_count: int
    total_bytes: int
    match_percentage: float
    matches: Tuple[ByteMatch, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Immutable outcome of one (matrix, mode, scenario, rotation) combination."""

    matrix_config: MatrixConfig
    matrix_mode: MatrixMode
    scenario: Scenario
    rotation: int

    match_count: int
    total_bytes: int
    match_percentage: float

    matches: Tuple[ByteMatch, ...] = field(default_factory=tuple)
    output: Tuple[int, ...] = field(default_factory=tuple)
    intermediate: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def matched_indices(self) -> frozenset[int]:
        return frozenset(m.index for m in self.matches)

    @property
    def match_flags(self) -> Tuple[bool, ...]:
        matched = self.matched_indices
        return tuple(i in matched for i in range(len(self.output)))

    @property
    def percentage_display(self) -> str:
        return f"{self.match_percentage:.2f}"

    def describe(self) -> str:
        matrix = "No matrix" if self.matrix_config.is_none else f"Matrix: {self.matrix_config}"
        return f"{self.scenario.display_name} | {matrix} | Mode: {self.matrix_mode} | Rotation: {self.rotation} bits"


@dataclass(frozen=True, slots=True)
class SingleAnalysis:
    """Both scenarios over every rotation for one matrix configuration."""

    scenario1: Tuple[AnalysisResult, ...]
    scenario2: Tuple[AnalysisResult, ...]
    cache: CandidateCache
    ciphertext: Tuple[int, ...]
    matrix_config: MatrixConfig = field(default_factory=MatrixConfig)
    matrix_mode: MatrixMode = MatrixMode.STANDARD
    matrix_error: Optional[str] = None

    def result(self, scenario: int, rotation: int) -> AnalysisResult:
        results = self.scenario1 if scenario == 1 else self.scenario2
        return results[rotation]
