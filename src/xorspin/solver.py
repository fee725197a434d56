import itertools
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import structlog

from xorspin.algorithm.bits import (
    DimensionMismatchError,
    MatrixMode,
    bits_to_bytes,
    bytes_to_bits,
    factor_pairs,
    read_matrix,
    rotate_bits,
)
from xorspin.algorithm.scorer import score_bytes
from xorspin.algorithm.xor import EmptyKeyError, repeating_xor
from xorspin.models.analysis_result import AnalysisResult, MatrixConfig, Scenario, SingleAnalysis
from xorspin.models.candidate_cache import CandidateCache


log = structlog.get_logger()

# Rotations 0..7 cover every bit phase relative to a byte boundary.
ROTATION_COUNT = 8
MATRIX_MODES: Tuple[MatrixMode, ...] = tuple(MatrixMode)
SCENARIOS: Tuple[Scenario, ...] = tuple(Scenario)

type Combination = Tuple[MatrixConfig, MatrixMode, Scenario, int]
type MatrixConfigLike = Union[MatrixConfig, str, Tuple[int, int], None]


def enumerate_matrix_options(ciphertext: Sequence[int]) -> List[Tuple[int, int]]:
    """Matrix dimensions that exactly cover the ciphertext's bit count."""
    return factor_pairs(len(ciphertext) * 8)


def as_matrix_config(value: MatrixConfigLike) -> MatrixConfig:
    if value is None:
        return MatrixConfig()
    if isinstance(value, MatrixConfig):
        return value
    if isinstance(value, str):
        return MatrixConfig.parse(value)
    rows, cols = value
    return MatrixConfig(rows, cols)


def apply_matrix(ciphertext: Sequence[int], matrix_config: MatrixConfig, matrix_mode: MatrixMode) -> List[int]:
    """Read the ciphertext's bits through the matrix. No-op for the "none" config."""
    if matrix_config.is_none:
        return list(ciphertext)
    bits = bytes_to_bits(ciphertext)
    bits = read_matrix(bits, matrix_mode, matrix_config.rows, matrix_config.cols)
    return bits_to_bytes(bits)


def transform(
    ciphertext: Sequence[int],
    key: Sequence[int],
    scenario: Scenario,
    rotation: int,
) -> Tuple[List[int], List[int]]:
    """Run one scenario. Returns (intermediate, output) byte lists."""
    if scenario == Scenario.ROTATED_THEN_XORED:
        rotated = bits_to_bytes(rotate_bits(bytes_to_bits(ciphertext), rotation))
        return rotated, repeating_xor(rotated, key)

    xored = repeating_xor(ciphertext, key)
    return xored, bits_to_bytes(rotate_bits(bytes_to_bits(xored), rotation))


def _analyze_transformed(
    ciphertext: Sequence[int],
    key: Sequence[int],
    cache: CandidateCache,
    matrix_config: MatrixConfig,
    matrix_mode: MatrixMode,
    scenario: Scenario,
    rotation: int,
    *,
    round_digits: Optional[int] = None,
) -> AnalysisResult:
    intermediate, output = transform(ciphertext, key, scenario, rotation)
    score = score_bytes(output, key, cache)

    match_percentage = score.match_percentage
    if round_digits is not None:
        match_percentage = round(match_percentage, round_digits)

    return AnalysisResult(
        matrix_config=matrix_config,
        matrix_mode=matrix_mode,
        scenario=scenario,
        rotation=rotation,
        match_count=score.match_count,
        total_bytes=score.total_bytes,
        match_percentage=match_percentage,
        matches=score.matches,
        output=tuple(output),
        intermediate=tuple(intermediate),
    )


def analyze_combination(
    ciphertext: Sequence[int],
    key: Sequence[int],
    cache: CandidateCache,
    combination: Combination,
) -> AnalysisResult:
    """Matrix step, then the scenario, then scoring, for one combination."""
    matrix_config, matrix_mode, scenario, rotation = combination
    transformed = apply_matrix(ciphertext, matrix_config, matrix_mode)
    return _analyze_transformed(transformed, key, cache, matrix_config, matrix_mode, scenario, rotation)


def iter_combinations(ciphertext: Sequence[int], *, rotations: int = ROTATION_COUNT) -> Iterator[Combination]:
    """Every (matrix config, mode, scenario, rotation), in ranking tie-break order.

    The "none" config is crossed with every mode too, like any other config.
    """
    matrix_configs = [MatrixConfig()]
    matrix_configs += [MatrixConfig(rows, cols) for rows, cols in enumerate_matrix_options(ciphertext)]
    return itertools.product(matrix_configs, MATRIX_MODES, SCENARIOS, range(rotations))


def run_single_analysis(
    ciphertext: Sequence[int],
    key: Sequence[int],
    matrix_config: MatrixConfigLike = None,
    matrix_mode: MatrixMode | str = MatrixMode.STANDARD,
    *,
    rotations: int = ROTATION_COUNT,
) -> SingleAnalysis:
    """
    Evaluate both scenarios over every rotation for one matrix configuration.
    A matrix that does not fit the bit count is reported via `matrix_error` and
    the analysis continues on the untransformed ciphertext.
    """
    if len(key) == 0:
        raise EmptyKeyError("XOR key cannot be empty")

    matrix_config = as_matrix_config(matrix_config)
    matrix_mode = MatrixMode(matrix_mode)
    applied_config = matrix_config
    matrix_error = None
    transformed = list(ciphertext)

    if not matrix_config.is_none:
        log.debug("original ciphertext", byte_count=len(ciphertext), bit_count=len(ciphertext) * 8)
        try:
            transformed = apply_matrix(ciphertext, matrix_config, matrix_mode)
            log.info("matrix applied", matrix=matrix_config.label, mode=str(matrix_mode), byte_count=len(transformed))
        except DimensionMismatchError as e:
            matrix_error = str(e)
            applied_config = MatrixConfig()
            log.warning("matrix transformation not applied", matrix=matrix_config.label, error=matrix_error)

    cache = CandidateCache.build(key)

    def analyze(scenario: Scenario) -> Tuple[AnalysisResult, ...]:
        return tuple(
            _analyze_transformed(
                transformed, key, cache, applied_config, matrix_mode, scenario, rotation, round_digits=2,
            )
            for rotation in range(rotations)
        )

    return SingleAnalysis(
        scenario1=analyze(Scenario.ROTATED_THEN_XORED),
        scenario2=analyze(Scenario.XORED_THEN_ROTATED),
        cache=cache,
        ciphertext=tuple(transformed),
        matrix_config=matrix_config,
        matrix_mode=matrix_mode,
        matrix_error=matrix_error,
    )


def run_exhaustive_analysis(
    ciphertext: Sequence[int],
    key: Sequence[int],
    *,
    rotations: int = ROTATION_COUNT,
    workers: int = 1,
) -> List[AnalysisResult]:
    """
    Score every combination and rank by match percentage, highest first.
    Ties keep enumeration order. Combinations that fail the matrix step are
    logged and left out of the ranking.
    """
    if len(key) == 0:
        raise EmptyKeyError("XOR key cannot be empty")

    cache = CandidateCache.build(key)
    combinations = iter_combinations(ciphertext, rotations=rotations)

    def evaluate(combination: Combination) -> Optional[AnalysisResult]:
        try:
            return analyze_combination(ciphertext, key, cache, combination)
        except DimensionMismatchError as e:
            matrix_config, matrix_mode, scenario, rotation = combination
            log.warning(
                "skipping combination",
                matrix=matrix_config.label,
                mode=str(matrix_mode),
                scenario=str(scenario),
                rotation=rotation,
                error=str(e),
            )
            return None

    if workers > 1:
        # map() yields in submission order, so the ranking matches the sequential path.
        with ThreadPoolExecutor(max_workers=workers) as executor:
            evaluated = list(executor.map(evaluate, combinations))
    else:
        evaluated = [evaluate(combination) for combination in combinations]

    results = [result for result in evaluated if result is not None]
    results.sort(key=lambda result: result.match_percentage, reverse=True)

    log.info(
        "exhaustive analysis complete",
        combinations=len(evaluated),
        ranked=len(results),
        skipped=len(evaluated) - len(results),
    )
    return results


def collision_warning(cache: CandidateCache) -> Optional[str]:
    if not cache.collisions:
        return None
    return (
        f"Warning: Found {len(cache.collisions)} collision(s) in cache. "
        "Some bytes map to multiple plaintext characters."
    )


def cache_summary(
    cache: CandidateCache,
    key: Sequence[int],
    matrix_config: MatrixConfigLike = None,
    matrix_mode: MatrixMode | str = MatrixMode.STANDARD,
) -> str:
    summary = (
        f"Cache built from {len(key)} key byte(s). "
        f"Key bytes map to {cache.key_byte_count} unique XOR result sets."
    )
    matrix_config = as_matrix_config(matrix_config)
    if not matrix_config.is_none:
        summary += f" Matrix: {matrix_config}. Mode: {MatrixMode(matrix_mode)}."
    return summary
