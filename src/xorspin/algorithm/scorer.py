from typing import Sequence

from xorspin.algorithm.xor import EmptyKeyError
from xorspin.models.analysis_result import ByteMatch, Score
from xorspin.models.candidate_cache import CandidateCache


def is_match(byte: int, key_byte: int, cache: CandidateCache) -> bool:
    """True when (byte ^ key_byte) is one of the cached XOR results for key_byte.

    The cached set is {char ^ key_byte}, so the two XORs cancel and this holds
    exactly when the byte itself is a common character, whatever the key byte.
    """
    return (byte ^ key_byte) in cache.xor_set(key_byte)


def score_bytes(data: Sequence[int], key: Sequence[int], cache: CandidateCache) -> Score:
    """Count the positions whose byte passes the cache check for its key byte."""
    if len(key) == 0:
        raise EmptyKeyError("XOR key cannot be empty")

    matches = []
    for i, byte in enumerate(data):
        key_byte = key[i % len(key)]
        if is_match(byte, key_byte, cache):
            probe = byte ^ key_byte
            matches.append(ByteMatch(index=i, byte=byte, candidates=cache.candidates_for(probe)))

    total_bytes = len(data)
    match_count = len(matches)
    match_percentage = match_count / total_bytes * 100 if total_bytes > 0 else 0.0

    return Score(
        match_count=match_count,
        total_bytes=total_bytes,
        match_percentage=match_percentage,
        matches=tuple(matches),
    )
