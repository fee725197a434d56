from __future__ import annotations
from typing import Dict, List, Sequence, Set, Tuple

# A-Z, a-z, 0-9 in scan order. Candidate list ordering depends on it.
COMMON_CHARS: Tuple[int, ...] = (
    tuple(range(ord("A"), ord("Z") + 1))
    + tuple(range(ord("a"), ord("z") + 1))
    + tuple(range(ord("0"), ord("9") + 1))
)


class CandidateCache:
    """Per-key lookup of alphabet characters XORed with each key byte.

    - key_byte_to_xor_set:       key byte -> {char ^ key byte for every common char}
    - xor_result_to_candidates:  result byte -> common chars that produced it, first seen first
    - collisions:                result bytes reached from more than one common char
    """

    def __init__(self):
        self.__key_byte_to_xor_set: Dict[int, Set[int]] = {}
        self.__xor_result_to_candidates: Dict[int, List[int]] = {}
        self.__collisions: List[int] = []

    @classmethod
    def build(cls, key: Sequence[int]) -> CandidateCache:
        cache = cls()
        for key_byte in key:
            if key_byte in cache.__key_byte_to_xor_set:
                continue
            cache.__add_key_byte(key_byte)
        return cache

    def __add_key_byte(self, key_byte: int) -> None:
        xor_set = self.__key_byte_to_xor_set.setdefault(key_byte, set())
        for char_code in COMMON_CHARS:
            xor_result = char_code ^ key_byte
            xor_set.add(xor_result)

            existing = self.__xor_result_to_candidates.setdefault(xor_result, [])
            if char_code not in existing:
                existing.append(char_code)
                if len(existing) == 2:
                    self.__collisions.append(xor_result)

    def xor_set(self, key_byte: int) -> Set[int]:
        """XOR results for a key byte; empty when the key byte was never cached."""
        return self.__key_byte_to_xor_set.get(key_byte, set())

    def candidates_for(self, xor_result: int) -> Tuple[int, ...]:
        return tuple(self.__xor_result_to_candidates.get(xor_result, ()))

    @property
    def key_byte_to_xor_set(self) -> Dict[int, Set[int]]:
        return self.__key_byte_to_xor_set

    @property
    def xor_result_to_candidates(self) -> Dict[int, List[int]]:
        return self.__xor_result_to_candidates

    @property
    def collisions(self) -> List[int]:
        return self.__collisions

    @property
    def key_byte_count(self) -> int:
        return len(self.__key_byte_to_xor_set)

    def __len__(self) -> int:
        return len(self.__xor_result_to_candidates)
