from typing import List, Sequence


class EmptyKeyError(ValueError):
    pass


def repeating_xor(data: Sequence[int], key: Sequence[int]) -> List[int]:
    """XOR data with the key, cycling the key to the length of the data."""
    if len(key) == 0:
        raise EmptyKeyError("XOR key cannot be empty")
    return [b ^ key[i % len(key)] for i, b in enumerate(data)]
