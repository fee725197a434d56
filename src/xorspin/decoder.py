import base64
import re
from typing import List, Literal, Union

import structlog


log = structlog.get_logger()

type InputFormat = Union[Literal[
    "auto",
    "base64",
    "hex",
    "decimal",
    "octal",
    "binary",
    "ascii",
], str]

type NumeralPolicy = Literal["passthrough", "wrap", "clamp", "reject"]

INPUT_FORMATS = ("auto", "base64", "hex", "decimal", "octal", "binary", "ascii")
NUMERAL_POLICIES = ("passthrough", "wrap", "clamp", "reject")
NUMERAL_BASES = {"decimal": 10, "octal": 8, "binary": 2}

_WHITESPACE_RE = re.compile(r"\s+")
_BASE64_RE = re.compile(r"[A-Za-z0-9+/=]+")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_DECIMAL_RE = re.compile(r"[0-9]+")
_OCTAL_RE = re.compile(r"[0-7]+")
_BINARY_RE = re.compile(r"[01]+")
_NUMERAL_DIGITS = {10: _DECIMAL_RE, 8: _OCTAL_RE, 2: _BINARY_RE}


class DecodeError(ValueError):
    pass

class OddLengthError(DecodeError):
    pass

class OutOfRangeError(DecodeError):
    pass


def _b64_decode(b64_text: str) -> bytes:
    """Decodes standard b64. Tolerates embedded whitespace and missing '=' padding."""
    b64_text = _WHITESPACE_RE.sub("", b64_text)

    # normalize padding
    missing = len(b64_text) % 4
    if missing:
        b64_text += "=" * (4 - missing)

    try:
        return base64.b64decode(b64_text, validate=True)
    except ValueError as e:
        raise DecodeError("Invalid base64 input") from e


def detect_format(text: str, selected_format: InputFormat = "auto") -> InputFormat:
    """Return the explicit format, or guess one from the input when set to auto.

    Checks run in a fixed order and the first hit wins: base64, hex, decimal,
    octal, binary, then ascii as the fallback. Hex accepts every digit string,
    so decimal/octal/binary are only reached through an explicit selection.
    """
    if selected_format != "auto":
        return selected_format

    trimmed = text.strip()

    if _BASE64_RE.fullmatch(trimmed) and len(trimmed) % 4 == 0:
        try:
            _b64_decode(trimmed)
            return "base64"
        except DecodeError:
            pass

    compact = _WHITESPACE_RE.sub("", trimmed)
    if _HEX_RE.fullmatch(compact):
        return "hex"
    if _DECIMAL_RE.fullmatch(compact):
        return "decimal"
    if _OCTAL_RE.fullmatch(compact):
        return "octal"
    if _BINARY_RE.fullmatch(compact):
        return "binary"

    return "ascii"


def apply_numeral_policy(value: int, policy: NumeralPolicy = "passthrough") -> int:
    """Bring a parsed numeral into byte range according to the policy."""
    if 0 <= value <= 0xFF:
        return value

    match policy:
        case "passthrough":
            return value
        case "wrap":
            return value % 256
        case "clamp":
            return max(0, min(value, 0xFF))
        case "reject":
            raise OutOfRangeError(f"Numeral {value} is outside the byte range 0-255")
        case _:
            raise ValueError(f"Invalid numeral policy: {policy}")


def _decode_numerals(trimmed: str, input_format: str, policy: NumeralPolicy) -> List[int]:
    base = NUMERAL_BASES[input_format]
    digits = _NUMERAL_DIGITS[base]
    values = []
    for token in trimmed.split():
        if not digits.fullmatch(token):
            raise DecodeError(f"Unparseable {input_format} numeral: {token!r}")
        values.append(apply_numeral_policy(int(token, base), policy))
    return values


def decode_input(
    text: str,
    input_format: InputFormat = "auto",
    *,
    numeral_policy: NumeralPolicy = "passthrough",
) -> List[int]:
    """Decode the input text into a list of byte values.

    Decoding is all-or-nothing: any malformed part raises DecodeError and no
    partial result is returned.
    """
    trimmed = text.strip()
    if input_format == "auto":
        input_format = detect_format(trimmed)

    match input_format:
        case "base64":
            values = list(_b64_decode(trimmed))
        case "hex":
            hex_str = _WHITESPACE_RE.sub("", trimmed)
            if len(hex_str) % 2 != 0:
                raise OddLengthError("Hex string must have even length")
            if hex_str and not _HEX_RE.fullmatch(hex_str):
                raise DecodeError("Invalid hex input")
            values = list(bytes.fromhex(hex_str))
        case "decimal" | "octal" | "binary":
            values = _decode_numerals(trimmed, input_format, numeral_policy)
        case "ascii":
            # One value per code point, not a UTF-8 byte decomposition.
            values = [ord(c) for c in trimmed]
        case _:
            raise ValueError(f"Invalid input format: {input_format}")

    log.debug("input decoded", input_format=input_format, byte_count=len(values))
    return values


def reverse_input(text: str) -> str:
    """Reverse the raw input text character by character."""
    return text[::-1]


def load_input(file_path: str) -> str:
    """Load ciphertext or key text from a file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return f.read()
