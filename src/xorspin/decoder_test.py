import pytest
from xorspin.decoder import (
    DecodeError,
    OddLengthError,
    OutOfRangeError,
    apply_numeral_policy,
    decode_input,
    detect_format,
    load_input,
    reverse_input,
)


class TestDetectFormat:
    """Test suite for format auto-detection"""

    def test_explicit_format_is_returned(self):
        """Test that an explicit selection skips detection"""
        assert detect_format("48656C6C6F", "ascii") == "ascii"
        assert detect_format("anything", "octal") == "octal"

    def test_base64(self):
        """Test base64 detection for padded input"""
        assert detect_format("SGVsbG8=") == "base64"

    def test_base64_wins_over_hex(self):
        """Test that base64 is checked first when the length is a multiple of 4"""
        assert detect_format("deadbeef") == "base64"

    def test_hex(self):
        """Test hex detection when the length rules out base64"""
        assert detect_format("48656C6C6F") == "hex"
        assert detect_format("48 65 6c 6c 6f") == "hex"

    def test_digit_strings_detect_as_hex(self):
        """Test that plain digit strings are caught by the hex check"""
        assert detect_format("72 101 108") == "hex"
        assert detect_format("0110 1") == "hex"

    def test_ascii_fallback(self):
        """Test ascii fallback for free text"""
        assert detect_format("Hello, world!") == "ascii"
        assert detect_format("zz!!") == "ascii"

    def test_blank_input_is_ascii(self):
        """Test that blank input falls through to ascii"""
        assert detect_format("   ") == "ascii"

    def test_surrounding_whitespace_is_ignored(self):
        """Test that input is trimmed before detection"""
        assert detect_format("  SGVsbG8=\n") == "base64"


class TestDecodeInput:
    """Test suite for decode_input"""

    def test_base64(self):
        """Test standard base64 decoding"""
        assert decode_input("SGVsbG8=", "base64") == list(b"Hello")

    def test_base64_missing_padding(self):
        """Test that missing '=' padding is tolerated"""
        assert decode_input("SGVsbG8", "base64") == list(b"Hello")

    def test_base64_invalid(self):
        """Test invalid base64 input"""
        with pytest.raises(DecodeError, match="Invalid base64 input"):
            decode_input("SGV$", "base64")

    def test_hex(self):
        """Test hex decoding with and without whitespace"""
        assert decode_input("48656C6C6F", "hex") == [0x48, 0x65, 0x6C, 0x6C, 0x6F]
        assert decode_input("48 65\n6c", "hex") == [0x48, 0x65, 0x6C]

    def test_hex_odd_length(self):
        """Test that odd length hex is rejected"""
        with pytest.raises(OddLengthError, match="even length"):
            decode_input("486", "hex")

    def test_odd_length_is_a_decode_error(self):
        """Test the error hierarchy for odd length hex"""
        with pytest.raises(DecodeError):
            decode_input("ABC", "hex")

    def test_hex_invalid_digits(self):
        """Test that non-hex characters are rejected"""
        with pytest.raises(DecodeError, match="Invalid hex input"):
            decode_input("4g", "hex")

    def test_decimal(self):
        """Test decimal tokens split on any whitespace"""
        assert decode_input("72 101  108\t108\n111", "decimal") == list(b"Hello")

    def test_decimal_unparseable(self):
        """Test that a malformed decimal token fails the whole decode"""
        with pytest.raises(DecodeError, match="Unparseable decimal numeral"):
            decode_input("72 12a 108", "decimal")

    def test_octal(self):
        """Test octal tokens"""
        assert decode_input("110 145", "octal") == [72, 101]

    def test_octal_rejects_digit_eight(self):
        """Test that digits outside the base are rejected"""
        with pytest.raises(DecodeError):
            decode_input("110 8", "octal")

    def test_binary(self):
        """Test binary tokens"""
        assert decode_input("01001000 01101001", "binary") == [72, 105]

    def test_ascii(self):
        """Test one value per character"""
        assert decode_input("  Hi  ", "ascii") == [72, 105]

    def test_ascii_uses_code_points(self):
        """Test that non-ASCII characters give their code point, not UTF-8 bytes"""
        assert decode_input("é€", "ascii") == [233, 8364]

    def test_auto(self):
        """Test decoding with the detected format"""
        assert decode_input("SGVsbG8=") == list(b"Hello")
        assert decode_input("48656C6C6F") == list(b"Hello")

    def test_invalid_format(self):
        """Test an unknown format name"""
        with pytest.raises(ValueError, match="Invalid input format"):
            decode_input("abc", "rot13")


class TestNumeralPolicy:
    """Test suite for out-of-range numeral handling"""

    def test_passthrough_is_default(self):
        """Test that out-of-range values are kept verbatim by default"""
        assert decode_input("999 65", "decimal") == [999, 65]

    def test_wrap(self):
        """Test modulo 256 wrapping"""
        assert decode_input("999 256", "decimal", numeral_policy="wrap") == [231, 0]

    def test_clamp(self):
        """Test clamping to 255"""
        assert decode_input("999 65", "decimal", numeral_policy="clamp") == [255, 65]

    def test_reject(self):
        """Test rejection of out-of-range values"""
        with pytest.raises(OutOfRangeError, match="999"):
            decode_input("999", "decimal", numeral_policy="reject")

    def test_in_range_values_untouched(self):
        """Test that every policy leaves byte values alone"""
        for policy in ("passthrough", "wrap", "clamp", "reject"):
            assert apply_numeral_policy(255, policy) == 255
            assert apply_numeral_policy(0, policy) == 0

    def test_invalid_policy(self):
        """Test an unknown policy name"""
        with pytest.raises(ValueError, match="Invalid numeral policy"):
            apply_numeral_policy(300, "bogus")


class TestInputHelpers:
    """Test suite for input helpers"""

    def test_reverse_input(self):
        """Test character-wise reversal"""
        assert reverse_input("abc 123") == "321 cba"

    def test_load_input(self, tmp_path):
        """Test reading input text from a file"""
        path = tmp_path / "ciphertext.txt"
        path.write_text("48656C6C6F\n", encoding="utf-8")
        assert load_input(str(path)) == "48656C6C6F\n"
