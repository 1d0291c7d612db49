"""Unit tests for identifier generation, validation and parsing."""

import re
from datetime import datetime, timezone

import pytest

import pikaid.codec as codec
from core.errors import InvalidFormat, TimestampOutOfRange
from pikaid import generate, is_valid, parse
from pikaid.codec import LENGTH, MAX_SECONDS, encode, timestamp_of

ID_RE = re.compile(r"^[0-9a-z]{26}$")
ZERO_HEX = "0" * 24


class TestGenerate:
    """Tests for generate()."""

    def test_format(self):
        """Generated ID is 26 lowercase base36 chars."""
        pid = generate()
        assert isinstance(pid, str)
        assert len(pid) == LENGTH
        assert ID_RE.match(pid)
        assert is_valid(pid)

    def test_with_each_converter(self, converter):
        """Either strategy produces valid IDs."""
        assert is_valid(generate(converter))

    def test_randomness_segment(self):
        """Randomness part is 19 base36 chars."""
        rand_part = generate()[7:]
        assert len(rand_part) == 19
        assert re.fullmatch(r"[0-9a-z]{19}", rand_part)

    def test_timestamp_within_bounds(self):
        """Parsed timestamp lies within the generation window."""
        start = int(datetime.now(timezone.utc).timestamp()) - 1
        pid = generate()
        end = int(datetime.now(timezone.utc).timestamp()) + 1
        assert start <= parse(pid).seconds <= end

    def test_unique(self):
        """1000 IDs in sequence are distinct."""
        ids = [generate() for _ in range(1000)]
        assert len(set(ids)) == 1000

    def test_uses_clock_and_random_source(self, monkeypatch):
        """generate() draws 12 random bytes and the current second."""
        drawn = []

        def token_bytes(n):
            drawn.append(n)
            return bytes(n)

        monkeypatch.setattr(codec, "now_seconds", lambda: 36)
        monkeypatch.setattr(codec.secrets, "token_bytes", token_bytes)
        assert generate() == "0000010" + "0" * 19
        assert drawn == [12]

    def test_round_trip(self, monkeypatch):
        """parse(generate()) returns the generated fields."""
        block = bytes(range(1, 13))
        monkeypatch.setattr(codec, "now_seconds", lambda: 1_700_000_000)
        monkeypatch.setattr(codec.secrets, "token_bytes", lambda n: block)
        parsed = parse(generate())
        assert parsed.seconds == 1_700_000_000
        assert parsed.randomness == block.hex()

    def test_clock_out_of_range(self, monkeypatch):
        """A clock past the 7-char range is not wrapped."""
        monkeypatch.setattr(codec, "now_seconds", lambda: MAX_SECONDS + 1)
        with pytest.raises(TimestampOutOfRange):
            generate()


class TestEncode:
    """Tests for encode()."""

    def test_epoch_zero(self, converter):
        """Epoch with zero randomness is all zeros."""
        assert encode(0, bytes(12), converter) == "0" * 26

    def test_max_seconds(self):
        """Largest timestamp fills the segment with 'z'."""
        assert encode(MAX_SECONDS, bytes(12)) == "zzzzzzz" + "0" * 19

    def test_negative_seconds(self):
        """Negative seconds are refused."""
        with pytest.raises(TimestampOutOfRange) as exc_info:
            encode(-1, bytes(12))
        assert exc_info.value.context["seconds"] == -1

    def test_wrong_block_size(self):
        """Randomness must be exactly 12 bytes."""
        with pytest.raises(ValueError):
            encode(0, bytes(16))

    def test_sortable_by_second(self):
        """Later seconds sort after earlier ones."""
        assert encode(1_000, b"\xff" * 12) < encode(1_001, bytes(12))


class TestIsValid:
    """Tests for is_valid()."""

    @pytest.mark.parametrize("candidate", [
        "",
        "a" * 25,
        "a" * 27,
        "Z" * 26,
        "z" * 25 + "!",
        "0" * 25 + " ",
        "0" * 25 + "\n",
    ])
    def test_rejects(self, candidate):
        """Malformed strings are invalid."""
        assert is_valid(candidate) is False

    def test_rejects_non_string(self):
        """Non-string input is invalid."""
        assert is_valid(None) is False
        assert is_valid(b"0" * 26) is False

    def test_accepts_implausible_timestamp(self):
        """Validation is purely syntactic."""
        assert is_valid("z" * 26) is True


class TestParse:
    """Tests for parse()."""

    def test_epoch(self, converter):
        """All zeros decode to the Unix epoch and zero randomness."""
        parsed = parse("0000000" + "0" * 19, converter)
        assert parsed.timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert parsed.seconds == 0
        assert parsed.randomness == ZERO_HEX

    def test_max_seconds(self, converter):
        """36**7 - 1 seconds round-trips exactly."""
        parsed = parse(encode(MAX_SECONDS, bytes(12), converter), converter)
        assert parsed.seconds == MAX_SECONDS
        assert parsed.randomness == ZERO_HEX
        assert parsed.timestamp.tzinfo == timezone.utc

    def test_randomness_hex(self, converter):
        """Randomness comes back as 24 lowercase hex chars."""
        block = bytes.fromhex("00ff10203040506070a0b0c0")
        parsed = parse(encode(42, block, converter), converter)
        assert parsed.randomness == "00ff10203040506070a0b0c0"
        assert len(parsed.randomness) == 24

    def test_invalid_raises(self):
        """Malformed input raises InvalidFormat."""
        with pytest.raises(InvalidFormat) as exc_info:
            parse("invalid_pikaid_format_!!!!!!!!!!!!")
        assert exc_info.value.context["candidate"] == "invalid_pikaid_format_!!!!!!!!!!!!"

    def test_invalid_does_no_work(self, monkeypatch):
        """No converter is touched for invalid input."""
        def fail():
            raise AssertionError("converter requested")

        monkeypatch.setattr(codec, "get_converter", fail)
        with pytest.raises(InvalidFormat):
            parse("z" * 25 + "!")

    def test_invalid_format_is_value_error(self):
        """InvalidFormat can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse("")

    def test_parsed_is_immutable(self):
        """ParsedIdentifier fields cannot be reassigned."""
        parsed = parse("0" * 26)
        with pytest.raises(AttributeError):
            parsed.randomness = "x"

    def test_to_dict(self):
        """to_dict renders ISO timestamp, seconds and hex."""
        assert parse("0" * 26).to_dict() == {
            "timestamp": "1970-01-01T00:00:00Z",
            "seconds": 0,
            "randomness": ZERO_HEX,
        }

    def test_timestamp_of(self):
        """timestamp_of decodes only the time segment."""
        assert timestamp_of("0000010" + "0" * 19) == datetime(1970, 1, 1, 0, 0, 36, tzinfo=timezone.utc)
        with pytest.raises(InvalidFormat):
            timestamp_of("short")

    def test_oversized_randomness_is_lossy(self, converter):
        """Segments above 2**96 - 1 wrap onto their low 12 bytes."""
        digits = []
        n = 2 ** 96
        while n:
            n, remainder = divmod(n, 36)
            digits.append("0123456789abcdefghijklmnopqrstuvwxyz"[remainder])
        wrapped = "0000000" + "".join(reversed(digits)).rjust(19, "0")
        assert is_valid(wrapped)
        assert parse(wrapped, converter).randomness == parse("0" * 26, converter).randomness
