"""
Base-36 conversion for the 96-bit randomness block.

Two interchangeable converters share one contract:
- NativeConverter uses Python's arbitrary-precision int.
- LongDivisionConverter does schoolbook arithmetic over small digit lists
  and needs nothing wider than a machine word.

Both must return identical output for every 12-byte block. The backend is
picked once per process from cached capability flags.
"""

from collections import namedtuple

from config import load_config
from core.errors import MissingNumericBackend
from internal.logging import get_logger

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
BASE = len(ALPHABET)
DIGIT_VALUES = {char: value for value, char in enumerate(ALPHABET)}

BLOCK_SIZE = 12
HEX_WIDTH = BLOCK_SIZE * 2
_BLOCK_MASK = (1 << (BLOCK_SIZE * 8)) - 1


def _divmod_small(digits, radix, divisor):
    """Divide a most-significant-first digit list by a small integer.

    Returns (quotient digits with leading zeros stripped, remainder).
    An empty list stands for zero.
    """
    quotient = []
    remainder = 0
    for digit in digits:
        q, remainder = divmod(remainder * radix + digit, divisor)
        if quotient or q:
            quotient.append(q)
    return quotient, remainder


def _mul_add_small(digits, radix, factor, addend):
    """Return digits * factor + addend as a most-significant-first list."""
    out = []
    carry = addend
    for digit in reversed(digits):
        carry, low = divmod(digit * factor + carry, radix)
        out.append(low)
    while carry:
        carry, low = divmod(carry, radix)
        out.append(low)
    while out and out[-1] == 0:
        out.pop()
    out.reverse()
    return out


class BaseConverter:
    """Converts a 12-byte big-endian block to and from base-36 digits."""

    name = None

    def bytes_to_digits(self, block):
        """Unpadded base-36 digits of the block; "0" for an all-zero block."""
        block = bytes(block)
        if len(block) != BLOCK_SIZE:
            raise ValueError(f"expected {BLOCK_SIZE} bytes, got {len(block)}")
        return self._to_digits(block)

    def digits_to_bytes(self, digits):
        """Exactly 12 bytes for a lowercase base-36 string.

        Values wider than 96 bits keep their low-order 12 bytes.
        """
        if not digits or any(char not in DIGIT_VALUES for char in digits):
            raise ValueError(f"not a lowercase base36 string: {digits!r}")
        return self._to_bytes(digits)

    def _to_digits(self, block):
        raise NotImplementedError

    def _to_bytes(self, digits):
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class NativeConverter(BaseConverter):
    name = "native"

    def _to_digits(self, block):
        n = int.from_bytes(block, byteorder="big")
        if n == 0:
            return ALPHABET[0]

        chars = []
        while n > 0:
            n, remainder = divmod(n, BASE)
            chars.append(ALPHABET[remainder])
        return "".join(reversed(chars))

    def _to_bytes(self, digits):
        n = int(digits, BASE) & _BLOCK_MASK
        return n.to_bytes(BLOCK_SIZE, byteorder="big")


class LongDivisionConverter(BaseConverter):
    name = "manual"

    def _to_digits(self, block):
        # hex digits are the first 16 symbols of the alphabet
        value = [DIGIT_VALUES[char] for char in block.hex()]
        while value and value[0] == 0:
            value.pop(0)
        if not value:
            return ALPHABET[0]

        chars = []
        while value:
            value, remainder = _divmod_small(value, 16, BASE)
            chars.append(ALPHABET[remainder])
        return "".join(reversed(chars))

    def _to_bytes(self, digits):
        decimal = []
        for char in digits:
            decimal = _mul_add_small(decimal, 10, BASE, DIGIT_VALUES[char])

        hex_chars = []
        while decimal:
            decimal, remainder = _divmod_small(decimal, 10, 16)
            hex_chars.append(ALPHABET[remainder])

        hex_str = "".join(reversed(hex_chars)).rjust(HEX_WIDTH, "0")
        return bytes.fromhex(hex_str[-HEX_WIDTH:])


CONVERTERS = {
    NativeConverter.name: NativeConverter,
    LongDivisionConverter.name: LongDivisionConverter,
}


class NumericCapabilities(namedtuple("NumericCapabilities", ["native", "manual", "order"])):
    """Which backends this process can use, and in what preference order."""

    __slots__ = ()

    def available(self, name):
        return name in CONVERTERS and bool(getattr(self, name))

    def preferred(self):
        for name in self.order:
            if self.available(name):
                return name
        return None


def _probe_native():
    try:
        block = _BLOCK_MASK.to_bytes(BLOCK_SIZE, byteorder="big")
        return (int.from_bytes(block, byteorder="big") == _BLOCK_MASK
                and int(NativeConverter()._to_digits(block), BASE) == _BLOCK_MASK)
    except (OverflowError, ValueError):
        return False


def _probe_manual():
    return True


_PROBES = {"native": _probe_native, "manual": _probe_manual}


def detect_capabilities(backends=None):
    """Probe the configured backends. Unknown names are logged and skipped."""
    if backends is None:
        backends = load_config().codec.backends
    order = tuple(backends)

    log = get_logger("engine")
    for name in order:
        if name not in _PROBES:
            log.warn("unknown numeric backend", backend=name)

    return NumericCapabilities(
        native="native" in order and _probe_native(),
        manual="manual" in order and _probe_manual(),
        order=order,
    )


def select_converter(capabilities):
    """Build the preferred converter for the given capabilities."""
    name = capabilities.preferred()
    if name is None:
        raise MissingNumericBackend(
            "No usable numeric backend; enable 'native' or 'manual' in codec.backends",
            backends=capabilities.order,
        )
    return CONVERTERS[name]()


# Written with a single assignment each; a racing thread may detect twice
# but always stores an equivalent immutable value.
_capabilities = None
_converter = None


def get_capabilities():
    global _capabilities
    capabilities = _capabilities
    if capabilities is None:
        capabilities = detect_capabilities()
        _capabilities = capabilities
    return capabilities


def get_converter():
    """Process-wide converter, selected on first use."""
    global _converter
    converter = _converter
    if converter is None:
        capabilities = get_capabilities()
        converter = select_converter(capabilities)
        _converter = converter
        get_logger("engine").info(
            "numeric backend selected",
            backend=converter.name,
            native=capabilities.native,
            manual=capabilities.manual,
        )
    return converter


def reset_backend():
    """Forget detected capabilities so the next call re-detects."""
    global _capabilities, _converter
    _capabilities = None
    _converter = None


def bytes_to_digits(block):
    return get_converter().bytes_to_digits(block)


def digits_to_bytes(digits):
    return get_converter().digits_to_bytes(digits)
