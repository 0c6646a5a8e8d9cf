import re

BASE32_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

_whitespace_re = re.compile(r"\s")


class InvalidCharacter(ValueError):
    def __init__(self, char: str):
        super().__init__(f"Invalid Base32 character: {char}")
        self.char = char


def normalize(text: str) -> str:
    """Strip whitespace, uppercase and drop trailing '=' padding."""
    return _whitespace_re.sub("", text).upper().rstrip("=")


def decode(text: str) -> bytes:
    """
    Decode a Base32 (RFC 4648) string.

    Case and whitespace are ignored, padding is optional. Trailing bits that
    do not fill a whole byte are discarded.
    Raises InvalidCharacter for anything outside the alphabet.
    """
    out = bytearray()
    buffer = 0
    bits_left = 0
    for char in normalize(text):
        val = BASE32_CHARS.find(char)
        if val == -1:
            raise InvalidCharacter(char)
        buffer = ((buffer << 5) | val) & 0xFFF
        bits_left += 5
        if bits_left >= 8:
            bits_left -= 8
            out.append((buffer >> bits_left) & 0xFF)
    return bytes(out)


def encode(data: bytes) -> str:
    """Encode bytes to Base32 without '=' padding."""
    chars = []
    buffer = 0
    bits_left = 0
    for byte in data:
        buffer = ((buffer << 8) | byte) & 0x1FFF
        bits_left += 8
        while bits_left >= 5:
            bits_left -= 5
            chars.append(BASE32_CHARS[(buffer >> bits_left) & 0x1F])
    if bits_left > 0:
        # pad the partial group with zero bits
        chars.append(BASE32_CHARS[(buffer << (5 - bits_left)) & 0x1F])
    return "".join(chars)
