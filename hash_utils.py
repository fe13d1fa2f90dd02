"""
Hash utilities: salted MD5/SHA digests and the hash fingerprint grid.
"""
import hashlib
import re
from Crypto.Hash import MD5
from Crypto.Random import get_random_bytes

ALGORITHMS = ["md5", "sha256", "sha512"]
SALT_POSITIONS = ["prefix", "postfix"]

# hashlib names for the SHA family
SHA_NAMES = {
    "sha256": "sha256",
    "sha512": "sha512",
}

GRID_SIZE = 8
MIN_VISUALIZE_LENGTH = 16

HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


class UnavailableCryptoPrimitive(RuntimeError):
    """The runtime cannot provide the requested SHA digest."""


def compute_hash(text, algorithm, salt="", salt_position="prefix"):
    """
    Return the lowercase hex digest of the salted text.
    Empty combined input returns "" without hashing anything.
    """
    if algorithm not in ALGORITHMS:
        raise ValueError(f"Unsupported algorithm: {algorithm!r}")
    if salt_position not in SALT_POSITIONS:
        raise ValueError(f"Unsupported salt position: {salt_position!r}")

    combined = salt + text if salt_position == "prefix" else text + salt
    if combined == "":
        return ""

    data = combined.encode("utf-8")

    if algorithm == "md5":
        # pycryptodome's MD5 does not go through the platform OpenSSL
        return MD5.new(data).hexdigest()

    try:
        h = hashlib.new(SHA_NAMES[algorithm])
    except ValueError as e:
        raise UnavailableCryptoPrimitive(f"{algorithm} is not available: {e}") from e
    h.update(data)
    return h.hexdigest()


def compare_texts(text1, text2, algorithm):
    """
    Hash both texts (unsalted) and compare them.
    Returns (hash1, hash2, match) where match is None unless both texts are non-empty.
    """
    hash1 = compute_hash(text1, algorithm)
    hash2 = compute_hash(text2, algorithm)
    if text1 and text2:
        return hash1, hash2, hash1 == hash2
    return hash1, hash2, None


def hash_lines(content, algorithm):
    """Hash every non-blank line of content, numbering the lines from 1."""
    lines = [line for line in re.split(r"\r?\n", content) if line.strip() != ""]
    return [
        {"line": index + 1, "input": line, "hash": compute_hash(line, algorithm)}
        for index, line in enumerate(lines)
    ]


def generate_salt(num_bytes=16):
    """Random salt as lowercase hex (32 characters by default)."""
    return get_random_bytes(num_bytes).hex()


def is_hex_digest(value):
    return bool(HEX_RE.match(value))


def visualize_hash(hex_digest):
    """
    Turn a hex digest into an 8x8 grid of (hue, saturation, lightness) triples.

    Each pixel reads a 4-character window starting at (i*2) mod len(digest):
    two characters for the hue, one for saturation, one for lightness.
    Missing saturation/lightness characters fall back to '8'. Windows shorter
    than two characters are skipped, so odd-length digests yield fewer pixels.
    Digests shorter than 16 characters give an empty grid.
    """
    if len(hex_digest) < MIN_VISUALIZE_LENGTH:
        return []

    pixels = []
    for i in range(GRID_SIZE * GRID_SIZE):
        start = (i * 2) % len(hex_digest)
        segment = hex_digest[start:start + 4]
        if len(segment) < 2:
            continue

        hue = (int(segment[0:2], 16) / 255) * 360
        saturation = 60 + (int(segment[2:3] or "8", 16) / 15) * 30
        lightness = 40 + (int(segment[3:4] or "8", 16) / 15) * 30

        pixels.append((hue, saturation, lightness))
    return pixels


def hsl_css(color):
    """Format a (hue, saturation, lightness) triple as a CSS hsl() value."""
    hue, saturation, lightness = color
    return f"hsl({hue:g}, {saturation:g}%, {lightness:g}%)"
