import hashlib

_SCALE = float(1 << 53)


def unit(seed: int) -> float:
    """
    Map an integer seed (a timestamp) to a reproducible value in [0, 1).

    SHA-256 of the seed's decimal form, top 53 bits scaled to a double. The
    same seed gives the same value in every process; Python's built-in
    `hash()` is salted per process and is not used.
    """
    digest = hashlib.sha256(str(int(seed)).encode("ascii")).digest()
    return (int.from_bytes(digest[:8], "big") >> 11) / _SCALE
