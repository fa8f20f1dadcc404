"""
Hashing and reading ID generation utilities.

Reading identifiers are derived from the reading's own fields so that
parsing the same file twice yields the same identifiers.
"""

import hashlib
from datetime import datetime


def generate_reading_id(
    timestamp: datetime,
    systolic: int,
    diastolic: int,
    pulse: int | None,
    irregular_pulse: bool,
    source: str,
    algorithm: str = "sha256",
) -> str:
    """
    Generate a deterministic reading ID.

    Args:
        timestamp: Measurement timestamp.
        systolic: Systolic pressure in mmHg.
        diastolic: Diastolic pressure in mmHg.
        pulse: Pulse in bpm, if recorded.
        irregular_pulse: Irregular pulse flag.
        source: Device/source label.
        algorithm: hashlib algorithm name.

    Returns:
        Hex digest identifying the reading.
    """
    hash_data = [
        timestamp.isoformat(),
        str(systolic),
        str(diastolic),
        "" if pulse is None else str(pulse),
        "1" if irregular_pulse else "0",
        source,
    ]
    hash_string = "|".join(hash_data)

    hash_func = hashlib.new(algorithm)
    hash_func.update(hash_string.encode("utf-8"))

    return hash_func.hexdigest()


def compute_bytes_hash(data: bytes, algorithm: str = "md5") -> str:
    """
    Compute the hash of an in-memory file.

    Args:
        data: Raw file contents.
        algorithm: Hash algorithm to use.

    Returns:
        Hex string of the hash.
    """
    hash_func = hashlib.new(algorithm)
    hash_func.update(data)
    return hash_func.hexdigest()
