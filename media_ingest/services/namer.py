"""
Storage key generation.

Keys look like "1718031234567_042.jpg": epoch milliseconds, a random draw in
0-999 and the lowercased original extension. Uniqueness is probabilistic
(two keys from the same millisecond collide with p ~ 1/1000); storage is
never queried for an existing key.
"""
import random
import time


def file_extension(name: str) -> str:
    """Lowercased text after the last dot, or "" if the name has none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def generate_key(name: str) -> str:
    timestamp = int(time.time() * 1000)
    draw = random.randint(0, 999)
    return f"{timestamp}_{draw}.{file_extension(name)}"


def thumbnail_name(name: str) -> str:
    # Thumbnails are always re-encoded as JPEG
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return f"thumb_{stem}.jpg"
