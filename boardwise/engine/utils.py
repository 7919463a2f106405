"""
Utility functions for the game engine.
"""

import random
import secrets
import string
import time

# URL-safe alphabet, same length as nanoid defaults
ID_CHARS = string.ascii_letters + string.digits + "_-"
ID_LENGTH = 21


def new_id() -> str:
    """Generate a short unique identifier for boards, tiles, options and log entries."""
    return "".join(secrets.choice(ID_CHARS) for _ in range(ID_LENGTH))


def now_ms() -> int:
    return int(time.time() * 1000)


def roll_die(sides: int, rng: random.Random | None = None) -> int:
    """Roll one die with the given number of sides (uniform in [1, sides])."""
    rng = rng or random
    return rng.randint(1, max(1, sides))


def clamp_position(position: int, last_index: int) -> int:
    return max(0, min(last_index, position))
