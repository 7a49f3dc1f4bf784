import random
import re
from typing import List, Optional

INSERT_MIN = 1
INSERT_MAX = 999

RANDOM_MIN = 1
RANDOM_MAX = 100
RANDOM_COUNT = (8, 12)


class InvalidValueError(ValueError):
    """Raised when typed input cannot be used for the requested action."""


def parse_int(raw: str) -> int:
    text = (raw or "").strip()
    if not text:
        raise InvalidValueError("Please enter a value first.")
    try:
        return int(text)
    except ValueError:
        raise InvalidValueError(f"{text!r} is not a valid integer.") from None


def parse_insert_value(raw: str) -> int:
    try:
        value = parse_int(raw)
    except InvalidValueError:
        raise InvalidValueError(
            f"Please enter a valid number ({INSERT_MIN}-{INSERT_MAX})"
        ) from None
    if not INSERT_MIN <= value <= INSERT_MAX:
        raise InvalidValueError(
            f"Please enter a valid number ({INSERT_MIN}-{INSERT_MAX})"
        )
    return value


def parse_sequence(text: str) -> List[int]:
    if not text:
        return []
    normalized = text.replace("，", ",")
    tokens = [part for part in re.split(r"[,\s]+", normalized) if part]
    return [parse_insert_value(tok) for tok in tokens]


def random_values(rng: Optional[random.Random] = None) -> List[int]:
    rng = rng or random
    count = rng.randint(*RANDOM_COUNT)
    return rng.sample(range(RANDOM_MIN, RANDOM_MAX + 1), count)
