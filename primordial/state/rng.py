"""
Seeded RNG - Mulberry32 generator with djb2 string hashing.

Every random decision in the engine (hit rolls, AI weighted picks, map layout)
is drawn from a SeededRandom instance that the caller passes in explicitly.
Two instances built from the same seed yield the same sequence on every
platform: all state lives in a 32-bit unsigned integer and every arithmetic
step is masked, so nothing depends on float rounding beyond the final
division by 2^32.

Seeds:
- string seeds are hashed with djb2 (hash * 33 + char) to 32 bits
- integer seeds are used directly (masked to 32 bits)
- daily challenge seeds look like "DAILY-2024-03-15"
"""

import time
import random as py_random
import string
from datetime import date, datetime
from typing import List, MutableSequence, Optional, Sequence, TypeVar, Union

from ..errors import EmptyInputError, InvalidArgumentError

T = TypeVar("T")

MASK_32 = 0xFFFFFFFF
TWO_POW_32 = 4294967296.0

MULBERRY_INCREMENT = 0x6D2B79F5
DJB2_INITIAL = 5381

DAILY_PREFIX = "DAILY-"
RUN_PREFIX = "RUN-"


def _imul(a: int, b: int) -> int:
    """32-bit multiply keeping the low 32 bits (JavaScript Math.imul, unsigned)."""
    return (a * b) & MASK_32


def hash_seed(seed_string: str) -> int:
    """
    Hash a seed string to an unsigned 32-bit integer (djb2).

    Order-sensitive: "ab" and "ba" hash differently.
    """
    value = DJB2_INITIAL
    for char in seed_string:
        value = ((value << 5) + value + ord(char)) & MASK_32
    return value


class SeededRandom:
    """
    Deterministic PRNG (Mulberry32).

    Usage:
        rng = SeededRandom("DAILY-2024-03-15")
        roll = rng.next()            # [0, 1)
        count = rng.next_int(2, 4)   # 2, 3 or 4
        node_type = rng.weighted_pick(types, weights)

    State can be snapshotted with get_seed() and restored with set_seed() to
    resume a sequence after a save/load.
    """

    def __init__(self, seed: Union[str, int]):
        if isinstance(seed, str):
            self._initial_seed = hash_seed(seed)
        else:
            self._initial_seed = int(seed) & MASK_32
        self._state = self._initial_seed

    def next(self) -> float:
        """Advance one step and return a float in [0, 1)."""
        self._state = (self._state + MULBERRY_INCREMENT) & MASK_32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32
        return ((t ^ (t >> 14)) & MASK_32) / TWO_POW_32

    def next_int(self, min_val: int, max_val: int) -> int:
        """Random int in [min_val, max_val] INCLUSIVE."""
        return int(self.next() * (max_val - min_val + 1)) + min_val

    def next_float(self, min_val: float, max_val: float) -> float:
        """Random float in [min_val, max_val)."""
        return self.next() * (max_val - min_val) + min_val

    def pick(self, items: Sequence[T]) -> T:
        """Pick one element uniformly."""
        if len(items) == 0:
            raise EmptyInputError("Cannot pick from an empty sequence")
        return items[int(self.next() * len(items))]

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Fisher-Yates shuffle in place. Returns the same sequence."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def weighted_pick(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """
        Pick one element with probability proportional to its weight.

        Walks the cumulative weights, subtracting each from a roll in
        [0, total); the first weight that takes the roll to <= 0 wins.
        """
        if len(items) == 0 or len(items) != len(weights):
            raise InvalidArgumentError(
                f"items and weights must have the same non-zero length "
                f"(got {len(items)} items, {len(weights)} weights)"
            )

        total = sum(weights)
        roll = self.next() * total
        for item, weight in zip(items, weights):
            roll -= weight
            if roll <= 0:
                return item
        return items[-1]

    def chance(self, probability: float) -> bool:
        """True with the given probability (0-1)."""
        return self.next() < probability

    def reset(self) -> None:
        """Restart the sequence from the initial seed."""
        self._state = self._initial_seed

    def get_seed(self) -> int:
        """Current internal state (for save/restore)."""
        return self._state

    def set_seed(self, seed: int) -> None:
        """Restore internal state captured with get_seed()."""
        self._state = int(seed) & MASK_32

    def get_initial_seed(self) -> int:
        """The hashed seed this generator was built from."""
        return self._initial_seed

    def copy(self) -> "SeededRandom":
        """Independent generator at the same position in the sequence."""
        clone = SeededRandom(self._initial_seed)
        clone._state = self._state
        return clone

    def __repr__(self) -> str:
        return f"SeededRandom(initial={self._initial_seed:#010x}, state={self._state:#010x})"


# =============================================================================
# SEED HELPERS
# =============================================================================

def generate_daily_seed(day: Optional[date] = None) -> str:
    """Seed shared by every player on a given day, e.g. "DAILY-2024-03-15"."""
    day = day or date.today()
    return f"{DAILY_PREFIX}{day.strftime('%Y-%m-%d')}"


def generate_run_seed() -> str:
    """Fresh, non-reproducible seed for a normal run."""
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(py_random.choice(alphabet) for _ in range(7))
    return f"{RUN_PREFIX}{int(time.time() * 1000)}-{suffix}"


def is_daily_seed(seed: str) -> bool:
    """Check if a seed belongs to a daily challenge."""
    return seed.startswith(DAILY_PREFIX)


def get_date_from_daily_seed(seed: str) -> Optional[date]:
    """Extract the date from a daily seed. None if not daily or malformed."""
    if not is_daily_seed(seed):
        return None
    try:
        return datetime.strptime(seed[len(DAILY_PREFIX):], "%Y-%m-%d").date()
    except ValueError:
        return None


def sample_sequence(rng: SeededRandom, count: int) -> List[float]:
    """First `count` raw values of a generator (for CLI inspection)."""
    return [rng.next() for _ in range(count)]
