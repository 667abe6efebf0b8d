"""Seeded random sources for map generation.

The layout engine never touches module-level random state. Whoever starts a
generation owns an RNGProvider and hands explicit RNGs down to the code that
needs them. Each named domain gets its own stream, derived from the master
seed and the domain name alone, so:

1. The same master seed always produces the same map
2. Drawing more numbers in one domain leaves every other domain unchanged
3. Domains can be added or dropped without disturbing the rest

Usage:
    provider = RNGProvider(master_seed=12345)
    fill_rng = provider.get("map.area_fill")

    index = pick_weighted(fill_rng, [1000, 250, 250])
    shuffle_in_place(fill_rng, cells)

Domain names are dotted, coarse to fine:
    - "map.generate", "map.area_fill"
    - "settings.randomize"
"""

from __future__ import annotations

import zlib
from collections.abc import MutableSequence, Sequence
from random import Random
from typing import TYPE_CHECKING, TypeAlias, TypeVar

if TYPE_CHECKING:
    from mapweave.types import RandomSeed

T = TypeVar("T")


def derive_seed(master_seed: int | str, domain: str) -> int:
    """Seed of one domain's stream.

    crc32 rather than hash(): string hashing is salted per interpreter run.
    """
    return zlib.crc32(f"{master_seed}:{domain}".encode())


class RNGStream:
    """A named domain of an RNGProvider, usable wherever a Random is.

    Every call looks the domain's generator up again, so a stream handed out
    before RNGProvider.reset() draws from the reseeded generator afterwards.
    """

    def __init__(self, provider: RNGProvider, domain: str) -> None:
        self._provider = provider
        self._domain = domain

    @property
    def domain(self) -> str:
        return self._domain

    def __repr__(self) -> str:
        return f"RNGStream({self._domain!r})"

    def _generator(self) -> Random:
        return self._provider.generator(self._domain)

    def random(self) -> float:
        return self._generator().random()

    def randint(self, a: int, b: int) -> int:
        """Integer in [a, b], both ends included."""
        return self._generator().randint(a, b)

    def randrange(self, start: int, stop: int | None = None, step: int = 1) -> int:
        return self._generator().randrange(start, stop, step)

    def choice(self, seq: Sequence[T]) -> T:
        return self._generator().choice(seq)

    def shuffle(self, x: MutableSequence) -> None:
        self._generator().shuffle(x)

    def uniform(self, a: float, b: float) -> float:
        return self._generator().uniform(a, b)


# Anything generation code accepts as a random source.
RNG: TypeAlias = Random | RNGStream


class RNGProvider:
    """Hands out one independent stream per domain, all from one master seed.

    A master seed of None seeds every domain from system entropy instead,
    which makes the output non-reproducible.
    """

    def __init__(self, master_seed: RandomSeed = None) -> None:
        self._master_seed = master_seed
        self._generators: dict[str, Random] = {}
        self._streams: dict[str, RNGStream] = {}

    @property
    def master_seed(self) -> RandomSeed:
        return self._master_seed

    def get(self, domain: str) -> RNGStream:
        """Return the stream for domain.

        The same RNGStream object is returned on every call, and stays valid
        across reset().

        Args:
            domain: Dotted domain name, e.g. "map.area_fill".
        """
        stream = self._streams.get(domain)
        if stream is None:
            stream = self._streams[domain] = RNGStream(self, domain)
        return stream

    def generator(self, domain: str) -> Random:
        """The Random currently backing domain, created on first use."""
        generator = self._generators.get(domain)
        if generator is None:
            if self._master_seed is None:
                generator = Random()
            else:
                generator = Random(derive_seed(self._master_seed, domain))
            self._generators[domain] = generator
        return generator

    def reset(self, master_seed: RandomSeed = None) -> None:
        """Reseed every domain from a new master seed.

        Streams already handed out keep working and restart from the new seed.
        """
        self._master_seed = master_seed
        self._generators.clear()


# =============================================================================
# Helpers over any RNG
# =============================================================================


def next_int(rng: RNG, low: int, high: int) -> int:
    """Return a random integer N such that low <= N < high."""
    return rng.randrange(low, high)


def shuffle_in_place(
    rng: RNG,
    items: MutableSequence[T],
    start: int = 0,
    count: int | None = None,
) -> None:
    """Fisher-Yates shuffle of items[start:start + count], leaving the rest alone.

    Args:
        rng: Random source.
        items: Sequence to shuffle in place.
        start: First index of the shuffled slice.
        count: Number of items in the slice. Defaults to everything after start.
    """
    if count is None:
        count = len(items) - start
    if start < 0 or count < 0 or start + count > len(items):
        raise ValueError(
            f"Slice [{start}, {start + count}) is out of range for {len(items)} items"
        )
    for i in range(count - 1, 0, -1):
        j = rng.randrange(0, i + 1)
        items[start + i], items[start + j] = items[start + j], items[start + i]


def pick_weighted(rng: RNG, weights: Sequence[int]) -> int:
    """Pick an index with probability proportional to its weight.

    Args:
        rng: Random source.
        weights: Non-negative integer weights. Their sum must be positive.

    Returns:
        The chosen index into weights.

    Raises:
        ValueError: If weights is empty or sums to zero.
    """
    total = sum(weights)
    if not weights or total <= 0:
        raise ValueError("pick_weighted needs at least one positive weight")

    roll = rng.randrange(0, total)
    for index, weight in enumerate(weights):
        if roll < weight:
            return index
        roll -= weight

    # Unreachable for non-negative weights.
    raise ValueError(f"Negative weight in {list(weights)}")
