"""Seeded random number generator for reproducible scenarios."""
from __future__ import annotations

import random
import zlib
from typing import Sequence, TypeVar

T = TypeVar("T")


class SeededRNG:
    """Wrapper around random.Random for deterministic scenario generation."""

    def __init__(self, seed: int):
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def random(self) -> float:
        return self._rng.random()

    def sample(self, population: Sequence[T], k: int) -> list[T]:
        k = max(0, min(k, len(population)))
        return self._rng.sample(list(population), k)

    def shuffle(self, seq: list) -> None:
        self._rng.shuffle(seq)

    def fork(self, label: str) -> SeededRNG:
        """Child RNG whose seed depends only on this seed and *label*.

        Stable across processes (CRC32, not ``hash()``).
        """
        child_seed = zlib.crc32(f"{self._seed}:{label}".encode("utf-8"))
        return SeededRNG(child_seed)
