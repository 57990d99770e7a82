"""Reproducible random streams.

Every stream is derived from ``(seed, stream_id)`` only, through
:class:`numpy.random.SeedSequence` spawn keys. Asking for stream ``k`` twice,
or asking for streams in a different order or on a different thread, always
gives the same values. Strategies draw per-individual decisions from the
individual's own stream, so results do not depend on how evaluation is
scheduled.

Example:
    >>> root = seed(42)
    >>> a = root.stream(3).uniform(0.0, 1.0)
    >>> b = root.stream(3).uniform(0.0, 1.0)
    >>> a == b
    True
"""

from __future__ import annotations

from typing import Any, MutableSequence

import numpy as np

from natureopt.foundation.exceptions import InvalidParameterError

# Reserved id for driver-level decisions (pairing shuffles, LHS strata).
DRIVER_STREAM = 2**32 - 1

_SEED_LIMIT = 2**64


class Rng:
    """One deterministic stream backed by a PCG64 generator."""

    __slots__ = ("_gen", "stream_id")

    def __init__(self, generator: np.random.Generator, stream_id: int) -> None:
        self._gen = generator
        self.stream_id = stream_id

    @property
    def generator(self) -> np.random.Generator:
        """Underlying NumPy generator, for vectorized operators."""
        return self._gen

    def random(self, size: Any = None) -> Any:
        return self._gen.random(size)

    def uniform(self, low: Any, high: Any, size: Any = None) -> Any:
        """Uniform sample in ``[low, high)``; ``low > high`` is a caller error."""
        if np.any(np.asarray(low) > np.asarray(high)):
            raise ValueError(f"uniform() requires low <= high, got low={low!r}, high={high!r}.")
        return self._gen.uniform(low, high, size)

    def normal(self, mean: Any = 0.0, std: Any = 1.0, size: Any = None) -> Any:
        if np.any(np.asarray(std) < 0.0):
            raise ValueError(f"normal() requires std >= 0, got {std!r}.")
        return self._gen.normal(mean, std, size)

    def index(self, n: int) -> int:
        """Uniform integer over ``[0, n)``."""
        if n <= 0:
            raise ValueError(f"index() requires n > 0, got {n}.")
        return int(self._gen.integers(0, n))

    def maybe(self, p: float) -> bool:
        """Bernoulli trial with success probability ``p``."""
        return bool(self._gen.random() < p)

    def shuffle(self, seq: MutableSequence[Any] | np.ndarray) -> None:
        """Shuffle a mutable sequence in place."""
        if isinstance(seq, np.ndarray):
            self._gen.shuffle(seq)
            return
        order = self._gen.permutation(len(seq))
        items = [seq[i] for i in order]
        seq[:] = items

    def distinct(self, n: int, k: int, exclude: int | None = None) -> np.ndarray:
        """Draw ``k`` distinct indices from ``[0, n)``, optionally skipping ``exclude``."""
        pool = n - (1 if exclude is not None and 0 <= exclude < n else 0)
        if k > pool:
            raise ValueError(f"Cannot draw {k} distinct indices from a pool of {pool}.")
        picks = self._gen.choice(pool, size=k, replace=False)
        if exclude is not None and 0 <= exclude < n:
            picks = np.where(picks >= exclude, picks + 1, picks)
        return np.asarray(picks, dtype=np.intp)


class RngRoot:
    """Per-run root; hands out independent streams keyed by integer ids."""

    __slots__ = ("seed",)

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)

    def stream(self, stream_id: int) -> Rng:
        """Fresh stream for ``stream_id``; pure in ``(seed, stream_id)``."""
        stream_id = int(stream_id)
        if stream_id < 0:
            raise ValueError(f"stream ids must be non-negative, got {stream_id}.")
        seq = np.random.SeedSequence(self.seed, spawn_key=(stream_id,))
        return Rng(np.random.Generator(np.random.PCG64(seq)), stream_id)

    def driver(self) -> Rng:
        return self.stream(DRIVER_STREAM)

    def __repr__(self) -> str:
        return f"RngRoot(seed={self.seed})"


def seed(value: int | None = None) -> RngRoot:
    """Create the run-level RNG root.

    ``None`` draws fresh OS entropy; the drawn value is kept on the root so the
    run can be repeated.
    """
    if value is None:
        value = int(np.random.SeedSequence().entropy % _SEED_LIMIT)
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidParameterError("seed", value, "a non-negative integer or None")
    if not 0 <= int(value) < _SEED_LIMIT:
        raise InvalidParameterError("seed", value, "in [0, 2**64)")
    return RngRoot(int(value))


__all__ = ["DRIVER_STREAM", "Rng", "RngRoot", "seed"]
