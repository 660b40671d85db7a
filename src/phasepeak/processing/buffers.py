"""Sample buffers, the bridged two-buffer view and the per-call exclusion set.

A capture window is a fixed-length sequence of impedance-phase samples. The search
engine only looks at phase angles, so every buffer is reduced once to a float64
array. Two consecutive captures can be addressed as one logical index space through
:class:`BridgedView`: indices ``[0, size_a)`` live in buffer A and
``[size_a, size_a + size_b)`` in buffer B.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd

from phasepeak.utils.validation import validate_buffer_size

# Number of previously rejected candidates remembered within one search.
EXCLUSION_CAPACITY = 3


@dataclass(frozen=True)
class Sample:
    """One acquisition point. ``impedance`` is carried along but never interpreted."""

    phase_angle: float
    impedance: float = 0.0


class BufferSource(Enum):
    """Buffer of a bridged view that holds a given sample."""

    A = "A"
    B = "B"


@dataclass(frozen=True)
class PeakCandidate:
    """Result of a maximum scan.

    Attributes:
        logical_index: Index in the (bridged) logical index space.
        value: Phase angle at the index, or 0.0 when no sample rose above the
            scan's zero starting point.
        source: Buffer holding the sample.
    """

    logical_index: int
    value: float
    source: BufferSource = BufferSource.A


def as_phase_array(
    buffer: Sequence[Sample] | np.ndarray | pd.DataFrame, size: int | None = None
) -> np.ndarray:
    """Extract the phase angles of the first ``size`` samples as a float64 array.

    Args:
        buffer: Sequence of Sample, 1-D array of phase angles, or a DataFrame with a
            ``phase_angle`` column (see SweepInput).
        size: Number of leading samples to use. Defaults to the whole buffer.

    Returns:
        A private copy of the phase angles.

    Raises:
        ValueError: If the buffer is not one-dimensional or size is out of range.
    """
    if isinstance(buffer, pd.DataFrame):
        phase = buffer["phase_angle"].to_numpy(dtype=float)
    elif isinstance(buffer, np.ndarray):
        phase = buffer.astype(float)
    else:
        phase = np.array([sample.phase_angle for sample in buffer], dtype=float)

    if phase.ndim != 1:
        raise ValueError(f"Sample buffer must be one-dimensional, got shape {phase.shape}")

    if size is None:
        size = len(phase)
    validate_buffer_size(size, len(phase))

    return phase[:size].copy()


class BridgedView:
    """Two sample buffers addressed through one logical index space.

    Buffer B always follows buffer A. Without B the view is a plain single buffer,
    which lets the scan, prominence and width routines share one code path.
    """

    def __init__(self, buffer_a: np.ndarray, buffer_b: np.ndarray | None = None):
        self.buffer_a = np.asarray(buffer_a, dtype=float)
        self.buffer_b = None if buffer_b is None else np.asarray(buffer_b, dtype=float)
        self.values = (
            self.buffer_a
            if self.buffer_b is None
            else np.concatenate([self.buffer_a, self.buffer_b])
        )

    @property
    def is_bridged(self) -> bool:
        return self.buffer_b is not None

    @property
    def size_a(self) -> int:
        return len(self.buffer_a)

    @property
    def size_b(self) -> int:
        return 0 if self.buffer_b is None else len(self.buffer_b)

    @property
    def trailing_source(self) -> BufferSource:
        """Buffer whose end is the end of the whole capture."""
        return BufferSource.B if self.is_bridged else BufferSource.A

    def __len__(self) -> int:
        return self.size_a + self.size_b

    def __getitem__(self, logical_index: int) -> float:
        return float(self.values[logical_index])

    def buffer(self, source: BufferSource) -> np.ndarray:
        if source is BufferSource.A:
            return self.buffer_a
        if self.buffer_b is None:
            raise ValueError("Single-buffer view has no buffer B")
        return self.buffer_b

    def locate(self, logical_index: int) -> tuple[BufferSource, int]:
        """Translate a logical index into (buffer, local index)."""
        if not 0 <= logical_index < len(self):
            raise IndexError(f"Logical index {logical_index} outside [0, {len(self)})")
        if logical_index < self.size_a:
            return BufferSource.A, logical_index
        return BufferSource.B, logical_index - self.size_a

    def logical_index(self, source: BufferSource, local_index: int) -> int:
        """Translate (buffer, local index) into a logical index."""
        return local_index if source is BufferSource.A else self.size_a + local_index


class ExclusionSet:
    """Fixed-capacity set of logical indices rejected earlier in one search.

    Once full, further additions are dropped. The retry loop still counts the
    attempt, so the loop terminates regardless of the capacity.
    """

    def __init__(self, capacity: int = EXCLUSION_CAPACITY):
        if capacity < 0:
            raise ValueError(f"Exclusion capacity must be non-negative, got {capacity}")
        self.capacity = capacity
        self._indices: list[int] = []

    def add(self, index: int) -> bool:
        """Remember ``index``. Returns False if it was dropped because the set is full."""
        if index in self._indices:
            return True
        if self.is_full:
            return False
        self._indices.append(int(index))
        return True

    @property
    def is_full(self) -> bool:
        return len(self._indices) >= self.capacity

    def as_array(self) -> np.ndarray:
        return np.array(self._indices, dtype=int)

    def __contains__(self, index: object) -> bool:
        return index in self._indices

    def __iter__(self) -> Iterator[int]:
        return iter(self._indices)

    def __len__(self) -> int:
        return len(self._indices)
