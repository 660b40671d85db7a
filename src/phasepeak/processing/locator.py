"""Bounded maximum scan and divide-and-conquer peak locators.

The locators bisect a search window, but every recursion level rescans the whole
permitted index space for its maximum; the window only decides which half the
neighbour test sends the search into. At termination the neighbour test holds, so the
reported sample is a local maximum with respect to the last window midpoint.

Phase angles are expected to be non-negative: the running maximum starts at 0.0.
"""

import logging

import numpy as np

from phasepeak.processing.buffers import BridgedView, BufferSource, ExclusionSet, PeakCandidate

logger = logging.getLogger(__name__)


def _scan(
    values: np.ndarray, indices: np.ndarray, exclusions: ExclusionSet
) -> tuple[int, float] | None:
    """Highest sample among ``indices`` not in ``exclusions``.

    Ties go to the first index in ``indices`` order. If nothing rises above 0.0 the
    first permitted index is reported with value 0.0.
    """
    if len(exclusions):
        indices = indices[~np.isin(indices, exclusions.as_array())]
    if indices.size == 0:
        return None

    candidates = values[indices]
    best = int(np.argmax(candidates))
    if candidates[best] > 0.0:
        return int(indices[best]), float(candidates[best])
    return int(indices[0]), 0.0


def scan_maximum(
    phase: np.ndarray,
    exclusions: ExclusionSet,
    start: int = 0,
    stop: int | None = None,
) -> PeakCandidate | None:
    """Find the highest phase angle in ``phase[start:stop]``, skipping excluded indices.

    Args:
        phase: Phase angles of a single buffer.
        exclusions: Indices rejected earlier in the current search.
        start: First index of the scanned range.
        stop: One past the last index of the scanned range. Defaults to the buffer end.

    Returns:
        The maximum as a PeakCandidate, or None if the range holds no permitted index.
    """
    if stop is None:
        stop = len(phase)
    found = _scan(phase, np.arange(start, stop), exclusions)
    if found is None:
        return None
    return PeakCandidate(logical_index=found[0], value=found[1], source=BufferSource.A)


def scan_maximum_bridged(
    view: BridgedView,
    exclusions: ExclusionSet,
    window_a: tuple[int, int],
    window_b: tuple[int, int],
) -> PeakCandidate | None:
    """Find the highest phase angle over a window on A and a window on B jointly.

    Windows are inclusive ``(left, right)`` pairs of local indices; an empty window has
    ``left > right``. Exclusions are logical indices. Buffer A is scanned first, so a
    tie between the buffers resolves to A.
    """
    (l1, r1), (l2, r2) = window_a, window_b
    indices = np.concatenate(
        [
            np.arange(l1, r1 + 1),
            np.arange(l2, r2 + 1) + view.size_a,
        ]
    )
    found = _scan(view.values, indices, exclusions)
    if found is None:
        return None

    source, _ = view.locate(found[0])
    return PeakCandidate(logical_index=found[0], value=found[1], source=source)


def locate_peak(
    phase: np.ndarray,
    exclusions: ExclusionSet,
    left: int = 0,
    right: int | None = None,
) -> PeakCandidate | None:
    """Locate a peak in a single buffer by divide and conquer.

    Args:
        phase: Phase angles of the buffer.
        exclusions: Indices that must not be reported.
        left: First index of the search window.
        right: Last index of the search window (inclusive). Defaults to the last index.

    Returns:
        The located peak, or None if the window is empty or every index is excluded.
    """
    if right is None:
        right = len(phase) - 1
    if left > right:
        return None

    mid = (left + right) // 2
    found = scan_maximum(phase, exclusions)
    if found is None:
        return None

    if mid == 0 or mid == len(phase) - 1:
        return found

    if found.value < phase[mid - 1]:
        return locate_peak(phase, exclusions, left, mid - 1)
    elif found.value < phase[mid + 1]:
        return locate_peak(phase, exclusions, mid + 1, right)
    return found


def locate_overlap_peak(
    view: BridgedView,
    exclusions: ExclusionSet,
    window_a: tuple[int, int] | None = None,
    window_b: tuple[int, int] | None = None,
) -> PeakCandidate | None:
    """Locate a peak across two consecutive buffers by divide and conquer.

    Only the window of the buffer holding the current maximum is bisected; the other
    window is passed through unchanged.

    Args:
        view: Bridged view over buffers A and B.
        exclusions: Logical indices that must not be reported.
        window_a: Inclusive local window on A. Defaults to the whole buffer.
        window_b: Inclusive local window on B. Defaults to the whole buffer.

    Returns:
        The located peak with its logical index and source buffer, or None when both
        windows are empty or every index in them is excluded.
    """
    if window_a is None:
        window_a = (0, view.size_a - 1)
    if window_b is None:
        window_b = (0, view.size_b - 1)

    if window_a[0] > window_a[1] and window_b[0] > window_b[1]:
        return None

    found = scan_maximum_bridged(view, exclusions, window_a, window_b)
    if found is None:
        return None

    buffer = view.buffer(found.source)
    left, right = window_a if found.source is BufferSource.A else window_b
    mid = (left + right) // 2

    if mid == 0 or mid == len(buffer) - 1:
        return found

    if found.value < buffer[mid - 1]:
        narrowed = (left, mid - 1)
    elif found.value < buffer[mid + 1]:
        narrowed = (mid + 1, right)
    else:
        return found

    logger.debug("Narrowing buffer %s window to %s", found.source.value, narrowed)
    if found.source is BufferSource.A:
        return locate_overlap_peak(view, exclusions, narrowed, window_b)
    return locate_overlap_peak(view, exclusions, window_a, narrowed)
