"""Characterization of a located peak: prominence, width and tail climb.

All routines take the phase angles of the (bridged) logical index space as a numpy
array and a logical peak index.

Prominence follows the usual topographic definition: the height of the peak above
the lowest point between it and the nearest strictly higher sample (or the buffer
boundary). A second rule, measuring against the lowest sample anywhere in the index
space, is kept as a named alternative.

Width is the full width at half prominence (FWHM), see MathWorks findpeaks:
    https://www.mathworks.com/help/signal/ref/findpeaks.html#buhd6xj
By default it is counted in whole samples; the interpolated variant uses
scipy.signal.peak_widths with the same half-prominence reference height.
"""

from enum import Enum

import numpy as np
from scipy.signal import peak_widths

# A forward step of the phase angle no larger than this is treated as noise, not as
# a rise, when checking whether a peak keeps climbing past the end of a capture.
NOISE_TOLERANCE = 0.9

# A climbing check tolerates fewer than this many non-rising steps.
MAX_CLIMB_FAILURES = 2


class ProminenceRule(Enum):
    """Baseline used to measure prominence.

    NEAREST_HIGHER: lowest sample between the peak and the nearest strictly higher
        sample on each side (or the buffer ends).
    BUFFER_ENDS: lowest sample anywhere between the buffer ends.
    """

    NEAREST_HIGHER = "nearest_higher"
    BUFFER_ENDS = "buffer_ends"


def nearest_higher_prominence(phase: np.ndarray, peak_index: int) -> float:
    """Prominence bounded by the nearest strictly higher sample on each side.

    Args:
        phase: Phase angles of the index space.
        peak_index: Index of the peak.

    Returns:
        Peak value minus the minimum within [left_boundary, right_boundary].
    """
    peak_value = phase[peak_index]

    higher_left = np.flatnonzero(phase[:peak_index] > peak_value)
    left_boundary = int(higher_left[-1]) if higher_left.size else 0

    higher_right = np.flatnonzero(phase[peak_index + 1 :] > peak_value)
    right_boundary = peak_index + 1 + int(higher_right[0]) if higher_right.size else len(phase) - 1

    base = np.min(phase[left_boundary : right_boundary + 1])
    return float(peak_value - base)


def buffer_ends_prominence(phase: np.ndarray, peak_index: int) -> float:
    """Prominence against the lowest sample on either side, scanning to both ends."""
    peak_value = phase[peak_index]
    left_min = min(peak_value, float(np.min(phase[: peak_index + 1])))
    right_min = min(peak_value, float(np.min(phase[peak_index:])))
    return float(peak_value - min(left_min, right_min))


def calculate_prominence(
    phase: np.ndarray,
    peak_index: int,
    rule: ProminenceRule = ProminenceRule.NEAREST_HIGHER,
) -> float:
    """Calculate the prominence of the peak at ``peak_index`` under ``rule``.

    Raises:
        ValueError: If rule is not a ProminenceRule.
    """
    if rule is ProminenceRule.NEAREST_HIGHER:
        return nearest_higher_prominence(phase, peak_index)
    if rule is ProminenceRule.BUFFER_ENDS:
        return buffer_ends_prominence(phase, peak_index)
    raise ValueError(f"Unknown prominence rule: {rule!r}")


def _half_prominence_crossings(
    phase: np.ndarray, peak_index: int, half_height: float
) -> tuple[int, int]:
    left = peak_index
    while left > 0 and phase[left] > half_height:
        left -= 1

    right = peak_index
    while right < len(phase) - 1 and phase[right] > half_height:
        right += 1

    return left, right


def calculate_width(
    phase: np.ndarray,
    peak_index: int,
    prominence: float,
    interpolate: bool = False,
) -> float:
    """Calculate the full width at half prominence of a peak.

    The walk moves outwards from the peak while samples stay above
    ``peak_value - prominence / 2`` and stops at the first sample at or below that
    height, or at the buffer boundary.

    Args:
        phase: Phase angles of the index space.
        peak_index: Index of the peak.
        prominence: Prominence of the peak (see calculate_prominence).
        interpolate: If True, return the fractional width between linearly
            interpolated crossing positions instead of whole samples.

    Returns:
        Width in samples. Whole-sample widths are returned as floats holding an
        integer value.
    """
    if not interpolate:
        half_height = phase[peak_index] - prominence / 2.0
        left, right = _half_prominence_crossings(phase, peak_index, half_height)
        return float(abs(right - left))

    if prominence <= 0:
        return 0.0

    widths, _, _, _ = peak_widths(
        phase,
        np.array([peak_index], dtype=np.intp),
        rel_height=0.5,
        prominence_data=(
            np.array([prominence], dtype=np.float64),
            np.array([0], dtype=np.intp),
            np.array([len(phase) - 1], dtype=np.intp),
        ),
    )
    return float(widths[0])


def is_peak_climbing(
    phase: np.ndarray, peak_index: int, noise_tolerance: float = NOISE_TOLERANCE
) -> bool:
    """Check whether the signal is still rising from the peak to the end of the buffer.

    A step counts as a failure when its first difference is at most
    ``noise_tolerance``. The peak is considered still climbing, i.e. the true maximum
    may lie beyond this capture, when fewer than two steps fail.

    Args:
        phase: Phase angles of one buffer (local indices).
        peak_index: Local index of the peak within that buffer.
        noise_tolerance: Largest step still treated as noise.

    Returns:
        True if still climbing. False if the peak sits on either end of the buffer.
    """
    if peak_index <= 0 or peak_index >= len(phase) - 1:
        return False

    steps = np.diff(phase[peak_index:])
    failures = int(np.count_nonzero(steps <= noise_tolerance))
    return failures < MAX_CLIMB_FAILURES
