import numpy as np
import pandas as pd

from phasepeak.processing.peak_detection import PeakSearchResult


def damping_ratio(resonance_frequency: float, fwhm: float) -> float:
    """Damping ratio of a resonance from its frequency and full width at half maximum"""
    return resonance_frequency / (2 * np.pi * fwhm)


def lorentzian(
    frequency: float | np.ndarray,
    peak_height: float,
    resonance_frequency: float,
    half_width: float,
) -> float | np.ndarray:
    """Lorentzian line shape.

    Args:
        frequency: Frequency or array of frequencies to evaluate
        peak_height: Area-normalized amplitude of the line
        resonance_frequency: Centre of the line
        half_width: Half width at half maximum

    Returns:
        Line shape value(s) at frequency
    """
    return (peak_height / np.pi) * (
        half_width / ((frequency - resonance_frequency) ** 2 + half_width**2)
    )


def get_resonance_features(
    result: PeakSearchResult, frequencies: np.ndarray | pd.Series
) -> dict[str, float]:
    """
    Map an accepted peak onto the frequency axis of its sweep.

    Args:
        result (PeakSearchResult): Accepted result of find_peak or find_overlap_peak
        frequencies (np.ndarray | pd.Series): Sweep frequency of every sample in the
            (bridged) index space, uniformly spaced

    Returns:
        dict: resonance frequency, FWHM in frequency units, damping ratio and the
        peak's phase angle

    Raises:
        ValueError: If the result was not accepted or the frequency axis is too short
    """
    if not result.accepted:
        raise ValueError(f"Peak was not accepted ({result.rejection_reason})")

    frequencies = np.asarray(frequencies, dtype=float)
    if len(frequencies) < 2 or result.peak_index >= len(frequencies):
        raise ValueError(
            f"Frequency axis of {len(frequencies)} points does not cover index {result.peak_index}"
        )

    resolution = float((frequencies[-1] - frequencies[0]) / (len(frequencies) - 1))
    resonance_frequency = float(frequencies[result.peak_index])
    fwhm = abs(result.width * resolution)

    return {
        "resonance_frequency": resonance_frequency,
        "fwhm": fwhm,
        "damping_ratio": damping_ratio(resonance_frequency, fwhm) if fwhm > 0 else np.nan,
        "peak_phase_angle": result.peak_value,
        "prominence": result.prominence,
    }
