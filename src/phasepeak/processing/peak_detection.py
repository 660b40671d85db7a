"""Dominant resonance peak search in impedance-phase captures.

Each search commits to one dominant peak per capture and validates it through a
bounded sequence of trials:

1. Search: divide-and-conquer locator, skipping previously rejected indices
2. Prominence Check: too shallow a peak rejects the capture outright
3. Width Check: too narrow a peak is excluded and the search is retried
4. Tail Check: an accepted peak close to the end of the capture is tested for a
   still-rising tail, meaning the true maximum may lie in the next capture

`find_peak` searches one capture. `find_overlap_peak` searches two consecutive
captures as one bridged index space, for resonances straddling the boundary.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import pandas as pd

from phasepeak.processing.buffers import (
    EXCLUSION_CAPACITY,
    BridgedView,
    BufferSource,
    ExclusionSet,
    PeakCandidate,
    Sample,
    as_phase_array,
)
from phasepeak.processing.characterization import (
    NOISE_TOLERANCE,
    ProminenceRule,
    calculate_prominence,
    calculate_width,
    is_peak_climbing,
)
from phasepeak.processing.locator import locate_overlap_peak, locate_peak
from phasepeak.utils.validation import validate_index_space

logger = logging.getLogger(__name__)

# A candidate must rise more than this many degrees above its baseline. Shallower
# peaks are noise or an off-resonance sweep; the capture is rejected without retry.
MIN_PROMINENCE = 18.0

# A candidate must be wider than this many samples at half prominence. Narrower
# peaks are spikes; they are excluded and the search is retried.
MIN_WIDTH = 15

# Number of candidates tried per search.
MAX_ATTEMPTS = 3

# Accepted peaks this close to the end of the capture get the tail-climb check.
TAIL_WINDOW = 30

SampleBuffer = Sequence[Sample] | np.ndarray | pd.DataFrame


@dataclass(frozen=True)
class PeakSearchConfig:
    """Fixed thresholds of the peak search.

    Attributes:
        min_prominence: Prominence a candidate must exceed.
        min_width: Width in samples a candidate must exceed.
        max_attempts: Number of candidates tried before giving up.
        exclusion_capacity: Number of rejected candidates remembered per search.
            Rejections beyond it still consume an attempt.
        tail_window: Distance in samples from the end of the trailing buffer within
            which an accepted peak is checked for a still-rising tail.
        noise_tolerance: Largest forward step treated as noise by the tail check.
        prominence_rule: Baseline rule for prominence.
        interpolate_width: Use interpolated instead of whole-sample widths.
    """

    min_prominence: float = MIN_PROMINENCE
    min_width: float = MIN_WIDTH
    max_attempts: int = MAX_ATTEMPTS
    exclusion_capacity: int = EXCLUSION_CAPACITY
    tail_window: int = TAIL_WINDOW
    noise_tolerance: float = NOISE_TOLERANCE
    prominence_rule: ProminenceRule = ProminenceRule.NEAREST_HIGHER
    interpolate_width: bool = False


class RejectionReason(Enum):
    """Why a search ended without an accepted peak."""

    NO_PEAK_FOUND = "no_peak_found"
    LOW_PROMINENCE = "low_prominence"
    NARROW_WIDTH = "narrow_width"


class SearchStage(Enum):
    CANDIDATE = "candidate"
    ACCEPT = "accept"
    RETRY = "retry"
    REJECT = "reject"


@dataclass(frozen=True)
class PeakSearchEvent:
    """Progress record emitted for every stage transition of a search.

    Attributes:
        attempt: 1-based trial number.
        stage: Stage that produced the event.
        peak_index: Logical index of the current candidate, None before one is found.
        value: Phase angle of the candidate.
        prominence: Prominence of the candidate, once computed.
        width: Width of the candidate, once computed.
        reason: Rejection reason for REJECT events and for the failed check of RETRY
            events.
    """

    attempt: int
    stage: SearchStage
    peak_index: int | None = None
    value: float | None = None
    prominence: float | None = None
    width: float | None = None
    reason: RejectionReason | None = None


@dataclass(frozen=True)
class PeakSearchResult:
    """Outcome of one peak search.

    Attributes:
        accepted: Whether a peak passed the prominence and width checks.
        peak_index: Logical index of the accepted peak. On rejection, the index of the
            last candidate evaluated, or 0 if none was found.
        edge_case: Whether the accepted peak is still climbing at the end of the
            capture, i.e. the true maximum may lie in the next capture.
        peak_value: Phase angle at peak_index. np.nan if no candidate was found.
        prominence: Prominence of the last candidate. np.nan if not computed.
        width: Width of the last candidate in samples. np.nan if not computed.
        source: Buffer holding the peak in an overlap search, None otherwise.
        attempts: Number of trials run.
        rejection_reason: None when accepted.
        excluded_indices: Logical indices excluded by narrow-width retries.
        quality_flags: Non-fatal issues (e.g. "exclusion_capacity_exceeded").
    """

    accepted: bool
    peak_index: int
    edge_case: bool
    peak_value: float
    prominence: float
    width: float
    source: BufferSource | None
    attempts: int
    rejection_reason: RejectionReason | None
    excluded_indices: tuple[int, ...] = ()
    quality_flags: list[str] = field(default_factory=list)


EventSink = Callable[[PeakSearchEvent], None]


def _emit(event: PeakSearchEvent, event_sink: EventSink | None) -> None:
    logger.debug(
        "attempt=%d stage=%s index=%s value=%s prominence=%s width=%s reason=%s",
        event.attempt,
        event.stage.value,
        event.peak_index,
        event.value,
        event.prominence,
        event.width,
        event.reason.value if event.reason else None,
    )
    if event_sink is not None:
        event_sink(event)


def _check_tail_climb(
    view: BridgedView, candidate: PeakCandidate, config: PeakSearchConfig
) -> bool:
    """Run the tail-climb check if the candidate sits near the end of the capture.

    Only the trailing buffer counts: a peak near the end of buffer A of an overlap
    search continues into buffer B, which is part of the same search.
    """
    source, local_index = view.locate(candidate.logical_index)
    if source is not view.trailing_source:
        return False

    buffer = view.buffer(source)
    if local_index < len(buffer) - config.tail_window:
        return False

    return is_peak_climbing(buffer, local_index, config.noise_tolerance)


def _build_rejected_result(
    reason: RejectionReason,
    attempt: int,
    view: BridgedView,
    candidate: PeakCandidate | None,
    exclusions: ExclusionSet,
    quality_flags: list[str],
    prominence: float = np.nan,
    width: float = np.nan,
) -> PeakSearchResult:
    return PeakSearchResult(
        accepted=False,
        peak_index=candidate.logical_index if candidate else 0,
        edge_case=False,
        peak_value=view[candidate.logical_index] if candidate else np.nan,
        prominence=prominence,
        width=width,
        source=candidate.source if candidate and view.is_bridged else None,
        attempts=attempt,
        rejection_reason=reason,
        excluded_indices=tuple(exclusions),
        quality_flags=quality_flags,
    )


def _run_trials(
    view: BridgedView,
    locate: Callable[[ExclusionSet], PeakCandidate | None],
    config: PeakSearchConfig,
    event_sink: EventSink | None,
) -> PeakSearchResult:
    """Search, characterize and accept or retry within the attempt budget.

    Args:
        view: Index space of the search, used for characterization.
        locate: Locator bound to the view, called with the current exclusions.
        config: Search thresholds.
        event_sink: Optional receiver of progress events.

    Returns:
        PeakSearchResult of the first accepted candidate or of the rejection.
    """
    exclusions = ExclusionSet(config.exclusion_capacity)
    quality_flags: list[str] = []
    candidate: PeakCandidate | None = None
    prominence = width = np.nan

    for attempt in range(1, config.max_attempts + 1):
        # --- Search ---
        found = locate(exclusions)
        if found is None:
            _emit(
                PeakSearchEvent(attempt, SearchStage.REJECT, reason=RejectionReason.NO_PEAK_FOUND),
                event_sink,
            )
            return _build_rejected_result(
                RejectionReason.NO_PEAK_FOUND,
                attempt,
                view,
                candidate,
                exclusions,
                quality_flags,
                prominence,
                width,
            )

        candidate = found
        peak_index = candidate.logical_index
        peak_value = view[peak_index]
        _emit(PeakSearchEvent(attempt, SearchStage.CANDIDATE, peak_index, peak_value), event_sink)

        # --- Prominence check ---
        prominence = calculate_prominence(view.values, peak_index, config.prominence_rule)
        width = np.nan
        if prominence <= config.min_prominence:
            _emit(
                PeakSearchEvent(
                    attempt,
                    SearchStage.REJECT,
                    peak_index,
                    peak_value,
                    prominence,
                    reason=RejectionReason.LOW_PROMINENCE,
                ),
                event_sink,
            )
            return _build_rejected_result(
                RejectionReason.LOW_PROMINENCE,
                attempt,
                view,
                candidate,
                exclusions,
                quality_flags,
                prominence,
            )

        # --- Width check ---
        width = calculate_width(view.values, peak_index, prominence, config.interpolate_width)
        if width > config.min_width:
            edge_case = _check_tail_climb(view, candidate, config)
            _emit(
                PeakSearchEvent(
                    attempt, SearchStage.ACCEPT, peak_index, peak_value, prominence, width
                ),
                event_sink,
            )
            return PeakSearchResult(
                accepted=True,
                peak_index=peak_index,
                edge_case=edge_case,
                peak_value=peak_value,
                prominence=prominence,
                width=width,
                source=candidate.source if view.is_bridged else None,
                attempts=attempt,
                rejection_reason=None,
                excluded_indices=tuple(exclusions),
                quality_flags=quality_flags,
            )

        _emit(
            PeakSearchEvent(
                attempt,
                SearchStage.RETRY,
                peak_index,
                peak_value,
                prominence,
                width,
                reason=RejectionReason.NARROW_WIDTH,
            ),
            event_sink,
        )
        if not exclusions.add(peak_index) and "exclusion_capacity_exceeded" not in quality_flags:
            logger.info("Exclusion set full, index %d is no longer excluded", peak_index)
            quality_flags.append("exclusion_capacity_exceeded")

    _emit(
        PeakSearchEvent(
            config.max_attempts,
            SearchStage.REJECT,
            candidate.logical_index if candidate else None,
            reason=RejectionReason.NARROW_WIDTH,
        ),
        event_sink,
    )
    return _build_rejected_result(
        RejectionReason.NARROW_WIDTH,
        config.max_attempts,
        view,
        candidate,
        exclusions,
        quality_flags,
        prominence,
        width,
    )


def find_peak(
    buffer: SampleBuffer,
    size: int | None = None,
    config: PeakSearchConfig | None = None,
    event_sink: EventSink | None = None,
) -> PeakSearchResult:
    """Find and validate the dominant peak of one capture.

    Args:
        buffer: Samples of the capture (Sample sequence, phase-angle array, or a
            SweepInput DataFrame). Phase angles are expected to be non-negative.
        size: Number of leading samples to search. Defaults to the whole buffer.
        config: Search thresholds. Uses defaults if None.
        event_sink: Optional callable receiving a PeakSearchEvent per stage.

    Returns:
        PeakSearchResult with accepted flag, peak index and edge-case flag.

    Raises:
        ValueError: If size is out of range or the buffer exceeds the uint16 index space.
    """
    if config is None:
        config = PeakSearchConfig()

    phase = as_phase_array(buffer, size)
    validate_index_space(len(phase))
    view = BridgedView(phase)

    return _run_trials(view, lambda exclusions: locate_peak(phase, exclusions), config, event_sink)


def find_overlap_peak(
    buffer_a: SampleBuffer,
    size_a: int | None,
    buffer_b: SampleBuffer,
    size_b: int | None,
    config: PeakSearchConfig | None = None,
    event_sink: EventSink | None = None,
) -> PeakSearchResult:
    """Find and validate a peak straddling two consecutive captures.

    Buffer B is treated as the continuation of buffer A; the returned peak index is
    logical, i.e. ``size_a + local_index`` for a peak in B.

    Args:
        buffer_a: Samples of the earlier capture.
        size_a: Number of leading samples of buffer_a to use. None means all.
        buffer_b: Samples of the later capture.
        size_b: Number of leading samples of buffer_b to use. None means all.
        config: Search thresholds. Uses defaults if None.
        event_sink: Optional callable receiving a PeakSearchEvent per stage.

    Returns:
        PeakSearchResult with the logical peak index and the buffer holding it.

    Raises:
        ValueError: If a size is out of range or the bridged buffer exceeds the uint16
            index space.
    """
    if config is None:
        config = PeakSearchConfig()

    view = BridgedView(as_phase_array(buffer_a, size_a), as_phase_array(buffer_b, size_b))
    validate_index_space(len(view))

    return _run_trials(
        view, lambda exclusions: locate_overlap_peak(view, exclusions), config, event_sink
    )
