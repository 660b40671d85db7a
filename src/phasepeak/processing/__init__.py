from phasepeak.processing.buffers import BridgedView, BufferSource, ExclusionSet, Sample
from phasepeak.processing.characterization import ProminenceRule
from phasepeak.processing.peak_detection import (
    PeakSearchConfig,
    PeakSearchEvent,
    PeakSearchResult,
    RejectionReason,
    find_overlap_peak,
    find_peak,
)

__all__ = [
    "BridgedView",
    "BufferSource",
    "ExclusionSet",
    "PeakSearchConfig",
    "PeakSearchEvent",
    "PeakSearchResult",
    "ProminenceRule",
    "RejectionReason",
    "Sample",
    "find_overlap_peak",
    "find_peak",
]
