from phasepeak import models, parsers, processing
from phasepeak.processing import (
    PeakSearchConfig,
    PeakSearchResult,
    Sample,
    find_overlap_peak,
    find_peak,
)

__version__ = "0.1.0"

__all__ = [
    "PeakSearchConfig",
    "PeakSearchResult",
    "Sample",
    "__version__",
    "find_overlap_peak",
    "find_peak",
    "models",
    "parsers",
    "processing",
]
