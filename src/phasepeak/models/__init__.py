from phasepeak.models.sweep_export import SweepExportRaw
from phasepeak.models.sweep_input_model import SweepInput

__all__ = ["SweepExportRaw", "SweepInput"]
