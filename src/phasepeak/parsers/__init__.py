from phasepeak.parsers.base_parser import BaseParser
from phasepeak.parsers.sweep_csv_parser import SweepCsvParser

__all__ = ["BaseParser", "SweepCsvParser"]
