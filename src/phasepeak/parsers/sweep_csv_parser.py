from pathlib import Path

import pandas as pd

from phasepeak.models import SweepExportRaw, SweepInput
from phasepeak.parsers.base_parser import BaseParser

DEFAULT_SKIPROWS = 0


class SweepCsvParser(BaseParser):
    def __init__(self, file_path: Path, skiprows: int = DEFAULT_SKIPROWS):
        super().__init__(file_path)
        self.skiprows = skiprows

    def _read_file(self) -> pd.DataFrame:
        return pd.read_csv(self.file_path, skiprows=self.skiprows)

    def _validate_raw_data(self, df: pd.DataFrame) -> None:
        SweepExportRaw.validate(df)

    def _process_raw_data(self, df: pd.DataFrame) -> pd.DataFrame:
        """Order samples by acquisition and convert to the SweepInput layout"""
        df = df.sort_values("Sample").reset_index(drop=True)

        df = df.rename(
            columns={
                "Phase Angle": "phase_angle",
                "Impedance": "impedance",
                "Frequency": "frequency",
            }
        )

        columns = ["phase_angle", "impedance"]
        if "frequency" in df.columns:
            columns.append("frequency")

        return df.loc[:, columns]

    def _validate_processed_data(self, df: pd.DataFrame) -> None:
        SweepInput.validate(df)
