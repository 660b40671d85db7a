from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd


class BaseParser(ABC):
    """Template for readers of capture files.

    ``parse`` validates the path, reads the file, validates the raw frame, converts it
    to the SweepInput layout and validates the result.
    """

    def __init__(self, file_path: Path):
        self.file_path = file_path

    def _validate_path(self) -> None:
        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {self.file_path}")
        if not self.file_path.is_file():
            raise ValueError(f"Path is not a file: {self.file_path}")

    def parse(self) -> pd.DataFrame:
        self._validate_path()
        raw = self._read_file()
        self._validate_raw_data(raw)
        processed = self._process_raw_data(raw)
        self._validate_processed_data(processed)
        return processed

    @abstractmethod
    def _read_file(self) -> pd.DataFrame:
        pass

    @abstractmethod
    def _validate_raw_data(self, df: pd.DataFrame) -> None:
        pass

    @abstractmethod
    def _process_raw_data(self, df: pd.DataFrame) -> pd.DataFrame:
        pass

    @abstractmethod
    def _validate_processed_data(self, df: pd.DataFrame) -> None:
        pass
