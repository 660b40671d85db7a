from typing import Optional

import pandera as pa
from pandera.typing import Series


class SweepExportRaw(pa.DataFrameModel):
    sample: Series[int] = pa.Field(alias="Sample", ge=0)
    # analyzers report signed angles, the sign is checked after processing
    phase_angle: Series[float] = pa.Field(alias="Phase Angle", ge=-180, le=180)
    impedance: Series[float] = pa.Field(alias="Impedance")
    frequency: Optional[Series[float]] = pa.Field(alias="Frequency", gt=0)
