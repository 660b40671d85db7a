import pandera as pa
from pandera.typing import Series


class SweepInput(pa.DataFrameModel):
    # the peak search starts its running maximum at 0, negative phase angles are unsupported
    phase_angle: Series[float] = pa.Field(ge=0, le=180)
    impedance: Series[float] = pa.Field()
