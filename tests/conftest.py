from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import pytest

from phasepeak.models.sweep_input_model import SweepInput
from phasepeak.processing.buffers import BridgedView

# Phase angle sweep of a single resonance, rising from ~10.4° to 42.15° at sample 151.
REFERENCE_PHASE_ANGLES = [
    10.361000, 10.329520, 10.356401, 10.325025, 10.469888, 10.445896, 10.422787, 10.467480,
    10.344401, 10.459909, 10.378614, 10.418076, 10.424760, 10.473890, 10.432741, 10.436613,
    10.444571, 10.429080, 10.463049, 10.425678, 10.437474, 10.479097, 10.501722, 10.531240,
    10.492681, 10.517651, 10.504417, 10.544653, 10.544653, 10.545215, 10.603968, 10.506781,
    10.507369, 10.609545, 10.597960, 10.539934, 10.572769, 10.581369, 10.691141, 10.620659,
    10.639743, 10.674317, 10.661292, 10.736961, 10.565084, 10.688236, 10.709663, 10.768684,
    10.791526, 10.729278, 10.743296, 10.782402, 10.752879, 10.909691, 10.866303, 10.836424,
    10.874863, 10.954317, 10.922943, 10.924746, 10.982296, 10.980767, 10.960667, 11.041705,
    10.980650, 10.989566, 11.122129, 11.000278, 11.132257, 11.255452, 11.177774, 11.192039,
    11.191874, 11.313030, 11.316112, 11.297583, 11.337660, 11.499168, 11.382261, 11.420565,
    11.573527, 11.490598, 11.658082, 11.645509, 11.708488, 11.795426, 11.751255, 11.750044,
    11.855704, 11.914387, 12.009725, 11.969546, 12.113441, 12.218554, 12.348103, 12.205872,
    12.435554, 12.488775, 12.667537, 12.676172, 12.926952, 12.863553, 12.989057, 13.248148,
    13.190160, 13.439136, 13.573619, 13.683957, 13.827342, 13.875702, 14.046788, 14.509664,
    14.635375, 14.892009, 14.904869, 15.331629, 15.755693, 15.847921, 16.199364, 16.443979,
    16.875294, 17.291578, 17.530399, 18.114887, 18.062302, 18.794970, 19.479204, 19.800901,
    21.082626, 20.951014, 22.154087, 22.610720, 23.203785, 24.563568, 25.344297, 26.618078,
    27.102108, 28.593575, 29.146513, 30.456078, 31.622009, 32.400932, 34.245522, 35.443687,
    36.797287, 37.996586, 38.626411, 39.856213, 40.659065, 41.525280, 41.962757, 42.145386,
    41.981716, 41.510342, 41.174747, 40.244114, 38.980572, 37.411938, 36.015099, 34.285168,
    32.450775, 30.479216, 28.919357, 28.111219, 27.203331, 25.809673, 25.276243, 23.578642,
    22.641386, 21.600714, 21.439640, 20.695690, 19.684826, 19.482126, 18.990290, 17.988312,
    18.252808, 17.465487, 16.942823, 16.450624, 16.637707, 16.066063, 15.757387, 15.170953,
    15.165143, 14.770429, 14.727147, 14.488015, 14.067205, 13.987227, 13.731712, 13.818885,
    13.447730, 13.469353, 13.389613, 13.200713, 13.097751, 12.892175, 13.032427, 12.747318,
    12.803812, 12.540964, 12.492415, 12.361678, 12.370881, 12.163138, 12.261773, 11.987444,
    11.952088, 11.912817, 11.833737, 12.018749, 11.742359, 11.825325, 11.705390, 11.672668,
    11.646121, 11.717649, 11.523814, 11.463550, 11.526981, 11.448123, 11.499317, 11.361500,
    11.369127, 11.296580, 11.309932, 11.357458, 11.258648, 11.182965, 11.226593, 11.198554,
    11.132441, 11.075950, 11.085775, 11.048738, 11.086349, 11.013202, 11.062451, 10.988196,
    10.926581, 10.962508, 10.983298, 11.011072, 10.902027, 10.971194, 10.919538, 10.854755,
    10.859086, 10.880175, 10.848403, 10.826693, 10.832817, 10.848177, 10.857426, 10.804535,
    10.758336, 10.759258, 10.763223, 10.804464, 10.732544, 10.740483, 10.750152, 10.771185,
    10.656355, 10.746325, 10.676956, 10.695798, 10.643116, 10.624805, 10.673359, 10.670972,
    10.653358, 10.640178, 10.643605, 10.642442, 10.664634, 10.632175, 10.571341, 10.555463,
    10.619086, 10.615108, 10.624764, 10.584524, 10.589610, 10.613992, 10.597569, 10.573765,
    10.560243, 10.568216, 10.564842, 10.534982, 10.538974, 10.549685, 10.555965, 10.546945,
    10.549246, 10.560552, 10.511511, 10.529139, 10.482478,
]

REFERENCE_PEAK_INDEX = 151
REFERENCE_SPLIT = 120


@pytest.fixture
def reference_phase_angles() -> np.ndarray:
    """301-sample reference sweep."""
    return np.array(REFERENCE_PHASE_ANGLES)


@pytest.fixture
def reference_sweep_data(reference_phase_angles: np.ndarray) -> pd.DataFrame:
    """Reference sweep in SweepInput format."""
    return pd.DataFrame(
        {
            "phase_angle": reference_phase_angles,
            "impedance": np.linspace(850.0, 1150.0, len(reference_phase_angles)),
        }
    )


@pytest.fixture
def sample_validated_sweep_data(reference_sweep_data: pd.DataFrame) -> pd.DataFrame:
    """Reference sweep that passes validation."""
    return SweepInput.validate(reference_sweep_data)


@pytest.fixture
def reference_buffers(reference_phase_angles: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Reference sweep split into two consecutive captures of 120 and 180 samples."""
    return (
        reference_phase_angles[:REFERENCE_SPLIT],
        reference_phase_angles[REFERENCE_SPLIT : REFERENCE_SPLIT + 180],
    )


@pytest.fixture
def reference_view(reference_buffers: tuple[np.ndarray, np.ndarray]) -> BridgedView:
    """Bridged view over the split reference sweep."""
    return BridgedView(*reference_buffers)


@pytest.fixture
def broad_peak_with_spike() -> np.ndarray:
    """Broad resonance at sample 100 (35°) and a one-sample spike at sample 250 (60°)."""
    x = np.arange(301)
    phase = 5.0 + 30.0 * np.exp(-(((x - 100) / 20.0) ** 2))
    phase[250] = 60.0
    return phase


@pytest.fixture
def spikes_only() -> np.ndarray:
    """Four one-sample spikes of decreasing height on a 5° baseline."""
    phase = np.full(301, 5.0)
    phase[[50, 120, 190, 260]] = [60.0, 55.0, 50.0, 45.0]
    return phase


@pytest.fixture
def mock_file_path(mocker) -> Any:
    """Mock file path for testing parsers."""
    return mocker.Mock(spec=Path)
