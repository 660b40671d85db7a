import numpy as np
import plotly.graph_objects as go

from phasepeak.processing.buffers import BridgedView
from phasepeak.processing.peak_detection import PeakSearchResult


def create_sweep_peak_plot(
    view: BridgedView,
    result: PeakSearchResult | None = None,
    frequencies: np.ndarray | None = None,
    title: str = "Phase angle sweep",
) -> go.Figure:
    """Create a phase angle plot of a capture with the outcome of a peak search.

    Args:
        view: Phase angles of the capture. A bridged view also gets a marker at the
            boundary between its two buffers.
        result: Optional result of find_peak or find_overlap_peak on the same data
        frequencies: Optional x values for every sample, sample indices otherwise
        title: Figure title

    Returns:
        plotly.graph_objects.Figure
    """
    x = np.arange(len(view)) if frequencies is None else np.asarray(frequencies)

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(x=x, y=view.values, name="Phase Angle", mode="markers+lines")
    )

    if view.is_bridged and view.size_b:
        fig = _add_buffer_boundary(fig, float(x[view.size_a]))

    if result is not None and not np.isnan(result.peak_value):
        fig = _add_peak_indicator(fig, result, float(x[result.peak_index]))

    fig.update_layout(
        title=title,
        height=500,
        showlegend=True,
        xaxis_title="Sample" if frequencies is None else "Frequency",
        yaxis_title="Phase Angle (°)",
    )

    return fig


def _add_buffer_boundary(fig: go.Figure, x_boundary: float) -> go.Figure:
    fig.add_vline(
        x=x_boundary, line_dash="dot", line_color="grey", annotation_text="Buffer B"
    )

    return fig


def _add_peak_indicator(fig: go.Figure, result: PeakSearchResult, x_peak: float) -> go.Figure:
    """Mark the peak and, when known, its half-prominence level.

    Accepted peaks are drawn in green, rejected candidates in red.

    Args:
        fig: Plotly figure to add the markers to
        result: Search result holding the peak
        x_peak: x position of the peak

    Returns:
        plotly.graph_objects.Figure with peak markers added
    """
    color = "green" if result.accepted else "red"
    if result.accepted or result.rejection_reason is None:
        label = "Peak"
    else:
        label = f"Rejected ({result.rejection_reason.value})"

    fig.add_trace(
        go.Scatter(
            x=[x_peak],
            y=[result.peak_value],
            name=label,
            mode="markers",
            marker=dict(color=color, size=12, symbol="x"),
        )
    )

    if not np.isnan(result.prominence):
        half_height = result.peak_value - result.prominence / 2.0
        fig.add_hline(
            y=half_height,
            line_dash="dash",
            line_color="orange",
            annotation_text=f"Half prominence = {half_height:.2f}°",
        )

    if result.edge_case:
        fig.add_annotation(x=x_peak, y=result.peak_value, text="still climbing", showarrow=True)

    return fig
