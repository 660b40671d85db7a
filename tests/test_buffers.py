import numpy as np
import pandas as pd
import pytest

from phasepeak.processing.buffers import (
    EXCLUSION_CAPACITY,
    BridgedView,
    BufferSource,
    ExclusionSet,
    Sample,
    as_phase_array,
)


class TestAsPhaseArray:
    def test_from_samples(self) -> None:
        """Test that phase angles are extracted from Sample objects."""
        buffer = [Sample(1.0, 100.0), Sample(2.5, 90.0), Sample(4.0, 80.0)]

        phase = as_phase_array(buffer)

        assert phase.dtype == np.float64
        assert np.array_equal(phase, [1.0, 2.5, 4.0])

    def test_from_dataframe(self, sample_validated_sweep_data: pd.DataFrame) -> None:
        """Test that a SweepInput frame is accepted."""
        phase = as_phase_array(sample_validated_sweep_data)

        assert len(phase) == 301
        assert phase[151] == pytest.approx(42.145386)

    def test_size_truncates(self) -> None:
        """Test that only the first size samples are used."""
        phase = as_phase_array(np.array([1.0, 2.0, 3.0, 4.0]), size=2)

        assert np.array_equal(phase, [1.0, 2.0])

    def test_returns_private_copy(self) -> None:
        """Test that later changes to the caller's array do not leak into the copy."""
        source = np.array([1.0, 2.0, 3.0])
        phase = as_phase_array(source)

        source[0] = 99.0

        assert phase[0] == 1.0

    def test_size_too_large_raises(self) -> None:
        """Test that a size beyond the buffer length is rejected."""
        with pytest.raises(ValueError):
            as_phase_array(np.array([1.0, 2.0]), size=3)

    def test_negative_size_raises(self) -> None:
        """Test that a negative size is rejected."""
        with pytest.raises(ValueError):
            as_phase_array(np.array([1.0, 2.0]), size=-1)

    def test_two_dimensional_raises(self) -> None:
        """Test that a 2-D array is rejected."""
        with pytest.raises(ValueError):
            as_phase_array(np.ones((3, 2)))


class TestBridgedView:
    def test_logical_index_space(self) -> None:
        """Test that B follows A in the logical index space."""
        view = BridgedView(np.array([1.0, 2.0, 3.0]), np.array([4.0, 5.0]))

        assert len(view) == 5
        assert view.size_a == 3
        assert view.size_b == 2
        assert np.array_equal(view.values, [1.0, 2.0, 3.0, 4.0, 5.0])
        assert view[3] == 4.0

    def test_locate(self) -> None:
        """Test translation of logical indices into (buffer, local index)."""
        view = BridgedView(np.array([1.0, 2.0, 3.0]), np.array([4.0, 5.0]))

        assert view.locate(0) == (BufferSource.A, 0)
        assert view.locate(2) == (BufferSource.A, 2)
        assert view.locate(3) == (BufferSource.B, 0)
        assert view.locate(4) == (BufferSource.B, 1)

    def test_logical_index_round_trip(self) -> None:
        """Test that logical_index inverts locate."""
        view = BridgedView(np.arange(120.0), np.arange(180.0))

        for logical in (0, 119, 120, 299):
            assert view.logical_index(*view.locate(logical)) == logical

    def test_locate_out_of_range(self) -> None:
        """Test that indices outside the view are rejected."""
        view = BridgedView(np.array([1.0]), np.array([2.0]))

        with pytest.raises(IndexError):
            view.locate(2)
        with pytest.raises(IndexError):
            view.locate(-1)

    def test_single_buffer_view(self) -> None:
        """Test that a view without B behaves as a plain buffer."""
        view = BridgedView(np.array([1.0, 2.0]))

        assert not view.is_bridged
        assert view.size_b == 0
        assert view.trailing_source is BufferSource.A
        assert view.locate(1) == (BufferSource.A, 1)
        with pytest.raises(ValueError):
            view.buffer(BufferSource.B)

    def test_trailing_source_of_bridged_view(self) -> None:
        """Test that B ends the capture of a bridged view."""
        view = BridgedView(np.array([1.0]), np.array([2.0]))

        assert view.is_bridged
        assert view.trailing_source is BufferSource.B
        assert np.array_equal(view.buffer(BufferSource.B), [2.0])


class TestExclusionSet:
    def test_default_capacity(self) -> None:
        """Test that three rejected candidates are remembered by default."""
        assert EXCLUSION_CAPACITY == 3
        assert ExclusionSet().capacity == 3

    def test_add_and_contains(self) -> None:
        """Test membership of added indices."""
        exclusions = ExclusionSet()

        assert exclusions.add(7) is True
        assert 7 in exclusions
        assert 8 not in exclusions
        assert list(exclusions) == [7]

    def test_drops_on_overflow(self) -> None:
        """Test that additions beyond capacity are dropped silently."""
        exclusions = ExclusionSet(capacity=2)

        assert exclusions.add(1) is True
        assert exclusions.add(2) is True
        assert exclusions.is_full
        assert exclusions.add(3) is False
        assert 3 not in exclusions
        assert len(exclusions) == 2

    def test_duplicate_does_not_consume_slot(self) -> None:
        """Test that re-adding a remembered index keeps the remaining slots."""
        exclusions = ExclusionSet(capacity=2)

        exclusions.add(5)
        exclusions.add(5)

        assert len(exclusions) == 1
        assert not exclusions.is_full

    def test_negative_capacity_raises(self) -> None:
        """Test that a negative capacity is rejected."""
        with pytest.raises(ValueError):
            ExclusionSet(capacity=-1)

    def test_as_array(self) -> None:
        """Test conversion to an integer array for vectorized lookups."""
        exclusions = ExclusionSet()
        exclusions.add(4)
        exclusions.add(9)

        array = exclusions.as_array()

        assert array.dtype.kind == "i"
        assert np.array_equal(array, [4, 9])
