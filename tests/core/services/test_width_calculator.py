import pytest

from structdoc.core.services.width_calculator import WidthCalculator, resize_adjacent_columns


class TestInitializeWidths:
    def test_three_columns_put_remainder_last(self):
        assert WidthCalculator.initialize_widths(3) == (33.33, 33.33, 33.34)

    @pytest.mark.parametrize("count", [2, 3, 4, 5, 6, 7])
    def test_equal_shares_sum_to_hundred(self, count):
        widths = WidthCalculator.initialize_widths(count)
        assert len(widths) == count
        assert sum(widths) == pytest.approx(100.0)

    def test_zero_columns(self):
        assert WidthCalculator.initialize_widths(0) == ()


class TestResize:
    def test_moves_boundary_by_percentage(self):
        result = resize_adjacent_columns(0, 1, 100, 1000, [50.0, 50.0])
        assert result.changed
        assert result.new_widths == pytest.approx((60.0, 40.0))

    def test_left_clamped_to_minimum(self):
        result = resize_adjacent_columns(0, 1, -480, 1000, [50.0, 50.0])
        assert result.new_widths == pytest.approx((5.0, 95.0))

    def test_right_clamped_to_minimum(self):
        result = resize_adjacent_columns(1, 2, 500, 1000, [20.0, 40.0, 40.0])
        assert result.new_widths == pytest.approx((20.0, 75.0, 5.0))

    def test_other_columns_untouched(self):
        result = resize_adjacent_columns(1, 2, 50, 1000, [30.0, 30.0, 40.0])
        assert result.new_widths[0] == 30.0

    @pytest.mark.parametrize("delta", [-2000, -333, -7, 3, 41, 999, 5000])
    def test_total_width_is_conserved(self, delta):
        before = (33.33, 33.33, 33.34)
        result = resize_adjacent_columns(0, 1, delta, 777, before)
        assert abs(sum(result.new_widths) - sum(before)) < 1e-6
        assert min(result.new_widths) >= 5.0 - 1e-9

    def test_tiny_delta_reports_unchanged(self):
        result = resize_adjacent_columns(0, 1, 0.5, 1000, [50.0, 50.0])
        assert not result.changed
        assert result.new_widths == (50.0, 50.0)

    def test_custom_epsilon(self):
        calculator = WidthCalculator(epsilon=0.01)
        assert calculator.calculate_resized_widths(0, 1, 0.5, 1000, [50.0, 50.0]).changed

    @pytest.mark.parametrize(
        "left, right, width_px",
        [(0, 2, 1000), (-1, 0, 1000), (1, 2, 1000), (0, 1, 0)],
    )
    def test_invalid_input_reports_unchanged(self, left, right, width_px):
        result = resize_adjacent_columns(left, right, 100, width_px, [50.0, 50.0])
        assert not result.changed


class TestValidateWidths:
    def test_valid(self):
        assert WidthCalculator.validate_widths((33.33, 33.33, 33.34), 3) is None

    @pytest.mark.parametrize(
        "widths, count",
        [((50.0, 50.0), 3), ((4.0, 96.0), 2), ((40.0, 40.0), 2), ((100.0,), 1)],
    )
    def test_invalid(self, widths, count):
        assert WidthCalculator.validate_widths(widths, count) is not None
