"""Tests for volume ratio calculation"""

import pytest

from atlas_app.features.volume import calculate_volume_ratio


class TestVolumeRatio:
    """Test volume ratio"""

    def test_insufficient_data(self):
        assert calculate_volume_ratio([1000.0] * 19, period=20) is None

    def test_steady_volume(self):
        assert calculate_volume_ratio([1000.0] * 20) == 1.0

    def test_current_bar_included_in_average(self):
        volumes = [1000.0] * 19 + [3000.0]
        # average = (19 * 1000 + 3000) / 20 = 1100
        assert calculate_volume_ratio(volumes) == pytest.approx(3000.0 / 1100.0)

    def test_zero_average(self):
        assert calculate_volume_ratio([0.0] * 20) is None
