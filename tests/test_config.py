"""Tests for configuration validation."""

from __future__ import annotations

import pytest

from parcel_edges.config import AnalysisConfig, get_config, validate_config


class TestValidateConfig:

    def test_defaults_are_valid(self) -> None:
        validate_config(AnalysisConfig())

    def test_global_config_defaults(self) -> None:
        config = get_config()
        assert config.thresholds.street_distance_m == 20.0
        assert config.thresholds.orientation_weight == 0.45
        assert config.query.edge_buffer_m == 52.0
        assert config.viewport.cell_size_deg == 0.005

    def test_reports_every_problem(self) -> None:
        config = AnalysisConfig()
        config.thresholds.street_distance_m = 0
        config.query.min_padding_px = 500
        config.viewport.cell_size_deg = -1

        with pytest.raises(ValueError) as exc_info:
            validate_config(config)

        message = str(exc_info.value)
        assert "thresholds.street_distance_m" in message
        assert "query.min_padding_px" in message
        assert "viewport.cell_size_deg" in message

    def test_missing_section(self) -> None:
        config = AnalysisConfig()
        config.thresholds = None

        with pytest.raises(ValueError, match="thresholds configuration is required"):
            validate_config(config)
