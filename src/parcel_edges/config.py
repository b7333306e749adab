"""
Configuration settings for parcel edge classification

Thresholds are empirically tuned; changing them shifts corner-lot and
lane detection behaviour.
"""

from dataclasses import dataclass, field


@dataclass
class ClassifierThresholds:
    """Distance (meters) and orientation (degrees) limits for road matching"""
    # Strict adjacency
    street_distance_m: float = 20.0
    street_orientation_deg: float = 55.0
    lane_distance_m: float = 28.0
    lane_orientation_deg: float = 85.0

    # Relaxed fallbacks
    relaxed_frontage_distance_m: float = 30.0
    relaxed_frontage_orientation_deg: float = 85.0
    relaxed_flankage_distance_m: float = 24.0
    relaxed_flankage_orientation_deg: float = 70.0
    relaxed_lane_distance_m: float = 42.0
    relaxed_lane_orientation_deg: float = 110.0

    # Opposite edge search
    opposite_strict_orientation_deg: float = 38.0
    opposite_relaxed_orientation_deg: float = 62.0
    opposite_midpoint_weight: float = 0.2

    # Frontage tie bands
    selection_distance_tie_m: float = 3.0
    selection_length_tie_m: float = 1.0

    # Candidate score = distance_m + orientation_weight * orientation_deg
    orientation_weight: float = 0.45


@dataclass
class QueryConfig:
    """Provider query window sizing"""
    edge_buffer_m: float = 52.0
    min_padding_px: int = 38
    max_padding_px: int = 220


@dataclass
class ViewportConfig:
    """Viewport index settings"""
    cell_size_deg: float = 0.005  # ~550m at Vancouver's latitude
    padding_ratio: float = 0.22
    render_padding_ratio: float = 0.24


@dataclass
class AnalysisConfig:
    """Top-level configuration"""
    thresholds: ClassifierThresholds = field(default_factory=ClassifierThresholds)
    query: QueryConfig = field(default_factory=QueryConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)


# Global config instance
config = AnalysisConfig()


def get_config() -> AnalysisConfig:
    """Get global configuration"""
    return config


def validate_config(config: AnalysisConfig) -> None:
    """
    Validate configuration values.
    Raises ValueError listing every problem found.
    """
    errors = []

    if config.thresholds is None:
        errors.append("thresholds configuration is required but not set")
    else:
        t = config.thresholds
        for name in (
            "street_distance_m",
            "lane_distance_m",
            "relaxed_frontage_distance_m",
            "relaxed_flankage_distance_m",
            "relaxed_lane_distance_m",
        ):
            value = getattr(t, name)
            if value is None or value <= 0:
                errors.append(f"thresholds.{name} must be positive, got {value}")
        for name in (
            "street_orientation_deg",
            "lane_orientation_deg",
            "relaxed_frontage_orientation_deg",
            "relaxed_flankage_orientation_deg",
            "relaxed_lane_orientation_deg",
            "opposite_strict_orientation_deg",
            "opposite_relaxed_orientation_deg",
        ):
            value = getattr(t, name)
            if value is None or value < 0:
                errors.append(f"thresholds.{name} must be non-negative, got {value}")
        if t.orientation_weight is None or t.orientation_weight < 0:
            errors.append(f"thresholds.orientation_weight must be non-negative, got {t.orientation_weight}")

    if config.query is None:
        errors.append("query configuration is required but not set")
    else:
        if config.query.edge_buffer_m <= 0:
            errors.append(f"query.edge_buffer_m must be positive, got {config.query.edge_buffer_m}")
        if config.query.min_padding_px > config.query.max_padding_px:
            errors.append(
                f"query.min_padding_px ({config.query.min_padding_px}) exceeds "
                f"query.max_padding_px ({config.query.max_padding_px})"
            )

    if config.viewport is None:
        errors.append("viewport configuration is required but not set")
    else:
        if config.viewport.cell_size_deg <= 0:
            errors.append(f"viewport.cell_size_deg must be positive, got {config.viewport.cell_size_deg}")
        if config.viewport.padding_ratio < 0:
            errors.append(f"viewport.padding_ratio must be non-negative, got {config.viewport.padding_ratio}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
