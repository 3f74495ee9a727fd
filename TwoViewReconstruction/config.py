"""
Configuration management for two-view reconstruction.

Each geometry stage has its own dataclass carrying the constants it needs;
ReconstructionConfig aggregates them for the pipeline. Configurations can
also be built from plain (nested) dictionaries and validated before use.
"""

import copy
from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, List, Optional


# Absolute tolerance for every approximate equality in the geometry modules
NUMERIC_TOLERANCE = 1e-6


@dataclass
class FundamentalConfig:
    """Robust fundamental matrix fit"""

    threshold_ratio: float = 0.006     # RANSAC threshold = ratio * max |coordinate|
    confidence: float = 0.99
    max_iterations: int = 1000
    min_points: int = 8


@dataclass
class PoseDecompositionConfig:
    """Essential matrix decomposition into (R, T) hypotheses"""

    max_sign_retries: int = 3          # Negate-E retries when det(R1) == -1


@dataclass
class TriangulationConfig:
    """Linear and iterative (reweighted) triangulation"""

    max_iterations: int = 10
    degenerate_weight_tolerance: float = 1e-12
    max_workers: Optional[int] = None  # None -> triangulate points sequentially


@dataclass
class SelectionConfig:
    """Cheirality-based pose hypothesis selection"""

    min_in_front_ratio: float = 0.75
    max_workers: Optional[int] = None  # None -> evaluate hypotheses sequentially


@dataclass
class ReconstructionConfig:
    """Complete configuration of the two-view reconstruction pipeline"""

    fundamental: FundamentalConfig = field(default_factory=FundamentalConfig)
    decomposition: PoseDecompositionConfig = field(default_factory=PoseDecompositionConfig)
    triangulation: TriangulationConfig = field(default_factory=TriangulationConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'ReconstructionConfig':
        """
        Build configuration from a nested dictionary.

        Missing sections and keys fall back to the defaults.

        Raises:
            ValueError: On unknown sections/keys or invalid values
        """
        merged = merge_configs(get_default_config(), config)

        unknown = set(merged) - set(_SECTIONS)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

        sections = {}
        for name, section_cls in _SECTIONS.items():
            values = merged[name]
            allowed = {f.name for f in fields(section_cls)}
            unknown_keys = set(values) - allowed
            if unknown_keys:
                raise ValueError(f"Unknown keys in '{name}': {sorted(unknown_keys)}")
            sections[name] = section_cls(**values)

        result = validate_config(merged)
        if result['errors']:
            raise ValueError("Invalid configuration: " + "; ".join(result['errors']))

        return cls(**sections)


_SECTIONS = {
    'fundamental': FundamentalConfig,
    'decomposition': PoseDecompositionConfig,
    'triangulation': TriangulationConfig,
    'selection': SelectionConfig,
}

DEFAULT_CONFIG = ReconstructionConfig().to_dict()


# =============================================================================
# Configuration Functions
# =============================================================================

def get_default_config() -> Dict[str, Any]:
    """Get a copy of the default configuration"""
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries

    Args:
        base_config: Base configuration
        override_config: Configuration to override base with

    Returns:
        Merged configuration
    """
    merged = copy.deepcopy(base_config)

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)

    return merged


def validate_config(config: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Validate configuration and return any issues

    Args:
        config: Nested configuration dictionary

    Returns:
        Dictionary with validation results:
        {
            'errors': [list of error messages],
            'warnings': [list of warning messages]
        }
    """
    errors = []
    warnings = []

    fundamental = config.get('fundamental', {})
    ratio = fundamental.get('threshold_ratio', FundamentalConfig.threshold_ratio)
    if not isinstance(ratio, (int, float)) or ratio <= 0:
        errors.append("'fundamental.threshold_ratio' must be a positive number")

    confidence = fundamental.get('confidence', FundamentalConfig.confidence)
    if not isinstance(confidence, (int, float)) or not 0.0 < confidence < 1.0:
        errors.append("'fundamental.confidence' must be in (0, 1)")

    min_points = fundamental.get('min_points', FundamentalConfig.min_points)
    if not isinstance(min_points, int) or min_points < 7:
        errors.append("'fundamental.min_points' must be an integer >= 7")
    elif min_points < 8:
        warnings.append("Fewer than 8 correspondences makes the fundamental fit ambiguous")

    for section, key in [('fundamental', 'max_iterations'),
                         ('decomposition', 'max_sign_retries'),
                         ('triangulation', 'max_iterations')]:
        value = config.get(section, {}).get(key)
        if value is not None and (not isinstance(value, int) or value <= 0):
            errors.append(f"'{section}.{key}' must be a positive integer")

    tolerance = config.get('triangulation', {}).get('degenerate_weight_tolerance')
    if tolerance is not None and (not isinstance(tolerance, (int, float)) or tolerance < 0):
        errors.append("'triangulation.degenerate_weight_tolerance' must be non-negative")

    in_front = config.get('selection', {}).get('min_in_front_ratio')
    if in_front is not None:
        if not isinstance(in_front, (int, float)) or not 0.0 < in_front <= 1.0:
            errors.append("'selection.min_in_front_ratio' must be in (0, 1]")
        elif in_front <= 0.5:
            warnings.append("An in-front ratio <= 0.5 lets several hypotheses pass")

    for section in ('triangulation', 'selection'):
        workers = config.get(section, {}).get('max_workers')
        if workers is not None and (not isinstance(workers, int) or workers <= 0):
            errors.append(f"'{section}.max_workers' must be a positive integer or None")

    return {'errors': errors, 'warnings': warnings}
