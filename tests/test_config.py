import pytest

from TwoViewReconstruction import ReconstructionConfig
from TwoViewReconstruction.config import (
    FundamentalConfig,
    get_default_config,
    merge_configs,
    validate_config
)


def test_defaults():
    config = ReconstructionConfig()

    assert config.fundamental.threshold_ratio == 0.006
    assert config.fundamental.confidence == 0.99
    assert config.decomposition.max_sign_retries == 3
    assert config.triangulation.max_iterations == 10
    assert config.selection.min_in_front_ratio == 0.75


def test_round_trip_through_dict():
    config = ReconstructionConfig(fundamental=FundamentalConfig(confidence=0.999))
    assert ReconstructionConfig.from_dict(config.to_dict()) == config


def test_partial_dict_keeps_defaults():
    config = ReconstructionConfig.from_dict({'selection': {'min_in_front_ratio': 0.9}})

    assert config.selection.min_in_front_ratio == 0.9
    assert config.triangulation.max_iterations == 10


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError):
        ReconstructionConfig.from_dict({'bundle_adjustment': {}})
    with pytest.raises(ValueError):
        ReconstructionConfig.from_dict({'fundamental': {'threshold': 1.0}})


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError):
        ReconstructionConfig.from_dict({'fundamental': {'confidence': 1.5}})
    with pytest.raises(ValueError):
        ReconstructionConfig.from_dict({'triangulation': {'max_iterations': 0}})


def test_validate_config_warnings():
    config = merge_configs(get_default_config(), {'selection': {'min_in_front_ratio': 0.4}})
    result = validate_config(config)

    assert result['errors'] == []
    assert len(result['warnings']) == 1


def test_merge_does_not_modify_base():
    base = get_default_config()
    merge_configs(base, {'fundamental': {'confidence': 0.5}})
    assert base['fundamental']['confidence'] == 0.99

