"""Tests for configuration validation and loading."""

import dataclasses
import json
from pathlib import Path

import pytest

from stomp_costs import (
    ConfigurationError,
    CostFunctionConfig,
    InvalidParameterError,
    MissingParameterError,
    StompConfiguration,
    load_parameters,
)


class TestCostFunctionConfig:
    """Tests for CostFunctionConfig.from_dict."""

    def test_valid_parameters(self, params):
        """All three parameters are parsed as floats."""
        config = CostFunctionConfig.from_dict(params)
        assert config.cost_weight == 1.0
        assert config.voxel_size == 0.05
        assert config.max_distance == 0.1

    def test_integers_are_coerced(self):
        """Integer values become floats."""
        config = CostFunctionConfig.from_dict(
            {"cost_weight": 2, "voxel_size": 1, "max_distance": 3},
        )
        assert isinstance(config.cost_weight, float)
        assert config.max_distance == 3.0

    def test_unrecognized_keys_ignored(self, params):
        """Extra keys such as the class tag do not matter."""
        config = CostFunctionConfig.from_dict(
            {**params, "class": "stomp_moveit/ObstacleDistanceGradient", "foo": "bar"},
        )
        assert config == CostFunctionConfig.from_dict(params)

    @pytest.mark.parametrize("key", ["cost_weight", "voxel_size", "max_distance"])
    def test_missing_key(self, params, key):
        """Missing key raises an error naming that key."""
        del params[key]
        with pytest.raises(MissingParameterError) as exc_info:
            CostFunctionConfig.from_dict(params)
        assert exc_info.value.key == key
        assert key in str(exc_info.value)

    @pytest.mark.parametrize("value", ["0.05", None, True, [0.05]])
    def test_non_numeric_value(self, params, value):
        """Type mismatch is reported separately from a missing key."""
        params["voxel_size"] = value
        with pytest.raises(InvalidParameterError) as exc_info:
            CostFunctionConfig.from_dict(params)
        assert not isinstance(exc_info.value, MissingParameterError)
        assert exc_info.value.key == "voxel_size"

    @pytest.mark.parametrize("key", ["cost_weight", "voxel_size", "max_distance"])
    def test_non_positive_value(self, params, key):
        """Zero is rejected for every parameter."""
        params[key] = 0.0
        with pytest.raises(InvalidParameterError):
            CostFunctionConfig.from_dict(params)

    @pytest.mark.parametrize("key", ["cost_weight", "voxel_size", "max_distance"])
    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_value(self, params, key, value):
        """Infinite and NaN values are rejected for every parameter."""
        params[key] = value
        with pytest.raises(InvalidParameterError) as exc_info:
            CostFunctionConfig.from_dict(params)
        assert exc_info.value.key == key

    def test_max_distance_must_exceed_voxel_size(self, params):
        """Band narrower than a voxel is rejected."""
        params["max_distance"] = params["voxel_size"]
        with pytest.raises(InvalidParameterError) as exc_info:
            CostFunctionConfig.from_dict(params)
        assert exc_info.value.key == "max_distance"

    def test_not_a_mapping(self):
        """Non-mapping input is a configuration error."""
        with pytest.raises(ConfigurationError):
            CostFunctionConfig.from_dict([1.0, 0.05, 0.1])

    def test_bandwidth(self, params):
        """Bandwidth is max_distance / voxel_size in voxels."""
        config = CostFunctionConfig.from_dict(params)
        assert config.bandwidth == pytest.approx(2.0)

    def test_frozen(self, params):
        """Validated config cannot be mutated."""
        config = CostFunctionConfig.from_dict(params)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.voxel_size = 0.01


class TestLoadParameters:
    """Tests for JSON parameter loading."""

    def test_flat_file(self, tmp_path, params):
        path = tmp_path / "params.json"
        path.write_text(json.dumps(params))
        assert load_parameters(path) == params

    def test_select_entry_by_class_suffix(self, tmp_path, params):
        """Entries are matched by full tag or by class name."""
        entry = {"class": "stomp_moveit/ObstacleDistanceGradient", **params}
        path = tmp_path / "stomp.json"
        path.write_text(json.dumps({"cost_functions": [entry]}))

        assert load_parameters(path, "ObstacleDistanceGradient") == entry
        assert load_parameters(path, "stomp_moveit/ObstacleDistanceGradient") == entry

    def test_bundled_config_document(self):
        """Without a name the whole document is returned, optimizer block included."""
        path = Path(__file__).parent.parent / "config" / "stomp_planar_arm.json"
        data = load_parameters(path)
        assert data["optimization"]["num_timesteps"] > 0
        entry = load_parameters(path, "ObstacleDistanceGradient")
        assert entry in data["cost_functions"]
        StompConfiguration(**data["optimization"])

    def test_unknown_entry(self, tmp_path, params):
        path = tmp_path / "stomp.json"
        path.write_text(json.dumps({"cost_functions": []}))
        with pytest.raises(ConfigurationError):
            load_parameters(path, "ObstacleDistanceGradient")


def test_stomp_configuration_defaults():
    """Dimensions default to unchecked."""
    config = StompConfiguration()
    assert config.num_dimensions == 0
    assert config.num_timesteps > 0
    assert config.num_rollouts > 0
