"""Configuration containers for STOMP cost functions.

Raw configuration arrives as a generic key/value mapping (typically parsed
from JSON). It is validated once into immutable dataclasses.
"""

import json
import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigurationError, InvalidParameterError, MissingParameterError

REQUIRED_PARAMETERS = ("cost_weight", "voxel_size", "max_distance")


def _as_positive_real(key: str, value: Any) -> float:
    # bool is an Integral subclass
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(
            f"parameter '{key}' must be a real number, got "
            f"{type(value).__name__}",
            key=key,
        )
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(
            f"parameter '{key}' must be finite, got {value}", key=key,
        )
    if not value > 0.0:
        raise InvalidParameterError(
            f"parameter '{key}' must be positive, got {value}", key=key,
        )
    return value


@dataclass(frozen=True)
class CostFunctionConfig:
    """Validated parameters of the obstacle distance cost.

    Attributes:
        cost_weight: Weight applied by the optimizer when aggregating costs.
        voxel_size: Edge length of a distance field voxel [m].
        max_distance: Distance beyond which obstacles have no influence [m].
    """

    cost_weight: float
    voxel_size: float
    max_distance: float

    @property
    def bandwidth(self) -> float:
        """Truncation band of the distance field, in voxels."""
        return self.max_distance / self.voxel_size

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "CostFunctionConfig":
        """Validate a raw parameter mapping.

        Unrecognized keys are ignored.

        Raises:
            MissingParameterError: A required key is absent.
            InvalidParameterError: A value is not a positive real, or
                ``max_distance`` does not exceed ``voxel_size``.
        """
        if not isinstance(params, Mapping):
            raise ConfigurationError(
                f"configuration must be a mapping, got {type(params).__name__}"
            )

        for key in REQUIRED_PARAMETERS:
            if key not in params:
                raise MissingParameterError(key)

        values = {key: _as_positive_real(key, params[key])
                  for key in REQUIRED_PARAMETERS}

        if values["max_distance"] <= values["voxel_size"]:
            raise InvalidParameterError(
                f"'max_distance' ({values['max_distance']}) must exceed "
                f"'voxel_size' ({values['voxel_size']})",
                key="max_distance",
            )

        return cls(**values)


@dataclass
class StompConfiguration:
    """Optimizer-level settings passed along with each planning request.

    Only ``num_dimensions`` is consulted by the cost functions; the rest
    describes the optimizer run for diagnostics.

    Attributes:
        num_iterations: Maximum optimizer iterations.
        num_iterations_after_valid: Extra iterations once a valid
            trajectory is found.
        num_timesteps: Waypoints per trajectory.
        num_dimensions: Joints of the planning group (0 = unchecked).
        delta_t: Time between waypoints [s].
        initialization_method: Name of the seed trajectory generator.
        num_rollouts: Noisy rollouts generated per iteration.
        max_rollouts: Rollouts kept across iterations.
        control_cost_weight: Weight of the smoothness term.
    """

    num_iterations: int = 40
    num_iterations_after_valid: int = 0
    num_timesteps: int = 60
    num_dimensions: int = 0
    delta_t: float = 0.1
    initialization_method: str = "LINEAR_INTERPOLATION"
    num_rollouts: int = 10
    max_rollouts: int = 100
    control_cost_weight: float = 0.0


def load_parameters(path: str | Path, name: str | None = None) -> dict:
    """Load cost-function parameters from a JSON file.

    The file is either a flat parameter mapping or a document with a
    ``cost_functions`` list whose entries carry a ``class`` tag.

    Args:
        path: JSON file path.
        name: When given, the ``class`` tag (or its suffix after ``/``)
            of the entry to select from ``cost_functions``.

    Returns:
        Raw parameter mapping, not yet validated.
    """
    with open(path) as f:
        data = json.load(f)

    if name is None:
        return data

    for entry in data.get("cost_functions", []):
        tag = str(entry.get("class", ""))
        if tag == name or tag.rsplit("/", 1)[-1] == name:
            return entry

    raise ConfigurationError(f"no cost function '{name}' in {path}", key="class")
