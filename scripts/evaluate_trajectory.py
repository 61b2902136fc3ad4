#!/usr/bin/env python3
"""Score a straight-line joint trajectory of the planar arm.

Builds the bundled planar arm, configures the cost functions listed in a
STOMP JSON config, binds a plan request starting at ``--start`` and
evaluates the linear interpolation to ``--goal``.

Usage:
    python3 evaluate_trajectory.py [--config config/stomp_planar_arm.json]
        [--start 0 0 0] [--goal 0 2.8 2.8] [--timesteps 20]
"""

import argparse
import json
import logging
from pathlib import Path

import numpy as np

DEFAULT_CONFIG = Path(__file__).parent.parent / "config" / "stomp_planar_arm.json"


def main() -> None:
    """Run trajectory evaluation."""
    parser = argparse.ArgumentParser(
        description="Evaluate obstacle distance costs along a joint trajectory",
    )
    parser.add_argument(
        "--config", type=str, default=str(DEFAULT_CONFIG),
        help=f"STOMP JSON config (default: {DEFAULT_CONFIG.name})",
    )
    parser.add_argument(
        "--start", type=float, nargs=3, default=[0.0, 0.0, 0.0],
        metavar=("Q1", "Q2", "Q3"),
        help="Start joint positions [rad] (default: 0 0 0)",
    )
    parser.add_argument(
        "--goal", type=float, nargs=3, default=[0.0, 2.8, 2.8],
        metavar=("Q1", "Q2", "Q3"),
        help="Goal joint positions [rad] (default: 0 2.8 2.8)",
    )
    parser.add_argument(
        "--timesteps", type=int, default=None,
        help="Number of waypoints (default: num_timesteps from config)",
    )
    parser.add_argument(
        "--output", type=str, default=None,
        help="Write costs to this JSON file",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )
    logger = logging.getLogger(__name__)

    from stomp_costs import (
        MotionPlanRequest,
        PlanningScene,
        RobotStateMsg,
        StompConfiguration,
        aggregate_costs,
        create_cost_function,
        load_parameters,
    )
    from stomp_costs.models import GROUP_NAME, build_planar_arm

    config_data = load_parameters(args.config)

    stomp_config = StompConfiguration(**config_data.get("optimization", {}))
    if args.timesteps is not None:
        stomp_config.num_timesteps = args.timesteps

    robot = build_planar_arm()
    stomp_config.num_dimensions = len(robot.group_joint_names(GROUP_NAME))

    logger.info("=" * 60)
    logger.info("Obstacle Distance Trajectory Evaluation")
    logger.info("=" * 60)
    logger.info(f"  Robot: {robot.name} ({len(robot.link_names)} links)")
    logger.info(f"  Timesteps: {stomp_config.num_timesteps}")
    logger.info(f"  Start: {args.start}")
    logger.info(f"  Goal: {args.goal}")
    logger.info("")

    cost_functions = [
        create_cost_function(entry, robot, GROUP_NAME)
        for entry in config_data.get("cost_functions", [])
    ]
    if not cost_functions:
        logger.error("No cost functions in %s", args.config)
        raise SystemExit(1)

    scene = PlanningScene(robot)
    request = MotionPlanRequest(
        group_name=GROUP_NAME,
        start_state=RobotStateMsg.from_positions(
            robot.group_joint_names(GROUP_NAME), args.start,
        ),
    )
    for cost_function in cost_functions:
        ok, code = cost_function.set_motion_plan_request(scene, request, stomp_config)
        if not ok:
            logger.error("%s failed to bind: %s", cost_function.name, code.name)
            raise SystemExit(1)

    n = stomp_config.num_timesteps
    s = np.linspace(0.0, 1.0, n)
    start = np.asarray(args.start)
    goal = np.asarray(args.goal)
    parameters = (start[:, None] + (goal - start)[:, None] * s[None, :])

    ok, costs, valid = aggregate_costs(cost_functions, parameters, 0, n, 0, 0)
    for cost_function in cost_functions:
        cost_function.done(ok, 1, float(np.sum(costs)) if ok else float("nan"))
    if not ok:
        logger.error("Cost evaluation failed")
        raise SystemExit(1)

    logger.info("Costs per waypoint:")
    for t in range(n):
        logger.info(f"  {t:3d}: {np.round(parameters[:, t], 3).tolist()} -> {costs[t]:.4f}")
    logger.info("")
    logger.info(f"  Total cost: {float(np.sum(costs)):.4f}")
    logger.info(f"  Valid: {valid}")

    if args.output is not None:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_data = {
            "parameters": parameters.tolist(),
            "costs": costs.tolist(),
            "valid": valid,
        }
        with open(output_path, "w") as f:
            json.dump(output_data, f, indent=2)
        logger.info(f"Saved to {output_path}")


if __name__ == "__main__":
    main()
