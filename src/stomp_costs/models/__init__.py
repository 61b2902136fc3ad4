"""Bundled robot models."""

from .planar_arm import GROUP_NAME, Q_FOLDED, Q_STRAIGHT, build_planar_arm

__all__ = ["GROUP_NAME", "Q_FOLDED", "Q_STRAIGHT", "build_planar_arm"]
