"""Pairwise table of link pairs exempt from distance checks."""

from itertools import combinations

from ..robot.robot_model import RobotModel


class AllowedCollisionMatrix:
    """Symmetric set of link pairs whose contact is allowed.

    Pairs not present are checked. ``set_default_entry`` exempts a link from
    every check, e.g. for a link without meaningful geometry.
    """

    def __init__(self, allowed_pairs=()):
        self._allowed: set[frozenset[str]] = set()
        self._default_allowed: set[str] = set()
        for a, b in allowed_pairs:
            self.set_entry(a, b, True)

    @classmethod
    def from_robot_model(cls, robot_model: RobotModel) -> "AllowedCollisionMatrix":
        """Matrix allowing contact between adjacent links only."""
        return cls(robot_model.adjacent_link_pairs())

    def set_entry(self, link_a: str, link_b: str, allowed: bool) -> None:
        key = frozenset((link_a, link_b))
        if allowed:
            self._allowed.add(key)
        else:
            self._allowed.discard(key)

    def set_default_entry(self, link: str, allowed: bool) -> None:
        if allowed:
            self._default_allowed.add(link)
        else:
            self._default_allowed.discard(link)

    def is_allowed(self, link_a: str, link_b: str) -> bool:
        if link_a in self._default_allowed or link_b in self._default_allowed:
            return True
        return frozenset((link_a, link_b)) in self._allowed

    def checked_pairs(self, link_names: list[str]) -> list[tuple[str, str]]:
        """All unordered pairs of ``link_names`` that are not allowed."""
        return [(a, b) for a, b in combinations(link_names, 2)
                if not self.is_allowed(a, b)]

    def copy(self) -> "AllowedCollisionMatrix":
        other = AllowedCollisionMatrix()
        other._allowed = set(self._allowed)
        other._default_allowed = set(self._default_allowed)
        return other

    def __len__(self) -> int:
        return len(self._allowed)
