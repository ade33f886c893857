"""Core planning types: profiles, intents, pod and system states, actions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Mapping


class ProfileType(IntEnum):
    """Kind of a KPI profile."""

    OBSOLETE = 0
    LATENCY = 1
    AVAILABILITY = 2
    THROUGHPUT = 3
    POWER = 4


_PROFILE_TYPES = {
    "latency": ProfileType.LATENCY,
    "availability": ProfileType.AVAILABILITY,
    "throughput": ProfileType.THROUGHPUT,
    "power": ProfileType.POWER,
}

# For these profile types smaller values are better.
_SMALLER_IS_BETTER = frozenset({ProfileType.LATENCY, ProfileType.POWER})


def profile_type_from_text(text: str) -> ProfileType:
    """Map a profile type name (case-insensitive) to its ProfileType."""
    return _PROFILE_TYPES.get(text.lower(), ProfileType.OBSOLETE)


@dataclass
class PodError:
    """Start and end time of an error of a pod."""

    key: str
    start: datetime | None = None
    end: datetime | None = None
    created: datetime | None = None


@dataclass
class Profile:
    """A valid objective profile."""

    key: str = ""
    profile_type: ProfileType = ProfileType.OBSOLETE
    query: str = ""
    external: bool = False
    address: str = ""


@dataclass
class Intent:
    """An intent in the system."""

    key: str = ""
    priority: float = 0.0
    target_key: str = ""
    target_kind: str = ""
    objectives: dict[str, float] = field(default_factory=dict)


@dataclass
class PodState:
    """The state of a pod."""

    availability: float = 0.0
    node_name: str = ""
    state: str = ""
    qos_class: str = ""


@dataclass
class Action:
    """A single step of a plan."""

    name: str
    properties: Any = None


_DEFAULT_PROFILE = Profile()


@dataclass
class State:
    """The state a set of pods can be in."""

    intent: Intent = field(default_factory=Intent)
    current_pods: dict[str, PodState] = field(default_factory=dict)
    current_data: dict[str, dict[str, float]] = field(default_factory=dict)
    resources: dict[str, int] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    def deep_copy(self) -> "State":
        """Return an independent copy of this state."""
        return State(
            intent=Intent(
                key=self.intent.key,
                priority=self.intent.priority,
                target_key=self.intent.target_key,
                target_kind=self.intent.target_kind,
                objectives=dict(self.intent.objectives),
            ),
            current_pods={
                name: PodState(pod.availability, pod.node_name, pod.state, pod.qos_class)
                for name, pod in self.current_pods.items()
            },
            current_data={name: dict(values) for name, values in self.current_data.items()},
            resources=dict(self.resources),
            annotations=dict(self.annotations),
        )

    def distance(self, another: "State", profiles: Mapping[str, Profile]) -> float:
        """Euclidean distance between the objectives; negative when this state is better."""
        squares_sum = sum(
            (value - another.intent.objectives.get(key, 0.0)) ** 2
            for key, value in self.intent.objectives.items()
        )
        if self.is_better(another, profiles) and squares_sum != 0.0:
            # favour states which are closer to the goal.
            return -1 / math.sqrt(squares_sum)
        return math.sqrt(squares_sum)

    def is_better(self, another: "State", profiles: Mapping[str, Profile]) -> bool:
        """True if every objective is at least as good as in ``another``.

        Latency and power objectives are better when smaller, all others when
        larger. States with different objective counts, or none, are not better.
        """
        mine = self.intent.objectives
        theirs = another.intent.objectives
        if len(mine) != len(theirs) or not mine:
            return False
        for key, value in mine.items():
            other = theirs.get(key, 0.0)
            profile_type = profiles.get(key, _DEFAULT_PROFILE).profile_type
            if profile_type in _SMALLER_IS_BETTER:
                if value > other:
                    return False
            elif value < other:
                return False
        return True

    def less_resources(self, another: "State") -> bool:
        """True if every resource here exists in ``another`` with at least this amount."""
        if not self.resources:
            return False
        for key, value in self.resources.items():
            if key not in another.resources or value > another.resources[key]:
                return False
        return True