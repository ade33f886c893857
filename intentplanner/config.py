"""Planner configuration: loading, parsing and validation."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

log = logging.getLogger(__name__)

# Max timeout (s) between each intent's reevaluation.
MAX_CONTROLLER_TIMEOUT = 600
# Max timeout (s) for the informer factories.
MAX_INFORMER_TIMEOUT = 300
# Max length of the job queue for processing intents.
MAX_TASK_CHANNEL_LEN = 10000
# Max tick (ms) of the planner's cache eviction.
MAX_PLAN_CACHE_TIMEOUT = 50000
# Max time-to-live (ms) of an entry in the planner's cache.
MAX_PLAN_CACHE_TTL = 500000
# Max number of opportunistic candidates for the A* planner.
MAX_OPPORTUNISTIC_CANDIDATES = 1000

T = TypeVar("T")


class ConfigError(ValueError):
    """Raised when a configuration cannot be read, parsed or validated.

    When the file could be parsed but failed validation, ``config`` holds
    the parsed configuration.
    """

    def __init__(self, message: str, config: "Config | None" = None) -> None:
        super().__init__(message)
        self.config = config


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"field {key!r} must be an object")
    return value


def _int(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field {key!r} must be an integer")
    return value


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string")
    return value


@dataclass
class GenericConfig:
    """Generic settings."""

    mongo_endpoint: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "GenericConfig":
        return cls(mongo_endpoint=_str(data, "mongo_endpoint"))

    def to_dict(self) -> dict:
        return {"mongo_endpoint": self.mongo_endpoint}


@dataclass
class MetricConfig:
    """A named telemetry query."""

    name: str = ""
    query: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "MetricConfig":
        if not isinstance(data, dict):
            raise TypeError("metric entries must be objects")
        return cls(name=_str(data, "name"), query=_str(data, "query"))

    def to_dict(self) -> dict:
        result = {}
        if self.name:
            result["name"] = self.name
        if self.query:
            result["query"] = self.query
        return result


@dataclass
class ControllerConfig:
    """Controller related settings."""

    workers: int = 0
    task_channel_length: int = 0
    informer_timeout: int = 0
    controller_timeout: int = 0
    plan_cache_ttl: int = 0
    plan_cache_timeout: int = 0
    telemetry_endpoint: str = ""
    host_field: str = ""
    metrics: list[MetricConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ControllerConfig":
        metrics = data.get("metrics") or []
        if not isinstance(metrics, list):
            raise TypeError("field 'metrics' must be a list")
        return cls(
            workers=_int(data, "workers"),
            task_channel_length=_int(data, "task_channel_length"),
            informer_timeout=_int(data, "informer_timeout"),
            controller_timeout=_int(data, "controller_timeout"),
            plan_cache_ttl=_int(data, "plan_cache_ttl"),
            plan_cache_timeout=_int(data, "plan_cache_timeout"),
            telemetry_endpoint=_str(data, "telemetry_endpoint"),
            host_field=_str(data, "host_field"),
            metrics=[MetricConfig.from_dict(entry) for entry in metrics],
        )

    def to_dict(self) -> dict:
        return {
            "workers": self.workers,
            "task_channel_length": self.task_channel_length,
            "informer_timeout": self.informer_timeout,
            "controller_timeout": self.controller_timeout,
            "plan_cache_ttl": self.plan_cache_ttl,
            "plan_cache_timeout": self.plan_cache_timeout,
            "telemetry_endpoint": self.telemetry_endpoint,
            "host_field": self.host_field,
            "metrics": [metric.to_dict() for metric in self.metrics],
        }


@dataclass
class MonitorConfig:
    """Settings of the pod, KPI profile and intent monitors."""

    pod_workers: int = 0
    profile_workers: int = 0
    profile_queries: str = ""
    intent_workers: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "MonitorConfig":
        pod = _section(data, "pod")
        profile = _section(data, "profile")
        intent = _section(data, "intent")
        return cls(
            pod_workers=_int(pod, "workers"),
            profile_workers=_int(profile, "workers"),
            profile_queries=_str(profile, "queries"),
            intent_workers=_int(intent, "workers"),
        )

    def to_dict(self) -> dict:
        return {
            "pod": {"workers": self.pod_workers},
            "profile": {"workers": self.profile_workers, "queries": self.profile_queries},
            "intent": {"workers": self.intent_workers},
        }


@dataclass
class AStarConfig:
    """Settings of the A* planner."""

    opportunistic_candidates: int = 0
    max_states: int = 0
    max_candidates: int = 0
    plugin_manager_endpoint: str = ""
    plugin_manager_port: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "AStarConfig":
        return cls(
            opportunistic_candidates=_int(data, "opportunistic_candidates"),
            max_states=_int(data, "max_states"),
            max_candidates=_int(data, "max_candidates"),
            plugin_manager_endpoint=_str(data, "plugin_manager_endpoint"),
            plugin_manager_port=_int(data, "plugin_manager_port"),
        )

    def to_dict(self) -> dict:
        return {
            "opportunistic_candidates": self.opportunistic_candidates,
            "max_states": self.max_states,
            "max_candidates": self.max_candidates,
            "plugin_manager_endpoint": self.plugin_manager_endpoint,
            "plugin_manager_port": self.plugin_manager_port,
        }


@dataclass
class PlannerConfig:
    """Planner related settings."""

    astar: AStarConfig = field(default_factory=AStarConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "PlannerConfig":
        return cls(astar=AStarConfig.from_dict(_section(data, "astar")))

    def to_dict(self) -> dict:
        return {"astar": self.astar.to_dict()}


@dataclass
class Config:
    """The complete planner configuration."""

    generic: GenericConfig = field(default_factory=GenericConfig)
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)

    @classmethod
    def from_dict(cls, data: Any) -> "Config":
        """Build a configuration from decoded JSON; missing fields take zero values."""
        if not isinstance(data, dict):
            raise TypeError("configuration must be a JSON object")
        return cls(
            generic=GenericConfig.from_dict(_section(data, "generic")),
            controller=ControllerConfig.from_dict(_section(data, "controller")),
            monitor=MonitorConfig.from_dict(_section(data, "monitor")),
            planner=PlannerConfig.from_dict(_section(data, "planner")),
        )

    def to_dict(self) -> dict:
        """Return the JSON-ready form of this configuration."""
        return {
            "generic": self.generic.to_dict(),
            "controller": self.controller.to_dict(),
            "monitor": self.monitor.to_dict(),
            "planner": self.planner.to_dict(),
        }


def load_config(filename: str | os.PathLike, factory: Callable[[Any], T]) -> T:
    """Read a JSON file and build an object from it with ``factory``."""
    try:
        raw = Path(filename).read_bytes()
    except OSError as exc:
        raise ConfigError(f"unable to read config file: {exc}") from exc
    try:
        return factory(json.loads(raw))
    except (ValueError, TypeError) as exc:
        raise ConfigError(f"unable to parse config file: {exc}") from exc


def _maximum_workers() -> int:
    return os.cpu_count() or 1


def invalid_workers(n_workers: int) -> bool:
    """Tell whether a worker count lies outside 1..number of CPUs."""
    return n_workers <= 0 or n_workers > _maximum_workers()


def parse_config(filename: str | os.PathLike) -> Config:
    """Load and validate the planner configuration from a JSON file."""
    try:
        result = load_config(filename, Config.from_dict)
    except ConfigError as exc:
        raise ConfigError(f"error parsing config: {exc}") from exc

    ctrl = result.controller
    if (
        not 0 < ctrl.task_channel_length <= MAX_TASK_CHANNEL_LEN
        or not 0 < ctrl.controller_timeout <= MAX_CONTROLLER_TIMEOUT
        or not 0 < ctrl.informer_timeout <= MAX_INFORMER_TIMEOUT
        or not 0 < ctrl.plan_cache_timeout <= MAX_PLAN_CACHE_TIMEOUT
        or not 0 < ctrl.plan_cache_ttl <= MAX_PLAN_CACHE_TTL
    ):
        raise ConfigError("invalid input value: Out of the provided limits", result)
    if (
        invalid_workers(ctrl.workers)
        or invalid_workers(result.monitor.profile_workers)
        or invalid_workers(result.monitor.intent_workers)
    ):
        raise ConfigError("invalid worker(s) number", result)
    astar = result.planner.astar
    if not 0 <= astar.opportunistic_candidates <= MAX_OPPORTUNISTIC_CANDIDATES:
        raise ConfigError("invalid input value: Out of the provided limits", result)
    if not 1 <= astar.plugin_manager_port <= 65535:
        raise ConfigError(
            "invalid input value: Port number is not in a valid range: "
            f"{astar.plugin_manager_port}",
            result,
        )
    if not check_url(ctrl.telemetry_endpoint) or not check_url(result.generic.mongo_endpoint):
        raise ConfigError("invalid URL", result)
    return result


def check_url(urlpath: str) -> bool:
    """Tell whether ``urlpath`` is an absolute URI or an absolute path."""
    try:
        _parse_request_uri(urlpath)
    except ValueError as exc:
        log.error("parse %r: %s", urlpath, exc)
        return False
    return True


_INVALID_HOST_CHARS = set(" <>\"{}|\\^`")


def _split_scheme(raw: str) -> tuple[str, str]:
    for i, char in enumerate(raw):
        if char.isascii() and char.isalpha():
            continue
        if char.isascii() and (char.isdigit() or char in "+-."):
            if i == 0:
                return "", raw
            continue
        if char == ":":
            if i == 0:
                raise ValueError("missing protocol scheme")
            return raw[:i], raw[i + 1:]
        return "", raw
    return "", raw


def _check_authority(authority: str) -> None:
    host = authority.rpartition("@")[2]
    if host.startswith("["):
        closing = host.find("]")
        if closing < 0:
            raise ValueError("missing ']' in host")
        port = host[closing + 1:]
        if port and not port.startswith(":"):
            raise ValueError(f"invalid port {port!r} after host")
    else:
        name, sep, port = host.rpartition(":")
        if not sep:
            name, port = host, ""
        else:
            port = sep + port
        if any(char in _INVALID_HOST_CHARS for char in name):
            raise ValueError(f"invalid character in host name {name!r}")
    digits = port[1:]
    if digits and not digits.isdigit():
        raise ValueError(f"invalid port {port!r} after host")


def _parse_request_uri(raw: str) -> None:
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in raw):
        raise ValueError("invalid control character in URL")
    if raw == "*":
        return
    if not raw:
        raise ValueError("empty url")
    scheme, rest = _split_scheme(raw)
    rest = rest.split("?", 1)[0]
    if not rest.startswith("/"):
        if scheme:
            return
        raise ValueError("invalid URI for request")
    if scheme and rest.startswith("//") and not rest.startswith("///"):
        _check_authority(rest[2:].split("/", 1)[0])