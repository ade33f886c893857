"""Messages exchanged with actuator plugins, their wire encoding and conversions."""

import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Iterable, Mapping, TypeVar, get_args, get_origin

from intentplanner.types import Action, Intent, PodState, Profile, State, profile_type_from_text

# Version of the plugin protocol spoken by the plugin manager.
PLUGIN_VERSION = "v1alpha1"

REGISTRATION_SERVICE = "intentplanner.v1alpha1.Registration"
ACTUATOR_SERVICE = "intentplanner.v1alpha1.ActuatorPlugin"
REGISTER_METHOD = f"/{REGISTRATION_SERVICE}/Register"
NEXT_STATE_METHOD = f"/{ACTUATOR_SERVICE}/NextState"
PERFORM_METHOD = f"/{ACTUATOR_SERVICE}/Perform"
EFFECT_METHOD = f"/{ACTUATOR_SERVICE}/Effect"

M = TypeVar("M")


class WireProfileType(IntEnum):
    """Profile type as sent over the wire."""

    OBSOLETE = 0
    LATENCY = 1
    AVAILABILITY = 2
    THROUGHPUT = 3
    POWER = 4


class PropertyType(IntEnum):
    """Which property map of an action is in use."""

    INT_PROPERTY = 0
    STRING_PROPERTY = 1


class PluginType(IntEnum):
    """Kind of a plugin."""

    ACTUATOR = 0


@dataclass
class WireIntent:
    key: str = ""
    priority: float = 0.0
    target_key: str = ""
    target_kind: str = ""
    objectives: dict[str, float] = field(default_factory=dict)


@dataclass
class WirePodState:
    availability: float = 0.0
    node_name: str = ""
    state: str = ""
    qos_class: str = ""


@dataclass
class WireState:
    intent: WireIntent = field(default_factory=WireIntent)
    current_pods: dict[str, WirePodState] = field(default_factory=dict)
    current_data: dict[str, dict[str, float]] = field(default_factory=dict)
    resources: dict[str, int] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class WireProfile:
    key: str = ""
    profile_type: WireProfileType = WireProfileType.OBSOLETE


@dataclass
class ActionProperties:
    type: PropertyType = PropertyType.INT_PROPERTY
    int_properties: dict[str, int] = field(default_factory=dict)
    str_properties: dict[str, str] = field(default_factory=dict)


@dataclass
class WireAction:
    name: str = ""
    properties: ActionProperties = field(default_factory=ActionProperties)


@dataclass
class PluginInfo:
    type: PluginType = PluginType.ACTUATOR
    name: str = ""
    endpoint: str = ""
    supported_versions: str = ""


@dataclass
class RegisterRequest:
    p_info: PluginInfo = field(default_factory=PluginInfo)


@dataclass
class RegistrationStatusResponse:
    plugin_registered: bool = False
    error: str = ""


@dataclass
class NextStateRequest:
    state: WireState = field(default_factory=WireState)
    goal: WireState = field(default_factory=WireState)
    profiles: dict[str, WireProfile] = field(default_factory=dict)


@dataclass
class NextStateResponse:
    states: list[WireState] = field(default_factory=list)
    utilities: list[float] = field(default_factory=list)
    actions: list[WireAction] = field(default_factory=list)


@dataclass
class PerformRequest:
    state: WireState = field(default_factory=WireState)
    plan: list[WireAction] = field(default_factory=list)


@dataclass
class EffectRequest:
    state: WireState = field(default_factory=WireState)
    profiles: dict[str, WireProfile] = field(default_factory=dict)


# --- wire encoding -------------------------------------------------------


def _to_json(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return value


def encode(message: Any) -> bytes:
    """Serialise a message to bytes."""
    if not dataclasses.is_dataclass(message) or isinstance(message, type):
        raise TypeError(f"cannot encode {type(message).__name__}: not a message")
    return json.dumps(_to_json(message), separators=(",", ":"), sort_keys=True).encode("utf-8")


def _from_json(hint: Any, value: Any, where: str) -> Any:
    origin = get_origin(hint)
    if origin is dict:
        _, item_hint = get_args(hint)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError(f"{where}: expected an object")
        return {key: _from_json(item_hint, item, f"{where}.{key}") for key, item in value.items()}
    if origin is list:
        (item_hint,) = get_args(hint)
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError(f"{where}: expected a list")
        return [_from_json(item_hint, item, f"{where}[{i}]") for i, item in enumerate(value)]
    if dataclasses.is_dataclass(hint):
        return hint() if value is None else _build(hint, value, where)
    if isinstance(hint, type) and issubclass(hint, Enum):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{where}: expected an enum number")
        try:
            return hint(value)
        except ValueError as exc:
            raise ValueError(f"{where}: unknown {hint.__name__} value {value}") from exc
    if hint is bool:
        if not isinstance(value, bool):
            raise ValueError(f"{where}: expected a boolean")
        return value
    if hint is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{where}: expected an integer")
        return value
    if hint is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{where}: expected a number")
        return float(value)
    if hint is str:
        if not isinstance(value, str):
            raise ValueError(f"{where}: expected a string")
        return value
    raise TypeError(f"{where}: unsupported field type {hint!r}")


def _build(cls: type, data: Any, where: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected an object")
    kwargs = {
        f.name: _from_json(f.type, data[f.name], f"{where}.{f.name}")
        for f in dataclasses.fields(cls)
        if f.name in data
    }
    return cls(**kwargs)


def decode(message_type: type[M], data: bytes | str) -> M:
    """Deserialise bytes produced by :func:`encode` into ``message_type``."""
    try:
        raw = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"malformed {message_type.__name__}: {exc}") from exc
    return _build(message_type, raw, message_type.__name__)


# --- conversions between planning types and messages ---------------------


def to_wire_state(state: State) -> WireState:
    """Convert a planning state into its message form."""
    intent = state.intent
    return WireState(
        intent=WireIntent(
            key=intent.key,
            priority=intent.priority,
            target_key=intent.target_key,
            target_kind=intent.target_kind,
            objectives=dict(intent.objectives or {}),
        ),
        current_pods={
            name: WirePodState(pod.availability, pod.node_name, pod.state, pod.qos_class)
            for name, pod in (state.current_pods or {}).items()
        },
        current_data={name: dict(values) for name, values in (state.current_data or {}).items()},
        resources=dict(state.resources or {}),
        annotations=dict(state.annotations or {}),
    )


def to_wire_states(states: Iterable[State]) -> list[WireState]:
    """Convert several planning states."""
    return [to_wire_state(state) for state in states]


def to_wire_profile(profile: Profile) -> WireProfile:
    """Convert a profile; only key and type travel."""
    return WireProfile(key=profile.key, profile_type=WireProfileType(int(profile.profile_type)))


def to_wire_profiles(profiles: Mapping[str, Profile]) -> dict[str, WireProfile]:
    """Convert a mapping of profiles."""
    return {name: to_wire_profile(profile) for name, profile in profiles.items()}


def _is_int_map(properties: Any) -> bool:
    return isinstance(properties, Mapping) and all(
        isinstance(value, int) and not isinstance(value, bool) for value in properties.values()
    )


def _is_str_map(properties: Any) -> bool:
    return isinstance(properties, Mapping) and all(
        isinstance(value, str) for value in properties.values()
    )


def to_wire_actions(actions: Iterable[Action]) -> list[WireAction]:
    """Convert actions; integer property maps travel as such, anything else as strings."""
    result = []
    for action in actions:
        if _is_int_map(action.properties):
            props = ActionProperties(
                type=PropertyType.INT_PROPERTY, int_properties=dict(action.properties)
            )
        else:
            strings = dict(action.properties) if _is_str_map(action.properties) else {}
            props = ActionProperties(type=PropertyType.STRING_PROPERTY, str_properties=strings)
        result.append(WireAction(name=action.name, properties=props))
    return result


def from_wire_state(state: WireState) -> State:
    """Convert a state message into a planning state."""
    intent = state.intent
    return State(
        intent=Intent(
            key=intent.key,
            priority=intent.priority,
            target_key=intent.target_key,
            target_kind=intent.target_kind,
            objectives=dict(intent.objectives),
        ),
        current_pods={
            name: PodState(
                availability=pod.availability,
                node_name=pod.node_name,
                state=pod.state,
                qos_class=pod.qos_class,
            )
            for name, pod in state.current_pods.items()
        },
        current_data={name: dict(values) for name, values in state.current_data.items()},
        resources=dict(state.resources),
        annotations=dict(state.annotations),
    )


def from_wire_profiles(profiles: Mapping[str, WireProfile]) -> dict[str, Profile]:
    """Convert profile messages into planning profiles."""
    return {
        name: Profile(
            key=profile.key,
            profile_type=profile_type_from_text(WireProfileType(profile.profile_type).name),
        )
        for name, profile in profiles.items()
    }


def from_wire_actions(actions: Iterable[WireAction]) -> list[Action]:
    """Convert action messages into planning actions."""
    result = []
    for action in actions:
        props = action.properties
        if props.type == PropertyType.INT_PROPERTY:
            properties: Any = dict(props.int_properties)
        else:
            properties = dict(props.str_properties)
        result.append(Action(name=action.name, properties=properties))
    return result


def next_state_request(
    state: State, goal: State, profiles: Mapping[str, Profile]
) -> NextStateRequest:
    """Build the request asking a plugin for follow-up states."""
    return NextStateRequest(
        state=to_wire_state(state),
        goal=to_wire_state(goal),
        profiles=to_wire_profiles(profiles),
    )


def unpack_next_state_response(
    response: NextStateResponse,
) -> tuple[list[State], list[float], list[Action]]:
    """Return the states, utilities and actions carried by a response."""
    states = [from_wire_state(state) for state in response.states]
    return states, list(response.utilities), from_wire_actions(response.actions)


def next_state_response(
    states: Iterable[State], utilities: Iterable[float], actions: Iterable[Action]
) -> NextStateResponse:
    """Build a response from a plugin's follow-up states."""
    return NextStateResponse(
        states=to_wire_states(states),
        utilities=list(utilities),
        actions=to_wire_actions(actions),
    )


def perform_request(state: State, plan: Iterable[Action]) -> PerformRequest:
    """Build the request asking a plugin to carry out a plan."""
    return PerformRequest(state=to_wire_state(state), plan=to_wire_actions(plan))


def effect_request(state: State, profiles: Mapping[str, Profile]) -> EffectRequest:
    """Build the request asking a plugin to recompute its effect models."""
    return EffectRequest(state=to_wire_state(state), profiles=to_wire_profiles(profiles))