import pytest

from intentplanner.plugins.messages import (
    ActionProperties,
    NextStateRequest,
    NextStateResponse,
    PropertyType,
    RegisterRequest,
    PluginInfo,
    WireAction,
    WireIntent,
    WirePodState,
    WireProfile,
    WireProfileType,
    WireState,
    decode,
    effect_request,
    encode,
    from_wire_actions,
    from_wire_profiles,
    from_wire_state,
    next_state_request,
    next_state_response,
    perform_request,
    to_wire_actions,
    to_wire_profiles,
    to_wire_state,
    unpack_next_state_response,
)
from intentplanner.types import (
    Action,
    Intent,
    PodState,
    Profile,
    State,
    profile_type_from_text,
)


def validation_set():
    return {
        "start": State(
            intent=Intent(
                key="test-my-objective",
                priority=0.0,
                target_key="my-deployment",
                target_kind="Deployment",
                objectives={"p99latency": 150},
            ),
            current_pods={"pod_0": PodState(availability=0.7)},
            current_data={"cpu_value": {"host0": 20.0}},
            resources={"cpu": 23},
            annotations={"foo": "bar"},
        ),
        "goal": State(
            intent=Intent(
                key="goal",
                priority=0.23,
                target_key="my-deployment",
                target_kind="Deployment",
                objectives={"p99latency": 100},
            ),
        ),
        "profiles": {"p99latency": Profile(profile_type=profile_type_from_text("latency"))},
        "end": [
            State(
                intent=Intent(
                    key="end-objective",
                    priority=0.2,
                    target_key="my-deployment",
                    target_kind="Deployment",
                    objectives={"p99latency": 222},
                ),
                current_pods={"pod_0": PodState(availability=0.6)},
                current_data={"cpu_value": {"host0": 21.3}},
                resources={"cpu": 12},
                annotations={"foo": "bar"},
            )
        ],
        "utilities": [0.32, 0.64],
        "actions": [
            Action(name="action 1", properties={"option1": "v_a", "option2": "v_b"}),
            Action(name="action 2", properties={"option3": 42}),
        ],
    }


def wire_validation_set():
    return {
        "start": WireState(
            intent=WireIntent(
                key="test-my-objective",
                priority=0.0,
                target_key="my-deployment",
                target_kind="Deployment",
                objectives={"p99latency": 150},
            ),
            current_pods={"pod_0": WirePodState(availability=0.7)},
            current_data={"cpu_value": {"host0": 20.0}},
            resources={"cpu": 23},
            annotations={"foo": "bar"},
        ),
        "goal": WireState(
            intent=WireIntent(
                key="goal",
                priority=0.23,
                target_key="my-deployment",
                target_kind="Deployment",
                objectives={"p99latency": 100},
            ),
        ),
        "profiles": {"p99latency": WireProfile(profile_type=WireProfileType.LATENCY)},
        "end": [
            WireState(
                intent=WireIntent(
                    key="end-objective",
                    priority=0.2,
                    target_key="my-deployment",
                    target_kind="Deployment",
                    objectives={"p99latency": 222},
                ),
                current_pods={"pod_0": WirePodState(availability=0.6)},
                current_data={"cpu_value": {"host0": 21.3}},
                resources={"cpu": 12},
                annotations={"foo": "bar"},
            )
        ],
        "utilities": [0.32, 0.64],
        "actions": [
            WireAction(
                name="action 1",
                properties=ActionProperties(
                    type=PropertyType.STRING_PROPERTY,
                    str_properties={"option1": "v_a", "option2": "v_b"},
                ),
            ),
            WireAction(
                name="action 2",
                properties=ActionProperties(
                    type=PropertyType.INT_PROPERTY, int_properties={"option3": 42}
                ),
            ),
        ],
    }


def test_get_next_state_request():
    v_set = validation_set()
    wire = wire_validation_set()
    request = next_state_request(v_set["start"], v_set["goal"], v_set["profiles"])
    assert request.state == wire["start"]
    assert request.goal == wire["goal"]
    assert request.profiles == wire["profiles"]


def test_get_next_state_response():
    v_set = validation_set()
    wire = wire_validation_set()
    response = NextStateResponse(
        states=wire["end"], utilities=wire["utilities"], actions=wire["actions"]
    )
    states, utilities, actions = unpack_next_state_response(response)
    assert states == v_set["end"]
    assert utilities == v_set["utilities"]
    assert actions == v_set["actions"]


def test_get_perform_request():
    v_set = validation_set()
    wire = wire_validation_set()
    request = perform_request(v_set["start"], v_set["actions"])
    assert request.state == wire["start"]
    assert request.plan == wire["actions"]


def test_get_effect_request():
    v_set = validation_set()
    wire = wire_validation_set()
    request = effect_request(v_set["start"], v_set["profiles"])
    assert request.state == wire["start"]
    assert request.profiles == wire["profiles"]


def test_next_state_response_from_plugin_side():
    v_set = validation_set()
    wire = wire_validation_set()
    response = next_state_response(v_set["end"], v_set["utilities"], v_set["actions"])
    assert response.states == wire["end"]
    assert response.utilities == wire["utilities"]
    assert response.actions == wire["actions"]


def test_state_round_trip():
    start = validation_set()["start"]
    assert from_wire_state(to_wire_state(start)) == start


def test_profiles_round_trip():
    profiles = {
        "p99": Profile(key="default/p99", profile_type=profile_type_from_text("latency")),
        "rps": Profile(key="default/rps", profile_type=profile_type_from_text("throughput")),
        "power": Profile(key="default/power", profile_type=profile_type_from_text("power")),
    }
    assert from_wire_profiles(to_wire_profiles(profiles)) == profiles


def test_actions_round_trip():
    actions = validation_set()["actions"]
    assert from_wire_actions(to_wire_actions(actions)) == actions


def test_action_without_property_map_travels_as_empty_strings():
    (wire,) = to_wire_actions([Action(name="noop", properties=None)])
    assert wire.properties == ActionProperties(type=PropertyType.STRING_PROPERTY)


def test_encode_decode_next_state_request():
    v_set = validation_set()
    request = next_state_request(v_set["start"], v_set["goal"], v_set["profiles"])
    assert decode(NextStateRequest, encode(request)) == request


def test_encode_decode_next_state_response():
    wire = wire_validation_set()
    response = NextStateResponse(
        states=wire["end"], utilities=wire["utilities"], actions=wire["actions"]
    )
    decoded = decode(NextStateResponse, encode(response))
    assert decoded == response
    assert decoded.actions[0].properties.type is PropertyType.STRING_PROPERTY


def test_encode_decode_register_request():
    request = RegisterRequest(
        p_info=PluginInfo(name="TestActuator", endpoint="my ip", supported_versions="v1alpha1")
    )
    assert decode(RegisterRequest, encode(request)) == request


def test_decode_missing_fields_take_defaults():
    assert decode(NextStateResponse, b"{}") == NextStateResponse()


def test_decode_rejects_malformed_bytes():
    with pytest.raises(ValueError):
        decode(NextStateRequest, b"not json")


def test_decode_rejects_wrong_field_type():
    with pytest.raises(ValueError):
        decode(NextStateResponse, b'{"utilities": ["high"]}')


def test_decode_rejects_unknown_enum_value():
    with pytest.raises(ValueError):
        decode(WireProfile, b'{"key": "p99", "profile_type": 42}')


def test_encode_rejects_non_message():
    with pytest.raises(TypeError):
        encode({"state": {}})