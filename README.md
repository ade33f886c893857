# intentplanner

Building blocks for an intent-driven orchestration planner: a validated
configuration, the state model the planner searches over, a small TTL cache,
and the messages exchanged with actuator plugins together with their
conversions to and from the planner's own types. The package has no
dependencies beyond the standard library.

## Configuration

`intentplanner.config.parse_config(filename)` reads a JSON configuration file
into a `Config` object, made of `GenericConfig`, `ControllerConfig` (with a
list of `MetricConfig` entries), `MonitorConfig` and `PlannerConfig` (holding
an `AStarConfig`). It then checks the values:

- the task channel length, controller timeout, informer timeout, plan cache
  timeout and plan cache TTL must be positive and within their limits
  (`MAX_TASK_CHANNEL_LEN`, `MAX_CONTROLLER_TIMEOUT`, `MAX_INFORMER_TIMEOUT`,
  `MAX_PLAN_CACHE_TIMEOUT`, `MAX_PLAN_CACHE_TTL`);
- the controller, profile monitor and intent monitor worker counts must lie
  between one and the number of CPUs;
- the opportunistic candidates must lie between 0 and 1000;
- the plugin manager port must lie between 1 and 65535;
- the telemetry and database endpoints must be valid request URIs.

An unreadable or malformed file, or a value out of bounds, raises
`ConfigError`. When the file parsed but failed a check, the error's `config`
attribute holds the parsed configuration.

```python
from intentplanner.config import ConfigError, parse_config

try:
    cfg = parse_config("defaults.json")
except ConfigError as err:
    print(f"bad configuration: {err}")
else:
    print(cfg.planner.astar.plugin_manager_port)
```

`Config.from_dict()` and `Config.to_dict()` convert to and from the JSON
shape; missing fields take zero values. `load_config(filename, factory)` is
the lower-level reader that passes decoded JSON to any factory, and
`check_url()` and `invalid_workers()` expose the individual checks.

## States and objectives

`intentplanner.types` holds the planner's model: an `Intent` with its
objectives, `PodState`, `PodError`, a `Profile` with its `ProfileType`, an
`Action` (a named plan step with properties), and `State`, which bundles an
intent with current pods, telemetry data, resources and annotations.

- `State.deep_copy()` returns an independent copy.
- `State.is_better(other, profiles)` is true when every objective is at least
  as good as in `other`: smaller is better for latency and power profiles,
  larger for all others. States with different numbers of objectives, or with
  none, are never better.
- `State.distance(other, profiles)` is the Euclidean distance between the
  objectives, returned as a negative reciprocal when this state is better so
  that closer better states rank first.
- `State.less_resources(other)` is true when every resource of this state
  exists in `other` with at least the same amount.

`profile_type_from_text("latency")` maps a name, case-insensitively, to a
`ProfileType`; unknown names become `ProfileType.OBSOLETE`.

## TTL cache

`intentplanner.ttl_cache.TTLCache(ttl, tick)` remembers keys for `ttl`
milliseconds; a background thread evicts stale entries every `tick`
milliseconds. With timing values outside the permitted ranges the cache
still stores keys but never evicts them (see the `evicting` property).

```python
from intentplanner.ttl_cache import TTLCache

with TTLCache(ttl=45000, tick=5000) as cache:
    cache.put("default/my-intent")
    assert "default/my-intent" in cache
```

## Actuator plugin messages

`intentplanner.plugins.messages` defines the messages of the plugin protocol
(version `PLUGIN_VERSION`): `WireState`, `WireIntent`, `WirePodState`,
`WireProfile`, `WireAction` with `ActionProperties`, `PluginInfo`,
`RegisterRequest`, `RegistrationStatusResponse`, `NextStateRequest`,
`NextStateResponse`, `PerformRequest` and `EffectRequest`, along with the
method paths (`REGISTER_METHOD`, `NEXT_STATE_METHOD`, `PERFORM_METHOD`,
`EFFECT_METHOD`).

- `encode(message)` serialises a message to compact JSON bytes and
  `decode(message_type, data)` reads it back, raising `ValueError` on
  malformed input.
- `to_wire_state`, `to_wire_states`, `to_wire_profile`, `to_wire_profiles`
  and `to_wire_actions` convert planner types into messages;
  `from_wire_state`, `from_wire_profiles` and `from_wire_actions` convert
  back. Integer property maps travel as integer properties, anything else as
  string properties.
- `next_state_request`, `perform_request` and `effect_request` build
  requests; `next_state_response` builds a response and
  `unpack_next_state_response` returns its states, utilities and actions.

## What the package does not do

It has no network transport. There is no plugin manager server that accepts
registrations, no client that calls a plugin, and no server for a plugin to
run; the messages and method paths are only the data such pieces would
exchange. It has no types for the intent and KPI profile cluster resources,
no planner search, and no command-line program.