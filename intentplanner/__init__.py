"""Configuration, state model, TTL cache and actuator plugin messages for an intent-driven planner."""

__version__ = "0.3.0"