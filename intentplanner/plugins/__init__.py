"""Actuator plugin messages, their encoding and conversions to planner types."""