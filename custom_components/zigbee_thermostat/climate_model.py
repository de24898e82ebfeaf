"""Shared zigbee thermostat model/types/helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .const import (
    DEFAULT_BASE_TOPIC,
    DEFAULT_TARGET_TEMP,
    MAX_TARGET_TEMP,
    MIN_TARGET_TEMP,
    TARGET_TEMP_STEP,
)


class OperatingMode(str, Enum):
    """User-selected operating mode. Values match Home Assistant HVAC modes."""

    OFF = "off"
    HEAT = "heat"


class HeatingState(str, Enum):
    """Reported "currently heating" indicator."""

    OFF = "off"
    HEAT = "heat"


class ActuatorCommand(str, Enum):
    """Desired outlet state, before any polarity inversion."""

    OFF = "OFF"
    ON = "ON"

    @classmethod
    def from_heating(cls, heating: HeatingState) -> ActuatorCommand:
        return cls.ON if heating is HeatingState.HEAT else cls.OFF

    def payload_state(self, invert: bool = False) -> str:
        """Return the wire value for the outlet, applying polarity inversion."""
        on = self is ActuatorCommand.ON
        if invert:
            on = not on
        return ActuatorCommand.ON.value if on else ActuatorCommand.OFF.value


@dataclass
class ControlState:
    """Authoritative control state owned by the climate controller."""

    current_temperature: float = 0.0
    current_humidity: float = 0.0
    target_temperature: float = DEFAULT_TARGET_TEMP
    mode: OperatingMode = OperatingMode.OFF
    actuator_command: ActuatorCommand = ActuatorCommand.OFF
    heating_active: HeatingState = HeatingState.OFF
    # None until the broker has acknowledged a command.
    last_confirmed_command: ActuatorCommand | None = None


@dataclass(frozen=True)
class TopicSet:
    """MQTT topics for one sensor/outlet pair."""

    sensor: str
    actuator: str
    base_topic: str = DEFAULT_BASE_TOPIC

    def topic(self, value: str) -> str:
        return f"{self.base_topic or DEFAULT_BASE_TOPIC}/{value}"

    @property
    def sensor_topic(self) -> str:
        return self.topic(self.sensor)

    @property
    def actuator_topic(self) -> str:
        return self.topic(self.actuator) + "/set"


@dataclass(frozen=True)
class TelemetryReading:
    """The part of a sensor message the controller consumes."""

    temperature: float
    humidity: float | None = None


def clamp_target_temperature(value: float) -> float:
    """Clamp a setpoint to the supported range and snap it to the step.

    Halfway values round up, so 21.25 becomes 21.5.
    """
    result = min(max(value, MIN_TARGET_TEMP), MAX_TARGET_TEMP)
    steps = math.floor(result / TARGET_TEMP_STEP + 0.5)
    result = steps * TARGET_TEMP_STEP
    return min(max(result, MIN_TARGET_TEMP), MAX_TARGET_TEMP)


def _coerce_temperature(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _coerce_mode(value: Any) -> OperatingMode | None:
    if isinstance(value, Enum):
        value = value.value
    try:
        return OperatingMode(value)
    except ValueError:
        return None
