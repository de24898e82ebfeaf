"""Hysteresis control of a heater outlet from sensor readings and user intent."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from .climate_model import (
    ActuatorCommand,
    ControlState,
    HeatingState,
    OperatingMode,
    TopicSet,
    _coerce_mode,
    _coerce_temperature,
    clamp_target_temperature,
)
from .const import COMMAND_QOS, HYSTERESIS
from .exceptions import PublishFailure
from .transport import TransportSession

_LOGGER = logging.getLogger(__name__)


class ClimateController:
    """Single owner of the control state.

    Every mutation recomputes the outlet command and publishes it when it
    differs from the last command the broker acknowledged.
    """

    def __init__(
        self,
        transport: TransportSession,
        topics: TopicSet,
        invert_on_off: bool = False,
    ) -> None:
        self._transport = transport
        self._topics = topics
        self._invert_on_off = invert_on_off
        self._state = ControlState()
        self._listeners: list[Callable[[], None]] = []

    @property
    def topics(self) -> TopicSet:
        return self._topics

    @property
    def state(self) -> ControlState:
        """Return a snapshot of the control state."""
        return replace(self._state)

    @property
    def current_temperature(self) -> float:
        return self._state.current_temperature

    @property
    def current_humidity(self) -> float:
        return self._state.current_humidity

    @property
    def target_temperature(self) -> float:
        return self._state.target_temperature

    @property
    def mode(self) -> OperatingMode:
        return self._state.mode

    @property
    def heating_active(self) -> HeatingState:
        return self._state.heating_active

    @property
    def actuator_command(self) -> ActuatorCommand:
        return self._state.actuator_command

    @property
    def last_confirmed_command(self) -> ActuatorCommand | None:
        return self._state.last_confirmed_command

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register *listener* for state changes; returns its remover."""
        self._listeners.append(listener)

        def remove_listener() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove_listener

    def on_telemetry(self, temperature: float, humidity: float | None = None) -> None:
        """Store a sensor reading as-is and recompute."""
        self._state.current_temperature = temperature
        if humidity is not None:
            self._state.current_humidity = humidity
        _LOGGER.info("Room temperature is %s°C", temperature)
        self._recompute()

    def set_target_temperature(self, value: Any) -> None:
        requested = _coerce_temperature(value)
        if requested is None:
            _LOGGER.warning("Ignoring non-numeric target temperature %r", value)
            return
        target = clamp_target_temperature(requested)
        if target != requested:
            _LOGGER.debug("Target temperature %s clamped to %s", requested, target)
        _LOGGER.info("Setting target temperature to %s°C", target)
        self._state.target_temperature = target
        self._recompute()

    def set_mode(self, mode: Any) -> None:
        new_mode = _coerce_mode(mode)
        if new_mode is None:
            raise ValueError(f"Unsupported mode {mode!r}")
        _LOGGER.info("Setting mode to %s", new_mode.value)
        self._state.mode = new_mode
        self._recompute()

    def restore(self, target_temperature: Any = None, mode: Any = None) -> None:
        """Seed setpoint and mode from a previous run without publishing."""
        restored_target = _coerce_temperature(target_temperature)
        if restored_target is not None:
            self._state.target_temperature = clamp_target_temperature(restored_target)
        restored_mode = _coerce_mode(mode) if mode is not None else None
        if restored_mode is not None:
            self._state.mode = restored_mode

    def _compute_heating(self) -> HeatingState:
        state = self._state
        if state.mode is OperatingMode.OFF:
            return HeatingState.OFF
        if state.current_temperature >= state.target_temperature + HYSTERESIS:
            return HeatingState.OFF
        if state.current_temperature < state.target_temperature - HYSTERESIS:
            return HeatingState.HEAT
        # Inside the deadband the previous decision holds.
        return state.heating_active

    def _recompute(self) -> None:
        heating = self._compute_heating()
        if heating is not self._state.heating_active:
            _LOGGER.info("Setting heating state to %s", heating.value)
        self._state.heating_active = heating
        self._state.actuator_command = ActuatorCommand.from_heating(heating)

        if self._state.actuator_command is not self._state.last_confirmed_command:
            self._publish_command(self._state.actuator_command)
        self._notify_listeners()

    def _publish_command(self, command: ActuatorCommand) -> None:
        topic = self._topics.actuator_topic
        state = command.payload_state(self._invert_on_off)
        _LOGGER.info("Sending %s to topic %s", state, topic)

        def _on_complete(err: PublishFailure | None) -> None:
            self._handle_publish_result(command, err)

        self._transport.publish(topic, {"state": state}, COMMAND_QOS, _on_complete)

    def _handle_publish_result(
        self, command: ActuatorCommand, err: PublishFailure | None
    ) -> None:
        if err is not None:
            _LOGGER.error("Command %s was not delivered: %s", command.value, err)
            return
        # A late acknowledgement for a superseded command is still recorded;
        # only equality with the current command drives future publishes.
        self._state.last_confirmed_command = command
        self._notify_listeners()

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            listener()
