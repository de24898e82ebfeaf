"""Zigbee Thermostat climate entity."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from homeassistant.components.climate import ClimateEntity
from homeassistant.components.climate.const import (
    HVACAction,
    HVACMode,
    ClimateEntityFeature,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers.restore_state import RestoreEntity

from .climate_external import handle_telemetry_message
from .climate_model import HeatingState, OperatingMode
from .const import (
    ATTR_ACTUATOR_COMMAND,
    ATTR_ACTUATOR_TOPIC,
    ATTR_LAST_CONFIRMED_COMMAND,
    ATTR_SENSOR_TOPIC,
    ATTR_TRANSPORT_CONNECTED,
    MAX_TARGET_TEMP,
    MIN_TARGET_TEMP,
    TARGET_TEMP_STEP,
)
from .controller import ClimateController
from .transport import TransportSession

_LOGGER = logging.getLogger(__name__)

_HVAC_TO_MODE = {
    HVACMode.OFF: OperatingMode.OFF,
    HVACMode.HEAT: OperatingMode.HEAT,
}


class ZigbeeThermostatEntity(RestoreEntity, ClimateEntity):
    """Thermostat that switches a zigbee outlet from a zigbee climate sensor."""

    _attr_should_poll = False
    _attr_hvac_modes = [HVACMode.OFF, HVACMode.HEAT]
    _attr_min_temp = MIN_TARGET_TEMP
    _attr_max_temp = MAX_TARGET_TEMP
    _attr_target_temperature_step = TARGET_TEMP_STEP
    _attr_precision = 0.1
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )

    def __init__(
        self,
        hass: HomeAssistant,
        name: str,
        unique_id: str | None,
        controller: ClimateController,
        transport: TransportSession,
    ) -> None:
        self.hass = hass
        self._attr_name = name
        self._attr_unique_id = unique_id
        self._controller = controller
        self._transport = transport
        self._unsub_listeners: list[Callable[[], None]] = []

    async def async_added_to_hass(self) -> None:
        """Restore user intent, then start the MQTT session."""

        await super().async_added_to_hass()
        await self._async_restore_state()
        self._unsub_listeners.append(
            self._controller.add_listener(self._async_handle_controller_update)
        )
        self._transport.on_message = self._async_handle_telemetry
        self._transport.on_connection_change = self._async_handle_connection_change
        self._transport.subscribe(self._controller.topics.sensor_topic)
        self._transport.connect()

    async def async_will_remove_from_hass(self) -> None:
        """Stop listening and close the MQTT session."""

        await super().async_will_remove_from_hass()
        while self._unsub_listeners:
            unsubscribe = self._unsub_listeners.pop()
            unsubscribe()
        self._transport.on_message = None
        self._transport.on_connection_change = None
        await self.hass.async_add_executor_job(self._transport.disconnect)

    async def _async_restore_state(self) -> None:
        last_state = await self.async_get_last_state()
        if not last_state:
            return
        mode = _HVAC_TO_MODE.get(last_state.state)
        self._controller.restore(
            target_temperature=last_state.attributes.get(ATTR_TEMPERATURE),
            mode=mode,
        )
        _LOGGER.debug(
            "Restored %s: target=%s mode=%s",
            self.entity_id,
            self._controller.target_temperature,
            self._controller.mode.value,
        )

    @callback
    def _async_handle_telemetry(self, topic: str, payload: bytes) -> None:
        handle_telemetry_message(self._controller, topic, payload)

    @callback
    def _async_handle_controller_update(self) -> None:
        if self.hass is not None and self.entity_id:
            self.async_write_ha_state()

    @callback
    def _async_handle_connection_change(self, connected: bool) -> None:
        _LOGGER.info(
            "%s %s MQTT broker",
            self.entity_id,
            "connected to" if connected else "lost connection to",
        )
        if self.entity_id:
            self.async_write_ha_state()

    @property
    def current_temperature(self) -> float | None:
        return self._controller.current_temperature

    @property
    def current_humidity(self) -> float | None:
        return self._controller.current_humidity

    @property
    def target_temperature(self) -> float | None:
        return self._controller.target_temperature

    @property
    def hvac_mode(self) -> HVACMode | None:
        return HVACMode(self._controller.mode.value)

    @property
    def hvac_action(self) -> HVACAction | None:
        if self._controller.mode is OperatingMode.OFF:
            return HVACAction.OFF
        if self._controller.heating_active is HeatingState.HEAT:
            return HVACAction.HEATING
        return HVACAction.IDLE

    @property
    def available(self) -> bool:
        # State is well defined before the first reading and while offline.
        return True

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        last_confirmed = self._controller.last_confirmed_command
        return {
            ATTR_ACTUATOR_COMMAND: self._controller.actuator_command.value,
            ATTR_LAST_CONFIRMED_COMMAND: last_confirmed.value if last_confirmed else None,
            ATTR_TRANSPORT_CONNECTED: self._transport.connected,
            ATTR_SENSOR_TOPIC: self._controller.topics.sensor_topic,
            ATTR_ACTUATOR_TOPIC: self._controller.topics.actuator_topic,
        }

    async def async_set_temperature(self, **kwargs: Any) -> None:
        """Set a new setpoint; out-of-range values are clamped."""
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        self._controller.set_target_temperature(temperature)

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        mode = _HVAC_TO_MODE.get(hvac_mode)
        if mode is None:
            raise ServiceValidationError(f"Unsupported HVAC mode '{hvac_mode}'")
        self._controller.set_mode(mode)

    async def async_turn_on(self) -> None:
        await self.async_set_hvac_mode(HVACMode.HEAT)

    async def async_turn_off(self) -> None:
        await self.async_set_hvac_mode(HVACMode.OFF)
