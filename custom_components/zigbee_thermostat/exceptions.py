"""Errors raised or reported by the Zigbee Thermostat integration."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class ZigbeeThermostatError(HomeAssistantError):
    """Base error for the integration."""


class TransportConnectError(ZigbeeThermostatError):
    """The broker connection could not be established."""


class MalformedTelemetry(ZigbeeThermostatError):
    """An inbound sensor payload is not a usable telemetry record."""


class PublishFailure(ZigbeeThermostatError):
    """An actuator command was not accepted for delivery."""
