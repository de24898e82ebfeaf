"""Zigbee Thermostat: drives a heater outlet from a zigbee2mqtt climate sensor."""

from .const import DOMAIN  # noqa: F401
