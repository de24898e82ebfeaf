"""Inbound sensor telemetry processing for Zigbee Thermostat."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from .climate_model import TelemetryReading, _coerce_temperature
from .exceptions import MalformedTelemetry

if TYPE_CHECKING:
    from .controller import ClimateController

_LOGGER = logging.getLogger(__name__)


def parse_telemetry(payload: bytes | str) -> TelemetryReading:
    """Decode a zigbee2mqtt sensor message.

    Only ``temperature`` is required. ``humidity`` is optional; battery,
    linkquality, pressure and voltage are ignored.
    """

    try:
        document: Any = json.loads(payload)
    except (UnicodeDecodeError, ValueError) as err:
        raise MalformedTelemetry(f"Payload is not JSON: {err}") from err

    if not isinstance(document, dict):
        raise MalformedTelemetry(
            f"Expected a JSON object, got {type(document).__name__}"
        )

    temperature = _coerce_temperature(document.get("temperature"))
    if temperature is None:
        raise MalformedTelemetry(
            f"Missing or invalid temperature: {document.get('temperature')!r}"
        )

    humidity = _coerce_temperature(document.get("humidity"))
    if humidity is None and document.get("humidity") is not None:
        _LOGGER.debug("Ignoring invalid humidity %r", document.get("humidity"))

    return TelemetryReading(temperature=temperature, humidity=humidity)


def handle_telemetry_message(
    controller: ClimateController, topic: str, payload: bytes | str
) -> bool:
    """Apply a sensor message to *controller*.

    Returns False when the message was dropped (foreign topic or malformed
    payload). Dropped messages never mutate state.
    """

    expected = controller.topics.sensor_topic
    if topic != expected:
        _LOGGER.debug("Ignoring message on %s (expected %s)", topic, expected)
        return False

    try:
        reading = parse_telemetry(payload)
    except MalformedTelemetry as err:
        _LOGGER.warning("Dropping telemetry on %s: %s", topic, err)
        return False

    controller.on_telemetry(reading.temperature, reading.humidity)
    return True
