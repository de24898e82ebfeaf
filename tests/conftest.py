"""Shared fixtures for zigbee_thermostat tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import paho.mqtt.client as mqtt
import pytest

from homeassistant.core import HomeAssistant, State

from custom_components.zigbee_thermostat.climate import (
    ClimateController,
    TopicSet,
    TransportSession,
    ZigbeeThermostatEntity,
)
from custom_components.zigbee_thermostat.exceptions import PublishFailure

SENSOR_DEVICE = "living_room_sensor"
OUTLET_DEVICE = "heater_plug"
SENSOR_TOPIC = f"zigbee2mqtt/{SENSOR_DEVICE}"
ACTUATOR_TOPIC = f"zigbee2mqtt/{OUTLET_DEVICE}/set"


# ── Fake transport ─────────────────────────────────────────────────────


class FakeTransport:
    """Records publishes; the test decides when and how they complete."""

    def __init__(self) -> None:
        self.publishes: list[tuple[str, dict[str, Any], int, Any]] = []
        self.subscriptions: list[str] = []
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.url = "mqtt://broker:1883"
        self.on_message = None
        self.on_connection_change = None
        self.on_error = None

    def connect(self) -> None:
        self.connect_calls += 1

    def disconnect(self) -> None:
        self.disconnect_calls += 1

    def subscribe(self, topic: str) -> None:
        self.subscriptions.append(topic)

    def publish(self, topic, payload, qos, on_complete=None) -> None:
        self.publishes.append((topic, payload, qos, on_complete))

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [payload for _topic, payload, _qos, _cb in self.publishes]

    def ack(self, index: int = -1) -> None:
        """Acknowledge a recorded publish (the latest by default)."""
        self.publishes[index][3](None)

    def fail(self, index: int = -1) -> None:
        self.publishes[index][3](PublishFailure("not acknowledged"))


@pytest.fixture
def topics() -> TopicSet:
    return TopicSet(sensor=SENSOR_DEVICE, actuator=OUTLET_DEVICE)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_controller(transport: FakeTransport, topics: TopicSet):
    """Factory fixture: build a ClimateController on the fake transport."""

    def _make(**overrides: Any) -> ClimateController:
        defaults: dict[str, Any] = {
            "transport": transport,
            "topics": topics,
            "invert_on_off": False,
        }
        defaults.update(overrides)
        return ClimateController(**defaults)

    return _make


@pytest.fixture
def controller(make_controller) -> ClimateController:
    return make_controller()


# ── Paho-backed transport ──────────────────────────────────────────────


@pytest.fixture
def mock_mqtt_client():
    """Patch the paho client class; yields the instance the session uses."""
    with patch(
        "custom_components.zigbee_thermostat.transport.mqtt.Client"
    ) as client_cls:
        client = client_cls.return_value
        client.publish.return_value = MagicMock(rc=mqtt.MQTT_ERR_SUCCESS, mid=1)
        client.subscribe.return_value = (mqtt.MQTT_ERR_SUCCESS, 1)
        yield client


@pytest.fixture
def session(mock_mqtt_client) -> TransportSession:
    """A TransportSession whose loop is a mock; dispatch is asserted on."""
    return TransportSession(
        MagicMock(),
        host="broker",
        port=1883,
        username="user",
        password="secret",
    )


def reason(failure: bool = False) -> MagicMock:
    """Stand-in for a paho ReasonCode."""
    code = MagicMock()
    code.is_failure = failure
    code.__str__.return_value = "Not authorized" if failure else "Success"
    return code


# ── Entity ─────────────────────────────────────────────────────────────


@pytest.fixture
def make_entity(hass: HomeAssistant, make_controller, transport: FakeTransport):
    """Factory fixture: build a ZigbeeThermostatEntity for unit-level tests.

    The entity is NOT added to hass; use it for direct method testing.
    """

    def _make(**overrides: Any) -> ZigbeeThermostatEntity:
        defaults: dict[str, Any] = {
            "hass": hass,
            "name": "Living Room",
            "unique_id": "living_room_uid",
            "controller": make_controller(),
            "transport": transport,
        }
        defaults.update(overrides)
        return ZigbeeThermostatEntity(**defaults)

    return _make


def make_last_state(hvac: str = "heat", temperature: float | None = 21.5) -> State:
    """Build a restored climate state."""
    attrs: dict[str, Any] = {}
    if temperature is not None:
        attrs["temperature"] = temperature
    return State("climate.living_room", hvac, attrs)
