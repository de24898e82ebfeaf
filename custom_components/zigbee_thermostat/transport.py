"""MQTT transport session for the zigbee thermostat.

The session owns one paho-mqtt client. Paho invokes its callbacks on its own
network thread; every callback is handed to the Home Assistant event loop with
``call_soon_threadsafe`` so that handlers never run concurrently with the
controller.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from .const import DEFAULT_PORT, TELEMETRY_QOS
from .exceptions import PublishFailure, TransportConnectError, ZigbeeThermostatError

_LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], None]
ErrorHandler = Callable[[ZigbeeThermostatError], None]
PublishCallback = Callable[[PublishFailure | None], None]


def _redacted_url(host: str, port: int, username: str | None) -> str:
    userinfo = f"{username}:***@" if username else ""
    return f"mqtt://{userinfo}{host}:{port}"


class TransportSession:
    """One MQTT connection: subscribe, receive, publish with acknowledgement."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        host: str,
        port: int = DEFAULT_PORT,
        username: str | None = None,
        password: str | None = None,
        client_id: str | None = None,
        keepalive: int = 60,
    ) -> None:
        self._loop = loop
        self._host = host
        self._port = port
        self._username = username
        self._keepalive = keepalive
        self._topics: list[str] = []
        self._pending_publishes: dict[int, PublishCallback | None] = {}
        self._connected = False

        self.on_connected: Callable[[], None] | None = None
        self.on_message: MessageHandler | None = None
        self.on_error: ErrorHandler | None = None
        self.on_connection_change: Callable[[bool], None] | None = None

        self._client = mqtt.Client(
            callback_api_version=CallbackAPIVersion.VERSION2,
            client_id=client_id or "",
        )
        if username:
            self._client.username_pw_set(username, password)
        self._client.on_connect = self._on_connect
        self._client.on_connect_fail = self._on_connect_fail
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message = self._on_message
        self._client.on_publish = self._on_publish
        self._client.on_subscribe = self._on_subscribe

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def url(self) -> str:
        """Broker URL with the password redacted, for logs and attributes."""
        return _redacted_url(self._host, self._port, self._username)

    def connect(self) -> None:
        """Start connecting in the background.

        Failures are reported through ``on_error``; paho keeps retrying.
        """
        _LOGGER.info("Connecting to %s", self.url)
        self._client.connect_async(self._host, self._port, self._keepalive)
        self._client.loop_start()

    def disconnect(self) -> None:
        """Close the connection and stop the network thread (blocking)."""
        self._client.disconnect()
        self._client.loop_stop()

    def subscribe(self, topic: str) -> None:
        """Subscribe to *topic* now and on every future (re)connect."""
        if topic not in self._topics:
            self._topics.append(topic)
        if self._connected:
            self._send_subscribe(topic)

    def publish(
        self,
        topic: str,
        payload: dict[str, Any],
        qos: int,
        on_complete: PublishCallback | None = None,
    ) -> None:
        """Publish a JSON payload; *on_complete* receives None or the failure."""
        info = self._client.publish(topic, json.dumps(payload), qos=qos)
        if info.rc == mqtt.MQTT_ERR_NO_CONN and qos > 0:
            # Paho keeps QoS > 0 messages queued and sends them on reconnect;
            # the broker acknowledgement settles the publish later.
            _LOGGER.debug(
                "Offline, message %s to %s queued until reconnect", info.mid, topic
            )
        elif info.rc != mqtt.MQTT_ERR_SUCCESS:
            err = PublishFailure(
                f"Publish to {topic} refused: {mqtt.error_string(info.rc)}"
            )
            self._report_error(err)
            if on_complete is not None:
                on_complete(err)
            return
        # The acknowledgement is dispatched through the loop, so it cannot
        # run before the mid is registered here.
        self._pending_publishes[info.mid] = on_complete

    def _send_subscribe(self, topic: str) -> None:
        _LOGGER.info("Subscribe to: %s", topic)
        result, _mid = self._client.subscribe(topic, qos=TELEMETRY_QOS)
        if result != mqtt.MQTT_ERR_SUCCESS:
            self._report_error(
                TransportConnectError(
                    f"Subscribe to {topic} failed: {mqtt.error_string(result)}"
                )
            )

    def _report_error(self, err: ZigbeeThermostatError) -> None:
        if isinstance(err, TransportConnectError):
            _LOGGER.error("MQTT error (%s): %s", self.url, err)
        else:
            _LOGGER.error("MQTT error: %s", err)
        if self.on_error is not None:
            self.on_error(err)

    def _set_connected(self, connected: bool) -> None:
        if connected == self._connected:
            return
        self._connected = connected
        if self.on_connection_change is not None:
            self.on_connection_change(connected)

    # Paho network thread callbacks.

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        self._loop.call_soon_threadsafe(self._handle_connect, reason_code)

    def _on_connect_fail(self, client, userdata) -> None:
        self._loop.call_soon_threadsafe(self._handle_connect_fail)

    def _on_disconnect(
        self, client, userdata, disconnect_flags, reason_code, properties
    ) -> None:
        self._loop.call_soon_threadsafe(self._handle_disconnect, reason_code)

    def _on_message(self, client, userdata, message) -> None:
        self._loop.call_soon_threadsafe(
            self._handle_message, message.topic, message.payload
        )

    def _on_publish(self, client, userdata, mid, reason_code, properties) -> None:
        self._loop.call_soon_threadsafe(self._handle_publish, mid, reason_code)

    def _on_subscribe(
        self, client, userdata, mid, reason_code_list, properties
    ) -> None:
        self._loop.call_soon_threadsafe(self._handle_subscribe, reason_code_list)

    # Event loop handlers.

    def _handle_connect(self, reason_code) -> None:
        if reason_code.is_failure:
            self._report_error(
                TransportConnectError(f"Connection refused: {reason_code}")
            )
            return
        _LOGGER.debug("Connected to %s", self.url)
        self._set_connected(True)
        # Subscriptions do not survive a fresh session.
        for topic in self._topics:
            self._send_subscribe(topic)
        if self.on_connected is not None:
            self.on_connected()

    def _handle_connect_fail(self) -> None:
        self._report_error(TransportConnectError(f"Unable to reach {self.url}"))

    def _handle_disconnect(self, reason_code) -> None:
        if reason_code is not None and reason_code.is_failure:
            _LOGGER.warning("Disconnected from %s: %s", self.url, reason_code)
        else:
            _LOGGER.debug("Disconnected from %s", self.url)
        self._set_connected(False)

    def _handle_message(self, topic: str, payload: bytes) -> None:
        if self.on_message is None:
            _LOGGER.debug("No handler for message on %s", topic)
            return
        self.on_message(topic, payload)

    def _handle_publish(self, mid: int, reason_code) -> None:
        if mid not in self._pending_publishes:
            _LOGGER.debug("Acknowledgement for unknown message id %s", mid)
            return
        on_complete = self._pending_publishes.pop(mid)
        err: PublishFailure | None = None
        if reason_code is not None and reason_code.is_failure:
            err = PublishFailure(f"Broker rejected message {mid}: {reason_code}")
            self._report_error(err)
        if on_complete is not None:
            on_complete(err)

    def _handle_subscribe(self, reason_code_list) -> None:
        for reason_code in reason_code_list:
            if reason_code.is_failure:
                self._report_error(
                    TransportConnectError(f"Subscription rejected: {reason_code}")
                )
