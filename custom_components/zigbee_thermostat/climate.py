"""Zigbee Thermostat climate platform compatibility facade.

Home Assistant loads this module as the climate platform entrypoint.
Implementation is split across:
- climate_platform.py (schema + setup entrypoint)
- climate_entity.py (entity behavior)
- controller.py (hysteresis control + command publishing)
- transport.py (MQTT session)
"""

from .climate_entity import *  # noqa: F401,F403
from .climate_entity import ZigbeeThermostatEntity
from .climate_external import handle_telemetry_message, parse_telemetry
from .climate_model import (
    ActuatorCommand,
    ControlState,
    HeatingState,
    OperatingMode,
    TelemetryReading,
    TopicSet,
    _coerce_mode,
    _coerce_temperature,
    clamp_target_temperature,
)
from .climate_platform import PLATFORM_SCHEMA, async_setup_platform
from .controller import ClimateController
from .transport import TransportSession
