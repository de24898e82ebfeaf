"""Constants for the Zigbee Thermostat integration."""

DOMAIN = "zigbee_thermostat"

CONF_BASE_TOPIC = "base_topic"
CONF_SENSOR = "sensor"
CONF_OUTLET = "outlet"
CONF_INVERT_ON_OFF = "invert_on_off"
CONF_UNIQUE_ID = "unique_id"

DEFAULT_NAME = "Zigbee Thermostat"
DEFAULT_PORT = 1883
DEFAULT_BASE_TOPIC = "zigbee2mqtt"

MIN_TARGET_TEMP = 10.0
MAX_TARGET_TEMP = 30.0
TARGET_TEMP_STEP = 0.5
DEFAULT_TARGET_TEMP = 20.0
HYSTERESIS = 0.5

# QoS 2: exactly-once delivery, acknowledged by PUBCOMP.
COMMAND_QOS = 2
TELEMETRY_QOS = 0

ATTR_ACTUATOR_COMMAND = "actuator_command"
ATTR_LAST_CONFIRMED_COMMAND = "last_confirmed_command"
ATTR_TRANSPORT_CONNECTED = "transport_connected"
ATTR_SENSOR_TOPIC = "sensor_topic"
ATTR_ACTUATOR_TOPIC = "actuator_topic"
