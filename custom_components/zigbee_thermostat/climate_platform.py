"""Zigbee Thermostat climate platform setup functions."""

from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.components.climate import PLATFORM_SCHEMA
from homeassistant.const import (
    CONF_HOST,
    CONF_NAME,
    CONF_PASSWORD,
    CONF_PORT,
    CONF_USERNAME,
)
from homeassistant.core import HomeAssistant
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import ConfigType, DiscoveryInfoType

from .climate_entity import ZigbeeThermostatEntity
from .climate_model import TopicSet
from .const import (
    CONF_BASE_TOPIC,
    CONF_INVERT_ON_OFF,
    CONF_OUTLET,
    CONF_SENSOR,
    CONF_UNIQUE_ID,
    DEFAULT_BASE_TOPIC,
    DEFAULT_NAME,
    DEFAULT_PORT,
)
from .controller import ClimateController
from .transport import TransportSession

_LOGGER = logging.getLogger(__name__)

PLATFORM_SCHEMA = PLATFORM_SCHEMA.extend(
    {
        vol.Required(CONF_HOST): cv.string,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): cv.port,
        vol.Inclusive(CONF_USERNAME, "credentials"): cv.string,
        vol.Inclusive(CONF_PASSWORD, "credentials"): cv.string,
        vol.Optional(CONF_BASE_TOPIC, default=DEFAULT_BASE_TOPIC): cv.string,
        vol.Required(CONF_SENSOR): cv.string,
        vol.Required(CONF_OUTLET): cv.string,
        vol.Optional(CONF_INVERT_ON_OFF, default=False): cv.boolean,
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): cv.string,
        vol.Optional(CONF_UNIQUE_ID): cv.string,
    }
)


async def async_setup_platform(
    hass: HomeAssistant,
    config: ConfigType,
    async_add_entities: AddEntitiesCallback,
    discovery_info: DiscoveryInfoType | None = None,
) -> None:
    """Set up a Zigbee Thermostat entity from YAML."""

    topics = TopicSet(
        sensor=config[CONF_SENSOR],
        actuator=config[CONF_OUTLET],
        base_topic=config.get(CONF_BASE_TOPIC, DEFAULT_BASE_TOPIC),
    )
    unique_id = config.get(CONF_UNIQUE_ID)
    transport = TransportSession(
        hass.loop,
        host=config[CONF_HOST],
        port=config.get(CONF_PORT, DEFAULT_PORT),
        username=config.get(CONF_USERNAME),
        password=config.get(CONF_PASSWORD),
        client_id=f"zigbee_thermostat_{unique_id}" if unique_id else None,
    )
    controller = ClimateController(
        transport,
        topics,
        invert_on_off=config.get(CONF_INVERT_ON_OFF, False),
    )
    _LOGGER.debug(
        "Thermostat %s: sensor topic %s, outlet topic %s",
        config[CONF_NAME],
        topics.sensor_topic,
        topics.actuator_topic,
    )

    async_add_entities(
        [
            ZigbeeThermostatEntity(
                hass=hass,
                name=config[CONF_NAME],
                unique_id=unique_id,
                controller=controller,
                transport=transport,
            )
        ]
    )
