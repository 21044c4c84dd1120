"""Utility functions for configuration loading and backend connections."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import openstack
import pydantic
import yaml
from openstack.connection import Connection

from openstack_site_agent import OPENSTACK_SITE_AGENT_VERSION
from openstack_site_agent.backend import logger
from openstack_site_agent.backend.exceptions import ConfigurationError
from openstack_site_agent.common.structures import OpenStackAgentConfiguration


def parse_configuration(config: dict[str, Any]) -> OpenStackAgentConfiguration:
    """Validate a raw configuration mapping.

    Args:
        config: Mapping loaded from the YAML configuration file

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If a mandatory setting is missing or invalid
    """
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration must be a mapping")
    try:
        return OpenStackAgentConfiguration.model_validate(config)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_configuration(config_file_path: str) -> OpenStackAgentConfiguration:
    """Load configuration from YAML file.

    Args:
        config_file_path: Path to the YAML configuration file

    Returns:
        Configuration object loaded from file

    Raises:
        FileNotFoundError: If the configuration file cannot be found
        yaml.YAMLError: If the configuration file is malformed
        ConfigurationError: If the configuration content is invalid
    """
    with Path(config_file_path).open(encoding="UTF-8") as stream:
        config = yaml.safe_load(stream)

    configuration = parse_configuration(config)
    configuration.config_file_path = config_file_path
    logger.info(
        "Loaded configuration from %s (external network %s)",
        config_file_path,
        configuration.global_settings.ext_net_id,
    )
    return configuration


def get_connection(configuration: OpenStackAgentConfiguration) -> Connection:
    """Create an authenticated OpenStack connection.

    Authentication, token renewal and pagination are handled by openstacksdk.
    """
    settings = configuration.global_settings
    return openstack.connect(
        auth_url=settings.auth_url,
        username=settings.username,
        password=settings.password,
        project_name=settings.tenant_name,
        user_domain_name=settings.user_domain_name,
        project_domain_name=settings.project_domain_name,
        region_name=settings.region or None,
        app_name="openstack-site-agent",
        app_version=OPENSTACK_SITE_AGENT_VERSION,
    )
