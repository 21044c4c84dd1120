"""Configuration structures for the OpenStack site agent.

The YAML configuration file is validated into these models:
- ``global``: authentication and the deployment-wide external network
- ``plugin``: settings reported back to the networking plugin
- ``kubernetes``: access to the tenant custom resources
- ``networking``: host binding and security defaults
"""

from __future__ import annotations

import socket
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SECURITY_GROUP_NAME = "kube-securitygroup-default"
DEFAULT_SYSTEM_NAMESPACES = ["default", "kube-system", "kube-public"]
DEFAULT_SYSTEM_TENANT = "admin"


class GlobalSettings(BaseModel):
    """Authentication settings and the external network of the deployment."""

    model_config = ConfigDict(extra="forbid")

    auth_url: str = Field(..., description="Keystone endpoint")
    username: str = Field(..., description="Admin user name")
    password: str = Field(..., description="Admin password")
    tenant_name: str = Field(..., description="Project the admin user is scoped to")
    region: str = Field(default="", description="Region of the network endpoint")
    ext_net_id: str = Field(..., description="External network used as router gateway")
    user_domain_name: str = Field(default="Default")
    project_domain_name: str = Field(default="Default")

    @field_validator("ext_net_id")
    @classmethod
    def validate_ext_net_id(cls, value: str) -> str:
        """External network ID must not be blank."""
        if not value.strip():
            raise ValueError("external network ID not set")
        return value


class PluginSettings(BaseModel):
    """Networking plugin settings."""

    model_config = ConfigDict(extra="forbid")

    plugin_name: str = ""
    integration_bridge: str = ""


class KubernetesSettings(BaseModel):
    """Access to the cluster holding the tenant custom resources."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    kubeconfig_path: Optional[str] = None


class NetworkingSettings(BaseModel):
    """Defaults applied to provisioned networks and ports."""

    model_config = ConfigDict(extra="forbid")

    host_id: str = Field(default_factory=socket.gethostname)
    security_group_name: str = DEFAULT_SECURITY_GROUP_NAME
    admin_state_up: bool = True
    system_namespaces: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SYSTEM_NAMESPACES)
    )
    system_tenant: str = DEFAULT_SYSTEM_TENANT
    tenant_description: str = "stackube"
    load_balancer_timeout: int = 300


class OpenStackAgentConfiguration(BaseModel):
    """Complete agent configuration."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    global_settings: GlobalSettings = Field(..., alias="global")
    plugin: PluginSettings = Field(default_factory=PluginSettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    networking: NetworkingSettings = Field(default_factory=NetworkingSettings)
    log_level: str = "INFO"
    config_file_path: str = ""
