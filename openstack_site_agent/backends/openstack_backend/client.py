"""OpenStack client for the site agent.

This module provides the public operation surface used by the orchestration
layer. It manages Keystone tenants and users, Neutron networks with their
companion routers, ports and default security groups, and Octavia load
balancers. All backend calls go through openstacksdk.
"""

from __future__ import annotations

import logging
from typing import Optional

from openstack.connection import Connection

from openstack_site_agent.backend.clients import BaseClient
from openstack_site_agent.backend.exceptions import BackendError
from openstack_site_agent.backend.structures import (
    LoadBalancer,
    LoadBalancerStatus,
    Network,
    NetworkRouterPair,
    Port,
    Subnet,
)
from openstack_site_agent.backends.openstack_backend.identity import IdentityManager
from openstack_site_agent.backends.openstack_backend.loadbalancer import LoadBalancerManager
from openstack_site_agent.backends.openstack_backend.networking import NetworkOrchestrator
from openstack_site_agent.backends.openstack_backend.ports import PortManager
from openstack_site_agent.backends.openstack_backend.security import SecurityGroupManager
from openstack_site_agent.backends.openstack_backend.tenant_store import (
    KubernetesTenantStore,
    TenantStore,
)
from openstack_site_agent.common import utils
from openstack_site_agent.common.structures import OpenStackAgentConfiguration

logger = logging.getLogger(__name__)


class OpenStackClient(BaseClient):
    """Client for tenant-aware network provisioning on OpenStack."""

    def __init__(
        self,
        connection: Connection,
        configuration: OpenStackAgentConfiguration,
        tenant_store: Optional[TenantStore] = None,
    ) -> None:
        """Initialize OpenStack client.

        Args:
            connection: Authenticated openstacksdk connection
            configuration: Validated agent configuration
            tenant_store: Optional store of resolved tenant IDs
        """
        super().__init__()
        self.connection = connection
        self.configuration = configuration
        self.tenant_store = tenant_store

        networking = configuration.networking
        self.identity = IdentityManager(connection, networking, tenant_store)
        self.security_groups = SecurityGroupManager(connection, networking.security_group_name)
        self.networks = NetworkOrchestrator(
            connection,
            configuration.global_settings.ext_net_id,
            admin_state_up=networking.admin_state_up,
        )
        self.ports = PortManager(
            connection,
            self.security_groups,
            networking.host_id,
            admin_state_up=networking.admin_state_up,
        )
        self.load_balancers = LoadBalancerManager(
            connection, timeout=networking.load_balancer_timeout
        )

    @classmethod
    def from_configuration(cls, configuration: OpenStackAgentConfiguration) -> OpenStackClient:
        """Build the client with a new connection and the configured tenant store."""
        logger.info(
            "Initializing openstack client for %s", configuration.global_settings.auth_url
        )
        connection = utils.get_connection(configuration)
        tenant_store = None
        if configuration.kubernetes.enabled:
            tenant_store = KubernetesTenantStore(configuration.kubernetes.kubeconfig_path)
        return cls(connection, configuration, tenant_store)

    def ping(self) -> bool:
        """Check if the identity and network services are reachable."""
        try:
            self.identity.list_tenants()
            self.networks.find_network(network_id=self.configuration.global_settings.ext_net_id)
        except BackendError:
            logger.exception("OpenStack API ping failed")
            return False
        return True

    # Tenants and users

    def create_tenant(self, tenant_name: str) -> str:
        """Create tenant by name and return its ID."""
        return self.identity.create_tenant(tenant_name)

    def delete_tenant(self, tenant_name: str) -> None:
        """Delete tenant by name."""
        self.identity.delete_tenant(tenant_name)

    def get_tenant_id_from_name(self, tenant_name: str) -> str:
        """Get tenant ID by name."""
        return self.identity.get_tenant_id_from_name(tenant_name)

    def check_tenant_by_id(self, tenant_id: str) -> bool:
        """Check tenant exists by ID."""
        return self.identity.check_tenant_by_id(tenant_id)

    def create_user(self, username: str, password: str, tenant_id: str) -> None:
        """Create user in the tenant."""
        self.identity.create_user(username, password, tenant_id)

    def delete_all_users_on_tenant(self, tenant_name: str) -> None:
        """Delete all users on the tenant."""
        self.identity.delete_all_users_on_tenant(tenant_name)

    # Networks

    def create_network(self, network: Network) -> NetworkRouterPair:
        """Create network with its router and subnets."""
        return self.networks.create_network(network)

    def update_network(self, network: Network) -> None:
        """Update network."""
        self.networks.update_network(network)

    def delete_network(self, network_name: str) -> None:
        """Delete network by name."""
        self.networks.delete_network(network_name)

    def get_network_by_id(self, network_id: str) -> Network:
        """Get network by ID."""
        return self.networks.get_network_by_id(network_id)

    def get_network_by_name(self, network_name: str) -> Network:
        """Get network by name."""
        return self.networks.get_network_by_name(network_name)

    def get_network_by_tenant_id(self, tenant_id: str) -> Network:
        """Get network by tenant ID."""
        return self.networks.get_network_by_tenant_id(tenant_id)

    def get_provider_subnet(self, subnet_id: str) -> Subnet:
        """Get provider subnet by ID."""
        try:
            return self.networks.get_provider_subnet(subnet_id)
        except BackendError as e:
            logger.error("Get openstack subnet %s failed: %s", subnet_id, e)
            raise

    # Ports

    def create_port(self, network_id: str, tenant_id: str, port_name: str) -> Port:
        """Create port."""
        return self.ports.create_port(network_id, tenant_id, port_name)

    def get_port(self, port_name: str) -> Port:
        """Get port by name."""
        return self.ports.get_port(port_name)

    def list_ports(self, network_id: str, device_owner: str) -> list[Port]:
        """List ports by network ID and device owner."""
        return self.ports.list_ports(network_id, device_owner)

    def delete_port_by_name(self, port_name: str) -> None:
        """Delete port by name."""
        self.ports.delete_port_by_name(port_name)

    def delete_port_by_id(self, port_id: str) -> None:
        """Delete port by ID."""
        self.ports.delete_port_by_id(port_id)

    def update_ports_binding(self, port_id: str, device_owner: str) -> None:
        """Update port binding."""
        self.ports.update_ports_binding(port_id, device_owner)

    # Load balancers

    def load_balancer_exist(self, name: str) -> bool:
        """Tell whether the load balancer exists."""
        return self.load_balancers.load_balancer_exist(name)

    def ensure_load_balancer(self, load_balancer: LoadBalancer) -> LoadBalancerStatus:
        """Ensure the load balancer is created."""
        return self.load_balancers.ensure_load_balancer(load_balancer)

    def ensure_load_balancer_deleted(self, name: str) -> None:
        """Ensure the load balancer is deleted."""
        self.load_balancers.ensure_load_balancer_deleted(name)

    # Plugin settings

    def get_plugin_name(self) -> str:
        """Return the plugin name."""
        return self.configuration.plugin.plugin_name

    def get_integration_bridge(self) -> str:
        """Return the integration bridge name."""
        return self.configuration.plugin.integration_bridge

    def get_tenant_store(self) -> Optional[TenantStore]:
        """Return the tenant store."""
        return self.tenant_store
