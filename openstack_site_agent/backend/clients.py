"""Generic client class."""

import abc

from openstack_site_agent.backend.structures import (
    LoadBalancer,
    LoadBalancerStatus,
    Network,
    NetworkRouterPair,
    Port,
    Subnet,
)


class BaseClient:
    """Generic client for tenant-aware network provisioning on a backend."""

    @abc.abstractmethod
    def ping(self) -> bool:
        """Check if the backend is reachable."""

    # Tenants and users

    @abc.abstractmethod
    def create_tenant(self, tenant_name: str) -> str:
        """Create the tenant if needed and return its ID."""

    @abc.abstractmethod
    def delete_tenant(self, tenant_name: str) -> None:
        """Delete every tenant with this name."""

    @abc.abstractmethod
    def get_tenant_id_from_name(self, tenant_name: str) -> str:
        """Resolve the tenant ID for a tenant name."""

    @abc.abstractmethod
    def check_tenant_by_id(self, tenant_id: str) -> bool:
        """Check whether a tenant exists."""

    @abc.abstractmethod
    def create_user(self, username: str, password: str, tenant_id: str) -> None:
        """Create the user in the tenant if needed."""

    @abc.abstractmethod
    def delete_all_users_on_tenant(self, tenant_name: str) -> None:
        """Delete all users of the tenant."""

    # Networks

    @abc.abstractmethod
    def create_network(self, network: Network) -> NetworkRouterPair:
        """Create the network, its router and subnets."""

    @abc.abstractmethod
    def update_network(self, network: Network) -> None:
        """Update the network."""

    @abc.abstractmethod
    def delete_network(self, network_name: str) -> None:
        """Delete the network and everything depending on it."""

    @abc.abstractmethod
    def get_network_by_id(self, network_id: str) -> Network:
        """Get network by ID."""

    @abc.abstractmethod
    def get_network_by_name(self, network_name: str) -> Network:
        """Get network by name."""

    @abc.abstractmethod
    def get_provider_subnet(self, subnet_id: str) -> Subnet:
        """Get subnet by ID."""

    # Ports

    @abc.abstractmethod
    def create_port(self, network_id: str, tenant_id: str, port_name: str) -> Port:
        """Create a port bound to the local host."""

    @abc.abstractmethod
    def get_port(self, port_name: str) -> Port:
        """Get port by name."""

    @abc.abstractmethod
    def list_ports(self, network_id: str, device_owner: str) -> list[Port]:
        """List ports of a network owned by the device owner."""

    @abc.abstractmethod
    def delete_port_by_name(self, port_name: str) -> None:
        """Delete port by name."""

    @abc.abstractmethod
    def delete_port_by_id(self, port_id: str) -> None:
        """Delete port by ID."""

    @abc.abstractmethod
    def update_ports_binding(self, port_id: str, device_owner: str) -> None:
        """Update the host binding of a port."""

    # Load balancers

    @abc.abstractmethod
    def load_balancer_exist(self, name: str) -> bool:
        """Tell whether a load balancer already exists."""

    @abc.abstractmethod
    def ensure_load_balancer(self, load_balancer: LoadBalancer) -> LoadBalancerStatus:
        """Create or update a load balancer."""

    @abc.abstractmethod
    def ensure_load_balancer_deleted(self, name: str) -> None:
        """Delete a load balancer if it exists."""

    # Plugin settings

    @abc.abstractmethod
    def get_plugin_name(self) -> str:
        """Return the networking plugin name."""

    @abc.abstractmethod
    def get_integration_bridge(self) -> str:
        """Return the integration bridge name."""

    @abc.abstractmethod
    def get_network_by_tenant_id(self, tenant_id: str) -> Network:
        """Get the network of a tenant."""
