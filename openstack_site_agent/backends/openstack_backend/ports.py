"""Ports bound to the local host."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from openstack.connection import Connection

from openstack_site_agent.backend.exceptions import BackendError, NotFoundError
from openstack_site_agent.backend.structures import Port
from openstack_site_agent.backends.openstack_backend import COMPUTE_DEVICE_OWNER_PREFIX
from openstack_site_agent.backends.openstack_backend.errors import openstack_error_handler
from openstack_site_agent.backends.openstack_backend.security import SecurityGroupManager
from openstack_site_agent.common.lookup import find_all, find_resource

logger = logging.getLogger(__name__)


def to_provider_port(os_port: Any) -> Port:
    """Convert a Neutron port."""
    return Port(
        id=os_port.id,
        name=os_port.name or "",
        network_id=os_port.network_id,
        tenant_id=os_port.project_id or "",
        device_id=os_port.device_id or "",
        device_owner=os_port.device_owner or "",
        host_id=os_port.binding_host_id or "",
        security_groups=list(os_port.security_group_ids or []),
        status=os_port.status or "",
        mac_address=os_port.mac_address or "",
        fixed_ips=list(os_port.fixed_ips or []),
    )


class PortManager:
    """Creates, lists, rebinds and deletes ports."""

    def __init__(
        self,
        connection: Connection,
        security_groups: SecurityGroupManager,
        host_id: str,
        admin_state_up: bool = True,
    ) -> None:
        """Initialize the manager.

        Args:
            connection: Authenticated openstacksdk connection
            security_groups: Bootstrapper of the tenant's default security group
            host_id: Host the ports are bound to
            admin_state_up: Administrative state of created ports
        """
        self.connection = connection
        self.security_groups = security_groups
        self.host_id = host_id
        self.admin_state_up = admin_state_up

    @property
    def device_owner(self) -> str:
        """Device owner of ports created for workloads on this host."""
        return f"{COMPUTE_DEVICE_OWNER_PREFIX}:{self.host_id}"

    def create_port(self, network_id: str, tenant_id: str, port_name: str) -> Port:
        """Create port in the tenant's default security group, bound to this host."""
        try:
            security_group_id = self.security_groups.ensure_security_group(tenant_id)
        except BackendError as e:
            logger.error("EnsureSecurityGroup failed: %s", e)
            raise

        try:
            os_port = self._create_port(network_id, tenant_id, port_name, security_group_id)
        except BackendError as e:
            logger.error("Create port %s failed: %s", port_name, e)
            raise
        logger.info("Port %s created on network %s", port_name, network_id)
        return to_provider_port(os_port)

    @openstack_error_handler
    def _create_port(
        self, network_id: str, tenant_id: str, port_name: str, security_group_id: str
    ) -> Any:
        return self.connection.network.create_port(
            network_id=network_id,
            name=port_name,
            is_admin_state_up=self.admin_state_up,
            project_id=tenant_id,
            device_id=str(uuid.uuid4()),
            device_owner=self.device_owner,
            binding_host_id=self.host_id,
            security_group_ids=[security_group_id],
        )

    @openstack_error_handler
    def get_port(self, port_name: str) -> Port:
        """Get port by name.

        Raises:
            NotFoundError: If there is no such port
            MultipleResultsError: If several ports have the name
        """
        os_port = find_resource(
            self.connection.network.ports(name=port_name),
            lambda item: item.name == port_name,
            kind="port",
            description=f"name={port_name}",
        )
        return to_provider_port(os_port)

    @openstack_error_handler
    def list_ports(self, network_id: str, device_owner: str) -> list[Port]:
        """List ports of the network; an empty device owner lists all of them."""
        query = {"network_id": network_id}
        if device_owner:
            query["device_owner"] = device_owner
        return [
            to_provider_port(os_port)
            for os_port in find_all(
                self.connection.network.ports(**query),
                lambda item: item.network_id == network_id
                and (not device_owner or item.device_owner == device_owner),
            )
        ]

    def delete_port_by_name(self, port_name: str) -> None:
        """Delete port by name; a missing port is already deleted."""
        try:
            port = self.get_port(port_name)
        except NotFoundError:
            logger.info("Port %s already deleted", port_name)
            return
        except BackendError as e:
            logger.error("Get openstack port %s failed: %s", port_name, e)
            raise

        try:
            self._delete_port(port.id)
        except BackendError as e:
            logger.error("Delete openstack port %s failed: %s", port_name, e)
            raise

    def delete_port_by_id(self, port_id: str) -> None:
        """Delete port by ID."""
        try:
            self._delete_port(port_id)
        except BackendError as e:
            logger.error("Delete openstack port %s failed: %s", port_id, e)
            raise

    @openstack_error_handler
    def _delete_port(self, port_id: str) -> None:
        self.connection.network.delete_port(port_id, ignore_missing=False)

    @openstack_error_handler
    def update_ports_binding(self, port_id: str, device_owner: str) -> None:
        """Bind the port to this host with the given device owner."""
        self.connection.network.update_port(
            port_id, binding_host_id=self.host_id, device_owner=device_owner
        )
