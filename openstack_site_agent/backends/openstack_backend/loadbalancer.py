"""Service load balancers on Octavia."""

from __future__ import annotations

import logging
from typing import Any, Optional

from openstack.connection import Connection

from openstack_site_agent.backend.exceptions import NotFoundError
from openstack_site_agent.backend.structures import (
    SERVICE_AFFINITY_CLIENT_IP,
    LoadBalancer,
    LoadBalancerStatus,
    ServicePort,
)
from openstack_site_agent.backends.openstack_backend.errors import openstack_error_handler
from openstack_site_agent.common.lookup import find_all, find_resource

logger = logging.getLogger(__name__)

LB_ALGORITHM = "ROUND_ROBIN"
SESSION_PERSISTENCE_SOURCE_IP = "SOURCE_IP"
STATUS_ACTIVE = "ACTIVE"
STATUS_ERROR = "ERROR"


class LoadBalancerManager:
    """Reconciles an Octavia load balancer with a service description.

    Every service port gets a listener and a pool named
    ``<lb>-<protocol>-<port>``; pool members follow the service endpoints.
    """

    def __init__(self, connection: Connection, timeout: int = 300) -> None:
        """Initialize the manager.

        Args:
            connection: Authenticated openstacksdk connection
            timeout: Seconds to wait for the load balancer to become ACTIVE
                after each change
        """
        self.connection = connection
        self.timeout = timeout

    @staticmethod
    def _child_name(name: str, service_port: ServicePort) -> str:
        return f"{name}-{service_port.protocol.lower()}-{service_port.port}"

    def _find_load_balancer(self, name: str) -> Any:
        return find_resource(
            self.connection.load_balancer.load_balancers(name=name),
            lambda item: item.name == name,
            kind="load balancer",
            description=f"name={name}",
        )

    def _wait(self, load_balancer_id: str) -> Any:
        return self.connection.load_balancer.wait_for_load_balancer(
            load_balancer_id,
            status=STATUS_ACTIVE,
            failures=[STATUS_ERROR],
            wait=self.timeout,
        )

    @openstack_error_handler
    def load_balancer_exist(self, name: str) -> bool:
        """Tell whether a load balancer with the name exists."""
        try:
            self._find_load_balancer(name)
        except NotFoundError:
            return False
        return True

    @openstack_error_handler
    def ensure_load_balancer(self, load_balancer: LoadBalancer) -> LoadBalancerStatus:
        """Create or update the load balancer, its listeners, pools and members."""
        try:
            os_lb = self._find_load_balancer(load_balancer.name)
        except NotFoundError:
            os_lb = self.connection.load_balancer.create_load_balancer(
                name=load_balancer.name,
                vip_subnet_id=load_balancer.subnet_id,
                project_id=load_balancer.tenant_id,
                description=load_balancer.service_name,
            )
            logger.info("Load balancer %s created", load_balancer.name)
        os_lb = self._wait(os_lb.id)

        desired = {
            self._child_name(load_balancer.name, service_port): service_port
            for service_port in load_balancer.ports
        }
        self._delete_stale_listeners(os_lb, set(desired))
        for child_name, service_port in desired.items():
            listener = self._ensure_listener(os_lb, child_name, service_port)
            pool = self._ensure_pool(os_lb, listener, child_name, service_port, load_balancer)
            self._sync_members(os_lb, pool, service_port, load_balancer)

        external_ip = ""
        if load_balancer.external_ip:
            self._associate_floating_ip(load_balancer.external_ip, os_lb.vip_port_id)
            external_ip = load_balancer.external_ip

        return LoadBalancerStatus(internal_ip=os_lb.vip_address, external_ip=external_ip)

    def _delete_stale_listeners(self, os_lb: Any, desired_names: set[str]) -> None:
        stale = find_all(
            self.connection.load_balancer.listeners(load_balancer_id=os_lb.id),
            lambda item: item.name not in desired_names
            and any(lb["id"] == os_lb.id for lb in item.load_balancers or []),
        )
        for listener in stale:
            if listener.default_pool_id:
                self.connection.load_balancer.delete_pool(listener.default_pool_id)
                self._wait(os_lb.id)
            self.connection.load_balancer.delete_listener(listener.id)
            self._wait(os_lb.id)
            logger.info("Stale listener %s deleted", listener.name)

    def _ensure_listener(self, os_lb: Any, name: str, service_port: ServicePort) -> Any:
        try:
            return find_resource(
                self.connection.load_balancer.listeners(name=name),
                lambda item: item.name == name,
                kind="listener",
                description=f"name={name}",
            )
        except NotFoundError:
            listener = self.connection.load_balancer.create_listener(
                name=name,
                load_balancer_id=os_lb.id,
                protocol=service_port.protocol.upper(),
                protocol_port=service_port.port,
            )
            self._wait(os_lb.id)
            logger.info("Listener %s created", name)
            return listener

    def _ensure_pool(
        self,
        os_lb: Any,
        listener: Any,
        name: str,
        service_port: ServicePort,
        load_balancer: LoadBalancer,
    ) -> Any:
        try:
            return find_resource(
                self.connection.load_balancer.pools(name=name),
                lambda item: item.name == name,
                kind="pool",
                description=f"name={name}",
            )
        except NotFoundError:
            persistence: Optional[dict[str, str]] = None
            if load_balancer.session_affinity == SERVICE_AFFINITY_CLIENT_IP:
                persistence = {"type": SESSION_PERSISTENCE_SOURCE_IP}
            pool = self.connection.load_balancer.create_pool(
                name=name,
                listener_id=listener.id,
                protocol=service_port.protocol.upper(),
                lb_algorithm=LB_ALGORITHM,
                session_persistence=persistence,
            )
            self._wait(os_lb.id)
            logger.info("Pool %s created", name)
            return pool

    def _sync_members(
        self, os_lb: Any, pool: Any, service_port: ServicePort, load_balancer: LoadBalancer
    ) -> None:
        desired = {
            (endpoint.address, service_port.target_port or endpoint.port)
            for endpoint in load_balancer.endpoints
        }
        existing = {
            (member.address, member.protocol_port): member
            for member in self.connection.load_balancer.members(pool.id)
        }
        for key, member in existing.items():
            if key not in desired:
                self.connection.load_balancer.delete_member(member.id, pool.id)
                self._wait(os_lb.id)
        for address, port in sorted(desired - set(existing)):
            self.connection.load_balancer.create_member(
                pool.id,
                address=address,
                protocol_port=port,
                subnet_id=load_balancer.subnet_id,
            )
            self._wait(os_lb.id)

    def _associate_floating_ip(self, address: str, vip_port_id: str) -> None:
        floating_ip = find_resource(
            self.connection.network.ips(floating_ip_address=address),
            lambda item: item.floating_ip_address == address,
            kind="floating IP",
            description=f"address={address}",
        )
        if floating_ip.port_id != vip_port_id:
            self.connection.network.update_ip(floating_ip, port_id=vip_port_id)
            logger.info("Floating IP %s associated with port %s", address, vip_port_id)

    @openstack_error_handler
    def ensure_load_balancer_deleted(self, name: str) -> None:
        """Delete the load balancer and its children; a missing one is deleted."""
        try:
            os_lb = self._find_load_balancer(name)
        except NotFoundError:
            logger.info("Load balancer %s already deleted", name)
            return
        self.connection.load_balancer.delete_load_balancer(os_lb.id, cascade=True)
        logger.info("Load balancer %s deleted", name)
