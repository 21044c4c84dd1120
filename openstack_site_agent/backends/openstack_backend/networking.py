"""Provisioning of networks with their companion routers and subnets.

Neutron has no transaction spanning a network, its router, subnets and router
interfaces. Creation runs as a saga whose compensation is the full cascade
teardown of the network; teardown deletes ports, router interfaces, subnets,
the router and the network in dependency order.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Optional

from openstack.connection import Connection

from openstack_site_agent.backend.exceptions import BackendError, NotFoundError, ValidationError
from openstack_site_agent.backend.structures import (
    Network,
    NetworkRouterPair,
    Route,
    Subnet,
)
from openstack_site_agent.backends.openstack_backend import ROUTER_INTERFACE_DEVICE_OWNER
from openstack_site_agent.backends.openstack_backend.errors import openstack_error_handler
from openstack_site_agent.backends.openstack_backend.status import to_provider_status
from openstack_site_agent.common.lookup import find_all, find_resource
from openstack_site_agent.common.saga import Saga, SagaContext

logger = logging.getLogger(__name__)

IP_VERSION_4 = 4


class NetworkOrchestrator:
    """Creates and tears down networks together with their companion routers.

    The router of a network carries the network's name. Names are expected to
    be unique per tenant; lookups matching several resources fail instead of
    picking one.
    """

    def __init__(
        self, connection: Connection, ext_net_id: str, admin_state_up: bool = True
    ) -> None:
        """Initialize the orchestrator.

        Args:
            connection: Authenticated openstacksdk connection
            ext_net_id: External network used as gateway of every router
            admin_state_up: Administrative state of created networks
        """
        self.connection = connection
        self.ext_net_id = ext_net_id
        self.admin_state_up = admin_state_up

    # ── Lookups ───────────────────────────────────────────────────────

    @openstack_error_handler
    def find_network(
        self,
        network_id: Optional[str] = None,
        name: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ) -> Any:
        """Find exactly one Neutron network matching all given attributes.

        A network ID is fetched directly instead of enumerating every network
        visible to the admin.
        """
        if network_id is not None:
            return find_resource(
                [self.connection.network.get_network(network_id)],
                lambda item: (name is None or item.name == name)
                and (tenant_id is None or item.project_id == tenant_id),
                kind="network",
                description=f"id={network_id}",
            )

        query = {}
        if name is not None:
            query["name"] = name
        if tenant_id is not None:
            query["project_id"] = tenant_id

        def matches(item: Any) -> bool:
            return (name is None or item.name == name) and (
                tenant_id is None or item.project_id == tenant_id
            )

        description = " ".join(
            f"{key}={value}"
            for key, value in (("name", name), ("tenant", tenant_id))
            if value is not None
        )
        return find_resource(
            self.connection.network.networks(**query),
            matches,
            kind="network",
            description=description,
        )

    @openstack_error_handler
    def find_router(self, name: str) -> Optional[Any]:
        """Find the router by name; a missing router is None."""
        try:
            return find_resource(
                self.connection.network.routers(name=name),
                lambda item: item.name == name,
                kind="router",
                description=f"name={name}",
            )
        except NotFoundError:
            return None

    @openstack_error_handler
    def get_provider_subnet(self, subnet_id: str) -> Subnet:
        """Get subnet by ID."""
        os_subnet = self.connection.network.get_subnet(subnet_id)
        return Subnet(
            uid=os_subnet.id,
            cidr=os_subnet.cidr,
            gateway=os_subnet.gateway_ip or "",
            name=os_subnet.name or "",
            dns_servers=list(os_subnet.dns_nameservers or []),
            routes=[
                Route(nexthop=route["nexthop"], destination_cidr=route["destination"])
                for route in os_subnet.host_routes or []
            ],
        )

    def to_provider_network(self, os_network: Any) -> Network:
        """Convert a Neutron network, fetching each of its subnets."""
        return Network(
            name=os_network.name,
            uid=os_network.id,
            status=to_provider_status(os_network.status),
            tenant_id=os_network.project_id,
            subnets=[
                self.get_provider_subnet(subnet_id)
                for subnet_id in os_network.subnet_ids or []
            ],
        )

    def get_network_by_id(self, network_id: str) -> Network:
        """Get network by ID."""
        try:
            os_network = self.find_network(network_id=network_id)
        except BackendError as e:
            logger.error("Failed to fetch openstack network by ID %s: %s", network_id, e)
            raise
        return self.to_provider_network(os_network)

    def get_network_by_name(self, network_name: str) -> Network:
        """Get network by name."""
        try:
            os_network = self.find_network(name=network_name)
        except BackendError as e:
            logger.warning("Failed to fetch openstack network by name %s: %s", network_name, e)
            raise
        return self.to_provider_network(os_network)

    def get_network_by_tenant_id(self, tenant_id: str) -> Network:
        """Get the network of a tenant."""
        return self.to_provider_network(self.find_network(tenant_id=tenant_id))

    # ── Creation ──────────────────────────────────────────────────────

    def create_network(self, network: Network) -> NetworkRouterPair:
        """Create network, companion router and subnets attached to the router.

        ``network.uid`` and ``network.status`` are set as soon as the network
        exists, and each subnet's ``uid`` once it is created. On failure the
        whole network is torn down and the original error is raised.

        Raises:
            ValidationError: If the network has no subnets
            BackendError: If any backend step fails
        """
        if not network.subnets:
            raise ValidationError(f"Network {network.name} has no subnets")

        pair = NetworkRouterPair(name=network.name)
        saga = self.build_create_saga(network, pair)
        saga.run()
        logger.info(
            "Network %s created with router %s and %d subnet(s)",
            network.name,
            pair.router_id,
            len(network.subnets),
        )
        return pair

    def build_create_saga(self, network: Network, pair: NetworkRouterPair) -> Saga:
        """Build the creation saga of a network."""
        saga = Saga(name=f"create-network-{network.name}")
        saga.add_step(
            "network",
            functools.partial(self._create_network_step, network, pair),
            compensation=functools.partial(self._rollback_step, pair),
        )
        saga.add_step("router", functools.partial(self._create_router_step, network, pair))
        for index, subnet in enumerate(network.subnets):
            saga.add_step(
                f"subnet:{index}",
                functools.partial(self._create_subnet_step, network, subnet, pair),
            )
            saga.add_step(
                f"router-interface:{index}",
                functools.partial(self._add_interface_step, subnet, pair),
            )
        return saga

    @openstack_error_handler
    def _create_network_step(
        self, network: Network, pair: NetworkRouterPair, context: SagaContext
    ) -> Any:
        del context
        os_network = self.connection.network.create_network(
            name=network.name,
            project_id=network.tenant_id,
            is_admin_state_up=self.admin_state_up,
        )
        pair.network_id = os_network.id
        network.uid = os_network.id
        network.status = to_provider_status(os_network.status)
        return os_network

    @openstack_error_handler
    def _create_router_step(
        self, network: Network, pair: NetworkRouterPair, context: SagaContext
    ) -> Any:
        del context
        router = self.connection.network.create_router(
            name=network.name,
            project_id=network.tenant_id,
            external_gateway_info={"network_id": self.ext_net_id},
        )
        pair.router_id = router.id
        return router

    @openstack_error_handler
    def _create_subnet_step(
        self, network: Network, subnet: Subnet, pair: NetworkRouterPair, context: SagaContext
    ) -> Any:
        del context
        attrs: dict[str, Any] = {
            "network_id": pair.network_id,
            "cidr": subnet.cidr,
            "name": subnet.name,
            "ip_version": IP_VERSION_4,
            "project_id": network.tenant_id,
            "dns_nameservers": list(subnet.dns_servers),
        }
        if subnet.gateway:
            attrs["gateway_ip"] = subnet.gateway
        if subnet.routes:
            attrs["host_routes"] = [
                {"destination": route.destination_cidr, "nexthop": route.nexthop}
                for route in subnet.routes
            ]
        os_subnet = self.connection.network.create_subnet(**attrs)
        subnet.uid = os_subnet.id
        return os_subnet

    @openstack_error_handler
    def _add_interface_step(
        self, subnet: Subnet, pair: NetworkRouterPair, context: SagaContext
    ) -> Any:
        del context
        return self.connection.network.add_interface_to_router(
            pair.router_id, subnet_id=subnet.uid
        )

    def _rollback_step(self, pair: NetworkRouterPair, context: SagaContext) -> None:
        del context
        logger.warning("Rolling back network %s", pair.name)
        self.teardown(pair)

    def update_network(self, network: Network) -> None:
        """Subnet reconciliation of existing networks is not implemented."""
        logger.debug("Update of network %s is not implemented, skipping", network.name)

    # ── Teardown ──────────────────────────────────────────────────────

    def delete_network(self, network_name: str) -> None:
        """Delete network by name together with everything depending on it.

        A missing network is already deleted. The router is rediscovered by
        name since no other record of the pairing survives.
        """
        try:
            os_network = self.find_network(name=network_name)
        except NotFoundError:
            logger.info("Network %s already deleted", network_name)
            return
        except BackendError as e:
            logger.error("Get openstack network %s failed: %s", network_name, e)
            raise

        self.teardown(NetworkRouterPair(name=network_name, network_id=os_network.id), os_network)

    def teardown(self, pair: NetworkRouterPair, os_network: Optional[Any] = None) -> None:
        """Delete the network of the pair and its dependents in order.

        Port deletion is best-effort; router interface detachment, subnet,
        router and network deletion stop the teardown on failure. Every lookup
        tolerates resources that are already gone, so a failed teardown can be
        run again.
        """
        if os_network is None:
            try:
                os_network = self.find_network(network_id=pair.network_id)
            except NotFoundError:
                logger.info("Network %s already deleted", pair.name)
                return

        router_id = pair.router_id
        if router_id is None:
            router = self.find_router(pair.name)
            router_id = router.id if router is not None else None

        saga = self.build_teardown_saga(
            os_network, self._list_removable_ports(os_network.id), router_id
        )
        saga.run()
        logger.info("Network %s deleted", pair.name)

    def _list_removable_ports(self, network_id: str) -> list[Any]:
        """Ports of the network except router interfaces; listing is best-effort."""
        try:
            return self._list_network_ports(network_id)
        except BackendError as e:
            logger.error("Get openstack ports of network %s error: %s", network_id, e)
            return []

    @openstack_error_handler
    def _list_network_ports(self, network_id: str) -> list[Any]:
        return find_all(
            self.connection.network.ports(network_id=network_id),
            lambda item: item.network_id == network_id
            and item.device_owner != ROUTER_INTERFACE_DEVICE_OWNER,
        )

    def build_teardown_saga(
        self, os_network: Any, ports: list[Any], router_id: Optional[str]
    ) -> Saga:
        """Build the teardown saga of a network."""
        saga = Saga(name=f"delete-network-{os_network.name}")
        for port in ports:
            saga.add_step(
                f"port:{port.id}",
                functools.partial(self._delete_port_step, port.id),
                best_effort=True,
            )
        for subnet_id in os_network.subnet_ids or []:
            if router_id is not None:
                saga.add_step(
                    f"router-interface:{subnet_id}",
                    functools.partial(self._remove_interface_step, router_id, subnet_id),
                )
            saga.add_step(
                f"subnet:{subnet_id}", functools.partial(self._delete_subnet_step, subnet_id)
            )
        if router_id is not None:
            saga.add_step("router", functools.partial(self._delete_router_step, router_id))
        saga.add_step("network", functools.partial(self._delete_network_step, os_network.id))
        return saga

    @openstack_error_handler
    def _delete_port_step(self, port_id: str, context: SagaContext) -> None:
        del context
        self.connection.network.delete_port(port_id)

    def _remove_interface_step(self, router_id: str, subnet_id: str, context: SagaContext) -> None:
        del context
        try:
            self._remove_interface(router_id, subnet_id)
        except NotFoundError:
            logger.info("Subnet %s is not attached to router %s", subnet_id, router_id)

    @openstack_error_handler
    def _remove_interface(self, router_id: str, subnet_id: str) -> None:
        self.connection.network.remove_interface_from_router(router_id, subnet_id=subnet_id)

    @openstack_error_handler
    def _delete_subnet_step(self, subnet_id: str, context: SagaContext) -> None:
        del context
        self.connection.network.delete_subnet(subnet_id)

    @openstack_error_handler
    def _delete_router_step(self, router_id: str, context: SagaContext) -> None:
        del context
        self.connection.network.delete_router(router_id)

    @openstack_error_handler
    def _delete_network_step(self, network_id: str, context: SagaContext) -> None:
        del context
        self.connection.network.delete_network(network_id)
