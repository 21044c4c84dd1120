"""Common structures shared between the backend and its callers."""

from dataclasses import dataclass, field
from typing import Optional

NETWORK_STATUS_ACTIVE = "Active"
NETWORK_STATUS_PENDING = "Pending"
NETWORK_STATUS_FAILED = "Failed"

SERVICE_AFFINITY_NONE = "None"
SERVICE_AFFINITY_CLIENT_IP = "ClientIP"


@dataclass
class Tenant:
    """Identity-scoped isolation boundary (an OpenStack project)."""

    id: str = ""
    name: str = ""


@dataclass
class TenantRecord:
    """Tenant as stored in the custom-resource store.

    An empty ``tenant_id`` means the tenant has not been resolved yet.
    """

    name: str = ""
    tenant_id: str = ""
    username: str = ""
    password: str = ""


@dataclass
class User:
    """Backend principal bound to one tenant."""

    id: str = ""
    name: str = ""
    tenant_id: str = ""


@dataclass
class Route:
    """Host route of a subnet."""

    nexthop: str = ""
    destination_cidr: str = ""


@dataclass
class Subnet:
    """Subnet of a provider network."""

    uid: str = ""
    cidr: str = ""
    gateway: str = ""
    name: str = ""
    dns_servers: list[str] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)


@dataclass
class Network:
    """Provider network with its subnets."""

    name: str = ""
    tenant_id: str = ""
    subnets: list[Subnet] = field(default_factory=list)
    uid: str = ""
    status: str = ""


@dataclass
class NetworkRouterPair:
    """A network and its companion router, named identically."""

    name: str = ""
    network_id: str = ""
    router_id: Optional[str] = None


@dataclass
class Port:
    """Network port bound to a host."""

    id: str = ""
    name: str = ""
    network_id: str = ""
    tenant_id: str = ""
    device_id: str = ""
    device_owner: str = ""
    host_id: str = ""
    security_groups: list[str] = field(default_factory=list)
    status: str = ""
    mac_address: str = ""
    fixed_ips: list[dict] = field(default_factory=list)


@dataclass
class SecurityGroup:
    """Security group owned by a tenant."""

    id: str = ""
    name: str = ""
    tenant_id: str = ""


@dataclass
class ServicePort:
    """Port exposed by a load balancer."""

    name: str = ""
    protocol: str = "TCP"
    port: int = 0
    target_port: int = 0


@dataclass
class Endpoint:
    """Backend address served by a load balancer."""

    address: str = ""
    port: int = 0


@dataclass
class LoadBalancer:
    """Load balancer requested for a service."""

    name: str = ""
    service_name: str = ""
    tenant_id: str = ""
    subnet_id: str = ""
    external_ip: str = ""
    session_affinity: str = SERVICE_AFFINITY_NONE
    ports: list[ServicePort] = field(default_factory=list)
    endpoints: list[Endpoint] = field(default_factory=list)


@dataclass
class LoadBalancerStatus:
    """Addresses a load balancer is reachable on."""

    internal_ip: str = ""
    external_ip: str = ""
