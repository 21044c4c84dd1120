"""Normalization of backend status codes."""

from openstack_site_agent.backend.structures import (
    NETWORK_STATUS_ACTIVE,
    NETWORK_STATUS_FAILED,
    NETWORK_STATUS_PENDING,
)

_PROVIDER_STATUSES = {
    "ACTIVE": NETWORK_STATUS_ACTIVE,
    "BUILD": NETWORK_STATUS_PENDING,
    "DOWN": NETWORK_STATUS_FAILED,
    "ERROR": NETWORK_STATUS_FAILED,
}


def to_provider_status(status: str) -> str:
    """Map a Neutron status to the provider status; unknown codes are Failed."""
    return _PROVIDER_STATUSES.get(status, NETWORK_STATUS_FAILED)
