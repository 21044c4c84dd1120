"""Default security group of a tenant."""

import logging

from openstack.connection import Connection

from openstack_site_agent.backend.exceptions import AlreadyExistsError, NotFoundError
from openstack_site_agent.backend.structures import SecurityGroup
from openstack_site_agent.backends.openstack_backend.errors import openstack_error_handler
from openstack_site_agent.common.lookup import find_all, find_resource

logger = logging.getLogger(__name__)

DIRECTION_INGRESS = "ingress"
DIRECTION_EGRESS = "egress"
ETHER_TYPE_IPV4 = "IPv4"


class SecurityGroupManager:
    """Ensures the well-known security group of a tenant and its default rules.

    Lookup and creation are not guarded against concurrent callers: two
    callers for a new tenant may both create the group.
    """

    def __init__(self, connection: Connection, group_name: str) -> None:
        """Initialize the manager with the well-known group name."""
        self.connection = connection
        self.group_name = group_name

    @openstack_error_handler
    def get_security_group(self, tenant_id: str) -> SecurityGroup:
        """Get the well-known group of the tenant; the first match wins."""
        group = find_resource(
            self.connection.network.security_groups(
                name=self.group_name, project_id=tenant_id
            ),
            lambda item: item.name == self.group_name and item.project_id == tenant_id,
            kind="security group",
            description=f"name={self.group_name} tenant={tenant_id}",
            strict=False,
        )
        return SecurityGroup(id=group.id, name=group.name, tenant_id=tenant_id)

    @openstack_error_handler
    def ensure_security_group(self, tenant_id: str) -> str:
        """Ensure the tenant's default security group exists and return its ID.

        A group without ingress rules gets one allow-all egress and one
        allow-all ingress IPv4 rule.
        """
        try:
            group_id = self.get_security_group(tenant_id).id
        except NotFoundError:
            group = self.connection.network.create_security_group(
                name=self.group_name, project_id=tenant_id
            )
            group_id = group.id
            logger.info("Security group %s created for tenant %s", group_id, tenant_id)

        ingress_rules = find_all(
            self.connection.network.security_group_rules(
                security_group_id=group_id,
                direction=DIRECTION_INGRESS,
                project_id=tenant_id,
            ),
            lambda item: item.security_group_id == group_id
            and item.direction == DIRECTION_INGRESS,
        )
        if not ingress_rules:
            for direction in (DIRECTION_EGRESS, DIRECTION_INGRESS):
                try:
                    self._create_rule(group_id, tenant_id, direction)
                except AlreadyExistsError:
                    # Neutron adds an allow-all egress rule to new groups.
                    logger.debug("%s rule already exists on %s", direction, group_id)
            logger.info("Default rules created for security group %s", group_id)

        return group_id

    @openstack_error_handler
    def _create_rule(self, group_id: str, tenant_id: str, direction: str) -> None:
        self.connection.network.create_security_group_rule(
            security_group_id=group_id,
            direction=direction,
            ether_type=ETHER_TYPE_IPV4,
            project_id=tenant_id,
        )
