"""Tenant and user lifecycle on Keystone."""

from __future__ import annotations

import logging
from typing import Optional

from openstack.connection import Connection

from openstack_site_agent.backend.exceptions import (
    AlreadyExistsError,
    BackendError,
    NotFoundError,
)
from openstack_site_agent.backend.structures import Tenant, User
from openstack_site_agent.backends.openstack_backend.errors import openstack_error_handler
from openstack_site_agent.backends.openstack_backend.tenant_store import TenantStore
from openstack_site_agent.common.lookup import find_all, find_resource
from openstack_site_agent.common.structures import NetworkingSettings

logger = logging.getLogger(__name__)


class IdentityManager:
    """Creates, resolves and deletes tenants (projects) and their users.

    Creation is idempotent: a conflict reported by Keystone means the tenant or
    user already exists and is not an error.
    """

    def __init__(
        self,
        connection: Connection,
        settings: NetworkingSettings,
        tenant_store: Optional[TenantStore] = None,
    ) -> None:
        """Initialize the manager.

        Args:
            connection: Authenticated openstacksdk connection
            settings: Networking settings holding the system tenant mapping
            tenant_store: Optional store of already resolved tenant IDs
        """
        self.connection = connection
        self.settings = settings
        self.tenant_store = tenant_store

    def _tenant_name(self, tenant_name: str) -> str:
        if tenant_name in self.settings.system_namespaces:
            return self.settings.system_tenant
        return tenant_name

    @openstack_error_handler
    def get_tenant_id_from_name(self, tenant_name: str) -> str:
        """Resolve tenant ID by tenant name.

        A tenant ID recorded in the tenant store is returned without asking
        Keystone. Otherwise projects are enumerated and the first one with the
        exact name wins; duplicate names are not reported.

        Raises:
            NotFoundError: If no project has this name
        """
        tenant_name = self._tenant_name(tenant_name)

        if self.tenant_store is not None:
            record = self.tenant_store.get_tenant(tenant_name)
            if record is not None and record.tenant_id:
                return record.tenant_id

        project = find_resource(
            self.connection.identity.projects(name=tenant_name),
            lambda item: item.name == tenant_name,
            kind="tenant",
            description=f"name={tenant_name}",
            strict=False,
        )
        logger.debug("Got tenantID: %s for tenantName: %s", project.id, tenant_name)
        return project.id

    @openstack_error_handler
    def list_tenants(self) -> list[Tenant]:
        """List all tenants."""
        return [
            Tenant(id=project.id, name=project.name)
            for project in self.connection.identity.projects()
        ]

    def create_tenant(self, tenant_name: str) -> str:
        """Create tenant by name and return its ID.

        An already existing tenant is resolved instead.
        """
        try:
            self._create_project(tenant_name)
            logger.info("Tenant %s created", tenant_name)
        except AlreadyExistsError:
            logger.info("Tenant %s already exists", tenant_name)
        except BackendError as e:
            logger.error("Failed to create tenant %s: %s", tenant_name, e)
            raise
        return self.get_tenant_id_from_name(tenant_name)

    @openstack_error_handler
    def _create_project(self, tenant_name: str) -> None:
        self.connection.identity.create_project(
            name=tenant_name,
            description=self.settings.tenant_description,
            is_enabled=True,
        )

    @openstack_error_handler
    def delete_tenant(self, tenant_name: str) -> None:
        """Delete every tenant named exactly ``tenant_name``."""
        projects = find_all(
            self.connection.identity.projects(name=tenant_name),
            lambda item: item.name == tenant_name,
        )
        if not projects:
            logger.info("Tenant %s not found, nothing to delete", tenant_name)
        for project in projects:
            self.connection.identity.delete_project(project.id)
            logger.info("Tenant %s (%s) deleted", tenant_name, project.id)

    @openstack_error_handler
    def check_tenant_by_id(self, tenant_id: str) -> bool:
        """Check whether a tenant with this ID (or name) exists.

        Raises:
            NotFoundError: If Keystone has no projects at all
        """
        found = False
        listed = False
        for project in self.connection.identity.projects():
            listed = True
            if tenant_id in (project.id, project.name):
                found = True
        if not listed:
            raise NotFoundError("No tenants found")
        return found

    def create_user(self, username: str, password: str, tenant_id: str) -> None:
        """Create user in the tenant; an existing user is not an error."""
        try:
            self._create_user(username, password, tenant_id)
            logger.info("User %s created", username)
        except AlreadyExistsError:
            logger.info("User %s already exists", username)
        except BackendError as e:
            logger.error("Failed to create user %s: %s", username, e)
            raise

    @openstack_error_handler
    def _create_user(self, username: str, password: str, tenant_id: str) -> None:
        self.connection.identity.create_user(
            name=username,
            password=password,
            default_project_id=tenant_id,
            is_enabled=True,
        )

    @openstack_error_handler
    def list_users(self, tenant_id: str) -> list[User]:
        """List users whose default project is the tenant."""
        return [
            User(id=user.id, name=user.name, tenant_id=tenant_id)
            for user in find_all(
                self.connection.identity.users(),
                lambda item: item.default_project_id == tenant_id,
            )
        ]

    def delete_all_users_on_tenant(self, tenant_name: str) -> None:
        """Delete all users of the tenant.

        A tenant that can not be resolved has nothing to delete.
        """
        try:
            tenant_id = self.get_tenant_id_from_name(tenant_name)
        except BackendError as e:
            logger.info("Tenant %s not resolved, no users to delete: %s", tenant_name, e)
            return

        for user in self.list_users(tenant_id):
            try:
                self._delete_user(user.id)
            except BackendError as e:
                logger.error("Delete openstack user %s error: %s", user.name, e)
                raise
            logger.info("User %s deleted", user.name)

    @openstack_error_handler
    def _delete_user(self, user_id: str) -> None:
        self.connection.identity.delete_user(user_id)
