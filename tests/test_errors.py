"""Tests for error classification and status normalization."""

import pytest
from keystoneauth1 import exceptions as ks_exceptions
from openstack import exceptions as os_exceptions

from openstack_site_agent.backend.exceptions import (
    AlreadyExistsError,
    BackendError,
    NotFoundError,
    is_already_exists,
)
from openstack_site_agent.backend.structures import (
    NETWORK_STATUS_ACTIVE,
    NETWORK_STATUS_FAILED,
    NETWORK_STATUS_PENDING,
)
from openstack_site_agent.backends.openstack_backend.errors import (
    map_openstack_error,
    openstack_error_handler,
)
from openstack_site_agent.backends.openstack_backend.status import to_provider_status


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("status_code", "error_class"),
        [(404, NotFoundError), (409, AlreadyExistsError), (500, BackendError)],
    )
    def test_classified_by_status_code(self, status_code, error_class):
        error = map_openstack_error(
            os_exceptions.HttpException(message="failed", http_status=status_code)
        )

        assert type(error) is error_class
        assert error.status_code == status_code

    def test_sdk_error_without_status_code(self):
        error = map_openstack_error(os_exceptions.SDKException("no endpoint"))

        assert type(error) is BackendError
        assert error.status_code is None

    def test_transport_failure_has_no_status_code(self):
        error = map_openstack_error(ks_exceptions.ConnectFailure("Connection refused"))

        assert type(error) is BackendError
        assert error.status_code is None
        assert "Connection refused" in str(error)

    @pytest.mark.parametrize(
        ("keystone_error", "error_class", "status_code"),
        [
            (ks_exceptions.Unauthorized("token expired"), BackendError, 401),
            (ks_exceptions.NotFound("no such project"), NotFoundError, 404),
            (ks_exceptions.Conflict("duplicate"), AlreadyExistsError, 409),
        ],
    )
    def test_keystoneauth_http_errors_use_http_status(
        self, keystone_error, error_class, status_code
    ):
        error = map_openstack_error(keystone_error)

        assert type(error) is error_class
        assert error.status_code == status_code

    def test_handler_maps_keystoneauth_errors(self):
        original = ks_exceptions.ConnectTimeout("timed out")

        @openstack_error_handler
        def create():
            raise original

        with pytest.raises(BackendError) as excinfo:
            create()

        assert excinfo.value.__cause__ is original

    def test_handler_chains_original_exception(self):
        original = os_exceptions.HttpException(message="conflict", http_status=409)

        @openstack_error_handler
        def create():
            raise original

        with pytest.raises(AlreadyExistsError) as excinfo:
            create()

        assert excinfo.value.__cause__ is original
        assert is_already_exists(excinfo.value)

    def test_handler_leaves_backend_errors_alone(self):
        @openstack_error_handler
        def lookup():
            raise NotFoundError("missing")

        with pytest.raises(NotFoundError, match="missing"):
            lookup()

    def test_is_already_exists_only_for_conflicts(self):
        assert not is_already_exists(BackendError("x", 404))
        assert not is_already_exists(ValueError("x"))


class TestStatusNormalization:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            ("ACTIVE", NETWORK_STATUS_ACTIVE),
            ("BUILD", NETWORK_STATUS_PENDING),
            ("DOWN", NETWORK_STATUS_FAILED),
            ("ERROR", NETWORK_STATUS_FAILED),
            ("SOMETHING_NEW", NETWORK_STATUS_FAILED),
            ("", NETWORK_STATUS_FAILED),
        ],
    )
    def test_to_provider_status(self, status, expected):
        assert to_provider_status(status) == expected
