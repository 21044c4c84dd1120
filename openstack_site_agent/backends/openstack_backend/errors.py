"""Translation of openstacksdk and keystoneauth exceptions into backend errors."""

from __future__ import annotations

import functools
import logging
from typing import Callable, TypeVar

from keystoneauth1 import exceptions as ks_exceptions
from openstack import exceptions as os_exceptions

from openstack_site_agent.backend.exceptions import (
    STATUS_CODE_ALREADY_EXISTS,
    STATUS_CODE_NOT_FOUND,
    AlreadyExistsError,
    BackendError,
    NotFoundError,
)

logger = logging.getLogger(__name__)
ReturnType = TypeVar("ReturnType")


def map_openstack_error(error: Exception) -> BackendError:
    """Classify an SDK or keystoneauth error by its numeric status code.

    Transport failures (connection refused, timeouts) carry no status code.
    """
    status_code = getattr(error, "status_code", None)
    if status_code is None:
        status_code = getattr(error, "http_status", None)
    if status_code == STATUS_CODE_NOT_FOUND:
        return NotFoundError(str(error), status_code)
    if status_code == STATUS_CODE_ALREADY_EXISTS:
        return AlreadyExistsError(str(error), status_code)
    return BackendError(str(error), status_code)


def openstack_error_handler(
    func: Callable[..., ReturnType],
) -> Callable[..., ReturnType]:
    """Convert openstacksdk and keystoneauth exceptions to backend errors."""

    @functools.wraps(func)
    def wrapped(*args: object, **kwargs: object) -> ReturnType:
        logger.debug("Executing OpenStack client method: %s", func.__name__)
        try:
            return func(*args, **kwargs)
        except (os_exceptions.SDKException, ks_exceptions.ClientException) as e:
            raise map_openstack_error(e) from e

    return wrapped
