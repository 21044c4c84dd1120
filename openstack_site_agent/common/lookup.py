"""List-then-match lookup utilities for backend listings.

The backend's list calls accept server-side filters but give no guarantee
that a single resource comes back, so every lookup enumerates the listing,
re-applies the filter locally and classifies the outcome.
"""

import logging
from collections.abc import Iterable
from typing import Callable, TypeVar

from openstack_site_agent.backend.exceptions import MultipleResultsError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def find_resource(
    listing: Iterable[T],
    predicate: Callable[[T], bool],
    *,
    kind: str = "resource",
    description: str = "",
    strict: bool = True,
) -> T:
    """Find exactly one resource in a backend listing.

    Args:
        listing: Iterable over every page of a backend listing; the SDK
            generators fetch the following pages lazily
        predicate: Local filter applied to every listed item
        kind: Resource kind used in error messages (e.g. "network")
        description: Human-readable filter description for error messages
        strict: When True more than one match raises MultipleResultsError;
            when False the first match wins

    Returns:
        The matching resource

    Raises:
        NotFoundError: If nothing matches
        MultipleResultsError: If strict and more than one item matches

    Example:
        network = find_resource(
            connection.network.networks(name="net1"),
            lambda item: item.name == "net1",
            kind="network",
            description="name=net1",
        )
    """
    found = None
    matched = False
    for item in listing:
        if not predicate(item):
            continue
        if not matched:
            found = item
            matched = True
            if not strict:
                break
            continue
        raise MultipleResultsError(f"Multiple {kind}s found for {description or 'filter'}")

    if not matched:
        raise NotFoundError(f"No {kind} found for {description or 'filter'}")

    logger.debug("Found %s for %s", kind, description)
    return found  # type: ignore[return-value]


def find_all(listing: Iterable[T], predicate: Callable[[T], bool]) -> list[T]:
    """Return every item of a backend listing matching the predicate.

    The listing is enumerated to exhaustion; an empty list means no match.
    """
    return [item for item in listing if predicate(item)]
