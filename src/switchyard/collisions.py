"""Sub-resource collision detection.

Backends sharing one process also share one URL space for the
sub-resources they mount themselves (websocket paths, long-poll
endpoints). ``validate()`` runs at freeze time, before any request is
served, and fails if two targets claim the same key.
"""

import logging
from collections.abc import Sequence
from typing import Any

from switchyard.errors import Collision, CollisionError, target_name
from switchyard.routing.table import unique
from switchyard.targets import sub_resource_keys

logger = logging.getLogger("switchyard.routing")


def collect_sub_resources(targets: Sequence[Any]) -> list[tuple[str, Any]]:
    """Merge every target's declared keys into one ordered list.

    Returns ``(key, target)`` pairs, targets in registry order, keys in
    each target's declaration order. A key a target repeats is listed
    once for that target.
    """
    pairs: list[tuple[str, Any]] = []
    for target in targets:
        for key in unique(sub_resource_keys(target)):
            pairs.append((key, target))
    return pairs


def find_collisions(targets: Sequence[Any]) -> tuple[Collision, ...]:
    """Return every key declared by more than one distinct target.

    Targets are distinct by equality, the same rule the registry uses.
    """
    owners: dict[str, list[Any]] = {}
    for key, target in collect_sub_resources(unique(targets)):
        owners.setdefault(key, []).append(target)
    return tuple(
        Collision(key=key, targets=tuple(owners_of_key))
        for key, owners_of_key in owners.items()
        if len(owners_of_key) > 1
    )


def validate(targets: Sequence[Any]) -> None:
    """Raise ``CollisionError`` listing all collisions, if there are any.

    The full pass completes before raising, so one error reports every
    colliding key together with all of the targets that declare it.
    """
    collisions = find_collisions(targets)
    if collisions:
        for collision in collisions:
            logger.error(
                "sub-resource %r claimed by %s",
                collision.key,
                ", ".join(target_name(t) for t in collision.targets),
            )
        raise CollisionError(collisions)
