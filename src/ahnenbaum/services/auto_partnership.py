"""Auto-partnership inference between co-parents.

When a qualifying parent-child edge is created and the child already has
other qualifying parents, a ``marriage`` edge is synthesized between the
new parent and each co-parent, unless the pair is already partnered.

This is an explicit post-create hook called from the write path, not a
storage trigger, so callers can inspect what it created.
"""
from __future__ import annotations

import structlog

from ..models.relationship import (
    AUTO_PARTNER_DEFAULT_TYPE,
    PARTNER_TYPES,
    QUALIFYING_PARENT_TYPES,
    CreateRelationshipInput,
    Relationship,
)
from ..result import ErrorCode
from ..storage.base import RelationshipQuery
from .relationships import RelationshipService

logger = structlog.get_logger(__name__)


def maybe_create_partner_relationships(
    service: RelationshipService,
    new_relationship: Relationship,
) -> list[Relationship]:
    """Infer partner edges for a just-created parent-child edge.

    Args:
        service: Relationship service used for every write (validation and
            duplicate detection live there)
        new_relationship: The edge just created (personA = parent, personB = child)

    Returns:
        Partner edges actually created. Empty for the first parent of a
        child, for non-qualifying types, and when every co-parent is
        already partnered.
    """
    if new_relationship.type not in QUALIFYING_PARENT_TYPES:
        return []

    child_id = new_relationship.person_b_id
    new_parent_id = new_relationship.person_a_id

    other_parent_rels = service.store.find_relationships(
        RelationshipQuery(person_b_ids={child_id}, types=set(QUALIFYING_PARENT_TYPES))
    )
    # A parent may appear under several qualifying types
    other_parent_ids = list(dict.fromkeys(
        r.person_a_id for r in other_parent_rels if r.person_a_id != new_parent_id
    ))

    created: list[Relationship] = []
    for other_parent_id in other_parent_ids:
        if service.find_between(new_parent_id, other_parent_id, PARTNER_TYPES):
            continue

        result = service.create(
            CreateRelationshipInput(
                person_a_id=new_parent_id,
                person_b_id=other_parent_id,
                type=AUTO_PARTNER_DEFAULT_TYPE,
            )
        )
        if result.ok:
            created.append(result.data)
            logger.info(
                "auto_partnership.created",
                relationship_id=result.data.id,
                child_id=child_id,
                person_a_id=new_parent_id,
                person_b_id=other_parent_id,
            )
        elif result.error.code != ErrorCode.CONFLICT:
            # e.g. co-parent soft-deleted since the edge was written
            logger.warning(
                "auto_partnership.skipped",
                child_id=child_id,
                other_parent_id=other_parent_id,
                code=result.error.code.value,
                reason=result.error.message,
            )

    return created
