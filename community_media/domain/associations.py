"""
Legacy/new project association for partners.

A partner historically pointed at one project (``legacy_project_id``); it can
now belong to many (``project_ids``). ``reconcile`` is the only place that
changes the legacy field automatically.
"""

from __future__ import annotations

import logging
from uuid import UUID

from community_media.domain.entities import Partner

logger = logging.getLogger(__name__)


def dedupe(project_ids: list[UUID]) -> list[UUID]:
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(project_ids))


def reconcile(partner: Partner) -> bool:
    """
    Bring both relations into agreement. Returns True if anything changed.

    - many-to-many set but no legacy link: legacy becomes the first member.
    - legacy link not in the many-to-many set: it is added.

    When a caller sets the legacy link while supplying a non-empty set that
    leaves it out, the legacy value is still added back (it may mask a
    deliberate detach); a warning records both values.
    """
    changed = False

    unique = dedupe(partner.project_ids)
    if unique != partner.project_ids:
        partner.project_ids = unique
        changed = True

    if partner.legacy_project_id is None:
        if partner.project_ids:
            partner.legacy_project_id = partner.project_ids[0]
            changed = True
    elif partner.legacy_project_id not in partner.project_ids:
        if partner.project_ids:
            logger.warning(
                "Partner %s: legacy project %s missing from projects %s; adding it back",
                partner.id,
                partner.legacy_project_id,
                [str(p) for p in partner.project_ids],
            )
        partner.project_ids = [*partner.project_ids, partner.legacy_project_id]
        changed = True

    return changed
