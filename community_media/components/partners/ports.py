"""
Partners component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from community_media.domain.entities import Partner, Project


class PartnerRepoPort(Protocol):
    def get_by_id(self, partner_id: UUID) -> Partner | None:
        ...

    def save(self, partner: Partner) -> Partner:
        """Save partner together with its project links."""
        ...

    def delete(self, partner_id: UUID) -> None:
        ...

    def list_by_project(self, project_id: UUID) -> list[Partner]:
        """Partners linked to a project through either relation."""
        ...


class ProjectRepoPort(Protocol):
    def get_by_id(self, project_id: UUID) -> Project | None:
        ...
