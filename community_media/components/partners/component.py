"""
Partners component - partners linked to projects through a legacy single
reference and a many-to-many relation.

Every create/update runs ``associations.reconcile`` before persistence. A
partner's logo is an asset collection of kind ``partner`` owned by the
partner id.
"""

from __future__ import annotations

import logging
from uuid import UUID

from community_media.components.assets import AssetService, UploadInput
from community_media.domain.associations import reconcile
from community_media.domain.entities import AssetReference, Partner, utcnow
from community_media.domain.errors import NotFoundError

from .ports import PartnerRepoPort, ProjectRepoPort

logger = logging.getLogger(__name__)


class PartnerService:
    def __init__(
        self,
        repo: PartnerRepoPort,
        projects: ProjectRepoPort,
        assets: AssetService,
    ) -> None:
        self.repo = repo
        self.projects = projects
        self.assets = assets

    def _check_projects(self, partner: Partner) -> None:
        ids = list(partner.project_ids)
        if partner.legacy_project_id is not None:
            ids.append(partner.legacy_project_id)
        for project_id in ids:
            if self.projects.get_by_id(project_id) is None:
                raise NotFoundError(f"project {project_id}")

    def get(self, partner_id: UUID) -> Partner:
        partner = self.repo.get_by_id(partner_id)
        if partner is None:
            raise NotFoundError(f"partner {partner_id}")
        return partner

    def create(self, partner: Partner) -> Partner:
        self._check_projects(partner)
        reconcile(partner)
        saved = self.repo.save(partner)
        logger.info("Created partner %s (%s)", saved.id, saved.name)
        return saved

    def update(self, partner: Partner) -> Partner:
        self.get(partner.id)
        self._check_projects(partner)
        reconcile(partner)
        partner.updated_at = utcnow()
        return self.repo.save(partner)

    def delete(self, partner_id: UUID) -> None:
        """Delete the partner, then its logo assets and their files."""
        self.get(partner_id)
        self.repo.delete(partner_id)
        self.assets.delete_owner(partner_id)
        logger.info("Deleted partner %s", partner_id)

    # --- Project links ---

    def attach_project(self, partner_id: UUID, project_id: UUID) -> Partner:
        partner = self.get(partner_id)
        if project_id not in partner.project_ids:
            partner.project_ids.append(project_id)
        return self.update(partner)

    def detach_project(self, partner_id: UUID, project_id: UUID) -> Partner:
        """
        Remove a project link.

        Detaching the project the legacy field points to clears it, so
        reconcile re-points it at the next remaining project, if any.
        """
        partner = self.get(partner_id)
        partner.project_ids = [p for p in partner.project_ids if p != project_id]
        if partner.legacy_project_id == project_id:
            partner.legacy_project_id = None
        return self.update(partner)

    def list_by_project(self, project_id: UUID) -> list[Partner]:
        return self.repo.list_by_project(project_id)

    # --- Logo slot ---

    def set_logo(self, partner_id: UUID, upload: UploadInput) -> AssetReference:
        """Upload or re-upload the partner logo."""
        partner = self.get(partner_id)
        current = self.assets.get_primary(partner_id)

        if current is not None:
            logo = self.assets.replace(partner_id, current.id, upload)
        else:
            logo = self.assets.attach(partner_id, upload, owner_kind="partner")

        if partner.logo_asset_id != logo.id:
            partner.logo_asset_id = logo.id
            self.update(partner)
        return logo
