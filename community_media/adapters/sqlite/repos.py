import sqlite3
from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from community_media.domain.entities import (
    AssetReference,
    DisplayName,
    Partner,
    Project,
    StorageName,
)


class SQLiteAssetRefRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _row_to_asset(self, row: sqlite3.Row) -> AssetReference:
        return AssetReference(
            id=UUID(row["id"]),
            owner_id=UUID(row["owner_id"]),
            owner_kind=row["owner_kind"],
            storage_name=StorageName(row["storage_name"]),
            storage_path=row["storage_path"],
            display_name=DisplayName(row["display_name"]),
            declared_mime_type=row["declared_mime_type"],
            classified_type=row["classified_type"],
            byte_size=row["byte_size"],
            sha256=row["sha256"],
            is_primary=bool(row["is_primary"]),
            sort_position=row["sort_position"],
            uploaded_at=datetime.fromisoformat(row["uploaded_at"]),
        )

    def _upsert(self, conn: sqlite3.Connection, asset: AssetReference) -> None:
        conn.execute(
            """
            INSERT INTO asset_references (
                id, owner_id, owner_kind, storage_name, storage_path,
                display_name, declared_mime_type, classified_type, byte_size,
                sha256, is_primary, sort_position, uploaded_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                storage_path=excluded.storage_path,
                display_name=excluded.display_name,
                declared_mime_type=excluded.declared_mime_type,
                classified_type=excluded.classified_type,
                byte_size=excluded.byte_size,
                sha256=excluded.sha256,
                is_primary=excluded.is_primary,
                sort_position=excluded.sort_position
        """,
            (
                str(asset.id),
                str(asset.owner_id),
                asset.owner_kind,
                asset.storage_name,
                asset.storage_path,
                asset.display_name,
                asset.declared_mime_type,
                asset.classified_type,
                asset.byte_size,
                asset.sha256,
                1 if asset.is_primary else 0,
                asset.sort_position,
                asset.uploaded_at.isoformat(),
            ),
        )

    def get_by_id(self, asset_id: UUID) -> AssetReference | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM asset_references WHERE id = ?", (str(asset_id),)
            ).fetchone()
            return self._row_to_asset(row) if row else None
        finally:
            conn.close()

    def get_by_storage_name(self, storage_name: str) -> AssetReference | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM asset_references WHERE storage_name = ?", (storage_name,)
            ).fetchone()
            return self._row_to_asset(row) if row else None
        finally:
            conn.close()

    def list_by_owner(self, owner_id: UUID) -> list[AssetReference]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM asset_references WHERE owner_id = ?
                ORDER BY sort_position ASC, is_primary DESC, id ASC
            """,
                (str(owner_id),),
            ).fetchall()
            return [self._row_to_asset(row) for row in rows]
        finally:
            conn.close()

    def save(self, asset: AssetReference) -> AssetReference:
        self.apply_changes([asset])
        return asset

    def apply_changes(
        self,
        saved: Sequence[AssetReference],
        deleted: Sequence[UUID] = (),
    ) -> None:
        conn = self._get_conn()
        try:
            for asset_id in deleted:
                conn.execute("DELETE FROM asset_references WHERE id = ?", (str(asset_id),))
            # Demotions first: the partial unique index allows one primary per owner
            for asset in sorted(saved, key=lambda a: a.is_primary):
                self._upsert(conn, asset)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def delete_by_owner(self, owner_id: UUID) -> list[AssetReference]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM asset_references WHERE owner_id = ?", (str(owner_id),)
            ).fetchall()
            conn.execute("DELETE FROM asset_references WHERE owner_id = ?", (str(owner_id),))
            conn.commit()
            return [self._row_to_asset(row) for row in rows]
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


class SQLiteProjectRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _row_to_project(self, row: sqlite3.Row) -> Project:
        return Project(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def save(self, project: Project) -> Project:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO projects (id, title, slug, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    slug=excluded.slug
            """,
                (str(project.id), project.title, project.slug, project.created_at.isoformat()),
            )
            conn.commit()
            return project
        finally:
            conn.close()

    def get_by_id(self, project_id: UUID) -> Project | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM projects WHERE id = ?", (str(project_id),)
            ).fetchone()
            return self._row_to_project(row) if row else None
        finally:
            conn.close()

    def delete(self, project_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM projects WHERE id = ?", (str(project_id),))
            conn.commit()
        finally:
            conn.close()


class SQLitePartnerRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _row_to_partner(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Partner:
        links = conn.execute(
            "SELECT project_id FROM partner_projects WHERE partner_id = ? ORDER BY position ASC",
            (row["id"],),
        ).fetchall()
        return Partner(
            id=UUID(row["id"]),
            name=row["name"],
            description=row["description"],
            website_url=row["website_url"],
            logo_asset_id=UUID(row["logo_asset_id"]) if row["logo_asset_id"] else None,
            legacy_project_id=(
                UUID(row["legacy_project_id"]) if row["legacy_project_id"] else None
            ),
            project_ids=[UUID(link["project_id"]) for link in links],
            sort_order=row["sort_order"],
            active=bool(row["active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def save(self, partner: Partner) -> Partner:
        conn = self._get_conn()
        try:
            # 1. Upsert partner
            conn.execute(
                """
                INSERT INTO partners (
                    id, name, description, website_url, logo_asset_id,
                    legacy_project_id, sort_order, active, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    description=excluded.description,
                    website_url=excluded.website_url,
                    logo_asset_id=excluded.logo_asset_id,
                    legacy_project_id=excluded.legacy_project_id,
                    sort_order=excluded.sort_order,
                    active=excluded.active,
                    updated_at=excluded.updated_at
            """,
                (
                    str(partner.id),
                    partner.name,
                    partner.description,
                    partner.website_url,
                    str(partner.logo_asset_id) if partner.logo_asset_id else None,
                    str(partner.legacy_project_id) if partner.legacy_project_id else None,
                    partner.sort_order,
                    1 if partner.active else 0,
                    partner.created_at.isoformat(),
                    partner.updated_at.isoformat(),
                ),
            )

            # 2. Replace project links, keeping list order
            conn.execute("DELETE FROM partner_projects WHERE partner_id = ?", (str(partner.id),))
            for i, project_id in enumerate(partner.project_ids):
                conn.execute(
                    """
                    INSERT INTO partner_projects (partner_id, project_id, position)
                    VALUES (?, ?, ?)
                """,
                    (str(partner.id), str(project_id), i),
                )

            conn.commit()
            return partner
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_by_id(self, partner_id: UUID) -> Partner | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM partners WHERE id = ?", (str(partner_id),)
            ).fetchone()
            return self._row_to_partner(conn, row) if row else None
        finally:
            conn.close()

    def delete(self, partner_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM partners WHERE id = ?", (str(partner_id),))
            conn.commit()
        finally:
            conn.close()

    def list_by_project(self, project_id: UUID) -> list[Partner]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM partners
                WHERE legacy_project_id = :pid
                   OR id IN (SELECT partner_id FROM partner_projects WHERE project_id = :pid)
                ORDER BY sort_order ASC, name ASC
            """,
                {"pid": str(project_id)},
            ).fetchall()
            return [self._row_to_partner(conn, row) for row in rows]
        finally:
            conn.close()
