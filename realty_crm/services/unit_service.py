"""
Unit Service

Unit CRUD plus the persistence side of the ingestion pipeline:
- save_unit_data upserts normalized rows on (project_id, unit_number) and
  caches the summary on the project
- get_unit_summary serves the cached summary, recomputing it from stored
  units when the cached bedroom distribution carries no information
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

import pydantic
from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.best_effort import best_effort
from realty_crm.lib.errors import RecordNotFound, UpstreamServiceError, ValidationError
from realty_crm.lib.permissions import CallerContext, can_manage_units, require
from realty_crm.models.project import Project
from realty_crm.models.unit import Unit
from realty_crm.schemas.file import FilePurpose
from realty_crm.schemas.unit import (
    ImportPreviewResponse,
    ImportResultResponse,
    UnitCreate,
    UnitFilters,
    UnitRow,
    UnitStatus,
    UnitSummary,
    UnitUpdate,
)
from realty_crm.services.file_service import XLS, XLSX, FileService
from realty_crm.services.project_service import ProjectService, ensure_can_mutate
from realty_crm.services.spreadsheet_reader import read_spreadsheet
from realty_crm.services.storage_service import StorageService
from realty_crm.services.unit_normalizer import find_bedroom_source, normalize_bedrooms, process_unit_data
from realty_crm.services.unit_summary import generate_summary

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 500

SPREADSHEET_CONTENT_TYPES = {
    "xlsx": XLSX,
    "xlsm": XLSX,
    "xls": XLS,
    "csv": "text/csv",
}

# Columns refreshed when an imported row hits an existing unit number
UPSERT_COLUMNS = (
    "unit_code",
    "tower",
    "floor_number",
    "bedrooms",
    "area_total",
    "area_suite",
    "area_balcony",
    "price",
    "status",
    "unit_view",
    "unit_type",
    "custom_fields",
    "raw_data",
    "updated_at",
)


def _status_from_model(value: Optional[str]) -> UnitStatus:
    try:
        return UnitStatus(value or UnitStatus.UNKNOWN.value)
    except ValueError:
        return UnitStatus.UNKNOWN


def unit_row_from_model(unit: Unit) -> UnitRow:
    """
    Rebuild a UnitRow from a stored unit.

    Units saved before bedroom parsing improved may have no bedroom count;
    infer it from their custom fields or unit type.
    """
    bedrooms = unit.bedrooms
    if bedrooms is None:
        bedrooms = normalize_bedrooms(find_bedroom_source(unit.custom_fields, unit.unit_type))

    return UnitRow(
        tower=unit.tower,
        unit_number=unit.unit_number,
        unit_code=unit.unit_code,
        floor=unit.floor_number,
        bedrooms=bedrooms,
        area_total=unit.area_total,
        area_suite=unit.area_suite,
        area_balcony=unit.area_balcony,
        price=unit.price,
        status=_status_from_model(unit.status),
        unit_view=unit.unit_view,
        unit_type=unit.unit_type,
        custom_fields=unit.custom_fields or {},
        raw_data=unit.raw_data or {},
    )


def collapse_duplicates(
    units: Sequence[UnitRow],
    summary: UnitSummary,
) -> Tuple[List[UnitRow], UnitSummary]:
    """
    Keep the last row per upsert key and rebuild the summary if any row went.

    A row identified only by its code is keyed on that code, so it replaces
    an earlier row whose unit number equals the code (and vice versa).
    """
    by_key: Dict[str, UnitRow] = {}
    for unit in units:
        if not unit.has_identity:
            continue
        key = unit.unit_number or unit.unit_code
        previous = by_key.get(key)
        if previous is not None:
            if (previous.unit_number is None) != (unit.unit_number is None):
                logger.warning(
                    "Unit code %s collides with a unit number in the same sheet; keeping the later row", key
                )
            else:
                logger.warning("Unit %s appears more than once in the sheet; keeping the later row", key)
        by_key[key] = unit

    kept = list(by_key.values())
    if len(kept) != len(units):
        summary = generate_summary(kept, summary.confidence.header_mapping)
    return kept, summary


def unit_row_to_values(project_id: UUID, unit: UnitRow, now: datetime) -> Dict[str, Any]:
    """Column values for upserting one processed row."""
    custom_fields = dict(unit.custom_fields)
    custom_fields.update({
        "smart_processing": True,
        "bedrooms_raw": unit.bedrooms_raw,
        "status_raw": unit.status_raw,
    })

    return {
        "id": uuid4(),
        "project_id": project_id,
        # Rows identified only by code keep a stable upsert key
        "unit_number": unit.unit_number or unit.unit_code,
        "unit_code": unit.unit_code,
        "tower": unit.tower,
        "floor_number": unit.floor,
        "bedrooms": unit.bedrooms,
        "area_total": unit.area_total,
        "area_suite": unit.area_suite,
        "area_balcony": unit.area_balcony,
        "price": unit.price,
        "status": unit.status.value,
        "unit_view": unit.unit_view,
        "unit_type": unit.unit_type,
        "custom_fields": custom_fields,
        "raw_data": dict(unit.raw_data),
        "created_at": now,
        "updated_at": now,
    }


class UnitService:
    """Service for managing a project's units."""

    def __init__(self, db: AsyncSession, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage

    # ============================================
    # HELPER METHODS
    # ============================================

    async def get_project(self, caller: CallerContext, project_id: UUID) -> Project:
        return await ProjectService(self.db).get_project(caller, project_id)

    async def get_mutable_project(self, caller: CallerContext, project_id: UUID) -> Project:
        """Get a project whose units the caller may change."""
        require(can_manage_units(caller.role), "Your role cannot manage units")
        project = await self.get_project(caller, project_id)
        ensure_can_mutate(caller, project)
        return project

    def _insert(self):
        """Dialect-specific INSERT supporting ON CONFLICT."""
        if self.db.get_bind().dialect.name == "postgresql":
            return pg_insert
        return sqlite_insert

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError("A unit with this number already exists in the project")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, e)
            raise UpstreamServiceError(f"Failed to {action}")

    # ============================================
    # UNIT CRUD
    # ============================================

    async def list_units(
        self,
        caller: CallerContext,
        project_id: UUID,
        filters: Optional[UnitFilters] = None,
    ) -> Tuple[List[Unit], int]:
        """List units ordered by floor, then unit number."""
        await self.get_project(caller, project_id)

        query = select(Unit).where(Unit.project_id == project_id)
        if filters:
            if filters.status:
                query = query.where(Unit.status == filters.status.value)
            if filters.bedrooms is not None:
                query = query.where(Unit.bedrooms == filters.bedrooms)
            if filters.tower:
                query = query.where(Unit.tower == filters.tower)

        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            query.order_by(Unit.floor_number, Unit.unit_number)
        )
        return list(result.scalars().all()), total

    async def get_unit(self, caller: CallerContext, project_id: UUID, unit_id: UUID) -> Unit:
        """Get a single unit, or raise RecordNotFound."""
        await self.get_project(caller, project_id)

        result = await self.db.execute(
            select(Unit).where(
                Unit.id == unit_id,
                Unit.project_id == project_id
            )
        )
        unit = result.scalar_one_or_none()
        if not unit:
            raise RecordNotFound(f"Unit {unit_id} not found")
        return unit

    async def create_unit(self, caller: CallerContext, project_id: UUID, data: UnitCreate) -> Unit:
        """Create a unit by hand."""
        await self.get_mutable_project(caller, project_id)

        unit = Unit(
            project_id=project_id,
            **{**data.model_dump(), 'status': data.status.value},
        )
        self.db.add(unit)
        await self._commit("create unit")
        await self.db.refresh(unit)
        return unit

    async def update_unit(
        self,
        caller: CallerContext,
        project_id: UUID,
        unit_id: UUID,
        data: UnitUpdate,
    ) -> Unit:
        """Update unit fields."""
        await self.get_mutable_project(caller, project_id)
        unit = await self.get_unit(caller, project_id, unit_id)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get('status') is not None:
            update_data['status'] = update_data['status'].value

        for field, value in update_data.items():
            setattr(unit, field, value)

        await self._commit("update unit")
        await self.db.refresh(unit)
        return unit

    async def delete_unit(self, caller: CallerContext, project_id: UUID, unit_id: UUID) -> None:
        """Delete a unit."""
        await self.get_mutable_project(caller, project_id)
        unit = await self.get_unit(caller, project_id, unit_id)

        await self.db.delete(unit)
        await self._commit("delete unit")

    # ============================================
    # INGESTION PERSISTENCE
    # ============================================

    async def save_unit_data(
        self,
        caller: CallerContext,
        project_id: UUID,
        units: Sequence[UnitRow],
        summary: UnitSummary,
    ) -> int:
        """
        Upsert processed units and cache their summary on the project.

        Rows sharing an upsert key collapse to the last one, and the cached
        summary is rebuilt to count only the rows written. Both writes must
        succeed; any database failure raises UpstreamServiceError and nothing
        is committed.

        Returns:
            Number of distinct units written
        """
        await self.get_mutable_project(caller, project_id)

        now = datetime.utcnow()
        # ON CONFLICT cannot touch the same row twice in one statement
        units, summary = collapse_duplicates(units, summary)
        rows = [unit_row_to_values(project_id, unit, now) for unit in units]

        insert = self._insert()
        try:
            for start in range(0, len(rows), UPSERT_BATCH_SIZE):
                stmt = insert(Unit).values(rows[start:start + UPSERT_BATCH_SIZE])
                stmt = stmt.on_conflict_do_update(
                    index_elements=["project_id", "unit_number"],
                    set_={column: stmt.excluded[column] for column in UPSERT_COLUMNS},
                )
                await self.db.execute(stmt)

            await self.db.execute(
                update(Project)
                .where(Project.id == project_id)
                .values(unit_summary=summary.model_dump(by_alias=True), updated_at=now)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to save unit data for project %s: %s", project_id, e)
            raise UpstreamServiceError("Failed to save unit data")

        logger.info("Saved %d units for project %s", len(rows), project_id)
        return len(rows)

    async def _cache_summary(self, project_id: UUID, summary: UnitSummary) -> None:
        await self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(unit_summary=summary.model_dump(by_alias=True))
        )
        await self.db.commit()

    async def get_unit_summary(self, caller: CallerContext, project_id: UUID) -> Optional[UnitSummary]:
        """
        Return the project's unit summary.

        The cached summary is used unless its bedroom distribution is all
        "unknown", in which case it is rebuilt from stored units (inferring
        bedrooms from custom fields) and written back best-effort.

        Returns:
            The summary, or None when the project has no units
        """
        project = await self.get_project(caller, project_id)

        if project.unit_summary:
            try:
                cached = UnitSummary.model_validate(project.unit_summary)
            except pydantic.ValidationError:
                logger.warning("Discarding malformed cached summary for project %s", project_id)
                cached = None
            if cached and not cached.has_only_unknown_bedrooms():
                return cached
            logger.info("Cached summary for project %s is stale, recomputing", project_id)

        result = await self.db.execute(
            select(Unit).where(Unit.project_id == project_id)
        )
        units = [unit_row_from_model(u) for u in result.scalars().all()]
        if not units:
            return None

        summary = generate_summary(units)
        await best_effort(
            f"cache unit summary for project {project_id}",
            self._cache_summary(project_id, summary),
            session=self.db,
        )
        return summary

    # ============================================
    # SPREADSHEET IMPORT
    # ============================================

    async def preview_import(
        self,
        caller: CallerContext,
        project_id: UUID,
        filename: str,
        content: bytes,
    ) -> ImportPreviewResponse:
        """Run the ingestion pipeline over an uploaded sheet without saving anything."""
        project = await self.get_project(caller, project_id)

        headers, rows = read_spreadsheet(content, filename)
        units, summary, header_mapping = process_unit_data(rows, headers, project.name)
        units, summary = collapse_duplicates(units, summary)

        return ImportPreviewResponse(
            headers=headers,
            header_mapping=header_mapping,
            units=units,
            summary=summary,
            rows_read=len(rows),
            rows_dropped=len(rows) - len(units),
        )

    async def _store_source_file(
        self,
        caller: CallerContext,
        project_id: UUID,
        filename: str,
        content: bytes,
    ) -> Optional[UUID]:
        """Keep the uploaded sheet as the project's source file. Best-effort."""
        stored: Dict[str, UUID] = {}

        async def store() -> None:
            content_type = SPREADSHEET_CONTENT_TYPES.get(
                filename.lower().rsplit(".", 1)[-1], "text/csv"
            )
            record = await FileService(self.db, self.storage).upload_file(
                caller, project_id, filename, content, content_type, FilePurpose.UNIT_DATA
            )
            await self.db.execute(
                update(Project)
                .where(Project.id == project_id)
                .values(source_file_id=record.id)
            )
            await self.db.commit()
            stored['id'] = record.id

        await best_effort(
            f"store source file {filename} for project {project_id}",
            store(),
            session=self.db,
        )
        return stored.get('id')

    async def import_units(
        self,
        caller: CallerContext,
        project_id: UUID,
        filename: str,
        content: bytes,
    ) -> ImportResultResponse:
        """Read, normalize and persist an uploaded sheet."""
        project = await self.get_mutable_project(caller, project_id)

        headers, rows = read_spreadsheet(content, filename)
        units, summary, header_mapping = process_unit_data(rows, headers, project.name)
        units, summary = collapse_duplicates(units, summary)
        if not units:
            raise ValidationError("No rows with a unit number or unit code were found")

        saved = await self.save_unit_data(caller, project_id, units, summary)
        source_file_id = await self._store_source_file(caller, project_id, filename, content)

        return ImportResultResponse(
            project_id=project_id,
            units_saved=saved,
            rows_dropped=len(rows) - len(units),
            header_mapping=header_mapping,
            summary=summary,
            source_file_id=source_file_id,
        )
