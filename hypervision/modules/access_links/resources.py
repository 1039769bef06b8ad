from supabase import Client
from pydantic import ValidationError
from hypervision.core.exceptions import PersistenceError
from hypervision.modules.access_links import models
from hypervision.modules.access_links.schemas import (
    Board, Snapshot, BusinessUnit, Environment, Workflow, WorkflowEnvironment
)
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class GatedResourceReader:
    """Read-only access to the resources a verified link unlocks."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _rows(self, table: str, query) -> List[Dict[str, Any]]:
        try:
            result = query.execute()
        except Exception as e:
            logger.error(f"Error reading {table}: {e}")
            raise PersistenceError(f"failed to read {table}") from e
        return result.data or []

    def _decode_all(self, table: str, model, rows: List[Dict[str, Any]]) -> list:
        try:
            return [model(**row) for row in rows]
        except ValidationError as e:
            raise PersistenceError(f"failed to parse {table}", context={"errors": e.errors()}) from e

    def _first(self, table: str, model, column: str, value: str):
        rows = self._rows(
            table,
            self.supabase.table(table).select("*").eq(column, value).limit(1),
        )
        if not rows:
            return None
        return self._decode_all(table, model, rows[:1])[0]

    def get_board(self, board_id: str) -> Optional[Board]:
        return self._first(models.BOARD_TABLE, Board, "id", board_id)

    def get_latest_snapshot(self, board_id: str) -> Optional[Snapshot]:
        rows = self._rows(
            models.BOARD_SNAPSHOTS_TABLE,
            self.supabase.table(models.BOARD_SNAPSHOTS_TABLE)
                .select("*")
                .eq("board_id", board_id)
                .order("updated_at", desc=True)
                .limit(1),
        )
        if not rows:
            return None
        return self._decode_all(models.BOARD_SNAPSHOTS_TABLE, Snapshot, rows)[0]

    def get_business_unit(self, business_unit_id: str) -> Optional[BusinessUnit]:
        return self._first(models.BUSINESS_UNITS_TABLE, BusinessUnit, "id", business_unit_id)

    def list_environments(self, business_unit_id: str) -> List[Environment]:
        rows = self._rows(
            models.ENVIRONMENTS_TABLE,
            self.supabase.table(models.ENVIRONMENTS_TABLE).select("*").eq("business_unit_id", business_unit_id),
        )
        return self._decode_all(models.ENVIRONMENTS_TABLE, Environment, rows)

    def list_workflows(self, business_unit_id: str) -> List[Workflow]:
        rows = self._rows(
            models.WORKFLOWS_TABLE,
            self.supabase.table(models.WORKFLOWS_TABLE).select("*").eq("business_unit_id", business_unit_id),
        )
        return self._decode_all(models.WORKFLOWS_TABLE, Workflow, rows)

    def list_workflow_environments(self, environment_ids: List[str]) -> List[WorkflowEnvironment]:
        if not environment_ids:
            return []
        rows = self._rows(
            models.WORKFLOW_ENVIRONMENTS_TABLE,
            self.supabase.table(models.WORKFLOW_ENVIRONMENTS_TABLE).select("*").in_("environment_id", environment_ids),
        )
        return self._decode_all(models.WORKFLOW_ENVIRONMENTS_TABLE, WorkflowEnvironment, rows)
