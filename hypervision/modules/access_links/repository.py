from supabase import Client
from pydantic import ValidationError
from hypervision.core.exceptions import PersistenceError
from hypervision.modules.access_links.models import LinkScope
from hypervision.modules.access_links.schemas import AccessLink, AccessLinkSummary
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class AccessLinkRepository:
    """Reads and writes access link rows for one scope, decoding them into typed records."""

    def __init__(self, supabase: Client, scope: LinkScope):
        self.supabase = supabase
        self.scope = scope

    def _decode(self, row: Dict[str, Any], model=AccessLink):
        data = dict(row)
        data["resource_id"] = data.pop(self.scope.resource_column, None)
        return model(**data)

    def insert(self, resource_id: str, password_hash: str, role: Optional[str] = None,
               expires_at: Optional[str] = None, created_by: Optional[str] = None) -> AccessLink:
        insert_data = {
            self.scope.resource_column: resource_id,
            "password_hash": password_hash,
        }
        if self.scope.has_role:
            insert_data["role"] = role
        if created_by:
            insert_data["created_by"] = created_by
        if expires_at:
            insert_data["expires_at"] = expires_at
        try:
            result = self.supabase.table(self.scope.table).insert(insert_data).execute()
        except Exception as e:
            logger.error(f"Error inserting {self.scope.label} link for {resource_id}: {e}")
            raise PersistenceError("failed to create link", context={"resource_id": resource_id}) from e

        if not result.data:
            raise PersistenceError("no link created", context={"resource_id": resource_id})
        try:
            return self._decode(result.data[0])
        except ValidationError as e:
            raise PersistenceError("failed to parse response", context={"errors": e.errors()}) from e

    def list_for_resource(self, resource_id: str) -> List[AccessLinkSummary]:
        """Public columns only, in whatever order the store returns them."""
        try:
            result = self.supabase.table(self.scope.table)\
                .select(self.scope.list_columns())\
                .eq(self.scope.resource_column, resource_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing {self.scope.label} links for {resource_id}: {e}")
            raise PersistenceError("failed to list links", context={"resource_id": resource_id}) from e

        links = []
        for row in result.data or []:
            try:
                links.append(self._decode(row, AccessLinkSummary))
            except (ValidationError, TypeError) as e:
                logger.warning(f"Skipping undecodable {self.scope.label} link row: {e}")
        return links

    def get(self, link_id: str) -> Optional[AccessLink]:
        try:
            result = self.supabase.table(self.scope.table)\
                .select("*")\
                .eq("id", link_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching {self.scope.label} link {link_id}: {e}")
            raise PersistenceError("failed to fetch link", context={"link_id": link_id}) from e

        if not result.data:
            return None
        try:
            return self._decode(result.data[0])
        except ValidationError as e:
            raise PersistenceError("failed to parse link", context={"link_id": link_id}) from e

    def delete(self, link_id: str, resource_id: str) -> None:
        """Delete by id and owning resource. Deleting nothing is not an error."""
        try:
            self.supabase.table(self.scope.table)\
                .delete()\
                .eq("id", link_id)\
                .eq(self.scope.resource_column, resource_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error revoking {self.scope.label} link {link_id}: {e}")
            raise PersistenceError("failed to revoke link", context={"link_id": link_id}) from e
