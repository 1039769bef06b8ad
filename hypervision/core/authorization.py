"""
Owner-or-editor checks shared by every manage-authority gated operation
"""

from supabase import Client
from hypervision.core.exceptions import AuthorizationError
from hypervision.modules.access_links import models
from typing import Optional
import logging

logger = logging.getLogger(__name__)

ROLE_RANK = {"viewer": 1, "editor": 2}


def role_satisfies(granted: Optional[str], required: str) -> bool:
    return ROLE_RANK.get(granted or "", 0) >= ROLE_RANK.get(required, len(ROLE_RANK) + 1)


class AuthorizationOracle:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def has_board_role(self, board_id: str, user_id: str, required_role: str = "editor") -> bool:
        """Board owner, or a board_permissions grant at least as strong as required_role."""
        try:
            owned = self.supabase.table(models.BOARD_TABLE)\
                .select("id")\
                .eq("id", board_id)\
                .eq("owner_id", user_id)\
                .execute()
            if owned.data:
                return True

            perms = self.supabase.table(models.BOARD_PERMISSIONS_TABLE)\
                .select("role")\
                .eq("board_id", board_id)\
                .eq("user_id", user_id)\
                .execute()
            return any(role_satisfies(p.get("role"), required_role) for p in perms.data or [])
        except Exception as e:
            logger.error(f"Error checking board access for {board_id}: {e}")
            return False

    def has_business_unit_role(self, business_unit_id: str, user_id: str, required_role: str = "editor") -> bool:
        """Owner of the unit's parent client, or a BU permission grant at least as strong as required_role."""
        try:
            bu = self.supabase.table(models.BUSINESS_UNITS_TABLE)\
                .select("client_id")\
                .eq("id", business_unit_id)\
                .limit(1)\
                .execute()
            if not bu.data:
                return False
            client_id = bu.data[0].get("client_id")

            if client_id:
                owned = self.supabase.table(models.CLIENTS_TABLE)\
                    .select("id")\
                    .eq("id", client_id)\
                    .eq("owner_id", user_id)\
                    .execute()
                if owned.data:
                    return True

            perms = self.supabase.table(models.BU_PERMISSIONS_TABLE)\
                .select("role")\
                .eq("business_unit_id", business_unit_id)\
                .eq("user_id", user_id)\
                .execute()
            return any(role_satisfies(p.get("role"), required_role) for p in perms.data or [])
        except Exception as e:
            logger.error(f"Error checking business unit access for {business_unit_id}: {e}")
            return False

    def has_role(self, scope: models.LinkScope, resource_id: str, user_id: str, required_role: str = "editor") -> bool:
        if scope.kind == models.BOARD_SCOPE.kind:
            return self.has_board_role(resource_id, user_id, required_role)
        if scope.kind == models.BUSINESS_UNIT_SCOPE.kind:
            return self.has_business_unit_role(resource_id, user_id, required_role)
        raise ValueError(f"Unknown link scope: {scope.kind}")

    def require_manage(self, scope: models.LinkScope, resource_id: str, user_id: str) -> None:
        if not self.has_role(scope, resource_id, user_id, "editor"):
            logger.info(f"User {user_id} denied manage access to {scope.label} {resource_id}")
            raise AuthorizationError(
                f"not authorized to manage links for this {scope.label}",
                context={"resource_id": resource_id, "user_id": user_id},
            )
