"""
Core dependencies for route protection and service wiring
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from hypervision.config.settings import settings
from hypervision.core.authorization import AuthorizationOracle
from hypervision.database.supabase_client import get_supabase, get_service_supabase
from hypervision.modules.access_links.models import BOARD_SCOPE, BUSINESS_UNIT_SCOPE
from hypervision.modules.access_links.repository import AccessLinkRepository
from hypervision.modules.access_links.resources import GatedResourceReader
from hypervision.modules.access_links.service import BoardLinkService, BusinessUnitLinkService
from hypervision.modules.auth.service import AuthService
from supabase import Client

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    return auth_service.get_current_user(token)


def build_board_link_service(supabase: Client) -> BoardLinkService:
    return BoardLinkService(
        AccessLinkRepository(supabase, BOARD_SCOPE),
        AuthorizationOracle(supabase),
        GatedResourceReader(supabase),
        share_base_url=settings.get_frontend_url(),
    )


def build_business_unit_link_service(supabase: Client) -> BusinessUnitLinkService:
    return BusinessUnitLinkService(
        AccessLinkRepository(supabase, BUSINESS_UNIT_SCOPE),
        AuthorizationOracle(supabase),
        GatedResourceReader(supabase),
        share_base_url=settings.get_frontend_url(),
    )


def get_board_link_service(supabase: Client = Depends(get_supabase)) -> BoardLinkService:
    return build_board_link_service(supabase)


def get_business_unit_link_service(supabase: Client = Depends(get_supabase)) -> BusinessUnitLinkService:
    return build_business_unit_link_service(supabase)


def get_public_board_link_service(supabase: Client = Depends(get_service_supabase)) -> BoardLinkService:
    """Redemption carries no user JWT, so it reads with the service client."""
    return build_board_link_service(supabase)


def get_public_business_unit_link_service(supabase: Client = Depends(get_service_supabase)) -> BusinessUnitLinkService:
    return build_business_unit_link_service(supabase)
