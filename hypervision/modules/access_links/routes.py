from fastapi import APIRouter, Depends, Request, Response
from hypervision.config.settings import settings
from hypervision.core.dependencies import (
    get_current_user_id, get_board_link_service, get_business_unit_link_service,
    get_public_board_link_service, get_public_business_unit_link_service,
)
from hypervision.core.exceptions import InvalidCredentialError
from hypervision.core.rate_limit import limiter
from hypervision.modules.access_links.schemas import (
    CreateLinkRequest, CreateLinkResponse, BoardAccessLinkResponse, BusinessUnitAccessLinkResponse,
    VerifyRequest, BoardVerifyResponse, BusinessUnitVerifyResponse,
    PublicBoardResponse, PublicBusinessUnitResponse, CreatedLink,
)
from hypervision.modules.access_links.service import BoardLinkService, BusinessUnitLinkService
from typing import List, Optional, Dict

router = APIRouter(tags=["access-links"])
public_router = APIRouter(prefix="/public", tags=["public-links"])


def _created(link: CreatedLink) -> CreateLinkResponse:
    return CreateLinkResponse(
        link_id=link.link_id,
        password=link.password,
        expires_at=link.expires_at,
        share_url=link.share_url,
    )


def _require_token(token: Optional[str]) -> str:
    if not token:
        raise InvalidCredentialError("token is required")
    return token


# ---- Board links (authenticated) ---------------------------------------------

@router.post("/boards/{board_id}/links", response_model=CreateLinkResponse, status_code=201)
def create_board_link(
    board_id: str,
    body: Optional[CreateLinkRequest] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: BoardLinkService = Depends(get_board_link_service)
):
    """Create a password-protected share link for a board (owner or editor)"""
    body = body or CreateLinkRequest()
    link = service.create_link(board_id, user_data["id"], role=body.role, expires_in=body.expires_in)
    return _created(link)


@router.get("/boards/{board_id}/links", response_model=List[BoardAccessLinkResponse])
def list_board_links(
    board_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: BoardLinkService = Depends(get_board_link_service)
):
    """List a board's share links (owner or editor)"""
    return [
        BoardAccessLinkResponse(
            id=link.id,
            board_id=link.resource_id,
            role=link.role,
            expires_at=link.expires_at,
            created_at=link.created_at,
        )
        for link in service.list_links(board_id, user_data["id"])
    ]


@router.delete("/boards/{board_id}/links/{link_id}", status_code=204)
def revoke_board_link(
    board_id: str,
    link_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: BoardLinkService = Depends(get_board_link_service)
):
    """Revoke a board share link; revoking a missing link still succeeds"""
    service.revoke_link(board_id, link_id, user_data["id"])
    return Response(status_code=204)


# ---- Business unit links (authenticated) -------------------------------------

@router.post("/business-units/{bu_id}/links", response_model=CreateLinkResponse, status_code=201)
def create_business_unit_link(
    bu_id: str,
    body: Optional[CreateLinkRequest] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: BusinessUnitLinkService = Depends(get_business_unit_link_service)
):
    """Create a customer login link for a business unit (client owner or BU editor)"""
    body = body or CreateLinkRequest()
    link = service.create_link(bu_id, user_data["id"], expires_in=body.expires_in)
    return _created(link)


@router.get("/business-units/{bu_id}/links", response_model=List[BusinessUnitAccessLinkResponse])
def list_business_unit_links(
    bu_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: BusinessUnitLinkService = Depends(get_business_unit_link_service)
):
    return [
        BusinessUnitAccessLinkResponse(
            id=link.id,
            business_unit_id=link.resource_id,
            expires_at=link.expires_at,
            created_at=link.created_at,
        )
        for link in service.list_links(bu_id, user_data["id"])
    ]


@router.delete("/business-units/{bu_id}/links/{link_id}", status_code=204)
def revoke_business_unit_link(
    bu_id: str,
    link_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: BusinessUnitLinkService = Depends(get_business_unit_link_service)
):
    service.revoke_link(bu_id, link_id, user_data["id"])
    return Response(status_code=204)


# ---- Public redemption (no auth) ---------------------------------------------

@public_router.post("/links/{link_id}/verify", response_model=BoardVerifyResponse)
@limiter.limit(settings.public_link_rate_limit)
def verify_board_link(
    request: Request,
    link_id: str,
    body: VerifyRequest,
    service: BoardLinkService = Depends(get_public_board_link_service)
):
    """Check a board link's password and report which board it unlocks"""
    verified = service.verify(link_id, body.password)
    return BoardVerifyResponse(board_id=verified.resource_id, role=verified.role or "viewer")


@public_router.get("/links/{link_id}/board", response_model=PublicBoardResponse)
@limiter.limit(settings.public_link_rate_limit)
def get_public_board(
    request: Request,
    link_id: str,
    token: Optional[str] = None,
    service: BoardLinkService = Depends(get_public_board_link_service)
):
    """Board data for a link; the password is resubmitted as ?token="""
    return service.fetch_gated_resource(link_id, _require_token(token))


@public_router.post("/bu-links/{link_id}/verify", response_model=BusinessUnitVerifyResponse)
@limiter.limit(settings.public_link_rate_limit)
def verify_business_unit_link(
    request: Request,
    link_id: str,
    body: VerifyRequest,
    service: BusinessUnitLinkService = Depends(get_public_business_unit_link_service)
):
    verified = service.verify(link_id, body.password)
    return BusinessUnitVerifyResponse(
        business_unit_id=verified.resource_id,
        business_unit_name=verified.resource_name or "",
    )


@public_router.get("/bu-links/{link_id}/data", response_model=PublicBusinessUnitResponse)
@limiter.limit(settings.public_link_rate_limit)
def get_public_business_unit_data(
    request: Request,
    link_id: str,
    token: Optional[str] = None,
    service: BusinessUnitLinkService = Depends(get_public_business_unit_link_service)
):
    """Environments, workflows and workflow environments of a business unit, for a link holder"""
    return service.fetch_gated_resource(link_id, _require_token(token))
