from hypervision.core.authorization import AuthorizationOracle
from hypervision.core.exceptions import NotFoundError, ExpiredError, InvalidCredentialError, InvalidRequestError
from hypervision.modules.access_links import credentials
from hypervision.modules.access_links.models import LinkScope, BOARD_SCOPE, BUSINESS_UNIT_SCOPE
from hypervision.modules.access_links.repository import AccessLinkRepository
from hypervision.modules.access_links.resources import GatedResourceReader
from hypervision.modules.access_links.schemas import (
    AccessLinkSummary, CreatedLink, VerifiedLink, PublicBoardResponse, PublicBusinessUnitResponse,
    normalize_role, MAX_EXPIRES_IN_HOURS,
)
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
from datetime import datetime, timedelta, timezone
import logging

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AccessLinkService(ABC):
    """
    Lifecycle of password-protected links for one scope.

    Active -> Expired (expires_at passed) or Active -> Revoked (row deleted).
    Every redemption re-reads the link and re-checks expiry and password.
    """

    scope: LinkScope

    def __init__(
        self,
        repository: AccessLinkRepository,
        oracle: AuthorizationOracle,
        resources: GatedResourceReader,
        share_base_url: str,
        clock: Clock = utc_now,
    ):
        self.repository = repository
        self.oracle = oracle
        self.resources = resources
        self.share_base_url = share_base_url
        self.clock = clock

    def create_link(self, resource_id: str, user_id: str, role: Optional[str] = None,
                    expires_in: Optional[int] = None) -> CreatedLink:
        """Create a link and return its password. This is the only time the password is disclosed."""
        self.oracle.require_manage(self.scope, resource_id, user_id)

        if isinstance(expires_in, int) and expires_in > MAX_EXPIRES_IN_HOURS:
            raise InvalidRequestError(
                f"expiresIn must be at most {MAX_EXPIRES_IN_HOURS} hours",
                context={"expires_in": expires_in},
            )

        stored_role = normalize_role(role) if self.scope.has_role else None

        password = credentials.generate_secret(credentials.LINK_PASSWORD_LENGTH)
        password_hash = credentials.hash_secret(password)

        expires_at = None
        if isinstance(expires_in, int) and not isinstance(expires_in, bool) and expires_in > 0:
            expires_at = self.clock() + timedelta(hours=expires_in)

        link = self.repository.insert(
            resource_id,
            password_hash,
            role=stored_role,
            expires_at=expires_at.isoformat() if expires_at else None,
            created_by=user_id if self.scope.records_creator else None,
        )
        logger.info(f"Created {self.scope.label} link {link.id} for {resource_id} (expires_at={expires_at})")

        return CreatedLink(
            link_id=link.id,
            password=password,
            expires_at=expires_at,
            share_url=self.scope.share_url(self.share_base_url, link.id),
        )

    def list_links(self, resource_id: str, user_id: str) -> List[AccessLinkSummary]:
        self.oracle.require_manage(self.scope, resource_id, user_id)
        return self.repository.list_for_resource(resource_id)

    def revoke_link(self, resource_id: str, link_id: str, user_id: str) -> None:
        self.oracle.require_manage(self.scope, resource_id, user_id)
        self.repository.delete(link_id, resource_id)
        logger.info(f"Revoked {self.scope.label} link {link_id} for {resource_id}")

    def verify(self, link_id: str, password: str) -> VerifiedLink:
        """Public: check the link exists, has not expired, and the password matches."""
        link = self.repository.get(link_id)
        if link is None:
            raise NotFoundError("link", link_id)

        if link.is_expired(self.clock()):
            logger.info(f"Rejected redemption of expired {self.scope.label} link {link_id}")
            raise ExpiredError(context={"link_id": link_id})

        if not credentials.verify_secret(password, link.password_hash):
            logger.info(f"Rejected redemption of {self.scope.label} link {link_id}: bad password")
            raise InvalidCredentialError(context={"link_id": link_id})

        return VerifiedLink(link_id=link.id, resource_id=link.resource_id, role=link.role)

    def fetch_gated_resource(self, link_id: str, token: str):
        verified = self.verify(link_id, token)
        return self.load_resource(verified)

    @abstractmethod
    def load_resource(self, verified: VerifiedLink):
        """Build the public payload for a verified link."""


class BoardLinkService(AccessLinkService):
    scope = BOARD_SCOPE

    def load_resource(self, verified: VerifiedLink) -> PublicBoardResponse:
        """Board row with the latest snapshot's data merged in as flow_data."""
        board = self.resources.get_board(verified.resource_id)
        if board is None:
            raise NotFoundError("board", verified.resource_id)

        payload = board.model_dump(mode="json")
        snapshot = self.resources.get_latest_snapshot(verified.resource_id)
        if snapshot is not None and snapshot.data is not None:
            payload["flow_data"] = snapshot.data

        return PublicBoardResponse(board=payload, role=verified.role or normalize_role(None))


class BusinessUnitLinkService(AccessLinkService):
    scope = BUSINESS_UNIT_SCOPE

    def verify(self, link_id: str, password: str) -> VerifiedLink:
        verified = super().verify(link_id, password)
        business_unit = self.resources.get_business_unit(verified.resource_id)
        if business_unit is not None:
            verified.resource_name = business_unit.name
        return verified

    def fetch_gated_resource(self, link_id: str, token: str) -> PublicBusinessUnitResponse:
        verified = AccessLinkService.verify(self, link_id, token)
        return self.load_resource(verified)

    def load_resource(self, verified: VerifiedLink) -> PublicBusinessUnitResponse:
        """Business unit with its environments, workflows and their environment bindings."""
        business_unit = self.resources.get_business_unit(verified.resource_id)
        if business_unit is None:
            raise NotFoundError("business unit", verified.resource_id)

        environments = self.resources.list_environments(business_unit.id)
        workflows = self.resources.list_workflows(business_unit.id)
        # only bindings to this unit's own environments
        environment_ids = [env.id for env in environments]
        allowed = set(environment_ids)
        workflow_environments = [
            we for we in self.resources.list_workflow_environments(environment_ids)
            if we.environment_id in allowed
        ]

        return PublicBusinessUnitResponse(
            business_unit=business_unit.model_dump(mode="json"),
            environments=[env.model_dump(mode="json") for env in environments],
            workflows=[wf.model_dump(mode="json") for wf in workflows],
            workflow_environments=[we.model_dump(mode="json") for we in workflow_environments],
        )
