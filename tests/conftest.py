"""
Shared fixtures.

Supabase is replaced by in-memory stand-ins that honour the same method
contracts as AccessLinkRepository, AuthorizationOracle and GatedResourceReader,
so services and routes run end to end without a database.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

os.environ.setdefault("LOG_LEVEL", "WARNING")

from hypervision.core.exceptions import AuthorizationError  # noqa: E402
from hypervision.modules.access_links.models import BOARD_SCOPE, BUSINESS_UNIT_SCOPE, LinkScope  # noqa: E402
from hypervision.modules.access_links.schemas import (  # noqa: E402
    AccessLink, AccessLinkSummary, Board, Snapshot, BusinessUnit, Environment, Workflow, WorkflowEnvironment,
)
from hypervision.modules.access_links.service import BoardLinkService, BusinessUnitLinkService  # noqa: E402

OWNER_ID = "11111111-1111-1111-1111-111111111111"
STRANGER_ID = "22222222-2222-2222-2222-222222222222"
BOARD_ID = "b0a4d000-0000-0000-0000-000000000001"
BU_ID = "b0000000-0000-0000-0000-0000000000b1"
SHARE_BASE = "https://hypervision.test"


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryLinkRepository:
    def __init__(self, scope: LinkScope, clock: FakeClock):
        self.scope = scope
        self.clock = clock
        self.rows: Dict[str, AccessLink] = {}

    def insert(self, resource_id, password_hash, role=None, expires_at=None, created_by=None) -> AccessLink:
        link = AccessLink(
            id=str(uuid.uuid4()),
            resource_id=resource_id,
            role=role,
            password_hash=password_hash,
            expires_at=expires_at,
            created_at=self.clock(),
            created_by=created_by,
        )
        self.rows[link.id] = link
        return link

    def list_for_resource(self, resource_id):
        summary_fields = set(AccessLinkSummary.model_fields)
        return [
            AccessLinkSummary(**link.model_dump(include=summary_fields))
            for link in self.rows.values() if link.resource_id == resource_id
        ]

    def get(self, link_id):
        return self.rows.get(link_id)

    def delete(self, link_id, resource_id):
        link = self.rows.get(link_id)
        if link is not None and link.resource_id == resource_id:
            del self.rows[link_id]


class FakeOracle:
    """Grants manage-authority to OWNER_ID on everything it is told about."""

    def __init__(self):
        self.managers = set()

    def grant(self, scope: LinkScope, resource_id: str, user_id: str = OWNER_ID):
        self.managers.add((scope.kind, resource_id, user_id))

    def require_manage(self, scope, resource_id, user_id):
        if (scope.kind, resource_id, user_id) not in self.managers:
            raise AuthorizationError(f"not authorized to manage links for this {scope.label}")


class FakeResourceReader:
    def __init__(self):
        self.boards: Dict[str, Board] = {}
        self.snapshots: Dict[str, Snapshot] = {}
        self.business_units: Dict[str, BusinessUnit] = {}
        self.environments: List[Environment] = []
        self.workflows: List[Workflow] = []
        self.workflow_environments: List[WorkflowEnvironment] = []

    def get_board(self, board_id):
        return self.boards.get(board_id)

    def get_latest_snapshot(self, board_id):
        return self.snapshots.get(board_id)

    def get_business_unit(self, business_unit_id):
        return self.business_units.get(business_unit_id)

    def list_environments(self, business_unit_id):
        return [e for e in self.environments if e.business_unit_id == business_unit_id]

    def list_workflows(self, business_unit_id):
        return [w for w in self.workflows if w.business_unit_id == business_unit_id]

    def list_workflow_environments(self, environment_ids):
        # deliberately unfiltered; the service must drop foreign bindings itself
        return list(self.workflow_environments)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def oracle():
    oracle = FakeOracle()
    oracle.grant(BOARD_SCOPE, BOARD_ID)
    oracle.grant(BUSINESS_UNIT_SCOPE, BU_ID)
    return oracle


@pytest.fixture
def resources():
    reader = FakeResourceReader()
    reader.boards[BOARD_ID] = Board(id=BOARD_ID, name="Onboarding flow", owner_id=OWNER_ID)
    reader.snapshots[BOARD_ID] = Snapshot(
        board_id=BOARD_ID,
        data='{"nodes": [{"id": "n1"}], "edges": [], "flowInputs": "", "flowOutputs": ""}',
    )
    reader.business_units[BU_ID] = BusinessUnit(id=BU_ID, name="Lending", client_id="c1")
    reader.environments = [
        Environment(id="env-1", business_unit_id=BU_ID, name="staging", variables='{"region": "ap-south-1"}'),
        Environment(id="env-other", business_unit_id="someone-else", name="prod"),
    ]
    reader.workflows = [
        Workflow(id="wf-1", business_unit_id=BU_ID, name="KYC", flow_data='{"nodes": [], "edges": []}'),
    ]
    reader.workflow_environments = [
        WorkflowEnvironment(workflow_id="wf-1", environment_id="env-1", flow_data_override='{"nodes": [1]}'),
        WorkflowEnvironment(workflow_id="wf-9", environment_id="env-other"),
    ]
    return reader


@pytest.fixture
def board_service(clock, oracle, resources):
    return BoardLinkService(
        InMemoryLinkRepository(BOARD_SCOPE, clock), oracle, resources,
        share_base_url=SHARE_BASE, clock=clock,
    )


@pytest.fixture
def bu_service(clock, oracle, resources):
    return BusinessUnitLinkService(
        InMemoryLinkRepository(BUSINESS_UNIT_SCOPE, clock), oracle, resources,
        share_base_url=SHARE_BASE, clock=clock,
    )


@pytest.fixture(autouse=True)
def disable_rate_limits():
    from hypervision.core.rate_limit import limiter
    previous = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = previous


@pytest_asyncio.fixture
async def api_client(board_service, bu_service):
    from hypervision.core import dependencies
    from hypervision.main import app

    current_user = {"id": OWNER_ID}
    app.dependency_overrides[dependencies.get_current_user_id] = lambda: current_user
    app.dependency_overrides[dependencies.get_board_link_service] = lambda: board_service
    app.dependency_overrides[dependencies.get_public_board_link_service] = lambda: board_service
    app.dependency_overrides[dependencies.get_business_unit_link_service] = lambda: bu_service
    app.dependency_overrides[dependencies.get_public_business_unit_link_service] = lambda: bu_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        client.current_user = current_user
        yield client

    app.dependency_overrides.clear()
