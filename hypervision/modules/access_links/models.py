# Supabase tables: board_access_links, test_bu_access_links
# This file documents the expected database schema and names the tables
# and columns each link scope reads and writes.
# Actual operations are handled via Supabase SDK in repository.py

"""
Expected Supabase table structure (board_access_links):
- id: uuid (primary key, default: gen_random_uuid())
- board_id: uuid (foreign key to board.id, not null)
- role: text (not null) - values: viewer, editor
- password_hash: text (not null) - bcrypt hash, never returned by the API
- expires_at: timestamptz (nullable) - null means the link never expires
- created_at: timestamptz (default: now())

Expected Supabase table structure (test_bu_access_links):
- id: uuid (primary key, default: gen_random_uuid())
- business_unit_id: uuid (foreign key to test_business_units.id, not null)
- password_hash: text (not null)
- created_by: uuid (foreign key to users.id, not null)
- expires_at: timestamptz (nullable)
- created_at: timestamptz (default: now())

Gated resources read on redemption:
- board, board_snapshots (board_id, data jsonb, updated_at)
- test_business_units, test_environments (variables), test_workflows (flow_data),
  test_workflow_environments (flow_data_override); JSON columns may hold text
"""

from dataclasses import dataclass

BOARD_TABLE = "board"
BOARD_PERMISSIONS_TABLE = "board_permissions"
BOARD_SNAPSHOTS_TABLE = "board_snapshots"
CLIENTS_TABLE = "test_clients"
BUSINESS_UNITS_TABLE = "test_business_units"
BU_PERMISSIONS_TABLE = "test_bu_permissions"
ENVIRONMENTS_TABLE = "test_environments"
WORKFLOWS_TABLE = "test_workflows"
WORKFLOW_ENVIRONMENTS_TABLE = "test_workflow_environments"


@dataclass(frozen=True)
class LinkScope:
    """Which kind of resource a link unlocks and where its rows live."""
    kind: str
    table: str
    resource_column: str
    share_path: str
    has_role: bool
    label: str
    records_creator: bool = False

    def list_columns(self) -> str:
        columns = ["id", self.resource_column]
        if self.has_role:
            columns.append("role")
        columns += ["expires_at", "created_at"]
        return ", ".join(columns)

    def share_url(self, base_url: str, link_id: str) -> str:
        return f"{base_url.rstrip('/')}{self.share_path}{link_id}"


BOARD_SCOPE = LinkScope(
    kind="board",
    table="board_access_links",
    resource_column="board_id",
    share_path="/share/",
    has_role=True,
    label="board",
)

BUSINESS_UNIT_SCOPE = LinkScope(
    kind="business_unit",
    table="test_bu_access_links",
    resource_column="business_unit_id",
    share_path="/customer/login/",
    has_role=False,
    label="business unit",
    records_creator=True,
)
