"""Rename legacy underscore taxonomy setting keys to dotted keys

Revision ID: 002
Revises: 001
Create Date: 2026-10-17

An older back-fill wrote policy_categories / policy_departments /
policy_tags while organization creation wrote policy.categories etc.
Rows are renamed only where the organization has no dotted row yet;
remaining duplicates are left for an admin to resolve.
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

KEY_RENAMES = {
    "policy_categories": "policy.categories",
    "policy_departments": "policy.departments",
    "policy_tags": "policy.tags",
}


def upgrade() -> None:
    rename = sa.text("""
        UPDATE settings
        SET setting_key = :new_key, updated_at = CURRENT_TIMESTAMP
        WHERE setting_key = :old_key
          AND NOT EXISTS (
            SELECT 1 FROM settings AS canonical
            WHERE canonical.organization_id = settings.organization_id
              AND canonical.setting_key = :new_key
          )
        """)
    for old_key, new_key in KEY_RENAMES.items():
        op.execute(rename.bindparams(old_key=old_key, new_key=new_key))


def downgrade() -> None:
    # Renamed rows are indistinguishable from rows written with dotted keys
    pass
