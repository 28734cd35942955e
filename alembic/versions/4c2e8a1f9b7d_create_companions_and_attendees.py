"""create_companions_and_attendees

Revision ID: 4c2e8a1f9b7d
Revises: 
Create Date: 2026-10-12 09:14:32.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c2e8a1f9b7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # One row per direction of a companion pair
    op.execute("""
        CREATE TABLE companions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            companion_user_id UUID NOT NULL,
            permission_level VARCHAR(20) NOT NULL DEFAULT 'none',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT companions_user_companion_unique UNIQUE (user_id, companion_user_id),
            CONSTRAINT chk_companions_permission_level
                CHECK (permission_level IN ('none', 'view', 'manage_all')),
            CONSTRAINT chk_companions_not_self CHECK (user_id <> companion_user_id)
        )
    """)
    op.execute("CREATE INDEX idx_companions_companion_user_id ON companions (companion_user_id)")
    op.execute("CREATE INDEX idx_companions_user_permission ON companions (user_id, permission_level)")

    # Polymorphic (item_type, item_id) reference, no foreign key on item_id
    op.execute("""
        CREATE TABLE attendees (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            item_type VARCHAR(20) NOT NULL,
            item_id UUID NOT NULL,
            permission_level VARCHAR(20) NOT NULL DEFAULT 'view',
            added_by UUID NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT attendees_user_item_unique UNIQUE (user_id, item_type, item_id),
            CONSTRAINT chk_attendees_item_type
                CHECK (item_type IN ('trip', 'flight', 'hotel', 'event', 'transportation', 'car_rental')),
            CONSTRAINT chk_attendees_permission_level CHECK (permission_level IN ('view', 'manage'))
        )
    """)
    op.execute("CREATE INDEX idx_attendees_item ON attendees (item_type, item_id)")
    op.execute("CREATE INDEX idx_attendees_user_id ON attendees (user_id)")
    op.execute("CREATE INDEX idx_attendees_added_by ON attendees (added_by)")


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("DROP TABLE IF EXISTS attendees")
    op.execute("DROP TABLE IF EXISTS companions")
