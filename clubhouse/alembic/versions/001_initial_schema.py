"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000

Creates every table from the current models:
- Identity: users, user_profiles
- Teams: teams, team_players (roster), team_requests (join requests and invitations)
- Club content: events, news
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables from scratch."""
    from clubhouse.database.db import Base
    from clubhouse.database import models  # noqa: F401

    # user_profiles.team_id <-> teams.manager_id is cyclic; the named
    # use_alter FK is added after both tables exist
    bind = op.get_bind()
    Base.metadata.create_all(bind=bind, checkfirst=True)


def downgrade() -> None:
    """Drop all tables."""
    from clubhouse.database.db import Base
    from clubhouse.database import models  # noqa: F401

    bind = op.get_bind()
    Base.metadata.drop_all(bind=bind, checkfirst=True)
