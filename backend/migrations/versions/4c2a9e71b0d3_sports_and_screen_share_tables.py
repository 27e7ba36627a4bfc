"""sports, games, scores and screen share tables

Revision ID: 4c2a9e71b0d3
Revises:
Create Date: 2025-09-14 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e71b0d3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=True),
            sa.Column('image', sa.String(length=512), nullable=True),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'sport',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
    )
    op.create_index('ix_sport_key', 'sport', ['key'], unique=True)

    op.create_table(
        'team',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sport_id', sa.Integer(), sa.ForeignKey('sport.id'), nullable=False),
        sa.Column('external_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('short_name', sa.String(length=64), nullable=True),
        sa.Column('logo_url', sa.String(length=512), nullable=True),
        sa.UniqueConstraint('sport_id', 'external_id', name='uq_team_sport_external'),
    )

    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sport_id', sa.Integer(), sa.ForeignKey('sport.id'), nullable=False),
        sa.Column('home_team_id', sa.Integer(), sa.ForeignKey('team.id'), nullable=False),
        sa.Column('away_team_id', sa.Integer(), sa.ForeignKey('team.id'), nullable=False),
        sa.Column('external_id', sa.String(length=64), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='SCHEDULED'),
        sa.Column('period', sa.Integer(), nullable=True),
        sa.Column('clock', sa.String(length=16), nullable=True),
        sa.Column('venue', sa.String(length=128), nullable=True),
        sa.Column('adapter', sa.String(length=32), nullable=True),
        sa.UniqueConstraint('sport_id', 'external_id', name='uq_game_sport_external'),
    )
    op.create_index('ix_game_sport_id', 'game', ['sport_id'])
    op.create_index('ix_game_start_time', 'game', ['start_time'])

    op.create_table(
        'game_score',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False, unique=True),
        sa.Column('home_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('away_score', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'screen_share_session',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('host_user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=True),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='ACTIVE'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('max_viewers', sa.Integer(), nullable=True),
        sa.Column('current_viewers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_screen_share_session_host_user_id', 'screen_share_session', ['host_user_id'])
    op.create_index('ix_screen_share_session_game_id', 'screen_share_session', ['game_id'])

    op.create_table(
        'screen_share_viewer',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.String(length=36), sa.ForeignKey('screen_share_session.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.Column('left_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_screen_share_viewer_session_id', 'screen_share_viewer', ['session_id'])


def downgrade():
    op.drop_index('ix_screen_share_viewer_session_id', table_name='screen_share_viewer')
    op.drop_table('screen_share_viewer')
    op.drop_index('ix_screen_share_session_game_id', table_name='screen_share_session')
    op.drop_index('ix_screen_share_session_host_user_id', table_name='screen_share_session')
    op.drop_table('screen_share_session')
    op.drop_table('game_score')
    op.drop_index('ix_game_start_time', table_name='game')
    op.drop_index('ix_game_sport_id', table_name='game')
    op.drop_table('game')
    op.drop_table('team')
    op.drop_index('ix_sport_key', table_name='sport')
    op.drop_table('sport')
