"""baseline_init_schema

Revision ID: 000000000000
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the users, books, collection, reading session, goal, review and
event log tables. Column types are portable so the same revision runs on
PostgreSQL and SQLite.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '000000000000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


READING_STATUS = sa.Enum('not_started', 'reading', 'finished', name='readingstatus')
GOAL_TYPE = sa.Enum('minutes', 'hours', 'pages', 'books', name='goaltype')
GOAL_FREQUENCY = sa.Enum('daily', 'weekly', 'monthly', name='goalfrequency')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('auth_user_id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('favorite_genres', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_auth_user_id'), 'users', ['auth_user_id'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=False)

    op.create_table(
        'books',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('author', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('release_year', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('page_count', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('ratings_count', sa.Integer(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('moods', sa.JSON(), nullable=False),
        sa.Column('genres', sa.JSON(), nullable=False),
        sa.Column('cover_image_url', sa.String(), nullable=True),
        sa.Column('cover_image_width', sa.Integer(), nullable=True),
        sa.Column('cover_image_height', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_books_title'), 'books', ['title'], unique=False)
    op.create_index(op.f('ix_books_slug'), 'books', ['slug'], unique=True)

    op.create_table(
        'book_collection_entries',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('book_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('progress', sa.Integer(), nullable=False),
        sa.Column('is_bookmarked', sa.Boolean(), nullable=False),
        sa.Column('status', READING_STATUS, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['book_id'], ['books.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'book_id', name='uq_book_collection_user_book')
    )
    op.create_index(op.f('ix_book_collection_entries_user_id'), 'book_collection_entries', ['user_id'], unique=False)
    op.create_index(op.f('ix_book_collection_entries_book_id'), 'book_collection_entries', ['book_id'], unique=False)

    op.create_table(
        'reading_sessions',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('entry_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('pages_read', sa.Integer(), nullable=False),
        sa.Column('minutes_read', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['entry_id'], ['book_collection_entries.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reading_sessions_entry_id'), 'reading_sessions', ['entry_id'], unique=False)
    op.create_index(op.f('ix_reading_sessions_start_time'), 'reading_sessions', ['start_time'], unique=False)

    op.create_table(
        'reading_goals',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('type', GOAL_TYPE, nullable=False),
        sa.Column('frequency', GOAL_FREQUENCY, nullable=False),
        sa.Column('target', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    op.create_table(
        'reviews',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('book_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['book_id'], ['books.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reviews_book_id'), 'reviews', ['book_id'], unique=False)
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'], unique=False)

    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=True),
        sa.Column('event_name', sa.String(), nullable=False),
        sa.Column('properties', sa.JSON(), nullable=True),
        sa.Column('request_id', sa.String(), nullable=True),
        sa.Column('session_id', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_event_logs_created_at'), 'event_logs', ['created_at'], unique=False)
    op.create_index(op.f('ix_event_logs_event_name'), 'event_logs', ['event_name'], unique=False)
    op.create_index(op.f('ix_event_logs_user_id'), 'event_logs', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_event_logs_user_id'), table_name='event_logs')
    op.drop_index(op.f('ix_event_logs_event_name'), table_name='event_logs')
    op.drop_index(op.f('ix_event_logs_created_at'), table_name='event_logs')
    op.drop_table('event_logs')
    op.drop_index(op.f('ix_reviews_user_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_book_id'), table_name='reviews')
    op.drop_table('reviews')
    op.drop_table('reading_goals')
    op.drop_index(op.f('ix_reading_sessions_start_time'), table_name='reading_sessions')
    op.drop_index(op.f('ix_reading_sessions_entry_id'), table_name='reading_sessions')
    op.drop_table('reading_sessions')
    op.drop_index(op.f('ix_book_collection_entries_book_id'), table_name='book_collection_entries')
    op.drop_index(op.f('ix_book_collection_entries_user_id'), table_name='book_collection_entries')
    op.drop_table('book_collection_entries')
    op.drop_index(op.f('ix_books_slug'), table_name='books')
    op.drop_index(op.f('ix_books_title'), table_name='books')
    op.drop_table('books')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_auth_user_id'), table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    GOAL_FREQUENCY.drop(bind, checkfirst=True)
    GOAL_TYPE.drop(bind, checkfirst=True)
    READING_STATUS.drop(bind, checkfirst=True)
