"""create trainers, dogs, assignments and classes

Revision ID: 3c1f0a9b7d21
Revises:
Create Date: 2026-10-17 09:12:03.418221

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c1f0a9b7d21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'trainers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'dogs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('initial_training_weeks', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('recall_week_start_date', sa.Date(), nullable=True),
        sa.Column('dropout_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "status IN ('not_yet_ift','in_training','ready_for_class','in_class',"
            "'graduated','paused','dropout')"
        ),
        sa.CheckConstraint('initial_training_weeks >= 0', name='ck_dogs_initial_weeks'),
    )
    op.create_index('ix_dogs_status', 'dogs', ['status'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('dog_id', sa.Integer(), sa.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('trainer_id', sa.Integer(), sa.ForeignKey('trainers.id'), nullable=True),
        sa.Column('week_start_date', sa.Date(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.CheckConstraint("type IN ('training','class','paused')"),
        sa.UniqueConstraint('dog_id', 'week_start_date', name='uq_assignment_dog_week'),
    )
    op.create_index('ix_assignments_dog_id', 'assignments', ['dog_id'])
    op.create_index('ix_assignments_trainer_id', 'assignments', ['trainer_id'])
    op.create_index('idx_assignments_trainer_week', 'assignments', ['trainer_id', 'week_start_date'])

    op.create_table(
        'classes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_classes_start_date', 'classes', ['start_date'])

    op.create_table(
        'class_assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('dog_id', sa.Integer(), sa.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('trainer_id', sa.Integer(), sa.ForeignKey('trainers.id'), nullable=True),
        sa.UniqueConstraint('class_id', 'dog_id', name='uq_class_assignment_dog'),
    )
    op.create_index('ix_class_assignments_class_id', 'class_assignments', ['class_id'])
    op.create_index('ix_class_assignments_dog_id', 'class_assignments', ['dog_id'])
    op.create_index('ix_class_assignments_trainer_id', 'class_assignments', ['trainer_id'])


def downgrade():
    op.drop_table('class_assignments')
    op.drop_table('classes')
    op.drop_table('assignments')
    op.drop_table('dogs')
    op.drop_table('trainers')
