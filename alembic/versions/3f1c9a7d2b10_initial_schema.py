"""initial schema: users, projects, contributions, courses, enrollments, notifications

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role_enum = sa.Enum("admin", "user", name="user_role_enum")
project_status_enum = sa.Enum("active", "completed", "paused", name="project_status_enum")
contribution_type_enum = sa.Enum(
    "monetary", "time", "resource", name="contribution_type_enum"
)
payment_status_enum = sa.Enum(
    "pending", "completed", "failed", name="payment_status_enum"
)
course_category_enum = sa.Enum(
    "digital",
    "primary",
    "secondary",
    "vocational",
    "adult",
    "language",
    "stem",
    name="course_category_enum",
)
course_level_enum = sa.Enum(
    "beginner", "intermediate", "advanced", name="course_level_enum"
)
enrollment_status_enum = sa.Enum(
    "active", "completed", "dropped", name="enrollment_status_enum"
)

now = sa.text("CURRENT_TIMESTAMP")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column(
            "created_at", sa.TIMESTAMP(timezone=True), server_default=now, nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("sdg_id", sa.Integer(), nullable=False),
        sa.Column("creator_id", sa.Integer(), nullable=False),
        sa.Column("status", project_status_enum, nullable=False),
        sa.Column("target_amount", sa.Float(), nullable=False),
        sa.Column("current_amount", sa.Float(), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=now),
        sa.CheckConstraint("sdg_id BETWEEN 1 AND 17", name="ck_projects_sdg_range"),
        sa.CheckConstraint("target_amount >= 0", name="ck_projects_target_non_negative"),
        sa.CheckConstraint("current_amount >= 0", name="ck_projects_current_non_negative"),
        sa.CheckConstraint("progress BETWEEN 0 AND 100", name="ck_projects_progress_range"),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_projects_sdg_id", "projects", ["sdg_id"])
    op.create_index("ix_projects_creator_id", "projects", ["creator_id"])
    op.create_index("ix_projects_status", "projects", ["status"])

    op.create_table(
        "contributions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("type", contribution_type_enum, nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column("transaction_code", sa.String(), nullable=True),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=now),
        sa.CheckConstraint("amount >= 0", name="ck_contributions_amount_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contributions_user_id", "contributions", ["user_id"])
    op.create_index("ix_contributions_project_id", "contributions", ["project_id"])
    op.create_index(
        "ix_contributions_status_type", "contributions", ["payment_status", "type"]
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=False),
        sa.Column("category", course_category_enum, nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("level", course_level_enum, nullable=False),
        sa.Column("duration", sa.Float(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=False),
        sa.Column("lessons", sa.Integer(), nullable=False),
        sa.Column("certificate", sa.Boolean(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("students_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=now),
        sa.CheckConstraint("price >= 0", name="ck_courses_price_non_negative"),
        sa.CheckConstraint("rating BETWEEN 0 AND 5", name="ck_courses_rating_range"),
        sa.ForeignKeyConstraint(["instructor_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_courses_instructor_id", "courses", ["instructor_id"])
    op.create_index("ix_courses_category", "courses", ["category"])
    op.create_index("ix_courses_level", "courses", ["level"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column("transaction_code", sa.String(), nullable=True),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("status", enrollment_status_enum, nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column("completed_lessons", sa.Integer(), nullable=False),
        sa.Column("total_lessons", sa.Integer(), nullable=False),
        sa.Column("time_spent", sa.Integer(), nullable=False),
        sa.Column("grade", sa.Float(), nullable=False),
        sa.Column("enrollment_date", sa.DateTime(timezone=True), server_default=now),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_accessed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=now),
        sa.CheckConstraint("progress BETWEEN 0 AND 100", name="ck_enrollments_progress_range"),
        sa.CheckConstraint("grade BETWEEN 0 AND 100", name="ck_enrollments_grade_range"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_payment_status", "enrollments", ["payment_status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=now),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index(
        "ix_notifications_user_created", "notifications", ["user_id", "created_at"]
    )


def downgrade():
    op.drop_table("notifications")
    op.drop_table("enrollments")
    op.drop_table("courses")
    op.drop_table("contributions")
    op.drop_table("projects")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        enrollment_status_enum,
        course_level_enum,
        course_category_enum,
        payment_status_enum,
        contribution_type_enum,
        project_status_enum,
        user_role_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
