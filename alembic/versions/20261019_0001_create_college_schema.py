"""create college portal schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_departments"),
        sa.UniqueConstraint("code", name="uq_departments_code"),
    )
    op.create_table(
        "programs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_programs_department_id_departments",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_programs"),
        sa.UniqueConstraint("code", name="uq_programs_code"),
    )
    op.create_table(
        "sections",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("academic_year", sa.Integer(), nullable=True),
        sa.Column("program_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["program_id"],
            ["programs.id"],
            name="fk_sections_program_id_programs",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sections"),
    )
    op.create_index("ix_sections_program_id", "sections", ["program_id"], unique=False)
    op.create_table(
        "academic_terms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_academic_terms"),
    )
    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_subjects"),
        sa.UniqueConstraint("code", name="uq_subjects_code"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, comment="Login identity; stored lower-cased"),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False, comment="STUDENT, STAFF, ADMIN"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_role", "users", ["role"], unique=False)
    op.create_index("ux_users_email_lower", "users", [sa.text("lower(email)")], unique=True)
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("roll_number", sa.String(length=64), nullable=False),
        sa.Column("admission_year", sa.Integer(), nullable=False),
        sa.Column("current_semester", sa.Integer(), nullable=False),
        sa.Column("program_id", sa.Integer(), nullable=False),
        sa.Column("section_id", sa.Integer(), nullable=False),
        sa.Column("guardian_email", sa.String(length=320), nullable=True),
        sa.Column("guardian_phone", sa.String(length=32), nullable=True, comment="E.164 format, e.g. +919876543210"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_students_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["program_id"], ["programs.id"], name="fk_students_program_id_programs"),
        sa.ForeignKeyConstraint(["section_id"], ["sections.id"], name="fk_students_section_id_sections"),
        sa.PrimaryKeyConstraint("id", name="pk_students"),
        sa.UniqueConstraint("user_id", name="uq_students_user_id"),
        sa.UniqueConstraint("roll_number", name="uq_students_roll_number"),
    )
    op.create_index("ix_students_section_id", "students", ["section_id"], unique=False)
    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("designation", sa.String(length=120), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_staff_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], name="fk_staff_department_id_departments"),
        sa.PrimaryKeyConstraint("id", name="pk_staff"),
        sa.UniqueConstraint("user_id", name="uq_staff_user_id"),
        sa.UniqueConstraint("employee_id", name="uq_staff_employee_id"),
    )

    op.create_table(
        "class_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("section_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("term_id", sa.Integer(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_min", sa.Integer(), nullable=False),
        sa.Column("room", sa.String(length=64), nullable=True),
        sa.Column("taken_by_staff_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["section_id"], ["sections.id"], name="fk_class_sessions_section_id_sections"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], name="fk_class_sessions_subject_id_subjects"),
        sa.ForeignKeyConstraint(["term_id"], ["academic_terms.id"], name="fk_class_sessions_term_id_academic_terms"),
        sa.ForeignKeyConstraint(["taken_by_staff_id"], ["staff.id"], name="fk_class_sessions_taken_by_staff_id_staff"),
        sa.PrimaryKeyConstraint("id", name="pk_class_sessions"),
    )
    op.create_index("ix_class_sessions_section_term", "class_sessions", ["section_id", "term_id"], unique=False)
    op.create_index("ix_class_sessions_taken_by", "class_sessions", ["taken_by_staff_id"], unique=False)
    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, comment="PRESENT, ABSENT, LATE, EXCUSED"),
        sa.Column("marked_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["session_id"],
            ["class_sessions.id"],
            name="fk_attendance_session_id_class_sessions",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name="fk_attendance_student_id_students",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], name="fk_attendance_subject_id_subjects"),
        sa.PrimaryKeyConstraint("id", name="pk_attendance"),
        sa.UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),
    )
    op.create_index("ix_attendance_marked_at_status", "attendance", ["marked_at", "status"], unique=False)
    op.create_table(
        "assessments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("max_marks", sa.Integer(), nullable=False),
        sa.Column("weightage", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("section_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("term_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["section_id"], ["sections.id"], name="fk_assessments_section_id_sections"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], name="fk_assessments_subject_id_subjects"),
        sa.ForeignKeyConstraint(["term_id"], ["academic_terms.id"], name="fk_assessments_term_id_academic_terms"),
        sa.ForeignKeyConstraint(["created_by_id"], ["staff.id"], name="fk_assessments_created_by_id_staff"),
        sa.PrimaryKeyConstraint("id", name="pk_assessments"),
    )
    op.create_table(
        "marks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("assessment_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("marks_obtained", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["assessment_id"],
            ["assessments.id"],
            name="fk_marks_assessment_id_assessments",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name="fk_marks_student_id_students",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_marks"),
        sa.UniqueConstraint("assessment_id", "student_id", name="uq_marks_assessment_student"),
    )

    op.create_table(
        "holidays",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_holidays"),
        sa.UniqueConstraint("date", "name", name="uq_holidays_date_name"),
    )
    op.create_index("ix_holidays_date", "holidays", ["date"], unique=False)
    op.create_table(
        "message_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("message_type", sa.String(length=32), nullable=False),
        sa.Column("channel", sa.String(length=16), nullable=False, comment="EMAIL, SMS"),
        sa.Column("status", sa.String(length=16), nullable=False, comment="SENT, FAILED"),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name="fk_message_logs_student_id_students",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_message_logs"),
    )
    op.create_index("ix_message_logs_student_id", "message_logs", ["student_id"], unique=False)
    op.create_index("ix_message_logs_type_channel", "message_logs", ["message_type", "channel"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_message_logs_type_channel", table_name="message_logs")
    op.drop_index("ix_message_logs_student_id", table_name="message_logs")
    op.drop_table("message_logs")
    op.drop_index("ix_holidays_date", table_name="holidays")
    op.drop_table("holidays")
    op.drop_table("marks")
    op.drop_table("assessments")
    op.drop_index("ix_attendance_marked_at_status", table_name="attendance")
    op.drop_table("attendance")
    op.drop_index("ix_class_sessions_taken_by", table_name="class_sessions")
    op.drop_index("ix_class_sessions_section_term", table_name="class_sessions")
    op.drop_table("class_sessions")
    op.drop_table("staff")
    op.drop_index("ix_students_section_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ux_users_email_lower", table_name="users")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
    op.drop_table("subjects")
    op.drop_table("academic_terms")
    op.drop_index("ix_sections_program_id", table_name="sections")
    op.drop_table("sections")
    op.drop_table("programs")
    op.drop_table("departments")
