"""
db/models/user.py

Login identities and their role profiles.

A ``User`` is the root record created by the bulk user import. Students and
staff members carry a one-to-one profile row keyed by ``user_id``; admins
have no profile.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.academics import Attendance, Mark
    from db.models.org import Department, Program, Section


class UserRole:
    STUDENT = "STUDENT"
    STAFF = "STAFF"
    ADMIN = "ADMIN"

    ALL: frozenset[str] = frozenset({STUDENT, STAFF, ADMIN})


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        comment="Login identity; stored lower-cased",
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=UserRole.STUDENT,
        comment="STUDENT, STAFF, ADMIN",
    )

    student: Mapped["Student | None"] = relationship("Student", back_populates="user", uselist=False)
    staff: Mapped["Staff | None"] = relationship("Staff", back_populates="user", uselist=False)

    __table_args__ = (Index("ix_users_role", "role"),)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"


# Logins are case-insensitive, so uniqueness is enforced on the folded value.
Index("ux_users_email_lower", func.lower(User.email), unique=True)


class Student(Base, TimestampMixin):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    roll_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    admission_year: Mapped[int] = mapped_column(Integer, nullable=False)
    current_semester: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id"), nullable=False)
    section_id: Mapped[int] = mapped_column(ForeignKey("sections.id"), nullable=False)
    guardian_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    guardian_phone: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="E.164 format, e.g. +919876543210",
    )

    user: Mapped[User] = relationship("User", back_populates="student")
    program: Mapped["Program"] = relationship("Program")
    section: Mapped["Section"] = relationship("Section", back_populates="students")
    attendance: Mapped[list["Attendance"]] = relationship("Attendance", back_populates="student")
    marks: Mapped[list["Mark"]] = relationship("Mark", back_populates="student")

    __table_args__ = (Index("ix_students_section_id", "section_id"),)

    def __repr__(self) -> str:
        return f"<Student id={self.id} roll_number={self.roll_number!r}>"


class Staff(Base, TimestampMixin):
    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), nullable=False)
    designation: Mapped[str] = mapped_column(String(120), nullable=False, default="Teacher")

    user: Mapped[User] = relationship("User", back_populates="staff")
    department: Mapped["Department"] = relationship("Department", back_populates="staff")

    def __repr__(self) -> str:
        return f"<Staff id={self.id} employee_id={self.employee_id!r}>"
