"""
db/models/org.py

Organisational reference data: departments, programs, sections, terms, subjects.

These tables are looked up (never created) by the bulk import pipeline.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.user import Staff, Student


class Department(Base, TimestampMixin):
    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    programs: Mapped[list["Program"]] = relationship("Program", back_populates="department")
    staff: Mapped[list["Staff"]] = relationship("Staff", back_populates="department")

    def __repr__(self) -> str:
        return f"<Department id={self.id} code={self.code!r}>"


class Program(Base, TimestampMixin):
    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    department_id: Mapped[int | None] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
    )

    department: Mapped["Department | None"] = relationship("Department", back_populates="programs")
    sections: Mapped[list["Section"]] = relationship("Section", back_populates="program")

    def __repr__(self) -> str:
        return f"<Program id={self.id} code={self.code!r}>"


class Section(Base, TimestampMixin):
    __tablename__ = "sections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    academic_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    program_id: Mapped[int] = mapped_column(
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
    )

    program: Mapped["Program"] = relationship("Program", back_populates="sections")
    students: Mapped[list["Student"]] = relationship("Student", back_populates="section")

    __table_args__ = (Index("ix_sections_program_id", "program_id"),)

    def __repr__(self) -> str:
        return f"<Section id={self.id} name={self.name!r} program_id={self.program_id}>"


class AcademicTerm(Base, TimestampMixin):
    __tablename__ = "academic_terms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)


class Subject(Base, TimestampMixin):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
