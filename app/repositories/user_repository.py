"""
app/repositories/user_repository.py

Writes for the bulk user import: the login identity and its role profile.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.user import Staff, Student, User


class UserRepository:
    """
    Creates users and their student or staff profiles inside the caller's
    transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def roll_number_exists(self, roll_number: str) -> bool:
        stmt = select(Student.id).where(Student.roll_number == roll_number).limit(1)
        return self._session.execute(stmt).first() is not None

    def employee_id_exists(self, employee_id: str) -> bool:
        stmt = select(Staff.id).where(Staff.employee_id == employee_id).limit(1)
        return self._session.execute(stmt).first() is not None

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return self._session.execute(stmt).scalars().first()

    def create_user(self, *, name: str, email: str, password_hash: str, role: str) -> User:
        """
        Insert the root user row and flush so its id is available.
        """

        user = User(name=name, email=email, password_hash=password_hash, role=role)
        self._session.add(user)
        self._session.flush()
        return user

    def create_student_profile(
        self,
        *,
        user_id: int,
        roll_number: str,
        program_id: int,
        section_id: int,
        admission_year: int,
        current_semester: int,
        guardian_email: str | None = None,
        guardian_phone: str | None = None,
    ) -> Student:
        student = Student(
            user_id=user_id,
            roll_number=roll_number,
            program_id=program_id,
            section_id=section_id,
            admission_year=admission_year,
            current_semester=current_semester,
            guardian_email=guardian_email,
            guardian_phone=guardian_phone,
        )
        self._session.add(student)
        self._session.flush()
        return student

    def create_staff_profile(
        self,
        *,
        user_id: int,
        employee_id: str,
        department_id: int,
        designation: str,
    ) -> Staff:
        staff = Staff(
            user_id=user_id,
            employee_id=employee_id,
            department_id=department_id,
            designation=designation,
        )
        self._session.add(staff)
        self._session.flush()
        return staff
