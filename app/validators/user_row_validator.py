"""
app/validators/user_row_validator.py

Validation of one row of the bulk user import.
"""

from __future__ import annotations

from collections.abc import Mapping

from app.domain.bulk_import import RowVerdict
from app.domain.college_import import NewUser, UserReferenceSnapshot
from app.validators.row_validator import BaseRowValidator
from db.models.user import UserRole

REQUIRED_FIELDS: tuple[str, ...] = ("name", "email", "rollNumber", "role")

_REFERENCE_COLUMNS: tuple[str, ...] = ("programId", "sectionId", "departmentId")

MIN_ADMISSION_YEAR = 1900
MAX_ADMISSION_YEAR = 2100


class UserRowValidator(BaseRowValidator):
    """
    Applies the user import checks in order, stopping at the first failure.

    1. required fields
    2. role and scalar formats
    3. role-dependent fields
    4. reference ids
    5. email uniqueness (skipped, not invalid)
    """

    def validate(
        self,
        row: Mapping[str, str],
        snapshot: UserReferenceSnapshot,
    ) -> RowVerdict[NewUser]:
        if self._missing_any(row, REQUIRED_FIELDS):
            return RowVerdict.reject(self._required_message(REQUIRED_FIELDS))

        role_raw = row["role"].strip()
        role = role_raw.upper()
        if role not in UserRole.ALL:
            allowed = ", ".join(sorted(UserRole.ALL))
            return RowVerdict.reject(f"Invalid role '{role_raw}'. Must be one of {allowed}.")

        email = row["email"].strip().lower()
        if not self._is_email(email):
            return RowVerdict.reject(f"Invalid email '{row['email'].strip()}'.")

        ids: dict[str, int | None] = {}
        for column in _REFERENCE_COLUMNS:
            raw = row.get(column)
            parsed = self._parse_int(raw)
            if parsed is None and not self._is_blank(raw):
                return RowVerdict.reject(f"Invalid {column}: {str(raw).strip()}")
            ids[column] = parsed

        admission_year_raw = row.get("admissionYear")
        admission_year = self._parse_int(admission_year_raw)
        if (admission_year is None and not self._is_blank(admission_year_raw)) or (
            admission_year is not None
            and not MIN_ADMISSION_YEAR <= admission_year <= MAX_ADMISSION_YEAR
        ):
            return RowVerdict.reject(f"Invalid admissionYear: {str(admission_year_raw).strip()}")

        if role == UserRole.STUDENT and (ids["programId"] is None or ids["sectionId"] is None):
            return RowVerdict.reject("Missing programId or sectionId")
        if role == UserRole.STAFF and ids["departmentId"] is None:
            return RowVerdict.reject("Missing departmentId")

        if role == UserRole.STUDENT:
            if ids["programId"] not in snapshot.program_ids:
                return RowVerdict.reject(f"Invalid programId: {ids['programId']}")
            if ids["sectionId"] not in snapshot.section_ids:
                return RowVerdict.reject(f"Invalid sectionId: {ids['sectionId']}")
        if role == UserRole.STAFF and ids["departmentId"] not in snapshot.department_ids:
            return RowVerdict.reject(f"Invalid departmentId: {ids['departmentId']}")

        if snapshot.email_taken(email):
            return RowVerdict.skip("Duplicate email")
        snapshot.claim_email(email)

        guardian_email = self._optional_string(row.get("guardianEmail"))
        return RowVerdict.accept(
            NewUser(
                name=row["name"].strip(),
                email=email,
                role=role,
                roll_number=row["rollNumber"].strip(),
                program_id=ids["programId"] if role == UserRole.STUDENT else None,
                section_id=ids["sectionId"] if role == UserRole.STUDENT else None,
                department_id=ids["departmentId"] if role == UserRole.STAFF else None,
                guardian_email=guardian_email.lower() if guardian_email else None,
                guardian_phone=self._optional_string(row.get("guardianPhone")),
                admission_year=admission_year,
                designation=self._optional_string(row.get("designation")),
            )
        )
