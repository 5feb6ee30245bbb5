from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.admission import Admission
from crm.database.models.application import Application
from crm.database.models.auth import User
from crm.database.models.lead import Lead
from crm.database.models.student import Student
from crm.exceptions import Conflict
from crm.schema.admission import AdmissionResponse
from crm.schema.application import ApplicationResponse
from crm.schema.student import StudentCreate, StudentConvert, StudentUpdate, StudentResponse
from crm.utils.activity import log_activity, log_changes, transfer_activities
from crm.utils.auth import get_current_user, get_access_scope
from crm.utils.codes import STUDENT_CODES, create_with_code
from crm.utils.records import (
    apply_updates,
    inherit_attribution,
    reattach,
    resolve_attachment,
    search_filter,
    snapshot,
    stamp_attribution,
)
from crm.utils.scope import AccessScope, get_scoped_or_404, list_scoped

student_router = APIRouter(prefix="/students", tags=["Students"])


def _insert_student(db: Session, data: dict, current_user: User) -> Student:
    data = stamp_attribution(data, current_user, Student)
    data["region_id"], data["branch_id"] = resolve_attachment(
        db, data.get("region_id"), data.get("branch_id")
    )
    db_student = Student(**data, created_by=current_user.id)
    create_with_code(db, STUDENT_CODES, db_student)
    log_activity(
        db, "student", db_student.id, "created", "Student record created",
        f"Student {db_student.name} was added to the system ({db_student.student_code})",
        user=current_user,
    )
    return db_student


@student_router.get("", response_model=List[StudentResponse])
def list_students(
    q: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    List students visible to the caller, most recent first.
    `q` searches name, email, target program and target country.
    """
    criteria = []
    if q:
        criteria.append(
            search_filter(Student, q, "name", "email", "target_program", "target_country")
        )
    if status_filter:
        criteria.append(Student.status == status_filter)
    return list_scoped(db, Student, scope, *criteria)


@student_router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
def create_student(
    student: StudentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a student and assign its daily student code (STD-YYMMDD-NNN).
    """
    db_student = _insert_student(db, student.model_dump(), current_user)
    db.commit()
    db.refresh(db_student)
    return db_student


@student_router.post(
    "/convert/{lead_id}",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
)
def convert_lead(
    lead_id: UUID,
    body: StudentConvert,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Convert a lead into a student.

    Contact details and attribution not given in the body are taken from the
    lead, and the lead's activity timeline moves over to the new student.
    """
    lead = get_scoped_or_404(db, Lead, lead_id, scope, "Lead")
    if db.query(Student).filter(Student.lead_id == lead.id).first():
        raise Conflict("Lead has already been converted to a student")

    data = body.model_dump()
    data["lead_id"] = lead.id
    data["name"] = data.get("name") or lead.name
    data["email"] = data.get("email") or lead.email
    data["phone"] = data.get("phone") or lead.phone
    data["target_country"] = data.get("target_country") or lead.country
    data["target_program"] = data.get("target_program") or lead.program
    data["english_proficiency"] = data.get("english_proficiency") or lead.elt
    inherit_attribution(data, lead, Student)

    db_student = _insert_student(db, data, current_user)
    transfer_activities(db, "lead", lead.id, "student", db_student.id)
    log_activity(
        db, "lead", lead.id, "converted", "Lead converted",
        f"Lead {lead.name} was converted to student {db_student.student_code}",
        user=current_user,
    )
    lead.status = "converted"
    db.commit()
    db.refresh(db_student)
    return db_student


@student_router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return get_scoped_or_404(db, Student, student_id, scope, "Student")


@student_router.get("/{student_id}/applications", response_model=List[ApplicationResponse])
def list_student_applications(
    student_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Applications of one student, if the student is visible to the caller.
    """
    student = get_scoped_or_404(db, Student, student_id, scope, "Student")
    return list_scoped(db, Application, scope, Application.student_id == student.id)


@student_router.get("/{student_id}/admissions", response_model=List[AdmissionResponse])
def list_student_admissions(
    student_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Admission decisions of one student, if the student is visible to the caller.
    """
    student = get_scoped_or_404(db, Student, student_id, scope, "Student")
    return list_scoped(db, Admission, scope, Admission.student_id == student.id)


@student_router.patch("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: UUID,
    student_update: StudentUpdate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Update a student; every changed field is written to the student's timeline.
    """
    db_student = get_scoped_or_404(db, Student, student_id, scope, "Student")
    update_data = student_update.model_dump(exclude_unset=True)
    reattach(db, db_student, update_data)

    before = snapshot(db_student, update_data.keys())
    apply_updates(db_student, update_data)
    log_changes(db, "student", db_student.id, before, update_data, user=current_user)
    db.commit()
    db.refresh(db_student)
    return db_student


@student_router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Delete a student together with its applications and admissions.
    """
    db_student = get_scoped_or_404(db, Student, student_id, scope, "Student")
    log_activity(
        db, "student", db_student.id, "deleted", "Student deleted",
        f"Student {db_student.name} was deleted from the system",
        user=current_user,
    )
    db.delete(db_student)
    db.commit()
