from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.admission import Admission
from crm.database.models.application import Application
from crm.database.models.auth import User
from crm.database.models.student import Student
from crm.schema.admission import AdmissionResponse
from crm.schema.application import ApplicationCreate, ApplicationUpdate, ApplicationResponse
from crm.utils.activity import log_activity, log_changes
from crm.utils.auth import get_current_user, get_access_scope
from crm.utils.codes import APPLICATION_CODES, create_with_code
from crm.utils.records import (
    apply_updates,
    inherit_attribution,
    reattach,
    resolve_attachment,
    search_filter,
    snapshot,
    stamp_attribution,
    visible_reference,
)
from crm.utils.scope import AccessScope, get_scoped_or_404, list_scoped

application_router = APIRouter(prefix="/applications", tags=["Applications"])


@application_router.get("", response_model=List[ApplicationResponse])
def list_applications(
    q: Optional[str] = None,
    student_id: Optional[UUID] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    List applications visible to the caller, most recent first.
    `q` searches university, program, country and application code.
    """
    criteria = []
    if q:
        criteria.append(
            search_filter(Application, q, "university", "program", "country", "application_code")
        )
    if student_id:
        criteria.append(Application.student_id == student_id)
    if status_filter:
        criteria.append(Application.app_status == status_filter)
    return list_scoped(db, Application, scope, *criteria)


@application_router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
def create_application(
    application: ApplicationCreate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Create an application for a student and assign its daily application
    code (APP-YYMMDD-NNN).

    Counselor, admission officer, partner, branch and region left unset are
    taken from the student.
    """
    student = visible_reference(db, Student, application.student_id, scope, "Student")

    data = inherit_attribution(application.model_dump(), student, Application)
    data = stamp_attribution(data, current_user, Application)
    data["region_id"], data["branch_id"] = resolve_attachment(
        db, data.get("region_id"), data.get("branch_id")
    )
    db_application = Application(**data, created_by=current_user.id)
    create_with_code(db, APPLICATION_CODES, db_application)

    log_activity(
        db, "application", db_application.id, "created", "Application created",
        f"Application {db_application.application_code} to {db_application.university} "
        f"for {db_application.program}",
        user=current_user,
    )
    log_activity(
        db, "student", student.id, "application_added", "Application added",
        f"Application {db_application.application_code} to {db_application.university} was created",
        user=current_user,
    )
    db.commit()
    db.refresh(db_application)
    return db_application


@application_router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return get_scoped_or_404(db, Application, application_id, scope, "Application")


@application_router.get("/{application_id}/admissions", response_model=List[AdmissionResponse])
def list_application_admissions(
    application_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    application = get_scoped_or_404(db, Application, application_id, scope, "Application")
    return list_scoped(db, Admission, scope, Admission.application_id == application.id)


@application_router.patch("/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: UUID,
    application_update: ApplicationUpdate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Update an application; every changed field is written to its timeline.
    """
    db_application = get_scoped_or_404(db, Application, application_id, scope, "Application")
    update_data = application_update.model_dump(exclude_unset=True)
    reattach(db, db_application, update_data)

    before = snapshot(db_application, update_data.keys())
    apply_updates(db_application, update_data)
    log_changes(db, "application", db_application.id, before, update_data, user=current_user)
    db.commit()
    db.refresh(db_application)
    return db_application


@application_router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    db_application = get_scoped_or_404(db, Application, application_id, scope, "Application")
    log_activity(
        db, "student", db_application.student_id, "application_deleted", "Application deleted",
        f"Application {db_application.application_code} to {db_application.university} was deleted",
        user=current_user,
    )
    db.delete(db_application)
    db.commit()
