from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.admission import Admission
from crm.database.models.application import Application
from crm.database.models.auth import User
from crm.schema.admission import AdmissionCreate, AdmissionUpdate, AdmissionResponse
from crm.utils.activity import log_activity, log_changes
from crm.utils.auth import get_current_user, get_access_scope
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

admission_router = APIRouter(prefix="/admissions", tags=["Admissions"])


@admission_router.get("", response_model=List[AdmissionResponse])
def list_admissions(
    q: Optional[str] = None,
    decision: Optional[str] = None,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    List admission decisions visible to the caller, most recent first.
    `q` searches university and program.
    """
    criteria = []
    if q:
        criteria.append(search_filter(Admission, q, "university", "program"))
    if decision:
        criteria.append(Admission.decision == decision)
    return list_scoped(db, Admission, scope, *criteria)


@admission_router.post("", response_model=AdmissionResponse, status_code=status.HTTP_201_CREATED)
def create_admission(
    admission: AdmissionCreate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Record an admission decision against an application.

    Student, university, program and attribution come from the application
    unless given explicitly.
    """
    application = visible_reference(
        db, Application, admission.application_id, scope, "Application"
    )

    data = inherit_attribution(admission.model_dump(), application, Admission)
    data = stamp_attribution(data, current_user, Admission)
    data["region_id"], data["branch_id"] = resolve_attachment(
        db, data.get("region_id"), data.get("branch_id")
    )
    data["student_id"] = application.student_id
    data["university"] = data.get("university") or application.university
    data["program"] = data.get("program") or application.program

    db_admission = Admission(**data, created_by=current_user.id)
    db.add(db_admission)
    db.flush()
    log_activity(
        db, "application", application.id, "admission_recorded", "Admission decision recorded",
        f"{db_admission.university} decision: {db_admission.decision}",
        user=current_user,
    )
    log_activity(
        db, "student", application.student_id, "admission_recorded", "Admission decision recorded",
        f"{db_admission.university} decision: {db_admission.decision}",
        user=current_user,
    )
    db.commit()
    db.refresh(db_admission)
    return db_admission


@admission_router.get("/{admission_id}", response_model=AdmissionResponse)
def get_admission(
    admission_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return get_scoped_or_404(db, Admission, admission_id, scope, "Admission")


@admission_router.patch("/{admission_id}", response_model=AdmissionResponse)
def update_admission(
    admission_id: UUID,
    admission_update: AdmissionUpdate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    db_admission = get_scoped_or_404(db, Admission, admission_id, scope, "Admission")
    update_data = admission_update.model_dump(exclude_unset=True)
    reattach(db, db_admission, update_data)

    before = snapshot(db_admission, update_data.keys())
    apply_updates(db_admission, update_data)
    log_changes(db, "admission", db_admission.id, before, update_data, user=current_user)
    db.commit()
    db.refresh(db_admission)
    return db_admission


@admission_router.delete("/{admission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_admission(
    admission_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    db_admission = get_scoped_or_404(db, Admission, admission_id, scope, "Admission")
    log_activity(
        db, "application", db_admission.application_id, "admission_deleted",
        "Admission decision deleted",
        f"{db_admission.university} decision ({db_admission.decision}) was deleted",
        user=current_user,
    )
    db.delete(db_admission)
    db.commit()
