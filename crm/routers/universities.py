import math
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.auth import User
from crm.database.models.university import (
    University,
    UniversityAcceptedElt,
    UniversityCourse,
    UniversityIntake,
)
from crm.schema.university import (
    CourseCreate,
    CoursePage,
    CourseResponse,
    UniversityCreate,
    UniversityDetail,
    UniversitySummary,
)
from crm.utils.auth import get_current_user, require_admin
from crm.utils.records import search_filter

university_router = APIRouter(prefix="/universities", tags=["Universities"])
course_router = APIRouter(prefix="/university-courses", tags=["Universities"])


def _get_university_or_404(db: Session, university_id: UUID) -> University:
    university = db.get(University, university_id)
    if not university:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="University not found",
        )
    return university


# ==================== UNIVERSITY ENDPOINTS ====================


@university_router.get("", response_model=List[UniversitySummary])
def list_universities(
    q: Optional[str] = None,
    country: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List the university catalogue, most recently added first.
    `q` searches name, country and campus city.
    """
    query = db.query(University)
    if q:
        query = query.filter(search_filter(University, q, "name", "country", "campus_city"))
    if country:
        query = query.filter(University.country == country)
    return query.order_by(University.created_at.desc(), University.name).all()


@university_router.post("", response_model=UniversityDetail, status_code=status.HTTP_201_CREATED)
def create_university(
    university: UniversityCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Add a university with its intakes, accepted English tests and courses.
    Only admins maintain the catalogue.
    """
    data = university.model_dump(exclude={"intakes", "accepted_elts", "courses"})
    db_university = University(**data)
    db_university.intakes = [UniversityIntake(intake_label=label) for label in university.intakes]
    db_university.accepted_elts = [
        UniversityAcceptedElt(elt_name=name) for name in university.accepted_elts
    ]
    db_university.courses = [UniversityCourse(**course.model_dump()) for course in university.courses]
    try:
        db.add(db_university)
        db.commit()
        db.refresh(db_university)
        return db_university
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"University with name '{university.name}' already exists",
        )


@university_router.get("/{university_id}", response_model=UniversityDetail)
def get_university(
    university_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _get_university_or_404(db, university_id)


@university_router.post(
    "/{university_id}/courses",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_course(
    university_id: UUID,
    course: CourseCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    db_university = _get_university_or_404(db, university_id)
    db_course = UniversityCourse(**course.model_dump(), university_id=db_university.id)
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    return db_course


@university_router.delete("/{university_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_university(
    university_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a university together with its intakes, tests and courses.
    """
    db_university = _get_university_or_404(db, university_id)
    db.delete(db_university)
    db.commit()


# ==================== COURSE CATALOGUE ====================


@course_router.get("", response_model=CoursePage)
def list_courses(
    q: Optional[str] = None,
    category: Optional[str] = None,
    top: Literal["top", "non-top", "all"] = "all",
    page: int = Query(1, ge=1),
    limit: int = Query(8, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Page through courses of every university, most recently added first.

    `q` searches course name, university name and country; `category="all"`
    and `top="all"` disable those filters.
    """
    query = db.query(UniversityCourse, University).outerjoin(
        University, University.id == UniversityCourse.university_id
    )
    q = (q or "").strip()
    if q:
        query = query.filter(
            search_filter(UniversityCourse, q, "name")
            | search_filter(University, q, "name", "country")
        )
    if category and category != "all":
        query = query.filter(UniversityCourse.category == category)
    if top != "all":
        query = query.filter(UniversityCourse.is_top_course.is_(top == "top"))

    total = query.count()
    rows = (
        query.order_by(UniversityCourse.created_at.desc(), UniversityCourse.name)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    total_pages = max(1, math.ceil(total / limit))

    return {
        "data": [
            {
                "id": course.id,
                "university_id": course.university_id,
                "name": course.name,
                "category": course.category,
                "fees": course.fees,
                "is_top_course": course.is_top_course,
                "university_name": university.name if university else None,
                "country": university.country if university else None,
            }
            for course, university in rows
        ],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages,
            "has_next_page": page < total_pages,
            "has_prev_page": page > 1,
        },
    }
