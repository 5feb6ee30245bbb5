from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.auth import User
from crm.database.models.organization import Region, Branch
from crm.schema.organization import (
    RegionCreate,
    RegionUpdate,
    RegionResponse,
    BranchCreate,
    BranchUpdate,
    BranchResponse,
)
from crm.utils.auth import get_current_user, require_admin

region_router = APIRouter(prefix="/regions", tags=["Regions"])
branch_router = APIRouter(prefix="/branches", tags=["Branches"])


def _get_region_or_404(db: Session, region_id: UUID) -> Region:
    region = db.get(Region, region_id)
    if not region:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Region not found",
        )
    return region


def _get_branch_or_404(db: Session, branch_id: UUID) -> Branch:
    branch = db.get(Branch, branch_id)
    if not branch:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Branch not found",
        )
    return branch


# ==================== REGION ENDPOINTS ====================


@region_router.get("", response_model=List[RegionResponse])
def list_regions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List all regions ordered by name.
    """
    return db.query(Region).order_by(Region.name).all()


@region_router.post("", response_model=RegionResponse, status_code=status.HTTP_201_CREATED)
def create_region(
    region: RegionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a region. Only admins can create regions.
    """
    try:
        db_region = Region(**region.model_dump())
        db.add(db_region)
        db.commit()
        db.refresh(db_region)
        return db_region
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Region with name '{region.name}' already exists",
        )


@region_router.get("/{region_id}", response_model=RegionResponse)
def get_region(
    region_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _get_region_or_404(db, region_id)


@region_router.patch("/{region_id}", response_model=RegionResponse)
def update_region(
    region_id: UUID,
    region_update: RegionUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Update a region's name or manager.
    """
    db_region = _get_region_or_404(db, region_id)
    for field, value in region_update.model_dump(exclude_unset=True).items():
        setattr(db_region, field, value)
    try:
        db.commit()
        db.refresh(db_region)
        return db_region
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Update would violate unique constraint (name may already exist)",
        )


@region_router.delete("/{region_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_region(
    region_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a region together with its branches.
    """
    db_region = _get_region_or_404(db, region_id)
    db.delete(db_region)
    db.commit()


# ==================== BRANCH ENDPOINTS ====================


@branch_router.get("", response_model=List[BranchResponse])
def list_branches(
    region_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List branches, optionally only those of one region.
    """
    query = db.query(Branch)
    if region_id is not None:
        query = query.filter(Branch.region_id == region_id)
    return query.order_by(Branch.name).all()


@branch_router.post("", response_model=BranchResponse, status_code=status.HTTP_201_CREATED)
def create_branch(
    branch: BranchCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a branch inside an existing region. Only admins can create branches.
    """
    if not db.get(Region, branch.region_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Region not found",
        )
    try:
        db_branch = Branch(**branch.model_dump())
        db.add(db_branch)
        db.commit()
        db.refresh(db_branch)
        return db_branch
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Branch with name '{branch.name}' already exists in this region",
        )


@branch_router.get("/{branch_id}", response_model=BranchResponse)
def get_branch(
    branch_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _get_branch_or_404(db, branch_id)


@branch_router.patch("/{branch_id}", response_model=BranchResponse)
def update_branch(
    branch_id: UUID,
    branch_update: BranchUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Update a branch. Moving it to another region requires the region to exist.
    """
    db_branch = _get_branch_or_404(db, branch_id)
    update_data = branch_update.model_dump(exclude_unset=True)
    if update_data.get("region_id") and not db.get(Region, update_data["region_id"]):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Region not found",
        )
    for field, value in update_data.items():
        setattr(db_branch, field, value)
    try:
        db.commit()
        db.refresh(db_branch)
        return db_branch
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Update would violate unique constraint (name may already exist in region)",
        )


@branch_router.delete("/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch(
    branch_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    db_branch = _get_branch_or_404(db, branch_id)
    db.delete(db_branch)
    db.commit()
