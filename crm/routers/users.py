import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status, BackgroundTasks
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.auth import User, UserRole
from crm.schema.user import CreateUserRequest, CreateUserResponse, UserResponse, UserUpdateRequest
from crm.utils.auth import require_admin, get_password_hash, generate_strong_password
from crm.utils.records import reattach, resolve_attachment
from crm.utils.smtp import MailTransport, get_mail_transport

logger = logging.getLogger(__name__)

users_router = APIRouter(
    prefix="/users",
    tags=["User Management"],
)


def _guard_super_admin(
    current_user: User,
    role: Optional[UserRole] = None,
    target: Optional[User] = None,
) -> None:
    """Only a super admin grants the role or touches an account that holds it."""
    if current_user.role == UserRole.SUPER_ADMIN.value:
        return
    if role == UserRole.SUPER_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a super admin can grant the super admin role",
        )
    if target is not None and target.role == UserRole.SUPER_ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a super admin can modify a super admin account",
        )


@users_router.post("", response_model=CreateUserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    request: CreateUserRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    mail: MailTransport = Depends(get_mail_transport),
):
    """
    Create a user. A random password is generated and sent to the provided email.
    A user attached to a branch inherits the branch's region.
    """
    _guard_super_admin(current_user, role=request.role)

    existing = db.query(User).filter(User.email == request.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists.",
        )
    region_id, branch_id = resolve_attachment(db, request.region_id, request.branch_id)

    password = generate_strong_password()
    user = User(
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        password_hash=get_password_hash(password),
        is_temporary_password=True,
        role=request.role.value,
        region_id=region_id,
        branch_id=branch_id,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s created with role %s", user.id, user.role)

    body_html = (
        "<p>Your CRM account has been created.</p>"
        "<p>Use the credentials below to log in:</p>"
        f"<p><strong>Email:</strong> {request.email}</p>"
        f"<p><strong>Password:</strong> {password}</p>"
        "<p>Please change your password after your first login.</p>"
    )
    background_tasks.add_task(
        mail.send,
        request.email,
        "Your login credentials",
        body_html,
    )

    return CreateUserResponse(
        user_id=user.id,
        email=user.email,
    )


@users_router.get("", response_model=List[UserResponse])
def list_users(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    role: Optional[UserRole] = None,
    branch_id: Optional[UUID] = None,
    region_id: Optional[UUID] = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    List users with optional role/branch/region filters and pagination. Excludes the logged-in user.
    """
    query = db.query(User).filter(User.id != current_user.id)
    if role is not None:
        query = query.filter(User.role == role.value)
    if branch_id is not None:
        query = query.filter(User.branch_id == branch_id)
    if region_id is not None:
        query = query.filter(User.region_id == region_id)
    users = query.order_by(User.created_at.desc()).offset(skip).limit(limit).all()
    return [UserResponse.model_validate(u) for u in users]


@users_router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Get a single user by ID.
    """
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return UserResponse.model_validate(user)


@users_router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    body: UserUpdateRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Update a user's name, role, organisational attachment or active flag.
    """
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    _guard_super_admin(current_user, role=body.role, target=user)

    update_data = body.model_dump(exclude_unset=True)
    if "role" in update_data and update_data["role"] is not None:
        update_data["role"] = update_data["role"].value
    reattach(db, user, update_data)

    for key, value in update_data.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return UserResponse.model_validate(user)


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a user. Users cannot delete themselves.
    """
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    _guard_super_admin(current_user, target=user)
    db.delete(user)
    db.commit()
