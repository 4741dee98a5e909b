from datetime import timedelta
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.core.config import get_settings
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.department import Department
from app.models.faculty import Faculty, FacultyRole
from app.models.user import User, UserRole
from app.schemas.user import Token, UserCreate, UserLogin, UserOut
from app.services.audit import log_activity

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)

FACULTY_PROFILE_ROLES = {UserRole.faculty: FacultyRole.faculty, UserRole.hod: FacultyRole.hod}


def ensure_faculty_profile(db: Session, user: User) -> bool:
    """Keep a teaching profile for HOD and faculty accounts so they can be timetabled."""
    faculty_role = FACULTY_PROFILE_ROLES.get(user.role)
    if faculty_role is None:
        return False

    faculty = db.execute(select(Faculty).where(Faculty.email == user.email)).scalar_one_or_none()
    if faculty is None:
        db.add(
            Faculty(
                name=user.name,
                email=user.email,
                designation=user.designation or ("Head of Department" if faculty_role == FacultyRole.hod else "Assistant Professor"),
                role=faculty_role,
                department_id=user.department_id,
            )
        )
        return True

    updated = False
    if faculty.department_id is None and user.department_id is not None:
        faculty.department_id = user.department_id
        updated = True
    if faculty_role == FacultyRole.hod and faculty.role != FacultyRole.hod:
        faculty.role = FacultyRole.hod
        updated = True
    if not (faculty.name or "").strip():
        faculty.name = user.name
        updated = True
    return updated


def _query_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)) -> UserOut:
    if _query_user_by_email(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    if payload.department_id and db.get(Department, payload.department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        role=payload.role,
        designation=payload.designation,
        department_id=payload.department_id,
    )
    db.add(user)
    ensure_faculty_profile(db, user)

    try:
        db.flush()
        log_activity(db, user=user, action="user.registered", entity_type="user", entity_id=user.id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered") from exc

    db.refresh(user)
    logger.info("Registered %s account %s", user.role.value, user.id)
    return user


def validate_login_user(payload: UserLogin, db: Session) -> User:
    user = _query_user_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    if payload.role and payload.role != user.role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Role does not match user account")
    return user


@router.post("/login", response_model=Token)
def login(payload: UserLogin, db: Session = Depends(get_db)) -> Token:
    user = validate_login_user(payload, db)

    if ensure_faculty_profile(db, user):
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if db.execute(select(Faculty).where(Faculty.email == user.email)).scalar_one_or_none() is None:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Unable to ensure faculty profile for this account.",
                )

    access_token = create_access_token(user.id, expires_delta=timedelta(minutes=settings.access_token_expire_minutes))
    return Token(access_token=access_token, token_type="bearer", user=user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)) -> UserOut:
    return current_user


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)) -> dict:
    # Tokens are stateless; the client discards its copy.
    return {"success": True, "message": "Logged out"}
