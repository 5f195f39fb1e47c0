from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.deps import require_director
from app.models.staff import STAFF_ROLES, STAFF_STATUSES, Staff
from app.models.user import User
from app.services.audit import log_action

router = APIRouter(prefix="/api/staff", tags=["staff"])
logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "role", "status", "image")


class MetaItem(BaseModel):
    key: str
    label: str


class StaffMetaOut(BaseModel):
    roles: List[MetaItem]
    statuses: List[MetaItem]


class StaffOut(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str
    status: str
    image: Optional[str] = None


class StaffPayload(BaseModel):
    """Unknown keys are ignored; ``customRole`` replaces ``role`` when role is "other"."""

    name: Optional[str] = Field(None, max_length=120)
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, max_length=40)
    role: Optional[str] = Field(None, max_length=60)
    customRole: Optional[str] = Field(None, max_length=60)
    status: Optional[str] = None
    image: Optional[str] = None


def _staff_to_dict(member: Staff) -> dict:
    return {
        "id": member.id,
        "name": member.name,
        "email": member.email,
        "phone": member.phone,
        "role": member.role,
        "status": member.status,
        "image": member.image or None,
    }


def _get_member_or_404(db: Session, staff_id: int) -> Staff:
    member = db.query(Staff).filter(Staff.id == staff_id).first()
    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff not found")
    return member


def _clean_fields(payload: StaffPayload) -> dict:
    data = payload.model_dump(exclude_unset=True)
    custom_role = (data.pop("customRole", None) or "").strip()
    if data.get("role") == "other" and custom_role:
        data["role"] = custom_role

    cleaned = {}
    for key in EDITABLE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        cleaned[key] = value.strip() if isinstance(value, str) else value

    if "status" in cleaned and cleaned["status"] and cleaned["status"] not in STAFF_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status. Use one of: {', '.join(STAFF_STATUSES)}",
        )
    return cleaned


def group_staff_by_role(members: List[Staff]) -> Dict[str, List[dict]]:
    grouped: Dict[str, List[dict]] = {key: [] for key in STAFF_ROLES}
    for member in members:
        role_key = member.role if member.role in STAFF_ROLES else "other"
        grouped[role_key].append(_staff_to_dict(member))
    if not grouped["other"]:
        del grouped["other"]
    return grouped


@router.get("/meta", response_model=StaffMetaOut)
def staff_meta():
    return {
        "roles": [{"key": key, "label": label} for key, label in STAFF_ROLES.items()],
        "statuses": [{"key": key, "label": label} for key, label in STAFF_STATUSES.items()],
    }


@router.get("")
def list_staff(db: Session = Depends(get_db)):
    members = db.query(Staff).order_by(Staff.name.asc(), Staff.id.asc()).all()
    return group_staff_by_role(members)


@router.post("", response_model=StaffOut, status_code=status.HTTP_201_CREATED)
def create_staff(
    payload: StaffPayload,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    fields = _clean_fields(payload)
    if not fields.get("name") or not fields.get("role") or not fields.get("status"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: name, role, or status",
        )

    member = Staff(**fields)
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("staff created id=%s role=%s by user_id=%s", member.id, member.role, user.id)
    return _staff_to_dict(member)


@router.get("/{staff_id}", response_model=StaffOut)
def get_staff_member(staff_id: int, db: Session = Depends(get_db)):
    return _staff_to_dict(_get_member_or_404(db, staff_id))


@router.put("/{staff_id}", response_model=StaffOut)
def update_staff_member(
    staff_id: int,
    payload: StaffPayload,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    fields = _clean_fields(payload)
    if not fields:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body cannot be empty")
    for required in ("name", "role", "status"):
        if required in fields and not fields[required]:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"'{required}' cannot be empty")

    member = _get_member_or_404(db, staff_id)
    for key, value in fields.items():
        setattr(member, key, value)
    db.commit()
    db.refresh(member)
    logger.info("staff updated id=%s by user_id=%s", member.id, user.id)
    return _staff_to_dict(member)


@router.delete("/{staff_id}")
def delete_staff_member(
    staff_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    member = _get_member_or_404(db, staff_id)
    db.delete(member)
    log_action(
        db,
        user_id=user.id,
        action="staff_deleted",
        entity_type="staff",
        entity_id=staff_id,
        meta={"name": member.name, "role": member.role},
    )
    db.commit()
    return {"message": "Staff member deleted", "id": staff_id}
