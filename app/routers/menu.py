from __future__ import annotations

import logging
import math
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.deps import require_director
from app.models.menu_item import MENU_CATEGORIES, MenuItem
from app.models.user import User
from app.routers.uploads import store_image_upload
from app.services.audit import log_action
from app.services.image_storage import delete_image_quietly

router = APIRouter(prefix="/api/menu", tags=["menu"])
logger = logging.getLogger(__name__)

MENU_IMAGE_FOLDER = "maloofs/menu"

MenuCategory = Literal["desserts", "drinks", "maincourse", "starters"]


class MenuItemOut(BaseModel):
    id: int
    name: str
    category: str
    price: float
    availability: bool
    description: str
    imageUrl: Optional[str] = None
    imagePublicId: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


def _menu_item_to_dict(item: MenuItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "price": item.price,
        "availability": bool(item.availability),
        "description": item.description or "",
        "imageUrl": item.image_url,
        "imagePublicId": item.image_public_id,
        "createdAt": item.created_at.isoformat() if item.created_at else None,
        "updatedAt": item.updated_at.isoformat() if item.updated_at else None,
    }


def _get_item_or_404(db: Session, item_id: int) -> MenuItem:
    item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu item not found")
    return item


def _validate_price(price: Optional[float]) -> None:
    if price is None:
        return
    if not math.isfinite(price):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Price must be a finite number")
    if price < 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Price must be zero or greater")


def _validate_category(category: Optional[str]) -> None:
    if category is not None and category not in MENU_CATEGORIES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid category. Use one of: {', '.join(MENU_CATEGORIES)}",
        )


def _has_file(image: UploadFile | None) -> bool:
    return image is not None and bool(image.filename)


@router.get("", response_model=List[MenuItemOut])
def list_menu_items(
    category: Optional[MenuCategory] = Query(None),
    available: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(MenuItem)
    if category is not None:
        query = query.filter(MenuItem.category == category)
    if available is not None:
        query = query.filter(MenuItem.availability.is_(available))
    items = query.order_by(MenuItem.created_at.desc(), MenuItem.id.desc()).all()
    return [_menu_item_to_dict(item) for item in items]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_menu_item(
    name: str = Form(..., min_length=1),
    category: str = Form(...),
    price: float = Form(...),
    availability: bool = Form(True),
    description: str = Form(""),
    image: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    if not name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name cannot be empty")
    _validate_category(category)
    _validate_price(price)

    image_url = None
    image_public_id = None
    if _has_file(image):
        stored = store_image_upload(image, MENU_IMAGE_FOLDER)
        image_url, image_public_id = stored.url, stored.public_id

    item = MenuItem(
        name=name.strip(),
        category=category,
        price=price,
        availability=availability,
        description=description or "",
        image_url=image_url,
        image_public_id=image_public_id,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info("menu item created id=%s by user_id=%s", item.id, user.id)
    return {"success": True, "item": _menu_item_to_dict(item)}


@router.get("/{item_id}", response_model=MenuItemOut)
def get_menu_item(item_id: int, db: Session = Depends(get_db)):
    return _menu_item_to_dict(_get_item_or_404(db, item_id))


@router.put("/{item_id}")
def update_menu_item(
    item_id: int,
    name: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    availability: Optional[bool] = Form(None),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None),
    image_public_id: Optional[str] = Form(None),
    image: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    fields = {
        "name": name.strip() if name is not None else None,
        "category": category,
        "price": price,
        "availability": availability,
        "description": description,
    }
    changes = {key: value for key, value in fields.items() if value is not None}
    new_url = (image_url or "").strip() or None
    new_public_id = (image_public_id or "").strip() or None
    if not changes and not _has_file(image) and not (new_url and new_public_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body cannot be empty")
    if changes.get("name") == "":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name cannot be empty")
    _validate_category(changes.get("category"))
    _validate_price(changes.get("price"))

    item = _get_item_or_404(db, item_id)

    if _has_file(image):
        stored = store_image_upload(image, MENU_IMAGE_FOLDER)
        new_url, new_public_id = stored.url, stored.public_id

    old_public_id = item.image_public_id
    if new_url and new_public_id:
        item.image_url = new_url
        item.image_public_id = new_public_id

    for key, value in changes.items():
        setattr(item, key, value)

    db.commit()
    db.refresh(item)

    if old_public_id and new_public_id and new_public_id != old_public_id:
        delete_image_quietly(old_public_id)

    logger.info("menu item updated id=%s by user_id=%s", item.id, user.id)
    return {"message": "Menu item updated successfully", "item": _menu_item_to_dict(item)}


@router.delete("/{item_id}")
def delete_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    item = _get_item_or_404(db, item_id)
    deleted = {"id": item.id, "name": item.name}

    delete_image_quietly(item.image_public_id)

    db.delete(item)
    log_action(db, user_id=user.id, action="menu_item_deleted", entity_type="menu_item", entity_id=item_id, meta=deleted)
    db.commit()
    return {"message": "Menu item deleted successfully", "deleted": deleted}
