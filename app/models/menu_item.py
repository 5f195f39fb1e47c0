from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Integer, String, Text

from app.core.database import DashboardBase, utcnow

MENU_CATEGORIES = ("desserts", "drinks", "maincourse", "starters")


class MenuItem(DashboardBase):
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint(
            "category IN ('desserts', 'drinks', 'maincourse', 'starters')",
            name="ck_menu_items_category",
        ),
        CheckConstraint("price >= 0", name="ck_menu_items_price_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    price = Column(Float, nullable=False)
    availability = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=False, default="")
    image_url = Column(String, nullable=True)
    image_public_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
