import logging
from sqlalchemy.orm import Session
from models.category import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Electronics", "description": "Phones, laptops, gadgets", "icon": "smartphone"},
    {"name": "Fashion", "description": "Clothing, shoes, accessories", "icon": "shirt"},
    {"name": "Home & Garden", "description": "Furniture, decor, tools", "icon": "home"},
    {"name": "Books", "description": "Textbooks, novels, magazines", "icon": "book"},
    {"name": "Sports", "description": "Equipment, clothing, accessories", "icon": "dumbbell"},
    {"name": "Toys & Games", "description": "Kids toys, board games, puzzles", "icon": "gamepad-2"},
    {"name": "Automotive", "description": "Car parts, accessories", "icon": "car"},
    {"name": "Art & Crafts", "description": "Handmade items, supplies", "icon": "palette"},
]


def seed_categories(db: Session) -> int:
    """Insert the default categories that are not present yet. Returns the number inserted."""
    try:
        existing = {name for (name,) in db.query(Category.name).all()}
        inserted = 0
        for data in DEFAULT_CATEGORIES:
            if data["name"] in existing:
                continue
            db.add(Category(**data))
            inserted += 1

        db.commit()
        return inserted

    except Exception as e:
        db.rollback()
        logger.error(f"Error seeding categories: {str(e)}")
        raise
