import asyncio
import logging
from bson import ObjectId
from catalog.config.database import get_database, connect_to_mongo, close_mongo_connection
from catalog.models.category import CategoryLevel
from catalog.services.category_store import CategoryStore

logger = logging.getLogger(__name__)

SYSTEM_USER_ID = ObjectId("000000000000000000000000")

# Department -> Category -> Subcategories, listed in display order
DEFAULT_TAXONOMY = {
    "Spirits": {
        "Whiskey": ["Bourbon", "Scotch", "Irish", "Rye"],
        "Vodka": ["Flavored", "Unflavored"],
        "Tequila": ["Blanco", "Reposado", "Anejo"],
        "Rum": ["White", "Dark", "Spiced"],
        "Gin": [],
    },
    "Wine": {
        "Red Wine": ["Cabernet Sauvignon", "Merlot", "Pinot Noir"],
        "White Wine": ["Chardonnay", "Sauvignon Blanc", "Riesling"],
        "Sparkling": ["Champagne", "Prosecco"],
    },
    "Beer": {
        "Domestic": [],
        "Imported": [],
        "Craft": ["IPA", "Stout", "Lager"],
    },
}


async def _find_or_create(store, name, level, parent, sort_order, created_by):
    query = {"name": name, "level": int(level), "parent": parent}
    existing = await store.collection.find_one(query)
    if existing:
        return existing["_id"], False

    category = await store.create(
        {"name": name, "level": int(level), "parent": parent, "sort_order": sort_order},
        created_by=created_by,
    )
    return category.id, True


async def seed_default_categories(db, taxonomy=None, created_by=SYSTEM_USER_ID):
    """Create the default taxonomy, skipping entries that already exist.

    Returns the number of categories created.
    """
    store = CategoryStore(db)
    taxonomy = taxonomy if taxonomy is not None else DEFAULT_TAXONOMY
    created = 0

    for dept_order, (department, categories) in enumerate(taxonomy.items()):
        dept_id, is_new = await _find_or_create(
            store, department, CategoryLevel.DEPARTMENT, None, dept_order, created_by
        )
        created += is_new

        for cat_order, (category, subcategories) in enumerate(categories.items()):
            cat_id, is_new = await _find_or_create(
                store, category, CategoryLevel.CATEGORY, dept_id, cat_order, created_by
            )
            created += is_new

            for sub_order, subcategory in enumerate(subcategories):
                _, is_new = await _find_or_create(
                    store, subcategory, CategoryLevel.SUBCATEGORY, cat_id, sub_order, created_by
                )
                created += is_new

    logger.info(f"Seeded {created} default categories")
    return created


async def main():
    await connect_to_mongo()
    try:
        db = await get_database()
        await seed_default_categories(db)
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
