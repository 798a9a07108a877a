"""Storage for seen listings: the dedup gate and the persisted record."""

import csv
import logging
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import async_sessionmaker

from woningjager.models import AIProperties, Listing
from woningjager.models.database import ListingDB, get_engine, init_db

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "platform", "url", "image", "floor", "street", "zipcode", "city",
    "meters", "price", "garden", "rooftarrace", "year", "rooms",
    "servicecosts", "rating", "reason", "created_at",
]


def build_record(listing: Listing, floor: int | None, ai: AIProperties | None) -> dict:
    """
    Build the row persisted for a listing.

    AI values are only used for fields the source did not publish.

    Args:
        listing: Normalized (and enriched) listing
        floor: Normalized floor
        ai: AI-derived attributes, if any

    Returns:
        Column values for ListingDB
    """
    ai = ai or AIProperties()
    return {
        "platform": listing.platform,
        "url": listing.url,
        "image": listing.image if isinstance(listing.image, str) else None,
        "floor": floor,
        "street": listing.street or None,
        "zipcode": listing.zipcode,
        "city": listing.city,
        "meters": listing.meters if listing.meters is not None else ai.size,
        "price": listing.price if listing.price is not None else ai.price,
        "garden": ai.garden,
        "rooftarrace": ai.rooftarrace,
        "year": ai.year,
        "rooms": listing.rooms if listing.rooms is not None else ai.rooms,
        "servicecosts": ai.servicecosts,
        "rating": ai.rating,
        "reason": ai.reason,
    }


class ListingStore:
    """Insert-only table of listings keyed by URL."""

    def __init__(self, database_url: str):
        """Create the engine; the schema is created by init_schema()."""
        self.database_url = database_url
        self._ensure_directory()
        self.engine = get_engine(database_url)
        self.session = async_sessionmaker(self.engine, expire_on_commit=False)

    def _ensure_directory(self) -> None:
        """Ensure the directory of a SQLite database file exists."""
        database = make_url(self.database_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    async def init_schema(self) -> None:
        """Create the listings table if it does not exist."""
        await init_db(self.engine)

    async def close(self) -> None:
        """Dispose of the engine's connections."""
        await self.engine.dispose()

    async def exists(self, url: str) -> bool:
        """Check if a listing URL has been seen before."""
        async with self.session() as session:
            result = await session.execute(select(ListingDB.id).where(ListingDB.url == url))
            return result.first() is not None

    async def insert_if_absent(self, record: dict) -> bool:
        """
        Insert a record unless its URL is already stored.

        Existing rows are never touched.

        Returns:
            True if a row was inserted, False if the URL already existed
        """
        stmt = sqlite_insert(ListingDB).values(**record)
        stmt = stmt.on_conflict_do_nothing(index_elements=["url"])

        async with self.session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount == 1

    async def count(self, platform: str | None = None) -> int:
        """Get count of listings in the database."""
        query = select(func.count()).select_from(ListingDB)
        if platform:
            query = query.where(ListingDB.platform == platform)
        async with self.session() as session:
            return (await session.execute(query)).scalar_one()

    async def platforms(self) -> dict[str, int]:
        """Listing counts grouped by platform."""
        query = select(ListingDB.platform, func.count()).group_by(ListingDB.platform)
        async with self.session() as session:
            rows = (await session.execute(query)).all()
        return {platform: count for platform, count in rows}

    async def export_csv(self, filepath: str | Path, platform: str | None = None) -> int:
        """
        Export listings to a CSV file.

        Args:
            filepath: Path to output CSV file
            platform: Optional platform filter

        Returns:
            Number of rows exported
        """
        query = select(ListingDB).order_by(ListingDB.id)
        if platform:
            query = query.where(ListingDB.platform == platform)

        async with self.session() as session:
            rows = (await session.execute(query)).scalars().all()

        if not rows:
            return 0

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(EXPORT_COLUMNS)
            for row in rows:
                writer.writerow([getattr(row, column) for column in EXPORT_COLUMNS])

        logger.info("Exported %d listings to %s", len(rows), filepath)
        return len(rows)
