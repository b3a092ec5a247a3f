#!/usr/bin/env python3
"""
Load the development data set (tours, users, reviews) into MongoDB.

Tour ratings are not taken from the data files: after the reviews are
inserted, every tour's ratings are recomputed from them.
"""

import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from bson import ObjectId
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

# Load environment variables before the config is read
load_dotenv()

from natours.core.config import config
from natours.db.indexes import create_indexes
from natours.db.mongodb import REVIEWS_COLLECTION, TOURS_COLLECTION, USERS_COLLECTION
from natours.repositories.review import ReviewRepository
from natours.repositories.tour import TourRepository, slugify
from natours.services.rating_aggregator import calc_average_ratings

DATA_DIR = Path(__file__).parent.parent / "data"

OBJECT_ID_FIELDS = {"_id", "tour", "user"}
DATE_FIELDS = {"created_at"}


def load_documents(name: str) -> list:
    """Read data/<name>.json, turning ids and dates into BSON types"""
    with open(DATA_DIR / f"{name}.json", "r") as f:
        documents = json.load(f)

    for doc in documents:
        for key in OBJECT_ID_FIELDS & doc.keys():
            doc[key] = ObjectId(doc[key])
        for key in DATE_FIELDS & doc.keys():
            doc[key] = datetime.fromisoformat(doc[key])
        if "guides" in doc:
            doc["guides"] = [ObjectId(g) for g in doc["guides"]]
        if "start_dates" in doc:
            doc["start_dates"] = [datetime.fromisoformat(d) for d in doc["start_dates"]]
    return documents


class NatoursDatabaseSeeder:
    def __init__(self):
        self.client = None
        self.db = None

    async def connect(self):
        """Establish MongoDB connection"""
        print(f"Connecting to MongoDB database '{config.mongodb_database}'...")
        self.client = AsyncIOMotorClient(config.mongodb_url)
        self.db = self.client[config.mongodb_database]

        # Test connection
        await self.db.command('ping')
        print("Successfully connected to MongoDB!")

    async def clear_data(self):
        """Delete every tour, user and review"""
        for name in (TOURS_COLLECTION, USERS_COLLECTION, REVIEWS_COLLECTION):
            result = await self.db[name].delete_many({})
            print(f"Deleted {result.deleted_count} documents from '{name}'")

    async def seed_data(self):
        """Main seeding method"""
        await self.clear_data()
        await create_indexes(self.db)

        tours = load_documents("tours")
        for tour in tours:
            tour["slug"] = slugify(tour["name"])
            tour.pop("ratings_average", None)
            tour.pop("ratings_quantity", None)
        await self.db[TOURS_COLLECTION].insert_many(tours)
        print(f"Seeded {len(tours)} tours")

        users = load_documents("users")
        await self.db[USERS_COLLECTION].insert_many(users)
        print(f"Seeded {len(users)} users")

        reviews = load_documents("reviews")
        await self.db[REVIEWS_COLLECTION].insert_many(reviews)
        print(f"Seeded {len(reviews)} reviews")

        await self.recompute_ratings([str(tour["_id"]) for tour in tours])

    async def recompute_ratings(self, tour_ids):
        review_repository = ReviewRepository(self.db[REVIEWS_COLLECTION])
        tour_repository = TourRepository(self.db[TOURS_COLLECTION])
        for tour_id in tour_ids:
            stats = await calc_average_ratings(tour_id, review_repository, tour_repository)
            print(f"Tour {tour_id}: {stats.count} ratings, average {stats.average}")

    async def close(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            print("MongoDB connection closed")


async def main():
    seeder = NatoursDatabaseSeeder()
    operation = sys.argv[1] if len(sys.argv) > 1 else "import"

    try:
        print("=" * 50)
        print("Natours Database Seeder")
        print("=" * 50)

        await seeder.connect()

        if operation == "delete":
            await seeder.clear_data()
        else:
            await seeder.seed_data()

        print("=" * 50)
        print(f"Natours database {operation} completed!")
        print("=" * 50)
    except Exception as error:
        print(f"Natours database {operation} failed: {error}")
        sys.exit(1)
    finally:
        await seeder.close()


if __name__ == "__main__":
    asyncio.run(main())
