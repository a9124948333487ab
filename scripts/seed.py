"""Database seeder for comment board benchmark testing."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta

from comment_board.config import settings
from comment_board.database import Base, Database
from comment_board.models import Comment

NAMES = ["Alice", "Bob", "Carol", "Dave", "Erin", "Frank", "Grace", "Heidi",
         "Ivan", "Judy", "Mallory", "Niaj", "Olivia", "Peggy", "Rupert", "Sybil"]

PHRASES = ["Nice work!", "I disagree with the second point.", "Thanks for sharing.",
           "Could you elaborate?", "Bookmarked.", "This saved me hours."]


async def seed(small: bool = False):
    num_comments = 200 if small else 20000
    batch_size = 1000

    print(f"Seeding: {num_comments} comments into {settings.DATABASE_URL}")
    start = time.perf_counter()

    database = Database.from_settings(settings)
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    now = datetime.now(timezone.utc)
    async with database.sessionmaker() as session:
        for batch_start in range(0, num_comments, batch_size):
            batch_end = min(batch_start + batch_size, num_comments)
            for _ in range(batch_start, batch_end):
                created = now - timedelta(minutes=random.randint(0, 60 * 24 * 365))
                session.add(Comment(
                    name=random.choice(NAMES),
                    content=" ".join(random.sample(PHRASES, k=random.randint(1, 3))),
                    created_at=created,
                    updated_at=created,
                ))
            await session.flush()
            print(f"  Batch {batch_start}-{batch_end}: comments created")
        await session.commit()

    await database.dispose()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Comments: {num_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the comment board database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (200 comments)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
