"""Seed the research_agenda table with research topics."""

import asyncio
import sys
import os

# Add backend to path so we can import thesis_archive modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from sqlalchemy import select

from thesis_archive.db.session import async_session_factory, engine
from thesis_archive.models import Base
from thesis_archive.models.research_agenda import ResearchAgenda

TOPICS = [
    "Artificial Intelligence",
    "Climate Change Adaptation",
    "Community Health",
    "Cultural Heritage",
    "Data Science",
    "Disaster Risk Reduction",
    "Early Childhood Education",
    "Food Security",
    "Gender and Development",
    "Local Governance",
    "Marine Biodiversity",
    "Public Policy",
    "Renewable Energy",
    "Sustainable Agriculture",
    "Teacher Education",
    "Tourism Management",
    "Urban Planning",
    "Water Resource Management",
]


async def seed_topics():
    """Insert missing research agenda topics, leaving existing ones untouched."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        result = await session.execute(select(ResearchAgenda.name))
        existing = {name for name in result.scalars().all() if name}

        created = 0
        for name in TOPICS:
            if name in existing:
                print(f"  ⏭️  Skipped: {name} (already exists)")
                continue
            session.add(ResearchAgenda(name=name))
            created += 1
            print(f"  ✓ Created: {name}")

        await session.commit()

    print(f"\n✅ Topic seeding complete: {created} created, {len(TOPICS) - created} skipped")


if __name__ == "__main__":
    asyncio.run(seed_topics())
