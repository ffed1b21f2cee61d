"""
Seed the database with a sample boot catalog for development.
Run with: python scripts/seed_data.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from app.core.database import async_session_maker, engine, Base
from app.models import Boot


SAMPLE_BOOTS = [
    # (brand, model, gender, flex, last_width_mm, toe, instep, ankle, calf, boot_type, walk_mode, rear_entry, calf_adj)
    ("Lange", "Shadow 130 LV", "Male", 130, 97, "Angled", "Low", "Low", "Medium", "Standard", False, False, False),
    ("Lange", "LX 100 HV", "Male", 100, 102, "Round", "High", "Medium", "High", "Standard", False, False, True),
    ("Atomic", "Hawx Prime 110 GW", "Male", 110, 100, "Round", "Medium", "Medium", "Medium", "Hybrid", True, False, False),
    ("Atomic", "Hawx Ultra 130", "Male", 130, 98, "Angled", "Low", "Low", "Low", "Standard", False, False, False),
    ("Salomon", "S/Pro Alpha 120", "Male", 120, 100, "Square", "Medium", "Medium", "Medium", "Standard", True, False, False),
    ("Salomon", "Shift Pro 100 AT", "Male", 100, 100, "Square", "Medium", "Medium", "Medium", "Touring", True, False, False),
    ("Tecnica", "Mach1 MV 90", "Male", 90, 100, "Round", "Medium", "Medium", "Medium", "Standard", False, False, False),
    ("Rossignol", "Alltrack 90", "Male", 90, 102, "Round", "High", "High", "High", "Freeride", True, False, False),
    ("Nordica", "HF 85", "Male", 80, 102, "Round", "High", "High", "High", "Standard", False, True, False),
    ("Lange", "Shadow 95 W LV", "Female", 95, 97, "Angled", "Low", "Low", "Medium", "Standard", False, False, False),
    ("Atomic", "Hawx Prime 95 W", "Female", 95, 100, "Round", "Medium", "Medium", "Medium", "Standard", True, False, False),
    ("Tecnica", "Mach1 MV 75 W", "Female", 75, 100, "Round", "Medium", "Medium", "High", "Standard", False, False, True),
    ("Salomon", "S/Pro Alpha 110 W", "Female", 110, 100, "Square", "Medium", "Low", "Medium", "Standard", True, False, False),
    ("Nordica", "HF 75 W", "Female", 75, 102, "Round", "High", "High", "High", "Standard", False, True, True),
]


async def create_tables():
    """Create tables directly (development only; use alembic elsewhere)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_boots():
    """Seed sample boots."""
    async with async_session_maker() as session:
        # Check if already seeded
        result = await session.execute(select(Boot).limit(1))
        if result.first():
            print("Boots already seeded, skipping...")
            return

        boots = []
        for (brand, model, gender, flex, width, toe, instep, ankle, calf,
             boot_type, walk_mode, rear_entry, calf_adjustment) in SAMPLE_BOOTS:
            boots.append(Boot(
                year="25/26",
                brand=brand,
                model=model,
                gender=gender,
                flex=flex,
                last_width_mm=width,
                toe_box_shape=toe,
                instep_height=instep,
                ankle_volume=ankle,
                calf_volume=calf,
                boot_type=boot_type,
                walk_mode=walk_mode,
                rear_entry=rear_entry,
                calf_adjustment=calf_adjustment,
                tags=["sample"],
            ))

        session.add_all(boots)
        await session.commit()
        print(f"{len(boots)} sample boots seeded")


async def main():
    print("Seeding database...")
    await create_tables()
    await seed_boots()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
