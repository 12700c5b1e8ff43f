# scripts/seed.py

import os
import sys
import argparse

from dotenv import load_dotenv

# Ensure root path for relative imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# ✅ Load environment variables
load_dotenv()

from core.database import create_db_and_tables, engine, session_scope  # noqa: E402
from core.store import RecordStore  # noqa: E402
from services.demo_data import seed_demo_data  # noqa: E402
from services.subscription import seed_plan_catalog  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Seed the receipt portal database.")
    parser.add_argument(
        "--plans-only",
        action="store_true",
        help="Only load the subscription plan catalog",
    )
    args = parser.parse_args()

    if engine.url.get_backend_name() == "sqlite" and engine.url.database in (None, "", ":memory:"):
        print("⚠️ DATABASE_URL points at an in-memory database; seeded data will not outlive this script.")

    print("🌱 Seeding data...")
    create_db_and_tables()

    with session_scope() as session:
        store = RecordStore(session)
        plans = seed_plan_catalog(store)
        print(f"✅ Plan catalog ready ({len(plans)} plans)")

        if not args.plans_only:
            if seed_demo_data(store):
                print("✅ Created demo tenant Tech Corp Ltd")
            else:
                print("ℹ️ Demo tenant already present")

    print("🎉 Seeding complete.")


if __name__ == "__main__":
    main()
