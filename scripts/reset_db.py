"""
Drop and recreate every table, then seed the default amenities.

Destroys all data in DATABASE_URL:
  python scripts/reset_db.py
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from rentals.database import engine, SessionLocal, Base  # noqa: E402
from rentals import models  # noqa: F401,E402
from rentals.seed import seed_amenities  # noqa: E402

if __name__ == "__main__":
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_amenities(db)
        print(f"Database reset; {len(Base.metadata.tables)} tables created and amenities seeded.")
    finally:
        db.close()
