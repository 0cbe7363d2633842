"""
Create the schema directly (local development without alembic) and
optionally register a first user.

    python scripts/init_db.py
    python scripts/init_db.py --user "Ada" ada@example.com
"""

import argparse
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from slotswap.database import SessionLocal, engine
from slotswap.models import Base, Users


def main():
    parser = argparse.ArgumentParser(description="Initialise the SlotSwap database")
    parser.add_argument("--user", nargs=2, metavar=("NAME", "EMAIL"), help="register a user")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    print(f"Schema ready: {engine.url}")

    if not args.user:
        return

    name, email = args.user
    db = SessionLocal()
    try:
        user = db.query(Users).filter(Users.email == email).first()
        if user:
            print(f"User already exists: id={user.id}")
            return
        user = Users(name=name, email=email)
        db.add(user)
        db.commit()
        print(f"User created: id={user.id} (send it as X-User-Id)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
