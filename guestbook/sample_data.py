import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from .model import GuestbookEntry

logger = logging.getLogger(__name__)

# Marker stored in ip_hash so seeded rows are distinguishable from real visitors
SEED_IP_HASH = "seed"

# The founding guestbook entries
SEED_ENTRIES = [
    {
        "name": "Adina",
        "message": "So proud of how far you've come. 💜",
        "created_at": datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
    },
    {
        "name": "Galya",
        "message": "Браво, сине мой! (Bravo, my son!)",
        "created_at": datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc),
    },
    {
        "name": "Keegan",
        "message": "The cybersecurity site is SO COOL!",
        "created_at": datetime(2025, 12, 20, 12, 0, tzinfo=timezone.utc),
    },
]

def seed_guestbook(db: Session):
    """
    Insert the founding entries, skipping any name + message pair that is
    already present, so running it repeatedly is safe.
    Returns the lists of added and skipped names.
    """
    added, skipped = [], []
    for entry in SEED_ENTRIES:
        existing = db.query(GuestbookEntry).filter(
            GuestbookEntry.name == entry["name"],
            GuestbookEntry.message == entry["message"]
        ).first()

        if existing:
            logger.info(f"Skipping {entry['name']!r}, already exists")
            skipped.append(entry["name"])
            continue

        db.add(GuestbookEntry(visible=True, ip_hash=SEED_IP_HASH, **entry))
        added.append(entry["name"])
        logger.info(f"Added {entry['name']!r}")

    db.commit()
    return added, skipped
