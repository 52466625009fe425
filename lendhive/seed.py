from __future__ import annotations
import logging
from typing import Optional

from .api import LibrarySystem
from .config import Settings

logger = logging.getLogger(__name__)

DEMO_MEMBERS = [
    ("m1", "Kertu"),
    ("m2", "Rasmus"),
    ("m3", "Liis"),
    ("m4", "Markus"),
]

DEMO_BOOKS = [
    ("b1", "Clean Code"),
    ("b2", "Domain-Driven Design"),
    ("b3", "Refactoring"),
    ("b4", "Effective Java"),
    ("b5", "Design Patterns"),
    ("b6", "The Pragmatic Programmer"),
]


def seed_demo_data(sys: LibrarySystem) -> None:
    """Create the demo members and books. Entries that already exist are left alone."""
    for member_id, name in DEMO_MEMBERS:
        sys.create_member(member_id, name)
    for book_id, title in DEMO_BOOKS:
        sys.create_book(book_id, title)

    logger.info(f"[seed] members: {[m.name for m in sys.all_members()]}")
    logger.info(f"[seed] books: {[b.title for b in sys.all_books()]}")


def build_system(config: Optional[Settings] = None) -> LibrarySystem:
    """Startup wiring: a LibrarySystem, seeded when the settings ask for it."""
    sys = LibrarySystem(config=config)
    if sys.config.seed_demo_data:
        seed_demo_data(sys)
    return sys
