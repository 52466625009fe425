from __future__ import annotations
import logging

from lendhive import Settings, build_system, settings


def demo_flow() -> None:
    logging.basicConfig(level=settings.log_level)
    sys = build_system(Settings(seed_demo_data=True))

    # Search
    print("\n[demo] search 'design':", [b.title for b in sys.search_books("design")])

    # Kertu borrows, Rasmus and Liis queue up behind her
    print("\n[demo] m1 borrows b1:", sys.borrow_book("b1", "m1").to_dict())
    print("[demo] m2 reserves b1:", sys.reserve_book("b1", "m2").to_dict())
    print("[demo] m3 reserves b1:", sys.reserve_book("b1", "m3").to_dict())

    # Liis may not jump the queue
    print("[demo] m3 borrows b1:", sys.borrow_book("b1", "m3").to_dict())

    # Extension is blocked while others wait
    print("[demo] m1 extends b1 by 7 days:", sys.extend_loan("b1", "m1", 7).to_dict())

    # Return hands the book to the head of the queue
    print("\n[demo] m1 returns b1:", sys.return_book("b1", "m1").to_dict())
    print("[demo] b1 now:", sys.find_book("b1").to_dict())

    # Summary for Liis: one reservation, first in line
    print("\n[demo] m3 summary:", sys.member_summary("m3").to_dict())

    # Overdue report (nothing is due yet)
    print("\n[demo] overdue books:", [b.id for b in sys.overdue_books()])
    print("[demo] health:", sys.health())


if __name__ == "__main__":
    demo_flow()
