from datetime import date, timedelta

import pytest

from lendhive import LibrarySystem, Settings


TODAY = date(2025, 1, 1)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def config():
    # explicit values so a stray LENDHIVE_* variable in the environment can't leak in
    return Settings(max_loans=5, default_loan_days=14, max_extension_days=90, seed_demo_data=False)


@pytest.fixture
def lib(config, today):
    return LibrarySystem(config=config, clock=lambda: today)


@pytest.fixture
def populated(lib):
    """Members m1..m4 and books b1..b8."""
    for i in range(1, 5):
        assert lib.create_member(f"m{i}", f"Member {i}")
    for i in range(1, 9):
        assert lib.create_book(f"b{i}", f"Book {i}")
    return lib


@pytest.fixture
def give_loans(lib):
    """Loan ``count`` fresh filler books to a member."""

    def _give(member_id, count):
        for i in range(count):
            book_id = f"filler-{member_id}-{i}"
            assert lib.create_book(book_id, f"Filler {i}")
            assert lib.borrow_book(book_id, member_id)

    return _give


@pytest.fixture
def check_invariants(lib, config):
    def _check(shortened=False):
        """``shortened`` relaxes the lower bound for loans extended by a negative amount."""
        books = lib.all_books()
        per_member = {}
        for book in books:
            # loaned_to, due_date and first_due_date travel together
            assert (book.loaned_to is None) == (book.due_date is None) == (book.first_due_date is None)
            assert len(book.reservation_queue) == len(set(book.reservation_queue))
            if book.loan is not None:
                assert book.loaned_to not in book.reservation_queue
                assert book.due_date <= book.first_due_date + timedelta(days=config.max_extension_days)
                if not shortened:
                    assert book.first_due_date <= book.due_date
                per_member[book.loaned_to] = per_member.get(book.loaned_to, 0) + 1
        for member_id, count in per_member.items():
            assert count <= config.max_loans, member_id

    return _check
