from __future__ import annotations
from datetime import date, timedelta
import logging
from typing import Callable, List, Optional

from .config import Settings, settings as default_settings
from .domain import (
    Book,
    ErrorCode,
    Loan,
    Member,
    MemberSummary,
    ReservationPosition,
    Result,
    Returned,
    ReturnFailed,
    ReturnResult,
)
from .locking import LockRegistry
from .repositories import BookRepo, MemberRepo

logger = logging.getLogger(__name__)

Clock = Callable[[], date]


def _deny(tag: str, reason: ErrorCode, **context: object) -> Result:
    details = " ".join(f"{k}={v}" for k, v in context.items())
    logger.info(f"[{tag}] denied {details} reason={reason.value}")
    return Result.failure(reason)


class BookManagementService:
    def __init__(self, books: BookRepo, locks: LockRegistry) -> None:
        self.books = books
        self.locks = locks

    def create_book(self, book_id: Optional[str], title: Optional[str]) -> Result:
        if book_id is None or title is None:
            return _deny("book", ErrorCode.INVALID_REQUEST, book=book_id)
        with self.locks.books.hold(book_id):
            if self.books.exists_by_id(book_id):
                return _deny("book", ErrorCode.BOOK_ALREADY_EXISTS, book=book_id)
            self.books.save(Book(id=book_id, title=title))
        logger.info(f"[book] created book={book_id}")
        return Result.success()

    def update_book(self, book_id: str, title: Optional[str]) -> Result:
        with self.locks.books.hold(book_id):
            book = self.books.find_by_id(book_id)
            if book is None:
                return _deny("book", ErrorCode.BOOK_NOT_FOUND, book=book_id)
            if title is None:
                return _deny("book", ErrorCode.INVALID_REQUEST, book=book_id)
            book.title = title
            self.books.save(book)
        logger.info(f"[book] updated book={book_id}")
        return Result.success()

    def delete_book(self, book_id: str) -> Result:
        with self.locks.books.hold(book_id):
            book = self.books.find_by_id(book_id)
            if book is None:
                return _deny("book", ErrorCode.BOOK_NOT_FOUND, book=book_id)
            if book.loan is not None:
                return _deny("book", ErrorCode.BOOK_LOANED, book=book_id)
            if book.reservation_queue:
                return _deny("book", ErrorCode.BOOK_RESERVED, book=book_id)
            self.books.delete(book)
        logger.info(f"[book] deleted book={book_id}")
        return Result.success()


class MemberManagementService:
    def __init__(self, books: BookRepo, members: MemberRepo, locks: LockRegistry) -> None:
        self.books = books
        self.members = members
        self.locks = locks

    def create_member(self, member_id: Optional[str], name: Optional[str]) -> Result:
        if member_id is None or name is None:
            return _deny("member", ErrorCode.INVALID_REQUEST, member=member_id)
        with self.locks.members.hold(member_id):
            if self.members.exists_by_id(member_id):
                return _deny("member", ErrorCode.MEMBER_ALREADY_EXISTS, member=member_id)
            self.members.save(Member(id=member_id, name=name))
        logger.info(f"[member] created member={member_id}")
        return Result.success()

    def update_member(self, member_id: str, name: Optional[str]) -> Result:
        with self.locks.members.hold(member_id):
            member = self.members.find_by_id(member_id)
            if member is None:
                return _deny("member", ErrorCode.MEMBER_NOT_FOUND, member=member_id)
            if name is None:
                return _deny("member", ErrorCode.INVALID_REQUEST, member=member_id)
            member.name = name
            self.members.save(member)
        logger.info(f"[member] updated member={member_id}")
        return Result.success()

    def delete_member(self, member_id: str) -> Result:
        """
        Delete a member with no active loans and purge them from every queue.

        The set of books to lock is only known after reading, so it is read,
        locked, and read again; if a reservation slipped in between, retry
        with the larger set.
        """
        while True:
            locked_ids = {b.id for b in self.books.find_by_reservation_queue_containing(member_id)}
            with self.locks.books.hold(*locked_ids), self.locks.members.hold(member_id):
                member = self.members.find_by_id(member_id)
                if member is None:
                    return _deny("member", ErrorCode.MEMBER_NOT_FOUND, member=member_id)
                if self.books.exists_by_loaned_to(member_id):
                    return _deny("member", ErrorCode.MEMBER_HAS_LOANS, member=member_id)

                queued = self.books.find_by_reservation_queue_containing(member_id)
                if not {b.id for b in queued} <= locked_ids:
                    continue

                for book in queued:
                    book.reservation_queue = [m for m in book.reservation_queue if m != member_id]
                    self.books.save(book)
                self.members.delete(member)

            logger.info(f"[member] deleted member={member_id} purged_queues={len(queued)}")
            return Result.success()


class LoanService:
    """
    Borrow, return, reserve, cancel and extend.

    Every mutation runs under the book's lock. Anything that can start a loan
    also holds the borrower's member lock while it counts and writes, so two
    books cannot push one member past the borrow limit at the same time.
    """

    def __init__(
        self,
        books: BookRepo,
        members: MemberRepo,
        locks: LockRegistry,
        config: Optional[Settings] = None,
        clock: Clock = date.today,
    ) -> None:
        self.books = books
        self.members = members
        self.locks = locks
        self.config = config or default_settings
        self.clock = clock

        self.max_loans = self.config.max_loans
        self.default_loan_days = self.config.default_loan_days
        self.max_extension_days = self.config.max_extension_days

    def _new_loan(self, member_id: str, today: date) -> Loan:
        return Loan.starting(member_id, today + timedelta(days=self.default_loan_days))

    def borrow_book(self, book_id: str, member_id: str, today: Optional[date] = None) -> Result:
        today = today or self.clock()
        with self.locks.books.hold(book_id), self.locks.members.hold(member_id):
            book = self.books.find_by_id(book_id)
            if book is None:
                return _deny("borrow", ErrorCode.BOOK_NOT_FOUND, book=book_id, member=member_id)
            if not self.members.exists_by_id(member_id):
                return _deny("borrow", ErrorCode.MEMBER_NOT_FOUND, book=book_id, member=member_id)
            if self.books.count_by_loaned_to(member_id) >= self.max_loans:
                return _deny("borrow", ErrorCode.BORROW_LIMIT, book=book_id, member=member_id)

            if book.loan is not None:
                reason = (
                    ErrorCode.ALREADY_BORROWED
                    if book.loaned_to == member_id
                    else ErrorCode.BOOK_UNAVAILABLE
                )
                return _deny("borrow", reason, book=book_id, member=member_id)

            # honor reservations: only the head of the queue may take the book
            head = book.queue_head()
            if head is not None:
                if head != member_id:
                    return _deny("borrow", ErrorCode.RESERVED, book=book_id, member=member_id)
                book.reservation_queue.pop(0)

            book.loan = self._new_loan(member_id, today)
            self.books.save(book)

        logger.info(f"[borrow] book={book_id} member={member_id} due={book.due_date}")
        return Result.success()

    def return_book(
        self, book_id: str, member_id: Optional[str], today: Optional[date] = None
    ) -> ReturnResult:
        today = today or self.clock()
        with self.locks.books.hold(book_id):
            book = self.books.find_by_id(book_id)
            if book is None:
                logger.info(f"[return] denied book={book_id} reason=BOOK_NOT_FOUND")
                return ReturnFailed(ErrorCode.BOOK_NOT_FOUND)
            if book.loan is None:
                logger.info(f"[return] denied book={book_id} reason=NOT_LOANED")
                return ReturnFailed(ErrorCode.NOT_LOANED)
            if member_id is None or member_id != book.loaned_to:
                logger.info(f"[return] denied book={book_id} member={member_id} reason=NOT_BORROWER")
                return ReturnFailed(ErrorCode.NOT_BORROWER)

            book.loan = None
            next_member_id = self._hand_off(book, today)
            if next_member_id is None:
                self.books.save(book)

        logger.info(f"[return] book={book_id} member={member_id} next={next_member_id}")
        return Returned(next_member_id)

    def _hand_off(self, book: Book, today: date) -> Optional[str]:
        """
        Pop queue heads until one is eligible and loan the book to it.

        Ineligible heads (deleted members, members at the limit) are dropped
        for good. On a successful handoff the book is saved while the new
        borrower's lock is still held; otherwise the caller saves.
        """
        while book.reservation_queue:
            candidate = book.reservation_queue.pop(0)
            with self.locks.members.hold(candidate):
                if self.can_member_borrow(candidate):
                    book.loan = self._new_loan(candidate, today)
                    self.books.save(book)
                    logger.info(f"[handoff] book={book.id} next={candidate} due={book.due_date}")
                    return candidate
            logger.warning(f"[handoff] book={book.id} skipped ineligible member={candidate}")
        return None

    def reserve_book(self, book_id: str, member_id: str, today: Optional[date] = None) -> Result:
        today = today or self.clock()
        with self.locks.books.hold(book_id), self.locks.members.hold(member_id):
            book = self.books.find_by_id(book_id)
            if book is None:
                return _deny("reserve", ErrorCode.BOOK_NOT_FOUND, book=book_id, member=member_id)
            if not self.members.exists_by_id(member_id):
                return _deny("reserve", ErrorCode.MEMBER_NOT_FOUND, book=book_id, member=member_id)
            if book.loaned_to == member_id:
                return _deny("reserve", ErrorCode.ALREADY_BORROWED, book=book_id, member=member_id)
            if member_id in book.reservation_queue:
                return _deny("reserve", ErrorCode.ALREADY_RESERVED, book=book_id, member=member_id)

            # free book: loan straight away, the queue is left as it is
            if book.loan is None and self.can_member_borrow(member_id):
                book.loan = self._new_loan(member_id, today)
                self.books.save(book)
                logger.info(f"[reserve] immediate loan book={book_id} member={member_id}")
                return Result.success()

            book.reservation_queue.append(member_id)
            self.books.save(book)
            position = len(book.reservation_queue) - 1

        logger.info(f"[reserve] queued book={book_id} member={member_id} position={position}")
        return Result.success()

    def cancel_reservation(self, book_id: str, member_id: str) -> Result:
        with self.locks.books.hold(book_id):
            book = self.books.find_by_id(book_id)
            if book is None:
                return _deny("cancel", ErrorCode.BOOK_NOT_FOUND, book=book_id, member=member_id)
            if not self.members.exists_by_id(member_id):
                return _deny("cancel", ErrorCode.MEMBER_NOT_FOUND, book=book_id, member=member_id)
            if member_id not in book.reservation_queue:
                return _deny("cancel", ErrorCode.NOT_RESERVED, book=book_id, member=member_id)
            book.reservation_queue.remove(member_id)
            self.books.save(book)

        logger.info(f"[cancel] book={book_id} member={member_id}")
        return Result.success()

    def extend_loan(self, book_id: str, member_id: str, days: int) -> Result:
        """
        Move the due date by ``days`` (negative shortens the loan).

        The new due date may be at most ``max_extension_days`` past the due
        date the loan started with.
        """
        if isinstance(days, bool) or not isinstance(days, int):
            raise TypeError(f"days must be an int, got {type(days).__name__}")
        if days == 0:
            return _deny("extend", ErrorCode.INVALID_EXTENSION, book=book_id, member=member_id)

        with self.locks.books.hold(book_id):
            book = self.books.find_by_id(book_id)
            if book is None:
                return _deny("extend", ErrorCode.BOOK_NOT_FOUND, book=book_id, member=member_id)
            if not self.members.exists_by_id(member_id):
                return _deny("extend", ErrorCode.MEMBER_NOT_FOUND, book=book_id, member=member_id)
            if book.loan is None:
                return _deny("extend", ErrorCode.NOT_LOANED, book=book_id, member=member_id)
            if book.loaned_to != member_id:
                return _deny("extend", ErrorCode.NOT_BORROWER, book=book_id, member=member_id)
            if book.reservation_queue:
                return _deny("extend", ErrorCode.RESERVATION_EXISTS, book=book_id, member=member_id)

            new_due = book.loan.due_date + timedelta(days=days)
            if (new_due - book.loan.first_due_date).days > self.max_extension_days:
                return _deny("extend", ErrorCode.MAX_EXTENSION_REACHED, book=book_id, member=member_id)

            book.loan = book.loan.extended(new_due)
            self.books.save(book)

        logger.info(f"[extend] book={book_id} member={member_id} days={days} due={new_due}")
        return Result.success()

    def can_member_borrow(self, member_id: str) -> bool:
        if not self.members.exists_by_id(member_id):
            return False
        return self.books.count_by_loaned_to(member_id) < self.max_loans


class QueryService:
    def __init__(self, books: BookRepo, members: MemberRepo, clock: Clock = date.today) -> None:
        self.books = books
        self.members = members
        self.clock = clock

    def search_books(
        self,
        title_contains: Optional[str] = None,
        available_only: Optional[bool] = None,
        loaned_to: Optional[str] = None,
    ) -> List[Book]:
        if loaned_to is not None:
            books = self.books.find_by_loaned_to(loaned_to)
        elif available_only is True:
            books = self.books.find_by_loaned_to_is_null()
        elif available_only is False:
            books = [b for b in self.books.find_all() if b.loan is not None]
        else:
            books = self.books.find_all()

        if title_contains is not None:
            t = title_contains.lower()
            books = [b for b in books if t in b.title.lower()]
        return books

    def overdue_books(self, today: Optional[date] = None) -> List[Book]:
        return self.books.find_by_due_date_before(today or self.clock())

    def member_summary(self, member_id: str) -> MemberSummary:
        if not self.members.exists_by_id(member_id):
            return MemberSummary(ok=False, reason=ErrorCode.MEMBER_NOT_FOUND)
        loans = self.books.find_by_loaned_to(member_id)
        reservations = [
            ReservationPosition(
                book_id=b.id, title=b.title, position=b.reservation_queue.index(member_id)
            )
            for b in self.books.find_by_reservation_queue_containing(member_id)
            if member_id in b.reservation_queue
        ]
        return MemberSummary(ok=True, loans=loans, reservations=reservations)

    def find_book(self, book_id: str) -> Optional[Book]:
        return self.books.find_by_id(book_id)

    def all_books(self) -> List[Book]:
        return self.books.find_all()

    def all_members(self) -> List[Member]:
        return self.members.find_all()
