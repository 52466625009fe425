from __future__ import annotations
from datetime import date
from typing import Dict, List, Optional

from .config import Settings, settings as default_settings
from .domain import Book, Member, MemberSummary, Result, ReturnResult
from .locking import LockRegistry
from .repositories import BookRepo, InMemoryBookRepo, InMemoryMemberRepo, MemberRepo
from .services import (
    BookManagementService,
    Clock,
    LoanService,
    MemberManagementService,
    QueryService,
)


class LibrarySystem:
    """
    A simple facade that wires repos + services and offers one entry point
    for request handlers. It adds no rules of its own.
    """

    def __init__(
        self,
        books: Optional[BookRepo] = None,
        members: Optional[MemberRepo] = None,
        config: Optional[Settings] = None,
        clock: Clock = date.today,
    ) -> None:
        self.config = config or default_settings

        # repos
        self.books = books if books is not None else InMemoryBookRepo()
        self.members = members if members is not None else InMemoryMemberRepo()
        self.locks = LockRegistry()

        # services
        self.book_management = BookManagementService(self.books, self.locks)
        self.member_management = MemberManagementService(self.books, self.members, self.locks)
        self.loans = LoanService(self.books, self.members, self.locks, self.config, clock)
        self.queries = QueryService(self.books, self.members, clock)

    # ---- books
    def create_book(self, book_id: Optional[str], title: Optional[str]) -> Result:
        return self.book_management.create_book(book_id, title)

    def update_book(self, book_id: str, title: Optional[str]) -> Result:
        return self.book_management.update_book(book_id, title)

    def delete_book(self, book_id: str) -> Result:
        return self.book_management.delete_book(book_id)

    # ---- members
    def create_member(self, member_id: Optional[str], name: Optional[str]) -> Result:
        return self.member_management.create_member(member_id, name)

    def update_member(self, member_id: str, name: Optional[str]) -> Result:
        return self.member_management.update_member(member_id, name)

    def delete_member(self, member_id: str) -> Result:
        return self.member_management.delete_member(member_id)

    # ---- circulation
    def borrow_book(self, book_id: str, member_id: str, today: Optional[date] = None) -> Result:
        return self.loans.borrow_book(book_id, member_id, today)

    def return_book(
        self, book_id: str, member_id: Optional[str], today: Optional[date] = None
    ) -> ReturnResult:
        return self.loans.return_book(book_id, member_id, today)

    def reserve_book(self, book_id: str, member_id: str, today: Optional[date] = None) -> Result:
        return self.loans.reserve_book(book_id, member_id, today)

    def cancel_reservation(self, book_id: str, member_id: str) -> Result:
        return self.loans.cancel_reservation(book_id, member_id)

    def extend_loan(self, book_id: str, member_id: str, days: int) -> Result:
        return self.loans.extend_loan(book_id, member_id, days)

    def can_member_borrow(self, member_id: str) -> bool:
        return self.loans.can_member_borrow(member_id)

    # ---- queries
    def search_books(
        self,
        title_contains: Optional[str] = None,
        available_only: Optional[bool] = None,
        loaned_to: Optional[str] = None,
    ) -> List[Book]:
        return self.queries.search_books(title_contains, available_only, loaned_to)

    def overdue_books(self, today: Optional[date] = None) -> List[Book]:
        return self.queries.overdue_books(today)

    def member_summary(self, member_id: str) -> MemberSummary:
        return self.queries.member_summary(member_id)

    def find_book(self, book_id: str) -> Optional[Book]:
        return self.queries.find_book(book_id)

    def all_books(self) -> List[Book]:
        return self.queries.all_books()

    def all_members(self) -> List[Member]:
        return self.queries.all_members()

    def health(self) -> Dict[str, str]:
        return {"status": "ok"}
