from __future__ import annotations
from abc import ABC, abstractmethod
from copy import deepcopy
from datetime import date
import threading
from typing import Dict, List, Optional

from .domain import Book, Member
from .errors import RepositoryError


class BookRepo(ABC):
    """Port for book storage. Implementations must be thread-safe and hand out copies."""

    @abstractmethod
    def find_by_id(self, book_id: str) -> Optional[Book]: ...

    @abstractmethod
    def exists_by_id(self, book_id: str) -> bool: ...

    @abstractmethod
    def save(self, book: Book) -> Book: ...

    @abstractmethod
    def delete(self, book: Book) -> None: ...

    @abstractmethod
    def find_all(self) -> List[Book]: ...

    @abstractmethod
    def count_by_loaned_to(self, member_id: str) -> int: ...

    @abstractmethod
    def find_by_loaned_to(self, member_id: str) -> List[Book]: ...

    @abstractmethod
    def find_by_due_date_before(self, day: date) -> List[Book]: ...

    @abstractmethod
    def find_by_reservation_queue_containing(self, member_id: str) -> List[Book]: ...

    @abstractmethod
    def find_by_loaned_to_is_null(self) -> List[Book]: ...

    @abstractmethod
    def exists_by_loaned_to(self, member_id: str) -> bool: ...

    @abstractmethod
    def find_by_title_containing_ignore_case(self, text: str) -> List[Book]: ...


class MemberRepo(ABC):
    """Port for member storage."""

    @abstractmethod
    def find_by_id(self, member_id: str) -> Optional[Member]: ...

    @abstractmethod
    def exists_by_id(self, member_id: str) -> bool: ...

    @abstractmethod
    def save(self, member: Member) -> Member: ...

    @abstractmethod
    def delete(self, member: Member) -> None: ...

    @abstractmethod
    def find_all(self) -> List[Member]: ...


class InMemoryBookRepo(BookRepo):
    def __init__(self) -> None:
        self._books: Dict[str, Book] = {}
        self._lock = threading.RLock()

    def _select(self, predicate) -> List[Book]:
        with self._lock:
            return [deepcopy(b) for b in self._books.values() if predicate(b)]

    def find_by_id(self, book_id: str) -> Optional[Book]:
        with self._lock:
            book = self._books.get(book_id)
            return deepcopy(book) if book else None

    def exists_by_id(self, book_id: str) -> bool:
        with self._lock:
            return book_id in self._books

    def save(self, book: Book) -> Book:
        if book.id is None:
            raise RepositoryError("cannot save a book without an id")
        with self._lock:
            self._books[book.id] = deepcopy(book)
        return book

    def delete(self, book: Book) -> None:
        with self._lock:
            self._books.pop(book.id, None)

    def find_all(self) -> List[Book]:
        return self._select(lambda b: True)

    def count_by_loaned_to(self, member_id: str) -> int:
        with self._lock:
            return sum(1 for b in self._books.values() if b.loaned_to == member_id)

    def find_by_loaned_to(self, member_id: str) -> List[Book]:
        return self._select(lambda b: b.loaned_to == member_id)

    def find_by_due_date_before(self, day: date) -> List[Book]:
        return self._select(lambda b: b.loan is not None and b.loan.is_overdue(day))

    def find_by_reservation_queue_containing(self, member_id: str) -> List[Book]:
        return self._select(lambda b: member_id in b.reservation_queue)

    def find_by_loaned_to_is_null(self) -> List[Book]:
        return self._select(lambda b: b.loan is None)

    def exists_by_loaned_to(self, member_id: str) -> bool:
        with self._lock:
            return any(b.loaned_to == member_id for b in self._books.values())

    def find_by_title_containing_ignore_case(self, text: str) -> List[Book]:
        t = text.lower()
        return self._select(lambda b: t in b.title.lower())


class InMemoryMemberRepo(MemberRepo):
    def __init__(self) -> None:
        self._members: Dict[str, Member] = {}
        self._lock = threading.RLock()

    def find_by_id(self, member_id: str) -> Optional[Member]:
        with self._lock:
            member = self._members.get(member_id)
            return deepcopy(member) if member else None

    def exists_by_id(self, member_id: str) -> bool:
        with self._lock:
            return member_id in self._members

    def save(self, member: Member) -> Member:
        if member.id is None:
            raise RepositoryError("cannot save a member without an id")
        with self._lock:
            self._members[member.id] = deepcopy(member)
        return member

    def delete(self, member: Member) -> None:
        with self._lock:
            self._members.pop(member.id, None)

    def find_all(self) -> List[Member]:
        with self._lock:
            return [deepcopy(m) for m in self._members.values()]
