from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ErrorCode(str, Enum):
    """Closed set of failure reasons; the value is the wire string."""

    BOOK_NOT_FOUND = "BOOK_NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    BOOK_ALREADY_EXISTS = "BOOK_ALREADY_EXISTS"
    MEMBER_ALREADY_EXISTS = "MEMBER_ALREADY_EXISTS"
    INVALID_REQUEST = "INVALID_REQUEST"
    BORROW_LIMIT = "BORROW_LIMIT"
    ALREADY_BORROWED = "ALREADY_BORROWED"
    BOOK_UNAVAILABLE = "BOOK_UNAVAILABLE"
    RESERVED = "RESERVED"
    ALREADY_RESERVED = "ALREADY_RESERVED"
    NOT_RESERVED = "NOT_RESERVED"
    INVALID_EXTENSION = "INVALID_EXTENSION"
    NOT_LOANED = "NOT_LOANED"
    NOT_BORROWER = "NOT_BORROWER"
    RESERVATION_EXISTS = "RESERVATION_EXISTS"
    MAX_EXTENSION_REACHED = "MAX_EXTENSION_REACHED"
    BOOK_LOANED = "BOOK_LOANED"
    BOOK_RESERVED = "BOOK_RESERVED"
    MEMBER_HAS_LOANS = "MEMBER_HAS_LOANS"

    def __str__(self) -> str:
        return self.value


@dataclass
class Member:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Loan:
    """An active loan. Borrower and both dates only exist together."""

    borrower: str
    due_date: date
    first_due_date: date

    @classmethod
    def starting(cls, borrower: str, due_date: date) -> "Loan":
        return cls(borrower=borrower, due_date=due_date, first_due_date=due_date)

    def extended(self, due_date: date) -> "Loan":
        return Loan(borrower=self.borrower, due_date=due_date, first_due_date=self.first_due_date)

    def is_overdue(self, today: date) -> bool:
        return self.due_date < today


@dataclass
class Book:
    id: str
    title: str
    loan: Optional[Loan] = None
    reservation_queue: List[str] = field(default_factory=list)

    @property
    def loaned_to(self) -> Optional[str]:
        return self.loan.borrower if self.loan else None

    @property
    def due_date(self) -> Optional[date]:
        return self.loan.due_date if self.loan else None

    @property
    def first_due_date(self) -> Optional[date]:
        return self.loan.first_due_date if self.loan else None

    @property
    def is_available(self) -> bool:
        return self.loan is None

    def queue_head(self) -> Optional[str]:
        return self.reservation_queue[0] if self.reservation_queue else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "loanedTo": self.loaned_to,
            "reservationQueue": list(self.reservation_queue),
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "firstDueDate": self.first_due_date.isoformat() if self.first_due_date else None,
        }


@dataclass(frozen=True)
class Result:
    ok: bool
    reason: Optional[ErrorCode] = None

    @classmethod
    def success(cls) -> "Result":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: ErrorCode) -> "Result":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "reason": self.reason.value if self.reason else None}


@dataclass(frozen=True)
class Returned:
    """Successful return; next_member_id is whoever received the book by handoff."""

    next_member_id: Optional[str] = None

    ok = True

    def __bool__(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"ok": True}
        if self.next_member_id is not None:
            payload["nextMemberId"] = self.next_member_id
        return payload


@dataclass(frozen=True)
class ReturnFailed:
    """Failed return. The reason is diagnostic only and is not sent on the wire."""

    reason: Optional[ErrorCode] = None

    ok = False
    next_member_id = None

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False}


ReturnResult = Union[Returned, ReturnFailed]


@dataclass(frozen=True)
class ReservationPosition:
    book_id: str
    title: str
    position: int

    def to_dict(self) -> Dict[str, Any]:
        return {"bookId": self.book_id, "title": self.title, "position": self.position}


@dataclass
class MemberSummary:
    ok: bool
    reason: Optional[ErrorCode] = None
    loans: List[Book] = field(default_factory=list)
    reservations: List[ReservationPosition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "ok": self.ok,
            "loans": [
                {
                    "bookId": b.id,
                    "title": b.title,
                    "dueDate": b.due_date.isoformat() if b.due_date else None,
                }
                for b in self.loans
            ],
            "reservations": [r.to_dict() for r in self.reservations],
        }
        if self.reason is not None:
            payload["reason"] = self.reason.value
        return payload
