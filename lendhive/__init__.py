"""
LendHive loan engine package.

Exports key modules for convenient imports.
"""

from .domain import (
    ErrorCode,
    Member,
    Loan,
    Book,
    Result,
    Returned,
    ReturnFailed,
    ReturnResult,
    ReservationPosition,
    MemberSummary,
)

from .errors import LendHiveError, RepositoryError

from .repositories import (
    BookRepo,
    MemberRepo,
    InMemoryBookRepo,
    InMemoryMemberRepo,
)

from .locking import KeyedLocks, LockRegistry

from .services import (
    BookManagementService,
    MemberManagementService,
    LoanService,
    QueryService,
)

from .config import Settings, settings
from .api import LibrarySystem
from .seed import build_system, seed_demo_data

__all__ = [
    # domain
    "ErrorCode",
    "Member",
    "Loan",
    "Book",
    "Result",
    "Returned",
    "ReturnFailed",
    "ReturnResult",
    "ReservationPosition",
    "MemberSummary",
    # errors
    "LendHiveError",
    "RepositoryError",
    # repos
    "BookRepo",
    "MemberRepo",
    "InMemoryBookRepo",
    "InMemoryMemberRepo",
    # locking
    "KeyedLocks",
    "LockRegistry",
    # services
    "BookManagementService",
    "MemberManagementService",
    "LoanService",
    "QueryService",
    # config
    "Settings",
    "settings",
    # api
    "LibrarySystem",
    # seed
    "build_system",
    "seed_demo_data",
]
