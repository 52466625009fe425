from lendhive import ErrorCode


def test_create_and_find_book(lib):
    result = lib.create_book("b1", "Clean Code")

    assert result.ok
    book = lib.find_book("b1")
    assert book.title == "Clean Code"
    assert book.loan is None
    assert book.reservation_queue == []


def test_create_book_requires_id_and_title(lib):
    assert lib.create_book(None, "Title").reason == ErrorCode.INVALID_REQUEST
    assert lib.create_book("b1", None).reason == ErrorCode.INVALID_REQUEST
    assert lib.all_books() == []


def test_create_duplicate_book(lib):
    lib.create_book("b1", "Clean Code")

    result = lib.create_book("b1", "Something else")

    assert not result.ok
    assert result.reason == ErrorCode.BOOK_ALREADY_EXISTS
    assert lib.find_book("b1").title == "Clean Code"


def test_update_book_title(lib):
    lib.create_book("b1", "Old Title")

    assert lib.update_book("b1", "New Title").ok
    assert lib.find_book("b1").title == "New Title"


def test_update_book_errors(lib):
    assert lib.update_book("nope", "x").reason == ErrorCode.BOOK_NOT_FOUND
    lib.create_book("b1", "Old Title")
    assert lib.update_book("b1", None).reason == ErrorCode.INVALID_REQUEST
    assert lib.find_book("b1").title == "Old Title"


def test_update_keeps_loan_and_queue(populated):
    populated.borrow_book("b1", "m1")
    populated.reserve_book("b1", "m2")

    populated.update_book("b1", "Renamed")

    book = populated.find_book("b1")
    assert book.loaned_to == "m1"
    assert book.reservation_queue == ["m2"]


def test_delete_book(lib):
    lib.create_book("b1", "Clean Code")

    assert lib.delete_book("b1").ok
    assert lib.find_book("b1") is None
    assert lib.delete_book("b1").reason == ErrorCode.BOOK_NOT_FOUND


def test_delete_loaned_book_is_refused(populated):
    populated.borrow_book("b1", "m1")

    assert populated.delete_book("b1").reason == ErrorCode.BOOK_LOANED
    assert populated.find_book("b1") is not None


def test_delete_reserved_book_is_refused(populated, give_loans):
    # m1 at the limit, so reserving a free book queues instead of loaning
    give_loans("m1", 5)
    populated.reserve_book("b1", "m1")
    assert populated.find_book("b1").loan is None

    assert populated.delete_book("b1").reason == ErrorCode.BOOK_RESERVED
