import logging

from lendhive import ErrorCode, LibrarySystem, Settings, build_system, seed_demo_data


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LENDHIVE_MAX_LOANS", "2")
    monkeypatch.setenv("LENDHIVE_DEFAULT_LOAN_DAYS", "7")
    monkeypatch.setenv("LENDHIVE_SEED_DEMO_DATA", "yes")
    monkeypatch.setenv("LENDHIVE_LOG_LEVEL", "debug")

    cfg = Settings()

    assert cfg.max_loans == 2
    assert cfg.default_loan_days == 7
    assert cfg.max_extension_days == 90
    assert cfg.seed_demo_data is True
    assert cfg.log_level == "DEBUG"


def test_settings_defaults(monkeypatch):
    for name in (
        "LENDHIVE_MAX_LOANS",
        "LENDHIVE_DEFAULT_LOAN_DAYS",
        "LENDHIVE_MAX_EXTENSION_DAYS",
        "LENDHIVE_SEED_DEMO_DATA",
        "LENDHIVE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = Settings()

    assert (cfg.max_loans, cfg.default_loan_days, cfg.max_extension_days) == (5, 14, 90)
    assert cfg.seed_demo_data is False


def test_custom_policy_is_enforced(today):
    lib = LibrarySystem(config=Settings(max_loans=1, default_loan_days=3), clock=lambda: today)
    lib.create_member("m1", "Kertu")
    lib.create_book("b1", "Clean Code")
    lib.create_book("b2", "Refactoring")

    assert lib.borrow_book("b1", "m1").ok
    assert lib.find_book("b1").due_date.toordinal() - today.toordinal() == 3
    assert lib.borrow_book("b2", "m1").reason == ErrorCode.BORROW_LIMIT


def test_seed_demo_data(lib):
    seed_demo_data(lib)
    seed_demo_data(lib)

    assert [m.name for m in lib.all_members()] == ["Kertu", "Rasmus", "Liis", "Markus"]
    assert [b.id for b in lib.all_books()] == ["b1", "b2", "b3", "b4", "b5", "b6"]


def test_build_system_seeds_when_asked():
    assert len(build_system(Settings(seed_demo_data=True)).all_books()) == 6
    assert build_system(Settings(seed_demo_data=False)).all_books() == []


def test_denials_are_logged(populated, caplog):
    with caplog.at_level(logging.INFO, logger="lendhive.services"):
        populated.borrow_book("b1", "m1")
        populated.borrow_book("b1", "m2")

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("[borrow] book=b1 member=m1") for m in messages)
    assert any("[borrow] denied" in m and "reason=BOOK_UNAVAILABLE" in m for m in messages)


def test_handoff_skip_is_a_warning(populated, give_loans, caplog):
    populated.borrow_book("b1", "m1")
    populated.reserve_book("b1", "m2")
    give_loans("m2", 5)

    with caplog.at_level(logging.INFO, logger="lendhive.services"):
        populated.return_book("b1", "m1")

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "member=m2" in warnings[0].getMessage()


def test_updates_are_logged(populated, caplog):
    with caplog.at_level(logging.INFO, logger="lendhive.services"):
        populated.update_book("b1", "Renamed")
        populated.update_member("m1", "Kertu K.")

    messages = [r.getMessage() for r in caplog.records]
    assert "[book] updated book=b1" in messages
    assert "[member] updated member=m1" in messages
