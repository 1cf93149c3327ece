import logging

from library_app.extensions import db
from library_app.models import Book, Checkout, User
from library_app.utils.logging import KeyValueFormatter


def _record(**extra):
    record = logging.makeLogRecord({"name": "library_app", "levelno": logging.INFO,
                                    "levelname": "INFO", "msg": "Book successfully checked out"})
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_formatter_appends_extra_fields_sorted():
    line = KeyValueFormatter("%(levelname)s %(message)s").format(
        _record(event="checkout.succeeded", book_id=3, user_id=7)
    )
    assert line == "INFO Book successfully checked out book_id=3 event=checkout.succeeded user_id=7"


def test_formatter_without_extra_fields():
    line = KeyValueFormatter("%(message)s").format(_record())
    assert line == "Book successfully checked out"


def test_app_logger_uses_key_value_formatter(app):
    assert any(isinstance(h.formatter, KeyValueFormatter) for h in app.logger.handlers)


def test_seed_demo_and_check_availability(app):
    runner = app.test_cli_runner()

    seeded = runner.invoke(args=["seed-demo"])
    assert seeded.exit_code == 0
    assert "Seeded 4 users, 8 books" in seeded.output
    assert User.query.filter_by(role="librarian").count() == 1
    assert Book.query.filter_by(is_available=True).count() == 8

    again = runner.invoke(args=["seed-demo"])
    assert "Seeded 0 users, 0 books" in again.output

    ok = runner.invoke(args=["check-availability"])
    assert ok.exit_code == 0
    assert "All books consistent." in ok.output


def test_check_availability_reports_drift(app, make_book):
    book = make_book()
    book.is_available = False  # flag flipped without a checkout
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["check-availability"])

    assert result.exit_code == 1
    assert f"Inconsistent books: {book.id}" in result.output
    assert Checkout.query.count() == 0
