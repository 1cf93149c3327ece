from datetime import datetime

from sqlalchemy import exists
from sqlalchemy.orm import joinedload

from library_app.extensions import db
from library_app.models.book import Book
from library_app.models.checkout import Checkout, LOAN_PERIOD


def _with_relations(query):
    return query.options(joinedload(Checkout.book), joinedload(Checkout.user))


class CheckoutRepo:
    @staticmethod
    def get(checkout_id: int):
        return _with_relations(Checkout.query).filter(Checkout.id == checkout_id).first()

    @staticmethod
    def list_active_by_user(user_id: int):
        return (
            _with_relations(Checkout.query)
            .filter(Checkout.user_id == user_id, Checkout.return_date.is_(None))
            .order_by(Checkout.checkout_date, Checkout.id)
            .all()
        )

    @staticmethod
    def list_active():
        return (
            _with_relations(Checkout.query)
            .filter(Checkout.return_date.is_(None))
            .order_by(Checkout.checkout_date, Checkout.id)
            .all()
        )

    @staticmethod
    def find_overdue(now: datetime):
        # due_date is not a column: due < now  <=>  checkout_date < now - loan period
        return (
            _with_relations(Checkout.query)
            .filter(Checkout.return_date.is_(None), Checkout.checkout_date < now - LOAN_PERIOD)
            .order_by(Checkout.checkout_date, Checkout.id)
            .all()
        )

    @staticmethod
    def has_active_for_book(book_id: int) -> bool:
        return db.session.query(
            exists().where(Checkout.book_id == book_id, Checkout.return_date.is_(None))
        ).scalar()

    @staticmethod
    def inconsistent_book_ids():
        """Books whose is_available flag disagrees with active-checkout existence."""
        active = exists().where(Checkout.book_id == Book.id, Checkout.return_date.is_(None))
        rows = (
            db.session.query(Book.id)
            .filter(
                ((Book.is_available.is_(True)) & active)
                | ((Book.is_available.is_(False)) & ~active)
            )
            .order_by(Book.id)
            .all()
        )
        return [r[0] for r in rows]

    @staticmethod
    def add(checkout: Checkout):
        db.session.add(checkout)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
