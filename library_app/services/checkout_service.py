"""
Checkout lifecycle.

This is the only place that writes ``Book.is_available`` or
``Checkout.return_date``. A book is unavailable exactly when it has an active
(not yet returned) checkout, and every write below keeps the flag and the
checkout row inside one transaction so the two can not drift apart.

Concurrent checkouts of the same book are serialized by the database, not by
this module: ``books.version`` makes the second writer's UPDATE match no rows
(StaleDataError) and the partial unique index on active checkouts rejects a
second active row (IntegrityError). A stale version is retried against
freshly read rows, since unrelated edits bump it too; the re-read then
sees the competing checkout and raises ConflictError.
"""
from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from library_app.dto import CheckoutDto
from library_app.errors import ConflictError, NotFoundError
from library_app.models.checkout import Checkout
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.checkout_repo import CheckoutRepo
from library_app.repositories.user_repo import UserRepo
from library_app.utils.clock import to_naive_utc, utcnow


# attempts per write before a row that keeps changing is reported as a conflict
MAX_WRITE_ATTEMPTS = 3


def _unavailable_message(book_id: int) -> str:
    return f"Book with ID {book_id} is not available for checkout"


class CheckoutService:
    @staticmethod
    def _now(now: datetime | None) -> datetime:
        return to_naive_utc(now) if now is not None else utcnow()

    @staticmethod
    def checkout_book(user_id: int, book_id: int, now: datetime | None = None) -> CheckoutDto:
        log = current_app.logger
        log.info(
            "Attempting to checkout book",
            extra={"event": "checkout.attempt", "book_id": book_id, "user_id": user_id},
        )

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            book = BookRepo.get(book_id)
            if book is None:
                log.warning(
                    "Checkout failed: book not found",
                    extra={"event": "checkout.book_not_found", "book_id": book_id, "user_id": user_id},
                )
                raise NotFoundError(f"Book with ID {book_id} not found")

            user = UserRepo.get_by_id(user_id)
            if user is None:
                log.warning(
                    "Checkout failed: user not found",
                    extra={"event": "checkout.user_not_found", "book_id": book_id, "user_id": user_id},
                )
                raise NotFoundError(f"User with ID {user_id} not found")

            if not book.is_available:
                log.warning(
                    "Checkout failed: book is not available",
                    extra={"event": "checkout.unavailable", "book_id": book_id, "user_id": user_id},
                )
                raise ConflictError(_unavailable_message(book_id))

            checkout = Checkout(book=book, user=user, checkout_date=CheckoutService._now(now))
            book.is_available = False

            try:
                CheckoutRepo.add(checkout)
                CheckoutRepo.commit()
                break
            except StaleDataError as e:
                # the book row changed since we read it; the re-read decides
                CheckoutRepo.rollback()
                if attempt < MAX_WRITE_ATTEMPTS:
                    log.info(
                        "Book changed during checkout, retrying",
                        extra={"event": "checkout.retry", "book_id": book_id, "user_id": user_id,
                               "attempt": attempt},
                    )
                    continue
                log.warning(
                    "Checkout failed: book kept changing",
                    extra={"event": "checkout.conflict", "book_id": book_id, "user_id": user_id,
                           "reason": type(e).__name__},
                )
                raise ConflictError(_unavailable_message(book_id)) from e
            except IntegrityError as e:
                CheckoutRepo.rollback()
                if not CheckoutRepo.has_active_for_book(book_id):
                    log.exception(
                        "Error checking out book",
                        extra={"event": "checkout.failed", "book_id": book_id, "user_id": user_id},
                    )
                    raise
                # another request checked the book out between our read and our write
                log.warning(
                    "Checkout failed: lost race for book",
                    extra={"event": "checkout.conflict", "book_id": book_id, "user_id": user_id,
                           "reason": type(e).__name__},
                )
                raise ConflictError(_unavailable_message(book_id)) from e
            except SQLAlchemyError:
                CheckoutRepo.rollback()
                log.exception(
                    "Error checking out book",
                    extra={"event": "checkout.failed", "book_id": book_id, "user_id": user_id},
                )
                raise

        dto = CheckoutDto.from_model(checkout)
        log.info(
            "Book successfully checked out",
            extra={"event": "checkout.succeeded", "book_id": book_id, "user_id": user_id,
                   "checkout_id": dto.id, "book_title": dto.book_title},
        )
        return dto

    @staticmethod
    def return_book(checkout_id: int, now: datetime | None = None) -> CheckoutDto | None:
        """
        Close an active checkout and make its book available again.

        Returns None both when the checkout does not exist and when it was
        already returned, so a repeated return is a no-op. A return that keeps
        colliding with other writes to the same rows raises ConflictError.
        """
        log = current_app.logger
        log.info(
            "Attempting to return book",
            extra={"event": "return.attempt", "checkout_id": checkout_id},
        )

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            checkout = CheckoutRepo.get(checkout_id)
            if checkout is None:
                log.warning(
                    "Return failed: checkout not found",
                    extra={"event": "return.not_found", "checkout_id": checkout_id},
                )
                return None

            if checkout.return_date is not None:
                log.warning(
                    "Return skipped: checkout already returned",
                    extra={"event": "return.already_returned", "checkout_id": checkout_id,
                           "book_id": checkout.book_id},
                )
                return None

            book_id = checkout.book_id
            checkout.return_date = CheckoutService._now(now)
            checkout.book.is_available = True

            try:
                CheckoutRepo.commit()
                break
            except StaleDataError as e:
                # checkout or book row changed since we read it; the re-read decides
                CheckoutRepo.rollback()
                if attempt < MAX_WRITE_ATTEMPTS:
                    log.info(
                        "Checkout changed during return, retrying",
                        extra={"event": "return.retry", "checkout_id": checkout_id,
                               "book_id": book_id, "attempt": attempt},
                    )
                    continue
                log.error(
                    "Return failed: rows kept changing",
                    extra={"event": "return.conflict", "checkout_id": checkout_id, "book_id": book_id},
                )
                raise ConflictError(f"Checkout with ID {checkout_id} could not be returned, try again") from e
            except SQLAlchemyError:
                CheckoutRepo.rollback()
                log.exception(
                    "Error returning book",
                    extra={"event": "return.failed", "checkout_id": checkout_id, "book_id": book_id},
                )
                raise

        dto = CheckoutDto.from_model(checkout)
        log.info(
            "Book successfully returned",
            extra={"event": "return.succeeded", "checkout_id": checkout_id, "book_id": book_id,
                   "book_title": dto.book_title},
        )
        return dto

    @staticmethod
    def get_user_checkouts(user_id: int) -> list[CheckoutDto]:
        return [CheckoutDto.from_model(c) for c in CheckoutRepo.list_active_by_user(user_id)]

    @staticmethod
    def get_all_active_checkouts() -> list[CheckoutDto]:
        return [CheckoutDto.from_model(c) for c in CheckoutRepo.list_active()]

    @staticmethod
    def get_checkout_by_id(checkout_id: int) -> CheckoutDto | None:
        checkout = CheckoutRepo.get(checkout_id)
        return CheckoutDto.from_model(checkout) if checkout is not None else None

    @staticmethod
    def get_overdue_checkouts(now: datetime | None = None) -> list[CheckoutDto]:
        return [CheckoutDto.from_model(c) for c in CheckoutRepo.find_overdue(CheckoutService._now(now))]

    @staticmethod
    def find_inconsistent_books() -> list[int]:
        return CheckoutRepo.inconsistent_book_ids()
