from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from library_app.models.checkout import LOAN_PERIOD
from library_app.utils.clock import as_utc


def _iso(value):
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class CheckoutDto:
    id: int
    book_id: int
    book_title: str
    user_id: int
    user_name: str
    checkout_date: datetime
    due_date: datetime
    return_date: datetime | None

    @classmethod
    def from_model(cls, checkout) -> CheckoutDto:
        checkout_date = as_utc(checkout.checkout_date)
        return cls(
            id=checkout.id,
            book_id=checkout.book_id,
            book_title=checkout.book.title,
            user_id=checkout.user_id,
            user_name=checkout.user.username,
            checkout_date=checkout_date,
            # recomputed here, never read back from storage
            due_date=checkout_date + LOAN_PERIOD,
            return_date=as_utc(checkout.return_date),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "book_title": self.book_title,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "checkout_date": _iso(self.checkout_date),
            "due_date": _iso(self.due_date),
            "return_date": _iso(self.return_date),
        }


@dataclass(frozen=True)
class BookDto:
    id: int
    title: str
    author: str
    isbn: str | None
    publisher: str | None
    category: str | None
    description: str | None
    cover_image: str | None
    published_date: date | None
    page_count: int
    is_available: bool
    average_rating: float = 0.0

    @classmethod
    def from_model(cls, book, average_rating=None) -> BookDto:
        return cls(
            id=book.id,
            title=book.title,
            author=book.author,
            isbn=book.isbn,
            publisher=book.publisher,
            category=book.category,
            description=book.description,
            cover_image=book.cover_image,
            published_date=book.published_date,
            page_count=book.page_count or 0,
            is_available=bool(book.is_available),
            average_rating=round(float(average_rating or 0), 2),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "publisher": self.publisher,
            "category": self.category,
            "description": self.description,
            "cover_image": self.cover_image,
            "published_date": _iso(self.published_date),
            "page_count": self.page_count,
            "is_available": self.is_available,
            "average_rating": self.average_rating,
        }


@dataclass(frozen=True)
class ReviewDto:
    id: int
    book_id: int
    user_id: int
    user_name: str
    rating: int
    comment: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, review) -> ReviewDto:
        return cls(
            id=review.id,
            book_id=review.book_id,
            user_id=review.user_id,
            user_name=review.user.username,
            rating=review.rating,
            comment=review.comment,
            created_at=as_utc(review.created_at),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": _iso(self.created_at),
        }
