from __future__ import annotations

import math
import random
from datetime import date

from flask import current_app

from library_app.dto import BookDto
from library_app.errors import ConflictError, NotFoundError, ValidationError
from library_app.models.book import Book
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.checkout_repo import CheckoutRepo

# fields a client may set; is_available is owned by CheckoutService
EDITABLE_FIELDS = ("title", "author", "isbn", "publisher", "category", "description", "cover_image")


def _parse_date(value):
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError("published_date must be an ISO date (YYYY-MM-DD)")


def _parse_page_count(value):
    try:
        count = int(value or 0)
    except (TypeError, ValueError):
        raise ValidationError("page_count must be an integer")
    if count < 0:
        raise ValidationError("page_count must be >= 0")
    return count


def _required(data: dict, key: str) -> str:
    value = (data.get(key) or "").strip()
    if not value:
        raise ValidationError(f"{key} is required")
    return value


class BookService:
    @staticmethod
    def _page_window(page, page_size):
        max_size = current_app.config.get("MAX_PAGE_SIZE", 100)
        page = max(1, int(page or 1))
        page_size = int(page_size or current_app.config.get("DEFAULT_PAGE_SIZE", 20))
        page_size = min(max(1, page_size), max_size)
        return page, page_size

    @staticmethod
    def _paginate(query, page, page_size):
        page, page_size = BookService._page_window(page, page_size)
        total = query.order_by(None).count()
        rows = query.offset((page - 1) * page_size).limit(page_size).all()
        return {
            "items": [BookDto.from_model(book, avg) for book, avg in rows],
            "total_count": total,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size) if total else 0,
        }

    @staticmethod
    def list_books(sort_by=None, ascending=True, page=1, page_size=None) -> dict:
        query, _stats = BookRepo.query_with_ratings()
        query = BookRepo.apply_sort(query, sort_by, ascending)
        return BookService._paginate(query, page, page_size)

    @staticmethod
    def search_books(term="", category=None, author=None, is_available=None,
                     sort_by=None, ascending=True, page=1, page_size=None) -> dict:
        query, _stats = BookRepo.query_with_ratings()
        if term:
            like = f"%{term}%"
            query = query.filter(Book.title.ilike(like) | Book.author.ilike(like))
        if category:
            query = query.filter(Book.category == category)
        if author:
            query = query.filter(Book.author.ilike(f"%{author}%"))
        if is_available is not None:
            query = query.filter(Book.is_available.is_(bool(is_available)))
        query = BookRepo.apply_sort(query, sort_by, ascending)
        return BookService._paginate(query, page, page_size)

    @staticmethod
    def featured_books(count=10, min_rating=0, available_only=False, rng=None) -> dict:
        """A random contiguous window of books, optionally filtered by rating/availability."""
        rng = rng or random.Random()
        query, stats = BookRepo.query_with_ratings()
        if min_rating and float(min_rating) > 0:
            query = query.filter(stats.c.review_count > 0, stats.c.avg_rating >= float(min_rating))
        if available_only:
            query = query.filter(Book.is_available.is_(True))

        total = query.count()
        count = max(1, int(count))
        skip = rng.randint(0, total - count) if total > count else 0
        rows = query.order_by(Book.id).offset(skip).limit(count).all()
        return {"items": [BookDto.from_model(b, avg) for b, avg in rows], "total_count": total}

    @staticmethod
    def get_book(book_id: int) -> BookDto:
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError(f"Book with ID {book_id} not found")
        return BookDto.from_model(book, BookRepo.average_rating(book_id))

    @staticmethod
    def create_book(data: dict) -> BookDto:
        book = Book(
            title=_required(data, "title"),
            author=_required(data, "author"),
            isbn=data.get("isbn") or None,
            publisher=data.get("publisher") or None,
            category=data.get("category") or None,
            description=data.get("description") or None,
            cover_image=data.get("cover_image") or None,
            published_date=_parse_date(data.get("published_date")),
            page_count=_parse_page_count(data.get("page_count")),
            is_available=True,
        )
        BookRepo.add(book)
        BookRepo.commit()
        current_app.logger.info(
            "Book created", extra={"event": "book.created", "book_id": book.id, "title": book.title}
        )
        return BookDto.from_model(book)

    @staticmethod
    def update_book(book_id: int, data: dict) -> BookDto:
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError(f"Book with ID {book_id} not found")

        for k in ("title", "author"):
            if k in data:
                setattr(book, k, _required(data, k))
        for k in EDITABLE_FIELDS[2:]:
            if k in data:
                setattr(book, k, data[k] or None)
        if "published_date" in data:
            book.published_date = _parse_date(data["published_date"])
        if "page_count" in data:
            book.page_count = _parse_page_count(data["page_count"])

        BookRepo.commit()
        current_app.logger.info("Book updated", extra={"event": "book.updated", "book_id": book_id})
        return BookDto.from_model(book, BookRepo.average_rating(book_id))

    @staticmethod
    def delete_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError(f"Book with ID {book_id} not found")
        if CheckoutRepo.has_active_for_book(book_id):
            raise ConflictError(f"Book with ID {book_id} is checked out and can not be deleted")
        if book.checkouts:
            # checkouts are a permanent record
            raise ConflictError(f"Book with ID {book_id} has checkout history and can not be deleted")

        BookRepo.delete(book)
        BookRepo.commit()
        current_app.logger.info("Book deleted", extra={"event": "book.deleted", "book_id": book_id})
