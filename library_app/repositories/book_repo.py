from sqlalchemy import func

from library_app.extensions import db
from library_app.models.book import Book
from library_app.models.review import Review

SORT_COLUMNS = {
    "title": Book.title,
    "author": Book.author,
    "availability": Book.is_available,
}


class BookRepo:
    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def list_available():
        return Book.query.filter(Book.is_available.is_(True)).order_by(Book.id).all()

    @staticmethod
    def find_by_author(fragment: str, limit: int = 3):
        return (
            Book.query
            .filter(Book.author.ilike(f"%{fragment}%"))
            .order_by(Book.id)
            .limit(limit)
            .all()
        )

    @staticmethod
    def list_categories():
        rows = (
            db.session.query(Book.category)
            .filter(Book.category.isnot(None))
            .distinct()
            .order_by(Book.category)
            .all()
        )
        return [r[0] for r in rows]

    @staticmethod
    def find_available_in_category(category: str, limit: int = 3):
        return (
            Book.query
            .filter(func.lower(Book.category) == category.lower(), Book.is_available.is_(True))
            .order_by(Book.id)
            .limit(limit)
            .all()
        )

    @staticmethod
    def rating_stats():
        """Subquery of (book_id, avg_rating, review_count) for reviewed books."""
        return (
            db.session.query(
                Review.book_id.label("book_id"),
                func.avg(Review.rating).label("avg_rating"),
                func.count(Review.id).label("review_count"),
            )
            .group_by(Review.book_id)
            .subquery()
        )

    @staticmethod
    def query_with_ratings():
        stats = BookRepo.rating_stats()
        query = (
            db.session.query(Book, func.coalesce(stats.c.avg_rating, 0).label("avg_rating"))
            .outerjoin(stats, stats.c.book_id == Book.id)
        )
        return query, stats

    @staticmethod
    def apply_sort(query, sort_by=None, ascending=True):
        column = SORT_COLUMNS.get((sort_by or "").lower())
        if column is None:
            return query.order_by(Book.id)
        ordered = column.asc() if ascending else column.desc()
        return query.order_by(ordered, Book.id)

    @staticmethod
    def top_rated_available(limit: int = 3):
        stats = BookRepo.rating_stats()
        return (
            db.session.query(Book, stats.c.avg_rating)
            .join(stats, stats.c.book_id == Book.id)
            .filter(Book.is_available.is_(True), stats.c.review_count > 0)
            .order_by(stats.c.avg_rating.desc(), Book.id)
            .limit(limit)
            .all()
        )

    @staticmethod
    def average_rating(book_id: int):
        value = db.session.query(func.avg(Review.rating)).filter(Review.book_id == book_id).scalar()
        return float(value) if value is not None else 0.0

    @staticmethod
    def add(book: Book):
        db.session.add(book)

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
