from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from library_app.dto import ReviewDto
from library_app.errors import ConflictError, NotFoundError, ValidationError
from library_app.models.review import Review
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.review_repo import ReviewRepo


class ReviewService:
    @staticmethod
    def get_reviews_for_book(book_id: int) -> list[ReviewDto]:
        return [ReviewDto.from_model(r) for r in ReviewRepo.list_by_book(book_id)]

    @staticmethod
    def has_user_reviewed(user_id: int, book_id: int) -> bool:
        return ReviewRepo.exists_for(user_id, book_id)

    @staticmethod
    def create_review(user_id: int, book_id: int, rating, comment: str | None = None) -> ReviewDto:
        if BookRepo.get(book_id) is None:
            raise NotFoundError(f"Book with ID {book_id} does not exist")

        try:
            rating = int(rating)
        except (TypeError, ValueError):
            raise ValidationError("rating must be an integer between 1 and 5")
        if not 1 <= rating <= 5:
            raise ValidationError("rating must be an integer between 1 and 5")

        if ReviewRepo.exists_for(user_id, book_id):
            current_app.logger.warning(
                "Duplicate review rejected",
                extra={"event": "review.duplicate", "book_id": book_id, "user_id": user_id},
            )
            raise ConflictError("User has already reviewed this book")

        review = Review(book_id=book_id, user_id=user_id, rating=rating, comment=(comment or None))
        try:
            ReviewRepo.create(review)
        except IntegrityError as e:
            ReviewRepo.rollback()
            raise ConflictError("User has already reviewed this book") from e

        current_app.logger.info(
            "Review created",
            extra={"event": "review.created", "review_id": review.id, "book_id": book_id, "user_id": user_id},
        )
        return ReviewDto.from_model(review)
