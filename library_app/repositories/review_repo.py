from library_app.extensions import db
from library_app.models.review import Review


class ReviewRepo:
    @staticmethod
    def list_by_book(book_id: int):
        return Review.query.filter_by(book_id=book_id).order_by(Review.id).all()

    @staticmethod
    def exists_for(user_id: int, book_id: int) -> bool:
        return Review.query.filter_by(user_id=user_id, book_id=book_id).first() is not None

    @staticmethod
    def create(review: Review):
        db.session.add(review)
        db.session.commit()
        return review

    @staticmethod
    def rollback():
        db.session.rollback()
