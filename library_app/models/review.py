from library_app.extensions import db
from library_app.utils.clock import utcnow


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.Integer, primary_key=True)

    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    book = db.relationship("Book", backref=db.backref("reviews", cascade="all, delete-orphan"))
    user = db.relationship("User", backref="reviews")

    __table_args__ = (
        db.UniqueConstraint("book_id", "user_id", name="uq_reviews_book_user"),
        db.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
