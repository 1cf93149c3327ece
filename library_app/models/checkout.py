from datetime import timedelta

from sqlalchemy import Index, text

from library_app.extensions import db

LOAN_PERIOD = timedelta(days=5)


class Checkout(db.Model):
    __tablename__ = "checkouts"

    id = db.Column(db.Integer, primary_key=True)

    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # naive UTC
    checkout_date = db.Column(db.DateTime, nullable=False)
    return_date = db.Column(db.DateTime, nullable=True)

    version = db.Column(db.Integer, nullable=False)

    book = db.relationship("Book", backref="checkouts")
    user = db.relationship("User", backref="checkouts")

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        # at most one active checkout per book
        Index(
            "uq_checkouts_active_book",
            "book_id",
            unique=True,
            sqlite_where=text("return_date IS NULL"),
            postgresql_where=text("return_date IS NULL"),
        ),
    )

    @property
    def due_date(self):
        return self.checkout_date + LOAN_PERIOD

    @property
    def is_active(self) -> bool:
        return self.return_date is None

    def __repr__(self):
        return f"<Checkout {self.id} book={self.book_id} user={self.user_id} active={self.is_active}>"
