from library_app.extensions import db
from library_app.utils.clock import utcnow


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(300), nullable=False, index=True)
    author = db.Column(db.String(200), nullable=False, index=True)
    isbn = db.Column(db.String(32), nullable=True, index=True)

    publisher = db.Column(db.String(200), nullable=True)
    category = db.Column(db.String(100), nullable=True, index=True)
    description = db.Column(db.Text, nullable=True)
    cover_image = db.Column(db.String(500), nullable=True)
    published_date = db.Column(db.Date, nullable=True)
    page_count = db.Column(db.Integer, nullable=False, default=0)

    # written only by CheckoutService
    is_available = db.Column(db.Boolean, nullable=False, default=True, index=True)

    # bumped on every UPDATE; a writer holding an old version gets StaleDataError
    version = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Book {self.id} {self.title!r} available={self.is_available}>"
