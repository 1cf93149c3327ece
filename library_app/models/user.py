from library_app.extensions import db
from library_app.utils.clock import utcnow

ROLES = ("customer", "librarian")


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(20), nullable=False, default="customer")  # customer / librarian

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
