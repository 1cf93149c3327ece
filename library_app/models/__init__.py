# Import every model so relationship() strings resolve and create_all sees all tables.
from library_app.models.book import Book
from library_app.models.checkout import Checkout, LOAN_PERIOD
from library_app.models.review import Review
from library_app.models.user import User, ROLES

__all__ = ["Book", "Checkout", "LOAN_PERIOD", "Review", "User", "ROLES"]
