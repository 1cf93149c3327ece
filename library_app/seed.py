from __future__ import annotations

import random
from datetime import date

from werkzeug.security import generate_password_hash

from library_app.extensions import db
from library_app.models.book import Book
from library_app.models.review import Review
from library_app.models.user import User

DEMO_PASSWORD = "Password123!"

DEMO_BOOKS = [
    ("Dune", "Frank Herbert", "Science Fiction", 412, date(1965, 8, 1)),
    ("The Left Hand of Darkness", "Ursula K. Le Guin", "Science Fiction", 304, date(1969, 3, 1)),
    ("The Hobbit", "J.R.R. Tolkien", "Fantasy", 310, date(1937, 9, 21)),
    ("The Fellowship of the Ring", "J.R.R. Tolkien", "Fantasy", 423, date(1954, 7, 29)),
    ("Clean Code", "Robert C. Martin", "Computer Science", 464, date(2008, 8, 1)),
    ("The Pragmatic Programmer", "Andrew Hunt", "Computer Science", 352, date(1999, 10, 20)),
    ("Gone Girl", "Gillian Flynn", "Thriller", 432, date(2012, 6, 5)),
    ("The Name of the Rose", "Umberto Eco", "Mystery", 536, date(1980, 1, 1)),
]


def seed_demo_data(rng: random.Random | None = None) -> dict:
    """
    Insert demo users, books and reviews. Skips everything when books already exist.

    Returns counts of what was created.
    """
    rng = rng or random.Random(42)
    if db.session.query(Book.id).first() is not None:
        return {"users": 0, "books": 0, "reviews": 0}

    librarian = User(username="librarian", email="librarian@library.local",
                     password_hash=generate_password_hash(DEMO_PASSWORD), role="librarian")
    customers = [
        User(username=f"reader{i}", email=f"reader{i}@library.local",
             password_hash=generate_password_hash(DEMO_PASSWORD), role="customer")
        for i in range(1, 4)
    ]
    db.session.add(librarian)
    db.session.add_all(customers)

    books = []
    for title, author, category, pages, published in DEMO_BOOKS:
        book = Book(
            title=title,
            author=author,
            category=category,
            page_count=pages,
            published_date=published,
            description=f"A {category.lower()} classic by {author}.",
            is_available=True,
        )
        books.append(book)
    db.session.add_all(books)
    db.session.flush()

    reviews = 0
    for book in books:
        for user in rng.sample(customers, rng.randint(0, len(customers))):
            db.session.add(Review(book_id=book.id, user_id=user.id, rating=rng.randint(1, 5)))
            reviews += 1

    db.session.commit()
    return {"users": 1 + len(customers), "books": len(books), "reviews": reviews}
