import itertools

import pytest
from werkzeug.security import generate_password_hash

from library_app import create_app
from library_app.config import TestConfig
from library_app.extensions import db
from library_app.models import Book, Review, User
from library_app.services.auth_service import AuthService


@pytest.fixture
def app(tmp_path):
    # A file database (not :memory:) so worker threads get their own connections.
    app = create_app(TestConfig, {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'library.db'}",
        "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"check_same_thread": False}},
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make(username=None, role="customer", password="secret"):
        name = username or f"user{next(counter)}"
        user = User(
            username=name,
            email=f"{name}@example.com",
            password_hash=generate_password_hash(password),
            role=role,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_book(app):
    counter = itertools.count(1)

    def _make(title=None, author="Some Author", category=None, page_count=100, **fields):
        book = Book(
            title=title or f"Book {next(counter)}",
            author=author,
            category=category,
            page_count=page_count,
            is_available=True,
            **fields,
        )
        db.session.add(book)
        db.session.commit()
        return book

    return _make


@pytest.fixture
def add_review(app):
    def _add(book, user, rating, comment=None):
        review = Review(book_id=book.id, user_id=user.id, rating=rating, comment=comment)
        db.session.add(review)
        db.session.commit()
        return review

    return _add


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        return {"Authorization": f"Bearer {AuthService.issue_token(user)}"}

    return _headers


@pytest.fixture
def customer(make_user):
    return make_user("alice", role="customer")


@pytest.fixture
def librarian(make_user):
    return make_user("libby", role="librarian")
