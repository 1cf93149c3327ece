import logging
import random

import pytest

from library_app.repositories.book_repo import BookRepo
from library_app.services import chat_service
from library_app.services.chat_service import ChatService
from library_app.services.checkout_service import CheckoutService


@pytest.fixture
def chat(app):
    return ChatService(rng=random.Random(7))


@pytest.mark.parametrize("message", ["", "   ", None])
def test_blank_message_gets_default(chat, message):
    assert chat.generate_response(message) == chat_service.DEFAULT_TEXT


@pytest.mark.parametrize("message", ["help", "What COMMANDS do you know?", "?", "hi, can you help me"])
def test_help(chat, message):
    assert chat.generate_response(message) == chat_service.HELP_TEXT


@pytest.mark.parametrize("message", ["hi", "Hello there", "hey!", "HEY bot"])
def test_greeting(chat, message):
    assert chat.generate_response(message) == chat_service.GREETING_TEXT


def test_greeting_needs_a_whole_word(chat):
    assert chat.generate_response("history lessons") == chat_service.DEFAULT_TEXT


def test_recommend_picks_with_injected_rng(chat, make_user, make_book):
    books = [make_book(title=f"Title {i}", author=f"Author {i}", category="Poetry", page_count=50 + i)
             for i in range(5)]
    CheckoutService.checkout_book(make_user().id, books[1].id)
    available = [b for b in books if b.id != books[1].id]

    expected = random.Random(7).choice(available)
    response = chat.generate_response("Can you recommend something?")

    assert response == (
        f'I recommend: "{expected.title}" by {expected.author}. '
        f"It's a Poetry book with {expected.page_count} pages. Check it out!"
    )


def test_recommend_without_available_books(chat, make_user, make_book):
    book = make_book()
    CheckoutService.checkout_book(make_user().id, book.id)

    assert chat.generate_response("any suggestion?") == "Sorry, there are no available books right now."


def test_books_by_author(chat, make_user, make_book):
    make_book(title="The Hobbit", author="J.R.R. Tolkien")
    silmarillion = make_book(title="The Silmarillion", author="J.R.R. Tolkien")
    make_book(title="Emma", author="Jane Austen")
    CheckoutService.checkout_book(make_user().id, silmarillion.id)

    response = chat.generate_response("Find books by Tolkien")

    assert response == (
        "Found 2 books by tolkien:\n"
        "- The Hobbit (Available)\n"
        "- The Silmarillion (Checked out)"
    )


def test_books_by_author_limits_to_three(chat, make_book):
    for i in range(5):
        make_book(title=f"Mystery {i}", author="Agatha Christie")

    response = chat.generate_response("books by christie")

    assert response.startswith("Found 3 books by christie:")
    assert response.count("\n- ") == 3


@pytest.mark.parametrize("message", ["books by author", "Find books by author "])
def test_books_by_author_without_a_name(chat, make_book, message):
    make_book(author="Jane Austen")

    assert chat.generate_response(message) == chat_service.DEFAULT_TEXT


def test_books_by_unknown_author(chat, make_book):
    make_book(author="Jane Austen")

    assert chat.generate_response("books by nobody") == "I couldn't find any books by nobody. Try another author?"


def test_popular_books_ranks_available_reviewed_books(chat, make_user, make_book, add_review):
    u1, u2 = make_user(), make_user()
    good = make_book(title="Good", author="A")
    best = make_book(title="Best", author="B")
    make_book(title="Unreviewed", author="C")
    taken = make_book(title="Taken", author="D")
    ok = make_book(title="Ok", author="E")
    meh = make_book(title="Meh", author="F")
    add_review(good, u1, 4)
    add_review(good, u2, 5)
    add_review(best, u1, 5)
    add_review(taken, u1, 5)
    add_review(ok, u1, 3)
    add_review(meh, u1, 1)
    CheckoutService.checkout_book(u2.id, taken.id)

    response = chat.generate_response("show me popular books")

    assert response == (
        "Here are some popular books:\n"
        "- Best by B (5.0★)\n"
        "- Good by A (4.5★)\n"
        "- Ok by E (3.0★)"
    )


def test_popular_books_without_reviews(chat, make_book):
    make_book()
    assert chat.generate_response("top rated please") == "I couldn't find any highly rated books right now."


def test_category_lookup(chat, make_book):
    make_book(title="The Hobbit", author="Tolkien", category="Fantasy")
    make_book(title="Dune", author="Herbert", category="Science Fiction")

    response = chat.generate_response("anything in the fantasy genre?")

    assert response == "Here are some available Fantasy books:\n- The Hobbit by Tolkien"


def test_checkout_help(chat):
    assert chat.generate_response("How do I borrow a book?") == chat_service.CHECKOUT_HELP_TEXT


def test_unmatched_message_gets_default(chat):
    assert chat.generate_response("what is the weather") == chat_service.DEFAULT_TEXT


def test_lookup_errors_become_an_apology(chat, monkeypatch, caplog):
    def boom():
        raise RuntimeError("database went away")

    monkeypatch.setattr(BookRepo, "list_available", staticmethod(boom))
    caplog.set_level(logging.ERROR, logger="library_app")

    assert chat.generate_response("recommend a book") == chat_service.ERROR_TEXT
    assert any(getattr(r, "event", None) == "chat.failed" for r in caplog.records)


def test_chat_endpoint(client, make_book):
    make_book(title="Only Book", author="Solo", category="Drama", page_count=10)

    r = client.post("/api/chat/", json={"message": "recommend"})

    assert r.status_code == 200
    assert r.get_json()["data"]["response"].startswith('I recommend: "Only Book" by Solo.')
