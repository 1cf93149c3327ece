from __future__ import annotations

import random
import re

from flask import current_app

from library_app.extensions import db
from library_app.repositories.book_repo import BookRepo

HELP_TEXT = (
    "I can help you find books! Try asking:\n"
    "- Recommend a book\n"
    "- Find books by [author name]\n"
    "- Books in [category] category\n"
    "- Popular books\n"
    "- How to checkout a book"
)
GREETING_TEXT = "Hello! I'm BookBot, your library assistant. How can I help you find your next great read?"
CHECKOUT_HELP_TEXT = (
    "To checkout a book: Browse to the book details page and click the 'Check Out Book' button. "
    "You can view your checked out books in the 'My Checkouts' section."
)
DEFAULT_TEXT = "I'm not sure how to help with that. Type 'help' to see what I can do!"
ERROR_TEXT = "Sorry, I ran into a problem looking that up. Please try again in a moment."

_GREETING_RE = re.compile(r"^(hi|hello|hey)\b")
_AUTHOR_RE = re.compile(r"by\s+([a-z\s]+)")


class ChatService:
    """
    Rule-based library assistant.

    Rules are tried in a fixed order and the first match answers. Lookups are
    read-only. Nothing raised while answering ever leaves generate_response:
    the user gets an apology instead.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def generate_response(self, message: str | None) -> str:
        text = (message or "").strip().lower()
        if not text:
            return DEFAULT_TEXT

        try:
            return self._dispatch(text)
        except Exception:
            db.session.rollback()
            current_app.logger.exception(
                "Chat response failed", extra={"event": "chat.failed", "chat_message": text}
            )
            return ERROR_TEXT

    def _dispatch(self, text: str) -> str:
        if "help" in text or "commands" in text or text == "?":
            return HELP_TEXT

        if _GREETING_RE.match(text):
            return GREETING_TEXT

        if "recommend" in text or "suggestion" in text:
            return self.recommend_book()

        if "by author" in text or "books by" in text:
            match = _AUTHOR_RE.search(text)
            if match:
                author = match.group(1).strip()
                if author.startswith("author "):
                    author = author[len("author "):].strip()
                if author and author != "author":
                    return self.find_books_by_author(author)

        if "category" in text or "genre" in text:
            for category in BookRepo.list_categories():
                if category.lower() in text:
                    return self.find_books_by_category(category)

        if "popular" in text or "top rated" in text:
            return self.popular_books()

        if "checkout" in text or "borrow" in text:
            return CHECKOUT_HELP_TEXT

        return DEFAULT_TEXT

    def recommend_book(self) -> str:
        books = BookRepo.list_available()
        if not books:
            return "Sorry, there are no available books right now."

        book = self.rng.choice(books)
        return (
            f'I recommend: "{book.title}" by {book.author}. '
            f"It's a {book.category or 'general'} book with {book.page_count or 0} pages. Check it out!"
        )

    @staticmethod
    def find_books_by_author(author: str) -> str:
        books = BookRepo.find_by_author(author, limit=3)
        if not books:
            return f"I couldn't find any books by {author}. Try another author?"

        lines = [f"Found {len(books)} books by {author}:"]
        for b in books:
            lines.append(f"- {b.title} ({'Available' if b.is_available else 'Checked out'})")
        return "\n".join(lines)

    @staticmethod
    def find_books_by_category(category: str) -> str:
        books = BookRepo.find_available_in_category(category, limit=3)
        if not books:
            return f"I couldn't find any available books in {category}. Try another category?"

        lines = [f"Here are some available {category} books:"]
        lines.extend(f"- {b.title} by {b.author}" for b in books)
        return "\n".join(lines)

    @staticmethod
    def popular_books() -> str:
        rows = BookRepo.top_rated_available(limit=3)
        if not rows:
            return "I couldn't find any highly rated books right now."

        lines = ["Here are some popular books:"]
        for book, avg_rating in rows:
            lines.append(f"- {book.title} by {book.author} ({float(avg_rating):.1f}★)")
        return "\n".join(lines)
