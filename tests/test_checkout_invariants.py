import random
import threading

import pytest

from library_app.errors import ConflictError
from library_app.extensions import db
from library_app.models import Book, Checkout
from library_app.services.checkout_service import CheckoutService


def _active_count(book_id):
    return Checkout.query.filter(Checkout.book_id == book_id, Checkout.return_date.is_(None)).count()


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_random_checkout_return_sequences_keep_flag_in_sync(seed, make_user, make_book):
    rng = random.Random(seed)
    user_ids = [make_user().id for _ in range(3)]
    book_ids = [make_book().id for _ in range(4)]
    open_ids, closed_ids = [], []

    for _ in range(60):
        roll = rng.random()
        if roll < 0.5 or not (open_ids or closed_ids):
            book_id = rng.choice(book_ids)
            try:
                open_ids.append(CheckoutService.checkout_book(rng.choice(user_ids), book_id).id)
            except ConflictError:
                assert _active_count(book_id) == 1
        elif roll < 0.85 and open_ids:
            checkout_id = open_ids.pop(rng.randrange(len(open_ids)))
            assert CheckoutService.return_book(checkout_id) is not None
            closed_ids.append(checkout_id)
        elif closed_ids:
            assert CheckoutService.return_book(rng.choice(closed_ids)) is None

        assert CheckoutService.find_inconsistent_books() == []
        for book_id in book_ids:
            active = _active_count(book_id)
            assert active <= 1
            assert db.session.get(Book, book_id).is_available is (active == 0)

    assert len(CheckoutService.get_all_active_checkouts()) == len(open_ids)


@pytest.mark.parametrize("workers", [2, 4])
def test_concurrent_checkouts_of_one_book_let_exactly_one_through(app, make_user, make_book, workers):
    user_ids = [make_user().id for _ in range(workers)]
    book_id = make_book().id
    barrier = threading.Barrier(workers)
    lock = threading.Lock()
    succeeded, conflicts, unexpected = [], [], []

    def attempt(user_id):
        with app.app_context():
            try:
                barrier.wait()
                dto = CheckoutService.checkout_book(user_id, book_id)
                with lock:
                    succeeded.append(dto)
            except ConflictError as e:
                with lock:
                    conflicts.append(e)
            except Exception as e:  # surfaced by the asserts below
                with lock:
                    unexpected.append(e)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=attempt, args=(uid,)) for uid in user_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert unexpected == []
    assert len(succeeded) == 1
    assert len(conflicts) == workers - 1
    assert all(str(e) == f"Book with ID {book_id} is not available for checkout" for e in conflicts)

    db.session.expire_all()
    assert _active_count(book_id) == 1
    assert db.session.get(Book, book_id).is_available is False
    assert CheckoutService.find_inconsistent_books() == []


def test_return_then_checkout_again(make_user, make_book):
    alice, bob = make_user(), make_user()
    book = make_book()

    first = CheckoutService.checkout_book(alice.id, book.id)
    CheckoutService.return_book(first.id)
    second = CheckoutService.checkout_book(bob.id, book.id)

    assert second.id != first.id
    assert Checkout.query.filter_by(book_id=book.id).count() == 2
    assert _active_count(book.id) == 1
