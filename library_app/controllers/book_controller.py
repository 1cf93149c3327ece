from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from library_app.errors import ServiceError
from library_app.services.book_service import BookService
from library_app.services.review_service import ReviewService
from library_app.utils.decorators import role_required
from library_app.utils.responses import json_error, json_ok

book_bp = Blueprint("books", __name__)


def _bool_arg(name, default=None):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes")


def _int_arg(name, default):
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _page_response(result):
    return json_ok(
        [b.to_dict() for b in result["items"]],
        total_count=result["total_count"],
        page=result["page"],
        page_size=result["page_size"],
        total_pages=result["total_pages"],
    )


@book_bp.get("/")
def list_books():
    result = BookService.list_books(
        sort_by=request.args.get("sort_by"),
        ascending=_bool_arg("ascending", True),
        page=_int_arg("page", 1),
        page_size=_int_arg("page_size", None),
    )
    return _page_response(result)


@book_bp.get("/search")
def search_books():
    result = BookService.search_books(
        term=(request.args.get("query") or "").strip(),
        category=request.args.get("category") or None,
        author=request.args.get("author") or None,
        is_available=_bool_arg("is_available"),
        sort_by=request.args.get("sort_by"),
        ascending=_bool_arg("ascending", True),
        page=_int_arg("page", 1),
        page_size=_int_arg("page_size", None),
    )
    return _page_response(result)


@book_bp.get("/featured")
def featured_books():
    try:
        min_rating = float(request.args.get("min_rating", 0))
    except ValueError:
        return json_error("min_rating must be a number", 400)

    result = BookService.featured_books(
        count=_int_arg("count", 10),
        min_rating=min_rating,
        available_only=_bool_arg("available_only", False),
    )
    return json_ok([b.to_dict() for b in result["items"]], total_count=result["total_count"])


@book_bp.get("/<int:book_id>")
def get_book(book_id: int):
    try:
        b = BookService.get_book(book_id)
        return json_ok(b.to_dict())
    except ServiceError as e:
        return json_error(str(e), e.status_code)


@book_bp.get("/<int:book_id>/reviews")
def book_reviews(book_id: int):
    reviews = ReviewService.get_reviews_for_book(book_id)
    return json_ok([r.to_dict() for r in reviews])


@book_bp.post("/")
@jwt_required()
@role_required("librarian")
def create_book():
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.create_book(data)
        return json_ok(b.to_dict(), 201)
    except ServiceError as e:
        return json_error(str(e), e.status_code)


@book_bp.put("/<int:book_id>")
@jwt_required()
@role_required("librarian")
def update_book(book_id: int):
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.update_book(book_id, data)
        return json_ok(b.to_dict())
    except ServiceError as e:
        return json_error(str(e), e.status_code)


@book_bp.delete("/<int:book_id>")
@jwt_required()
@role_required("librarian")
def delete_book(book_id: int):
    try:
        BookService.delete_book(book_id)
        return json_ok()
    except ServiceError as e:
        return json_error(str(e), e.status_code)
