from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity

from library_app.errors import ServiceError
from library_app.services.review_service import ReviewService
from library_app.utils.decorators import role_required
from library_app.utils.responses import json_error, json_ok

review_bp = Blueprint("reviews", __name__)


@review_bp.get("/book/<int:book_id>")
def reviews_for_book(book_id: int):
    reviews = ReviewService.get_reviews_for_book(book_id)
    return json_ok([r.to_dict() for r in reviews])


@review_bp.post("/")
@jwt_required()
@role_required("customer")
def create_review():
    data = request.get_json(silent=True) or {}
    user_id = int(get_jwt_identity())
    try:
        book_id = int(data["book_id"])
        review = ReviewService.create_review(user_id, book_id, data.get("rating"), data.get("comment"))
        return json_ok(review.to_dict(), 201)
    except KeyError:
        return json_error("book_id is required", 400)
    except ServiceError as e:
        return json_error(str(e), e.status_code)
    except (TypeError, ValueError):
        return json_error("book_id must be an integer", 400)
