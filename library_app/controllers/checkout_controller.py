from flask import Blueprint
from flask_jwt_extended import jwt_required, get_jwt_identity

from library_app.errors import ConflictError, NotFoundError
from library_app.services.checkout_service import CheckoutService
from library_app.utils.decorators import role_required
from library_app.utils.responses import json_error, json_ok

checkout_bp = Blueprint("checkouts", __name__)


@checkout_bp.post("/checkout/<int:book_id>")
@jwt_required()
@role_required("customer")
def checkout_book(book_id: int):
    user_id = int(get_jwt_identity())
    try:
        dto = CheckoutService.checkout_book(user_id, book_id)
        return json_ok(dto.to_dict(), 201)
    except NotFoundError as e:
        return json_error(str(e), 404)
    except ConflictError as e:
        return json_error(str(e), 400)


@checkout_bp.post("/return/<int:checkout_id>")
@jwt_required()
@role_required("librarian")
def return_book(checkout_id: int):
    try:
        dto = CheckoutService.return_book(checkout_id)
    except ConflictError as e:
        return json_error(str(e), e.status_code)
    if dto is None:
        return json_error("Checkout not found or already returned", 404)
    return json_ok(dto.to_dict())


@checkout_bp.get("/<int:checkout_id>")
@jwt_required()
def get_checkout(checkout_id: int):
    dto = CheckoutService.get_checkout_by_id(checkout_id)
    if dto is None:
        return json_error("Checkout not found", 404)
    return json_ok(dto.to_dict())


@checkout_bp.get("/user")
@jwt_required()
def my_checkouts():
    user_id = int(get_jwt_identity())
    checkouts = CheckoutService.get_user_checkouts(user_id)
    return json_ok([c.to_dict() for c in checkouts])


@checkout_bp.get("/active")
@jwt_required()
@role_required("librarian")
def active_checkouts():
    checkouts = CheckoutService.get_all_active_checkouts()
    return json_ok([c.to_dict() for c in checkouts])


@checkout_bp.get("/overdue")
@jwt_required()
@role_required("librarian")
def overdue_checkouts():
    checkouts = CheckoutService.get_overdue_checkouts()
    return json_ok([c.to_dict() for c in checkouts])
