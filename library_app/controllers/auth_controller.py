from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt

from library_app.errors import ServiceError
from library_app.services.auth_service import AuthService
from library_app.repositories.user_repo import UserRepo
from library_app.utils.responses import json_error

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}

    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip()
    password = (data.get("password") or "").strip()

    if not username or not email or not password:
        return json_error("username, email and password are required", 400)

    try:
        user = AuthService.register(
            username=username,
            email=email,
            password=password,
            role=data.get("role") or "customer",
        )
        return jsonify({"success": True, "id": user.id, "username": user.username, "role": user.role}), 201
    except ServiceError as e:
        return json_error(str(e), e.status_code)


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        token, user = AuthService.login(
            (data.get("username") or "").strip(),
            (data.get("password") or "").strip()
        )
        return jsonify({
            "success": True,
            "access_token": token,
            "user": {"id": user.id, "username": user.username, "role": user.role}
        })
    except ServiceError as e:
        return json_error(str(e), e.status_code)


@auth_bp.get("/me")
@jwt_required()
def me():
    user_id = int(get_jwt_identity())
    claims = get_jwt()
    user = UserRepo.get_by_id(user_id)
    if user is None:
        return json_error("User not found", 404)

    return jsonify({
        "success": True,
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": claims.get("role", user.role)
        }
    })
