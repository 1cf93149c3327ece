from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token

from library_app.errors import AuthenticationError, ConflictError, ValidationError
from library_app.models.user import User, ROLES
from library_app.repositories.user_repo import UserRepo


class AuthService:
    @staticmethod
    def register(username: str, email: str, password: str, role: str = "customer"):
        role = (role or "customer").lower()
        if role not in ROLES:
            raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

        if UserRepo.get_by_username(username) or UserRepo.get_by_email(email):
            raise ConflictError("Username or email is already registered")

        user = User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
        )
        UserRepo.create(user)
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "username": user.username},
        )

    @staticmethod
    def login(username: str, password: str):
        user = UserRepo.get_by_username(username)
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthenticationError("Invalid username or password")

        return AuthService.issue_token(user), user
