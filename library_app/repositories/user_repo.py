from sqlalchemy import func

from library_app.models.user import User
from library_app.extensions import db


class UserRepo:
    @staticmethod
    def get_by_username(username: str):
        return User.query.filter(func.lower(User.username) == username.lower()).first()

    @staticmethod
    def get_by_email(email: str):
        return User.query.filter(func.lower(User.email) == email.lower()).first()

    @staticmethod
    def get_by_id(user_id: int):
        return db.session.get(User, user_id)

    @staticmethod
    def create(user: User):
        db.session.add(user)
        db.session.commit()
        return user
