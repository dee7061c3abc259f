"""
Credential store: user records and the refresh token bound to each of them.

A user has at most one live refresh token. Storing a new one replaces the
old value, which is what makes every previously issued refresh token for
that user unusable.
"""
from __future__ import annotations

from sqlalchemy import update

from models.user import User


class CredentialStore:
    def __init__(self, storage):
        self.storage = storage

    def get(self, user_id: str) -> User | None:
        return self.storage.get(User, user_id)

    def find_by_username(self, username: str) -> User | None:
        session = self.storage.get_session()
        return session.query(User).filter(User.username == username).first()

    def username_taken(self, username: str) -> bool:
        session = self.storage.get_session()
        q = session.query(User).filter(User.username == username)
        return session.query(q.exists()).scalar()

    def create_user(self, username: str, password_hash: str) -> User:
        user = User(username=username, password_hash=password_hash)
        self.storage.new(user)
        self.storage.save()
        return user

    def set_refresh_token(self, user: User, token: str | None) -> None:
        user.refresh_token = token
        self.storage.new(user)
        self.storage.save()

    def clear_refresh_token(self, user: User) -> None:
        self.set_refresh_token(user, None)

    def swap_refresh_token(self, user_id: str, current: str, new: str) -> bool:
        """
        Replace the stored refresh token only if it still equals `current`.
        Returns False when another request rotated or cleared it first.
        """
        session = self.storage.get_session()
        result = session.execute(
            update(User)
            .where(User.id == user_id, User.refresh_token == current)
            .values(refresh_token=new)
        )
        self.storage.save()
        return result.rowcount == 1
