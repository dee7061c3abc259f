from models.db_storage import DBStorage
from models.credential_store import CredentialStore
from models.user import User
from models.todo import Todo

__all__ = ["DBStorage", "CredentialStore", "User", "Todo"]
