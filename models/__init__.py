from models.base_model import Base
from models.user import User
from models.account import Account
from models.token_record import TokenRecord
from models.db_storage import DBStorage

__all__ = ["Base", "User", "Account", "TokenRecord", "DBStorage"]
