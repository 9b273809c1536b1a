from models.base_model import Base, BaseModel
from sqlalchemy import Column, Date, String, Text
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"

    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    phone_number = Column(String(32), nullable=False)
    address = Column(Text, nullable=False)

    accounts = relationship(
        "Account",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Account.created_at",
    )
    tokens = relationship(
        "TokenRecord",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
