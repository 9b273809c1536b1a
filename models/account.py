from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base

DEFAULT_ACCOUNT_NAME = "Main account"
DEFAULT_CURRENCY = "USD"


class Account(BaseModel, Base):
    __tablename__ = "accounts"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(128), nullable=False, default=DEFAULT_ACCOUNT_NAME)
    account_type = Column(String(32), nullable=False, default="cash")
    total_balance = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(8), nullable=False, default=DEFAULT_CURRENCY)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="accounts")

    __table_args__ = (
        CheckConstraint("total_balance >= 0", name="ck_accounts_balance_nonnegative"),
    )
