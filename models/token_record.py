"""
TokenRecord model: one issued session (access + refresh token pair) so
refresh tokens can be revoked and rotated server-side.
Fields:
- user_id (String(36)) - FK to users.id
- access_token, refresh_token (the refresh string is unique)
- expires_at - refresh token expiry, naive UTC
- revoked (bool)
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class TokenRecord(BaseModel, Base):
    __tablename__ = "tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(String(512), nullable=False, unique=True)
    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="tokens")

    def __repr__(self):
        return f"<TokenRecord id={self.id} user_id={self.user_id} revoked={self.revoked}>"
