from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text


class User(BaseModel, Base):
    __tablename__ = "users"
    name = Column(String(256), nullable=False)
    email = Column(String(256), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    # single session slot: "" means logged out
    refresh_token = Column(Text, nullable=False, default="", server_default="", index=True)

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
