from sqlalchemy import Column, String

from hydroscan.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    full_name = Column(String(200), nullable=False)
    address = Column(String(300), nullable=True)
    phone_number = Column(String(32), nullable=True)
