from sqlalchemy import Column, Integer, String, Text, DateTime
from .database import Base
import datetime


class User(Base):
    """Donor or admin account. Credentials live with the external auth service."""
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(200), nullable=False, unique=True)
    phone = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default='user')  # admin, user
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
