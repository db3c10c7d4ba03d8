from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Literal, Optional
import datetime


class UserBase(BaseModel):
    name: str
    username: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Literal['admin', 'user'] = 'user'


class UserCreate(UserBase):
    pass


class User(UserBase):
    id: int
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
