from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from . import models, schemas
from .auth import Identity, require_admin
from .database import get_db
from .stores import UserStore

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("", response_model=schemas.User, status_code=201)
def create_user(payload: schemas.UserCreate, db: Session = Depends(get_db)):
    users = UserStore(db)
    if users.find_existing(payload.username, str(payload.email)):
        raise HTTPException(status_code=400, detail="Username or email already registered")
    user = users.insert(models.User(**payload.model_dump()))
    db.commit()
    db.refresh(user)
    return user


@router.get("", response_model=list[schemas.User])
def list_users(skip: int = 0, limit: int = 100, identity: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return db.query(models.User).order_by(models.User.id).offset(skip).limit(limit).all()


@router.get("/{user_id}", response_model=schemas.User)
def get_user(user_id: int, identity: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    user = UserStore(db).find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
