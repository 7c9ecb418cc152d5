from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session
import logging

from app.models.user import User, get_db
from app.schemas.user import RegisterSchema, LoginSchema, UserOut, TokenOut
from app.utils.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    decode_token,
    blacklist_token,
    get_current_user,
    hash_password,
    verify_password,
    is_admin,
)

logger = logging.getLogger(__name__)

router = APIRouter()
bearer = HTTPBearer(auto_error=False)


def to_user_out(user: User) -> UserOut:
    return UserOut(id=user.id, name=user.name, email=user.email, isAdmin=is_admin(user))


def _token_response(user: User) -> TokenOut:
    return TokenOut(
        token=create_access_token(subject=user.email),
        expires_in_minutes=ACCESS_TOKEN_EXPIRE_MINUTES,
        user=to_user_out(user),
    )


@router.post("/register", response_model=TokenOut, status_code=201)
def register(payload: RegisterSchema, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(name=payload.name.strip(), email=email, password=hash_password(payload.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return _token_response(user)


@router.post("/login", response_model=TokenOut)
def login(credentials: LoginSchema, db: Session = Depends(get_db)):
    email = credentials.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(credentials.password, user.password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _token_response(user)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return to_user_out(user)


@router.post("/logout")
def logout(creds: HTTPAuthorizationCredentials = Depends(bearer), db: Session = Depends(get_db)):
    if not creds or not creds.credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        # Even if token invalid, respond 200 to avoid token probing
        return {"message": "Logged out"}
    jti = payload.get("jti")
    if jti:
        blacklist_token(db, jti)
    return {"message": "Logged out"}
