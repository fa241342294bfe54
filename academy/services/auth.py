from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models.profile import Profile, ProfileStatus, UserRole

settings = get_settings()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))

    @staticmethod
    def get_password_hash(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        return encoded_jwt

    @staticmethod
    def create_token_for(profile: Profile) -> str:
        return AuthService.create_access_token(
            data={"sub": profile.id, "email": profile.email, "role": profile.role}
        )

    @staticmethod
    def decode_token(token: str) -> Optional[dict]:
        try:
            payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
            return payload
        except JWTError:
            return None

    @staticmethod
    def authenticate_profile(db: Session, email: str, password: str) -> Optional[Profile]:
        profile = AuthService.get_profile_by_email(db, email)
        if not profile:
            return None
        if not AuthService.verify_password(password, profile.password_hash):
            return None
        return profile

    @staticmethod
    def build_profile(
        email: str,
        password: str,
        role: UserRole = UserRole.STUDENT,
        full_name: Optional[str] = None,
        status: ProfileStatus = ProfileStatus.PENDING,
    ) -> Profile:
        return Profile(
            email=normalize_email(email),
            password_hash=AuthService.get_password_hash(password),
            role=role.value,
            full_name=full_name,
            status=status.value,
        )

    @staticmethod
    def create_profile(
        db: Session,
        email: str,
        password: str,
        role: UserRole = UserRole.STUDENT,
        full_name: Optional[str] = None,
        status: ProfileStatus = ProfileStatus.PENDING,
    ) -> Profile:
        profile = AuthService.build_profile(email, password, role=role, full_name=full_name, status=status)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def get_profile_by_email(db: Session, email: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.email == normalize_email(email)).first()

    @staticmethod
    def get_profile_by_id(db: Session, profile_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == profile_id).first()
