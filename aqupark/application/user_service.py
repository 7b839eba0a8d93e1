from sqlalchemy import select
from sqlalchemy.orm import Session
from aqupark.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from aqupark.core.logging_config import get_logger
from aqupark.domain.models import User
from aqupark.infrastructure.security import hash_password, verify_password
from .schemas import UserRegister, UserPatch

logger = get_logger(__name__)

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def _by_email(self, email: str):
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def email_exists(self, email: str) -> bool:
        return self._by_email(email) is not None

    def get(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found", {"userId": user_id})
        return user

    def list(self, skip: int = 0, limit: int = 100):
        return self.db.execute(select(User).order_by(User.id).offset(skip).limit(limit)).scalars().all()

    def register(self, data: UserRegister) -> User:
        if self.email_exists(data.email):
            raise ConflictError("This email is already registered", {"email": data.email})
        user = User(
            admin=False,
            user_name=data.user_name,
            email=data.email,
            tel=data.tel,
            password=hash_password(data.password),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.id} registered")
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._by_email(email)
        # same message for unknown email and wrong password
        if user is None or not verify_password(password, user.password):
            raise AuthenticationError("Incorrect email or password")
        return user

    def update_profile(self, user_id: int, patch: UserPatch) -> User:
        changes = patch.model_dump(exclude_unset=True, exclude={"target_user_id"})
        changes = {field: value for field, value in changes.items() if value is not None}
        if not changes:
            raise ValidationError("No fields to update")

        user = self.get(user_id)
        if "email" in changes and changes["email"] != user.email and self.email_exists(changes["email"]):
            raise ConflictError("This email is already registered", {"email": changes["email"]})
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])

        for field, value in changes.items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user_id} profile updated: {sorted(f for f in changes if f != 'password')}")
        return user
