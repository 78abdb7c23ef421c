# app/services/user_service.py
from sqlmodel import Session

from app.core.errors import NotFoundError
from app.core.permissions import Action, authorize
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserUpdate, UserRoleUpdate


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - enforce app rules (no email change, role changes by admins only)
      - orchestrate repository operations
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits: name, contact number, country.
        """
        for field in ("name", "contact_number", "country"):
            value = getattr(payload, field)
            if value is not None:
                setattr(current_user, field, value)

        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self, session: Session, actor: User, skip: int, limit: int
    ) -> list[User]:
        """List users with pagination (admin only)."""
        authorize(actor, Action.MANAGE_USERS)
        return self.repo.list(session, skip=skip, limit=limit)

    def get_user(self, session: Session, actor: User, user_id: str) -> User:
        """
        Get a user by id. Users may read themselves; admins anyone.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        authorize(actor, Action.READ, user)
        return user

    def update_role(
        self,
        session: Session,
        actor: User,
        user_id: str,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        authorize(actor, Action.MANAGE_USERS)
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        user.role = payload.role
        return self.repo.update(session, user)
