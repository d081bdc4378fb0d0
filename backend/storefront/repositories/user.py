"""
User repositories for customer and admin accounts.
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.user import AdminUser, User


class UserRepository:
    """
    Repository for customer accounts.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_contact(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Optional[User]:
        """
        Find a customer by email OR phone.

        Args:
            email: Contact email (optional)
            phone: Contact phone (optional)

        Returns:
            The first matching user, None when neither matches

        Note:
            When email and phone belong to two different rows the email
            match wins.
        """
        conditions = []
        if email:
            conditions.append(User.email == email)
        if phone:
            conditions.append(User.phone == phone)
        if not conditions:
            return None

        stmt = select(User).where(or_(*conditions))
        users = list((await self.session.execute(stmt)).scalars().all())
        if not users:
            return None
        if email:
            for user in users:
                if user.email == email:
                    return user
        return users[0]

    async def create(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        full_name: Optional[str] = None
    ) -> User:
        user = User(email=email, phone=phone, full_name=full_name)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user



class AdminUserRepository:
    """Repository for admin dashboard accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, admin_id: str) -> Optional[AdminUser]:
        result = await self.session.execute(
            select(AdminUser).where(AdminUser.id == admin_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[AdminUser]:
        """
        Look up an admin by login email.

        Args:
            email: Already normalised (lower-case, trimmed) email

        Returns:
            AdminUser if found (active or not), None otherwise
        """
        result = await self.session.execute(
            select(AdminUser).where(AdminUser.email == email)
        )
        return result.scalar_one_or_none()

    async def create(self, email: str, is_active: bool = True) -> AdminUser:
        admin = AdminUser(email=email.strip().lower(), is_active=is_active)
        self.session.add(admin)
        await self.session.flush()
        await self.session.refresh(admin)
        return admin
