from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.user_repository import UserRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.users = UserRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Detach first so loaded users stay readable once the unit closes;
        # a rollback would otherwise expire them.
        self.session.expunge_all()
        # No-op after a commit; discards pending writes otherwise
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
