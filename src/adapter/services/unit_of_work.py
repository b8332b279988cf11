"""SQLAlchemy Unit of Work

All repositories of one use case share a single AsyncSession, so one
commit or rollback here covers every write of the enrollment or billing
cycle.
"""

from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        # Guards before any query leave nothing to roll back
        if self.session.in_transaction():
            await self.session.rollback()
