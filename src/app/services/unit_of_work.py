from abc import ABC, abstractmethod

from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management

    Writes made through the repositories commit together on ``commit()``;
    leaving the ``async with`` block without committing (error, early
    return or cancellation) rolls them back.
    """

    # Repository properties (initialized in __aenter__)
    users: IUserRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
