import asyncio
from typing import Optional

import bcrypt

from src.app.services.password_hasher import IPasswordHasher


class BcryptPasswordHasher(IPasswordHasher):
    """
    bcrypt hashing; checkpw compares in constant time.

    bcrypt is CPU bound by design, so every call runs in a worker thread
    and leaves the event loop free for other requests.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash: Optional[bytes] = None

    def hash_sync(self, plain: str) -> str:
        hashed = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(self.rounds))
        return hashed.decode("utf-8")

    def verify_sync(self, plain: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash or over-long input
            return False

    def burn_sync(self) -> None:
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(
                b"dummy_password", bcrypt.gensalt(self.rounds)
            )
        bcrypt.checkpw(b"not_the_password", self._dummy_hash)

    async def hash(self, plain: str) -> str:
        return await asyncio.to_thread(self.hash_sync, plain)

    async def verify(self, plain: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.verify_sync, plain, hashed)

    async def burn(self) -> None:
        await asyncio.to_thread(self.burn_sync)
