from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import  AsyncSession
from metapay.db.connection import async_session

async def get_session() -> AsyncGenerator[AsyncSession,None]:
    # one session per request, closed at the end of the with block
    async with async_session() as session:
        yield session
