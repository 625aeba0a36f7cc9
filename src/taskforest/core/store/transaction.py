"""写事务封装

同一连接上的多条写操作在一个 SQLite 事务内原子提交；
失败时回滚，并把 aiosqlite.Error 统一翻译为 StoreError。
"""

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

import aiosqlite

from ..errors import StoreError


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """把读操作中的 aiosqlite.Error 翻译为 StoreError"""
    try:
        yield
    except aiosqlite.Error as e:
        raise StoreError(operation, e) from e


@asynccontextmanager
async def write_transaction(
    conn: aiosqlite.Connection,
    operation: str,
) -> AsyncIterator[None]:
    """在同一事务内执行写操作，成功提交、失败回滚

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        operation: 操作名，用于错误信息

    Raises:
        StoreError: 底层存储失败（已回滚）
    """
    try:
        yield
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        raise StoreError(operation, e) from e
    except Exception:
        await conn.rollback()
        raise
