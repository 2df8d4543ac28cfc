"""
数据变更通知总线
按表名分发写入通知，驱动LiveQuery重新查询
"""
# 标准库导包
import asyncio
import logging
from typing import Awaitable, Callable, Dict, FrozenSet, Generic, Iterable, Optional, Set, TypeVar

# 配置日志
logger = logging.getLogger(__name__)

T = TypeVar("T")

# 数据库外键级联删除会隐式影响的子表
TABLE_CASCADES: Dict[str, FrozenSet[str]] = {
    "diary_entries": frozenset({"diary_images", "diary_tag_cross_ref"}),
    "tags": frozenset({"diary_tag_cross_ref"}),
}


def expand_cascades(tables: Iterable[str]) -> Set[str]:
    """把直接写入的表扩展为包含级联子表的集合"""
    expanded = set(tables)
    for table in list(expanded):
        expanded |= TABLE_CASCADES.get(table, frozenset())
    return expanded


class LiveQuery(Generic[T]):
    """
    持续查询订阅

    首次迭代立即返回当前结果，之后每当订阅的表发生提交后的写入时重新查询并返回新结果，
    直到调用close()。支持 `async for` 和 `async with`。
    """

    def __init__(self, bus: "ChangeBus", tables: FrozenSet[str], query: Callable[[], Awaitable[T]]):
        self._bus = bus
        self.tables = tables
        self._query = query
        self._changed = asyncio.Event()
        self._started = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self) -> None:
        self._changed.set()

    def close(self) -> None:
        """取消订阅，正在等待的迭代会结束"""
        if self._closed:
            return
        self._closed = True
        self._bus.unsubscribe(self)
        self._changed.set()

    async def first(self) -> T:
        """只取一次当前结果"""
        return await self._query()

    def __aiter__(self) -> "LiveQuery[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        if self._started:
            await self._changed.wait()
            if self._closed:
                raise StopAsyncIteration
        self._started = True
        # 先清标记再查询，查询期间发生的写入会触发下一次发射
        self._changed.clear()
        return await self._query()

    async def __aenter__(self) -> "LiveQuery[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeBus:
    """按表名分发变更通知的总线"""

    def __init__(self, name: Optional[str] = None):
        self.name = name or "default"
        self._subscriptions: Set[LiveQuery] = set()

    def observe(self, tables: Iterable[str], query: Callable[[], Awaitable[T]]) -> LiveQuery[T]:
        """
        创建一个订阅指定表的LiveQuery

        Args:
            tables: 查询依赖的表名
            query: 无参异步查询函数

        Returns:
            LiveQuery实例
        """
        live_query = LiveQuery(self, frozenset(tables), query)
        self._subscriptions.add(live_query)
        return live_query

    def unsubscribe(self, live_query: LiveQuery) -> None:
        self._subscriptions.discard(live_query)

    def publish(self, tables: Iterable[str]) -> None:
        """
        发布变更通知

        Args:
            tables: 已提交写入的表名
        """
        changed = expand_cascades(tables)
        if not changed:
            return
        logger.debug(f"[{self.name}] 数据变更: {sorted(changed)}")
        for live_query in list(self._subscriptions):
            if live_query.tables & changed:
                live_query.notify()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)
