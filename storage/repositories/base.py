"""
基础Repository类
"""
# 标准库导包
from typing import TypeVar, Generic, Optional, List, Dict, Any

# 第三方库导包
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_
from sqlalchemy.sql import func

# 项目内部导包
from storage.database import Base

# 泛型类型
ModelType = TypeVar('ModelType', bound=Base)


class BaseRepository(Generic[ModelType]):
    """基础Repository类，提供按主键的增删改查和简单的等值过滤"""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        """
        Args:
            session: 数据库会话（由调用方负责提交）
            model: 数据库模型类
        """
        self.session = session
        self.model = model

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """根据主键获取记录，不存在返回None"""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs) -> ModelType:
        """
        插入新记录

        Returns:
            已分配自增ID的模型实例
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def upsert(self, instance: ModelType) -> ModelType:
        """
        按主键插入或覆盖记录

        主键为空时插入新行，否则就地更新同一行（不会触发级联删除）。
        """
        merged = await self.session.merge(instance)
        await self.session.flush()
        await self.session.refresh(merged)
        return merged

    async def update_by_id(self, id: int, **kwargs) -> Optional[ModelType]:
        """
        根据主键更新部分字段

        Returns:
            更新后的模型实例，记录不存在返回None
        """
        existing = await self.get_by_id(id)
        if existing is None:
            return None

        await self.session.execute(
            update(self.model).where(self.model.id == id).values(**kwargs)
        )
        await self.session.flush()
        await self.session.refresh(existing)
        return existing

    async def delete_by_id(self, id: int) -> bool:
        """根据主键删除记录，返回是否删除了记录"""
        result = await self.session.execute(
            delete(self.model).where(self.model.id == id)
        )
        return result.rowcount > 0

    async def count(self, **filters) -> int:
        """按等值条件统计记录数量"""
        query = select(func.count()).select_from(self.model)

        conditions = self._build_filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    def _build_filter_conditions(self, filters: Dict[str, Any]) -> List:
        """
        构建过滤条件

        列表/元组值生成IN条件，其他值生成等于条件；模型上不存在的字段直接忽略。
        """
        conditions = []
        for key, value in filters.items():
            column = getattr(self.model, key, None)
            if column is None:
                continue
            if isinstance(value, (list, tuple)):
                conditions.append(column.in_(value))
            else:
                conditions.append(column == value)
        return conditions

    async def query_by_filters(
        self,
        filters: Dict[str, Any],
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        order_desc: bool = True
    ) -> List[ModelType]:
        """
        根据过滤条件查询记录

        Args:
            filters: 过滤条件字典
            limit: 限制返回数量
            order_by: 排序字段
            order_desc: 是否降序

        Returns:
            模型实例列表
        """
        query = select(self.model)

        conditions = self._build_filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        column = getattr(self.model, order_by, None) if order_by else None
        if column is not None:
            query = query.order_by(column.desc() if order_desc else column.asc())

        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
