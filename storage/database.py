"""Database configuration module."""
# 标准库导包
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from itertools import chain
from typing import AsyncIterator, Optional, Set

# 第三方库导包
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Session

# 项目内部导包
from config import Settings, settings
from storage.observer import ChangeBus

# 配置日志
logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def utc_now() -> datetime:
    """当前UTC时间（不带时区信息，与SQLite中存储的格式一致）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# 全文检索影子表：FTS4外部内容表，由触发器与diary_entries保持同步
SEARCH_INDEX_DDL = (
    "CREATE VIRTUAL TABLE IF NOT EXISTS diary_entries_fts "
    "USING FTS4(title, content, content=`diary_entries`)",
    "CREATE TRIGGER IF NOT EXISTS diary_entries_fts_before_update BEFORE UPDATE ON diary_entries "
    "BEGIN DELETE FROM diary_entries_fts WHERE docid = OLD.rowid; END",
    "CREATE TRIGGER IF NOT EXISTS diary_entries_fts_before_delete BEFORE DELETE ON diary_entries "
    "BEGIN DELETE FROM diary_entries_fts WHERE docid = OLD.rowid; END",
    "CREATE TRIGGER IF NOT EXISTS diary_entries_fts_after_update AFTER UPDATE ON diary_entries "
    "BEGIN INSERT INTO diary_entries_fts(docid, title, content) VALUES (NEW.rowid, NEW.title, NEW.content); END",
    "CREATE TRIGGER IF NOT EXISTS diary_entries_fts_after_insert AFTER INSERT ON diary_entries "
    "BEGIN INSERT INTO diary_entries_fts(docid, title, content) VALUES (NEW.rowid, NEW.title, NEW.content); END",
)


class ChangeTrackingSession(Session):
    """记录本次事务写入过哪些表的Session，提交后通过ChangeBus发布"""

    def __init__(self, *args, change_bus: Optional[ChangeBus] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.change_bus = change_bus
        self.changed_tables: Set[str] = set()


@event.listens_for(ChangeTrackingSession, "after_flush")
def _collect_flushed_tables(session, flush_context):
    for instance in chain(session.new, session.dirty, session.deleted):
        table = getattr(instance, "__table__", None)
        if table is not None:
            session.changed_tables.add(table.name)


@event.listens_for(ChangeTrackingSession, "do_orm_execute")
def _collect_statement_tables(orm_execute_state):
    if not (orm_execute_state.is_insert or orm_execute_state.is_update or orm_execute_state.is_delete):
        return
    table = getattr(orm_execute_state.statement, "table", None)
    name = getattr(table, "name", None)
    if name:
        orm_execute_state.session.changed_tables.add(name)


@event.listens_for(ChangeTrackingSession, "after_commit")
def _publish_changes(session):
    changed, session.changed_tables = session.changed_tables, set()
    if changed and session.change_bus is not None:
        session.change_bus.publish(changed)


@event.listens_for(ChangeTrackingSession, "after_rollback")
def _discard_changes(session):
    session.changed_tables.clear()


def _set_sqlite_pragma(dbapi_connection, _connection_record):
    # foreign_keys：级联删除依赖外键约束（SQLite默认关闭）
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA synchronous=NORMAL;")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute("PRAGMA busy_timeout=30000;")
    cursor.close()


class Database:
    """
    数据库句柄

    进程启动时创建一次，显式传给所有数据访问组件。
    持有引擎、会话工厂以及提交后发布变更的ChangeBus。
    """

    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
        timeout: int = 30,
        change_bus: Optional[ChangeBus] = None,
        **engine_kwargs
    ):
        """
        初始化数据库句柄

        Args:
            database_url: 数据库URL，例如 sqlite+aiosqlite:///data/diary_database.db
            echo: 是否输出SQL语句
            timeout: SQLite锁等待超时（秒）
            change_bus: 变更通知总线，不传则新建
            **engine_kwargs: 透传给create_async_engine的参数
        """
        self.database_url = database_url
        self.change_bus = change_bus or ChangeBus("database")
        is_sqlite = database_url.startswith("sqlite")

        # 创建异步引擎
        self.engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"timeout": timeout} if is_sqlite else {},
            **engine_kwargs
        )
        if is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _set_sqlite_pragma)

        # 创建会话工厂
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            sync_session_class=ChangeTrackingSession,
            expire_on_commit=False,
            autoflush=False,
            change_bus=self.change_bus
        )

    @classmethod
    def from_settings(cls, app_settings: Settings = settings) -> "Database":
        """根据应用配置创建数据库句柄，并确保数据目录存在"""
        app_settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        logger.info(f"数据库连接URL: {app_settings.DATABASE_URL}")
        return cls(
            app_settings.DATABASE_URL,
            echo=app_settings.DEBUG,
            timeout=app_settings.DB_TIMEOUT
        )

    async def init_db(self):
        """初始化数据库，创建所有表和全文检索索引"""
        # 确保所有模型都已注册到 Base.metadata
        from storage import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            for statement in SEARCH_INDEX_DDL:
                await conn.execute(text(statement))
        logger.info("数据库表初始化完成")

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """获取数据库会话

        正常退出时提交，发生异常时回滚并重新抛出。

        Yields:
            AsyncSession: 数据库会话对象
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                logger.error(f"数据库会话发生错误: {str(e)}")
                await session.rollback()
                raise

    async def cleanup_db(self):
        """清理数据库连接"""
        await self.engine.dispose()
        logger.info("数据库连接已关闭")
