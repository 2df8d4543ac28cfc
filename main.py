"""
日记应用程序入口

进程启动时创建一次数据库句柄和各个服务，显式传给需要它们的组件
"""
# 标准库导包
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

# 项目内部导包
from config import Settings, settings
from storage.database import Database
from storage.settings_store import SettingsStore
from viewmodels import (
    HomeViewModel,
    EditDiaryViewModel,
    SearchViewModel,
    CalendarViewModel,
    TagViewModel,
    SettingsViewModel,
)
from viewmodels.services import DiaryService, ImageStorage

# 配置日志
logger = logging.getLogger(__name__)


@dataclass
class DiaryApp:
    """应用级依赖容器"""
    settings: Settings
    database: Database
    diary_service: DiaryService
    settings_store: SettingsStore

    def home(self) -> HomeViewModel:
        return HomeViewModel(self.diary_service)

    async def edit_diary(self) -> EditDiaryViewModel:
        default_mood = await self.settings_store.get_default_mood()
        return EditDiaryViewModel(self.diary_service, default_mood=default_mood)

    def search(self) -> SearchViewModel:
        return SearchViewModel(self.diary_service, self.settings)

    def calendar(self) -> CalendarViewModel:
        return CalendarViewModel(self.diary_service)

    def tags(self) -> TagViewModel:
        return TagViewModel(self.diary_service)

    def preferences(self) -> SettingsViewModel:
        return SettingsViewModel(self.settings_store)


def create_app(app_settings: Settings = settings) -> DiaryApp:
    """根据配置组装应用"""
    database = Database.from_settings(app_settings)
    return DiaryApp(
        settings=app_settings,
        database=database,
        diary_service=DiaryService(database, ImageStorage(app_settings), app_settings),
        settings_store=SettingsStore.from_settings(app_settings),
    )


@asynccontextmanager
async def lifespan(app_settings: Settings = settings) -> AsyncIterator[DiaryApp]:
    """
    应用程序生命周期管理
    """
    app = create_app(app_settings)
    try:
        await app.database.init_db()
        logger.info("应用程序启动完成")
        yield app
    except Exception as e:
        logger.error(f"应用程序运行失败: {str(e)}")
        raise
    finally:
        # 关闭时清理数据库连接
        try:
            await app.database.cleanup_db()
            logger.info("应用程序关闭完成")
        except Exception as e:
            logger.error(f"应用程序关闭时发生错误: {str(e)}")


async def run(app_settings: Settings = settings) -> None:
    """初始化本地存储并输出概况"""
    async with lifespan(app_settings) as app:
        async with app.diary_service.observe_diary_count() as diary_count:
            count = await diary_count.first()
        tags = await app.diary_service.get_all_tags()
        first_launch = await app.settings_store.get_first_launch()
        logger.info(
            f"{app_settings.APP_NAME} v{app_settings.APP_VERSION}: "
            f"data_dir={app_settings.DATA_DIR}, diaries={count}, tags={len(tags)}"
        )
        if first_launch:
            await app.settings_store.set_first_launch_complete()


def main():
    """
    应用程序入口点
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    asyncio.run(run())


if __name__ == "__main__":
    main()
