import io
import tempfile
import unittest
from pathlib import Path
from typing import List

from PIL import Image

from config import Settings
from storage.database import Database
from viewmodels.base import BaseViewModel
from viewmodels.services import DiaryService, ImageStorage


def make_image_bytes(width: int = 1200, height: int = 800, fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    """生成一张纯色测试图片"""
    color = (200, 80, 40, 128) if mode == "RGBA" else (200, 80, 40)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, fmt)
    return buffer.getvalue()


class StorageTestCase(unittest.IsolatedAsyncioTestCase):
    """每个用例使用独立的临时数据目录（数据库、图片、偏好设置）"""

    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.settings = Settings(DATA_DIR=self.data_dir, SEARCH_DEBOUNCE_SECONDS=0.05)
        self.database = Database.from_settings(self.settings)
        await self.database.init_db()
        self.image_storage = ImageStorage(self.settings)
        self.service = DiaryService(self.database, self.image_storage, self.settings)
        self._view_models: List[BaseViewModel] = []

    async def asyncTearDown(self):
        for view_model in self._view_models:
            await view_model.close()
        await self.database.cleanup_db()
        self._tmp.cleanup()

    def track(self, view_model: BaseViewModel) -> BaseViewModel:
        self._view_models.append(view_model)
        return view_model
