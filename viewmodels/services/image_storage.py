"""
图片文件存储
负责把用户选择的图片压缩保存到应用私有目录，并生成缩略图
"""
# 标准库导包
import asyncio
import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

# 第三方库导包
from PIL import Image, UnidentifiedImageError

# 项目内部导包
from config import Settings, settings
from models import ImageSource
from storage.models.diary_image import DiaryImage

# 配置日志
logger = logging.getLogger(__name__)

# 解码失败、文件读写失败都归为这一类，调用方跳过该图片
IMAGE_ERRORS = (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError)


@dataclass(frozen=True)
class StoredImage:
    """已保存的图片文件"""
    image_path: str
    thumbnail_path: Optional[str]


class ImageStorage:
    """图片文件存储"""

    def __init__(self, app_settings: Settings = settings):
        """
        初始化图片存储

        Args:
            app_settings: 应用配置（目录、JPEG质量、缩略图宽度）
        """
        self.images_dir = app_settings.IMAGES_DIR
        self.thumbnails_dir = app_settings.THUMBNAILS_DIR
        self.image_quality = app_settings.IMAGE_JPEG_QUALITY
        self.thumbnail_quality = app_settings.THUMBNAIL_JPEG_QUALITY
        self.thumbnail_width = app_settings.THUMBNAIL_TARGET_WIDTH

    async def store(self, source: ImageSource) -> Optional[StoredImage]:
        """
        保存图片：压缩副本 + 缩略图

        Args:
            source: 图片路径或字节

        Returns:
            保存结果；图片无法解码或写入失败时返回None
        """
        try:
            image_path = await asyncio.to_thread(self._save_compressed, source)
        except IMAGE_ERRORS as e:
            logger.error(f"保存图片失败: {type(e).__name__}: {str(e)}")
            return None

        thumbnail_path = await self.create_thumbnail(image_path)
        return StoredImage(image_path=str(image_path), thumbnail_path=thumbnail_path)

    async def create_thumbnail(self, image_path: Union[str, Path]) -> Optional[str]:
        """
        为已保存的图片生成缩略图

        Args:
            image_path: 原图路径

        Returns:
            缩略图路径；失败时返回None
        """
        try:
            thumbnail_path = await asyncio.to_thread(self._save_thumbnail, Path(image_path))
        except IMAGE_ERRORS as e:
            logger.error(f"生成缩略图失败: path={image_path}, {type(e).__name__}: {str(e)}")
            return None
        return str(thumbnail_path)

    async def delete_file(self, path: Optional[str]) -> None:
        """删除文件，失败只记录日志"""
        if not path:
            return
        try:
            await asyncio.to_thread(Path(path).unlink, missing_ok=True)
        except OSError as e:
            logger.warning(f"删除文件失败: path={path}, error={str(e)}")

    async def delete_image_files(self, image: DiaryImage) -> None:
        """删除图片记录对应的原图和缩略图"""
        await self.delete_file(image.image_path)
        await self.delete_file(image.thumbnail_path)

    # ========== 同步实现（在线程中执行） ==========

    @staticmethod
    def _open(source: ImageSource) -> Image.Image:
        if isinstance(source, bytes):
            return Image.open(io.BytesIO(source))
        return Image.open(source)

    def _save_compressed(self, source: ImageSource) -> Path:
        self.images_dir.mkdir(parents=True, exist_ok=True)
        target = self.images_dir / f"diary_{uuid.uuid4()}.jpg"
        with self._open(source) as img:
            img.convert("RGB").save(target, "JPEG", quality=self.image_quality)
        return target

    def _save_thumbnail(self, image_path: Path) -> Path:
        self.thumbnails_dir.mkdir(parents=True, exist_ok=True)
        target = self.thumbnails_dir / f"thumb_{image_path.name}"

        with Image.open(image_path) as img:
            # open只解析文件头，这里拿到的尺寸不需要完整解码
            width, height = img.size
            scale = max(width // self.thumbnail_width, 1)
            if scale > 1:
                # JPEG按DCT缩放解码，不会解出完整分辨率
                img.draft("RGB", (width // scale, height // scale))
            thumbnail = img.convert("RGB")

        factor = thumbnail.width // self.thumbnail_width
        if factor > 1:
            thumbnail = thumbnail.reduce(factor)
        thumbnail.save(target, "JPEG", quality=self.thumbnail_quality)
        return target
