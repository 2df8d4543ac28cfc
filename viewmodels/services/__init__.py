"""
业务服务包
"""
from .diary_service import DiaryService
from .image_storage import ImageStorage, StoredImage

__all__ = [
    "DiaryService",
    "ImageStorage",
    "StoredImage",
]
