"""
DiaryImage模型 - 日记图片表
"""
# 标准库导包
from datetime import datetime
from typing import Optional

# 第三方库导包
from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base, utc_now


class DiaryImage(Base):
    """日记图片表"""

    __tablename__ = "diary_images"

    # 核心字段
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    diary_id: Mapped[int] = mapped_column(Integer, ForeignKey("diary_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    image_path: Mapped[str] = mapped_column(String(1024), nullable=False, comment="图片文件路径")
    thumbnail_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True, comment="缩略图文件路径")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="排序顺序，从0开始连续")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)

    # 关系定义
    diary: Mapped["DiaryEntry"] = relationship("DiaryEntry", back_populates="images")

    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<DiaryImage(id={self.id}, diary_id={self.diary_id}, sort_order={self.sort_order})>"
