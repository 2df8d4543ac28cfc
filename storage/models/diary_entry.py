"""
DiaryEntry模型 - 日记表
"""
# 标准库导包
from datetime import datetime
from typing import Optional

# 第三方库导包
from sqlalchemy import String, Text, Boolean, Integer, DateTime, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base, utc_now
from storage.models.enums import Mood, Weather


class DiaryEntry(Base):
    """日记表"""

    __tablename__ = "diary_entries"

    # 核心字段
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="标题")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="正文")
    mood: Mapped[Mood] = mapped_column(Enum(Mood, native_enum=False, length=20), nullable=False, default=Mood.NEUTRAL, comment="心情")
    weather: Mapped[Optional[Weather]] = mapped_column(Enum(Weather, native_enum=False, length=20), nullable=True, comment="天气")
    location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, comment="地点")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, comment="是否收藏")
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, comment="软删除标记")

    # 关系定义（删除由数据库外键级联完成）
    images: Mapped[list["DiaryImage"]] = relationship(
        "DiaryImage",
        back_populates="diary",
        order_by="DiaryImage.sort_order",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    tags: Mapped[list["Tag"]] = relationship(
        "Tag",
        secondary="diary_tag_cross_ref",
        order_by="Tag.name",
        viewonly=True
    )

    __table_args__ = (
        Index("idx_diary_deleted_created", "is_deleted", "created_at"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<DiaryEntry(id={self.id}, title={self.title!r}, mood={self.mood}, is_deleted={self.is_deleted})>"
