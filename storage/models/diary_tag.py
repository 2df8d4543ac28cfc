"""
DiaryTagCrossRef模型 - 日记标签关联表
"""
# 第三方库导包
from sqlalchemy import Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

# 项目内部导包
from storage.database import Base


class DiaryTagCrossRef(Base):
    """日记标签关联表，(diary_id, tag_id) 联合主键保证唯一"""

    __tablename__ = "diary_tag_cross_ref"

    diary_id: Mapped[int] = mapped_column(Integer, ForeignKey("diary_entries.id", ondelete="CASCADE"), primary_key=True, index=True)
    tag_id: Mapped[int] = mapped_column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)

    def __repr__(self):
        return f"<DiaryTagCrossRef(diary_id={self.diary_id}, tag_id={self.tag_id})>"
