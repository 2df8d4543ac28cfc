"""
Tag模型 - 标签表
"""
# 标准库导包
from datetime import datetime

# 第三方库导包
from sqlalchemy import String, Integer, BigInteger, DateTime
from sqlalchemy.orm import Mapped, mapped_column

# 项目内部导包
from config import settings
from storage.database import Base, utc_now


class Tag(Base):
    """标签表"""

    __tablename__ = "tags"

    # 核心字段
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, comment="标签名称，唯一")
    color: Mapped[int] = mapped_column(BigInteger, nullable=False, default=settings.DEFAULT_TAG_COLOR, comment="标签颜色，ARGB整数")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Tag(id={self.id}, name={self.name}, color={self.color})>"
