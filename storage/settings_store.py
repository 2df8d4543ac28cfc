"""
偏好设置存储
独立于日记数据库的键值存储（应用锁、主题、字体大小等），持久化为JSON文件
"""
# 标准库导包
import asyncio
import enum
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Type, TypeVar

# 第三方库导包
from pydantic import BaseModel

# 项目内部导包
from config import Settings, settings
from storage.models.enums import Mood
from storage.observer import ChangeBus, LiveQuery

# 配置日志
logger = logging.getLogger(__name__)

E = TypeVar("E", bound=enum.Enum)
T = TypeVar("T")

PREFERENCES_TOPIC = "preferences"


class DarkMode(str, enum.Enum):
    """深色模式"""
    LIGHT = "LIGHT"
    DARK = "DARK"
    SYSTEM = "SYSTEM"


class FontSize(enum.Enum):
    """字体大小，值为缩放系数"""
    SMALL = 0.85
    MEDIUM = 1.0
    LARGE = 1.15
    EXTRA_LARGE = 1.3

    @property
    def scale_factor(self) -> float:
        return self.value


class PreferencesKeys:
    """偏好设置键名"""
    APP_LOCK_ENABLED = "app_lock_enabled"
    USE_BIOMETRIC = "use_biometric"
    PIN_CODE = "pin_code"
    DARK_MODE = "dark_mode"
    FIRST_LAUNCH = "first_launch"
    DEFAULT_MOOD = "default_mood"
    AUTO_SAVE = "auto_save"
    FONT_SIZE = "font_size"


class Preferences(BaseModel):
    """全部偏好设置的快照"""
    app_lock_enabled: bool = False
    use_biometric: bool = False
    pin_code: Optional[str] = None
    dark_mode: DarkMode = DarkMode.SYSTEM
    first_launch: bool = True
    default_mood: Mood = Mood.NEUTRAL
    auto_save: bool = True
    font_size: FontSize = FontSize.MEDIUM


def _read_bool(prefs: Dict[str, Any], key: str, default: bool) -> bool:
    value = prefs.get(key)
    return value if isinstance(value, bool) else default


def _read_str(prefs: Dict[str, Any], key: str) -> Optional[str]:
    value = prefs.get(key)
    return value if isinstance(value, str) else None


def _read_enum(prefs: Dict[str, Any], key: str, enum_cls: Type[E], default: E) -> E:
    name = prefs.get(key)
    if name is None:
        return default
    try:
        return enum_cls[name]
    except (KeyError, TypeError):
        logger.warning(f"偏好设置值无效，使用默认值: key={key}, value={name!r}")
        return default


class SettingsStore:
    """偏好设置存储"""

    def __init__(self, path: Path, change_bus: Optional[ChangeBus] = None):
        """
        初始化偏好设置存储

        Args:
            path: 偏好设置文件路径
            change_bus: 变更通知总线，不传则新建
        """
        self.path = Path(path)
        self.change_bus = change_bus or ChangeBus("preferences")
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, app_settings: Settings = settings) -> "SettingsStore":
        return cls(app_settings.PREFERENCES_PATH)

    # ========== 文件读写 ==========

    def _read_file(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"偏好设置文件格式错误: {self.path}")
        return data

    def _write_file(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def _read(self) -> Dict[str, Any]:
        """读取全部偏好设置，文件不可读时视为空"""
        try:
            return await asyncio.to_thread(self._read_file)
        except (OSError, ValueError) as e:
            logger.warning(f"读取偏好设置失败，使用默认值: {str(e)}")
            return {}

    async def _edit(self, mutate: Callable[[Dict[str, Any]], None]) -> None:
        """
        修改偏好设置并通知订阅者

        Args:
            mutate: 就地修改偏好字典的函数
        """
        async with self._lock:
            prefs = await self._read()
            mutate(prefs)
            await asyncio.to_thread(self._write_file, prefs)
        self.change_bus.publish({PREFERENCES_TOPIC})

    async def _set(self, key: str, value: Any) -> None:
        def mutate(prefs: Dict[str, Any]) -> None:
            if value is None:
                prefs.pop(key, None)
            else:
                prefs[key] = value

        await self._edit(mutate)

    def _observe(self, reader: Callable[[Dict[str, Any]], T]) -> LiveQuery[T]:
        async def query() -> T:
            return reader(await self._read())

        return self.change_bus.observe({PREFERENCES_TOPIC}, query)

    # ========== 读取器 ==========

    @staticmethod
    def _to_preferences(prefs: Dict[str, Any]) -> Preferences:
        return Preferences(
            app_lock_enabled=_read_bool(prefs, PreferencesKeys.APP_LOCK_ENABLED, False),
            use_biometric=_read_bool(prefs, PreferencesKeys.USE_BIOMETRIC, False),
            pin_code=_read_str(prefs, PreferencesKeys.PIN_CODE),
            dark_mode=_read_enum(prefs, PreferencesKeys.DARK_MODE, DarkMode, DarkMode.SYSTEM),
            first_launch=_read_bool(prefs, PreferencesKeys.FIRST_LAUNCH, True),
            default_mood=_read_enum(prefs, PreferencesKeys.DEFAULT_MOOD, Mood, Mood.NEUTRAL),
            auto_save=_read_bool(prefs, PreferencesKeys.AUTO_SAVE, True),
            font_size=_read_enum(prefs, PreferencesKeys.FONT_SIZE, FontSize, FontSize.MEDIUM),
        )

    async def snapshot(self) -> Preferences:
        """读取全部偏好设置"""
        return self._to_preferences(await self._read())

    def observe_preferences(self) -> LiveQuery[Preferences]:
        """订阅全部偏好设置"""
        return self._observe(self._to_preferences)

    # ========== 单项订阅 ==========

    def observe_app_lock_enabled(self) -> LiveQuery[bool]:
        return self._observe(lambda p: _read_bool(p, PreferencesKeys.APP_LOCK_ENABLED, False))

    def observe_use_biometric(self) -> LiveQuery[bool]:
        return self._observe(lambda p: _read_bool(p, PreferencesKeys.USE_BIOMETRIC, False))

    def observe_pin_code(self) -> LiveQuery[Optional[str]]:
        return self._observe(lambda p: _read_str(p, PreferencesKeys.PIN_CODE))

    def observe_dark_mode(self) -> LiveQuery[DarkMode]:
        return self._observe(lambda p: _read_enum(p, PreferencesKeys.DARK_MODE, DarkMode, DarkMode.SYSTEM))

    def observe_first_launch(self) -> LiveQuery[bool]:
        return self._observe(lambda p: _read_bool(p, PreferencesKeys.FIRST_LAUNCH, True))

    def observe_default_mood(self) -> LiveQuery[Mood]:
        return self._observe(lambda p: _read_enum(p, PreferencesKeys.DEFAULT_MOOD, Mood, Mood.NEUTRAL))

    def observe_auto_save(self) -> LiveQuery[bool]:
        return self._observe(lambda p: _read_bool(p, PreferencesKeys.AUTO_SAVE, True))

    def observe_font_size(self) -> LiveQuery[FontSize]:
        return self._observe(lambda p: _read_enum(p, PreferencesKeys.FONT_SIZE, FontSize, FontSize.MEDIUM))

    # ========== 单项读取 ==========

    async def get_app_lock_enabled(self) -> bool:
        return (await self.snapshot()).app_lock_enabled

    async def get_use_biometric(self) -> bool:
        return (await self.snapshot()).use_biometric

    async def get_pin_code(self) -> Optional[str]:
        return (await self.snapshot()).pin_code

    async def get_dark_mode(self) -> DarkMode:
        return (await self.snapshot()).dark_mode

    async def get_first_launch(self) -> bool:
        return (await self.snapshot()).first_launch

    async def get_default_mood(self) -> Mood:
        return (await self.snapshot()).default_mood

    async def get_auto_save(self) -> bool:
        return (await self.snapshot()).auto_save

    async def get_font_size(self) -> FontSize:
        return (await self.snapshot()).font_size

    # ========== 写入 ==========

    async def set_app_lock_enabled(self, enabled: bool) -> None:
        await self._set(PreferencesKeys.APP_LOCK_ENABLED, enabled)

    async def set_use_biometric(self, enabled: bool) -> None:
        await self._set(PreferencesKeys.USE_BIOMETRIC, enabled)

    async def set_pin_code(self, pin: Optional[str]) -> None:
        """设置PIN码（明文保存），传None时删除"""
        await self._set(PreferencesKeys.PIN_CODE, pin)

    async def set_dark_mode(self, mode: DarkMode) -> None:
        await self._set(PreferencesKeys.DARK_MODE, mode.name)

    async def set_first_launch_complete(self) -> None:
        await self._set(PreferencesKeys.FIRST_LAUNCH, False)

    async def set_default_mood(self, mood: Mood) -> None:
        await self._set(PreferencesKeys.DEFAULT_MOOD, mood.name)

    async def set_auto_save(self, enabled: bool) -> None:
        await self._set(PreferencesKeys.AUTO_SAVE, enabled)

    async def set_font_size(self, size: FontSize) -> None:
        await self._set(PreferencesKeys.FONT_SIZE, size.name)

    async def verify_pin(self, input_pin: str) -> bool:
        """
        校验PIN码

        Args:
            input_pin: 用户输入的PIN码

        Returns:
            与当前保存的PIN码完全相同时为True；未设置PIN码时为False
        """
        stored_pin = _read_str(await self._read(), PreferencesKeys.PIN_CODE)
        return stored_pin is not None and stored_pin == input_pin
