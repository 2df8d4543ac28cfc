"""
设置ViewModel
"""
# 项目内部导包
from models import SettingsUiState
from storage.models import Mood
from storage.settings_store import DarkMode, FontSize, Preferences, SettingsStore
from viewmodels.base import BaseViewModel


class SettingsViewModel(BaseViewModel[SettingsUiState]):
    """偏好设置"""

    def __init__(self, store: SettingsStore):
        super().__init__(SettingsUiState())
        self.store = store

    def start(self) -> None:
        self.collect(self.store.observe_preferences(), self._on_preferences, is_loading=False)

    def _on_preferences(self, prefs: Preferences) -> None:
        self._update(
            app_lock_enabled=prefs.app_lock_enabled,
            use_biometric=prefs.use_biometric,
            has_pin=prefs.pin_code is not None,
            dark_mode=prefs.dark_mode,
            default_mood=prefs.default_mood,
            auto_save=prefs.auto_save,
            font_size=prefs.font_size,
            is_loading=False,
        )

    async def set_app_lock_enabled(self, enabled: bool) -> None:
        await self._guard(self.store.set_app_lock_enabled(enabled))

    async def set_use_biometric(self, enabled: bool) -> None:
        await self._guard(self.store.set_use_biometric(enabled))

    async def set_pin_code(self, pin: str) -> None:
        if not pin:
            self._update(error="PIN码不能为空")
            return
        await self._guard(self.store.set_pin_code(pin))

    async def clear_pin_code(self) -> None:
        await self._guard(self.store.set_pin_code(None))

    async def verify_pin(self, pin: str) -> bool:
        return bool(await self._guard(self.store.verify_pin(pin)))

    async def set_dark_mode(self, mode: DarkMode) -> None:
        await self._guard(self.store.set_dark_mode(mode))

    async def set_default_mood(self, mood: Mood) -> None:
        await self._guard(self.store.set_default_mood(mood))

    async def set_auto_save(self, enabled: bool) -> None:
        await self._guard(self.store.set_auto_save(enabled))

    async def set_font_size(self, size: FontSize) -> None:
        await self._guard(self.store.set_font_size(size))
