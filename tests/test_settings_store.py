import asyncio
import json
import tempfile
import unittest
from pathlib import Path

from storage.models import Mood
from storage.settings_store import DarkMode, FontSize, Preferences, SettingsStore


async def next_value(live, timeout=2.0):
    return await asyncio.wait_for(live.__anext__(), timeout)


class SettingsStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "diary_settings.json"
        self.store = SettingsStore(self.path)

    async def asyncTearDown(self):
        self._tmp.cleanup()

    async def test_defaults_when_file_is_missing(self):
        self.assertEqual(await self.store.snapshot(), Preferences())
        self.assertFalse(await self.store.get_app_lock_enabled())
        self.assertFalse(await self.store.get_use_biometric())
        self.assertIsNone(await self.store.get_pin_code())
        self.assertEqual(await self.store.get_dark_mode(), DarkMode.SYSTEM)
        self.assertTrue(await self.store.get_first_launch())
        self.assertEqual(await self.store.get_default_mood(), Mood.NEUTRAL)
        self.assertTrue(await self.store.get_auto_save())
        self.assertEqual(await self.store.get_font_size(), FontSize.MEDIUM)

    async def test_values_persist_across_instances(self):
        await self.store.set_app_lock_enabled(True)
        await self.store.set_dark_mode(DarkMode.DARK)
        await self.store.set_default_mood(Mood.HAPPY)
        await self.store.set_font_size(FontSize.LARGE)
        await self.store.set_auto_save(False)
        await self.store.set_first_launch_complete()

        reopened = SettingsStore(self.path)
        prefs = await reopened.snapshot()
        self.assertTrue(prefs.app_lock_enabled)
        self.assertEqual(prefs.dark_mode, DarkMode.DARK)
        self.assertEqual(prefs.default_mood, Mood.HAPPY)
        self.assertEqual(prefs.font_size, FontSize.LARGE)
        self.assertEqual(prefs.font_size.scale_factor, 1.15)
        self.assertFalse(prefs.auto_save)
        self.assertFalse(prefs.first_launch)

    async def test_corrupt_file_falls_back_to_defaults(self):
        self.path.write_text("{not json", encoding="utf-8")

        self.assertEqual(await self.store.get_dark_mode(), DarkMode.SYSTEM)

        await self.store.set_use_biometric(True)
        self.assertTrue(await self.store.get_use_biometric())
        self.assertEqual(json.loads(self.path.read_text(encoding="utf-8")), {"use_biometric": True})

    async def test_unknown_values_fall_back_to_defaults(self):
        self.path.write_text(
            json.dumps({"dark_mode": "SEPIA", "font_size": 3, "auto_save": "yes"}),
            encoding="utf-8"
        )

        prefs = await self.store.snapshot()
        self.assertEqual(prefs.dark_mode, DarkMode.SYSTEM)
        self.assertEqual(prefs.font_size, FontSize.MEDIUM)
        self.assertTrue(prefs.auto_save)

    async def test_verify_pin(self):
        self.assertFalse(await self.store.verify_pin(""))
        self.assertFalse(await self.store.verify_pin("1234"))

        await self.store.set_pin_code("1234")
        self.assertTrue(await self.store.verify_pin("1234"))
        self.assertFalse(await self.store.verify_pin("12345"))
        self.assertFalse(await self.store.verify_pin(" 1234"))

        await self.store.set_pin_code(None)
        self.assertIsNone(await self.store.get_pin_code())
        self.assertFalse(await self.store.verify_pin("1234"))
        self.assertNotIn("pin_code", json.loads(self.path.read_text(encoding="utf-8")))

    async def test_observe_emits_current_value_then_each_edit(self):
        async with self.store.observe_dark_mode() as live:
            self.assertEqual(await next_value(live), DarkMode.SYSTEM)

            await self.store.set_dark_mode(DarkMode.LIGHT)
            self.assertEqual(await next_value(live), DarkMode.LIGHT)

            await self.store.set_dark_mode(DarkMode.DARK)
            self.assertEqual(await next_value(live), DarkMode.DARK)

    async def test_concurrent_edits_are_all_kept(self):
        await asyncio.gather(
            self.store.set_app_lock_enabled(True),
            self.store.set_use_biometric(True),
            self.store.set_auto_save(False),
        )

        prefs = await self.store.snapshot()
        self.assertTrue(prefs.app_lock_enabled)
        self.assertTrue(prefs.use_biometric)
        self.assertFalse(prefs.auto_save)
