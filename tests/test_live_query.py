import asyncio
import unittest

from models import ExistingDiary, NewDiary
from storage.observer import ChangeBus, expand_cascades
from utils.errors import DiaryNotFoundError

from tests.support import StorageTestCase, make_image_bytes


async def next_value(live, timeout=2.0):
    return await asyncio.wait_for(live.__anext__(), timeout)


class ChangeBusTests(unittest.IsolatedAsyncioTestCase):
    def test_expand_cascades(self):
        self.assertEqual(
            expand_cascades({"diary_entries"}),
            {"diary_entries", "diary_images", "diary_tag_cross_ref"}
        )
        self.assertEqual(expand_cascades({"tags"}), {"tags", "diary_tag_cross_ref"})
        self.assertEqual(expand_cascades({"diary_images"}), {"diary_images"})

    async def test_only_matching_subscriptions_are_notified(self):
        bus = ChangeBus("test")
        calls = {"images": 0, "tags": 0}

        async def count_images():
            calls["images"] += 1
            return calls["images"]

        async def count_tags():
            calls["tags"] += 1
            return calls["tags"]

        images = bus.observe({"diary_images"}, count_images)
        tags = bus.observe({"tags"}, count_tags)
        self.assertEqual(await next_value(images), 1)
        self.assertEqual(await next_value(tags), 1)

        bus.publish({"diary_entries"})

        self.assertEqual(await next_value(images), 2)
        with self.assertRaises(asyncio.TimeoutError):
            await next_value(tags, timeout=0.1)

    async def test_close_ends_iteration_and_unsubscribes(self):
        bus = ChangeBus("test")

        async def query():
            return "value"

        live = bus.observe({"tags"}, query)
        self.assertEqual(bus.subscription_count, 1)
        self.assertEqual(await next_value(live), "value")

        waiter = asyncio.ensure_future(live.__anext__())
        await asyncio.sleep(0)
        live.close()

        with self.assertRaises(StopAsyncIteration):
            await waiter
        self.assertTrue(live.closed)
        self.assertEqual(bus.subscription_count, 0)


class LiveDiaryQueryTests(StorageTestCase):
    async def test_list_reemits_after_each_write(self):
        async with self.service.observe_all_diaries_with_details() as live:
            self.assertEqual(await next_value(live), [])

            diary_id = await self.service.save_diary(NewDiary(title="one"))
            diaries = await next_value(live)
            self.assertEqual([d.diary.title for d in diaries], ["one"])

            await self.service.save_diary(ExistingDiary(id=diary_id, title="uno"))
            diaries = await next_value(live)
            self.assertEqual([d.diary.title for d in diaries], ["uno"])

            await self.service.delete_diary(diary_id)
            self.assertEqual(await next_value(live), [])

    async def test_tag_changes_reach_detail_subscribers(self):
        tag = await self.service.create_tag("mood")
        diary_id = await self.service.save_diary(NewDiary(title="d"), tag_ids=[tag.id])

        async with self.service.observe_all_diaries_with_details() as live:
            (details,) = await next_value(live)
            self.assertEqual([t.name for t in details.tags], ["mood"])

            await self.service.update_tag(tag.id, "feeling", tag.color)
            (details,) = await next_value(live)
            self.assertEqual([t.name for t in details.tags], ["feeling"])

    async def test_permanent_delete_notifies_image_subscribers(self):
        diary_id = await self.service.save_diary(NewDiary(title="d"), image_sources=[make_image_bytes()])

        async with self.service.observe_images(diary_id) as live:
            self.assertEqual(len(await next_value(live)), 1)

            await self.service.delete_diary(diary_id, permanent=True)
            self.assertEqual(await next_value(live), [])

    async def test_failed_write_does_not_notify(self):
        async with self.service.observe_diary_count() as live:
            self.assertEqual(await next_value(live), 0)

            with self.assertRaises(DiaryNotFoundError):
                await self.service.save_diary(ExistingDiary(id=7, title="missing"))

            with self.assertRaises(asyncio.TimeoutError):
                await next_value(live, timeout=0.1)

    async def test_search_subscription_follows_new_entries(self):
        async with self.service.observe_search("garden") as live:
            self.assertEqual(await next_value(live), [])

            diary_id = await self.service.save_diary(NewDiary(title="Garden notes", content="tomatoes"))
            self.assertEqual([d.id for d in await next_value(live)], [diary_id])
