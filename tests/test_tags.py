import asyncio

from config import settings
from models import ExistingDiary, NewDiary
from utils.errors import TagNotFoundError

from tests.support import StorageTestCase


class TagTests(StorageTestCase):
    async def _tag_names(self, diary_id):
        details = await self.service.get_diary_with_details_by_id(diary_id)
        return [t.name for t in details.tags]

    async def test_create_tag_is_idempotent_by_name(self):
        first = await self.service.create_tag("work", 0xFF112233)
        again = await self.service.create_tag("work", 0xFF445566)

        self.assertEqual(first.id, again.id)
        self.assertEqual(again.color, 0xFF112233)
        self.assertEqual(len(await self.service.get_all_tags()), 1)

    async def test_concurrent_create_tag_returns_one_tag(self):
        tags = await asyncio.gather(*(self.service.create_tag("Travel") for _ in range(5)))

        self.assertEqual({t.id for t in tags}, {tags[0].id})
        self.assertEqual([t.name for t in await self.service.get_all_tags()], ["Travel"])

    async def test_create_tag_uses_default_color(self):
        tag = await self.service.create_tag("home")
        self.assertEqual(tag.color, settings.DEFAULT_TAG_COLOR)

    async def test_tags_are_listed_by_name(self):
        for name in ("zeta", "alpha", "mid"):
            await self.service.create_tag(name)

        async with self.service.observe_all_tags() as live:
            tags = await live.first()
        self.assertEqual([t.name for t in tags], ["alpha", "mid", "zeta"])

    async def test_set_tags_replaces_and_ignores_duplicates(self):
        a = await self.service.create_tag("b-tag")
        b = await self.service.create_tag("a-tag")
        c = await self.service.create_tag("c-tag")
        diary_id = await self.service.save_diary(NewDiary(title="t"), tag_ids=[a.id])

        result = await self.service.set_tags_for_diary(diary_id, [a.id, a.id, b.id])
        self.assertEqual(sorted(result), sorted([a.id, b.id]))
        self.assertEqual(await self._tag_names(diary_id), ["a-tag", "b-tag"])

        # 重复设置结果不变
        await self.service.set_tags_for_diary(diary_id, [a.id, b.id])
        self.assertEqual(await self._tag_names(diary_id), ["a-tag", "b-tag"])

        await self.service.set_tags_for_diary(diary_id, [c.id])
        async with self.service.observe_tags_for_diary(diary_id) as live:
            self.assertEqual([t.name for t in await live.first()], ["c-tag"])

    async def test_save_without_tag_ids_leaves_tags_alone(self):
        tag = await self.service.create_tag("keep")
        diary_id = await self.service.save_diary(NewDiary(title="t"), tag_ids=[tag.id])

        await self.service.save_diary(ExistingDiary(id=diary_id, title="t2"))
        self.assertEqual(await self._tag_names(diary_id), ["keep"])

        await self.service.save_diary(ExistingDiary(id=diary_id, title="t3"), tag_ids=[])
        self.assertEqual(await self._tag_names(diary_id), [])

    async def test_delete_tag_removes_links(self):
        tag = await self.service.create_tag("temp")
        first = await self.service.save_diary(NewDiary(title="1"), tag_ids=[tag.id])
        await self.service.save_diary(NewDiary(title="2"), tag_ids=[tag.id])

        async with self.service.observe_diary_count_for_tag(tag.id) as live:
            self.assertEqual(await live.first(), 2)

        self.assertTrue(await self.service.delete_tag(tag.id))

        self.assertEqual(await self._tag_names(first), [])
        async with self.service.observe_diary_count_for_tag(tag.id) as live:
            self.assertEqual(await live.first(), 0)

    async def test_update_tag(self):
        tag = await self.service.create_tag("old")

        updated = await self.service.update_tag(tag.id, "new", 0xFF000000)

        self.assertEqual(updated.name, "new")
        self.assertEqual(updated.color, 0xFF000000)

    async def test_update_missing_tag_raises(self):
        with self.assertRaises(TagNotFoundError):
            await self.service.update_tag(99, "x", 0)
