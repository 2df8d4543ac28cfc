from datetime import datetime

from models import NewDiary
from storage.repositories import DiaryImageRepository, DiaryRepository, DiaryTagRepository, TagRepository

from tests.support import StorageTestCase


class BaseRepositoryTests(StorageTestCase):
    async def test_generic_queries(self):
        async with self.database.get_session() as session:
            repo = TagRepository(session)
            for name in ("alpha", "beta", "gamma"):
                await repo.create(name=name)

        async with self.database.get_session() as session:
            repo = TagRepository(session)
            self.assertEqual(await repo.count(), 3)
            self.assertEqual(await repo.count(name="beta"), 1)
            self.assertEqual(await repo.count(name="delta"), 0)
            self.assertEqual(await repo.count(unknown_column="x"), 3)

            names = [t.name for t in await repo.query_by_filters({"name": ["alpha", "gamma"]}, order_by="name")]
            self.assertEqual(names, ["gamma", "alpha"])

            names = [t.name for t in await repo.query_by_filters({}, limit=2, order_by="name", order_desc=False)]
            self.assertEqual(names, ["alpha", "beta"])

    async def test_delete_and_update_report_missing_rows(self):
        async with self.database.get_session() as session:
            repo = TagRepository(session)
            self.assertIsNone(await repo.update_by_id(1, name="x"))
            self.assertFalse(await repo.delete_by_id(1))


class DiaryRepositoryTests(StorageTestCase):
    async def test_visible_lookup_ignores_soft_deleted(self):
        diary_id = await self.service.save_diary(NewDiary(title="t"))
        await self.service.delete_diary(diary_id)

        async with self.database.get_session() as session:
            repo = DiaryRepository(session)
            self.assertIsNone(await repo.get_visible_by_id(diary_id))
            self.assertIsNotNone(await repo.get_by_id(diary_id))
            self.assertEqual(await repo.count_visible(), 0)

    async def test_image_and_tag_cleanup_helpers(self):
        tag = await self.service.create_tag("t")
        diary_id = await self.service.save_diary(NewDiary(title="t", created_at=datetime(2024, 1, 1)), tag_ids=[tag.id])

        async with self.database.get_session() as session:
            image_repo = DiaryImageRepository(session)
            await image_repo.create(diary_id=diary_id, image_path="/tmp/a.jpg", sort_order=0)
            await image_repo.create(diary_id=diary_id, image_path="/tmp/b.jpg", sort_order=1)

            link_repo = DiaryTagRepository(session)
            self.assertFalse(await link_repo.add_tag_to_diary(diary_id, tag.id))
            self.assertTrue(await link_repo.remove_tag_from_diary(diary_id, tag.id))
            self.assertFalse(await link_repo.remove_tag_from_diary(diary_id, tag.id))

        async with self.database.get_session() as session:
            image_repo = DiaryImageRepository(session)
            self.assertEqual(await image_repo.count_by_diary_id(diary_id), 2)
            self.assertEqual(await image_repo.delete_by_diary_id(diary_id), 2)
            self.assertEqual(await DiaryTagRepository(session).count_by_tag_id(tag.id), 0)
