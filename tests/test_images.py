from pathlib import Path

from PIL import Image

from models import ExistingDiary, NewDiary
from storage.repositories import DiaryImageRepository, DiaryTagRepository
from utils.errors import DiaryNotFoundError

from tests.support import StorageTestCase, make_image_bytes


class ImageStorageTests(StorageTestCase):
    async def test_store_writes_compressed_copy_and_thumbnail(self):
        stored = await self.image_storage.store(make_image_bytes(1200, 800))

        self.assertIsNotNone(stored)
        image_path = Path(stored.image_path)
        thumbnail_path = Path(stored.thumbnail_path)
        self.assertEqual(image_path.parent, self.settings.IMAGES_DIR)
        self.assertTrue(image_path.name.startswith("diary_"))
        self.assertEqual(thumbnail_path.parent, self.settings.THUMBNAILS_DIR)
        self.assertEqual(thumbnail_path.name, f"thumb_{image_path.name}")

        with Image.open(image_path) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.size, (1200, 800))
        with Image.open(thumbnail_path) as thumb:
            self.assertGreaterEqual(thumb.width, 300)
            self.assertLess(thumb.width, 600)

    async def test_small_image_thumbnail_keeps_size(self):
        stored = await self.image_storage.store(make_image_bytes(200, 100))

        with Image.open(stored.thumbnail_path) as thumb:
            self.assertEqual(thumb.size, (200, 100))

    async def test_non_jpeg_source_is_converted(self):
        source = self.data_dir / "input.png"
        source.write_bytes(make_image_bytes(640, 480, fmt="PNG", mode="RGBA"))

        stored = await self.image_storage.store(source)

        with Image.open(stored.image_path) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.mode, "RGB")

    async def test_undecodable_source_returns_none(self):
        self.assertIsNone(await self.image_storage.store(b"not an image"))
        self.assertIsNone(await self.image_storage.store(self.data_dir / "missing.jpg"))

    async def test_delete_file_is_best_effort(self):
        await self.image_storage.delete_file(str(self.data_dir / "missing.jpg"))
        await self.image_storage.delete_file(None)


class DiaryImageTests(StorageTestCase):
    async def _images(self, diary_id):
        async with self.database.get_session() as session:
            return await DiaryImageRepository(session).get_by_diary_id(diary_id)

    async def test_save_skips_undecodable_images_without_gaps(self):
        diary_id = await self.service.save_diary(
            NewDiary(title="photos"),
            image_sources=[make_image_bytes(), b"garbage", make_image_bytes(400, 300)]
        )

        images = await self._images(diary_id)
        self.assertEqual([img.sort_order for img in images], [0, 1])
        for image in images:
            self.assertTrue(Path(image.image_path).exists())
            self.assertTrue(Path(image.thumbnail_path).exists())

    async def test_images_added_on_update_continue_numbering(self):
        diary_id = await self.service.save_diary(NewDiary(title="photos"), image_sources=[make_image_bytes()])
        await self.service.save_diary(ExistingDiary(id=diary_id, title="photos"), image_sources=[make_image_bytes()])
        added = await self.service.add_image_to_diary(diary_id, make_image_bytes())

        self.assertEqual(added.sort_order, 2)
        images = await self._images(diary_id)
        self.assertEqual([img.sort_order for img in images], [0, 1, 2])

    async def test_add_undecodable_image_returns_none(self):
        diary_id = await self.service.save_diary(NewDiary(title="photos"))

        self.assertIsNone(await self.service.add_image_to_diary(diary_id, b"garbage"))
        self.assertEqual(await self._images(diary_id), [])

    async def test_add_image_to_missing_diary_raises(self):
        with self.assertRaises(DiaryNotFoundError):
            await self.service.add_image_to_diary(404, make_image_bytes())

    async def test_delete_image_removes_files_and_renumbers(self):
        diary_id = await self.service.save_diary(
            NewDiary(title="photos"),
            image_sources=[make_image_bytes() for _ in range(3)]
        )
        first, middle, last = await self._images(diary_id)

        self.assertTrue(await self.service.delete_image(middle.id))

        self.assertFalse(Path(middle.image_path).exists())
        self.assertFalse(Path(middle.thumbnail_path).exists())
        images = await self._images(diary_id)
        self.assertEqual([(img.id, img.sort_order) for img in images], [(first.id, 0), (last.id, 1)])

        self.assertFalse(await self.service.delete_image(middle.id))

    async def test_reorder_images(self):
        diary_id = await self.service.save_diary(
            NewDiary(title="photos"),
            image_sources=[make_image_bytes() for _ in range(3)]
        )
        a, b, c = await self._images(diary_id)

        reordered = await self.service.reorder_images(diary_id, [c.id, a.id])

        self.assertEqual([img.id for img in reordered], [c.id, a.id, b.id])
        images = await self._images(diary_id)
        self.assertEqual([(img.id, img.sort_order) for img in images], [(c.id, 0), (a.id, 1), (b.id, 2)])

    async def test_permanent_delete_removes_files_and_rows(self):
        tag = await self.service.create_tag("trip")
        diary_id = await self.service.save_diary(
            NewDiary(title="photos"),
            image_sources=[make_image_bytes(), make_image_bytes()],
            tag_ids=[tag.id]
        )
        images = await self._images(diary_id)

        self.assertTrue(await self.service.delete_diary(diary_id, permanent=True))

        self.assertIsNone(await self.service.get_diary_by_id(diary_id))
        self.assertEqual(await self._images(diary_id), [])
        for image in images:
            self.assertFalse(Path(image.image_path).exists())
            self.assertFalse(Path(image.thumbnail_path).exists())
        async with self.database.get_session() as session:
            self.assertEqual(await DiaryTagRepository(session).get_tag_ids_by_diary_id(diary_id), [])
        # 标签本身保留
        self.assertEqual([t.id for t in await self.service.get_all_tags()], [tag.id])

    async def test_soft_delete_keeps_image_files(self):
        diary_id = await self.service.save_diary(NewDiary(title="photos"), image_sources=[make_image_bytes()])
        (image,) = await self._images(diary_id)

        await self.service.delete_diary(diary_id)

        self.assertTrue(Path(image.image_path).exists())
