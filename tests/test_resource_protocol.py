"""
Write-ordering guarantees of the image-backed resources:
upload new object -> commit row -> delete replaced object.
"""

from datetime import date

import pytest
from prometheus_client import REGISTRY
from tortoise.exceptions import OperationalError

from app.core.errors import NotFoundError, PersistenceFailure, StorageWriteFailure, ValidationError
from app.models import Album, GalleryItem
from app.services.album_service import AlbumService
from app.services.gallery_service import GalleryService
from app.services.member_service import IMAGE_PLACEHOLDER, MemberService
from app.services.notice_service import NoticeService
from conftest import make_upload


def cleanup_failures(resource, reason):
    value = REGISTRY.get_sample_value(
        "fansite_storage_cleanup_failures_total", {"resource": resource, "reason": reason}
    )
    return value or 0


@pytest.fixture
def albums(database, storage):
    return AlbumService(database, storage)


async def test_save_replace_delete_scenario(albums, storage):
    first = await albums.save("abc", {"title": "X", "date": date(2024, 1, 1)}, [make_upload()])
    assert first.title == "X"
    assert len(storage.stored_keys("albums/abc/")) == 1
    old_key = storage.key_from_url(first.image)

    second = await albums.save("abc", {"title": "Y"}, [make_upload(color=(0, 0, 255))])
    new_key = storage.key_from_url(second.image)
    assert second.title == "Y"
    assert second.date == date(2024, 1, 1)
    assert new_key != old_key
    assert storage.stored_keys("albums/abc/") == [new_key]

    await albums.delete("abc")
    assert await Album.filter(id="abc").first() is None
    assert storage.stored_keys("albums/abc/") == []


async def test_cover_is_resized(albums, storage):
    from io import BytesIO

    from PIL import Image

    album = await albums.create({"title": "Cover", "date": date(2024, 5, 1)}, [make_upload()])
    with Image.open(BytesIO(storage.read(storage.key_from_url(album.image)))) as im:
        assert im.size == (360, 280)


async def test_no_orphans_across_repeated_replace(albums, storage):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    for color in ((1, 2, 3), (4, 5, 6)):
        album = await albums.update(album.id, {}, [make_upload(color=color)])

    assert storage.stored_keys("albums/") == [storage.key_from_url(album.image)]
    assert len(storage.puts) == 3
    assert len(storage.removes) == 2


async def test_update_without_file_keeps_image(albums, storage):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    updated = await albums.update(album.id, {"description": "liner notes"})
    assert updated.image == album.image
    assert updated.description == "liner notes"
    assert storage.removes == []


async def test_missing_required_field_makes_no_upload(albums, storage):
    with pytest.raises(ValidationError):
        await albums.create({"date": date(2024, 1, 1)}, [make_upload()])
    assert storage.puts == []
    assert await Album.all().count() == 0


async def test_undecodable_cover_makes_no_upload(albums, storage):
    bogus = make_upload()
    bogus.data = b"definitely not an image"
    with pytest.raises(ValidationError):
        await albums.create({"title": "A", "date": date(2024, 1, 1)}, [bogus])
    assert storage.puts == []


async def test_unknown_field_is_rejected(albums):
    with pytest.raises(ValidationError):
        await albums.create({"title": "A", "date": date(2024, 1, 1), "rating": 5})


async def test_upload_failure_leaves_row_untouched(albums, storage):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    storage.fail_put_after = len(storage.puts)

    with pytest.raises(StorageWriteFailure):
        await albums.update(album.id, {"title": "B"}, [make_upload(color=(9, 9, 9))])

    row = await Album.get(id=album.id)
    assert row.title == "A"
    assert row.image == album.image
    assert storage.removes == []


async def test_commit_failure_keeps_old_row_and_object(albums, storage, monkeypatch):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    old_key = storage.key_from_url(album.image)

    async def broken_persist(conn, record_id, fields):
        raise OperationalError("disk I/O error")

    monkeypatch.setattr(albums, "persist", broken_persist)
    before = cleanup_failures("album", "commit_failed")

    with pytest.raises(PersistenceFailure):
        await albums.update(album.id, {"title": "B"}, [make_upload(color=(7, 7, 7))])

    row = await Album.get(id=album.id)
    assert row.title == "A"
    assert row.image == album.image
    # The old object is still referenced; the new one is a counted orphan
    assert old_key in storage.stored_keys()
    assert len(storage.stored_keys("albums/")) == 2
    assert storage.removes == []
    assert cleanup_failures("album", "commit_failed") == before + 1


async def test_stale_object_delete_failure_does_not_fail_save(albums, storage):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    old_key = storage.key_from_url(album.image)
    storage.fail_remove = True
    before = cleanup_failures("album", "replaced")

    updated = await albums.update(album.id, {}, [make_upload(color=(1, 1, 1))])

    assert updated.image != album.image
    assert old_key in storage.stored_keys()
    assert cleanup_failures("album", "replaced") == before + 1


async def test_delete_missing_twice_is_not_found_without_storage_calls(albums, storage):
    for _ in range(2):
        with pytest.raises(NotFoundError):
            await albums.delete("nope")
    assert storage.puts == []
    assert storage.removes == []


async def test_delete_reports_cleanup_failure_but_removes_row(albums, storage):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    storage.fail_remove = True

    results = await albums.delete(album.id)

    assert await Album.filter(id=album.id).exists() is False
    assert [r.status for r in results] == ["failed"]
    assert not results[0].ok


async def test_foreign_image_url_is_never_deleted(albums, storage):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1), "image": "https://elsewhere.example.com/x.png"})
    results = await albums.delete(album.id)
    assert [r.status for r in results] == ["skipped"]
    assert storage.removes == []


async def test_delete_many_partial_success(albums, storage):
    a = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    b = await albums.create({"title": "B", "date": date(2024, 1, 2)})

    removed = await albums.delete_many([a.id, "missing", b.id, a.id])

    assert removed == [a.id, b.id]
    assert await Album.all().count() == 0
    assert storage.stored_keys("albums/") == []


async def test_plain_resource_rejects_files(database):
    notices = NoticeService(database)
    with pytest.raises(ValidationError):
        await notices.create({"type": "news", "title": "t", "content": "c"}, [make_upload()])


async def test_gallery_bulk_upload_rolls_back_earlier_files(database, storage):
    gallery = GalleryService(database, storage)
    storage.fail_put_after = 2

    with pytest.raises(StorageWriteFailure):
        await gallery.upload_many([make_upload(color=(i, i, i)) for i in range(3)])

    assert storage.stored_keys("gallery") == []
    assert len(storage.removes) == 2
    assert await GalleryItem.all().count() == 0


async def test_gallery_bulk_upload_creates_one_row_per_file(database, storage):
    gallery = GalleryService(database, storage)
    items = await gallery.upload_many([make_upload(color=(i, 0, 0)) for i in range(3)])

    assert len(items) == 3
    assert sorted(storage.key_from_url(i.url) for i in items) == storage.stored_keys("gallery")


async def test_member_placeholders_receive_files_in_order(database, storage):
    members = MemberService(database, storage)
    contents = [
        {"type": "text", "content": "hello"},
        {"type": "image", "content": IMAGE_PLACEHOLDER},
        {"type": "image", "content": IMAGE_PLACEHOLDER},
        {"type": "image", "content": ""},
    ]
    first, second = make_upload(color=(1, 0, 0), name="a.png"), make_upload(color=(0, 1, 0), name="b.png")

    member = await members.save("jiwoo", {"name": "Jiwoo", "contents": contents}, [first, second])

    images = [c["content"] for c in member.contents if c["type"] == "image"]
    # The third slot had no file and is dropped
    assert len(images) == 2
    assert [storage.read(storage.key_from_url(u)) for u in images] == [first.data, second.data]
    assert all(storage.key_from_url(u).startswith("members/jiwoo/") for u in images)


async def test_member_removed_images_are_deleted_after_save(database, storage):
    members = MemberService(database, storage)
    contents = [{"type": "image", "content": IMAGE_PLACEHOLDER}, {"type": "image", "content": IMAGE_PLACEHOLDER}]
    member = await members.save("m1", {"name": "M", "contents": contents}, [make_upload(), make_upload(color=(5, 5, 5))])
    keep, drop = [c["content"] for c in member.contents]

    updated = await members.save("m1", {"contents": [{"type": "image", "content": keep}]})

    assert [c["content"] for c in updated.contents] == [keep]
    assert storage.stored_keys("members/m1/") == [storage.key_from_url(keep)]
    assert storage.removes == [storage.key_from_url(drop)]


async def test_member_never_deletes_objects_of_other_records(albums, database, storage):
    album = await albums.create({"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    cover_key = storage.key_from_url(album.image)
    members = MemberService(database, storage)
    borrowed = [{"type": "image", "content": album.image}, {"type": "image", "content": cover_key}]

    await members.save("m3", {"name": "M", "contents": borrowed})
    await members.save("m3", {"contents": []})
    await members.save("m4", {"name": "N", "contents": borrowed})
    results = await members.delete("m4")

    assert [r.status for r in results] == ["skipped", "skipped"]
    assert storage.removes == []
    assert cover_key in storage.stored_keys()


async def test_invalid_record_id_is_rejected_before_upload(albums, storage):
    for bad in (5, "", "x" * 65):
        with pytest.raises(ValidationError):
            await albums.save(bad, {"title": "A", "date": date(2024, 1, 1)}, [make_upload()])
    assert storage.puts == []
    assert await Album.all().count() == 0


async def test_member_more_files_than_placeholders_is_rejected(database, storage):
    members = MemberService(database, storage)
    with pytest.raises(ValidationError):
        await members.save("m2", {"name": "M", "contents": []}, [make_upload()])
    assert storage.puts == []
