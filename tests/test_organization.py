import os
import threading
from datetime import date, datetime
from pathlib import Path

import pytest

from exif_sorter.exceptions import DirectoryCreateError, FileOperationError, NameGenerationError
from exif_sorter.models import Bucket, ImageFile
from exif_sorter.organization.bucketing import bucket_for
from exif_sorter.organization.duplicates import DuplicateIndex
from exif_sorter.organization.mover import FileMover
from exif_sorter.organization.naming import UniqueNameGenerator, next_free_name


def test_bucket_for_datetime_and_date():
    assert bucket_for(datetime(2023, 5, 10, 14, 30, 0)) == Bucket(2023, 5)
    assert bucket_for(date(2022, 11, 3)) == Bucket(2022, 11)
    assert bucket_for(datetime(2023, 5, 10)).relative_path() == Path("2023") / "05"


def test_image_file_splits_last_extension():
    img = ImageFile.from_path(Path("/src/holiday.final.JPG"))
    assert img.base_name == "holiday.final"
    assert img.extension == "JPG"
    assert img.name == "holiday.final.JPG"


def test_duplicate_index_first_wins():
    index = DuplicateIndex()
    ts = datetime(2023, 5, 10, 14, 30, 0)

    assert index.check_and_register(ts, "IMG1").is_first
    second = index.check_and_register(ts, "IMG2")
    third = index.check_and_register(ts, "IMG3")

    assert not second.is_first
    assert second.original_base_name == "IMG1"
    assert third.original_base_name == "IMG1"
    assert len(index) == 1


def test_duplicate_index_is_exact_to_the_second():
    index = DuplicateIndex()
    index.check_and_register(datetime(2023, 5, 10, 14, 30, 0), "IMG1")

    assert index.check_and_register(datetime(2023, 5, 10, 14, 30, 1), "IMG2").is_first
    assert datetime(2023, 5, 10, 14, 30, 1) in index
    assert len(index) == 2


def test_duplicate_index_concurrent_registration_has_single_first():
    index = DuplicateIndex()
    ts = datetime(2020, 1, 1, 0, 0, 0)
    results = []
    barrier = threading.Barrier(8)

    def worker(i):
        barrier.wait()
        results.append(index.check_and_register(ts, f"IMG{i}"))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    firsts = [r for r in results if r.is_first]
    assert len(firsts) == 1
    originals = {r.original_base_name for r in results if not r.is_first}
    assert len(originals) == 1


def test_next_free_name_starts_at_01(tmp_path):
    assert next_free_name(tmp_path, "IMG1", "JPG") == "IMG1_01.JPG"


def test_next_free_name_skips_existing(tmp_path):
    (tmp_path / "IMG1_01.JPG").write_text("x")
    (tmp_path / "IMG1_02.JPG").write_text("x")
    assert next_free_name(tmp_path, "IMG1", "JPG") == "IMG1_03.JPG"


def test_next_free_name_goes_past_99(tmp_path):
    for i in range(1, 100):
        (tmp_path / f"a_{i:02d}.jpg").write_text("x")
    assert next_free_name(tmp_path, "a", "jpg") == "a_100.jpg"


def test_next_free_name_missing_directory_is_free(tmp_path):
    assert next_free_name(tmp_path / "not-yet", "IMG1", "JPG") == "IMG1_01.JPG"


def test_next_free_name_stat_error_is_raised(tmp_path):
    # A file where the directory should be: stat fails with ENOTDIR, not "free"
    not_a_dir = tmp_path / "Duplicates"
    not_a_dir.write_text("x")

    with pytest.raises(NameGenerationError):
        next_free_name(not_a_dir, "IMG1", "JPG")


def test_unique_name_generator_reserves_names(tmp_path):
    names = UniqueNameGenerator()
    # Nothing is written to disk, yet the second call must not reuse the name
    assert names.next_free_name(tmp_path, "IMG1", "JPG") == "IMG1_01.JPG"
    assert names.next_free_name(tmp_path, "IMG1", "JPG") == "IMG1_02.JPG"
    assert names.next_free_name(tmp_path, "IMG1", "jpg") == "IMG1_01.jpg"


def test_unique_name_generator_concurrent_callers_get_distinct_names(tmp_path):
    names = UniqueNameGenerator()
    (tmp_path / "IMG1_01.JPG").write_text("x")
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        results.append(names.next_free_name(tmp_path, "IMG1", "JPG"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [f"IMG1_{i:02d}.JPG" for i in range(2, 10)]


def test_ensure_dir_is_idempotent(tmp_path):
    mover = FileMover()
    target = tmp_path / "Dest" / "2023" / "05"

    assert mover.ensure_dir(target) is True
    assert mover.ensure_dir(target) is False
    assert target.is_dir()
    assert os.listdir(tmp_path / "Dest") == ["2023"]


def test_ensure_dir_failure_raises(tmp_path):
    blocker = tmp_path / "Dest"
    blocker.write_text("a file where a directory should be")

    with pytest.raises(DirectoryCreateError):
        FileMover().ensure_dir(blocker / "2023")


def test_copy_never_overwrites(tmp_path):
    src = tmp_path / "a.jpg"
    src.write_text("new")
    dest = tmp_path / "out" / "a.jpg"
    dest.parent.mkdir()
    dest.write_text("canonical")

    assert FileMover().copy(src, dest) is False
    assert dest.read_text() == "canonical"


def test_copy_leaves_no_partial_file_on_failure(monkeypatch, tmp_path):
    src = tmp_path / "a.jpg"
    src.write_text("data")
    out = tmp_path / "out"
    out.mkdir()

    def broken_copy(s, d):
        Path(d).write_text("da")
        raise OSError(28, "No space left on device")

    monkeypatch.setattr("exif_sorter.organization.mover.shutil.copy2", broken_copy)

    with pytest.raises(FileOperationError):
        FileMover().copy(src, out / "a.jpg")

    assert list(out.iterdir()) == []


def test_copy_cleans_up_when_interrupted(monkeypatch, tmp_path):
    src = tmp_path / "a.jpg"
    src.write_text("data")
    out = tmp_path / "out"
    out.mkdir()

    def interrupted(s, d):
        raise KeyboardInterrupt

    monkeypatch.setattr("exif_sorter.organization.mover.shutil.copy2", interrupted)

    with pytest.raises(KeyboardInterrupt):
        FileMover().copy(src, out / "a.jpg")

    assert list(out.iterdir()) == []


def test_dry_run_touches_nothing(tmp_path):
    src = tmp_path / "a.jpg"
    src.write_text("data")
    mover = FileMover(dry_run=True)

    assert mover.ensure_dir(tmp_path / "out") is False
    assert mover.copy(src, tmp_path / "out" / "a.jpg") is False
    assert not (tmp_path / "out").exists()
