import os

import pytest

from bard.file_bard import contains_loop, format_entry, main, print_entry, walk_dir


def _write(path, content):
    path.write_text(content)
    return path


def test_format_entry_recent_file(tmp_path):
    target = _write(tmp_path / "a.txt", "hello")
    os.utime(target, (1_000_000, 1_000_000))
    assert format_entry(target, now=1_000_005) == (
        'Last modified: 5 seconds, is read only: false, size: 5 bytes, filename: "a.txt"'
    )


def test_format_entry_old_file_is_skipped(tmp_path):
    target = _write(tmp_path / "old.txt", "x")
    os.utime(target, (1_000_000, 1_000_000))
    assert format_entry(target, now=1_000_000 + 24 * 3600) is None


def test_format_entry_directory_is_skipped(tmp_path):
    sub = tmp_path / "sub"
    sub.mkdir()
    assert format_entry(sub, now=os.stat(sub).st_mtime + 1) is None


def test_format_entry_read_only(tmp_path):
    target = _write(tmp_path / "ro.txt", "data")
    os.chmod(target, 0o444)
    try:
        line = format_entry(target, now=os.stat(target).st_mtime + 1)
    finally:
        os.chmod(target, 0o644)
    assert "is read only: true" in line


def test_format_entry_future_time_raises(tmp_path):
    target = _write(tmp_path / "f.txt", "x")
    with pytest.raises(ValueError):
        format_entry(target, now=os.stat(target).st_mtime - 10)


def test_contains_loop_detects_symlink_to_parent(tmp_path):
    link = tmp_path / "loop"
    link.symlink_to(tmp_path, target_is_directory=True)
    assert contains_loop(link) == (tmp_path, link)


def test_contains_loop_plain_directory(tmp_path):
    sub = tmp_path / "sub"
    sub.mkdir()
    assert contains_loop(sub) is None


def test_walk_dir_visits_top_level_only(tmp_path):
    _write(tmp_path / "a.txt", "a")
    _write(tmp_path / "b.txt", "b")
    (tmp_path / "sub").mkdir()
    _write(tmp_path / "sub" / "c.txt", "c")
    seen = []
    walk_dir(tmp_path, lambda entry: seen.append(entry.name))
    assert sorted(seen) == ["a.txt", "b.txt", "sub"]


def test_walk_dir_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        walk_dir(tmp_path / "missing", lambda entry: None)


def test_print_entry_prints_recent_file(tmp_path, capsys):
    _write(tmp_path / "note.txt", "hi")
    with os.scandir(tmp_path) as entries:
        for entry in entries:
            print_entry(entry)
    out = capsys.readouterr().out
    assert out.strip().endswith('filename: "note.txt"')


def test_main_lists_recent_files_only(tmp_path, monkeypatch, capsys):
    _write(tmp_path / "fresh.txt", "new")
    stale = _write(tmp_path / "stale.txt", "old")
    os.utime(stale, (0, 0))
    monkeypatch.chdir(tmp_path)
    assert main([]) == 0
    out = capsys.readouterr().out
    assert '"fresh.txt"' in out
    assert "stale.txt" not in out