"""
Persist generated TIL entries and notes.

A TIL entry is written to `<repo>/<archive_dir>/<category>/<filename>` and registered
in the catalog (`<repo>/README.md`). A note is written directly under the notes
directory and isn't registered anywhere.

The two files of a TIL write are each written atomically, but not as a unit: if the
catalog update fails, the entry file stays in place.
"""

from pathlib import Path

from strif import atomic_output_file

from holocron.catalog.catalog_sync import apply_entry_to_text, normalize_category
from holocron.config.logger import get_logger
from holocron.config.text_styles import EMOJI_SAVED
from holocron.errors import FileNotFound
from holocron.file_storage.filenames import ensure_trailing_newline, sanitize_filename

log = get_logger(__name__)


CATALOG_FILENAME = "README.md"


def catalog_path(repo_root: Path) -> Path:
    return Path(repo_root) / CATALOG_FILENAME


def write_text_file(path: Path, content: str) -> None:
    with atomic_output_file(path, make_parents=True) as tmp_path:
        Path(tmp_path).write_text(content, encoding="utf-8")
    log.info("%s Wrote: %s", EMOJI_SAVED, path)


def update_catalog(repo_root: Path, archive_dir: str, category: str, filename: str, title: str):
    """
    Add an entry to the catalog. The catalog must already exist.
    """
    path = catalog_path(repo_root)
    if not path.is_file():
        raise FileNotFound(f"Catalog not found: {path}")

    text = path.read_text(encoding="utf-8")
    updated = apply_entry_to_text(text, archive_dir, category, filename, title)
    write_text_file(path, updated)


def write_entry(
    repo_root: Path,
    archive_dir: str,
    category: str,
    filename: str,
    content: str,
    title: str,
) -> Path:
    """
    Write a TIL entry into its category folder and update the catalog. Returns the
    path of the entry file. An existing entry with the same filename is overwritten.
    """
    category = normalize_category(category)
    filename = sanitize_filename(filename)

    category_dir = Path(repo_root) / archive_dir / category
    category_dir.mkdir(parents=True, exist_ok=True)

    file_path = category_dir / filename
    if file_path.exists():
        log.warning("Overwriting existing entry: %s", file_path)
    write_text_file(file_path, ensure_trailing_newline(content))

    update_catalog(Path(repo_root), archive_dir, category, filename, title)

    return file_path


def write_note(notes_path: Path, filename: str, content: str) -> Path:
    """
    Write a long-form note directly under the notes directory, creating it if needed.
    """
    notes_path = Path(notes_path)
    notes_path.mkdir(parents=True, exist_ok=True)

    file_path = notes_path / sanitize_filename(filename)
    if file_path.exists():
        log.warning("Overwriting existing note: %s", file_path)
    write_text_file(file_path, ensure_trailing_newline(content))

    return file_path


## Tests

_test_readme = """# TIL
5 TILs & Counting
### Categories
* [Git](#git)
---
### Git
- [Existing Entry](archive/git/existing.md)
"""


def test_write_entry(tmp_path):
    (tmp_path / "README.md").write_text(_test_readme)

    path = write_entry(
        tmp_path, "archive", "git", "new_entry.md", "# New Entry\n\nContent here.", "New Entry"
    )

    assert path == tmp_path / "archive" / "git" / "new_entry.md"
    assert path.read_text() == "# New Entry\n\nContent here.\n"
    readme = (tmp_path / "README.md").read_text()
    assert "6 TILs & Counting" in readme
    assert "- [New Entry](archive/git/new_entry.md)" in readme
    assert "- [Existing Entry](archive/git/existing.md)" in readme
    assert readme.endswith("\n")


def test_write_entry_new_category(tmp_path):
    (tmp_path / "README.md").write_text(_test_readme)

    path = write_entry(
        tmp_path, "archive", "Rust", "Ownership", "# Ownership\n\nRust ownership.\n", "Ownership"
    )

    assert path == tmp_path / "archive" / "rust" / "ownership.md"
    assert path.read_text() == "# Ownership\n\nRust ownership.\n"
    readme = (tmp_path / "README.md").read_text()
    assert readme.count("### Rust") == 1
    assert readme.count("* [Rust](#rust)") == 1
    assert "- [Ownership](archive/rust/ownership.md)" in readme


def test_write_entry_requires_catalog(tmp_path):
    import pytest

    with pytest.raises(FileNotFound) as exc_info:
        write_entry(tmp_path, "archive", "git", "a.md", "# A", "A")
    assert "README.md" in str(exc_info.value)

    # The entry itself was written before the catalog failure.
    assert (tmp_path / "archive" / "git" / "a.md").exists()


def test_write_entry_invalid_category_writes_nothing(tmp_path):
    import pytest

    from holocron.errors import InvalidInput

    (tmp_path / "README.md").write_text(_test_readme)

    for category in ["Categories", "  "]:
        with pytest.raises(InvalidInput):
            write_entry(tmp_path, "archive", category, "a.md", "# A", "A")

    assert not (tmp_path / "archive").exists()
    assert (tmp_path / "README.md").read_text() == _test_readme


def test_write_note(tmp_path):
    content = "# Test Note\n\nContent here."
    path = write_note(tmp_path, "test_note.md", content)
    assert path.read_text() == content + "\n"

    notes_path = tmp_path / "new_notes_dir"
    path = write_note(notes_path, "My Note", "# Note")
    assert path == notes_path / "my_note.md"
    assert notes_path.is_dir()
