"""
Keep the TIL catalog (the repository's README.md) in sync as entries are added.

The catalog is hand-maintained markdown with a loose but known shape:

```
# Today I Learned

A collection of concise write-ups on things I learn day to day.

12 TILs & Counting

---

### Categories

* [Git](#git)
* [Rust](#rust)

---

### Git

- [Update A Forked Repo](archive/git/update_a_forked_repo.md)

### Rust

- [Ownership](archive/rust/ownership.md)
```

Regions are found by pattern, not position, and edits are minimal: the counter line
is rewritten in place and new lines are inserted. No existing line is ever removed
or reordered, so anything else a person has put in the file survives untouched.
"""

import re
from typing import List, Optional

from holocron.config.logger import get_logger
from holocron.errors import InvalidInput

log = get_logger(__name__)


COUNTER_SUFFIX = "TILs & Counting"

CATEGORIES_HEADER = "### Categories"

SECTION_PREFIX = "### "

ENTRY_PREFIX = "- ["

_header_re = re.compile(r"^#{1,6}(\s|$)")

_hrule_re = re.compile(r"^---")


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def category_display_name(category: str) -> str:
    return capitalize_first(category)


def entry_line(archive_dir: str, category: str, filename: str, title: str) -> str:
    return f"- [{title}]({archive_dir}/{category}/{filename})"


def category_list_line(category: str) -> str:
    return f"* [{category_display_name(category)}](#{category.lower()})"


def _is_boundary(line: str) -> bool:
    return bool(_header_re.match(line) or _hrule_re.match(line))


def _counter_re(suffix: str) -> re.Pattern:
    return re.compile(rf"^(\s*)(\d+)(\s+{re.escape(suffix)}.*)$")


## Counter


def update_counter(lines: List[str], suffix: str = COUNTER_SUFFIX) -> Optional[int]:
    """
    Increment the first counter line ("25 TILs & Counting") in place. Returns the
    new count, or None if there is no counter line.
    """
    pattern = _counter_re(suffix)
    for i, line in enumerate(lines):
        match = pattern.match(line)
        if match:
            count = int(match.group(2)) + 1
            lines[i] = f"{match.group(1)}{count}{match.group(3)}"
            return count
    return None


## Category sections


def find_category_index(lines: List[str], category: str) -> Optional[int]:
    """
    Index of the `### Category` header for this category, matched case-insensitively.
    """
    targets = {
        f"{SECTION_PREFIX}{category_display_name(category)}".lower(),
        f"{SECTION_PREFIX}{category}".lower(),
    }
    for i, line in enumerate(lines):
        if line.strip().lower() in targets:
            return i
    return None


def find_insertion_point(lines: List[str], header_idx: int) -> int:
    """
    Where a new entry goes in the section starting at `header_idx`: after the
    existing entries, but ahead of the blank line that separates the section from
    whatever follows.
    """
    insert_idx = header_idx + 1
    while insert_idx < len(lines):
        line = lines[insert_idx]
        if _is_boundary(line):
            break
        if line.startswith(ENTRY_PREFIX) or not line.strip():
            insert_idx += 1
        else:
            break

    if not lines[insert_idx - 1].strip():
        return insert_idx - 1
    return insert_idx


## Categories list


def find_categories_header(lines: List[str]) -> Optional[int]:
    for i, line in enumerate(lines):
        if line.strip().lower() == CATEGORIES_HEADER.lower():
            return i
    return None


def find_categories_end(lines: List[str], header_idx: int) -> int:
    """
    Index of the line that ends the categories list (the next header or rule),
    or the logical end of the document if nothing follows.
    """
    for i in range(header_idx + 1, len(lines)):
        if _is_boundary(lines[i]):
            return i
    return find_end_position(lines)


def has_category_link(lines: List[str], header_idx: int, end_idx: int, category: str) -> bool:
    anchor = f"(#{category.lower()})"
    return any(anchor in line.lower() for line in lines[header_idx + 1 : end_idx])


def find_end_position(lines: List[str]) -> int:
    insert_pos = len(lines)
    while insert_pos > 0 and not lines[insert_pos - 1].strip():
        insert_pos -= 1
    return insert_pos


def add_new_category(
    lines: List[str], archive_dir: str, category: str, filename: str, title: str
) -> None:
    """
    Register a category that has no section yet: list it under Categories (if that
    list exists) and append its section, with the entry, at the end of the document.
    """
    header_idx = find_categories_header(lines)
    if header_idx is None:
        log.info("No categories list in catalog, not listing category: %s", category)
    else:
        end_idx = find_categories_end(lines, header_idx)
        if has_category_link(lines, header_idx, end_idx, category):
            log.info("Category already listed: %s", category)
        else:
            # Ahead of any blank lines closing the list, so the list stays contiguous.
            insert_idx = end_idx
            while insert_idx - 1 > header_idx and not lines[insert_idx - 1].strip():
                insert_idx -= 1
            lines.insert(insert_idx, category_list_line(category))

    insert_pos = find_end_position(lines)
    new_section = [
        "",
        f"{SECTION_PREFIX}{category_display_name(category)}",
        "",
        entry_line(archive_dir, category, filename, title),
    ]
    # Keep a single trailing blank line after the last section.
    if insert_pos == len(lines):
        new_section.append("")
    lines[insert_pos:insert_pos] = new_section
    log.info("Created catalog section for category: %s", category)


## Catalog updates


def normalize_category(category: str) -> str:
    """
    Lowercased, stripped category key. Raises `InvalidInput` if it's empty or would
    collide with the Categories header.
    """
    category = category.strip().lower()
    if not category:
        raise InvalidInput("Category is required to add a catalog entry")
    if f"{SECTION_PREFIX}{category}" == CATEGORIES_HEADER.lower():
        raise InvalidInput(f"Category name is reserved: {category!r}")
    return category


def split_lines(text: str) -> List[str]:
    """
    Split on newlines only, dropping one trailing carriage return per line. Other
    Unicode line boundaries such as form feeds stay inside their line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def apply_entry(
    lines: List[str], archive_dir: str, category: str, filename: str, title: str
) -> List[str]:
    """
    Return the catalog lines updated for one new entry: the counter bumped and a link
    to `archive_dir/category/filename` added to the category's section, creating the
    section (and its Categories list item) if needed.
    """
    category = normalize_category(category)

    lines = list(lines)

    count = update_counter(lines)
    if count is None:
        log.info("No counter line found in catalog, leaving counts as is")
    else:
        log.info("Catalog count is now %s", count)

    header_idx = find_category_index(lines, category)
    if header_idx is not None:
        insert_idx = find_insertion_point(lines, header_idx)
        lines.insert(insert_idx, entry_line(archive_dir, category, filename, title))
    else:
        add_new_category(lines, archive_dir, category, filename, title)

    return lines


def apply_entry_to_text(
    text: str, archive_dir: str, category: str, filename: str, title: str
) -> str:
    """
    Same as `apply_entry` but on the full document text. The result always ends
    with a newline.
    """
    lines = apply_entry(split_lines(text), archive_dir, category, filename, title)
    return "\n".join(lines) + "\n"


## Tests

_test_doc = (
    "5 TILs & Counting\n"
    "### Categories\n"
    "* [Git](#git)\n"
    "---\n"
    "### Git\n"
    "- [Existing](archive/git/existing.md)\n"
)

_test_readme = """# Today I Learned

A collection of concise write-ups on things I learn day to day.

2 TILs & Counting

---

### Categories

* [Git](#git)
* [Python](#python)

---

### Git

- [Update A Forked Repo](archive/git/update_a_forked_repo.md)

### Python

- [Walrus Operator](archive/python/walrus_operator.md)

Some closing prose that someone added by hand.
<!-- a comment -->
"""


def _is_subsequence(original: List[str], updated: List[str]) -> bool:
    it = iter(updated)
    return all(any(line == candidate for candidate in it) for line in original)


def test_update_counter():
    lines = ["# TIL", "25 TILs & Counting", "other", "3 TILs & Counting"]
    assert update_counter(lines) == 26
    assert lines == ["# TIL", "26 TILs & Counting", "other", "3 TILs & Counting"]

    lines = ["TILs & Counting", "many TILs & Counting"]
    assert update_counter(lines) is None
    assert lines == ["TILs & Counting", "many TILs & Counting"]

    lines = ["  9 TILs & Counting!"]
    assert update_counter(lines) == 10
    assert lines == ["  10 TILs & Counting!"]


def test_find_categories_end():
    lines = ["### Categories", "* [Git](#git)", "---"]
    assert find_categories_end(lines, 0) == 2

    lines = ["### Categories", "* [Git](#git)", "### Git", "- [A](a.md)"]
    assert find_categories_end(lines, 0) == 2

    lines = ["### Categories", "* [Git](#git)", "", ""]
    assert find_categories_end(lines, 0) == 2


def test_capitalize_first():
    assert capitalize_first("git") == "Git"
    assert capitalize_first("rust") == "Rust"
    assert capitalize_first("") == ""


def test_scenario_existing_category():
    result = apply_entry_to_text(_test_doc, "archive", "git", "new.md", "New")
    assert result == (
        "6 TILs & Counting\n"
        "### Categories\n"
        "* [Git](#git)\n"
        "---\n"
        "### Git\n"
        "- [Existing](archive/git/existing.md)\n"
        "- [New](archive/git/new.md)\n"
    )


def test_existing_category_keeps_blank_separator():
    updated = apply_entry(_test_readme.splitlines(), "archive", "GIT", "rebase.md", "Rebase")

    i = updated.index("### Git")
    assert updated[i : i + 6] == [
        "### Git",
        "",
        "- [Update A Forked Repo](archive/git/update_a_forked_repo.md)",
        "- [Rebase](archive/git/rebase.md)",
        "",
        "### Python",
    ]
    assert "3 TILs & Counting" in updated
    assert len(updated) == len(_test_readme.splitlines()) + 1


def test_new_category():
    original = _test_readme.splitlines()
    updated = apply_entry(original, "archive", "rust", "ownership.md", "Ownership")

    assert updated.count("* [Rust](#rust)") == 1
    assert updated.count("### Rust") == 1
    assert updated.count("- [Ownership](archive/rust/ownership.md)") == 1

    # List item goes at the end of the categories list.
    j = updated.index("* [Rust](#rust)")
    assert updated[j - 1] == "* [Python](#python)"
    assert updated[j + 1] == ""

    # Section goes after all existing content.
    assert updated[-5:] == ["", "### Rust", "", "- [Ownership](archive/rust/ownership.md)", ""]
    assert updated.index("<!-- a comment -->") < updated.index("### Rust")

    # Everything else is preserved, in order, with only the counter line rewritten.
    unchanged = [line for line in original if line != "2 TILs & Counting"]
    assert _is_subsequence(unchanged, updated)
    assert "3 TILs & Counting" in updated


def test_same_category_twice():
    text = apply_entry_to_text(_test_readme, "archive", "sql", "joins.md", "Joins")
    text = apply_entry_to_text(text, "archive", "SQL", "window_functions.md", "Window Functions")
    lines = text.splitlines()

    assert lines.count("### Sql") == 1
    assert lines.count("* [Sql](#sql)") == 1
    assert sum(1 for line in lines if line.startswith("* [")) == 3
    i = lines.index("### Sql")
    assert lines[i + 1 : i + 4] == [
        "",
        "- [Joins](archive/sql/joins.md)",
        "- [Window Functions](archive/sql/window_functions.md)",
    ]
    assert "4 TILs & Counting" in lines
    # No blank lines pile up at the end.
    assert text.endswith("window_functions.md)\n\n")


def test_same_entry_twice_is_not_deduplicated():
    text = apply_entry_to_text(_test_doc, "archive", "git", "new.md", "New")
    text = apply_entry_to_text(text, "archive", "git", "new.md", "New")
    assert text.count("- [New](archive/git/new.md)") == 2
    assert text.count("### Git") == 1
    assert text.startswith("7 TILs & Counting\n")


def test_minimal_documents():
    # No counter and no categories list: just add the section.
    updated = apply_entry(["# Notes", "Some prose."], "archive", "git", "a.md", "A")
    assert updated == ["# Notes", "Some prose.", "", "### Git", "", "- [A](archive/git/a.md)", ""]

    # Empty document.
    assert apply_entry([], "archive", "git", "a.md", "A") == [
        "",
        "### Git",
        "",
        "- [A](archive/git/a.md)",
        "",
    ]

    # Categories list already mentions the category but the section is missing.
    lines = ["### Categories", "* [Git](#git)", "---"]
    updated = apply_entry(lines, "archive", "git", "a.md", "A")
    assert updated.count("* [Git](#git)") == 1
    assert "### Git" in updated


def test_initial_template():
    template = (
        "# Today I Learned\n\n"
        "A collection of concise write-ups on things I learn day to day.\n\n"
        "0 TILs & Counting\n\n---\n\n### Categories\n\n---\n"
    )
    result = apply_entry_to_text(template, "archive", "git", "rebase.md", "Rebase")
    assert result == (
        "# Today I Learned\n\n"
        "A collection of concise write-ups on things I learn day to day.\n\n"
        "1 TILs & Counting\n\n---\n\n### Categories\n* [Git](#git)\n\n---\n\n"
        "### Git\n\n- [Rebase](archive/git/rebase.md)\n\n"
    )


def test_invalid_category():
    import pytest

    with pytest.raises(InvalidInput):
        apply_entry(_test_doc.splitlines(), "archive", "  ", "a.md", "A")
    with pytest.raises(InvalidInput):
        apply_entry(_test_doc.splitlines(), "archive", "Categories", "a.md", "A")


def test_split_lines():
    assert split_lines("") == []
    assert split_lines("a\nb\n") == ["a", "b"]
    assert split_lines("a\nb") == ["a", "b"]
    assert split_lines("a\r\nb\r\n\n") == ["a", "b", ""]
    assert split_lines("form\x0cfeed sep\n") == ["form\x0cfeed sep"]


def test_unicode_line_boundaries_preserved():
    prose = "Prose with a line separator and\x0cform feed.\x85"
    result = apply_entry_to_text(_test_doc + prose + "\n", "archive", "git", "b.md", "B")
    assert prose in result.split("\n")
    assert result.startswith("6 TILs & Counting\n")
    assert "- [B](archive/git/b.md)" in result


def test_normalize_category():
    import pytest

    assert normalize_category("  Rust ") == "rust"
    with pytest.raises(InvalidInput):
        normalize_category("")
    with pytest.raises(InvalidInput):
        normalize_category("CATEGORIES")
