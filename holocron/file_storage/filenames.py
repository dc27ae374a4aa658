"""
Filename and title conventions for TIL entries and notes.
"""

from typing import Optional

from slugify import slugify

MD_EXT = "md"

FILENAME_SEP = "_"

FRONTMATTER_DELIM = "---"

UNTITLED_STEM = "untitled"


## File Naming Conventions


def title_to_filename(title: str) -> str:
    """
    Deterministic filename for a title: lowercase, every run of non-alphanumeric
    characters becomes a single `_`, no leading or trailing `_`.

    "Git: The Basics" -> "git_the_basics.md"

    Titles with no letters or digits map to `untitled.md`.
    """
    # slugify drops commas between digits ("1,000" -> "1000"), so separate them first.
    slug = slugify(title.replace(",", FILENAME_SEP), separator=FILENAME_SEP, lowercase=True)
    slug = slug or UNTITLED_STEM
    return f"{slug}.{MD_EXT}"


def sanitize_filename(filename: str) -> str:
    """
    Normalize a user- or caller-supplied filename: add the `.md` extension if it's
    missing, replace spaces, and lowercase.
    """
    name = filename
    if not name.lower().endswith(f".{MD_EXT}"):
        name = f"{name}.{MD_EXT}"
    return name.replace(" ", FILENAME_SEP).lower()


def ensure_trailing_newline(content: str) -> str:
    return content if content.endswith("\n") else content + "\n"


## Titles


def _strip_quotes(value: str) -> str:
    return value.strip('"').strip("'")


def _frontmatter_lines(content: str) -> list[str]:
    lines = content.splitlines()
    if not lines or not lines[0].startswith(FRONTMATTER_DELIM):
        return []
    block = []
    for line in lines[1:]:
        if line.strip() == FRONTMATTER_DELIM:
            break
        block.append(line)
    return block


def extract_title(content: str) -> Optional[str]:
    """
    Title of generated markdown: the frontmatter `title:` field if present and
    non-empty, otherwise the first top-level `# ` heading, otherwise None.
    """
    if content.startswith(FRONTMATTER_DELIM):
        for line in _frontmatter_lines(content):
            line = line.strip()
            if line.startswith("title:"):
                title = _strip_quotes(line[len("title:") :].strip())
                if title:
                    return title

    for line in content.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("# "):
            return trimmed[2:].strip()

    return None


## Tests


def test_title_to_filename():
    assert title_to_filename("Git Rebasing") == "git_rebasing.md"
    assert title_to_filename("How to Use --onto") == "how_to_use_onto.md"
    assert title_to_filename("Git: The Basics") == "git_the_basics.md"
    assert title_to_filename("What's New?") == "what_s_new.md"
    assert title_to_filename("Test & More") == "test_more.md"
    assert title_to_filename("  __Leading and trailing__  ") == "leading_and_trailing.md"
    assert title_to_filename("1,000 Ways to Sort") == "1_000_ways_to_sort.md"
    assert title_to_filename("Apples, Pears") == "apples_pears.md"
    assert title_to_filename("???") == "untitled.md"
    assert title_to_filename("") == "untitled.md"


def test_title_to_filename_charset():
    import re

    titles = [
        "Rust Clippy",
        "C++ Templates (Part 2)",
        "Ünïcödé Héadings",
        "tabs\tand\nnewlines",
        "---",
        "x" * 3,
    ]
    for title in titles:
        filename = title_to_filename(title)
        stem = filename[: -len(".md")]
        assert filename.endswith(".md")
        assert re.fullmatch(r"[a-z0-9_]*", stem), filename
        assert not stem.startswith("_") and not stem.endswith("_")
        assert "__" not in stem


def test_sanitize_filename():
    assert sanitize_filename("test") == "test.md"
    assert sanitize_filename("test.md") == "test.md"
    assert sanitize_filename("Test File") == "test_file.md"
    assert sanitize_filename("UPPER.md") == "upper.md"
    assert sanitize_filename("UPPER.MD") == "upper.md"


def test_ensure_trailing_newline():
    assert ensure_trailing_newline("abc") == "abc\n"
    assert ensure_trailing_newline("abc\n") == "abc\n"
    assert ensure_trailing_newline("") == "\n"


def test_extract_title():
    from textwrap import dedent

    assert extract_title("# My Title\n\nSome content here.") == "My Title"
    assert extract_title("  # Trimmed Title  \n\nMore content.") == "Trimmed Title"
    assert extract_title("No heading here") is None
    assert extract_title("## Only a subheading\n") is None

    frontmatter = dedent(
        """
        ---
        title: My Note Title
        date: 2024-01-01
        tags: [test]
        ---

        # Content Here
        """
    ).lstrip()
    assert extract_title(frontmatter) == "My Note Title"

    assert extract_title('---\ntitle: "Quoted Title"\n---\n') == "Quoted Title"
    assert extract_title("---\ntitle: 'Single Quoted'\n---\n") == "Single Quoted"
    assert extract_title("---\ntitle:\n---\n# Fallback Title\n") == "Fallback Title"
    assert extract_title("---\ndate: 2024-01-01\n---\nbody\n") is None
