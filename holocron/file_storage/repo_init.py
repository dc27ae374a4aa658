"""
Set up a new TIL repository: the catalog, the archive folder, and the instruction
files `claude` reads for the `/til` and `/note` commands.
"""

from dataclasses import dataclass
from pathlib import Path

from holocron.config.logger import get_logger
from holocron.file_storage.entry_writer import catalog_path, write_text_file

log = get_logger(__name__)


COMMANDS_DIR = Path(".claude") / "commands"

TIL_SKILL = """\
# /til - Generate TIL Entry

Generate a "Today I Learned" markdown entry based on the current conversation.

## Format Requirements
- H1 title describing the action (e.g., "Update A Forked Repo", "Setup An MQTT Broker")
- Opening that explains the situation or problem ("If you want to...", "There are times when...")
- Step-by-step flow: prose explaining what to do, then a code block, then more prose
- One command per code block when walking through steps
- Concise but complete: 15-40 lines typically

## Style Guidelines
- Conversational, second-person tone ("you can", "let's", "we'll")
- Start with WHY or WHEN, not a definition
- Code blocks should be clean: put explanations in prose before or after, not as comments
- Avoid heavy H2 structure; use flowing prose with occasional H3 for distinct sections
- It's okay to end casually ("That's it!") or with a brief practical note
- Do NOT write like documentation or a cheat sheet

## Output Format
Return ONLY the markdown content. No preamble.
"""

NOTE_SKILL = """\
# /note - Generate Knowledge Base Note

Generate a comprehensive knowledge base note based on the current conversation.
This is for personal knowledge management systems like Obsidian or Logseq.

## Format Requirements

### Frontmatter (YAML)
```yaml
---
title: [Descriptive title]
date: [YYYY-MM-DD]
tags: [relevant, tags, as, list]
aliases: [alternative, names]
---
```

### Content Structure
1. **Title** (H1): clear, descriptive title
2. **Overview**: 2-3 paragraph introduction explaining the concept
3. **Key Concepts**: detailed breakdown of important ideas
4. **Examples**: code examples with explanations
5. **Common Patterns**: typical use cases and patterns
6. **Gotchas & Tips**: things to watch out for
7. **Session Q&A** (optional): key questions and answers from our conversation
8. **Related Topics**: links to related concepts using `[[wiki-link]]` format
9. **Sources** (if from URL analysis): original sources consulted

## Output Format
Return ONLY the markdown content for the note file, starting with the YAML frontmatter.
Do not include any preamble or explanation.
"""

README_TEMPLATE = """\
# Today I Learned

A collection of concise write-ups on things I learn day to day.

0 TILs & Counting

---

### Categories

---
"""


@dataclass(frozen=True)
class InitResult:
    path: Path
    readme_existed: bool
    archive_existed: bool


def init_til_repo(path: Path, archive_dir: str = "archive") -> InitResult:
    """
    Create the repository layout. An existing catalog is left alone; the command
    files are always rewritten with the current versions.
    """
    path = Path(path).expanduser()
    readme = catalog_path(path)
    archive_path = path / archive_dir

    result = InitResult(
        path=path, readme_existed=readme.exists(), archive_existed=archive_path.exists()
    )

    path.mkdir(parents=True, exist_ok=True)
    archive_path.mkdir(parents=True, exist_ok=True)
    commands_path = path / COMMANDS_DIR
    commands_path.mkdir(parents=True, exist_ok=True)

    if not result.readme_existed:
        write_text_file(readme, README_TEMPLATE)
    else:
        log.info("Catalog already exists, leaving it as is: %s", readme)

    write_text_file(commands_path / "til.md", TIL_SKILL)
    write_text_file(commands_path / "note.md", NOTE_SKILL)

    log.info("Initialized TIL repository: %s", path)
    return result


## Tests


def test_init_til_repo(tmp_path):
    til_path = tmp_path / "my-til"

    result = init_til_repo(til_path)

    assert not result.readme_existed
    assert not result.archive_existed
    assert (til_path / "README.md").read_text() == README_TEMPLATE
    assert (til_path / "archive").is_dir()
    assert (til_path / ".claude/commands/til.md").exists()
    assert (til_path / ".claude/commands/note.md").exists()


def test_init_keeps_existing_catalog(tmp_path):
    (tmp_path / "README.md").write_text("# My TILs\n\n3 TILs & Counting\n")

    result = init_til_repo(tmp_path, "entries")

    assert result.readme_existed
    assert (tmp_path / "README.md").read_text() == "# My TILs\n\n3 TILs & Counting\n"
    assert (tmp_path / "entries").is_dir()


def test_init_then_write_entry(tmp_path):
    from holocron.file_storage.entry_writer import write_entry

    init_til_repo(tmp_path)
    write_entry(tmp_path, "archive", "git", "rebase.md", "# Rebase", "Rebase")

    readme = (tmp_path / "README.md").read_text()
    assert "1 TILs & Counting" in readme
    assert "* [Git](#git)" in readme
    assert "- [Rebase](archive/git/rebase.md)" in readme
