import pytest
from jinja2 import UndefinedError

from queryiq.prompts.loader import PromptLoader, split_front_matter


def test_prompt_loader_strips_front_matter():
    loader = PromptLoader()
    content = loader.load("system/base.md")
    assert not content.startswith("---")
    assert "helpful database assistant" in content


def test_prompt_loader_reads_metadata():
    loader = PromptLoader()
    metadata = loader.get_metadata("system/sql.md")
    assert metadata["name"] == "system-sql"
    assert "max_rows_per_page" in metadata["variables"]


def test_prompt_loader_renders_template():
    loader = PromptLoader()
    rendered = loader.render("system/sql.md", max_rows_per_page=25)
    assert "max 25 rows" in rendered
    assert "{{" not in rendered


def test_prompt_loader_requires_variables():
    with pytest.raises(UndefinedError):
        PromptLoader().render("system/sql.md")


def test_prompt_loader_missing_prompt():
    loader = PromptLoader()
    with pytest.raises(FileNotFoundError):
        loader.load("system/nope.md")
    with pytest.raises(FileNotFoundError):
        loader.render("system/nope.md")


def test_prompt_loader_custom_directory(tmp_path):
    (tmp_path / "hello.md").write_text("---\nname: hello\n---\nHello {{ who }}!\n", encoding="utf-8")
    loader = PromptLoader(tmp_path)

    assert loader.render("hello.md", who="there") == "Hello there!"
    assert loader.get_metadata("hello.md") == {"name": "hello"}


def test_split_front_matter_without_header():
    assert split_front_matter("plain text") == ({}, "plain text")
