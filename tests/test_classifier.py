import pytest

from webtools.schemas.tools import ToolArchetype, ToolCategory
from webtools.services.classifier import FALLBACK_RULE, RULES, classify, format_title, split_tags


@pytest.mark.parametrize(
    "tool_id, category, archetype",
    [
        ("ai-story-generator", ToolCategory.WRITING, ToolArchetype.TEXT),
        ("poem-writer", ToolCategory.WRITING, ToolArchetype.TEXT),
        ("character-backstory", ToolCategory.WRITING, ToolArchetype.TEXT),
        ("blog-writer", ToolCategory.AI, ToolArchetype.TEXT),
        ("text-humanizer", ToolCategory.AI, ToolArchetype.TEXT),
        ("grammar-checker", ToolCategory.AI, ToolArchetype.TEXT),
        ("url-shortener", ToolCategory.AI, ToolArchetype.TEXT),
        ("hex-to-rgb", ToolCategory.DEV, ToolArchetype.FORM),
        ("code-beautifier", ToolCategory.DEV, ToolArchetype.TEXT),
        ("domain-checker", ToolCategory.SEO, ToolArchetype.FORM),
        ("seo-audit", ToolCategory.SEO, ToolArchetype.FORM),
        ("completely-unknown-xyz", ToolCategory.GENERAL, ToolArchetype.TEXT),
    ],
)
def test_classify_rules(tool_id, category, archetype):
    metadata = classify(tool_id)
    assert metadata.category == category
    assert metadata.archetype == archetype


def test_story_generator_is_featured_writing_tool():
    metadata = classify("ai-story-generator")
    assert metadata.category == ToolCategory.WRITING
    assert metadata.archetype == ToolArchetype.TEXT
    assert metadata.featured is True


def test_rule_priority_beats_later_keywords():
    # "generator" (AI) and "meta" (SEO) both match; the AI rule comes first.
    assert classify("meta-tag-generator").category == ToolCategory.AI
    # "story" wins over "checker".
    assert classify("story-checker").category == ToolCategory.WRITING
    # SEO keywords are tried before "checker".
    assert classify("domain-checker").category == ToolCategory.SEO
    assert classify("seo-checker").archetype == ToolArchetype.FORM
    # "checker" is tried before the dev keywords.
    assert classify("hex-checker").category == ToolCategory.AI


@pytest.mark.parametrize("tool_id", ["", "-", "___", "UPPER-CASE", "ünïcödé", "a" * 500, "123"])
def test_classify_is_total(tool_id):
    metadata = classify(tool_id)
    assert metadata.category in set(ToolCategory)
    assert metadata.archetype in set(ToolArchetype)
    assert isinstance(metadata.description, str)


def test_empty_id_falls_back():
    metadata = classify("")
    assert metadata.category == ToolCategory.GENERAL
    assert metadata.archetype == ToolArchetype.TEXT
    assert metadata.featured is False


def test_matching_ignores_case():
    assert classify("Domain-Checker").category == ToolCategory.SEO


def test_description_templates():
    assert classify("story-generator").description == "Generate creative story generator with AI"
    assert classify("blog_writer").description == "AI-powered blog writer for content creation"
    assert classify("hex-to-rgb").description == "Professional hex to rgb for developers"
    assert classify("domain-checker").description == "Optimize your website with domain checker"
    assert classify("unknown-thing").description == "unknown thing tool"


def test_featured_is_exact_match_only():
    assert classify("story-generator").featured is True
    assert classify("story-generator-v2").featured is False
    assert classify("code-beautifier", featured_ids=[]).featured is False
    assert classify("my-tool", featured_ids=["my-tool"]).featured is True


def test_rule_table_shape():
    assert len(RULES) == 5
    assert FALLBACK_RULE.category == ToolCategory.GENERAL
    assert all(rule.keywords for rule in RULES)


def test_format_title():
    assert format_title("ai-story-generator") == "Ai Story Generator"
    assert format_title("hex-to-rgb") == "Hex To Rgb"
    assert format_title("single") == "Single"
    assert format_title("") == ""
    assert format_title("double--dash") == "Double Dash"


def test_split_tags():
    assert split_tags("ai-story-generator") == ["ai", "story", "generator"]
    assert split_tags("single") == ["single"]
    assert split_tags("") == []
