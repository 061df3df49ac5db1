from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Tuple

from ..config import DEFAULT_FEATURED_TOOLS
from ..schemas.tools import ToolArchetype, ToolCategory

SEPARATOR = "-"
SEPARATOR_PATTERN = re.compile(r"[-_]+")


@dataclass(frozen=True)
class ToolMetadata:
    category: ToolCategory
    archetype: ToolArchetype
    description: str
    featured: bool = False


@dataclass(frozen=True)
class Rule:
    keywords: Tuple[str, ...]
    category: ToolCategory
    archetype: ToolArchetype
    template: str
    # keyword -> archetype used instead of ``archetype`` when the id contains it
    archetype_overrides: Mapping[str, ToolArchetype] = field(default_factory=dict)

    def matches(self, tool_id: str) -> bool:
        return any(keyword in tool_id for keyword in self.keywords)

    def archetype_for(self, tool_id: str) -> ToolArchetype:
        for keyword, archetype in self.archetype_overrides.items():
            if keyword in tool_id:
                return archetype
        return self.archetype


# Evaluated in order, first match wins. SEO comes before the checker rule so
# "domain-checker" and "seo-checker" stay SEO forms.
RULES: Tuple[Rule, ...] = (
    Rule(
        keywords=("story", "poem", "backstory"),
        category=ToolCategory.WRITING,
        archetype=ToolArchetype.TEXT,
        template="Generate creative {words} with AI",
    ),
    Rule(
        keywords=("writer", "generator", "improver", "humanize"),
        category=ToolCategory.AI,
        archetype=ToolArchetype.TEXT,
        template="AI-powered {words} for content creation",
    ),
    Rule(
        keywords=("domain", "meta", "seo"),
        category=ToolCategory.SEO,
        archetype=ToolArchetype.FORM,
        template="Optimize your website with {words}",
    ),
    Rule(
        keywords=("checker", "expander", "shortener"),
        category=ToolCategory.AI,
        archetype=ToolArchetype.TEXT,
        template="Advanced {words} tool",
    ),
    Rule(
        keywords=("hex", "rgb", "beautifier"),
        category=ToolCategory.DEV,
        archetype=ToolArchetype.FORM,
        template="Professional {words} for developers",
        archetype_overrides={"beautifier": ToolArchetype.TEXT},
    ),
)

FALLBACK_RULE = Rule(
    keywords=(),
    category=ToolCategory.GENERAL,
    archetype=ToolArchetype.TEXT,
    template="{words} tool",
)


def humanize(tool_id: str) -> str:
    return SEPARATOR_PATTERN.sub(" ", tool_id).strip()


def format_title(tool_id: str) -> str:
    """Turn ``ai-story-generator`` into ``Ai Story Generator``."""
    return " ".join(word[:1].upper() + word[1:] for word in tool_id.split(SEPARATOR) if word)


def split_tags(tool_id: str) -> List[str]:
    return [part for part in tool_id.split(SEPARATOR) if part]


def match_rule(tool_id: str, rules: Iterable[Rule] = RULES) -> Rule:
    needle = (tool_id or "").lower()
    for rule in rules:
        if rule.matches(needle):
            return rule
    return FALLBACK_RULE


def classify(tool_id: str, featured_ids: Optional[Iterable[str]] = None) -> ToolMetadata:
    """Infer category, archetype and description for an opaque tool id.

    Never fails: ids that match no rule (including the empty string) resolve
    to the General/text fallback. ``featured`` is an exact allow-list lookup.
    """
    tool_id = tool_id or ""
    rule = match_rule(tool_id)
    description = rule.template.format(words=humanize(tool_id)).strip()
    allow_list = DEFAULT_FEATURED_TOOLS if featured_ids is None else featured_ids
    featured = tool_id in set(allow_list)
    return ToolMetadata(
        category=rule.category,
        archetype=rule.archetype_for(tool_id.lower()),
        description=description,
        featured=featured,
    )
