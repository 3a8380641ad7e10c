"""Prompt Templates - deterministic prompt assembly and generated-prompt vetting.

Invariants:
    - assemble_prompt / assemble_prompt_from_entries are pure and deterministic
    - Every selected word appears in a templated prompt; words not placed by the
      sentence template are appended as a ", featuring ..." tail
    - is_valid_prompt rejects empty, oversized, or meta-phrased model output

Design Decisions:
    - Templates are tried in declaration order; the first whose slot needs are met wins
    - Categories outside the known buckets are treated as extras
"""

import re
from dataclasses import dataclass
from typing import Callable, Sequence

from slopguess.core.domain_types import WordEntry

EMPTY_PROMPT = "a mysterious scene"

ADJECTIVE_CATEGORIES = frozenset({"adjectives", "emotions"})
NOUN_CATEGORIES = frozenset({
    "animals", "mythical creatures", "objects", "vehicles",
    "professions", "foods", "musical instruments", "nature",
})

PERSONAS = (
    "You are a photographer describing a striking everyday scene.",
    "You are a film director pitching a striking single scene.",
    "You are a photojournalist captioning an award-winning photograph.",
    "You are a children's book illustrator dreaming up a whimsical page.",
    "You are a travel blogger describing a memorable moment from a trip.",
    "You are a nature documentary narrator describing a never-before-seen moment.",
    "You are a street artist planning an eye-catching mural.",
    "You are an animator storyboarding a key frame for a short film.",
)

_META_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"\bhere is\b",
    r"\bhere's\b",
    r"\bsure\b",
    r"\bof course\b",
    r"\bi would\b",
    r"\bprompt:",
    r"\bdescription:",
    r"\btitle:",
))
_WRAPPING_QUOTES = re.compile(r"^[\"']|[\"']$")


@dataclass(frozen=True)
class Buckets:
    adjectives: list[str]
    nouns: list[str]
    actions: list[str]
    settings: list[str]
    styles: list[str]
    extras: list[str]


@dataclass(frozen=True)
class PromptTemplate:
    needs: dict[str, int]
    build: Callable[[Buckets], str]

    def fits(self, buckets: Buckets) -> bool:
        return all(len(getattr(buckets, slot)) >= n for slot, n in self.needs.items())


TEMPLATES = (
    PromptTemplate(
        {"adjectives": 1, "nouns": 1, "actions": 1, "settings": 1},
        lambda b: f"a {b.adjectives[0]} {b.nouns[0]} {b.actions[0]} in {b.settings[0]}",
    ),
    PromptTemplate(
        {"adjectives": 1, "nouns": 2, "actions": 1},
        lambda b: f"a {b.adjectives[0]} {b.nouns[0]} and a {b.nouns[1]} {b.actions[0]} together",
    ),
    PromptTemplate(
        {"nouns": 1, "actions": 1, "settings": 1, "extras": 1},
        lambda b: f"a {b.extras[0]} {b.nouns[0]} {b.actions[0]} in {b.settings[0]}",
    ),
    PromptTemplate(
        {"adjectives": 1, "nouns": 1, "settings": 1, "styles": 1},
        lambda b: f"a {b.adjectives[0]} {b.nouns[0]} in {b.settings[0]}, {b.styles[0]} style",
    ),
    PromptTemplate(
        {"nouns": 1, "actions": 1, "extras": 2},
        lambda b: f"a {b.extras[0]} {b.nouns[0]} made of {b.extras[1]} {b.actions[0]}",
    ),
    PromptTemplate(
        {"adjectives": 1, "nouns": 2, "settings": 1},
        lambda b: f"a {b.adjectives[0]} {b.nouns[0]} riding a {b.nouns[1]} through {b.settings[0]}",
    ),
    PromptTemplate(
        {"nouns": 1, "actions": 1, "extras": 1, "settings": 1},
        lambda b: f"a {b.nouns[0]} with {b.extras[0]} {b.actions[0]} on {b.settings[0]}",
    ),
    PromptTemplate(
        {"adjectives": 2, "nouns": 1, "actions": 1},
        lambda b: f"a {b.adjectives[0]} and {b.adjectives[1]} {b.nouns[0]} {b.actions[0]}",
    ),
)


def _join_naturally(words: Sequence[str]) -> str:
    if len(words) == 1:
        return words[0]
    return f"{', '.join(words[:-1])} and {words[-1]}"


def _with_leftovers(prompt: str, leftovers: Sequence[str]) -> str:
    if not leftovers:
        return prompt
    return f"{prompt}, featuring {_join_naturally(leftovers)}"


def assemble_prompt(words: Sequence[str]) -> str:
    """Plain concatenation of a word list into a short scene phrase."""
    words = list(words)
    if not words:
        return EMPTY_PROMPT
    if len(words) == 1:
        return f"a {words[0]}"
    if len(words) == 2:
        return f"a {words[0]} {words[1]}"
    if len(words) == 3:
        return f"a {words[0]} {words[1]} with {words[2]}"
    if len(words) <= 5:
        mid = len(words) // 2
        return f"a {' '.join(words[:mid])} in {' and '.join(words[mid:])}"
    head = f"a {words[0]} {words[1]} {words[2]} with {words[3]} and {words[4]}"
    return _with_leftovers(head, words[5:])


def bucket_words(entries: Sequence[WordEntry]) -> Buckets:
    buckets = Buckets([], [], [], [], [], [])
    for entry in entries:
        if entry.category in ADJECTIVE_CATEGORIES:
            buckets.adjectives.append(entry.word)
        elif entry.category in NOUN_CATEGORIES:
            buckets.nouns.append(entry.word)
        elif entry.category == "actions":
            buckets.actions.append(entry.word)
        elif entry.category == "settings":
            buckets.settings.append(entry.word)
        elif entry.category == "styles":
            buckets.styles.append(entry.word)
        else:
            buckets.extras.append(entry.word)
    return buckets


def assemble_prompt_from_entries(entries: Sequence[WordEntry]) -> str:
    """Category-aware templating; falls back to assemble_prompt."""
    if not entries:
        return EMPTY_PROMPT

    buckets = bucket_words(entries)
    for template in TEMPLATES:
        if not template.fits(buckets):
            continue
        used: list[str] = []
        for slot, n in template.needs.items():
            used.extend(getattr(buckets, slot)[:n])
        leftovers = [e.word for e in entries if e.word not in used]
        return _with_leftovers(template.build(buckets), leftovers)

    return assemble_prompt([e.word for e in entries])


# ─── Generated Prompt Vetting ────────────────────────────────────

def build_generation_request(entries: Sequence[WordEntry], recent_prompts: Sequence[str]) -> str:
    """User message asking the model to weave every word into one scene."""
    word_list = ", ".join(f"{e.word} ({e.category})" for e in entries)
    request = (
        "Compose an image-generation prompt (2-3 sentences, 150-350 characters) "
        f"that naturally incorporates ALL of these words: {word_list}. "
        "Describe a busy, detailed scene with lots of things happening that someone "
        "could point to and name. Use simple, everyday words. Fill the scene with "
        "specific, recognizable objects, people, animals and actions. No metaphors, "
        "no abstract ideas. Output ONLY the prompt text, nothing else."
    )
    if recent_prompts:
        listed = "\n".join(f'- "{p}"' for p in recent_prompts)
        request += f"\n\nDo NOT produce anything resembling these recent prompts:\n{listed}"
    return request


def clean_generated_prompt(raw: str) -> str:
    return _WRAPPING_QUOTES.sub("", raw.strip()).strip()


def is_valid_prompt(text: str, max_length: int) -> bool:
    if not text or not text.strip():
        return False
    if len(text) > max_length:
        return False
    return not any(p.search(text) for p in _META_PATTERNS)
