"""
Text signals derived from message content.

Both detectors are pure functions of the text. Spam labels are advisory
pre-filter signals for the downstream workflow, never a verdict: several may
fire on the same message and a clean message yields none.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set

from modrelay.datatypes.relay_datatypes import SpamSignal

# Case-sensitive scheme match; the contiene_enlace rule below ignores case
URL_PATTERN = re.compile(r"https?://\S+")

DEFAULT_RESEARCH_TOOLS: tuple[str, ...] = (
    "ChatGPT",
    "Perplexity",
    "Elicit",
    "Consensus",
    "Scite",
    "Zotero",
    "Mendeley",
    "ResearchRabbit",
    "Connected Papers",
    "SciSpace",
    "Semantic Scholar",
)

PRIVATE_CONTACT_PATTERN = (
    r"\b(?:por|al|en|via|vía|by|in)\s+"
    r"(?:dm|md|privado|priv|mensaje\s+privado|mensajes\s+privados|direct\s+message|private(?:\s+message)?|inbox)\b"
    r"|\b(?:escr[ií]beme|h[aá]blame|m[aá]ndame\s+un\s+mensaje|dm\s+me|message\s+me\s+privately)\b"
    r"|\bprivate\s+messages?\b|\bmensajes?\s+(?:privados?|directos?)\b"
    r"|\b(?:env[ií]ame|m[aá]ndame|send\s+me)\s+(?:un\s+|una\s+|a\s+)?(?:dm|md)\b"
)
SELF_PROMOTION_PATTERN = (
    r"\b(?:mi|my)\s+(?:canal|channel|perfil|profile|instagram|insta|ig|telegram|whatsapp|youtube|tiktok)\b"
)
CONTAINS_LINK_PATTERN = r"https?://"
COMMERCIAL_OFFER_PATTERN = (
    r"\b(?:gratis|free|descuentos?|discounts?|ofertas?|offers?|promoci[oó]n|promociones|promos?|promotions?)\b"
)
SHARED_TOOL_VERBS = r"compart(?:ir|o|e|imos|ido|ida|idos|idas)|share[sd]?|sharing"


@dataclass(frozen=True, slots=True)
class SpamRule:
    """One independent detection rule: a label and the pattern that triggers it."""

    label: SpamSignal
    pattern: re.Pattern

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def build_spam_rules(research_tools: Iterable[str] = DEFAULT_RESEARCH_TOOLS) -> tuple[SpamRule, ...]:
    """Build the rule table, using ``research_tools`` as the named-tool list.

    Tool names are matched literally (whitespace inside a name matches any run
    of whitespace) and as whole words.
    """
    tool_alternatives = [
        r"\s+".join(re.escape(word) for word in tool.split())
        for tool in research_tools
        if tool and tool.strip()
    ]
    shared_tool = rf"\b(?:{SHARED_TOOL_VERBS})\b"
    if tool_alternatives:
        shared_tool = rf"\b(?:{'|'.join(tool_alternatives)})\b|{shared_tool}"

    return (
        SpamRule(SpamSignal.PRIVATE_CONTACT, _compile(PRIVATE_CONTACT_PATTERN)),
        SpamRule(SpamSignal.SELF_PROMOTION, _compile(SELF_PROMOTION_PATTERN)),
        SpamRule(SpamSignal.CONTAINS_LINK, _compile(CONTAINS_LINK_PATTERN)),
        SpamRule(SpamSignal.COMMERCIAL_OFFER, _compile(COMMERCIAL_OFFER_PATTERN)),
        SpamRule(SpamSignal.SHARED_TOOL, _compile(shared_tool)),
    )


DEFAULT_SPAM_RULES = build_spam_rules()


def extract_urls(text: str | None) -> List[str]:
    """Return every ``http(s)://`` URL in ``text`` in order of appearance.

    Duplicates and trailing punctuation are kept as written.

    >>> extract_urls("check http://a.com and https://b.com")
    ['http://a.com', 'https://b.com']
    """
    if not text:
        return []
    return URL_PATTERN.findall(text)


def detect_spam_patterns(text: str | None, rules: Sequence[SpamRule] = DEFAULT_SPAM_RULES) -> Set[SpamSignal]:
    """Return the labels of every rule whose pattern occurs anywhere in ``text``."""
    if not text:
        return set()
    return {rule.label for rule in rules if rule.matches(text)}


def ordered_labels(signals: Iterable[SpamSignal]) -> List[str]:
    """Serialize a signal set in declaration order, for stable payloads."""
    found = set(signals)
    return [signal.value for signal in SpamSignal if signal in found]
