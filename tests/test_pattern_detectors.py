"""Tests for URL extraction and spam pattern detection."""

import pytest

from modrelay.datatypes.relay_datatypes import SpamSignal
from modrelay.relay.pattern_detectors import (
    build_spam_rules,
    detect_spam_patterns,
    extract_urls,
    ordered_labels,
)


class TestExtractUrls:
    def test_urls_in_order_of_appearance(self):
        assert extract_urls("check http://a.com and https://b.com") == ["http://a.com", "https://b.com"]

    def test_duplicates_are_kept(self):
        text = "https://x.io then https://x.io again"
        assert extract_urls(text) == ["https://x.io", "https://x.io"]

    def test_trailing_punctuation_is_not_trimmed(self):
        assert extract_urls("see https://example.com/page.") == ["https://example.com/page."]

    def test_requires_scheme(self):
        assert extract_urls("www.example.com and ftp://files.example") == []

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input(self, text):
        assert extract_urls(text) == []


class TestDetectSpamPatterns:
    def test_reference_message_fires_contact_promotion_and_link(self):
        text = "Te escribo por privado, mira mi canal de Telegram https://t.me/x"

        assert detect_spam_patterns(text) == {
            SpamSignal.PRIVATE_CONTACT,
            SpamSignal.SELF_PROMOTION,
            SpamSignal.CONTAINS_LINK,
        }

    def test_clean_message_has_no_signals(self):
        assert detect_spam_patterns("Buenos días a todos, ¿qué tal el seminario?") == set()

    @pytest.mark.parametrize(
        "text",
        [
            "hablamos por DM",
            "te respondo al md",
            "Send it by DM please",
            "check your inbox, reply in private message",
            "Send me a private message for details",
            "Te paso la info por mensaje directo",
            "Envíame un DM",
        ],
    )
    def test_private_contact(self, text):
        assert SpamSignal.PRIVATE_CONTACT in detect_spam_patterns(text)

    @pytest.mark.parametrize("text", ["sigan mi Instagram", "visita mi perfil", "join my WhatsApp group"])
    def test_self_promotion(self, text):
        assert SpamSignal.SELF_PROMOTION in detect_spam_patterns(text)

    @pytest.mark.parametrize("text", ["curso GRATIS", "50% de descuento", "limited offer", "nueva promoción"])
    def test_commercial_offer(self, text):
        assert SpamSignal.COMMERCIAL_OFFER in detect_spam_patterns(text)

    @pytest.mark.parametrize("text", ["probé Perplexity para la revisión", "os comparto mi plantilla", "I shared the deck"])
    def test_shared_tool(self, text):
        assert SpamSignal.SHARED_TOOL in detect_spam_patterns(text)

    def test_case_insensitive_link(self):
        assert SpamSignal.CONTAINS_LINK in detect_spam_patterns("HTTPS://EXAMPLE.COM")
        assert extract_urls("HTTPS://EXAMPLE.COM") == []

    def test_repeated_runs_are_identical(self):
        text = "Oferta gratis en mi canal, escríbeme por privado https://spam.example"
        first = detect_spam_patterns(text)
        assert detect_spam_patterns(text) == first
        assert len(first) == 4

    def test_rule_order_does_not_change_result(self):
        text = "Free promo, my channel: https://x.example"
        rules = build_spam_rules()
        assert detect_spam_patterns(text, rules) == detect_spam_patterns(text, tuple(reversed(rules)))

    def test_custom_tool_list(self):
        rules = build_spam_rules(["Obsidian", "Research Pal"])

        assert SpamSignal.SHARED_TOOL in detect_spam_patterns("uso research   pal a diario", rules)
        assert SpamSignal.SHARED_TOOL not in detect_spam_patterns("probé Perplexity", rules)

    def test_empty_tool_list_still_matches_share_verbs(self):
        rules = build_spam_rules([])
        assert SpamSignal.SHARED_TOOL in detect_spam_patterns("lo comparto aquí", rules)


def test_ordered_labels_follow_declaration_order():
    signals = {SpamSignal.CONTAINS_LINK, SpamSignal.PRIVATE_CONTACT}
    assert ordered_labels(signals) == ["intento_contacto_privado", "contiene_enlace"]
