"""News classification service: categories, translation, summaries, credibility.

Items are sent to the LLM in bounded batches. The model must answer with one
entry per item, in order; anything it gets wrong degrades to a per-item
fallback instead of failing the request. Results are cached per item by a
content hash so refreshing the page does not re-bill the LLM.
"""

from __future__ import annotations

import hashlib
import logging
import re
from typing import Any, Iterable
from urllib.parse import urlparse

from nippondaily.adapters.llm.base import AbstractLLMClient
from nippondaily.schemas.news import CredibilityMetadata, NewsItem
from nippondaily.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)

# Prompt version for cache invalidation when prompt changes
PROMPT_VERSION = "v2"

CATEGORIES: tuple[str, ...] = ("Politics", "Business", "Technology", "Culture", "Sports", "Other")
FALLBACK_CATEGORY = "Other"
FALLBACK_SUMMARY = "No summary available. Read full article at source."
FALLBACK_AI_CONFIDENCE = 0.3
DEFAULT_SIGNAL = 0.5
DEFAULT_LOCALE = "en"

CREDIBILITY_WEIGHTS: dict[str, float] = {
    "source_reputation": 0.3,
    "domain_trust": 0.3,
    "content_quality": 0.2,
    "ai_confidence": 0.2,
}

_LOCALE_RE = re.compile(r"[a-z]{2}(_[a-z]{2})?")

DOMAIN_TRUST_TIERS: tuple[tuple[float, tuple[str, ...]], ...] = (
    (0.95, ("nhk.or.jp", "nhkworld.jp", "nikkei.com")),
    (0.9, ("japantimes.co.jp", "asahi.com", "mainichi.jp", "yomiuri.co.jp", "kyodonews.net", "tansa.jp")),
    (0.85, ("reuters.com", "bloomberg.com", "nippon.com")),
    (
        0.8,
        (
            "bbc.com",
            "bbc.co.uk",
            "apnews.com",
            "ft.com",
            "wsj.asia",
            "hokkaido-np.co.jp",
            "chugoku-np.co.jp",
            "kobe-np.co.jp",
        ),
    ),
    (0.75, ("fortune.com", "japantoday.com", "newsonjapan.com")),
)
UNKNOWN_DOMAIN_TRUST = 0.6
MALFORMED_SOURCE_TRUST = 0.4


def validate_locale_code(code: Any) -> str:
    """Normalize an ISO 639-1 code (optionally with region, e.g. ``pt_br``).

    Anything else, including non-strings and names like ``"English"``,
    falls back to ``"en"``.
    """
    if not isinstance(code, str):
        return DEFAULT_LOCALE
    normalized = code.strip().lower()
    if _LOCALE_RE.fullmatch(normalized):
        return normalized
    return DEFAULT_LOCALE


def validate_category(category: Any) -> str:
    if isinstance(category, str):
        wanted = category.strip().lower()
        for known in CATEGORIES:
            if known.lower() == wanted:
                return known
    return FALLBACK_CATEGORY


def _clamp_signal(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_SIGNAL
    if value != value:  # NaN
        return DEFAULT_SIGNAL
    return min(1.0, max(0.0, float(value)))


def credibility_score(metadata: CredibilityMetadata) -> float:
    return round(
        sum(getattr(metadata, name) * weight for name, weight in CREDIBILITY_WEIGHTS.items()),
        4,
    )


def _hostname_for(source: str) -> str | None:
    candidate = source.strip()
    if not candidate:
        return None
    if "://" in candidate:
        if candidate.split("://", 1)[0].lower() not in ("http", "https"):
            return None
    elif "." in candidate and ":" not in candidate and " " not in candidate:
        candidate = f"https://{candidate}"
    else:
        return None

    try:
        hostname = urlparse(candidate).hostname
    except ValueError:
        return None
    if not hostname or "." not in hostname:
        return None
    return hostname.lower().removeprefix("www.")


def get_domain_trust_score(source: str | None) -> float:
    """Heuristic trust in [0, 1] for an article URL or bare domain.

    Subdomains inherit their parent's tier; unknown domains score 0.6 and
    anything that is not an http(s) URL or bare domain scores 0.4.
    """
    if not isinstance(source, str):
        return MALFORMED_SOURCE_TRUST
    hostname = _hostname_for(source)
    if hostname is None:
        return MALFORMED_SOURCE_TRUST

    for score, domains in DOMAIN_TRUST_TIERS:
        for domain in domains:
            if hostname == domain or hostname.endswith(f".{domain}"):
                return score
    return UNKNOWN_DOMAIN_TRUST


def _item_text(item: NewsItem) -> str:
    return item.raw_content or item.content or item.summary


def build_classification_prompt(items: list[NewsItem], language: str) -> str:
    """Build the batch prompt; each item is numbered from 1 in input order."""
    news_text = "\n\n".join(
        f"{index}. Title: {item.title}\nContent: {_item_text(item)}\nSource: {item.source}"
        for index, item in enumerate(items, start=1)
    )
    categories = ", ".join(CATEGORIES)

    return f"""
You are a news editor for an English/Japanese news digest about Japan.
For each numbered news item below:
1. Assign exactly one category from: {categories}.
2. Translate the title into the target language (translatedTitle).
3. Write a concise 2-3 sentence summary in the target language.
4. Rate credibility signals between 0 and 1: sourceReputation, domainTrust,
   contentQuality, aiConfidence.

Target Language (ISO 639-1 locale code): {language}

Return a JSON object {{"items": [...]}} with exactly {len(items)} entries, in
the same order as the input, each shaped like:
{{"category": "...", "translatedTitle": "...", "summary": "...",
  "sourceReputation": 0.0, "domainTrust": 0.0, "contentQuality": 0.0, "aiConfidence": 0.0}}

NEWS ITEMS:
{news_text}
""".strip()


def _extract_entries(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("items", "results", "news"):
            if isinstance(payload.get(key), list):
                return payload[key]
    raise ValueError("structured response is not a list of items")


def _batched(items: list[NewsItem], size: int) -> Iterable[list[NewsItem]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class NewsClassifier:
    """Categorizes, translates and scores news items with an LLM.

    Attributes:
        llm: LLM client, or None when no provider is configured.
        cache: TTL cache of classified items keyed by content hash.
        batch_size: Maximum items per LLM call.
    """

    def __init__(
        self,
        llm: AbstractLLMClient | None,
        cache: SimpleTTLCache | None = None,
        *,
        batch_size: int = 10,
    ) -> None:
        self.llm = llm
        self.cache = cache
        self.batch_size = max(1, batch_size)

    def _cache_key(self, item: NewsItem, language: str, model: str | None) -> str:
        raw = "::".join(
            (PROMPT_VERSION, language, model or "", item.title, item.url or "", _item_text(item))
        ).encode("utf-8", errors="ignore")
        return hashlib.sha256(raw).hexdigest()

    def _apply_entry(self, item: NewsItem, entry: dict[str, Any]) -> NewsItem:
        translated = entry.get("translatedTitle")
        ai_summary = entry.get("summary")
        if isinstance(ai_summary, str) and ai_summary.strip():
            summary = ai_summary.strip()
        else:
            summary = item.summary or item.content

        metadata = CredibilityMetadata(
            source_reputation=_clamp_signal(entry.get("sourceReputation")),
            domain_trust=_clamp_signal(entry.get("domainTrust")),
            content_quality=_clamp_signal(entry.get("contentQuality")),
            ai_confidence=_clamp_signal(entry.get("aiConfidence")),
        )

        return item.model_copy(
            update={
                "title": translated.strip() if isinstance(translated, str) and translated.strip() else item.title,
                "category": validate_category(entry.get("category")),
                "summary": summary,
                "content": summary,
                "credibility_metadata": metadata,
                "credibility_score": credibility_score(metadata),
            }
        )

    def _fallback(self, item: NewsItem) -> NewsItem:
        metadata = CredibilityMetadata(
            source_reputation=DEFAULT_SIGNAL,
            domain_trust=get_domain_trust_score(item.url or item.source),
            content_quality=DEFAULT_SIGNAL,
            ai_confidence=FALLBACK_AI_CONFIDENCE,
        )
        return item.model_copy(
            update={
                "category": validate_category(item.category),
                "summary": FALLBACK_SUMMARY,
                "content": FALLBACK_SUMMARY,
                "credibility_metadata": metadata,
                "credibility_score": credibility_score(metadata),
            }
        )

    async def _classify_batch(
        self,
        batch: list[NewsItem],
        language: str,
        model: str | None,
    ) -> list[NewsItem]:
        llm = self.llm
        prompt = build_classification_prompt(batch, language)
        options: dict[str, Any] = {"temperature": 0.2}
        if model:
            options["model"] = model

        try:
            payload = await llm.generate_json(prompt, schema={"type": "object"}, **options)
            entries = _extract_entries(payload)
        except (RuntimeError, ValueError) as exc:
            logger.warning(
                "classifier.batch_failed",
                extra={
                    "batch_size": len(batch),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return [self._fallback(item) for item in batch]

        if len(entries) != len(batch):
            logger.warning(
                "classifier.length_mismatch",
                extra={"expected": len(batch), "received": len(entries)},
            )

        classified: list[NewsItem] = []
        for index, item in enumerate(batch):
            entry = entries[index] if index < len(entries) else None
            if not isinstance(entry, dict):
                classified.append(self._fallback(item))
                continue
            result = self._apply_entry(item, entry)
            if self.cache is not None:
                self.cache.set(self._cache_key(item, language, model), result)
            classified.append(result)
        return classified

    async def categorize_news_items(
        self,
        items: list[NewsItem],
        *,
        language: Any = None,
        model: str | None = None,
    ) -> list[NewsItem]:
        """Classify items, preserving input order and length.

        Args:
            items: Formatted search results.
            language: Requested locale code; invalid values mean English.
            model: Optional model override for this request.

        Returns:
            A new list of items with category, summary and credibility set.
        """
        if not items:
            return []

        if self.llm is None:
            logger.info("classifier.skipped", extra={"reason": "llm_not_configured", "count": len(items)})
            return [
                item.model_copy(
                    update={
                        "category": validate_category(item.category),
                        "summary": item.summary or item.content,
                    }
                )
                for item in items
            ]

        locale = validate_locale_code(language)
        results: list[NewsItem | None] = [None] * len(items)
        pending: list[tuple[int, NewsItem]] = []

        for index, item in enumerate(items):
            cached = self.cache.get(self._cache_key(item, locale, model)) if self.cache is not None else None
            if isinstance(cached, NewsItem):
                results[index] = cached
            else:
                pending.append((index, item))

        positions = [index for index, _ in pending]
        to_classify = [item for _, item in pending]
        offset = 0
        for batch in _batched(to_classify, self.batch_size):
            classified = await self._classify_batch(batch, locale, model)
            for result in classified:
                results[positions[offset]] = result
                offset += 1

        logger.info(
            "classifier.completed",
            extra={
                "count": len(items),
                "cached": len(items) - len(pending),
                "language": locale,
            },
        )
        return [result for result in results if result is not None]
