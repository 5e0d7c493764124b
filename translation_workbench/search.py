"""
Fuzzy search over indexed translations.

Records are scored per field with an approximate substring edit distance
(errors divided by query length, 0 for an exact field match), and field scores
are combined with key/value weights and a field-length norm. Lower scores are
better; a record only matches when at least one field is within the threshold.
"""
import json
import logging
import math
import sys
from dataclasses import asdict, dataclass, field
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Sequence, Tuple

from translation_workbench.csv_parser import quote_csv_cell
from translation_workbench.models import KEY_COLUMN, MultiLanguageMap, Table, TranslationMap

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3
DEFAULT_MAX_RESULTS = 50
KEY_WEIGHT = 0.7
VALUE_WEIGHT = 0.3
MIN_MATCH_CHAR_LENGTH = 1

# Smallest non-zero score, so a perfect field still contributes to the product.
EPSILON = sys.float_info.epsilon
# Substring hits that are not whole-field matches never score a perfect 0.
MIN_PARTIAL_SCORE = 0.001

MatchRange = Tuple[int, int]


@dataclass
class SearchRecord:
    key: str
    value: str
    language: str
    original_index: int = 0


@dataclass
class SearchResult:
    """A matched record. ``matches`` maps field name to inclusive (start, end) ranges."""
    key: str
    value: str
    language: str
    score: float
    matches: Dict[str, List[MatchRange]] = field(default_factory=dict)


def _field_norm(text: str) -> float:
    """Longer fields weigh less: 1/sqrt(token count), rounded to 3 places."""
    tokens = len(text.split()) or 1
    return round(1 / math.sqrt(tokens), 3)


def _substring_edit_distance(pattern: str, text: str, max_errors: int) -> Optional[int]:
    """
    Fewest edits needed to turn ``pattern`` into any substring of ``text``.

    Returns None as soon as every alignment exceeds ``max_errors``.
    """
    previous = [0] * (len(text) + 1)
    for i, pattern_char in enumerate(pattern, 1):
        current = [i] + [0] * len(text)
        for j, text_char in enumerate(text, 1):
            cost = 0 if pattern_char == text_char else 1
            current[j] = min(previous[j - 1] + cost, previous[j] + 1, current[j - 1] + 1)
        if min(current) > max_errors:
            return None
        previous = current
    best = min(previous)
    return best if best <= max_errors else None


def _occurrences(pattern: str, text: str) -> List[MatchRange]:
    ranges = []
    start = text.find(pattern)
    while start != -1:
        ranges.append((start, start + len(pattern) - 1))
        start = text.find(pattern, start + len(pattern))
    return ranges


def _approximate_ranges(pattern: str, text: str) -> List[MatchRange]:
    blocks = SequenceMatcher(None, pattern, text, autojunk=False).get_matching_blocks()
    return [(b.b, b.b + b.size - 1) for b in blocks if b.size >= MIN_MATCH_CHAR_LENGTH]


def score_field(text: str, query: str, threshold: float) -> Optional[Tuple[float, List[MatchRange]]]:
    """
    Score one field against a query, case-insensitively.

    Args:
        text: The field content.
        query: The search query.
        threshold: Highest acceptable score.

    Returns:
        ``(score, ranges)`` when the field matches, otherwise None.
    """
    if not text or not query:
        return None
    text_lower = text.lower()
    pattern = query.lower()

    if text_lower == pattern:
        return 0.0, [(0, len(text) - 1)]

    if pattern in text_lower:
        return MIN_PARTIAL_SCORE, _occurrences(pattern, text_lower)

    errors = _substring_edit_distance(pattern, text_lower, int(threshold * len(pattern)))
    if errors is None:
        return None
    score = max(MIN_PARTIAL_SCORE, errors / len(pattern))
    if score > threshold:
        return None
    return score, _approximate_ranges(pattern, text_lower)


def _normalize_weights(weights: Dict[str, float]) -> Dict[str, float]:
    total = sum(weights.values())
    return {name: weight / total for name, weight in weights.items()}


def score_record(record: SearchRecord, query: str, weights: Dict[str, float],
                 threshold: float) -> Optional[SearchResult]:
    """Combine weighted field scores; fields that do not match leave the product unchanged."""
    total = 1.0
    matches: Dict[str, List[MatchRange]] = {}
    for name, weight in weights.items():
        text = getattr(record, name)
        scored = score_field(text, query, threshold)
        if scored is None:
            continue
        score, ranges = scored
        total *= (EPSILON if score == 0 else score) ** (weight * _field_norm(text))
        matches[name] = ranges

    if not matches:
        return None
    return SearchResult(
        key=record.key,
        value=record.value,
        language=record.language,
        score=total,
        matches=matches
    )


def _clamp_threshold(threshold: float) -> float:
    return max(0.0, min(1.0, float(threshold)))


class SearchEngine:
    """
    In-memory fuzzy search index of (key, value, language) records.

    Every ``index_*`` call replaces the whole index.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, max_results: int = DEFAULT_MAX_RESULTS):
        self._records: List[SearchRecord] = []
        self.threshold = _clamp_threshold(threshold)
        self.max_results = max(1, int(max_results))
        self.weights = _normalize_weights({'key': KEY_WEIGHT, 'value': VALUE_WEIGHT})

    def __len__(self) -> int:
        return len(self._records)

    # Indexing

    def index_flat_map(self, translations: TranslationMap, language: str = 'English') -> None:
        self._records = [
            SearchRecord(key=key, value=value, language=language, original_index=index)
            for index, (key, value) in enumerate(translations.items())
        ]
        logger.debug("Indexed %d record(s) from a translation map.", len(self._records))

    def index_multi_map(self, multi_map: MultiLanguageMap) -> None:
        records = []
        for language, translations in multi_map.items():
            for key, value in translations.items():
                records.append(SearchRecord(key=key, value=value, language=language,
                                            original_index=len(records)))
        self._records = records
        logger.debug("Indexed %d record(s) from %d language(s).", len(records), len(multi_map))

    def index_table(self, table: Table) -> None:
        """Index one record per (row, language column). Rows without a key are skipped."""
        records = []
        for row in table.rows:
            key = row.get(KEY_COLUMN)
            if not key:
                continue
            for language in table.language_columns:
                records.append(SearchRecord(key=key, value=row.get(language) or '', language=language,
                                            original_index=len(records)))
        self._records = records
        logger.debug("Indexed %d record(s) from a table.", len(records))

    def clear_index(self) -> None:
        self._records = []

    def get_all_data(self) -> List[SearchRecord]:
        return list(self._records)

    # Configuration

    def set_threshold(self, threshold: float) -> None:
        """Set the default threshold, clamped to [0, 1]."""
        self.threshold = _clamp_threshold(threshold)

    def set_max_results(self, max_results: int) -> None:
        """Set the default result limit, clamped to at least 1."""
        self.max_results = max(1, int(max_results))

    # Queries

    def _run(self, records: Sequence[SearchRecord], query: str, weights: Dict[str, float],
             threshold: float, limit: Optional[int]) -> List[SearchResult]:
        if not query or not query.strip():
            return []
        scored = []
        for record in records:
            result = score_record(record, query, weights, threshold)
            if result is not None:
                scored.append((result.score, record.original_index, result))
        scored.sort(key=lambda item: (item[0], item[1]))
        results = [result for _, _, result in scored]
        return results[:limit] if limit is not None else results

    def search(self, query: str, threshold: Optional[float] = None, limit: Optional[int] = None) -> List[SearchResult]:
        """
        Weighted fuzzy search over keys and values.

        Args:
            query: The search text.
            threshold: Overrides the engine threshold for this call.
            limit: Overrides the engine result limit for this call.

        Returns:
            List[SearchResult]: Best matches first.
        """
        threshold = self.threshold if threshold is None else _clamp_threshold(threshold)
        limit = self.max_results if limit is None else max(1, limit)
        return self._run(self._records, query, self.weights, threshold, limit)

    def search_keys(self, query: str, threshold: Optional[float] = None) -> List[SearchResult]:
        threshold = self.threshold if threshold is None else _clamp_threshold(threshold)
        return self._run(self._records, query, {'key': 1.0}, threshold, self.max_results)

    def search_values(self, query: str, threshold: Optional[float] = None) -> List[SearchResult]:
        threshold = self.threshold if threshold is None else _clamp_threshold(threshold)
        return self._run(self._records, query, {'value': 1.0}, threshold, self.max_results)

    def search_in_language(self, query: str, language: str,
                           threshold: float = DEFAULT_THRESHOLD) -> List[SearchResult]:
        """Search only the records of one language; the main index is left as it is."""
        language_records = [record for record in self._records if record.language == language]
        if not language_records:
            return []
        return self._run(language_records, query, self.weights, _clamp_threshold(threshold), None)

    def get_exact_matches(self, query: str) -> List[SearchResult]:
        """Case-insensitive containment in key or value; every hit scores 0."""
        needle = query.lower()
        return [
            SearchResult(key=record.key, value=record.value, language=record.language, score=0.0)
            for record in self._records
            if needle in record.key.lower() or needle in record.value.lower()
        ]

    def get_suggestions(self, partial_query: str, limit: int = 10) -> List[str]:
        """
        Keys starting with the query, then lowercased value words that extend it.

        Returns:
            List[str]: Unique suggestions in discovery order, at most ``limit``.
        """
        if not partial_query.strip():
            return []
        query = partial_query.lower()
        suggestions: Dict[str, None] = {}

        for record in self._records:
            if record.key.lower().startswith(query):
                suggestions.setdefault(record.key)

        for record in self._records:
            for word in record.value.lower().split():
                if word.startswith(query) and len(word) > len(query):
                    suggestions.setdefault(word)

        return list(suggestions)[:limit]

    def get_search_stats(self) -> Dict[str, object]:
        total = len(self._records)
        languages = list(dict.fromkeys(record.language for record in self._records))
        if total == 0:
            return {'total_items': 0, 'languages': [], 'average_key_length': 0, 'average_value_length': 0}
        return {
            'total_items': total,
            'languages': languages,
            'average_key_length': round(sum(len(r.key) for r in self._records) / total),
            'average_value_length': round(sum(len(r.value) for r in self._records) / total),
        }

    # Result helpers

    @staticmethod
    def filter_by_language(results: List[SearchResult], language: str) -> List[SearchResult]:
        return [result for result in results if result.language == language]

    @staticmethod
    def sort_by_score(results: List[SearchResult]) -> List[SearchResult]:
        return sorted(results, key=lambda result: result.score)

    @staticmethod
    def sort_by_key(results: List[SearchResult]) -> List[SearchResult]:
        return sorted(results, key=lambda result: result.key.lower())

    @staticmethod
    def get_unique_keys(results: List[SearchResult]) -> List[str]:
        return list(dict.fromkeys(result.key for result in results))


def export_search_results(results: List[SearchResult], output_format: str = 'json') -> str:
    """Render search results as JSON, or as CSV with Key/Value/Language/Score columns."""
    if output_format == 'json':
        return json.dumps([asdict(result) for result in results], indent=2, ensure_ascii=False)

    lines = ['Key,Value,Language,Score']
    for result in results:
        lines.append(','.join([
            quote_csv_cell(result.key),
            quote_csv_cell(result.value),
            quote_csv_cell(result.language),
            f'{result.score:.3f}',
        ]))
    return '\n'.join(lines)
