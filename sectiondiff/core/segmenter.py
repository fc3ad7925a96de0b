"""
Document segmentation for section-level comparison.

This module splits raw document text into ordered, titled chunks whose
character spans point back into the original text.

Strategy:
1. Scan for heading lines using the pattern table of the selected domain
2. Each heading starts a new section; text before the first heading is an
   untitled section
3. Sections larger than the domain's character cap become one chunk per
   blank-line paragraph; a paragraph still over the cap becomes one chunk
   per sentence
4. A piece with no structural boundary at all is cut into fixed-size windows
   that overlap by a trailing character window
5. Orders are assigned 0..n-1 over the final list

Domain Profiles:
Every DomainHint maps to a SegmentationProfile (heading patterns, size cap,
overlap). GENERIC only knows the common structural markers; the other domains
add markers specific to contracts, financial filings and clinical documents.

Failure Policy:
Segmentation never raises for malformed input. Empty input gives an empty
list, and an unusable pattern table degrades to treating the whole text as a
single section.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple, Union

from sectiondiff.core.models import Chunk


logger = logging.getLogger(__name__)

# Trailing characters repeated at the start of the next fixed-size window.
DEFAULT_OVERLAP_CHARS = 200

# Heading lines longer than this are treated as body text.
MAX_HEADING_CHARS = 120

# (start, end) character offsets into the original text
Span = Tuple[int, int]

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")

_TAIL = r"[^\n]{0,%d}" % MAX_HEADING_CHARS


class SegmentationError(Exception):
    """Raised when a heading pattern table cannot be used."""
    pass


class DomainHint(Enum):
    """
    Document domain used to pick a segmentation profile.

    LEGAL: Contracts, agreements, statutes
    FINANCIAL: Annual reports, filings, statements
    MEDICAL: Clinical notes, drug labels, study reports
    GENERIC: Anything else (fallback)
    """
    LEGAL = "legal"
    FINANCIAL = "financial"
    MEDICAL = "medical"
    GENERIC = "generic"

    @classmethod
    def parse(cls, value: Union["DomainHint", str, None]) -> "DomainHint":
        """
        Resolve a hint from an enum member or a loose string.

        Unknown or missing values fall back to GENERIC rather than raising.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.GENERIC

        key = str(value).strip().lower()
        for hint in cls:
            if key == hint.value:
                return hint
        if key in _HINT_ALIASES:
            return _HINT_ALIASES[key]

        logger.debug("Unknown domain hint %r, falling back to generic", value)
        return cls.GENERIC


_HINT_ALIASES: Dict[str, DomainHint] = {
    "law": DomainHint.LEGAL,
    "contract": DomainHint.LEGAL,
    "legal contract": DomainHint.LEGAL,
    "finance": DomainHint.FINANCIAL,
    "financial report": DomainHint.FINANCIAL,
    "pharma": DomainHint.MEDICAL,
    "clinical": DomainHint.MEDICAL,
    "general": DomainHint.GENERIC,
    "general document": DomainHint.GENERIC,
}


@dataclass(frozen=True)
class SegmentationProfile:
    """
    Per-domain segmentation settings.

    Attributes:
        heading_patterns: Regexes for a whole heading line (without anchors)
        max_chunk_chars: Size cap for a single chunk, in characters
        overlap_chars: Trailing window copied into the next fixed-size piece
    """
    heading_patterns: Tuple[str, ...]
    max_chunk_chars: int
    overlap_chars: int = DEFAULT_OVERLAP_CHARS

    def __post_init__(self):
        if self.max_chunk_chars <= 0:
            raise ValueError(f"max_chunk_chars must be positive, got {self.max_chunk_chars}")
        if self.overlap_chars < 0:
            raise ValueError(f"overlap_chars cannot be negative, got {self.overlap_chars}")

    @property
    def effective_overlap(self) -> int:
        """Overlap actually used, capped so every window advances."""
        return min(self.overlap_chars, self.max_chunk_chars // 2)

    def with_limits(
        self,
        max_chunk_chars: Optional[int] = None,
        overlap_chars: Optional[int] = None,
    ) -> "SegmentationProfile":
        """Return a copy with the given size limits overridden."""
        return replace(
            self,
            max_chunk_chars=self.max_chunk_chars if max_chunk_chars is None else max_chunk_chars,
            overlap_chars=self.overlap_chars if overlap_chars is None else overlap_chars,
        )

    def compile(self) -> Optional[Pattern]:
        """
        Combine the heading patterns into one line-anchored regex.

        Returns:
            Compiled pattern, or None when the profile has no patterns

        Raises:
            SegmentationError: If any pattern is not a valid regex
        """
        if not self.heading_patterns:
            return None
        body = "|".join(f"(?:{p})" for p in self.heading_patterns)
        try:
            return re.compile(rf"^[ \t]*(?:{body})[ \t]*\r?$", re.MULTILINE)
        except re.error as e:
            raise SegmentationError(f"Invalid heading pattern: {e}") from e


# =============================================================================
# Heading Pattern Tables
# =============================================================================

COMMON_HEADING_PATTERNS: Tuple[str, ...] = (
    r"#{1,6}[ \t]+\S" + _TAIL,                                  # ## Markdown heading
    r"\d+(?:\.\d+)+\.?[ \t]+[A-Z]" + _TAIL,                     # 2.1 Scope
    r"\d+\.[ \t]+[A-Z]" + _TAIL,                                # 3. Payment Terms
    r"[IVXLCDM]+\.[ \t]+[A-Z]" + _TAIL,                         # IV. Findings
    r"(?i:executive summary|introduction|background|overview|summary|abstract"
    r"|findings|conclusions?|references|appendix(?:[ \t]+[A-Z0-9]+)?)[ \t]*:?",
)

LEGAL_HEADING_PATTERNS: Tuple[str, ...] = (
    r"(?:ARTICLE|Article)[ \t]+(?:[IVXLCDM]+|\d+)\b\.?" + _TAIL,
    r"(?:SECTION|Section)[ \t]+\d+(?:\.\d+)*\.?(?:[ \t]" + _TAIL + ")?",
    r"(?:CHAPTER|Chapter)[ \t]+(?:[IVXLCDM]+|\d+)\b\.?" + _TAIL,
    r"§+[ \t]*\d+(?:\.\d+)*" + _TAIL,                      # § 4.2
    r"(?:SCHEDULE|EXHIBIT|ANNEX)[ \t]+[A-Z0-9]+\b" + _TAIL,
    r"(?:RECITALS|DEFINITIONS|WITNESSETH|IN WITNESS WHEREOF|WHEREAS)\b" + _TAIL,
)

FINANCIAL_HEADING_PATTERNS: Tuple[str, ...] = (
    r"PART[ \t]+[IVX]+\b" + _TAIL,
    r"(?i:item)[ \t]+\d+[A-Z]?\." + _TAIL,                      # Item 7A.
    r"(?i:note)[ \t]+\d+(?:[ \t]*[-:.–—]" + _TAIL + ")?",
    r"(?i:management['’]?s discussion and analysis)" + _TAIL,
    r"(?i:risk factors|financial highlights|results of operations"
    r"|liquidity and capital resources|balance sheets?|income statements?"
    r"|cash flow statements?|statements? of (?:operations|income|cash flows|financial position)"
    r"|independent auditor['’]?s report)[ \t]*:?",
)

MEDICAL_HEADING_PATTERNS: Tuple[str, ...] = (
    r"(?i:chief complaint|history of present illness|past medical history|medications"
    r"|allergies|physical exam(?:ination)?|assessment(?: and plan)?|plan|diagnosis"
    r"|indications(?: and usage)?|dosage and administration|contraindications"
    r"|warnings(?: and precautions)?|adverse reactions|drug interactions|overdosage"
    r"|clinical (?:studies|pharmacology)|how supplied|patient counseling information)"
    r"(?:[ \t]*:" + _TAIL + ")?",
)


DOMAIN_PROFILES: Dict[DomainHint, SegmentationProfile] = {
    DomainHint.LEGAL: SegmentationProfile(
        heading_patterns=LEGAL_HEADING_PATTERNS + COMMON_HEADING_PATTERNS,
        max_chunk_chars=800,
    ),
    DomainHint.FINANCIAL: SegmentationProfile(
        heading_patterns=FINANCIAL_HEADING_PATTERNS + COMMON_HEADING_PATTERNS,
        max_chunk_chars=1200,
    ),
    DomainHint.MEDICAL: SegmentationProfile(
        heading_patterns=MEDICAL_HEADING_PATTERNS + COMMON_HEADING_PATTERNS,
        max_chunk_chars=1000,
    ),
    DomainHint.GENERIC: SegmentationProfile(
        heading_patterns=COMMON_HEADING_PATTERNS,
        max_chunk_chars=1000,
    ),
}


def get_profile(domain_hint: Union[DomainHint, str, None]) -> SegmentationProfile:
    """Return the segmentation profile for a domain hint (GENERIC if unknown)."""
    return DOMAIN_PROFILES[DomainHint.parse(domain_hint)]


# =============================================================================
# Domain Detection
# =============================================================================

# Keyword prefixes scored by detect_domain(). Dict order breaks ties.
_DOMAIN_KEYWORDS: Dict[DomainHint, Tuple[str, ...]] = {
    DomainHint.LEGAL: (
        "agreement", "contract", "hereinafter", "whereas", "indemnif",
        "governing law", "party", "parties", "termination",
    ),
    DomainHint.FINANCIAL: (
        "revenue", "financial", "fiscal", "earnings", "balance sheet",
        "net income", "cash flow", "ebitda", "shareholder",
    ),
    DomainHint.MEDICAL: (
        "patient", "clinical", "dosage", "diagnos", "adverse",
        "treatment", "symptom", "contraindicat",
    ),
}


def detect_domain(text: Optional[str]) -> DomainHint:
    """
    Guess the document domain from keyword frequency.

    This is a cheap heuristic for callers that have no domain hint. It counts
    word-initial keyword occurrences per domain and picks the highest score.

    Args:
        text: Document text

    Returns:
        Detected DomainHint (GENERIC if no keyword occurs)
    """
    if not text or not text.strip():
        return DomainHint.GENERIC

    lowered = text.lower()
    best, best_score = DomainHint.GENERIC, 0
    for hint, keywords in _DOMAIN_KEYWORDS.items():
        score = sum(len(re.findall(r"\b" + re.escape(kw), lowered)) for kw in keywords)
        if score > best_score:
            best, best_score = hint, score
    return best


# =============================================================================
# Segmentation
# =============================================================================

def segment(
    text: Union[str, bytes, None],
    domain_hint: Union[DomainHint, str, None] = DomainHint.GENERIC,
    profile: Optional[SegmentationProfile] = None,
) -> List[Chunk]:
    """
    Split a document into ordered, titled, span-tracked chunks.

    Args:
        text: The document text (bytes are decoded as UTF-8)
        domain_hint: Selects the heading patterns and size limits
        profile: Explicit profile, overriding the one selected by domain_hint

    Returns:
        List of Chunk objects in document order (empty for blank input)

    Example:
        >>> chunks = segment(contract_text, DomainHint.LEGAL)
        >>> [c.title for c in chunks]
        [None, 'ARTICLE I. DEFINITIONS', 'ARTICLE II. PAYMENT']
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if not isinstance(text, str) or not text.strip():
        return []

    cfg = profile or get_profile(domain_hint)

    try:
        sections = _heading_sections(text, cfg)
    except SegmentationError as e:
        logger.warning("Heading detection failed (%s); treating document as one section", e)
        sections = [(0, len(text), None)]

    chunks: List[Chunk] = []
    for start, end, title in sections:
        for piece_start, piece_end in _split_span(text, start, end, cfg):
            chunks.append(Chunk(
                order=len(chunks),
                text=text[piece_start:piece_end],
                start_index=piece_start,
                end_index=piece_end,
                title=title,
            ))

    logger.info(
        "Segmented %d characters into %d chunks (%d sections, cap %d)",
        len(text), len(chunks), len(sections), cfg.max_chunk_chars,
    )
    return chunks


def _heading_sections(
    text: str,
    profile: SegmentationProfile,
) -> List[Tuple[int, int, Optional[str]]]:
    """
    Split text at heading lines.

    Returns:
        List of (start, end, title) tuples covering the whole text
    """
    pattern = profile.compile()
    matches = list(pattern.finditer(text)) if pattern is not None else []

    if not matches:
        return [(0, len(text), None)]

    sections: List[Tuple[int, int, Optional[str]]] = []
    if matches[0].start() > 0:
        sections.append((0, matches[0].start(), None))

    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        sections.append((match.start(), end, match.group(0).strip() or None))

    return sections


def _trim_span(text: str, start: int, end: int) -> Span:
    """Shrink a span so it neither starts nor ends with whitespace."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def _spans_between(text: str, start: int, end: int, separator: Pattern) -> List[Span]:
    """Split a span at every separator match, dropping empty parts."""
    parts: List[Span] = []
    pos = start
    for match in separator.finditer(text, start, end):
        parts.append((pos, match.start()))
        pos = match.end()
    parts.append((pos, end))

    trimmed = (_trim_span(text, s, e) for s, e in parts)
    return [(s, e) for s, e in trimmed if s < e]


def _split_span(text: str, start: int, end: int, profile: SegmentationProfile) -> List[Span]:
    """
    Recursively split a span until every piece fits the profile's cap.

    An oversized span yields one piece per paragraph; a paragraph still over
    the cap yields one piece per sentence, and a sentence still over the cap
    is cut into fixed-size windows. Parts are never merged back together.
    """
    start, end = _trim_span(text, start, end)
    if start >= end:
        return []

    cap = profile.max_chunk_chars
    if end - start <= cap:
        return [(start, end)]

    for separator in (_PARAGRAPH_BREAK, _SENTENCE_BREAK):
        parts = _spans_between(text, start, end, separator)
        if len(parts) > 1:
            pieces: List[Span] = []
            for part_start, part_end in parts:
                pieces.extend(_split_span(text, part_start, part_end, profile))
            return pieces

    logger.debug("No structural boundary in %d-char span at %d; using fixed windows", end - start, start)
    return _window_spans(text, start, end, cap, profile.effective_overlap)


def _window_spans(text: str, start: int, end: int, cap: int, overlap: int) -> List[Span]:
    """
    Cut a span into windows of at most `cap` characters.

    Each window after the first starts `overlap` characters before the
    previous cut, so text around an arbitrary cut point appears in both
    pieces. The cut always lands beyond the overlap region, so windows
    strictly advance.
    """
    spans: List[Span] = []
    pos = start
    while end - pos > cap:
        cut = _find_cut(text, pos + overlap, pos + cap)
        spans.append((pos, cut))
        pos = cut - overlap
    spans.append((pos, end))

    trimmed = (_trim_span(text, s, e) for s, e in spans)
    return [(s, e) for s, e in trimmed if s < e]


def _find_cut(text: str, floor: int, limit: int) -> int:
    """
    Choose a cut position in (floor, limit].

    Windows only run on text without sentence breaks, so the cut is the last
    whitespace, falling back to a hard cut at limit.
    """
    for i in range(min(limit, len(text) - 1), floor, -1):
        if text[i].isspace():
            return i

    return limit
