"""Lexical sentiment scoring with contextual modifiers and semantic boost."""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from .constants import ScoringConstants
from .lexicon import Lexicon, LexiconEntry, default_lexicon, term_pattern
from .models import (
    Article,
    CalibrationResult,
    ContextualFactors,
    EntityType,
    Intensity,
    SemanticAnalysis,
    SentimentLabel,
    SentimentResult,
)
from .semantic import SemanticAnalyzer
from ..utils.text import (
    clamp,
    is_blank,
    mask_spans,
    normalize_apostrophes,
    sentence_spans,
    split_sentences,
    words,
)

logger = logging.getLogger(__name__)

Span = Tuple[int, int]

# Nuances that change numbers; the rest are reported only
IRONY = "irony"
AMBIVALENCE = "ambivalence"
URGENCY = "urgency"
UNCERTAINTY = "uncertainty"
SARCASM = "sarcasm"
EMPATHY = "empathy"


def _marker_pattern(term: str) -> Pattern:
    """Whole-word matcher; elided forms ("n'") need no trailing boundary."""
    term = term.lower()
    if "..." in term:
        head, tail = (part.strip() for part in term.split("...", 1))
        return re.compile(rf"(?<!\w){re.escape(head)}[\s\S]*?{re.escape(tail)}(?!\w)", re.IGNORECASE)
    tail_guard = "" if term.endswith("'") else r"(?!\w)"
    return re.compile(rf"(?<!\w){re.escape(term)}{tail_guard}", re.IGNORECASE)


@dataclass
class TermMatch:
    """One lexicon hit and what it contributes after modifiers."""
    entry: LexiconEntry
    start: int
    end: int
    sentence: int
    magnitude: float
    locally_negated: bool = False
    positive_part: float = 0.0
    negative_part: float = 0.0

    def assign(self, polarity: SentimentLabel, magnitude: float):
        self.magnitude = magnitude
        if polarity == SentimentLabel.POSITIVE:
            self.positive_part, self.negative_part = magnitude, 0.0
        else:
            self.positive_part, self.negative_part = 0.0, magnitude

    @property
    def effective_polarity(self) -> SentimentLabel:
        if not self.locally_negated:
            return self.entry.polarity
        return SentimentLabel.NEGATIVE if self.entry.polarity == SentimentLabel.POSITIVE else SentimentLabel.POSITIVE


@dataclass
class LexicalScores:
    """Positive/negative totals of one scanned section."""
    positive: float = 0.0
    negative: float = 0.0
    matches: List[TermMatch] = field(default_factory=list)

    @property
    def evidence(self) -> float:
        return self.positive + self.negative

    @property
    def terms(self) -> List[str]:
        return [m.entry.term for m in self.matches]


@dataclass
class SemanticBoost:
    score_multiplier: float = 1.0
    confidence_multiplier: float = 1.0


class SentimentScorer:
    """Scores French news articles for polarity, confidence and intensity.

    Deterministic for a given text, lexicon and clock day. The calibration
    adjustment from the validator is never applied implicitly; call
    ``apply_calibration`` to opt in.
    """

    SECTION_WEIGHTS = (
        ("title", ScoringConstants.TITLE_WEIGHT),
        ("summary", ScoringConstants.SUMMARY_WEIGHT),
        ("content", ScoringConstants.CONTENT_WEIGHT),
    )

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        analyzer: Optional[SemanticAnalyzer] = None,
        *,
        use_semantic: bool = True,
        negation_factor: float = ScoringConstants.NEGATION_FACTOR,
        negation_shift: float = ScoringConstants.NEGATION_SHIFT,
        double_negation_damping: float = ScoringConstants.DOUBLE_NEGATION_DAMPING,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.lexicon = lexicon or default_lexicon()
        self.analyzer = (analyzer or SemanticAnalyzer()) if use_semantic else None
        self.negation_factor = negation_factor
        self.negation_shift = negation_shift
        self.double_negation_damping = double_negation_damping
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.adjustment_factor = 1.0
        self.base_threshold = ScoringConstants.BASE_THRESHOLD

        self._compile()

    def _compile(self):
        lex = self.lexicon
        self._terms = [(e, term_pattern(e.term, inflect=True)) for e in lex.entries]
        self._expressions = [(e, _marker_pattern(e.term)) for e in lex.expressions]
        self._intensifiers = [_marker_pattern(t) for t in lex.intensifiers]
        self._diminishers = [_marker_pattern(t) for t in lex.diminishers]
        self._negation_exceptions = [_marker_pattern(t) for t in lex.negation.exceptions]

        neg = lex.negation
        particles = "|".join(
            re.escape(p) if p.endswith("'") else rf"{re.escape(p)}(?!\w)"
            for p in sorted(neg.particles, key=len, reverse=True)
        )
        negation_words = sorted(set(neg.forclusives) | set(neg.standalone), key=len, reverse=True)
        alternation = "|".join(re.escape(w) for w in negation_words)
        self._negation = re.compile(
            rf"(?<!\w)(?:(?P<particle>{particles})|(?P<word>(?:{alternation})(?!\w)))",
            re.IGNORECASE,
        )
        self._forclusives = {w.lower() for w in neg.forclusives}
        self._standalone = {w.lower() for w in neg.standalone}

        self._nuance_patterns: Dict[str, List[Pattern]] = {
            name: [_marker_pattern(m) for m in markers]
            for name, markers in vars(lex.nuances).items()
        }

    # --- Public API ---------------------------------------------------------

    def score(self, article: Article) -> SentimentResult:
        """Score one article."""
        sections = [
            (name, normalize_apostrophes(getattr(article, name, "") or ""), weight)
            for name, weight in self.SECTION_WEIGHTS
        ]
        sections = [(name, text, weight) for name, text, weight in sections if not is_blank(text)]
        if not sections:
            return SentimentResult.neutral()

        full_text = " ".join(text for _, text, _ in sections)

        positive = negative = 0.0
        section_evidence: Dict[str, float] = {}
        emotions: List[str] = []
        for name, text, weight in sections:
            scores = self.lexical_scores(text)
            positive += scores.positive * weight
            negative += scores.negative * weight
            section_evidence[name] = scores.evidence * weight
            for term in scores.terms:
                if term not in emotions:
                    emotions.append(term)

        nuances = self.detect_nuances(full_text)
        positive, negative = self._apply_nuances(positive, negative, nuances)

        base_score = (positive - negative) / max(1.0, positive + negative)

        semantic = self.analyzer.analyze(full_text) if self.analyzer else SemanticAnalysis.empty()
        boost = self.semantic_boost(semantic, base_score)

        score = clamp(base_score * boost.score_multiplier * self.adjustment_factor, -1.0, 1.0)

        confidence = self._evidence_confidence(positive, negative) * boost.confidence_multiplier
        if UNCERTAINTY in nuances:
            confidence *= ScoringConstants.UNCERTAINTY_CONFIDENCE
        if AMBIVALENCE in nuances:
            confidence *= ScoringConstants.AMBIVALENCE_CONFIDENCE
        confidence = clamp(confidence, 0.0, 1.0)

        complexity = self.linguistic_complexity(full_text)
        total_evidence = sum(section_evidence.values())

        def share(name: str) -> float:
            return section_evidence.get(name, 0.0) / total_evidence if total_evidence else 0.0

        factors = ContextualFactors(
            title_weight=share("title"),
            summary_weight=share("summary"),
            content_weight=share("content"),
            temporal_relevance=self.temporal_relevance(article.publish_date),
            linguistic_complexity=complexity,
            semantic_entities=len(semantic.entities),
            semantic_density=semantic.semantic_density,
        )

        return SentimentResult(
            sentiment=self.label(score, confidence, nuances),
            score=score,
            confidence=confidence,
            intensity=self.intensity(score, complexity),
            emotions=emotions[:ScoringConstants.MAX_EMOTIONS],
            contextual_factors=factors,
            nuances=nuances,
        )

    def score_text(self, text: str) -> SentimentResult:
        """Score a bare string as article content."""
        if is_blank(text):
            return SentimentResult.neutral()
        return self.score(Article(id="", title="", content=text))

    def apply_calibration(self, calibration: CalibrationResult) -> bool:
        """Adopt a calibration's factor and threshold. Returns False if it was not calibrated."""
        if not calibration.is_calibrated:
            logger.info("Calibration not applied: validator is not calibrated")
            return False
        self.adjustment_factor = calibration.adjustment_factor
        self.base_threshold = calibration.recommended_threshold
        logger.info(
            f"Calibration applied: factor={self.adjustment_factor:.2f}, "
            f"threshold={self.base_threshold:.3f}"
        )
        return True

    # --- Lexical scan -------------------------------------------------------

    def count_negations(self, text: str) -> int:
        """Count negations in a stretch of text.

        "ne ... pas" is one negation; forclusives following a completed
        "ne" construction are negative concord and do not add another one.
        """
        count = 0
        pending_particles = 0
        in_concord = False
        for m in self._negation.finditer(text):
            if m.group("particle"):
                pending_particles += 1
                continue
            word = m.group("word").lower()
            if word in self._forclusives and pending_particles:
                pending_particles -= 1
                count += 1
                in_concord = True
            elif word in self._forclusives and in_concord:
                continue
            elif word in self._standalone:
                count += 1
                in_concord = word in self._forclusives
        return count

    def _find_matches(self, text: str, sentences: List[Span]) -> Tuple[List[TermMatch], List[Span]]:
        def sentence_of(pos: int) -> int:
            for i, (s, e) in enumerate(sentences):
                if s <= pos < e:
                    return i
            return max(0, len(sentences) - 1)

        found: List[TermMatch] = []
        expression_spans: List[Span] = []
        for entry, pattern in self._expressions:
            for m in pattern.finditer(text):
                if any(s < m.end() and m.start() < e for s, e in expression_spans):
                    continue
                expression_spans.append(m.span())
                found.append(TermMatch(entry, m.start(), m.end(), sentence_of(m.start()), entry.weight))

        masked = mask_spans(text, expression_spans)
        candidates = []
        for entry, pattern in self._terms:
            for m in pattern.finditer(masked):
                candidates.append((m.start(), -(m.end() - m.start()), -len(entry.term), entry, m.end()))
        # longest match wins on overlap, then the most specific entry ("mauvaise" over "mauvais" + e)
        candidates.sort(key=lambda c: (c[0], c[1], c[2]))
        taken: List[Span] = []
        for start, _, _, entry, end in candidates:
            if any(s < end and start < e for s, e in taken):
                continue
            taken.append((start, end))
            found.append(TermMatch(entry, start, end, sentence_of(start), entry.weight))

        found.sort(key=lambda t: t.start)
        return found, expression_spans

    def positional_weight(self, start: int, length: int) -> float:
        if length <= 0:
            return ScoringConstants.MIDDLE_POSITION_WEIGHT
        rel = start / length
        if rel < 0.2 or rel >= 0.8:
            return ScoringConstants.EDGE_POSITION_WEIGHT
        if rel < 0.4 or rel >= 0.6:
            return ScoringConstants.NEAR_EDGE_POSITION_WEIGHT
        return ScoringConstants.MIDDLE_POSITION_WEIGHT

    def lexical_scores(self, text: str) -> LexicalScores:
        """Scan one section: lexicon hits, local modifiers, position, sentence negation."""
        if is_blank(text):
            return LexicalScores()
        text = normalize_apostrophes(text).lower()
        sentences = sentence_spans(text)
        matches, expression_spans = self._find_matches(text, sentences)
        if not matches:
            return LexicalScores()

        exception_spans = [m.span() for p in self._negation_exceptions for m in p.finditer(text)]
        negation_text = mask_spans(text, expression_spans + exception_spans)
        window = ScoringConstants.MODIFIER_WINDOW

        for match in matches:
            s_start, s_end = sentences[match.sentence] if sentences else (0, len(text))
            left = negation_text[max(s_start, match.start - window):match.start]
            right = negation_text[match.end:min(s_end, match.end + window)]
            context = f"{left} {right}"

            magnitude = match.entry.weight
            if any(p.search(context) for p in self._intensifiers):
                magnitude *= ScoringConstants.INTENSIFIER_MULTIPLIER
            if any(p.search(context) for p in self._diminishers):
                magnitude *= ScoringConstants.DIMINISHER_MULTIPLIER

            local_negations = self.count_negations(context)
            if local_negations % 2 == 1:
                match.locally_negated = True
                magnitude *= self.negation_factor
            elif local_negations:
                magnitude *= 1 - self.double_negation_damping

            magnitude *= self.positional_weight(match.start, len(text))
            match.assign(match.effective_polarity, magnitude)

        self._adjust_sentence_negation(matches, sentences, negation_text)

        return LexicalScores(
            positive=sum(m.positive_part for m in matches),
            negative=sum(m.negative_part for m in matches),
            matches=matches,
        )

    def _adjust_sentence_negation(self, matches: List[TermMatch], sentences: List[Span], negation_text: str):
        """Re-read whole sentences for negations the local window missed.

        An odd count moves part of the untouched contributions across
        polarity. An even count is a double negation: contributions the local
        window inverted get their original polarity back, damped.
        """
        by_sentence: Dict[int, List[TermMatch]] = {}
        for m in matches:
            by_sentence.setdefault(m.sentence, []).append(m)

        for idx, sentence_matches in by_sentence.items():
            s, e = sentences[idx] if sentences else (0, len(negation_text))
            negations = self.count_negations(negation_text[s:e])
            if not negations:
                continue
            if negations % 2 == 1:
                for m in sentence_matches:
                    if m.locally_negated:
                        continue
                    moved = m.magnitude * self.negation_shift
                    if m.entry.polarity == SentimentLabel.POSITIVE:
                        m.positive_part, m.negative_part = m.magnitude - moved, moved
                    else:
                        m.positive_part, m.negative_part = moved, m.magnitude - moved
            else:
                for m in sentence_matches:
                    if not m.locally_negated:
                        continue
                    restored = m.magnitude / self.negation_factor * (1 - self.double_negation_damping)
                    m.locally_negated = False
                    m.assign(m.entry.polarity, restored)

    # --- Nuances, boost, confidence ----------------------------------------

    def _has(self, nuance: str, text: str) -> bool:
        return any(p.search(text) for p in self._nuance_patterns.get(nuance, []))

    def detect_nuances(self, text: str) -> List[str]:
        """Irony, ambivalence, urgency, uncertainty, sarcasm and empathy markers."""
        text = normalize_apostrophes(text or "")
        nuances = []
        irony = self._has("irony_patterns", text) and self._has("irony_clues", text)
        if irony:
            nuances.append(IRONY)
        if self._has("ambivalence", text):
            nuances.append(AMBIVALENCE)
        if self._has("urgency", text):
            nuances.append(URGENCY)
        if self._has("uncertainty", text):
            nuances.append(UNCERTAINTY)
        if irony and (self._has("escalation", text) or self._has("contradiction", text)):
            nuances.append(SARCASM)
        if self._has("empathy", text):
            nuances.append(EMPATHY)
        return nuances

    def _apply_nuances(self, positive: float, negative: float, nuances: List[str]) -> Tuple[float, float]:
        if IRONY in nuances:
            swap = ScoringConstants.IRONY_SWAP
            positive, negative = (
                positive * (1 - swap) + negative * swap,
                negative * (1 - swap) + positive * swap,
            )
        if AMBIVALENCE in nuances:
            positive *= ScoringConstants.AMBIVALENCE_DAMPING
            negative *= ScoringConstants.AMBIVALENCE_DAMPING
        return positive, negative

    def semantic_boost(self, semantic: SemanticAnalysis, base_score: float) -> SemanticBoost:
        """Turn entities, topic agreement and relations into bounded multipliers."""
        score_multiplier = 1.0
        confidence_multiplier = 1.0

        for entity in semantic.entities:
            if (entity.type in (EntityType.PERSON, EntityType.ORGANIZATION)
                    and entity.confidence >= ScoringConstants.ENTITY_BOOST_MIN_CONFIDENCE):
                score_multiplier += ScoringConstants.ENTITY_BOOST

        if base_score:
            dominant = [t.dominant_sentiment for t in semantic.topic_sentiments
                        if t.dominant_sentiment != SentimentLabel.NEUTRAL]
            pos_topics = dominant.count(SentimentLabel.POSITIVE)
            neg_topics = dominant.count(SentimentLabel.NEGATIVE)
            if pos_topics != neg_topics:
                agrees = (pos_topics > neg_topics) == (base_score > 0)
                step = ScoringConstants.TOPIC_AGREEMENT_BOOST
                score_multiplier *= (1 + step) if agrees else (1 - step)

        strong = [r for r in semantic.relations if r.strength > ScoringConstants.RELATION_STRENGTH_THRESHOLD]
        if strong:
            confidence_multiplier += min(
                ScoringConstants.RELATION_CONFIDENCE_CAP,
                ScoringConstants.RELATION_CONFIDENCE_STEP * len(strong),
            )
            pos_rel = sum(1 for r in strong if r.sentiment == SentimentLabel.POSITIVE)
            neg_rel = sum(1 for r in strong if r.sentiment == SentimentLabel.NEGATIVE)
            high, low = max(pos_rel, neg_rel), min(pos_rel, neg_rel)
            if base_score and high > 0 and high >= 2 * low and pos_rel != neg_rel:
                agrees = (pos_rel > neg_rel) == (base_score > 0)
                step = ScoringConstants.RELATION_SCORE_BOOST
                score_multiplier *= (1 + step) if agrees else (1 - step)

        confidence_multiplier += ScoringConstants.DENSITY_CONFIDENCE_BOOST * semantic.semantic_density

        return SemanticBoost(
            score_multiplier=clamp(score_multiplier, *ScoringConstants.SCORE_MULTIPLIER_RANGE),
            confidence_multiplier=clamp(confidence_multiplier, *ScoringConstants.CONFIDENCE_MULTIPLIER_RANGE),
        )

    def _evidence_confidence(self, positive: float, negative: float) -> float:
        evidence = positive + negative
        if evidence <= 0:
            return 0.0
        volume = min(1.0, evidence / ScoringConstants.EVIDENCE_SATURATION)
        agreement = abs(positive - negative) / evidence
        return ScoringConstants.EVIDENCE_SHARE * volume + ScoringConstants.AGREEMENT_SHARE * agreement

    # --- Labels and descriptors --------------------------------------------

    def threshold(self, confidence: float, nuances: List[str]) -> float:
        urgency = ScoringConstants.URGENCY_THRESHOLD_BOOST if URGENCY in nuances else 0.0
        return self.base_threshold - confidence * ScoringConstants.CONFIDENCE_THRESHOLD_SLOPE + urgency

    def label(self, score: float, confidence: float, nuances: List[str]) -> SentimentLabel:
        threshold = self.threshold(confidence, nuances)
        if abs(score) <= threshold:
            return SentimentLabel.NEUTRAL
        return SentimentLabel.POSITIVE if score > 0 else SentimentLabel.NEGATIVE

    def intensity(self, score: float, complexity: float) -> Intensity:
        magnitude = abs(score)
        if magnitude > ScoringConstants.HIGH_INTENSITY - complexity * ScoringConstants.HIGH_INTENSITY_COMPLEXITY:
            return Intensity.HIGH
        if magnitude > ScoringConstants.MEDIUM_INTENSITY - complexity * ScoringConstants.MEDIUM_INTENSITY_COMPLEXITY:
            return Intensity.MEDIUM
        return Intensity.LOW

    def linguistic_complexity(self, text: str) -> float:
        """Mean of normalized word length, sentence length and lexical diversity."""
        tokens = words(text)
        if not tokens:
            return 0.0
        avg_word = sum(len(t) for t in tokens) / len(tokens)
        avg_sentence = len(tokens) / max(1, len(split_sentences(text)))
        diversity = len(set(tokens)) / len(tokens)
        return clamp((min(avg_word / 10, 1.0) + min(avg_sentence / 30, 1.0) + diversity) / 3, 0.0, 1.0)

    def temporal_relevance(self, publish_date: Optional[datetime]) -> float:
        """Halves every week of age, counted in whole days."""
        if publish_date is None:
            return 1.0
        if publish_date.tzinfo is None:
            publish_date = publish_date.replace(tzinfo=timezone.utc)
        age_days = max(0, math.floor((self._clock() - publish_date).total_seconds() / 86400))
        relevance = 0.5 ** (age_days / ScoringConstants.RECENCY_HALF_LIFE_DAYS)
        return max(ScoringConstants.MIN_TEMPORAL_RELEVANCE, relevance)
