"""Named-entity, relation and topic extraction for French news text."""

import logging
import re
from typing import Dict, List, Optional, Pattern, Tuple

from .constants import SemanticConstants
from .lexicon import CAPITALIZED_WORD, Gazetteer, term_pattern
from .models import (
    EntityType,
    SemanticAnalysis,
    SemanticEntity,
    SemanticRelation,
    SentimentLabel,
    TopicSentiment,
)
from ..utils.text import is_blank, normalize_apostrophes, split_sentences, word_count, words

logger = logging.getLogger(__name__)

Span = Tuple[int, int]


def _exact_pattern(name: str) -> Pattern:
    return re.compile(rf"(?<!\w){re.escape(name)}(?!\w)")


def _contained(span: Span, others: List[Span]) -> bool:
    """True if span lies inside a strictly longer span of others."""
    s, e = span
    return any(os <= s and e <= oe and (oe - os) > (e - s) for os, oe in others)


class SemanticAnalyzer:
    """Extracts entities, relations, topic sentiment and key phrases.

    Stateless between calls: every ``analyze`` recomputes from scratch and
    entities carry no identity across texts.
    """

    def __init__(self, gazetteer: Optional[Gazetteer] = None):
        self.gazetteer = gazetteer or Gazetteer()
        g = self.gazetteer

        titles = "|".join(re.escape(t) for t in sorted(g.person_titles, key=len, reverse=True))
        self._titled_person = re.compile(
            rf"(?i:(?<!\w)(?:{titles}))\s+({CAPITALIZED_WORD}(?:\s+{CAPITALIZED_WORD})*)"
        )
        self._full_name = re.compile(rf"\b({CAPITALIZED_WORD}\s+{CAPITALIZED_WORD})\b")
        self._title_terms = [term_pattern(t) for t in g.person_titles]
        self._indicators = [term_pattern(i) for i in g.person_indicators]

        self._places = [(name, _exact_pattern(name)) for name in g.places]
        self._organizations = [(name, _exact_pattern(name)) for name in g.organizations]
        self._place_regexes = [re.compile(p) for p in g.place_patterns]
        self._org_regexes = [re.compile(p) for p in g.organization_patterns]

        self._topics: Dict[str, List[Tuple[str, Pattern]]] = {
            topic: [(kw, term_pattern(kw, inflect=True)) for kw in keywords]
            for topic, keywords in g.topics.items()
        }
        self._connectives = {
            SentimentLabel(polarity): [t.lower() for t in terms]
            for polarity, terms in g.connectives.items()
        }
        self._sentence_positive = {w.lower() for w in g.sentence_polarity.get("positive", [])}
        self._sentence_negative = {w.lower() for w in g.sentence_polarity.get("negative", [])}
        self._important = [term_pattern(w, inflect=True) for w in g.important_words]
        self._common_phrases = {p.lower() for p in g.common_phrases}
        self._stopwords = {w.lower() for w in g.stopwords}
        self._known_names = {n.lower() for n in g.places + g.organizations}
        self._title_words = {t.lower() for t in g.person_titles}

    def analyze(self, text: str) -> SemanticAnalysis:
        """Full semantic pass over a text."""
        if is_blank(text):
            return SemanticAnalysis.empty()
        text = normalize_apostrophes(text)

        entities = self.extract_entities(text)
        relations = self.extract_relations(text, entities)
        topic_sentiments = self.analyze_topic_sentiments(text, entities)
        key_phrases = self.extract_key_phrases(text)
        density = self.semantic_density(text, entities)

        logger.debug(
            f"Semantic analysis: {len(entities)} entities, {len(relations)} relations, "
            f"{len(topic_sentiments)} topics, density={density:.2f}"
        )
        return SemanticAnalysis(
            entities=entities,
            relations=relations,
            topic_sentiments=topic_sentiments,
            key_phrases=key_phrases,
            semantic_density=density,
        )

    # --- Entities -----------------------------------------------------------

    def extract_entities(self, text: str) -> List[SemanticEntity]:
        entities: List[SemanticEntity] = []
        entities.extend(self._extract_persons(text))
        places, organizations = self._extract_places_and_organizations(text)
        entities.extend(places)
        entities.extend(organizations)
        entities.extend(self._extract_topics(text))
        entities.sort(key=lambda e: e.confidence, reverse=True)
        return entities[:SemanticConstants.MAX_ENTITIES]

    def _context(self, text: str, start: int, end: int) -> str:
        radius = SemanticConstants.CONTEXT_RADIUS
        return text[max(0, start - radius):min(len(text), end + radius)]

    def _is_likely_person(self, context: str) -> bool:
        return any(p.search(context) for p in self._indicators)

    def _is_common(self, name: str) -> bool:
        lowered = name.lower()
        first = lowered.split()[0]
        return (
            lowered in self._common_phrases
            or lowered in self._known_names
            or lowered in self._stopwords
            or first in self._stopwords
            or first in self._title_words
        )

    def _extract_persons(self, text: str) -> List[SemanticEntity]:
        persons: Dict[str, SemanticEntity] = {}
        titled_spans: List[Span] = []

        # (a) title + capitalized name
        for m in self._titled_person.finditer(text):
            name = m.group(1).strip()
            if len(name) <= 2 or name.lower() in self._stopwords:
                continue
            titled_spans.append(m.span(1))
            context = self._context(text, *m.span(1))
            existing = persons.get(name)
            if existing:
                existing.mentions += 1
                existing.contexts.append(context)
                existing.confidence = min(1.0, existing.confidence + SemanticConstants.REPEAT_MENTION_BOOST)
            else:
                persons[name] = SemanticEntity(
                    name=name,
                    type=EntityType.PERSON,
                    confidence=SemanticConstants.TITLED_PERSON_CONFIDENCE,
                    mentions=1,
                    contexts=[context],
                )

        # (b) bare "Prénom Nom", kept only near an attribution verb
        for m in self._full_name.finditer(text):
            name = m.group(1)
            start, end = m.span(1)
            if any(s <= start < e or s < end <= e for s, e in titled_spans):
                continue
            if self._is_common(name):
                continue
            context = self._context(text, start, end)
            if not self._is_likely_person(context):
                continue
            existing = persons.get(name)
            if existing:
                existing.mentions += 1
                existing.contexts.append(context)
            else:
                persons[name] = SemanticEntity(
                    name=name,
                    type=EntityType.PERSON,
                    confidence=SemanticConstants.NAMED_PERSON_CONFIDENCE,
                    mentions=1,
                    contexts=[context],
                )

        return list(persons.values())

    def _extract_places_and_organizations(self, text: str) -> Tuple[List[SemanticEntity], List[SemanticEntity]]:
        hits: List[Tuple[str, EntityType, Span]] = []
        for name, pattern in self._places:
            hits.extend((name, EntityType.PLACE, m.span()) for m in pattern.finditer(text))
        for name, pattern in self._organizations:
            hits.extend((name, EntityType.ORGANIZATION, m.span()) for m in pattern.finditer(text))

        # "France" inside "Air France" belongs to the longer name
        all_spans = [span for _, _, span in hits]
        found: Dict[Tuple[EntityType, str], SemanticEntity] = {}
        for name, etype, span in hits:
            if _contained(span, all_spans):
                continue
            entity = found.get((etype, name))
            if entity:
                entity.mentions += 1
            else:
                found[(etype, name)] = SemanticEntity(
                    name=name,
                    type=etype,
                    confidence=SemanticConstants.GAZETTEER_CONFIDENCE,
                    mentions=1,
                    contexts=[self._context(text, *span)],
                )

        for regexes, etype in ((self._place_regexes, EntityType.PLACE), (self._org_regexes, EntityType.ORGANIZATION)):
            for pattern in regexes:
                for m in pattern.finditer(text):
                    name = m.group(0).strip()
                    if (etype, name) in found or _contained(m.span(), all_spans):
                        continue
                    if any(e.name.lower() == name.lower() for e in found.values()):
                        continue
                    found[(etype, name)] = SemanticEntity(
                        name=name,
                        type=etype,
                        confidence=SemanticConstants.PATTERN_CONFIDENCE,
                        mentions=1,
                        contexts=[self._context(text, *m.span())],
                    )

        places = [e for (etype, _), e in found.items() if etype == EntityType.PLACE]
        organizations = [e for (etype, _), e in found.items() if etype == EntityType.ORGANIZATION]
        return places, organizations

    def _extract_topics(self, text: str) -> List[SemanticEntity]:
        topics = []
        for topic, keywords in self._topics.items():
            mentions = 0
            contexts = []
            for _, pattern in keywords:
                matches = list(pattern.finditer(text))
                mentions += len(matches)
                if matches:
                    contexts.append(self._context(text, *matches[0].span()))
            if mentions > 0:
                confidence = min(
                    1.0,
                    mentions * SemanticConstants.TOPIC_MENTION_STEP + SemanticConstants.TOPIC_BASE_CONFIDENCE,
                )
                topics.append(SemanticEntity(
                    name=topic,
                    type=EntityType.TOPIC,
                    confidence=confidence,
                    mentions=mentions,
                    contexts=contexts[:SemanticConstants.MAX_TOPIC_CONTEXTS],
                ))
        return topics

    # --- Relations ----------------------------------------------------------

    def _locate(self, sentence: str, entity: SemanticEntity) -> Optional[Span]:
        """Span of the entity's first mention in a sentence (topics via their keywords)."""
        if entity.type == EntityType.TOPIC:
            spans = [m.span() for _, p in self._topics.get(entity.name, []) for m in [p.search(sentence)] if m]
            return min(spans) if spans else None
        idx = sentence.lower().find(entity.name.lower())
        if idx == -1:
            return None
        return idx, idx + len(entity.name)

    def extract_relations(self, text: str, entities: List[SemanticEntity]) -> List[SemanticRelation]:
        relations: List[SemanticRelation] = []
        for sentence in split_sentences(text):
            located = []
            for entity in entities:
                span = self._locate(sentence, entity)
                if span:
                    located.append((span, entity))
            if len(located) < 2:
                continue

            for i in range(len(located) - 1):
                for j in range(i + 1, len(located)):
                    (span_a, a), (span_b, b) = sorted((located[i], located[j]), key=lambda x: x[0])
                    if span_b[0] < span_a[1]:
                        continue  # overlapping mentions
                    between = sentence[span_a[1]:span_b[0]].lower()
                    predicate, sentiment, strength = self._relation_sentiment(between)
                    relations.append(SemanticRelation(
                        subject=a.name,
                        predicate=predicate,
                        object=b.name,
                        sentiment=sentiment,
                        strength=strength,
                    ))
        return relations[:SemanticConstants.MAX_RELATIONS]

    def _relation_sentiment(self, between: str) -> Tuple[str, SentimentLabel, float]:
        for polarity in (SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE):
            for term in self._connectives.get(polarity, []):
                if term in between:
                    return term, polarity, SemanticConstants.CONNECTIVE_RELATION_STRENGTH
        return (
            SemanticConstants.DEFAULT_PREDICATE,
            SentimentLabel.NEUTRAL,
            SemanticConstants.DEFAULT_RELATION_STRENGTH,
        )

    # --- Topic sentiment ----------------------------------------------------

    def _sentence_polarity(self, sentence: str) -> int:
        score = 0
        for w in words(sentence):
            if w in self._sentence_positive:
                score += 1
            elif w in self._sentence_negative:
                score -= 1
        return score

    def analyze_topic_sentiments(self, text: str, entities: List[SemanticEntity]) -> List[TopicSentiment]:
        results = []
        sentences = split_sentences(text)
        others = [e for e in entities if e.type != EntityType.TOPIC]

        for topic in (e for e in entities if e.type == EntityType.TOPIC):
            positive = negative = neutral = 0
            related: List[str] = []
            for sentence in sentences:
                if self._locate(sentence, topic) is None:
                    continue
                polarity = self._sentence_polarity(sentence)
                if polarity > 0:
                    positive += 1
                elif polarity < 0:
                    negative += 1
                else:
                    neutral += 1
                lowered = sentence.lower()
                for entity in others:
                    if entity.name.lower() in lowered and entity.name not in related:
                        related.append(entity.name)

            dominant = SentimentLabel.NEUTRAL
            if positive > negative and positive > neutral:
                dominant = SentimentLabel.POSITIVE
            elif negative > positive and negative > neutral:
                dominant = SentimentLabel.NEGATIVE

            results.append(TopicSentiment(
                topic=topic.name,
                positive=positive,
                negative=negative,
                neutral=neutral,
                dominant_sentiment=dominant,
                related_entities=related[:SemanticConstants.MAX_RELATED_ENTITIES],
            ))
        return results

    # --- Key phrases / density ---------------------------------------------

    def phrase_importance(self, sentence: str) -> float:
        score = 0.0
        n_words = len(sentence.split())
        if SemanticConstants.KEY_PHRASE_MIN_WORDS <= n_words <= SemanticConstants.KEY_PHRASE_MAX_WORDS:
            score += 0.3
        if any(p.search(sentence) for p in self._title_terms):
            score += 0.4
        if any(p.search(sentence) for _, p in self._places):
            score += 0.3
        score += 0.2 * sum(1 for p in self._important if p.search(sentence))
        return min(score, 1.0)

    def extract_key_phrases(self, text: str) -> List[str]:
        phrases = []
        for sentence in split_sentences(text):
            sentence = sentence.strip()
            if len(sentence) > SemanticConstants.MIN_KEY_PHRASE_CHARS:
                phrases.append((sentence, self.phrase_importance(sentence)))
        phrases.sort(key=lambda p: p[1], reverse=True)
        return [p for p, _ in phrases[:SemanticConstants.MAX_KEY_PHRASES]]

    def semantic_density(self, text: str, entities: List[SemanticEntity]) -> float:
        n_words = word_count(text)
        if n_words == 0:
            return 0.0
        mentions = sum(e.mentions for e in entities)
        mention_density = mentions / n_words
        diversity = len(entities) / max(mentions, 1)
        return min(mention_density * 2 + diversity * 0.5, 1.0)
