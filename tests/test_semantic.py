"""Tests for semantic analysis."""

import pytest

from newspulse.core.lexicon import Gazetteer
from newspulse.core.models import EntityType, SentimentLabel
from newspulse.core.semantic import SemanticAnalyzer


def _by_name(entities):
    return {e.name: e for e in entities}


class TestEntityExtraction:
    """Person, place, organization and topic extractors."""

    def setup_method(self):
        self.analyzer = SemanticAnalyzer()

    def test_empty_text(self):
        analysis = self.analyzer.analyze("   ")
        assert analysis.entities == []
        assert analysis.relations == []
        assert analysis.semantic_density == 0.0

    def test_titled_person(self):
        entities = _by_name(self.analyzer.extract_entities("Le ministre Bruno Martin visite l'usine."))
        assert "Bruno Martin" in entities
        assert entities["Bruno Martin"].type == EntityType.PERSON
        assert entities["Bruno Martin"].confidence == 0.8

    def test_repeat_mentions_raise_confidence(self):
        text = "Le maire Jean Dupont parle. Plus tard, le maire Jean Dupont repart."
        person = _by_name(self.analyzer.extract_entities(text))["Jean Dupont"]
        assert person.mentions == 2
        assert person.confidence == pytest.approx(0.9)

    def test_bare_name_needs_attribution_verb(self):
        with_verb = _by_name(self.analyzer.extract_entities("Claire Moreau déclare que le projet avance."))
        without_verb = _by_name(self.analyzer.extract_entities("Claire Moreau et le projet avancent."))
        assert with_verb["Claire Moreau"].confidence == 0.6
        assert "Claire Moreau" not in without_verb

    def test_common_phrase_is_not_a_person(self):
        entities = _by_name(self.analyzer.extract_entities("Le Monde affirme que la situation change."))
        assert "Le Monde" not in entities or entities["Le Monde"].type != EntityType.PERSON

    def test_gazetteer_places_and_organizations(self):
        entities = _by_name(self.analyzer.extract_entities("La SNCF annonce des travaux à Lyon."))
        assert entities["SNCF"].type == EntityType.ORGANIZATION
        assert entities["SNCF"].confidence == 0.9
        assert entities["Lyon"].type == EntityType.PLACE

    def test_longer_name_wins(self):
        entities = _by_name(self.analyzer.extract_entities("Air France renforce ses vols."))
        assert "Air France" in entities
        assert "France" not in entities

    def test_pattern_organization(self):
        entities = _by_name(self.analyzer.extract_entities("Le Syndicat Agricole proteste."))
        assert entities["Syndicat Agricole"].confidence == 0.7

    def test_topics(self):
        entities = _by_name(self.analyzer.extract_entities("Le gouvernement prépare une élection."))
        politics = entities["politics"]
        assert politics.type == EntityType.TOPIC
        assert politics.mentions == 2
        assert politics.confidence == pytest.approx(0.7)

    def test_entities_sorted_and_capped(self):
        text = " ".join(f"Le ministre Nom{chr(97 + i)} parle." for i in range(26))
        entities = self.analyzer.extract_entities(text)
        assert len(entities) == 25
        confidences = [e.confidence for e in entities]
        assert confidences == sorted(confidences, reverse=True)

    def test_custom_gazetteer(self):
        analyzer = SemanticAnalyzer(Gazetteer(places=["Quimper"], organizations=[], topics={}))
        entities = _by_name(analyzer.extract_entities("Il pleut à Quimper et à Lyon."))
        assert "Quimper" in entities
        assert "Lyon" not in entities


class TestRelations:
    """Pairwise relations within sentences."""

    def setup_method(self):
        self.analyzer = SemanticAnalyzer()

    def test_default_predicate(self):
        analysis = self.analyzer.analyze("La SNCF et la RATP se réunissent à Paris.")
        assert analysis.relations
        relation = next(r for r in analysis.relations if {r.subject, r.object} == {"SNCF", "RATP"})
        assert relation.predicate == "associé à"
        assert relation.sentiment == SentimentLabel.NEUTRAL
        assert relation.strength == 0.5

    def test_connective_sets_sentiment(self):
        analysis = self.analyzer.analyze("Renault critique Peugeot.")
        relation = analysis.relations[0]
        assert relation.subject == "Renault"
        assert relation.object == "Peugeot"
        assert relation.sentiment == SentimentLabel.NEGATIVE
        assert relation.strength == 0.7

    def test_single_entity_sentence_has_no_relation(self):
        analysis = self.analyzer.analyze("Renault ferme une usine. Peugeot recrute.")
        assert analysis.relations == []


class TestTopicsAndPhrases:
    """Topic sentiment, key phrases and density."""

    def setup_method(self):
        self.analyzer = SemanticAnalyzer()

    def test_topic_dominant_sentiment(self):
        text = "Le gouvernement annonce un succès. Le gouvernement salue le progrès."
        topics = {t.topic: t for t in self.analyzer.analyze(text).topic_sentiments}
        assert topics["politics"].positive == 2
        assert topics["politics"].dominant_sentiment == SentimentLabel.POSITIVE

    def test_topic_tie_is_neutral(self):
        text = "Le gouvernement annonce un succès. Le gouvernement subit un échec."
        topics = {t.topic: t for t in self.analyzer.analyze(text).topic_sentiments}
        assert topics["politics"].dominant_sentiment == SentimentLabel.NEUTRAL

    def test_key_phrases_prefer_informative_sentences(self):
        text = (
            "Il pleut. "
            "Le ministre annonce une nouvelle réforme importante pour les habitants de Lyon cette année."
        )
        phrases = self.analyzer.analyze(text).key_phrases
        assert phrases[0].startswith("Le ministre annonce")
        assert "Il pleut" not in phrases

    def test_phrase_importance_capped(self):
        sentence = "Le ministre annonce à Paris une décision et une mesure pour la première réforme nationale."
        assert self.analyzer.phrase_importance(sentence) == 1.0

    def test_density_bounds(self):
        analysis = self.analyzer.analyze("La SNCF, la RATP et EDF à Paris.")
        assert 0.0 < analysis.semantic_density <= 1.0
