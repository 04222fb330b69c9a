"""Tests for lexicon loading."""

import pytest

from newspulse.core.exceptions import LexiconError
from newspulse.core.lexicon import LexiconBand, default_lexicon, load_lexicon, term_pattern
from newspulse.core.models import SentimentLabel
from newspulse.core.scoring import SentimentScorer


class TestLoadLexicon:

    def test_partial_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "lexicon.yaml"
        path.write_text(
            "positive:\n"
            "  strong: [Sublime]\n"
            "intensifiers: [hyper]\n",
            encoding="utf-8",
        )
        lexicon = load_lexicon(path)
        defaults = default_lexicon()

        positive = [e for e in lexicon.entries if e.polarity == SentimentLabel.POSITIVE]
        assert [e.term for e in positive] == ["sublime"]
        assert positive[0].band == LexiconBand.STRONG
        assert positive[0].weight == 3.0

        negative = [e for e in lexicon.entries if e.polarity == SentimentLabel.NEGATIVE]
        assert len(negative) == len([e for e in defaults.entries if e.polarity == SentimentLabel.NEGATIVE])
        assert lexicon.intensifiers == ["hyper"]
        assert lexicon.expressions == defaults.expressions
        assert lexicon.negation == defaults.negation

    def test_custom_lexicon_drives_scoring(self, tmp_path):
        path = tmp_path / "lexicon.yaml"
        path.write_text("positive:\n  strong: [sublime]\n", encoding="utf-8")
        scorer = SentimentScorer(load_lexicon(path), use_semantic=False)
        assert scorer.lexical_scores("Un spectacle sublime.").terms == ["sublime"]
        assert scorer.lexical_scores("Un succès.").positive == 0.0

    def test_empty_file_is_default(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_lexicon(path) == default_lexicon()

    def test_missing_file(self, tmp_path):
        with pytest.raises(LexiconError) as excinfo:
            load_lexicon(tmp_path / "absent.yaml")
        assert excinfo.value.path.endswith("absent.yaml")

    def test_list_document_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- succès\n- échec\n", encoding="utf-8")
        with pytest.raises(LexiconError):
            load_lexicon(path)

    def test_unknown_band_rejected(self, tmp_path):
        path = tmp_path / "band.yaml"
        path.write_text("negative:\n  enormous: [crise]\n", encoding="utf-8")
        with pytest.raises(LexiconError):
            load_lexicon(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("positive: [unclosed\n", encoding="utf-8")
        with pytest.raises(LexiconError):
            load_lexicon(path)


class TestTermPattern:

    def test_whole_word(self):
        pattern = term_pattern("mal")
        assert pattern.search("Il va mal.")
        assert not pattern.search("Un animal blessé.")

    def test_inflected(self):
        pattern = term_pattern("positif", inflect=True)
        assert pattern.search("des résultats positifs")
        assert pattern.search("POSITIF")
