"""French lexicons, gazetteers and taxonomies used by the analyzers.

Everything here is plain data. The scorer and the semantic analyzer receive a
``Lexicon`` / ``Gazetteer`` at construction, so tests can hand them a tiny
vocabulary and deployments can override the defaults from a YAML file.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Union

import yaml

from .constants import ScoringConstants
from .exceptions import LexiconError
from .models import SentimentLabel

logger = logging.getLogger(__name__)


class LexiconBand(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    EXPRESSION = "expression"


BAND_WEIGHTS: Dict[LexiconBand, float] = {
    LexiconBand.STRONG: ScoringConstants.STRONG_WEIGHT,
    LexiconBand.MODERATE: ScoringConstants.MODERATE_WEIGHT,
    LexiconBand.WEAK: ScoringConstants.WEAK_WEIGHT,
    LexiconBand.EXPRESSION: ScoringConstants.EXPRESSION_WEIGHT,
}


# --- Sentiment vocabulary ---------------------------------------------------

POSITIVE_TERMS = {
    "strong": [
        "victoire", "triomphe", "exceptionnel", "exceptionnelle", "excellent", "excellente",
        "remarquable", "extraordinaire", "formidable", "magnifique", "exploit", "prouesse",
        "succès", "réussite", "brillant", "brillante", "spectaculaire", "percée", "essor",
        "boom", "renaissance",
    ],
    "moderate": [
        "croissance", "amélioration", "progrès", "innovation", "hausse", "augmentation",
        "progression", "bénéfice", "profit", "gain", "développement", "expansion",
        "performance", "record", "favorable", "positif", "positive", "soutien", "espoir",
        "optimisme", "reprise", "relance", "avancée", "satisfaction", "fierté", "joie",
        "bonheur", "sauvetage",
    ],
    "weak": [
        "bon", "bonne", "utile", "stable", "calme", "encourageant", "encourageante",
        "prometteur", "prometteuse", "aide", "intéressant", "intéressante", "apaisé",
    ],
}

NEGATIVE_TERMS = {
    "strong": [
        "catastrophe", "catastrophique", "désastre", "drame", "tragédie", "tragique", "mort",
        "décès", "massacre", "attentat", "guerre", "crise", "effondrement", "scandale",
        "faillite", "meurtre", "violence", "terrorisme", "échec",
    ],
    "moderate": [
        "problème", "difficulté", "chute", "baisse", "diminution", "récession",
        "licenciement", "corruption", "fraude", "menace", "danger", "conflit", "tension",
        "accident", "inquiétude", "crainte", "colère", "grève", "pénurie", "perte",
        "déficit", "chômage", "polémique", "recul", "déception", "défaite",
    ],
    "weak": [
        "risque", "mauvais", "mauvaise", "mal", "négatif", "négative", "défavorable",
        "faible", "incertitude", "retard", "critique", "regret", "préoccupation", "souci",
        "ralentissement", "tristesse",
    ],
}

CONTEXTUAL_EXPRESSIONS = {
    "positive": [
        "bonne nouvelle", "coup de pouce", "bond en avant", "feu vert", "pas mal",
        "vent en poupe", "sur la bonne voie", "en bonne voie", "coup de maître",
        "haut la main", "tirer son épingle du jeu", "à bras ouverts",
    ],
    "negative": [
        "coup dur", "douche froide", "mauvaise nouvelle", "sonnette d'alarme",
        "pas terrible", "tourne au vinaigre", "dans l'impasse", "au point mort",
        "coup de massue", "bras de fer", "feu rouge", "en berne", "à la dérive",
    ],
}

INTENSIFIERS = [
    "très", "extrêmement", "particulièrement", "vraiment", "totalement", "complètement",
    "absolument", "incroyablement", "énormément", "terriblement", "hautement", "fortement",
    "considérablement", "profondément", "tellement", "vivement", "massivement",
]

DIMINISHERS = [
    "peu", "légèrement", "un peu", "plutôt", "quelque peu", "modérément", "relativement",
    "faiblement", "à peine", "partiellement", "moyennement",
]

NEGATION = {
    # "ne"/"n'" pair with the next forclusive to form one negation
    "particles": ["ne", "n'"],
    "forclusives": [
        "pas", "plus", "jamais", "rien", "point", "guère", "aucun", "aucune", "personne",
        "nullement",
    ],
    # counted on their own when no particle is pending
    "standalone": ["pas", "jamais", "non", "sans", "ni", "aucun", "aucune", "aucunement", "nullement"],
    # fixed phrases that look negative but are not
    "exceptions": ["sans doute", "sans délai", "sans cesse", "non seulement", "pas mal", "pas terrible"],
}

NUANCE_MARKERS = {
    "irony_patterns": [
        "quelle surprise", "bien sûr", "évidemment", "comme c'est étonnant", "vraiment génial",
        "magnifique", "formidable",
    ],
    "irony_clues": ["hélas", "malheureusement", "encore une fois", "comme toujours"],
    # "a...b" means both parts, in that order
    "ambivalence": [
        "à la fois", "d'un côté...de l'autre", "certes...mais", "bien que", "malgré",
        "paradoxalement", "contradiction", "dilemme",
    ],
    "urgency": [
        "urgent", "urgence", "immédiat", "immédiatement", "rapidement", "tout de suite",
        "sans délai", "alerte",
    ],
    "uncertainty": ["peut-être", "probablement", "sans doute", "il semblerait", "on dit que", "incertain"],
    "escalation": ["encore", "toujours", "décidément", "vraiment"],
    "contradiction": ["mais", "cependant", "pourtant", "hélas"],
    "empathy": ["comprendre", "compatir", "solidarité", "soutien", "accompagner"],
}


# --- Semantic vocabulary ----------------------------------------------------

PERSON_TITLES = [
    "président", "présidente", "ministre", "premier ministre", "première ministre",
    "secrétaire d'état", "maire", "gouverneur", "ambassadeur", "ambassadrice", "consul",
    "préfet", "préfète", "directeur", "directrice", "pdg", "ceo", "dg", "professeur",
    "professeure", "docteur", "maître", "avocat", "avocate", "capitaine", "colonel",
    "générale", "général", "amiral", "amirale", "député", "députée", "sénateur", "sénatrice",
    "commissaire", "porte-parole", "chef", "responsable", "leader", "patron", "patronne",
]

PERSON_INDICATORS = [
    "dit", "déclare", "affirme", "explique", "précise", "ajoute", "annonce", "estime",
    "souligne", "selon", "monsieur", "madame", "mme", "m.",
]

FRENCH_PLACES = [
    "Paris", "Lyon", "Marseille", "Toulouse", "Nice", "Nantes", "Strasbourg", "Montpellier",
    "Bordeaux", "Lille", "Rennes", "Reims", "Le Havre", "Saint-Étienne", "Toulon", "Grenoble",
    "Dijon", "Angers", "Nîmes", "Villeurbanne", "Saint-Denis", "Le Mans", "Aix-en-Provence",
    "Clermont-Ferrand", "Brest", "Limoges", "Tours", "Amiens", "Perpignan", "Metz", "Besançon",
    "France", "Europe", "Union européenne", "États-Unis", "Allemagne", "Italie", "Espagne",
    "Royaume-Uni", "Belgique", "Suisse", "Canada", "Japon", "Chine", "Île-de-France",
    "Provence-Alpes-Côte d'Azur", "Auvergne-Rhône-Alpes", "Nouvelle-Aquitaine", "Occitanie",
    "Hauts-de-France", "Grand Est", "Normandie", "Bretagne", "Pays de la Loire",
    "Centre-Val de Loire", "Bourgogne-Franche-Comté", "Corse", "Élysée", "Matignon",
    "Assemblée nationale", "Sénat", "Conseil constitutionnel",
]

FRENCH_ORGANIZATIONS = [
    "SNCF", "EDF", "Orange", "TotalEnergies", "Renault", "Peugeot", "Citroën", "Airbus",
    "Thales", "Safran", "Carrefour", "Auchan", "Leclerc", "BNP Paribas", "Crédit Agricole",
    "Société Générale", "Crédit Mutuel", "France Télévisions", "Radio France", "Arte", "Canal+",
    "TF1", "M6", "Le Figaro", "Le Monde", "Libération", "L'Express", "Le Point",
    "Université de la Sorbonne", "Sciences Po", "ENS", "CNRS", "INSERM", "Cour de cassation",
    "Conseil d'État", "UEFA", "FIFA", "Fédération française de football", "Roland-Garros",
    "Tour de France", "RATP", "Air France", "Michelin", "L'Oréal", "Danone", "Nestlé France",
]

_UPPER = "A-ZÀÁÂÄÈÉÊËÌÍÎÏÒÓÔÖÙÚÛÜÇ"
_LOWER = "a-zàáâäèéêëìíîïòóôöùúûüçœ"
CAPITALIZED_WORD = f"[{_UPPER}][{_LOWER}]+"

PLACE_PATTERNS = [
    rf"(?i:\brégion)\s+{CAPITALIZED_WORD}(?:-{CAPITALIZED_WORD})*",
    rf"(?i:\bdépartement\s+(?:d[eu]\s+)?){CAPITALIZED_WORD}(?:-{CAPITALIZED_WORD})*",
    rf"\b{CAPITALIZED_WORD}(?:-{CAPITALIZED_WORD})*(?=\s*\(\d{{2,3}}\))",
]

ORGANIZATION_PATTERNS = [
    rf"\bMinistère\s+(?:de\s+la\s+|de\s+l'|des\s+|du\s+|de\s+){CAPITALIZED_WORD}",
    rf"\bAgence\s+{CAPITALIZED_WORD}(?:\s+{CAPITALIZED_WORD})*",
    rf"\bFédération\s+{CAPITALIZED_WORD}(?:\s+{CAPITALIZED_WORD})*",
    rf"\bAssociation\s+{CAPITALIZED_WORD}(?:\s+{CAPITALIZED_WORD})*",
    rf"\bSyndicat\s+{CAPITALIZED_WORD}(?:\s+{CAPITALIZED_WORD})*",
    rf"\b{CAPITALIZED_WORD}\s+(?:SAS|SA|SARL|EURL|SNC)\b",
]

TOPIC_KEYWORDS = {
    "politics": [
        "politique", "gouvernement", "élection", "vote", "démocratie", "parlement", "député",
        "sénateur", "assemblée", "sénat", "municipales", "présidentielle", "législatives",
        "parti", "opposition", "majorité", "coalition", "réforme", "loi", "décret",
    ],
    "economy": [
        "économie", "économique", "finance", "entreprise", "emploi", "chômage", "croissance",
        "inflation", "récession", "bourse", "investissement", "industrie", "commerce",
        "export", "dette", "budget", "fiscal", "taxe", "impôt", "pib", "banque", "crédit",
    ],
    "health": [
        "santé", "médecine", "hôpital", "covid", "vaccin", "vaccination", "traitement",
        "médicament", "épidémie", "pandémie", "virus", "maladie", "médecin", "infirmier",
        "patient", "clinique", "sécurité sociale", "assurance maladie",
    ],
    "education": [
        "éducation", "école", "université", "formation", "enseignement", "professeur",
        "étudiant", "élève", "examen", "diplôme", "baccalauréat", "campus", "lycée",
        "collège", "éducation nationale",
    ],
    "environment": [
        "environnement", "climat", "climatique", "écologie", "pollution", "développement durable",
        "émission", "carbone", "réchauffement", "biodiversité", "énergie", "renouvelable",
        "solaire", "éolien", "nucléaire", "transition énergétique", "déchets", "recyclage",
    ],
    "technology": [
        "technologie", "intelligence artificielle", "ia", "numérique", "innovation", "startup",
        "internet", "application", "smartphone", "logiciel", "données", "algorithme",
        "robotique", "5g", "cybersécurité",
    ],
    "culture": [
        "culture", "cinéma", "film", "théâtre", "musique", "concert", "festival",
        "littérature", "livre", "roman", "exposition", "musée", "patrimoine", "spectacle",
        "opéra", "artiste",
    ],
    "sport": [
        "sport", "football", "rugby", "tennis", "basketball", "handball", "cyclisme",
        "jeux olympiques", "championnat", "match", "équipe", "joueur", "entraîneur",
        "médaille", "compétition",
    ],
    "international": [
        "international", "diplomatique", "diplomatie", "ambassade", "traité", "sommet", "g7",
        "g20", "otan", "onu", "brexit", "russie", "afrique", "asie", "coopération",
    ],
    "justice": [
        "justice", "tribunal", "procès", "juridique", "jugement", "juge", "magistrat",
        "condamnation", "acquittement", "cassation", "pénal", "enquête", "police",
        "gendarmerie", "crime", "délit",
    ],
}

RELATION_CONNECTIVES = {
    "positive": ["soutient", "aide", "collabore", "partenariat", "alliance", "coopération", "accord avec"],
    "negative": ["critique", "oppose", "conflit", "rivalité", "tension", "désaccord", "attaque"],
}

SENTENCE_POLARITY = {
    "positive": [
        "bon", "bien", "excellent", "succès", "victoire", "progrès", "amélioration",
        "croissance", "positif", "favorable",
    ],
    "negative": [
        "mauvais", "mal", "échec", "crise", "problème", "difficulté", "baisse", "chute",
        "négatif", "défavorable",
    ],
}

IMPORTANT_WORDS = ["annonce", "décision", "mesure", "réforme", "nouveau", "première"]

COMMON_PHRASES = [
    "Le Monde", "Le Figaro", "La France", "Les Français", "La République", "Un Homme",
    "Une Femme", "Tout Le", "Dans Le", "Pour La", "Selon Les",
]

STOPWORDS = [
    "le", "la", "les", "de", "des", "du", "et", "à", "un", "une", "il", "elle", "en", "que",
    "qui", "pour", "dans", "ce", "cette", "ces", "son", "sa", "ses", "sur", "avec", "ne",
    "se", "pas", "tout", "plus", "par", "ou", "mais", "donc", "or", "ni", "car", "lui",
    "nous", "vous", "sans", "sous", "vers", "entre", "au", "aux", "quoi",
]


# --- Typed structures -------------------------------------------------------

def term_pattern(term: str, inflect: bool = False) -> Pattern:
    """Compile a case-insensitive whole-word matcher for ``term``.

    With ``inflect`` the common French feminine/plural endings are accepted.
    """
    suffix = "(?:e|s|es|x)?" if inflect else ""
    return re.compile(rf"(?<!\w){re.escape(term.lower())}{suffix}(?!\w)", re.IGNORECASE)


@dataclass(frozen=True)
class LexiconEntry:
    """One weighted sentiment term."""
    term: str
    weight: float
    band: LexiconBand
    polarity: SentimentLabel


@dataclass
class NegationRules:
    particles: List[str]
    forclusives: List[str]
    standalone: List[str]
    exceptions: List[str] = field(default_factory=list)


@dataclass
class NuanceMarkers:
    irony_patterns: List[str] = field(default_factory=list)
    irony_clues: List[str] = field(default_factory=list)
    ambivalence: List[str] = field(default_factory=list)
    urgency: List[str] = field(default_factory=list)
    uncertainty: List[str] = field(default_factory=list)
    escalation: List[str] = field(default_factory=list)
    contradiction: List[str] = field(default_factory=list)
    empathy: List[str] = field(default_factory=list)


@dataclass
class Lexicon:
    """Vocabulary consumed by SentimentScorer."""
    entries: List[LexiconEntry]
    expressions: List[LexiconEntry]
    intensifiers: List[str]
    diminishers: List[str]
    negation: NegationRules
    nuances: NuanceMarkers

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["Lexicon"] = None) -> "Lexicon":
        """Build a lexicon from the YAML/dict shape; absent sections come from ``base``."""
        if not isinstance(data, dict):
            raise LexiconError("Lexicon document must be a mapping")
        base = base or default_lexicon()
        try:
            entries = list(base.entries)
            if "positive" in data or "negative" in data:
                entries = []
                for polarity in (SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE):
                    bands = data.get(polarity.value)
                    if bands is None:
                        entries.extend(e for e in base.entries if e.polarity == polarity)
                    else:
                        entries.extend(_tiered_entries(bands, polarity))

            expressions = list(base.expressions)
            if "expressions" in data:
                expressions = _expression_entries(data["expressions"] or {})

            negation = base.negation
            if "negation" in data:
                neg = data["negation"] or {}
                negation = NegationRules(
                    particles=list(neg.get("particles", base.negation.particles)),
                    forclusives=list(neg.get("forclusives", base.negation.forclusives)),
                    standalone=list(neg.get("standalone", base.negation.standalone)),
                    exceptions=list(neg.get("exceptions", base.negation.exceptions)),
                )

            nuances = base.nuances
            if "nuances" in data:
                merged = dict(vars(base.nuances))
                merged.update({k: list(v or []) for k, v in (data["nuances"] or {}).items()})
                nuances = NuanceMarkers(**merged)

            return cls(
                entries=entries,
                expressions=expressions,
                intensifiers=list(data.get("intensifiers", base.intensifiers)),
                diminishers=list(data.get("diminishers", base.diminishers)),
                negation=negation,
                nuances=nuances,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise LexiconError(f"Malformed lexicon section: {e}") from e


@dataclass
class Gazetteer:
    """Vocabulary consumed by SemanticAnalyzer."""
    person_titles: List[str] = field(default_factory=lambda: list(PERSON_TITLES))
    person_indicators: List[str] = field(default_factory=lambda: list(PERSON_INDICATORS))
    places: List[str] = field(default_factory=lambda: list(FRENCH_PLACES))
    organizations: List[str] = field(default_factory=lambda: list(FRENCH_ORGANIZATIONS))
    place_patterns: List[str] = field(default_factory=lambda: list(PLACE_PATTERNS))
    organization_patterns: List[str] = field(default_factory=lambda: list(ORGANIZATION_PATTERNS))
    topics: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in TOPIC_KEYWORDS.items()})
    connectives: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in RELATION_CONNECTIVES.items()})
    sentence_polarity: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in SENTENCE_POLARITY.items()})
    important_words: List[str] = field(default_factory=lambda: list(IMPORTANT_WORDS))
    common_phrases: List[str] = field(default_factory=lambda: list(COMMON_PHRASES))
    stopwords: List[str] = field(default_factory=lambda: list(STOPWORDS))


def _tiered_entries(bands: Dict[str, List[str]], polarity: SentimentLabel) -> List[LexiconEntry]:
    entries = []
    for band_name, terms in bands.items():
        band = LexiconBand(band_name)
        for term in terms or []:
            entries.append(LexiconEntry(term.lower(), BAND_WEIGHTS[band], band, polarity))
    return entries


def _expression_entries(groups: Dict[str, List[str]]) -> List[LexiconEntry]:
    entries = []
    for polarity_name, phrases in groups.items():
        polarity = SentimentLabel(polarity_name)
        for phrase in phrases or []:
            entries.append(LexiconEntry(
                phrase.lower(), BAND_WEIGHTS[LexiconBand.EXPRESSION], LexiconBand.EXPRESSION, polarity
            ))
    return entries


def default_lexicon() -> Lexicon:
    """The built-in French news lexicon."""
    return Lexicon(
        entries=(
            _tiered_entries(POSITIVE_TERMS, SentimentLabel.POSITIVE)
            + _tiered_entries(NEGATIVE_TERMS, SentimentLabel.NEGATIVE)
        ),
        expressions=_expression_entries(CONTEXTUAL_EXPRESSIONS),
        intensifiers=list(INTENSIFIERS),
        diminishers=list(DIMINISHERS),
        negation=NegationRules(**{k: list(v) for k, v in NEGATION.items()}),
        nuances=NuanceMarkers(**{k: list(v) for k, v in NUANCE_MARKERS.items()}),
    )


def load_lexicon(path: Union[str, Path]) -> Lexicon:
    """Load a lexicon YAML file, falling back to defaults for missing sections."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise LexiconError(f"Lexicon file not found: {path}", path=str(path)) from e
    except (OSError, yaml.YAMLError) as e:
        raise LexiconError(f"Failed to read lexicon file {path}: {e}", path=str(path)) from e

    lexicon = Lexicon.from_dict(data or {})
    logger.info(f"Loaded lexicon from {path}: {len(lexicon.entries)} terms, {len(lexicon.expressions)} expressions")
    return lexicon
