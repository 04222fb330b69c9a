"""Constants and configuration values for NewsPulse."""

# Sentiment Scoring Constants
class ScoringConstants:
    """Constants related to lexical sentiment scoring."""

    # Lexicon band weights
    STRONG_WEIGHT = 3.0
    MODERATE_WEIGHT = 2.0
    WEAK_WEIGHT = 1.0
    EXPRESSION_WEIGHT = 2.5  # idiomatic contextual expressions

    # Local modifiers
    INTENSIFIER_MULTIPLIER = 1.7
    DIMINISHER_MULTIPLIER = 0.6
    NEGATION_FACTOR = 0.8  # local contribution multiplied by -NEGATION_FACTOR
    NEGATION_SHIFT = 0.4  # fraction of a negated sentence moved across polarity
    DOUBLE_NEGATION_DAMPING = 0.2  # loss applied when a double negation reinstates polarity
    MODIFIER_WINDOW = 50  # chars on each side of a match

    # Section weights
    TITLE_WEIGHT = 3.0
    SUMMARY_WEIGHT = 2.0
    CONTENT_WEIGHT = 1.0

    # Positional weights (edge band first)
    EDGE_POSITION_WEIGHT = 1.3
    NEAR_EDGE_POSITION_WEIGHT = 1.1
    MIDDLE_POSITION_WEIGHT = 1.0

    # Label threshold
    BASE_THRESHOLD = 0.12
    CONFIDENCE_THRESHOLD_SLOPE = 0.08
    URGENCY_THRESHOLD_BOOST = 0.05

    # Intensity bands
    HIGH_INTENSITY = 0.55
    HIGH_INTENSITY_COMPLEXITY = 0.1
    MEDIUM_INTENSITY = 0.25
    MEDIUM_INTENSITY_COMPLEXITY = 0.05

    # Nuances
    IRONY_SWAP = 0.7
    AMBIVALENCE_DAMPING = 0.8
    AMBIVALENCE_CONFIDENCE = 0.7
    UNCERTAINTY_CONFIDENCE = 0.9

    # Semantic boost
    ENTITY_BOOST = 0.05
    ENTITY_BOOST_MIN_CONFIDENCE = 0.8
    TOPIC_AGREEMENT_BOOST = 0.1
    RELATION_STRENGTH_THRESHOLD = 0.6
    RELATION_CONFIDENCE_STEP = 0.02
    RELATION_CONFIDENCE_CAP = 0.1
    RELATION_SCORE_BOOST = 0.05
    DENSITY_CONFIDENCE_BOOST = 0.1
    SCORE_MULTIPLIER_RANGE = (0.8, 1.3)
    CONFIDENCE_MULTIPLIER_RANGE = (0.9, 1.2)

    # Confidence
    EVIDENCE_SATURATION = 8.0  # total weight at which evidence confidence saturates
    EVIDENCE_SHARE = 0.6
    AGREEMENT_SHARE = 0.4

    # Output
    MAX_EMOTIONS = 10
    RECENCY_HALF_LIFE_DAYS = 7.0
    MIN_TEMPORAL_RELEVANCE = 0.1


# Semantic Analysis Constants
class SemanticConstants:
    """Constants for entity, relation and key-phrase extraction."""

    TITLED_PERSON_CONFIDENCE = 0.8
    NAMED_PERSON_CONFIDENCE = 0.6
    REPEAT_MENTION_BOOST = 0.1
    GAZETTEER_CONFIDENCE = 0.9
    PATTERN_CONFIDENCE = 0.7
    TOPIC_BASE_CONFIDENCE = 0.5
    TOPIC_MENTION_STEP = 0.1

    MAX_ENTITIES = 25
    MAX_RELATIONS = 30
    MAX_KEY_PHRASES = 5
    MAX_TOPIC_CONTEXTS = 3
    MAX_RELATED_ENTITIES = 5

    CONTEXT_RADIUS = 100  # chars around an entity mention
    DEFAULT_PREDICATE = "associé à"
    DEFAULT_RELATION_STRENGTH = 0.5
    CONNECTIVE_RELATION_STRENGTH = 0.7

    MIN_KEY_PHRASE_CHARS = 10
    KEY_PHRASE_MIN_WORDS = 8
    KEY_PHRASE_MAX_WORDS = 25


# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""

    CACHE_TTL_HOURS = 24  # cache time-to-live in hours
    MAX_CACHE_SIZE = 10000
    CLEANUP_HIGH_WATER = 0.8  # purge oldest entries while above this share of max
    CLEANUP_EVICT_SHARE = 0.2
    CACHE_KEY_LENGTH = 8  # length of cache key for logging
    HASH_PREFIX_CHARS = 200  # normalized chars fed to the key hash
    PERSIST_KEY = "newspulse_sentiment_cache"
    PERSIST_MAX_AGE_DAYS = 7
    PERSIST_MAX_BYTES = 5 * 1024 * 1024


# Validation Constants
class ValidationConstants:
    """Constants for validation, consistency and calibration."""

    SIMILARITY_THRESHOLD = 0.3
    DEFAULT_COHERENCE = 0.8
    DEFAULT_TEMPORAL_CONSISTENCY = 0.8
    DEFAULT_SOURCE_CONSISTENCY = 0.7
    DEFAULT_TOPIC_CONSISTENCY = 0.75
    TEMPORAL_VARIANCE_K = 1.0
    SOURCE_VARIANCE_K = 2.0
    TOPIC_VARIANCE_K = 1.5
    MIN_SOURCE_GROUP = 3

    MIN_CALIBRATION_RUNS = 3
    CALIBRATION_WINDOW = 10
    DEFAULT_THRESHOLD = 0.15
    DEFAULT_QUALITY = 0.5
    CALIBRATED_QUALITY = 0.7
    TREND_WINDOW = 5
    TREND_SLOPE = 0.02
    HISTORY_SIZE = 100

    # Grade cut-offs, best first
    GRADES = (("A", 0.9), ("B", 0.8), ("C", 0.7), ("D", 0.6))


# Aggregation Constants
class AggregationConstants:
    """Constants for regional, trend and keyword rollups."""

    TREND_DAYS = 7
    MAX_KEYWORDS = 10
    MAX_KEYWORD_ROWS = 15
    MAX_RECENT_ARTICLES = 5
    DOMINANT_MARGIN = 0.1


# File and Path Constants
class FileConstants:
    """Constants for file operations."""

    CACHE_DIR = ".cache/newspulse"  # cache directory
    CONFIG_FILE = ".env.example"  # configuration template file
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
