"""
Keyword and sentence extraction over encyclopedia extracts.

All functions are pure. Sentence extractors return None when nothing
matches so derived fields stay absent.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

SHORT_DESCRIPTION_LIMIT = 200
MAX_CATEGORIES = 5
MAX_ACTIVITIES = 6

CULTURAL_KEYWORDS = (
    "cultural",
    "religious",
    "spiritual",
    "sacred",
    "traditional",
    "heritage",
    "ritual",
    "ceremony",
    "pilgrimage",
    "worship",
    "tribal",
    "indigenous",
    "ancient",
    "mythology",
    "legend",
)

HISTORICAL_KEYWORDS = (
    "built",
    "constructed",
    "founded",
    "established",
    "century",
    "empire",
    "dynasty",
    "king",
    "ruler",
    "battle",
    "war",
    "colonial",
    "independence",
    "historical",
    "ancient",
)

VISIT_TIME_PATTERN = re.compile(r"(best time|visit|season|month|weather|climate)", re.I)
ACCESS_PATTERN = re.compile(r"(access|reach|transport|road|railway|airport)", re.I)

CATEGORY_ACTIVITIES: Dict[str, Tuple[str, ...]] = {
    "tourist attractions": ("Sightseeing", "Photography"),
    "national parks": ("Wildlife viewing", "Nature walks", "Hiking"),
    "temples": ("Spiritual visits", "Architecture viewing"),
    "forts": ("Historical tours", "Photography"),
    "museums": ("Educational tours", "Cultural exploration"),
    "beaches": ("Swimming", "Sunbathing", "Water sports"),
    "mountains": ("Trekking", "Climbing", "Scenic views"),
    "waterfalls": ("Nature viewing", "Photography", "Swimming"),
}

TEXT_ACTIVITIES: Dict[str, str] = {
    "trek": "Trekking",
    "hik": "Hiking",
    "climb": "Climbing",
    "swim": "Swimming",
    "photograph": "Photography",
    "wildlife": "Wildlife viewing",
    "bird": "Bird watching",
    "adventure": "Adventure sports",
    "meditation": "Meditation",
    "yoga": "Yoga",
    "festival": "Cultural festivals",
}

MAINTENANCE_CATEGORY_PREFIXES = ("CS1", "Articles")


def split_sentences(text: str) -> List[str]:
    """Split text on full stops, dropping blank fragments."""
    return [sentence for sentence in text.split(".") if sentence.strip()]


def create_short_description(extract: str) -> str:
    """
    Build a short description from the first two sentences.

    Args:
        extract: Full plain-text extract

    Returns:
        At most SHORT_DESCRIPTION_LIMIT characters, ellipsis-truncated
    """
    if not extract or not extract.strip():
        return "No description available"

    short = ".".join(split_sentences(extract)[:2]).strip()
    if len(short) > SHORT_DESCRIPTION_LIMIT:
        return short[: SHORT_DESCRIPTION_LIMIT - 3] + "..."
    return short + "."


def _first_sentence_with(text: str, keywords: Iterable[str]) -> Optional[str]:
    for sentence in split_sentences(text):
        lower = sentence.lower()
        if any(keyword in lower for keyword in keywords):
            return sentence.strip() + "."
    return None


def _first_sentence_matching(text: str, pattern: re.Pattern) -> Optional[str]:
    for sentence in split_sentences(text):
        if pattern.search(sentence):
            return sentence.strip() + "."
    return None


def extract_cultural_significance(text: str) -> Optional[str]:
    """First sentence mentioning religious, ritual or heritage terms."""
    return _first_sentence_with(text, CULTURAL_KEYWORDS)


def extract_historical_context(text: str) -> Optional[str]:
    """First sentence mentioning founding, era or dynasty terms."""
    return _first_sentence_with(text, HISTORICAL_KEYWORDS)


def extract_visiting_info(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Find visiting guidance.

    Args:
        text: Full extract

    Returns:
        (best time to visit, accessibility), each None if not found
    """
    return (
        _first_sentence_matching(text, VISIT_TIME_PATTERN),
        _first_sentence_matching(text, ACCESS_PATTERN),
    )


def extract_activities(text: str, categories: List[str]) -> List[str]:
    """
    Collect activities from categories and text keywords.

    Args:
        text: Full extract
        categories: Cleaned category names

    Returns:
        Up to MAX_ACTIVITIES activities in discovery order
    """
    activities: Dict[str, None] = {}

    for category in categories:
        lower_category = category.lower()
        for key, names in CATEGORY_ACTIVITIES.items():
            if key in lower_category:
                activities.update(dict.fromkeys(names))

    lower_text = text.lower()
    for keyword, name in TEXT_ACTIVITIES.items():
        if keyword in lower_text:
            activities[name] = None

    return list(activities)[:MAX_ACTIVITIES]


def clean_categories(raw_categories: Iterable[str]) -> List[str]:
    """
    Strip the category namespace and drop maintenance categories.

    Args:
        raw_categories: Category titles such as "Category:Forts in India"

    Returns:
        Up to MAX_CATEGORIES display names
    """
    cleaned = (title.replace("Category:", "") for title in raw_categories)
    return [
        title for title in cleaned if not title.startswith(MAINTENANCE_CATEGORY_PREFIXES)
    ][:MAX_CATEGORIES]
