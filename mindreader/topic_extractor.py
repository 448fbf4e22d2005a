"""
Topic identification as an ordered chain of strategies.

Each strategy takes the text and returns a topic or None; the first topic
wins. The last strategy always answers.
"""

import re
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional, Tuple

from loguru import logger

from .errors import TopicExtractionFailure
from .prompts import get_main_topic_prompt

FALLBACK_TOPIC = "unknown topic"

STOP_WORDS = frozenset({
    'i', 'me', 'my', 'myself', 'we', 'our', 'ours', 'ourselves', 'you', 'your', 'yours',
    'yourself', 'yourselves', 'he', 'him', 'his', 'himself', 'she', 'her', 'hers',
    'herself', 'it', 'its', 'itself', 'they', 'them', 'their', 'theirs', 'themselves',
    'what', 'which', 'who', 'whom', 'this', 'that', 'these', 'those', 'am', 'is', 'are',
    'was', 'were', 'be', 'been', 'being', 'have', 'has', 'had', 'having', 'do', 'does',
    'did', 'doing', 'a', 'an', 'the', 'and', 'but', 'if', 'or', 'because', 'as', 'until',
    'while', 'of', 'at', 'by', 'for', 'with', 'about', 'against', 'between', 'into',
    'through', 'during', 'before', 'after', 'above', 'below', 'up', 'down', 'in', 'out',
    'on', 'off', 'over', 'under', 'again', 'further', 'then', 'once', 'here', 'there',
    'when', 'where', 'why', 'how', 'all', 'any', 'both', 'each', 'few', 'more', 'most',
    'other', 'some', 'such', 'no', 'nor', 'not', 'only', 'own', 'same', 'so', 'than',
    'too', 'very', 's', 't', 'can', 'will', 'just', 'don', 'should', 'now', 'yes',
})

# Cue phrases boosting the word they introduce, with their weight
TOPIC_INDICATORS: List[Tuple[re.Pattern, int]] = [
    (re.compile(r"(?:i am (?:objectively )?talking about)\s+(?:the\s+)?(\w+)", re.IGNORECASE), 10),
    (re.compile(r"(?:this is about|it is about)\s+(?:the\s+)?(\w+)", re.IGNORECASE), 8),
    (re.compile(r"(?:i (?:like|love|prefer))\s+(?:the\s+)?(\w+)", re.IGNORECASE), 6),
    (re.compile(r"(?:talking about|discussing|mentioning)\s+(?:the\s+)?(\w+)", re.IGNORECASE), 5),
    (re.compile(r"(?:so i like)\s+(?:the\s+)?(\w+)", re.IGNORECASE), 7),
]

# Ordered most to least explicit; earlier patterns score higher
TOPIC_PATTERNS: List[re.Pattern] = [re.compile(p, re.IGNORECASE) for p in (
    # explicit statements
    r"(?:i am (?:objectively )?talking about (?:the )?)(\w+)",
    r"(?:this is about (?:the )?)(\w+)",
    r"(?:the main (?:thing|topic|subject) is (?:the )?)(\w+)",
    r"(?:let me tell you about (?:the )?)(\w+)",
    # preference
    r"(?:i (?:like|love|prefer) (?:the )?)(\w+)",
    r"(?:my favorite (?:is )?(?:the )?)(\w+)",
    # descriptive
    r"(?:the )(\w+)(?: is| are| was| were) (?:very|really|so|quite)",
    r"(?:this )(\w+)(?: is| was)",
    # emphasis
    r"(?:yes\.? (?:this|that|it) is (?:a )?(?:very )?(?:the )?)(\w+)",
    r"(?:so i like (?:the )?)(\w+)",
)]

_NON_WORD = re.compile(r"[^\w\s]")


class TopicExtraction(NamedTuple):
    topic: str
    strategy: str


def tokenize(text: str, min_length: int) -> List[str]:
    """Lower-cased words longer than `min_length`, stop words removed."""
    words = _NON_WORD.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > min_length and w not in STOP_WORDS]


def _is_candidate(word: str) -> bool:
    return len(word) > 2 and word not in STOP_WORDS


def _best(scores: Dict[str, int]) -> str:
    # max() keeps the first of equal scores, i.e. the earliest seen word
    return max(scores.items(), key=lambda item: item[1])[0]


def topic_by_frequency(text: str) -> Optional[str]:
    scores: Dict[str, int] = {}
    for word in tokenize(text, 2):
        scores[word] = scores.get(word, 0) + 1

    for pattern, weight in TOPIC_INDICATORS:
        for match in pattern.finditer(text):
            word = match.group(1).lower()
            if _is_candidate(word):
                scores[word] = scores.get(word, 0) + weight

    frequent = {word: score for word, score in scores.items() if score >= 2}
    return _best(frequent) if frequent else None


def topic_by_patterns(text: str) -> Optional[str]:
    scores: Dict[str, int] = {}
    for rank, pattern in enumerate(TOPIC_PATTERNS):
        weight = len(TOPIC_PATTERNS) - rank
        for match in pattern.finditer(text):
            word = match.group(1).strip().lower()
            if _is_candidate(word):
                scores[word] = scores.get(word, 0) + weight
    return _best(scores) if scores else None


def fallback_topic(text: str) -> str:
    words = tokenize(text, 3)
    return words[0] if words else FALLBACK_TOPIC


def parse_ai_topic(reply: str) -> Optional[str]:
    """Accept a model reply only if it is 1-3 words."""
    words = reply.strip().lower().split()
    if 0 < len(words) <= 3:
        return " ".join(words)
    return None


LOCAL_STRATEGIES: List[Tuple[str, Callable[[str], Optional[str]]]] = [
    ("frequency", topic_by_frequency),
    ("pattern", topic_by_patterns),
    ("fallback", fallback_topic),
]


def extract_local_topic(text: str) -> TopicExtraction:
    """Run the strategies that need no external service."""
    for name, strategy in LOCAL_STRATEGIES:
        topic = strategy(text)
        if topic:
            logger.info(f"{name} strategy topic: {topic!r}")
            return TopicExtraction(topic, name)
    return TopicExtraction(FALLBACK_TOPIC, "fallback")


class TopicExtractor:
    """
    Full chain: AI first, then the local strategies.

    `generate` is an async callable prompt -> reply; None disables the AI
    strategy.
    """
    def __init__(self, generate: Optional[Callable[[str], Awaitable[str]]] = None):
        self.generate = generate

    async def ai_topic(self, text: str) -> Optional[str]:
        if self.generate is None:
            return None
        try:
            reply = await self.generate(get_main_topic_prompt(text))
        except TopicExtractionFailure as e:
            logger.warning(f"AI topic strategy failed: {e}")
            return None
        return parse_ai_topic(reply or "")

    async def extract(self, text: str) -> TopicExtraction:
        logger.info(f"Topic extraction input: {text[:200]!r}")
        topic = await self.ai_topic(text)
        if topic:
            logger.info(f"ai strategy topic: {topic!r}")
            return TopicExtraction(topic, "ai")
        return extract_local_topic(text)
