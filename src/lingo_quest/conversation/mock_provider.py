"""Deterministic offline tutor used without an API key or on provider failure."""

import re

import structlog
import textstat

from lingo_quest.models.assessment import (
    ConversationContext,
    ConversationReply,
    PerformanceMetrics,
)
from lingo_quest.progression.messages import Selector, first_option

logger = structlog.get_logger()

RESPONSES: dict[str, list[str]] = {
    "greeting": [
        "Hello! I'm excited to help you practice your language skills today. "
        "What would you like to talk about?",
        "Welcome back! Ready for another conversation practice session?",
        "Hi there! Let's start with some conversation practice. How are you feeling today?",
    ],
    "beginner": [
        "That's a great start! Let me help you with that. Try saying: 'I like to read books.'",
        "Good effort! Here's a simple way to say that: 'The weather is nice today.'",
        "You're doing well! Let's practice this phrase: 'How are you?'",
    ],
    "intermediate": [
        "Excellent progress! You could also express that by saying: "
        "'I find this topic quite fascinating.'",
        "Good use of vocabulary! Here's another way to phrase it: "
        "'That's an interesting perspective.'",
        "Nice work! Try using more descriptive language: "
        "'The sunset was absolutely breathtaking.'",
    ],
    "advanced": [
        "Impressive! Your language skills are quite sophisticated. "
        "Let's discuss the nuances of that expression.",
        "Excellent articulation! You might also consider using subjunctive mood in that context.",
        "Outstanding! Your grasp of idiomatic expressions is really developing well.",
    ],
    "correction": [
        "Small correction: Instead of saying that, try 'I am going to the store.'",
        "Good attempt! The correct form would be: 'She has been studying for hours.'",
        "Almost perfect! Just remember to use 'have' instead of 'has' in this case.",
    ],
    "encouragement": [
        "You're making excellent progress! Keep up the great work!",
        "Don't worry about mistakes - they're part of learning! You're doing fantastic!",
        "I can see real improvement in your language skills. Well done!",
    ],
}

SUGGESTIONS: dict[str, list[str]] = {
    "beginner": [
        "Try using more descriptive adjectives",
        "Practice using different sentence starters",
    ],
    "intermediate": [
        "Consider using more complex sentence structures",
        "Try incorporating idiomatic expressions",
    ],
    "advanced": [
        "Experiment with advanced grammatical constructions",
        "Use more sophisticated vocabulary choices",
    ],
}

CONVERSATION_TOPICS: dict[str, list[str]] = {
    "beginner": [
        "Introduce yourself and talk about your hobbies",
        "Describe your daily routine",
        "Talk about your favorite food",
        "Discuss the weather",
        "Share about your family",
    ],
    "intermediate": [
        "Discuss your travel experiences",
        "Talk about your career goals",
        "Share your opinion on technology",
        "Describe a memorable event",
        "Discuss cultural differences",
    ],
    "advanced": [
        "Debate environmental policies",
        "Analyze current global events",
        "Discuss philosophical concepts",
        "Examine social media's impact on society",
        "Explore future technology trends",
    ],
}

# misused form -> (correct form, verb)
IRREGULAR_VERB_ERRORS: dict[str, tuple[str, str]] = {
    "goed": ("went", "go"),
    "eated": ("ate", "eat"),
    "buyed": ("bought", "buy"),
    "thinked": ("thought", "think"),
    "runned": ("ran", "run"),
}

_GREETING_RE = re.compile(r"\b(hello|hi|hey)\b", re.IGNORECASE)
_HELP_RE = re.compile(r"\b(help|difficult)\b", re.IGNORECASE)
_LOWERCASE_I_RE = re.compile(r"(^|\s)i(\s|'|$)")
_TERMINAL_PUNCT_RE = re.compile(r"[.!?]$")
_LONG_WORD_RE = re.compile(r"\b\w{8,}\b")


def find_corrections(text: str) -> list[str]:
    """Heuristic corrections for common learner mistakes."""
    corrections = []
    if _LOWERCASE_I_RE.search(text):
        corrections.append("Remember to capitalize 'I' when referring to yourself")
    if text.strip() and not _TERMINAL_PUNCT_RE.search(text.strip()):
        corrections.append("Don't forget to end your sentence with punctuation")
    lowered = text.lower()
    for wrong, (right, verb) in IRREGULAR_VERB_ERRORS.items():
        if re.search(rf"\b{wrong}\b", lowered):
            corrections.append(f"Use '{right}' instead of '{wrong}' for past tense of '{verb}'")
    return corrections


class MockConversationProvider:
    """Canned per-level replies with heuristic corrections.

    Args:
        selector: Picks one reply from a bank; defaults to the first entry.
    """

    def __init__(self, selector: Selector | None = None):
        self.selector = selector or first_option

    def response_type(self, text: str, context: ConversationContext) -> str:
        if not context.history or _GREETING_RE.search(text):
            return "greeting"
        if _HELP_RE.search(text):
            return "encouragement"
        if find_corrections(text):
            return "correction"
        return context.level if context.level in RESPONSES else "intermediate"

    async def generate_reply(self, text: str, context: ConversationContext) -> ConversationReply:
        response_type = self.response_type(text, context)
        level = context.level if context.level in SUGGESTIONS else "advanced"
        return ConversationReply(
            text=self.selector(RESPONSES[response_type]),
            confidence=0.6,
            corrections=find_corrections(text),
            suggestions=list(SUGGESTIONS[level]),
            source="mock",
        )

    async def assess_performance(
        self, text: str, context: ConversationContext
    ) -> PerformanceMetrics:
        """Score a message from surface text statistics."""
        words = textstat.lexicon_count(text)
        corrections = find_corrections(text)
        has_punctuation = bool(_TERMINAL_PUNCT_RE.search(text.strip()))
        long_words = len(_LONG_WORD_RE.findall(text))
        try:
            reading_ease = textstat.flesch_reading_ease(text)
        except Exception:
            reading_ease = 60.0
        complexity = (100 - max(0.0, min(100.0, reading_ease))) / 10

        punctuation_bonus = 1 if has_punctuation else 0
        accuracy = 75 + 10 * punctuation_bonus - 8 * len(corrections) + min(10.0, words / 2)
        grammar = 70 + 15 * punctuation_bonus - 10 * len(corrections)

        metrics = PerformanceMetrics(
            accuracy=max(0.0, min(95.0, accuracy)),
            fluency=min(95.0, 60 + min(20.0, words * 2.0) + (10 if words > 5 else 0)),
            vocabulary=min(95.0, 65 + min(15.0, long_words * 5.0) + complexity),
            grammar=max(0.0, min(95.0, grammar)),
            # Text carries no audio signal
            pronunciation=80.0,
        )
        metrics.compute_overall()
        logger.debug("mock_assessment", words=words, overall=metrics.overall_score)
        return metrics

    async def conversation_topics(self, level: str) -> list[str]:
        return list(CONVERSATION_TOPICS.get(level, CONVERSATION_TOPICS["intermediate"]))
