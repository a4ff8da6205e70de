"""Static topic, exercise and scenario catalogs."""

from lingo_quest.models.content import ConversationScenario
from lingo_quest.models.session import LearningLevel

BEGINNER_TOPICS = ["introductions", "daily_routines", "hobbies", "food_dining", "family_friends"]
INTERMEDIATE_TOPICS = BEGINNER_TOPICS + [
    "travel", "shopping", "work_career", "health_fitness", "weather",
]
ADVANCED_TOPICS = INTERMEDIATE_TOPICS + [
    "entertainment", "education", "technology", "culture", "current_events",
]

TOPICS_BY_LEVEL: dict[LearningLevel, list[str]] = {
    LearningLevel.BEGINNER: BEGINNER_TOPICS,
    LearningLevel.INTERMEDIATE: INTERMEDIATE_TOPICS,
    LearningLevel.ADVANCED: ADVANCED_TOPICS,
}

TOPIC_DIFFICULTY: dict[str, int] = {
    "introductions": 1,
    "daily_routines": 2,
    "hobbies": 3,
    "food_dining": 3,
    "family_friends": 2,
    "travel": 5,
    "shopping": 4,
    "work_career": 6,
    "health_fitness": 5,
    "weather": 3,
    "entertainment": 6,
    "education": 7,
    "technology": 8,
    "culture": 7,
    "current_events": 9,
}

LEVEL_DIFFICULTY_MULTIPLIER: dict[LearningLevel, float] = {
    LearningLevel.BEGINNER: 0.8,
    LearningLevel.INTERMEDIATE: 1.0,
    LearningLevel.ADVANCED: 1.2,
}

# Skill score a learner should reach before leaving the level
LEVEL_SKILL_TARGET: dict[LearningLevel, int] = {
    LearningLevel.BEGINNER: 70,
    LearningLevel.INTERMEDIATE: 85,
    LearningLevel.ADVANCED: 95,
}

LEVEL_MAX_SCENARIO_DIFFICULTY: dict[LearningLevel, int] = {
    LearningLevel.BEGINNER: 4,
    LearningLevel.INTERMEDIATE: 7,
    LearningLevel.ADVANCED: 10,
}

SKILL_EXERCISES: dict[str, list[str]] = {
    "grammar": ["Sentence construction", "Verb conjugation", "Tense practice"],
    "vocabulary": ["Word association", "Flashcards", "Context usage"],
    "listening": ["Audio comprehension", "Dictation", "Podcast practice"],
    "speaking": ["Pronunciation drills", "Conversation practice", "Reading aloud"],
    "reading": ["Text comprehension", "Speed reading", "Vocabulary in context"],
    "writing": ["Essay practice", "Grammar exercises", "Creative writing"],
}

SCENARIOS: list[ConversationScenario] = [
    ConversationScenario(
        scenario="Coffee shop conversation",
        difficulty=3,
        skills_practiced=["speaking", "vocabulary"],
        description="Order coffee and have casual conversation",
    ),
    ConversationScenario(
        scenario="Travel planning discussion",
        difficulty=5,
        skills_practiced=["speaking", "vocabulary"],
        description="Discuss travel destinations and plans",
    ),
    ConversationScenario(
        scenario="Job interview preparation",
        difficulty=7,
        skills_practiced=["speaking", "grammar", "vocabulary"],
        description="Practice professional communication",
    ),
]


def topics_for_level(level: LearningLevel) -> list[str]:
    return TOPICS_BY_LEVEL.get(level, BEGINNER_TOPICS)


def topic_difficulty(topic: str, level: LearningLevel) -> int:
    base = TOPIC_DIFFICULTY.get(topic, 5)
    return min(10, round(base * LEVEL_DIFFICULTY_MULTIPLIER[level]))


def exercises_for_skill(skill: str) -> list[str]:
    return SKILL_EXERCISES.get(skill, ["General practice"])
