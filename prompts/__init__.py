# Prompts module initialization

# Study Content Prompts
from .study_prompts import (
    build_weekly_study_prompt,
    build_topic_exercises_prompt,
    build_practice_questions_prompt,
    build_reflection_questions_prompt,
    build_summary_prompt,
    build_recovery_verses_prompt,
    build_daily_missions_prompt,
    build_quiz_questions_prompt,
    build_bible_fact_prompt,
    build_daily_verse_prompt,
    build_bible_character_prompt,
    build_verse_memory_prompt,
    build_timed_quiz_prompt,
)

__all__ = [
    'build_weekly_study_prompt',
    'build_topic_exercises_prompt',
    'build_practice_questions_prompt',
    'build_reflection_questions_prompt',
    'build_summary_prompt',
    'build_recovery_verses_prompt',
    'build_daily_missions_prompt',
    'build_quiz_questions_prompt',
    'build_bible_fact_prompt',
    'build_daily_verse_prompt',
    'build_bible_character_prompt',
    'build_verse_memory_prompt',
    'build_timed_quiz_prompt',
]
