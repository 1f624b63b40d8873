"""
Static keyword responder used when no provider can answer.

Rules are checked in order and the first one with a keyword present in the
message wins. Keywords match whole words, case-insensitively.
"""
from __future__ import annotations

import re
from typing import List, Sequence, Tuple

FallbackRule = Tuple[Sequence[str], str]

FALLBACK_RULES: List[FallbackRule] = [
    (
        ("cramp", "cramps", "pain", "ache", "hurts"),
        "Period cramps are very common. A warm compress on your lower belly, gentle "
        "stretching, light exercise and staying hydrated can help. If the pain is severe "
        "or stops you from doing daily activities, please talk to a doctor.",
    ),
    (
        ("pad", "pads", "tampon", "tampons", "cup", "hygiene", "clean"),
        "Change pads every 4-6 hours and tampons every 4-8 hours, even on light days. "
        "Menstrual cups can be worn up to 12 hours and should be washed well between uses. "
        "Wash your hands before and after changing, and rinse the outer area with plain water.",
    ),
    (
        ("irregular", "late", "missed", "delayed", "cycle"),
        "Cycles between 21 and 35 days are considered typical, and some variation is "
        "normal, especially in the first years after periods start. Stress, sleep and "
        "weight changes can shift your cycle. If your periods are often irregular or "
        "stop for months, it's a good idea to see a healthcare provider.",
    ),
    (
        ("mood", "sad", "angry", "anxious", "irritable", "pms", "stress", "stressed"),
        "Mood changes before and during your period are common and you're not alone. "
        "Rest, regular meals, movement and talking to someone you trust can help. If "
        "these feelings are overwhelming, please reach out to a counselor or doctor.",
    ),
    (
        ("heavy", "bleeding", "clots", "flow"),
        "Flow varies from person to person. If you soak through a pad or tampon every "
        "hour for several hours, pass large clots, or bleed longer than 7 days, please "
        "see a doctor.",
    ),
    (
        ("hi", "hello", "hey", "namaste"),
        "Hello! I'm here to help with questions about periods, hygiene and "
        "emotional wellbeing. What would you like to know?",
    ),
]

DEFAULT_FALLBACK_REPLY = (
    "I'm having trouble reaching my knowledge service right now, but I'm still here for you. "
    "You can ask me about period pain, hygiene products, irregular cycles or mood changes. "
    "For serious or persistent symptoms, please consult a healthcare provider."
)


def _compile(rules: Sequence[FallbackRule]) -> List[Tuple[re.Pattern[str], str]]:
    compiled = []
    for keywords, reply in rules:
        alternation = "|".join(re.escape(k) for k in keywords)
        compiled.append((re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE), reply))
    return compiled


_COMPILED_RULES = _compile(FALLBACK_RULES)


def fallback_reply(message: str) -> str:
    """Return the canned reply for the first rule whose keyword appears in ``message``."""
    for pattern, reply in _COMPILED_RULES:
        if pattern.search(message):
            return reply
    return DEFAULT_FALLBACK_REPLY
