"""Mock-анализ эмоций на основе тональности.

Это не классификатор: распределение по шести эмоциям строится из метки
тональности со случайным разбросом. Без переданного rng результат
недетерминирован.
"""
import random
from typing import Dict, List, Optional, Tuple

from .models import EmotionEntry

BASE_EMOTIONS: List[Tuple[str, str]] = [
    ("Joy", "😊"),
    ("Sadness", "😢"),
    ("Anger", "😠"),
    ("Fear", "😨"),
    ("Surprise", "😲"),
    ("Disgust", "🤢"),
]

# (min, max) для каждой эмоции; остальные 0
SCORE_RANGES: Dict[str, Dict[str, Tuple[float, float]]] = {
    "Positive": {
        "Joy": (0.6, 1.0),
        "Surprise": (0.2, 0.5),
    },
    "Negative": {
        "Sadness": (0.6, 1.0),
        "Anger": (0.2, 0.5),
        "Fear": (0.1, 0.3),
        "Disgust": (0.1, 0.3),
    },
    "Neutral": {
        "Joy": (0.0, 0.3),
        "Sadness": (0.0, 0.3),
        "Surprise": (0.1, 0.5),
    },
}

JITTER = 0.05


def derive_emotions(classification: str, rng: Optional[random.Random] = None) -> List[EmotionEntry]:
    """
    Построить 6 эмоций по метке тональности.

    Args:
        classification: Positive / Negative / Neutral
        rng: источник случайности (для воспроизводимости в тестах)

    Returns:
        Все шесть эмоций, отсортированные по убыванию score.
    """
    rng = rng or random
    ranges = SCORE_RANGES.get(classification, {})

    emotions = []
    for name, emoji in BASE_EMOTIONS:
        low, high = ranges.get(name, (0.0, 0.0))
        score = low + rng.random() * (high - low) if high > 0 else 0.0
        score += rng.uniform(-JITTER, JITTER)
        emotions.append(EmotionEntry(name=name, emoji=emoji, score=min(1.0, max(0.0, score))))

    return sorted(emotions, key=lambda e: e.score, reverse=True)
