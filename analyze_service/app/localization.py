"""Перевод меток тональности и названий эмоций на целевой язык."""
from typing import Dict, List

from .models import EmotionEntry

SENTIMENT_LABELS: Dict[str, Dict[str, str]] = {
    "Positive": {
        "ru": "Позитивное", "es": "Positivo", "fr": "Positif", "de": "Positiv", "it": "Positivo",
        "pt": "Positivo", "zh": "积极", "ja": "ポジティブ", "ko": "긍정적", "ar": "إيجابي",
    },
    "Negative": {
        "ru": "Негативное", "es": "Negativo", "fr": "Négatif", "de": "Negativ", "it": "Negativo",
        "pt": "Negativo", "zh": "消极", "ja": "ネガティブ", "ko": "부정적", "ar": "سلبي",
    },
    "Neutral": {
        "ru": "Нейтральное", "es": "Neutral", "fr": "Neutre", "de": "Neutral", "it": "Neutro",
        "pt": "Neutro", "zh": "中性", "ja": "中立", "ko": "중립적", "ar": "محايد",
    },
}

EMOTION_NAMES: Dict[str, Dict[str, str]] = {
    "Joy": {
        "ru": "Радость", "es": "Alegría", "fr": "Joie", "de": "Freude", "it": "Gioia",
        "pt": "Alegria", "zh": "喜悦", "ja": "喜び", "ko": "기쁨", "ar": "فرح",
    },
    "Sadness": {
        "ru": "Грусть", "es": "Tristeza", "fr": "Tristesse", "de": "Traurigkeit", "it": "Tristezza",
        "pt": "Tristeza", "zh": "悲伤", "ja": "悲しみ", "ko": "슬픔", "ar": "حزن",
    },
    "Anger": {
        "ru": "Гнев", "es": "Ira", "fr": "Colère", "de": "Wut", "it": "Rabbia",
        "pt": "Raiva", "zh": "愤怒", "ja": "怒り", "ko": "분노", "ar": "غضب",
    },
    "Fear": {
        "ru": "Страх", "es": "Miedo", "fr": "Peur", "de": "Angst", "it": "Paura",
        "pt": "Medo", "zh": "恐惧", "ja": "恐怖", "ko": "두려움", "ar": "خوف",
    },
    "Surprise": {
        "ru": "Удивление", "es": "Sorpresa", "fr": "Surprise", "de": "Überraschung", "it": "Sorpresa",
        "pt": "Surpresa", "zh": "惊讶", "ja": "驚き", "ko": "놀람", "ar": "دهشة",
    },
    "Disgust": {
        "ru": "Отвращение", "es": "Asco", "fr": "Dégoût", "de": "Ekel", "it": "Disgusto",
        "pt": "Nojo", "zh": "厌恶", "ja": "嫌悪", "ko": "혐오", "ar": "اشمئزاز",
    },
}


def localize_sentiment(label: str, language: str) -> str:
    """Метка тональности на языке language; иначе английская."""
    return SENTIMENT_LABELS.get(label, {}).get(language, label)


def localize_emotion(name: str, language: str) -> str:
    """Название эмоции на языке language; иначе английское."""
    return EMOTION_NAMES.get(name, {}).get(language, name)


def localize_emotions(emotions: List[EmotionEntry], language: str) -> List[EmotionEntry]:
    return [
        emotion.model_copy(update={"name": localize_emotion(emotion.name, language)})
        for emotion in emotions
    ]
