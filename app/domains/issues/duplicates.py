"""Эвристика поиска похожих задач по заголовку.

Заголовки сравниваются после нормализации (trim + lower). Задача считается
похожей, если один нормализованный заголовок содержится в другом. Это
предупреждение, а не запрет: создание задачи оно не блокирует.
"""
from typing import Iterable, List

from app.domains.issues.entities import Issue

MIN_CANDIDATE_LENGTH = 3


def normalize_title(title: str) -> str:
    return title.strip().lower()


def find_similar(
    candidate_title,
    issues: Iterable[Issue],
    min_length: int = MIN_CANDIDATE_LENGTH
) -> List[Issue]:
    """Похожие задачи в порядке входной последовательности.

    Кандидат короче min_length после trim (или не строка) дает пустой результат
    без просмотра задач.
    """
    if not isinstance(candidate_title, str):
        return []

    candidate = normalize_title(candidate_title)
    if len(candidate) < min_length:
        return []

    similar = []
    for issue in issues:
        existing = normalize_title(issue.title)
        if not existing:
            continue
        if candidate in existing or existing in candidate:
            similar.append(issue)
    return similar
