"""
Модуль aggregate.py - агрегація пріоритетів критеріїв та альтернатив

Реалізує:
- Зважену суму пріоритетів альтернатив за всіма критеріями
- Рівномірну заміну для відсутніх векторів пріоритетів
- Стабільне ранжування альтернатив за підсумковою оцінкою
"""

import logging
import numpy as np
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


def uniform_vector(n: int) -> np.ndarray:
    """
    Рівномірний вектор пріоритетів 1/n

    Examples:
        >>> uniform_vector(4).tolist()
        [0.25, 0.25, 0.25, 0.25]
    """
    if n <= 0:
        return np.zeros(0)
    return np.full(n, 1.0 / n)


def aggregate(criteria_priorities: Sequence[float],
              per_criterion_alternative_priorities: Sequence[Optional[Sequence[float]]],
              alternative_names: List[str]) -> List[Dict]:
    """
    Розраховує підсумкові оцінки альтернатив:
    score[a] = Σ_c w_c * p_c[a]

    Відсутній, порожній або невідповідний за довжиною вектор пріоритетів
    альтернатив для критерію замінюється рівномірним вектором.

    Args:
        criteria_priorities: Вектор пріоритетів критеріїв
        per_criterion_alternative_priorities: Вектори пріоритетів альтернатив
            для кожного критерію (у порядку критеріїв)
        alternative_names: Назви альтернатив

    Returns:
        Список {'name', 'score'} у порядку альтернатив

    Examples:
        >>> scores = aggregate([0.5, 0.5], [[0.6, 0.4], [0.2, 0.8]], ["A1", "A2"])
        >>> [round(s['score'], 4) for s in scores]
        [0.4, 0.6]
        >>> aggregate([], [], ["A1"])
        []
    """
    n_alternatives = len(alternative_names)
    n_criteria = len(criteria_priorities)
    if n_alternatives == 0 or n_criteria == 0:
        return []

    scores = np.zeros(n_alternatives)

    for c, weight in enumerate(criteria_priorities):
        alt_priorities = None
        if c < len(per_criterion_alternative_priorities):
            alt_priorities = per_criterion_alternative_priorities[c]

        if alt_priorities is None or len(alt_priorities) == 0:
            alt_priorities = uniform_vector(n_alternatives)
        elif len(alt_priorities) != n_alternatives:
            logger.warning(
                "Вектор пріоритетів для критерію %d має %d елементів замість %d, "
                "використано рівномірний розподіл",
                c, len(alt_priorities), n_alternatives
            )
            alt_priorities = uniform_vector(n_alternatives)

        scores += float(weight) * np.asarray(alt_priorities, dtype=float)

    return [
        {'name': name, 'score': float(score)}
        for name, score in zip(alternative_names, scores)
    ]


def rank_scores(scores: List[Dict]) -> List[Dict]:
    """
    Ранжує альтернативи за підсумковою оцінкою (спадання).
    Рівні оцінки зберігають вихідний порядок.

    Args:
        scores: Список {'name', 'score'}

    Returns:
        Відсортований список з доданим рангом

    Examples:
        >>> ranking = rank_scores([{'name': 'A1', 'score': 0.4}, {'name': 'A2', 'score': 0.6}])
        >>> ranking[0]['name'], ranking[0]['rank']
        ('A2', 1)
    """
    items = [dict(item) for item in scores]

    # sort стабільний
    items.sort(key=lambda x: x['score'], reverse=True)

    for rank, item in enumerate(items, start=1):
        item['rank'] = rank

    return items


def final_ranking(criteria_priorities: Sequence[float],
                  per_criterion_alternative_priorities: Sequence[Optional[Sequence[float]]],
                  alternative_names: List[str]) -> List[Dict]:
    """Агрегує пріоритети та повертає ранжований список альтернатив"""
    scores = aggregate(criteria_priorities, per_criterion_alternative_priorities, alternative_names)
    return rank_scores(scores)


if __name__ == "__main__":
    import doctest
    doctest.testmod()

    print("=== Демонстрація модуля aggregate.py ===\n")

    criteria_priorities = [0.5, 0.3, 0.2]
    alternative_priorities = [
        [0.6, 0.3, 0.1],
        [0.2, 0.5, 0.3],
        None,
    ]
    alternatives = ["Проект_A", "Проект_B", "Проект_C"]

    print("1. Підсумкові оцінки (третій критерій без оцінок):")
    for item in aggregate(criteria_priorities, alternative_priorities, alternatives):
        print(f"   {item['name']}: {item['score']:.4f}")

    print("\n2. Ранжування:")
    for item in final_ranking(criteria_priorities, alternative_priorities, alternatives):
        print(f"   Ранг {item['rank']}: {item['name']} (оцінка: {item['score']:.4f})")
