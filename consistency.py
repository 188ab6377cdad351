"""
Модуль consistency.py - вектор пріоритетів та оцінка узгодженості МПП

Реалізує:
- Нормалізацію стовпців МПП
- Вектор пріоритетів методом середнього нормалізованих стовпців
- Оцінку λ_max через зважені суми рядків
- Індекс узгодженості (CI) та відношення узгодженості (CR)
- Побудову ідеальної узгодженої МПП
- Генерацію рекомендацій для покращення узгодженості
"""

import logging
import numpy as np
from typing import Dict, List, Optional

from scales import ratio_to_signal

logger = logging.getLogger(__name__)

# Випадковий індекс (Random Index) Сааті для різних розмірів матриць
RANDOM_INDEX = {
    1: 0.00,
    2: 0.00,
    3: 0.58,
    4: 0.90,
    5: 1.12,
    6: 1.24,
    7: 1.32,
    8: 1.41,
    9: 1.45,
    10: 1.49,
}

# RI для матриць, більших за таблицю
DEFAULT_RANDOM_INDEX = 1.49

# Поріг узгодженості: CR > 0.10 означає нелогічні оцінки
CR_THRESHOLD = 0.10


def _as_matrix(matrix) -> np.ndarray:
    matrix = np.asarray(matrix, dtype=float)
    if matrix.size == 0:
        return np.zeros((0, 0))
    return matrix


def normalize_matrix(matrix: np.ndarray) -> np.ndarray:
    """
    Нормалізує кожний стовпець МПП на його суму.
    Стовпці з нульовою сумою дають нулі.

    Args:
        matrix: Матриця попарних порівнянь (n x n)

    Returns:
        Нормалізована матриця (суми стовпців дорівнюють 1)

    Examples:
        >>> normalize_matrix(np.array([[1, 3], [1/3, 1]])).round(4).tolist()
        [[0.75, 0.75], [0.25, 0.25]]
    """
    matrix = _as_matrix(matrix)
    col_sums = matrix.sum(axis=0)

    normalized = np.zeros_like(matrix)
    nonzero = col_sums != 0
    normalized[:, nonzero] = matrix[:, nonzero] / col_sums[nonzero]

    return normalized


def priority_vector(matrix: np.ndarray) -> np.ndarray:
    """
    Розраховує вектор пріоритетів як середнє рядків нормалізованої МПП
    з повторною нормалізацією до суми 1.
    Наближення головного власного вектора, точне для узгоджених матриць.

    Args:
        matrix: Матриця попарних порівнянь (n x n)

    Returns:
        Вектор пріоритетів (сума = 1); нулі, якщо сума середніх дорівнює 0

    Examples:
        >>> priority_vector(np.array([[1, 3], [1/3, 1]])).round(4).tolist()
        [0.75, 0.25]
        >>> priority_vector(np.ones((4, 4))).tolist()
        [0.25, 0.25, 0.25, 0.25]
        >>> len(priority_vector([]))
        0
    """
    matrix = _as_matrix(matrix)
    n = matrix.shape[0]
    if n == 0:
        return np.zeros(0)

    # Середнє по кожному рядку нормалізованої матриці
    row_means = normalize_matrix(matrix).mean(axis=1)

    total = row_means.sum()
    if total == 0:
        return np.zeros(n)

    return row_means / total


def get_random_index(n: int) -> float:
    """
    Повертає випадковий індекс RI для матриці розміру n

    Examples:
        >>> get_random_index(3)
        0.58
        >>> get_random_index(25)
        1.49
    """
    return RANDOM_INDEX.get(n, DEFAULT_RANDOM_INDEX if n > 0 else 0.0)


def calculate_lambda_max(matrix: np.ndarray, priorities: np.ndarray) -> float:
    """
    Оцінює максимальне власне значення λ_max: середнє відношень
    (A·p)_i / p_i; рядки з p_i = 0 дають 0.

    Args:
        matrix: Матриця попарних порівнянь (n x n)
        priorities: Вектор пріоритетів матриці

    Returns:
        Оцінка λ_max (0 для порожньої матриці)

    Examples:
        >>> m = np.array([[1, 2, 4], [1/2, 1, 2], [1/4, 1/2, 1]])
        >>> round(calculate_lambda_max(m, priority_vector(m)), 6)
        3.0
    """
    matrix = _as_matrix(matrix)
    priorities = np.asarray(priorities, dtype=float)
    n = matrix.shape[0]
    if n == 0:
        return 0.0

    weighted_sums = matrix @ priorities

    lambda_values = np.zeros(n)
    nonzero = priorities != 0
    lambda_values[nonzero] = weighted_sums[nonzero] / priorities[nonzero]

    return float(lambda_values.mean())


def consistency(matrix: np.ndarray, priorities: np.ndarray) -> Dict[str, float]:
    """
    Розраховує індекс (CI) та відношення (CR) узгодженості.
    Формули: CI = (λ_max - n) / (n - 1), CR = CI / RI.
    Матриці 1x1 та 2x2 завжди узгоджені.

    Args:
        matrix: Матриця попарних порівнянь (n x n)
        priorities: Вектор пріоритетів матриці

    Returns:
        Словник {'CI': ..., 'CR': ...}

    Examples:
        >>> m = np.array([[1, 9], [1/9, 1]])
        >>> consistency(m, priority_vector(m))
        {'CI': 0.0, 'CR': 0.0}
    """
    matrix = _as_matrix(matrix)
    n = matrix.shape[0]

    if n <= 2:
        return {'CI': 0.0, 'CR': 0.0}

    lambda_max = calculate_lambda_max(matrix, priorities)
    ci = (lambda_max - n) / (n - 1)

    ri = get_random_index(n)
    cr = 0.0 if ri == 0 else ci / ri

    logger.debug("Узгодженість: n=%d, λ_max=%.4f, CI=%.4f, CR=%.4f", n, lambda_max, ci, cr)

    return {'CI': float(ci), 'CR': float(cr)}


def is_consistent(cr: float, threshold: float = CR_THRESHOLD) -> bool:
    """
    Перевіряє, чи не перевищує CR поріг узгодженості

    Examples:
        >>> is_consistent(0.1)
        True
        >>> is_consistent(0.1035)
        False
    """
    return cr <= threshold


def consistency_report(matrix: np.ndarray,
                       priorities: Optional[np.ndarray] = None,
                       threshold: float = CR_THRESHOLD) -> Dict:
    """
    Комплексна оцінка узгодженості МПП.

    Args:
        matrix: Матриця попарних порівнянь (n x n)
        priorities: Вектор пріоритетів (обчислюється, якщо не задано)
        threshold: Поріг CR

    Returns:
        Словник з показниками: lambda_max, n, CI, CR, RI, is_consistent, threshold

    Examples:
        >>> report = consistency_report(np.array([[1, 3], [1/3, 1]]))
        >>> report['is_consistent'], report['CR']
        (True, 0.0)
    """
    matrix = _as_matrix(matrix)
    n = matrix.shape[0]
    if priorities is None:
        priorities = priority_vector(matrix)

    metrics = consistency(matrix, priorities)

    return {
        'lambda_max': calculate_lambda_max(matrix, priorities),
        'n': n,
        'CI': metrics['CI'],
        'CR': metrics['CR'],
        'RI': get_random_index(n),
        'is_consistent': is_consistent(metrics['CR'], threshold),
        'threshold': threshold,
    }


def ideal_pcm(weights: np.ndarray) -> np.ndarray:
    """
    Будує повністю узгоджену матрицю співвідношень пріоритетів a_ij = w_i / w_j.
    Слугує еталоном, з яким порівнюються введені сигнали повзунка.

    Args:
        weights: Вектор вагових коефіцієнтів

    Returns:
        Ідеальна узгоджена матриця попарних порівнянь

    Examples:
        >>> ideal = ideal_pcm(np.array([0.6, 0.3, 0.1]))
        >>> ideal.shape
        (3, 3)
        >>> abs(ideal[0, 1] - 2.0) < 0.01
        True
    """
    weights = np.asarray(weights, dtype=float)
    n = len(weights)
    ideal_matrix = np.ones((n, n))

    for i in range(n):
        for j in range(n):
            if weights[j] != 0:
                ideal_matrix[i, j] = weights[i] / weights[j]

    return ideal_matrix


def generate_revision_suggestions(matrix: np.ndarray,
                                  entity_names: List[str],
                                  top_k: int = 3) -> List[Dict]:
    """
    Підбирає пари, сигнали яких найбільше суперечать вектору пріоритетів,
    і пропонує для кожної новий сигнал повзунка з діапазону [-8, 8].
    Пари впорядковуються за відносним відхиленням a_ij від w_i / w_j.

    Args:
        matrix: Поточна матриця попарних порівнянь
        entity_names: Список назв елементів
        top_k: Кількість рекомендацій

    Returns:
        Список словників з рекомендаціями

    Examples:
        >>> m = np.array([[1, 5, 0.2], [0.2, 1, 1/9], [5, 9, 1]])
        >>> suggestions = generate_revision_suggestions(m, ["A", "B", "C"], top_k=2)
        >>> len(suggestions)
        2
    """
    matrix = _as_matrix(matrix)
    n = matrix.shape[0]
    if n < 2:
        return []

    ideal_matrix = ideal_pcm(priority_vector(matrix))

    deviations = []
    for i in range(n):
        for j in range(i + 1, n):
            current_value = matrix[i, j]
            ideal_value = ideal_matrix[i, j]

            if ideal_value != 0:
                deviation = abs(current_value - ideal_value) / ideal_value
            else:
                deviation = abs(current_value - ideal_value)

            deviations.append((deviation, i, j, current_value, ideal_value))

    # Найбільші відхилення спочатку
    deviations.sort(key=lambda x: x[0], reverse=True)

    suggestions = []
    for deviation, i, j, current_value, ideal_value in deviations[:top_k]:
        suggested_signal = ratio_to_signal(ideal_value)
        suggestions.append({
            'comparison': f"{entity_names[i]} vs {entity_names[j]}",
            'item_i': entity_names[i],
            'item_j': entity_names[j],
            'i': i,
            'j': j,
            'current_value': float(current_value),
            'current_signal': ratio_to_signal(current_value),
            'suggested_value': float(ideal_value),
            'suggested_signal': suggested_signal,
            'deviation_percent': float(deviation * 100),
            'message': (
                f"Рекомендується переглянути порівняння '{entity_names[i]}' vs '{entity_names[j]}'. "
                f"Поточне значення: {current_value:.2f}, "
                f"узгоджене значення: {ideal_value:.2f} "
                f"(відхилення {deviation * 100:.1f}%)"
            ),
        })

    return suggestions


if __name__ == "__main__":
    import doctest
    doctest.testmod()

    print("=== Демонстрація модуля consistency.py ===\n")

    matrix = np.array([
        [1, 5, 0.2],
        [0.2, 1, 1 / 9],
        [5, 9, 1],
    ])
    names = ["Варіант_A", "Варіант_B", "Варіант_C"]

    print("1. Нормалізована матриця:")
    print(np.round(normalize_matrix(matrix), 4))

    print("\n2. Вектор пріоритетів:")
    priorities = priority_vector(matrix)
    for name, p in zip(names, priorities):
        print(f"   {name}: {p:.4f}")

    print("\n3. Оцінка узгодженості:")
    for key, value in consistency_report(matrix, priorities).items():
        print(f"   {key}: {value}")

    print("\n4. Рекомендації для покращення узгодженості:")
    for i, sugg in enumerate(generate_revision_suggestions(matrix, names), 1):
        print(f"   {i}. {sugg['message']}")
