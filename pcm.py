"""
Модуль pcm.py - побудова матриць попарних порівнянь (МПП) з розріджених сигналів переваги

Реалізує:
- Ключі пар у форматі "i_j" (верхній трикутник, i < j)
- Побудову оберненосиметричної МПП (a_ji = 1/a_ij, одиниці на діагоналі)
- Перевірку зворотної симетрії
- Пошук незаповнених порівнянь
- Контейнер SignalMap для редагування сигналів
"""

import logging
import numpy as np
from typing import Dict, List, Mapping, Optional, Tuple, Union

from scales import signal_to_ratios, signal_value

logger = logging.getLogger(__name__)

PairKey = Union[str, Tuple[int, int]]


def pair_key(i: int, j: int) -> str:
    """
    Формує ключ пари у форматі "i_j"

    Examples:
        >>> pair_key(0, 2)
        '0_2'
    """
    return f"{i}_{j}"


def parse_pair_key(key: PairKey) -> Optional[Tuple[int, int]]:
    """
    Розбирає ключ пари ("i_j" або кортеж (i, j)).

    Returns:
        (i, j) або None, якщо ключ некоректний

    Examples:
        >>> parse_pair_key("1_3")
        (1, 3)
        >>> parse_pair_key((0, 1))
        (0, 1)
        >>> parse_pair_key("c_0") is None
        True
    """
    if isinstance(key, tuple):
        if len(key) != 2:
            return None
        try:
            return int(key[0]), int(key[1])
        except (TypeError, ValueError):
            return None

    parts = str(key).split("_")
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def lookup_signal(signals: Optional[Mapping], i: int, j: int) -> float:
    """
    Повертає сигнал для пари (i, j), 0 якщо оцінку не задано

    Examples:
        >>> lookup_signal({"0_1": 3}, 0, 1)
        3
        >>> lookup_signal({(0, 2): -2}, 0, 2)
        -2
        >>> lookup_signal({}, 1, 2)
        0
    """
    if not signals:
        return 0

    value = signals.get(pair_key(i, j))
    if value is None:
        value = signals.get((i, j))
    if value is None:
        return 0
    return value


def build_matrix(entity_names: List[str], pairwise_signals: Optional[Mapping] = None) -> np.ndarray:
    """
    Будує МПП для набору елементів з розрідженої карти сигналів.
    Використовуються лише пари верхнього трикутника (i < j), відсутні пари
    вважаються рівноцінними.

    Args:
        entity_names: Впорядкований список назв елементів (критеріїв чи альтернатив)
        pairwise_signals: Словник {"i_j": сигнал} або {(i, j): сигнал}

    Returns:
        Матриця n x n з одиницями на діагоналі та a_ji = 1/a_ij

    Examples:
        >>> m = build_matrix(["A", "B"], {"0_1": 2})
        >>> m.tolist()
        [[1.0, 3.0], [0.3333333333333333, 1.0]]
        >>> build_matrix([]).shape
        (0, 0)
    """
    n = len(entity_names)
    matrix = np.eye(n)

    for i in range(n):
        for j in range(i + 1, n):
            ratio, reciprocal = signal_to_ratios(lookup_signal(pairwise_signals, i, j))
            matrix[i, j] = ratio
            matrix[j, i] = reciprocal

    logger.debug("Побудовано МПП %dx%d з %d сигналів", n, n, len(pairwise_signals or {}))
    return matrix


def check_reciprocity(matrix: np.ndarray, tol: float = 1e-9) -> bool:
    """
    Перевіряє властивості МПП: одиниці на діагоналі, додатність,
    зворотна симетрія a_ij * a_ji = 1

    Examples:
        >>> check_reciprocity(np.array([[1, 4], [0.25, 1]]))
        True
        >>> check_reciprocity(np.array([[1, 4], [0.5, 1]]))
        False
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.size == 0:
        return True
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    if np.any(matrix <= 0):
        return False
    if not np.allclose(np.diag(matrix), 1.0, atol=tol):
        return False
    return bool(np.allclose(matrix * matrix.T, 1.0, atol=tol))


def get_missing_comparisons(entity_names: List[str],
                            pairwise_signals: Optional[Mapping] = None) -> List[Tuple[str, str]]:
    """
    Повертає пари елементів, для яких оцінку не задано (вважаються рівноцінними)

    Examples:
        >>> get_missing_comparisons(["A", "B", "C"], {"0_1": 1})
        [('A', 'C'), ('B', 'C')]
    """
    missing = []
    n = len(entity_names)
    for i in range(n):
        for j in range(i + 1, n):
            if not pairwise_signals or (
                    pair_key(i, j) not in pairwise_signals and (i, j) not in pairwise_signals):
                missing.append((entity_names[i], entity_names[j]))
    return missing


class SignalMap:
    """
    Розріджена карта сигналів переваги для верхнього трикутника МПП.
    Пара (j, i) з j > i зберігається як (i, j) з протилежним знаком сигналу.
    """

    def __init__(self, signals: Optional[Mapping] = None):
        """
        Args:
            signals: Початкові сигнали {"i_j": сигнал} або {(i, j): сигнал}

        Examples:
            >>> SignalMap({"0_1": 2}).get(0, 1)
            2.0
        """
        self._signals: Dict[Tuple[int, int], float] = {}
        for key, value in (signals or {}).items():
            parsed = parse_pair_key(key)
            if parsed is None:
                raise ValueError(f"Некоректний ключ пари: {key!r}")
            self.set(parsed[0], parsed[1], value)

    def set(self, i: int, j: int, signal: float) -> None:
        """
        Встановлює сигнал для пари (i, j)

        Examples:
            >>> signals = SignalMap()
            >>> signals.set(2, 0, 3)
            >>> signals.get(0, 2)
            -3.0
        """
        if i == j:
            raise ValueError("Неможливо порівняти елемент сам з собою")
        if i > j:
            i, j, signal = j, i, -signal
        self._signals[(i, j)] = signal_value(signal)

    def get(self, i: int, j: int) -> float:
        """Повертає сигнал для пари (i, j), 0 якщо його не задано"""
        if i == j:
            return 0.0
        if i > j:
            return -self._signals.get((j, i), 0.0)
        return self._signals.get((i, j), 0.0)

    def remove_index(self, index: int) -> None:
        """
        Видаляє всі пари з елементом index та зсуває старші індекси на одиницю

        Examples:
            >>> signals = SignalMap({"0_1": 1, "0_2": 2, "1_2": 3})
            >>> signals.remove_index(1)
            >>> signals.to_dict()
            {'0_1': 2.0}
        """
        shifted = {}
        for (i, j), value in self._signals.items():
            if index in (i, j):
                continue
            new_i = i - 1 if i > index else i
            new_j = j - 1 if j > index else j
            shifted[(new_i, new_j)] = value
        self._signals = shifted

    def to_dict(self) -> Dict[str, float]:
        """Експортує сигнали у форматі {"i_j": сигнал}"""
        return {pair_key(i, j): value for (i, j), value in sorted(self._signals.items())}

    def __len__(self) -> int:
        return len(self._signals)

    def __contains__(self, pair: Tuple[int, int]) -> bool:
        i, j = pair
        return (min(i, j), max(i, j)) in self._signals


if __name__ == "__main__":
    import doctest
    doctest.testmod()

    print("=== Демонстрація модуля pcm.py ===\n")

    names = ["Альтернатива_1", "Альтернатива_2", "Альтернатива_3"]
    signals = {"0_1": 4, "0_2": -4, "1_2": -8}

    print("1. Сигнали переваги:")
    for key, value in signals.items():
        print(f"   {key}: {value:+d}")

    print("\n2. Матриця попарних порівнянь:")
    matrix = build_matrix(names, signals)
    print(np.round(matrix, 3))
    print(f"   Зворотна симетрія: {check_reciprocity(matrix)}")

    print("\n3. Незаповнені порівняння:")
    print(f"   {get_missing_comparisons(names, {'0_1': 4})}")
