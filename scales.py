"""
Модуль scales.py - шкала попарних переваг (сигнал повзунка → співвідношення Сааті)

Сигнал переваги - ціле число, симетричне відносно нуля:
- 0 означає рівноцінність (співвідношення 1)
- +k означає перевагу першого елемента пари, співвідношення k + 1
- -k означає перевагу другого елемента пари, співвідношення 1 / (k + 1)

Діапазон повзунка [-8, 8] відповідає класичній шкалі Сааті 1-9 в обидва боки.

Функції:
- Округлення та обмеження сигналу
- Перетворення сигналу у співвідношення та обернене співвідношення
- Зворотне перетворення співвідношення у сигнал (для рекомендацій)
- Текстові мітки для відображення сили переваги
"""

import logging
import math
import numbers
import sys
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

# Межі повзунка переваги
SIGNAL_MIN = -8
SIGNAL_MAX = 8

# Вербальні градації класичної шкали Сааті (1-9)
SAATY_VERBAL_LABELS = {
    1: "Рівноцінні",
    2: "Дуже слабко",
    3: "Слабко",
    4: "Помірно слабко",
    5: "Помірно",
    6: "Помірно сильно",
    7: "Сильно",
    8: "Дуже сильно",
    9: "Надзвичайно сильно",
}


def round_signal(signal: float) -> int:
    """
    Округлює сигнал до найближчого цілого (половина округлюється вгору).
    Нескінченні значення та NaN вважаються нульовим сигналом.

    Args:
        signal: Сигнал переваги (довільне дійсне число)

    Returns:
        Ціле значення сигналу

    Examples:
        >>> round_signal(2.4)
        2
        >>> round_signal(0.5)
        1
        >>> round_signal(-0.5)
        0
        >>> round_signal(-1.5)
        -1
    """
    if isinstance(signal, numbers.Integral):
        return int(signal)
    try:
        signal = float(signal)
    except OverflowError:
        # дробові значення поза діапазоном float
        return int(math.floor(signal))
    if not math.isfinite(signal):
        logger.warning("Некоректний сигнал %r, використано 0", signal)
        return 0
    return int(math.floor(signal + 0.5))


def signal_value(signal: float) -> float:
    """
    Приводить сигнал до float для зберігання; цілі поза діапазоном float
    насичуються до найбільшого скінченного значення зі знаком

    Examples:
        >>> signal_value(3)
        3.0
        >>> signal_value(-10 ** 400) == -sys.float_info.max
        True
    """
    try:
        return float(signal)
    except OverflowError:
        return sys.float_info.max if signal > 0 else -sys.float_info.max


def clamp_signal(signal: float) -> int:
    """
    Округлює сигнал та обмежує його діапазоном повзунка [-8, 8]

    Examples:
        >>> clamp_signal(12)
        8
        >>> clamp_signal(-3.2)
        -3
    """
    return max(SIGNAL_MIN, min(SIGNAL_MAX, round_signal(signal)))


def signal_magnitude(signal: float) -> int:
    """
    Повертає значення шкали Сааті (1-9) для сигналу без урахування напрямку

    Examples:
        >>> signal_magnitude(0)
        1
        >>> signal_magnitude(-4)
        5
    """
    rounded = round_signal(signal)
    if rounded == 0:
        return 1
    return abs(rounded) + 1


def signal_to_ratio(signal: float) -> float:
    """
    Перетворює сигнал переваги у співвідношення a_ij матриці попарних порівнянь.
    Функція визначена для будь-якого дійсного сигналу і не обмежує його.

    Args:
        signal: Сигнал переваги (повзунок у діапазоні [-8, 8])

    Returns:
        Співвідношення: k + 1 для сигналу k > 0, 1 / (k + 1) для -k, 1 для нуля

    Examples:
        >>> signal_to_ratio(0)
        1.0
        >>> signal_to_ratio(1)
        2.0
        >>> signal_to_ratio(-1)
        0.5
        >>> signal_to_ratio(8)
        9.0
    """
    rounded = round_signal(signal)
    if rounded == 0:
        return 1.0

    try:
        magnitude = float(abs(rounded) + 1)
    except OverflowError:
        magnitude = sys.float_info.max
    if rounded > 0:
        return magnitude
    return 1.0 / magnitude


def signal_to_ratios(signal: float) -> Tuple[float, float]:
    """
    Повертає пару (a_ij, a_ji) для сигналу переваги

    Examples:
        >>> signal_to_ratios(4)
        (5.0, 0.2)
    """
    ratio = signal_to_ratio(signal)
    return ratio, 1.0 / ratio


def ratio_to_signal(ratio: float) -> int:
    """
    Зворотне перетворення: найближчий сигнал повзунка для співвідношення.
    Використовується для формулювання рекомендованих оцінок.

    Args:
        ratio: Співвідношення a_ij > 0

    Returns:
        Сигнал у діапазоні [-8, 8]

    Examples:
        >>> ratio_to_signal(5.0)
        4
        >>> ratio_to_signal(0.2)
        -4
        >>> ratio_to_signal(1.2)
        0
        >>> ratio_to_signal(40.0)
        8
    """
    try:
        ratio = float(ratio)
    except OverflowError:
        return SIGNAL_MAX if ratio > 0 else 0
    if not math.isfinite(ratio) or ratio <= 0:
        return 0

    if ratio >= 1.0:
        signal = round_signal(ratio) - 1
    else:
        signal = -(round_signal(1.0 / ratio) - 1)

    return clamp_signal(signal)


def signal_label(signal: float) -> str:
    """
    Мітка сили переваги для відображення поруч з повзунком

    Examples:
        >>> signal_label(0)
        '1x'
        >>> signal_label(-8)
        '9x'
    """
    return f"{signal_magnitude(signal)}x"


def get_linguistic_label(signal: float) -> str:
    """
    Повертає вербальну градацію шкали Сааті для сигналу.
    Для сигналів поза діапазоном повзунка використовується найсильніша градація.

    Examples:
        >>> get_linguistic_label(0)
        'Рівноцінні'
        >>> get_linguistic_label(-4)
        'Помірно'
    """
    magnitude = min(signal_magnitude(signal), max(SAATY_VERBAL_LABELS))
    return SAATY_VERBAL_LABELS[magnitude]


def get_scale_table() -> List[Dict]:
    """
    Генерує таблицю відповідності для всіх сигналів повзунка

    Returns:
        Список словників {signal, ratio, reciprocal, label, verbal}

    Examples:
        >>> table = get_scale_table()
        >>> len(table)
        17
        >>> table[0]['signal'], table[-1]['ratio']
        (-8, 9.0)
    """
    table = []
    for signal in range(SIGNAL_MIN, SIGNAL_MAX + 1):
        ratio, reciprocal = signal_to_ratios(signal)
        table.append({
            'signal': signal,
            'ratio': ratio,
            'reciprocal': reciprocal,
            'label': signal_label(signal),
            'verbal': get_linguistic_label(signal),
        })
    return table


if __name__ == "__main__":
    import doctest
    doctest.testmod()

    print("=== Демонстрація модуля scales.py ===\n")

    print("1. Таблиця відповідності сигналів та співвідношень:")
    for row in get_scale_table():
        print(f"   {row['signal']:+3d} → {row['ratio']:.3f} "
              f"(обернене {row['reciprocal']:.3f}, {row['label']}, {row['verbal']})")

    print("\n2. Зворотне перетворення співвідношень:")
    for ratio in [1.0, 2.5, 7.0, 0.3, 1 / 9]:
        print(f"   {ratio:.3f} → сигнал {ratio_to_signal(ratio):+d}")
