#!/usr/bin/env python3
"""
main.py - Головний модуль методу аналізу ієрархій (МАІ)

Реалізує повний цикл:
1. Завантаження критеріїв, альтернатив та сигналів порівнянь з JSON
2. Побудова МПП критеріїв та альтернатив за кожним критерієм
3. Розрахунок векторів пріоритетів та оцінка узгодженості
4. Агрегація пріоритетів та ранжування альтернатив
5. Збереження результатів (ranking.csv, consistency.json, suggestions.json)

Використання:
    python main.py --input decision.json --out output_dir/
    python main.py --demo
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List

import numpy as np
import pandas as pd

from consistency import CR_THRESHOLD
from session import DecisionSession, GroupAnalysis, SessionResult

logger = logging.getLogger(__name__)


def load_input_data(input_file: str) -> Dict:
    """
    Завантажує вхідні дані з JSON файлу

    Args:
        input_file: Шлях до JSON файлу

    Returns:
        Словник з даними
    """
    try:
        with open(input_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data
    except FileNotFoundError:
        print(f"Помилка: Файл {input_file} не знайдено")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Помилка розбору JSON: {e}")
        sys.exit(1)


def build_session(data: Dict) -> DecisionSession:
    """Створює сесію рішення з вхідних даних"""
    session = DecisionSession.from_dict(data)
    logger.debug("Сесія: %d критеріїв, %d альтернатив",
                 len(session.criteria), len(session.alternatives))
    return session


def demo_session() -> DecisionSession:
    """
    Демонстраційна сесія: вибір першої мови програмування
    з прикладом заповнених порівнянь
    """
    session = DecisionSession.with_defaults()
    c = [criterion.id for criterion in session.criteria]
    a = [alternative.id for alternative in session.alternatives]

    # Крива навчання та ринок праці важливіші за решту
    session.set_criteria_comparison(c[0], c[1], 1)
    session.set_criteria_comparison(c[0], c[2], 2)
    session.set_criteria_comparison(c[0], c[3], 2)
    session.set_criteria_comparison(c[0], c[4], 1)
    session.set_criteria_comparison(c[1], c[2], 2)
    session.set_criteria_comparison(c[1], c[3], 1)
    session.set_criteria_comparison(c[1], c[4], 0)

    # Крива навчання
    session.set_alternative_comparison(c[0], a[0], a[1], 2)
    session.set_alternative_comparison(c[0], a[0], a[2], 4)
    session.set_alternative_comparison(c[0], a[0], a[3], 3)
    session.set_alternative_comparison(c[0], a[0], a[4], 2)
    session.set_alternative_comparison(c[0], a[2], a[3], -1)

    # Ринок праці
    session.set_alternative_comparison(c[1], a[0], a[1], 0)
    session.set_alternative_comparison(c[1], a[0], a[2], 1)
    session.set_alternative_comparison(c[1], a[0], a[4], 3)
    session.set_alternative_comparison(c[1], a[1], a[4], 3)
    session.set_alternative_comparison(c[1], a[2], a[4], 2)

    # Потенціал зарплати
    session.set_alternative_comparison(c[4], a[4], a[0], 1)
    session.set_alternative_comparison(c[4], a[4], a[1], 2)

    return session


def create_output_directory(output_dir: str) -> None:
    Path(output_dir).mkdir(parents=True, exist_ok=True)


def save_ranking(ranking: List[Dict], output_dir: str) -> None:
    """
    Зберігає ранжування альтернатив у CSV файл

    Args:
        ranking: Ранжований список {'name', 'score', 'rank'}
        output_dir: Директорія для збереження
    """
    df = pd.DataFrame(ranking, columns=['rank', 'name', 'score'])

    csv_file = os.path.join(output_dir, 'ranking.csv')
    df.to_csv(csv_file, index=False, encoding='utf-8')

    print(f"Ранжування збережено: {csv_file}")


def _group_to_dict(analysis: GroupAnalysis) -> Dict:
    return {
        'label': analysis.label,
        'items': analysis.entity_names,
        'matrix': analysis.matrix.tolist(),
        'priorities': analysis.priorities.tolist(),
        'consistency': analysis.consistency,
    }


def save_consistency_report(result: SessionResult, output_dir: str) -> None:
    """
    Зберігає звіт про узгодженість усіх груп порівнянь у JSON файл

    Args:
        result: Результати сесії
        output_dir: Директорія для збереження
    """
    report = {
        'criteria': _group_to_dict(result.criteria),
        'alternatives': [_group_to_dict(analysis) for analysis in result.alternatives],
        'is_reliable': result.is_reliable,
        'issue': result.issue.message if result.issue else None,
    }

    json_file = os.path.join(output_dir, 'consistency.json')
    with open(json_file, 'w', encoding='utf-8') as f:
        json.dump(report, f, ensure_ascii=False, indent=2)

    print(f"Звіт про узгодженість збережено: {json_file}")


def save_suggestions(result: SessionResult, output_dir: str) -> None:
    """
    Зберігає рекомендації для покращення узгодженості у JSON файл

    Args:
        result: Результати сесії
        output_dir: Директорія для збереження
    """
    suggestions = result.issue.suggestions if result.issue else []

    json_file = os.path.join(output_dir, 'suggestions.json')
    with open(json_file, 'w', encoding='utf-8') as f:
        json.dump(suggestions, f, ensure_ascii=False, indent=2)

    print(f"Рекомендації збережено: {json_file}")


def print_group(analysis: GroupAnalysis) -> None:
    """Виводить матрицю, пріоритети та узгодженість групи"""
    print(f"   {analysis.label}:")
    print(np.round(analysis.matrix, 3))
    for name, p in zip(analysis.entity_names, analysis.priorities):
        print(f"      {name}: {p:.4f}")
    print(f"      CI = {analysis.consistency['CI']:.4f}")
    print(f"      CR = {analysis.consistency['CR']:.4f}")
    print(f"      Узгоджена: {'Так' if analysis.is_consistent else 'Ні'}")


def process_decision(session: DecisionSession, output_dir: str,
                     threshold: float = CR_THRESHOLD, strict: bool = False) -> int:
    """
    Головна функція обробки сесії рішення

    Args:
        session: Сесія з критеріями, альтернативами та порівняннями
        output_dir: Директорія для збереження результатів
        threshold: Поріг відношення узгодженості
        strict: Не показувати ранжування за порушення узгодженості

    Returns:
        Код завершення (0 - успіх, 2 - результати заблоковано)
    """
    print("=" * 80)
    print("МЕТОД АНАЛІЗУ ІЄРАРХІЙ")
    print("=" * 80)
    print()

    print("1. Вхідні дані...")
    print(f"   Критерії: {len(session.criteria)}")
    print(f"   Альтернативи: {len(session.alternatives)}")
    print()

    result = session.evaluate(threshold)

    print("2. Порівняння критеріїв...")
    print_group(result.criteria)
    print()

    print("3. Порівняння альтернатив за критеріями...")
    for analysis in result.alternatives:
        print_group(analysis)
    print()

    print("4. Перевірка узгодженості...")
    if result.is_reliable:
        print("   Усі порівняння узгоджені")
    else:
        print(f"   {result.issue.message}")
        for i, sugg in enumerate(result.issue.suggestions, 1):
            print(f"   {i}. {sugg['comparison']}: "
                  f"сигнал {sugg['current_signal']:+d} → "
                  f"рекомендований {sugg['suggested_signal']:+d} "
                  f"(відхилення {sugg['deviation_percent']:.1f}%)")
    print()

    print("5. Збереження результатів...")
    create_output_directory(output_dir)
    save_consistency_report(result, output_dir)
    save_suggestions(result, output_dir)

    if strict and not result.is_reliable:
        print()
        print("Ранжування не сформовано: виправте неузгоджені порівняння")
        return 2

    save_ranking(result.ranking, output_dir)
    print()

    print("6. Ранжування альтернатив:")
    for item in result.ranking:
        print(f"   Ранг {item['rank']}: {item['name']} ({item['score'] * 100:.2f}%)")

    print()
    print("=" * 80)
    print("ОБРОБКА ЗАВЕРШЕНА")
    print("=" * 80)

    return 0


def main():
    """
    Точка входу програми
    """
    parser = argparse.ArgumentParser(
        description='Метод аналізу ієрархій: пріоритети, узгодженість та ранжування альтернатив'
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--input',
        type=str,
        help='Шлях до вхідного JSON файлу з критеріями, альтернативами та порівняннями'
    )
    source.add_argument(
        '--demo',
        action='store_true',
        help='Використати демонстраційну сесію'
    )
    parser.add_argument(
        '--out',
        type=str,
        default='out',
        help='Директорія для збереження результатів (за замовчуванням: out/)'
    )
    parser.add_argument(
        '--threshold',
        type=float,
        default=CR_THRESHOLD,
        help=f'Поріг відношення узгодженості CR (за замовчуванням: {CR_THRESHOLD})'
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        help='Не формувати ранжування, якщо порівняння неузгоджені'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Детальне журналювання розрахунків'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        if args.demo:
            session = demo_session()
        else:
            session = build_session(load_input_data(args.input))
        exit_code = process_decision(session, args.out, args.threshold, args.strict)
    except Exception as e:
        print(f"\nПомилка під час обробки: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
