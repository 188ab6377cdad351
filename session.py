"""
Модуль session.py - модель сесії прийняття рішення (адаптер між інтерфейсом та розрахунками)

Зберігає вхідний стан: критерії, альтернативи та сигнали попарних порівнянь.
Усі похідні значення (матриці, пріоритети, узгодженість, оцінки) обчислюються
заново при кожному зверненні.

Кожний критерій та альтернатива отримують незмінний ідентифікатор під час створення,
тому перейменування, перестановка чи видалення елементів не втрачають введених порівнянь.
"""

import logging
import uuid
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pcm import SignalMap, build_matrix, parse_pair_key
from scales import signal_value
from consistency import (
    CR_THRESHOLD,
    consistency_report,
    generate_revision_suggestions,
    priority_vector,
)
from aggregate import aggregate, rank_scores

logger = logging.getLogger(__name__)

CRITERION_BASE_NAME = "Критерій"
ALTERNATIVE_BASE_NAME = "Альтернатива"

# Приклад рішення: вибір першої мови програмування
DEFAULT_CRITERIA = ["Крива навчання", "Ринок праці", "Екосистема", "Універсальність", "Потенціал зарплати"]
DEFAULT_ALTERNATIVES = ["Python", "JavaScript/TS", "Java", "C#", "Go"]


@dataclass
class Entity:
    """Критерій або альтернатива з незмінним ідентифікатором"""
    id: str
    name: str


@dataclass
class GroupAnalysis:
    """Результат аналізу однієї групи порівнянь (критерії або альтернативи за критерієм)"""
    label: str
    entity_names: List[str]
    matrix: np.ndarray
    priorities: np.ndarray
    consistency: Dict
    criterion_id: Optional[str] = None

    @property
    def is_consistent(self) -> bool:
        return self.consistency['is_consistent']


@dataclass
class ConsistencyIssue:
    """Порушення узгодженості в групі порівнянь"""
    label: str
    criterion_id: Optional[str]
    CR: float
    threshold: float
    message: str
    suggestions: List[Dict] = field(default_factory=list)


@dataclass
class SessionResult:
    """Повний набір похідних значень сесії"""
    criteria: GroupAnalysis
    alternatives: List[GroupAnalysis]
    scores: List[Dict]
    ranking: List[Dict]
    issue: Optional[ConsistencyIssue] = None

    @property
    def is_reliable(self) -> bool:
        return self.issue is None


class DecisionSession:
    """
    Модель сесії прийняття рішення методом аналізу ієрархій.
    Зберігає критерії, альтернативи та сигнали порівнянь за ідентифікаторами.
    """

    def __init__(self):
        self.criteria: List[Entity] = []
        self.alternatives: List[Entity] = []
        # (id_a, id_b) -> сигнал переваги a над b
        self.criteria_comparisons: Dict[Tuple[str, str], float] = {}
        # criterion_id -> {(alt_id_a, alt_id_b): сигнал}
        self.alternative_comparisons: Dict[str, Dict[Tuple[str, str], float]] = {}

    # ------------------------------------------------------------------
    # Керування елементами
    # ------------------------------------------------------------------

    @staticmethod
    def _new_entity(entities: List[Entity], name: Optional[str], base_name: str) -> Entity:
        if name is None:
            name = f"{base_name} {len(entities) + 1}"
        entity = Entity(uuid.uuid4().hex, name)
        entities.append(entity)
        return entity

    @staticmethod
    def _find(entities: List[Entity], entity_id: str) -> Entity:
        for entity in entities:
            if entity.id == entity_id:
                return entity
        raise KeyError(entity_id)

    def add_criterion(self, name: Optional[str] = None) -> Entity:
        """
        Додає критерій

        Args:
            name: Назва критерію (за замовчуванням "Критерій N")

        Returns:
            Створений критерій
        """
        entity = self._new_entity(self.criteria, name, CRITERION_BASE_NAME)
        self.alternative_comparisons[entity.id] = {}
        return entity

    def add_alternative(self, name: Optional[str] = None) -> Entity:
        """Додає альтернативу (за замовчуванням "Альтернатива N")"""
        return self._new_entity(self.alternatives, name, ALTERNATIVE_BASE_NAME)

    def rename_criterion(self, criterion_id: str, name: str) -> None:
        self._find(self.criteria, criterion_id).name = name

    def rename_alternative(self, alternative_id: str, name: str) -> None:
        self._find(self.alternatives, alternative_id).name = name

    def remove_criterion(self, criterion_id: str) -> None:
        """Видаляє критерій разом з усіма порівняннями, що його стосуються"""
        entity = self._find(self.criteria, criterion_id)
        self.criteria.remove(entity)
        self.alternative_comparisons.pop(criterion_id, None)
        self.criteria_comparisons = {
            pair: value for pair, value in self.criteria_comparisons.items()
            if criterion_id not in pair
        }

    def remove_alternative(self, alternative_id: str) -> None:
        """Видаляє альтернативу та її порівняння за всіма критеріями"""
        entity = self._find(self.alternatives, alternative_id)
        self.alternatives.remove(entity)
        for criterion_id, comparisons in self.alternative_comparisons.items():
            self.alternative_comparisons[criterion_id] = {
                pair: value for pair, value in comparisons.items()
                if alternative_id not in pair
            }

    def move_criterion(self, criterion_id: str, position: int) -> None:
        """Переміщує критерій на нову позицію (порівняння зберігаються)"""
        entity = self._find(self.criteria, criterion_id)
        self.criteria.remove(entity)
        self.criteria.insert(position, entity)

    # ------------------------------------------------------------------
    # Сигнали порівнянь
    # ------------------------------------------------------------------

    @staticmethod
    def _store(comparisons: Dict[Tuple[str, str], float], id_a: str, id_b: str, signal: float) -> None:
        if id_a == id_b:
            raise ValueError("Неможливо порівняти елемент сам з собою")
        comparisons.pop((id_b, id_a), None)
        comparisons[(id_a, id_b)] = signal_value(signal)

    @staticmethod
    def _read(comparisons: Dict[Tuple[str, str], float], id_a: str, id_b: str) -> float:
        if (id_a, id_b) in comparisons:
            return comparisons[(id_a, id_b)]
        if (id_b, id_a) in comparisons:
            return -comparisons[(id_b, id_a)]
        return 0.0

    def set_criteria_comparison(self, id_a: str, id_b: str, signal: float) -> None:
        """
        Встановлює сигнал переваги критерію id_a над критерієм id_b

        Args:
            id_a: Ідентифікатор першого критерію
            id_b: Ідентифікатор другого критерію
            signal: Сигнал переваги (додатний - переважає id_a)
        """
        self._find(self.criteria, id_a)
        self._find(self.criteria, id_b)
        self._store(self.criteria_comparisons, id_a, id_b, signal)

    def get_criteria_comparison(self, id_a: str, id_b: str) -> float:
        self._find(self.criteria, id_a)
        self._find(self.criteria, id_b)
        return self._read(self.criteria_comparisons, id_a, id_b)

    def set_alternative_comparison(self, criterion_id: str, id_a: str, id_b: str, signal: float) -> None:
        """
        Встановлює сигнал переваги альтернативи id_a над id_b за критерієм criterion_id
        """
        self._find(self.criteria, criterion_id)
        self._find(self.alternatives, id_a)
        self._find(self.alternatives, id_b)
        comparisons = self.alternative_comparisons.setdefault(criterion_id, {})
        self._store(comparisons, id_a, id_b, signal)

    def get_alternative_comparison(self, criterion_id: str, id_a: str, id_b: str) -> float:
        self._find(self.criteria, criterion_id)
        self._find(self.alternatives, id_a)
        self._find(self.alternatives, id_b)
        return self._read(self.alternative_comparisons.get(criterion_id, {}), id_a, id_b)

    @staticmethod
    def _positional_signals(entities: List[Entity],
                            comparisons: Dict[Tuple[str, str], float]) -> Dict[str, float]:
        positions = {entity.id: index for index, entity in enumerate(entities)}
        signals = SignalMap()
        for (id_a, id_b), value in comparisons.items():
            if id_a in positions and id_b in positions:
                signals.set(positions[id_a], positions[id_b], value)
        return signals.to_dict()

    def criteria_signals(self) -> Dict[str, float]:
        """Сигнали порівнянь критеріїв у позиційному форматі {"i_j": сигнал}"""
        return self._positional_signals(self.criteria, self.criteria_comparisons)

    def alternative_signals(self, criterion_id: str) -> Dict[str, float]:
        """Сигнали порівнянь альтернатив за критерієм у форматі {"i_j": сигнал}"""
        self._find(self.criteria, criterion_id)
        return self._positional_signals(
            self.alternatives, self.alternative_comparisons.get(criterion_id, {})
        )

    # ------------------------------------------------------------------
    # Розрахунки
    # ------------------------------------------------------------------

    @property
    def criteria_names(self) -> List[str]:
        return [c.name for c in self.criteria]

    @property
    def alternative_names(self) -> List[str]:
        return [a.name for a in self.alternatives]

    @staticmethod
    def _analyze(label: str, names: List[str], signals: Dict[str, float],
                 threshold: float, criterion_id: Optional[str] = None) -> GroupAnalysis:
        matrix = build_matrix(names, signals)
        priorities = priority_vector(matrix)
        report = consistency_report(matrix, priorities, threshold)
        return GroupAnalysis(label, names, matrix, priorities, report, criterion_id)

    def analyze_criteria(self, threshold: float = CR_THRESHOLD) -> GroupAnalysis:
        """Матриця, пріоритети та узгодженість порівнянь критеріїв"""
        return self._analyze("Критерії", self.criteria_names, self.criteria_signals(), threshold)

    def analyze_alternatives(self, criterion_id: str, threshold: float = CR_THRESHOLD) -> GroupAnalysis:
        """Матриця, пріоритети та узгодженість порівнянь альтернатив за критерієм"""
        criterion = self._find(self.criteria, criterion_id)
        return self._analyze(
            f"Альтернативи за критерієм '{criterion.name}'",
            self.alternative_names,
            self.alternative_signals(criterion_id),
            threshold,
            criterion_id,
        )

    def _issue(self, analysis: GroupAnalysis) -> ConsistencyIssue:
        cr = analysis.consistency['CR']
        threshold = analysis.consistency['threshold']
        if analysis.criterion_id is None:
            subject = "Порівняння критеріїв"
        else:
            criterion = self._find(self.criteria, analysis.criterion_id)
            subject = f"Порівняння альтернатив за критерієм '{criterion.name}'"
        message = (
            f"{subject} неузгоджені: CR = {cr * 100:.1f}% > {threshold * 100:.0f}%. "
            f"Перегляньте оцінки."
        )
        suggestions = generate_revision_suggestions(analysis.matrix, analysis.entity_names)
        return ConsistencyIssue(analysis.label, analysis.criterion_id, cr, threshold, message, suggestions)

    def _iter_analyses(self, threshold: float):
        yield self.analyze_criteria(threshold)
        for criterion in self.criteria:
            yield self.analyze_alternatives(criterion.id, threshold)

    def find_inconsistencies(self, threshold: float = CR_THRESHOLD) -> List[ConsistencyIssue]:
        """
        Перевіряє узгодженість усіх груп: спочатку критерії, потім альтернативи
        за кожним критерієм у порядку оголошення.

        Returns:
            Список усіх порушень узгодженості
        """
        return [self._issue(a) for a in self._iter_analyses(threshold) if not a.is_consistent]

    def first_inconsistency(self, threshold: float = CR_THRESHOLD) -> Optional[ConsistencyIssue]:
        """Повертає перше порушення узгодженості (перевірка зупиняється на ньому)"""
        for analysis in self._iter_analyses(threshold):
            if not analysis.is_consistent:
                return self._issue(analysis)
        return None

    def evaluate(self, threshold: float = CR_THRESHOLD) -> SessionResult:
        """
        Обчислює всі похідні значення сесії.
        Результати формуються навіть за порушення узгодженості; рішення
        про їх показ приймає викликач за ознакою is_reliable.

        Returns:
            SessionResult з аналізами груп, оцінками, ранжуванням та першим порушенням
        """
        criteria_analysis = self.analyze_criteria(threshold)
        alternative_analyses = [
            self.analyze_alternatives(criterion.id, threshold) for criterion in self.criteria
        ]

        scores = aggregate(
            criteria_analysis.priorities,
            [analysis.priorities for analysis in alternative_analyses],
            self.alternative_names,
        )

        issue = None
        for analysis in [criteria_analysis] + alternative_analyses:
            if not analysis.is_consistent:
                issue = self._issue(analysis)
                break

        if issue is not None:
            logger.info("Виявлено неузгодженість: %s", issue.label)

        return SessionResult(criteria_analysis, alternative_analyses, scores, rank_scores(scores), issue)

    # ------------------------------------------------------------------
    # Створення сесії
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict) -> 'DecisionSession':
        """
        Створює сесію з вхідного документа

        Args:
            data: Словник з ключами criteria, alternatives,
                  criteria_comparisons {"i_j": сигнал},
                  alternative_comparisons {назва_критерію або "c_<індекс>": {"i_j": сигнал}}

        Returns:
            Заповнена сесія
        """
        session = cls()
        for name in data.get('criteria', []):
            session.add_criterion(name)
        for name in data.get('alternatives', []):
            session.add_alternative(name)

        for key, signal in data.get('criteria_comparisons', {}).items():
            i, j = session._resolve_pair(key, session.criteria)
            session.set_criteria_comparison(session.criteria[i].id, session.criteria[j].id, signal)

        for criterion_key, signals in data.get('alternative_comparisons', {}).items():
            criterion = session._resolve_criterion(criterion_key)
            for key, signal in signals.items():
                i, j = session._resolve_pair(key, session.alternatives)
                session.set_alternative_comparison(
                    criterion.id, session.alternatives[i].id, session.alternatives[j].id, signal
                )

        return session

    @staticmethod
    def _resolve_pair(key, entities: List[Entity]) -> Tuple[int, int]:
        parsed = parse_pair_key(key)
        if parsed is None:
            raise ValueError(f"Некоректний ключ пари: {key!r}")
        i, j = parsed
        if not (0 <= i < len(entities) and 0 <= j < len(entities)):
            raise ValueError(f"Індекс пари {key!r} поза межами [0, {len(entities) - 1}]")
        return i, j

    def _resolve_criterion(self, key: str) -> Entity:
        for criterion in self.criteria:
            if criterion.name == key:
                return criterion
        if key.startswith("c_"):
            try:
                index = int(key[2:])
            except ValueError:
                index = -1
            if 0 <= index < len(self.criteria):
                return self.criteria[index]
        raise KeyError(f"Невідомий критерій: {key!r}")

    @classmethod
    def with_defaults(cls) -> 'DecisionSession':
        """Сесія з прикладом: вибір першої мови програмування"""
        session = cls()
        for name in DEFAULT_CRITERIA:
            session.add_criterion(name)
        for name in DEFAULT_ALTERNATIVES:
            session.add_alternative(name)
        return session
