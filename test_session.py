"""
Тестування моделі сесії прийняття рішення
"""

import numpy as np
import pytest

from session import DEFAULT_ALTERNATIVES, DEFAULT_CRITERIA, DecisionSession


@pytest.fixture
def session():
    """Сесія з трьома критеріями та трьома альтернативами"""
    s = DecisionSession()
    for name in ["Ціна", "Якість", "Сервіс"]:
        s.add_criterion(name)
    for name in ["Проект_A", "Проект_B", "Проект_C"]:
        s.add_alternative(name)
    return s


def ids(entities):
    return [e.id for e in entities]


def test_default_names_and_unique_ids():
    s = DecisionSession()
    first = s.add_criterion()
    second = s.add_criterion()
    alt = s.add_alternative()

    assert first.name == "Критерій 1"
    assert second.name == "Критерій 2"
    assert alt.name == "Альтернатива 1"
    assert first.id != second.id


def test_with_defaults():
    s = DecisionSession.with_defaults()
    assert s.criteria_names == DEFAULT_CRITERIA
    assert s.alternative_names == DEFAULT_ALTERNATIVES

    result = s.evaluate()
    assert result.is_reliable
    assert [item['score'] for item in result.ranking] == pytest.approx([0.2] * 5)


def test_empty_session_evaluates():
    result = DecisionSession().evaluate()
    assert result.scores == []
    assert result.ranking == []
    assert result.criteria.matrix.shape == (0, 0)
    assert result.is_reliable


def test_criteria_signals_are_positional(session):
    c = ids(session.criteria)
    session.set_criteria_comparison(c[0], c[1], 3)
    session.set_criteria_comparison(c[2], c[1], 2)

    assert session.criteria_signals() == {"0_1": 3.0, "1_2": -2.0}
    assert session.get_criteria_comparison(c[1], c[0]) == -3.0
    assert session.get_criteria_comparison(c[0], c[2]) == 0.0


def test_setting_reverse_pair_replaces_signal(session):
    c = ids(session.criteria)
    session.set_criteria_comparison(c[0], c[1], 3)
    session.set_criteria_comparison(c[1], c[0], 5)
    assert session.criteria_signals() == {"0_1": -5.0}


def test_invalid_ids_and_self_comparison(session):
    c = ids(session.criteria)
    a = ids(session.alternatives)
    with pytest.raises(KeyError):
        session.set_criteria_comparison(c[0], "missing", 1)
    with pytest.raises(KeyError):
        session.set_alternative_comparison("missing", a[0], a[1], 1)
    with pytest.raises(KeyError):
        session.set_alternative_comparison(c[0], a[0], c[1], 1)
    with pytest.raises(KeyError):
        session.get_criteria_comparison(c[0], "missing")
    with pytest.raises(KeyError):
        session.get_criteria_comparison("missing", c[1])
    with pytest.raises(KeyError):
        session.get_alternative_comparison(c[0], a[0], "missing")
    with pytest.raises(KeyError):
        session.get_alternative_comparison(c[0], c[1], a[0])
    with pytest.raises(ValueError):
        session.set_criteria_comparison(c[0], c[0], 1)


def test_rename_preserves_comparisons(session):
    c = ids(session.criteria)
    a = ids(session.alternatives)
    session.set_alternative_comparison(c[1], a[0], a[1], 4)

    session.rename_criterion(c[1], "Надійність")
    session.rename_alternative(a[0], "Проект_X")

    assert session.alternative_signals(c[1]) == {"0_1": 4.0}
    analysis = session.analyze_alternatives(c[1])
    assert "Надійність" in analysis.label
    assert analysis.entity_names[0] == "Проект_X"
    assert analysis.matrix[0, 1] == 5.0


def test_move_criterion_preserves_comparisons(session):
    c = ids(session.criteria)
    session.set_criteria_comparison(c[0], c[2], 2)

    session.move_criterion(c[2], 0)

    assert session.criteria_names == ["Сервіс", "Ціна", "Якість"]
    assert session.criteria_signals() == {"0_1": -2.0}
    assert session.get_criteria_comparison(c[0], c[2]) == 2.0


def test_remove_alternative_keeps_other_pairs(session):
    c = ids(session.criteria)
    a = ids(session.alternatives)
    session.set_alternative_comparison(c[0], a[0], a[1], 1)
    session.set_alternative_comparison(c[0], a[0], a[2], 6)
    session.set_alternative_comparison(c[0], a[1], a[2], 2)

    session.remove_alternative(a[1])

    assert session.alternative_names == ["Проект_A", "Проект_C"]
    assert session.alternative_signals(c[0]) == {"0_1": 6.0}


def test_remove_criterion_drops_its_comparisons(session):
    c = ids(session.criteria)
    a = ids(session.alternatives)
    session.set_criteria_comparison(c[0], c[1], 1)
    session.set_criteria_comparison(c[1], c[2], 1)
    session.set_alternative_comparison(c[1], a[0], a[1], 3)

    session.remove_criterion(c[1])

    assert session.criteria_names == ["Ціна", "Сервіс"]
    assert session.criteria_signals() == {}
    assert c[1] not in session.alternative_comparisons
    with pytest.raises(KeyError):
        session.alternative_signals(c[1])


def test_evaluate_aggregates_weighted_priorities(session):
    c = ids(session.criteria)
    a = ids(session.alternatives)
    session.set_criteria_comparison(c[0], c[1], 1)
    session.set_criteria_comparison(c[0], c[2], 3)
    session.set_criteria_comparison(c[1], c[2], 1)
    session.set_alternative_comparison(c[0], a[2], a[0], 2)
    session.set_alternative_comparison(c[0], a[2], a[1], 2)

    result = session.evaluate()

    np.testing.assert_allclose(result.criteria.priorities, [4 / 7, 2 / 7, 1 / 7])
    assert result.is_reliable
    assert len(result.alternatives) == 3

    expected = np.zeros(3)
    for weight, analysis in zip(result.criteria.priorities, result.alternatives):
        expected += weight * analysis.priorities
    assert [s['score'] for s in result.scores] == pytest.approx(expected.tolist())
    assert sum(s['score'] for s in result.scores) == pytest.approx(1.0)
    assert result.ranking[0]['name'] == "Проект_C"


def make_inconsistent(session, criterion_index=None):
    """A > B, B > C, але C сильно переважає A"""
    if criterion_index is None:
        e = ids(session.criteria)
        setter = session.set_criteria_comparison
    else:
        e = ids(session.alternatives)
        criterion_id = session.criteria[criterion_index].id

        def setter(id_a, id_b, signal):
            session.set_alternative_comparison(criterion_id, id_a, id_b, signal)
    setter(e[0], e[1], 4)
    setter(e[1], e[2], 4)
    setter(e[0], e[2], -6)


def test_inconsistent_criteria_are_reported_first(session):
    make_inconsistent(session, criterion_index=2)
    make_inconsistent(session)

    issues = session.find_inconsistencies()
    assert [issue.criterion_id for issue in issues] == [None, session.criteria[2].id]

    first = session.first_inconsistency()
    assert first.criterion_id is None
    assert first.CR > 0.1
    assert "критеріїв" in first.message
    assert first.suggestions


def test_inconsistent_alternatives_follow_declaration_order(session):
    make_inconsistent(session, criterion_index=2)
    make_inconsistent(session, criterion_index=1)

    first = session.first_inconsistency()
    assert first.criterion_id == session.criteria[1].id
    assert "Якість" in first.message

    result = session.evaluate()
    assert not result.is_reliable
    assert result.issue.criterion_id == session.criteria[1].id
    # результати обчислюються попри неузгодженість
    assert len(result.ranking) == 3


def test_threshold_controls_gate(session):
    make_inconsistent(session)
    assert session.first_inconsistency(threshold=10.0) is None
    assert session.evaluate(threshold=10.0).is_reliable


def test_from_dict_by_name_and_index():
    data = {
        'criteria': ["Ціна", "Якість"],
        'alternatives': ["A1", "A2", "A3"],
        'criteria_comparisons': {"0_1": 2},
        'alternative_comparisons': {
            "Ціна": {"0_1": 1, "0_2": 3},
            "c_1": {"1_2": -2},
        },
    }
    s = DecisionSession.from_dict(data)

    assert s.criteria_names == ["Ціна", "Якість"]
    assert s.criteria_signals() == {"0_1": 2.0}
    assert s.alternative_signals(s.criteria[0].id) == {"0_1": 1.0, "0_2": 3.0}
    assert s.alternative_signals(s.criteria[1].id) == {"1_2": -2.0}


@pytest.mark.parametrize("data, error", [
    ({'criteria': ["A", "B"], 'criteria_comparisons': {"0_5": 1}}, ValueError),
    ({'criteria': ["A", "B"], 'criteria_comparisons': {"bad": 1}}, ValueError),
    ({'criteria': ["A"], 'alternatives': ["X", "Y"],
      'alternative_comparisons': {"c_3": {"0_1": 1}}}, KeyError),
])
def test_from_dict_rejects_invalid_input(data, error):
    with pytest.raises(error):
        DecisionSession.from_dict(data)


def test_huge_signal_is_stored_and_evaluated(session):
    c = ids(session.criteria)
    session.set_criteria_comparison(c[0], c[1], 10 ** 400)

    assert session.get_criteria_comparison(c[1], c[0]) < 0
    result = session.evaluate()
    assert sum(item['score'] for item in result.ranking) == pytest.approx(1.0)
