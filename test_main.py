"""
Тестування повного циклу обробки через командний рядок
"""

import json
import sys

import pandas as pd
import pytest

import main
from session import DecisionSession


INPUT_DATA = {
    'criteria': ["Ціна", "Якість"],
    'alternatives': ["A1", "A2", "A3"],
    'criteria_comparisons': {"0_1": 1},
    'alternative_comparisons': {
        "Ціна": {"0_1": 2, "0_2": 2},
        "Якість": {"0_1": -1, "0_2": 0, "1_2": 1},
    },
}

INCONSISTENT_DATA = {
    'criteria': ["Ціна", "Якість", "Сервіс"],
    'alternatives': ["A1", "A2"],
    'criteria_comparisons': {"0_1": 4, "1_2": 4, "0_2": -6},
}


def write_input(tmp_path, data):
    input_file = tmp_path / "decision.json"
    input_file.write_text(json.dumps(data, ensure_ascii=False), encoding='utf-8')
    return str(input_file)


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, 'argv', ['main.py', *args])
    with pytest.raises(SystemExit) as exc_info:
        main.main()
    return exc_info.value.code


def test_process_decision_writes_results(tmp_path, capsys):
    session = main.build_session(INPUT_DATA)
    out_dir = tmp_path / "out"

    code = main.process_decision(session, str(out_dir))

    assert code == 0
    ranking = pd.read_csv(out_dir / "ranking.csv")
    assert list(ranking.columns) == ['rank', 'name', 'score']
    assert ranking['rank'].tolist() == [1, 2, 3]
    assert ranking['score'].sum() == pytest.approx(1.0)

    report = json.loads((out_dir / "consistency.json").read_text(encoding='utf-8'))
    assert report['is_reliable'] is True
    assert report['criteria']['items'] == ["Ціна", "Якість"]
    assert len(report['alternatives']) == 2
    assert json.loads((out_dir / "suggestions.json").read_text(encoding='utf-8')) == []

    assert "ОБРОБКА ЗАВЕРШЕНА" in capsys.readouterr().out


def test_strict_mode_blocks_ranking(tmp_path):
    session = main.build_session(INCONSISTENT_DATA)
    out_dir = tmp_path / "out"

    code = main.process_decision(session, str(out_dir), strict=True)

    assert code == 2
    assert not (out_dir / "ranking.csv").exists()
    report = json.loads((out_dir / "consistency.json").read_text(encoding='utf-8'))
    assert report['is_reliable'] is False
    assert "критеріїв" in report['issue']
    assert json.loads((out_dir / "suggestions.json").read_text(encoding='utf-8'))


def test_non_strict_mode_still_ranks(tmp_path):
    session = main.build_session(INCONSISTENT_DATA)
    out_dir = tmp_path / "out"

    assert main.process_decision(session, str(out_dir)) == 0
    assert (out_dir / "ranking.csv").exists()


def test_main_with_input_file(tmp_path, monkeypatch):
    input_file = write_input(tmp_path, INPUT_DATA)
    out_dir = tmp_path / "results"

    assert run_main(monkeypatch, '--input', input_file, '--out', str(out_dir)) == 0
    assert (out_dir / "ranking.csv").exists()


def test_main_demo(tmp_path, monkeypatch):
    assert run_main(monkeypatch, '--demo', '--out', str(tmp_path / "demo")) == 0


def test_main_threshold_and_strict(tmp_path, monkeypatch):
    input_file = write_input(tmp_path, INCONSISTENT_DATA)
    assert run_main(monkeypatch, '--input', input_file, '--out', str(tmp_path / "a"), '--strict') == 2
    assert run_main(monkeypatch, '--input', input_file, '--out', str(tmp_path / "b"),
                    '--strict', '--threshold', '100') == 0


def test_main_missing_file(tmp_path, monkeypatch, capsys):
    code = run_main(monkeypatch, '--input', str(tmp_path / "missing.json"))
    assert code == 1
    assert "не знайдено" in capsys.readouterr().out


def test_main_invalid_json(tmp_path, monkeypatch):
    input_file = tmp_path / "broken.json"
    input_file.write_text("{not json", encoding='utf-8')
    assert run_main(monkeypatch, '--input', str(input_file)) == 1


def test_main_invalid_pair_key(tmp_path, monkeypatch, capsys):
    input_file = write_input(tmp_path, {'criteria': ["A", "B"], 'criteria_comparisons': {"0_9": 1}})
    assert run_main(monkeypatch, '--input', input_file, '--out', str(tmp_path / "out")) == 1
    assert "Помилка під час обробки" in capsys.readouterr().err


def test_demo_session_is_complete():
    session = main.demo_session()
    result = session.evaluate()
    assert len(result.ranking) == 5
    assert sum(item['score'] for item in result.ranking) == pytest.approx(1.0)
    assert isinstance(session, DecisionSession)
