from __future__ import annotations

import json

import pytest

from botclf.infrastructure.dataset_loader import load_dataset


def test_load_jsonl_skips_blank_lines(tmp_path):
    p = tmp_path / "data.jsonl"
    p.write_text(
        '{"input": "hello there", "output": 0}\n\n{"input": "click to win", "output": 1}\n',
        encoding="utf-8",
    )
    records = load_dataset(p)
    assert [(r.input, r.output) for r in records] == [("hello there", 0), ("click to win", 1)]


def test_load_json_list_and_object(tmp_path):
    lst = tmp_path / "list.json"
    lst.write_text(json.dumps([{"input": "a", "output": 0}, {"input": "b", "output": 1}]), encoding="utf-8")
    obj = tmp_path / "obj.json"
    obj.write_text(json.dumps({"input": "c", "output": 1}), encoding="utf-8")
    assert len(load_dataset(lst)) == 2
    assert load_dataset(obj)[0].output == 1


def test_rejects_unknown_suffix(tmp_path):
    p = tmp_path / "data.csv"
    p.write_text("input,output\n", encoding="utf-8")
    with pytest.raises(ValueError, match=".json or .jsonl"):
        load_dataset(p)


def test_rejects_label_outside_binary(tmp_path):
    p = tmp_path / "data.jsonl"
    p.write_text('{"input": "ok", "output": 0}\n{"input": "bad", "output": 2}\n', encoding="utf-8")
    with pytest.raises(ValueError, match="row 1"):
        load_dataset(p)


def test_rejects_blank_text(tmp_path):
    p = tmp_path / "data.jsonl"
    p.write_text('{"input": "   ", "output": 1}\n', encoding="utf-8")
    with pytest.raises(ValueError, match="row 0"):
        load_dataset(p)


def test_missing_and_empty_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_dataset(tmp_path / "nope.jsonl")
    empty = tmp_path / "empty.jsonl"
    empty.write_text("\n", encoding="utf-8")
    with pytest.raises(ValueError, match="empty"):
        load_dataset(empty)


def test_bundled_dataset_is_valid():
    from pathlib import Path

    path = Path(__file__).resolve().parents[1] / "src" / "datasets" / "tweets.jsonl"
    records = load_dataset(path)
    assert {r.output for r in records} == {0, 1}
