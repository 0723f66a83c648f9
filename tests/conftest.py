"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

from telemetry_h5.schemas.records import RawRecord


@pytest.fixture
def activity_entry() -> dict[str, Any]:
    """Activity record with string timestamps and state tokens."""
    return {
        "c": "s3p.activity",
        "l": {"vehicle": "TRK-042", "driver": "D1"},
        "a": {"slot": 1},
        "la": 3,
        "v": [["1000", "R"], ["2000", "r"]],
    }


@pytest.fixture
def activity_record(activity_entry: dict[str, Any]) -> RawRecord:
    """Validated activity record."""
    return RawRecord.model_validate(activity_entry)


@pytest.fixture
def sample_namespaces(activity_entry: dict[str, Any]) -> list[list[dict[str, Any]]]:
    """Two namespaces: duplicates, an empty record, ignition and speed data."""
    return [
        [
            activity_entry,
            {"c": "x", "l": {}, "a": {}, "la": 0, "v": [[1000.0, 1.5]]},
            {"c": "x", "l": {}, "a": {}, "la": 0, "v": [[2000.0, 2.5]]},
            {"c": "x", "l": {}, "a": {}, "la": 0, "v": [[3000.0, 3.5]]},
            {"c": "empty", "l": {"k": "v"}, "a": {"n": 1}, "la": 1, "v": []},
        ],
        [
            {
                "c": "s3p.ignition",
                "l": {"unit": "state"},
                "a": {},
                "la": 2,
                "v": [[5000, "ON"], [6000, "OFF"], [7000, "ON"]],
            },
            {
                "c": "can.speed",
                "l": {"unit": "km/h"},
                "a": {"precision": 1},
                "la": 0,
                "v": [[1000, 88.5, True], [2000, 90.0]],
            },
        ],
    ]


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a JSON document into tmp_path and return its path."""

    def _write(data: Any, name: str = "input.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def input_file(write_json, sample_namespaces: list[list[dict[str, Any]]]) -> Path:
    """Sample input document on disk."""
    return write_json(sample_namespaces)
