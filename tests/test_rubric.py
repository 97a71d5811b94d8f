"""
Test: rubric definition — ordering, option sets, file/data agreement.
"""
import json
from pathlib import Path

import pytest

import rubrics
from rubric import (
    GUARD_RUBRIC, RubricCategory, RubricError, RubricOption,
    category_ids, check_rubric, get_categories, max_total_points,
)
from rubric_loader import DEFAULT_RUBRIC_FILE, load_rubric


def _category(points, category_id="x"):
    return RubricCategory(
        id=category_id,
        label=category_id.title(),
        description="",
        options=tuple(RubricOption(points=p, description=f"{p} pts") for p in points),
    )


class TestGuardRubric:
    def test_category_order(self):
        assert category_ids() == ["punctuality", "attendance", "patrol", "dar", "conduct"]

    def test_order_is_stable(self):
        assert get_categories() == get_categories()
        assert [c.id for c in get_categories()] == category_ids()

    def test_builtin_rubric_is_immutable(self):
        assert isinstance(GUARD_RUBRIC, tuple)
        assert get_categories() is GUARD_RUBRIC
        with pytest.raises(AttributeError):
            GUARD_RUBRIC.append(GUARD_RUBRIC[0])

    def test_max_points_per_category(self):
        assert [c.max_points for c in GUARD_RUBRIC] == [3, 10, 3, 3, 10]

    def test_max_total_is_29(self):
        assert max_total_points() == 29

    def test_every_category_has_zero_option(self):
        for category in GUARD_RUBRIC:
            assert category.options[0].points == 0

    def test_fractional_options_allowed(self):
        punctuality = GUARD_RUBRIC[0]
        assert punctuality.allows(0.5)
        assert not punctuality.allows(0.25)

    def test_option_for(self):
        attendance = GUARD_RUBRIC[1]
        assert attendance.option_for(10).description == "No-call/no-show"
        assert attendance.option_for(5) is None


class TestCheckRubric:
    def test_accepts_valid(self):
        check_rubric([_category([0, 0.5, 1])])

    def test_rejects_empty(self):
        with pytest.raises(RubricError):
            check_rubric([])

    def test_rejects_missing_zero(self):
        with pytest.raises(RubricError, match="0-point"):
            check_rubric([_category([1, 2])])

    def test_rejects_duplicate_points(self):
        with pytest.raises(RubricError, match="ascending"):
            check_rubric([_category([0, 1, 1])])

    def test_rejects_descending(self):
        with pytest.raises(RubricError):
            check_rubric([_category([0, 3, 2])])

    def test_rejects_duplicate_ids(self):
        with pytest.raises(RubricError, match="Duplicate"):
            check_rubric([_category([0, 1], "a"), _category([0, 2], "a")])

    def test_rejects_category_without_options(self):
        with pytest.raises(RubricError):
            check_rubric([_category([])])

    def test_rubric_error_is_value_error(self):
        assert issubclass(RubricError, ValueError)


class TestRubricLoader:
    def test_shipped_file_matches_builtin(self):
        definition = load_rubric(DEFAULT_RUBRIC_FILE)
        assert definition.categories == GUARD_RUBRIC
        assert definition.version == "2025.1"

    def test_default_file_ships_with_rubrics_package(self):
        assert DEFAULT_RUBRIC_FILE.is_file()
        assert DEFAULT_RUBRIC_FILE.resolve().parent == Path(rubrics.__file__).resolve().parent

    def test_default_load_ignores_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        definition = load_rubric()
        assert definition.name == "Guard Performance Evaluation"
        assert definition.categories == GUARD_RUBRIC

    def test_json_list(self, tmp_path):
        path = tmp_path / "mini.json"
        path.write_text(json.dumps([
            {"id": "a", "label": "A", "options": [
                {"points": 0, "description": "ok"},
                {"points": 2, "description": "bad"},
            ]},
        ]))
        definition = load_rubric(path)
        assert definition.name == "mini"
        assert definition.categories[0].max_points == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rubric(tmp_path / "nope.yaml")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "rubric.txt"
        path.write_text("[]")
        with pytest.raises(ValueError, match="Unsupported"):
            load_rubric(path)

    def test_missing_categories_key(self, tmp_path):
        path = tmp_path / "rubric.yaml"
        path.write_text("name: Broken\n")
        with pytest.raises(ValueError, match="categories"):
            load_rubric(path)

    def test_option_without_points(self, tmp_path):
        path = tmp_path / "rubric.yaml"
        path.write_text(
            "categories:\n"
            "  - id: a\n"
            "    label: A\n"
            "    options:\n"
            "      - description: no points\n"
        )
        with pytest.raises(ValueError, match="points"):
            load_rubric(path)

    def test_non_numeric_points(self, tmp_path):
        path = tmp_path / "rubric.yaml"
        path.write_text(
            "categories:\n"
            "  - id: a\n"
            "    label: A\n"
            "    options:\n"
            "      - {points: zero, description: nope}\n"
        )
        with pytest.raises(ValueError, match="non-numeric"):
            load_rubric(path)

    def test_file_rules_enforced(self, tmp_path):
        path = tmp_path / "rubric.yaml"
        path.write_text(
            "categories:\n"
            "  - id: a\n"
            "    label: A\n"
            "    options:\n"
            "      - {points: 1, description: one}\n"
        )
        with pytest.raises(RubricError):
            load_rubric(path)
