"""Tests for the dietlp command line."""

from __future__ import annotations

import json

import pytest
import yaml
from typer.testing import CliRunner

from dietlp.cli import app
from dietlp.data.diet_table import reference_problem
from dietlp.optimizer.serialization import serialize_problem

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path):
    """A settings path that does not exist, so defaults apply."""
    return tmp_path / "no-config.yaml"


@pytest.fixture
def problem_file(tmp_path):
    path = tmp_path / "diet.yaml"
    path.write_text(yaml.safe_dump(serialize_problem(reference_problem()), sort_keys=False))
    return path


@pytest.fixture
def infeasible_file(tmp_path):
    path = tmp_path / "impossible.yaml"
    path.write_text(
        "items:\n"
        "  milk: {cost: 0.89, contributions: {calories: 100}}\n"
        "guidelines:\n"
        "  - {category: calories, kind: min, bound: 1000000}\n"
        "  - {category: calories, kind: max, bound: 2200}\n"
    )
    return path


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "solve" in result.stdout
    assert "example" in result.stdout


class TestSolveCommand:
    """Tests for `dietlp solve`."""

    def test_solve_json(self, problem_file, config_path):
        result = runner.invoke(
            app, ["solve", str(problem_file), "--json", "--config", str(config_path)]
        )
        assert result.exit_code == 0

        response = json.loads(result.stdout)
        assert response["success"] is True
        assert response["command"] == "solve"
        assert response["errors"] == []
        solution = response["data"]["solution"]
        assert solution["total_cost"] == pytest.approx(11.828871, abs=1e-3)
        assert set(solution["categories"]) == {"calories", "protein", "sodium", "fat"}

    def test_solve_table(self, problem_file, config_path):
        result = runner.invoke(app, ["solve", str(problem_file), "--config", str(config_path)])
        assert result.exit_code == 0
        assert "milk" in result.stdout
        assert "hamburger" in result.stdout

    def test_solve_markdown_with_clarabel(self, problem_file, config_path):
        result = runner.invoke(
            app,
            [
                "solve", str(problem_file),
                "--backend", "clarabel",
                "--output", "markdown",
                "--config", str(config_path),
            ],
        )
        assert result.exit_code == 0
        assert "# Optimized Allocation" in result.stdout
        assert "| milk |" in result.stdout

    def test_missing_file(self, tmp_path, config_path):
        result = runner.invoke(
            app,
            ["solve", str(tmp_path / "nope.yaml"), "--json", "--config", str(config_path)],
        )
        assert result.exit_code == 1
        response = json.loads(result.stdout)
        assert response["success"] is False
        assert "not found" in response["errors"][0]

    def test_infeasible(self, infeasible_file, config_path):
        result = runner.invoke(
            app, ["solve", str(infeasible_file), "--json", "--config", str(config_path)]
        )
        assert result.exit_code == 1
        response = json.loads(result.stdout)
        assert response["success"] is False
        assert response["data"]["status"] == "infeasible"

    def test_malformed_contribution(self, tmp_path, config_path):
        path = tmp_path / "bad.yaml"
        path.write_text("items:\n  milk: {cost: 1, contributions: {calories: lots}}\n")

        result = runner.invoke(app, ["solve", str(path), "--json", "--config", str(config_path)])

        assert result.exit_code == 1
        response = json.loads(result.stdout)
        assert response["success"] is False
        assert response["errors"][0].startswith("Invalid problem file")

    def test_unknown_output_format(self, problem_file, config_path):
        result = runner.invoke(
            app, ["solve", str(problem_file), "-o", "xml", "--config", str(config_path)]
        )
        assert result.exit_code == 1
        assert "Unknown output format" in result.stdout

    def test_bad_output_format_in_config(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("defaults:\n  output_format: xml\n")

        result = runner.invoke(app, ["example", "--config", str(config)])
        assert result.exit_code == 1
        assert "Unknown output format" in result.stdout

    def test_unknown_backend(self, problem_file, config_path):
        result = runner.invoke(
            app,
            ["solve", str(problem_file), "-b", "simplex", "--json", "--config", str(config_path)],
        )
        assert result.exit_code == 1
        assert "Unknown solver backend" in json.loads(result.stdout)["errors"][0]


class TestExampleCommand:
    """Tests for `dietlp example`."""

    def test_example_json(self, config_path):
        result = runner.invoke(app, ["example", "--json", "--config", str(config_path)])
        assert result.exit_code == 0

        response = json.loads(result.stdout)
        items = {i["name"]: i["quantity"] for i in response["data"]["solution"]["items"]}
        assert items["milk"] == pytest.approx(6.970166, abs=1e-3)
        assert items["chicken"] == pytest.approx(0.0, abs=1e-6)


class TestValidateCommand:
    """Tests for `dietlp validate`."""

    def test_validate_json(self, problem_file, config_path):
        result = runner.invoke(
            app, ["validate", str(problem_file), "--json", "--config", str(config_path)]
        )
        assert result.exit_code == 0

        data = json.loads(result.stdout)["data"]
        assert data["items"] == 9
        assert data["categories"] == ["calories", "protein", "sodium", "fat"]
        assert data["constraints"] == [
            "calories (min)",
            "calories (max)",
            "protein (min)",
            "fat (min)",
            "fat (max)",
            "sodium (min)",
            "sodium (max)",
        ]

    def test_validate_unknown_category(self, tmp_path, config_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "items:\n"
            "  milk: {cost: 0.89, contributions: {calories: 100}}\n"
            "guidelines:\n"
            "  - {category: vitamin_c, kind: min, bound: 60}\n"
        )
        result = runner.invoke(app, ["validate", str(path), "--json", "--config", str(config_path)])
        assert result.exit_code == 1
        assert "vitamin_c" in json.loads(result.stdout)["errors"][0]


class TestConfigCommands:
    """Tests for `dietlp config`."""

    def test_show_defaults(self, config_path):
        result = runner.invoke(app, ["config", "show", "--config", str(config_path)])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["solver"]["backend"] == "highs"
        assert data["formulation"]["min_tolerance"] == 0.0001

    def test_init_writes_file(self, tmp_path):
        target = tmp_path / "config.yaml"

        result = runner.invoke(app, ["config", "init", "--path", str(target)])
        assert result.exit_code == 0
        assert target.exists()
        assert yaml.safe_load(target.read_text())["solver"]["backend"] == "highs"

        again = runner.invoke(app, ["config", "init", "--path", str(target)])
        assert again.exit_code == 1

        forced = runner.invoke(app, ["config", "init", "--path", str(target), "--force"])
        assert forced.exit_code == 0
