"""Unit tests for CSV and YAML rubric loading."""

from pathlib import Path

import pytest

from ago_diagnosis.rubric.errors import RubricLoadError
from ago_diagnosis.rubric.loader import (
    FileRubricSource,
    parse_csv_rubric,
    parse_yaml_rubric,
)
from ago_diagnosis.rubric.models import EvaluationMethod
from tests.helpers.pages import RUBRICS_DIR


class TestParseCsvRubric:
    """Tests for CSV parsing."""

    def test_english_headers(self) -> None:
        """Rows map onto rubric items in file order."""
        items = FileRubricSource(RUBRICS_DIR / "two_machine_checks.csv").load()

        assert [item.id for item in items] == ["structured_data", "html_lang"]
        assert items[0].selector == 'script[type="application/ld+json"]'
        assert items[0].method == EvaluationMethod.MACHINE_COUNT
        assert items[1].recommendation_template.endswith("Language declared.")

    def test_japanese_headers_with_bom(self) -> None:
        """Japanese column names and a UTF-8 BOM are accepted."""
        items = FileRubricSource(RUBRICS_DIR / "japanese_headers.csv").load()

        assert [item.id for item in items] == ["title", "clarity"]
        assert items[1].method == EvaluationMethod.AI_JUDGED
        assert items[1].prompt_template == "本文の明確さを評価してください。"

    def test_whitespace_selector_is_kept(self) -> None:
        """Unusable selectors load; they degrade at evaluation time."""
        items = parse_csv_rubric((RUBRICS_DIR / "whitespace_selector.csv").read_text())

        assert items[0].selector == "   "
        assert len(items) == 3

    def test_blank_rows_are_skipped_and_ids_defaulted(self) -> None:
        """Empty rows vanish; a blank id becomes row-<n>."""
        text = "id,selector,method\n,,\n,h1,0\n"

        items = parse_csv_rubric(text)

        assert [item.id for item in items] == ["row-2"]

    def test_blank_method_defaults_to_machine(self) -> None:
        """A missing method code means a machine check."""
        items = parse_csv_rubric("id,selector,method\ntitle,title,\n")

        assert items[0].method_code == "0"

    def test_duplicate_ids_rejected(self) -> None:
        """Duplicate ids are a configuration error."""
        with pytest.raises(RubricLoadError, match="Duplicate rubric item id 'title'"):
            FileRubricSource(RUBRICS_DIR / "duplicate_ids.csv").load()

    def test_missing_required_columns(self) -> None:
        """selector and method columns are required."""
        with pytest.raises(RubricLoadError, match="method_code, selector"):
            FileRubricSource(RUBRICS_DIR / "missing_columns.csv").load()


class TestParseYamlRubric:
    """Tests for YAML parsing."""

    def test_items_mapping(self) -> None:
        """A mapping with an items list is accepted, aliases resolved."""
        items = FileRubricSource(RUBRICS_DIR / "mixed_methods.yaml").load()

        assert [item.method for item in items] == [
            EvaluationMethod.MACHINE_COUNT,
            EvaluationMethod.HYBRID,
            None,
        ]

    def test_top_level_list(self) -> None:
        """A bare list of items is accepted."""
        items = parse_yaml_rubric("- id: h1\n  selector: h1\n  method: '0'\n")

        assert items[0].id == "h1"

    def test_wrong_shape(self) -> None:
        """Scalars are rejected."""
        with pytest.raises(RubricLoadError, match="must be a list"):
            parse_yaml_rubric("just a string")

    def test_invalid_yaml(self) -> None:
        """Syntax errors are wrapped."""
        with pytest.raises(RubricLoadError, match="Invalid YAML"):
            parse_yaml_rubric("items: [unclosed")


class TestFileRubricSource:
    """Tests for file-backed loading."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Unreadable files raise RubricLoadError with the path."""
        source = FileRubricSource(tmp_path / "absent.csv")

        with pytest.raises(RubricLoadError) as exc_info:
            source.load()

        assert exc_info.value.file_path == str(tmp_path / "absent.csv")

    def test_checksum_recorded(self, tmp_path: Path) -> None:
        """The content checksum is available after loading."""
        path = tmp_path / "rubric.csv"
        path.write_text("id,selector,method\nh1,h1,0\n", encoding="utf-8")
        source = FileRubricSource(path)

        assert source.checksum is None
        source.load()

        assert source.checksum is not None
        assert len(source.checksum) == 64
