"""Rubric file loading (CSV or YAML)."""

import csv
import hashlib
import io
from collections.abc import Iterable, Mapping
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from ago_diagnosis.rubric.errors import RubricLoadError
from ago_diagnosis.rubric.models import RubricItem


logger = structlog.get_logger()

# Column header aliases, normalized (lowercase, stripped) -> RubricItem field
COLUMN_ALIASES: dict[str, str] = {
    "id": "id",
    "code": "id",
    "item_code": "id",
    "項目コード": "id",
    "label": "label",
    "name": "label",
    "item_label": "label",
    "項目名": "label",
    "selector": "selector",
    "target_selector": "selector",
    "対象セレクタ": "selector",
    "method": "method_code",
    "method_code": "method_code",
    "評価方法": "method_code",
    "prompt": "prompt_template",
    "prompt_template": "prompt_template",
    "aiプロンプト": "prompt_template",
    "recommendation": "recommendation_template",
    "recommendation_template": "recommendation_template",
    "改善提案テンプレート": "recommendation_template",
}

REQUIRED_FIELDS: frozenset[str] = frozenset({"selector", "method_code"})

YAML_SUFFIXES: frozenset[str] = frozenset({".yaml", ".yml"})


def _normalize_header(header: str) -> str:
    return header.strip().lstrip("\ufeff").strip().lower()


def _map_record(record: Mapping[str, object]) -> dict[str, str]:
    """Map a raw record onto RubricItem field names."""
    mapped: dict[str, str] = {}
    for key, value in record.items():
        if key is None:
            continue
        field_name = COLUMN_ALIASES.get(_normalize_header(str(key)))
        if field_name is None:
            continue
        mapped[field_name] = "" if value is None else str(value)
    return mapped


def build_items(
    records: Iterable[Mapping[str, object]],
    source: str | None = None,
) -> list[RubricItem]:
    """Build validated rubric items from mapping records.

    Blank rows are skipped; a blank id is replaced with ``row-<n>``.
    Selectors are not validated here.

    Args:
        records: Rows keyed by column header (any supported alias).
        source: File path for error messages.

    Returns:
        Rubric items in input order.

    Raises:
        RubricLoadError: On duplicate ids or invalid field values.
    """
    items: list[RubricItem] = []
    seen: set[str] = set()

    for row_number, record in enumerate(records, start=1):
        mapped = _map_record(record)
        if not any(value.strip() for value in mapped.values()):
            continue

        item_id = mapped.get("id", "").strip() or f"row-{row_number}"
        if item_id in seen:
            msg = f"Duplicate rubric item id '{item_id}' (row {row_number})"
            raise RubricLoadError(msg, source)
        seen.add(item_id)

        try:
            items.append(
                RubricItem(
                    id=item_id,
                    label=mapped.get("label", "").strip(),
                    selector=mapped.get("selector", ""),
                    method_code=mapped.get("method_code", "").strip() or "0",
                    prompt_template=mapped.get("prompt_template", "").strip(),
                    recommendation_template=mapped.get(
                        "recommendation_template", ""
                    ).strip(),
                )
            )
        except ValidationError as exc:
            msg = f"Invalid rubric row {row_number}: {exc.error_count()} errors"
            raise RubricLoadError(msg, source) from exc

    return items


def parse_csv_rubric(text: str, source: str | None = None) -> list[RubricItem]:
    """Parse rubric items from CSV text with a header row.

    Args:
        text: CSV content.
        source: File path for error messages.

    Returns:
        Rubric items in file order.

    Raises:
        RubricLoadError: If required columns are missing or rows are invalid.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    headers = reader.fieldnames or []
    present = {COLUMN_ALIASES.get(_normalize_header(h)) for h in headers}
    missing = REQUIRED_FIELDS - present
    if missing:
        msg = f"Missing required rubric columns: {', '.join(sorted(missing))}"
        raise RubricLoadError(msg, source)

    return build_items(reader, source)


def parse_yaml_rubric(text: str, source: str | None = None) -> list[RubricItem]:
    """Parse rubric items from YAML.

    Accepts either a top-level list of items or a mapping with an
    ``items`` list.

    Args:
        text: YAML content.
        source: File path for error messages.

    Returns:
        Rubric items in file order.

    Raises:
        RubricLoadError: If the document has the wrong shape.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML: {exc}"
        raise RubricLoadError(msg, source) from exc

    if isinstance(data, dict):
        data = data.get("items")

    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        msg = "Rubric YAML must be a list of items or a mapping with 'items'"
        raise RubricLoadError(msg, source)

    return build_items(data, source)


class FileRubricSource:
    """Rubric source backed by a CSV or YAML file."""

    def __init__(self, path: Path) -> None:
        """Initialize the source.

        Args:
            path: Rubric file; ``.yaml``/``.yml`` is parsed as YAML,
                anything else as CSV.
        """
        self._path = path
        self._checksum: str | None = None

    @property
    def path(self) -> Path:
        """Rubric file path."""
        return self._path

    @property
    def checksum(self) -> str | None:
        """SHA-256 of the last loaded file content."""
        return self._checksum

    def load(self) -> list[RubricItem]:
        """Read and parse the rubric file.

        Returns:
            Rubric items in file order.

        Raises:
            RubricLoadError: If the file cannot be read or parsed.
        """
        try:
            content = self._path.read_bytes()
        except OSError as exc:
            msg = f"Cannot read rubric file: {exc}"
            raise RubricLoadError(msg, str(self._path)) from exc

        self._checksum = hashlib.sha256(content).hexdigest()
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            msg = "Rubric file is not valid UTF-8"
            raise RubricLoadError(msg, str(self._path)) from exc

        if self._path.suffix.lower() in YAML_SUFFIXES:
            items = parse_yaml_rubric(text, str(self._path))
        else:
            items = parse_csv_rubric(text, str(self._path))

        logger.info(
            "rubric_file_loaded",
            component="rubric",
            file_path=str(self._path),
            file_sha256=self._checksum,
            item_count=len(items),
        )
        return items
