import json
from pathlib import Path
from typing import NamedTuple, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError, best_match

from seqtrack.core.exceptions import IOFailure
from seqtrack.core.view_adapter import denormalize, is_patient_centric, normalize

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "schema" / "patient_db.schema.json"


class ValidationResult(NamedTuple):
    valid: bool
    path: Optional[str] = None
    message: Optional[str] = None


def json_pointer(parts) -> str:
    """['patients', 'P1', 'cases'] -> '/patients/P1/cases'"""
    escaped = [str(p).replace("~", "~0").replace("/", "~1") for p in parts]
    return "/" + "/".join(escaped)


class SchemaValidator:
    """
    Validates a database document against the patient-centric JSON Schema.
    Sample-centric documents are converted to the patient-centric view first.
    """

    def __init__(self, schema_path=None):
        self.schema_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH
        self.schema = self._load_schema()
        try:
            Draft7Validator.check_schema(self.schema)
        except SchemaError as e:
            raise IOFailure(f"Invalid schema {self.schema_path}: {e.message}") from e
        self.validator = Draft7Validator(self.schema)

    def _load_schema(self) -> dict:
        try:
            with self.schema_path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise IOFailure(f"Failed to read schema {self.schema_path}: {e}") from e

    def validate(self, document: dict) -> ValidationResult:
        if not is_patient_centric(document):
            canonical, _ = normalize(document)
            document = denormalize(canonical)

        error = best_match(self.validator.iter_errors(document))
        if error is None:
            return ValidationResult(True)
        return ValidationResult(False, json_pointer(error.absolute_path), error.message)
