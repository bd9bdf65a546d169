import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple

from packaging.version import InvalidVersion, parse as parse_version

from seqtrack.core.exceptions import IOFailure
from seqtrack.core.view_adapter import denormalize, normalize
from seqtrack.utils.logger import Logger

SUPPORTED_SCHEMA_VERSION = "1.0"


class LoadedDocument(NamedTuple):
    """Canonical document plus the shape it had on disk."""

    document: dict
    patient_centric: bool


class DocumentStore:
    def __init__(self, json_path, logger: Logger = None):
        self.logger = logger or Logger()
        self.json_path = Path(json_path)

    def __repr__(self):
        return f"<DocumentStore(json_path={self.json_path})>"

    def exists(self) -> bool:
        return self.json_path.is_file()

    def initialize(self) -> bool:
        """Creates an empty sample-centric database if the file is missing."""
        if self.exists():
            return False
        self.logger.log(f"Creating empty database at {self.json_path}", "INFO")
        self._write({"samples": {}})
        return True

    def read(self) -> dict:
        """Returns the raw document exactly as stored."""
        if not self.exists():
            msg = f"Database file not found: {self.json_path}"
            self.logger.log(msg, "ERROR")
            raise IOFailure(msg)

        try:
            with self.json_path.open("r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Failed to read database {self.json_path}: {e}"
            self.logger.log(msg, "ERROR")
            raise IOFailure(msg) from e

        if not isinstance(document, dict):
            msg = f"Database {self.json_path} must contain a JSON object"
            self.logger.log(msg, "ERROR")
            raise IOFailure(msg)

        self.check_compatibility(document)
        return document

    def load(self) -> LoadedDocument:
        canonical, patient_centric = normalize(self.read())
        if patient_centric:
            self.logger.log("Loaded patient-centric database", "DEBUG")
        return LoadedDocument(canonical, patient_centric)

    def save(self, document: dict, patient_centric: bool = False):
        """
        Persists a canonical document, converting it back to the
        patient-centric view when that is the shape the file had.
        """
        document = denormalize(document) if patient_centric else dict(document)
        document["updated_at"] = datetime.now(timezone.utc).replace(
            microsecond=0
        ).isoformat()
        self._write(document)
        self.logger.log(f"Database saved to {self.json_path}", "DEBUG")

    def check_compatibility(self, document: dict):
        version = document.get("version")
        if version is None:
            return
        try:
            db_v = parse_version(str(version))
        except InvalidVersion:
            self.logger.log(f"⚠️ Unrecognized database version: {version}", "WARNING")
            return
        if db_v > parse_version(SUPPORTED_SCHEMA_VERSION):
            msg = (
                f"⚠️ Database version {version} is newer than the supported "
                f"{SUPPORTED_SCHEMA_VERSION}"
            )
            self.logger.log(msg, "WARNING")

    def _write(self, document: dict):
        """Writes to a temp file next to the target, then swaps it in."""
        directory = self.json_path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                dir=directory,
                prefix=f".{self.json_path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as tmp:
                tmp_name = tmp.name
                json.dump(document, tmp, indent=2)
                tmp.write("\n")
            os.replace(tmp_name, self.json_path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            msg = f"Failed to update JSON {self.json_path}: {e}"
            self.logger.log(msg, "ERROR")
            raise IOFailure(msg) from e
