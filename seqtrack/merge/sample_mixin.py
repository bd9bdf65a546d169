import copy

from seqtrack.core.exceptions import InvalidArgumentError, NotFoundError
from seqtrack.core.identity import PROCESSED_KINDS, is_empty
from seqtrack.core.view_adapter import DERIVED_META_FIELDS, SAMPLE_META_FIELDS


class SampleMergeMixin:
    """Sample and sequencing-block level upserts."""

    def _copy(self, document) -> dict:
        document = copy.deepcopy(document or {})
        if not isinstance(document.get("samples"), dict):
            document["samples"] = {}
        return document

    def _get_sample(self, document, sample: str) -> dict:
        entry = document["samples"].get(sample)
        if entry is None:
            msg = f"Sample '{sample}' does not exist in the database"
            self.logger.log(msg, "ERROR")
            raise NotFoundError("sample", sample)
        return entry

    def _get_or_create_sample(self, document, sample: str) -> dict:
        """Returns the sample entry, adding a bare one (null metadata) if missing."""
        if is_empty(sample):
            raise InvalidArgumentError("Missing required field: sample")
        entry = document["samples"].get(sample)
        if entry is None:
            entry = document["samples"][sample] = {
                "sample_meta": {field: None for field in SAMPLE_META_FIELDS},
                "seq": {},
            }
            self.logger.log(f"Created sample '{sample}' with empty metadata", "INFO")
        return entry

    def _ensure_seq_block(self, sample_entry: dict, seq_type: str) -> dict:
        """Returns seq[seq_type], creating it (and any missing part) in place."""
        if is_empty(seq_type):
            raise InvalidArgumentError("Missing required field: seq_type")

        seq = sample_entry.get("seq")
        if not isinstance(seq, dict):
            seq = sample_entry["seq"] = {}

        block = seq.get(seq_type)
        if not isinstance(block, dict):
            block = seq[seq_type] = {"indexing": None, "technology": None}
            self.logger.log(f"Created sequencing block '{seq_type}'", "DEBUG")

        if not isinstance(block.get("raw_sequence"), list):
            block["raw_sequence"] = []
        processed = block.get("processed_data")
        if not isinstance(processed, dict):
            processed = block["processed_data"] = {}
        for kind in PROCESSED_KINDS:
            if not isinstance(processed.get(kind), list):
                processed[kind] = []
        return block

    def ensure_sample(self, document, sample: str, **meta) -> dict:
        """
        Creates `sample` if missing, otherwise fills only the sample_meta
        fields that are currently empty. Populated values are never replaced,
        so calling it twice with the same arguments is a no-op.

        Accepted meta keys: patient, sex, sottorivalab_project, sample_type,
        phenotype, case_control, tissue_site, patient_id, case_id, project_id.
        """
        if is_empty(sample):
            raise InvalidArgumentError("Missing required field: sample")

        allowed = SAMPLE_META_FIELDS + DERIVED_META_FIELDS
        unknown = sorted(set(meta) - set(allowed))
        if unknown:
            raise InvalidArgumentError(f"Unknown sample_meta field(s): {unknown}")

        supplied = {k: v for k, v in meta.items() if not is_empty(v)}
        document = self._copy(document)
        samples = document["samples"]

        if sample not in samples:
            sample_meta = {field: None for field in SAMPLE_META_FIELDS}
            sample_meta.update(supplied)
            samples[sample] = {"sample_meta": sample_meta, "seq": {}}
            self.logger.log(f"✅ Sample '{sample}' created", "INFO")
            return document

        entry = samples[sample]
        sample_meta = entry.get("sample_meta")
        if not isinstance(sample_meta, dict):
            sample_meta = entry["sample_meta"] = {}
        if not isinstance(entry.get("seq"), dict):
            entry["seq"] = {}

        filled = []
        for field, value in supplied.items():
            if is_empty(sample_meta.get(field)):
                sample_meta[field] = value
                filled.append(field)

        if filled:
            msg = f"Sample '{sample}' already exists, filled: {', '.join(filled)}"
        else:
            msg = f"Sample '{sample}' already exists, nothing to fill"
        self.logger.log(msg, "INFO")
        return document

    def set_sample_meta(
        self,
        document,
        sample: str,
        phenotype: str = None,
        case_control: str = None,
        tissue_site: str = None,
    ) -> dict:
        """Overwrites every supplied, non-empty field of an existing sample."""
        values = {
            "phenotype": phenotype,
            "case_control": case_control,
            "tissue_site": tissue_site,
        }
        supplied = {k: v for k, v in values.items() if not is_empty(v)}
        if not supplied:
            raise InvalidArgumentError(
                "At least one of phenotype, case_control, tissue_site is required"
            )

        document = self._copy(document)
        entry = self._get_sample(document, sample)
        sample_meta = entry.get("sample_meta")
        if not isinstance(sample_meta, dict):
            sample_meta = entry["sample_meta"] = {}
        sample_meta.update(supplied)

        self.logger.log(
            f"Updated sample_meta of '{sample}': {', '.join(supplied)}", "INFO"
        )
        return document

    def set_seq_meta(
        self,
        document,
        sample: str,
        seq_type: str,
        indexing: str = None,
        technology: str = None,
    ) -> dict:
        document = self._copy(document)
        entry = self._get_sample(document, sample)
        block = self._ensure_seq_block(entry, seq_type)

        values = {"indexing": indexing, "technology": technology}
        supplied = {k: v for k, v in values.items() if not is_empty(v)}
        block.update(supplied)

        if supplied:
            msg = f"Updated {seq_type} of '{sample}': {', '.join(supplied)}"
        else:
            msg = f"Sequencing block {seq_type} of '{sample}' ensured"
        self.logger.log(msg, "INFO")
        return document
