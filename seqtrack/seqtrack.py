import os
from pathlib import Path

from seqtrack.core.exceptions import InvalidArgumentError
from seqtrack.core.view_adapter import normalize
from seqtrack.db.document_store import DocumentStore
from seqtrack.db.validator import SchemaValidator
from seqtrack.merge import ADDED, MergeEngine
from seqtrack.report.report_manager import ReportManager
from seqtrack.utils.config import (
    DEFAULT_JSON_PATH,
    get_json_path_from_config,
    get_log_settings,
    get_schema_path_from_config,
)
from seqtrack.utils.logger import Logger


class SeqTrack:
    """
    One method per command. Every mutating method runs a single
    load -> normalize -> merge -> (denormalize) -> atomic write cycle;
    the file keeps the shape it was loaded with.
    """

    def __init__(self, json_path: str = None, log_level: str = None):
        log_settings = get_log_settings()
        self.logger = Logger(
            log_file=log_settings["log_file"],
            log_level=log_level or log_settings["log_level"],
        )
        if log_level:
            self.logger.set_log_level(log_level)

        self.json_path = Path(
            json_path or get_json_path_from_config() or DEFAULT_JSON_PATH
        )
        self.store = DocumentStore(self.json_path, logger=self.logger)
        self.engine = MergeEngine(logger=self.logger)

    def __repr__(self):
        return f"<SeqTrack(json_path={self.json_path})>"

    # -----------------------------
    # Helpers
    # -----------------------------
    def _load(self):
        return self.store.load()

    def _save(self, document, loaded):
        self.store.save(document, patient_centric=loaded.patient_centric)

    def _report(self, name: str, **kwargs):
        loaded = self._load()
        manager = ReportManager(loaded.document, self.logger)
        return manager.run_report(name, **kwargs)

    def _delete_file(self, file_path: str, dry_run: bool = False) -> str:
        """Returns "deleted", "missing", "failed" or "dry_run"."""
        if not file_path or not os.path.isfile(file_path):
            self.logger.log(f"⊘ File not found on filesystem (skipped): {file_path}", "WARNING")
            return "missing"
        if dry_run:
            self.logger.log(f"[DRY RUN] Would delete {file_path}", "INFO")
            return "dry_run"
        try:
            os.remove(file_path)
        except OSError as e:
            self.logger.log(f"✗ Failed to delete {file_path}: {e}", "ERROR")
            return "failed"
        self.logger.log(f"✓ Deleted {file_path} from filesystem", "INFO")
        return "deleted"

    # -----------------------------
    # Samples
    # -----------------------------
    def add_sample(
        self,
        sample: str,
        patient: str,
        project: str,
        sample_type: str,
        sex: str = None,
        case_id: str = None,
        phenotype: str = None,
        case_control: str = None,
        tissue_site: str = None,
    ):
        """Adds a sample if missing, otherwise fills its empty metadata."""
        self.store.initialize()
        loaded = self._load()
        document = self.engine.ensure_sample(
            loaded.document,
            sample,
            patient=patient,
            sottorivalab_project=project,
            sample_type=sample_type,
            sex=sex,
            case_id=case_id,
            phenotype=phenotype,
            case_control=case_control,
            tissue_site=tissue_site,
        )
        self._save(document, loaded)
        return True

    def set_sample_meta(
        self,
        sample: str,
        phenotype: str = None,
        case_control: str = None,
        tissue_site: str = None,
    ):
        loaded = self._load()
        document = self.engine.set_sample_meta(
            loaded.document,
            sample,
            phenotype=phenotype,
            case_control=case_control,
            tissue_site=tissue_site,
        )
        self._save(document, loaded)
        return True

    def set_seq_meta(
        self,
        sample: str,
        seq_type: str,
        indexing: str = None,
        technology: str = None,
    ):
        loaded = self._load()
        document = self.engine.set_seq_meta(
            loaded.document,
            sample,
            seq_type,
            indexing=indexing,
            technology=technology,
        )
        self._save(document, loaded)
        return True

    # -----------------------------
    # Raw FASTQ
    # -----------------------------
    def add_fastq(
        self,
        sample: str,
        seq_type: str,
        gf_id: str,
        gf_project: str,
        run: str,
        lane: str,
        r1: str,
        r2: str = None,
        r3: str = None,
    ):
        loaded = self._load()
        document = self.engine.upsert_raw_fastq(
            loaded.document,
            sample,
            seq_type,
            gf_id,
            gf_project,
            run,
            lane,
            r1,
            r2=r2,
            r3=r3,
        )
        self._save(document, loaded)
        return True

    def add_fastq_simple(
        self,
        sample: str,
        gf_id: str,
        gf_project: str,
        run: str,
        seq_type: str,
        path: str,
    ):
        loaded = self._load()
        document = self.engine.upsert_raw_fastq_simple(
            loaded.document, sample, seq_type, gf_id, gf_project, run, path
        )
        self._save(document, loaded)
        return True

    # -----------------------------
    # Processed data
    # -----------------------------
    def add_processed(
        self,
        sample: str,
        seq_type: str,
        data_type: str,
        file_path: str,
        pipeline_url: str = None,
        epoch=0,
        created: str = None,
        size: str = None,
    ) -> str:
        """
        Returns the status from the merge engine ("added", "duplicate",
        "sample_missing"). The file is only written when something was added.
        """
        loaded = self._load()
        document, status = self.engine.add_processed_file(
            loaded.document,
            sample,
            seq_type,
            data_type,
            file_path,
            pipeline_url=pipeline_url,
            epoch=epoch,
            created=created,
            size=size,
        )
        if status == ADDED:
            self._save(document, loaded)
        return status

    def add_bam(self, sample: str, seq_type: str, bam: str, **kwargs) -> str:
        return self.add_processed(sample, seq_type, "bam", bam, **kwargs)

    def remove_bam(
        self,
        sample: str,
        seq_type: str,
        file_path: str,
        delete_file: bool = False,
    ):
        """
        Removes a BAM entry; the file itself is deleted only after the
        database was written successfully.
        """
        loaded = self._load()
        document = self.engine.remove_bam(loaded.document, sample, seq_type, file_path)
        self._save(document, loaded)

        if delete_file:
            return self._delete_file(file_path)
        return None

    def cleanup_bams(self, dry_run: bool = False) -> dict:
        """
        Keeps only the newest BAM per sample/seq_type.

        Returns:
            Dict with the discarded paths and deleted/failed counters.
        """
        loaded = self._load()
        document, discarded = self.engine.deduplicate_bams(loaded.document)
        summary = {"discarded": discarded, "deleted": 0, "failed": 0}

        if not discarded:
            self.logger.log("No duplicate BAMs found. Nothing to clean up.", "INFO")
            return summary

        if not dry_run:
            self._save(document, loaded)
            self.logger.log("✓ Database updated", "INFO")

        for file_path in discarded:
            outcome = self._delete_file(file_path, dry_run=dry_run)
            if outcome == "deleted":
                summary["deleted"] += 1
            elif outcome == "failed":
                summary["failed"] += 1
        return summary

    # -----------------------------
    # Reports and validation
    # -----------------------------
    def show_sample_meta(self, sample: str):
        return self._report("sample_meta", sample=sample)

    def list_missing_raw_seq(self, seq_type: str = None):
        return self._report("missing_raw_seq", seq_type=seq_type)

    def audit(self):
        return self._report("audit")

    def list_duplicate_bams(self):
        return self._report("duplicate_bams")

    def validate_db(self, schema_path: str = None):
        validator = SchemaValidator(schema_path or get_schema_path_from_config())
        result = validator.validate(self.store.read())
        if result.valid:
            self.logger.log(f"✅ {self.json_path} is valid", "INFO")
        else:
            self.logger.log(
                f"❌ {self.json_path} is invalid at {result.path}: {result.message}",
                "ERROR",
            )
        return result

    def convert(self, shape: str, output_path: str = None) -> Path:
        """
        Writes the database in the requested shape ("patient" or "sample"),
        either in place or to `output_path`.
        """
        if shape not in ("patient", "sample"):
            raise InvalidArgumentError(
                f"Unknown shape '{shape}', expected patient or sample"
            )

        canonical, _ = normalize(self.store.read())
        target = DocumentStore(output_path or self.json_path, logger=self.logger)
        target.save(canonical, patient_centric=(shape == "patient"))
        self.logger.log(f"Wrote {shape}-centric database to {target.json_path}", "INFO")
        return target.json_path
