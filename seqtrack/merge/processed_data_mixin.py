from seqtrack.core.exceptions import InvalidArgumentError, NotFoundError
from seqtrack.core.identity import (
    PROCESSED_KINDS,
    epoch_of,
    file_key,
    is_empty,
    parse_epoch,
)

ADDED = "added"
DUPLICATE = "duplicate"
SAMPLE_MISSING = "sample_missing"


class ProcessedDataMergeMixin:
    """Processed outputs (bam/vcf/cna/qc) of a sequencing block."""

    def add_processed_file(
        self,
        document,
        sample: str,
        seq_type: str,
        kind: str,
        file_path: str,
        pipeline_url: str = None,
        epoch=0,
        created: str = "unknown",
        size: str = "unknown",
    ):
        """
        Appends a ProcessedFile unless one with the same file_path is
        already recorded under the same kind.

        Returns:
            Tuple (document, status) where status is one of "added",
            "duplicate" or "sample_missing". Only "added" changes the
            document.
        """
        if kind not in PROCESSED_KINDS:
            raise InvalidArgumentError(
                f"Unknown data type '{kind}', expected one of {', '.join(PROCESSED_KINDS)}"
            )
        if is_empty(file_path):
            raise InvalidArgumentError("Missing required field: file_path")
        if is_empty(seq_type):
            raise InvalidArgumentError("Missing required field: seq_type")
        epoch = parse_epoch(0 if is_empty(epoch) else epoch)

        document = self._copy(document)
        entry = document["samples"].get(sample)
        if entry is None:
            msg = (
                f"Sample '{sample}' does not exist in the database. "
                f"{kind.upper()} file not added. Use 'add-sample' first."
            )
            self.logger.log(msg, "WARNING")
            return document, SAMPLE_MISSING

        block = self._ensure_seq_block(entry, seq_type)
        files = block["processed_data"][kind]

        if any(file_key(item) == file_path for item in files):
            msg = f"⚠️ {kind.upper()} already recorded for {sample} ({seq_type}): {file_path}"
            self.logger.log(msg, "WARNING")
            return document, DUPLICATE

        files.append(
            {
                "file_path": file_path,
                "file_type": kind,
                "pipeline_url": pipeline_url,
                "metadata": {
                    "size": "unknown" if is_empty(size) else size,
                    "created": "unknown" if is_empty(created) else created,
                    "epoch": epoch,
                },
            }
        )
        self.logger.log(f"Added {kind.upper()} to sample {sample} ({seq_type})", "INFO")
        return document, ADDED

    def remove_bam(self, document, sample: str, seq_type: str, file_path: str) -> dict:
        """Drops every BAM entry whose file_path matches exactly."""
        document = self._copy(document)
        block = ((document["samples"].get(sample) or {}).get("seq") or {}).get(seq_type)
        bams = ((block or {}).get("processed_data") or {}).get("bam") or []

        if not any(file_key(item) == file_path for item in bams):
            msg = (
                f"BAM not found in database: sample={sample}, "
                f"seq_type={seq_type}, file_path={file_path}"
            )
            self.logger.log(msg, "ERROR")
            raise NotFoundError(
                "BAM", file_path, {"sample": sample, "seq_type": seq_type}
            )

        block["processed_data"]["bam"] = [
            item for item in bams if file_key(item) != file_path
        ]
        self.logger.log(f"✓ Removed {file_path} from database", "INFO")
        return document

    def deduplicate_bams(self, document):
        """
        Keeps only the newest BAM (highest metadata.epoch) of every
        sample/seq_type. Ties keep the entry recorded first.

        Returns:
            Tuple (document, discarded_paths) so the caller can delete the
            discarded files once the document is saved.
        """
        document = self._copy(document)
        discarded = []

        for sample, entry in document["samples"].items():
            for seq_type, block in ((entry or {}).get("seq") or {}).items():
                processed = (block or {}).get("processed_data") or {}
                bams = processed.get("bam") or []
                if len(bams) <= 1:
                    continue

                ranked = sorted(bams, key=epoch_of, reverse=True)
                processed["bam"] = ranked[:1]
                for item in ranked[1:]:
                    discarded.append(file_key(item))
                    self.logger.log(
                        f"Dropping older BAM of {sample} ({seq_type}): {file_key(item)}",
                        "DEBUG",
                    )

        return document, discarded
