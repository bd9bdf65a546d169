from seqtrack.core.exceptions import InvalidArgumentError
from seqtrack.core.identity import (
    find_or_insert,
    group_key,
    is_empty,
    parse_fastq_name,
    run_key,
)


class RawSequenceMergeMixin:
    """
    Upserts along sample -> seq_type -> raw_sequence[gf_id] ->
    fastqs[(gf_project, run)] -> files[lane].
    """

    def _get_or_create_fastq_run(
        self,
        document,
        sample: str,
        seq_type: str,
        gf_id: str,
        gf_project: str,
        run: str,
    ) -> dict:
        for name, value in (
            ("gf_id", gf_id),
            ("gf_project", gf_project),
            ("run", run),
        ):
            if is_empty(value):
                raise InvalidArgumentError(f"Missing required field: {name}")

        entry = self._get_or_create_sample(document, sample)
        block = self._ensure_seq_block(entry, seq_type)

        group, created = find_or_insert(
            block["raw_sequence"],
            group_key,
            gf_id,
            lambda: {"gf_id": gf_id, "fastqs": []},
        )
        if created:
            self.logger.log(f"Created raw sequence group {gf_id}", "DEBUG")
        if not isinstance(group.get("fastqs"), list):
            group["fastqs"] = []

        fastq_run, created = find_or_insert(
            group["fastqs"],
            run_key,
            (gf_project, run),
            lambda: {"gf_project": gf_project, "run": run, "files": {}},
        )
        if created:
            self.logger.log(f"Created run {gf_project}/{run} in {gf_id}", "DEBUG")
        if not isinstance(fastq_run.get("files"), dict):
            fastq_run["files"] = {}
        return fastq_run

    def upsert_raw_fastq(
        self,
        document,
        sample: str,
        seq_type: str,
        gf_id: str,
        gf_project: str,
        run: str,
        lane: str,
        r1: str,
        r2: str = None,
        r3: str = None,
    ) -> dict:
        """
        Records the complete set of reads for one lane. Whatever was stored
        for the lane before is replaced, reads not given here are dropped.
        """
        if is_empty(lane):
            raise InvalidArgumentError("Missing required field: lane")
        if is_empty(r1):
            raise InvalidArgumentError("Missing required field: r1")

        document = self._copy(document)
        fastq_run = self._get_or_create_fastq_run(
            document, sample, seq_type, gf_id, gf_project, run
        )

        reads = {"R1": r1}
        if not is_empty(r2):
            reads["R2"] = r2
        if not is_empty(r3):
            reads["R3"] = r3
        fastq_run["files"][lane] = reads

        self.logger.log(f"Added FASTQs for {sample} ({seq_type}, {lane})", "INFO")
        return document

    def upsert_raw_fastq_simple(
        self,
        document,
        sample: str,
        seq_type: str,
        gf_id: str,
        gf_project: str,
        run: str,
        path: str,
    ) -> dict:
        """
        Adds one FASTQ file, taking lane and read from its name. Other reads
        already recorded for the same lane are kept.
        """
        lane, read_type = parse_fastq_name(path)

        document = self._copy(document)
        fastq_run = self._get_or_create_fastq_run(
            document, sample, seq_type, gf_id, gf_project, run
        )

        lane_files = fastq_run["files"].get(lane)
        if not isinstance(lane_files, dict):
            lane_files = fastq_run["files"][lane] = {}
        lane_files[read_type] = path

        msg = (
            f"Added {read_type} for lane {lane} to sample {sample} "
            f"(gf_id: {gf_id}, run: {run})"
        )
        self.logger.log(msg, "INFO")
        return document
