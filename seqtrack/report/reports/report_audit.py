from collections import Counter

import pandas as pd

from seqtrack.core.identity import (
    PROCESSED_KINDS,
    file_key,
    group_key,
    is_empty,
    run_key,
)
from seqtrack.report.reports.base_report import ReportBase

CORE_META_FIELDS = ("patient", "sample_type", "sottorivalab_project", "sex")


class AuditReport(ReportBase):
    name = "audit"
    description = (
        "Checks every sample for missing metadata, missing raw or processed "
        "data, duplicate BAMs and repeated natural keys."
    )

    @classmethod
    def explain(cls) -> str:
        return """\
Audit report
============

One row per finding with columns sample, seq_type, issue, detail.

Issues:
- missing_meta        a core sample_meta field is empty
- no_seq              the sample has no sequencing block
- no_raw_sequence     the block has no raw FASTQ group
- lane_without_r1     a lane records R2/R3 but no R1
- no_bam              the block has no BAM
- duplicate_bams      more than one BAM (see cleanup-bams)
- duplicate_key       a gf_id, gf_project/run or file_path repeats
"""

    def run(self):
        self.findings = []

        for sample, entry in self.iter_samples():
            meta = entry.get("sample_meta") or {}
            for field in CORE_META_FIELDS:
                if is_empty(meta.get(field)):
                    self._add(sample, None, "missing_meta", field)

            seq = entry.get("seq") or {}
            if not seq:
                self._add(sample, None, "no_seq", "")
                continue

            for seq_type, block in seq.items():
                self._audit_block(sample, seq_type, block or {})

        df = pd.DataFrame(
            self.findings,
            columns=["sample", "seq_type", "issue", "detail"],
            dtype=object,
        )
        if self.logger:
            self.logger.log(f"Audit finished with {len(df)} finding(s)", "INFO")
        return df

    def _add(self, sample, seq_type, issue, detail):
        self.findings.append(
            {"sample": sample, "seq_type": seq_type, "issue": issue, "detail": detail}
        )

    def _audit_block(self, sample, seq_type, block):
        groups = block.get("raw_sequence") or []
        if not groups:
            self._add(sample, seq_type, "no_raw_sequence", "")

        self._report_repeats(sample, seq_type, "gf_id", map(group_key, groups))
        for group in groups:
            runs = group.get("fastqs") or []
            self._report_repeats(
                sample,
                seq_type,
                f"gf_project/run in {group_key(group)}",
                (f"{p}/{r}" for p, r in map(run_key, runs)),
            )
            for fastq_run in runs:
                for lane, reads in (fastq_run.get("files") or {}).items():
                    if is_empty((reads or {}).get("R1")):
                        detail = f"{group_key(group)}/{fastq_run.get('run')}/{lane}"
                        self._add(sample, seq_type, "lane_without_r1", detail)

        bams = self.processed_files(block, "bam")
        if not bams:
            self._add(sample, seq_type, "no_bam", "")
        elif len(bams) > 1:
            self._add(sample, seq_type, "duplicate_bams", f"{len(bams)} BAMs")

        for kind in PROCESSED_KINDS:
            self._report_repeats(
                sample,
                seq_type,
                f"{kind} file_path",
                map(file_key, self.processed_files(block, kind)),
            )

    def _report_repeats(self, sample, seq_type, label, keys):
        for key, count in Counter(keys).items():
            if count > 1:
                self._add(sample, seq_type, "duplicate_key", f"{label}: {key} x{count}")
