import pandas as pd

from seqtrack.core.identity import epoch_of, file_key
from seqtrack.report.reports.base_report import ReportBase

COLUMNS = [
    "sample",
    "seq_type",
    "rank",
    "file_path",
    "created",
    "size",
    "pipeline_url",
    "epoch",
]


class DuplicateBamsReport(ReportBase):
    name = "duplicate_bams"
    description = (
        "Lists every BAM of the sample/seq_type pairs holding more than one, "
        "newest first (rank 1 is the one cleanup-bams keeps)."
    )

    def run(self):
        rows = []
        for sample, seq_type, block in self.iter_blocks():
            bams = self.processed_files(block, "bam")
            if len(bams) <= 1:
                continue

            for rank, bam in enumerate(sorted(bams, key=epoch_of, reverse=True), 1):
                metadata = bam.get("metadata") or {}
                rows.append(
                    {
                        "sample": sample,
                        "seq_type": seq_type,
                        "rank": rank,
                        "file_path": file_key(bam),
                        "created": metadata.get("created") or "unknown",
                        "size": metadata.get("size") or "unknown",
                        "pipeline_url": bam.get("pipeline_url") or "unknown",
                        "epoch": epoch_of(bam),
                    }
                )

        return pd.DataFrame(rows, columns=COLUMNS)
