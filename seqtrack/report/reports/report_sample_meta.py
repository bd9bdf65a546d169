import pandas as pd

from seqtrack.core.exceptions import InvalidArgumentError, NotFoundError
from seqtrack.report.reports.base_report import ReportBase


class SampleMetaReport(ReportBase):
    name = "sample_meta"
    description = "Shows the sample_meta fields and sequencing types of one sample."

    @classmethod
    def explain(cls) -> str:
        return """\
Sample metadata report
======================

Parameters:
- sample: sample key (required)

Returns one row per sample_meta field (field, value), followed by one
`seq_type` row per sequencing block with its indexing/technology.
"""

    def run(self):
        sample = self.params.get("sample")
        if not sample:
            raise InvalidArgumentError("Missing required field: sample")

        entry = (self.document.get("samples") or {}).get(sample)
        if entry is None:
            raise NotFoundError("sample", sample)

        rows = [
            {"field": field, "value": value}
            for field, value in (entry.get("sample_meta") or {}).items()
        ]
        for seq_type, block in (entry.get("seq") or {}).items():
            block = block or {}
            detail = ", ".join(
                f"{key}={block.get(key)}" for key in ("indexing", "technology")
            )
            rows.append({"field": f"seq.{seq_type}", "value": detail})

        return pd.DataFrame(rows, columns=["field", "value"], dtype=object)
