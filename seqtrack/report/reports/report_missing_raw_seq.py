import pandas as pd

from seqtrack.report.reports.base_report import ReportBase


class MissingRawSeqReport(ReportBase):
    name = "missing_raw_seq"
    description = "Lists samples/sequencing types that have no raw FASTQ recorded."

    def run(self):
        seq_filter = self.params.get("seq_type")
        rows = []

        for sample, entry in self.iter_samples():
            seq = entry.get("seq") or {}
            if not seq:
                if seq_filter is None:
                    rows.append({"sample": sample, "seq_type": None})
                continue

            for seq_type, block in seq.items():
                if seq_filter is not None and seq_type != seq_filter:
                    continue
                if not (block or {}).get("raw_sequence"):
                    rows.append({"sample": sample, "seq_type": seq_type})

        # A sample that never saw the filtered seq_type is missing it too
        if seq_filter is not None:
            for sample, entry in self.iter_samples():
                if seq_filter not in (entry.get("seq") or {}):
                    rows.append({"sample": sample, "seq_type": seq_filter})

        df = pd.DataFrame(rows, columns=["sample", "seq_type"], dtype=object)
        if self.logger:
            self.logger.log(f"{len(df)} sample(s) missing raw sequence", "DEBUG")
        return df.sort_values(["sample"], kind="stable").reset_index(drop=True)
