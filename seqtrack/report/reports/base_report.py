from seqtrack.core.identity import PROCESSED_KINDS


class ReportBase:
    name: str = "unnamed_report"
    description: str = "No description provided"

    def __init__(self, document: dict = None, logger=None, **kwargs):
        # Always the canonical (sample-centric) document
        self.document = document or {"samples": {}}
        self.logger = logger
        self.params = kwargs

    @classmethod
    def explain(cls) -> str:
        return "No explanation provided."

    def run(self):
        raise NotImplementedError("Subclasses must implement `run()`.")

    # -----------------------------
    # Shared traversal helpers
    # -----------------------------
    def iter_samples(self):
        for sample, entry in (self.document.get("samples") or {}).items():
            yield sample, entry or {}

    def iter_blocks(self):
        """Yields (sample, seq_type, block) for every sequencing block."""
        for sample, entry in self.iter_samples():
            for seq_type, block in (entry.get("seq") or {}).items():
                yield sample, seq_type, block or {}

    @staticmethod
    def processed_files(block: dict, kind: str) -> list:
        if kind not in PROCESSED_KINDS:
            raise ValueError(f"Unknown data type: {kind}")
        return (block.get("processed_data") or {}).get(kind) or []
