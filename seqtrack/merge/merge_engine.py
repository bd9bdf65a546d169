from seqtrack.merge.processed_data_mixin import ProcessedDataMergeMixin
from seqtrack.merge.raw_sequence_mixin import RawSequenceMergeMixin
from seqtrack.merge.sample_mixin import SampleMergeMixin
from seqtrack.utils.logger import Logger


class MergeEngine(
    SampleMergeMixin,
    RawSequenceMergeMixin,
    ProcessedDataMergeMixin,
):
    """
    Upsert operations over the canonical (sample-centric) document.

    Every public method copies the document it receives and returns the
    updated copy; the caller's document is never modified.
    """

    def __init__(self, logger: Logger = None):
        self.logger = logger or Logger()
