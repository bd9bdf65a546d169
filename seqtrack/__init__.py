__version__ = "1.0.0"

from seqtrack.seqtrack import SeqTrack  # noqa: E402, F401
