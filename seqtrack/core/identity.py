import os
import re

from seqtrack.core.exceptions import ParseError

LANE_PATTERN = re.compile(r"_L(\d{3})")
READ_PATTERN = re.compile(r"_R([1-3])_")

PROCESSED_KINDS = ("bam", "vcf", "cna", "qc")


def is_empty(value) -> bool:
    """None and blank strings count as "not supplied"."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def find_or_insert(items: list, key_fn, key, make_default):
    """
    Finds the first element of `items` whose natural key equals `key`,
    or appends `make_default()` when nothing matches.

    Returns:
        Tuple (item, created): the element (living inside `items`) and a
        boolean telling whether it was just appended.
    """
    for item in items:
        if key_fn(item) == key:
            return item, False

    item = make_default()
    items.append(item)
    return item, True


def group_key(group: dict):
    return group.get("gf_id")


def run_key(fastq_run: dict):
    return (fastq_run.get("gf_project"), fastq_run.get("run"))


def file_key(processed_file: dict):
    return processed_file.get("file_path")


def epoch_of(processed_file: dict) -> int:
    """Recency rank of a processed file; missing or unparsable epochs rank as 0."""
    epoch = (processed_file.get("metadata") or {}).get("epoch")
    try:
        return int(epoch or 0)
    except (TypeError, ValueError):
        return 0


def parse_fastq_name(path: str) -> tuple[str, str]:
    """
    Extracts (lane, read) from a FASTQ file name such as
    `SAMPLE_S1_L001_R2_001.fastq.gz` -> ("L001", "R2").
    """
    filename = os.path.basename(path)

    lane_match = LANE_PATTERN.search(filename)
    if not lane_match:
        raise ParseError(
            f"Could not detect lane from filename: {filename} "
            "(expected pattern: _L001, _L002, etc.)"
        )

    read_match = READ_PATTERN.search(filename)
    if not read_match:
        raise ParseError(
            f"Could not detect read type from filename: {filename} "
            "(expected pattern: _R1_, _R2_, _R3_)"
        )

    return f"L{lane_match.group(1)}", f"R{read_match.group(1)}"


def parse_epoch(epoch) -> int:
    if isinstance(epoch, bool):
        raise ParseError(f"Epoch must be an integer, got: {epoch!r}")
    if isinstance(epoch, int):
        return epoch
    try:
        return int(str(epoch).strip())
    except (TypeError, ValueError) as e:
        raise ParseError(f"Epoch must be an integer, got: {epoch!r}") from e
