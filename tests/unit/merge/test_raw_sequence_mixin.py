import copy

import pytest

from seqtrack.core.exceptions import InvalidArgumentError, ParseError


def _run(document, sample="S1", seq_type="wgs", gf_id="LAZ_123", index=0):
    groups = document["samples"][sample]["seq"][seq_type]["raw_sequence"]
    group = next(g for g in groups if g["gf_id"] == gf_id)
    return group["fastqs"][index]


def test_upsert_raw_fastq_creates_block_group_and_run(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq(
        sample_centric_doc, "S2", "wes", "GF1", "PRJ", "RUN1", "L001", "a_R1", r2="a_R2"
    )

    block = document["samples"]["S2"]["seq"]["wes"]
    assert block["processed_data"] == {"bam": [], "vcf": [], "cna": [], "qc": []}
    assert block["raw_sequence"] == [
        {
            "gf_id": "GF1",
            "fastqs": [
                {
                    "gf_project": "PRJ",
                    "run": "RUN1",
                    "files": {"L001": {"R1": "a_R1", "R2": "a_R2"}},
                }
            ],
        }
    ]


def test_upsert_raw_fastq_replaces_lane(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq(
        sample_centric_doc, "S1", "wgs", "LAZ_123", "RITM001", "RUN_001", "L001", "a", r2="b"
    )
    document = engine.upsert_raw_fastq(
        document, "S1", "wgs", "LAZ_123", "RITM001", "RUN_001", "L001", "c"
    )

    assert _run(document)["files"]["L001"] == {"R1": "c"}


def test_upsert_raw_fastq_reuses_group_and_run(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq(
        sample_centric_doc, "S1", "wgs", "LAZ_123", "RITM001", "RUN_001", "L002", "x"
    )

    groups = document["samples"]["S1"]["seq"]["wgs"]["raw_sequence"]
    assert len(groups) == 1
    assert len(groups[0]["fastqs"]) == 1
    assert set(groups[0]["fastqs"][0]["files"]) == {"L001", "L002"}


def test_new_run_key_appends_run(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq(
        sample_centric_doc, "S1", "wgs", "LAZ_123", "RITM001", "RUN_002", "L001", "x"
    )
    document = engine.upsert_raw_fastq(
        document, "S1", "wgs", "LAZ_123", "OTHER", "RUN_001", "L001", "y"
    )

    runs = document["samples"]["S1"]["seq"]["wgs"]["raw_sequence"][0]["fastqs"]
    assert [(r["gf_project"], r["run"]) for r in runs] == [
        ("RITM001", "RUN_001"),
        ("RITM001", "RUN_002"),
        ("OTHER", "RUN_001"),
    ]


def test_upsert_raw_fastq_requires_r1(engine, sample_centric_doc):
    with pytest.raises(InvalidArgumentError, match="r1"):
        engine.upsert_raw_fastq(
            sample_centric_doc, "S1", "wgs", "G", "P", "R", "L001", "", r2="b"
        )


def test_upsert_raw_fastq_creates_unknown_sample(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq(
        sample_centric_doc, "NEW", "wgs", "G1", "P", "R", "L001", "a.fq"
    )

    entry = document["samples"]["NEW"]
    assert entry["sample_meta"] == {
        "patient": None,
        "sex": None,
        "sottorivalab_project": None,
        "sample_type": None,
        "phenotype": None,
        "case_control": None,
        "tissue_site": None,
    }
    assert _run(document, sample="NEW", gf_id="G1")["files"] == {"L001": {"R1": "a.fq"}}
    assert "NEW" not in sample_centric_doc["samples"]


def test_simple_creates_unknown_sample(engine):
    document = engine.upsert_raw_fastq_simple(
        {"samples": {}}, "NEW", "wgs", "G1", "P", "R", "x_L001_R1_001.fq"
    )

    assert _run(document, sample="NEW", gf_id="G1")["files"] == {
        "L001": {"R1": "x_L001_R1_001.fq"}
    }


def test_simple_merges_per_read(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq_simple(
        sample_centric_doc,
        "S1",
        "wgs",
        "LAZ_123",
        "RITM001",
        "RUN_001",
        "/raw/S1_L001_R2_001.fastq.gz",
    )

    assert _run(document)["files"]["L001"] == {
        "R1": "/raw/S1_L001_R1_001.fastq.gz",
        "R2": "/raw/S1_L001_R2_001.fastq.gz",
    }


def test_simple_then_detailed_drops_unlisted_reads(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq_simple(
        sample_centric_doc, "S1", "wgs", "LAZ_123", "RITM001", "RUN_001", "S1_L001_R2_001.fq"
    )
    document = engine.upsert_raw_fastq(
        document, "S1", "wgs", "LAZ_123", "RITM001", "RUN_001", "L001", "b"
    )

    assert _run(document)["files"]["L001"] == {"R1": "b"}


def test_simple_creates_new_group(engine, sample_centric_doc):
    document = engine.upsert_raw_fastq_simple(
        sample_centric_doc, "S1", "wgs", "LAZ_999", "RITM001", "RUN_001", "S1_L003_R1_001.fq"
    )

    groups = document["samples"]["S1"]["seq"]["wgs"]["raw_sequence"]
    assert [g["gf_id"] for g in groups] == ["LAZ_123", "LAZ_999"]
    assert groups[1]["fastqs"][0]["files"] == {"L003": {"R1": "S1_L003_R1_001.fq"}}


def test_simple_parse_failure_leaves_document_untouched(engine, sample_centric_doc):
    snapshot = copy.deepcopy(sample_centric_doc)

    with pytest.raises(ParseError):
        engine.upsert_raw_fastq_simple(
            sample_centric_doc, "S1", "wgs", "G", "P", "R", "/raw/S1_R1_001.fastq.gz"
        )

    assert sample_centric_doc == snapshot


def test_natural_keys_stay_unique(engine, sample_centric_doc):
    document = sample_centric_doc
    for name in (
        "S1_L001_R1_001.fq",
        "S1_L001_R2_001.fq",
        "S1_L002_R1_001.fq",
        "S1_L001_R1_001.fq",
    ):
        for gf_id in ("LAZ_123", "LAZ_124"):
            document = engine.upsert_raw_fastq_simple(
                document, "S1", "wgs", gf_id, "RITM001", "RUN_001", name
            )
    document = engine.upsert_raw_fastq(
        document, "S1", "wgs", "LAZ_124", "RITM001", "RUN_001", "L003", "x"
    )

    groups = document["samples"]["S1"]["seq"]["wgs"]["raw_sequence"]
    gf_ids = [g["gf_id"] for g in groups]
    assert len(gf_ids) == len(set(gf_ids)) == 2
    for group in groups:
        keys = [(r["gf_project"], r["run"]) for r in group["fastqs"]]
        assert len(keys) == len(set(keys)) == 1
