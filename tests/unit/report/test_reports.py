import pytest

from seqtrack.core.exceptions import NotFoundError
from seqtrack.report.report_manager import ReportManager
from seqtrack.utils.logger import Logger


@pytest.fixture
def manager(sample_centric_doc):
    block = sample_centric_doc["samples"]["S1"]["seq"]["wgs"]
    block["processed_data"]["bam"] = [
        {"file_path": "/old.bam", "metadata": {"epoch": 10}},
        {"file_path": "/new.bam", "metadata": {"epoch": 30}, "pipeline_url": "ci/2"},
        {"file_path": "/mid.bam", "metadata": {"epoch": 20}},
    ]
    sample_centric_doc["samples"]["S1"]["seq"]["wes"] = {
        "raw_sequence": [],
        "processed_data": {"bam": [], "vcf": [], "cna": [], "qc": []},
    }
    return ReportManager(sample_centric_doc, Logger(log_file=None))


def test_list_reports(manager):
    names = [r["name"] for r in manager.list_reports()]

    assert names == ["audit", "duplicate_bams", "missing_raw_seq", "sample_meta"]


def test_unknown_report(manager):
    with pytest.raises(ValueError, match="Report not found"):
        manager.run_report("nope")


def test_report_by_module_name(manager):
    df = manager.run_report("report_sample_meta", sample="S1")

    assert not df.empty


def test_sample_meta_report(manager):
    df = manager.run_report("sample_meta", sample="S1")
    values = dict(zip(df["field"], df["value"]))

    assert values["patient"] == "P1"
    assert values["tissue_site"] == "colon"
    assert values["seq.wgs"] == "indexing=dual, technology=illumina"


def test_sample_meta_report_unknown_sample(manager):
    with pytest.raises(NotFoundError):
        manager.run_report("sample_meta", sample="NOPE")


def test_missing_raw_seq(manager):
    df = manager.run_report("missing_raw_seq")
    rows = list(df.itertuples(index=False, name=None))

    assert ("S1", "wes") in rows
    assert ("S2", None) in rows
    assert ("S1", "wgs") not in rows
    assert df["seq_type"].dtype == object


def test_missing_raw_seq_filtered(manager):
    df = manager.run_report("missing_raw_seq", seq_type="wgs")

    assert list(df["sample"]) == ["S2"]
    assert list(df["seq_type"]) == ["wgs"]


def test_duplicate_bams_newest_first(manager):
    df = manager.run_report("duplicate_bams")

    assert list(df["file_path"]) == ["/new.bam", "/mid.bam", "/old.bam"]
    assert list(df["rank"]) == [1, 2, 3]
    assert df.iloc[0]["pipeline_url"] == "ci/2"
    assert df.iloc[1]["created"] == "unknown"


def test_audit_findings(manager, sample_centric_doc):
    lane = sample_centric_doc["samples"]["S1"]["seq"]["wgs"]["raw_sequence"][0][
        "fastqs"
    ][0]["files"]
    lane["L002"] = {"R2": "/raw/only_r2.fq"}

    df = manager.run_report("audit")
    issues = set(zip(df["sample"], df["seq_type"].fillna(""), df["issue"]))

    assert ("S1", "wgs", "duplicate_bams") in issues
    assert ("S1", "wgs", "lane_without_r1") in issues
    assert ("S1", "wes", "no_raw_sequence") in issues
    assert ("S1", "wes", "no_bam") in issues
    assert ("S2", "", "no_seq") in issues
    assert ("S2", "", "missing_meta") in issues


def test_audit_duplicate_natural_keys(sample_centric_doc):
    groups = sample_centric_doc["samples"]["S1"]["seq"]["wgs"]["raw_sequence"]
    groups.append({"gf_id": "LAZ_123", "fastqs": []})

    df = ReportManager(sample_centric_doc, Logger(log_file=None)).run_report("audit")
    details = list(df.loc[df["issue"] == "duplicate_key", "detail"])

    assert details == ["gf_id: LAZ_123 x2"]


def test_explain(manager):
    assert "Audit report" in manager.explain("audit")
