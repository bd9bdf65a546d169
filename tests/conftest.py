# tests/conftest.py

import json

import pytest

from seqtrack import SeqTrack
from seqtrack.merge import MergeEngine
from seqtrack.utils.logger import Logger


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test from its own directory with a fresh logger."""
    monkeypatch.chdir(tmp_path)
    Logger.reset()
    yield
    Logger.reset()


@pytest.fixture
def engine():
    return MergeEngine(logger=Logger(log_file=None, log_level="DEBUG"))


def _block(bams=None):
    return {
        "indexing": "dual",
        "technology": "illumina",
        "raw_sequence": [
            {
                "gf_id": "LAZ_123",
                "fastqs": [
                    {
                        "gf_project": "RITM001",
                        "run": "RUN_001",
                        "files": {"L001": {"R1": "/raw/S1_L001_R1_001.fastq.gz"}},
                    }
                ],
            }
        ],
        "processed_data": {"bam": bams or [], "vcf": [], "cna": [], "qc": []},
    }


@pytest.fixture
def sample_centric_doc():
    return {
        "version": "1.0",
        "samples": {
            "S1": {
                "sample_meta": {
                    "patient": "P1",
                    "sex": "F",
                    "sottorivalab_project": "PRJ1",
                    "sample_type": "tumour",
                    "phenotype": None,
                    "case_control": None,
                    "tissue_site": "colon",
                },
                "seq": {"wgs": _block()},
            },
            "S2": {
                "sample_meta": {
                    "patient": "P1",
                    "sex": None,
                    "sottorivalab_project": "PRJ1",
                    "sample_type": "normal",
                    "phenotype": None,
                    "case_control": None,
                    "tissue_site": None,
                },
                "seq": {},
            },
        },
    }


@pytest.fixture
def patient_centric_doc():
    return {
        "version": "1.0",
        "patients": {
            "P1": {
                "sex": "M",
                "cases": {
                    "C1": {
                        "project_id": "PRJ1",
                        "samples": {
                            "S1": {
                                "sample_meta": {
                                    "tissue_site": "colon",
                                    "sample_type": "tumour",
                                    "phenotype": "adenoma",
                                    "case_control": "case",
                                },
                                "analyses": {"wgs": _block()},
                            },
                            "S2": {
                                "sample_meta": {
                                    "tissue_site": "blood",
                                    "sample_type": "normal",
                                    "phenotype": None,
                                    "case_control": "control",
                                },
                                "analyses": {},
                            },
                        },
                    }
                },
            },
            "P2": {
                "sex": None,
                "cases": {
                    "C7": {
                        "project_id": None,
                        "samples": {
                            "S9": {
                                "sample_meta": {
                                    "tissue_site": None,
                                    "sample_type": "tumour",
                                    "phenotype": None,
                                    "case_control": None,
                                },
                                "analyses": {},
                            }
                        },
                    }
                },
            },
        },
    }


@pytest.fixture
def write_db(tmp_path):
    def _write(document, name="db.json"):
        path = tmp_path / name
        path.write_text(json.dumps(document))
        return path

    return _write


@pytest.fixture
def read_db():
    def _read(path):
        return json.loads(path.read_text())

    return _read


@pytest.fixture
def tracker(tmp_path, sample_centric_doc, write_db):
    """SeqTrack bound to a sample-centric database file."""
    path = write_db(sample_centric_doc)
    return SeqTrack(json_path=str(path), log_level="DEBUG")


@pytest.fixture
def patient_tracker(tmp_path, patient_centric_doc, write_db):
    """SeqTrack bound to a patient-centric database file."""
    path = write_db(patient_centric_doc, name="patients.json")
    return SeqTrack(json_path=str(path), log_level="DEBUG")
