"""
Conversion between the two accepted document shapes.

Sample-centric (canonical, used by every mutation):

    {"samples": {S: {"sample_meta": {...}, "seq": {...}}}}

Patient-centric (nested view):

    {"patients": {P: {"sex": ..., "cases": {C: {"project_id": ...,
        "samples": {S: {"sample_meta": {...}, "analyses": {...}}}}}}}}

Flattening a patient-centric document keeps the patient and case
containers themselves (every field except `cases`/`samples`) under
CONTAINERS_KEY, so patients or cases without samples and any extra fields
stored on them come back on the way out.

Both functions return fresh trees and never touch their input.
"""

import copy

UNKNOWN_PATIENT = "UNKNOWN_PATIENT"

CONTAINERS_KEY = "_containers"

SAMPLE_META_FIELDS = (
    "patient",
    "sex",
    "sottorivalab_project",
    "sample_type",
    "phenotype",
    "case_control",
    "tissue_site",
)

# Identity fields only present when the sample came from a patient-centric file
DERIVED_META_FIELDS = ("patient_id", "case_id", "project_id")

# Patient and case identity live one level up in the nested view
PATIENT_VIEW_META_FIELDS = ("tissue_site", "sample_type", "phenotype", "case_control")


def is_patient_centric(document) -> bool:
    return isinstance(document, dict) and isinstance(document.get("patients"), dict)


def _first_present(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _without(container, key) -> dict:
    return {k: copy.deepcopy(v) for k, v in container.items() if k != key}


def _flatten_sample(patient_key, patient, case_key, case, sample) -> dict:
    meta = copy.deepcopy(sample.get("sample_meta") or {})
    case_project = _first_present(
        case.get("project_id"), case.get("sottorivalab_project")
    )

    meta["patient"] = _first_present(meta.get("patient"), patient_key)
    meta["sex"] = _first_present(meta.get("sex"), patient.get("sex"))
    meta["sottorivalab_project"] = _first_present(
        meta.get("sottorivalab_project"), case_project
    )
    for field in SAMPLE_META_FIELDS:
        meta.setdefault(field, None)

    meta["patient_id"] = patient_key
    meta["case_id"] = case_key
    meta["project_id"] = _first_present(
        case_project, meta.get("project_id"), meta.get("sottorivalab_project")
    )

    # Keep anything else a curator stored on the sample
    flat = {
        key: copy.deepcopy(value)
        for key, value in sample.items()
        if key not in ("sample_meta", "analyses", "seq")
    }
    flat["sample_meta"] = meta
    flat["seq"] = copy.deepcopy(
        _first_present(sample.get("analyses"), sample.get("seq")) or {}
    )
    return flat


def normalize(document):
    """
    Returns (canonical_document, was_patient_centric).

    A document with neither `samples` nor `patients` is treated as an empty
    sample-centric database.
    """
    document = document or {}

    if not is_patient_centric(document):
        canonical = copy.deepcopy(document)
        if not isinstance(canonical.get("samples"), dict):
            canonical["samples"] = {}
        return canonical, False

    canonical = {
        key: copy.deepcopy(value)
        for key, value in document.items()
        if key != "patients"
    }
    samples = {}
    containers = {}
    for patient_key, patient in document["patients"].items():
        patient = patient or {}
        cases = patient.get("cases") or {}
        containers[patient_key] = _without(patient, "cases")
        containers[patient_key]["cases"] = {}
        for case_key, case in cases.items():
            case = case or {}
            containers[patient_key]["cases"][case_key] = _without(case, "samples")
            for sample_key, sample in (case.get("samples") or {}).items():
                samples[sample_key] = _flatten_sample(
                    patient_key, patient, case_key, case, sample or {}
                )

    canonical[CONTAINERS_KEY] = containers
    canonical["samples"] = samples
    return canonical, True


def _restore_containers(containers) -> dict:
    patients = {}
    for patient_key, patient in (containers or {}).items():
        patient = patient or {}
        restored = _without(patient, "cases")
        restored.setdefault("sex", None)
        restored["cases"] = {}
        for case_key, case in (patient.get("cases") or {}).items():
            case = _without(case or {}, "samples")
            case.setdefault("project_id", None)
            case["samples"] = {}
            restored["cases"][case_key] = case
        patients[patient_key] = restored
    return patients


def denormalize(document) -> dict:
    """Rebuilds the patient-centric view from a canonical document."""
    document = document or {}
    result = {
        key: copy.deepcopy(value)
        for key, value in document.items()
        if key not in ("samples", "patients", CONTAINERS_KEY)
    }
    patients = _restore_containers(document.get(CONTAINERS_KEY))

    for sample_key, sample in (document.get("samples") or {}).items():
        sample = sample or {}
        meta = sample.get("sample_meta") or {}

        patient_key = meta.get("patient_id") or meta.get("patient") or UNKNOWN_PATIENT
        case_key = meta.get("case_id") or patient_key

        patient = patients.setdefault(patient_key, {"sex": None, "cases": {}})
        if patient["sex"] is None and meta.get("sex") is not None:
            patient["sex"] = meta["sex"]

        case = patient["cases"].setdefault(
            case_key, {"project_id": None, "samples": {}}
        )
        if case["project_id"] is None:
            case["project_id"] = _first_present(
                meta.get("project_id"), meta.get("sottorivalab_project")
            )

        nested = {
            key: copy.deepcopy(value)
            for key, value in sample.items()
            if key not in ("sample_meta", "seq", "analyses")
        }
        nested["sample_meta"] = {
            field: meta.get(field) for field in PATIENT_VIEW_META_FIELDS
        }
        nested["analyses"] = copy.deepcopy(sample.get("seq") or {})
        case["samples"][sample_key] = nested

    result["patients"] = patients
    return result
