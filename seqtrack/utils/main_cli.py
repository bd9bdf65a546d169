import functools

import click

from seqtrack.core.exceptions import SeqTrackError
from seqtrack.merge import ADDED, DUPLICATE
from seqtrack.seqtrack import SeqTrack
from seqtrack.utils.logger import Logger


# === Helpers ===
def json_option(command):
    return click.option(
        "--json",
        "json_path",
        default=None,
        type=click.Path(dir_okay=False),
        help="Database JSON file (default: .seqtrack.toml or working_con_db.json)",
    )(command)


def handle_errors(command):
    """Turns SeqTrackError into a non-zero exit with the message on stderr."""

    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except SeqTrackError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def echo_frame(df, empty_message):
    if df.empty:
        click.echo(empty_message)
    else:
        click.echo(df.to_string(index=False))


# === Base group ===
@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
@click.pass_context
def main(ctx, log_level):
    """SeqTrack CLI - sample, FASTQ and processed data tracking."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    # Handlers must bind to this invocation's stderr
    Logger.reset()


def _tracker(json_path):
    ctx = click.get_current_context()
    return SeqTrack(json_path=json_path, log_level=(ctx.obj or {}).get("log_level"))


# === Samples ===
@main.command("add-sample")
@click.option("--sample", required=True, help="Sample name")
@click.option("--patient", required=True, help="Patient identifier")
@click.option("--project", required=True, help="Lab project")
@click.option("--sample-type", required=True, help="Sample type (e.g. tumour, normal)")
@click.option("--sex", default=None)
@click.option("--case-id", default=None)
@click.option("--phenotype", default=None)
@click.option("--case-control", default=None)
@click.option("--tissue-site", default=None)
@json_option
@handle_errors
def add_sample(json_path, sample, **meta):
    """Add a sample if missing (fills empty metadata otherwise)."""
    _tracker(json_path).add_sample(sample, **meta)
    click.echo(f"Added sample {sample}")


@main.command("set-sample-meta")
@click.option("--sample", required=True)
@click.option("--phenotype", default=None)
@click.option("--case-control", default=None)
@click.option("--tissue-site", default=None)
@json_option
@handle_errors
def set_sample_meta(json_path, sample, phenotype, case_control, tissue_site):
    """Overwrite phenotype/case_control/tissue_site of a sample."""
    _tracker(json_path).set_sample_meta(
        sample,
        phenotype=phenotype,
        case_control=case_control,
        tissue_site=tissue_site,
    )
    click.echo(f"Updated sample_meta for {sample}")


@main.command("set-seq-meta")
@click.option("--sample", required=True)
@click.option("--seq-type", required=True)
@click.option("--indexing", default=None)
@click.option("--technology", default=None)
@json_option
@handle_errors
def set_seq_meta(json_path, sample, seq_type, indexing, technology):
    """Set indexing/technology of a sequencing block."""
    _tracker(json_path).set_seq_meta(
        sample, seq_type, indexing=indexing, technology=technology
    )
    click.echo(f"Updated {seq_type} metadata for {sample}")


@main.command("show-sample-meta")
@click.option("--sample", required=True)
@json_option
@handle_errors
def show_sample_meta(json_path, sample):
    """Print the metadata of one sample."""
    df = _tracker(json_path).show_sample_meta(sample)
    echo_frame(df, f"No metadata recorded for {sample}")


# === Raw FASTQ ===
@main.command("add-fastq")
@click.option("--sample", required=True)
@click.option("--seq-type", required=True)
@click.option("--gf-id", required=True)
@click.option("--gf-project", required=True)
@click.option("--run", required=True)
@click.option("--lane", required=True)
@click.option("--r1", required=True)
@click.option("--r2", default=None)
@click.option("--r3", default=None)
@json_option
@handle_errors
def add_fastq(json_path, sample, seq_type, gf_id, gf_project, run, lane, r1, r2, r3):
    """Record the complete set of reads of one lane (replaces the lane)."""
    _tracker(json_path).add_fastq(
        sample, seq_type, gf_id, gf_project, run, lane, r1, r2=r2, r3=r3
    )
    click.echo(f"Added FASTQs for {sample}")


@main.command("add-fastq-simple")
@click.argument("sample")
@click.argument("gf_id")
@click.argument("gf_project")
@click.argument("run")
@click.argument("seq_type")
@click.argument("path")
@json_option
@handle_errors
def add_fastq_simple(json_path, sample, gf_id, gf_project, run, seq_type, path):
    """
    Add one FASTQ, detecting lane and read from its name.

    Example: add-fastq-simple SAMPLE1 LAZ_123 RITM001 RUN_001 wgs
    /path/to/file_L001_R1_001.fastq.gz
    """
    _tracker(json_path).add_fastq_simple(
        sample, gf_id, gf_project, run, seq_type, path
    )
    click.echo(f"Added {path} to sample {sample} (gf_id: {gf_id}, run: {run})")


@main.command("list-missing-raw-seq")
@click.option("--seq-type", default=None, help="Only check this sequencing type")
@json_option
@handle_errors
def list_missing_raw_seq(json_path, seq_type):
    """List samples without raw FASTQ data."""
    df = _tracker(json_path).list_missing_raw_seq(seq_type=seq_type)
    echo_frame(df, "All samples have raw sequence data.")


# === Processed data ===
def _report_processed_status(status, sample, kind, seq_type):
    if status == ADDED:
        click.echo(f"Added {kind.upper()} to sample {sample} ({seq_type})")
    elif status == DUPLICATE:
        click.echo(f"{kind.upper()} already recorded for {sample} ({seq_type}), skipped")
    else:
        raise click.ClickException(
            f"Sample '{sample}' does not exist in the database. "
            f"{kind.upper()} file not added."
        )


def processed_options(command):
    for option in reversed(
        [
            click.option("--pipeline-url", default=None),
            click.option("--epoch", default="0", help="Integer recency timestamp"),
            click.option("--created", default=None),
            click.option("--size", default=None),
        ]
    ):
        command = option(command)
    return command


@main.command("add-processed")
@click.option("--sample", required=True)
@click.option("--seq-type", required=True)
@click.option(
    "--data-type",
    required=True,
    help="One of bam, vcf, cna, qc",
)
@click.option("--file-path", required=True)
@processed_options
@json_option
@handle_errors
def add_processed(json_path, sample, seq_type, data_type, file_path, **kwargs):
    """Add a processed file (bam/vcf/cna/qc) to a sample."""
    status = _tracker(json_path).add_processed(
        sample, seq_type, data_type, file_path, **kwargs
    )
    _report_processed_status(status, sample, data_type, seq_type)


@main.command("add-bam")
@click.option("--sample", required=True)
@click.option("--seq-type", required=True)
@click.option("--bam", required=True)
@processed_options
@json_option
@handle_errors
def add_bam(json_path, sample, seq_type, bam, **kwargs):
    """Add a BAM file to a sample."""
    status = _tracker(json_path).add_bam(sample, seq_type, bam, **kwargs)
    _report_processed_status(status, sample, "bam", seq_type)


@main.command("list-duplicate-bams")
@json_option
@handle_errors
def list_duplicate_bams(json_path):
    """List all BAMs of samples holding more than one (newest first)."""
    df = _tracker(json_path).list_duplicate_bams()
    echo_frame(df, "No duplicate BAMs found.")


@main.command("remove-bam")
@click.option("--sample", required=True)
@click.option("--seq-type", required=True)
@click.option("--file-path", required=True, help="Exact file path of the BAM")
@click.option("--delete-file", is_flag=True, help="Also delete it from the filesystem")
@json_option
@handle_errors
def remove_bam(json_path, sample, seq_type, file_path, delete_file):
    """Remove a specific BAM from the database."""
    outcome = _tracker(json_path).remove_bam(
        sample, seq_type, file_path, delete_file=delete_file
    )
    click.echo(f"Removed {file_path} from database")
    if outcome is not None:
        click.echo(f"Filesystem: {outcome}")


@main.command("cleanup-bams")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted")
@json_option
@handle_errors
def cleanup_bams(json_path, dry_run):
    """Keep only the newest BAM per sample/seq_type."""
    summary = _tracker(json_path).cleanup_bams(dry_run=dry_run)
    if not summary["discarded"]:
        click.echo("No duplicate BAMs found. Nothing to clean up.")
        return

    for file_path in summary["discarded"]:
        click.echo(f"{'[DRY RUN] ' if dry_run else ''}Discarded: {file_path}")
    click.echo("Summary:")
    click.echo(f"  Files deleted: {summary['deleted']}")
    click.echo(f"  Failed deletions: {summary['failed']}")


# === Audit / validation ===
@main.command("audit")
@json_option
@handle_errors
def audit(json_path):
    """Report missing metadata, missing data and duplicates."""
    df = _tracker(json_path).audit()
    echo_frame(df, "No issues found.")


@main.command("validate-db")
@click.option("--schema", "schema_path", default=None, type=click.Path(dir_okay=False))
@json_option
@handle_errors
def validate_db(json_path, schema_path):
    """Validate the database against the JSON Schema."""
    result = _tracker(json_path).validate_db(schema_path=schema_path)
    if not result.valid:
        raise click.ClickException(f"Invalid at {result.path}: {result.message}")
    click.echo("Database is valid.")


@main.command("convert")
@click.option("--to", "shape", required=True, type=click.Choice(["patient", "sample"]))
@click.option("--output", default=None, type=click.Path(dir_okay=False))
@json_option
@handle_errors
def convert(json_path, shape, output):
    """Rewrite the database in patient-centric or sample-centric shape."""
    target = _tracker(json_path).convert(shape, output_path=output)
    click.echo(f"Wrote {shape}-centric database to {target}")


"""
seqtrack add-sample --sample S1 --patient P1 --project PRJ --sample-type tumour
seqtrack add-fastq-simple S1 LAZ_123 RITM001 RUN_001 wgs /data/S1_L001_R1_001.fastq.gz
seqtrack add-bam --sample S1 --seq-type wgs --bam /data/S1.bam --epoch 1700000000
seqtrack cleanup-bams --dry-run
"""
