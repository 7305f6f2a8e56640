"""setupverify CLI - Verify multi-part installers.

Entry point for the ``setupverify`` command-line tool. Every stage is an
independent switch; with no stage switch all three stages run in full.

Usage::

    setupverify                       # all stages, current directory
    setupverify -s -b ~/installers    # signature + part checksums
    setupverify -B -I -r downloads    # counts and payload info, recursive
    setupverify -S setup_game.exe     # exit status only

Exit Codes:
    0 - At least one installer checked and no errors.
    1 - Errors found, no installers found, interrupted, or a required
        external tool / configuration could not be loaded.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from setupverify import __version__
from setupverify.cli.output import configure_logging, make_sink
from setupverify.config import Config, load_config
from setupverify.core.aggregator import ResultAggregator, VerifyOptions
from setupverify.core.checksum import ChecksumVerifier
from setupverify.core.extraction import ExtractionVerifier
from setupverify.core.signature import SignatureClassifier
from setupverify.core.tools import require_tool
from setupverify.discovery import InstallerScanner
from setupverify.exceptions import SetupVerifyError


def _build_aggregator(
    config: Config,
    sink,
    *,
    signature: bool,
    checksum: bool,
    compute_digests: bool,
    extraction: bool,
    test_extract: bool,
    rar_mode: bool,
    unfiltered: bool,
    options: VerifyOptions,
) -> ResultAggregator:
    """Resolve required tools and wire the enabled stages.

    Raises:
        ToolNotFoundError: If an enabled stage's tool is not installed.
    """
    signature_stage = None
    if signature:
        signature_stage = SignatureClassifier(
            known=config.known,
            ca_bundle=config.ca_bundle,
            tool=require_tool(config.signature_tool),
            unfiltered=unfiltered,
            timeout=config.timeout,
        )

    checksum_stage = None
    if checksum:
        checksum_stage = ChecksumVerifier(
            compute_digests=compute_digests,
            window=config.trailer_window,
        )

    extraction_stage = None
    if extraction:
        extraction_stage = ExtractionVerifier(
            tool=require_tool(config.extractor_tool),
            test_extract=test_extract,
            rar_mode=rar_mode,
            timeout=config.timeout,
        )

    return ResultAggregator(
        sink,
        signature=signature_stage,
        checksum=checksum_stage,
        extraction=extraction_stage,
        options=options,
    )


@click.command("setupverify", context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="setupverify")
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option("-s", "--signature", is_flag=True, help="Verify the digital signature.")
@click.option("-b", "--checksums", is_flag=True, help="Verify bin file checksums.")
@click.option("-B", "--count-only", is_flag=True,
              help="Check bin file presence and count, skip checksums.")
@click.option("-i", "--extract", is_flag=True, help="Probe and test-extract the payload.")
@click.option("-I", "--info-only", is_flag=True, help="Probe the payload, skip test extraction.")
@click.option("-f", "--all-executables", is_flag=True,
              help="Check every .exe, not only those with the installer prefix.")
@click.option("-r", "--recursive", is_flag=True, help="Recurse into subdirectories.")
@click.option("-R", "--no-rar", is_flag=True, help="Disable RAR-compatible extraction.")
@click.option("-c", "--compact", is_flag=True, help="Show only file names and PASSED/FAILED.")
@click.option("-S", "--silent", is_flag=True,
              help="Check only the first installer and print nothing.")
@click.option("-C", "--no-color", is_flag=True, help="Disable coloured output.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              envvar="SETUPVERIFY_CONFIG", default=None,
              help="YAML configuration file (env: SETUPVERIFY_CONFIG).")
@click.option("--prefix", default=None, help="Installer file name prefix (default: setup_).")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Seconds allowed per external tool call.")
@click.option("-j", "--jobs", type=click.IntRange(min=1), default=1, show_default=True,
              help="Installers verified in parallel.")
@click.option("--unfiltered", is_flag=True, help="Show the signature tool's full output.")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
def cli(
    paths: tuple[Path, ...],
    signature: bool,
    checksums: bool,
    count_only: bool,
    extract: bool,
    info_only: bool,
    all_executables: bool,
    recursive: bool,
    no_rar: bool,
    compact: bool,
    silent: bool,
    no_color: bool,
    config_path: Path | None,
    prefix: str | None,
    timeout: float | None,
    jobs: int,
    unfiltered: bool,
    verbose: int,
) -> None:
    """Verify signatures, bin file checksums and payloads of installers.

    PATHS are installer files and/or directories to scan (default: the
    current directory).
    """
    color = not no_color
    configure_logging(verbose, color=color, silent=silent)

    if not (signature or checksums or count_only or extract or info_only):
        signature = checksums = extract = True

    try:
        config = load_config(config_path)
        if timeout is not None:
            config.timeout = timeout
        if prefix is not None:
            config.head_prefix = prefix

        sink = make_sink(compact=compact, silent=silent, color=color)
        aggregator = _build_aggregator(
            config,
            sink,
            signature=signature,
            checksum=checksums or count_only,
            compute_digests=not count_only,
            extraction=extract or info_only,
            test_extract=not info_only,
            rar_mode=not no_rar,
            unfiltered=unfiltered,
            options=VerifyOptions(single_head=silent, jobs=jobs),
        )
    except SetupVerifyError as exc:
        if not silent:
            click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    scanner = InstallerScanner(
        prefix=config.head_prefix,
        all_executables=all_executables,
        recursive=recursive,
    )
    heads = scanner.find_heads(list(paths) or [Path(".")])
    report = aggregator.run(heads)
    sys.exit(report.exit_code)
