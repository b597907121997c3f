"""qq_member_etl.export_member_csv

CLI entrypoint: convert saved QQ group member pages (.html) to CSV.

Each input file X.html is written to a sibling X.csv, overwriting any
existing file. Directories are walked recursively; only files ending in
exactly ".html" are converted. The first failing file stops the run.

Usage:
    python -m qq_member_etl.export_member_csv -vv pages/ extra/member.html
"""

from __future__ import annotations

import csv
import logging
import os
import sys
from pathlib import Path
from typing import Iterator

import click

from qq_member_etl.members import CSV_HEADER, Member, members_from_html
from qq_member_etl.shared import (
    ConversionError,
    MemberExtractError,
    RunCounters,
    setup_logging,
    verbosity_to_level,
)

log = logging.getLogger(__name__)

HTML_SUFFIX = ".html"


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def discover_html_files(path: Path) -> Iterator[Path]:
    """Yield the .html files under path.

    A file path yields itself if it has the .html suffix. A directory is
    walked recursively in sorted order; entries that cannot be read are
    skipped, as are missing paths.
    """
    if path.is_file():
        if path.suffix == HTML_SUFFIX:
            yield path
        return

    # os.walk ignores directories it cannot list
    for dirpath, dirnames, filenames in os.walk(path):
        dirnames.sort()
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if p.suffix == HTML_SUFFIX and p.is_file():
                yield p


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def write_members_csv(out_path: Path, members: list[Member]) -> None:
    with open(out_path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(CSV_HEADER)
        for member in members:
            writer.writerow(member.csv_row())


def convert_html(path: Path, counters: RunCounters | None = None) -> int:
    """Convert one saved member page to a sibling .csv file.

    The page is fully parsed before the output is opened, so a page without
    a member table never creates or touches the .csv. Returns the number of
    members written.
    """
    log.info("Converting path: %s", path)

    try:
        html = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConversionError(path, f"Failed to read file ({exc})") from exc

    try:
        members = members_from_html(html)
    except MemberExtractError as exc:
        raise ConversionError(path, f"Error while parsing file ({exc})") from exc

    out_path = path.with_suffix(".csv")
    if out_path.is_file():
        log.warning("Overwriting file %s", out_path)
        if counters is not None:
            counters.files_overwritten += 1

    try:
        write_members_csv(out_path, members)
    except OSError as exc:
        raise ConversionError(out_path, f"Failed to write csv ({exc})") from exc

    log.info("Wrote %d members to %s", len(members), out_path)
    if counters is not None:
        counters.files_converted += 1
        counters.members_written += len(members)
    return len(members)


def run_conversion(paths: list[Path], counters: RunCounters) -> None:
    """Convert every .html file under paths; stop on the first failure."""
    log.info("Given paths: %s", [str(p) for p in paths])
    for root in paths:
        for html_path in discover_html_files(root):
            convert_html(html_path, counters)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@click.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(path_type=Path),
    metavar="FILE...",
)
@click.option("-v", "--verbose", count=True, help="More log output (repeatable)")
@click.option("-q", "--quiet", count=True, help="Silence log output")
def main(paths: tuple[Path, ...], verbose: int, quiet: int) -> None:
    """Extract QQ group member names and related info from saved
    group member pages (FILE or directory) into CSV files."""
    setup_logging(verbosity_to_level(verbose, quiet))
    counters = RunCounters()

    try:
        run_conversion(list(paths), counters)
    except ConversionError as exc:
        click.echo(f"FATAL: {exc}", err=True)
        sys.exit(1)

    click.echo(
        f"Done: files={counters.files_converted} "
        f"members={counters.members_written} "
        f"overwritten={counters.files_overwritten}"
    )


if __name__ == "__main__":
    main()
