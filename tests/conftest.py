#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Pytest configuration and shared fixtures.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import gzip
import logging
import shutil
import tempfile
from pathlib import Path

import pytest

from taxleak.config.settings import LeakageSettings
from taxleak.io.sam_reader import SamRecord


def sam_header(references) -> str:
    """@HD plus one @SQ line per reference; htslib maps unknown names to unmapped."""
    lines = ["@HD\tVN:1.6\tSO:unsorted\n"]
    for name in references:
        lines.append(f"@SQ\tSN:{name}\tLN:1000\n")
    return "".join(lines)


SAM_HEADER = sam_header(["1_2", "3_4"])


def sam_line(qname: str, rname: str, mapq: int = 10) -> str:
    """A minimal valid SAM alignment line."""
    unaligned = rname == "*"
    flag = 4 if unaligned else 0
    pos = 0 if unaligned else 1
    cigar = "*" if unaligned else "10M"
    return f"{qname}\t{flag}\t{rname}\t{pos}\t{mapq}\t{cigar}\t*\t0\t0\tACGTACGTAC\tIIIIIIIIII\n"


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="taxleak_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_root_logging():
    """Drop handlers the CLI installs on the root logger between tests."""
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in root.handlers[:]:
        if handler not in before and type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)


@pytest.fixture
def make_record():
    """Factory for in-memory alignment records."""
    def _make(qname: str, rname: str, mapq: int = 10) -> SamRecord:
        flag = 4 if rname == "*" else 0
        return SamRecord(qname=qname, flag=flag, rname=rname, mapq=mapq)
    return _make


@pytest.fixture
def settings():
    """Default run settings (mapq >= 4, skip malformed, skip undefined)."""
    return LeakageSettings(min_mapq=4)


@pytest.fixture
def scenario_records(make_record):
    """
    Three reads: one correct, two crossing between taxa 1 and 3.

    1_2 -> 1_2 correct; 1_2 -> 3_4 and 3_4 -> 1_2 leak in opposite directions.
    """
    return [
        make_record("1_2", "1_2", 10),
        make_record("1_2", "3_4", 10),
        make_record("3_4", "1_2", 10),
    ]


@pytest.fixture
def scenario_sam(temp_output_dir):
    """The scenario reads as a SAM file, plus reads every filter must drop."""
    path = temp_output_dir / "scenario.sam"
    with open(path, "w") as f:
        f.write(SAM_HEADER)
        f.write(sam_line("1_2_r1", "1_2", 10))
        f.write(sam_line("1_2_r2", "3_4", 10))
        f.write(sam_line("3_4_r3", "1_2", 10))
        f.write(sam_line("3_4_r4", "1_2", 2))    # below mapq threshold
        f.write(sam_line("1_2_r5", "*", 0))      # unaligned
    return path


@pytest.fixture
def scenario_sam_gz(scenario_sam):
    """Gzipped copy of the scenario SAM file."""
    gz_path = scenario_sam.with_suffix(".sam.gz")
    with open(scenario_sam, "rb") as src, gzip.open(gz_path, "wb") as dst:
        shutil.copyfileobj(src, dst)
    return gz_path


def corrupt_gzip_body(path: Path) -> None:
    """Flip every byte between the gzip header and trailer, keeping the magic intact."""
    data = bytearray(path.read_bytes())
    for i in range(10, len(data) - 8):
        data[i] ^= 0xFF
    path.write_bytes(bytes(data))


@pytest.fixture
def write_sam(temp_output_dir):
    """Factory writing (qname, rname, mapq) rows to a SAM file in the temp dir."""
    def _write(name, rows):
        path = temp_output_dir / name
        references = sorted({rname for _, rname, _ in rows if rname != "*"})
        opener = gzip.open if name.endswith(".gz") else open
        with opener(path, "wt") as f:
            f.write(sam_header(references))
            for qname, rname, mapq in rows:
                f.write(sam_line(qname, rname, mapq))
        return path
    return _write

# taxleak v0.1.0
# Any usage is subject to this software's license.
