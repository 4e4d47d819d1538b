#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Tab-separated report writers and the pairwise snapshot loader.

Formats (one record per line, unset gene slots written as ``NA``, every
slot from gene 0 on):
  - pairwise:    from  to  total  count_0 ... count_n
  - normalized:  to  total  ratio_0 ... ratio_n
  - taxa:        taxon  good  leaked  correct|incoming|outgoing  v_0 ... v_n
                 (three lines per taxon)
  - summary:     taxon  total  correct  frac  outgoing  frac  incoming  frac  [label]
  - mask:        taxon  keep|drop  good  leaked  masked_gene_ids

The pairwise report doubles as the persisted snapshot of the table:
``load_pairwise`` reads it back, ignoring the total column.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, TextIO, Union

from ..core.gene_counters import Genes, NormGenes
from ..core.masking import MaskDecision
from ..core.pairwise import LeakagePair, PairwiseLeakage
from ..core.ranking import rank_normalized, rank_pairs, rank_taxa
from ..core.summary import TaxonSummary
from ..core.taxon_ledger import GeneLeaks, TaxonLeaks
from ..errors import InputUnreadable, MalformedRecord
from .files import READ_ERRORS, open_file

logger = logging.getLogger(__name__)

UNSET_TOKEN = "NA"
LEAK_KINDS = ("correct", "incoming", "outgoing")


def format_value(value) -> str:
    """
    Render a slot value without losing precision.

    None becomes the unset token, integral values print as integers and
    other floats use the shortest repr that reads back to the same value.
    """
    if value is None:
        return UNSET_TOKEN
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _line(fields: Iterable) -> str:
    return '\t'.join(str(f) for f in fields) + '\n'


# ---------------------------------------------------------------------------
# Pair-centric reports
# ---------------------------------------------------------------------------

def write_pairwise(table: PairwiseLeakage, handle: TextIO) -> int:
    """Write the pairwise table grouped by target taxon. Returns lines written."""
    count = 0
    for pair, genes in rank_pairs(table):
        handle.write(_line(
            [pair.from_taxon, pair.to_taxon, genes.total()]
            + [format_value(v) for v in genes.data]
        ))
        count += 1
    return count


def write_normalized(profiles: Dict[int, NormGenes], handle: TextIO) -> int:
    count = 0
    for taxon, norm in rank_normalized(profiles):
        handle.write(_line(
            [taxon, format_value(norm.total())] + [format_value(v) for v in norm.data]
        ))
        count += 1
    return count


def _parse_slot(token: str, line_number: int) -> Optional[int]:
    if token == UNSET_TOKEN:
        return None
    try:
        value = int(token)
    except ValueError:
        raise MalformedRecord(f"line {line_number}: invalid gene count {token!r}", line_number)
    if value < 0:
        raise MalformedRecord(f"line {line_number}: negative gene count {value}", line_number)
    return value


def _parse_taxon(token: str, line_number: int) -> int:
    if not (token.isascii() and token.isdigit()):
        raise MalformedRecord(f"line {line_number}: invalid taxon id {token!r}", line_number)
    return int(token)


def load_pairwise(filepath: Union[str, Path]) -> PairwiseLeakage:
    """
    Rebuild a pairwise table from a previously written pairwise report.

    Args:
        filepath: TSV of ``from  to  (ignored)  count_0 ... count_n``

    Raises:
        InputUnreadable: if the file cannot be opened or decoded
        MalformedRecord: if a line does not follow the format; a snapshot
            is written by this tool, so damage is never skipped silently
    """
    filepath = Path(filepath)
    table = PairwiseLeakage()

    try:
        with open_file(filepath, 'r') as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.rstrip('\r\n')
                if not line:
                    continue
                fields = line.split('\t')
                if len(fields) < 3:
                    raise MalformedRecord(
                        f"line {line_number}: expected at least 3 fields, got {len(fields)}",
                        line_number,
                    )
                from_taxon = _parse_taxon(fields[0], line_number)
                to_taxon = _parse_taxon(fields[1], line_number)

                genes = Genes.from_slots(_parse_slot(token, line_number) for token in fields[3:])
                existing = table.get(from_taxon, to_taxon)
                if existing is None:
                    table.map[LeakagePair(from_taxon, to_taxon)] = genes
                else:
                    logger.warning(f"line {line_number}: pair {from_taxon}->{to_taxon} repeated, merging")
                    existing.merge_from(genes)
    except READ_ERRORS as e:
        raise InputUnreadable(f"Cannot read pairwise table {filepath}: {e}") from e

    logger.info(f"Loaded {len(table):,} taxon pairs from {filepath}")
    return table


# ---------------------------------------------------------------------------
# Taxon-centric reports
# ---------------------------------------------------------------------------

def taxon_lines(taxon: TaxonLeaks, threshold: float = 0.0) -> List[str]:
    """The three report lines (correct, incoming, outgoing) of one taxon."""
    good = taxon.num_good_genes(threshold)
    leaked = taxon.num_leaked_on_genes(threshold)
    lines = []
    for kind in LEAK_KINDS:
        values = [
            format_value(None if leaks is None else getattr(leaks, kind))
            for leaks in taxon.leaks
        ]
        lines.append(_line([taxon.id, good, leaked, kind] + values))
    return lines


def write_taxa(
    ledger: GeneLeaks,
    handle: TextIO,
    threshold: float = 0.0,
    worst_first: bool = True,
) -> int:
    """Write the ledger ranked by leakage severity. Returns taxa written."""
    ranked = rank_taxa(ledger, threshold)
    if not worst_first:
        ranked.reverse()
    for taxon in ranked:
        handle.writelines(taxon_lines(taxon, threshold))
    return len(ranked)


def write_summary(
    summary: TaxonSummary,
    handle: TextIO,
    labels: Optional[Dict[int, str]] = None,
) -> int:
    count = 0
    for taxon in sorted(summary.taxa):
        c = summary.taxa[taxon]
        fields = [
            taxon, c.total,
            c.correct, format_value(c.correct_fraction),
            c.out_incorrect, format_value(c.outgoing_fraction),
            c.in_incorrect, format_value(c.incoming_fraction),
        ]
        if labels is not None:
            fields.append(labels.get(taxon, UNSET_TOKEN))
        handle.write(_line(fields))
        count += 1
    return count


def write_mask(decisions: List[MaskDecision], handle: TextIO) -> int:
    for d in decisions:
        masked = ','.join(str(g) for g in d.masked) if d.masked else '-'
        handle.write(_line([d.taxon, 'keep' if d.keep else 'drop', d.good_genes, d.leaked_genes, masked]))
    return len(decisions)

# taxleak v0.1.0
# Any usage is subject to this software's license.
