#!/usr/bin/env python3
"""
wiki-sqldump command line.

    wiki-sqldump extract enwiki-latest-page.sql.gz --table page --limit 10
    wiki-sqldump pagerank --page page.sql.gz --linktarget linktarget.sql.gz \\
        --pagelinks pagelinks.sql.gz --output ranks.tsv --top 1000
"""

import argparse
import logging
import sys
import time

from tqdm import tqdm

from .config import Config, setup_logging
from .dump_io import open_table
from .errors import SqlSyntaxError
from .link_graph import read_link_targets, read_links, read_page_titles
from .pagerank import rank_pages
from .values import Batch, Null, Text, Value, encode_value, format_tuples

logger = logging.getLogger(__name__)

TSV_NULL = "\\N"

# Backslash first so the escapes added after it are not doubled
TSV_ESCAPES = (("\\", "\\\\"), ("\t", "\\t"), ("\n", "\\n"), ("\r", "\\r"))


def format_tsv_value(value: Value) -> str:
    """Render a value in MySQL's tab-separated form (NULL as \\N)."""
    if isinstance(value, Null):
        return TSV_NULL
    if isinstance(value, Text):
        text = value.value
        for raw, escaped in TSV_ESCAPES:
            text = text.replace(raw, escaped)
        return text
    return encode_value(value)


def non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def _write_batch(out, batch: Batch, fmt: str, table: str):
    if fmt == "sql":
        out.write(f"INSERT INTO `{table}` VALUES {format_tuples(batch)};\n")
    else:
        for row in batch:
            out.write("\t".join(format_tsv_value(v) for v in row) + "\n")


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_extract(args, config: Config) -> int:
    out = sys.stdout
    rows_written = 0

    with open_table(args.dump, args.table) as reader:
        for batch in tqdm(reader, desc=f"Extracting {args.table}", unit=" stmts",
                          disable=not config.show_progress):
            if args.limit is not None:
                batch = batch[:args.limit - rows_written]
            _write_batch(out, batch, args.format, args.table)
            rows_written += len(batch)
            if args.limit is not None and rows_written >= args.limit:
                break

    out.flush()
    logger.info(f"Wrote {rows_written:,} rows from `{args.table}`")
    return 0


def cmd_pagerank(args, config: Config) -> int:
    start_time = time.time()
    namespace = config.namespace
    progress = config.show_progress

    with open_table(args.page, "page") as reader:
        title_to_id = read_page_titles(reader, namespace, progress)
    with open_table(args.linktarget, "linktarget") as reader:
        target_to_page = read_link_targets(reader, title_to_id, namespace, progress)
    with open_table(args.pagelinks, "pagelinks") as reader:
        graph = read_links(reader, target_to_page, title_to_id, namespace, progress)

    ranked = rank_pages(graph, config)
    if args.top is not None:
        ranked = ranked[:args.top]

    out = open(args.output, "w", encoding="utf-8") if args.output else sys.stdout
    try:
        for page_id, score in ranked:
            out.write(f"{page_id}\t{graph.titles.get(page_id, '')}\t{score:.10g}\n")
    finally:
        if out is not sys.stdout:
            out.close()

    elapsed = time.time() - start_time
    logger.info(f"Ranked {graph.num_pages:,} pages over {graph.num_links:,} links "
                f"in {elapsed/60:.1f} minutes")
    return 0


# ============================================================================
# MAIN
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wiki-sqldump",
        description="Extract rows from MySQL INSERT dumps and rank Wikipedia pages",
    )
    parser.add_argument("--log-dir", help="Also write a timestamped log file here")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Print the rows of one table")
    extract.add_argument("dump", help="Dump file (.sql, .sql.gz or .sql.bz2)")
    extract.add_argument("--table", required=True, help="Table name in the INSERT statements")
    extract.add_argument("--format", choices=["tsv", "sql"], default="tsv")
    extract.add_argument("--limit", type=non_negative_int, help="Stop after this many rows")
    extract.set_defaults(func=cmd_extract)

    pagerank = sub.add_parser("pagerank", help="Compute PageRank from page/linktarget/pagelinks dumps")
    pagerank.add_argument("--page", required=True, help="page table dump")
    pagerank.add_argument("--linktarget", required=True, help="linktarget table dump")
    pagerank.add_argument("--pagelinks", required=True, help="pagelinks table dump")
    pagerank.add_argument("--output", help="TSV output path (default: stdout)")
    pagerank.add_argument("--top", type=non_negative_int, help="Only write the N best pages")
    pagerank.add_argument("--damping", type=float, help="Damping factor (default 0.85)")
    pagerank.add_argument("--iterations", type=int, help="Max power iterations (default 50)")
    pagerank.add_argument("--threshold", type=float, help="Convergence threshold (default 1e-6)")
    pagerank.add_argument("--namespace", type=int, help="Page namespace to rank (default 0)")
    pagerank.set_defaults(func=cmd_pagerank)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    # Results may go to stdout, so logs go to stderr
    setup_logging(config, stream=sys.stderr)

    try:
        return args.func(args, config)
    except SqlSyntaxError as e:
        logger.error(f"Malformed dump: {e}")
        return 1
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"I/O error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
