#!/usr/bin/env python3

import argparse
import io
import json
import logging
import sys
import time
from collections import Counter
from typing import Dict, List

import lark

from recognizer import (
    ConfigurationError,
    GrammarIOError,
    GrammarSyntaxError,
    MarkupDocument,
    MarkupElement,
    build_scanner,
)
from recognizer.ner_parser import GRAMMAR_FORMAT_VERSION, parse_file

__version__ = "0.1.0"

DEFAULT_TEMPLATE = '<entity ids=""/>'
ROOT_ELEMENT = "text"


def show_recognition_statistics(
    start_time: float, text_length: int, output: List[Dict], key_count: int, node_count: int
):
    """Display recognition statistics."""
    total_time = time.time() - start_time
    id_counts = Counter(entity_id for item in output for entity_id in item["ids"])
    covered = sum(item["length"] for item in output)

    sys.stderr.write("=== Recognition Statistics ===\n")
    sys.stderr.write(f"Total processing time: {total_time:.2f} seconds\n")
    sys.stderr.write(f"Dictionary keys: {key_count} ({node_count} trie nodes)\n")
    sys.stderr.write(f"Text length: {text_length} characters\n")
    sys.stderr.write(f"Matches: {len(output)}\n")
    sys.stderr.write(
        f"Coverage: {covered} characters ({(covered / text_length * 100) if text_length else 0:.1f}%)\n"
    )
    if id_counts:
        sys.stderr.write("\nMatch breakdown by entity id:\n")
        for entity_id, count in id_counts.most_common():
            sys.stderr.write(f"  {entity_id}: {count}\n")
    sys.stderr.write("==============================\n\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recognize the named entities of a grammar in a text file."
    )
    parser.add_argument("grammar_file", nargs="?", help="Path to the entity grammar file")
    parser.add_argument("text_file", nargs="?", help="Path to the input text file")
    parser.add_argument(
        "--word-chars",
        default="",
        help="Characters that belong to words, next to letters and digits",
    )
    parser.add_argument(
        "--no-word-before",
        default="",
        help="Characters that may not follow a match",
    )
    parser.add_argument(
        "--no-word-after",
        default="",
        help="Characters that may not precede a match",
    )
    parser.add_argument(
        "--case-insensitive-min-length",
        type=int,
        default=-1,
        help="Minimum match length for case-insensitive matching (-1 disables it)",
    )
    parser.add_argument(
        "--fuzzy-min-length",
        type=int,
        default=-1,
        help="Minimum match length for skipping noise characters (-1 disables it)",
    )
    parser.add_argument(
        "--format",
        choices=["jsonl", "xml"],
        default="jsonl",
        help="Emit JSON match records or the text annotated with XML elements",
    )
    parser.add_argument(
        "--template",
        default=DEFAULT_TEMPLATE,
        help="Match element template with exactly one empty attribute (xml format)",
    )
    parser.add_argument(
        "--pretty-print",
        action="store_true",
        help="Emit all results in a single pretty-printed JSON array",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "--show-stats",
        action="store_true",
        help="Show recognition statistics",
    )
    parser.add_argument(
        "--show-timing",
        action="store_true",
        help="Show detailed timing information",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write output to this file (UTF-8, LF line endings). If omitted, output goes to stdout.",
    )
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print("Version information:")
        print(f"  lark: {lark.__version__}")
        print(f"  ner: {__version__}")
        print(f"  grammar format: {GRAMMAR_FORMAT_VERSION}")
        return 0

    if not args.grammar_file or not args.text_file:
        parser.error("the following arguments are required: grammar_file, text_file")

    overall_start_time = time.time()

    logging.basicConfig(
        level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s"
    )
    logger = logging.getLogger("ner")

    options = {
        "word-chars": args.word_chars,
        "no-word-before": args.no_word_before,
        "no-word-after": args.no_word_after,
        "case-insensitive-min-length": args.case_insensitive_min_length,
        "fuzzy-min-length": args.fuzzy_min_length,
    }

    try:
        file_load_start = time.time()
        grammar = parse_file(args.grammar_file)
        # newline="" keeps CR LF pairs, so offsets refer to the file as it is
        with open(args.text_file, "r", encoding="utf-8", newline="") as f:
            text = f.read()
        file_load_time = time.time() - file_load_start

        compile_start = time.time()
        logger.info("Compiling %s rules", len(grammar.rules))
        scanner = build_scanner(grammar, args.template, options)
        compile_time = time.time() - compile_start
    except (GrammarSyntaxError, GrammarIOError, ConfigurationError) as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"Error: cannot read {args.text_file}: {e}\n")
        return 1

    if args.show_timing:
        sys.stderr.write(f"File loading time: {file_load_time:.3f}s\n")
        sys.stderr.write(f"Grammar compile time: {compile_time:.3f}s\n")

    scan_start = time.time()
    output = [
        {
            "offset": span.start,
            "length": span.length,
            "ids": list(span.ids),
            "match": text[span.start : span.end],
        }
        for span in scanner.matches(text)
    ]
    scan_time = time.time() - scan_start

    if args.show_timing:
        sys.stderr.write(f"Scan time: {scan_time:.3f}s\n")
    sys.stderr.write(f"Found {len(output)} matches of {len(scanner.trie)} surface forms\n")
    if args.show_stats:
        show_recognition_statistics(
            overall_start_time, len(text), output, len(scanner.trie), scanner.trie.node_count
        )

    overall_time = time.time() - overall_start_time
    if args.show_timing:
        sys.stderr.write(f"Overall processing time: {overall_time:.3f} seconds\n")

    if args.output:
        output_stream = open(args.output, "w", encoding="utf-8", newline="\n")
    else:
        output_stream = sys.stdout

    try:
        if args.format == "xml":
            document = scanner.scan(MarkupDocument(text))
            output_stream.write(document.to_xml(root=MarkupElement(ROOT_ELEMENT)))
            output_stream.write("\n")
        elif args.pretty_print:
            json.dump(output, output_stream, indent=2, ensure_ascii=False)
            output_stream.write("\n")
        else:
            for item in output:
                output_stream.write(json.dumps(item, ensure_ascii=False))
                output_stream.write("\n")
    finally:
        if args.output and output_stream is not sys.stdout:
            output_stream.close()
    return 0


if __name__ == "__main__":
    # Ensure UTF-8 encoding for stdout
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")
    sys.exit(main())
