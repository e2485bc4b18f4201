#!/usr/bin/env python3
"""
ABOUTME: Command line front end: converts a DOCX file into the document tree JSON
ABOUTME: Resolves styles, list numbering, comments and tracked changes
"""

import argparse
import json
import sys
from collections import Counter
from pathlib import Path

try:
    from docx_reader import DocxReader, MissingMainDocumentError
except ImportError:
    print("Error: docx_reader package not found. Ensure it is in the same directory as parse_docx.py.", file=sys.stderr)
    sys.exit(1)


def print_error(title: str, details: str, solution: str):
    """
    Print a friendly, formatted error message.

    Args:
        title: Error title
        details: Detailed error information
        solution: Suggested solution steps
    """
    print("\n" + "=" * 80, file=sys.stderr)
    print(f"ERROR: {title}", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(f"\n{details}", file=sys.stderr)
    print("\nSOLUTION:", file=sys.stderr)
    print(solution, file=sys.stderr)
    print("\n" + "=" * 80 + "\n", file=sys.stderr)


def iter_nodes(node: dict):
    """Depth-first walk over a node and everything in its content."""
    yield node
    for child in node.get('content', []):
        yield from iter_nodes(child)


def collect_stats(document: dict) -> dict:
    """Count block types, list items, tables and distinct comments in a tree."""
    types = Counter()
    list_items = 0
    comment_ids = set()
    revisions = Counter()

    for node in iter_nodes(document):
        types[node.get('type')] += 1
        attrs = node.get('attrs') or {}
        if 'listNumId' in attrs:
            list_items += 1
        for mark in node.get('marks', []):
            if mark['type'] == 'comment':
                comment_ids.add(mark['attrs']['commentId'])
            elif mark['type'] in ('insertion', 'deletion'):
                revisions[mark['type']] += 1

    return {
        'top_level_blocks': len(document.get('content', [])),
        'paragraphs': types['paragraph'],
        'headings': types['heading'],
        'list_items': list_items,
        'tables': types['table'],
        'page_breaks': types['pageBreak'],
        'comments': len(comment_ids),
        'inserted_spans': revisions['insertion'],
        'deleted_spans': revisions['deletion'],
    }


def print_stats(stats: dict):
    print("\n--- Document Statistics ---")
    print(f"Top-level blocks: {stats['top_level_blocks']}")
    print(f"Paragraphs: {stats['paragraphs']}")
    print(f"Headings: {stats['headings']}")
    print(f"List items: {stats['list_items']}")
    print(f"Tables: {stats['tables']}")
    print(f"Page breaks: {stats['page_breaks']}")
    print(f"Commented ranges (distinct comments): {stats['comments']}")
    print(f"Tracked insertions / deletions (text spans): {stats['inserted_spans']} / {stats['deleted_spans']}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert a DOCX document into a normalized document tree (JSON)"
    )
    parser.add_argument(
        "document",
        type=str,
        help="Path to the DOCX file to parse"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file path (default: {document}_tree.json)"
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2, 0 for compact output)"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print statistics about the document"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output on stderr"
    )

    args = parser.parse_args(argv)

    # Validate input file
    doc_path = Path(args.document)
    if not doc_path.exists():
        print_error(
            "File not found",
            f"Input file does not exist: {args.document}",
            "Check the path and try again."
        )
        return 1

    if doc_path.suffix.lower() != '.docx':
        print(f"Warning: File does not have .docx extension: {args.document}", file=sys.stderr)

    reader = DocxReader(debug=True if args.debug else None)
    print(f"Parsing document: {args.document}")
    try:
        document = reader.load(doc_path)
    except MissingMainDocumentError as e:
        print_error(
            "Not a Word document",
            str(e),
            "The archive has no word/document.xml part. Open the file in Word\n"
            "and save it again as .docx."
        )
        return 1
    except ValueError as e:
        print_error(
            "Cannot read document",
            str(e),
            "Make sure the file is a valid .docx (not .doc, not password protected)."
        )
        return 1

    print(f"Extracted {len(document['content'])} top-level blocks")

    if args.stats:
        print_stats(collect_stats(document))

    output_path = Path(args.output) if args.output else doc_path.with_name(doc_path.stem + "_tree.json")
    indent = args.indent if args.indent > 0 else None
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=indent, ensure_ascii=False)

    print(f"\nSaved to: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
