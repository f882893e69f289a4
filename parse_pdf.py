#!/usr/bin/env python3
"""
PDF Parser - Simple Interface

Structures a PDF into a hierarchical document graph and saves it as JSON.

Usage:
    python parse_pdf.py

Configuration:
    Set PDF_PATH, OUTPUT_PATH, OUTPUT_FORMAT ("graph" or "sequential"),
    DOCUMENT_TYPE and optionally CONFIG_PATH / CACHE_DIR in the environment
    or a .env file.
"""

import os
import sys

from dotenv import load_dotenv

from graph_rag import extract_pdf_content

load_dotenv()

# Configuration
PDF_PATH = os.getenv("PDF_PATH", "data/document.pdf")
OUTPUT_PATH = os.getenv("OUTPUT_PATH", "data/document_graph.json")
OUTPUT_FORMAT = os.getenv("OUTPUT_FORMAT", "graph")
DOCUMENT_TYPE = os.getenv("DOCUMENT_TYPE", "Generic")
CONFIG_PATH = os.getenv("CONFIG_PATH") or None
CACHE_DIR = os.getenv("CACHE_DIR") or None

def main() -> int:
    """Main entry point for the PDF parser."""
    print("🚀 Starting PDF parsing...")
    print(f"📁 Input file: {PDF_PATH}")
    print(f"💾 Output file: {OUTPUT_PATH} ({OUTPUT_FORMAT})")
    print(f"⚙️  Configuration: {CONFIG_PATH or DOCUMENT_TYPE}")
    print("-" * 50)

    success = extract_pdf_content(
        PDF_PATH,
        OUTPUT_PATH,
        output_format=OUTPUT_FORMAT,
        document_type=DOCUMENT_TYPE,
        config_path=CONFIG_PATH,
        cache_dir=CACHE_DIR,
    )

    if success:
        print(f"✅ Successfully parsed PDF and saved to {OUTPUT_PATH}")
        return 0
    print("❌ Failed to parse PDF")
    return 1

if __name__ == "__main__":
    sys.exit(main())
