"""
kb_ingest — structure-aware knowledge-base ingestion into a vector store.

Markdown / text files are split into heading-delimited sections, then into
overlapping, sentence-aware chunks. Each chunk gets an id derived from its
position (``path|s<section>|c<chunk>``), so re-running ingestion over an
unchanged corpus overwrites records instead of duplicating them.
"""

__version__ = "0.1.0"
