"""
Ingestion — document loading, chunking, embedding and upsert.

This package is the ETL-like pipeline that converts a directory of
Markdown / text documents into embedded chunks stored in a vector
database:

    load_directory → split_sections → split_section → stable_id
    → EmbeddingBatcher → Upserter

:class:`~kb_ingest.ingestion.pipeline.IngestionPipeline` drives the stages.
"""
