"""Chunker/Merger module. Public API: split, Chunk, ResultMerger, ModelCallerPort."""
from credit_pipeline.chunking.chunker import Chunk, split
from credit_pipeline.chunking.merger import ModelCallerPort, ResultMerger
from credit_pipeline.chunking.prompts import analysis_messages, merge_messages

__all__ = [
    "Chunk",
    "split",
    "ResultMerger",
    "ModelCallerPort",
    "analysis_messages",
    "merge_messages",
]
