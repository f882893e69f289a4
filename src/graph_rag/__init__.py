"""
Graph RAG Package

Turns positioned text elements into a hierarchical document graph.

Simple Usage:
    from graph_rag import extract_pdf_content

    extract_pdf_content("input.pdf", "output.json")
"""

from .config import DocumentType, ParsingConfig, get_config, load_config
from .errors import ConfigurationError, GraphAssemblyError, GraphRagError, OrderingViolationError, RuleError
from .graph import DocumentGraph, DocumentInfo, DocumentNode
from .pipeline import PipelineExecutor
from .processor import DocumentProcessor, extract_pdf_content

__all__ = [
    "DocumentType",
    "ParsingConfig",
    "get_config",
    "load_config",
    "ConfigurationError",
    "GraphAssemblyError",
    "GraphRagError",
    "OrderingViolationError",
    "RuleError",
    "DocumentGraph",
    "DocumentInfo",
    "DocumentNode",
    "PipelineExecutor",
    "DocumentProcessor",
    "extract_pdf_content",
]
