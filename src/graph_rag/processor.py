import time
from pathlib import Path
from typing import Optional, Sequence, Union

from graph_rag.assembler import GraphAssembler
from graph_rag.cache import GraphCache
from graph_rag.config import DocumentType, ParsingConfig, get_config, load_config
from graph_rag.errors import GraphRagError
from graph_rag.graph import DocumentGraph
from graph_rag.output_utils import save_graph
from graph_rag.pipeline import PipelineExecutor
from pdf_reader.models import TextElement
from pdf_reader.pdf_parser import extract_text_elements
from utils.custom_logger import get_logger

logger = get_logger(__name__)


class DocumentProcessor:
    """Extraction, rule pipeline and graph assembly for one configuration.

    A processor holds no per-document state, so one instance can serve
    many documents.
    """

    def __init__(self, config: Optional[ParsingConfig] = None, cache: Optional[GraphCache] = None):
        self.config = config or get_config(DocumentType.GENERIC)
        self.executor = PipelineExecutor(self.config)
        self.assembler = GraphAssembler(self.config)
        self.cache = cache

    def process_elements(self, elements: Sequence[TextElement], title: Optional[str] = None,
                         page_count: Optional[int] = None) -> DocumentGraph:
        """Structure already-extracted elements into a graph.

        Args:
            elements: Text elements in any order
            title: Optional document title (e.g. from PDF metadata)
            page_count: Optional page count of the source

        Returns:
            Assembled DocumentGraph
        """
        parsed = self.executor.run(elements)
        return self.assembler.assemble(parsed, title=title, page_count=page_count)

    def process_pdf(self, pdf_path: Union[str, Path]) -> DocumentGraph:
        if self.cache:
            cached = self.cache.get(pdf_path, self.config)
            if cached is not None:
                return cached

        # Step 1: Extract text elements
        start = time.perf_counter()
        extraction = extract_text_elements(pdf_path)
        extracted_at = time.perf_counter()
        logger.info("Extracted %d elements from %d pages of %s in %.2fs", len(extraction.elements),
                    extraction.page_count, pdf_path, extracted_at - start)

        # Step 2: Run the rule pipeline and assemble the graph
        graph = self.process_elements(extraction.elements, title=extraction.title,
                                      page_count=extraction.page_count)
        logger.info("Structured %s in %.2fs", pdf_path, time.perf_counter() - extracted_at)

        if self.cache:
            self.cache.put(pdf_path, self.config, graph)
        return graph


def extract_pdf_content(input_path: str, output_path: str, output_format: str = "graph",
                        document_type: Union[str, DocumentType] = DocumentType.GENERIC,
                        config_path: Optional[str] = None, cache_dir: Optional[str] = None) -> bool:
    """
    Simple interface to structure a PDF and save the graph to JSON.

    Args:
        input_path: Path to the input PDF file
        output_path: Path to save the output JSON file
        output_format: "graph" or "sequential"
        document_type: Preset to use when no config file is given
        config_path: Optional YAML configuration file
        cache_dir: Optional directory for the graph cache

    Returns:
        True if successful, False otherwise
    """
    try:
        config = load_config(config_path) if config_path else get_config(document_type)
        processor = DocumentProcessor(config, cache=GraphCache(cache_dir) if cache_dir else None)
        graph = processor.process_pdf(input_path)
        save_graph(graph, output_path, output_format)
        return True

    except (GraphRagError, OSError, RuntimeError, ValueError) as e:
        logger.error("Error processing %s: %s", input_path, e)
        print(f"Error processing PDF: {str(e)}")
        return False
