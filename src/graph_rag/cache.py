import hashlib
import json
from pathlib import Path
from typing import Optional, Union

from graph_rag.config import ParsingConfig, config_fingerprint
from graph_rag.graph import SCHEMA_VERSION, DocumentGraph
from utils.custom_logger import get_logger

logger = get_logger(__name__)

CACHE_VERSION = "1"
SAMPLE_BYTES = 1024


def pdf_fingerprint(pdf_path: Union[str, Path]) -> str:
    """Hash of file size plus the first and last KiB; cheap for large files."""
    path = Path(pdf_path)
    size = path.stat().st_size
    digest = hashlib.sha256(str(size).encode('utf-8'))
    with open(path, 'rb') as f:
        digest.update(f.read(SAMPLE_BYTES))
        if size > SAMPLE_BYTES:
            f.seek(max(size - SAMPLE_BYTES, SAMPLE_BYTES))
            digest.update(f.read(SAMPLE_BYTES))
    return digest.hexdigest()


class GraphCache:
    """File cache of assembled graphs keyed by PDF content and configuration."""

    def __init__(self, cache_dir: Union[str, Path] = ".graph_cache"):
        self.cache_dir = Path(cache_dir)

    def key(self, pdf_path: Union[str, Path], config: ParsingConfig) -> str:
        parts = [pdf_fingerprint(pdf_path), config_fingerprint(config), SCHEMA_VERSION, CACHE_VERSION]
        return hashlib.sha256('|'.join(parts).encode('utf-8')).hexdigest()

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def get(self, pdf_path: Union[str, Path], config: ParsingConfig) -> Optional[DocumentGraph]:
        path = self._path(self.key(pdf_path, config))
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                graph = DocumentGraph.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as exc:
            logger.warning("Ignoring unreadable cache entry %s: %s", path, exc)
            return None
        logger.info("Cache hit for %s", pdf_path)
        return graph

    def put(self, pdf_path: Union[str, Path], config: ParsingConfig, graph: DocumentGraph) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(self.key(pdf_path, config))
        with open(path, 'w', encoding='utf-8') as f:
            f.write(graph.to_json("graph"))
        return path

    def clear(self) -> int:
        """Delete every cached graph and return how many were removed."""
        removed = 0
        if self.cache_dir.exists():
            for entry in self.cache_dir.glob("*.json"):
                entry.unlink()
                removed += 1
        return removed
