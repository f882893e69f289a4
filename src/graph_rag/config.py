"""Parsing configuration: presets per document type, YAML overlays and validation.

Every config object is a frozen dataclass so a resolved configuration can be
shared between documents without copying.
"""
import dataclasses
import hashlib
import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Pattern, Tuple, Union

import yaml

from graph_rag.errors import ConfigurationError
from utils.custom_logger import get_logger

logger = get_logger(__name__)

KNOWN_RULE_NAMES = (
    "SectionDetection",
    "PatternBasedSectionDetection",
    "SpatialClustering",
    "MinimalParse",
    "Validation",
)

BOLD_MODES = ("strict", "loose")
SIZE_UNITS = ("characters", "words", "bytes")
HYPHEN_STRATEGIES = ("strict", "context_aware", "reject", "permissive")


class DocumentType(str, Enum):
    GENERIC = "Generic"
    ACADEMIC_PAPER = "AcademicPaper"
    LEGAL_CONTRACT = "LegalContract"
    TECHNICAL_MANUAL = "TechnicalManual"
    BUSINESS_REPORT = "BusinessReport"


@dataclass(frozen=True)
class SectionConfig:
    large_header_threshold: float = 0.7
    medium_header_threshold: float = 0.3
    small_header_threshold: float = 0.1
    min_header_size: float = 8.5
    use_bold_indicator: bool = True
    bold_mode: str = "strict"
    max_depth: int = 5
    font_size_tolerance: float = 0.1
    enforce_max_depth: bool = True
    starting_section_level: int = 1


DEFAULT_SECTION_PATTERNS = (
    r"^[A-Z][A-Z\s]{2,}$",
    r"^\d+\.\s+[A-Z][a-z]{3,}",
    r"^(Chapter|Section|Part|Article)\s+\d+",
    r"^[A-Z][a-z]{2,}(?:\s+[A-Z][a-z]{2,})*:$",
)


@dataclass(frozen=True)
class PatternConfig:
    patterns: Tuple[str, ...] = DEFAULT_SECTION_PATTERNS
    respect_font_constraints: bool = True

    def compiled(self) -> Tuple[Pattern, ...]:
        return tuple(re.compile(p) for p in self.patterns)


@dataclass(frozen=True)
class SegmentBounds:
    min_segment_size: int
    max_segment_size: int


@dataclass(frozen=True)
class ClusteringConfig:
    min_line_height: float = 8.0
    vertical_gap_threshold_multiplier: float = 0.8
    horizontal_alignment_tolerance: float = 10.0
    line_grouping_tolerance: float = 0.3
    sections: SegmentBounds = SegmentBounds(20, 300)
    paragraphs: SegmentBounds = SegmentBounds(100, 8000)
    size_unit: str = "characters"
    preserve_sentences: bool = False


@dataclass(frozen=True)
class ValidationConfig:
    min_text_length: int = 3


DEFAULT_BULLET_MARKERS = ("•", "·", "●", "■", "▪", "▫", "◦", "‣", "⁃", "-", "*", "→", "➤", "✓", "–", "○")

DEFAULT_NUMBERED_PATTERNS = (
    r"^\d+\.\s",
    r"^\d+\)\s",
    r"^\(\d+\)\s",
    r"^[a-z]\.\s",
    r"^[a-z]\)\s",
    r"^[A-Z]\.\s",
    r"^[A-Z]\)\s",
    r"^[ivx]+\.\s",
    r"^[IVX]+\.\s",
)


DEFAULT_MATH_SYMBOLS = ("→", "←", "⇒", "⇐", "∀", "∃")
DEFAULT_MATH_TERMS = ("equation", "formula", "coordinates", "system", "transform")


@dataclass(frozen=True)
class ListValidationConfig:
    """Checks that reject marker runs which only look like lists."""
    enabled: bool = True
    first_item_validation: bool = True
    parenthetical_context_check: bool = True
    sequential_numbering_check: bool = True
    allow_letter_sequences: bool = True
    max_gap_tolerance: int = 0
    mathematical_context_check: bool = True
    math_symbols: Tuple[str, ...] = DEFAULT_MATH_SYMBOLS
    math_terms: Tuple[str, ...] = DEFAULT_MATH_TERMS
    hyphen_context_check: bool = True
    hyphen_strategy: str = "strict"
    require_space_after_hyphen: bool = True


@dataclass(frozen=True)
class ListConfig:
    enabled: bool = True
    bullet_markers: Tuple[str, ...] = DEFAULT_BULLET_MARKERS
    numbered_patterns: Tuple[str, ...] = DEFAULT_NUMBERED_PATTERNS
    indent_tolerance: float = 10.0
    min_items: int = 2
    validation: ListValidationConfig = ListValidationConfig()


@dataclass(frozen=True)
class TableConfig:
    enabled: bool = True
    column_tolerance: float = 15.0
    min_rows: int = 2
    min_columns: int = 2


@dataclass(frozen=True)
class RuleConfig:
    name: str
    enabled: bool = True


DEFAULT_PIPELINE = (
    RuleConfig("SectionDetection"),
    RuleConfig("PatternBasedSectionDetection"),
    RuleConfig("SpatialClustering"),
    RuleConfig("Validation"),
)


@dataclass(frozen=True)
class ParsingConfig:
    document_type: DocumentType = DocumentType.GENERIC
    section_and_hierarchy: SectionConfig = SectionConfig()
    pattern_detection: PatternConfig = PatternConfig()
    spatial_clustering: ClusteringConfig = ClusteringConfig()
    validation: ValidationConfig = ValidationConfig()
    list_detection: ListConfig = ListConfig()
    table_detection: TableConfig = TableConfig()
    pipeline: Tuple[RuleConfig, ...] = field(default=DEFAULT_PIPELINE)

    @property
    def enabled_rules(self) -> Tuple[str, ...]:
        return tuple(rule.name for rule in self.pipeline if rule.enabled)


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

PRESETS: Dict[DocumentType, ParsingConfig] = {
    DocumentType.GENERIC: ParsingConfig(),
    DocumentType.ACADEMIC_PAPER: ParsingConfig(
        document_type=DocumentType.ACADEMIC_PAPER,
        section_and_hierarchy=SectionConfig(
            large_header_threshold=0.8,
            medium_header_threshold=0.4,
            small_header_threshold=0.15,
            min_header_size=10.0,
            max_depth=4,
        ),
        pattern_detection=PatternConfig(patterns=DEFAULT_SECTION_PATTERNS + (
            r"^(Abstract|Introduction|Related Work|Methods?|Results|Discussion|Conclusions?|References)$",
        )),
        spatial_clustering=ClusteringConfig(
            min_line_height=9.0,
            vertical_gap_threshold_multiplier=1.2,
            horizontal_alignment_tolerance=8.0,
            line_grouping_tolerance=0.25,
            sections=SegmentBounds(50, 500),
            paragraphs=SegmentBounds(200, 12000),
        ),
    ),
    DocumentType.LEGAL_CONTRACT: ParsingConfig(
        document_type=DocumentType.LEGAL_CONTRACT,
        section_and_hierarchy=SectionConfig(
            large_header_threshold=0.6,
            medium_header_threshold=0.3,
            small_header_threshold=0.1,
            min_header_size=9.0,
            max_depth=5,
        ),
        pattern_detection=PatternConfig(patterns=DEFAULT_SECTION_PATTERNS + (
            r"^(ARTICLE|Article)\s+[IVXLC\d]+",
            r"^§\s*\d+",
            r"^(WHEREAS|NOW, THEREFORE)",
        )),
        spatial_clustering=ClusteringConfig(
            min_line_height=8.5,
            vertical_gap_threshold_multiplier=0.6,
            horizontal_alignment_tolerance=12.0,
            line_grouping_tolerance=0.2,
            sections=SegmentBounds(30, 200),
            paragraphs=SegmentBounds(50, 5000),
        ),
    ),
    DocumentType.TECHNICAL_MANUAL: ParsingConfig(
        document_type=DocumentType.TECHNICAL_MANUAL,
        section_and_hierarchy=SectionConfig(max_depth=6, min_header_size=9.0),
        pattern_detection=PatternConfig(patterns=DEFAULT_SECTION_PATTERNS + (
            r"^\d+(?:\.\d+)+\s+\S",
            r"^(Appendix|Annex)\s+[A-Z]",
        )),
        spatial_clustering=ClusteringConfig(
            horizontal_alignment_tolerance=12.0,
            sections=SegmentBounds(10, 300),
            paragraphs=SegmentBounds(60, 6000),
        ),
    ),
    DocumentType.BUSINESS_REPORT: ParsingConfig(
        document_type=DocumentType.BUSINESS_REPORT,
        section_and_hierarchy=SectionConfig(max_depth=4, bold_mode="loose"),
        pattern_detection=PatternConfig(patterns=DEFAULT_SECTION_PATTERNS + (
            r"^(Executive Summary|Overview|Recommendations|Appendix)$",
        )),
        spatial_clustering=ClusteringConfig(
            vertical_gap_threshold_multiplier=1.0,
            sections=SegmentBounds(20, 250),
            paragraphs=SegmentBounds(80, 6000),
        ),
    ),
}


def parse_document_type(value: Union[str, DocumentType]) -> DocumentType:
    if isinstance(value, DocumentType):
        return value
    for document_type in DocumentType:
        if value in (document_type.value, document_type.name):
            return document_type
    valid = ", ".join(t.value for t in DocumentType)
    raise ConfigurationError(f"Unknown document type '{value}' (expected one of: {valid})")


def get_config(document_type: Union[str, DocumentType] = DocumentType.GENERIC) -> ParsingConfig:
    """Return the validated preset for a document type."""
    config = PRESETS[parse_document_type(document_type)]
    validate_config(config)
    return config


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigurationError(message)


def validate_config(config: ParsingConfig) -> None:
    """Raise ConfigurationError on the first invalid setting.

    Args:
        config: Fully resolved configuration to check
    """
    s = config.section_and_hierarchy
    _require(s.small_header_threshold >= 0, "small_header_threshold must be >= 0")
    _require(s.small_header_threshold <= s.medium_header_threshold <= s.large_header_threshold,
             "header thresholds must satisfy small <= medium <= large")
    _require(s.min_header_size > 0, "min_header_size must be positive")
    _require(s.bold_mode in BOLD_MODES, f"bold_mode must be one of {BOLD_MODES}, got '{s.bold_mode}'")
    _require(s.max_depth >= 1, "max_depth must be at least 1")
    _require(s.font_size_tolerance >= 0, "font_size_tolerance must be >= 0")
    _require(1 <= s.starting_section_level <= s.max_depth,
             "starting_section_level must lie between 1 and max_depth")

    for pattern in config.pattern_detection.patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigurationError(f"Invalid section pattern '{pattern}': {exc}") from exc

    c = config.spatial_clustering
    _require(c.min_line_height > 0, "min_line_height must be positive")
    _require(c.vertical_gap_threshold_multiplier > 0, "vertical_gap_threshold_multiplier must be positive")
    _require(c.horizontal_alignment_tolerance >= 0, "horizontal_alignment_tolerance must be >= 0")
    _require(c.line_grouping_tolerance >= 0, "line_grouping_tolerance must be >= 0")
    _require(c.size_unit in SIZE_UNITS, f"size_unit must be one of {SIZE_UNITS}, got '{c.size_unit}'")
    for label, bounds in (("sections", c.sections), ("paragraphs", c.paragraphs)):
        _require(bounds.min_segment_size >= 0, f"{label}.min_segment_size must be >= 0")
        _require(bounds.max_segment_size > 0, f"{label}.max_segment_size must be positive")
        _require(bounds.min_segment_size <= bounds.max_segment_size,
                 f"{label}.min_segment_size must not exceed max_segment_size")

    _require(config.validation.min_text_length >= 0, "validation.min_text_length must be >= 0")

    for pattern in config.list_detection.numbered_patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigurationError(f"Invalid list pattern '{pattern}': {exc}") from exc
    _require(config.list_detection.min_items >= 1, "list_detection.min_items must be >= 1")
    checks = config.list_detection.validation
    _require(checks.max_gap_tolerance >= 0, "list_detection.validation.max_gap_tolerance must be >= 0")
    _require(checks.hyphen_strategy in HYPHEN_STRATEGIES,
             f"hyphen_strategy must be one of {HYPHEN_STRATEGIES}, got '{checks.hyphen_strategy}'")
    _require(config.table_detection.min_rows >= 1, "table_detection.min_rows must be >= 1")
    _require(config.table_detection.min_columns >= 2, "table_detection.min_columns must be >= 2")

    for rule in config.pipeline:
        if rule.name not in KNOWN_RULE_NAMES:
            raise ConfigurationError(
                f"Unknown rule '{rule.name}' (known rules: {', '.join(KNOWN_RULE_NAMES)})"
            )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _overlay(base: Any, overrides: Dict[str, Any], section: str) -> Any:
    """Return a copy of dataclass ``base`` with ``overrides`` applied, recursing into nested dataclasses."""
    if not isinstance(overrides, dict):
        raise ConfigurationError(f"Section '{section}' must be a mapping")
    known = {f.name: f for f in dataclasses.fields(base)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            raise ConfigurationError(f"Unknown setting '{section}.{key}'")
        current = getattr(base, key)
        if dataclasses.is_dataclass(current):
            changes[key] = _overlay(current, value, f"{section}.{key}")
        elif isinstance(current, tuple):
            changes[key] = tuple(value)
        else:
            changes[key] = value
    return dataclasses.replace(base, **changes)


def _parse_pipeline(entries: Any) -> Tuple[RuleConfig, ...]:
    if not isinstance(entries, list):
        raise ConfigurationError("'pipeline' must be a list of rules")
    rules = []
    for entry in entries:
        if isinstance(entry, str):
            rules.append(RuleConfig(entry))
        elif isinstance(entry, dict) and 'name' in entry:
            rules.append(RuleConfig(str(entry['name']), bool(entry.get('enabled', True))))
        else:
            raise ConfigurationError(f"Invalid pipeline entry: {entry!r}")
    return tuple(rules)


def config_from_dict(data: Dict[str, Any]) -> ParsingConfig:
    """Overlay a plain mapping onto the preset selected by its ``document_type``."""
    data = dict(data or {})
    document_type = parse_document_type(data.pop('document_type', DocumentType.GENERIC))
    config = PRESETS[document_type]

    changes = {}
    if 'pipeline' in data:
        changes['pipeline'] = _parse_pipeline(data.pop('pipeline'))
    for section, overrides in data.items():
        if section not in {f.name for f in dataclasses.fields(ParsingConfig)}:
            raise ConfigurationError(f"Unknown configuration section '{section}'")
        changes[section] = _overlay(getattr(config, section), overrides, section)

    config = dataclasses.replace(config, **changes)
    validate_config(config)
    return config


def load_config(config_path: Union[str, Path]) -> ParsingConfig:
    """Load a YAML configuration file.

    Args:
        config_path: Path to a YAML file whose top-level keys mirror ParsingConfig

    Returns:
        Validated ParsingConfig
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc

    config = config_from_dict(data)
    logger.info("Loaded %s configuration from %s", config.document_type.value, path)
    return config


def config_to_dict(config: ParsingConfig) -> Dict[str, Any]:
    data = dataclasses.asdict(config)
    data['document_type'] = config.document_type.value
    data['pipeline'] = [{'name': r.name, 'enabled': r.enabled} for r in config.pipeline]
    return data


def config_fingerprint(config: ParsingConfig) -> str:
    """Stable SHA-256 of the resolved configuration."""
    payload = json.dumps(config_to_dict(config), sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(payload.encode('utf-8')).hexdigest()
