import dataclasses
from pathlib import Path

import pytest

from graph_rag.config import (
    DocumentType,
    ListValidationConfig,
    PRESETS,
    SegmentBounds,
    config_fingerprint,
    get_config,
    load_config,
    validate_config,
)
from graph_rag.errors import ConfigurationError

from helpers import config_with

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"


class TestPresets:
    @pytest.mark.parametrize("document_type", list(DocumentType))
    def test_every_preset_is_valid(self, document_type):
        config = get_config(document_type)
        assert config.document_type == document_type

    def test_lookup_by_value(self):
        assert get_config("LegalContract") is PRESETS[DocumentType.LEGAL_CONTRACT]

    def test_unknown_document_type(self):
        with pytest.raises(ConfigurationError, match="Unknown document type"):
            get_config("Novel")

    def test_academic_preset_values(self):
        config = get_config(DocumentType.ACADEMIC_PAPER)
        assert config.section_and_hierarchy.large_header_threshold == 0.8
        assert config.section_and_hierarchy.max_depth == 4
        assert config.spatial_clustering.paragraphs.max_segment_size == 12000


class TestValidation:
    def test_thresholds_must_be_ordered(self):
        config = config_with(section={'small_header_threshold': 0.5, 'medium_header_threshold': 0.3})
        with pytest.raises(ConfigurationError, match="thresholds"):
            validate_config(config)

    def test_invalid_pattern(self):
        config = config_with(patterns={'patterns': ("([unclosed",)})
        with pytest.raises(ConfigurationError, match="Invalid section pattern"):
            validate_config(config)

    def test_invalid_bold_mode(self):
        with pytest.raises(ConfigurationError, match="bold_mode"):
            validate_config(config_with(section={'bold_mode': 'sometimes'}))

    def test_segment_bounds(self):
        config = config_with(clustering={'paragraphs': SegmentBounds(500, 100)})
        with pytest.raises(ConfigurationError, match="paragraphs"):
            validate_config(config)

    def test_unknown_size_unit(self):
        with pytest.raises(ConfigurationError, match="size_unit"):
            validate_config(config_with(clustering={'size_unit': 'pages'}))

    def test_unknown_hyphen_strategy(self):
        config = config_with(list_detection=dataclasses.replace(
            get_config().list_detection,
            validation=ListValidationConfig(hyphen_strategy='lenient'),
        ))
        with pytest.raises(ConfigurationError, match="hyphen_strategy"):
            validate_config(config)

    def test_negative_gap_tolerance(self):
        config = config_with(list_detection=dataclasses.replace(
            get_config().list_detection,
            validation=ListValidationConfig(max_gap_tolerance=-1),
        ))
        with pytest.raises(ConfigurationError, match="max_gap_tolerance"):
            validate_config(config)


class TestLoadConfig:
    def test_overlay_on_preset(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "document_type: AcademicPaper\n"
            "section_and_hierarchy:\n"
            "  max_depth: 3\n"
            "spatial_clustering:\n"
            "  paragraphs:\n"
            "    max_segment_size: 500\n"
            "pipeline:\n"
            "  - SectionDetection\n"
            "  - name: Validation\n"
            "    enabled: false\n",
            encoding='utf-8',
        )
        config = load_config(path)
        assert config.document_type == DocumentType.ACADEMIC_PAPER
        assert config.section_and_hierarchy.max_depth == 3
        # Untouched values come from the preset
        assert config.section_and_hierarchy.large_header_threshold == 0.8
        assert config.spatial_clustering.paragraphs.max_segment_size == 500
        assert config.spatial_clustering.paragraphs.min_segment_size == 200
        assert config.enabled_rules == ("SectionDetection",)

    def test_unknown_setting(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("section_and_hierarchy:\n  header_magic: 1\n", encoding='utf-8')
        with pytest.raises(ConfigurationError, match="header_magic"):
            load_config(path)

    def test_unknown_rule(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("pipeline:\n  - Sharpen\n", encoding='utf-8')
        with pytest.raises(ConfigurationError, match="Sharpen"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_nested_list_validation_overlay(self):
        config = load_config(CONFIG_DIR / "legal_contract.yaml")
        assert config.spatial_clustering.preserve_sentences
        assert config.list_detection.validation.max_gap_tolerance == 1
        assert config.list_detection.validation.hyphen_strategy == "context_aware"
        assert config.list_detection.validation.first_item_validation

    @pytest.mark.parametrize("name", ["legal_contract.yaml", "minimal.yaml"])
    def test_shipped_configs_load(self, name):
        load_config(CONFIG_DIR / name)


class TestFingerprint:
    def test_stable_and_sensitive(self):
        assert config_fingerprint(get_config()) == config_fingerprint(get_config())
        assert config_fingerprint(get_config()) != config_fingerprint(config_with(section={'max_depth': 3}))
