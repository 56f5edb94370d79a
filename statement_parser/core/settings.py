"""
Parser configuration, optionally loaded from YAML.
"""
from pathlib import Path
from typing import Optional
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .anchors import HEADER_SCAN_LINES
from .detectors import DELIMITER_SAMPLE_LINES
from .lines import LINE_TOLERANCE

logger = logging.getLogger(__name__)


class ParserSettings(BaseModel):
    """Tunable parser constants."""
    model_config = ConfigDict(extra='forbid', frozen=True)

    line_tolerance: float = Field(default=LINE_TOLERANCE, gt=0)
    header_scan_lines: int = Field(default=HEADER_SCAN_LINES, ge=1)
    delimiter_sample_lines: int = Field(default=DELIMITER_SAMPLE_LINES, ge=1)
    ocr_enabled: bool = True


def load_settings(config_path: Optional[Path] = None) -> ParserSettings:
    """
    Load parser settings from a YAML file.

    Args:
        config_path: YAML file with ParserSettings keys; None for defaults

    Returns:
        ParserSettings object
    """
    if config_path is None:
        return ParserSettings()

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    settings = ParserSettings.model_validate(data)
    logger.debug(f"Loaded settings from {config_path}: {settings}")
    return settings
