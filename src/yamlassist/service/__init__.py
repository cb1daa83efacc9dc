"""Request-level services: cell-aware dispatch, completion and lint."""

from yamlassist.service.engine import AutomationEngine, AutomationRequest, FileType, find_cell
from yamlassist.service.yaml_automation import YamlAutomation, YamlContext

__all__ = [
    "AutomationEngine",
    "AutomationRequest",
    "FileType",
    "YamlAutomation",
    "YamlContext",
    "find_cell",
]
