"""
Контракты ядра: JSON Schema для сериализованных стрелок и диаграмм.
"""

from .validators import (
    SCHEMA_DIR,
    ArrowContractValidator,
    ContractValidator,
    DiagramContractValidator,
    SchemaLoader,
    validate_arrow,
    validate_diagram,
)

__all__ = [
    "SCHEMA_DIR",
    "SchemaLoader",
    "ContractValidator",
    "ArrowContractValidator",
    "DiagramContractValidator",
    "validate_arrow",
    "validate_diagram",
]
