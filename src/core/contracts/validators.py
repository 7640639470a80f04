"""
JSON Schema Contract Validators

Сериализованные стрелки и диаграммы проверяются против контрактов
Draft 2020-12 (библиотека jsonschema) до сборки FinArrow / FiniteDiagram.

Контракты (каталог schema/ рядом с модулем):
- finset_arrow.json: domain_size, codomain_size, mapping
- finset_diagram.json: помеченные объекты и структурные стрелки

Схема описывает только форму документа. Длина mapping, попадание образов
в codomain и ссылки на метки проверяются моделями ядра.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузка и кэширование контрактов.

    Каждая схема читается с диска один раз и проходит meta-validation;
    скомпилированный Draft202012Validator кэшируется рядом с ней.
    """

    def __init__(self, schema_dir: Optional[Path] = None):
        self._schema_dir = schema_dir or SCHEMA_DIR
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._validators: Dict[str, Draft202012Validator] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def available(self) -> List[str]:
        """Имена контрактов в каталоге, без расширения."""
        return sorted(path.stem for path in self._schema_dir.glob("*.json"))

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Args:
            schema_name: Имя контракта без расширения ('finset_arrow')

        Raises:
            FileNotFoundError: Файла контракта нет
            ValueError: Файл не является валидной JSON Schema
        """
        cached = self._schemas.get(schema_name)
        if cached is not None:
            return cached

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        schema = json.loads(schema_path.read_text(encoding="utf-8"))

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e.message}") from e

        self._schemas[schema_name] = schema
        return schema

    def validator_for(self, schema_name: str) -> Draft202012Validator:
        validator = self._validators.get(schema_name)
        if validator is None:
            validator = Draft202012Validator(self.load_schema(schema_name))
            self._validators[schema_name] = validator
        return validator


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Валидатор одного контракта.

    Подклассы задают schema_name; loader можно подменить (например,
    каталогом тестовых схем).
    """

    schema_name: str = ""

    def __init__(self, schema_name: Optional[str] = None, loader: Optional[SchemaLoader] = None):
        if schema_name is not None:
            self.schema_name = schema_name
        if not self.schema_name:
            raise ValueError("schema_name is required")
        loader = loader or _SCHEMA_LOADER
        self.schema = loader.load_schema(self.schema_name)
        self.validator = loader.validator_for(self.schema_name)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Первая найденная ошибка формы
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)

    def error_messages(self, data: Dict[str, Any]) -> List[str]:
        """Все ошибки в виде '<json path>: <message>', по порядку путей."""
        return sorted(f"{error.json_path}: {error.message}" for error in self.iter_errors(data))


class ArrowContractValidator(ContractValidator):
    """finset_arrow: сериализованная стрелка."""

    schema_name = "finset_arrow"


class DiagramContractValidator(ContractValidator):
    """finset_diagram: конечная диаграмма."""

    schema_name = "finset_diagram"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_arrow(data: Dict[str, Any]) -> None:
    """
    Raises:
        jsonschema.ValidationError: Документ не соответствует finset_arrow
    """
    ArrowContractValidator().validate(data)


def validate_diagram(data: Dict[str, Any]) -> None:
    """
    Raises:
        jsonschema.ValidationError: Документ не соответствует finset_diagram
    """
    DiagramContractValidator().validate(data)
