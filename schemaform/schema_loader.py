"""
Schema loader for the form model.
Handles loading and structural validation of YAML/JSON schema definitions.
"""

import json
import yaml
from pathlib import Path
from typing import Dict, Any, List, Set, Union
import logging

from .exceptions import SchemaLoadError
from .form_validator import FormValidator
from .schema_analyzer import COMBINATOR_KEYS
from .schema_processor import SchemaPathExtractor, is_full_schema, normalize_schema

logger = logging.getLogger(__name__)

# Supported field types
SUPPORTED_FIELD_TYPES = {
    'string', 'number', 'integer', 'boolean', 'array', 'object'
}


def load_schema(schema_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a schema from a YAML or JSON file.

    Args:
        schema_path: Path to the schema file

    Returns:
        Schema dictionary (full node or shorthand property map, as written)

    Raises:
        SchemaLoadError: If the file is missing, unparsable or structurally invalid
    """
    full_path = Path(schema_path)

    if not full_path.exists():
        logger.error(f"Schema file not found: {full_path}")
        raise SchemaLoadError(full_path, "file not found")

    suffix = full_path.suffix.lower()
    try:
        with open(full_path, 'r', encoding='utf-8') as f:
            if suffix in ['.yaml', '.yml']:
                schema = yaml.safe_load(f)
            elif suffix == '.json':
                schema = json.load(f)
            else:
                logger.error(f"Unsupported schema file format: {full_path.suffix}")
                raise SchemaLoadError(full_path, f"unsupported file format '{full_path.suffix}'")
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {full_path}: {e}")
        raise SchemaLoadError(full_path, f"YAML parsing error: {e}") from e
    except json.JSONDecodeError as e:
        logger.error(f"JSON parsing error in {full_path}: {e}")
        raise SchemaLoadError(full_path, f"JSON parsing error: {e}") from e
    except OSError as e:
        logger.error(f"Error reading schema {full_path}: {e}")
        raise SchemaLoadError(full_path, str(e)) from e

    if not validate_schema(schema):
        logger.error(f"Invalid schema structure in {full_path}")
        raise SchemaLoadError(full_path, "invalid schema structure")

    logger.info(f"Successfully loaded schema: {full_path}")
    return schema


def validate_schema(schema: Any) -> bool:
    """
    Validate schema structure and field definitions.

    Accepts a full object schema or a shorthand map of property schemas.

    Args:
        schema: Schema to validate

    Returns:
        True if schema is valid, False otherwise
    """
    if not isinstance(schema, dict):
        logger.error("Schema must be a dictionary")
        return False

    if is_full_schema(schema):
        if schema['type'] != 'object':
            logger.error("Top-level schema must be an object")
            return False
        return validate_field_config('<root>', schema)

    for field_name, field_config in schema.items():
        if not validate_field_config(field_name, field_config):
            return False

    return True


def validate_field_config(field_name: str, field_config: Any) -> bool:
    """
    Validate individual field configuration.

    Args:
        field_name: Name of the field
        field_config: Field configuration dictionary

    Returns:
        True if field config is valid, False otherwise
    """
    if not isinstance(field_config, dict):
        logger.error(f"Field '{field_name}' config must be a dictionary")
        return False

    # Check required 'type' field
    if 'type' not in field_config:
        logger.error(f"Field '{field_name}' must have a 'type'")
        return False

    field_type = field_config['type']
    if field_type not in SUPPORTED_FIELD_TYPES:
        logger.error(f"Field '{field_name}' has unsupported type '{field_type}'. "
                     f"Supported types: {SUPPORTED_FIELD_TYPES}")
        return False

    if field_type == 'array':
        if 'items' not in field_config:
            logger.error(f"Array field '{field_name}' must have 'items' definition")
            return False

        if not validate_field_config(f"{field_name}[items]", field_config['items']):
            return False

    if field_type == 'object':
        has_variants = any(key in field_config for key in COMBINATOR_KEYS)
        if 'properties' not in field_config and not has_variants:
            logger.error(f"Object field '{field_name}' must have 'properties'")
            return False

        properties = field_config.get('properties', {})
        if not isinstance(properties, dict):
            logger.error(f"Object field '{field_name}' properties must be a dictionary")
            return False

        for prop_name, prop_config in properties.items():
            if not validate_field_config(f"{field_name}.{prop_name}", prop_config):
                return False

        for key in COMBINATOR_KEYS:
            variants = field_config.get(key)
            if variants is None:
                continue
            if not isinstance(variants, list):
                logger.error(f"Object field '{field_name}' {key} must be a list")
                return False
            for index, variant in enumerate(variants):
                # untyped variants are object variants
                if isinstance(variant, dict) and 'type' not in variant:
                    variant = dict(variant, type='object')
                if not validate_field_config(f"{field_name}.{key}[{index}]", variant):
                    return False

        required = field_config.get('required')
        if required is not None and not isinstance(required, (bool, list)):
            logger.error(f"Object field '{field_name}' required must be a boolean or a list of names")
            return False

    # Validate numeric constraints
    if field_type in ['number', 'integer']:
        for constraint in ['minimum', 'maximum']:
            if constraint in field_config:
                value = field_config[constraint]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    logger.error(f"Field '{field_name}' {constraint} must be a number")
                    return False

    # Validate string constraints
    if field_type == 'string':
        for constraint in ['minLength', 'maxLength']:
            if constraint in field_config:
                value = field_config[constraint]
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    logger.error(f"Field '{field_name}' {constraint} must be a non-negative integer")
                    return False

    return True


def validate_data_against_schema(data: Dict[str, Any], schema: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Validate a plain document against a schema.

    Args:
        data: Data to validate
        schema: Full or shorthand schema

    Returns:
        Validation errors keyed by path (empty if valid)
    """
    root = normalize_schema(schema)
    required_names = root.get('required') if isinstance(root.get('required'), list) else None
    return FormValidator().validate_form(data, root.get('properties', {}), required_names)


def extract_field_names(schema: Dict[str, Any]) -> Set[str]:
    """
    Extract the leaf field paths declared by a schema as a set.

    Args:
        schema: Full or shorthand schema

    Returns:
        Set of dot-separated field paths
    """
    if not isinstance(schema, dict):
        return set()
    return set(SchemaPathExtractor.get_paths(normalize_schema(schema)))
