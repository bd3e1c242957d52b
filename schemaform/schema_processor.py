"""
Schema pre-processing.

Handles the shorthand property-map form, flattens oneOf/anyOf/allOf object
variants into their parent's properties and lists the leaf paths a schema
declares.
"""

import logging
from copy import deepcopy
from typing import Any, Dict, List

from .path_utils import PathBuilder
from .schema_analyzer import COMBINATOR_KEYS

logger = logging.getLogger(__name__)


def is_full_schema(schema: Any) -> bool:
    """A full schema node carries a string 'type'; anything else is a property map."""
    return isinstance(schema, dict) and isinstance(schema.get('type'), str)


def normalize_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a shorthand property map as an object schema."""
    if is_full_schema(schema):
        return schema
    return {'type': 'object', 'properties': schema}


def _object_variants(schema: Dict[str, Any], keys=COMBINATOR_KEYS) -> List[Dict[str, Any]]:
    variants = []
    for key in keys:
        options = schema.get(key)
        if isinstance(options, dict):
            options = [options]
        if not isinstance(options, list):
            continue
        for variant in options:
            if isinstance(variant, dict) and variant.get('type', 'object') == 'object':
                variants.append(variant)
    return variants


def flatten_combinators(schema: Any) -> Any:
    """
    Return a copy of schema with combinator variant properties merged into each object node.

    Declared properties win over variant properties with the same name; the
    first variant declaring a name wins over later ones. Names required by
    allOf variants are added to the parent's required list. The combinator
    keys themselves are kept.

    Args:
        schema: Schema node (not modified)

    Returns:
        Normalized schema node
    """
    if not isinstance(schema, dict):
        return schema

    result = dict(schema)

    if result.get('type') == 'object':
        properties = dict(result.get('properties') or {})
        required = list(result['required']) if isinstance(result.get('required'), list) else None

        for key in COMBINATOR_KEYS:
            for variant in _object_variants(result, (key,)):
                flat_variant = flatten_combinators(variant)
                for name, prop_schema in (flat_variant.get('properties') or {}).items():
                    if name not in properties:
                        properties[name] = prop_schema
                if key == 'allOf' and isinstance(flat_variant.get('required'), list):
                    required = required or []
                    required.extend(n for n in flat_variant['required'] if n not in required)

        if properties or 'properties' in result or _object_variants(result):
            result['properties'] = {name: flatten_combinators(prop) for name, prop in properties.items()}
        if required is not None:
            result['required'] = required

    elif result.get('type') == 'array' and isinstance(result.get('items'), dict):
        result['items'] = flatten_combinators(result['items'])

    return result


def prepare_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize and flatten a schema for field creation."""
    prepared = flatten_combinators(normalize_schema(deepcopy(schema)))
    logger.debug(f"Prepared schema with {len(prepared.get('properties', {}))} top-level properties")
    return prepared


class SchemaPathExtractor:
    """Lists the leaf property paths declared by an object schema."""

    @staticmethod
    def is_object_schema(schema: Any) -> bool:
        return (
            isinstance(schema, dict)
            and schema.get('type') == 'object'
            and any(schema.get(key) for key in ('properties',) + COMBINATOR_KEYS)
        )

    @staticmethod
    def get_paths(schema: Dict[str, Any], base_path: str = '') -> List[str]:
        """
        Collect leaf paths, descending into nested objects and combinator variants.

        Returns:
            Paths in discovery order without duplicates
        """
        paths: List[str] = []
        if not isinstance(schema, dict) or schema.get('type') != 'object':
            return paths

        SchemaPathExtractor._collect_properties(schema.get('properties'), base_path, paths)

        for variant in _object_variants(schema):
            variant = dict(variant, type='object')
            if not SchemaPathExtractor.is_object_schema(variant):
                continue
            paths.extend(SchemaPathExtractor.get_paths(variant, base_path))

        return list(dict.fromkeys(paths))

    @staticmethod
    def _collect_properties(properties: Any, base_path: str, paths: List[str]) -> None:
        if not isinstance(properties, dict):
            return
        for name, prop_schema in properties.items():
            current_path = PathBuilder.build_child_path(base_path, name)
            if SchemaPathExtractor.is_object_schema(prop_schema):
                paths.extend(SchemaPathExtractor.get_paths(prop_schema, current_path))
            else:
                paths.append(current_path)
