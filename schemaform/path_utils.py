"""
Path helpers for dot-separated field paths.

A path addresses a position in the form document: "user.name",
"tags.0", "company.departments.1.employees.0.name". Numeric segments are
array indices. The root container lives at the empty path "".
"""

from typing import Any, Dict, List

PATH_SEPARATOR = '.'
ROOT_PATH = ''


class PathResolver:
    """Parsing and inspection of field paths."""

    @staticmethod
    def parse_path(path: str) -> List[str]:
        if not path:
            return []
        return path.split(PATH_SEPARATOR)

    @staticmethod
    def get_parent_path(path: str) -> str:
        """
        Get the parent of a path.

        Top-level paths ("name") and the root itself have the root ("") as parent.
        """
        last_dot = path.rfind(PATH_SEPARATOR)
        if last_dot <= 0:
            return ROOT_PATH
        return path[:last_dot]

    @staticmethod
    def get_property_name(path: str) -> str:
        """Return the last segment of a path."""
        return path.rsplit(PATH_SEPARATOR, 1)[-1]

    @staticmethod
    def is_array_index(segment: str) -> bool:
        return bool(segment) and segment.isdigit()

    @staticmethod
    def get_array_index(segment: str) -> int:
        """Return the segment as an index, or -1 if it is not numeric."""
        if PathResolver.is_array_index(segment):
            return int(segment)
        return -1

    @staticmethod
    def build_path(segments: List[Any]) -> str:
        return PATH_SEPARATOR.join(str(segment) for segment in segments if segment != '')

    @staticmethod
    def is_nested_path(path: str) -> bool:
        return PATH_SEPARATOR in path

    @staticmethod
    def get_path_depth(path: str) -> int:
        return len(PathResolver.parse_path(path))

    @staticmethod
    def is_child_path(parent_path: str, child_path: str) -> bool:
        """
        Check whether child_path lies strictly below parent_path.

        Every non-root path is a child of the root.
        """
        if not parent_path:
            return child_path != ROOT_PATH
        return child_path.startswith(parent_path + PATH_SEPARATOR)

    @staticmethod
    def get_relative_path(parent_path: str, child_path: str) -> str:
        """
        Strip parent_path from child_path.

        Returns child_path unchanged when it is not below parent_path.
        """
        if not parent_path:
            return child_path
        if not PathResolver.is_child_path(parent_path, child_path):
            return child_path
        return child_path[len(parent_path) + 1:]

    @staticmethod
    def get_ancestor_paths(path: str) -> List[str]:
        """
        List ancestors of a path, nearest first, ending with the root.

        The root itself has no ancestors.
        """
        ancestors: List[str] = []
        current = path
        while current != ROOT_PATH:
            current = PathResolver.get_parent_path(current)
            ancestors.append(current)
        return ancestors


class PathBuilder:
    """Construction of child paths and path listings."""

    @staticmethod
    def build_child_path(parent_path: str, key: Any) -> str:
        if not parent_path:
            return str(key)
        return f"{parent_path}{PATH_SEPARATOR}{key}"

    @staticmethod
    def build_array_item_path(array_path: str, index: int) -> str:
        return PathBuilder.build_child_path(array_path, index)

    @staticmethod
    def build_property_path(object_path: str, property_name: str) -> str:
        return PathBuilder.build_child_path(object_path, property_name)

    @staticmethod
    def build_nested_path(base_path: str, *segments: Any) -> str:
        path = base_path
        for segment in segments:
            path = PathBuilder.build_child_path(path, segment)
        return path

    @staticmethod
    def generate_paths_for_object(base_path: str, properties: Dict[str, Any]) -> List[str]:
        return [PathBuilder.build_property_path(base_path, name) for name in properties]

    @staticmethod
    def generate_paths_for_array(base_path: str, length: int) -> List[str]:
        return [PathBuilder.build_array_item_path(base_path, i) for i in range(length)]
