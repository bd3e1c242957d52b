"""
Unit tests for path parsing and construction helpers.
"""

from schemaform.path_utils import PathBuilder, PathResolver, ROOT_PATH


class TestPathResolver:
    """Test cases for PathResolver."""

    def test_parse_path(self):
        """Test splitting paths into segments."""
        assert PathResolver.parse_path('a.b.c') == ['a', 'b', 'c']
        assert PathResolver.parse_path('single') == ['single']
        assert PathResolver.parse_path(ROOT_PATH) == []

    def test_get_parent_path(self):
        """Test parent lookup including top-level paths."""
        assert PathResolver.get_parent_path('parent.child') == 'parent'
        assert PathResolver.get_parent_path('a.0.b') == 'a.0'
        assert PathResolver.get_parent_path('top') == ROOT_PATH

    def test_get_property_name(self):
        """Test last segment extraction."""
        assert PathResolver.get_property_name('parent.child') == 'child'
        assert PathResolver.get_property_name('tags.3') == '3'
        assert PathResolver.get_property_name('top') == 'top'

    def test_array_index_segments(self):
        """Test numeric segment detection and conversion."""
        assert PathResolver.is_array_index('0') is True
        assert PathResolver.is_array_index('12') is True
        assert PathResolver.is_array_index('name') is False
        assert PathResolver.is_array_index('') is False
        assert PathResolver.is_array_index('-1') is False
        assert PathResolver.get_array_index('4') == 4
        assert PathResolver.get_array_index('x') == -1

    def test_build_path_skips_empty_segments(self):
        """Test joining segments."""
        assert PathResolver.build_path(['a', 0, 'b']) == 'a.0.b'
        assert PathResolver.build_path(['', 'a']) == 'a'

    def test_depth_and_nesting(self):
        """Test depth and nesting checks."""
        assert PathResolver.get_path_depth('a.b.c') == 3
        assert PathResolver.get_path_depth(ROOT_PATH) == 0
        assert PathResolver.is_nested_path('a.b') is True
        assert PathResolver.is_nested_path('a') is False

    def test_is_child_path(self):
        """Test strict descendant checks."""
        assert PathResolver.is_child_path('parent', 'parent.child') is True
        assert PathResolver.is_child_path('parent', 'parent.child.leaf') is True
        assert PathResolver.is_child_path('parent', 'other.child') is False
        assert PathResolver.is_child_path('parent', 'parent') is False
        assert PathResolver.is_child_path('tags.1', 'tags.10') is False

    def test_root_is_parent_of_everything(self):
        """Test that every non-root path lies below the root."""
        assert PathResolver.is_child_path(ROOT_PATH, 'a') is True
        assert PathResolver.is_child_path(ROOT_PATH, ROOT_PATH) is False

    def test_get_relative_path(self):
        """Test stripping a parent prefix."""
        assert PathResolver.get_relative_path('user', 'user.profile.bio') == 'profile.bio'
        assert PathResolver.get_relative_path('user', 'other.x') == 'other.x'
        assert PathResolver.get_relative_path(ROOT_PATH, 'a.b') == 'a.b'

    def test_get_ancestor_paths(self):
        """Test ancestors are listed nearest first and end with the root."""
        assert PathResolver.get_ancestor_paths('a.0.b') == ['a.0', 'a', ROOT_PATH]
        assert PathResolver.get_ancestor_paths('a') == [ROOT_PATH]
        assert PathResolver.get_ancestor_paths(ROOT_PATH) == []


class TestPathBuilder:
    """Test cases for PathBuilder."""

    def test_build_child_path(self):
        """Test combining a prefix and a key."""
        assert PathBuilder.build_child_path('parent', 'child') == 'parent.child'
        assert PathBuilder.build_child_path('', 'child') == 'child'

    def test_build_array_item_path(self):
        """Test index paths."""
        assert PathBuilder.build_array_item_path('tags', 2) == 'tags.2'
        assert PathBuilder.build_property_path('user', 'name') == 'user.name'

    def test_build_nested_path(self):
        """Test appending several segments."""
        assert PathBuilder.build_nested_path('company', 'departments', 0, 'name') == \
            'company.departments.0.name'
        assert PathBuilder.build_nested_path('', 'a', 'b') == 'a.b'

    def test_generate_paths(self):
        """Test listing child paths of objects and arrays."""
        properties = {'name': {'type': 'string'}, 'age': {'type': 'number'}}

        assert PathBuilder.generate_paths_for_object('user', properties) == ['user.name', 'user.age']
        assert PathBuilder.generate_paths_for_array('tags', 3) == ['tags.0', 'tags.1', 'tags.2']
        assert PathBuilder.generate_paths_for_array('tags', 0) == []
