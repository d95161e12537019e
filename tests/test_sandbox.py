"""Tests for path containment."""

import os

import pytest

from nodegraph.errors import PathEscapeError
from nodegraph.sandbox import contain_in, is_path_inside, relative_posix


class TestContainIn:
    def test_relative_path_resolves_under_base(self, tmp_path):
        assert contain_in(tmp_path, "a/b.json") == tmp_path / "a" / "b.json"

    def test_base_itself_is_allowed(self, tmp_path):
        assert contain_in(tmp_path, ".") == tmp_path
        assert contain_in(tmp_path, "") == tmp_path

    def test_inner_dotdot_that_stays_inside_is_normalized(self, tmp_path):
        assert contain_in(tmp_path, "a/../b.json") == tmp_path / "b.json"

    @pytest.mark.parametrize("candidate", ["..", "../x.json", "a/../../x.json", "../../etc/passwd"])
    def test_escaping_dotdot_raises(self, tmp_path, candidate):
        with pytest.raises(PathEscapeError) as info:
            contain_in(tmp_path / "root", candidate)
        assert info.value.path == candidate
        assert candidate in str(info.value)

    def test_absolute_path_outside_base_raises(self, tmp_path):
        with pytest.raises(PathEscapeError):
            contain_in(tmp_path / "root", str(tmp_path / "elsewhere.json"))

    def test_sibling_with_common_prefix_is_rejected(self, tmp_path):
        """/x/root-evil must not pass as being inside /x/root."""
        with pytest.raises(PathEscapeError):
            contain_in(tmp_path / "root", "../root-evil/x.json")

    def test_escape_touches_nothing(self, tmp_path):
        base = tmp_path / "root"
        with pytest.raises(PathEscapeError):
            contain_in(base, "../created")
        assert not base.exists()
        assert not (tmp_path / "created").exists()

    def test_escape_is_a_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            contain_in(tmp_path, "../x")


class TestHelpers:
    def test_is_path_inside(self, tmp_path):
        assert is_path_inside(tmp_path, tmp_path / "a")
        assert is_path_inside(tmp_path, tmp_path)
        assert not is_path_inside(tmp_path / "a", tmp_path)

    @pytest.mark.skipif(os.name != "nt", reason="case folding only on Windows")
    def test_case_insensitive_on_windows(self, tmp_path):
        assert is_path_inside(str(tmp_path).upper(), str(tmp_path / "a").lower())

    @pytest.mark.skipif(os.name == "nt", reason="POSIX paths are case-sensitive")
    def test_case_sensitive_on_posix(self, tmp_path):
        base = tmp_path / "Root"
        assert not is_path_inside(base, tmp_path / "root" / "a")

    def test_relative_posix_uses_forward_slashes(self, tmp_path):
        assert relative_posix(tmp_path, tmp_path / "a" / "b.json") == "a/b.json"
