# SPDX-License-Identifier: MIT
"""Tests for crecipe.util.source_location."""

from crecipe.util.source_location import SourceLocation, get_caller_location


class TestSourceLocation:
    def test_str(self):
        assert str(SourceLocation("build.py", 12)) == "build.py:12"

    def test_caller_outside_package(self):
        location = get_caller_location()
        assert location.filename == __file__
        assert location.lineno > 0

    def test_immediate_caller(self):
        location = get_caller_location(skip_package=False)
        assert location.filename == __file__
