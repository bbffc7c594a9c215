# SPDX-License-Identifier: MIT
"""Tests for crecipe.util.depfile."""

from crecipe.util.depfile import parse_prereqs


class TestParsePrereqs:
    def test_compiler_output(self):
        contents = (
            "src/hello.o: \\\n"
            "  src/hello.c \\\n"
            "  foo/include/foo.h \\\n"
            "  foo/include/foo_api.h\n"
        )
        assert parse_prereqs(contents) == [
            "src/hello.c",
            "foo/include/foo.h",
            "foo/include/foo_api.h",
        ]

    def test_single_line(self):
        assert parse_prereqs("foo: bar baz") == ["bar", "baz"]

    def test_continuation_mid_list(self):
        contents = "foo: bar baz\\\n  qux fizz \\\n  buzz"
        assert parse_prereqs(contents) == ["bar", "baz", "qux", "fizz", "buzz"]

    def test_crlf_continuation(self):
        assert parse_prereqs("foo: a \\\r\n  b\r\n") == ["a", "b"]

    def test_windows_drive_letters(self):
        contents = "C:/build/a.o: C:/src/a.c C:/src/a.h"
        assert parse_prereqs(contents) == ["C:/src/a.c", "C:/src/a.h"]

    def test_duplicates_preserved(self):
        assert parse_prereqs("a.o: a.h a.h") == ["a.h", "a.h"]

    def test_no_prerequisites(self):
        assert parse_prereqs("a.o:\n") == []
        assert parse_prereqs("") == []
