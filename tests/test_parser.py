import io
import os
import tempfile
import unittest

from vgsupp import SuppressionParser, parse
from vgsupp.errors import SuppressionParseError
from vgsupp.model import (
    FrameWildcard,
    FunFrame,
    MemcheckAddr,
    MemcheckLeak,
    MemcheckParam,
    ObjFrame,
    OtherKind,
    Suppression,
    Suppressions,
)
from vgsupp.parser import (
    AfterOpen,
    BeforeBlock,
    HaveFrames,
    HaveKind,
    HaveName,
    check_end_of_input,
    step,
)


SAMPLE = """\
# Suppressions for third-party libraries
{
   libc-leak
   Memcheck:Leak
   fun:malloc
   ...
   obj:/lib/x86_64-linux-gnu/libc-2.*.so
}

{
   write-param
   Memcheck:Param
   write(buf)
   fun:__write_nocancel
   fun:_IO_file_write*
}
"""


class TestParseValid(unittest.TestCase):
    """Well-formed input."""

    def test_parse_sample(self):
        suppressions = parse(SAMPLE.splitlines())
        records = list(suppressions)
        self.assertEqual(len(records), 2)

        leak = records[0]
        self.assertEqual(leak.name, "libc-leak")
        self.assertEqual(leak.kind, MemcheckLeak())
        self.assertIsNone(leak.extra_info)
        self.assertEqual(
            leak.frames,
            (FunFrame("malloc"), FrameWildcard(), ObjFrame("/lib/x86_64-linux-gnu/libc-2.*.so")),
        )

        param = records[1]
        self.assertEqual(param.kind, MemcheckParam())
        self.assertEqual(param.extra_info, ("write(buf)",))
        self.assertEqual(param.frames, (FunFrame("__write_nocancel"), FunFrame("_IO_file_write*")))

    def test_single_block_single_tool(self):
        text = "{\n  name\n  Memcheck:Addr4\n  obj:*libfoo.so\n}\n"
        records = list(parse(text.splitlines()))
        self.assertEqual(
            records,
            [Suppression("name", MemcheckAddr(4), None, (ObjFrame("*libfoo.so"),))],
        )

    def test_multiple_tools_expand_in_order(self):
        text = "{\n  shared\n  Memcheck,Helgrind:Race\n  extra\n  fun:f\n}\n"
        records = list(parse(text.splitlines()))
        self.assertEqual(len(records), 2)
        self.assertEqual(records[0].kind, OtherKind("Memcheck", "Race"))
        self.assertEqual(records[1].kind, OtherKind("Helgrind", "Race"))
        for record in records:
            self.assertEqual(record.name, "shared")
            self.assertEqual(record.extra_info, ("extra",))
            self.assertEqual(record.frames, (FunFrame("f"),))

    def test_multiple_tools_resolve_memcheck_only(self):
        text = "{\n  n\n  Helgrind,Memcheck:Leak\n  fun:f\n}\n"
        kinds = [s.kind for s in parse(text.splitlines())]
        self.assertEqual(kinds, [OtherKind("Helgrind", "Leak"), MemcheckLeak()])

    def test_empty_block_yields_nothing(self):
        suppressions = parse("{\n}\n".splitlines())
        self.assertEqual(len(suppressions), 0)
        self.assertEqual(list(suppressions), [])

    def test_empty_input(self):
        self.assertEqual(len(parse([])), 0)

    def test_comments_and_blank_lines_ignored(self):
        text = "\n# comment\n{\n\n   # inside\n   n\n   Memcheck:Cond\n   fun:f\n}\n\n"
        records = list(parse(text.splitlines()))
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].frames, (FunFrame("f"),))

    def test_block_without_frames_is_emitted(self):
        text = "{\n  n\n  Memcheck:Param\n  ioctl(generic)\n}\n"
        with self.assertLogs("vgsupp.parser", level="WARNING"):
            records = list(parse(text.splitlines()))
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].extra_info, ("ioctl(generic)",))
        self.assertEqual(records[0].frames, ())

    def test_first_frame_fun_builds_function_matcher(self):
        text = "{\n  n\n  Memcheck:Leak\n  fun:calloc\n  obj:*\n}\n"
        record = list(parse(text.splitlines()))[0]
        self.assertEqual(record.frames, (FunFrame("calloc"), ObjFrame("*")))

    def test_glob_leading_whitespace_trimmed(self):
        text = "{\n  n\n  Memcheck:Leak\n  obj:   /usr/lib/*\n  fun:\tmain\n}\n"
        record = list(parse(text.splitlines()))[0]
        self.assertEqual(record.frames, (ObjFrame("/usr/lib/*"), FunFrame("main")))

    def test_kind_text_after_first_colon(self):
        text = "{\n  n\n  Tool:Cat:egory\n  fun:f\n}\n"
        record = list(parse(text.splitlines()))[0]
        self.assertEqual(record.kind, OtherKind("Tool", "Cat:egory"))

    def test_lines_with_terminators(self):
        stream = io.StringIO("{\r\n  n\r\n  Memcheck:Free\r\n  fun:free\r\n}\r\n")
        records = list(parse(stream))
        self.assertEqual(records[0].name, "n")
        self.assertEqual(records[0].frames, (FunFrame("free"),))

    def test_duplicate_names_kept(self):
        block = "{\n  dup\n  Memcheck:Leak\n  fun:f\n}\n"
        self.assertEqual(len(parse((block * 2).splitlines())), 2)


class TestParseErrors(unittest.TestCase):
    """Malformed input is reported at the offending line."""

    def assertParseError(self, text, line_number, message):
        with self.assertRaises(SuppressionParseError) as ctx:
            parse(text.splitlines())
        self.assertEqual(ctx.exception.line_number, line_number)
        self.assertEqual(ctx.exception.message, message)
        return ctx.exception

    def test_missing_opening_brace(self):
        self.assertParseError("   foo\n", 1, "expecting an opening brace")

    def test_opening_brace_not_alone(self):
        self.assertParseError("\n{ name\n", 2, "expecting an opening brace on its own line")

    def test_name_with_closing_brace(self):
        self.assertParseError(
            "{\n  bad}name\n", 2, "the suppression name cannot contain a closing brace '}'"
        )

    def test_missing_kind_separator(self):
        self.assertParseError("{\n  n\n  MemcheckLeak\n", 3, "no suppression type was found")

    def test_invalid_calling_context_line(self):
        self.assertParseError(
            "{\n  n\n  Memcheck:Leak\n  fun:f\n  src:foo.c\n}\n", 5, "invalid calling context line"
        )

    def test_eof_after_opening_brace(self):
        self.assertParseError(
            "# c\n{\n", 2, "unexpectedly encountered EOF while parsing a suppression"
        )

    def test_eof_names_suppression(self):
        self.assertParseError(
            "{\nName\nMemcheck:Leak\n",
            1,
            "unexpectedly encountered EOF while parsing the suppression named 'Name'",
        )

    def test_eof_inside_frames_points_at_opening_brace(self):
        text = "{\n  a\n  Memcheck:Leak\n  fun:f\n}\n\n{\n  b\n  Memcheck:Cond\n  fun:g\n"
        self.assertParseError(
            text, 7, "unexpectedly encountered EOF while parsing the suppression named 'b'"
        )

    def test_error_after_valid_block_returns_nothing(self):
        text = "{\n  a\n  Memcheck:Leak\n  fun:f\n}\ngarbage\n"
        self.assertParseError(text, 6, "expecting an opening brace")

    def test_str_includes_line(self):
        exc = self.assertParseError("x\n", 1, "expecting an opening brace")
        self.assertEqual(str(exc), "line 1: expecting an opening brace")

    def test_read_failure(self):
        def lines():
            yield "{"
            yield "  n"
            raise OSError("disk on fire")

        with self.assertRaises(SuppressionParseError) as ctx:
            parse(lines())
        self.assertEqual(ctx.exception.line_number, 2)
        self.assertIn("disk on fire", ctx.exception.message)
        self.assertIsInstance(ctx.exception.__cause__, OSError)


class TestStateMachine(unittest.TestCase):
    """Transitions in isolation."""

    def test_open_brace_records_line(self):
        state, emitted = step(BeforeBlock(), "{", 7)
        self.assertEqual(state, AfterOpen(7))
        self.assertEqual(emitted, ())

    def test_kind_line_splits_tools(self):
        state, _ = step(HaveName(1, "n"), "A,B:Cat", 3)
        self.assertEqual(state, HaveKind(1, "n", ("A", "B"), "Cat"))

    def test_extra_info_accumulates(self):
        state, _ = step(HaveKind(1, "n", ("Memcheck",), "Param"), "one", 4)
        state, _ = step(state, "two", 5)
        self.assertEqual(state.extra_info, ("one", "two"))

    def test_closing_brace_emits(self):
        state = HaveFrames(1, "n", ("Memcheck",), "Leak", None, (FunFrame("f"),))
        new_state, emitted = step(state, "}", 5)
        self.assertEqual(new_state, BeforeBlock())
        self.assertEqual(emitted, (Suppression("n", MemcheckLeak(), None, (FunFrame("f"),)),))

    def test_end_of_input_in_before_block_is_fine(self):
        check_end_of_input(BeforeBlock())


class TestSuppressionParser(unittest.TestCase):
    def setUp(self):
        self.parser = SuppressionParser()

    def test_parse_text(self):
        self.assertEqual(len(self.parser.parse_text(SAMPLE)), 2)

    def test_parse_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "test.supp")
            with open(path, "w", encoding="utf-8") as fh:
                fh.write(SAMPLE)
            suppressions = self.parser.parse_file(path)
        self.assertIsInstance(suppressions, Suppressions)
        self.assertEqual([s.name for s in suppressions], ["libc-leak", "write-param"])

    def test_parse_file_error_carries_filename(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "bad.supp")
            with open(path, "w", encoding="utf-8") as fh:
                fh.write("{\n  n\n")
            with self.assertRaises(SuppressionParseError) as ctx:
                self.parser.parse_file(path)
        self.assertEqual(ctx.exception.filename, path)
        self.assertEqual(ctx.exception.line_number, 1)
        self.assertTrue(str(ctx.exception).startswith(f"{path}:1: "))

    def test_parse_file_decode_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "latin1.supp")
            with open(path, "wb") as fh:
                fh.write(b"{\n  name\n  Memcheck:Param\n  caf\xe9\n}\n")
            with self.assertRaises(SuppressionParseError) as ctx:
                self.parser.parse_file(path)
        # Reported after the three lines that decoded cleanly
        self.assertEqual(ctx.exception.line_number, 3)
        self.assertIn("I/O error", ctx.exception.message)
        self.assertEqual(ctx.exception.filename, path)
        self.assertIsInstance(ctx.exception.__cause__, UnicodeDecodeError)

    def test_parse_file_crlf(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "crlf.supp")
            with open(path, "wb") as fh:
                fh.write(b"{\r\n  n\r\n  Memcheck:Leak\r\n  fun:caf\xc3\xa9\r\n}\r\n")
            suppressions = self.parser.parse_file(path)
        self.assertEqual(list(suppressions)[0].frames, (FunFrame("café"),))


if __name__ == "__main__":
    unittest.main()
