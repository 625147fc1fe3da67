"""Unit tests for bottom-up edit application."""

import pytest

from hashline_tools.anchors import AnchorRef
from hashline_tools.applier import EditApplier, splice_position
from hashline_tools.edits import (
    AppendEdit,
    FuzzyReplaceEdit,
    IndexedEdit,
    PrependEdit,
    ReplaceEdit,
)
from hashline_tools.fuzzy import FuzzyMatch
from hashline_tools.validator import ValidatedBatch


def _at(line):
    return AnchorRef(line, "ZZZZ")


def _batch(*edits):
    anchored, fuzzy = [], []
    for index, edit in enumerate(edits):
        target = fuzzy if isinstance(edit, FuzzyReplaceEdit) else anchored
        target.append(IndexedEdit(index, edit))
    return ValidatedBatch(anchored=anchored, fuzzy=fuzzy)


@pytest.fixture
def applier():
    return EditApplier()


class TestAnchoredEdits:
    """Tests for splices, all in pre-edit coordinates."""

    def test_replace_single_line(self, applier):
        result = applier.apply(["a", "b", "c"], _batch(ReplaceEdit(_at(2), None, ("B",))))
        assert result == ["a", "B", "c"]

    def test_replace_range_with_fewer_lines(self, applier):
        lines = ["1", "2", "3", "4", "5"]
        result = applier.apply(lines, _batch(ReplaceEdit(_at(2), _at(4), ("x",))))
        assert result == ["1", "x", "5"]

    def test_empty_content_deletes(self, applier):
        result = applier.apply(["a", "b", "c"], _batch(ReplaceEdit(_at(2), None, ())))
        assert result == ["a", "c"]

    def test_input_is_not_mutated(self, applier):
        lines = ["a", "b"]
        applier.apply(lines, _batch(ReplaceEdit(_at(1), None, ("A",))))
        assert lines == ["a", "b"]

    def test_anchors_refer_to_original_lines(self, applier):
        """An insertion near the top doesn't shift later anchors."""
        result = applier.apply(
            ["a", "b", "c", "d"],
            _batch(
                PrependEdit(_at(1), ("top1", "top2")),
                ReplaceEdit(_at(3), None, ("C",)),
                AppendEdit(_at(4), ("end",)),
            ),
        )
        assert result == ["top1", "top2", "a", "b", "C", "d", "end"]

    def test_insert_after_and_replace_same_line(self, applier):
        result = applier.apply(
            ["a", "b", "c"],
            _batch(ReplaceEdit(_at(2), None, ("B",)), AppendEdit(_at(2), ("x",))),
        )
        assert result == ["a", "B", "x", "c"]

    def test_file_boundaries(self, applier):
        result = applier.apply(
            ["a", "b"],
            _batch(AppendEdit(None, ("z",)), PrependEdit(None, ("0",))),
        )
        assert result == ["0", "a", "b", "z"]

    def test_append_to_empty_file(self, applier):
        assert applier.apply([], _batch(AppendEdit(None, ("x", "y")))) == ["x", "y"]

    def test_splice_order(self):
        edits = {
            "replace": IndexedEdit(0, ReplaceEdit(_at(2), _at(3), ())),
            "append": IndexedEdit(1, AppendEdit(_at(3), ("x",))),
            "prepend": IndexedEdit(2, PrependEdit(_at(3), ("x",))),
            "eof": IndexedEdit(3, AppendEdit(None, ("x",))),
            "bof": IndexedEdit(4, PrependEdit(None, ("x",))),
        }
        keys = {name: splice_position(item, 5) for name, item in edits.items()}
        assert keys["eof"] > keys["append"] > keys["replace"] > keys["prepend"] > keys["bof"]


class TestContentEdits:
    """Tests for the second, content-anchored pass."""

    def test_runs_after_anchored_edits(self, applier):
        result = applier.apply(
            ["foo", "bar"],
            _batch(ReplaceEdit(_at(1), None, ("FOO",)), FuzzyReplaceEdit("bar", "baz")),
        )
        assert result == ["FOO", "baz"]

    def test_multiline_replacement(self, applier):
        result = applier.apply(["a", "b", "c"], _batch(FuzzyReplaceEdit("b", "b1\nb2")))
        assert result == ["a", "b1", "b2", "c"]

    def test_replace_all_per_line(self, applier):
        result = applier.apply(["x = 1", "y = x"], _batch(FuzzyReplaceEdit("x", "z", all=True)))
        assert result == ["z = 1", "y = z"]

    def test_replace_all_multiline_target(self, applier):
        lines = ["a", "b", "a", "b"]
        result = applier.apply(lines, _batch(FuzzyReplaceEdit("a\nb", "c", all=True)))
        assert result == ["c", "c"]

    def test_replace_all_without_occurrences(self, applier):
        """Replacing every occurrence of something absent changes nothing."""
        result = applier.apply(["a", "b"], _batch(FuzzyReplaceEdit("zzz", "y", all=True)))
        assert result == ["a", "b"]

    def test_replace_all_multiline_without_occurrences(self, applier):
        result = applier.apply(["a", "b"], _batch(FuzzyReplaceEdit("b\na", "y", all=True)))
        assert result == ["a", "b"]

    def test_custom_matcher(self):
        calls = []

        def matcher(content, target):
            calls.append(target)
            return FuzzyMatch(start=0, end=1, text=content[0], strategy="test", line=1)

        result = EditApplier(matcher).apply(["abc"], _batch(FuzzyReplaceEdit("q", "Z")))
        assert result == ["Zbc"]
        assert calls == ["q"]
