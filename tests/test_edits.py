"""Unit tests for edit batch decoding."""

import json

import pytest

from hashline_tools.anchors import AnchorRef
from hashline_tools.edits import (
    AppendEdit,
    FuzzyReplaceEdit,
    PrependEdit,
    ReplaceEdit,
    parse_edit,
    parse_edit_batch,
)
from hashline_tools.errors import EditParseError
from hashline_tools.render import render_error


class TestLegacyOps:
    """Tests for the set_line / replace_lines / insert_* ops."""

    def test_set_line(self):
        edit = parse_edit({"op": "set_line", "anchor": "2#ZPMQ", "new_text": "x = 1"}, 0)
        assert edit == ReplaceEdit(pos=AnchorRef(2, "ZPMQ"), end=None, lines=("x = 1",))

    def test_replace_lines(self):
        edit = parse_edit(
            {
                "op": "replace_lines",
                "start_anchor": "2#ZPMQ",
                "end_anchor": "4#VRWS",
                "new_text": "a\nb",
            },
            0,
        )
        assert edit == ReplaceEdit(
            pos=AnchorRef(2, "ZPMQ"), end=AnchorRef(4, "VRWS"), lines=("a", "b")
        )

    def test_insert_after_and_before(self):
        after = parse_edit({"op": "insert_after", "anchor": "1#ZZZZ", "text": "x"}, 0)
        before = parse_edit({"op": "insert_before", "anchor": "1#ZZZZ", "text": "x"}, 0)
        assert after == AppendEdit(pos=AnchorRef(1, "ZZZZ"), lines=("x",))
        assert before == PrependEdit(pos=AnchorRef(1, "ZZZZ"), lines=("x",))

    def test_content_alias(self):
        edit = parse_edit({"op": "insert_after", "anchor": "1#ZZZZ", "content": "x\ny"}, 0)
        assert edit.lines == ("x", "y")

    def test_empty_new_text_means_no_lines(self):
        edit = parse_edit({"op": "set_line", "anchor": "2#ZPMQ", "new_text": ""}, 0)
        assert edit.lines == ()

    def test_legacy_anchor_form(self):
        edit = parse_edit({"op": "set_line", "anchor": "2:a1b2", "new_text": "x"}, 0)
        assert edit.pos == AnchorRef(2, "a1b2")


class TestGeneralOps:
    """Tests for the replace / append / prepend ops."""

    def test_replace_by_anchor(self):
        edit = parse_edit({"type": "replace", "pos": "3#ZPMQ", "lines": ["a", "b"]}, 0)
        assert edit == ReplaceEdit(pos=AnchorRef(3, "ZPMQ"), end=None, lines=("a", "b"))

    def test_replace_by_content(self):
        edit = parse_edit({"op": "replace", "old_text": "foo", "new_text": "bar"}, 0)
        assert edit == FuzzyReplaceEdit(old_text="foo", new_text="bar", all=False)

    def test_replace_all(self):
        edit = parse_edit({"op": "replace", "old_text": "a", "new_text": "b", "all": True}, 0)
        assert edit.all is True

    def test_append_without_pos_targets_end_of_file(self):
        edit = parse_edit({"op": "append", "lines": ["x"]}, 0)
        assert edit == AppendEdit(pos=None, lines=("x",))

    def test_prepend_without_pos_targets_start_of_file(self):
        edit = parse_edit({"op": "prepend", "lines": "x"}, 0)
        assert edit == PrependEdit(pos=None, lines=("x",))

    def test_list_items_with_newlines_are_split(self):
        edit = parse_edit({"op": "append", "lines": ["a\nb", ""]}, 0)
        assert edit.lines == ("a", "b", "")


class TestWireShapes:
    """Tests for flat vs wrapped operations."""

    def test_wrapped_operation(self):
        edit = parse_edit({"set_line": {"anchor": "2#ZPMQ", "new_text": "x"}}, 0)
        assert edit == ReplaceEdit(pos=AnchorRef(2, "ZPMQ"), end=None, lines=("x",))

    def test_batch_from_json_text(self):
        batch = json.dumps(
            [
                {"op": "append", "lines": ["x"]},
                {"prepend": {"lines": ["y"]}},
            ]
        )
        assert parse_edit_batch(batch) == [
            AppendEdit(pos=None, lines=("x",)),
            PrependEdit(pos=None, lines=("y",)),
        ]

    def test_batch_from_list(self):
        assert parse_edit_batch([]) == []


class TestParseErrors:
    """Tests for malformed batches."""

    def test_invalid_json(self):
        with pytest.raises(EditParseError, match="Invalid JSON in edits"):
            parse_edit_batch("[{")

    def test_not_an_array(self):
        with pytest.raises(EditParseError, match="must be a JSON array"):
            parse_edit_batch('{"op": "append"}')

    def test_operation_not_an_object(self):
        with pytest.raises(EditParseError, match="must be an object"):
            parse_edit_batch(["set_line"])

    def test_unknown_op(self):
        with pytest.raises(EditParseError, match="unknown op 'delete'") as exc_info:
            parse_edit_batch([{"op": "delete"}])
        assert render_error(exc_info.value).startswith("Edit #1: ")

    def test_missing_field_names_the_edit(self):
        batch = [
            {"op": "append", "lines": ["x"]},
            {"op": "set_line", "anchor": "2#ZPMQ"},
        ]
        with pytest.raises(EditParseError) as exc_info:
            parse_edit_batch(batch)
        assert exc_info.value.edit_index == 1
        assert render_error(exc_info.value).startswith("Edit #2 (set_line): missing")

    def test_bad_anchor_is_fatal(self):
        with pytest.raises(EditParseError, match="invalid anchor") as exc_info:
            parse_edit_batch([{"op": "set_line", "anchor": "two", "new_text": "x"}])
        assert exc_info.value.op == "set_line"

    @pytest.mark.parametrize(
        "edit",
        [
            {"op": "append", "pos": "", "lines": ["x"]},
            {"op": "prepend", "pos": "", "lines": ["x"]},
            {"op": "replace", "pos": "1#ZPMQ", "end": "", "lines": ["x"]},
        ],
    )
    def test_empty_optional_anchor(self, edit):
        """An empty anchor string is malformed, not the same as omitting it."""
        with pytest.raises(EditParseError, match="invalid anchor ''"):
            parse_edit_batch([edit])

    def test_empty_old_text(self):
        with pytest.raises(EditParseError, match="must not be empty"):
            parse_edit_batch([{"op": "replace", "old_text": "", "new_text": "x"}])

    def test_non_boolean_all(self):
        with pytest.raises(EditParseError, match="'all' must be a boolean"):
            parse_edit_batch([{"op": "replace", "old_text": "a", "new_text": "b", "all": "yes"}])

    def test_wrong_content_type(self):
        with pytest.raises(EditParseError, match="must be a string or a list of strings"):
            parse_edit_batch([{"op": "append", "lines": 5}])

    def test_no_discriminator(self):
        with pytest.raises(EditParseError, match="can't determine operation"):
            parse_edit_batch([{"anchor": "1#ZZZZ", "new_text": "x"}])
