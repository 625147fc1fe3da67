"""Unit tests for the post-edit diff report."""

from hashline_tools.diff_report import DiffReporter, render_diff
from hashline_tools.fingerprint import CHAINED_CONFIG, INDEPENDENT_CONFIG, Fingerprinter


class TestBuild:
    """Tests for DiffReporter.build."""

    def test_single_line_change(self):
        reporter = DiffReporter(Fingerprinter(CHAINED_CONFIG))
        report = reporter.build(["a", "b", "c"], ["a", "B", "c"])

        assert report.first_changed_line == 2
        assert [row.kind for row in report.rows] == ["context", "delete", "insert", "context"]
        inserted = report.rows[2]
        assert inserted.new_line == 2
        assert inserted.fingerprint == Fingerprinter(CHAINED_CONFIG).fingerprint_lines(
            ["a", "B", "c"]
        )[1]

    def test_no_change(self):
        report = DiffReporter(Fingerprinter()).build(["a"], ["a"])
        assert not report.changed
        assert report.rows == []
        assert render_diff(report) == "No changes made"

    def test_window_and_gaps(self):
        old = [f"line {n}" for n in range(1, 21)]
        new = list(old)
        new[9] = "changed"
        report = DiffReporter(Fingerprinter(), context=2).build(old, new)

        kinds = [row.kind for row in report.rows]
        assert kinds == [
            "gap",
            "context",
            "context",
            "delete",
            "insert",
            "context",
            "context",
            "gap",
        ]
        assert report.rows[1].new_line == 8

    def test_nearby_windows_merge(self):
        old = [f"line {n}" for n in range(1, 11)]
        new = list(old)
        new[2] = "x"
        new[5] = "y"
        report = DiffReporter(Fingerprinter(), context=2).build(old, new)
        assert "gap" not in [row.kind for row in report.rows[:-1]]

    def test_insertion_only(self):
        report = DiffReporter(Fingerprinter()).build(["a", "b"], ["a", "x", "b"])
        assert report.first_changed_line == 2
        assert [row.kind for row in report.rows] == ["context", "insert", "context"]


class TestRender:
    """Tests for render_diff."""

    def test_row_formats(self):
        fingerprinter = Fingerprinter(CHAINED_CONFIG)
        new = ["a", "B", "c"]
        fps = fingerprinter.fingerprint_lines(new)
        text = render_diff(DiffReporter(fingerprinter).build(["a", "b", "c"], new))

        lines = text.split("\n")
        assert lines[0] == f"  1#{fps[0]}:a"
        assert lines[1] == "- 2#    :b"
        assert lines[2] == f"+ 2#{fps[1]}:B"
        assert lines[3] == f"  3#{fps[2]}:c"
        assert "from line 2 onward" in text
        assert "Re-read the file" in text

    def test_legacy_separators(self):
        fingerprinter = Fingerprinter(INDEPENDENT_CONFIG)
        fp = fingerprinter.fingerprint(1, "new")
        text = render_diff(DiffReporter(fingerprinter).build(["old"], ["new"]))
        assert f"+ 1:{fp}|new" in text
        assert "- 1:    |old" in text

    def test_gap_marker(self):
        old = [f"line {n}" for n in range(1, 30)]
        new = list(old)
        new[20] = "changed"
        text = render_diff(DiffReporter(Fingerprinter(), context=1).build(old, new))
        assert text.split("\n")[0] == "..."
