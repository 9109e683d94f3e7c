"""Tests for strict notebook validation."""

import json

import nbformat
import pytest

from pyy2ipynb import NotebookParseError, StructuralViolation
from pyy2ipynb.validation.strict import StrictValidator


def valid_notebook():
    return {
        "nbformat": 4,
        "nbformat_minor": 5,
        "metadata": {},
        "cells": [
            {"id": "m", "cell_type": "markdown", "metadata": {}, "source": ["# Title"]},
            {
                "id": "c",
                "cell_type": "code",
                "metadata": {},
                "source": ["print(1)"],
                "outputs": [
                    {"output_type": "stream", "name": "stdout", "text": ["1\n"]},
                    {"output_type": "execute_result", "data": {"text/plain": ["1"]}, "metadata": {}, "execution_count": 1},
                    {"output_type": "display_data", "data": {}, "metadata": {}, "transient": {}},
                    {"output_type": "error", "ename": "E", "evalue": "v", "traceback": []},
                ],
                "execution_count": 1,
            },
            {"id": "r", "cell_type": "raw", "metadata": {}, "source": []},
        ],
    }


def violation(notebook) -> StructuralViolation:
    with pytest.raises(StructuralViolation) as excinfo:
        StrictValidator().validate(notebook, source="nb.ipynb")
    return excinfo.value


class TestRoot:
    """Root-level checks."""

    def test_valid_notebook_passes(self):
        assert StrictValidator().validate(valid_notebook(), source="nb.ipynb") is None

    def test_extra_root_key(self):
        nb = valid_notebook()
        nb["foo"] = 1

        error = violation(nb)

        assert error.location == "root"
        assert "'foo'" in error.message
        assert str(error) == "nb.ipynb: root: unexpected field 'foo'"

    def test_root_not_object(self):
        assert violation([]).location == "root"

    def test_nbformat_must_be_4(self):
        nb = valid_notebook()
        nb["nbformat"] = 3
        assert violation(nb).location == "nbformat"

    def test_nbformat_minor_must_be_number(self):
        nb = valid_notebook()
        nb["nbformat_minor"] = "5"
        assert violation(nb).location == "nbformat_minor"

    def test_booleans_are_not_numbers(self):
        nb = valid_notebook()
        nb["nbformat_minor"] = True
        assert violation(nb).location == "nbformat_minor"

    def test_metadata_must_be_object(self):
        nb = valid_notebook()
        nb["metadata"] = None
        assert violation(nb).location == "metadata"

    def test_cells_must_be_array(self):
        nb = valid_notebook()
        del nb["cells"]
        assert violation(nb).location == "cells"

    def test_first_violation_wins(self):
        nb = valid_notebook()
        nb["foo"] = 1
        nb["nbformat"] = 3
        nb["cells"][0]["source"] = "bad"

        assert violation(nb).location == "root"


class TestCells:
    """Cell-level checks."""

    def test_cell_must_be_object(self):
        nb = valid_notebook()
        nb["cells"][1] = "cell"
        assert violation(nb).location == "cells[1]"

    def test_missing_id(self):
        nb = valid_notebook()
        del nb["cells"][0]["id"]
        assert violation(nb).location == "cells[0].id"

    def test_source_must_be_string_list(self):
        nb = valid_notebook()
        nb["cells"][0]["source"] = "# Title"
        assert violation(nb).location == "cells[0].source"

    def test_source_items_must_be_strings(self):
        nb = valid_notebook()
        nb["cells"][0]["source"] = ["ok", 3]
        assert violation(nb).location == "cells[0].source[1]"

    def test_unknown_cell_type(self):
        nb = valid_notebook()
        nb["cells"][0]["cell_type"] = "heading"

        error = violation(nb)

        assert error.location == "cells[0].cell_type"
        assert "heading" in error.message

    def test_raw_cell_with_execution_count(self):
        nb = valid_notebook()
        nb["cells"][2]["execution_count"] = 1

        error = violation(nb)

        assert error.location.startswith("cells[2]")
        assert "execution_count" in error.message

    def test_markdown_cell_with_outputs(self):
        nb = valid_notebook()
        nb["cells"][0]["outputs"] = []
        assert "outputs" in violation(nb).message

    def test_markdown_attachments_allowed(self):
        nb = valid_notebook()
        nb["cells"][0]["attachments"] = {}
        StrictValidator().validate(nb)

    def test_markdown_attachments_must_be_object(self):
        nb = valid_notebook()
        nb["cells"][0]["attachments"] = []
        assert violation(nb).location == "cells[0].attachments"

    def test_code_cell_null_execution_count(self):
        nb = valid_notebook()
        nb["cells"][1]["execution_count"] = None

        error = violation(nb)

        assert error.location == "cells[1].execution_count"
        assert "not null" in error.message

    def test_code_cell_requires_outputs(self):
        nb = valid_notebook()
        del nb["cells"][1]["outputs"]
        assert violation(nb).location == "cells[1].outputs"

    def test_later_cells_checked_after_earlier(self):
        nb = valid_notebook()
        nb["cells"][1]["execution_count"] = None
        nb["cells"][2]["foo"] = 1
        assert violation(nb).location == "cells[1].execution_count"


class TestOutputs:
    """Output-level checks."""

    def set_output(self, output):
        nb = valid_notebook()
        nb["cells"][1]["outputs"] = [output]
        return nb

    def test_unknown_output_type(self):
        error = violation(self.set_output({"output_type": "update_display_data", "data": {}}))
        assert error.location == "cells[1].outputs[0].output_type"

    def test_missing_output_type(self):
        assert violation(self.set_output({"data": {}})).location == "cells[1].outputs[0].output_type"

    def test_stream_extra_key(self):
        error = violation(self.set_output({"output_type": "stream", "name": "stdout", "text": [], "foo": 1}))
        assert "'foo'" in error.message

    def test_stream_metadata_allowed(self):
        StrictValidator().validate(
            self.set_output({"output_type": "stream", "name": "stdout", "text": [], "metadata": {}})
        )

    def test_result_metadata_null_allowed(self):
        StrictValidator().validate(
            self.set_output(
                {"output_type": "execute_result", "data": {}, "metadata": None, "execution_count": 1}
            )
        )

    def test_result_metadata_must_be_object(self):
        error = violation(
            self.set_output(
                {"output_type": "execute_result", "data": {}, "metadata": [], "execution_count": 1}
            )
        )
        assert error.location == "cells[1].outputs[0].metadata"

    def test_stream_text_must_be_lines(self):
        error = violation(self.set_output({"output_type": "stream", "name": "stdout", "text": "x"}))
        assert error.location == "cells[1].outputs[0].text"

    def test_error_requires_traceback(self):
        error = violation(self.set_output({"output_type": "error", "ename": "E", "evalue": "v"}))
        assert error.location == "cells[1].outputs[0].traceback"

    def test_display_data_rejects_execution_count(self):
        error = violation(
            self.set_output({"output_type": "display_data", "data": {}, "execution_count": 1})
        )
        assert "execution_count" in error.message

    def test_display_data_requires_data_object(self):
        error = violation(self.set_output({"output_type": "display_data", "data": "x"}))
        assert error.location == "cells[1].outputs[0].data"

    def test_display_transient_must_be_object(self):
        error = violation(self.set_output({"output_type": "display_data", "data": {}, "transient": 1}))
        assert error.location == "cells[1].outputs[0].transient"

    def test_execute_result_requires_execution_count(self):
        error = violation(
            self.set_output({"output_type": "execute_result", "data": {}, "execution_count": None})
        )
        assert error.location == "cells[1].outputs[0].execution_count"

    def test_execute_result_metadata_optional(self):
        StrictValidator().validate(
            self.set_output({"output_type": "execute_result", "data": {}, "execution_count": 2})
        )


class TestFiles:
    """File-level entry points."""

    def test_validate_file(self, tmp_path):
        path = tmp_path / "ok.ipynb"
        path.write_text(json.dumps(valid_notebook()), encoding="utf-8")
        StrictValidator().validate_file(path)

    def test_violation_names_file(self, tmp_path):
        path = tmp_path / "bad.ipynb"
        nb = valid_notebook()
        nb["foo"] = 1
        path.write_text(json.dumps(nb), encoding="utf-8")

        with pytest.raises(StructuralViolation) as excinfo:
            StrictValidator().validate_file(path)

        assert excinfo.value.source == str(path)
        assert str(path) in str(excinfo.value)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.ipynb"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(NotebookParseError):
            StrictValidator().validate_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotebookParseError, match="not found"):
            StrictValidator().validate_file(tmp_path / "nope.ipynb")


class TestNbformatCrossCheck:
    """Optional check against the official nbformat schema."""

    def test_nbformat_notebook_passes(self):
        nb = nbformat.v4.new_notebook(cells=[nbformat.v4.new_markdown_cell("# Hi")])
        StrictValidator().validate_with_nbformat(json.loads(nbformat.writes(nb)))

    def test_nbformat_rejection_reported_as_violation(self):
        nb = json.loads(nbformat.writes(nbformat.v4.new_notebook()))
        nb["cells"] = [{"id": "x", "cell_type": "markdown", "metadata": {}, "source": [], "bogus": 1}]

        with pytest.raises(StructuralViolation, match="nbformat schema"):
            StrictValidator().validate_with_nbformat(nb, source="nb.ipynb")
