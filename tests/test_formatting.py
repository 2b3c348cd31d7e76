"""Tests for the formatting context."""

from pathlib import Path

from conftest import make_document
from wikirefs.refs.formatting import DEFAULT_CONTEXT, FormattingContext, resolve, resolve_active
from wikirefs.workspace import Workspace


def test_resolve_spaces():
    """Test indentation with spaces."""
    doc = make_document("a\nb\n", tab_size=4)
    assert resolve(doc) == FormattingContext(eol="\n", indent_unit="    ")


def test_resolve_tabs():
    """Test indentation with tabs."""
    doc = make_document("a\r\nb\r\n", insert_spaces=False)
    assert resolve(doc) == FormattingContext(eol="\r\n", indent_unit="\t")


def test_resolve_is_per_document():
    """Test two documents never share a context."""
    lf = make_document("a\n", name="lf.md")
    crlf = make_document("a\r\n", name="crlf.md")

    assert resolve(lf).eol == "\n"
    assert resolve(crlf).eol == "\r\n"
    assert resolve(lf).eol == "\n"


def test_resolve_active_without_document():
    """Test the default is returned when nothing is active."""
    workspace = Workspace(Path("/vault"))
    assert resolve_active(workspace) == DEFAULT_CONTEXT
    assert DEFAULT_CONTEXT.eol == "\r\n"
    assert DEFAULT_CONTEXT.indent_unit == "  "


def test_resolve_active_fallback():
    """Test a caller-provided fallback."""
    workspace = Workspace(Path("/vault"))
    fallback = FormattingContext(eol="\n", indent_unit="\t")
    assert resolve_active(workspace, fallback) is fallback


def test_resolve_active_document():
    """Test the active document's settings are used."""
    workspace = Workspace(Path("/vault"))
    workspace.active_document = make_document("x\n", tab_size=3)
    assert resolve_active(workspace) == FormattingContext(eol="\n", indent_unit="   ")
