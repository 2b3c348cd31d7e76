"""Tests for parsing notes out of the vault."""

import tempfile
from pathlib import Path

from wikirefs.adapters.fs_storage import FsStorage, read_text, write_text_atomic
from wikirefs.adapters.markdown_parser import MarkdownParser
from wikirefs.adapters.yaml_codec import MarkdownNoteCodec, YamlFrontmatter
from wikirefs.core.vault import Vault


def _vault(root: Path) -> Vault:
    return Vault(FsStorage(root), MarkdownParser(), MarkdownNoteCodec(YamlFrontmatter()))


def test_parse_links_in_order():
    """Test wikilinks are parsed in document order."""
    body = MarkdownParser().parse("See [[zeta]] and [[alpha|Alpha]].\n\n[[mid#Part]]\n", "src")

    assert [link.target.id for link in body.links] == ["zeta", "alpha", "mid"]
    assert body.links[1].target.title_text == "Alpha"
    assert body.links[2].target.heading == "Part"
    assert all(link.source == "src" for link in body.links)


def test_parse_link_ranges():
    """Test link ranges point at the raw text."""
    text = "ab\n[[x]]\n"
    body = MarkdownParser().parse(text, "src")

    rng = body.links[0].range
    assert rng is not None
    assert text[rng.start:rng.end] == "[[x]]"


def test_parse_skips_links_in_fence():
    """Test wikilinks inside code fences are ignored."""
    text = "[[real]]\n```\n[[fake]]\n```\n"
    body = MarkdownParser().parse(text, "src")

    assert [link.target.id for link in body.links] == ["real"]
    assert [b.kind for b in body.blocks] == ["fence"]


def test_parse_skips_transclusions_and_empty_links():
    """Test ![[...]] embeds and [[]] are not outbound links."""
    body = MarkdownParser().parse("![[embed]] [[ ]] [[ok]]\n", "src")

    assert [link.target.id for link in body.links] == ["ok"]


def test_parse_headings():
    """Test heading blocks carry text and level."""
    body = MarkdownParser().parse("# Top\n\n## Sub\n", "src")

    headings = [(b.heading_text, b.heading_level) for b in body.blocks if b.kind == "heading"]
    assert headings == [("Top", 1), ("Sub", 2)]


def test_vault_title_from_frontmatter():
    """Test frontmatter title wins over the first heading."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_dir = Path(tmpdir)
        (vault_dir / "note-b.md").write_text("---\ntitle: Note B\n---\n\n# Heading\n")

        note = _vault(vault_dir).get("note-b")
        assert note is not None
        assert note.title == "Note B"


def test_vault_title_fallbacks():
    """Test title falls back to first heading, then id."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_dir = Path(tmpdir)
        (vault_dir / "h.md").write_text("# From Heading\n\ntext\n")
        (vault_dir / "plain.md").write_text("no heading here\n")

        vault = _vault(vault_dir)
        assert vault.get("h").title == "From Heading"
        assert vault.get("plain").title == "plain"


def test_vault_bad_frontmatter_is_ignored():
    """Test unreadable YAML leaves an empty metadata bag."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_dir = Path(tmpdir)
        (vault_dir / "bad.md").write_text("---\ntitle: [unclosed\n---\n# Body\n")

        note = _vault(vault_dir).get("bad")
        assert note is not None
        assert len(note.meta) == 0
        assert note.title == "Body"


def test_vault_crlf_frontmatter():
    """Test frontmatter with CRLF line breaks."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_dir = Path(tmpdir)
        write_text_atomic(vault_dir / "c.md", "---\r\ntitle: Crlf\r\n---\r\n[[x]]\r\n")

        note = _vault(vault_dir).get("c")
        assert note is not None
        assert note.title == "Crlf"
        assert [link.target.id for link in note.body.links] == ["x"]


def test_vault_list_ids():
    """Test listing ids only picks up markdown files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_dir = Path(tmpdir)
        (vault_dir / "b.md").write_text("b")
        (vault_dir / "a.markdown").write_text("a")
        (vault_dir / "notes.txt").write_text("x")

        assert list(_vault(vault_dir).list_ids()) == ["a", "b"]
        assert _vault(vault_dir).get("missing") is None


def test_atomic_write_keeps_line_endings():
    """Test CRLF survives write and read."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "n.md"
        write_text_atomic(path, "a\r\nb\r\n")

        assert read_text(path) == "a\r\nb\r\n"
        assert not path.with_suffix(".md.tmp").exists()


def test_storage_path_for_upper_case_suffix():
    """Test notes saved as .MD are listed and resolved like .md ones."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_dir = Path(tmpdir)
        (vault_dir / "Loud.MD").write_text("See [[quiet]]\n")
        (vault_dir / "quiet.md").write_text("q")
        storage = FsStorage(vault_dir)

        assert list(storage.list_all_ids()) == ["Loud", "quiet"]
        assert storage.path_for("Loud") == vault_dir / "Loud.MD"
        assert storage.path_for("quiet") == vault_dir / "quiet.md"
        assert storage.path_for("new") == vault_dir / "new.md"
        assert storage.read_raw("Loud") == "See [[quiet]]\n"
