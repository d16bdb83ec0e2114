from __future__ import annotations

from pathlib import Path

import pytest

from writings.ingestion.ingestor import IngestionError, WritingIngestor

_DOCUMENT = """<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head><title>The Seven Valleys</title></head>
  <body>
    <div class="ic">
      <h1>The Call of the Beloved</h1>
      <h2>Preface</h2>
      <p id="p1">In the name of God.<sup><a href="#fn1">1</a></sup></p>
    </div>
    <p>* * *</p>
    <p>IV</p>
    <blockquote>
      <p>Do not despair.</p>
      <p>-- Author Name</p>
    </blockquote>
    <div class="ic">
      <h2>Notes</h2>
      <ol>
        <li>
          <span class="footnote-number">1.</span>
          <p><a class="footnote-content" id="fn1"/>See also X</p>
          <a class="footnote-return" href="#p1">back</a>
        </li>
      </ol>
    </div>
  </body>
</html>
"""


def test_ingestor_builds_writing_with_sections_blocks_and_footnotes() -> None:
    writing = WritingIngestor().ingest_bytes("the-seven-valleys.xhtml", _DOCUMENT.encode("utf-8"))

    assert writing.id == "the-seven-valleys"
    assert writing.title == "The Seven Valleys"
    assert writing.file_name == "the-seven-valleys.xhtml"
    assert "Do not despair." in writing.text
    assert [section.title for section in writing.sections] == ["Preface", "Notes"]

    preface = writing.sections[0]
    assert [block.type for block in preface.blocks] == ["paragraph", "quote"]
    first, quote = preface.blocks
    assert first.id == "p1"
    assert first.footnotes == ("1. See also X",)
    assert first.share_text == "In the name of God.1\n\n1. See also X"
    assert quote.text == "Do not despair."
    assert quote.attribution == "-- Author Name"
    assert preface.paragraphs == [first.share_text, quote.share_text]
    assert all(block.text != "* * *" for block in preface.blocks)


def test_ingestor_is_deterministic_for_unchanged_input() -> None:
    ingestor = WritingIngestor()

    first = ingestor.ingest_bytes("sample.xhtml", _DOCUMENT.encode("utf-8")).to_dict()
    second = ingestor.ingest_bytes("sample.xhtml", _DOCUMENT.encode("utf-8")).to_dict()

    assert first == second


def test_block_ids_are_unique_within_each_section() -> None:
    writing = WritingIngestor().ingest_bytes("sample.xhtml", _DOCUMENT.encode("utf-8"))

    for section in writing.sections:
        ids = [block.id for block in section.blocks]
        assert len(ids) == len(set(ids))


def test_document_without_body_keeps_text_only() -> None:
    raw = b'<?xml version="1.0"?><root><p>Loose   text</p></root>'

    writing = WritingIngestor().ingest_bytes("loose.xhtml", raw)

    assert writing.text == "Loose text"
    assert writing.sections == ()


def test_ingestor_reads_files_and_wraps_failures(tmp_path: Path) -> None:
    good = tmp_path / "good_one.xhtml"
    good.write_text(_DOCUMENT, encoding="utf-8")
    empty = tmp_path / "empty.xhtml"
    empty.write_bytes(b"")

    ingestor = WritingIngestor()

    assert ingestor.supports(good)
    assert not ingestor.supports(tmp_path / "notes.txt")
    assert ingestor.ingest(good).title == "Good One"

    with pytest.raises(IngestionError) as excinfo:
        ingestor.ingest(empty)
    assert str(empty.name) in str(excinfo.value)

    with pytest.raises(IngestionError) as missing:
        ingestor.ingest(tmp_path / "missing.xhtml")
    assert "Failed to read source file" in str(missing.value)


def test_html_entities_survive_into_blocks_and_attributions() -> None:
    raw = (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<html xmlns="http://www.w3.org/1999/xhtml"><body>'
        '<div class="ic"><h2>Preface</h2></div>'
        "<blockquote><p>Do not&nbsp;despair.</p><p>&mdash; Author Name</p></blockquote>"
        "</body></html>"
    ).encode("utf-8")

    writing = WritingIngestor().ingest_bytes("entities.xhtml", raw)

    (block,) = writing.sections[0].blocks
    assert block.type == "quote"
    assert block.text == "Do not despair."
    assert block.attribution == "— Author Name"
    assert block.share_text == "Do not despair.\n\n— Author Name"
