"""Property-based tests for imgpublish using Hypothesis.

These tests check invariants of extraction, rewriting and key
generation over generated documents.  Documents are assembled from
prose, embed and Markdown-link segments so that the expected reference
list is known up front.
"""

from __future__ import annotations

import string

from hypothesis import given, settings
from hypothesis import strategies as st

from imgpublish.config import IMAGE_EXTENSIONS, PublishConfig
from imgpublish.models import ReferenceKind
from imgpublish.pipeline.extract import MARKDOWN_RE, extract_references
from imgpublish.pipeline.naming import generate_name
from imgpublish.pipeline.rewrite import markdown_image, strip_front_matter, substitute_references

_NAME_CHARS = string.ascii_letters + string.digits + "-_"

prose = st.text(alphabet=string.ascii_letters + string.digits + " .,\n", max_size=40)
stems = st.text(alphabet=_NAME_CHARS, min_size=1, max_size=12)
extensions = st.sampled_from(IMAGE_EXTENSIONS)
folders = st.lists(st.text(alphabet=_NAME_CHARS, min_size=1, max_size=6), max_size=2)


@st.composite
def image_names(draw) -> str:
    return f"{draw(stems)}.{draw(extensions)}"


@st.composite
def embeds(draw) -> tuple[ReferenceKind, str, str]:
    path = "/".join(draw(folders) + [draw(image_names())])
    size = draw(st.sampled_from(["", "|300", "|640x480"]))
    return ReferenceKind.EMBED, path, f"![[{path}{size}]]"


@st.composite
def markdown_links(draw) -> tuple[ReferenceKind, str, str]:
    path = "/".join(draw(folders) + [draw(image_names())])
    alt = draw(st.text(alphabet=string.ascii_letters + " ", max_size=10))
    return ReferenceKind.MARKDOWN_LINK, path, f"![{alt}]({path})"


@st.composite
def documents(draw):
    """Return ``(text, expected)`` where *expected* lists ``(kind, raw_path)``."""
    parts: list[str] = []
    expected: list[tuple[ReferenceKind, str]] = []
    for _ in range(draw(st.integers(min_value=0, max_value=5))):
        parts.append(draw(prose))
        kind, path, snippet = draw(st.one_of(embeds(), markdown_links()))
        parts.append(snippet)
        # A separator keeps adjacent snippets from fusing.
        parts.append(" ")
        expected.append((kind, path))
    parts.append(draw(prose))
    return "".join(parts), expected


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


@given(text=prose)
def test_prose_has_no_references(text):
    assert extract_references(text) == []


@given(doc=documents())
def test_extraction_finds_every_reference_in_source_order(doc):
    text, expected = doc
    refs = extract_references(text)
    assert [(r.kind, r.raw_path) for r in refs] == expected
    assert [r.start for r in refs] == sorted(r.start for r in refs)
    for ref in refs:
        assert text[ref.start:ref.start + len(ref.source_snippet)] == ref.source_snippet


@given(
    stem=stems,
    ext=st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=6).filter(
        lambda e: e not in IMAGE_EXTENSIONS
    ),
)
def test_unrecognised_extension_never_extracted(stem, ext):
    text = f"![[{stem}.{ext}]] ![alt]({stem}.{ext})"
    assert extract_references(text) == []


# ---------------------------------------------------------------------------
# Rewriting
# ---------------------------------------------------------------------------


@given(doc=documents(), alt_text=st.booleans())
def test_rewritten_text_has_no_local_references(doc, alt_text):
    text, expected = doc
    refs = extract_references(text)
    for i, ref in enumerate(refs):
        ref.resolved_path = ref.raw_path
        ref.remote_url = f"https://cdn.test/{i}.png"

    result = substitute_references(text, refs, PublishConfig(image_alt_text=alt_text))

    assert extract_references(result) == []
    assert len(MARKDOWN_RE.findall(result)) == len(expected)


@given(doc=documents())
def test_no_uploads_is_identity(doc):
    text, _ = doc
    refs = extract_references(text)
    assert substitute_references(text, refs, PublishConfig()) == text


@given(name=image_names(), folder=folders, alt_text=st.booleans())
def test_generated_link_matches_markdown_pattern(name, folder, alt_text):
    url = "https://cdn.test/" + "/".join(folder + [name])
    refs = extract_references(f"![[{name}]]")
    ref = refs[0]
    ref.resolved_path = name
    ref.remote_url = url

    match = MARKDOWN_RE.fullmatch(markdown_image(ref, PublishConfig(image_alt_text=alt_text)))

    assert match is not None
    assert match.group("path") == url


@given(text=prose)
def test_strip_front_matter_without_block_is_identity(text):
    assert strip_front_matter(text) == text


# ---------------------------------------------------------------------------
# Key generation
# ---------------------------------------------------------------------------


@settings(max_examples=50)
@given(
    template=st.text(alphabet=string.ascii_letters + "/{}", max_size=20),
    filename=image_names(),
)
def test_generated_key_never_starts_with_slash(template, filename):
    assert not generate_name(template, filename).startswith("/")
