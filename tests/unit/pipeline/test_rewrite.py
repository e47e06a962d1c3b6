"""Tests for the text rewriter."""

from __future__ import annotations

from imgpublish.config import PublishConfig
from imgpublish.models import Reference, ReferenceKind
from imgpublish.pipeline.rewrite import (
    alt_text_for,
    markdown_image,
    rewrite,
    strip_front_matter,
    substitute_references,
)


def uploaded(snippet: str, name: str, url: str) -> Reference:
    return Reference(
        kind=ReferenceKind.EMBED,
        display_name=name,
        raw_path=name,
        source_snippet=snippet,
        resolved_path=name,
        remote_url=url,
    )


class TestAltText:
    def test_dashes_and_underscores(self):
        assert alt_text_for("my-cool_image.png") == "my cool image"

    def test_directory_dropped(self):
        assert alt_text_for("folder/a-b.png") == "a b"

    def test_only_last_extension_dropped(self):
        assert alt_text_for("sketch.excalidraw") == "sketch"

    def test_disabled_gives_empty_alt(self):
        ref = uploaded("![[my-pic.png]]", "my-pic.png", "https://cdn/x.png")
        config = PublishConfig(image_alt_text=False)
        assert markdown_image(ref, config) == "![](https://cdn/x.png)"

    def test_enabled(self):
        ref = uploaded("![[my-pic.png]]", "my-pic.png", "https://cdn/x.png")
        assert markdown_image(ref, PublishConfig()) == "![my pic](https://cdn/x.png)"


class TestSubstitution:
    def test_replaces_every_occurrence(self):
        text = "![[a.png]]\ntext\n![[a.png]]\n"
        ref = uploaded("![[a.png]]", "a.png", "https://cdn/a.png")
        result = substitute_references(text, [ref], PublishConfig())
        assert result == "![a](https://cdn/a.png)\ntext\n![a](https://cdn/a.png)\n"

    def test_reference_without_url_untouched(self):
        text = "![[a.png]] ![[b.png]]"
        ok = uploaded("![[a.png]]", "a.png", "https://cdn/a.png")
        failed = uploaded("![[b.png]]", "b.png", "")
        result = substitute_references(text, [ok, failed], PublishConfig())
        assert result == "![a](https://cdn/a.png) ![[b.png]]"

    def test_no_references_is_identity(self):
        text = "---\ntitle: x\n---\nbody\n"
        assert substitute_references(text, [], PublishConfig()) == text

    def test_order_independent(self):
        text = "![[a.png]] ![x](b.png)"
        a = uploaded("![[a.png]]", "a.png", "https://cdn/a.png")
        b = uploaded("![x](b.png)", "b.png", "https://cdn/b.png")
        config = PublishConfig()
        assert substitute_references(text, [a, b], config) == substitute_references(
            text, [b, a], config
        )


class TestFrontMatter:
    def test_strips_leading_block(self):
        text = "---\ntitle: Post\ntags: [a]\n---\n# Heading\n"
        assert strip_front_matter(text) == "# Heading\n"

    def test_only_first_block(self):
        text = "---\na: 1\n---\nbody\n---\nb: 2\n---\n"
        assert strip_front_matter(text) == "body\n---\nb: 2\n---\n"

    def test_not_at_start_untouched(self):
        text = "intro\n---\na: 1\n---\n"
        assert strip_front_matter(text) == text

    def test_no_front_matter(self):
        assert strip_front_matter("plain\n") == "plain\n"


class TestRewrite:
    def test_ignore_properties(self):
        text = "---\ntitle: Post\n---\n![[a.png]]\n"
        ref = uploaded("![[a.png]]", "a.png", "https://cdn/a.png")
        config = PublishConfig(ignore_properties=True)
        assert rewrite(text, [ref], config) == "![a](https://cdn/a.png)\n"

    def test_keeps_properties_by_default(self):
        text = "---\ntitle: Post\n---\n![[a.png]]\n"
        ref = uploaded("![[a.png]]", "a.png", "https://cdn/a.png")
        assert rewrite(text, [ref], PublishConfig()).startswith("---\ntitle: Post\n---\n")
