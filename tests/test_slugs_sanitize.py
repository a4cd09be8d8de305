"""Unit tests for slug generation and post body scrubbing."""

import unittest

from blogcms.services.sanitize import sanitize_html
from blogcms.services.slugs import slugify


class TestSlugify(unittest.TestCase):
    def test_lowercases_and_joins_words(self) -> None:
        self.assertEqual(slugify("  Hello World  "), "hello-world")

    def test_drops_punctuation_and_collapses_dashes(self) -> None:
        self.assertEqual(slugify("C'est -- la vie!"), "cest-la-vie")

    def test_non_ascii_letters_are_dropped(self) -> None:
        self.assertEqual(slugify("Café Crème"), "caf-crme")

    def test_nothing_usable_gives_empty_slug(self) -> None:
        self.assertEqual(slugify("!!!"), "")


class TestSanitizeHtml(unittest.TestCase):
    def test_empty_input(self) -> None:
        self.assertEqual(sanitize_html(None), "")
        self.assertEqual(sanitize_html(""), "")

    def test_script_blocks_removed(self) -> None:
        self.assertEqual(sanitize_html("<p>a</p><script>alert(1)</script><p>b</p>"), "<p>a</p><p>b</p>")

    def test_event_handlers_removed(self) -> None:
        self.assertEqual(sanitize_html('<img src="x.png" onerror="alert(1)">'), '<img src="x.png">')

    def test_javascript_links_removed(self) -> None:
        self.assertEqual(sanitize_html('<a href="javascript:alert(1)">x</a>'), "<a>x</a>")

    def test_data_sources_only_for_images(self) -> None:
        self.assertEqual(
            sanitize_html('<img src="data:image/png;base64,AAA">'), '<img src="data:image/png;base64,AAA">'
        )
        self.assertEqual(sanitize_html('<img src="data:text/html;base64,AAA">'), "<img>")

    def test_plain_markup_kept(self) -> None:
        html = '<h2>Title</h2><p class="lead">Some <strong>text</strong></p>'
        self.assertEqual(sanitize_html(html), html)
