# tests/test_text_reducer.py

"""Tests for the HTML-to-text reducer."""

import unittest

from pricescope.config.settings import Settings
from pricescope.filters.text_reducer import reduce_html

_PAGE = """
<html><head><title>Phone</title>
<style>.price { color: red; }</style>
<script>var tracking = "<b>not text</b>";</script>
</head>
<body>
<header>Site header</header>
<nav><a href="/">Home</a></nav>
<!-- promo banner -->
<h1 class="title">Galaxy   S24</h1>
<span class="price">&#8377;74,999</span>
<p>Fast&nbsp;charging &amp; 8GB RAM &lt;new&gt;</p>
<aside>Sponsored</aside>
<iframe src="ad.html">Ad frame</iframe>
<svg><path d="M0 0"/></svg>
<footer>Copyright</footer>
</body></html>
"""


class TestReduceHtml(unittest.TestCase):
    """reduce_html strips boilerplate and markup."""

    def test_removes_boilerplate_elements(self) -> None:
        """Script, style, nav, header, footer, aside, iframe, svg vanish."""
        text = reduce_html(_PAGE)
        for gone in (
            "tracking",
            "color: red",
            "Site header",
            "Home",
            "Sponsored",
            "Ad frame",
            "Copyright",
            "promo banner",
        ):
            with self.subTest(gone=gone):
                self.assertNotIn(gone, text)

    def test_keeps_product_text(self) -> None:
        """Visible product text survives with collapsed whitespace."""
        text = reduce_html(_PAGE)
        self.assertIn("Galaxy S24", text)
        self.assertIn("Phone", text)

    def test_decodes_common_entities(self) -> None:
        """&nbsp; &amp; &lt; &gt; are decoded."""
        text = reduce_html(_PAGE)
        self.assertIn("Fast charging & 8GB RAM <new>", text)

    def test_other_entities_left_alone(self) -> None:
        """Only the four common entities are decoded."""
        self.assertIn("&#8377;74,999", reduce_html(_PAGE))

    def test_tags_replaced_by_space(self) -> None:
        """Adjacent tags do not glue words together."""
        self.assertEqual(
            reduce_html("<p>alpha</p><p>beta</p>"), "alpha beta"
        )

    def test_trimmed(self) -> None:
        """Leading and trailing whitespace is removed."""
        self.assertEqual(reduce_html("  <b> hi </b>  "), "hi")

    def test_truncates_to_budget(self) -> None:
        """Output never exceeds MAX_REDUCED_CHARS."""
        html = "<p>" + ("word " * 5000) + "</p>"
        text = reduce_html(html)
        self.assertEqual(len(text), Settings.MAX_REDUCED_CHARS)

    def test_custom_limit(self) -> None:
        """An explicit limit overrides the default budget."""
        self.assertEqual(reduce_html("<p>abcdef</p>", limit=3), "abc")

    def test_no_angle_brackets_for_well_formed_input(self) -> None:
        """Well-formed markup leaves no < or > behind."""
        text = reduce_html(
            "<div><p class='x'>Price <b>$10</b></p><br/></div>"
        )
        self.assertNotIn("<", text)
        self.assertNotIn(">", text)

    def test_idempotent(self) -> None:
        """Reducing entity-free reduced text changes nothing."""
        once = reduce_html(
            "<div><h1>Widget</h1>\n\n<p>Blue   steel</p></div>"
        )
        self.assertEqual(reduce_html(once), once)

    def test_escaped_brackets_survive_one_pass(self) -> None:
        """Entities decode after tag stripping, so escaped text is kept."""
        self.assertEqual(
            reduce_html("<p>Use a &lt;b&gt; tag and 5 &lt; 7 &gt; 3</p>"),
            "Use a <b> tag and 5 < 7 > 3",
        )

    def test_malformed_markup_does_not_raise(self) -> None:
        """Unbalanced tags are handled best-effort."""
        text = reduce_html("<div><script>broken <p>Text <b>bold")
        self.assertIsInstance(text, str)

    def test_case_insensitive_elements(self) -> None:
        """Upper-case element names are stripped too."""
        self.assertEqual(
            reduce_html("<SCRIPT>x()</SCRIPT><P>ok</P>"), "ok"
        )

    def test_empty_input(self) -> None:
        """Empty or None input yields an empty string."""
        self.assertEqual(reduce_html(""), "")
        self.assertEqual(reduce_html(None), "")


if __name__ == "__main__":
    unittest.main()
