"""Unit tests for the regex feed scanner and its tag helpers."""

from ozb_deal_notifier.components.feed_scanner import (
    RegexItemScanner,
    decode_entities,
    get_all_tag_text,
    get_tag_attribute,
    get_tag_attributes,
    get_tag_text,
    strip_cdata,
)


class TestRegexItemScanner:
    """Test cases for splitting documents into item blocks."""

    def test_items_in_document_order(self, sample_feed_xml):
        blocks = RegexItemScanner().parse_entries(sample_feed_xml)

        assert len(blocks) == 4
        assert "800001" in blocks[0]
        assert "800000" in blocks[1]

    def test_empty_document(self):
        assert RegexItemScanner().parse_entries("") == []
        assert RegexItemScanner().parse_entries("<rss><channel/></rss>") == []

    def test_unterminated_item_is_ignored(self):
        text = "<item><title>A</title></item><item><title>B</title>"
        blocks = RegexItemScanner().parse_entries(text)

        assert blocks == ["<title>A</title>"]

    def test_item_with_attributes_and_mixed_case(self):
        text = '<ITEM rdf:about="x"><title>A</title></ITEM>'
        assert RegexItemScanner().parse_entries(text) == ["<title>A</title>"]

    def test_tolerates_unescaped_ampersand(self):
        text = "<item><title>Fish & Chips $5</title></item>"
        blocks = RegexItemScanner().parse_entries(text)

        assert get_tag_text(blocks[0], "title") == "Fish & Chips $5"


class TestTagHelpers:
    """Test cases for tag text and attribute extraction."""

    def test_strip_cdata(self):
        assert strip_cdata("<![CDATA[<p>hi</p>]]>") == "<p>hi</p>"
        assert strip_cdata("plain") == "plain"

    def test_decode_entities(self):
        assert decode_entities("a &lt;b&gt; &quot;c&quot; &#39;d&#39; &amp; e") == (
            "a <b> \"c\" 'd' & e"
        )

    def test_decode_ampersand_last(self):
        assert decode_entities("&amp;lt;") == "&lt;"

    def test_get_tag_text_first_match(self):
        block = "<category>One</category><category>Two</category>"
        assert get_tag_text(block, "category") == "One"

    def test_get_tag_text_missing(self):
        assert get_tag_text("<title>A</title>", "guid") == ""

    def test_get_tag_text_with_attributes(self):
        block = '<guid isPermaLink="false"> 123 at site </guid>'
        assert get_tag_text(block, "guid") == "123 at site"

    def test_get_all_tag_text_skips_empty(self):
        block = "<category>A &amp; B</category><category> </category><category>C</category>"
        assert get_all_tag_text(block, "category") == ["A & B", "C"]

    def test_get_tag_attribute(self):
        block = '<media:thumbnail width="10" url="https://x/y.jpg?a=1&amp;b=2"/>'
        assert get_tag_attribute(block, "media:thumbnail", "url") == "https://x/y.jpg?a=1&b=2"
        assert get_tag_attribute(block, "media:thumbnail", "height") == ""
        assert get_tag_attribute(block, "media:content", "url") == ""

    def test_get_tag_attributes(self):
        block = '<ozb:meta votes-pos="5" votes-neg="1" url="https://shop"/>'
        attrs = get_tag_attributes(block, "ozb:meta")

        assert attrs == {"votes-pos": "5", "votes-neg": "1", "url": "https://shop"}

    def test_get_tag_attributes_absent(self):
        assert get_tag_attributes("<title>A</title>", "ozb:meta") is None
