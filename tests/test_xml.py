"""Tests for visitor_badge.badges.xml."""

from __future__ import annotations

from visitor_badge.badges.xml import Document, Node, escape, format_number, serialize

# -----------------------------------------------------------------------
# escape
# -----------------------------------------------------------------------


class TestEscape:
    def test_ampersand(self):
        assert escape("a&b") == "a&amp;b"

    def test_less_than(self):
        assert escape("a<b") == "a&lt;b"

    def test_greater_than(self):
        assert escape("a>b") == "a&gt;b"

    def test_double_quote(self):
        assert escape('a"b') == "a&quot;b"

    def test_single_quote_untouched(self):
        assert escape("a'b") == "a'b"

    def test_no_double_escaping(self):
        assert escape("&lt;") == "&amp;lt;"

    def test_multiple_special(self):
        assert escape('<"&">') == "&lt;&quot;&amp;&quot;&gt;"

    def test_other_characters_untouched(self):
        s = "héllo wörld 42% #fff 'x' ☃"
        assert escape(s) == s

    def test_empty(self):
        assert escape("") == ""


# -----------------------------------------------------------------------
# format_number
# -----------------------------------------------------------------------


class TestFormatNumber:
    def test_integral_float(self):
        assert format_number(20.0) == "20"

    def test_fraction(self):
        assert format_number(90.0015) == "90.0015"

    def test_float_noise_is_rounded(self):
        assert format_number(0.1 + 0.2) == "0.3"

    def test_negative(self):
        assert format_number(-10.0) == "-10"

    def test_negative_zero(self):
        assert format_number(-0.00001) == "0"


# -----------------------------------------------------------------------
# Node / serialize
# -----------------------------------------------------------------------


class TestSerialize:
    def test_empty_node_self_closes(self):
        assert serialize(Node("rect")) == "<rect/>"

    def test_attributes_in_insertion_order(self):
        n = Node("rect").attr("width", 40).attr("height", 20).attr("fill", "#555")
        assert serialize(n) == '<rect width="40" height="20" fill="#555"/>'

    def test_duplicate_attributes_kept(self):
        n = Node("g").attr("class", "a").attr("class", "b")
        assert n.attributes == [("class", "a"), ("class", "b")]
        assert serialize(n) == '<g class="a" class="b"/>'

    def test_attrs_bulk(self):
        n = Node("stop").attrs([("offset", "0"), ("stop-opacity", ".1")])
        assert serialize(n) == '<stop offset="0" stop-opacity=".1"/>'

    def test_float_attribute_formatting(self):
        n = Node("rect").attr("width", 25.5175).attr("height", 20.0)
        assert serialize(n) == '<rect width="25.5175" height="20"/>'

    def test_children_in_order(self):
        g = Node("g").child(Node("a")).child(Node("b")).children([Node("c"), Node("d")])
        assert serialize(g) == "<g><a/><b/><c/><d/></g>"

    def test_nested(self):
        g = Node("g").attr("id", "outer").child(Node("g").child(Node("rect")))
        assert serialize(g) == '<g id="outer"><g><rect/></g></g>'

    def test_text_escaped_in_body(self):
        n = Node("text").text('<b> & "q"')
        assert serialize(n) == "<text>&lt;b&gt; &amp; &quot;q&quot;</text>"

    def test_text_escaped_in_attribute(self):
        n = Node("svg").attr("aria-label", 'a<b>&"c"')
        assert serialize(n) == '<svg aria-label="a&lt;b&gt;&amp;&quot;c&quot;"/>'

    def test_mixed_text_and_nodes(self):
        n = Node("p").text("a").child(Node("br")).text("b")
        assert serialize(n) == "<p>a<br/>b</p>"

    def test_empty_text_is_not_self_closing(self):
        assert serialize(Node("text").text("")) == "<text></text>"

    def test_builders_chain(self):
        n = Node("g")
        assert n.attr("a", 1) is n
        assert n.attrs([]) is n
        assert n.child(Node("x")) is n
        assert n.children([]) is n
        assert n.text("t") is n


class TestDocument:
    def test_serializes_top_level_nodes_in_order(self):
        doc = Document().add(Node("a")).add(Node("b"))
        assert serialize(doc) == "<a/><b/>"

    def test_empty_document(self):
        assert serialize(Document()) == ""
