from core.articles.content_format import (
    derive_intro,
    format_content,
    html_to_text,
    read_time,
    sanitize_html,
)


def test_sanitize_drops_script_and_event_handlers():
    html = (
        '<p onclick="steal()">Hello <a href="javascript:alert(1)">link</a></p>'
        "<script>alert(1)</script><table><tr><td>cell</td></tr></table>"
    )
    cleaned = sanitize_html(html)
    assert "<script" not in cleaned
    assert "onclick" not in cleaned
    assert "javascript:" not in cleaned
    assert "<table>" in cleaned
    assert "Hello" in cleaned


def test_sanitize_drops_obfuscated_and_unsafe_schemes():
    html = (
        '<a href="java&#x09;script:alert(document.cookie)">tab</a>'
        '<a href=" JaVaScRiPt&colon;alert(1)">colon</a>'
        '<a href="data:text/html;base64,PHNjcmlwdD4=">data</a>'
        '<img src="vbscript:msgbox(1)">'
        '<meta http-equiv="refresh" content="0;url=javascript:alert(1)">'
    )
    cleaned = sanitize_html(html)
    assert "href" not in cleaned
    assert "src" not in cleaned
    assert "<meta" not in cleaned
    assert "tab" in cleaned and "data" in cleaned


def test_sanitize_keeps_safe_links():
    html = (
        '<a href="https://example.com/a">a</a><a href="/news/b">b</a>'
        '<a href="#top">c</a><a href="mailto:desk@example.com">d</a>'
        '<img src="//cdn.example.com/x.png">'
    )
    cleaned = sanitize_html(html)
    safe = ["https://example.com/a", "/news/b", "#top", "mailto:desk@example.com"]
    for url in safe + ["//cdn.example.com/x.png"]:
        assert f'"{url}"' in cleaned


def test_sanitize_empty():
    assert sanitize_html("") == ""


def test_html_to_text_collapses_whitespace():
    assert html_to_text("<h1>Title</h1>\n\n<p>First   line</p>") == "Title First line"


def test_derive_intro_truncates():
    intro = derive_intro("<p>" + "word " * 100 + "</p>", max_length=20)
    assert intro.endswith("...")
    assert len(intro) <= 23


def test_read_time_minimum_one_minute():
    assert read_time("") == 1
    assert read_time("<p>short</p>") == 1


def test_read_time_rounds_up():
    assert read_time("<p>" + "word " * 201 + "</p>") == 2


def test_format_content_text_and_markdown():
    html = "<h2>Heading</h2><p><span>Some</span> <strong>bold</strong> text</p>"
    assert "Heading" in format_content(html, "text")
    assert "<" not in format_content(html, "text")
    markdown = format_content(html, "markdown")
    assert markdown.startswith("## Heading")
    assert "**bold**" in markdown
    assert format_content(html, "html") == html
