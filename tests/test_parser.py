from app.schemas import MAX_CONTENT_LENGTH, SCRAPE_FAILED_MESSAGE
from app.scrape import clean_text, extract_page_content


def test_extract_page_content_builds_combined_text():
    html = """
    <html>
      <head>
        <title>Example</title>
        <meta name="description" content="desc">
      </head>
      <body>
        <h1>Hi</h1>
        <p>Hello   world</p>
      </body>
    </html>
    """
    page = extract_page_content("https://example.com", html)

    assert page.url == "https://example.com"
    assert page.title == "Example"
    assert page.meta_description == "desc"
    assert page.headings.h1 == "Hi"
    assert page.headings.h2 == ""
    assert page.content == "Example desc Hi Hello world"
    assert page.error is None
    assert page.cached_at is None


def test_extract_page_content_drops_scripts_and_styles():
    html = """
    <html><head><title>Page</title><style>body { color: red; }</style></head>
    <body>
      <script>var secret = 1;</script>
      <noscript>Enable JavaScript</noscript>
      <iframe src="https://ads.example">frame text</iframe>
      <p>Visible paragraph</p>
    </body></html>
    """
    page = extract_page_content("https://example.com", html)

    assert "secret" not in page.content
    assert "color" not in page.content
    assert "Enable JavaScript" not in page.content
    assert "Visible paragraph" in page.content


def test_extract_page_content_orders_sections():
    html = """
    <html><head><title>T</title></head><body>
      <ul><li>item</li></ul>
      <p>para</p>
      <div class="page-content">block</div>
      <main>mainly</main>
      <article>story</article>
      <h2>Second</h2>
      <h2>Third</h2>
      <h1>First</h1>
    </body></html>
    """
    page = extract_page_content("https://example.com/order", html)

    assert page.headings.h1 == "First"
    assert page.headings.h2 == "Second Third"
    assert page.content == "T First Second Third story mainly block para item"


def test_extract_page_content_matches_content_ids():
    html = '<html><body><section id="main-content">From the id</section></body></html>'
    page = extract_page_content("https://example.com", html)

    assert page.content == "From the id"


def test_missing_meta_description_is_empty_not_an_error():
    page = extract_page_content("https://example.com", "<html><title>Only title</title></html>")

    assert page.meta_description == ""
    assert page.error is None


def test_extract_page_content_truncates_content():
    body = "word " * 20_000
    html = f"<html><body><p>{body}</p></body></html>"
    page = extract_page_content("https://example.com/long", html)

    expected = clean_text(body)[:MAX_CONTENT_LENGTH]
    assert len(page.content) == MAX_CONTENT_LENGTH
    assert page.content == expected


def test_extract_page_content_returns_failure_on_parser_error(monkeypatch):
    def broken_parser(*args, **kwargs):
        raise ValueError("parser exploded")

    monkeypatch.setattr("app.scrape.BeautifulSoup", broken_parser)

    page = extract_page_content("https://example.com", "<html></html>")

    assert page.error == SCRAPE_FAILED_MESSAGE
    assert page.title == ""
    assert page.content == ""
    assert page.headings.h1 == "" and page.headings.h2 == ""


def test_clean_text_collapses_whitespace():
    assert clean_text("  a \n\n b\t\tc  ") == "a b c"
    assert clean_text("\n\t ") == ""


def test_clean_text_is_idempotent():
    samples = ["", "plain", "  lead", "trail  ", "multi\n\nline\r\ntext", "tab\tand nbsp"]
    for sample in samples:
        once = clean_text(sample)
        assert clean_text(once) == once
