"""Tests for in-page content location and page metadata."""

from __future__ import annotations

import json
from unittest.mock import patch

from scout.scraper.locators import clean_title, locate_content, page_metadata

_COMPONENT = (
    "export default function App() {\n"
    "  const [count, setCount] = useState(0);\n"
    "  return (<div className='p-4'>{count}</div>);\n"
    "}\n"
)


def _page(body: str, head: str = "<title>Counter | Claude</title>") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


class TestLocateContent:
    def test_structured_json_payload(self) -> None:
        payload = json.dumps({"artifact": {"content": _COMPONENT, "type": "react"}})
        html = _page(f'<script type="application/json">{payload}</script><main>chrome</main>')
        assert locate_content(html) == ("structured_data", _COMPONENT)

    def test_code_block(self) -> None:
        code = "<html><body><div>" + "x" * 120 + "</div></body></html>"
        html = _page(f"<pre><code>{code.replace('<', '&lt;')}</code></pre>")
        name, text = locate_content(html)
        assert name == "code_block"
        assert text.startswith("<html>")

    def test_short_code_block_skipped(self) -> None:
        html = _page("<pre>const x = 1;</pre>")
        assert locate_content(html, include_container=False) is None

    def test_data_attribute(self) -> None:
        html = _page(f'<div data-code="{_COMPONENT.replace(chr(39), "&#39;")}"></div>')
        name, text = locate_content(html)
        assert name == "data_attribute"
        assert "useState" in text

    def test_iframe_srcdoc(self) -> None:
        doc = "&lt;html&gt;&lt;body&gt;" + "&lt;p&gt;hello&lt;/p&gt;" * 10 + "&lt;/body&gt;&lt;/html&gt;"
        html = _page(f'<iframe srcdoc="{doc}"></iframe>')
        name, text = locate_content(html)
        assert name == "iframe_srcdoc"
        assert text.startswith("<html><body><p>hello")

    def test_editable_region(self) -> None:
        html = _page(f"<textarea>{_COMPONENT.replace('<', '&lt;')}</textarea>")
        name, text = locate_content(html)
        assert name == "editable_region"
        assert "export default function" in text

    def test_main_container_last_resort(self) -> None:
        html = _page("<main><section><h2>Dashboard</h2>" + "<p>row</p>" * 20 + "</section></main>")
        name, text = locate_content(html)
        assert name == "main_container"
        assert text.startswith("<section>")

    def test_iframe_src_stub(self) -> None:
        html = _page('<iframe src="https://www.claudeusercontent.com/artifact/abc-123-very-long-path"></iframe>')
        name, text = locate_content(html)
        assert name == "main_container"
        assert text == '<iframe src="https://www.claudeusercontent.com/artifact/abc-123-very-long-path"></iframe>'

    def test_container_can_be_excluded(self) -> None:
        html = _page("<main>" + "<p>navigation chrome</p>" * 20 + "</main>")
        assert locate_content(html, include_container=False) is None

    def test_earlier_locator_wins(self) -> None:
        payload = json.dumps({"code": _COMPONENT})
        html = _page(
            f'<script type="application/json">{payload}</script>'
            f"<textarea>{'const y = 2; ' * 10}</textarea>"
        )
        assert locate_content(html)[0] == "structured_data"

    def test_threshold_applies(self) -> None:
        html = _page('<div data-content="&lt;b&gt;short&lt;/b&gt;"></div>')
        assert locate_content(html, include_container=False) is None
        assert locate_content(html, min_length=5, include_container=False)[0] == "data_attribute"

    def test_short_data_attribute_does_not_hide_later_one(self) -> None:
        html = _page(
            '<span data-content="tiny"></span>'
            f'<div data-code="{_COMPONENT.replace(chr(39), "&#39;")}"></div>'
        )
        name, text = locate_content(html, include_container=False)
        assert name == "data_attribute"
        assert "useState" in text

    def test_empty_html(self) -> None:
        assert locate_content("") is None


class TestPageMetadata:
    def test_title_suffix_stripped(self) -> None:
        assert clean_title("Pomodoro Timer | Claude") == "Pomodoro Timer"
        assert clean_title("Pomodoro Timer - Claude") == "Pomodoro Timer"

    def test_meta_description(self) -> None:
        html = _page("<p>x</p>", head='<title>Timer | Claude</title>'
                     '<meta name="description" content="A focus timer.">')
        title, description = page_metadata(html)
        assert title == "Timer"
        assert description == "A focus timer."

    def test_generic_title_uses_heading(self) -> None:
        html = _page("<h1>Budget Planner</h1>", head="<title>Claude</title>")
        with patch("scout.scraper.locators.trafilatura.extract_metadata", return_value=None):
            title, description = page_metadata(html)
        assert title == "Budget Planner"
        assert description == ""

    def test_og_description_fallback(self) -> None:
        html = _page("", head='<title>X</title><meta property="og:description" content="OG text">')
        with patch("scout.scraper.locators.trafilatura.extract_metadata", return_value=None):
            assert page_metadata(html) == ("X", "OG text")

    def test_empty(self) -> None:
        assert page_metadata("") == ("", "")
