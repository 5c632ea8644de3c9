"""Integration tests against the real validation services.

These tests upload documents to the W3C services and run the locally installed
amphtml-validator, so they're skipped by default.
Run with: ENABLE_INTEGRATION_TESTS=true pytest src/validate_page/validator

HTTP exchanges are recorded to cassettes (see conftest.py) so that repeated
runs don't hit the services.

These tests may fail if:
- A service is down or slow
- A service changes its results page or messages (expected over time)
"""

import os
import shutil

import pytest

from validate_page.validator.amp import AMP_EXECUTABLE
from validate_page.validator.client import DocumentValidator
from validate_page.validator.models import FileType, Severity

ENABLE_INTEGRATION_TESTS = (
    os.getenv("ENABLE_INTEGRATION_TESTS", "false").lower() == "true"
)

pytestmark = pytest.mark.skipif(
    not ENABLE_INTEGRATION_TESTS,
    reason="Integration tests disabled - set ENABLE_INTEGRATION_TESTS=true to enable",
)

requires_amp = pytest.mark.skipif(
    shutil.which(AMP_EXECUTABLE) is None, reason=f"{AMP_EXECUTABLE} not installed"
)

VALID_HTML = b"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>The title</title>
  </head>
  <body>Here's some text.</body>
</html>
"""

INVALID_HTML = b"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>The title</title>
  </head>
  <body>
    <bogus></bogus>
  </body>
</html>
"""

# From https://amp.dev/documentation/guides-and-tutorials/start/create/basic_markup/.
MINIMAL_AMP = b"""<!doctype html>
<html amp lang="en">
  <head>
    <meta charset="utf-8">
    <script async src="https://cdn.ampproject.org/v0.js"></script>
    <title>Hello, AMPs</title>
    <link rel="canonical" href="https://amp.dev/documentation/guides-and-tutorials/start/create/basic_markup/">
    <meta name="viewport" content="width=device-width,minimum-scale=1,initial-scale=1">
    <script type="application/ld+json">
      {
        "@context": "http://schema.org",
        "@type": "NewsArticle",
        "headline": "Open-source framework for publishing content",
        "datePublished": "2015-10-07T12:02:41Z",
        "image": [
          "logo.jpg"
        ]
      }
    </script>
    <style amp-boilerplate>body{-webkit-animation:-amp-start 8s steps(1,end) 0s 1 normal both;-moz-animation:-amp-start 8s steps(1,end) 0s 1 normal both;-ms-animation:-amp-start 8s steps(1,end) 0s 1 normal both;animation:-amp-start 8s steps(1,end) 0s 1 normal both}@-webkit-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}@-moz-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}@-ms-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}@-o-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}@keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}</style><noscript><style amp-boilerplate>body{-webkit-animation:none;-moz-animation:none;-ms-animation:none;animation:none}</style></noscript>
  </head>
  <body>
    <h1>Welcome to the mobile web</h1>
  </body>
</html>
"""

NON_AMP = MINIMAL_AMP.replace(b"<html amp", b"<html ", 1)


@pytest.fixture
def validator(http_client):
    with DocumentValidator(client=http_client) as v:
        yield v


@pytest.mark.vcr
def test_css_valid_stylesheet(validator):
    result = validator.css(
        b"\nbody {\n  background-color: white;\n  margin: 0;\n}\n",
        FileType.STYLESHEET,
    )
    assert result.issues == []
    assert result.inconsistency is None
    assert result.raw


@pytest.mark.vcr
def test_css_invalid_stylesheet(validator):
    result = validator.css(b"\nbody {\n  invalid-property: #aaa;\n}\n", FileType.STYLESHEET)
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert "Property invalid-property doesn't exist" in issue.message
    assert issue.line == 3
    assert issue.severity is Severity.ERROR
    assert result.inconsistency is None


@pytest.mark.vcr
def test_css_valid_html(validator):
    doc = VALID_HTML.replace(b"</title>", b"</title>\n<style>body{margin:0}</style>")
    result = validator.css(doc, FileType.HTML_DOC)
    assert result.issues == []
    assert result.inconsistency is None


@pytest.mark.vcr
def test_css_invalid_html(validator):
    doc = b"""
<html>
  <head>
    <meta charset="utf-8">
    <title>The title</title>
    <style>body{invalid-property:0}</style>
  </head>
  <body></body>
</html>
"""
    result = validator.css(doc, FileType.HTML_DOC)
    assert len(result.issues) == 1
    assert "Property invalid-property doesn't exist" in result.issues[0].message
    # The CSS validator doesn't provide columns.
    assert (result.issues[0].line, result.issues[0].column) == (6, 0)


@pytest.mark.vcr
def test_html_valid(validator):
    result = validator.html(VALID_HTML)
    assert result.issues == []
    assert result.inconsistency is None
    assert result.raw


@pytest.mark.vcr
def test_html_invalid(validator):
    result = validator.html(INVALID_HTML)
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert "Element bogus not allowed as child of element body" in issue.message
    assert (issue.line, issue.column) == (8, 11)
    assert result.inconsistency is None


@requires_amp
def test_amp_valid():
    result = DocumentValidator().amp(MINIMAL_AMP)
    assert result.issues == []
    assert result.inconsistency is None


@requires_amp
def test_amp_invalid():
    result = DocumentValidator().amp(NON_AMP + b"  <bogus></bogus>\n")
    assert len(result.issues) == 2

    missing, bogus = result.issues
    assert (missing.line, missing.column) == (2, 1)
    assert "mandatory attribute" in missing.message
    assert missing.code in ("5", "MANDATORY_ATTR_MISSING")
    # URLs seem likely to change, so just check that one was set.
    assert missing.url

    assert (bogus.line, bogus.column) == (26, 3)
    assert bogus.message == "The tag 'bogus' is disallowed."
    assert bogus.code in ("2", "DISALLOWED_TAG")


@requires_amp
def test_amp_files(tmp_path):
    good = tmp_path / "good.html"
    good.write_bytes(MINIMAL_AMP)
    bad = tmp_path / "bad.html"
    bad.write_bytes(NON_AMP)
    # amphtml-validator may run as a different user.
    tmp_path.chmod(0o755)

    result = DocumentValidator().amp_files([str(good), str(bad)])

    assert set(result.issues_by_path) == {str(good), str(bad)}
    assert result.issues_by_path[str(good)] == []
    assert len(result.issues_by_path[str(bad)]) == 1
    assert result.inconsistency is None
