"""Unit tests for blogcms.core.session: token extraction and cookie set/clear symmetry."""

import unittest

from starlette.responses import Response

from blogcms.core.session import (
    bearer_from_authorization,
    cookie_attributes,
    cookie_from_header,
    clear_session_cookies,
    csrf_tokens_match,
    extract_token,
    set_session_cookies,
)
from tests.helpers import make_settings, parse_set_cookie


def _cookies(response: Response) -> dict[str, tuple[str, dict[str, str]]]:
    out = {}
    for header in response.headers.getlist("set-cookie"):
        name, value, attrs = parse_set_cookie(header)
        out[name] = (value, attrs)
    return out


class TestCookieFromHeader(unittest.TestCase):
    def test_finds_named_cookie(self) -> None:
        header = "theme=dark; access_token=abc.def; csrf_token=xyz"
        self.assertEqual(cookie_from_header(header, "access_token"), "abc.def")
        self.assertEqual(cookie_from_header(header, "csrf_token"), "xyz")

    def test_does_not_match_suffix(self) -> None:
        self.assertIsNone(cookie_from_header("my_access_token=nope", "access_token"))

    def test_url_decoded(self) -> None:
        self.assertEqual(cookie_from_header("access_token=a%2Bb", "access_token"), "a+b")

    def test_missing(self) -> None:
        self.assertIsNone(cookie_from_header(None, "access_token"))
        self.assertIsNone(cookie_from_header("", "access_token"))


class TestBearer(unittest.TestCase):
    def test_parses_scheme_case_insensitively(self) -> None:
        self.assertEqual(bearer_from_authorization("Bearer tok"), "tok")
        self.assertEqual(bearer_from_authorization("bearer  tok "), "tok")

    def test_rejects_other_schemes(self) -> None:
        self.assertIsNone(bearer_from_authorization("Basic dXNlcjpwYXNz"))
        self.assertIsNone(bearer_from_authorization("Bearer"))
        self.assertIsNone(bearer_from_authorization(None))


class TestExtractToken(unittest.TestCase):
    def test_header_only_mode_ignores_cookie(self) -> None:
        settings = make_settings(AUTH_COOKIE_ENABLED=False)
        token = extract_token(
            cookie_header="access_token=from-cookie",
            authorization=None,
            settings=settings,
        )
        self.assertIsNone(token)

    def test_cookie_preferred_in_cookie_mode(self) -> None:
        settings = make_settings(AUTH_COOKIE_ENABLED=True)
        token = extract_token(
            cookie_header="access_token=from-cookie",
            authorization="Bearer from-header",
            settings=settings,
        )
        self.assertEqual(token, "from-cookie")

    def test_header_fallback_in_cookie_mode(self) -> None:
        settings = make_settings(AUTH_COOKIE_ENABLED=True)
        token = extract_token(cookie_header=None, authorization="Bearer from-header", settings=settings)
        self.assertEqual(token, "from-header")


class TestSessionCookies(unittest.TestCase):
    """Clear must mirror set, or the browser keeps the old cookie."""

    def setUp(self) -> None:
        self.settings = make_settings(
            AUTH_COOKIE_ENABLED=True,
            AUTH_COOKIE_SAMESITE="strict",
            AUTH_COOKIE_SECURE=True,
            AUTH_COOKIE_DOMAIN="example.com",
        )

    def test_noop_when_cookie_mode_off(self) -> None:
        response = Response()
        settings = make_settings(AUTH_COOKIE_ENABLED=False)
        self.assertIsNone(set_session_cookies(response, "tok", remember=True, settings=settings))
        clear_session_cookies(response, settings=settings)
        self.assertEqual(response.headers.getlist("set-cookie"), [])

    def test_session_cookie_without_remember(self) -> None:
        response = Response()
        csrf = set_session_cookies(response, "tok", remember=False, settings=self.settings)
        cookies = _cookies(response)
        value, attrs = cookies["access_token"]
        self.assertEqual(value, "tok")
        self.assertNotIn("max-age", attrs)
        self.assertIn("httponly", attrs)
        csrf_value, csrf_attrs = cookies["csrf_token"]
        self.assertEqual(csrf_value, csrf)
        self.assertNotIn("httponly", csrf_attrs)

    def test_remember_sets_max_age(self) -> None:
        response = Response()
        set_session_cookies(response, "tok", remember=True, settings=self.settings)
        _, attrs = _cookies(response)["access_token"]
        self.assertEqual(attrs["max-age"], str(self.settings.AUTH_COOKIE_REMEMBER_MAX_AGE))

    def test_clear_uses_same_attributes(self) -> None:
        set_response = Response()
        set_session_cookies(set_response, "tok", remember=True, settings=self.settings)
        clear_response = Response()
        clear_session_cookies(clear_response, settings=self.settings)
        set_cookies = _cookies(set_response)
        cleared = _cookies(clear_response)
        for name in ("access_token", "csrf_token"):
            _, set_attrs = set_cookies[name]
            value, clear_attrs = cleared[name]
            self.assertIn(value, ("", '""'))
            self.assertEqual(clear_attrs["max-age"], "0")
            for attr in ("domain", "path", "samesite", "secure", "httponly"):
                self.assertEqual(set_attrs.get(attr), clear_attrs.get(attr), (name, attr))

    def test_cookie_attributes_from_settings(self) -> None:
        attrs = cookie_attributes(self.settings)
        self.assertEqual(attrs.samesite, "strict")
        self.assertTrue(attrs.secure)
        self.assertEqual(attrs.domain, "example.com")
        self.assertEqual(attrs.path, "/")


class TestCsrfMatch(unittest.TestCase):
    def test_match(self) -> None:
        self.assertTrue(csrf_tokens_match("abc", "abc"))
        self.assertFalse(csrf_tokens_match("abc", "abd"))
        self.assertFalse(csrf_tokens_match(None, "abc"))
        self.assertFalse(csrf_tokens_match("", ""))
