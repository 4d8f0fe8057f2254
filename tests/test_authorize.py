import urllib.parse

from nscm.authorize import Connection, build_authorization_url


def test_build_authorization_url_contains_required_params(settings) -> None:
    url = build_authorization_url(Connection.GITHUB, settings, "challenge123")

    parsed = urllib.parse.urlparse(url)
    query = urllib.parse.parse_qs(parsed.query)

    assert parsed.scheme == "https"
    assert parsed.netloc == "auth.example.com"
    assert parsed.path == "/authorize"
    assert query == {
        "connection": ["github"],
        "audience": ["https://auth.example.com/userinfo"],
        "scope": ["email offline_access openid"],
        "device": ["nscm"],
        "response_type": ["code"],
        "client_id": ["client123"],
        "code_challenge": ["challenge123"],
        "code_challenge_method": ["S256"],
        "redirect_uri": ["https://example.com/callback"],
    }


def test_parameter_order(settings) -> None:
    url = build_authorization_url(Connection.GOOGLE, settings, "abc")
    keys = [k for k, _ in urllib.parse.parse_qsl(urllib.parse.urlparse(url).query)]

    assert keys == [
        "connection",
        "audience",
        "scope",
        "device",
        "response_type",
        "client_id",
        "code_challenge",
        "code_challenge_method",
        "redirect_uri",
    ]


def test_dynamic_values_are_percent_encoded(settings) -> None:
    url = build_authorization_url(Connection.GOOGLE, settings, "abc")

    assert "connection=google-oauth2" in url
    assert "scope=email%20offline_access%20openid" in url
    assert "redirect_uri=https%3A%2F%2Fexample.com%2Fcallback" in url
    assert "audience=https%3A%2F%2Fauth.example.com%2Fuserinfo" in url
    assert " " not in url
