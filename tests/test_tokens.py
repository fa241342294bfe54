import re
from urllib.parse import quote, urlparse

from academy.services.tokens import build_invite_url, generate_invitation_token

URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


class TestTokenGeneration:
    def test_tokens_use_url_safe_alphabet(self):
        for _ in range(50):
            token = generate_invitation_token()
            assert URL_SAFE.match(token)
            assert "=" not in token
            assert "+" not in token
            assert "/" not in token

    def test_tokens_need_no_percent_encoding(self):
        token = generate_invitation_token()
        assert quote(token, safe="") == token

    def test_tokens_are_unique(self):
        tokens = {generate_invitation_token() for _ in range(200)}
        assert len(tokens) == 200

    def test_tokens_have_fixed_length(self):
        lengths = {len(generate_invitation_token()) for _ in range(50)}
        # 32 random bytes, base64url without padding
        assert lengths == {43}

    def test_length_follows_entropy_size(self):
        assert len(generate_invitation_token(48)) == 64


class TestInviteUrl:
    def test_token_round_trips_through_invite_path(self):
        token = generate_invitation_token()
        url = build_invite_url(token, "http://localhost:3000")

        parsed = urlparse(url)
        assert parsed.path == f"/invite/{token}"
        assert parsed.path.split("/")[-1] == token

    def test_trailing_slash_on_base_url_is_ignored(self):
        assert build_invite_url("abc", "https://academy.example/") == "https://academy.example/invite/abc"
