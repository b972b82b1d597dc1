"""Unit tests for admin token issuing and decoding."""

import pytest

from url_manager.core.exceptions import InvalidTokenError
from url_manager.core.security import TokenPayload, decode_token
from url_manager.scripts.issue_token import issue_token


class TestIssueToken:
    """Tests for issue_token."""

    @pytest.mark.unit
    def test_token_carries_permissions(self) -> None:
        token = issue_token("ops-bot", ["urls:read"], expires_minutes=5)

        payload = TokenPayload(decode_token(token))

        assert payload.subject == "ops-bot"
        assert payload.has_permission("urls:read")
        assert not payload.has_permission("urls:write")

    @pytest.mark.unit
    def test_wildcards(self) -> None:
        resource_wide = TokenPayload(decode_token(issue_token("a", ["urls:*"])))
        everything = TokenPayload(decode_token(issue_token("b", ["*"])))

        assert resource_wide.has_permission("urls:write")
        assert not resource_wide.has_permission("sitemap:write")
        assert everything.has_permission("sitemap:write")

    @pytest.mark.unit
    def test_tampered_token_rejected(self) -> None:
        token = issue_token("ops-bot", ["urls:*"])

        with pytest.raises(InvalidTokenError):
            decode_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))
