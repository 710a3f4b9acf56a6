"""
Tests for cursor token encoding.

Run with: pytest src/snapstore/pagination/cursor_test.py -v
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest

from snapstore.errors import InvalidCursorError
from snapstore.pagination.cursor import decode_cursor, encode_cursor


class TestEncodeCursor:
    """Tests for encode_cursor()"""

    def test_token_is_url_safe_and_unpadded(self):
        token = encode_cursor(["a/b?c", 10**12])

        assert "=" not in token
        assert "+" not in token
        assert "/" not in token

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            encode_cursor([object()])

    @pytest.mark.parametrize("values", [
        [1, 2],
        ["draft", None],
        [datetime(2024, 1, 1, 12, 30, 15), 7],
        [date(2024, 2, 29), "x"],
        [Decimal("10.25"), UUID("12345678-1234-5678-1234-567812345678")],
    ])
    def test_values_keep_their_types(self, values):
        decoded = decode_cursor(encode_cursor(values))

        assert decoded == values
        assert [type(v) for v in decoded] == [type(v) for v in values]


class TestDecodeCursor:
    """Tests for decode_cursor()"""

    @pytest.mark.parametrize("token", [
        "not base64 at all!",
        "e30",      # {} - valid JSON, not a list
        "Zm9v",     # foo - not JSON
        "",
    ])
    def test_invalid_token_raises(self, token):
        with pytest.raises(InvalidCursorError):
            decode_cursor(token)
