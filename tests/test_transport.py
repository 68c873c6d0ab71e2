"""
Tests for jarstore transport.

``requests`` is replaced by a mocked session; no network access.
"""

import pytest
import requests
from unittest.mock import MagicMock

from jarstore.common.exceptions import TransportError
from jarstore.transport import Transport

URL = "https://example.test/file"


def _response(content=b"", status=200, chunks=None):
    response = MagicMock()
    response.content = content
    response.status_code = status
    response.iter_content.return_value = chunks if chunks is not None else [content]
    if status >= 400:
        error = requests.exceptions.HTTPError(f"{status} Error")
        error.response = response
        response.raise_for_status.side_effect = error
    return response


def _transport(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return Transport(session=session), session


class TestFetch:

    @pytest.mark.unit
    def test_fetch_bytes(self):
        transport, session = _transport(_response(b"data"))
        assert transport.fetch_bytes(URL) == b"data"
        session.get.assert_called_once_with(URL, timeout=None, stream=False)

    @pytest.mark.unit
    def test_timeout_passed_through(self):
        session = MagicMock()
        session.get.return_value = _response(b"")
        Transport(timeout=5.0, session=session).fetch_bytes(URL)
        assert session.get.call_args[1]["timeout"] == 5.0

    @pytest.mark.unit
    def test_http_error(self):
        transport, _ = _transport(_response(status=404))
        with pytest.raises(TransportError) as exc_info:
            transport.fetch_bytes(URL)
        assert exc_info.value.details["reason"] == "HTTP 404"

    @pytest.mark.unit
    def test_connection_error(self):
        transport, _ = _transport(error=requests.ConnectionError("no route"))
        with pytest.raises(TransportError, match="no route"):
            transport.fetch_bytes(URL)

    @pytest.mark.unit
    def test_fetch_json(self):
        transport, _ = _transport(_response(b'{"apps": []}'))
        assert transport.fetch_json(URL) == {"apps": []}

    @pytest.mark.unit
    def test_fetch_json_invalid(self):
        transport, _ = _transport(_response(b"<html>"))
        with pytest.raises(TransportError, match="invalid JSON"):
            transport.fetch_json(URL)


class TestDownloadFile:

    @pytest.mark.unit
    def test_writes_chunks(self, tmp_path):
        transport, session = _transport(_response(chunks=[b"ab", b"", b"cd"]))
        dest = transport.download_file(URL, tmp_path / "out.bin")
        assert dest.read_bytes() == b"abcd"
        assert session.get.call_args[1]["stream"] is True

    @pytest.mark.unit
    def test_error_before_writing(self, tmp_path):
        transport, _ = _transport(_response(status=500))
        with pytest.raises(TransportError):
            transport.download_file(URL, tmp_path / "out.bin")
        assert not (tmp_path / "out.bin").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
