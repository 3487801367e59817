"""
Request construction tests (no transport involved)
"""

import io
import json

import pytest

from docker_client.request import (
    JSON_CONTENT_TYPE,
    TAR_CONTENT_TYPE,
    DaemonRequest,
    encode_query,
    expand_path,
    prepare
)


class TestExpandPath:
    """expand_path()"""

    def test_substitutes_parameters(self):
        assert expand_path('/containers/{id}/start', {'id': 'abc123'}) == '/containers/abc123/start'

    def test_quotes_values(self):
        assert expand_path('/containers/{id}/json', {'id': 'my app'}) == '/containers/my%20app/json'

    def test_keeps_repository_slashes(self):
        assert expand_path('/images/{name}/json', {'name': 'localhost:5000/app'}) == \
            '/images/localhost:5000/app/json'

    def test_missing_parameter(self):
        with pytest.raises(ValueError, match="'id'"):
            expand_path('/containers/{id}/start', {})

    def test_none_parameter(self):
        with pytest.raises(ValueError):
            expand_path('/containers/{id}/start', {'id': None})


class TestEncodeQuery:
    """encode_query()"""

    def test_none_values_are_omitted(self):
        assert encode_query({'tag': None, 'fromImage': 'ubuntu', 'registry': None}) == 'fromImage=ubuntu'

    def test_all_none_is_empty(self):
        assert encode_query({'name': None}) == ''

    def test_booleans(self):
        assert encode_query({'all': True, 'v': False}) == 'all=true&v=false'

    def test_structures_are_json(self):
        query = encode_query({'buildargs': {'A': '1'}})

        assert query == 'buildargs=%7B%22A%22%3A%20%221%22%7D'

    def test_values_are_quoted(self):
        assert encode_query({'m': 'fix bug&more'}) == 'm=fix%20bug%26more'


class TestDaemonRequest:
    """DaemonRequest"""

    def test_url_without_query(self):
        request = prepare('post', '/containers/{id}/kill', path_params={'id': 'abc'}, params={'signal': None})

        assert request.method == 'POST'
        assert request.url == '/containers/abc/kill'

    def test_url_with_query(self):
        request = prepare('GET', '/images/json', params={'all': False, 'filter': 'ubuntu'})

        assert request.url == '/images/json?all=false&filter=ubuntu'

    def test_no_body(self):
        body, headers = DaemonRequest('GET', '/info').encode_body()

        assert body is None
        assert headers == {}

    def test_json_body(self):
        body, headers = prepare('POST', '/containers/create', data={'Image': 'busybox'}).encode_body()

        assert json.loads(body) == {'Image': 'busybox'}
        assert headers['Content-Type'] == JSON_CONTENT_TYPE
        assert headers['Content-Length'] == str(len(body))

    def test_bytes_body_is_tar(self):
        body, headers = prepare('POST', '/build', data=b'tar-bytes').encode_body()

        assert body == b'tar-bytes'
        assert headers['Content-Type'] == TAR_CONTENT_TYPE
        assert headers['Content-Length'] == '9'

    def test_stream_body_is_passed_through(self):
        stream = io.BytesIO(b'0123456789')
        stream.seek(4)

        body, headers = prepare('POST', '/build', data=stream).encode_body()

        assert body is stream
        assert stream.tell() == 4
        assert headers['Content-Type'] == TAR_CONTENT_TYPE
        assert headers['Content-Length'] == '6'

    def test_explicit_content_type_wins(self):
        request = prepare('POST', '/build', data=b'x', headers={'Content-Type': 'application/x-tar'})

        _, headers = request.encode_body()

        assert headers['Content-Type'] == 'application/x-tar'
