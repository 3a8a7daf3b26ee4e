"""
Tests for the third-party detection client and error classification
"""
import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'backend'))

from external_api import (
    APIError, ExternalDetectionClient, UpstreamMisconfigured, UpstreamNetworkError,
    UpstreamRateLimited, UpstreamServerError, UpstreamTimeout, UpstreamUnknownError,
    classify_api_error, error_for_status, estimate_cost, is_retryable_error,
)


def make_response(status: int, payload=None, text: str = '') -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.encoding = 'utf-8'
    response._content = json.dumps(payload).encode() if payload is not None else text.encode()
    return response


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def session():
    session = requests.Session()
    session.request = Mock()
    return session


@pytest.fixture
def client(session, sleeps):
    return ExternalDetectionClient(
        gptzero_api_key='gptzero-key',
        huggingface_api_key='hf-key',
        timeout=5,
        max_retries=2,
        retry_delay=1.0,
        session=session,
        sleep=sleeps.append,
    )


class TestRetries:

    def test_transport_errors_retried_with_backoff(self, client, session, sleeps):
        ok = make_response(200, {})
        session.request.side_effect = [
            requests.ConnectionError('connection reset by peer'),
            requests.ConnectionError('connection reset by peer'),
            ok,
        ]

        assert client.request('POST', 'https://example.test') is ok
        assert session.request.call_count == 3
        assert sleeps == [1.0, 2.0]

    def test_retries_exhausted(self, client, session, sleeps):
        session.request.side_effect = requests.Timeout('read timed out')

        with pytest.raises(UpstreamTimeout) as exc:
            client.request('POST', 'https://example.test')

        assert session.request.call_count == 3
        assert sleeps == [1.0, 2.0]
        assert exc.value.retryable is True
        assert isinstance(exc.value.__cause__, requests.Timeout)

    def test_non_retryable_transport_error(self, client, session, sleeps):
        session.request.side_effect = requests.exceptions.InvalidURL('bad url')

        with pytest.raises(UpstreamUnknownError):
            client.request('POST', 'https://example.test')
        assert session.request.call_count == 1
        assert sleeps == []

    def test_timeout_always_passed(self, client, session):
        session.request.return_value = make_response(200, {})
        client.request('GET', 'https://example.test')
        assert session.request.call_args.kwargs['timeout'] == 5

    def test_error_status_not_retried(self, client, session):
        session.request.return_value = make_response(503, text='unavailable')
        response = client.request('POST', 'https://example.test')
        assert response.status_code == 503
        assert session.request.call_count == 1


class TestGPTZero:

    def test_success(self, client, session):
        session.request.return_value = make_response(200, {
            'documents': [{'completely_generated_prob': 0.92, 'predicted_class': 'ai'}],
        })

        data = client.detect_text_with_gptzero('some text')

        assert data == {'probability': 0.92, 'classification': 'ai'}
        kwargs = session.request.call_args.kwargs
        assert kwargs['headers']['x-api-key'] == 'gptzero-key'
        assert kwargs['json'] == {'document': 'some text'}

    def test_bad_key_is_misconfiguration(self, client, session):
        session.request.return_value = make_response(401, text='invalid key')

        with pytest.raises(UpstreamMisconfigured) as exc:
            client.detect_text_with_gptzero('some text')

        assert exc.value.retryable is False
        assert exc.value.status_code == 401
        assert 'GPTZero' in exc.value.message

    @pytest.mark.parametrize('status,error_type', [
        (429, UpstreamRateLimited),
        (500, UpstreamServerError),
        (503, UpstreamServerError),
        (418, UpstreamUnknownError),
    ])
    def test_failure_statuses(self, client, session, status, error_type):
        session.request.return_value = make_response(status, text='nope')
        with pytest.raises(error_type) as exc:
            client.detect_text_with_gptzero('some text')
        assert exc.value.retryable is True

    def test_malformed_body(self, client, session):
        session.request.return_value = make_response(200, {'documents': []})
        with pytest.raises(UpstreamUnknownError):
            client.detect_text_with_gptzero('some text')

    def test_non_json_body(self, client, session):
        session.request.return_value = make_response(200, text='<html>')
        with pytest.raises(UpstreamUnknownError):
            client.detect_text_with_gptzero('some text')

    def test_missing_key(self, session):
        client = ExternalDetectionClient(session=session)
        with pytest.raises(UpstreamMisconfigured):
            client.detect_text_with_gptzero('some text')
        session.request.assert_not_called()


class TestHuggingFace:

    def test_fake_label_score(self, client, session):
        session.request.return_value = make_response(200, [[
            {'label': 'Real', 'score': 0.2},
            {'label': 'Fake', 'score': 0.8},
        ]])

        data = client.detect_text_with_huggingface('some text')

        assert data['probability'] == 0.8
        assert data['model'] == 'roberta-base-openai-detector'
        headers = session.request.call_args.kwargs['headers']
        assert headers['Authorization'] == 'Bearer hf-key'

    def test_missing_label(self, client, session):
        session.request.return_value = make_response(200, [[{'label': 'Real', 'score': 1.0}]])
        with pytest.raises(UpstreamUnknownError):
            client.detect_text_with_huggingface('some text')

    def test_empty_list(self, client, session):
        session.request.return_value = make_response(200, [])
        with pytest.raises(UpstreamUnknownError):
            client.detect_text_with_huggingface('some text')


class TestConfiguration:

    def test_vendors(self, client):
        assert client.available_vendors == ['gptzero', 'huggingface']
        assert client.is_configured is True

    def test_no_keys_warns(self, session, caplog):
        client = ExternalDetectionClient(session=session)
        assert client.is_configured is False
        assert 'No detection API keys' in caplog.text

    def test_user_agent(self, client, session):
        assert session.headers['User-Agent'] == 'StopFakeAI-Backend/1.0'


class TestErrorClassification:

    @pytest.mark.parametrize('error,code,retryable', [
        (Exception('Request timeout after 45000ms'), 'TIMEOUT', True),
        (Exception('fetch failed'), 'NETWORK_ERROR', True),
        (Exception('Network unreachable'), 'NETWORK_ERROR', True),
        (Exception('GPTZero API error (401): bad key'), 'UNAUTHORIZED', False),
        (Exception('Forbidden'), 'UNAUTHORIZED', False),
        (Exception('429 Too Many Requests'), 'RATE_LIMIT', True),
        (Exception('Internal Server Error'), 'SERVER_ERROR', True),
        (Exception('HTTP 502'), 'SERVER_ERROR', True),
        (Exception('something odd'), 'UNKNOWN_ERROR', True),
        (requests.Timeout(), 'TIMEOUT', True),
        (requests.ConnectionError(), 'NETWORK_ERROR', True),
        (None, 'UNKNOWN_ERROR', True),
    ])
    def test_classify(self, error, code, retryable):
        classified = classify_api_error(error)
        assert isinstance(classified, APIError)
        assert classified.code == code
        assert classified.retryable is retryable

    def test_classified_errors_pass_through(self):
        error = UpstreamServerError('boom')
        assert classify_api_error(error) is error

    def test_statuses(self):
        assert classify_api_error(Exception('timeout')).status_code == 408
        assert classify_api_error(Exception('401')).status_code == 401
        assert classify_api_error(Exception('rate limit')).status_code == 429
        assert classify_api_error(Exception('503')).status_code == 500

    @pytest.mark.parametrize('status,error_type', [
        (401, UpstreamMisconfigured),
        (403, UpstreamMisconfigured),
        (408, UpstreamTimeout),
        (429, UpstreamRateLimited),
        (502, UpstreamServerError),
        (404, UpstreamUnknownError),
    ])
    def test_error_for_status(self, status, error_type):
        assert isinstance(error_for_status(status, 'msg'), error_type)

    def test_is_retryable(self):
        assert is_retryable_error(requests.Timeout()) is True
        assert is_retryable_error(Exception('Connection reset by peer')) is True
        assert is_retryable_error(Exception('invalid api key')) is False

    def test_error_dict(self):
        data = UpstreamNetworkError().to_dict()
        assert data['success'] is False
        assert data['code'] == 'NETWORK_ERROR'
        assert data['retryable'] is True


class TestCost:

    def test_api_cost(self):
        assert estimate_cost(1000, 'api') == pytest.approx(0.15)

    def test_local_methods_are_free(self):
        assert estimate_cost(1000, 'pattern') == 0.0
        assert estimate_cost(1000, 'cache') == 0.0
