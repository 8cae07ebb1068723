"""Unit tests for the REST record store."""

import json
from unittest.mock import Mock

import pytest
import requests

from patient_dashboard.config import Config, StoreConfig, TransportConfig
from patient_dashboard.store import RestRecordStore
from patient_dashboard.utils.exceptions import StoreError, remediation_for


def make_response(status_code=200, payload=None, text=None):
    """Build a mock requests.Response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text if text is not None else json.dumps(payload)
    if payload is None and text is not None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def config():
    """Configuration pointing at a fake store."""
    return Config(
        store=StoreConfig(base_url="https://db.example.com/", table="patients"),
        transport=TransportConfig(timeout_connect=3, timeout_read=7),
    )


@pytest.fixture
def session(mocker):
    """Real requests.Session with request() patched."""
    session = requests.Session()
    mocker.patch.object(session, "request")
    return session


class TestRestRecordStoreSetup:
    """Tests for store construction."""

    def test_table_url(self, config, session):
        """Test rows live under /rest/v1/<table> with the trailing slash stripped."""
        # Act
        store = RestRecordStore(config, session=session)

        # Assert
        assert store.table_url == "https://db.example.com/rest/v1/patients"

    def test_api_key_headers(self, config, session):
        """Test the API key is sent as apikey and bearer token."""
        # Act
        RestRecordStore(config, api_key="secret", session=session)

        # Assert
        assert session.headers["apikey"] == "secret"
        assert session.headers["Authorization"] == "Bearer secret"

    def test_no_api_key_no_auth_header(self, config, session):
        """Test no auth headers are set without a key."""
        # Act
        RestRecordStore(config, session=session)

        # Assert
        assert "apikey" not in session.headers

    def test_plain_http_remote_warns(self, session, caplog):
        """Test plaintext HTTP to a remote host logs a security warning."""
        # Arrange
        config = Config(store=StoreConfig(base_url="http://db.example.com"))

        # Act
        RestRecordStore(config, session=session)
        RestRecordStore(Config(store=StoreConfig(base_url="http://127.0.0.1:8080")), session=session)

        # Assert
        assert caplog.text.count("SECURITY WARNING") == 1

    def test_default_session_created(self, config):
        """Test a configured session is built when none is passed."""
        # Act
        store = RestRecordStore(config)

        # Assert
        assert isinstance(store.session, requests.Session)
        store.close()


class TestRestRecordStoreInsert:
    """Tests for RestRecordStore.insert."""

    def test_insert_posts_payload_and_parses_row(self, config, session, make_record):
        """Test insert POSTs the draft and returns the stored row."""
        # Arrange
        draft = make_record(id=None, created_at=None)
        stored = dict(draft.to_payload(), id="abc", created_at="2026-10-18T12:00:00+00:00")
        session.request.return_value = make_response(201, [stored])
        store = RestRecordStore(config, session=session)

        # Act
        persisted = store.insert(draft)

        # Assert
        assert persisted.id == "abc"
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == "POST"
        assert url == "https://db.example.com/rest/v1/patients"
        assert kwargs["headers"]["Prefer"] == "return=representation"
        assert kwargs["timeout"] == (3, 7)
        body = json.loads(kwargs["data"])
        assert "id" not in body
        assert body["last_name"] == "Patient"

    def test_insert_accepts_single_object(self, config, session, make_record):
        """Test a bare object response is accepted as the inserted row."""
        # Arrange
        row = make_record().to_payload()
        session.request.return_value = make_response(201, row)
        store = RestRecordStore(config, session=session)

        # Act
        persisted = store.insert(make_record(id=None, created_at=None))

        # Assert
        assert persisted.id == row["id"]

    def test_insert_unexpected_shape(self, config, session, make_record):
        """Test an empty list response is a StoreError."""
        # Arrange
        session.request.return_value = make_response(201, [])
        store = RestRecordStore(config, session=session)

        # Act & Assert
        with pytest.raises(StoreError, match="unexpected insert response"):
            store.insert(make_record(id=None, created_at=None))

    def test_insert_http_error(self, config, session, make_record):
        """Test an HTTP error status becomes StoreError with the status code."""
        # Arrange
        session.request.return_value = make_response(401, {"message": "Invalid API key"})
        store = RestRecordStore(config, session=session)

        # Act & Assert
        with pytest.raises(StoreError) as exc_info:
            store.insert(make_record(id=None, created_at=None))
        assert exc_info.value.status_code == 401
        assert exc_info.value.operation == "insert"
        assert "API key" in remediation_for(exc_info.value)

    def test_insert_connection_error(self, config, session, make_record):
        """Test transport failures become StoreError chained to the cause."""
        # Arrange
        session.request.side_effect = requests.ConnectionError("refused")
        store = RestRecordStore(config, session=session)

        # Act & Assert
        with pytest.raises(StoreError) as exc_info:
            store.insert(make_record(id=None, created_at=None))
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
        assert exc_info.value.status_code is None
        assert "Cannot reach" in remediation_for(exc_info.value)

    def test_insert_timeout_remediation(self, config, session, make_record):
        """Test timeouts get timeout-specific guidance."""
        # Arrange
        session.request.side_effect = requests.Timeout("read timed out")
        store = RestRecordStore(config, session=session)

        # Act & Assert
        with pytest.raises(StoreError) as exc_info:
            store.insert(make_record(id=None, created_at=None))
        assert "timed out" in remediation_for(exc_info.value)


class TestRestRecordStoreSelect:
    """Tests for RestRecordStore.select_all."""

    def test_select_all_parses_rows(self, config, session, make_record):
        """Test every returned row becomes a PatientRecord."""
        # Arrange
        rows = [make_record().to_payload(), make_record().to_payload()]
        session.request.return_value = make_response(200, rows)
        store = RestRecordStore(config, session=session)

        # Act
        records = store.select_all()

        # Assert
        assert [r.id for r in records] == [rows[0]["id"], rows[1]["id"]]
        method, _ = session.request.call_args.args
        assert method == "GET"
        assert session.request.call_args.kwargs["params"] == {"select": "*"}

    def test_select_all_non_list(self, config, session):
        """Test a non-list body is a StoreError."""
        # Arrange
        session.request.return_value = make_response(200, {"rows": []})
        store = RestRecordStore(config, session=session)

        # Act & Assert
        with pytest.raises(StoreError, match="expected a list of rows"):
            store.select_all()

    def test_select_all_non_json(self, config, session):
        """Test an HTML error page with status 200 is a StoreError."""
        # Arrange
        session.request.return_value = make_response(200, text="<html>oops</html>")
        store = RestRecordStore(config, session=session)

        # Act & Assert
        with pytest.raises(StoreError, match="non-JSON"):
            store.select_all()

    def test_select_all_server_error(self, config, session):
        """Test 5xx responses are surfaced, not retried by the store."""
        # Arrange
        session.request.return_value = make_response(503, {"message": "down"})
        store = RestRecordStore(config, session=session)

        # Act & Assert
        with pytest.raises(StoreError) as exc_info:
            store.select_all()
        assert exc_info.value.status_code == 503
        assert session.request.call_count == 1
