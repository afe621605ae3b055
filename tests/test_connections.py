"""
Tests for connection modules.

Tests for the paramiko-backed SFTP session and the boto3-backed S3 uploader.
"""

import io
import stat
from unittest.mock import MagicMock, patch

import paramiko
import pytest

from sftp_poller.config.settings import ConnectionParameters, S3ClientOptions
from sftp_poller.exceptions import ConfigurationError, TransportError

PARAMS = ConnectionParameters(host="sftp.example.com", port=2222, username="poller", private_key="key")


def _attr(name, mode, size=0, mtime=None):
    attr = paramiko.SFTPAttributes()
    attr.filename = name
    attr.st_mode = mode
    attr.st_size = size
    attr.st_mtime = mtime
    return attr


class TestPrivateKey:
    """Tests for load_private_key()."""

    def test_loads_rsa_key_material(self):
        from sftp_poller.connections.sftp import load_private_key

        key = paramiko.RSAKey.generate(2048)
        buffer = io.StringIO()
        key.write_private_key(buffer)

        loaded = load_private_key(buffer.getvalue())

        assert isinstance(loaded, paramiko.RSAKey)
        assert loaded.get_fingerprint() == key.get_fingerprint()

    def test_invalid_material(self):
        from sftp_poller.connections.sftp import load_private_key

        with pytest.raises(TransportError, match="Unable to parse SFTP private key"):
            load_private_key("not a key")


class TestEntryType:
    """Tests for st_mode -> single-character kind."""

    def test_kinds(self):
        from sftp_poller.connections.sftp import entry_type

        assert entry_type(stat.S_IFREG | 0o644) == "-"
        assert entry_type(stat.S_IFDIR | 0o755) == "d"
        assert entry_type(stat.S_IFLNK | 0o777) == "l"
        assert entry_type(stat.S_IFIFO | 0o644) == "?"
        assert entry_type(None) == "?"


class TestSFTPConnection:
    """Tests for SFTPConnection."""

    def test_not_connected_until_connect(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        assert conn._client is None
        with pytest.raises(TransportError, match="not connected"):
            conn.list("/in")

    def test_default_timeout(self):
        from sftp_poller.connections.sftp import SFTPConnection

        assert SFTPConnection(PARAMS).connect_timeout_s == 30.0

    @patch("sftp_poller.connections.sftp.paramiko.SFTPClient.from_transport")
    @patch("sftp_poller.connections.sftp.paramiko.Transport")
    @patch("sftp_poller.connections.sftp.socket.create_connection")
    @patch("sftp_poller.connections.sftp.load_private_key")
    def test_connect(self, mock_key, mock_socket, mock_transport_cls, mock_from_transport):
        from sftp_poller.connections.sftp import SFTPConnection

        pkey = MagicMock()
        mock_key.return_value = pkey
        sftp_client = MagicMock()
        mock_from_transport.return_value = sftp_client

        conn = SFTPConnection(PARAMS)
        client = conn.connect()

        assert client is sftp_client
        mock_key.assert_called_once_with("key")
        mock_socket.assert_called_once_with(("sftp.example.com", 2222), timeout=30.0)
        transport = mock_transport_cls.return_value
        mock_transport_cls.assert_called_once_with(mock_socket.return_value)
        transport.connect.assert_called_once_with(username="poller", pkey=pkey)
        assert transport.banner_timeout == 30.0
        assert transport.auth_timeout == 30.0

        # connect is idempotent
        assert conn.connect() is sftp_client
        mock_socket.assert_called_once()

    @patch("sftp_poller.connections.sftp.paramiko.Transport")
    @patch("sftp_poller.connections.sftp.socket.create_connection")
    @patch("sftp_poller.connections.sftp.load_private_key")
    def test_auth_failure_raises_transport_error(self, mock_key, mock_socket, mock_transport_cls):
        from sftp_poller.connections.sftp import SFTPConnection

        transport = mock_transport_cls.return_value
        transport.connect.side_effect = paramiko.AuthenticationException("Authentication failed.")

        conn = SFTPConnection(PARAMS)
        with pytest.raises(TransportError, match="Authentication failed") as exc_info:
            conn.connect()

        assert exc_info.value.host == "sftp.example.com"
        assert isinstance(exc_info.value.__cause__, paramiko.AuthenticationException)
        transport.close.assert_called_once()
        assert conn._transport is None

    @patch("sftp_poller.connections.sftp.socket.create_connection")
    @patch("sftp_poller.connections.sftp.load_private_key")
    def test_socket_timeout_raises_transport_error(self, mock_key, mock_socket):
        from sftp_poller.connections.sftp import SFTPConnection

        mock_socket.side_effect = TimeoutError("timed out")

        with pytest.raises(TransportError, match="timed out"):
            SFTPConnection(PARAMS).connect()

    @patch("sftp_poller.connections.sftp.paramiko.Transport")
    @patch("sftp_poller.connections.sftp.socket.create_connection")
    @patch("sftp_poller.connections.sftp.load_private_key")
    def test_socket_closed_when_transport_setup_fails(self, mock_key, mock_socket, mock_transport_cls):
        from sftp_poller.connections.sftp import SFTPConnection

        mock_transport_cls.side_effect = paramiko.SSHException("Error reading SSH protocol banner")

        with pytest.raises(TransportError, match="protocol banner"):
            SFTPConnection(PARAMS).connect()

        mock_socket.return_value.close.assert_called_once()

    def test_list_maps_attributes(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        client = MagicMock()
        client.listdir_attr.return_value = [
            _attr("b.csv", stat.S_IFREG | 0o644, size=12, mtime=1_700_000_000),
            _attr("archive", stat.S_IFDIR | 0o755),
        ]
        conn._client = client

        entries = conn.list("/referwell/incoming")

        client.listdir_attr.assert_called_once_with("/referwell/incoming")
        assert [(e.name, e.type, e.size) for e in entries] == [("b.csv", "-", 12), ("archive", "d", 0)]
        assert entries[0].modified_at.year == 2023
        assert entries[1].modified_at is None

    def test_get_reads_into_memory(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        client = MagicMock()
        client.getfo.side_effect = lambda path, fl: fl.write(b"id,name\n")
        conn._client = client

        assert conn.get("/referwell/incoming/a.csv") == b"id,name\n"
        assert client.getfo.call_args.args[0] == "/referwell/incoming/a.csv"

    def test_rename(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        conn._client = MagicMock()

        conn.rename("/in/a.csv", "/out/a.csv")

        conn._client.rename.assert_called_once_with("/in/a.csv", "/out/a.csv")

    def test_close_releases_client_and_transport(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        client, transport = MagicMock(), MagicMock()
        conn._client, conn._transport = client, transport

        conn.close()

        client.close.assert_called_once()
        transport.close.assert_called_once()
        assert conn._client is None
        assert conn._transport is None

    def test_close_without_connect_is_safe(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        conn.close()
        conn.close()

    def test_close_releases_transport_when_client_close_fails(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        client, transport = MagicMock(), MagicMock()
        client.close.side_effect = OSError("socket closed")
        conn._client, conn._transport = client, transport

        with pytest.raises(OSError):
            conn.close()

        transport.close.assert_called_once()
        assert conn._transport is None

    def test_context_manager(self):
        from sftp_poller.connections.sftp import SFTPConnection

        conn = SFTPConnection(PARAMS)
        with patch.object(conn, "connect") as mock_connect, patch.object(conn, "close") as mock_close:
            with conn as c:
                assert c is conn
            mock_connect.assert_called_once()
            mock_close.assert_called_once()

    def test_repr_hides_key(self):
        from sftp_poller.connections.sftp import SFTPConnection

        assert repr(SFTPConnection(PARAMS)) == "SFTPConnection(host='sftp.example.com', port=2222)"


class TestS3Connection:
    """Tests for S3Connection."""

    def test_bucket_property(self):
        from sftp_poller.connections.s3 import S3Connection

        assert S3Connection("my-bucket").bucket == "my-bucket"

    def test_missing_bucket_raises_on_use(self):
        from sftp_poller.connections.s3 import S3Connection

        conn = S3Connection(None)
        with pytest.raises(ConfigurationError, match="SFTP_APPOINTMENTS_BUCKET"):
            _ = conn.bucket

    def test_client_lazy_initialization(self):
        from sftp_poller.connections.s3 import S3Connection

        conn = S3Connection("b")
        assert conn._client is None

        with patch("boto3.client") as mock_boto:
            mock_boto.return_value = MagicMock()
            _ = conn.client
            _ = conn.client
            mock_boto.assert_called_once_with("s3")
            assert conn._client is not None

    def test_client_with_local_endpoint(self):
        from sftp_poller.connections.s3 import S3Connection

        conn = S3Connection("b", S3ClientOptions(endpoint_url="http://localhost:4566", region="us-east-1"))

        with patch("boto3.client") as mock_boto:
            _ = conn.client

        args, kwargs = mock_boto.call_args
        assert args == ("s3",)
        assert kwargs["endpoint_url"] == "http://localhost:4566"
        assert kwargs["region_name"] == "us-east-1"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    def test_put_object(self):
        from sftp_poller.connections.s3 import S3Connection

        conn = S3Connection("appointments")
        conn._client = MagicMock()

        uri = conn.put_object(
            "sftp-appointments/x-a.csv",
            b"data",
            content_type="text/csv",
            metadata={"original-filename": "a.csv"},
        )

        assert uri == "s3://appointments/sftp-appointments/x-a.csv"
        conn._client.put_object.assert_called_once_with(
            Bucket="appointments",
            Key="sftp-appointments/x-a.csv",
            Body=b"data",
            ContentType="text/csv",
            Metadata={"original-filename": "a.csv"},
        )

    def test_put_object_without_metadata(self):
        from sftp_poller.connections.s3 import S3Connection

        conn = S3Connection("b")
        conn._client = MagicMock()

        conn.put_object("k", b"", content_type="text/csv")

        assert "Metadata" not in conn._client.put_object.call_args.kwargs

    def test_put_object_propagates_client_errors(self):
        from botocore.exceptions import ClientError

        from sftp_poller.connections.s3 import S3Connection

        conn = S3Connection("b")
        conn._client = MagicMock()
        conn._client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
        )

        with pytest.raises(ClientError):
            conn.put_object("k", b"x", content_type="text/csv")

    def test_context_manager_resets_client(self):
        from sftp_poller.connections.s3 import S3Connection

        conn = S3Connection("b")
        conn._client = MagicMock()

        with conn as c:
            assert c is conn

        assert conn._client is None
