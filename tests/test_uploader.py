"""Tests for uploaders."""

from unittest.mock import patch

import pytest

from shellrun.uploader import NoOpUploader, S3Uploader, Uploader


class TestS3Uploader:
    """Tests for the boto3-backed uploader."""

    def test_is_an_uploader(self):
        assert isinstance(S3Uploader(), Uploader)
        assert isinstance(NoOpUploader(), Uploader)

    def test_put_object(self, tmp_path):
        source = tmp_path / "a.png"
        source.write_bytes(b"png")

        with patch("boto3.client") as client:
            S3Uploader("AKIA", "shh", "eu-west-1").put_object(source, "bucket", "thumbs/a.png")

        client.assert_called_once_with(
            "s3",
            region_name="eu-west-1",
            aws_access_key_id="AKIA",
            aws_secret_access_key="shh",
        )
        client.return_value.upload_file.assert_called_once_with(str(source), "bucket", "thumbs/a.png")

    def test_default_credential_chain(self):
        with patch("boto3.client") as client:
            S3Uploader().put_object("/tmp/x", "bucket", "x")

        client.assert_called_once_with("s3")

    def test_client_is_reused(self):
        with patch("boto3.client") as client:
            uploader = S3Uploader()
            uploader.put_object("/tmp/x", "bucket", "x")
            uploader.put_object("/tmp/y", "bucket", "y")

        assert client.call_count == 1

    def test_setters_reset_client(self):
        with patch("boto3.client") as client:
            uploader = S3Uploader()
            uploader.put_object("/tmp/x", "bucket", "x")
            uploader.set_region("us-west-2").put_object("/tmp/x", "bucket", "x")

        assert client.call_count == 2
        assert client.call_args.kwargs == {"region_name": "us-west-2"}

    def test_errors_propagate(self):
        with patch("boto3.client") as client:
            client.return_value.upload_file.side_effect = RuntimeError("AccessDenied")
            with pytest.raises(RuntimeError, match="AccessDenied"):
                S3Uploader().put_object("/tmp/x", "bucket", "x")


class TestNoOpUploader:
    """Tests for the recording uploader."""

    def test_records_calls(self):
        uploader = NoOpUploader().set_credentials("k", "s").set_region("r")

        uploader.put_object("/tmp/a", "b", "c")

        assert (uploader.key, uploader.secret, uploader.region) == ("k", "s", "r")
        assert uploader.uploads == [("/tmp/a", "b", "c")]
