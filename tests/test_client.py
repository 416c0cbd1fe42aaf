import os
import sys
import tempfile
import unittest
from unittest import mock

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from client import BackupClient


class ClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.client = BackupClient(base_url="http://testserver/")

    @mock.patch("client.requests.get")
    def test_download_backup(self, get) -> None:
        get.return_value = mock.Mock(content=b'{"version": "1.0"}', headers={"X-Record-Count": "6"})
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "backup.json")
            count = self.client.download_backup(path)
            with open(path, "rb") as f:
                self.assertEqual(f.read(), b'{"version": "1.0"}')
        self.assertEqual(count, 6)
        get.assert_called_once_with("http://testserver/backup/export")

    @mock.patch("client.requests.post")
    def test_upload_backup(self, post) -> None:
        post.return_value = mock.Mock()
        post.return_value.json.return_value = {"status": "imported", "record_count": 2}
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "backup.json")
            with open(path, "wb") as f:
                f.write(b"{}")
            result = self.client.upload_backup(path, replace=True)
        self.assertEqual(result["record_count"], 2)
        args, kwargs = post.call_args
        self.assertEqual(args[0], "http://testserver/backup/import")
        self.assertEqual(kwargs["params"], {"replace": "true"})
        self.assertEqual(kwargs["data"], b"{}")


if __name__ == "__main__":
    unittest.main()
