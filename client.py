import requests


class BackupClient:
    """Simple REST client for the backup API."""

    def __init__(self, base_url: str = "http://localhost:8000") -> None:
        self.base_url = base_url.rstrip("/")

    def download_backup(self, path: str) -> int:
        """Save the server's backup document to ``path``; returns its record count."""
        resp = requests.get(f"{self.base_url}/backup/export")
        resp.raise_for_status()
        with open(path, "wb") as f:
            f.write(resp.content)
        return int(resp.headers.get("X-Record-Count", 0))

    def upload_backup(self, path: str, replace: bool = False) -> dict:
        with open(path, "rb") as f:
            data = f.read()
        resp = requests.post(
            f"{self.base_url}/backup/import",
            params={"replace": str(replace).lower()},
            data=data,
            headers={"Content-Type": "application/json"},
        )
        resp.raise_for_status()
        return resp.json()

    def summary(self) -> dict:
        resp = requests.get(f"{self.base_url}/summary")
        resp.raise_for_status()
        return resp.json()
