"""
Artifact fetcher.

Retrieves one artifact and its published sha512 digest, verifies the payload
and persists it under the deterministic layout. A payload that fails
verification is quarantined next to the canonical path, never on it.
"""

import os
import pathlib
import threading
import time
from typing import Optional

import httpx

from scripthost.dependency_config import ResolvedDependency
from scripthost.dependency_downloader.checksum import compute_digest, digests_match, normalize_reference
from scripthost.dependency_models import MavenDependency
from scripthost.messages import ConsoleMessageType, ConsoleReporter
from scripthost.scripthost_exceptions import ChecksumMismatchError, FetchError


class ArtifactFetcher:
    """
    Downloads and verifies single artifacts. Safe to share between threads.
    """

    def __init__(
        self,
        reporter: ConsoleReporter,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            reporter: Console reporter for progress messages
            client: HTTP client to use; one is created (and owned) when omitted
            timeout: Seconds allowed for one whole fetch, artifact and checksum
                together. Also the per-request timeout of an owned client.
        """
        self.reporter = reporter
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def fetch(self, dependency: MavenDependency, destination_path: pathlib.Path) -> ResolvedDependency:
        """
        Provision one dependency at ``destination_path``.

        An existing file at the destination is reused as-is, without checking
        its digest again.

        Raises:
            ChecksumMismatchError: If the payload does not match the published digest
            FetchError: On any network or file-system failure
        """
        pairs = dependency.message_pairs()

        if destination_path.is_file():
            self.reporter.send_by_key(ConsoleMessageType.NORMAL, "maven-dependency-exists", *pairs)
            return ResolvedDependency(dependency=dependency, local_file=destination_path)

        self.reporter.send_by_key(ConsoleMessageType.NORMAL, "maven-dependency-start-download", *pairs)

        deadline = time.monotonic() + self.timeout
        payload = self._get(dependency, dependency.download_url, deadline)
        reference = self._get(dependency, dependency.checksum_url, deadline).decode("utf-8", errors="replace")

        if digests_match(payload, reference):
            self._write(dependency, destination_path, payload)
            self.reporter.send_by_key(ConsoleMessageType.NORMAL, "libs-download-sha512-done", *pairs)
            return ResolvedDependency(dependency=dependency, local_file=destination_path)

        actual = compute_digest(payload)
        expected = normalize_reference(reference)
        rejected_path = destination_path.with_name(f"{destination_path.name}_{actual}")
        # Same name means same digest, hence same bytes.
        if not rejected_path.exists():
            self._write(dependency, rejected_path, payload)

        self.reporter.send_by_key(
            ConsoleMessageType.ERROR,
            "libs-download-sha512-error",
            *pairs,
            "<expected_sha512>", expected,
            "<err_sha512>", actual,
            "<new_file_name>", rejected_path.name,
        )
        raise ChecksumMismatchError(
            dependency,
            f"Checksum mismatch for {dependency.coordinates}: expected {expected}, got {actual}",
            expected_digest=expected,
            actual_digest=actual,
            rejected_path=str(rejected_path),
        )

    def _get(self, dependency: MavenDependency, url: str, deadline: float) -> bytes:
        """
        Read the body of ``url``, giving up once ``deadline`` (a
        ``time.monotonic()`` value) has passed, even while bytes keep arriving.
        """
        chunks = []
        try:
            with self.client.stream("GET", url, timeout=self._remaining(dependency, url, deadline)) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    self._remaining(dependency, url, deadline)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                dependency, f"{url} answered with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(dependency, f"Unable to retrieve {url}: {e}") from e
        return b"".join(chunks)

    def _remaining(self, dependency: MavenDependency, url: str, deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FetchError(dependency, f"Unable to retrieve {url} within {self.timeout} seconds")
        return remaining

    def _write(self, dependency: MavenDependency, path: pathlib.Path, payload: bytes) -> None:
        """
        Write ``payload`` to ``path`` through a temporary sibling so that a
        partially written file never appears under the final name.
        """
        temp_path = path.with_name(f"{path.name}.part-{os.getpid()}-{threading.get_ident()}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(payload)
            os.replace(temp_path, path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise FetchError(dependency, f"Unable to write {path}: {e}") from e
