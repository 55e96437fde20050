"""
Dependency provisioning.

This package handles:
1. Downloading artifacts and their published sha512 digests
2. Verifying and persisting artifacts, quarantining rejected payloads
3. Fanning downloads out over background threads and joining on all of them
"""

from .checksum import compute_digest, digests_match
from .downloader import DependencyDownloader
from .fetcher import ArtifactFetcher

__all__ = ["ArtifactFetcher", "DependencyDownloader", "compute_digest", "digests_match"]
