"""Discovery package — source adapters and the candidate coordinator."""

from scout.discovery.candidates import CandidateRef, normalize_url, parse_candidate
from scout.discovery.coordinator import DiscoveryResult, discover

__all__ = ["CandidateRef", "normalize_url", "parse_candidate", "DiscoveryResult", "discover"]
