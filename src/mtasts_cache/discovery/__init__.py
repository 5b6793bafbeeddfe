"""Policy discovery: DNS marker lookup and HTTPS policy retrieval."""
from mtasts_cache.discovery.fetcher import (
    HTTPSPolicyFetcher,
    PolicyFetcher,
    parse_media_type,
    policy_url,
)
from mtasts_cache.discovery.record import parse_dns_record
from mtasts_cache.discovery.resolver import DNSPythonResolver, DomainResolver

__all__ = [
    "HTTPSPolicyFetcher",
    "PolicyFetcher",
    "parse_media_type",
    "policy_url",
    "parse_dns_record",
    "DNSPythonResolver",
    "DomainResolver",
]
