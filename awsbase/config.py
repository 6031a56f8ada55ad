"""Client configuration, proxy settings and HTTP transport options."""

from __future__ import annotations

import ipaddress
import os
import ssl
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import Any, Optional
from urllib.parse import urlsplit

from awsbase.diag import Diagnostic, Diagnostics, WarningDiagnostic
from awsbase.expand import file_path, file_paths
from awsbase.useragent import APNInfo, UserAgentProduct

# Environment variable whose non-empty value is appended to the User-Agent header.
APPEND_USER_AGENT_ENV_VAR = "TF_APPEND_USER_AGENT"

# Retries for typically unrecoverable network errors, such as DNS failures.
MAX_NETWORK_RETRY_COUNT = 9

EC2_METADATA_ENDPOINT_MODE_IPV4 = "IPv4"
EC2_METADATA_ENDPOINT_MODE_IPV6 = "IPv6"

DEFAULT_MAX_IDLE_CONNS = 100
DEFAULT_MAX_IDLE_CONNS_PER_HOST = 10
DEFAULT_IDLE_CONN_TIMEOUT = timedelta(seconds=90)
DEFAULT_TLS_HANDSHAKE_TIMEOUT = timedelta(seconds=10)
DEFAULT_EXPECT_CONTINUE_TIMEOUT = timedelta(seconds=1)

_MISSING_HTTPS_PROXY_SUMMARY = "Missing HTTPS Proxy"
_MISSING_HTTPS_PROXY_PROBLEM = "An HTTP proxy was set but no HTTPS proxy was."
_MISSING_HTTPS_PROXY_RESOLUTION = "To specify no proxy for HTTPS, set the HTTPS to an empty string."

_DEFAULT_PORTS = {"http": "80", "https": "443", "socks5": "1080", "socks5h": "1080"}


def ec2_metadata_endpoint_mode_values() -> list[str]:
    """The accepted EC2 metadata endpoint modes."""
    return [EC2_METADATA_ENDPOINT_MODE_IPV4, EC2_METADATA_ENDPOINT_MODE_IPV6]


class ProxyMode(IntEnum):
    """How an HTTP proxy applies to HTTPS requests when no HTTPS proxy is set."""

    LEGACY = 0
    SEPARATE = 1


HTTP_PROXY_MODE_LEGACY = ProxyMode.LEGACY
HTTP_PROXY_MODE_SEPARATE = ProxyMode.SEPARATE


class _URLError(ValueError):
    """A URL that cannot be parsed."""


def _go_quote(text: str) -> str:
    escapes = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
    out = []
    for char in text:
        if char in escapes:
            out.append(escapes[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02x}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


def _parse_url(raw: str) -> None:
    """Validate a URL with the same rules as a strict URL parser; raise _URLError."""

    def fail(reason: str) -> None:
        raise _URLError(f"parse {_go_quote(raw)}: {reason}")

    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in raw):
        fail("net/url: invalid control character in URL")
    rest = raw.split("#", 1)[0]
    if rest == "*":
        return

    scheme = ""
    for index, char in enumerate(rest):
        if char.isascii() and char.isalpha():
            continue
        if char.isascii() and (char.isdigit() or char in "+-."):
            if index == 0:
                break
            continue
        if char == ":":
            if index == 0:
                fail("missing protocol scheme")
            scheme, rest = rest[:index].lower(), rest[index + 1:]
        break

    rest = rest.split("?", 1)[0]
    if not rest.startswith("/"):
        if scheme:
            return
        if ":" in rest.split("/", 1)[0]:
            fail("first path segment in URL cannot contain colon")
        return

    if (scheme or not rest.startswith("///")) and rest.startswith("//"):
        authority = rest[2:].split("/", 1)[0]
        host = authority.rsplit("@", 1)[-1]
        if host.startswith("["):
            end = host.find("]")
            if end < 0:
                fail("missing ']' in host")
            port = host[end + 1:]
        else:
            colon = host.rfind(":")
            port = host[colon:] if colon >= 0 else ""
        if port and (port[0] != ":" or not all(c.isdigit() for c in port[1:])):
            fail(f"invalid port {_go_quote(port)} after host")


def _getenv_any(*names: str) -> str:
    for name in names:
        value = os.environ.get(name, "")
        if value:
            return value
    return ""


def _normalize_proxy(proxy: str) -> Optional[str]:
    if not proxy:
        return None
    parts = urlsplit(proxy)
    if parts.scheme and parts.netloc:
        return proxy
    return "http://" + proxy


def _split_host_port(text: str) -> Optional[tuple[str, str]]:
    if text.startswith("["):
        end = text.find("]")
        if end < 0 or not text[end + 1:].startswith(":"):
            return None
        return text[1:end], text[end + 2:]
    if text.count(":") != 1:
        return None
    host, _, port = text.partition(":")
    return host, port


def _parse_ip(text: str):
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


class _NoProxy:
    """Matcher for the comma-separated hosts that bypass the proxy."""

    def __init__(self, spec: str) -> None:
        self.match_all = False
        self.networks: list = []
        self.ips: list[tuple[Any, str]] = []
        self.domains: list[tuple[str, str, bool]] = []
        for entry in spec.split(","):
            entry = entry.strip().lower()
            if not entry:
                continue
            if entry == "*":
                self.match_all = True
                return
            if "/" in entry:
                try:
                    self.networks.append(ipaddress.ip_network(entry, strict=False))
                    continue
                except ValueError:
                    pass
            split = _split_host_port(entry)
            if split is not None:
                host, port = split
                if not host:
                    continue
            else:
                host, port = entry, ""
            ip = _parse_ip(host)
            if ip is not None:
                self.ips.append((ip, port))
                continue
            if host.startswith("*."):
                host = host[1:]
            match_host = not host.startswith(".")
            if match_host:
                host = "." + host
            self.domains.append((host, port, match_host))

    def use_proxy(self, host: str, port: str) -> bool:
        if self.match_all:
            return False
        if host == "localhost":
            return False
        ip = _parse_ip(host)
        if ip is not None and ip.is_loopback:
            return False
        host = host.strip().lower()
        if ip is not None:
            if any(ip in network for network in self.networks):
                return False
            if any(ip == other and (not p or p == port) for other, p in self.ips):
                return False
        for suffix, p, match_host in self.domains:
            if (host.endswith(suffix) or (match_host and host == suffix[1:])) and (not p or p == port):
                return False
        return True


@dataclass(frozen=True)
class TransportOptions:
    """Settings for the HTTP transport used to reach AWS."""

    http_proxy: str = ""
    https_proxy: str = ""
    no_proxy: str = ""
    cgi: bool = False
    insecure_skip_verify: bool = False
    min_tls_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2
    max_idle_conns: int = DEFAULT_MAX_IDLE_CONNS
    max_idle_conns_per_host: int = DEFAULT_MAX_IDLE_CONNS_PER_HOST
    idle_conn_timeout: timedelta = DEFAULT_IDLE_CONN_TIMEOUT
    tls_handshake_timeout: timedelta = DEFAULT_TLS_HANDSHAKE_TIMEOUT
    expect_continue_timeout: timedelta = DEFAULT_EXPECT_CONTINUE_TIMEOUT
    force_attempt_http2: bool = True
    disable_keep_alives: bool = False

    def proxy_for(self, url: str) -> Optional[str]:
        """The proxy URL to use for a request URL, or None for a direct connection."""
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        proxy: Optional[str] = None
        if scheme == "https":
            proxy = _normalize_proxy(self.https_proxy)
        elif scheme == "http":
            proxy = _normalize_proxy(self.http_proxy)
            if proxy is not None and self.cgi:
                raise ValueError("refusing to use HTTP_PROXY value in CGI environment")
        if proxy is None:
            return None
        host = parts.hostname or ""
        try:
            port = str(parts.port) if parts.port is not None else _DEFAULT_PORTS.get(scheme, "")
        except ValueError:
            port = _DEFAULT_PORTS.get(scheme, "")
        if not _NoProxy(self.no_proxy).use_proxy(host, port):
            return None
        return proxy


@dataclass
class AssumeRole:
    """Settings for assuming an IAM role."""

    role_arn: str = ""
    duration: timedelta = timedelta(0)
    external_id: str = ""
    policy: str = ""
    policy_arns: list[str] = field(default_factory=list)
    session_name: str = ""
    source_identity: str = ""
    tags: dict[str, str] = field(default_factory=dict)
    transitive_tag_keys: list[str] = field(default_factory=list)


@dataclass
class AssumeRoleWithWebIdentity:
    """Settings for assuming an IAM role with a web identity token."""

    role_arn: str = ""
    duration: timedelta = timedelta(0)
    policy: str = ""
    policy_arns: list[str] = field(default_factory=list)
    session_name: str = ""
    web_identity_token: str = ""
    web_identity_token_file: str = ""

    def has_valid_token_source(self) -> bool:
        """Whether a token or a token file is set."""
        return bool(self.web_identity_token or self.web_identity_token_file)

    def get_identity_token(self) -> bytes:
        """The token itself, or the contents of the token file."""
        if self.web_identity_token:
            return self.web_identity_token.encode()
        try:
            path = file_path(self.web_identity_token_file)
        except ValueError as exc:
            raise ValueError(f"expanding web identity token file: {exc}") from exc
        try:
            with open(path, "rb") as handle:
                return handle.read()
        except OSError as exc:
            raise OSError(f"unable to read file at {path}: {exc}") from exc


@dataclass
class Config:
    """Configuration for creating AWS clients."""

    access_key: str = ""
    allowed_account_ids: list[str] = field(default_factory=list)
    apn_info: Optional[APNInfo] = None
    assume_role: list[AssumeRole] = field(default_factory=list)
    assume_role_with_web_identity: Optional[AssumeRoleWithWebIdentity] = None
    backoff: Any = None
    caller_documentation_url: str = ""
    caller_name: str = ""
    custom_ca_bundle_path: str = ""
    ec2_metadata_service_enable_state: int = 0
    ec2_metadata_service_endpoint: str = ""
    ec2_metadata_service_endpoint_mode: str = ""
    forbidden_account_ids: list[str] = field(default_factory=list)
    http_client: Any = None
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    iam_endpoint: str = ""
    insecure: bool = False
    logger: Any = None
    max_backoff: timedelta = timedelta(0)
    max_retries: int = 0
    no_proxy: str = ""
    profile: str = ""
    http_proxy_mode: ProxyMode = ProxyMode.LEGACY
    region: str = ""
    retry_mode: str = ""
    secret_key: str = ""
    shared_credentials_files: list[str] = field(default_factory=list)
    shared_config_files: list[str] = field(default_factory=list)
    skip_creds_validation: bool = False
    skip_requesting_account_id: bool = False
    sso_endpoint: str = ""
    sts_endpoint: str = ""
    sts_region: str = ""
    suppress_debug_log: bool = False
    token: str = ""
    token_bucket_rate_limiter_capacity: int = 0
    use_dual_stack_endpoint: bool = False
    use_fips_endpoint: bool = False
    user_agent: list[UserAgentProduct] = field(default_factory=list)

    def custom_ca_bundle(self) -> Optional[bytes]:
        """The contents of the custom CA bundle, or None when none is set."""
        if not self.custom_ca_bundle_path:
            return None
        try:
            path = file_path(self.custom_ca_bundle_path)
        except ValueError as exc:
            raise ValueError(f"expanding custom CA bundle: {exc}") from exc
        try:
            with open(path, "rb") as handle:
                return handle.read()
        except OSError as exc:
            raise OSError(f"reading custom CA bundle: {exc}") from exc

    def transport_options(self) -> TransportOptions:
        """Transport settings combining this configuration with the proxy environment."""
        if self.http_proxy is not None:
            try:
                _parse_url(self.http_proxy)
            except _URLError as exc:
                raise ValueError(f"parsing HTTP proxy URL: {exc}") from exc
        if self.https_proxy is not None:
            try:
                _parse_url(self.https_proxy)
            except _URLError as exc:
                raise ValueError(f"parsing HTTPS proxy URL: {exc}") from exc

        http_proxy = _getenv_any("HTTP_PROXY", "http_proxy")
        https_proxy = _getenv_any("HTTPS_PROXY", "https_proxy")
        no_proxy = _getenv_any("NO_PROXY", "no_proxy")
        cgi = os.environ.get("REQUEST_METHOD", "") != ""

        if self.http_proxy is not None:
            http_proxy = self.http_proxy
            if self.http_proxy_mode is ProxyMode.LEGACY and https_proxy == "":
                https_proxy = self.http_proxy
        if self.https_proxy is not None:
            https_proxy = self.https_proxy
        if self.no_proxy:
            no_proxy = self.no_proxy

        return TransportOptions(
            http_proxy=http_proxy,
            https_proxy=https_proxy,
            no_proxy=no_proxy,
            cgi=cgi,
            insecure_skip_verify=self.insecure,
        )

    def validate_proxy_settings(self) -> Diagnostics:
        """Diagnostics for unparsable proxies and a missing HTTPS proxy."""
        diags = Diagnostics()
        if self.http_proxy is not None:
            try:
                _parse_url(self.http_proxy)
            except _URLError as exc:
                diags.add_error("Invalid HTTP Proxy", f"Unable to parse URL: {exc}")
        if self.https_proxy is not None:
            try:
                _parse_url(self.https_proxy)
            except _URLError as exc:
                diags.add_error("Invalid HTTPS Proxy", f"Unable to parse URL: {exc}")

        if (
            self.http_proxy
            and self.https_proxy is None
            and os.environ.get("HTTPS_PROXY", "") == ""
            and os.environ.get("https_proxy", "") == ""
        ):
            if self.http_proxy_mode is ProxyMode.LEGACY:
                diags.append(_missing_https_proxy_legacy_warning(self.http_proxy))
            else:
                diags.append(_missing_https_proxy_warning())
        return diags

    def resolve_shared_config_files(self) -> list[str]:
        """The shared config file paths with variables and ``~`` expanded."""
        try:
            return file_paths(self.shared_config_files)
        except ValueError as exc:
            raise ValueError(f"expanding shared config files: {exc}") from exc

    def resolve_shared_credentials_files(self) -> list[str]:
        """The shared credentials file paths with variables and ``~`` expanded."""
        try:
            return file_paths(self.shared_credentials_files)
        except ValueError as exc:
            raise ValueError(f"expanding shared credentials files: {exc}") from exc

    def verify_account_id_allowed(self, account_id: str) -> None:
        """Raise ValueError if the account is forbidden or missing from the allow list."""
        if account_id in self.forbidden_account_ids:
            raise ValueError(f"AWS account ID not allowed: {account_id}")
        if self.allowed_account_ids and account_id not in self.allowed_account_ids:
            raise ValueError(f"AWS account ID not allowed: {account_id}")


def _missing_https_proxy_legacy_warning(proxy: str) -> Diagnostic:
    return WarningDiagnostic(
        _MISSING_HTTPS_PROXY_SUMMARY,
        f"{_MISSING_HTTPS_PROXY_PROBLEM} Using HTTP proxy {_go_quote(proxy)} for HTTPS requests. "
        f"This behavior may change in future versions.\n\n{_MISSING_HTTPS_PROXY_RESOLUTION}",
    )


def _missing_https_proxy_warning() -> Diagnostic:
    return WarningDiagnostic(
        _MISSING_HTTPS_PROXY_SUMMARY,
        f"{_MISSING_HTTPS_PROXY_PROBLEM}\n\n{_MISSING_HTTPS_PROXY_RESOLUTION}",
    )