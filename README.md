# awsbase

Building blocks for tools that configure AWS clients. The package makes no
AWS calls itself. Callers pass in their own IAM, STS and EC2 metadata
clients, and the package supplies the logic around them.

## Modules

- **`awsbase.diag`**: diagnostics. It provides `Severity`, the abstract
  `Diagnostic`, `ErrorDiagnostic`, `WarningDiagnostic` and
  `NativeErrorDiagnostic` (which wraps an exception). `Diagnostics` is an
  ordered collection that skips `None` and duplicates. It offers `add_error`,
  `add_warning`, `add_simple_error`, `append`, `contains`, `has_error`,
  `errors`, `warnings`, `errors_count` and `warnings_count`.
- **`awsbase.config`**: `Config`, `AssumeRole`, `AssumeRoleWithWebIdentity`,
  `ProxyMode` and `TransportOptions`. `Config` provides:
  - `validate_proxy_settings()`, which returns `Diagnostics` for proxy URLs
    that cannot be parsed and for an HTTP proxy with no HTTPS proxy;
  - `transport_options()`, which combines the configuration with the
    `HTTP_PROXY`, `HTTPS_PROXY` and `NO_PROXY` environment variables (or their
    lower-case forms). `TransportOptions.proxy_for(url)` then returns the proxy
    for a URL, or `None`;
  - `verify_account_id_allowed(account_id)`, which raises `ValueError` for a
    forbidden account or one missing from the allow list;
  - `custom_ca_bundle()`, `resolve_shared_config_files()` and
    `resolve_shared_credentials_files()`.

  `ec2_metadata_endpoint_mode_values()` lists `IPv4` and `IPv6`.
- **`awsbase.errors`**: the diagnostics `NoValidCredentialSourcesError`,
  `CannotAssumeRoleError` and `CannotAssumeRoleWithWebIdentityError`. It also
  has the checks `is_cannot_assume_role_error`,
  `is_no_valid_credential_sources_error` and
  `contains_no_valid_credential_sources_error`.
- **`awsbase.awsauth`**: finds the account ID and partition for a set of
  credentials. `get_account_id_and_partition` tries EC2 metadata (for EC2
  role credentials) or `iam:GetUser` first, then `sts:GetCallerIdentity`, then
  `iam:ListRoles`. If every lookup fails, it raises `AccountLookupError`.
  `parse_account_id_and_partition_from_arn` parses a single ARN.
- **`awsbase.endpoint_resolver`**: `credentials_endpoint_resolver(config)`
  returns an `Endpoint` for the IAM, SSO and STS endpoints that the
  configuration overrides. For any other service it raises
  `EndpointNotFoundError`.
- **`awsbase.resolvers`**: returns the first value that any configuration
  source in an ordered list provides. This covers FIPS, dual-stack, EC2
  metadata settings and retry attempts.
- **`awsbase.partitions`**: `Partition`, `Region` and `Service`, built from an
  endpoints JSON document (version 3) by `partitions_from_document` or
  `load_partitions`. `partition_for_region` returns the first partition that
  lists a region or matches its region pattern.
- **`awsbase.expand`**: `file_path` and `file_paths` expand `$VAR`, `${VAR}`
  and a leading `~`.
- **`awsbase.useragent`**: `UserAgentProduct`, `APNInfo` and
  `build_user_agent_string`.
- **`awsbase.request_logging`**: `DebugLogger` and `log_attributes`, which give
  the log fields for a request. `s3_attributes` and
  `serialize_delete_shorthand` cover S3 operations, and
  `uses_object_body_logger` reports which operations log their response
  bodies as S3 objects.
- **`awsbase.textutil`**: `first_upper`, `title` and `id_to_title` for turning
  identifiers into names.

## Examples

Collecting diagnostics:

```python
from awsbase.diag import Diagnostics

diags = Diagnostics()
diags.add_warning("Configuration conflict detected", "Profile overrides environment keys.")
diags.add_error("Cannot assume IAM Role", "IAM Role ARN not set in assume role 1 of 1")
diags.add_error("Cannot assume IAM Role", "IAM Role ARN not set in assume role 1 of 1")

assert diags.has_error()
assert diags.errors_count() == 1    # the duplicate was ignored
assert diags.warnings_count() == 1
```

Checking proxy settings and choosing a proxy:

```python
from awsbase.config import Config, ProxyMode

config = Config(http_proxy="http://proxy.test:1234", http_proxy_mode=ProxyMode.SEPARATE)
for d in config.validate_proxy_settings():
    print(d.severity, d.summary)

options = config.transport_options()
print(options.proxy_for("http://example.com"))   # http://proxy.test:1234
print(options.proxy_for("https://example.com"))  # None, unless HTTPS_PROXY is set
```

Parsing an ARN:

```python
from awsbase.awsauth import parse_account_id_and_partition_from_arn

account_id, partition = parse_account_id_and_partition_from_arn(
    "arn:aws:iam::123456789012:user/name"
)
```

Looking up the partition for a region:

```python
from awsbase.partitions import load_partitions, partition_for_region

partitions = load_partitions("endpoints.json")
partition = partition_for_region(partitions, "us-east-1")
if partition is not None:
    print(partition.id, partition.dns_suffix)
```

## What the package does not do

- It makes no requests to AWS, builds no credential providers and does not
  assume roles. The account lookups call clients that you supply.
- `transport_options()` returns settings only. It does not create an HTTP
  client.
- It ships no endpoints document. Pass your own to `load_partitions` or
  `partitions_from_document`.
- It has no command-line interface.

## Running the tests

```
pip install -e ".[test]"
pytest
```