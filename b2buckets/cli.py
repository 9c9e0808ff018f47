"""b2buckets CLI: bucket listing and offline rule checks from the command line.

Usage examples::

    b2buckets --config '{"capabilities": ["listBuckets"]}' list-buckets --all-types
    b2buckets delete-bucket 4a48fe8875c6214145260818
    b2buckets check-lifecycle Docs/ Docs/Photos/ Legal/
    b2buckets check-origins https://*.example.com https://www.example.com

``check-*`` commands need no credentials. Identity settings not given in
``--config`` are read from ``B2_ACCOUNT_ID``, ``B2_AUTHORIZATION_TOKEN``
and ``B2_API_URL``.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from b2buckets.base.exceptions import (
    B2BucketsError,
    FieldValidationError,
    StructuralValidationError,
)
from b2buckets.domain.bucket import Bucket
from b2buckets.domain.lifecycle import find_prefix_conflicts
from b2buckets.domain.names import validate_file_name_prefix
from b2buckets.domain.origins import validate_origins
from b2buckets.domain.retention import FileLockConfiguration
from b2buckets.wire.mapping import (
    encode_cors_rule,
    encode_encryption,
    encode_lifecycle_rule,
    encode_retention,
)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ``b2buckets`` CLI.

    Returns:
        Configured :class:`~argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="b2buckets",
        description="Backblaze B2 bucket management",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="{}",
        help='JSON config string (e.g. \'{"capabilities":["listBuckets"]}\')',
    )
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list-buckets", help="List buckets of the account")
    target = list_cmd.add_mutually_exclusive_group()
    target.add_argument("--name", help="Only the bucket with this name")
    target.add_argument("--id", dest="bucket_id", help="Only the bucket with this ID")
    list_cmd.add_argument(
        "--all-types",
        action="store_true",
        help="Include snapshot buckets",
    )

    delete_cmd = commands.add_parser("delete-bucket", help="Delete an empty bucket")
    delete_cmd.add_argument("bucket_id", help="ID of the bucket to delete")

    lifecycle_cmd = commands.add_parser(
        "check-lifecycle", help="Report overlapping lifecycle rule prefixes"
    )
    lifecycle_cmd.add_argument("prefixes", nargs="+", help="File name prefixes")

    origins_cmd = commands.add_parser("check-origins", help="Validate a CORS origin list")
    origins_cmd.add_argument("origins", nargs="+", help="Origins, e.g. https://*.example.com")
    return parser


def _gated(gated: Any, encode: Any) -> dict[str, Any]:
    if not gated.can_read:
        return {"isClientAuthorizedToRead": False, "value": None}
    return {"isClientAuthorizedToRead": True, "value": encode(gated.value)}


def _file_lock(config: FileLockConfiguration) -> dict[str, Any]:
    return {
        "isFileLockEnabled": config.is_file_lock_enabled,
        "defaultRetention": encode_retention(config.default_retention),
    }


def bucket_to_dict(bucket: Bucket) -> dict[str, Any]:
    """Render a bucket the way the service does, for printing."""
    return {
        "accountId": bucket.account_id,
        "bucketId": bucket.bucket_id,
        "bucketName": bucket.bucket_name,
        "bucketType": bucket.bucket_type.value,
        "bucketInfo": dict(bucket.bucket_info),
        "corsRules": [encode_cors_rule(r) for r in bucket.cors_rules],
        "lifecycleRules": [encode_lifecycle_rule(r) for r in bucket.lifecycle_rules],
        "fileLockConfiguration": _gated(bucket.file_lock_configuration, _file_lock),
        "defaultServerSideEncryption": _gated(
            bucket.default_server_side_encryption, encode_encryption
        ),
        "revision": bucket.revision,
    }


def _check_lifecycle(prefixes: list[str]) -> tuple[dict[str, Any], bool]:
    for prefix in prefixes:
        validate_file_name_prefix(prefix)
    conflicts = find_prefix_conflicts(prefixes)
    return {"valid": not conflicts, "conflicts": conflicts}, not conflicts


def _check_origins(origins: list[str]) -> tuple[dict[str, Any], bool]:
    try:
        validated = validate_origins(origins)
    except StructuralValidationError as e:
        return {"valid": False, "conflicts": e.report}, False
    return {"valid": True, "origins": [str(o) for o in validated]}, True


def _run_service(ns: argparse.Namespace, config: dict[str, Any]) -> Any:
    # Lazy-import to keep offline checks free of transport setup
    from b2buckets.requests import DeleteBucket, ListBuckets
    from b2buckets.service import Buckets

    svc = Buckets.from_config(config)
    try:
        if ns.command == "list-buckets":
            builder = ListBuckets.builder()
            if ns.name:
                builder.bucket_name(ns.name)
            if ns.bucket_id:
                builder.bucket_id(ns.bucket_id)
            if ns.all_types:
                builder.with_all_bucket_types()
            return [bucket_to_dict(b) for b in svc.list_buckets(builder.build())]
        return bucket_to_dict(svc.delete_bucket(DeleteBucket(ns.bucket_id)))
    finally:
        svc.close()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses arguments, runs the requested command and prints the result as
    JSON. Failed checks and failed calls exit with status 1.

    Args:
        argv: Optional argument list (defaults to ``sys.argv``).
    """
    parser = _build_parser()
    ns = parser.parse_args(argv)

    try:
        config: dict[str, Any] = json.loads(ns.config)
    except json.JSONDecodeError as e:
        print(f"Invalid --config JSON: {e}", file=sys.stderr)
        sys.exit(1)

    ok = True
    try:
        if ns.command == "check-lifecycle":
            result, ok = _check_lifecycle(ns.prefixes)
        elif ns.command == "check-origins":
            result, ok = _check_origins(ns.origins)
        else:
            result = _run_service(ns, config)
    except FieldValidationError as e:
        print(f"Invalid value: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except B2BucketsError as e:
        print(f"Operation failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
