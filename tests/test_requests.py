import pytest

from b2buckets.base.auth import Authorization, Capability
from b2buckets.base.exceptions import (
    CapabilityError,
    FieldValidationError,
    LifecycleConflictError,
    MissingFieldError,
)
from b2buckets.domain import (
    BucketType,
    LifecycleRule,
    RetentionMode,
    RetentionPeriod,
    RetentionPolicy,
    ServiceManagedEncryption,
)
from b2buckets.domain.cors import CorsRule
from b2buckets.requests import CreateBucket, ListBuckets, UpdateBucket


def _auth(*capabilities):
    return Authorization("acct", "token", "https://api.example.com", frozenset(capabilities))


def _cors_rule():
    return CorsRule("abcdef", ("https",), ("s3_get",), 60)


class TestCreateBucketBuilder:
    def test_minimal(self):
        request = CreateBucket.builder().name("my-bucket").bucket_type("allPrivate").build()
        assert request == CreateBucket("my-bucket", BucketType.PRIVATE)

    def test_missing_name(self):
        with pytest.raises(MissingFieldError) as exc_info:
            CreateBucket.builder().build()
        assert exc_info.value.field == "bucket_name"

    def test_missing_type(self):
        with pytest.raises(MissingFieldError) as exc_info:
            CreateBucket.builder().name("my-bucket").build()
        assert exc_info.value.field == "bucket_type"

    def test_snapshot_not_settable(self):
        with pytest.raises(FieldValidationError) as exc_info:
            CreateBucket.builder().bucket_type(BucketType.SNAPSHOT)
        assert exc_info.value.field == "bucket_type"

    @pytest.mark.parametrize("name", ["b2-bucket", "tiny", "under_score"])
    def test_bad_name(self, name):
        with pytest.raises(FieldValidationError):
            CreateBucket.builder().name(name)

    def test_cache_control_merged_into_info(self):
        request = (
            CreateBucket.builder()
            .name("my-bucket")
            .bucket_type(BucketType.PUBLIC)
            .bucket_info({"owner": "ops", "Cache-Control": "no-cache"})
            .cache_control("max-age=3600")
            .build()
        )
        assert request.bucket_info == {"owner": "ops", "Cache-Control": "max-age=3600"}

    def test_lifecycle_conflicts_reported_as_set(self):
        rules = [
            LifecycleRule("Docs/", delete_after_days=1),
            LifecycleRule("Docs/Photos/", delete_after_days=1),
        ]
        with pytest.raises(LifecycleConflictError):
            CreateBucket.builder().lifecycle_rules(rules)

    def test_lifecycle_rules_sorted(self):
        rules = [
            LifecycleRule("b/", delete_after_days=1),
            LifecycleRule("a/", delete_after_days=1),
        ]
        request = (
            CreateBucket.builder()
            .name("my-bucket")
            .bucket_type(BucketType.PUBLIC)
            .lifecycle_rules(rules)
            .build()
        )
        assert [r.prefix for r in request.lifecycle_rules] == ["a/", "b/"]

    def test_empty_cors_list_is_omitted(self):
        request = (
            CreateBucket.builder()
            .name("my-bucket")
            .bucket_type(BucketType.PUBLIC)
            .cors_rules([])
            .build()
        )
        assert request.cors_rules is None

    def test_file_lock_requires_capability(self):
        builder = CreateBucket.builder(_auth(Capability.WRITE_BUCKETS))
        with pytest.raises(CapabilityError) as exc_info:
            builder.with_file_lock()
        assert exc_info.value.capability == "writeBucketRetentions"

    def test_file_lock_with_capability(self):
        auth = _auth(Capability.WRITE_BUCKETS, Capability.WRITE_BUCKET_RETENTIONS)
        request = (
            CreateBucket.builder(auth)
            .name("my-bucket")
            .bucket_type(BucketType.PRIVATE)
            .with_file_lock()
            .build()
        )
        assert request.file_lock_enabled
        assert request.required_capabilities() == [
            Capability.WRITE_BUCKETS,
            Capability.WRITE_BUCKET_RETENTIONS,
        ]

    def test_encryption_requires_capability(self):
        with pytest.raises(CapabilityError):
            CreateBucket.builder(_auth()).encryption_settings(ServiceManagedEncryption())

    def test_without_authorization_no_check(self):
        request = (
            CreateBucket.builder()
            .name("my-bucket")
            .bucket_type(BucketType.PRIVATE)
            .encryption_settings(ServiceManagedEncryption())
            .build()
        )
        assert Capability.WRITE_BUCKET_ENCRYPTION in request.required_capabilities()

    def test_bucket_info_must_be_mapping(self):
        with pytest.raises(FieldValidationError):
            CreateBucket.builder().bucket_info(["not", "a", "dict"])


class TestUpdateBucketBuilder:
    def test_missing_id(self):
        with pytest.raises(MissingFieldError) as exc_info:
            UpdateBucket.builder().build()
        assert exc_info.value.field == "bucket_id"

    def test_retention_requires_capability(self):
        policy = RetentionPolicy(RetentionMode.GOVERNANCE, RetentionPeriod(1))
        with pytest.raises(CapabilityError):
            UpdateBucket.builder(_auth(Capability.WRITE_BUCKETS)).retention_policy(policy)

    def test_full_update(self):
        auth = _auth(Capability.WRITE_BUCKETS, Capability.WRITE_BUCKET_RETENTIONS)
        policy = RetentionPolicy(RetentionMode.GOVERNANCE, RetentionPeriod(1))
        request = (
            UpdateBucket.builder(auth)
            .bucket_id("bucket-id")
            .bucket_type(BucketType.PUBLIC)
            .cors_rules([_cors_rule()])
            .retention_policy(policy)
            .if_revision_is(3)
            .build()
        )
        assert request.default_retention == policy
        assert request.cors_rules == (_cors_rule(),)
        assert request.if_revision_is == 3
        assert request.lifecycle_rules is None

    def test_empty_lists_kept_for_clearing(self):
        request = UpdateBucket.builder().bucket_id("id").cors_rules([]).lifecycle_rules([]).build()
        assert request.cors_rules == ()
        assert request.lifecycle_rules == ()

    @pytest.mark.parametrize("revision", [-1, "3", True])
    def test_bad_revision(self, revision):
        with pytest.raises(FieldValidationError):
            UpdateBucket.builder().if_revision_is(revision)


class TestListBucketsBuilder:
    def test_default(self):
        assert ListBuckets.builder().build() == ListBuckets()

    def test_name_replaces_id(self):
        request = ListBuckets.builder().bucket_id("id").bucket_name("my-bucket").build()
        assert request.bucket_id is None
        assert request.bucket_name == "my-bucket"

    def test_types(self):
        request = ListBuckets.builder().bucket_types([BucketType.PUBLIC, "snapshot"]).build()
        assert request.bucket_types == ("allPublic", "snapshot")

    def test_all_types(self):
        assert ListBuckets.builder().with_all_bucket_types().build().bucket_types == ("all",)

    def test_unknown_type(self):
        with pytest.raises(FieldValidationError):
            ListBuckets.builder().bucket_types(["allSecret"])
