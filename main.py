from datetime import timedelta

from b2buckets import BucketType, CreateBucket, CorsOperation, CorsRule, LifecycleRule
from b2buckets.wire import encode_create_bucket



def main():
    # Example: build a create-bucket request and show its wire body
    cors = (
        CorsRule.builder()
        .name("web-downloads")
        .allowed_origins(["https://*.example.com"])
        .add_allowed_operation(CorsOperation.DOWNLOAD_FILE_BY_NAME)
        .allowed_headers(["range"])
        .max_age(timedelta(hours=1))
        .build()
    )
    logs = LifecycleRule.builder().filename_prefix("logs/").delete_after_hide(30).build()

    request = (
        CreateBucket.builder()
        .name("example-photos")
        .bucket_type(BucketType.PRIVATE)
        .cache_control("max-age=3600")
        .cors_rules([cors])
        .lifecycle_rules([logs])
        .build()
    )
    print(f"Create request body: {encode_create_bucket(request, 'example-account')}")

if __name__ == "__main__":
    main()
