"""Bucket service blueprint."""

from abc import ABC, abstractmethod

from b2buckets.domain.bucket import Bucket
from b2buckets.requests import CreateBucket, DeleteBucket, ListBuckets, UpdateBucket


class BucketBlueprint(ABC):
    """Abstract interface for bucket management.

    Maps to the B2 native API calls ``b2_create_bucket``,
    ``b2_delete_bucket``, ``b2_list_buckets`` and ``b2_update_bucket``.
    """

    @abstractmethod
    def create_bucket(self, request: CreateBucket) -> Bucket:
        """Create a new bucket.

        Args:
            request: A validated :class:`CreateBucket` request.

        Returns:
            The bucket as stored by the service.
        """
        pass

    @abstractmethod
    def delete_bucket(self, request: DeleteBucket) -> Bucket:
        """Delete a bucket. Only empty buckets can be deleted.

        Args:
            request: The bucket to delete.

        Returns:
            The bucket as it was before deletion.
        """
        pass

    @abstractmethod
    def list_buckets(self, request: ListBuckets | None = None) -> list[Bucket]:
        """List buckets of the authorized account.

        Args:
            request: Optional filter; lists public and private buckets if omitted.

        Returns:
            Matching buckets in service order.
        """
        pass

    @abstractmethod
    def update_bucket(self, request: UpdateBucket) -> Bucket:
        """Change the settings of an existing bucket.

        Args:
            request: The bucket ID and the settings to change.

        Returns:
            The bucket after the update.
        """
        pass
