#!/usr/bin/env python3
"""
Demo script for the reference cache.

This script walks through reference ID generation, data entity CRUD,
custom payload storage and TTL handling against a live Redis instance.
"""

import time

from reference_cache import DataService, RedisCacheRepository, ReferenceIdGenerator
from reference_cache.logging_config import configure_logging


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_reference_ids(generator: ReferenceIdGenerator) -> None:
    """Demonstrate the reference ID formats."""
    print_section("Reference IDs")

    samples = [
        ("Default", generator.generate()),
        ("Azure", generator.generate_azure_id()),
        ("Short", generator.generate_short("TXN")),
        ("UUID based", generator.generate_uuid_based("DOC")),
        ("Custom", generator.generate_custom("SYS", include_timestamp=False, random_length=4)),
    ]
    for label, reference_id in samples:
        print(f"  {label:<12} {reference_id}  valid={generator.is_valid(reference_id)}")

    reference_id = generator.generate("ZZZ")
    print(f"\n  Non-canonical prefix: {reference_id}  valid={generator.is_valid(reference_id)}")
    print(f"  Timestamp of last default ID: {generator.extract_timestamp(samples[0][1])}")


def demo_entities(service: DataService) -> None:
    """Demonstrate data entity CRUD."""
    print_section("Data Entities")

    created = service.create_entity("Quarterly upload", "Blob batch from finance", "finance")
    reference_id = created.reference_id
    print(f"  Created: {reference_id}")

    updated = service.update_entity(reference_id, category="ops")
    print(f"  Updated category: {updated.data.category}")

    bulk = service.bulk_create([{"name": "first"}, {"name": ""}, {"name": "third"}])
    print(f"  Bulk created: {len(bulk.data)} of 3 (blank names skipped)")

    listed = service.list_entities()
    print(f"  Entities in cache: {len(listed.data)}")

    service.delete_entity(reference_id)
    missing = service.get_entity(reference_id)
    print(f"  After delete: {missing.error} ({missing.status_code})")


def demo_custom_payloads(service: DataService) -> None:
    """Demonstrate custom payloads, metadata and TTL expiry."""
    print_section("Custom Payloads")

    stored = service.store_custom(
        "AZR",
        {"container": "uploads", "blobs": ["a.csv", "b.csv"]},
        data_type="AZURE_UPLOAD",
        metadata={"owner": "ops"},
    )
    reference_id = stored.reference_id
    print(f"  Stored: {reference_id}")
    print(f"  Payload: {service.get_custom(reference_id).data}")
    print(f"  Metadata: {service.get_custom_metadata(reference_id).data}")
    print(f"  TTL: {service.get_ttl(reference_id).data}s")

    short_lived = service.store_custom("LOG", {"line": "expiring"}, ttl_seconds=1)
    time.sleep(2)
    result = service.get_custom(short_lived.reference_id)
    print(f"\n  One-second entry after 2s: found={result.success}")


def demo_async_processing(service: DataService) -> None:
    """Demonstrate background processing."""
    print_section("Async Processing")

    stored = service.store_custom("DOC", {"pages": 12})
    result = service.process_async(stored.reference_id, "ocr").result()
    print(f"  {result.message}: {stored.reference_id}")


def main() -> None:
    """Run all demos."""
    print("\n🚀 Reference Cache Demo")
    print("=" * 70)

    configure_logging("warning")

    try:
        generator = ReferenceIdGenerator()
        service = DataService.create(
            cache_store=RedisCacheRepository.create(verify=True),
            id_generator=generator,
            processing_delay=0.5,
        )

        demo_reference_ids(generator)
        demo_entities(service)
        demo_custom_payloads(service)
        demo_async_processing(service)

        print_section("Statistics")
        for key, value in service.stats().data.items():
            print(f"  {key}: {value}")

        service.shutdown()

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")
        print("\nMake sure Redis is running:")
        print("  docker run -p 6379:6379 redis")
        print("\nOr set REDIS_URL to your Redis instance.")


if __name__ == "__main__":
    main()
