#!/usr/bin/env python3
"""
Basic usage examples for the Scribd client library.

Reads credentials from SCRIBD_API_KEY / SCRIBD_SECRET_KEY and walks through
signing, uploading a document and reading its settings back.

Usage:
    python example_usage.py path/to/document.pdf
"""

import logging
import sys

from scribd_client import ScribdClient, ScribdClientError, ServiceConfig, documents, sign


def main(path):
    """Run basic usage examples."""

    print("=== Scribd Client Basic Usage Examples ===\n")

    print("1. Creating client from environment...")
    config = ServiceConfig.from_env()
    client = ScribdClient(config=config)
    print(f"   API URL: {config.api_url}")
    print(f"   Signing enforced: {config.enforce_signing}\n")

    try:
        print("2. Registering observers...")
        client.errors.subscribe(lambda event: print(f"   ! error {event.code}: {event.message}"))
        client.upload_progress.subscribe(
            lambda event: print(f"   ... {event.percentage}% ({event.bytes_sent}/{event.total_bytes})")
        )
        print()

        if config.can_sign:
            print("3. Signing a parameter set...")
            params = {"api_key": config.api_key, "doc_id": "42"}
            print(f"   Signature: {sign('docs.getSettings', params, config.secret_key)}\n")

        print(f"4. Uploading {path}...")
        doc = documents.upload(client, path)
        if doc is None:
            print("   ✗ Upload failed")
            sys.exit(1)
        print(f"   ✓ Uploaded as doc_id={doc.doc_id} (access_key={doc.access_key})\n")

        print("5. Reading settings back...")
        settings = documents.get_settings(client, doc.doc_id)
        if settings is not None:
            print(f"   Title: {settings.title!r}")
            print(f"   Conversion: {documents.get_conversion_status(client, doc.doc_id).value}")
        print()

        print("6. Building a slurp link...")
        link = client.slurpify("http://example.com/paper.pdf")
        print(f"   {link or '(set SCRIBD_PUBLISHER_ID to enable)'}\n")

        print("=== All Examples Completed ===")

    except ScribdClientError as e:
        print(f"Scribd Client Error: {e}")
        sys.exit(1)
    finally:
        client.close()


def demonstrate_configuration():
    """Demonstrate client configuration options."""

    print("\n=== Configuration Options Example ===")

    with ScribdClient(
        "your-api-key",
        "your-secret-key",
        enforce_signing=True,
        timeout=60,              # 60 second HTTP timeout for calls
        max_workers=4,           # parallel asynchronous uploads
    ) as client:
        print("✓ Client configured with:")
        print(f"  - Signing enforced: {client.config.enforce_signing}")
        print(f"  - HTTP timeout: {client.config.timeout} seconds")
        print(f"  - Upload workers: {client.config.max_workers}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)

    logging.basicConfig(level=logging.INFO)
    main(sys.argv[1])
    demonstrate_configuration()
