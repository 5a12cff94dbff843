#!/usr/bin/env python3
"""
Signing Benchmark
=================

Benchmark the cost of signing and unsigning tokens.

Measures:
  - Raw sign / unsign micro-cost per digest method
  - Timestamp signing overhead over plain signing
  - Serializer cost per encoding and payload size
  - Key rotation cost when tokens hit the last fallback
"""

import logging
import time

from safesign import (
    MultiSerializer,
    NullEncoding,
    Serializer,
    URLSafeEncoding,
    default_builder,
)

# Suppress debug noise from rejected tokens during benchmarks
logging.getLogger("safesign").setLevel(logging.ERROR)


# ── Helpers ──────────────────────────────────────────────────────────────────


def time_op(func, iterations: int = 100) -> float:
    """Return average ms per call."""
    for _ in range(min(5, iterations)):
        func()
    start = time.perf_counter()
    for _ in range(iterations):
        func()
    return ((time.perf_counter() - start) / iterations) * 1000


# ── Benchmarks ───────────────────────────────────────────────────────────────


def benchmark_digest_methods():
    """Micro-benchmark of sign and unsign for each digest."""
    print("\n🔐 Sign / Unsign per Digest Method")
    print("-" * 60)
    print(f"  {'Digest':>8} {'Sign μs':>10} {'Unsign μs':>10} {'Token len':>10}")
    print("  " + "-" * 42)

    value = "user-id:12345"
    for digest_method in ("sha1", "sha256", "sha512"):
        signer = default_builder("benchmark secret").with_digest_method(digest_method).build()
        signed = signer.sign(value)

        sign_t = time_op(lambda: signer.sign(value), iterations=5000)
        unsign_t = time_op(lambda: signer.unsign(signed), iterations=5000)

        print(f"  {digest_method:>8} {sign_t * 1000:10.2f} {unsign_t * 1000:10.2f} {len(signed):>10}")


def benchmark_timestamp_overhead():
    """Compare plain signing with timestamp signing."""
    print("\n⏱️  Timestamp Signing Overhead")
    print("-" * 60)

    signer = default_builder("benchmark secret").build()
    timestamp_signer = signer.into_timestamp_signer()
    value = "user-id:12345"

    plain_signed = signer.sign(value)
    timed_signed = timestamp_signer.sign(value)

    plain_sign_t = time_op(lambda: signer.sign(value), iterations=5000)
    timed_sign_t = time_op(lambda: timestamp_signer.sign(value), iterations=5000)
    plain_unsign_t = time_op(lambda: signer.unsign(plain_signed), iterations=5000)
    timed_unsign_t = time_op(
        lambda: timestamp_signer.unsign(timed_signed).value_if_not_expired(3600),
        iterations=5000,
    )

    print(f"  sign:            {plain_sign_t * 1000:8.2f} μs")
    print(f"  sign (timed):    {timed_sign_t * 1000:8.2f} μs")
    print(f"  unsign:          {plain_unsign_t * 1000:8.2f} μs")
    print(f"  unsign (timed):  {timed_unsign_t * 1000:8.2f} μs")


def benchmark_serializers():
    """Serializer cost by encoding and payload size."""
    print("\n📦 Serializer Cost by Payload Size")
    print("-" * 60)
    print(f"  {'Items':>8} {'Encoding':>10} {'Sign μs':>10} {'Unsign μs':>10}")
    print("  " + "-" * 42)

    signer = default_builder("benchmark secret").build()
    for items in (1, 10, 100, 1000):
        payload = {"user_id": 12345, "roles": [f"role-{i}" for i in range(items)]}
        for encoding in (NullEncoding(), URLSafeEncoding()):
            serializer = Serializer(signer, encoding)
            signed = serializer.sign(payload)

            sign_t = time_op(lambda: serializer.sign(payload), iterations=500)
            unsign_t = time_op(lambda: serializer.unsign(signed), iterations=500)

            name = type(encoding).__name__.replace("Encoding", "")
            print(f"  {items:>8} {name:>10} {sign_t * 1000:10.2f} {unsign_t * 1000:10.2f}")


def benchmark_key_rotation():
    """Cost of unsigning through fallbacks."""
    print("\n🔄 Key Rotation Fallback Cost")
    print("-" * 60)
    print(f"  {'Fallbacks':>10} {'Primary μs':>12} {'Last fallback μs':>18}")
    print("  " + "-" * 42)

    payload = {"user_id": 12345}
    for fallback_count in (0, 1, 3, 10):
        multi = MultiSerializer(Serializer(default_builder("key-primary").build()))
        last = None
        for i in range(fallback_count):
            last = Serializer(default_builder(f"key-{i}").build())
            multi.add_fallback(last)

        primary_signed = multi.sign(payload)
        primary_t = time_op(lambda: multi.unsign(primary_signed), iterations=2000)

        if last is None:
            print(f"  {fallback_count:>10} {primary_t * 1000:12.2f} {'-':>18}")
            continue

        fallback_signed = last.sign(payload)
        fallback_t = time_op(lambda: multi.unsign(fallback_signed), iterations=2000)
        print(f"  {fallback_count:>10} {primary_t * 1000:12.2f} {fallback_t * 1000:18.2f}")


def main():
    print("🔐 Signing Benchmark")
    print("=" * 60)
    print("Benchmarking token signing/unsigning overhead")
    print()

    try:
        benchmark_digest_methods()
        benchmark_timestamp_overhead()
        benchmark_serializers()
        benchmark_key_rotation()

        print()
        print()
        print("🎯 Interpretation Guide")
        print("=" * 60)
        print("• HMAC is fast (a few μs per sign), key derivation runs once per signer")
        print("• Timed signing adds one base64 timestamp, overhead should stay small")
        print("• Fallback cost grows linearly with the number of fallbacks tried")
        print()
        print("⚠️  Regressions to watch for:")
        print("• unsign significantly slower than sign (they do the same MAC work)")
        print("• Primary-key unsign time growing with fallback count")
        print()
        print("✅ Benchmark complete!")

    except KeyboardInterrupt:
        print("\n⚠️  Benchmark interrupted by user")
    except Exception as e:
        print(f"\n❌ Benchmark failed: {e}")
        import traceback

        traceback.print_exc()


if __name__ == "__main__":
    main()
