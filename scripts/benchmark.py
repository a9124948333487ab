"""HTTP benchmark for comment board endpoints."""
import asyncio
import argparse
import time
import statistics
import httpx

BASE_URL = "http://localhost:8080"

ENDPOINTS = [
    ("GET /api/comment/get", "/api/comment/get"),
    ("GET /api/comment/get?page=5&size=50", "/api/comment/get?page=5&size=50"),
    ("GET /api/comment/get?size=-1", "/api/comment/get?size=-1"),
    ("GET /api/comment/1", "/api/comment/1"),
    ("GET /api/metrics", "/api/metrics"),
    ("GET /health", "/health"),
]


def _percentile(times: list[float], fraction: float) -> float:
    ordered = sorted(times)
    return round(ordered[min(int(len(ordered) * fraction), len(ordered) - 1)], 2)


async def benchmark_endpoint(client: httpx.AsyncClient, base_url: str, name: str, path: str,
                             iterations: int = 50):
    times = []
    query_counts = []
    errors = 0

    # Warmup
    for _ in range(3):
        try:
            await client.get(f"{base_url}{path}")
        except httpx.HTTPError:
            pass

    for _ in range(iterations):
        try:
            start = time.perf_counter()
            resp = await client.get(f"{base_url}{path}")
            elapsed = (time.perf_counter() - start) * 1000
        except httpx.HTTPError:
            errors += 1
            continue

        if resp.status_code != 200:
            errors += 1
            continue
        times.append(elapsed)
        qc = resp.headers.get("X-Query-Count")
        if qc is not None:
            query_counts.append(int(qc))

    if not times:
        return {"name": name, "error": f"All {iterations} requests failed"}

    return {
        "name": name,
        "avg_ms": round(statistics.mean(times), 2),
        "p50_ms": _percentile(times, 0.50),
        "p95_ms": _percentile(times, 0.95),
        "p99_ms": _percentile(times, 0.99),
        "queries": round(statistics.mean(query_counts), 1) if query_counts else "N/A",
        "errors": errors,
    }


async def run_benchmark(base_url: str, iterations: int = 50):
    print("=" * 80)
    print(f"Comment Board Benchmark: {iterations} iterations per endpoint")
    print(f"Target: {base_url}")
    print("=" * 80)

    async with httpx.AsyncClient() as client:
        try:
            resp = await client.get(f"{base_url}/health")
        except httpx.HTTPError as e:
            print(f"ERROR: Cannot connect to {base_url}: {e}")
            return
        if resp.status_code != 200:
            print(f"ERROR: Health check failed ({resp.status_code})")
            return
        print(f"Health: {resp.json()}")

        print()
        print(f"{'Endpoint':<45} {'Avg':>8} {'P50':>8} {'P95':>8} {'P99':>8} {'Queries':>8} {'Err':>4}")
        print("-" * 80)

        for name, path in ENDPOINTS:
            result = await benchmark_endpoint(client, base_url, name, path, iterations)
            if "error" in result:
                print(f"{result['name']:<45} {'ERROR':>8}")
                continue
            print(
                f"{result['name']:<45} "
                f"{result['avg_ms']:>7.1f}ms "
                f"{result['p50_ms']:>7.1f}ms "
                f"{result['p95_ms']:>7.1f}ms "
                f"{result['p99_ms']:>7.1f}ms "
                f"{str(result['queries']):>8} "
                f"{result['errors']:>4}"
            )

        print("-" * 80)
        print("\nBenchmark complete.")


def main():
    parser = argparse.ArgumentParser(description="Benchmark the comment board API")
    parser.add_argument("-n", "--iterations", type=int, default=50, help="Iterations per endpoint")
    parser.add_argument("--base-url", default=BASE_URL, help="API base URL")
    args = parser.parse_args()
    asyncio.run(run_benchmark(args.base_url, args.iterations))


if __name__ == "__main__":
    main()
