#!/usr/bin/env python3
"""FlowHR Gateway Health Check — verify the gateway and its backend are operational.

Checks:
  1. Gateway responds on /api/health (HTTP 200, valid JSON)
  2. Backend REST service reported by the gateway is reachable
  3. Proxy routes reject unauthenticated calls with 401
  4. Translation dictionaries are served for every locale

Usage:
    python scripts/healthcheck.py                          # check http://localhost:8000
    python scripts/healthcheck.py --url https://hr.flowhr.example
    python scripts/healthcheck.py --json                   # machine-readable output

Exit codes:
    0 = all checks passed
    1 = one or more checks failed
    2 = critical failure (cannot reach the gateway at all)
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

# ══════════════════════════════════════════════════════════════════════
# Check result model
# ══════════════════════════════════════════════════════════════════════


class CheckResult:
    """Single health check result."""

    def __init__(self, name: str, passed: bool, message: str,
                 detail: str = "", severity: str = "error"):
        self.name = name
        self.passed = passed
        self.message = message
        self.detail = detail
        self.severity = severity  # "error", "warning", "info"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "passed": self.passed,
            "message": self.message,
            "detail": self.detail,
            "severity": self.severity,
        }

    def __str__(self) -> str:
        icon = "✅" if self.passed else ("⚠️" if self.severity == "warning" else "❌")
        s = f"{icon} {self.name}: {self.message}"
        if self.detail:
            s += f"\n     {self.detail}"
        return s


# ══════════════════════════════════════════════════════════════════════
# Health checks
# ══════════════════════════════════════════════════════════════════════

def check_gateway_health(
    client: httpx.Client, base_url: str,
) -> tuple[CheckResult, Optional[dict[str, Any]]]:
    """Check that /api/health responds; return the parsed body for later checks."""
    health_url = f"{base_url.rstrip('/')}/api/health"
    try:
        resp = client.get(health_url)
        body = resp.json()
    except httpx.RequestError as e:
        return CheckResult("Gateway API", False, "Cannot connect to gateway", str(e)), None
    except ValueError:
        return CheckResult(
            "Gateway API", False, "Health endpoint did not return JSON", f"URL: {health_url}",
        ), None

    if not isinstance(body, dict):
        return CheckResult(
            "Gateway API", False,
            f"Health endpoint returned {type(body).__name__}, expected an object",
            f"URL: {health_url}",
        ), None

    if resp.status_code != 200:
        return CheckResult(
            "Gateway API", False,
            f"HTTP {resp.status_code} (expected 200)",
            f"URL: {health_url}",
        ), body

    if body.get("status") != "healthy":
        return CheckResult(
            "Gateway API", False,
            f"Status: {body.get('status', 'missing')} (expected 'healthy')",
            f"Response: {json.dumps(body)}",
        ), body

    version = body.get("version", "unknown")
    env = body.get("environment", "unknown")
    return CheckResult(
        "Gateway API", True,
        f"Healthy (v{version}, {env})",
        f"URL: {health_url}",
    ), body


def check_backend_reachable(client: httpx.Client, backend_url: Optional[str]) -> CheckResult:
    """Any HTTP answer from the backend origin counts as reachable."""
    if not backend_url:
        return CheckResult(
            "Backend Service", False,
            "Gateway did not report a backend URL",
            severity="warning",
        )
    try:
        resp = client.get(backend_url)
    except httpx.RequestError as e:
        return CheckResult(
            "Backend Service", False,
            "Cannot connect to backend",
            f"{backend_url}: {e}",
        )
    return CheckResult(
        "Backend Service", True,
        f"Reachable (HTTP {resp.status_code})",
        f"URL: {backend_url}",
    )


def check_auth_guard(client: httpx.Client, base_url: str) -> CheckResult:
    """An anonymous call to a proxy route must be refused locally."""
    url = f"{base_url.rstrip('/')}/api/users/managers"
    try:
        resp = client.get(url)
    except httpx.RequestError as e:
        return CheckResult("Auth Guard", False, "Request failed", str(e))
    if resp.status_code != 401:
        return CheckResult(
            "Auth Guard", False,
            f"HTTP {resp.status_code} for anonymous call (expected 401)",
            f"URL: {url}",
        )
    return CheckResult("Auth Guard", True, "Anonymous calls rejected with 401")


def check_translations(client: httpx.Client, base_url: str) -> CheckResult:
    """Every advertised locale must serve a non-empty dictionary."""
    root = f"{base_url.rstrip('/')}/api/i18n"
    try:
        locales = [l["code"] for l in client.get(f"{root}/locales").json()["locales"]]
        missing = [
            code for code in locales
            if not client.get(f"{root}/messages/{code}").json().get("messages")
        ]
    except (httpx.RequestError, ValueError, KeyError, TypeError) as e:
        return CheckResult("Translations", False, "Could not load translations", str(e))

    if missing:
        return CheckResult(
            "Translations", False,
            f"Empty dictionaries: {', '.join(missing)}",
            severity="warning",
        )
    return CheckResult("Translations", True, f"{len(locales)} locales served: {', '.join(locales)}")


def run_healthcheck(url: str = "http://localhost:8000", timeout: int = 10) -> list[CheckResult]:
    """Run all health checks and return results."""
    results: list[CheckResult] = []
    with httpx.Client(timeout=timeout) as client:
        health, body = check_gateway_health(client, url)
        results.append(health)
        if body is None:
            return results

        results.append(check_backend_reachable(client, body.get("backend_url")))
        results.append(check_auth_guard(client, url))
        results.append(check_translations(client, url))
    return results


def main():
    parser = argparse.ArgumentParser(
        description="FlowHR Gateway Health Check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/healthcheck.py                              # local gateway
  python scripts/healthcheck.py --url https://hr.flowhr.example
  python scripts/healthcheck.py --json                       # JSON output
""",
    )
    parser.add_argument("--url", type=str, default="http://localhost:8000",
                        help="Gateway base URL (default: http://localhost:8000)")
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Output results as JSON")
    parser.add_argument("--timeout", type=int, default=10,
                        help="HTTP timeout in seconds (default: 10)")
    args = parser.parse_args()

    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    if not args.output_json:
        print(f"""
{'=' * 60}
  FLOWHR GATEWAY — HEALTH CHECK
  Target : {args.url}
  Time   : {now}
{'=' * 60}
""")

    results = run_healthcheck(url=args.url, timeout=args.timeout)

    if args.output_json:
        output = {
            "timestamp": now,
            "target": args.url,
            "checks": [r.to_dict() for r in results],
            "all_passed": all(r.passed for r in results),
            "summary": {
                "total": len(results),
                "passed": sum(1 for r in results if r.passed),
                "failed": sum(1 for r in results if not r.passed),
                "warnings": sum(1 for r in results if r.severity == "warning"),
            },
        }
        print(json.dumps(output, indent=2))
    else:
        for result in results:
            print(result)
            print()

        passed = sum(1 for r in results if r.passed)
        failed = len(results) - passed
        print(f"{'=' * 60}")
        if failed == 0:
            print(f"  ✅ ALL {len(results)} CHECKS PASSED")
        else:
            print(f"  ❌ {failed}/{len(results)} CHECKS FAILED")
        print(f"{'=' * 60}")

    # Exit code
    if len(results) == 1 and not results[0].passed:
        sys.exit(2)
    if any(not r.passed for r in results):
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
