#!/usr/bin/env python3
"""
analyze_file.py: Send a local media file to a running DeepTrust API.

Does what the dashboard does on upload: base64-encode the file as a data
URL, POST it to /api/v1/analyze-media, and print the result.

Usage:
    python scripts/analyze_file.py photo.jpg
    python scripts/analyze_file.py clip.mp4 --api http://localhost:8000
    python scripts/analyze_file.py voice.wav --summary

Requires:
    pip install -e .
    uvicorn deeptrust.main:app running (AI_MOCK_MODE=true works fine)
"""

import argparse
import json
import sys

import httpx

from deeptrust.services.media import encode_file


def _print_summary(result: dict) -> None:
    consistency = result.get("consistency", {})
    print(f"Verdict:      {result.get('verdict')}")
    print(f"Trust score:  {result.get('trustScore')} ({result.get('riskLevel')} risk)")
    print(f"Fused score:  {result.get('fusedScore')}")
    print(f"Consistency:  {consistency.get('consistencyStatus')} "
          f"(adjusted confidence {consistency.get('adjustedConfidence')})")
    for obs in result.get("observations", []):
        print(f"  [{obs['type']:>8}] {obs['title']}: {obs['description']}")


def main(path: str, api: str, summary: bool) -> int:
    data_url, media_type = encode_file(path)
    response = httpx.post(
        f"{api.rstrip('/')}/api/v1/analyze-media",
        json={"imageBase64": data_url, "mediaType": media_type},
        timeout=120.0,
    )
    body = response.json()

    if response.is_error or "error" in body:
        print(f"Error ({response.status_code}): {body.get('error', body)}", file=sys.stderr)
        return 1

    if summary:
        _print_summary(body)
    else:
        print(json.dumps(body, indent=2))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Analyse a media file with the DeepTrust API")
    parser.add_argument("path", help="Image, video or audio file")
    parser.add_argument("--api", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--summary", action="store_true", help="Print a short summary instead of JSON")
    args = parser.parse_args()
    sys.exit(main(args.path, args.api, args.summary))
