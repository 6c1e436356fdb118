#!/usr/bin/env python3
"""
Fetch one transcript from the command line and print it as JSON.

    python run_local.py dQw4w9WgXcQ
    python run_local.py "https://youtu.be/dQw4w9WgXcQ" --method innertube --lang en
"""
import argparse
import json
import os
import sys

from dotenv import load_dotenv

from error_handler import ScrapeError
from logging_setup import configure_logging
from scraper_config import ScraperConfig
from transcript_service import TranscriptService
from video_id_utils import retrieve_video_id


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch a YouTube transcript and view count")
    parser.add_argument("video", help="video ID or YouTube URL")
    parser.add_argument("--method", choices=["browser", "innertube"], default=None,
                        help="extraction method (default: TRANSCRIPT_METHOD or browser)")
    parser.add_argument("--lang", default=None, help="caption language code (innertube only)")
    parser.add_argument("--headful", action="store_true", help="show the browser window")
    parser.add_argument("--keep-screenshot", action="store_true",
                        help="include the base64 screenshot in error output")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    configure_logging(log_level=os.getenv("LOG_LEVEL", "WARNING"), use_json=False)

    config = ScraperConfig.from_env()
    if args.headful:
        config.headless = False

    try:
        video_id = retrieve_video_id(args.video)
        result = TranscriptService(config).get_transcript(video_id, method=args.method, lang=args.lang)
    except ScrapeError as e:
        error = {"category": e.category.value, "status": e.status_code, "detail": e.message}
        if e.screenshot:
            error["screenshot"] = e.screenshot if args.keep_screenshot else "<omitted>"
        print(json.dumps({"error": error}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
