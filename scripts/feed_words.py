#!/usr/bin/env python3
"""Feed the words of a text file to the word count API, one observation each."""
import os
import sys
import json
import argparse
import urllib.request
import urllib.error
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime
from pathlib import Path

SERVER_URL = os.environ.get("WORDS_SERVER_URL", "http://localhost:3003")

# Get script directory for logging
SCRIPT_DIR = Path(__file__).parent
LOG_DIR = SCRIPT_DIR.parent / "logs"
UPLOAD_LOG_FILE = LOG_DIR / "word_uploads.log"

upload_logger = logging.getLogger("word_uploads")


def setup_upload_log(log_file=UPLOAD_LOG_FILE):
    """Log uploads to a file with automatic daily rotation"""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    upload_logger.setLevel(logging.INFO)
    upload_handler = TimedRotatingFileHandler(
        log_file,
        when="midnight",
        interval=1,
        backupCount=7,  # Keep 7 days of logs
        encoding="utf-8"
    )
    upload_handler.setFormatter(logging.Formatter('%(message)s'))
    upload_logger.addHandler(upload_handler)


def split_words(text):
    """Split text on whitespace. Case and punctuation are kept as-is."""
    return text.split()


def log_upload(api_url, word, status, error=None):
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_entry = {
        "timestamp": timestamp,
        "url": api_url,
        "word": word,
        "status": status,
    }
    if error:
        log_entry["error"] = str(error)

    upload_logger.info(json.dumps(log_entry))


def upload_word(api_url, word):
    """
    Post a single word observation. Returns True on success.

    Args:
        api_url: Base URL of the word count API
        word: The observed word
    """
    req = urllib.request.Request(
        f"{api_url}/api/words",
        data=json.dumps({"word": word}).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )

    try:
        with urllib.request.urlopen(req, timeout=5) as response:
            if response.status == 200:
                log_upload(api_url, word, "success")
                return True
            log_upload(api_url, word, f"error_http_{response.status}")
            return False
    except urllib.error.HTTPError as e:
        log_upload(api_url, word, f"error_http_{e.code}", error=e)
        print(f"  API error for {word!r}: HTTP {e.code}")
        return False
    except urllib.error.URLError as e:
        log_upload(api_url, word, "error_connection", error=e)
        print(f"  API error for {word!r}: {e.reason}")
        return False
    except Exception as e:
        # Timeouts and dropped connections are not URLErrors
        log_upload(api_url, word, "error_exception", error=e)
        print(f"  API error for {word!r}: {e}")
        return False


def feed_file(path, api_url, upload=upload_word):
    """Upload every word in ``path``. Returns (uploaded, failed)."""
    with open(path, "r", encoding="utf-8") as f:
        words = split_words(f.read())

    uploaded = 0
    failed = 0
    for word in words:
        if upload(api_url, word):
            uploaded += 1
        else:
            failed += 1
    return uploaded, failed


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("file", help="Text file to read words from")
    parser.add_argument("--url", default=SERVER_URL, help="Word count API base URL")
    args = parser.parse_args(argv)

    if not Path(args.file).exists():
        print(f"Error: File {args.file} not found")
        return 1

    setup_upload_log()
    print(f"Feeding words from {args.file} to {args.url}")
    uploaded, failed = feed_file(args.file, args.url)
    print(f"✓ Uploaded {uploaded} words, {failed} failed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
