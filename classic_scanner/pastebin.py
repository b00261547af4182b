"""Download crash logs shared on Pastebin."""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from .constants import PASTEBIN_OUTPUT_DIR


def to_raw_url(url: str) -> str:
    """Point a pastebin.com share link at its raw text."""
    if urlparse(url).netloc == "pastebin.com" and "/raw" not in url:
        return url.replace("pastebin.com", "pastebin.com/raw", 1)
    return url


def fetch_pastebin_log(url: str, output_dir: Optional[str] = None,
                       timeout: int = 30, verbose: bool = False) -> Path:
    """
    Download a crash log from Pastebin and save it as crash-<id>.log.

    Args:
        url: Pastebin link (share or raw)
        output_dir: Target directory. Defaults to "Crash Logs/Pastebin".
        timeout: Request timeout in seconds
        verbose: Print status messages

    Returns:
        Path of the written log

    Raises:
        requests.HTTPError: The server answered with an error status
    """
    raw_url = to_raw_url(url)
    if verbose:
        print(f"[*] Fetching crash log from {raw_url}")

    response = requests.get(raw_url, timeout=timeout)
    response.raise_for_status()

    out_dir = Path(output_dir or PASTEBIN_OUTPUT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)

    paste_id = urlparse(raw_url).path.rstrip("/").split("/")[-1]
    outfile = out_dir / f"crash-{paste_id}.log"
    outfile.write_text(response.text, encoding="utf-8", errors="ignore")

    if verbose:
        print(f"[+] Saved to: {outfile}")
    return outfile
