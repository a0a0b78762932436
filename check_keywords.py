import argparse
import logging
from pathlib import Path

from checker import check_keywords, read_keywords, to_csv_bytes, validate_request
from config import get_settings
from constants import LOG_FORMAT, NOT_APPLICABLE
from errors import CheckerError
from fetchers import build_fetcher


def _badge(found, error) -> str:
    if error:
        return "ERROR"
    if found == NOT_APPLICABLE:
        return "N/A"
    return "CITED" if found else "-"


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Check whether a domain is cited in Google's AI Overview for a list of keywords."
    )
    p.add_argument("--input", "-i", required=True, help="Text file with one keyword per line.")
    p.add_argument("--domain", "-d", required=True, help="Domain to look for, e.g. example.com.")
    p.add_argument("--region", "-r", default="google.com", help="Google host to search on (default: google.com).")
    p.add_argument("--output", "-o", help="Output CSV file (optional).")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = get_settings()
    except CheckerError as exc:
        raise SystemExit(f"{exc.kind} error: {exc}")
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")

    keywords = read_keywords(input_path)
    if not keywords:
        raise SystemExit("No keywords to process.")

    try:
        # validate domain/region once before opening any connection
        validate_request({"keyword": keywords[0], "domain": args.domain, "region": args.region})
        with build_fetcher(settings) as fetcher:
            rows = check_keywords(
                fetcher,
                keywords,
                args.domain,
                args.region,
                selector=settings.overview_selector,
                policy=settings.citation_policy,
            )
    except CheckerError as exc:
        raise SystemExit(f"{exc.kind} error: {exc}")

    for row in rows:
        badge = _badge(row["found"], row["error"])
        detail = row["error"] or row["overview_text"][:80].replace("\n", " ")
        print(f"[{badge}] {row['keyword']}  {detail}")

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(to_csv_bytes(rows))
        print(f"\nCSV written -> {output} ({len(rows)} keywords)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
