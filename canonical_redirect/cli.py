"""CLI for checking canonical URLs offline and against a running server."""

import argparse
import sys
from urllib.parse import urlsplit

import httpx

from canonical_redirect.canonicalizer import evaluate
from canonical_redirect.config import settings
from canonical_redirect.models.canonical import (
    CanonicalizationOptions,
    Exemptions,
    Redirect,
    RequestView,
)

EXIT_CANONICAL = 0
EXIT_REDIRECT = 1
EXIT_ERROR = 2


def parse_request_view(url: str) -> RequestView:
    """
    Build a GET request view from an absolute URL.

    Parameters
    ----------
    url : str
        Absolute http(s) URL.

    Returns
    -------
    RequestView
        Request view for the URL.

    Raises
    ------
    ValueError
        If the URL has no scheme or host.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Not an absolute URL: {url!r}")

    return RequestView(
        method="GET",
        path=parts.path,
        query_string=f"?{parts.query}" if parts.query else "",
        scheme=parts.scheme,
        host=parts.netloc,
    )


def check_url(url: str, options: CanonicalizationOptions, exemptions: Exemptions) -> int:
    """
    Print the canonical URL decision for ``url``.

    Returns
    -------
    int
        EXIT_CANONICAL or EXIT_REDIRECT.
    """
    decision = evaluate(parse_request_view(url), options, exemptions)
    if isinstance(decision, Redirect):
        print(f"redirect {decision.status_code} {decision.canonical_url}")
        return EXIT_REDIRECT
    print("canonical")
    return EXIT_CANONICAL


def fetch_url(url: str, timeout: float = 10.0) -> int:
    """
    Request ``url`` from a live server without following redirects.

    Returns
    -------
    int
        EXIT_REDIRECT for a 301 response, EXIT_CANONICAL otherwise.
    """
    response = httpx.get(url, follow_redirects=False, timeout=timeout)
    location = response.headers.get("location")
    if location:
        print(f"{response.status_code} {location}")
    else:
        print(response.status_code)
    return EXIT_REDIRECT if response.status_code == 301 else EXIT_CANONICAL


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="canonical-redirect",
        description="Check and serve canonical URL redirects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decide offline, using the rules from the environment
  canonical-redirect check "https://example.com/About"

  # Override the rules
  canonical-redirect check "https://example.com/contact/" --no-append-trailing-slash

  # Ask a running server
  canonical-redirect fetch "http://localhost:8000/About"

  # Run the demo application
  canonical-redirect serve
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Decide whether a URL is canonical without a server",
    )
    check_parser.add_argument("url", help="Absolute URL to check")
    check_parser.add_argument(
        "--append-trailing-slash",
        action=argparse.BooleanOptionalAction,
        default=settings.append_trailing_slash,
        help="Canonical URLs end with a slash",
    )
    check_parser.add_argument(
        "--lowercase-urls",
        action=argparse.BooleanOptionalAction,
        default=settings.lowercase_urls,
        help="Canonical URLs are lowercase",
    )
    check_parser.add_argument(
        "--no-trailing-slash-rule",
        action="store_true",
        help="Treat the route as exempt from the trailing slash rule",
    )
    check_parser.add_argument(
        "--no-lowercase-query-string-rule",
        action="store_true",
        help="Treat the route as exempt from query string lowercasing",
    )

    fetch_parser = subparsers.add_parser(
        "fetch",
        help="GET a URL from a running server and show any redirect",
    )
    fetch_parser.add_argument("url", help="Absolute URL to request")
    fetch_parser.add_argument(
        "--timeout",
        "-t",
        type=float,
        default=10.0,
        help="Request timeout in seconds (default: 10)",
    )

    subparsers.add_parser("serve", help="Run the demo application with uvicorn")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "check":
            options = CanonicalizationOptions(
                append_trailing_slash=args.append_trailing_slash,
                lowercase_urls=args.lowercase_urls,
            )
            exemptions = Exemptions(
                no_trailing_slash_rule=args.no_trailing_slash_rule,
                no_lowercase_query_string_rule=args.no_lowercase_query_string_rule,
            )
            sys.exit(check_url(args.url, options, exemptions))
        elif args.command == "fetch":
            sys.exit(fetch_url(args.url, args.timeout))
        elif args.command == "serve":
            from canonical_redirect.main import main as serve

            serve()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except httpx.HTTPError as e:
        print(f"HTTP error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
